"""Tests for analysis sinks."""

import json
from datetime import datetime, timezone

from repo_miner.mining import JsonLinesSink, TypeAnalysis, file_path_hash
from repo_miner.scm import Change, ChangeType, Commit, PersonIdent
from repo_miner.smells import SmellId, SmellVerdict

WHEN = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _commit():
    person = PersonIdent("Alice", "alice@example.com", WHEN)
    return Commit(
        id="a" * 40,
        message="subject",
        author=person,
        committer=person,
        parents=("b" * 40,),
        changes=(Change("x.py", ChangeType.MODIFY, lines_added=2, lines_removed=1),),
    )


def _record():
    return TypeAnalysis(
        commit="a" * 40,
        commit_date=WHEN,
        path="x.py",
        file_hash=file_path_hash("x.py"),
        type_name="X",
        metrics={"NOM": 2},
        method_metrics={"run": {"CYCLO": 3}},
        smells=[SmellVerdict(SmellId.LONG_METHOD, ("run",), {"MLOC": 65})],
    )


class TestJsonLinesSink:
    def test_writes_one_document_per_line(self, tmp_path):
        out = tmp_path / "out" / "records.jsonl"
        with JsonLinesSink(out) as sink:
            sink.emit_commit(_commit())
            sink.emit_analysis(_record())

        lines = out.read_text().splitlines()
        assert len(lines) == 2
        commit, record = (json.loads(line) for line in lines)

        assert commit["kind"] == "commit"
        assert commit["id"] == "a" * 40
        assert commit["merge"] is False
        assert commit["changes"][0] == {
            "path": "x.py",
            "old_path": None,
            "type": "MODIFY",
            "lines_added": 2,
            "lines_removed": 1,
            "binary": False,
        }

        assert record["kind"] == "analysis"
        assert record["type"] == "X"
        assert record["commit_date"] == WHEN.isoformat()
        assert record["methods"] == {"run": {"CYCLO": 3}}
        assert record["smells"] == [
            {"smell": "LONG_METHOD", "members": ["run"], "thresholds": {"MLOC": 65}}
        ]

    def test_close_is_idempotent(self, tmp_path):
        sink = JsonLinesSink(tmp_path / "a.jsonl")
        sink.emit_commit(_commit())
        sink.close()
        sink.close()
        assert sink.lines_written == 1

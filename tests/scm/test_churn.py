"""Tests for change listing and line churn."""

import pytest

from repo_miner.config import MinerConfig
from repo_miner.scm import ChangeType, GitSession, count_churn, parse_name_status
from repo_miner.scm.churn import changed_content_size, is_binary_patch


class TestParseNameStatus:
    """Test parsing of ``diff-tree -z --name-status`` output."""

    def test_simple_statuses(self):
        raw = "A\0added.py\0M\0changed.py\0D\0gone.py\0"
        changes = parse_name_status(raw)
        assert [(c.type, c.path) for c in changes] == [
            (ChangeType.ADD, "added.py"),
            (ChangeType.MODIFY, "changed.py"),
            (ChangeType.DELETE, "gone.py"),
        ]
        assert all(c.old_path is None for c in changes)

    def test_rename_and_copy_carry_both_paths(self):
        raw = "R100\0old.py\0new.py\0C075\0src.py\0dst.py\0"
        move, copy = parse_name_status(raw)
        assert move.type is ChangeType.MOVE
        assert (move.old_path, move.path) == ("old.py", "new.py")
        assert copy.type is ChangeType.COPY
        assert (copy.old_path, copy.path) == ("src.py", "dst.py")

    def test_type_change_is_modify(self):
        assert parse_name_status("T\0link\0")[0].type is ChangeType.MODIFY

    def test_unknown_status_skipped(self):
        changes = parse_name_status("X\0weird\0M\0ok.py\0")
        assert [c.path for c in changes] == ["ok.py"]

    def test_empty_output(self):
        assert parse_name_status("") == []

    def test_paths_with_spaces(self):
        assert parse_name_status("A\0dir with space/a b.py\0")[0].path == "dir with space/a b.py"


class TestCountChurn:
    """Test counting of added and removed lines in unified diffs."""

    def test_headers_not_counted(self):
        patch = (
            "diff --git a/a.py b/a.py\n"
            "index 1111111..2222222 100644\n"
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1,2 +1,3 @@\n"
            "-old\n"
            "+new\n"
            "+more\n"
        )
        assert count_churn(patch) == (2, 1)

    def test_content_looking_like_headers_is_counted(self):
        patch = (
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1 +1 @@\n"
            "--- a removed line starting with dashes\n"
            "+++ an added line starting with pluses\n"
        )
        assert count_churn(patch) == (1, 1)

    def test_multiple_files(self):
        patch = (
            "diff --git a/a.py b/a.py\n"
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1 +1 @@\n"
            "-x\n"
            "+y\n"
            "diff --git a/b.py b/b.py\n"
            "--- a/b.py\n"
            "+++ b/b.py\n"
            "@@ -0,0 +1,2 @@\n"
            "+1\n"
            "+2\n"
        )
        assert count_churn(patch) == (3, 1)

    def test_empty_patch(self):
        assert count_churn("") == (0, 0)

    def test_binary_marker(self):
        assert is_binary_patch("diff --git a/x b/x\nBinary files a/x and b/x differ\n")
        assert not is_binary_patch("@@ -1 +1 @@\n-a\n+b\n")

    def test_changed_content_size_ignores_headers_and_context(self):
        patch = (
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1 +1,2 @@\n"
            "-abc\n"
            "+abcd\n"
            "+\n"
        )
        assert changed_content_size(patch) == 4 + 5 + 1


def _line_count(text: str) -> int:
    return len(text.splitlines())


class TestChurnAgainstHistory:
    """Churn computed by the analyzer on real repositories."""

    def test_root_commit_diffs_against_empty_tree(self, repo):
        repo.write("a.py", "one\ntwo\nthree\n")
        repo.commit("init")

        with GitSession().open(repo.root) as session:
            (commit,) = session.list_commits()

        (change,) = commit.changes
        assert change.type is ChangeType.ADD
        assert change.path == "a.py"
        assert (change.lines_added, change.lines_removed) == (3, 0)

    def test_net_delta_matches_tree_line_counts(self, repo):
        base = "".join(f"line {i} of the original module\n" for i in range(12))
        files = {"a.py": base, "b.py": "x = 1\ny = 2\n"}
        for rel, text in files.items():
            repo.write(rel, text)
        totals = {repo.commit("init"): sum(_line_count(t) for t in files.values())}

        files["a.py"] = base.replace("line 3 of", "LINE 3 OF") + "extra\nmore\n"
        repo.write("a.py", files["a.py"])
        del files["b.py"]
        repo.remove("b.py")
        totals[repo.commit("edit")] = sum(_line_count(t) for t in files.values())

        files["c.py"] = files.pop("a.py") + "after move\n"
        repo.remove("a.py")
        repo.write("c.py", files["c.py"])
        totals[repo.commit("move")] = sum(_line_count(t) for t in files.values())

        with GitSession().open(repo.root) as session:
            history = list(reversed(session.list_commits()))

        previous = 0
        for commit in history:
            delta = sum(c.lines_added - c.lines_removed for c in commit.changes)
            assert delta == totals[commit.id] - previous, commit.message
            previous = totals[commit.id]

        move = history[-1]
        (change,) = move.changes
        assert change.type is ChangeType.MOVE
        assert (change.old_path, change.path) == ("a.py", "c.py")
        assert (change.lines_added, change.lines_removed) == (1, 0)

    def test_merge_commit_has_no_changes(self, repo):
        repo.write("a.py", "a\n")
        repo.commit("init")
        repo.git("checkout", "-q", "-b", "feature")
        repo.write("feature.py", "f\n")
        repo.commit("feature work")
        repo.git("checkout", "-q", "main")
        repo.write("main.py", "m\n")
        repo.commit("main work")
        merge_id = repo.merge("feature")

        with GitSession().open(repo.root) as session:
            merge = session.get_commit(merge_id)

        assert merge.is_merge
        assert len(merge.parents) == 2
        assert merge.changes == ()

    def test_large_change_reported_binary(self, repo):
        repo.write("big.txt", "".join(f"{i:040d}\n" for i in range(100)))
        repo.commit("big")

        with GitSession().open(repo.root) as session:
            (commit,) = session.list_commits()
        (change,) = commit.changes
        assert change.binary
        assert (change.lines_added, change.lines_removed) == (0, 0)

    def test_zero_threshold_counts_large_text(self, repo):
        repo.write("big.txt", "".join(f"{i:040d}\n" for i in range(100)))
        repo.commit("big")

        config = MinerConfig(binary_file_threshold=0)
        with GitSession(config).open(repo.root) as session:
            (commit,) = session.list_commits()
        (change,) = commit.changes
        assert not change.binary
        assert change.lines_added == 100

    def test_binary_content_reported_binary(self, repo):
        repo.write("image.bin", b"\x00\x01\x02\x03binary\x00")
        repo.write("text.py", "print('hi')\n")
        repo.commit("mixed")

        with GitSession().open(repo.root) as session:
            (commit,) = session.list_commits()
        by_path = {c.path: c for c in commit.changes}
        assert by_path["image.bin"].binary
        assert (by_path["image.bin"].lines_added, by_path["image.bin"].lines_removed) == (0, 0)
        assert by_path["text.py"].lines_added == 1

    def test_delete_counts_removed_lines(self, repo):
        repo.write("a.py", "1\n2\n3\n4\n")
        repo.commit("init")
        repo.remove("a.py")
        repo.write("keep.py", "k\n")
        repo.commit("delete")

        with GitSession().open(repo.root) as session:
            latest = session.list_commits()[0]
        by_path = {c.path: c for c in latest.changes}
        assert by_path["a.py"].type is ChangeType.DELETE
        assert by_path["a.py"].lines_removed == 4
        assert latest.lines_added == 1
        assert latest.lines_removed == 4

    def test_small_edit_in_large_file_is_counted(self, repo):
        body = "".join(f"value_{i:04d} = {i} * 2  # generated constant\n" for i in range(80))
        assert len(body) > 3000
        repo.write("mod.py", body)
        repo.commit("init")
        repo.write("mod.py", body + "tail = 0\n")
        repo.commit("append")

        with GitSession().open(repo.root) as session:
            latest = session.list_commits()[0]
        (change,) = latest.changes
        assert not change.binary
        assert (change.type, change.lines_added, change.lines_removed) == (ChangeType.MODIFY, 1, 0)

    def test_glob_characters_in_paths_are_literal(self, repo):
        repo.write("a*.py", "one\n")
        repo.write("abc.py", "1\n2\n3\n")
        repo.write("x[1].py", "only\n")
        repo.write("x1.py", "a\nb\n")
        repo.commit("odd names")

        with GitSession().open(repo.root) as session:
            (commit,) = session.list_commits()
        by_path = {c.path: (c.lines_added, c.lines_removed) for c in commit.changes}
        assert by_path == {"a*.py": (1, 0), "abc.py": (3, 0), "x[1].py": (1, 0), "x1.py": (2, 0)}

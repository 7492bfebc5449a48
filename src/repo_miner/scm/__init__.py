"""History walker and diff/churn analysis over git repositories."""

from .churn import ChurnAnalyzer, changed_content_size, count_churn, parse_name_status
from .git_session import GitSession
from .models import Change, ChangeType, Commit, PersonIdent, Reference, ReferenceType

__all__ = [
    "GitSession",
    "ChurnAnalyzer",
    "count_churn",
    "changed_content_size",
    "parse_name_status",
    "Change",
    "ChangeType",
    "Commit",
    "PersonIdent",
    "Reference",
    "ReferenceType",
]

"""
repo-miner - git history and structural metrics, commit by commit

Walks a repository's history, measures file-level churn for each commit,
computes type and method metrics on every checked-out tree, and flags code
smells such as Brain Method.
"""

__version__ = "0.1.0"

from .config import MinerConfig, load_config
from .mining import JsonLinesSink, MemorySink, RepositoryMiner
from .scm import GitSession

__all__ = [
    "RepositoryMiner",  # Main entry point
    "GitSession",
    "MinerConfig",
    "load_config",
    "MemorySink",
    "JsonLinesSink",
]

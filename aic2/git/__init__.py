"""Git Operations Package"""

from aic2.git.analyzer import GitAnalyzer, GitError

__all__ = [
    "GitAnalyzer",
    "GitError",
]

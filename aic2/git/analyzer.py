"""Git Analyzer - Extract the staged diff from git."""

import subprocess

from aic2 import COMMIT
from aic2.llm.models import DiffPayload


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class GitAnalyzer:
    """Reads staged changes from git."""

    def __init__(self):
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def get_staged_files(self) -> list[str]:
        output = self._run_git('diff', '--staged', '--name-only')
        return [line for line in output.splitlines() if line.strip()]

    def get_staged_diff(self, mode: str = COMMIT) -> DiffPayload:
        """Capture the staged diff for a commit or review request."""
        return DiffPayload(diff=self._run_git('diff', '--staged'), mode=mode)

"""Exception hierarchy for Git Space Analyzer."""

from pathlib import Path
from typing import List, Optional, Union


class GitSpaceAnalyzerError(Exception):
    """Base class for all analysis errors."""


class ConfigurationError(GitSpaceAnalyzerError):
    """Raised when the analysis configuration is invalid."""


class NotARepositoryError(GitSpaceAnalyzerError):
    """Raised when the target directory is not a git repository."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Directory {self.path} is not a Git repository")


class BackendUnavailableError(GitSpaceAnalyzerError):
    """Raised when git cannot be executed or the repository cannot be opened."""


class QueryFailedError(GitSpaceAnalyzerError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(
        self,
        command: List[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()

        message = f"Git command failed: {' '.join(self.command)}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        if self.stderr:
            message += f"\n{self.stderr}"
        super().__init__(message)


class OutputLimitExceededError(QueryFailedError):
    """Raised when a buffered git query produces more output than allowed."""

    def __init__(self, command: List[str], limit: int):
        self.limit = limit
        super().__init__(
            command, stderr=f"Output exceeded the {limit} byte limit"
        )

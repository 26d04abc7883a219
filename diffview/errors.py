"""
Custom exceptions.

Malformed diff input is never an error: the parser degrades it to meta lines.
These exceptions cover the collaborators around it (git, remote servers,
request validation) and carry the HTTP status they map to.
"""


class DiffViewError(Exception):
    """Base exception class for all application-specific exceptions."""

    def __init__(self, message: str = "Diff operation failed", status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidRequest(DiffViewError):
    """Raised when a request is missing or has invalid parameters."""

    def __init__(self, details: str):
        super().__init__(details, status_code=400)


class NotAGitRepository(DiffViewError):
    """Raised when the configured root is not inside a git work tree."""

    def __init__(self, root: str):
        self.root = root
        super().__init__("not in a git repository", status_code=400)


class FetchFailure(DiffViewError):
    """Raised when diff text or changeset metadata cannot be retrieved."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message, status_code=status_code)

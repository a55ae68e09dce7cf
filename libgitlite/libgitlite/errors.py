"""Exceptions raised by libgitlite."""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path


class RepositoryError(Exception):
    """Exception raised for repository-related errors."""


class RepositoryNotFoundError(RepositoryError):
    """Exception raised when a repository is not found."""


class NotFoundError(RepositoryError):
    """A referenced commit, branch, tag, object or file is missing."""


class BranchNotFoundError(NotFoundError):
    """Exception raised when a branch ref does not exist."""


class CommitNotFoundError(NotFoundError):
    """Exception raised when a commit object does not exist."""


class RemoteNotFoundError(NotFoundError):
    """Exception raised when a remote mirror does not exist."""


class FileNotInWorkspaceError(NotFoundError):
    """Exception raised when a path to stage is not a file in the workspace."""


class AlreadyExistsError(RepositoryError):
    """A branch, tag, repository or clone target already exists."""


class PreconditionError(RepositoryError):
    """An operation was aborted before any write because its precondition does not hold."""


class EmptyIndexError(PreconditionError):
    """Exception raised when committing with nothing staged."""


class EmptySourceError(PreconditionError):
    """Exception raised when merging or rebasing onto a branch without commits."""


class NoCommitsError(PreconditionError):
    """Exception raised when tagging a branch without commits."""


class SelfMergeError(PreconditionError):
    """Exception raised when merging or rebasing the current branch onto itself."""


class CurrentBranchError(PreconditionError):
    """Exception raised when deleting the checked-out branch."""


class NotStagedError(RepositoryError):
    """Exception raised when unstaging a path that is not in the index."""


class PathIgnoredError(RepositoryError):
    """Exception raised when staging a path that matches an ignore pattern."""


class CorruptObjectError(RepositoryError):
    """Exception raised when a stored object cannot be parsed or fails verification."""


class InvalidIdentifierError(RepositoryError, ValueError):
    """Exception raised when a branch, tag or repository name has illegal characters."""


class PermissionDeniedError(RepositoryError):
    """Exception raised when an actor may not perform an operation."""


class IOFailureError(RepositoryError):
    """Exception raised when the filesystem fails underneath an operation.

    The original :class:`OSError` is chained as ``__cause__``."""

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        self.path = Path(path)
        super().__init__(message or f'I/O failure at {self.path}')


@contextmanager
def wrap_os_errors(path: Path | str) -> Generator[None, None, None]:
    """Re-raise any :class:`OSError` from the body as :class:`IOFailureError` naming `path`.

    :param path: The path the body is operating on.
    :raises IOFailureError: If the body raises an OSError."""
    try:
        yield
    except OSError as e:
        msg = f'I/O failure at {path}: {e.strerror or e}'
        raise IOFailureError(path, msg) from e

"""libgitlite repository management."""

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from fnmatch import fnmatch
from functools import wraps
from pathlib import Path, PurePosixPath
from typing import Concatenate, NamedTuple, ParamSpec, TypeVar

from ._atomic import atomic_write
from .config import RepoConfig, read_config, write_config
from .constants import (CONFIG_FILE, DEFAULT_BRANCH, DEFAULT_HISTORY_LIMIT, DEFAULT_VISIBILITY, HEAD_FILE, HEADS_DIR,
                        IGNORE_FILE, INDEX_FILE, LOG_FILE, MERGE_AUTHOR, OBJECTS_SUBDIR, REFS_DIR, REVERT_PREFIX,
                        TAGS_DIR, TIMESTAMP_FORMAT, VISIBILITY_PRIVATE, VISIBILITY_PUBLIC, WORKSPACE_DIR)
from .errors import (AlreadyExistsError, BranchNotFoundError, CommitNotFoundError, CurrentBranchError,
                     EmptyIndexError, EmptySourceError, FileNotInWorkspaceError, NoCommitsError, PathIgnoredError,
                     RepositoryError, RepositoryNotFoundError, SelfMergeError, wrap_os_errors)
from .index import Index
from .merge import MergeStrategy, TakeTheirsMerge
from .objects import Commit, IndexEntry, LogRecord, Tag
from .plumbing import load_commit, save_commit, save_file_content
from .ref import HashRef, RefError, SymRef, read_ref, validate_identifier, write_ref

logger = logging.getLogger(__name__)


def timestamp() -> str:
    """Return the current local time with second precision, e.g. ``2024-05-01T13:37:00``."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


class ChangeKind(StrEnum):
    ADDED = 'added'
    MODIFIED = 'modified'
    UNCHANGED = 'unchanged'


class StagedChange(NamedTuple):
    """A staged path compared against the head commit of the current branch."""

    path: str
    blob: HashRef
    kind: ChangeKind


@dataclass
class MergeOutcome:
    """The commit a merge produced and the paths the strategy could not merge cleanly."""

    commit: Commit
    conflicts: list[str] = field(default_factory=list)


def _require_line(value: str | None, what: str) -> str:
    if not value:
        msg = f'{what} is required'
        raise ValueError(msg)
    if '\n' in value or '\r' in value:
        msg = f'{what} must be a single line'
        raise ValueError(msg)
    return value


P = ParamSpec('P')
R = TypeVar('R')


class Repository:
    """Represents a gitlite repository rooted at a directory.

    The handle holds no state besides its root path: every call reads the current HEAD, refs and index from
    disk. Callers must not use two handles on the same root concurrently."""

    def __init__(self, root: Path | str) -> None:
        """Initialize a Repository instance. The repository is not created on disk until `init()` is called.

        :param root: The repository root directory."""
        self.root = Path(root)
        self.index = Index(self.index_file())

    def __repr__(self) -> str:
        return f'Repository({str(self.root)!r})'

    def init(self, owner: str, name: str, visibility: str = DEFAULT_VISIBILITY,
             default_branch: str = DEFAULT_BRANCH) -> None:
        """Scaffold a new, empty repository at the root.

        :param owner: The owning user.
        :param name: The repository name.
        :param visibility: ``private`` or ``public``.
        :param default_branch: The branch HEAD points at. Its ref is created empty.
        :raises InvalidIdentifierError: If a name has illegal characters.
        :raises AlreadyExistsError: If a repository already exists at the root.
        :raises IOFailureError: If the directories or files cannot be created."""
        validate_identifier(owner, 'Owner')
        validate_identifier(name, 'Repository name')
        validate_identifier(default_branch, 'Branch name')
        _check_visibility(visibility)
        if self.exists():
            msg = f'Repository already exists at {self.root}'
            raise AlreadyExistsError(msg)

        with wrap_os_errors(self.root):
            self.objects_dir().mkdir(parents=True)
            self.heads_dir().mkdir(parents=True)
            self.tags_dir().mkdir(parents=True)
            self.workspace_dir().mkdir(parents=True, exist_ok=True)

        write_ref(self.heads_dir() / default_branch, None)
        write_ref(self.head_file(), SymRef(default_branch))
        self.index.clear()
        atomic_write(self.log_file(), '')
        write_config(self.config_file(), RepoConfig(name, owner, visibility, timestamp()))

        logger.info('Initialized repository %s/%s at %s', owner, name, self.root)

    def exists(self) -> bool:
        """Check if a repository exists at the root.

        :return: True if the repository exists, False otherwise."""
        return self.objects_dir().is_dir()

    def objects_dir(self) -> Path:
        return self.root / OBJECTS_SUBDIR

    def refs_dir(self) -> Path:
        return self.root / REFS_DIR

    def heads_dir(self) -> Path:
        return self.refs_dir() / HEADS_DIR

    def tags_dir(self) -> Path:
        return self.refs_dir() / TAGS_DIR

    def head_file(self) -> Path:
        return self.root / HEAD_FILE

    def index_file(self) -> Path:
        return self.root / INDEX_FILE

    def log_file(self) -> Path:
        return self.root / LOG_FILE

    def config_file(self) -> Path:
        return self.root / CONFIG_FILE

    def ignore_file(self) -> Path:
        return self.root / IGNORE_FILE

    def workspace_dir(self) -> Path:
        return self.root / WORKSPACE_DIR

    @staticmethod
    def requires_repo(func: Callable[Concatenate['Repository', P], R]) -> \
            Callable[Concatenate['Repository', P], R]:
        """Decorate a Repository method to ensure that the repository exists before executing the method.

        :param func: The method to decorate.
        :return: A wrapper function that checks for the repository's existence."""

        @wraps(func)
        def _verify_repo(self: 'Repository', *args: P.args, **kwargs: P.kwargs) -> R:
            if not self.exists():
                msg = f'Repository not initialized at {self.root}'
                raise RepositoryNotFoundError(msg)

            return func(self, *args, **kwargs)

        return _verify_repo

    @requires_repo
    def config(self) -> RepoConfig:
        return read_config(self.config_file())

    @requires_repo
    def set_visibility(self, visibility: str) -> None:
        """Mark the repository ``public`` or ``private``.

        :raises ValueError: If `visibility` is neither."""
        _check_visibility(visibility)
        config = self.config()
        config.visibility = visibility
        write_config(self.config_file(), config)

    # HEAD and branches

    @requires_repo
    def current_branch(self) -> str:
        """Get the branch HEAD points at.

        :return: The branch name. The branch ref itself may not exist yet.
        :raises RepositoryError: If the HEAD file does not exist.
        :raises RefError: If HEAD does not hold a symbolic branch reference.
        :raises RepositoryNotFoundError: If the repository does not exist."""
        head_file = self.head_file()
        if not head_file.exists():
            msg = 'HEAD ref file does not exist'
            raise RepositoryError(msg)

        head = read_ref(head_file)
        if not isinstance(head, SymRef):
            msg = f'HEAD must name a branch, found {head!r}'
            raise RefError(msg)
        return str(head)

    @requires_repo
    def set_current_branch(self, branch: str) -> None:
        """Point HEAD at `branch`.

        The branch ref is not required to exist. A branch that does not exist yet comes into being with its
        first commit; use :meth:`switch_or_create` to create it right away.

        :raises InvalidIdentifierError: If the branch name is invalid."""
        validate_identifier(branch, 'Branch name')
        write_ref(self.head_file(), SymRef(branch))

    @requires_repo
    def switch_or_create(self, branch: str) -> bool:
        """Point HEAD at `branch`, creating the branch at the current head commit if it does not exist.

        :param branch: The branch to switch to.
        :return: True if the branch was created.
        :raises InvalidIdentifierError: If the branch name is invalid."""
        validate_identifier(branch, 'Branch name')
        created = not self.branch_exists(branch)
        if created:
            self.create_branch(branch)
        self.set_current_branch(branch)
        return created

    @requires_repo
    def branch_exists(self, branch: str) -> bool:
        validate_identifier(branch, 'Branch name')
        return (self.heads_dir() / branch).is_file()

    @requires_repo
    def branches(self) -> list[str]:
        """Get the names of all branches, sorted."""
        heads_dir = self.heads_dir()
        if not heads_dir.is_dir():
            return []
        return sorted(ref_file.name for ref_file in heads_dir.iterdir() if ref_file.is_file())

    @requires_repo
    def branch_head(self, branch: str) -> HashRef | None:
        """Get the commit a branch points at.

        :param branch: The branch name.
        :return: The head commit id, or None if the branch has no commits or no ref yet.
        :raises RefError: If the ref file does not hold a commit id."""
        validate_identifier(branch, 'Branch name')
        ref_file = self.heads_dir() / branch
        if not ref_file.is_file():
            return None

        ref = read_ref(ref_file)
        if isinstance(ref, SymRef):
            msg = f'Branch "{branch}" holds a symbolic reference'
            raise RefError(msg)
        return ref

    @requires_repo
    def head_commit(self) -> HashRef | None:
        """Return the head commit of the current branch, or None if it has no commits."""
        return self.branch_head(self.current_branch())

    @requires_repo
    def update_branch_head(self, branch: str, commit_ref: HashRef | None) -> None:
        """Point `branch` at `commit_ref`, creating the ref if needed."""
        validate_identifier(branch, 'Branch name')
        write_ref(self.heads_dir() / branch, commit_ref)

    @requires_repo
    def list_branches_with_head(self) -> list[tuple[str, HashRef | None]]:
        """List every branch with its head commit, sorted by branch name."""
        return [(branch, self.branch_head(branch)) for branch in self.branches()]

    @requires_repo
    def create_branch(self, branch: str) -> HashRef | None:
        """Create a branch at the current branch's head commit.

        :param branch: The name of the branch to add.
        :return: The commit the new branch points at, or None if the current branch has no commits.
        :raises InvalidIdentifierError: If the branch name is invalid.
        :raises AlreadyExistsError: If the branch already exists.
        :raises RepositoryNotFoundError: If the repository does not exist."""
        if self.branch_exists(branch):
            msg = f'Branch "{branch}" already exists'
            raise AlreadyExistsError(msg)

        head = self.head_commit()
        write_ref(self.heads_dir() / branch, head)
        logger.info('Created branch %s at %s', branch, head or '(no commits)')
        return head

    @requires_repo
    def rename_branch(self, old_name: str, new_name: str) -> None:
        """Rename a branch, moving HEAD along if it pointed at the old name.

        If HEAD cannot be updated the ref rename is undone, so either both happen or neither does.

        :raises BranchNotFoundError: If `old_name` does not exist.
        :raises AlreadyExistsError: If `new_name` already exists."""
        old_path = self.heads_dir() / validate_identifier(old_name, 'Branch name')
        new_path = self.heads_dir() / validate_identifier(new_name, 'Branch name')
        if not old_path.is_file():
            msg = f'Branch "{old_name}" does not exist'
            raise BranchNotFoundError(msg)
        if new_path.exists():
            msg = f'Branch "{new_name}" already exists'
            raise AlreadyExistsError(msg)

        move_head = self.current_branch() == old_name
        with wrap_os_errors(old_path):
            old_path.rename(new_path)

        if move_head:
            try:
                self.set_current_branch(new_name)
            except RepositoryError:
                logger.warning('Could not move HEAD to %s, restoring branch %s', new_name, old_name)
                with wrap_os_errors(new_path):
                    new_path.rename(old_path)
                raise

        logger.info('Renamed branch %s to %s', old_name, new_name)

    @requires_repo
    def delete_branch(self, branch: str) -> None:
        """Delete a branch from the repository.

        :param branch: The name of the branch to delete.
        :raises InvalidIdentifierError: If the branch name is invalid.
        :raises BranchNotFoundError: If the branch does not exist.
        :raises CurrentBranchError: If HEAD points at the branch.
        :raises RepositoryNotFoundError: If the repository does not exist."""
        branch_path = self.heads_dir() / validate_identifier(branch, 'Branch name')
        if not branch_path.is_file():
            msg = f'Branch "{branch}" does not exist'
            raise BranchNotFoundError(msg)
        if self.current_branch() == branch:
            msg = f'Cannot delete the current branch "{branch}"'
            raise CurrentBranchError(msg)

        with wrap_os_errors(branch_path):
            branch_path.unlink()
        logger.info('Deleted branch %s', branch)

    # Tags

    @requires_repo
    def create_tag(self, tag_name: str) -> Tag:
        """Tag the head commit of the current branch.

        :param tag_name: The name of the tag to create.
        :return: The created Tag.
        :raises InvalidIdentifierError: If the tag name is invalid.
        :raises AlreadyExistsError: If the tag already exists.
        :raises NoCommitsError: If the current branch has no commits."""
        tag_path = self.tags_dir() / validate_identifier(tag_name, 'Tag name')
        if tag_path.exists():
            msg = f'Tag "{tag_name}" already exists'
            raise AlreadyExistsError(msg)

        head = self.head_commit()
        if head is None:
            msg = f'No commits to tag on branch "{self.current_branch()}"'
            raise NoCommitsError(msg)

        with wrap_os_errors(tag_path.parent):
            tag_path.parent.mkdir(parents=True, exist_ok=True)
        write_ref(tag_path, head)
        logger.info('Tagged %s as %s', head, tag_name)

        return Tag(tag_name, head)

    @requires_repo
    def list_tags(self) -> list[Tag]:
        """Return all tags sorted by name."""
        tags_dir = self.tags_dir()
        if not tags_dir.exists():
            return []

        tags: list[Tag] = []
        for tag_file in tags_dir.iterdir():
            if not tag_file.is_file():
                continue

            tag_ref_value = read_ref(tag_file)
            if not isinstance(tag_ref_value, HashRef):
                msg = f'Invalid tag reference stored in {tag_file}'
                raise RepositoryError(msg)

            tags.append(Tag(tag_file.name, tag_ref_value))

        tags.sort(key=lambda tag: tag.name)
        return tags

    @requires_repo
    def tag_exists(self, tag_name: str) -> bool:
        return (self.tags_dir() / validate_identifier(tag_name, 'Tag name')).is_file()

    # Staging

    def _workspace_path(self, relative_path: str) -> tuple[str, Path]:
        if not relative_path:
            msg = 'Path is required'
            raise ValueError(msg)
        if any(c in relative_path for c in '\t\n\r'):
            msg = f'Path {relative_path!r} contains control characters'
            raise ValueError(msg)

        pure = PurePosixPath(relative_path)
        if pure.is_absolute() or '..' in pure.parts or pure.as_posix() == '.':
            msg = f'Path "{relative_path}" must be relative to the workspace'
            raise ValueError(msg)

        workspace = self.workspace_dir()
        source = workspace / pure
        if not source.resolve().is_relative_to(workspace.resolve()):
            msg = f'Path "{relative_path}" escapes the workspace'
            raise ValueError(msg)

        return pure.as_posix(), source

    @requires_repo
    def add_file(self, relative_path: str) -> IndexEntry:
        """Stage a workspace file.

        :param relative_path: The path of the file relative to the workspace directory.
        :return: The staged entry.
        :raises ValueError: If the path is absolute, contains ``..`` or resolves outside the workspace.
        :raises PathIgnoredError: If the path matches an ignore pattern.
        :raises FileNotInWorkspaceError: If the file does not exist.
        :raises RepositoryNotFoundError: If the repository does not exist."""
        path, source = self._workspace_path(relative_path)
        if self.is_ignored(path):
            msg = f'Path "{path}" is ignored'
            raise PathIgnoredError(msg)
        if not source.is_file():
            msg = f'File "{path}" not found in workspace'
            raise FileNotInWorkspaceError(msg)

        blob = save_file_content(self.objects_dir(), source)
        self.index.stage(path, blob.hash)
        return IndexEntry(path, blob.hash)

    @requires_repo
    def reset_file(self, relative_path: str) -> IndexEntry:
        """Unstage a path, leaving the workspace file alone.

        :raises NotStagedError: If the path is not staged."""
        path, _ = self._workspace_path(relative_path)
        return self.index.unstage(path)

    @requires_repo
    def remove_file(self, relative_path: str) -> IndexEntry:
        """Unstage a path and delete it from the workspace.

        :raises NotStagedError: If the path is not staged."""
        path, source = self._workspace_path(relative_path)
        entry = self.index.unstage(path)
        with wrap_os_errors(source):
            source.unlink(missing_ok=True)
        return entry

    @requires_repo
    def staged(self) -> list[IndexEntry]:
        return self.index.read()

    @requires_repo
    def status(self) -> list[StagedChange]:
        """Compare each staged entry with the head commit of the current branch."""
        head = self.head_commit()
        committed = dict(load_commit(self.objects_dir(), head).files) if head else {}

        changes = []
        for path, blob in self.index.read():
            if path not in committed:
                kind = ChangeKind.ADDED
            elif committed[path] != blob:
                kind = ChangeKind.MODIFIED
            else:
                kind = ChangeKind.UNCHANGED
            changes.append(StagedChange(path, blob, kind))
        return changes

    @requires_repo
    def ignore_patterns(self) -> list[str]:
        ignore_file = self.ignore_file()
        if not ignore_file.exists():
            return []
        with wrap_os_errors(ignore_file):
            lines = ignore_file.read_text(encoding='utf-8').split('\n')
        return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith('#')]

    @requires_repo
    def add_ignore_pattern(self, pattern: str) -> None:
        """Append an fnmatch pattern to the ignore file. A trailing ``/`` ignores a whole directory."""
        _require_line(pattern and pattern.strip(), 'Ignore pattern')
        with wrap_os_errors(self.ignore_file()), self.ignore_file().open('a', encoding='utf-8') as handle:
            handle.write(f'{pattern.strip()}\n')

    @requires_repo
    def is_ignored(self, path: str) -> bool:
        name = PurePosixPath(path).name
        for pattern in self.ignore_patterns():
            if pattern.endswith('/'):
                prefix = pattern.rstrip('/')
                if path == prefix or path.startswith(f'{prefix}/'):
                    return True
            elif fnmatch(path, pattern) or fnmatch(name, pattern):
                return True
        return False

    # Commits

    def _record_commit(self, commit: Commit) -> HashRef:
        """Store a commit, advance its branch and append it to the commit log."""
        branch_existed = self.branch_exists(commit.branch)
        commit_ref = save_commit(self.objects_dir(), commit)
        self.update_branch_head(commit.branch, commit_ref)
        if not branch_existed:
            logger.info('Branch %s created by its first commit', commit.branch)

        record = LogRecord(commit_ref, commit.branch, commit.timestamp, commit.message)
        with wrap_os_errors(self.log_file()), self.log_file().open('a', encoding='utf-8') as handle:
            handle.write(f'{record.to_line()}\n')

        return commit_ref

    @requires_repo
    def commit(self, author: str, message: str) -> Commit:
        """Commit the staged files to the current branch.

        :param author: The name of the commit author.
        :param message: The commit message.
        :return: The new commit. Its parent is the branch head before the commit.
        :raises ValueError: If the author or message is empty or spans several lines.
        :raises EmptyIndexError: If nothing is staged.
        :raises RepositoryNotFoundError: If the repository does not exist."""
        _require_line(author, 'Author')
        _require_line(message, 'Commit message')

        entries = self.index.read()
        if not entries:
            msg = 'Nothing to commit (index empty)'
            raise EmptyIndexError(msg)

        branch = self.current_branch()
        commit = Commit(author, timestamp(), branch, self.branch_head(branch), message, tuple(entries))
        self._record_commit(commit)
        self.index.clear()

        logger.info('Committed %s on %s: %s', commit.id, branch, message)
        return commit

    @requires_repo
    def get_commit(self, commit_id: str) -> Commit:
        """Load a commit by id.

        :raises CommitNotFoundError: If the commit does not exist.
        :raises CorruptObjectError: If the object is not a valid commit."""
        return load_commit(self.objects_dir(), commit_id)

    @requires_repo
    def history(self, branch: str | None = None, limit: int = DEFAULT_HISTORY_LIMIT) -> list[Commit]:
        """List commits from a branch head back towards the root.

        A missing commit ends the walk: the commits found so far are returned.

        :param branch: The branch to walk. Defaults to the current branch.
        :param limit: The maximum number of commits to return.
        :return: The commits, newest first.
        :raises CorruptObjectError: If a commit object cannot be parsed.
        :raises RepositoryNotFoundError: If the repository does not exist."""
        current = self.branch_head(branch if branch is not None else self.current_branch())

        commits: list[Commit] = []
        while current and len(commits) < limit:
            try:
                commit = load_commit(self.objects_dir(), current)
            except CommitNotFoundError:
                logger.warning('History truncated at missing commit %s', current)
                break
            commits.append(commit)
            current = commit.parent

        return commits

    @requires_repo
    def log_records(self) -> list[LogRecord]:
        """Read the commit log in the order commits were made."""
        log_file = self.log_file()
        if not log_file.exists():
            return []

        with wrap_os_errors(log_file):
            lines = log_file.read_text(encoding='utf-8').split('\n')
        return [record for line in lines if (record := LogRecord.from_line(line)) is not None]

    # Combining branches

    def _source_head(self, branch: str, action: str) -> tuple[str, HashRef]:
        current = self.current_branch()
        validate_identifier(branch, 'Branch name')
        if branch == current:
            msg = f'Cannot {action} branch "{branch}" with itself'
            raise SelfMergeError(msg)
        if not self.branch_exists(branch):
            msg = f'Branch "{branch}" does not exist'
            raise BranchNotFoundError(msg)

        source_head = self.branch_head(branch)
        if source_head is None:
            msg = f'Branch "{branch}" has no commits'
            raise EmptySourceError(msg)

        return current, source_head

    @requires_repo
    def merge(self, branch: str, strategy: MergeStrategy | None = None) -> MergeOutcome:
        """Merge `branch` into the current branch with a single-parent commit authored ``merge``.

        With the default :class:`TakeTheirsMerge` the new commit's files are exactly those of `branch`'s head.

        :param branch: The branch to merge from.
        :param strategy: How to combine the two file lists.
        :return: The merge commit and any conflicting paths reported by the strategy.
        :raises SelfMergeError: If `branch` is the current branch.
        :raises BranchNotFoundError: If `branch` does not exist.
        :raises EmptySourceError: If `branch` has no commits."""
        current, source_head = self._source_head(branch, 'merge')
        ours = self.branch_head(current)

        result = (strategy or TakeTheirsMerge()).merge(self.objects_dir(), ours, source_head)
        commit = Commit(MERGE_AUTHOR, timestamp(), current, ours, f"Merge branch '{branch}' into '{current}'",
                        result.files)
        self._record_commit(commit)

        logger.info('Merged %s into %s as %s', branch, current, commit.id)
        if result.conflicts:
            logger.warning('Merge of %s into %s has conflicts: %s', branch, current, ', '.join(result.conflicts))
        return MergeOutcome(commit, result.conflicts)

    @requires_repo
    def rebase(self, branch: str) -> HashRef:
        """Move the current branch head to `branch`'s head.

        No commits are replayed: commits only reachable from the old head are no longer reachable from the
        current branch.

        :return: The new head of the current branch.
        :raises SelfMergeError: If `branch` is the current branch.
        :raises BranchNotFoundError: If `branch` does not exist.
        :raises EmptySourceError: If `branch` has no commits."""
        current, source_head = self._source_head(branch, 'rebase')
        previous = self.branch_head(current)
        self.update_branch_head(current, source_head)

        logger.info('Rebased %s onto %s: %s -> %s', current, branch, previous or '(no commits)', source_head)
        return source_head

    @requires_repo
    def revert_commit(self, commit_id: str, author: str) -> Commit:
        """Commit the snapshot that preceded `commit_id` on top of the current branch.

        :param commit_id: The commit to revert.
        :param author: The author of the revert commit.
        :return: The revert commit. Its files are those of the reverted commit's parent, or none at all.
        :raises CommitNotFoundError: If the commit or its parent does not exist."""
        _require_line(author, 'Author')
        target = self.get_commit(commit_id)
        files = self.get_commit(target.parent).files if target.parent else ()

        branch = self.current_branch()
        commit = Commit(author, timestamp(), branch, self.branch_head(branch), f'{REVERT_PREFIX}{target.message}',
                        files)
        self._record_commit(commit)

        logger.info('Reverted %s on %s as %s', commit_id, branch, commit.id)
        return commit

    @requires_repo
    def delete_repo(self) -> None:
        """Delete the entire repository, including all objects, refs and the workspace.

        :raises RepositoryNotFoundError: If the repository does not exist."""
        with wrap_os_errors(self.root):
            shutil.rmtree(self.root)
        logger.info('Deleted repository at %s', self.root)


def _check_visibility(visibility: str) -> None:
    if visibility not in {VISIBILITY_PUBLIC, VISIBILITY_PRIVATE}:
        msg = f'Visibility must be "{VISIBILITY_PUBLIC}" or "{VISIBILITY_PRIVATE}", not "{visibility}"'
        raise ValueError(msg)

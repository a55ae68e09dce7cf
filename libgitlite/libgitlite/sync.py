"""Mirror operations: whole-tree push, pull and clone between a repository and a local copy.

There is no object-level transfer: every push replaces the remote tree, every pull replaces the local one.
The returned :class:`SyncReport` lists how the refs on the receiving side changed."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .constants import HEAD_FILE, HEADS_DIR, MIRRORED_ENTRIES, REFS_DIR, TAGS_DIR
from .errors import AlreadyExistsError, RemoteNotFoundError, RepositoryNotFoundError, wrap_os_errors
from .ref import RefError, read_ref
from .repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class RefChange:
    ref: str
    src: str | None = None   # None for deletes
    dest: str | None = None  # None for creates


@dataclass
class SyncReport:
    create: list[RefChange] = field(default_factory=list)
    update: list[RefChange] = field(default_factory=list)
    delete: list[RefChange] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return not self.create and not self.update and not self.delete

    @property
    def total(self) -> int:
        return len(self.create) + len(self.update) + len(self.delete)


def snapshot_refs(root: Path) -> dict[str, str]:
    """Read HEAD, branch and tag refs under `root` into a ``{name: value}`` map.

    Branches without commits map to the empty string. Unreadable refs are skipped."""
    refs: dict[str, str] = {}
    head_file = root / HEAD_FILE
    if head_file.is_file():
        try:
            refs[HEAD_FILE] = str(read_ref(head_file) or '')
        except RefError:
            logger.warning('Ignoring malformed HEAD in %s', root)

    for namespace in (HEADS_DIR, TAGS_DIR):
        ref_dir = root / REFS_DIR / namespace
        if not ref_dir.is_dir():
            continue
        for ref_file in sorted(ref_dir.iterdir()):
            if not ref_file.is_file():
                continue
            try:
                refs[f'{namespace}/{ref_file.name}'] = str(read_ref(ref_file) or '')
            except RefError:
                logger.warning('Ignoring malformed ref %s', ref_file)
    return refs


def diff_refs(src: dict[str, str], dest: dict[str, str]) -> SyncReport:
    report = SyncReport()
    for ref, value in src.items():
        if ref not in dest:
            report.create.append(RefChange(ref, src=value))
        elif dest[ref] != value:
            report.update.append(RefChange(ref, src=value, dest=dest[ref]))
    for ref, value in dest.items():
        if ref not in src:
            report.delete.append(RefChange(ref, dest=value))
    return report


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _copy_entry(src: Path, dest: Path) -> None:
    if src.is_dir():
        shutil.copytree(src, dest, symlinks=True)
    else:
        shutil.copy2(src, dest)


def _require_repo(root: Path) -> None:
    if not Repository(root).exists():
        msg = f'Repository not initialized at {root}'
        raise RepositoryNotFoundError(msg)


def _require_disjoint(repo_root: Path, remote_root: Path) -> None:
    repo_path, remote_path = repo_root.resolve(), remote_root.resolve()
    if repo_path.is_relative_to(remote_path) or remote_path.is_relative_to(repo_path):
        msg = f'Remote {remote_root} overlaps the repository at {repo_root}'
        raise ValueError(msg)


def push(repo_root: Path, remote_root: Path, *, dry_run: bool = False) -> SyncReport:
    """Replace the mirror at `remote_root` with a full copy of the repository.

    :param repo_root: The repository to push.
    :param remote_root: The mirror location. Deleted first if it exists.
    :param dry_run: Only report what would change.
    :return: How the mirror's refs change.
    :raises RepositoryNotFoundError: If `repo_root` is not a repository.
    :raises ValueError: If `remote_root` is the repository, or one contains the other.
    :raises IOFailureError: If deleting or copying fails."""
    repo_root, remote_root = Path(repo_root), Path(remote_root)
    _require_repo(repo_root)
    _require_disjoint(repo_root, remote_root)
    report = diff_refs(snapshot_refs(repo_root), snapshot_refs(remote_root))
    if dry_run:
        return report

    with wrap_os_errors(remote_root):
        if remote_root.exists():
            shutil.rmtree(remote_root)
        remote_root.mkdir(parents=True)
        for name in MIRRORED_ENTRIES:
            src = repo_root / name
            if src.exists():
                _copy_entry(src, remote_root / name)

    logger.info('Pushed %s to %s (%d ref changes)', repo_root, remote_root, report.total)
    return report


def pull(repo_root: Path, remote_root: Path, *, dry_run: bool = False) -> SyncReport:
    """Overwrite the repository with the mirror at `remote_root`.

    Local history is not merged: every mirrored entry is replaced by the remote's copy, and entries the
    remote lacks are removed.

    :param repo_root: The repository to overwrite. Created if missing.
    :param remote_root: The mirror to read.
    :param dry_run: Only report what would change.
    :return: How the local refs change.
    :raises RemoteNotFoundError: If `remote_root` does not exist.
    :raises ValueError: If `remote_root` is the repository, or one contains the other.
    :raises IOFailureError: If deleting or copying fails."""
    repo_root, remote_root = Path(repo_root), Path(remote_root)
    if not remote_root.is_dir():
        msg = f'Remote not found at {remote_root}'
        raise RemoteNotFoundError(msg)
    _require_disjoint(repo_root, remote_root)

    report = diff_refs(snapshot_refs(remote_root), snapshot_refs(repo_root))
    if dry_run:
        return report

    with wrap_os_errors(repo_root):
        repo_root.mkdir(parents=True, exist_ok=True)
        for name in MIRRORED_ENTRIES:
            src, dest = remote_root / name, repo_root / name
            _remove(dest)
            if src.exists():
                _copy_entry(src, dest)

    logger.info('Pulled %s into %s (%d ref changes)', remote_root, repo_root, report.total)
    return report


def clone(source_root: Path, dest_root: Path) -> SyncReport:
    """Copy the repository at `source_root` to a new directory.

    :raises RepositoryNotFoundError: If `source_root` is not a repository.
    :raises AlreadyExistsError: If `dest_root` already exists."""
    source_root, dest_root = Path(source_root), Path(dest_root)
    _require_repo(source_root)
    if dest_root.exists():
        msg = f'Directory {dest_root} already exists'
        raise AlreadyExistsError(msg)
    return pull(dest_root, source_root)

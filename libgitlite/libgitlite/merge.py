"""Strategies for combining the file list of another branch into the current one.

:class:`TakeTheirsMerge` is what ``Repository.merge`` uses unless told otherwise: the merge commit's file list
is replaced wholesale by the source head's. :class:`ThreeWayMerge` is a drop-in alternative that merges
against the nearest common ancestor with merge3."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from merge3 import Merge3

from .errors import CommitNotFoundError, NotFoundError, RepositoryError
from .objects import IndexEntry
from .plumbing import load_blob, load_commit, save_blob
from .ref import HashRef

logger = logging.getLogger(__name__)


class MergeError(RepositoryError):
    """Exception raised for merge-related errors."""


@dataclass
class MergeResult:
    """The file list a merge commit should carry, and the paths that could not be merged cleanly."""

    files: tuple[IndexEntry, ...]
    conflicts: list[str] = field(default_factory=list)


class MergeStrategy(Protocol):
    def merge(self, objects_dir: Path, ours: HashRef | None, theirs: HashRef) -> MergeResult:
        """Combine the commit `theirs` into `ours` (None when the current branch has no commits)."""
        ...


class TakeTheirsMerge:
    """Use the source head's file list as is. No per-file comparison, never conflicts."""

    def merge(self, objects_dir: Path, ours: HashRef | None, theirs: HashRef) -> MergeResult:
        return MergeResult(load_commit(objects_dir, theirs).files)


def find_common_ancestor(objects_dir: Path, hash1: str | None, hash2: str | None) -> HashRef | None:
    """Find the nearest commit reachable from both `hash1` and `hash2` through parent links.

    A missing commit ends the walk on that side, as it does for history.

    :return: The ancestor id, or None if the chains never meet."""
    ancestors: set[str] = set()
    current = hash1
    while current:
        ancestors.add(current)
        try:
            current = load_commit(objects_dir, current).parent
        except CommitNotFoundError:
            break

    current = hash2
    while current:
        if current in ancestors:
            return HashRef(current)
        try:
            current = load_commit(objects_dir, current).parent
        except CommitNotFoundError:
            break

    return None


def _split_lines(objects_dir: Path, blob_hash: str | None) -> list[str]:
    if blob_hash is None:
        return []
    return load_blob(objects_dir, blob_hash).decode('utf-8').splitlines(keepends=True)


def merge_blob_text(objects_dir: Path, base_hash: str | None, ours_hash: str, theirs_hash: str) \
        -> tuple[HashRef, bool]:
    """Merge three versions of a text blob with merge3.

    Hashes are compared first so that files changed on one side only are never read.

    :param objects_dir: Directory containing the blob objects.
    :param base_hash: Hash of the common ancestor's blob, or None if the file is new on both sides.
    :param ours_hash: Hash of our version.
    :param theirs_hash: Hash of their version.
    :return: The merged blob hash and whether the result contains conflict markers.
    :raises MergeError: If a blob is missing. Non UTF-8 content counts as a conflict and keeps our version."""
    if ours_hash == theirs_hash:
        return HashRef(ours_hash), False
    if base_hash and ours_hash == base_hash:
        return HashRef(theirs_hash), False
    if base_hash and theirs_hash == base_hash:
        return HashRef(ours_hash), False

    try:
        base_lines = _split_lines(objects_dir, base_hash)
        ours_lines = _split_lines(objects_dir, ours_hash)
        theirs_lines = _split_lines(objects_dir, theirs_hash)
    except UnicodeDecodeError:
        return HashRef(ours_hash), True
    except NotFoundError as e:
        msg = 'Error reading blobs for merge'
        raise MergeError(msg) from e

    merger = Merge3(base_lines, ours_lines, theirs_lines)
    merged: list[str] = []
    conflict = False
    for group in merger.merge_groups():
        match group[0]:
            case 'unchanged' | 'same' | 'a' | 'b':
                merged.extend(group[1])
            case 'conflict':
                conflict = True
                _, _, ours_part, theirs_part = group
                merged.append('<<<<<<< ours\n')
                merged.extend(ours_part)
                merged.append('=======\n')
                merged.extend(theirs_part)
                merged.append('>>>>>>> theirs\n')

    return save_blob(objects_dir, ''.join(merged).encode('utf-8')).hash, conflict


class ThreeWayMerge:
    """Merge per path against the nearest common ancestor.

    Paths keep our order, followed by paths that only exist on their side in their order."""

    def merge(self, objects_dir: Path, ours: HashRef | None, theirs: HashRef) -> MergeResult:
        theirs_files = load_commit(objects_dir, theirs).files
        if ours is None:
            return MergeResult(theirs_files)

        ours_files = load_commit(objects_dir, ours).files
        ancestor = find_common_ancestor(objects_dir, ours, theirs)
        base_files = load_commit(objects_dir, ancestor).files if ancestor else ()
        if ancestor is None:
            logger.info('No common ancestor for %s and %s, merging against an empty base', ours, theirs)

        base_map = dict(base_files)
        ours_map = dict(ours_files)
        theirs_map = dict(theirs_files)

        paths = [path for path, _ in ours_files]
        paths.extend(path for path, _ in theirs_files if path not in ours_map)
        paths.extend(path for path, _ in base_files if path not in ours_map and path not in theirs_map)

        merged: list[IndexEntry] = []
        conflicts: list[str] = []
        for path in paths:
            base_blob = base_map.get(path)
            our_blob = ours_map.get(path)
            their_blob = theirs_map.get(path)

            if our_blob == their_blob:
                chosen = our_blob
            elif our_blob == base_blob:
                chosen = their_blob
            elif their_blob == base_blob:
                chosen = our_blob
            elif our_blob is not None and their_blob is not None:
                chosen, conflict = merge_blob_text(objects_dir, base_blob, our_blob, their_blob)
                if conflict:
                    conflicts.append(path)
            else:
                # Deleted on one side and changed on the other.
                chosen = our_blob or their_blob
                conflicts.append(path)

            if chosen is not None:
                merged.append(IndexEntry(path, HashRef(chosen)))

        return MergeResult(tuple(merged), conflicts)

"""The staging area: an ordered, path-unique list of (path, blob id) entries."""

import logging
from pathlib import Path

from ._atomic import atomic_write
from .errors import NotStagedError, wrap_os_errors
from .objects import IndexEntry
from .ref import HashRef

logger = logging.getLogger(__name__)


class Index:
    """The index file of one repository.

    Entries keep the order in which their paths were first staged; re-staging a path replaces its blob id in
    place. Every change rewrites the whole file atomically."""

    def __init__(self, index_file: Path) -> None:
        self.index_file = index_file

    def read(self) -> list[IndexEntry]:
        """Read the staged entries in index order.

        :return: The entries. A missing index file reads as empty.
        :raises IOFailureError: If the file exists but cannot be read."""
        if not self.index_file.exists():
            return []

        with wrap_os_errors(self.index_file):
            lines = self.index_file.read_text(encoding='utf-8').split('\n')

        entries = []
        for line in lines:
            if not line:
                continue
            entry = IndexEntry.from_line(line)
            if entry is None:
                logger.warning('Skipping malformed index line in %s: %r', self.index_file, line)
                continue
            entries.append(entry)
        return entries

    def write(self, entries: list[IndexEntry]) -> None:
        """Replace the whole index with `entries`."""
        atomic_write(self.index_file, ''.join(f'{entry.to_line()}\n' for entry in entries))

    def stage(self, path: str, blob: HashRef) -> None:
        """Stage `path` with content `blob`, replacing any earlier entry for the same path."""
        entries = self.read()
        for i, entry in enumerate(entries):
            if entry.path == path:
                entries[i] = IndexEntry(path, blob)
                break
        else:
            entries.append(IndexEntry(path, blob))

        self.write(entries)
        logger.debug('Staged %s as %s', path, blob)

    def unstage(self, path: str) -> IndexEntry:
        """Remove `path` from the index.

        :return: The removed entry.
        :raises NotStagedError: If `path` is not staged."""
        entries = self.read()
        for i, entry in enumerate(entries):
            if entry.path == path:
                del entries[i]
                self.write(entries)
                logger.debug('Unstaged %s', path)
                return entry

        msg = f'File "{path}" is not staged'
        raise NotStagedError(msg)

    def get(self, path: str) -> IndexEntry | None:
        return next((entry for entry in self.read() if entry.path == path), None)

    def clear(self) -> None:
        self.write([])

    def is_empty(self) -> bool:
        return not self.read()

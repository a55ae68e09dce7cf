"""Value types stored in or read from a gitlite repository."""

import hashlib
from dataclasses import dataclass, field
from functools import cached_property
from typing import NamedTuple

from .constants import FILES_MARKER, NULL_PARENT
from .errors import CorruptObjectError
from .ref import HashRef, is_hash


class IndexEntry(NamedTuple):
    """A staged path and the blob holding its content."""

    path: str
    blob: HashRef

    def to_line(self) -> str:
        return f'{self.path}\t{self.blob}'

    @classmethod
    def from_line(cls, line: str) -> 'IndexEntry | None':
        parts = line.split('\t')
        if len(parts) != 2 or not parts[0] or not is_hash(parts[1]):
            return None
        return cls(parts[0], HashRef(parts[1]))


@dataclass(frozen=True)
class Blob:
    """A content-addressed copy of a file's bytes."""

    hash: HashRef
    size: int


@dataclass(frozen=True)
class Commit:
    """An immutable snapshot of the index together with its parent, author and message.

    The id is the SHA-256 digest of :meth:`serialize`, so two commits are equal exactly when every field is."""

    author: str
    timestamp: str
    branch: str
    parent: HashRef | None
    message: str
    files: tuple[IndexEntry, ...] = field(default=())

    @cached_property
    def id(self) -> HashRef:
        return HashRef(hashlib.sha256(self.serialize().encode('utf-8')).hexdigest())

    def serialize(self) -> str:
        """Render the canonical body that is hashed to obtain the commit id.

        :return: The commit body, one ``key=value`` line per field followed by the file list."""
        lines = [
            f'author={self.author}',
            f'timestamp={self.timestamp}',
            f'branch={self.branch}',
            f'parent={self.parent or NULL_PARENT}',
            f'message={self.message}',
            FILES_MARKER,
        ]
        lines.extend(entry.to_line() for entry in self.files)
        return '\n'.join(lines) + '\n'

    def to_object(self) -> str:
        """Render the stored form: an ``id=`` line followed by the body."""
        return f'id={self.id}\n{self.serialize()}'

    @classmethod
    def from_object(cls, text: str, expected_id: str | None = None) -> 'Commit':
        """Parse a stored commit object and verify its id.

        :param text: The object content.
        :param expected_id: The id the object was looked up by, if any.
        :return: The parsed commit.
        :raises CorruptObjectError: If the text is not a commit or the stored id does not match its content."""
        lines = text.split('\n')
        if not lines or not lines[0].startswith('id='):
            msg = 'Object is not a commit: missing id line'
            raise CorruptObjectError(msg)
        stored_id = lines[0][len('id='):]

        headers: dict[str, str] = {}
        files: list[IndexEntry] = []
        in_files = False
        for line in lines[1:]:
            if not line:
                continue
            if in_files:
                entry = IndexEntry.from_line(line)
                if entry is None:
                    msg = f'Malformed file entry in commit {stored_id}: {line!r}'
                    raise CorruptObjectError(msg)
                files.append(entry)
            elif line == FILES_MARKER:
                in_files = True
            else:
                key, sep, value = line.partition('=')
                if not sep:
                    msg = f'Malformed header in commit {stored_id}: {line!r}'
                    raise CorruptObjectError(msg)
                headers[key] = value

        missing = {'author', 'timestamp', 'branch', 'parent', 'message'} - headers.keys()
        if not in_files or missing:
            msg = f'Incomplete commit {stored_id}: missing {sorted(missing) or [FILES_MARKER]}'
            raise CorruptObjectError(msg)

        parent = headers['parent']
        commit = cls(headers['author'], headers['timestamp'], headers['branch'],
                     None if parent in {'', NULL_PARENT} else HashRef(parent), headers['message'], tuple(files))

        if commit.id != stored_id or (expected_id is not None and commit.id != expected_id):
            msg = f'Commit {expected_id or stored_id} failed verification'
            raise CorruptObjectError(msg)

        return commit


class LogRecord(NamedTuple):
    """One line of the append-only commit log."""

    commit_id: HashRef
    branch: str
    timestamp: str
    message: str

    def to_line(self) -> str:
        return f'{self.commit_id}\t{self.branch}\t{self.timestamp}\t{self.message}'

    @classmethod
    def from_line(cls, line: str) -> 'LogRecord | None':
        parts = line.split('\t', 3)
        if len(parts) != 4:
            return None
        return cls(HashRef(parts[0]), parts[1], parts[2], parts[3])


@dataclass(frozen=True)
class Tag:
    """Represents an immutable label that points to a commit."""

    name: str
    target: HashRef

"""References: commit hashes, symbolic branch pointers and the files that hold them."""

from pathlib import Path
from typing import TypeAlias

from ._atomic import atomic_write
from .constants import HASH_CHARSET, HASH_LENGTH, HEAD_PREFIX, IDENTIFIER_CHARSET
from .errors import InvalidIdentifierError, RepositoryError, wrap_os_errors


class RefError(RepositoryError):
    """Exception raised for malformed or unresolvable references."""


class HashRef(str):
    """A reference that names a commit by its SHA-256 hex digest."""

    __slots__ = ()


class SymRef(str):
    """A symbolic reference that names a branch."""

    __slots__ = ()


Ref: TypeAlias = HashRef | SymRef


def is_hash(value: str) -> bool:
    """Check whether `value` looks like a full object id."""
    return len(value) == HASH_LENGTH and all(c in HASH_CHARSET for c in value)


def validate_identifier(name: str, kind: str = 'Name') -> str:
    """Check a branch, tag or repository name against the identifier rule.

    :param name: The name to check.
    :param kind: What the name is, used in the error message.
    :return: The name, unchanged.
    :raises InvalidIdentifierError: If the name is empty or has characters outside ``[A-Za-z0-9._-]``."""
    if not name:
        msg = f'{kind} is required'
        raise InvalidIdentifierError(msg)
    if not all(c in IDENTIFIER_CHARSET for c in name) or name in {'.', '..'}:
        msg = f'{kind} "{name}" may only contain letters, digits, ".", "_" and "-"'
        raise InvalidIdentifierError(msg)
    return name


def read_ref(ref_file: Path) -> Ref | None:
    """Read a reference file.

    :param ref_file: The path to the ref file.
    :return: A SymRef for ``ref: <branch>`` lines, a HashRef for commit ids, or None for an empty file.
    :raises RefError: If the content is neither.
    :raises IOFailureError: If the file cannot be read."""
    with wrap_os_errors(ref_file):
        content = ref_file.read_text(encoding='utf-8').strip()

    if not content:
        return None
    if content.startswith(HEAD_PREFIX):
        branch = content[len(HEAD_PREFIX):].strip()
        if not branch:
            msg = f'Empty symbolic reference in {ref_file}'
            raise RefError(msg)
        return SymRef(branch)
    if is_hash(content):
        return HashRef(content)

    msg = f'Invalid reference format in {ref_file}: {content!r}'
    raise RefError(msg)


def write_ref(ref_file: Path, ref: Ref | None) -> None:
    """Atomically write a reference file.

    :param ref_file: The path to the ref file.
    :param ref: The reference to store. None stores an empty ref (a branch without commits).
    :raises RefError: If `ref` is of an unsupported type.
    :raises IOFailureError: If the file cannot be written."""
    match ref:
        case SymRef():
            content = f'{HEAD_PREFIX} {ref}\n'
        case HashRef():
            content = f'{ref}\n'
        case None:
            content = '\n'
        case _:
            msg = f'Invalid reference type: {type(ref)}'
            raise RefError(msg)

    atomic_write(ref_file, content)

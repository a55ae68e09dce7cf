"""Content-addressed object storage.

Blobs and commits share one flat namespace, ``objects/<sha256-hex>``. An object is written at most once:
if a file with the computed id already exists the write is skipped and the existing id returned."""

import hashlib
import logging
from pathlib import Path
from typing import BinaryIO

from ._atomic import atomic_write
from .errors import CommitNotFoundError, CorruptObjectError, NotFoundError, wrap_os_errors
from .objects import Blob, Commit
from .ref import HashRef, is_hash

logger = logging.getLogger(__name__)


_CHUNK_SIZE = 1 << 16


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_string(text: str) -> str:
    return hash_bytes(text.encode('utf-8'))


def hash_file(path: Path) -> str:
    """Compute the SHA-256 digest of a file without loading it whole.

    :param path: The file to hash.
    :return: The hex digest.
    :raises IOFailureError: If the file cannot be read."""
    digest = hashlib.sha256()
    with wrap_os_errors(path), path.open('rb') as handle:
        while chunk := handle.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def get_content_path(objects_dir: Path, content_hash: str) -> Path:
    return objects_dir / content_hash


def object_exists(objects_dir: Path, content_hash: str) -> bool:
    return is_hash(content_hash) and get_content_path(objects_dir, content_hash).is_file()


def _write_object(path: Path, data: bytes) -> None:
    atomic_write(path, data)


def save_blob(objects_dir: Path, data: bytes) -> Blob:
    """Store bytes as a blob.

    :param objects_dir: The objects directory of the repository.
    :param data: The blob content.
    :return: The stored Blob.
    :raises IOFailureError: If the object cannot be written."""
    blob_hash = HashRef(hash_bytes(data))
    path = get_content_path(objects_dir, blob_hash)
    if path.exists():
        logger.debug('Blob %s already stored', blob_hash)
    else:
        _write_object(path, data)
    return Blob(blob_hash, len(data))


def save_file_content(objects_dir: Path, file: Path) -> Blob:
    """Store the content of a file as a blob.

    :param objects_dir: The objects directory of the repository.
    :param file: The file to store.
    :return: The stored Blob.
    :raises ValueError: If the file does not exist.
    :raises IOFailureError: If the file cannot be read or the object cannot be written."""
    if not file.is_file():
        msg = f'File {file} does not exist'
        raise ValueError(msg)

    blob_hash = HashRef(hash_file(file))
    if get_content_path(objects_dir, blob_hash).exists():
        logger.debug('Blob %s already stored', blob_hash)
        with wrap_os_errors(file):
            return Blob(blob_hash, file.stat().st_size)

    with wrap_os_errors(file):
        data = file.read_bytes()
    return save_blob(objects_dir, data)


def save_commit(objects_dir: Path, commit: Commit) -> HashRef:
    """Store a commit object.

    :param objects_dir: The objects directory of the repository.
    :param commit: The commit to store.
    :return: The commit id.
    :raises IOFailureError: If the object cannot be written."""
    commit_ref = commit.id
    path = get_content_path(objects_dir, commit_ref)
    if path.exists():
        logger.debug('Commit %s already stored', commit_ref)
    else:
        _write_object(path, commit.to_object().encode('utf-8'))
    return commit_ref


def open_content_for_reading(objects_dir: Path, content_hash: str) -> BinaryIO:
    """Open a stored object for binary reading.

    :raises NotFoundError: If no object has that id."""
    path = get_content_path(objects_dir, content_hash)
    if not is_hash(content_hash) or not path.is_file():
        msg = f'Object {content_hash} not found'
        raise NotFoundError(msg)

    with wrap_os_errors(path):
        return path.open('rb')


def load_blob(objects_dir: Path, blob_hash: str) -> bytes:
    """Read a blob's bytes.

    :raises NotFoundError: If no object has that id."""
    with open_content_for_reading(objects_dir, blob_hash) as handle:
        return handle.read()


def load_commit(objects_dir: Path, commit_hash: str) -> Commit:
    """Load and verify a commit object.

    :param objects_dir: The objects directory of the repository.
    :param commit_hash: The commit id.
    :return: The commit.
    :raises CommitNotFoundError: If no object has that id.
    :raises CorruptObjectError: If the object is not a valid commit."""
    path = get_content_path(objects_dir, commit_hash)
    if not is_hash(commit_hash) or not path.is_file():
        msg = f'Commit {commit_hash} not found'
        raise CommitNotFoundError(msg)

    with wrap_os_errors(path):
        raw = path.read_bytes()

    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        msg = f'Object {commit_hash} is not a commit'
        raise CorruptObjectError(msg) from e

    return Commit.from_object(text, commit_hash)

from pathlib import Path

from libgitlite import plumbing
from libgitlite.errors import CommitNotFoundError, CorruptObjectError, NotFoundError
from libgitlite.objects import Commit, IndexEntry
from libgitlite.plumbing import (get_content_path, hash_bytes, hash_file, hash_string, load_blob, load_commit,
                                 object_exists, open_content_for_reading, save_blob, save_commit, save_file_content)
from libgitlite.ref import HashRef
from pytest import MonkeyPatch, mark, raises

EMPTY_SHA256 = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
ABC_SHA256 = 'ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad'


def _sample_commit(**overrides: object) -> Commit:
    fields = {
        'author': 'alice',
        'timestamp': '2024-05-01T13:37:00',
        'branch': 'main',
        'parent': None,
        'message': 'Initial commit',
        'files': (IndexEntry('a.txt', HashRef(ABC_SHA256)),),
    }
    fields.update(overrides)
    return Commit(**fields)


def test_hash_bytes_is_sha256() -> None:
    assert hash_bytes(b'') == EMPTY_SHA256
    assert hash_bytes(b'abc') == ABC_SHA256
    assert hash_string('abc') == ABC_SHA256


def test_hash_file_matches_hash_bytes(tmp_path: Path) -> None:
    data = b'x' * 200_000
    file = tmp_path / 'big.bin'
    file.write_bytes(data)

    assert hash_file(file) == hash_bytes(data)


def test_save_blob_stores_content_under_its_hash(tmp_path: Path) -> None:
    blob = save_blob(tmp_path, b'abc')

    assert blob.hash == ABC_SHA256
    assert blob.size == 3
    assert get_content_path(tmp_path, blob.hash).read_bytes() == b'abc'
    assert load_blob(tmp_path, blob.hash) == b'abc'


def test_save_blob_twice_writes_once(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    writes: list[Path] = []
    real_write = plumbing._write_object

    def counting_write(path: Path, data: bytes) -> None:
        writes.append(path)
        real_write(path, data)

    monkeypatch.setattr(plumbing, '_write_object', counting_write)

    first = save_blob(tmp_path, b'same content')
    second = save_blob(tmp_path, b'same content')

    assert first == second
    assert len(writes) == 1


def test_save_commit_twice_writes_once(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    writes: list[Path] = []
    monkeypatch.setattr(plumbing, '_write_object', lambda path, data: writes.append(path))
    commit = _sample_commit()

    save_commit(tmp_path, commit)
    get_content_path(tmp_path, commit.id).write_text(commit.to_object())
    save_commit(tmp_path, commit)

    assert len(writes) == 1


def test_save_file_content_skips_stored_blobs(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    objects_dir = tmp_path / 'objects'
    objects_dir.mkdir()
    file = tmp_path / 'a.txt'
    file.write_bytes(b'abc')
    writes: list[Path] = []
    monkeypatch.setattr(plumbing, '_write_object', lambda path, data: writes.append(path))
    get_content_path(objects_dir, ABC_SHA256).write_bytes(b'abc')

    blob = save_file_content(objects_dir, file)

    assert blob.hash == ABC_SHA256
    assert blob.size == 3
    assert writes == []


def test_save_file_content_missing_file_raises_error(tmp_path: Path) -> None:
    with raises(ValueError):
        save_file_content(tmp_path, tmp_path / 'missing.txt')


def test_commit_roundtrip_through_store(tmp_path: Path) -> None:
    commit = _sample_commit()
    commit_ref = save_commit(tmp_path, commit)

    assert commit_ref == hash_string(commit.serialize())
    assert load_commit(tmp_path, commit_ref) == commit


def test_commit_object_layout() -> None:
    commit = _sample_commit()

    assert commit.to_object() == (f'id={commit.id}\n'
                                  'author=alice\n'
                                  'timestamp=2024-05-01T13:37:00\n'
                                  'branch=main\n'
                                  'parent=null\n'
                                  'message=Initial commit\n'
                                  'files:\n'
                                  f'a.txt\t{ABC_SHA256}\n')


def test_identical_commits_have_identical_ids() -> None:
    assert _sample_commit().id == _sample_commit().id


@mark.parametrize('field, value', [
    ('author', 'bob'),
    ('timestamp', '2024-05-01T13:37:01'),
    ('branch', 'dev'),
    ('parent', HashRef(EMPTY_SHA256)),
    ('message', 'Another message'),
    ('files', ()),
])
def test_changing_any_commit_field_changes_id(field: str, value: object) -> None:
    assert _sample_commit(**{field: value}).id != _sample_commit().id


def test_load_commit_missing_raises_error(tmp_path: Path) -> None:
    with raises(CommitNotFoundError):
        load_commit(tmp_path, EMPTY_SHA256)

    with raises(CommitNotFoundError):
        load_commit(tmp_path, '../etc/passwd')


def test_load_commit_tampered_object_raises_error(tmp_path: Path) -> None:
    commit_ref = save_commit(tmp_path, _sample_commit())
    path = get_content_path(tmp_path, commit_ref)
    path.write_text(path.read_text().replace('Initial commit', 'Tampered commit'))

    with raises(CorruptObjectError):
        load_commit(tmp_path, commit_ref)


def test_load_commit_on_blob_raises_error(tmp_path: Path) -> None:
    blob = save_blob(tmp_path, b'just some text\n')

    with raises(CorruptObjectError):
        load_commit(tmp_path, blob.hash)

    binary = save_blob(tmp_path, b'\xff\xfe\x00')
    with raises(CorruptObjectError):
        load_commit(tmp_path, binary.hash)


def test_object_exists(tmp_path: Path) -> None:
    blob = save_blob(tmp_path, b'abc')

    assert object_exists(tmp_path, blob.hash)
    assert not object_exists(tmp_path, EMPTY_SHA256)
    assert not object_exists(tmp_path, 'not-a-hash')


def test_open_content_for_reading_missing_raises_error(tmp_path: Path) -> None:
    with raises(NotFoundError):
        open_content_for_reading(tmp_path, EMPTY_SHA256)

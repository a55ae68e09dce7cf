from pathlib import Path
from shutil import rmtree

from libgitlite.errors import AlreadyExistsError, RemoteNotFoundError, RepositoryNotFoundError
from libgitlite.repository import Repository
from libgitlite.sync import RefChange, clone, diff_refs, pull, push, snapshot_refs
from pytest import raises


def _commit_file(repo: Repository, name: str, text: str) -> str:
    (repo.workspace_dir() / name).write_text(text)
    repo.add_file(name)
    return repo.commit('alice', f'Add {name}').id


def _tree_bytes(root: Path) -> dict[str, bytes]:
    return {str(path.relative_to(root)): path.read_bytes() for path in sorted(root.rglob('*')) if path.is_file()}


def test_push_mirrors_repository(temp_repo: Repository, tmp_path: Path) -> None:
    _commit_file(temp_repo, 'a.txt', 'alpha\n')
    temp_repo.create_tag('v1')
    remote = tmp_path / 'remote'

    report = push(temp_repo.root, remote)

    assert _tree_bytes(remote) == _tree_bytes(temp_repo.root)
    assert {change.ref for change in report.create} == {'HEAD', 'heads/main', 'tags/v1'}
    assert report.update == [] and report.delete == []


def test_push_replaces_existing_remote(temp_repo: Repository, tmp_path: Path) -> None:
    remote = tmp_path / 'remote'
    remote.mkdir()
    (remote / 'stale.txt').write_text('left over')

    push(temp_repo.root, remote)

    assert not (remote / 'stale.txt').exists()
    assert (remote / 'HEAD').exists()


def test_push_then_pull_roundtrip(temp_repo: Repository, tmp_path: Path) -> None:
    _commit_file(temp_repo, 'a.txt', 'alpha\n')
    temp_repo.create_branch('dev')
    _commit_file(temp_repo, 'b.txt', 'beta\n')
    remote = tmp_path / 'remote'
    push(temp_repo.root, remote)

    rmtree(temp_repo.workspace_dir())
    temp_repo.workspace_dir().mkdir()
    (temp_repo.workspace_dir() / 'junk.txt').write_text('not in the mirror')
    temp_repo.update_branch_head('dev', None)

    report = pull(temp_repo.root, remote)

    assert _tree_bytes(temp_repo.root) == _tree_bytes(remote)
    assert snapshot_refs(temp_repo.root) == snapshot_refs(remote)
    assert [change.ref for change in report.update] == ['heads/dev']


def test_pull_overwrites_divergent_local_history(temp_repo: Repository, tmp_path: Path) -> None:
    mirrored = _commit_file(temp_repo, 'a.txt', 'alpha\n')
    remote = tmp_path / 'remote'
    push(temp_repo.root, remote)
    _commit_file(temp_repo, 'local.txt', 'local only\n')

    pull(temp_repo.root, remote)

    assert temp_repo.head_commit() == mirrored
    assert not (temp_repo.workspace_dir() / 'local.txt').exists()


def test_dry_run_changes_nothing(temp_repo: Repository, tmp_path: Path) -> None:
    _commit_file(temp_repo, 'a.txt', 'alpha\n')
    remote = tmp_path / 'remote'

    report = push(temp_repo.root, remote, dry_run=True)

    assert not remote.exists()
    assert report.total == 2
    assert not report.in_sync


def test_pull_missing_remote_raises_error(temp_repo: Repository, tmp_path: Path) -> None:
    with raises(RemoteNotFoundError):
        pull(temp_repo.root, tmp_path / 'missing')


def test_push_uninitialized_repo_raises_error(tmp_path: Path) -> None:
    with raises(RepositoryNotFoundError):
        push(tmp_path / 'nothing', tmp_path / 'remote')


def test_push_and_pull_reject_overlapping_paths(temp_repo: Repository) -> None:
    commit_ref = _commit_file(temp_repo, 'a.txt', 'alpha\n')
    before = _tree_bytes(temp_repo.root)

    for remote in (temp_repo.root, temp_repo.workspace_dir() / 'mirror', temp_repo.root.parent):
        with raises(ValueError, match='overlaps'):
            push(temp_repo.root, remote)
    with raises(ValueError, match='overlaps'):
        pull(temp_repo.root, temp_repo.root)
    with raises(ValueError, match='overlaps'):
        pull(temp_repo.root, temp_repo.root / 'refs')

    assert temp_repo.exists()
    assert temp_repo.head_commit() == commit_ref
    assert _tree_bytes(temp_repo.root) == before


def test_push_requires_objects_directory(tmp_path: Path) -> None:
    root = tmp_path / 'half'
    root.mkdir()
    (root / 'HEAD').write_text('ref: main\n')

    with raises(RepositoryNotFoundError):
        push(root, tmp_path / 'remote')
    assert not Repository(root).exists()


def test_clone(temp_repo: Repository, tmp_path: Path) -> None:
    commit_ref = _commit_file(temp_repo, 'a.txt', 'alpha\n')
    dest = tmp_path / 'copy'

    clone(temp_repo.root, dest)
    copy = Repository(dest)

    assert copy.head_commit() == commit_ref
    assert (copy.workspace_dir() / 'a.txt').read_text() == 'alpha\n'

    with raises(AlreadyExistsError):
        clone(temp_repo.root, dest)


def test_diff_refs() -> None:
    report = diff_refs({'HEAD': 'ref: main', 'heads/main': 'a', 'heads/dev': 'b'},
                       {'HEAD': 'ref: main', 'heads/main': 'c', 'tags/v1': 'a'})

    assert report.create == [RefChange('heads/dev', src='b')]
    assert report.update == [RefChange('heads/main', src='a', dest='c')]
    assert report.delete == [RefChange('tags/v1', dest='a')]
    assert report.total == 3
    assert diff_refs({'HEAD': 'main'}, {'HEAD': 'main'}).in_sync

from libgitlite.access import Actor, OwnerAccessPolicy
from libgitlite.constants import ROLE_ADMIN
from libgitlite.errors import (AlreadyExistsError, InvalidIdentifierError, PermissionDeniedError,
                               RepositoryNotFoundError)
from libgitlite.storage import RepoStore
from libgitlite.sync import push
from pytest import raises


def test_create_and_open_repo(store: RepoStore) -> None:
    repo = store.create_repo('alice', 'demo')

    assert repo.root == store.root / 'alice' / 'demo'
    assert store.repo_exists('alice', 'demo')
    assert store.open('alice', 'demo').root == repo.root
    assert repo.config().owner == 'alice'


def test_create_existing_repo_raises_error(store: RepoStore) -> None:
    store.create_repo('alice', 'demo')

    with raises(AlreadyExistsError):
        store.create_repo('alice', 'demo')


def test_open_missing_repo_raises_error(store: RepoStore) -> None:
    with raises(RepositoryNotFoundError):
        store.open('alice', 'missing')


def test_invalid_names_are_rejected(store: RepoStore) -> None:
    with raises(InvalidIdentifierError):
        store.create_repo('alice', '../escape')
    with raises(InvalidIdentifierError):
        store.repo_path('bad owner', 'demo')


def test_listing_skips_remote_mirrors(store: RepoStore) -> None:
    store.create_repo('bob', 'tools')
    alice_demo = store.create_repo('alice', 'demo')
    store.create_repo('alice', 'api')
    push(alice_demo.root, store.remote_path('alice', 'demo'))

    assert store.list_user_repos('alice') == ['api', 'demo']
    assert store.list_user_repos('nobody') == []
    assert store.list_all_repos() == [('alice', 'api'), ('alice', 'demo'), ('bob', 'tools')]


def test_delete_repo(store: RepoStore) -> None:
    store.create_repo('alice', 'demo')

    store.delete_repo('alice', 'demo')

    assert not store.repo_exists('alice', 'demo')
    with raises(RepositoryNotFoundError):
        store.delete_repo('alice', 'demo')


def test_visibility(store: RepoStore) -> None:
    store.create_repo('alice', 'demo')

    assert store.get_visibility('alice', 'demo') == 'private'
    assert not store.is_public('alice', 'demo')

    store.set_visibility('alice', 'demo', 'public')

    assert store.is_public('alice', 'demo')
    assert store.get_visibility('alice', 'missing') == 'private'


def test_fork_public_repo(store: RepoStore) -> None:
    source = store.create_repo('alice', 'demo', visibility='public')
    (source.workspace_dir() / 'a.txt').write_text('alpha\n')
    source.add_file('a.txt')
    commit = source.commit('alice', 'Add a')

    fork = store.fork('alice', 'demo', Actor('bob'))

    assert fork.root == store.root / 'bob' / 'demo-fork'
    assert fork.head_commit() == commit.id
    config = fork.config()
    assert (config.owner, config.name, config.visibility) == ('bob', 'demo-fork', 'private')
    assert config.extra['forked_from'] == 'alice/demo'
    assert source.config().owner == 'alice'


def test_fork_picks_next_free_name(store: RepoStore) -> None:
    store.create_repo('alice', 'demo', visibility='public')

    names = [store.fork('alice', 'demo', Actor('bob')).root.name for _ in range(3)]

    assert names == ['demo-fork', 'demo-fork1', 'demo-fork2']


def test_fork_private_repo_requires_owner_or_admin(store: RepoStore) -> None:
    store.create_repo('alice', 'demo')

    with raises(PermissionDeniedError):
        store.fork('alice', 'demo', Actor('bob'))

    assert store.fork('alice', 'demo', Actor('alice')).root.name == 'demo-fork'
    assert store.fork('alice', 'demo', Actor('root', ROLE_ADMIN)).root.parent.name == 'root'


def test_owner_access_policy(store: RepoStore) -> None:
    store.create_repo('alice', 'demo', visibility='public')
    policy = OwnerAccessPolicy(store)

    assert policy.can_write('alice', 'demo', Actor('alice'))
    assert policy.can_write('alice', 'demo', Actor('root', ROLE_ADMIN))
    assert not policy.can_write('alice', 'demo', Actor('bob'))
    assert policy.is_public('alice', 'demo')

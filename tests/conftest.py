from pathlib import Path

from click.testing import CliRunner
from libgitlite.repository import Repository
from libgitlite.storage import RepoStore
from pytest import fixture


@fixture
def temp_repo_dir(tmp_path: Path) -> Path:
    return tmp_path / 'repo'


@fixture
def temp_repo(temp_repo_dir: Path) -> Repository:
    repo = Repository(temp_repo_dir)
    repo.init('alice', 'demo')
    return repo


@fixture
def store(tmp_path: Path) -> RepoStore:
    return RepoStore(tmp_path / 'store')


@fixture
def runner() -> CliRunner:
    return CliRunner()

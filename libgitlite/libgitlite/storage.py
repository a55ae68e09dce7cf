"""Where repositories live: ``<root>/<owner>/<name>``, with mirrors under ``<root>/_remotes``."""

import logging
from pathlib import Path

from .access import Actor
from .constants import DEFAULT_VISIBILITY, FORK_SUFFIX, MAX_FORK_ATTEMPTS, REMOTES_DIR, VISIBILITY_PUBLIC
from .config import write_config
from .errors import (AlreadyExistsError, PermissionDeniedError, RepositoryError, RepositoryNotFoundError,
                     wrap_os_errors)
from .ref import validate_identifier
from .repository import Repository
from .sync import pull

logger = logging.getLogger(__name__)


class RepoStore:
    """A directory of repositories keyed by (owner, name)."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def repo_path(self, owner: str, name: str) -> Path:
        return self.root / validate_identifier(owner, 'Owner') / validate_identifier(name, 'Repository name')

    def remote_path(self, owner: str, name: str) -> Path:
        """The mirror location that push and pull use for (owner, name)."""
        return (self.root / REMOTES_DIR / validate_identifier(owner, 'Owner')
                / validate_identifier(name, 'Repository name'))

    def repo_exists(self, owner: str, name: str) -> bool:
        return self.repo_path(owner, name).exists()

    def open(self, owner: str, name: str) -> Repository:
        """Get a handle on an existing repository.

        :raises RepositoryNotFoundError: If there is no repository for (owner, name)."""
        repo = Repository(self.repo_path(owner, name))
        if not repo.exists():
            msg = f'Repository {owner}/{name} not found'
            raise RepositoryNotFoundError(msg)
        return repo

    def create_repo(self, owner: str, name: str, visibility: str = DEFAULT_VISIBILITY) -> Repository:
        """Create and scaffold a new repository.

        :raises AlreadyExistsError: If (owner, name) is taken."""
        path = self.repo_path(owner, name)
        if path.exists():
            msg = f'Repository {owner}/{name} already exists'
            raise AlreadyExistsError(msg)

        repo = Repository(path)
        repo.init(owner, name, visibility)
        return repo

    def delete_repo(self, owner: str, name: str) -> None:
        self.open(owner, name).delete_repo()

    def list_user_repos(self, owner: str) -> list[str]:
        user_dir = self.root / validate_identifier(owner, 'Owner')
        if not user_dir.is_dir():
            return []
        return sorted(entry.name for entry in user_dir.iterdir() if entry.is_dir())

    def list_all_repos(self) -> list[tuple[str, str]]:
        """List every (owner, name) pair, skipping directories that start with ``_``."""
        if not self.root.is_dir():
            return []

        repos = []
        for user_dir in self.root.iterdir():
            if not user_dir.is_dir() or user_dir.name.startswith('_'):
                continue
            repos.extend((user_dir.name, entry.name) for entry in user_dir.iterdir() if entry.is_dir())
        return sorted(repos)

    def get_visibility(self, owner: str, name: str) -> str:
        path = self.repo_path(owner, name)
        if not path.exists():
            return DEFAULT_VISIBILITY
        return Repository(path).config().visibility

    def set_visibility(self, owner: str, name: str, visibility: str) -> None:
        self.open(owner, name).set_visibility(visibility)

    def is_public(self, owner: str, name: str) -> bool:
        return self.get_visibility(owner, name) == VISIBILITY_PUBLIC

    def fork(self, owner: str, name: str, actor: Actor) -> Repository:
        """Copy a repository into the actor's namespace as ``<name>-fork`` (or ``<name>-fork<N>`` if taken).

        The copy's config is rewritten to name the actor as owner and starts out private.

        :raises RepositoryNotFoundError: If the source does not exist.
        :raises PermissionDeniedError: If the source is private and the actor is neither its owner nor an admin.
        :raises RepositoryError: If no free fork name is found."""
        source = self.open(owner, name)
        if not self.is_public(owner, name) and not (actor.is_admin or actor.username == owner):
            msg = f'Repository {owner}/{name} is private'
            raise PermissionDeniedError(msg)

        candidates = [f'{name}{FORK_SUFFIX}'] + [f'{name}{FORK_SUFFIX}{i}' for i in range(1, MAX_FORK_ATTEMPTS + 1)]
        fork_name = next((c for c in candidates if not self.repo_exists(actor.username, c)), None)
        if fork_name is None:
            msg = f'Could not find a free fork name for {owner}/{name}'
            raise RepositoryError(msg)

        dest = self.repo_path(actor.username, fork_name)
        with wrap_os_errors(dest):
            dest.parent.mkdir(parents=True, exist_ok=True)
        pull(dest, source.root)

        fork = Repository(dest)
        config = fork.config()
        config.owner, config.name, config.visibility = actor.username, fork_name, DEFAULT_VISIBILITY
        config.extra['forked_from'] = f'{owner}/{name}'
        write_config(fork.config_file(), config)

        logger.info('Forked %s/%s to %s/%s', owner, name, actor.username, fork_name)
        return fork

"""Who is acting, and what they may do.

Accounts, password checks and collaborator lists live outside libgitlite. The engine only sees an
:class:`Actor` and asks an :class:`AccessPolicy` two questions."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from .constants import ROLE_ADMIN, ROLE_USER

if TYPE_CHECKING:
    from .storage import RepoStore


@dataclass(frozen=True)
class Actor:
    username: str
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class AccessPolicy(Protocol):
    def can_write(self, owner: str, name: str, actor: Actor) -> bool: ...

    def is_public(self, owner: str, name: str) -> bool: ...


class OwnerAccessPolicy:
    """Owners and admins may write; anyone may read a public repository."""

    def __init__(self, store: 'RepoStore') -> None:
        self.store = store

    def can_write(self, owner: str, name: str, actor: Actor) -> bool:
        return actor.is_admin or actor.username == owner

    def is_public(self, owner: str, name: str) -> bool:
        return self.store.is_public(owner, name)

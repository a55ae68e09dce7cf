"""Requests a front end can make of a repository, and the single entry point that runs them.

Front ends parse their input into one of the request types below and hand it to :func:`execute` together
with the acting user. Parsing stays out of the engine; permission checks stay out of the front ends."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

from .access import AccessPolicy, Actor
from .constants import DEFAULT_HISTORY_LIMIT
from .errors import PermissionDeniedError
from .merge import ThreeWayMerge
from .repository import Repository
from .sync import pull, push

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    path: str


@dataclass(frozen=True)
class Unstage:
    path: str


@dataclass(frozen=True)
class Remove:
    path: str


@dataclass(frozen=True)
class Status:
    pass


@dataclass(frozen=True)
class CommitChanges:
    message: str


@dataclass(frozen=True)
class History:
    branch: str | None = None
    limit: int = DEFAULT_HISTORY_LIMIT


@dataclass(frozen=True)
class Show:
    commit_id: str


@dataclass(frozen=True)
class Revert:
    commit_id: str


@dataclass(frozen=True)
class Checkout:
    branch: str
    create: bool = False


@dataclass(frozen=True)
class CreateBranch:
    name: str


@dataclass(frozen=True)
class RenameBranch:
    old_name: str
    new_name: str


@dataclass(frozen=True)
class DeleteBranch:
    name: str


@dataclass(frozen=True)
class ListBranches:
    pass


@dataclass(frozen=True)
class Merge:
    branch: str
    three_way: bool = False


@dataclass(frozen=True)
class Rebase:
    branch: str


@dataclass(frozen=True)
class CreateTag:
    name: str


@dataclass(frozen=True)
class ListTags:
    pass


@dataclass(frozen=True)
class Ignore:
    pattern: str


@dataclass(frozen=True)
class Push:
    remote: Path


@dataclass(frozen=True)
class Pull:
    remote: Path


Request: TypeAlias = (Stage | Unstage | Remove | Status | CommitChanges | History | Show | Revert | Checkout
                | CreateBranch | RenameBranch | DeleteBranch | ListBranches | Merge | Rebase | CreateTag | ListTags
                | Ignore | Push | Pull)

READ_REQUESTS = (Status, History, Show, ListBranches, ListTags)


def authorize(repo: Repository, actor: Actor, request: Request, policy: AccessPolicy) -> None:
    """Check that `actor` may run `request` against `repo`.

    Reads and pulls need write access or a public repository; everything else needs write access.

    :raises PermissionDeniedError: If the policy refuses."""
    config = repo.config()
    if policy.can_write(config.owner, config.name, actor):
        return
    if isinstance(request, (*READ_REQUESTS, Pull)) and policy.is_public(config.owner, config.name):
        return

    msg = f'{actor.username} may not {type(request).__name__.lower()} in {config.owner}/{config.name}'
    raise PermissionDeniedError(msg)


def execute(repo: Repository, actor: Actor, request: Request, policy: AccessPolicy | None = None) -> Any:
    """Run one request against a repository on behalf of `actor`.

    :param repo: The repository to operate on.
    :param actor: Who is asking. Commits and reverts are authored by ``actor.username``.
    :param request: What to do.
    :param policy: The access policy to enforce. None skips permission checks.
    :return: Whatever the underlying operation returns.
    :raises PermissionDeniedError: If the policy refuses the request.
    :raises TypeError: If `request` is not a known request type."""
    if policy is not None:
        authorize(repo, actor, request, policy)

    logger.debug('%s runs %r on %s', actor.username, request, repo.root)
    match request:
        case Stage(path):
            return repo.add_file(path)
        case Unstage(path):
            return repo.reset_file(path)
        case Remove(path):
            return repo.remove_file(path)
        case Status():
            return repo.status()
        case CommitChanges(message):
            return repo.commit(actor.username, message)
        case History(branch, limit):
            return repo.history(branch, limit)
        case Show(commit_id):
            return repo.get_commit(commit_id)
        case Revert(commit_id):
            return repo.revert_commit(commit_id, actor.username)
        case Checkout(branch, create=True):
            return repo.switch_or_create(branch)
        case Checkout(branch):
            return repo.set_current_branch(branch)
        case CreateBranch(name):
            return repo.create_branch(name)
        case RenameBranch(old_name, new_name):
            return repo.rename_branch(old_name, new_name)
        case DeleteBranch(name):
            return repo.delete_branch(name)
        case ListBranches():
            return repo.list_branches_with_head()
        case Merge(branch, three_way):
            return repo.merge(branch, ThreeWayMerge() if three_way else None)
        case Rebase(branch):
            return repo.rebase(branch)
        case CreateTag(name):
            return repo.create_tag(name)
        case ListTags():
            return repo.list_tags()
        case Ignore(pattern):
            return repo.add_ignore_pattern(pattern)
        case Push(remote):
            return push(repo.root, remote)
        case Pull(remote):
            return pull(repo.root, remote)
        case _:
            msg = f'Unknown request: {request!r}'
            raise TypeError(msg)

"""Command-line front end: ``gitlite``.

Quick start:
  gitlite init -r demo
  echo hello > demo/workspace/a.txt
  gitlite -r demo add a.txt
  gitlite -r demo commit -m "first"
  gitlite -r demo log
"""

import getpass
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from .access import Actor
from .commands import (Checkout, CommitChanges, CreateBranch, CreateTag, DeleteBranch, History, Ignore, ListBranches,
                       ListTags, Merge, Pull, Push, Rebase, RenameBranch, Request, Remove, Revert, Show, Stage, Status,
                       Unstage, execute)
from .constants import DEFAULT_BRANCH, DEFAULT_HISTORY_LIMIT, DEFAULT_VISIBILITY, VISIBILITY_PRIVATE, VISIBILITY_PUBLIC
from .errors import RepositoryError
from .objects import Commit
from .repository import Repository
from .sync import clone as clone_repo


def _default_user() -> str:
    try:
        return getpass.getuser()
    except OSError:
        return 'anonymous'


def _repo(ctx: click.Context) -> Repository:
    return Repository(ctx.obj['repo_path'])


def _actor(ctx: click.Context) -> Actor:
    return Actor(ctx.obj['user'])


def _run(ctx: click.Context, request: Request) -> Any:
    """Execute a request against the selected repository, turning library errors into click errors."""
    try:
        return execute(_repo(ctx), _actor(ctx), request)
    except (RepositoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def _short(commit_id: str | None) -> str:
    return commit_id[:12] if commit_id else '(no commits)'


def _echo_commit(commit: Commit, *, with_files: bool = False) -> None:
    click.echo(f'commit {commit.id}')
    click.echo(f'Author: {commit.author}')
    click.echo(f'Date:   {commit.timestamp}')
    click.echo(f'Branch: {commit.branch}')
    if commit.parent:
        click.echo(f'Parent: {commit.parent}')
    click.echo()
    click.echo(f'    {commit.message}')
    if with_files:
        click.echo()
        for path, blob in commit.files:
            click.echo(f'{blob[:12]}  {path}')


@click.group()
@click.option('--repo', '-r', 'repo_path', type=click.Path(file_okay=False), envvar='GITLITE_REPO', default='.',
              show_default=True, help='Repository root (or set GITLITE_REPO).')
@click.option('--user', '-u', envvar='GITLITE_USER', default=_default_user,
              help='Acting user (or set GITLITE_USER). Defaults to the login name.')
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr.')
@click.pass_context
def main(ctx: click.Context, repo_path: str, user: str, verbose: bool) -> None:
    """gitlite: a small content-addressed version control system."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    ctx.ensure_object(dict)
    ctx.obj['repo_path'] = Path(repo_path)
    ctx.obj['user'] = user


@main.command()
@click.option('--name', help='Repository name. Defaults to the directory name.')
@click.option('--branch', '-b', default=DEFAULT_BRANCH, show_default=True, help='Initial branch.')
@click.option('--visibility', type=click.Choice([VISIBILITY_PRIVATE, VISIBILITY_PUBLIC]), default=DEFAULT_VISIBILITY,
              show_default=True)
@click.pass_context
def init(ctx: click.Context, name: str | None, branch: str, visibility: str) -> None:
    """Create an empty repository at --repo."""
    repo = _repo(ctx)
    try:
        repo.init(ctx.obj['user'], name or repo.root.resolve().name, visibility, branch)
    except (RepositoryError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f'Initialized empty repository in {repo.root}')


@main.command()
@click.argument('paths', nargs=-1, required=True)
@click.pass_context
def add(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Stage workspace files."""
    for path in paths:
        entry = _run(ctx, Stage(path))
        click.echo(f'staged {entry.path} ({_short(entry.blob)})')


@main.command()
@click.argument('paths', nargs=-1, required=True)
@click.pass_context
def rm(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Unstage files and delete them from the workspace."""
    for path in paths:
        entry = _run(ctx, Remove(path))
        click.echo(f'removed {entry.path}')


@main.command()
@click.argument('paths', nargs=-1, required=True)
@click.pass_context
def reset(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Unstage files, keeping them in the workspace."""
    for path in paths:
        entry = _run(ctx, Unstage(path))
        click.echo(f'unstaged {entry.path}')


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show staged files compared with the current branch head."""
    changes = _run(ctx, Status())
    if not changes:
        click.echo('nothing staged')
    for change in changes:
        click.echo(f'{change.kind:<10}{change.path}')


@main.command()
@click.option('--message', '-m', required=True, help='Commit message.')
@click.pass_context
def commit(ctx: click.Context, message: str) -> None:
    """Commit the staged files to the current branch."""
    created = _run(ctx, CommitChanges(message))
    click.echo(f'[{created.branch} {_short(created.id)}] {created.message}')


@main.command()
@click.option('--branch', '-b', help='Branch to walk. Defaults to the current branch.')
@click.option('--limit', '-n', type=click.IntRange(min=0), default=DEFAULT_HISTORY_LIMIT, show_default=True)
@click.pass_context
def log(ctx: click.Context, branch: str | None, limit: int) -> None:
    """Show commit history, newest first."""
    for index, entry in enumerate(_run(ctx, History(branch, limit))):
        if index:
            click.echo()
        _echo_commit(entry)


@main.command()
@click.argument('commit_id')
@click.pass_context
def show(ctx: click.Context, commit_id: str) -> None:
    """Show a commit and its files."""
    _echo_commit(_run(ctx, Show(commit_id)), with_files=True)


@main.command()
@click.argument('commit_id')
@click.pass_context
def revert(ctx: click.Context, commit_id: str) -> None:
    """Commit the snapshot that preceded COMMIT_ID."""
    created = _run(ctx, Revert(commit_id))
    click.echo(f'[{created.branch} {_short(created.id)}] {created.message}')


@main.command()
@click.argument('name', required=False)
@click.pass_context
def branch(ctx: click.Context, name: str | None) -> None:
    """List branches, or create branch NAME at the current head."""
    if name is not None:
        head = _run(ctx, CreateBranch(name))
        click.echo(f'created branch {name} at {_short(head)}')
        return

    try:
        current = _repo(ctx).current_branch()
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc
    for branch_name, head in _run(ctx, ListBranches()):
        marker = '*' if branch_name == current else ' '
        click.echo(f'{marker} {branch_name:<20} {_short(head)}')


@main.command()
@click.argument('name')
@click.option('-b', 'create', is_flag=True, help='Create the branch if it does not exist.')
@click.pass_context
def checkout(ctx: click.Context, name: str, create: bool) -> None:
    """Switch HEAD to branch NAME."""
    created = _run(ctx, Checkout(name, create))
    click.echo(f"Switched to {'a new ' if created else ''}branch '{name}'")


@main.command('rename-branch')
@click.argument('old_name')
@click.argument('new_name')
@click.pass_context
def rename_branch(ctx: click.Context, old_name: str, new_name: str) -> None:
    """Rename branch OLD_NAME to NEW_NAME."""
    _run(ctx, RenameBranch(old_name, new_name))
    click.echo(f'renamed branch {old_name} to {new_name}')


@main.command('delete-branch')
@click.argument('name')
@click.pass_context
def delete_branch(ctx: click.Context, name: str) -> None:
    """Delete branch NAME."""
    _run(ctx, DeleteBranch(name))
    click.echo(f'deleted branch {name}')


@main.command()
@click.argument('source')
@click.option('--three-way', is_flag=True, help='Merge file contents against the common ancestor.')
@click.pass_context
def merge(ctx: click.Context, source: str, three_way: bool) -> None:
    """Merge branch SOURCE into the current branch."""
    outcome = _run(ctx, Merge(source, three_way))
    click.echo(f'[{outcome.commit.branch} {_short(outcome.commit.id)}] {outcome.commit.message}')
    for path in outcome.conflicts:
        click.echo(f'CONFLICT {path}', err=True)


@main.command()
@click.argument('source')
@click.pass_context
def rebase(ctx: click.Context, source: str) -> None:
    """Move the current branch head to SOURCE's head."""
    head = _run(ctx, Rebase(source))
    click.echo(f'head is now {_short(head)}')


@main.command()
@click.argument('name', required=False)
@click.pass_context
def tag(ctx: click.Context, name: str | None) -> None:
    """List tags, or tag the current head as NAME."""
    if name is not None:
        created = _run(ctx, CreateTag(name))
        click.echo(f'tagged {_short(created.target)} as {created.name}')
        return

    for entry in _run(ctx, ListTags()):
        click.echo(f'{entry.name:<20} {_short(entry.target)}')


@main.command()
@click.argument('pattern')
@click.pass_context
def ignore(ctx: click.Context, pattern: str) -> None:
    """Add PATTERN to the ignore file."""
    _run(ctx, Ignore(pattern))
    click.echo(f'ignoring {pattern}')


F = TypeVar('F', bound=Callable[..., Any])


def _remote_option(f: F) -> F:
    return click.option('--remote', type=click.Path(file_okay=False, path_type=Path), envvar='GITLITE_REMOTE',
                        required=True, help='Mirror directory (or set GITLITE_REMOTE).')(f)


@main.command()
@_remote_option
@click.pass_context
def push(ctx: click.Context, remote: Path) -> None:
    """Replace the mirror at --remote with this repository."""
    report = _run(ctx, Push(remote))
    click.echo(f'pushed to {remote} ({report.total} ref changes)')


@main.command()
@_remote_option
@click.pass_context
def pull(ctx: click.Context, remote: Path) -> None:
    """Overwrite this repository with the mirror at --remote."""
    report = _run(ctx, Pull(remote))
    click.echo(f'pulled from {remote} ({report.total} ref changes)')


@main.command()
@click.argument('source', type=click.Path(file_okay=False, path_type=Path))
@click.argument('dest', type=click.Path(file_okay=False, path_type=Path))
def clone(source: Path, dest: Path) -> None:
    """Copy the repository at SOURCE into the new directory DEST."""
    try:
        clone_repo(source, dest)
    except RepositoryError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f'Cloned {source} into {dest}')

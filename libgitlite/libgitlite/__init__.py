"""libgitlite: a small content-addressed version control engine."""

from .access import AccessPolicy, Actor, OwnerAccessPolicy
from .errors import RepositoryError
from .merge import ThreeWayMerge, TakeTheirsMerge
from .objects import Blob, Commit, IndexEntry, LogRecord, Tag
from .repository import MergeOutcome, Repository, StagedChange
from .storage import RepoStore
from .sync import SyncReport, clone, pull, push

__all__ = [
    'AccessPolicy',
    'Actor',
    'Blob',
    'Commit',
    'IndexEntry',
    'LogRecord',
    'MergeOutcome',
    'OwnerAccessPolicy',
    'RepoStore',
    'Repository',
    'RepositoryError',
    'StagedChange',
    'SyncReport',
    'Tag',
    'TakeTheirsMerge',
    'ThreeWayMerge',
    'clone',
    'pull',
    'push',
]

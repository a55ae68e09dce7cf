"""Names and limits shared across libgitlite."""

import string

DEFAULT_BRANCH = 'main'
DEFAULT_VISIBILITY = 'private'
DEFAULT_HISTORY_LIMIT = 50

OBJECTS_SUBDIR = 'objects'
REFS_DIR = 'refs'
HEADS_DIR = 'heads'
TAGS_DIR = 'tags'
HEAD_FILE = 'HEAD'
INDEX_FILE = 'index'
LOG_FILE = 'log'
CONFIG_FILE = 'config'
IGNORE_FILE = '.gliteignore'
WORKSPACE_DIR = 'workspace'

REMOTES_DIR = '_remotes'
FORK_SUFFIX = '-fork'
MAX_FORK_ATTEMPTS = 100

# Everything a mirror carries, in copy order.
MIRRORED_ENTRIES = (OBJECTS_SUBDIR, REFS_DIR, HEAD_FILE, INDEX_FILE, LOG_FILE, CONFIG_FILE, IGNORE_FILE,
                    WORKSPACE_DIR)

HASH_LENGTH = 64
HASH_CHARSET = '0123456789abcdef'

IDENTIFIER_CHARSET = frozenset(string.ascii_letters + string.digits + '._-')

HEAD_PREFIX = 'ref:'
NULL_PARENT = 'null'
FILES_MARKER = 'files:'
TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S'

MERGE_AUTHOR = 'merge'
REVERT_PREFIX = 'Revert: '

VISIBILITY_PUBLIC = 'public'
VISIBILITY_PRIVATE = 'private'
ROLE_ADMIN = 'admin'
ROLE_USER = 'user'

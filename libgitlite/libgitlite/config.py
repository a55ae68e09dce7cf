"""The per-repository ``config`` file: ``key=value`` lines."""

from dataclasses import dataclass, field
from pathlib import Path

from ._atomic import atomic_write
from .constants import DEFAULT_VISIBILITY
from .errors import wrap_os_errors

_KNOWN_KEYS = ('name', 'owner', 'visibility', 'created')


def parse_key_value(text: str) -> dict[str, str]:
    """Parse ``key=value`` lines, skipping blank and malformed lines. Later keys win."""
    values: dict[str, str] = {}
    for line in text.split('\n'):
        key, sep, value = line.partition('=')
        if sep and key:
            values[key] = value
    return values


def format_key_value(values: dict[str, str]) -> str:
    return ''.join(f'{key}={values[key]}\n' for key in sorted(values))


@dataclass
class RepoConfig:
    """Identity and visibility of a repository.

    Keys this class does not know about are kept in `extra` and written back unchanged."""

    name: str
    owner: str
    visibility: str = DEFAULT_VISIBILITY
    created: str = ''
    extra: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, str]:
        return {**self.extra, 'name': self.name, 'owner': self.owner, 'visibility': self.visibility,
                'created': self.created}

    @classmethod
    def from_dict(cls, values: dict[str, str]) -> 'RepoConfig':
        extra = {key: value for key, value in values.items() if key not in _KNOWN_KEYS}
        return cls(values.get('name', ''), values.get('owner', ''), values.get('visibility', DEFAULT_VISIBILITY),
                   values.get('created', ''), extra)


def read_config(config_file: Path) -> RepoConfig:
    """Read a repository config file.

    :param config_file: The path to the config file.
    :return: The config. A missing file reads as an anonymous private repository.
    :raises IOFailureError: If the file exists but cannot be read."""
    if not config_file.exists():
        return RepoConfig('', '')

    with wrap_os_errors(config_file):
        text = config_file.read_text(encoding='utf-8')
    return RepoConfig.from_dict(parse_key_value(text))


def write_config(config_file: Path, config: RepoConfig) -> None:
    atomic_write(config_file, format_key_value(config.to_dict()))

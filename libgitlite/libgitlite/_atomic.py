"""Whole-file replacement that never leaves a torn file behind."""

import os
import tempfile
from pathlib import Path

from .errors import wrap_os_errors


def atomic_write(path: Path, data: bytes | str) -> None:
    """Replace `path` with `data` by writing a sibling temp file and renaming it over the target.

    :param path: The file to replace. Its parent directory must exist.
    :param data: The new content. Strings are encoded as UTF-8.
    :raises IOFailureError: If the write or the rename fails."""
    if isinstance(data, str):
        data = data.encode('utf-8')

    with wrap_os_errors(path):
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f'.{path.name}.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

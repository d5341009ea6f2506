from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from pechkin.models import AttachmentCandidate
from pechkin.template import render_slot

logger = logging.getLogger(__name__)

COPY_FILE_MODE = 0o666


def resolve_candidate(attach_name: str, attach_file: str) -> AttachmentCandidate:
    """Pair the command-line file name with the configured attachment path.

    Without a file name the configured path is used literally.
    """
    path = render_slot(attach_file, attach_name) if attach_name else attach_file
    return AttachmentCandidate(name=attach_name, path=path)


def is_readable(path: str | Path) -> bool:
    try:
        with Path(path).open("rb"):
            return True
    except OSError as exc:
        logger.debug("file error %s", exc)
        return False


def is_smaller(path: str | Path, max_size: int) -> bool:
    try:
        size = Path(path).stat().st_size
    except OSError:
        return False

    if max_size == 0 or size < max_size:
        return True

    logger.debug("file size %d >= max_file_size %d", size, max_size)
    return False


def is_attachable(path: str | Path, max_size: int) -> bool:
    return is_readable(path) and is_smaller(path, max_size)


def copy_to_directory(source: str | Path, directory: str | Path) -> Path:
    """Copy ``source`` into ``directory`` keeping only its base name.

    The destination is created (or truncated) with a fixed permissive mode
    rather than the source's permission bits.
    """
    source_path = Path(source)
    target = Path(directory) / source_path.name

    with source_path.open("rb") as src:
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, COPY_FILE_MODE)
        with os.fdopen(fd, "wb") as dst:
            shutil.copyfileobj(src, dst)
    return target

# qsgen/writer.py
from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path

from qsgen.errors import EmissionError

logger = logging.getLogger(__name__)


def write_atomic(path: Path, content: str) -> None:
    """
    Write `content` to `path` so readers only ever see the old file or the
    complete new one: temp file in the same directory, fsync, os.replace.
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")
    if not directory.is_dir():
        raise EmissionError(f"output directory does not exist: {directory}")

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        logger.error("Writing %s failed: %s", str(path), e)
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise EmissionError(f"failed to write {path}: {e}") from e
    logger.debug("Wrote %s (%d bytes)", str(path), len(content.encode("utf-8")))

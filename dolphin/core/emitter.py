"""
File emitter for generated sources.

- Writes replace the target file wholesale (temp file + os.replace)
- Parent directories are created as needed
- Page directories are never overwritten (collision guard)
"""
import difflib
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dolphin.core.config import ProjectConfig
from dolphin.core.errors import CollisionError

logger = logging.getLogger(__name__)


@dataclass
class GeneratedFile:
    """A single generated file (path relative to the project root)."""
    path: str
    content: str

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


def write_file(path: Path, content: str) -> None:
    """
    Write content to path atomically, creating parent directories.

    An existing file keeps its permission bits; a new file gets the
    default mode under the process umask.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    logger.debug(f"file_written path={path} bytes={len(content.encode('utf-8'))}")


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def read_file(path: Path) -> Optional[str]:
    """Read a text file, or None if it does not exist."""
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def ensure_page_absent(config: ProjectConfig, name: str) -> Path:
    """Raise CollisionError if the page directory already exists."""
    page_dir = config.page_dir(name)
    if page_dir.exists():
        raise CollisionError(
            f'Page "{name}" already exists at {config.relative(page_dir)}'
        )
    return page_dir


def emit_files(config: ProjectConfig, files: list[GeneratedFile]) -> list[str]:
    """Write generated files under the project root, in order."""
    written = []
    for f in files:
        write_file(config.resolve(f.path), f.content)
        written.append(f.path)
    logger.info(f"files_emitted count={len(written)}")
    return written


# =============================================================================
# Diffs
# =============================================================================

def generate_unified_diff(path: str, original: Optional[str], modified: str) -> str:
    """Unified diff of one file; empty string when nothing changed."""
    if original == modified:
        return ""

    original_lines = (original or "").splitlines(keepends=True)
    modified_lines = modified.splitlines(keepends=True)

    if original_lines and not original_lines[-1].endswith("\n"):
        original_lines[-1] += "\n"
    if modified_lines and not modified_lines[-1].endswith("\n"):
        modified_lines[-1] += "\n"

    from_file = f"a/{path}" if original is not None else "/dev/null"
    return "".join(difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=from_file,
        tofile=f"b/{path}",
    ))

"""
Atomic file output shared by the PDF, SVG and DXF renderers.

Content is first written to a temporary file in the destination directory
and then moved over the final name with ``os.replace``. A failure leaves
nothing under the final name.

``staged_output`` does the same for a group of files: every file of one
export is written to its temporary name first, and none is moved into place
unless all of them were written.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple, Union

logger = logging.getLogger(__name__)


class ReportExportError(Exception):
    """Serializing or saving a report artifact failed."""


@contextmanager
def atomic_path(path: Union[str, Path]) -> Iterator[Path]:
    """Yield a temporary path that replaces ``path`` on successful exit.

    Any exception inside the block is re-raised as ``ReportExportError``
    (unless it already is one) and the temporary file is removed.
    """
    path = Path(path)
    tmp_path = _temp_path_for(path)
    try:
        yield tmp_path
        os.replace(tmp_path, path)
    except ReportExportError:
        _discard(tmp_path)
        raise
    except Exception as exc:
        _discard(tmp_path)
        raise ReportExportError(f"Failed to write {path}: {exc}") from exc

    logger.debug("Wrote %s", path)


def atomic_write_bytes(path: Union[str, Path], data: bytes) -> Path:
    """Write ``data`` to ``path`` atomically."""
    with atomic_path(path) as tmp:
        tmp.write_bytes(data)
    return Path(path)


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", tmp_path, exc)


def _temp_path_for(path: Path) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}.", suffix=path.suffix + ".tmp", dir=path.parent,
        )
        os.close(fd)
    except OSError as exc:
        raise ReportExportError(f"Cannot write to {path.parent}: {exc}") from exc
    return Path(tmp_name)


class StagedOutput:
    """Temporary files waiting to be moved over their final names together."""

    def __init__(self):
        self._staged: List[Tuple[Path, Path]] = []

    def stage(self, path: Union[str, Path]) -> Path:
        """Reserve a temporary file for ``path`` and return it for writing."""
        path = Path(path)
        tmp_path = _temp_path_for(path)
        self._staged.append((tmp_path, path))
        return tmp_path

    def commit(self) -> List[Path]:
        committed = []
        for i, (tmp_path, final) in enumerate(self._staged):
            try:
                os.replace(tmp_path, final)
            except OSError as exc:
                for leftover, _ in self._staged[i:]:
                    _discard(leftover)
                self._staged = []
                raise ReportExportError(f"Failed to move {final} into place: {exc}") from exc
            committed.append(final)
        self._staged = []
        return committed

    def discard(self) -> None:
        for tmp_path, _ in self._staged:
            _discard(tmp_path)
        self._staged = []


@contextmanager
def staged_output() -> Iterator[StagedOutput]:
    """Commit every file staged inside the block, or none of them.

    Example:
        with staged_output() as staging:
            staging.stage(pdf_path).write_bytes(pdf_data)
            export_pattern_dxf(dims, colors, staging.stage(dxf_path))
    """
    staging = StagedOutput()
    try:
        yield staging
    except ReportExportError:
        staging.discard()
        raise
    except Exception as exc:
        staging.discard()
        raise ReportExportError(f"Export failed: {exc}") from exc

    for path in staging.commit():
        logger.debug("Wrote %s", path)

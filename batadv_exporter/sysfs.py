"""Readers for the batman-adv settings exposed under ``/sys/class/net``.

A setting that cannot be read never raises. Boolean settings fall back to
0.0, so an unsupported feature looks the same as a disabled one. Numeric
settings fall back to NaN.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path

logger = logging.getLogger(__name__)

MESH_SUBDIR = "mesh"
ENABLED = "enabled"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace").strip()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None


def read_bool(path: str | Path) -> float:
    content = _read_text(Path(path))
    if content is None:
        return 0.0
    return 1.0 if content == ENABLED else 0.0


def read_number(path: str | Path) -> float:
    content = _read_text(Path(path))
    if content is None:
        return math.nan
    try:
        return float(content)
    except ValueError:
        logger.debug("Unparsable value in %s: %r", path, content)
        return math.nan


class MeshSettingsReader:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path(self, device: str, setting: str) -> Path:
        return self.root / device / MESH_SUBDIR / setting

    def read_bool(self, device: str, setting: str) -> float:
        return read_bool(self.path(device, setting))

    def read_number(self, device: str, setting: str) -> float:
        return read_number(self.path(device, setting))

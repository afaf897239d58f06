from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .config import get_settings
from .errors import SinkWriteFailure


logger = logging.getLogger(__name__)


class Sink(Protocol):
    def write(self, content: bytes, filename: str) -> Path: ...


def output_root() -> Path:
    return get_settings().output_dir


def _safe_filename(filename: str) -> str:
    token = str(filename or '').strip()
    if not token:
        raise SinkWriteFailure(str(filename), 'filename is required')
    if Path(token).name != token or token in {'.', '..'}:
        raise SinkWriteFailure(token, 'filename must not contain directory components')
    return token


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding='utf-8'))


class FilesystemSink:
    def __init__(self, root: Path | None = None) -> None:
        self.root = Path(root) if root is not None else output_root()

    def write(self, content: bytes, filename: str) -> Path:
        name = _safe_filename(filename)
        path = self.root / name
        try:
            write_bytes_atomic(path, content)
        except OSError as exc:
            raise SinkWriteFailure(name, str(exc)) from exc
        logger.info('Wrote %s bytes to %s', len(content), path)
        return path

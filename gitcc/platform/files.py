"""JSON state files.

Small state files (branch memory) are rewritten whole. The new content
goes to a sibling temp file that is renamed over the target, so a crash
mid-write never leaves a truncated file behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from gitcc.core.result import Err, Ok, Result

__all__ = ["StateFileError", "read_json", "write_json"]


@dataclass(frozen=True, slots=True)
class StateFileError:
    path: Path
    message: str


def read_json(path: Path) -> Result[object | None, StateFileError]:
    """Parse ``path``. ``Ok(None)`` when the file does not exist yet."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except (OSError, UnicodeDecodeError) as e:
        return Err(StateFileError(path=path, message=str(e)))

    try:
        return Ok(json.loads(text))
    except json.JSONDecodeError as e:
        return Err(StateFileError(path=path, message=f"invalid JSON: {e}"))


def write_json(path: Path, data: object) -> Result[None, StateFileError]:
    """Serialize ``data`` and atomically replace ``path`` with it."""
    payload = json.dumps(data, indent=2, sort_keys=True) + "\n"
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        return Err(StateFileError(path=path, message=str(e)))
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
    return Ok(None)

"""
Small helpers shared by the recommendation and mask-discovery packages.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np


def json_default(obj: Any) -> Any:
    """`default=` hook for json.dump: numpy arrays and scalars to native types."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def run_id_from_now() -> str:
    """Filesystem-safe run id derived from the current UTC time."""
    return utc_now_iso().replace(":", "-").replace(".", "-").replace("+", "_")


def atomic_write_json(path: Path, payload: Any, indent: int = 2) -> None:
    """
    Write JSON to `path` via a temp file in the same directory + replace.

    Readers never observe a half-written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=indent, default=json_default)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

"""Diagnostics side channel.

When an exchange is given a diagnostics directory, the exact outbound request
bytes are written to ``request.json`` before the call and the raw captured
event stream to ``response.json`` after it. The files are never read back.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..config.defaults import DIAGNOSTICS_REQUEST_FILE, DIAGNOSTICS_RESPONSE_FILE
from .errors import ErrorCode, ProviderError


def _write(directory: Path, name: str, data: bytes) -> Path:
    path = Path(directory) / name
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise ProviderError(f"writing {path}: {e}", code=ErrorCode.INTERNAL, raw=e) from e
    return path


def write_request(directory: Optional[Path], body: bytes) -> Optional[Path]:
    """Write the request body to ``request.json`` in ``directory`` (no-op without one)."""
    if directory is None:
        return None
    return _write(directory, DIAGNOSTICS_REQUEST_FILE, body)


def write_response(directory: Optional[Path], raw: bytes) -> Optional[Path]:
    """Write the captured event stream to ``response.json`` in ``directory``."""
    if directory is None:
        return None
    return _write(directory, DIAGNOSTICS_RESPONSE_FILE, raw)


__all__ = ["write_request", "write_response"]

"""Shared file utilities for scoped-acp.

Provides common utilities used by config, policy and bundle loading:
- get_app_dir: OS-appropriate application directory
- compute_file_checksum: SHA256 checksum for file integrity
- set_secure_permissions: Owner-only file/directory permissions
- read_json_file / load_validated_json: JSON loading with clear errors
- atomic_write_json: Crash-safe JSON writes
"""

from __future__ import annotations

import hashlib
import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ValidationError

from scoped_acp.constants import APP_NAME

# Type variable for Pydantic models
T = TypeVar("T", bound=BaseModel)

__all__ = [
    # App directory
    "get_app_dir",
    # File operations
    "atomic_write_json",
    "compute_file_checksum",
    "format_validation_errors",
    "load_validated_json",
    "read_json_file",
    "require_file_exists",
    "set_secure_permissions",
]


def get_app_dir() -> Path:
    """Get the OS-appropriate application directory.

    Uses click.get_app_dir() which returns:
    - macOS: ~/Library/Application Support/scoped-acp
    - Linux: ~/.config/scoped-acp (XDG compliant)
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\scoped-acp

    Returns:
        Path to the application directory.
    """
    return Path(click.get_app_dir(APP_NAME))


def compute_file_checksum(file_path: Path) -> str:
    """Compute SHA256 checksum of file content.

    Args:
        file_path: Path to the file.

    Returns:
        Checksum in format "sha256:<hex_digest>".

    Raises:
        FileNotFoundError: If file doesn't exist.
        OSError: If file cannot be read.
    """
    with open(file_path, "rb") as f:
        content = f.read()
    return f"sha256:{hashlib.sha256(content).hexdigest()}"


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Restrict a file (0o600) or directory (0o700) to its owner.

    Does nothing on Windows. Permission errors are ignored, since some
    filesystems do not support mode changes.

    Args:
        path: Path to file or directory.
        is_directory: If True, use directory permissions (0o700).
    """
    if sys.platform == "win32":
        return

    try:
        path.chmod(0o700 if is_directory else 0o600)
    except OSError:
        pass


def require_file_exists(file_path: Path, file_type: str = "file", hint: str | None = None) -> None:
    """Raise FileNotFoundError with a helpful message if file doesn't exist.

    Args:
        file_path: Path to check.
        file_type: Description for error message (e.g., "configuration", "policy").
        hint: Optional next step appended to the message.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if file_path.exists():
        return

    suffix = f"\n{hint}" if hint else ""
    raise FileNotFoundError(f"{file_type.capitalize()} file not found at {file_path}.{suffix}")


def read_json_file(file_path: Path, file_type: str = "file") -> Any:
    """Read and parse a JSON file.

    Raises:
        ValueError: If the file cannot be read or is not valid JSON.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Format pydantic errors as "  - <loc>: <msg>" lines."""
    lines = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error["loc"]) or "<root>"
        lines.append(f"  - {loc}: {error['msg']}")
    return lines


def load_validated_json(
    file_path: Path,
    model_class: type[T],
    file_type: str = "file",
    recovery_hint: str | None = None,
) -> T:
    """Load JSON file and validate against Pydantic model.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class to validate against.
        file_type: Description for error messages (e.g., "config", "bundle").
        recovery_hint: Optional hint appended to validation errors.

    Returns:
        Validated Pydantic model instance.

    Raises:
        ValueError: If JSON is invalid or validation fails.
    """
    data = read_json_file(file_path, file_type)

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        hint = f"\n\n{recovery_hint}" if recovery_hint else ""
        raise ValueError(
            f"Invalid {file_type} in {file_path}:\n" + "\n".join(format_validation_errors(e)) + hint
        ) from e


def atomic_write_json(data: Any, path: Path, *, prefix: str = ".scoped_acp_") -> None:
    """Write JSON to path atomically with owner-only permissions.

    Writes to a temp file in the same directory, fsyncs it, then renames it
    over the target, so readers never observe a half-written file.

    Args:
        data: JSON-serializable data.
        path: Destination path. Parent directories are created.
        prefix: Temp file name prefix.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    set_secure_permissions(path.parent, is_directory=True)

    content = json.dumps(data, indent=2) + "\n"

    # Same directory keeps os.replace on one filesystem
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        set_secure_permissions(Path(temp_path))
        os.replace(temp_path, path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

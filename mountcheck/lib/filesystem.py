"""Filesystem utilities for inventory sources."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mountcheck.core.context import Context


class FileError(Exception):
    """Error accessing a file."""

    pass


def read_file(path: str, context: "Context | None" = None) -> str:
    """
    Read file contents.

    Args:
        path: Path to file
        context: Execution context (for testing)

    Returns:
        File contents

    Raises:
        FileError: If the file doesn't exist or cannot be read
    """
    if context is None:
        from mountcheck.core.context import Context
        context = Context()

    try:
        return context.read_file(path)
    except FileNotFoundError:
        raise FileError(f"file not found: {path}")
    except OSError as e:
        raise FileError(f"cannot read {path}: {e.strerror or e}")

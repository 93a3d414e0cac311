"""Shared utility library for mountcheck checks."""

from mountcheck.lib.filesystem import FileError, read_file
from mountcheck.lib.inventory import (
    BootMount,
    FilesystemRecord,
    FsKind,
    Inventory,
    InventoryError,
    InventoryFormatError,
    read_inventory,
)
from mountcheck.lib.process import CommandError, run_command

__all__ = [
    "BootMount",
    "CommandError",
    "FileError",
    "FilesystemRecord",
    "FsKind",
    "Inventory",
    "InventoryError",
    "InventoryFormatError",
    "read_file",
    "read_inventory",
    "run_command",
]

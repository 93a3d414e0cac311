"""
Filesystem inventory: what is configured, and what is mounted right now.

Two backends share one interface:

    aix    lsfs -c, lsnfsmnt -c and mount
    linux  /etc/fstab and /proc/mounts

The colon-separated AIX listings are parsed by header name, against a table
of known column layouts. Output that matches no layout raises
InventoryFormatError instead of being guessed at.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from mountcheck.lib.filesystem import FileError, read_file
from mountcheck.lib.process import CommandError, run_command

if TYPE_CHECKING:
    from mountcheck.core.config import CheckConfig
    from mountcheck.core.context import Context


NFS_TYPES = {"nfs", "nfs3", "nfs4"}

# Optical media and swap are never expected to be mounted
EXCLUDED_TYPES = {"cdrfs", "udfs", "iso9660", "udf", "swap"}

OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


class FsKind(Enum):
    LOCAL = "local"
    NFS = "nfs"
    EXCLUDED = "excluded"


class BootMount(Enum):
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


BOOT_FLAG_VALUES = {
    "yes": BootMount.YES,
    "true": BootMount.YES,
    "no": BootMount.NO,
    "false": BootMount.NO,
}


class InventoryError(Exception):
    """Inventory source could not be queried."""

    pass


class InventoryFormatError(InventoryError):
    """Inventory source returned output in a layout we do not know."""

    pass


@dataclass(frozen=True)
class FilesystemRecord:
    """A configured filesystem."""

    name: str
    kind: FsKind
    mount_at_boot: BootMount
    vfs: str = ""
    boot_flag: str = ""


@dataclass(frozen=True)
class Inventory:
    """Snapshot of configured and mounted filesystems for one run."""

    filesystems: tuple[FilesystemRecord, ...]
    nfs_mounts: tuple[FilesystemRecord, ...]
    mounted: frozenset[str]

    def local_filesystems(self) -> list[FilesystemRecord]:
        return [fs for fs in self.filesystems if fs.kind is FsKind.LOCAL]


@dataclass(frozen=True)
class ColumnLayout:
    """A known header layout for a colon-separated listing."""

    version: str
    required: tuple[str, ...]

    def matches(self, header: list[str]) -> bool:
        return all(column in header for column in self.required)


LSFS_LAYOUTS = (
    ColumnLayout("lsfs-c-v1", ("MountPoint", "Vfs", "AutoMount")),
)

LSNFSMNT_LAYOUTS = (
    ColumnLayout("lsnfsmnt-c-v1", ("MountPoint",)),
)


def classify(vfs: str) -> FsKind:
    """Map a filesystem type tag to the kind of check it gets."""
    vfs = vfs.strip().lower()
    if vfs in EXCLUDED_TYPES:
        return FsKind.EXCLUDED
    if vfs in NFS_TYPES:
        return FsKind.NFS
    return FsKind.LOCAL


def parse_boot_flag(value: str) -> BootMount:
    """Parse a mount-at-boot flag; anything unrecognized is UNKNOWN."""
    return BOOT_FLAG_VALUES.get(value.strip().lower(), BootMount.UNKNOWN)


def unescape_path(path: str) -> str:
    """Decode octal escapes (\\040 for space) used by fstab and /proc/mounts."""
    return OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), path)


def normalize_mountpoint(path: str) -> str:
    """Canonical form of a mount point: no trailing slash, except for /."""
    if not path.startswith("/"):
        return path
    return path.rstrip("/") or "/"


def parse_colon_table(
    content: str,
    tool: str,
    layouts: tuple[ColumnLayout, ...],
) -> list[dict[str, str]]:
    """
    Parse '#Header:Columns' followed by colon-separated rows.

    Args:
        content: Command output
        tool: Tool name for error messages
        layouts: Accepted header layouts

    Returns:
        One dict per row, keyed by header column

    Raises:
        InventoryFormatError: If the header is missing, matches no layout,
            or a row has more fields than the header
    """
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    if not lines:
        return []

    if not lines[0].startswith("#"):
        raise InventoryFormatError(f"unrecognized {tool} output format")
    header = [column.strip() for column in lines[0].lstrip("#").split(":")]
    if not any(layout.matches(header) for layout in layouts):
        raise InventoryFormatError(f"unrecognized {tool} output format")

    rows = []
    for line in lines[1:]:
        if line.startswith("#"):
            continue
        values = line.split(":")
        if len(values) > len(header):
            raise InventoryFormatError(f"unrecognized {tool} output format")
        values += [""] * (len(header) - len(values))
        rows.append(dict(zip(header, values)))
    return rows


def parse_lsfs(content: str) -> list[FilesystemRecord]:
    """Parse `lsfs -c` output into filesystem records."""
    records = []
    for row in parse_colon_table(content, "lsfs", LSFS_LAYOUTS):
        vfs = row["Vfs"]
        records.append(FilesystemRecord(
            name=normalize_mountpoint(row["MountPoint"]),
            kind=classify(vfs),
            mount_at_boot=parse_boot_flag(row["AutoMount"]),
            vfs=vfs,
            boot_flag=row["AutoMount"],
        ))
    return records


def parse_lsnfsmnt(content: str) -> list[FilesystemRecord]:
    """Parse `lsnfsmnt -c` output into NFS records."""
    records = []
    for row in parse_colon_table(content, "lsnfsmnt", LSNFSMNT_LAYOUTS):
        flag = row.get("AutoMount", row.get("Auto", ""))
        records.append(FilesystemRecord(
            name=normalize_mountpoint(row["MountPoint"]),
            kind=FsKind.NFS,
            mount_at_boot=parse_boot_flag(flag),
            vfs=row.get("Type", "nfs") or "nfs",
            boot_flag=flag,
        ))
    return records


def parse_mount_output(content: str) -> frozenset[str]:
    """
    Parse `mount` output into the set of mounted-over paths.

    Understands AIX columnar output, where local filesystems leave the node
    column blank, and the '<device> on <path> type ...' form.
    """
    mounted = set()
    for line in content.splitlines():
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) >= 3 and tokens[1] == "on":
            mounted.add(normalize_mountpoint(tokens[2]))
            continue
        if tokens[0] == "node" or not line.strip("- \t"):
            continue
        if line[0].isspace():
            if len(tokens) >= 2:
                mounted.add(normalize_mountpoint(tokens[1]))
        elif len(tokens) >= 3:
            mounted.add(normalize_mountpoint(tokens[2]))
    return frozenset(mounted)


def parse_fstab(content: str) -> list[FilesystemRecord]:
    """Parse /etc/fstab into filesystem records."""
    records = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        if len(parts) < 3:
            continue
        mountpoint, fstype = normalize_mountpoint(unescape_path(parts[1])), parts[2]
        options = parts[3].split(",") if len(parts) > 3 else []

        kind = classify(fstype)
        if mountpoint == "none":
            kind = FsKind.EXCLUDED

        records.append(FilesystemRecord(
            name=mountpoint,
            kind=kind,
            mount_at_boot=BootMount.NO if "noauto" in options else BootMount.YES,
            vfs=fstype,
            boot_flag="noauto" if "noauto" in options else "auto",
        ))
    return records


def parse_proc_mounts(content: str) -> frozenset[str]:
    """Parse /proc/mounts into the set of mounted paths."""
    mounted = set()
    for line in content.splitlines():
        parts = line.split()
        if len(parts) >= 2:
            mounted.add(normalize_mountpoint(unescape_path(parts[1])))
    return frozenset(mounted)


class AixInventory:
    """Inventory from lsfs, lsnfsmnt and mount."""

    def __init__(self, config: "CheckConfig", context: "Context"):
        self.config = config
        self.context = context

    def _query(self, cmd: list[str]) -> str:
        try:
            return run_command(cmd, context=self.context)
        except CommandError as e:
            raise InventoryError(f"inventory query failed: {e}") from e

    def filesystems(self, vfs: str | None = None) -> list[FilesystemRecord]:
        """Configured filesystems, optionally only those of one vfs type."""
        cmd = [self.config.lsfs_path, "-c"]
        if vfs:
            cmd += ["-v", vfs]
        return parse_lsfs(self._query(cmd))

    def nfs_mounts(self) -> list[FilesystemRecord]:
        return parse_lsnfsmnt(self._query([self.config.lsnfsmnt_path, "-c"]))

    def mounted(self) -> frozenset[str]:
        return parse_mount_output(self._query([self.config.mount_path]))


class LinuxInventory:
    """Inventory from /etc/fstab and /proc/mounts."""

    def __init__(self, config: "CheckConfig", context: "Context"):
        self.config = config
        self.context = context

    def _read(self, path: str) -> str:
        try:
            return read_file(path, context=self.context)
        except FileError as e:
            raise InventoryError(f"inventory query failed: {e}") from e

    def filesystems(self, vfs: str | None = None) -> list[FilesystemRecord]:
        """Configured filesystems, optionally only those of one fstype."""
        records = parse_fstab(self._read(self.config.fstab_path))
        if vfs:
            records = [r for r in records if r.vfs == vfs]
        return records

    def nfs_mounts(self) -> list[FilesystemRecord]:
        return [
            r for r in parse_fstab(self._read(self.config.fstab_path))
            if r.vfs in NFS_TYPES and r.kind is FsKind.NFS
        ]

    def mounted(self) -> frozenset[str]:
        return parse_proc_mounts(self._read(self.config.mounts_path))


INVENTORY_BACKENDS = {
    "aix": AixInventory,
    "linux": LinuxInventory,
}


def get_inventory_source(config: "CheckConfig", context: "Context"):
    """Backend for the configured platform."""
    return INVENTORY_BACKENDS[config.platform or "linux"](config, context)


def read_inventory(config: "CheckConfig", context: "Context") -> Inventory:
    """
    Read configured filesystems, NFS mounts and the mount table once.

    Raises:
        InventoryError: If any source cannot be queried or parsed
    """
    source = get_inventory_source(config, context)
    return Inventory(
        filesystems=tuple(source.filesystems()),
        nfs_mounts=tuple(source.nfs_mounts()),
        mounted=source.mounted(),
    )

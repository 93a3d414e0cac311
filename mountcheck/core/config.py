"""Configuration loading with layered overrides."""

import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from mountcheck.core.logging import LOG_LEVELS

if TYPE_CHECKING:
    from mountcheck.core.context import Context


SYSTEM_CONFIG = Path("/etc/mountcheck/config.yaml")
USER_CONFIG = Path.home() / ".config" / "mountcheck" / "config.yaml"

PLATFORMS = ("aix", "linux")


class ConfigError(Exception):
    """Error loading or validating configuration."""

    pass


@dataclass(frozen=True)
class CheckConfig:
    """Everything a check run needs to know about the host."""

    check_name: str = "MOUNTS"
    platform: str | None = None

    # aix inventory tools
    lsfs_path: str = "/usr/sbin/lsfs"
    lsnfsmnt_path: str = "/usr/sbin/lsnfsmnt"
    mount_path: str = "/usr/sbin/mount"

    # linux inventory sources
    fstab_path: str = "/etc/fstab"
    mounts_path: str = "/proc/mounts"

    # privileged probe
    ls_path: str = "/usr/bin/ls"
    sudo_path: str = "/usr/bin/sudo"
    sudo_args: tuple[str, ...] = ("-n",)
    sudoers_path: str = "/etc/sudoers"
    nfs_timeout: float = 5.0
    kill_grace: float = 0.5

    log_dir: str | None = None
    log_level: str = "info"

    def probe_command(self, target: str) -> list[str]:
        """Command line for the privileged directory read of target."""
        return [self.sudo_path, *self.sudo_args, self.ls_path, target]

    def resolved(self, context: "Context") -> "CheckConfig":
        """Fill in the platform from the running system if unset."""
        if self.platform is not None:
            return self
        system = context.system()
        return replace(self, platform="aix" if system == "aix" else "linux")


CONFIG_KEYS = {f.name for f in fields(CheckConfig)}


def load_config_file(path: Path, context: "Context") -> dict[str, Any]:
    """Load a YAML config file if it exists."""
    if not context.file_exists(str(path)):
        return {}
    try:
        data = yaml.safe_load(context.read_file(str(path)))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e.strerror or e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be a YAML mapping")

    unknown = set(data) - CONFIG_KEYS
    if unknown:
        raise ConfigError(f"unknown keys in {path}: {', '.join(sorted(unknown))}")
    return data


def validate_config(config: CheckConfig) -> CheckConfig:
    """
    Check value ranges and normalize types.

    Returns:
        The validated config

    Raises:
        ConfigError: If a value is out of range or of the wrong type
    """
    if not config.check_name or not isinstance(config.check_name, str):
        raise ConfigError("check_name must be a non-empty string")
    if any(ch.isspace() for ch in config.check_name):
        raise ConfigError("check_name must not contain whitespace")
    if config.platform is not None and config.platform not in PLATFORMS:
        raise ConfigError(f"platform must be one of: {', '.join(PLATFORMS)}")
    if config.log_level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")

    try:
        timeout = float(config.nfs_timeout)
        grace = float(config.kill_grace)
    except (TypeError, ValueError):
        raise ConfigError("nfs_timeout and kill_grace must be numbers")
    if not (math.isfinite(timeout) and math.isfinite(grace)):
        raise ConfigError("nfs_timeout and kill_grace must be finite")
    if timeout <= 0:
        raise ConfigError("nfs_timeout must be positive")
    if grace < 0:
        raise ConfigError("kill_grace must not be negative")

    sudo_args = config.sudo_args
    if not isinstance(sudo_args, (list, tuple)) or not all(isinstance(a, str) for a in sudo_args):
        raise ConfigError("sudo_args must be a list of strings")

    for name in ("lsfs_path", "lsnfsmnt_path", "mount_path", "fstab_path",
                 "mounts_path", "ls_path", "sudo_path", "sudoers_path"):
        value = getattr(config, name)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{name} must be a non-empty path")

    return replace(config, nfs_timeout=timeout, kill_grace=grace, sudo_args=tuple(sudo_args))


def load_config(
    context: "Context",
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> CheckConfig:
    """
    Build the run configuration.

    Precedence, lowest first: defaults, system config, user config,
    explicit config file, command-line overrides.

    Raises:
        ConfigError: If any layer is invalid or an explicit path is missing
    """
    values: dict[str, Any] = {}
    values.update(load_config_file(SYSTEM_CONFIG, context))
    values.update(load_config_file(USER_CONFIG, context))

    if path is not None:
        if not context.file_exists(str(path)):
            raise ConfigError(f"config file not found: {path}")
        values.update(load_config_file(path, context))

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    return validate_config(CheckConfig(**values))

# SPDX-License-Identifier: BUSL-1.1
"""YAML config file discovery, loading, and option resolution."""

import os
import shlex
from pathlib import Path
from typing import Optional

import yaml

from boxenter.config.resources import ContainerRef, EnterOptions, Settings
from boxenter.utils import parse_bool


SYSTEM_CONFIG_FILE = Path("/etc/boxenter/config.yaml")
CONFIG_DIR = Path.home() / ".config" / "boxenter"

# config.yaml key -> Settings field
CONFIG_KEYS = {
    "containerManager": "container_manager",
    "containerName": "container_name",
    "defaultImage": "default_image",
    "sudoProgram": "sudo_program",
    "createCommand": "create_command",
    "skipWorkdir": "skip_workdir",
    "nonInteractive": "non_interactive",
    "cleanPath": "clean_path",
    "verbose": "verbose",
    "startupTimeout": "startup_timeout",
    "pollInterval": "poll_interval",
    "additionalFlags": "additional_flags",
}

# environment variable -> Settings field
ENV_KEYS = {
    "BOXENTER_CONTAINER_MANAGER": "container_manager",
    "BOXENTER_CONTAINER_NAME": "container_name",
    "BOXENTER_SKIP_WORKDIR": "skip_workdir",
    "BOXENTER_NON_INTERACTIVE": "non_interactive",
    "BOXENTER_SUDO_PROGRAM": "sudo_program",
    "BOXENTER_VERBOSE": "verbose",
}

BOOL_FIELDS = {"skip_workdir", "non_interactive", "clean_path", "verbose"}
FLOAT_FIELDS = {"startup_timeout", "poll_interval"}


class ConfigError(Exception):
    """Raised when a config file cannot be read or has the wrong shape."""


def _coerce(field_name: str, value):
    if field_name in BOOL_FIELDS:
        return parse_bool(value)
    if field_name in FLOAT_FIELDS:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{field_name} must be a number, got {value!r}")
    if field_name == "additional_flags":
        if isinstance(value, str):
            return shlex.split(value)
        return [str(v) for v in (value or [])]
    return "" if value is None else str(value).strip()


class ConfigStore:
    """Reads boxenter settings from disk and the environment.

    Layout:
        /etc/boxenter/config.yaml        # system-wide defaults
        ~/.config/boxenter/config.yaml   # per-user overrides

    Later sources win: built-in defaults, system file, user file,
    BOXENTER_* environment variables. CLI flags are applied on top by
    resolve_options().
    """

    def __init__(self, config_dir: Optional[Path] = None,
                 system_file: Optional[Path] = None):
        self.config_dir = config_dir or CONFIG_DIR
        self.config_file = self.config_dir / "config.yaml"
        self.system_file = system_file or SYSTEM_CONFIG_FILE

    def config_files(self) -> list:
        """Return existing config files, lowest precedence first."""
        return [p for p in (self.system_file, self.config_file) if p.is_file()]

    def _load_file(self, path: Path) -> dict:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"cannot read {path}: {exc}")
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")
        return data

    def load_settings(self, environ: Optional[dict] = None) -> Settings:
        """Merge defaults, config files and environment into Settings."""
        environ = os.environ if environ is None else environ
        settings = Settings()

        for path in self.config_files():
            data = self._load_file(path)
            for key, value in data.items():
                field_name = CONFIG_KEYS.get(key)
                if field_name is None:
                    continue
                setattr(settings, field_name, _coerce(field_name, value))

        for var, field_name in ENV_KEYS.items():
            value = environ.get(var)
            if value is None or value == "":
                continue
            setattr(settings, field_name, _coerce(field_name, value))

        return settings

    def resolve_options(self, args, environ: Optional[dict] = None) -> EnterOptions:
        """Combine Settings with parsed CLI args; explicit flags win."""
        s = self.load_settings(environ)

        additional_flags = list(s.additional_flags)
        for chunk in getattr(args, "additional_flags", None) or []:
            additional_flags.extend(shlex.split(chunk))

        timeout = getattr(args, "timeout", None)

        return EnterOptions(
            container=ContainerRef(
                name=getattr(args, "name", None) or s.container_name,
                manager=s.container_manager,
                rootful=bool(getattr(args, "root", False)),
            ),
            command=list(getattr(args, "command", None) or []),
            headless=bool(getattr(args, "no_tty", False)),
            skip_workdir=bool(getattr(args, "no_workdir", False)) or s.skip_workdir,
            clean_path=bool(getattr(args, "clean_path", False)) or s.clean_path,
            additional_flags=additional_flags,
            non_interactive=bool(getattr(args, "yes", False)) or s.non_interactive,
            dry_run=bool(getattr(args, "dry_run", False)),
            verbose=bool(getattr(args, "verbose", False)) or s.verbose,
            sudo_program=s.sudo_program,
            default_image=s.default_image,
            create_command=s.create_command,
            startup_timeout=s.startup_timeout if timeout is None else timeout,
            poll_interval=s.poll_interval,
        )

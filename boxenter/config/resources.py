# SPDX-License-Identifier: BUSL-1.1
"""Dataclasses describing the container being entered and how to enter it."""

from dataclasses import dataclass, field


MANAGERS = ("podman", "docker")
AUTODETECT = "autodetect"

STATUS_UNKNOWN = "unknown"
STATUS_RUNNING = "running"

DEFAULT_CONTAINER_NAME = "my-boxenter"
DEFAULT_IMAGE = "registry.fedoraproject.org/fedora-toolbox:latest"
DEFAULT_SUDO_PROGRAM = "sudo"
DEFAULT_CREATE_COMMAND = "distrobox-create"
DEFAULT_POLL_INTERVAL = 0.2


@dataclass
class ContainerRef:
    name: str = DEFAULT_CONTAINER_NAME
    manager: str = "podman"         # podman | docker
    rootful: bool = False


@dataclass
class ContainerRuntimeInfo:
    """Live state of a container as reported by one inspect call."""
    status: str = STATUS_UNKNOWN
    home: str = ""
    path: str = ""

    @property
    def exists(self) -> bool:
        return self.status != STATUS_UNKNOWN

    @property
    def running(self) -> bool:
        return self.status == STATUS_RUNNING


@dataclass
class Settings:
    """Values read from config files and the environment.

    Every field has a built-in default; config files and BOXENTER_*
    variables override them in turn.
    """
    container_manager: str = AUTODETECT
    container_name: str = DEFAULT_CONTAINER_NAME
    default_image: str = DEFAULT_IMAGE
    sudo_program: str = DEFAULT_SUDO_PROGRAM
    create_command: str = DEFAULT_CREATE_COMMAND
    skip_workdir: bool = False
    non_interactive: bool = False
    clean_path: bool = False
    verbose: bool = False
    startup_timeout: float = 0.0
    poll_interval: float = DEFAULT_POLL_INTERVAL
    additional_flags: list = field(default_factory=list)


@dataclass
class EnterOptions:
    """Everything one `boxenter` invocation needs, resolved up front."""
    container: ContainerRef = field(default_factory=ContainerRef)
    command: list = field(default_factory=list)
    headless: bool = False
    skip_workdir: bool = False
    clean_path: bool = False
    additional_flags: list = field(default_factory=list)
    non_interactive: bool = False
    dry_run: bool = False
    verbose: bool = False
    sudo_program: str = DEFAULT_SUDO_PROGRAM
    default_image: str = DEFAULT_IMAGE
    create_command: str = DEFAULT_CREATE_COMMAND
    startup_timeout: float = 0.0
    poll_interval: float = DEFAULT_POLL_INTERVAL

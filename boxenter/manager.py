# SPDX-License-Identifier: BUSL-1.1
"""Container manager operations: inspect, start, logs, create and exec."""

import json
import os
import shlex
import shutil
import subprocess
import sys

from boxenter.config.resources import (
    AUTODETECT,
    MANAGERS,
    STATUS_UNKNOWN,
    ContainerRef,
    ContainerRuntimeInfo,
)

# Extracts the state and declared environment in one call.
INSPECT_FORMAT = '{"status": {{json .State.Status}}, "env": {{json .Config.Env}}}'
STATUS_FORMAT = "{{.State.Status}}"


class ManagerError(Exception):
    """Base class for container manager failures."""


class ManagerNotFound(ManagerError):
    """No podman or docker binary is available."""


class InspectError(ManagerError):
    """The manager returned inspect output that could not be understood."""


class CreateError(ManagerError):
    """The external create command failed."""


def detect_manager(preferred: str = AUTODETECT) -> str:
    """Return the manager binary name to use, or raise ManagerNotFound."""
    candidates = MANAGERS if preferred in ("", AUTODETECT) else (preferred,)
    for name in candidates:
        if shutil.which(name):
            return name
    raise ManagerNotFound(
        f"missing dependency: need {' or '.join(candidates)} installed"
    )


def _env_value(entries: list, key: str):
    """First value for key in a KEY=VALUE list, or None."""
    prefix = f"{key}="
    for entry in entries or []:
        if isinstance(entry, str) and entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def parse_inspect_output(output: str, default_home: str = "", default_path: str = "") -> ContainerRuntimeInfo:
    """Parse INSPECT_FORMAT output into a ContainerRuntimeInfo."""
    text = (output or "").strip()
    # docker prints one document per matched object; only the first matters.
    first = text.splitlines()[0] if text else ""
    try:
        data = json.loads(first)
    except json.JSONDecodeError:
        raise InspectError(f"unexpected inspect output: {text or '(empty)'}")
    if not isinstance(data, dict) or not data.get("status"):
        raise InspectError(f"unexpected inspect output: {text}")

    env = data.get("env") or []
    home = _env_value(env, "HOME")
    path = _env_value(env, "PATH")
    return ContainerRuntimeInfo(
        status=str(data["status"]),
        home=home if home is not None else default_home,
        path=path if path is not None else default_path,
    )


class ContainerManager:
    """Runs podman/docker commands against one named container."""

    def __init__(self, container: ContainerRef, sudo_program: str = "sudo", verbose: bool = False):
        self.container = container
        self.sudo_program = sudo_program
        self.verbose = verbose

    def base_command(self) -> list:
        """The manager invocation prefix, with sudo when running rootful."""
        cmd = [self.container.manager]
        if self.container.rootful and os.getuid() != 0 and self.sudo_program:
            cmd = shlex.split(self.sudo_program) + cmd
        return cmd

    def _trace(self, cmd: list):
        if self.verbose:
            print(f"+ {shlex.join(cmd)}", file=sys.stderr)

    def _run(self, args: list, **kwargs) -> subprocess.CompletedProcess:
        cmd = self.base_command() + args
        self._trace(cmd)
        try:
            return subprocess.run(cmd, **kwargs)
        except FileNotFoundError:
            raise ManagerNotFound(f"cannot execute '{cmd[0]}'")

    def inspect(self, default_home: str = "", default_path: str = "") -> ContainerRuntimeInfo:
        """Return live state for the container; status 'unknown' if it does not exist."""
        result = self._run(
            ["inspect", "--type", "container", "--format", INSPECT_FORMAT, self.container.name],
            capture_output=True, text=True,
        )
        if result.returncode != 0:
            return ContainerRuntimeInfo(
                status=STATUS_UNKNOWN, home=default_home, path=default_path,
            )
        return parse_inspect_output(result.stdout, default_home, default_path)

    def status(self) -> str:
        """Return only the container status, re-queried every call."""
        result = self._run(
            ["inspect", "--type", "container", "--format", STATUS_FORMAT, self.container.name],
            capture_output=True, text=True,
        )
        if result.returncode != 0:
            return STATUS_UNKNOWN
        lines = result.stdout.strip().splitlines()
        return lines[0].strip() if lines else STATUS_UNKNOWN

    def start(self):
        """Issue the start verb. Success is judged by a later status() call."""
        self._run(
            ["start", self.container.name],
            stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
        )

    def logs(self, since: str = "") -> list:
        """Return container log lines (stdout and stderr merged), oldest first."""
        args = ["logs"]
        if since:
            args.extend(["--since", since])
        args.append(self.container.name)
        result = self._run(
            args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
        )
        return result.stdout.splitlines()

    def create_command(self, create_command: str, image: str) -> list:
        """Build the external create tool invocation for this container."""
        cmd = shlex.split(create_command)
        if self.container.rootful:
            cmd.append("--root")
        cmd.extend(["--yes", "-i", image, "-n", self.container.name])
        return cmd

    def create(self, create_command: str, image: str):
        """Run the external create tool. Raises CreateError on failure."""
        cmd = self.create_command(create_command, image)
        if not cmd or not shutil.which(cmd[0]):
            raise CreateError(f"'{cmd[0] if cmd else create_command}' is not installed")
        self._trace(cmd)
        result = subprocess.run(cmd)
        if result.returncode != 0:
            raise CreateError(
                f"'{shlex.join(cmd)}' exited with status {result.returncode}"
            )


def exec_command(cmd: list):
    """Replace this process with the generated command (execvp)."""
    os.execvp(cmd[0], cmd)

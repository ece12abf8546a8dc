# SPDX-License-Identifier: BUSL-1.1
"""Generate the `<manager> exec` invocation that attaches a session to a container."""

import shlex
import sys

from boxenter.environment import forwardable_env, search_path_env
from boxenter.workdir import resolve_workdir

CONTAINER_ID_VAR = "CONTAINER_ID"
ENTER_PATH_VAR = "BOXENTER_ENTER_PATH"


def login_shell_command(user: str) -> list:
    """Look up the user's shell in the container's passwd and start it as a login shell."""
    return [
        "/bin/sh", "-c",
        f"$(getent passwd {shlex.quote(user)} | cut -f 7 -d :) -l",
    ]


def generate_command(
    base_command: list,
    options,
    info,
    env: dict,
    user: str,
    enter_path: str,
    cwd: str = None,
) -> list:
    """Build the exec token list for one session.

    Args:
        base_command: Manager invocation prefix, e.g. ["podman"] or ["sudo", "podman"].
        options: EnterOptions for this invocation.
        info: ContainerRuntimeInfo from the latest inspect.
        env: Host environment to project into the container.
        user: Name of the invoking user.
        enter_path: Path of the boxenter executable, exported for helper tools.
        cwd: Host working directory; defaults to the process cwd.
    """
    cmd = list(base_command) + ["exec", "--interactive", "--detach-keys="]

    # Checked on every call: dry run and real runs may differ in stdin.
    if not options.headless and sys.stdin.isatty():
        cmd.append("--tty")

    workdir = resolve_workdir(info.home, cwd=cwd, skip_workdir=options.skip_workdir)
    cmd.extend([
        f"--user={user}",
        f"--workdir={workdir}",
        f"--env={CONTAINER_ID_VAR}={options.container.name}",
        f"--env={ENTER_PATH_VAR}={enter_path}",
    ])

    for key, value in forwardable_env(env):
        cmd.append(f"--env={key}={value}")
    for key, value in search_path_env(env, info, clean_path=options.clean_path):
        cmd.append(f"--env={key}={value}")

    cmd.extend(options.additional_flags)
    cmd.append(options.container.name)

    if options.command:
        cmd.extend(options.command)
    else:
        cmd.extend(login_shell_command(user))
    return cmd


def format_command(cmd: list) -> str:
    """Render tokens as one shell-safe line."""
    return shlex.join(cmd)

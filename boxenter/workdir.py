# SPDX-License-Identifier: BUSL-1.1
"""Map the host working directory onto a path valid inside the container."""

import os
import posixpath

# The host filesystem is bind-mounted here inside the container.
HOST_ROOT = "/run/host"


def _is_within(path: str, root: str) -> bool:
    root = root.rstrip("/")
    if not root:
        return True
    return path == root or path.startswith(root + "/")


def host_cwd() -> str:
    """Current directory, or empty string if it has been removed."""
    try:
        return os.getcwd()
    except FileNotFoundError:
        return ""


def resolve_workdir(container_home: str, cwd: str = None, skip_workdir: bool = False) -> str:
    """Return the in-container working directory.

    Paths outside the container home are reached through HOST_ROOT so the
    session always starts in a directory that exists.
    """
    if skip_workdir:
        return container_home or "/"

    workdir = cwd if cwd is not None else host_cwd()
    workdir = workdir or container_home or "/"
    workdir = posixpath.normpath(workdir)

    if container_home and _is_within(workdir, container_home):
        return workdir
    if _is_within(workdir, HOST_ROOT):
        return workdir
    return HOST_ROOT + workdir if workdir != "/" else HOST_ROOT

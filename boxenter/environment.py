# SPDX-License-Identifier: BUSL-1.1
"""Decide which host variables and search lists reach the container."""

import re

# Variables whose container-side value must come from the container itself.
ENV_DENYLIST = {
    "CONTAINER_ID",
    "FPATH",
    "HOST",
    "HOSTNAME",
    "HOME",
    "PATH",
    "PROFILEREAD",
    "SHELL",
    "XDG_SEAT",
    "XDG_VTNR",
}
ENV_DENY_PATTERN = re.compile(r"^(_|XDG_.*_DIRS$)")

# Values with these characters cannot be passed through a --env flag safely.
UNSAFE_VALUE_RE = re.compile(r"[\s\"'`$]")

STANDARD_PATHS = [
    "/usr/local/sbin",
    "/usr/local/bin",
    "/usr/sbin",
    "/usr/bin",
    "/sbin",
    "/bin",
]
STANDARD_DATA_DIRS = ["/usr/local/share", "/usr/share"]
STANDARD_CONFIG_DIRS = ["/etc/xdg"]


def is_forwardable(key: str, value: str) -> bool:
    """Return True when a host variable may be forwarded as-is."""
    if not key or "=" in key:
        return False
    if key in ENV_DENYLIST or ENV_DENY_PATTERN.match(key):
        return False
    if UNSAFE_VALUE_RE.search(value or ""):
        return False
    return True


def forwardable_env(env: dict) -> list:
    """Return (key, value) pairs from env that are safe to forward, in env order."""
    return [(k, v) for k, v in env.items() if is_forwardable(k, v)]


def _segments(value) -> list:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(":")
    return [s for s in value if s]


def merge_search_path(base, *sources) -> str:
    """Merge colon-separated search lists, first occurrence wins.

    Segments from base keep their order; each segment from the later
    sources is appended only if it is not already present as a whole
    segment.
    """
    merged = []
    for source in (base, *sources):
        for segment in _segments(source):
            if segment not in merged:
                merged.append(segment)
    return ":".join(merged)


def container_path(declared_path: str, host_path: str, clean_path: bool = False) -> str:
    """PATH for the session: container entries, then FHS dirs, then host entries."""
    if clean_path:
        return merge_search_path(STANDARD_PATHS)
    return merge_search_path(declared_path, STANDARD_PATHS, host_path)


def search_path_env(env: dict, info, clean_path: bool = False) -> list:
    """Return the PATH / XDG_DATA_DIRS / XDG_CONFIG_DIRS entries for the session."""
    return [
        ("PATH", container_path(info.path, env.get("PATH", ""), clean_path)),
        ("XDG_DATA_DIRS", merge_search_path(env.get("XDG_DATA_DIRS", ""), STANDARD_DATA_DIRS)),
        ("XDG_CONFIG_DIRS", merge_search_path(env.get("XDG_CONFIG_DIRS", ""), STANDARD_CONFIG_DIRS)),
    ]

# SPDX-License-Identifier: BUSL-1.1
"""Validation of resolved enter options.

Errors stop the invocation before any container manager call is made;
warnings are printed and the invocation continues.
"""

import os
import re

from boxenter.config.resources import AUTODETECT, MANAGERS

# Same character set podman and docker accept for container names.
CONTAINER_NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")


class ValidationError(Exception):
    """Raised when option validation fails."""
    def __init__(self, errors: list, warnings: list = None):
        self.errors = errors
        self.warnings = warnings or []
        msg = "; ".join(errors)
        super().__init__(msg)


class ValidationResult:
    """Collects errors and warnings from validation."""
    def __init__(self):
        self.errors = []
        self.warnings = []

    def error(self, msg: str):
        self.errors.append(msg)

    def warn(self, msg: str):
        self.warnings.append(msg)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self):
        if not self.valid:
            raise ValidationError(self.errors, self.warnings)


def validate_options(options) -> ValidationResult:
    """Check an EnterOptions value for consistency."""
    result = ValidationResult()
    c = options.container

    if c.manager not in MANAGERS and c.manager != AUTODETECT:
        result.error(
            f"container manager '{c.manager}' is not supported, "
            f"use one of: {', '.join(MANAGERS)} or '{AUTODETECT}'"
        )

    if not c.name:
        result.error("container name is empty")
    elif not CONTAINER_NAME_RE.match(c.name):
        result.error(f"invalid container name '{c.name}'")

    if options.startup_timeout < 0:
        result.error("startup timeout cannot be negative")
    if options.poll_interval <= 0:
        result.error("poll interval must be greater than zero")

    if c.rootful and not options.sudo_program:
        result.error("--root requires a sudo program (set sudoProgram or BOXENTER_SUDO_PROGRAM)")
    if c.rootful and os.getuid() == 0:
        result.warn("already running as root, the sudo program will not be used")

    if not options.create_command:
        result.warn("no create command configured, missing containers cannot be created")

    return result

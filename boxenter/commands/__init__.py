# SPDX-License-Identifier: BUSL-1.1
"""Command implementations for boxenter CLI."""

from boxenter.commands.enter import cmd_enter

__all__ = ["cmd_enter"]

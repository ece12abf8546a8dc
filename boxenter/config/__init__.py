# SPDX-License-Identifier: BUSL-1.1
"""Configuration: YAML config loading, option resolution and validation."""

from boxenter.config.resources import (
    ContainerRef, ContainerRuntimeInfo, EnterOptions, Settings,
)
from boxenter.config.loader import ConfigError, ConfigStore
from boxenter.config.validation import (
    validate_options, ValidationError, ValidationResult,
)

__all__ = [
    "ContainerRef", "ContainerRuntimeInfo", "EnterOptions", "Settings",
    "ConfigError", "ConfigStore", "validate_options", "ValidationError",
    "ValidationResult",
]

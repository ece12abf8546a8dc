# SPDX-License-Identifier: BUSL-1.1
"""boxenter - enter a container with a host-equivalent session."""

__version__ = "1.0.0"

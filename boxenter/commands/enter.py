# SPDX-License-Identifier: BUSL-1.1
"""boxenter: create if needed, start if stopped, then exec into a container."""

import getpass
import os
import shlex
import shutil
import sys

from boxenter.command import format_command, generate_command
from boxenter.config import ConfigError, ConfigStore, ValidationError, validate_options
from boxenter.config.resources import MANAGERS, STATUS_RUNNING, ContainerRuntimeInfo
from boxenter.manager import (
    ContainerManager,
    CreateError,
    InspectError,
    ManagerNotFound,
    detect_manager,
    exec_command,
)
from boxenter.startup import StartupError, StartupSync
from boxenter.utils import confirm, die, warn

EXIT_MANAGER_NOT_FOUND = 127


def _enter_path() -> str:
    """Absolute path of the running boxenter executable."""
    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else "boxenter"
    found = shutil.which(argv0)
    return os.path.abspath(found or argv0)


def _resolve_manager_name(options) -> tuple:
    """Return (manager name, whether its binary is available)."""
    try:
        return detect_manager(options.container.manager), True
    except ManagerNotFound as e:
        if not options.dry_run:
            die(str(e), EXIT_MANAGER_NOT_FOUND)
    # Dry run only prints, so fall back to the configured or first candidate name.
    if options.container.manager in MANAGERS:
        return options.container.manager, False
    return MANAGERS[0], False


def _create_container(manager: ContainerManager, options):
    """Prompt for and run container creation. Exits if declined or failed."""
    name = options.container.name
    image = options.default_image
    if options.dry_run:
        print(f"Container '{name}' does not exist; it would be created with:", file=sys.stderr)
        print(f"\t{format_command(manager.create_command(options.create_command, image))}",
              file=sys.stderr)
        return
    if not options.non_interactive:
        prompt = f"Cannot find container {name}. Create it now, out of image {image}?"
        if not confirm(prompt, default=True):
            print("Ok. For creating it, run this command:", file=sys.stderr)
            print(f"\t{shlex.join(manager.create_command(options.create_command, '<image>'))}",
                  file=sys.stderr)
            sys.exit(1)

    print(f"Creating the container {name}", file=sys.stderr)
    try:
        manager.create(options.create_command, image)
    except CreateError as e:
        die(f"failed to create container '{name}': {e}")


def _synchronize_startup(manager: ContainerManager, options):
    """Start the container and wait for its setup. Exits on failure."""
    if options.dry_run:
        print(f"Container '{options.container.name}' is not running; it would be started.",
              file=sys.stderr)
        return
    sync = StartupSync(
        manager,
        timeout=options.startup_timeout,
        poll_interval=options.poll_interval,
    )
    try:
        sync.run()
    except StartupError as e:
        if not e.reported:
            print(file=sys.stderr)
            print(f"Error: {e}", file=sys.stderr)
        for line in e.logs:
            print(line, file=sys.stderr)
        sys.exit(1)


def _prepare_container(manager: ContainerManager, options, default_home: str, default_path: str):
    """Make sure the container exists and is running. Returns its latest runtime info."""
    name = options.container.name
    try:
        info = manager.inspect(default_home, default_path)
        if not info.exists:
            _create_container(manager, options)
            if options.dry_run:
                return info
            info = manager.inspect(default_home, default_path)
            if not info.exists:
                die(f"container '{name}' still does not exist after creation")
        if not info.running:
            _synchronize_startup(manager, options)
    except ManagerNotFound as e:
        die(str(e), EXIT_MANAGER_NOT_FOUND)
    except InspectError as e:
        die(f"cannot inspect container '{name}': {e}")
    return info


def cmd_enter(args):
    store = ConfigStore()
    try:
        options = store.resolve_options(args)
    except ConfigError as e:
        die(str(e))

    result = validate_options(options)
    for w in result.warnings:
        warn(w)
    try:
        result.raise_if_invalid()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for err in e.errors:
            print(f"  x {err}", file=sys.stderr)
        sys.exit(1)

    options.container.manager, available = _resolve_manager_name(options)
    manager = ContainerManager(
        options.container,
        sudo_program=options.sudo_program,
        verbose=options.verbose,
    )

    host_env = dict(os.environ)
    default_home = host_env.get("HOME", "")
    default_path = host_env.get("PATH", "")

    if available:
        info = _prepare_container(manager, options, default_home, default_path)
    else:
        warn(f"{options.container.manager} not found, skipping container inspection")
        info = ContainerRuntimeInfo(status=STATUS_RUNNING, home=default_home, path=default_path)

    cmd = generate_command(
        manager.base_command(),
        options,
        info,
        env=host_env,
        user=getpass.getuser(),
        enter_path=_enter_path(),
    )

    if options.dry_run:
        print(format_command(cmd))
        return
    exec_command(cmd)

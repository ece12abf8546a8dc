# SPDX-License-Identifier: BUSL-1.1
"""CLI argument parsing and command dispatch."""

import argparse
import sys

from boxenter import __version__
from boxenter.utils import die

# Everything after one of these is the command to run in the container.
COMMAND_SEPARATORS = ("--", "-e", "--exec")
# Options whose value is passed through to the container manager untouched.
FLAG_VALUE_OPTIONS = ("-a", "--additional-flags")


class _ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        die(message)


def split_command(argv: list) -> tuple:
    """Split argv into (boxenter args, container command)."""
    i = 0
    while i < len(argv):
        token = argv[i]
        if token in FLAG_VALUE_OPTIONS:
            i += 2
            continue
        if token in COMMAND_SEPARATORS:
            return argv[:i], argv[i + 1:]
        i += 1
    return list(argv), []


def bind_flag_values(argv: list) -> list:
    """Attach each -a/--additional-flags value to its option.

    Values are manager flags such as --net=host and are never parsed as
    boxenter options.
    """
    bound = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token in FLAG_VALUE_OPTIONS and i + 1 < len(argv):
            bound.append(f"--additional-flags={argv[i + 1]}")
            i += 2
            continue
        if token.startswith("-a="):
            token = "--additional-flags=" + token[len("-a="):]
        bound.append(token)
        i += 1
    return bound


def create_parser():
    parser = _ArgumentParser(
        prog="boxenter",
        description="Enter a container with a host-equivalent session, "
                    "starting or creating it first when needed.",
        epilog="Use '--' or '-e' to pass a command: boxenter -n box -- ls -la",
    )
    parser.add_argument("--version", "-V", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("name_arg", nargs="?", metavar="NAME",
                        help="Container name (same as --name)")
    parser.add_argument("-n", "--name", help="Container name (default: my-boxenter)")
    parser.add_argument(
        "-T", "-H", "--no-tty",
        dest="no_tty",
        action="store_true",
        help="Do not instantiate a tty",
    )
    parser.add_argument(
        "-nw", "--no-workdir",
        dest="no_workdir",
        action="store_true",
        help="Start in the container home directory instead of the current one",
    )
    parser.add_argument(
        "-a", "--additional-flags",
        dest="additional_flags",
        action="append",
        default=[],
        help="Additional flags for the container manager exec command (repeatable)",
    )
    parser.add_argument("-r", "--root", action="store_true",
                        help="Use a rootful container through the sudo program")
    parser.add_argument("--clean-path", action="store_true",
                        help="Use only the standard FHS directories for PATH")
    parser.add_argument("-Y", "--yes", action="store_true",
                        help="Non-interactive: create a missing container without asking")
    parser.add_argument("--timeout", type=float, default=None, metavar="SECONDS",
                        help="Give up waiting for container setup after SECONDS (0 waits forever)")
    parser.add_argument("-d", "--dry-run", action="store_true",
                        help="Print the generated command instead of running it")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show container manager commands as they run")
    return parser


def parse_args(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    own_args, command = split_command(list(argv))
    parser = create_parser()
    args = parser.parse_args(bind_flag_values(own_args))
    if args.name and args.name_arg and args.name != args.name_arg:
        parser.error(f"conflicting container names '{args.name_arg}' and '{args.name}'")
    args.name = args.name or args.name_arg
    args.command = command
    return args


def main(argv=None):
    args = parse_args(argv)

    # Lazy import commands to keep startup fast
    from boxenter.commands import cmd_enter
    cmd_enter(args)


if __name__ == "__main__":
    main()

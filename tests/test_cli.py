#!/usr/bin/env python3
# SPDX-License-Identifier: BUSL-1.1
"""Tests for boxenter argument parsing."""

import io
import unittest
from contextlib import redirect_stdout
from unittest import mock

from boxenter.cli import parse_args, split_command


class TestSplitCommand(unittest.TestCase):
    def test_double_dash(self):
        self.assertEqual(split_command(["-n", "box", "--", "ls", "-la"]),
                         (["-n", "box"], ["ls", "-la"]))

    def test_exec_flag(self):
        self.assertEqual(split_command(["-e", "bash", "--", "-c", "id"]),
                         ([], ["bash", "--", "-c", "id"]))

    def test_no_command(self):
        self.assertEqual(split_command(["-n", "box"]), (["-n", "box"], []))

    def test_flag_value_is_not_a_separator(self):
        self.assertEqual(split_command(["-a", "-e", "--", "ls"]),
                         (["-a", "-e"], ["ls"]))


class TestParseArgs(unittest.TestCase):
    def test_flags(self):
        args = parse_args(["-n", "box", "-T", "-nw", "-r", "--clean-path", "-Y",
                           "-a", "--env FOO=1", "--timeout", "30", "-d", "-v",
                           "--", "echo", "hi"])
        self.assertEqual(args.name, "box")
        self.assertTrue(args.no_tty)
        self.assertTrue(args.no_workdir)
        self.assertTrue(args.root)
        self.assertTrue(args.clean_path)
        self.assertTrue(args.yes)
        self.assertEqual(args.additional_flags, ["--env FOO=1"])
        self.assertEqual(args.timeout, 30.0)
        self.assertTrue(args.dry_run)
        self.assertTrue(args.verbose)
        self.assertEqual(args.command, ["echo", "hi"])

    def test_additional_flags_starting_with_dash(self):
        args = parse_args(["-n", "box", "-a", "--net=host", "--additional-flags", "--privileged",
                           "-a=--env=FOO=1", "--", "id"])
        self.assertEqual(args.additional_flags, ["--net=host", "--privileged", "--env=FOO=1"])
        self.assertEqual(args.name, "box")
        self.assertEqual(args.command, ["id"])

    def test_additional_flags_without_value_exits_1(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                parse_args(["-a"])
        self.assertEqual(ctx.exception.code, 1)

    def test_positional_name(self):
        args = parse_args(["box"])
        self.assertEqual(args.name, "box")
        self.assertEqual(args.command, [])

    def test_headless_alias(self):
        self.assertTrue(parse_args(["-H"]).no_tty)

    def test_unknown_flag_exits_1(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                parse_args(["--bogus"])
        self.assertEqual(ctx.exception.code, 1)

    def test_conflicting_names_exit_1(self):
        with mock.patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                parse_args(["one", "--name", "two"])
        self.assertEqual(ctx.exception.code, 1)

    def test_version_exits_0(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            with self.assertRaises(SystemExit) as ctx:
                parse_args(["--version"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("boxenter", buf.getvalue())


if __name__ == "__main__":
    unittest.main()

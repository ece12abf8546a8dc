#!/usr/bin/env python3
# SPDX-License-Identifier: BUSL-1.1
"""Tests for config file loading, precedence, and validation."""

import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

import yaml

from boxenter.config import ConfigError, ConfigStore, ValidationError, validate_options
from boxenter.config.resources import ContainerRef, EnterOptions


def _write_config(store, data: dict):
    store.config_dir.mkdir(parents=True, exist_ok=True)
    store.config_file.write_text(yaml.safe_dump(data, sort_keys=False))


def _args(**kwargs):
    defaults = dict(
        name=None, command=[], no_tty=False, no_workdir=False, additional_flags=[],
        root=False, clean_path=False, yes=False, timeout=None, dry_run=False, verbose=False,
    )
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class TestConfigStore(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.system_file = root / "etc" / "config.yaml"
        self.store = ConfigStore(config_dir=root / "user", system_file=self.system_file)

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults_without_files(self):
        settings = self.store.load_settings(environ={})
        self.assertEqual(settings.container_manager, "autodetect")
        self.assertEqual(settings.container_name, "my-boxenter")
        self.assertEqual(settings.sudo_program, "sudo")
        self.assertEqual(settings.startup_timeout, 0.0)

    def test_user_file_overrides_system_file(self):
        self.system_file.parent.mkdir(parents=True)
        self.system_file.write_text("containerName: from-system\ncontainerManager: docker\n")
        _write_config(self.store, {"containerName": "from-user", "startupTimeout": 30})
        settings = self.store.load_settings(environ={})
        self.assertEqual(settings.container_name, "from-user")
        self.assertEqual(settings.container_manager, "docker")
        self.assertEqual(settings.startup_timeout, 30.0)

    def test_environment_overrides_files(self):
        _write_config(self.store, {"containerName": "from-user", "skipWorkdir": False})
        settings = self.store.load_settings(environ={
            "BOXENTER_CONTAINER_NAME": "from-env",
            "BOXENTER_SKIP_WORKDIR": "1",
            "BOXENTER_NON_INTERACTIVE": "true",
            "BOXENTER_VERBOSE": "0",
        })
        self.assertEqual(settings.container_name, "from-env")
        self.assertTrue(settings.skip_workdir)
        self.assertTrue(settings.non_interactive)
        self.assertFalse(settings.verbose)

    def test_flags_override_everything(self):
        _write_config(self.store, {"containerName": "from-user", "startupTimeout": 30,
                                   "additionalFlags": "--env FOO=1"})
        with mock.patch.dict("os.environ", {"BOXENTER_CONTAINER_NAME": "from-env"}, clear=True):
            options = self.store.resolve_options(_args(
                name="from-flag", timeout=5.0, additional_flags=["--env BAR=2"], yes=True,
            ))
        self.assertEqual(options.container.name, "from-flag")
        self.assertEqual(options.startup_timeout, 5.0)
        self.assertEqual(options.additional_flags, ["--env", "FOO=1", "--env", "BAR=2"])
        self.assertTrue(options.non_interactive)

    def test_unknown_keys_are_ignored(self):
        _write_config(self.store, {"somethingElse": 1})
        settings = self.store.load_settings(environ={})
        self.assertEqual(settings.container_name, "my-boxenter")

    def test_non_mapping_file_is_an_error(self):
        self.store.config_dir.mkdir(parents=True)
        self.store.config_file.write_text("- just\n- a list\n")
        with self.assertRaises(ConfigError):
            self.store.load_settings(environ={})

    def test_bad_number_is_an_error(self):
        _write_config(self.store, {"pollInterval": "soon"})
        with self.assertRaises(ConfigError):
            self.store.load_settings(environ={})


class TestValidateOptions(unittest.TestCase):
    def _options(self, **kwargs):
        opts = EnterOptions(container=ContainerRef(name="box", manager="podman"))
        for key, value in kwargs.items():
            setattr(opts, key, value)
        return opts

    def test_valid_defaults(self):
        result = validate_options(self._options())
        self.assertTrue(result.valid)

    def test_unsupported_manager(self):
        opts = self._options(container=ContainerRef(name="box", manager="lxc"))
        result = validate_options(opts)
        self.assertFalse(result.valid)

    def test_bad_name_and_timeout(self):
        opts = self._options(container=ContainerRef(name="bad name", manager="podman"),
                             startup_timeout=-1)
        result = validate_options(opts)
        self.assertEqual(len(result.errors), 2)

    def test_raise_if_invalid_carries_all_errors(self):
        opts = self._options(container=ContainerRef(name="", manager="lxc"), poll_interval=0)
        result = validate_options(opts)
        with self.assertRaises(ValidationError) as ctx:
            result.raise_if_invalid()
        self.assertEqual(ctx.exception.errors, result.errors)
        self.assertEqual(len(ctx.exception.errors), 3)

    def test_raise_if_invalid_passes_when_valid(self):
        validate_options(self._options()).raise_if_invalid()

    def test_rootful_as_root_warns(self):
        opts = self._options(container=ContainerRef(name="box", manager="podman", rootful=True))
        with mock.patch("boxenter.config.validation.os.getuid", return_value=0):
            result = validate_options(opts)
        self.assertTrue(result.valid)
        self.assertTrue(result.warnings)


if __name__ == "__main__":
    unittest.main()

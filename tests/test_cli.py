"""Tests for the sign-app command line and configuration."""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from sign_app.cli import app, main
from sign_app.config import Config, load_config, save_example_config
from sign_app.errors import ConfigError, MissingDependencyError
from sign_app.toolchain import Toolchain
from sign_app.util.shell import ShellResult


def make_tools(signed=(), authorities=None, spotlight=()):
    """Toolchain answering from in-memory data."""
    signed_paths = set(signed)
    authorities = authorities or {}
    sign_calls = []

    def sign(path, entitlements):
        sign_calls.append((path, entitlements))
        signed_paths.add(path)
        return ShellResult(code=0, out="", err=f"{path}: signed app bundle")

    tools = Toolchain(
        query_authority=authorities.get,
        query_bundle_id=lambda path: None,
        spotlight_applications=lambda: list(spotlight),
        has_signature=lambda path: path in signed_paths,
        sign=sign,
    )
    tools.sign_calls = sign_calls
    return tools


class TestConfig(unittest.TestCase):
    """Test configuration management."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_default_config(self):
        """Test default configuration values."""
        config = Config()
        self.assertEqual(config.cache_file, "~/.sign_app_cache")
        self.assertEqual(config.applications_dir, "/Applications")
        self.assertEqual(config.user_applications_dir, "~/Applications")
        self.assertEqual(config.system_applications_root, "/System/Applications")
        self.assertEqual(config.excluded_search_prefixes, ["/System/", "/Library/"])
        self.assertIsNone(config.entitlements)
        self.assertFalse(config.backup)
        self.assertEqual(config.application_dirs, ["/Applications", "~/Applications"])

    def test_relative_prefix_rejected(self):
        """Test excluded prefixes must be absolute."""
        with self.assertRaises(ValueError):
            Config(excluded_search_prefixes=["System/"])

    def test_load_explicit_missing(self):
        """Test an explicit missing config path raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            load_config(self.root / "missing.yaml")

    def test_load_defaults_when_absent(self):
        """Test no config file anywhere yields defaults."""
        with patch("sign_app.config.DEFAULT_CONFIG_PATHS", [self.root / "none.yaml"]):
            self.assertEqual(load_config(None), Config())

    def test_load_values(self):
        """Test values are read from YAML."""
        path = self.root / "config.yaml"
        path.write_text("cache_file: /tmp/apps\nbackup: true\nentitlements: /tmp/ent.plist\n")
        config = load_config(path)
        self.assertEqual(config.cache_file, "/tmp/apps")
        self.assertTrue(config.backup)
        self.assertEqual(config.entitlements, "/tmp/ent.plist")

    def test_load_empty_file(self):
        """Test an empty file yields defaults."""
        path = self.root / "config.yaml"
        path.write_text("")
        self.assertEqual(load_config(path), Config())

    def test_load_unknown_key(self):
        """Test unknown keys are reported."""
        path = self.root / "config.yaml"
        path.write_text("colour: blue\n")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_load_invalid_yaml(self):
        """Test malformed YAML raises ConfigError."""
        path = self.root / "config.yaml"
        path.write_text("backup: [unclosed\n")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_entitlements_home_expanded(self):
        """Test a ~ in the entitlements path is expanded for codesign."""
        path = self.root / "config.yaml"
        path.write_text("entitlements: ~/entitlements.plist\n")
        with patch.dict(os.environ, {"HOME": str(self.root)}):
            config = load_config(path)
        self.assertEqual(config.entitlements, str(self.root / "entitlements.plist"))

    def test_non_string_prefix_is_config_error(self):
        """Test wrongly typed values are reported as ConfigError."""
        path = self.root / "config.yaml"
        path.write_text("excluded_search_prefixes:\n  - 1\n")
        with self.assertRaises(ConfigError):
            load_config(path)

        path.write_text("entitlements: [a, b]\n")
        with self.assertRaises(ConfigError):
            load_config(path)

    def test_example_config_loads(self):
        """Test the generated example is itself a valid config."""
        path = self.root / "sub" / "example.yaml"
        save_example_config(path)
        self.assertEqual(load_config(path), Config())


class CliTestCase(unittest.TestCase):
    """Base class wiring the CLI to temporary directories and fake tools."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.applications = self.root / "Applications"
        self.user_applications = self.root / "UserApplications"
        self.system_root = self.root / "System" / "Applications"
        self.cache_file = self.root / "cache"
        for directory in (self.applications, self.user_applications, self.system_root):
            directory.mkdir(parents=True)

        self.config_file = self.root / "config.yaml"
        self.config_file.write_text(
            f"cache_file: {self.cache_file}\n"
            f"applications_dir: {self.applications}\n"
            f"user_applications_dir: {self.user_applications}\n"
            f"system_applications_root: {self.system_root}\n"
        )

        self.runner = CliRunner()
        self.tools = make_tools()
        patchers = [
            patch("sign_app.cli.require_codesign", return_value="/usr/bin/codesign"),
            patch("sign_app.cli.default_toolchain", side_effect=lambda: self.tools),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self):
        self._tmp.cleanup()

    def make_app(self, parent: Path, name: str) -> str:
        bundle = parent / f"{name}.app"
        (bundle / "Contents").mkdir(parents=True)
        return str(bundle)

    def invoke(self, *args, input=None):
        return self.runner.invoke(app, ["--config", str(self.config_file), *args], input=input)


class TestCliName(CliTestCase):
    """Test signing and checking by name."""

    def test_sign_by_name(self):
        """Test an unsigned app is signed."""
        foo = self.make_app(self.applications, "Foo")
        result = self.invoke("--name", "Foo")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("App signed successfully", result.output)
        self.assertEqual(self.tools.sign_calls, [(foo, None)])

    def test_sign_from_user_directory(self):
        """Test name resolution falls back to the user's applications folder."""
        mine = self.make_app(self.user_applications, "Mine")
        result = self.invoke("-n", "Mine")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.tools.sign_calls, [(mine, None)])

    def test_already_signed(self):
        """Test an already-signed app exits 0 without signing."""
        foo = self.make_app(self.applications, "Foo")
        self.tools = make_tools(signed=[foo])
        result = self.invoke("--name", "Foo")

        self.assertEqual(result.exit_code, 0)
        self.assertIn("already signed", result.output)
        self.assertIn("--force", result.output)
        self.assertEqual(self.tools.sign_calls, [])

    def test_force_entitlements_and_backup(self):
        """Test --force, --entitlements and --backup reach the signer."""
        foo = self.make_app(self.applications, "Foo")
        self.tools = make_tools(signed=[foo])
        entitlements = self.root / "ent.plist"
        entitlements.write_text("<plist/>")

        result = self.invoke("-n", "Foo", "--force", "--backup", "--entitlements", str(entitlements))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.tools.sign_calls, [(foo, str(entitlements))])
        self.assertIn("Backup created", result.output)
        backups = [p.name for p in self.applications.iterdir() if "_backup_" in p.name]
        self.assertEqual(len(backups), 1)

    def test_verbose_shows_tool_output(self):
        """Test --verbose prints codesign's output."""
        self.make_app(self.applications, "Foo")
        result = self.invoke("-n", "Foo", "-v")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("signed app bundle", result.output)

    def test_name_with_path_components_not_found(self):
        """Test --name cannot point outside the applications folders."""
        self.make_app(self.system_root, "Bar")
        result = self.invoke("--name", "../System/Applications/Bar")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("App not found", result.output)
        self.assertEqual(self.tools.sign_calls, [])

    def test_not_found(self):
        """Test an unknown app name exits 1."""
        result = self.invoke("--name", "Missing")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("App not found: Missing", result.output)

    def test_system_app_refused(self):
        """Test an Apple-signed app is refused with exit 1."""
        safari = self.make_app(self.applications, "Safari")
        self.tools = make_tools(authorities={safari: "Authority=Apple Root CA"})
        result = self.invoke("--name", "Safari")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Cannot sign system app", result.output)
        self.assertEqual(self.tools.sign_calls, [])

    def test_check_signed_and_unsigned(self):
        """Test --check reports state without signing."""
        foo = self.make_app(self.applications, "Foo")
        self.make_app(self.applications, "Bar")
        self.tools = make_tools(signed=[foo])

        signed = self.invoke("--name", "Foo", "--check")
        unsigned = self.invoke("--name", "Bar", "--check")

        self.assertEqual(signed.exit_code, 0)
        self.assertIn("App is already signed", signed.output)
        self.assertEqual(unsigned.exit_code, 0)
        self.assertIn("App is not signed", unsigned.output)
        self.assertEqual(self.tools.sign_calls, [])


    def test_check_verbose_lists_authorities(self):
        """Test --check --verbose shows the signing authorities."""
        foo = self.make_app(self.applications, "Foo")
        self.tools = make_tools(
            signed=[foo],
            authorities={foo: "Authority=Developer ID Application: Example Co (ABCDE12345)"}
        )
        result = self.invoke("--name", "Foo", "--check", "--verbose")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Developer ID Application", result.output)


class TestCliList(CliTestCase):
    """Test the cached list and selection flow."""

    def test_list_builds_cache_and_signs_choice(self):
        """Test --list discovers apps, caches them and signs the selection."""
        foo = self.make_app(self.applications, "Foo")
        bar = self.make_app(self.applications, "Bar")

        with patch("sign_app.cli.choose", side_effect=lambda apps, console: apps[1]) as mock_choose:
            result = self.invoke("--list")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_choose.call_args[0][0], [bar, foo])
        self.assertEqual(self.cache_file.read_text(), f"{bar}\n{foo}\n")
        self.assertEqual(self.tools.sign_calls, [(foo, None)])

    def test_list_uses_existing_cache(self):
        """Test an existing cache is used without rediscovery."""
        cached = self.make_app(self.applications, "Cached")
        self.make_app(self.applications, "New")
        self.cache_file.write_text(f"{cached}\n")

        with patch("sign_app.cli.choose", side_effect=lambda apps, console: apps[0]) as mock_choose:
            result = self.invoke("-l")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_choose.call_args[0][0], [cached])

    def test_update_list_rebuilds(self):
        """Test --update-list refreshes a stale cache."""
        self.cache_file.write_text("/gone/Old.app\n")
        fresh = self.make_app(self.applications, "Fresh")

        with patch("sign_app.cli.choose", side_effect=lambda apps, console: apps[0]):
            result = self.invoke("--update-list", "--check")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(self.cache_file.read_text(), f"{fresh}\n")
        self.assertIn("App is not signed", result.output)

    def test_no_apps_found(self):
        """Test an empty discovery exits 0 with a message."""
        result = self.invoke("--list")

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No user-installed apps found.", result.output)

    def test_selected_app_missing(self):
        """Test a cached app that no longer exists fails with exit 1."""
        self.cache_file.write_text(f"{self.applications}/Gone.app\n")

        with patch("sign_app.cli.choose", side_effect=lambda apps, console: apps[0]):
            result = self.invoke("--list")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("App not found", result.output)

    def test_prompt_end_of_input_aborts(self):
        """Test closing stdin at the prompt exits 1 without a traceback."""
        self.make_app(self.applications, "Foo")
        result = self.invoke("--list", input="")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Aborted.", result.output)
        self.assertNotIsInstance(result.exception, EOFError)
        self.assertEqual(self.tools.sign_calls, [])

    def test_interactive_prompt(self):
        """Test the default prompt reads the selection from stdin."""
        self.make_app(self.applications, "Foo")
        result = self.invoke("--list", "--check", input="9\n1\n")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Invalid selection", result.output)
        self.assertIn("App is not signed", result.output)


class TestCliMisc(CliTestCase):
    """Test help, dependency checks and argument errors."""

    def test_help(self):
        """Test -h prints usage and exits 0."""
        result = self.runner.invoke(app, ["-h"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--entitlements", result.output)

    def test_no_action(self):
        """Test running without --name or --list exits 1."""
        result = self.invoke()
        self.assertEqual(result.exit_code, 1)
        self.assertIn("No action specified", result.output)

    def test_missing_codesign(self):
        """Test a missing codesign is fatal before anything runs."""
        self.make_app(self.applications, "Foo")
        with patch("sign_app.cli.require_codesign",
                   side_effect=MissingDependencyError("codesign command not found.")):
            result = self.invoke("--name", "Foo")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("codesign command not found", result.output)
        self.assertEqual(self.tools.sign_calls, [])

    def test_generate_config(self):
        """Test --generate-config writes an example and exits 0."""
        target = self.root / "generated.yaml"
        result = self.runner.invoke(app, ["--generate-config", str(target)])
        self.assertEqual(result.exit_code, 0)
        self.assertTrue(target.exists())

    def test_main_unknown_option(self):
        """Test an unknown flag exits 1."""
        with patch.object(sys, "argv", ["sign-app", "--bogus"]):
            with self.assertRaises(SystemExit) as ctx:
                main()
        self.assertEqual(ctx.exception.code, 1)

    def test_main_help(self):
        """Test --help through the entry point exits 0."""
        with patch.object(sys, "argv", ["sign-app", "--help"]):
            with self.assertRaises(SystemExit) as ctx:
                main()
        self.assertEqual(ctx.exception.code, 0)


if __name__ == "__main__":
    unittest.main()

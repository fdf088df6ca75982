"""Tests for loading and saving configuration."""

import os
import shutil
import stat
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from conjurconf.config.loader import (
    CONFIG_FILE_NAME,
    NETRC_FILE_NAME,
    default_netrc_path,
    get_config_path,
    load_config,
    save_config,
)
from conjurconf.config.settings import (
    Config,
    ConfigurationError,
    ConfigurationParseError,
)


class LoaderTestCase(unittest.TestCase):
    """Base class providing a temporary home directory."""

    def setUp(self) -> None:
        """Create temporary home and system config locations."""
        self.temp_dir = tempfile.mkdtemp()
        self.home = Path(self.temp_dir) / "home"
        self.home.mkdir()
        self.system_config = Path(self.temp_dir) / "conjur.conf"
        self.environ = {"HOME": str(self.home)}

        patcher = patch("conjurconf.config.loader.SYSTEM_CONFIG_FILE", self.system_config)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)


class TestDefaultPaths(LoaderTestCase):
    """Tests for default_netrc_path and get_config_path."""

    def test_default_netrc_path(self) -> None:
        """Test the netrc file defaults to $HOME/.netrc."""
        self.assertEqual(default_netrc_path(self.environ), self.home / NETRC_FILE_NAME)

    def test_default_netrc_path_without_home(self) -> None:
        """Test Path.home() is used when HOME is not set."""
        with patch("conjurconf.config.loader.Path.home", return_value=Path("/fallback")):
            path = default_netrc_path({})

        self.assertEqual(path, Path("/fallback/.netrc"))

    def test_default_config_path(self) -> None:
        """Test the conjurrc defaults to $HOME/.conjurrc."""
        self.assertEqual(get_config_path(self.environ), self.home / CONFIG_FILE_NAME)

    def test_config_path_from_environment(self) -> None:
        """Test CONJURRC overrides the conjurrc location."""
        environ = dict(self.environ, CONJURRC="/custom/path/conjurrc")

        self.assertEqual(get_config_path(environ), Path("/custom/path/conjurrc"))

    def test_paths_default_to_process_environment(self) -> None:
        """Test os.environ is read when no environment is given."""
        with patch.dict(os.environ, {"HOME": "/home/process"}, clear=True):
            self.assertEqual(default_netrc_path(), Path("/home/process/.netrc"))
            self.assertEqual(get_config_path(), Path("/home/process/.conjurrc"))


class TestLoadConfig(LoaderTestCase):
    """Tests for load_config."""

    def test_load_config_without_files(self) -> None:
        """Test environment values plus the default netrc path."""
        environ = dict(
            self.environ,
            CONJUR_ACCOUNT="account",
            CONJUR_APPLIANCE_URL="appliance-url",
        )

        config = load_config(environ=environ)

        self.assertEqual(
            config,
            Config(
                account="account",
                appliance_url="appliance-url",
                netrc_path=str(self.home / ".netrc"),
            ),
        )

    def test_load_config_explicit_missing_file(self) -> None:
        """Test an explicit missing file falls back to defaults."""
        config = load_config(Path(self.temp_dir) / "nonexistent", environ=self.environ)

        self.assertEqual(config, Config(netrc_path=str(self.home / ".netrc")))

    def test_load_config_user_file(self) -> None:
        """Test the user conjurrc is read from the home directory."""
        (self.home / ".conjurrc").write_text(
            "account: user-account\nappliance_url: https://user\nnetrc_path: /user/netrc\n"
        )

        config = load_config(environ=self.environ)

        self.assertEqual(config.account, "user-account")
        self.assertEqual(config.appliance_url, "https://user")
        self.assertEqual(config.netrc_path, "/user/netrc")

    def test_load_config_user_file_overrides_system_file(self) -> None:
        """Test the user conjurrc wins over the system file."""
        self.system_config.write_text(
            "account: system-account\nappliance_url: https://system\n"
        )
        (self.home / ".conjurrc").write_text("account: user-account\n")

        config = load_config(environ=self.environ)

        self.assertEqual(config.account, "user-account")
        self.assertEqual(config.appliance_url, "https://system")

    def test_load_config_conjurrc_variable(self) -> None:
        """Test CONJURRC selects the user conjurrc."""
        custom = Path(self.temp_dir) / "custom.yml"
        custom.write_text("account: custom-account\n")
        (self.home / ".conjurrc").write_text("account: home-account\n")

        config = load_config(environ=dict(self.environ, CONJURRC=str(custom)))

        self.assertEqual(config.account, "custom-account")

    def test_load_config_explicit_path_skips_other_files(self) -> None:
        """Test an explicit path is the only file read."""
        self.system_config.write_text("appliance_url: https://system\n")
        explicit = Path(self.temp_dir) / "explicit.yml"
        explicit.write_text("account: explicit-account\n")

        config = load_config(explicit, environ=self.environ)

        self.assertEqual(config.account, "explicit-account")
        self.assertEqual(config.appliance_url, "")

    def test_environment_wins_over_file(self) -> None:
        """Test environment variables take final precedence."""
        (self.home / ".conjurrc").write_text(
            "account: file-account\nappliance_url: https://file\n"
        )
        environ = dict(self.environ, CONJUR_APPLIANCE_URL="https://env")

        config = load_config(environ=environ)

        self.assertEqual(config.account, "file-account")
        self.assertEqual(config.appliance_url, "https://env")

    def test_file_netrc_path_overrides_default(self) -> None:
        """Test a configured netrc path replaces the default."""
        (self.home / ".conjurrc").write_text("netrc_path: /custom/netrc\n")

        config = load_config(environ=self.environ)

        self.assertEqual(config.netrc_path, "/custom/netrc")

    def test_load_config_does_not_validate(self) -> None:
        """Test an incomplete configuration loads without error."""
        config = load_config(environ=self.environ)

        self.assertEqual(config.account, "")
        self.assertEqual(config.appliance_url, "")

    def test_load_config_malformed_file(self) -> None:
        """Test a malformed conjurrc is surfaced to the caller."""
        (self.home / ".conjurrc").write_text('cert_file: "C:\\badly\\escaped\\path"\n')

        with self.assertRaises(ConfigurationParseError):
            load_config(environ=self.environ)

    def test_load_config_returns_new_instances(self) -> None:
        """Test each call produces an independent Config."""
        first = load_config(environ=self.environ)
        second = load_config(environ=self.environ)
        first.account = "changed"

        self.assertIsNot(first, second)
        self.assertEqual(second.account, "")


class TestSaveConfig(LoaderTestCase):
    """Tests for save_config."""

    def test_save_config_writes_conjurrc(self) -> None:
        """Test save_config writes the rendered conjurrc."""
        path = Path(self.temp_dir) / "conjurrc"
        config = Config(account="test-account", appliance_url="test-appliance-url")

        result = save_config(config, path)

        self.assertEqual(result, path)
        self.assertEqual(
            path.read_text(),
            "account: test-account\nappliance_url: test-appliance-url\n",
        )

    def test_save_config_default_path(self) -> None:
        """Test the default destination is the user conjurrc."""
        path = save_config(Config(account="a"), environ=self.environ)

        self.assertEqual(path, self.home / ".conjurrc")
        self.assertTrue(path.exists())

    def test_save_config_creates_parent_directory(self) -> None:
        """Test parent directories are created."""
        path = Path(self.temp_dir) / "nested" / "dir" / "conjurrc"

        save_config(Config(account="a"), path)

        self.assertTrue(path.exists())

    def test_save_config_owner_only_permissions(self) -> None:
        """Test the written file is readable by its owner only."""
        path = Path(self.temp_dir) / "conjurrc"

        save_config(Config(account="a"), path)

        mode = stat.S_IMODE(path.stat().st_mode)
        self.assertEqual(mode, 0o600)

    def test_save_config_creates_file_owner_only(self) -> None:
        """Test the file is owner-only from creation, regardless of umask."""
        path = Path(self.temp_dir) / "conjurrc"
        modes: list[int] = []
        original_replace = Path.replace

        def recording_replace(self: Path, target: Path) -> Path:
            modes.append(stat.S_IMODE(self.stat().st_mode))
            return original_replace(self, target)

        old_umask = os.umask(0)
        try:
            with patch.object(Path, "replace", recording_replace), \
                    patch("conjurconf.config.loader.os.chmod") as chmod:
                save_config(Config(account="a"), path)
        finally:
            os.umask(old_umask)

        self.assertEqual(modes, [0o600])
        chmod.assert_not_called()
        self.assertEqual(stat.S_IMODE(path.stat().st_mode), 0o600)

    def test_save_config_leaves_no_temp_file(self) -> None:
        """Test the temporary file is renamed into place."""
        path = Path(self.temp_dir) / "conjurrc"

        save_config(Config(account="a"), path)

        self.assertEqual(sorted(p.name for p in Path(self.temp_dir).iterdir()), ["conjurrc", "home"])

    def test_save_config_never_writes_secrets(self) -> None:
        """Test raw certificate and token are not written."""
        path = Path(self.temp_dir) / "conjurrc"

        save_config(Config(account="a", ssl_cert="secret-cert", jwt_content="secret-jwt"), path)

        self.assertNotIn("secret", path.read_text())

    def test_save_and_load_roundtrip(self) -> None:
        """Test a saved configuration loads back."""
        path = Path(self.temp_dir) / "conjurrc"
        config = Config(
            account="test-account",
            appliance_url="https://conjur.example.com",
            netrc_path="/custom/netrc",
            ssl_cert_path="/custom/conjur.pem",
            authn_type="ldap",
            service_id="ldap-service",
        )

        save_config(config, path)
        loaded = load_config(path, environ=self.environ)

        self.assertEqual(loaded, config)

    def test_save_config_unwritable_destination(self) -> None:
        """Test write failures raise ConfigurationError."""
        blocker = Path(self.temp_dir) / "blocker"
        blocker.write_text("")

        with self.assertRaises(ConfigurationError) as ctx:
            save_config(Config(account="a"), blocker / "conjurrc")

        self.assertIn("Cannot write config file", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()

"""Integration tests for CLI commands."""

import httpx
import pytest
import respx
import yaml
from typer.testing import CliRunner

from conftest import build_crate, snapshot
from source_provider.cli import app

runner = CliRunner()

CRATE_URL = "https://static.crates.io/crates/demo/demo-1.2.3.crate"


@pytest.fixture
def cli_test_env(tmp_path, monkeypatch):
    """Set up isolated CLI test environment."""
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    workspace_dir = tmp_path / "ws"

    monkeypatch.chdir(work_dir)
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("SOURCE_PROVIDER_WORKSPACE_DIR", str(workspace_dir))
    monkeypatch.delenv("SOURCE_PROVIDER_REGISTRY_URL", raising=False)
    monkeypatch.delenv("SOURCE_PROVIDER_TARGET_DIRS", raising=False)

    return {
        "work_dir": work_dir,
        "home_dir": home_dir,
        "workspace_dir": workspace_dir,
    }


@pytest.fixture
def crate_route():
    """Serve a crate archive from the default registry host."""
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get(CRATE_URL).mock(
            return_value=httpx.Response(
                200,
                content=build_crate(
                    "demo", "1.2.3", {"Cargo.toml": "[package]\n", "src/lib.rs": "\n"}
                ),
            )
        )
        yield route


class TestOriginOptions:
    """Test selection of the origin on the command line."""

    def test_requires_exactly_one_origin(self, cli_test_env, local_crate_dir):
        """Test zero or several origins are refused."""
        result = runner.invoke(app, ["fetch"])
        assert result.exit_code == 1
        assert "Exactly one of" in result.stdout

        result = runner.invoke(
            app, ["fetch", "--path", str(local_crate_dir), "--git", "https://x/y"]
        )
        assert result.exit_code == 1

    def test_registry_needs_version(self, cli_test_env):
        """Test --registry must be NAME@VERSION."""
        result = runner.invoke(app, ["fetch", "--registry", "demo"])
        assert result.exit_code == 1
        assert "NAME@VERSION" in result.stdout


class TestFetchCommand:
    """Test 'source-provider fetch'."""

    def test_fetch_registry(self, cli_test_env, crate_route):
        """Test fetching a registry package downloads it once."""
        result = runner.invoke(app, ["fetch", "--registry", "demo@1.2.3"])
        assert result.exit_code == 0, result.stdout
        assert "Fetched" in result.stdout

        result = runner.invoke(app, ["fetch", "--registry", "demo@1.2.3"])
        assert result.exit_code == 0
        assert crate_route.call_count == 1

    def test_fetch_registry_not_found(self, cli_test_env):
        """Test a missing package exits non-zero."""
        with respx.mock:
            respx.get(CRATE_URL).mock(return_value=httpx.Response(404))
            result = runner.invoke(app, ["fetch", "--registry", "demo@1.2.3"])

        assert result.exit_code == 1
        assert "failed to fetch" in result.stdout

    def test_fetch_local(self, cli_test_env, local_crate_dir):
        """Test fetching a local directory is a no-op."""
        result = runner.invoke(app, ["fetch", "--path", str(local_crate_dir)])
        assert result.exit_code == 0


class TestMaterializeCommand:
    """Test 'source-provider materialize'."""

    def test_materialize_local(self, cli_test_env, local_crate_dir):
        """Test a local directory is copied to the destination."""
        dest = cli_test_env["work_dir"] / "out"
        dest.mkdir()
        (dest / "stale.txt").write_text("x")

        result = runner.invoke(
            app, ["materialize", str(dest), "--path", str(local_crate_dir)]
        )

        assert result.exit_code == 0, result.stdout
        assert snapshot(dest) == snapshot(local_crate_dir)

    def test_materialize_registry(self, cli_test_env, crate_route):
        """Test a registry package is fetched and copied."""
        dest = cli_test_env["work_dir"] / "out"

        result = runner.invoke(app, ["materialize", str(dest), "--registry", "demo@1.2.3"])

        assert result.exit_code == 0, result.stdout
        assert (dest / "Cargo.toml").read_text() == "[package]\n"

    def test_materialize_no_fetch(self, cli_test_env):
        """Test --no-fetch fails for an uncached source."""
        dest = cli_test_env["work_dir"] / "out"

        result = runner.invoke(
            app, ["materialize", str(dest), "--registry", "demo@1.2.3", "--no-fetch"]
        )

        assert result.exit_code == 1
        assert "has not been fetched" in result.stdout
        assert not dest.exists()

    def test_materialize_missing_local(self, cli_test_env):
        """Test a missing local directory exits non-zero."""
        dest = cli_test_env["work_dir"] / "out"

        result = runner.invoke(app, ["materialize", str(dest), "--path", "missing"])

        assert result.exit_code == 1
        assert "does not exist" in result.stdout


class TestSyncCommand:
    """Test 'source-provider sync'."""

    def test_sync(self, cli_test_env, local_crate_dir, crate_route):
        """Test every configured source lands in the target directory."""
        config = cli_test_env["work_dir"] / "sources.yaml"
        config.write_text(
            yaml.dump(
                {
                    "version": "1.0",
                    "settings": {"target_dirs": ["build"]},
                    "sources": {
                        "demo": {"registry": "demo", "version": "1.2.3"},
                        "pkgA": {"path": str(local_crate_dir)},
                    },
                }
            )
        )

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0, result.stdout
        build = cli_test_env["work_dir"] / "build"
        assert (build / "demo" / "src" / "lib.rs").exists()
        assert snapshot(build / "pkgA") == snapshot(local_crate_dir)

    def test_sync_dry_run(self, cli_test_env, local_crate_dir):
        """Test a dry run changes nothing."""
        config = cli_test_env["work_dir"] / "sources.yaml"
        config.write_text(
            yaml.dump({"version": "1.0", "sources": {"pkgA": {"path": str(local_crate_dir)}}})
        )

        result = runner.invoke(app, ["sync", "--dry-run", "--target", "out"])

        assert result.exit_code == 0
        assert "DRY RUN" in result.stdout
        assert not (cli_test_env["work_dir"] / "out").exists()

    def test_sync_reports_failures(self, cli_test_env, local_crate_dir):
        """Test one failing source fails the run but not the others."""
        config = cli_test_env["work_dir"] / "sources.yaml"
        config.write_text(
            yaml.dump(
                {
                    "version": "1.0",
                    "sources": {
                        "broken": {"path": "does-not-exist"},
                        "pkgA": {"path": str(local_crate_dir)},
                    },
                }
            )
        )

        result = runner.invoke(app, ["sync", "--target", "out"])

        assert result.exit_code == 1
        assert "Failed to sync 1 source(s)" in result.stdout
        assert (cli_test_env["work_dir"] / "out" / "pkgA" / "Cargo.toml").exists()

    def test_sync_without_sources(self, cli_test_env):
        """Test syncing nothing only warns."""
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 0
        assert "No sources configured" in result.stdout


class TestInitAndValidate:
    """Test 'init' and 'validate'."""

    def test_init_creates_config_file(self, cli_test_env):
        """Test init writes a loadable sources.yaml."""
        config_file = cli_test_env["work_dir"] / "sources.yaml"

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        config = yaml.safe_load(config_file.read_text())
        assert config["version"] == "1.0"
        assert config["sources"] == {}

    def test_init_refuses_overwrite(self, cli_test_env):
        """Test init keeps an existing file unless forced."""
        config_file = cli_test_env["work_dir"] / "sources.yaml"
        config_file.write_text("keep")

        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert config_file.read_text() == "keep"

        result = runner.invoke(app, ["init", "--force"])
        assert result.exit_code == 0
        assert config_file.read_text() != "keep"

    def test_validate(self, cli_test_env):
        """Test a valid config is summarized."""
        (cli_test_env["work_dir"] / "sources.yaml").write_text(
            yaml.dump(
                {"version": "1.0", "sources": {"rand": {"git": "https://github.com/r/rand"}}}
            )
        )

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.stdout
        assert "rand" in result.stdout

    def test_validate_invalid(self, cli_test_env):
        """Test an invalid config exits non-zero."""
        (cli_test_env["work_dir"] / "sources.yaml").write_text(
            yaml.dump({"version": "2.0"})
        )

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 1
        assert "validation failed" in result.stdout


class TestCacheCommands:
    """Test the 'cache' subcommands."""

    def test_list_empty(self, cli_test_env):
        """Test listing an empty workspace."""
        result = runner.invoke(app, ["cache", "list"])
        assert result.exit_code == 0
        assert "Workspace is empty" in result.stdout

    def test_list_purge_and_clear(self, cli_test_env, crate_route):
        """Test cached packages can be listed and removed."""
        assert runner.invoke(app, ["fetch", "--registry", "demo@1.2.3"]).exit_code == 0

        result = runner.invoke(app, ["cache", "list"])
        assert result.exit_code == 0
        assert "demo 1.2.3" in result.stdout

        result = runner.invoke(app, ["cache", "purge", "--registry", "demo@1.2.3"])
        assert result.exit_code == 0
        assert "Purged" in result.stdout

        result = runner.invoke(app, ["cache", "purge", "--registry", "demo@1.2.3"])
        assert result.exit_code == 0
        assert "not cached" in result.stdout

        assert runner.invoke(app, ["fetch", "--registry", "demo@1.2.3"]).exit_code == 0
        result = runner.invoke(app, ["cache", "clear"], input="n\n")
        assert "Cancelled" in result.stdout
        assert any(cli_test_env["workspace_dir"].iterdir())

        result = runner.invoke(app, ["cache", "clear", "--force"])
        assert result.exit_code == 0
        assert list(cli_test_env["workspace_dir"].iterdir()) == []

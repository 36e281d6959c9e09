"""Unit tests for configuration and output modules."""

from pathlib import Path

import pytest

from kubecomposer.config import Config
from kubecomposer.output import OutputManager, Verbosity, get_output, set_output


class TestConfig:
    """Test cases for Config class."""

    def test_get_with_default(self, monkeypatch):
        """Test getting an unset variable returns the default."""
        monkeypatch.delenv("KUBECOMPOSER_TEST_VAR", raising=False)
        assert Config.get("KUBECOMPOSER_TEST_VAR", "fallback") == "fallback"

    def test_get_unset_without_default(self, monkeypatch):
        """Test an unset variable without a default is an empty string."""
        monkeypatch.delenv("KUBECOMPOSER_TEST_VAR", raising=False)
        assert Config.get("KUBECOMPOSER_TEST_VAR") == ""

    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("off", False), ("junk", False)])
    def test_get_bool(self, monkeypatch, value, expected):
        """Test boolean parsing."""
        monkeypatch.setenv("KUBECOMPOSER_TEST_VAR", value)
        assert Config.get_bool("KUBECOMPOSER_TEST_VAR") is expected

    def test_project_file_default(self, monkeypatch, tmp_path):
        """Test the project file defaults to project.json in the working directory."""
        monkeypatch.delenv("KUBECOMPOSER_PROJECT_FILE", raising=False)
        monkeypatch.chdir(tmp_path)
        assert Config.project_file() == Path.cwd() / "project.json"

    def test_snapshot_path_env(self, monkeypatch, tmp_path):
        """Test the snapshot path comes from the environment."""
        monkeypatch.setenv("KUBECOMPOSER_SNAPSHOT_PATH", str(tmp_path / "snap.json"))
        assert Config.snapshot_path() == (tmp_path / "snap.json").resolve()

    def test_output_dir_unset(self, monkeypatch):
        """Test no output directory means stdout."""
        monkeypatch.delenv("KUBECOMPOSER_OUTPUT_DIR", raising=False)
        assert Config.output_dir() is None

    def test_verbose(self, monkeypatch):
        """Test verbose reads KUBECOMPOSER_VERBOSE."""
        monkeypatch.setenv("KUBECOMPOSER_VERBOSE", "yes")
        assert Config.verbose() is True


class TestOutputManager:
    """Test cases for OutputManager."""

    def test_quiet_suppresses_info(self, capsys):
        """Test quiet mode hides info but not emitted content."""
        manager = OutputManager(verbosity=Verbosity.QUIET)
        manager.info("hidden")
        manager.emit("kind: Service")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "kind: Service" in out

    def test_warning_hidden_when_quiet(self, capsys):
        """Test warnings are printed unless quiet."""
        OutputManager(verbosity=Verbosity.QUIET).warning("careful")
        assert "careful" not in capsys.readouterr().out
        OutputManager().warning("careful")
        assert "careful" in capsys.readouterr().out

    def test_verbose_only_in_verbose_mode(self, capsys):
        """Test verbose messages need VERBOSE."""
        manager = OutputManager(verbosity=Verbosity.NORMAL)
        manager.verbose("details")
        assert "details" not in capsys.readouterr().out
        manager.set_verbosity(Verbosity.VERBOSE)
        manager.verbose("details")
        assert "details" in capsys.readouterr().out

    def test_error_goes_to_stderr(self, capsys):
        """Test errors are printed to stderr."""
        OutputManager().error("boom", suggestion="try again")
        err = capsys.readouterr().err
        assert "boom" in err
        assert "try again" in err

    def test_global_instance(self):
        """Test set_output replaces the global manager."""
        manager = OutputManager()
        set_output(manager)
        assert get_output() is manager

"""Tests for the pmresolve command line entry point."""

import json

import pytest

from constants import ExitCodes
from common.experiments import Experiments
from common.shell import HelperSubprocessFailed
from package_managers import helpers
from package_managers.helper import PackageManagerHelper
import pmresolve


@pytest.fixture(autouse=True)
def no_overrides(monkeypatch):
    monkeypatch.setattr(Experiments, "_overrides", {})
    # Leave root logger handlers to pytest
    monkeypatch.setattr(pmresolve, "configure_logging", lambda level=None: None)


@pytest.fixture
def project(tmp_path):
    (tmp_path / "package.json").write_text(json.dumps({
        "name": "example",
        "packageManager": "yarn@1.22.19",
        "engines": {"yarn": ">=1.22.0 <2.0.0"},
    }))
    (tmp_path / "yarn.lock").write_text("# yarn lockfile v1\n")
    return tmp_path


@pytest.fixture
def corepack(monkeypatch):
    calls = []

    def fake(command, fingerprint=None, experiments=None):
        calls.append(command)
        if command.endswith("yarn -v"):
            return "1.22.19\n"
        raise HelperSubprocessFailed("not installed", {"command": command})

    monkeypatch.setattr(helpers, "run_shell_command", fake)
    return calls


def run(capsys, *argv):
    code = pmresolve.main(list(argv) + ["-c", "/nonexistent/pmresolve.yml"])
    return code, capsys.readouterr().out


class TestMain:
    """End-to-end queries against a project directory."""

    def test_package_manager(self, project, corepack, capsys):
        code, out = run(capsys, "-d", str(project))
        assert code == ExitCodes.SUCCESS.value
        result = json.loads(out)
        assert result["name"] == "yarn"
        assert result["detected_version"] == "1.22.19"
        assert result["version_source"] == "package_manager_field"
        assert result["requirement"] == [">= 1.22.0", "< 2.0.0"]
        assert result["requirement_satisfied"] is True
        assert corepack == ["corepack yarn -v"]

    def test_detect_version(self, project, corepack, capsys):
        code, out = run(capsys, "-d", str(project), "-q", "detect-version", "-n", "yarn")
        assert code == ExitCodes.SUCCESS.value
        assert json.loads(out) == {"name": "yarn", "version": "1.22.19"}
        assert corepack == []

    def test_installed_version_fallback(self, project, corepack, capsys):
        code, out = run(capsys, "-d", str(project), "-q", "installed-version", "-n", "pnpm")
        assert code == ExitCodes.SUCCESS.value
        assert json.loads(out) == {"name": "pnpm", "version": "9"}

    def test_engine_constraint(self, project, corepack, capsys):
        code, out = run(capsys, "-d", str(project), "-q", "engine-constraint", "-n", "npm")
        assert code == ExitCodes.SUCCESS.value
        assert json.loads(out) == {"name": "npm", "constraints": None}

    def test_missing_directory(self, tmp_path, corepack, capsys):
        code, _ = run(capsys, "-d", str(tmp_path / "missing"))
        assert code == ExitCodes.FILE_ERROR.value

    def test_toolchain_error(self, project, monkeypatch, capsys):
        def unavailable(helper, query, name=None):
            raise helpers.ToolchainUnavailableError("yarn")

        monkeypatch.setattr(pmresolve, "run_query", unavailable)
        code, out = run(capsys, "-d", str(project))
        assert code == ExitCodes.TOOLCHAIN_ERROR.value
        assert out == ""

    def test_name_required_for_per_name_queries(self, project):
        with pytest.raises(SystemExit):
            pmresolve.main(["-d", str(project), "-q", "detect-version"])


def test_run_query_rejects_unknown_query():
    with pytest.raises(ValueError):
        pmresolve.run_query(PackageManagerHelper({}, {}), "bogus")

"""Tests for resolver data models and packageManager field parsing."""

import pytest

from package_managers.detector import PackageManagerDetector, split_package_manager_field
from versioning.models import DependencyFile, Manifest, PackageManagerName, freeze_lockfiles


class TestManifest:
    """Manifest snapshots."""

    def test_from_package_json(self):
        manifest = Manifest.from_package_json({"packageManager": " npm@9.0.0 ", "engines": {"npm": ">=9", "node": 18}})
        assert manifest.package_manager == "npm@9.0.0"
        assert dict(manifest.engines) == {"npm": ">=9", "node": "18"}

    def test_engines_are_read_only(self):
        manifest = Manifest.from_package_json({"engines": {"npm": ">=9"}})
        with pytest.raises(TypeError):
            manifest.engines["npm"] = "1"

    @pytest.mark.parametrize("package_json", [
        None,
        {},
        {"packageManager": 7, "engines": ["npm"]},
        {"packageManager": "   ", "engines": None},
    ])
    def test_malformed_fields_are_absent(self, package_json):
        manifest = Manifest.from_package_json(package_json)
        assert manifest.package_manager is None
        assert dict(manifest.engines) == {}


class TestPackageManagerName:
    """Name parsing."""

    def test_parse(self):
        assert PackageManagerName.parse("yarn") is PackageManagerName.YARN
        assert PackageManagerName.parse(PackageManagerName.PNPM) is PackageManagerName.PNPM
        assert PackageManagerName.parse("NPM") is None
        assert PackageManagerName.parse("npm^") is None
        assert PackageManagerName.parse(None) is None


def test_freeze_lockfiles_normalises_keys():
    lockfile = DependencyFile("yarn.lock", "# yarn lockfile v1\n")
    frozen = freeze_lockfiles({PackageManagerName.YARN: lockfile})
    assert frozen["yarn"] is lockfile
    with pytest.raises(TypeError):
        frozen["npm"] = lockfile


@pytest.mark.parametrize("value, expected", [
    ("npm@7.5.2", ("npm", "7.5.2")),
    ("npm", ("npm", None)),
    ("npm@", ("npm", None)),
    ("npm^@1.2.3", ("npm^", "1.2.3")),
    ("@scope/tool@1.0.0", ("@scope/tool", "1.0.0")),
    ("@1.0.0", ("@1.0.0", None)),
    (None, (None, None)),
])
def test_split_package_manager_field(value, expected):
    assert split_package_manager_field(value) == expected


class TestPackageManagerDetector:
    """Name selection order."""

    def test_engines_ignored_when_several_managers_listed(self):
        manifest = Manifest.from_package_json({"engines": {"npm": "8", "pnpm": "8"}})
        assert PackageManagerDetector(manifest, freeze_lockfiles({})).name_from_engines() is None

    def test_lockfile_entries_set_to_none_are_absent(self):
        detector = PackageManagerDetector(Manifest(), freeze_lockfiles({"npm": None, "pnpm": DependencyFile("pnpm-lock.yaml", "")}))
        assert detector.detect() is PackageManagerName.PNPM

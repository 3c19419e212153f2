"""
Unit tests for removing deployed builds from a host.
"""

import os
import stat

import pytest

from conftest import write_file
from core.removal import DeploymentRemover, has_illegal_name, safe_delete_tree


@pytest.fixture
def remover(target, catalog):
    return DeploymentRemover(target, catalog, shortcut_extension=".lnk")


@pytest.fixture
def deployed(hosts_root):
    """AppB 1.0 and 1.1 deployed on host1 with shortcuts."""
    root = hosts_root / "host1" / "CSTApps"
    write_file(root / "AppB" / "AppB" / "1.0" / "Dev" / "AppB.exe")
    write_file(root / "AppB" / "AppB" / "1.1" / "Dev" / "AppB.exe")
    for name in ("AppB 1.0 Dev.lnk", "AppB 1.0 QA.lnk", "AppB 1.1 Dev.lnk"):
        write_file(root / name)
    return root


class TestNames:

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a\\b", "c:", "x*", "q?", 'a"b', "a|b"])
    def test_illegal(self, name):
        assert has_illegal_name(name)

    @pytest.mark.parametrize("name", ["AppB", "1.0.3", "build_7-rc"])
    def test_legal(self, name):
        assert not has_illegal_name(name)


class TestRemove:

    def test_remove_build(self, remover, deployed):
        """Only the build folder and its shortcuts go."""
        [result] = remover.remove("host1", [("AppB", "1.0")])

        assert result.success
        assert result.message == "Removed"
        assert result.shortcuts_removed == 2
        assert not (deployed / "AppB" / "AppB" / "1.0").exists()
        assert (deployed / "AppB" / "AppB" / "1.1").is_dir()
        assert (deployed / "AppB 1.1 Dev.lnk").is_file()

    def test_remove_app(self, remover, deployed):
        [result] = remover.remove("host1", [("AppB", None)])

        assert result.success
        assert result.shortcuts_removed == 3
        assert not (deployed / "AppB" / "AppB").exists()

    def test_missing_build(self, remover, deployed):
        [result] = remover.remove("host1", [("AppB", "9.9")])

        assert not result.success
        assert result.message == "Build folder not found"

    def test_missing_app(self, remover, deployed):
        [result] = remover.remove("host1", [("AppA", None)])

        assert not result.success
        assert result.message == "App folder not found"

    def test_invalid_names_touch_nothing(self, remover, deployed):
        results = remover.remove("host1", [("AppB", ".."), ("../AppB", None)])

        assert [r.message for r in results] == ["Invalid characters", "Invalid characters"]
        assert (deployed / "AppB" / "AppB" / "1.0").is_dir()

    def test_each_target_reported(self, remover, deployed):
        """One bad target does not stop the rest."""
        results = remover.remove("host1", [("AppB", "9.9"), ("AppB", "1.1")])

        assert [r.success for r in results] == [False, True]

    def test_unconfigured_app_uses_name_as_group(self, remover, deployed):
        write_file(deployed / "Legacy" / "Legacy" / "0.1" / "legacy.exe")

        [result] = remover.remove("host1", [("Legacy", "0.1")])

        assert result.success
        assert not (deployed / "Legacy" / "Legacy" / "0.1").exists()


class TestSafeDeleteTree:

    def test_read_only_files(self, tmp_path):
        """Read-only files do not block deletion."""
        path = write_file(tmp_path / "tree" / "sub" / "locked.txt")
        os.chmod(path, stat.S_IREAD)

        safe_delete_tree(str(tmp_path / "tree"))

        assert not (tmp_path / "tree").exists()

"""
Shared fixtures and test doubles for the unit tests.
"""

import os
import threading
from collections import defaultdict

import pytest

from core.layout import StagingLayout, TargetLayout
from core.models import AppCatalog, AppExecutableSpec
from core.progress import ProgressSink
from core.shortcuts import ShortcutPublisher, ShortcutWriter


def write_file(path, content="x"):
    """Create a file (and its parents) with the given text content."""
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    with open(path, "w") as f:
        f.write(content)
    return str(path)


class RecordingSink(ProgressSink):
    """Keeps every event per connection id, in emit order."""

    def __init__(self):
        self._lock = threading.Lock()
        self.events = defaultdict(list)

    def _add(self, cid, kind, value):
        with self._lock:
            self.events[cid].append((kind, value))

    def progress(self, connection_id, percent):
        self._add(connection_id, "progress", percent)

    def message(self, connection_id, text):
        self._add(connection_id, "message", text)

    def error(self, connection_id, text):
        self._add(connection_id, "error", text)

    def of_kind(self, kind, cid="c1"):
        return [v for k, v in self.events[cid] if k == kind]


class FakeShortcutWriter(ShortcutWriter):
    """Writes the shortcut fields as text so tests can inspect them."""

    extension = ".lnk"

    def __init__(self, fail=False, skip_write=False):
        self.fail = fail
        self.skip_write = skip_write
        self.written = []

    def write(self, path, shortcut):
        if self.fail:
            raise RuntimeError("COM object unavailable")
        self.written.append((path, shortcut))
        if self.skip_write:
            return
        with open(path, "w") as f:
            f.write(f"{shortcut.target_path}\n{shortcut.arguments}\n")


APP_SPECS = [
    # environment passed as launch arguments
    AppExecutableSpec(name="AppA", executable="AppA.exe", product_group="AppA",
                      environment_in_shortcut=True),
    # environment is a path segment
    AppExecutableSpec(name="AppB", executable="AppB.exe", product_group="AppB"),
    # packaged artifacts: <group>/<env>/<build>.msix
    AppExecutableSpec(name="Pkg", executable="*.msix", product_group="Pkg",
                      product_requires_environment=True),
]


@pytest.fixture
def catalog():
    return AppCatalog(APP_SPECS)


@pytest.fixture
def staging_root(tmp_path):
    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def hosts_root(tmp_path):
    """Fake admin shares: <tmp>/hosts/<host> stands in for \\\\host\\C$."""
    root = tmp_path / "hosts"
    for host in ("host1", "host2"):
        (root / host / "CSTApps").mkdir(parents=True)
    return root


@pytest.fixture
def staging(staging_root):
    return StagingLayout(str(staging_root))


@pytest.fixture
def target(hosts_root):
    return TargetLayout(share_template=str(hosts_root / "{host}"), app_root="CSTApps")


@pytest.fixture
def writer():
    return FakeShortcutWriter()


@pytest.fixture
def publisher(target, catalog, writer, tmp_path):
    return ShortcutPublisher(target, catalog, writer=writer, temp_root=str(tmp_path / "tmp"))


@pytest.fixture
def sink():
    return RecordingSink()

# core/shortcuts.py
import glob
import os
import re
import shutil
import sys
import tempfile
from typing import Optional

from .layout import TargetLayout
from .logger import ComponentLogger
from .models import AppCatalog, ShortcutSpec
from .renderer import TemplateRenderer


class ShortcutWriter:
    """Writes one shortcut artifact to a local path."""

    extension = ""

    def write(self, path: str, shortcut: ShortcutSpec):
        raise NotImplementedError


class WshShortcutWriter(ShortcutWriter):
    """Windows ``.lnk`` shortcut through the WScript.Shell COM object."""

    extension = ".lnk"

    def write(self, path, shortcut):
        import win32com.client

        shell = win32com.client.Dispatch("WScript.Shell")
        lnk = shell.CreateShortCut(path)
        lnk.TargetPath = shortcut.target_path
        if shortcut.arguments:
            lnk.Arguments = shortcut.arguments
        lnk.WorkingDirectory = shortcut.working_directory
        lnk.IconLocation = shortcut.icon_location or shortcut.target_path
        lnk.Description = shortcut.description
        lnk.Save()


class LauncherScriptWriter(ShortcutWriter):
    """``.cmd`` launcher for hosts where .lnk files cannot be produced."""

    extension = ".cmd"

    def __init__(self, renderer: TemplateRenderer = None):
        self.renderer = renderer or TemplateRenderer()

    def write(self, path, shortcut):
        self.renderer.render_launcher(path, shortcut)


def default_writer() -> ShortcutWriter:
    if sys.platform == "win32":
        return WshShortcutWriter()
    return LauncherScriptWriter()


def shortcut_name(app: str, build: str, environment: Optional[str], extension: str) -> str:
    parts = [app, build] + ([environment] if environment else [])
    return " ".join(parts) + extension


def remove_shortcuts(folder: str, app: str, build: Optional[str], extension: str,
                     logger: ComponentLogger = None) -> int:
    """Delete ``<app> *`` (or ``<app> <build>*``) shortcuts in ``folder``."""
    log = logger or ComponentLogger("shortcut")
    if not os.path.isdir(folder):
        log.warning(f"Shortcut folder not found: {folder}")
        return 0
    stem = f"{app} " if build is None else f"{app} {build}"
    pattern = os.path.join(glob.escape(folder), glob.escape(stem) + "*" + extension)
    deleted = 0
    for path in glob.glob(pattern):
        try:
            os.remove(path)
            deleted += 1
        except OSError as e:
            log.warning(f"Failed to delete shortcut {path}: {e}")
    if deleted:
        log.info(f"Deleted {deleted} shortcut(s) in {folder} matching '{os.path.basename(pattern)}'")
    return deleted


class ShortcutPublisher:
    """
    Publish a launch shortcut for a deployed build into the host's share.

    The artifact is built in a private temporary folder first and then
    copied across; writing shortcut metadata straight onto a network share
    is unreliable. The temporary file is removed on every exit path.
    """

    def __init__(self, layout: TargetLayout, catalog: AppCatalog,
                 writer: ShortcutWriter = None,
                 arguments_template: str = "-Configuration {environment} -Mode {environment}",
                 temp_root: str = None,
                 logger: ComponentLogger = None):
        self.layout = layout
        self.catalog = catalog
        self.writer = writer or default_writer()
        self.arguments_template = arguments_template
        self.temp_root = temp_root or os.path.join(tempfile.gettempdir(), "appdrop-shortcuts")
        self.log = logger or ComponentLogger("shortcut")

    def _temp_dir(self, host: str) -> str:
        path = os.path.join(self.temp_root, re.sub(r"[^A-Za-z0-9._-]", "_", host))
        os.makedirs(path, exist_ok=True)
        return path

    def build_spec(self, host, app, build, environment,
                   path_environment=None) -> tuple[ShortcutSpec, str]:
        """
        Shortcut contents and file name for one deployed build.

        ``path_environment`` is the env folder the build was installed into;
        it only matters for apps that take the environment as arguments.
        """
        spec = self.catalog.get(app)
        if spec.environment_in_shortcut:
            path_env = path_environment
            arguments = self.arguments_template.format(environment=environment) if environment else ""
        else:
            path_env = environment
            arguments = ""

        target = self.layout.local_target(host, spec, build, path_env)
        label = " ".join(p for p in (spec.name, build, environment) if p)
        shortcut = ShortcutSpec(
            target_path       = target,
            working_directory = target.rsplit("\\", 1)[0],
            arguments         = arguments,
            icon_location     = target,
            description       = label,
        )
        return shortcut, shortcut_name(spec.name, build, environment, self.writer.extension)

    def publish(self, host: str, app: str, build: str, environment: Optional[str] = None,
                path_environment: Optional[str] = None) -> Optional[str]:
        if self.catalog.get(app) is None:
            self.log.warning(f"No executable configured for '{app}', shortcut not created")
            return None

        shortcut_dir = self.layout.host_root(host)
        if not os.path.isdir(shortcut_dir):
            self.log.warning(f"Shortcut folder missing or inaccessible: {shortcut_dir}")
            return None

        shortcut, name = self.build_spec(host, app, build, environment, path_environment)
        remote_path = os.path.join(shortcut_dir, name)
        local_path = os.path.join(self._temp_dir(host), name)

        try:
            self.writer.write(local_path, shortcut)
            if not os.path.isfile(local_path):
                self.log.error(f"Local shortcut was not created: {local_path}")
                return None
            shutil.copyfile(local_path, remote_path)
            self.log.info(f"Shortcut deployed: {remote_path}")
            return remote_path
        except Exception as e:
            self.log.error(f"Failed to create shortcut for {host} {app} {build}: {e}")
            return None
        finally:
            if os.path.exists(local_path):
                try:
                    os.remove(local_path)
                except OSError as e:
                    self.log.warning(f"Could not remove temporary shortcut {local_path}: {e}")

# core/layout.py
"""
Path rules for the staging repository and for target hosts.

Staging:  <root>/<group>/<build>/<sub_folder>[/<env>]/<exe>
          <root>/<group>/<env>/<build>.<ext>        (packaged products)
Target:   <share>/<app_root>/<group>/<app>/<build>[/<env>]
"""

import fnmatch
import ntpath
import os
from typing import Dict, List, Optional

from .models import AppExecutableSpec, DeploymentSelection


def list_dirs(path: str) -> List[str]:
    """Names of the immediate subdirectories of ``path``."""
    with os.scandir(path) as it:
        return sorted(e.name for e in it if e.is_dir())


def creation_time(path: str) -> float:
    st = os.stat(path)
    # st_birthtime where the platform has it, else ctime
    return getattr(st, "st_birthtime", st.st_ctime)


class StagingLayout:
    def __init__(self, staging_root: str):
        self.root = staging_root

    def product_path(self, spec: AppExecutableSpec) -> str:
        return os.path.join(self.root, spec.product_group)

    def matching_files(self, spec: AppExecutableSpec, directory: str) -> List[str]:
        """Files in ``directory`` whose name matches the executable pattern."""
        with os.scandir(directory) as it:
            return sorted(
                e.path for e in it
                if e.is_file() and fnmatch.fnmatch(e.name.lower(), spec.executable.lower())
            )

    def has_executable(self, spec: AppExecutableSpec, directory: str) -> bool:
        if not os.path.isdir(directory):
            return False
        if any(ch in spec.executable for ch in "*?["):
            return bool(self.matching_files(spec, directory))
        return os.path.isfile(os.path.join(directory, spec.executable))

    def build_path(self, spec: AppExecutableSpec, build: str) -> str:
        """``<group>/<build>/<sub_folder>``; sub_folder may be empty."""
        path = os.path.join(self.product_path(spec), build)
        if spec.sub_folder:
            path = os.path.join(path, spec.sub_folder)
        return path

    def is_neutral_build(self, spec: AppExecutableSpec, build: str) -> bool:
        """The executable sits directly in the build folder, not under an env folder."""
        return self.has_executable(spec, self.build_path(spec, build))

    def find_package(self, spec: AppExecutableSpec, build: str, environment: str) -> Optional[str]:
        env_dir = os.path.join(self.product_path(spec), environment)
        if not os.path.isdir(env_dir):
            return None
        for path in self.matching_files(spec, env_dir):
            if os.path.splitext(os.path.basename(path))[0] == build:
                return path
        return None

    def resolve_source(self, spec: AppExecutableSpec, selection: DeploymentSelection) -> Optional[str]:
        """
        Source folder (or packaged file) for a selection, None if absent.

        An environment-neutral build selected for a specific environment
        resolves to the build folder itself; it is copied once per
        environment on the target.
        """
        if spec.is_packaged:
            if not selection.environment:
                return None
            return self.find_package(spec, selection.build, selection.environment)

        candidate = self.build_path(spec, selection.build)
        if not os.path.isdir(candidate):
            return None
        if selection.environment:
            env_dir = os.path.join(candidate, selection.environment)
            if os.path.isdir(env_dir):
                return env_dir
            if self.has_executable(spec, candidate):
                return candidate
            return None
        return candidate


class TargetLayout:
    def __init__(self, share_template: str, app_root: str, local_drive: str = "C:",
                 root_overrides: Optional[Dict[str, str]] = None):
        self.share_template = share_template
        self.app_root = app_root
        self.local_drive = local_drive
        self.root_overrides = {k.lower(): v for k, v in (root_overrides or {}).items()}

    def app_root_for(self, host: str) -> str:
        root = self.root_overrides.get(host.lower()) or self.app_root
        return root.strip("/\\")

    def share_path(self, host: str) -> str:
        """The host's admin share, e.g. ``\\\\host\\C$``."""
        return self.share_template.format(host=host)

    def host_root(self, host: str) -> str:
        """App root on the host as seen through the share; shortcuts live here too."""
        return os.path.join(self.share_path(host), *self.app_root_for(host).replace("\\", "/").split("/"))

    def destination(self, host: str, spec: AppExecutableSpec, selection: DeploymentSelection) -> str:
        """``<host_root>/<group>/<app>/<build>[/<env>]``; one subtree per selection."""
        parts = [self.host_root(host), spec.product_group, spec.name, selection.build]
        if selection.environment:
            parts.append(selection.environment)
        return os.path.join(*parts)

    def local_target(self, host: str, spec: AppExecutableSpec, build: str,
                     environment: Optional[str]) -> str:
        """Executable path as the target host itself sees it (always Windows-style)."""
        parts = [self.local_drive + "\\", *self.app_root_for(host).replace("/", "\\").split("\\"),
                 spec.product_group, spec.name, build]
        if environment:
            parts.append(environment)
        parts.append(spec.executable)
        return ntpath.join(*parts)

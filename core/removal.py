# core/removal.py
import os
import shutil
import stat
import sys
from typing import List, Optional, Sequence, Tuple

from .layout import TargetLayout
from .logger import ComponentLogger
from .models import AppCatalog, RemovalResult
from .shortcuts import remove_shortcuts

ILLEGAL_NAME_CHARS = set('\\/:*?"<>|')


def has_illegal_name(name: str) -> bool:
    return not name or name in (".", "..") or any(c in ILLEGAL_NAME_CHARS for c in name)


def _clear_readonly(func, path, _exc):
    # rmtree hook: retry after dropping the read-only bit
    os.chmod(path, stat.S_IWRITE)
    func(path)


def safe_delete_tree(path: str):
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_clear_readonly)
    else:
        shutil.rmtree(path, onerror=_clear_readonly)


class DeploymentRemover:
    """Delete deployed builds (or whole apps) and their shortcuts from a host."""

    def __init__(self, layout: TargetLayout, catalog: AppCatalog, shortcut_extension: str,
                 logger: ComponentLogger = None):
        self.layout = layout
        self.catalog = catalog
        self.shortcut_extension = shortcut_extension
        self.log = logger or ComponentLogger("remove")

    def app_path(self, host: str, app: str) -> str:
        spec = self.catalog.get(app)
        group = spec.product_group if spec else app
        name = spec.name if spec else app
        return os.path.join(self.layout.host_root(host), group, name)

    def remove(self, host: str, targets: Sequence[Tuple[str, Optional[str]]]) -> List[RemovalResult]:
        """Remove each ``(app, build)``; ``build=None`` removes the whole app."""
        log = self.log.child(host)
        results = []
        for app, build in targets:
            if has_illegal_name(app) or (build is not None and has_illegal_name(build)):
                results.append(RemovalResult(app, build, False, "Invalid characters"))
                continue

            path = self.app_path(host, app)
            if build is not None:
                path = os.path.join(path, build)

            if not os.path.isdir(path):
                what = "Build" if build else "App"
                results.append(RemovalResult(app, build, False, f"{what} folder not found"))
                continue

            try:
                safe_delete_tree(path)
            except OSError as e:
                log.error(f"Failed to remove {path}: {e}")
                results.append(RemovalResult(app, build, False, str(e)))
                continue

            count = remove_shortcuts(self.layout.host_root(host), app, build,
                                     self.shortcut_extension, logger=log)
            log.success(f"Removed {path} and {count} shortcut(s)")
            results.append(RemovalResult(app, build, True, "Removed", shortcuts_removed=count))
        return results

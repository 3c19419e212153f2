# core/config.py
import os
from typing import List, Optional

from .exceptions import ConfigurationError
from .layout import StagingLayout, TargetLayout
from .models import AppCatalog, AppExecutableSpec
from .validation import ConfigValidator

CONFIG = "config.yaml"


class Config:
    def __init__(self, model, root):
        self.root            = root
        self.model           = model

        # staging side
        self.staging_root    = os.path.normpath(os.path.join(root, model.staging_root))
        self.environments    = list(model.environments)
        self.catalog         = AppCatalog(AppExecutableSpec.from_config(a) for a in model.apps)

        # target side
        self.app_root        = model.app_root
        self.share_template  = model.share_template
        self.local_drive     = model.local_drive
        self.shortcut_arguments = model.shortcut_arguments
        self.hosts           = list(model.hosts)

        self.scan            = model.scan

    @classmethod
    def load(cls, project_root: str, config_path: Optional[str] = None):
        project_root = os.path.abspath(project_root)
        path = config_path or os.path.join(project_root, CONFIG)
        if not os.path.isfile(path):
            raise ConfigurationError(f"{CONFIG} not found in {project_root}")
        model = ConfigValidator(project_root).validate_config_file(path)
        return cls(model, project_root)

    @property
    def host_names(self) -> List[str]:
        return [h.name for h in self.hosts]

    def find_host(self, name: str):
        return next((h for h in self.hosts if h.name.lower() == name.lower()), None)

    def staging_layout(self) -> StagingLayout:
        if not os.path.isdir(self.staging_root):
            raise ConfigurationError(f"staging_root not found: {self.staging_root}")
        return StagingLayout(self.staging_root)

    def target_layout(self) -> TargetLayout:
        overrides = {h.name: h.root for h in self.hosts if h.root}
        return TargetLayout(
            share_template = self.share_template,
            app_root       = self.app_root,
            local_drive    = self.local_drive,
            root_overrides = overrides,
        )

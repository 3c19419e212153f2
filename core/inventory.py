# core/inventory.py
import os
from typing import Iterable, List, Tuple

from .layout import StagingLayout, creation_time, list_dirs
from .logger import ComponentLogger
from .models import AppBuildGroup, AppExecutableSpec, BuildVariant

MAX_VARIANTS = 10


class InventoryBuilder:
    """
    Discover which (app, build, environment) combinations are deployable.

    Every call walks the staging tree again; nothing is cached between
    requests. A variant is only reported when its executable was seen on
    disk. Problems with one app or one directory are logged and cost only
    that unit's variants.
    """

    def __init__(self, layout: StagingLayout, logger: ComponentLogger = None,
                 max_variants: int = MAX_VARIANTS):
        self.layout = layout
        self.log = logger or ComponentLogger("inventory")
        self.max_variants = max_variants

    def build(self, specs: Iterable[AppExecutableSpec]) -> List[AppBuildGroup]:
        groups = []
        for spec in specs:
            try:
                variants = self.variants_for(spec)
            except Exception as e:
                self.log.error(f"{spec.name}: inventory failed: {e}")
                variants = []
            groups.append(AppBuildGroup(app_name=spec.name, variants=variants))
        return sorted(groups, key=lambda g: g.app_name.lower())

    def variants_for(self, spec: AppExecutableSpec) -> List[BuildVariant]:
        product = self.layout.product_path(spec)
        if not os.path.isdir(product):
            self.log.warning(f"{spec.name}: product folder not found at {product}, skipping")
            return []

        if spec.product_requires_environment:
            found = self._packaged_variants(spec, product)
        else:
            found = self._build_variants(spec, product)

        found.sort(key=lambda pair: pair[1], reverse=True)
        return [
            BuildVariant(build=v.build, environment=v.environment, created=ts)
            for v, ts in found[:self.max_variants]
        ]

    def _packaged_variants(self, spec, product) -> List[Tuple[BuildVariant, float]]:
        # <group>/<env>/<build>.<ext>
        found = []
        for env in list_dirs(product):
            env_dir = os.path.join(product, env)
            try:
                for path in self.layout.matching_files(spec, env_dir):
                    build = os.path.splitext(os.path.basename(path))[0]
                    found.append((BuildVariant(build=build, environment=env), creation_time(path)))
            except OSError as e:
                self.log.warning(f"{spec.name}: cannot read {env_dir}: {e}")
        return found

    def _build_variants(self, spec, product) -> List[Tuple[BuildVariant, float]]:
        # <group>/<build>/<sub_folder>[/<env>]/<exe>
        found = []
        for build in list_dirs(product):
            candidate = self.layout.build_path(spec, build)
            try:
                if not os.path.isdir(candidate):
                    continue
                if self.layout.has_executable(spec, candidate):
                    found.append((BuildVariant(build=build), creation_time(candidate)))
                    continue
                for env in list_dirs(candidate):
                    env_dir = os.path.join(candidate, env)
                    if self.layout.has_executable(spec, env_dir):
                        found.append((BuildVariant(build=build, environment=env), creation_time(env_dir)))
            except OSError as e:
                self.log.warning(f"{spec.name}: cannot read {candidate}: {e}")
        return found

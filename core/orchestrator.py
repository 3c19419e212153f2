# core/orchestrator.py
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .exceptions import DeployError, SelectionError
from .layout import StagingLayout, TargetLayout
from .logger import ComponentLogger
from .models import (AppCatalog, CopyJob, CopyResult, DeploymentSelection,
                     FileOutcome, JobOutcome)
from .progress import ProgressSink
from .shortcuts import ShortcutPublisher
from .sync import MTIME_TOLERANCE_SECONDS, list_files, percent, sync_file


class CopyOrchestrator:
    """
    Fan out one synchronization job per (host, selection) pair.

    Jobs run concurrently and share nothing but the sink. A failing file
    only counts against its job; a failing job never stops its siblings.
    """

    def __init__(self, staging: StagingLayout, target: TargetLayout, catalog: AppCatalog,
                 publisher: ShortcutPublisher, logger: ComponentLogger = None,
                 tolerance: float = MTIME_TOLERANCE_SECONDS):
        self.staging = staging
        self.target = target
        self.catalog = catalog
        self.publisher = publisher
        self.log = logger or ComponentLogger("copy")
        self.tolerance = tolerance

    # ── planning ───────────────────────────────────────────────────────

    def expand(self, selections: Sequence[DeploymentSelection],
               environments: Sequence[str]) -> List[DeploymentSelection]:
        """Deployable units for the selections, in request order."""
        return list(self.resolve_units(selections, environments))

    def resolve_units(self, selections: Sequence[DeploymentSelection],
                      environments: Sequence[str]) -> Dict[DeploymentSelection, List[str]]:
        """
        Map each deployable unit to the environments its shortcuts launch.

        A unit's environment is the env folder it installs into, so two units
        never share a destination. An environment-less selection becomes one
        unit per environment, except for a neutral build of an app that takes
        the environment as arguments: that build is copied once and gets one
        shortcut per environment. Unknown apps and units without a source on
        disk are dropped.
        """
        units: Dict[DeploymentSelection, List[str]] = {}
        for sel in selections:
            spec = self.catalog.get(sel.app)
            if spec is None:
                self.log.warning(f"Unknown app '{sel.app}', dropping {sel}")
                continue
            sel = DeploymentSelection(spec.name, sel.build, sel.environment)
            for unit, shortcut_env in self._candidates(spec, sel, environments):
                if self.staging.resolve_source(spec, unit) is None:
                    self.log.warning(f"No source for {unit}, dropping")
                    continue
                envs = units.setdefault(unit, [])
                if shortcut_env and shortcut_env not in envs:
                    envs.append(shortcut_env)
        return units

    def _candidates(self, spec, sel: DeploymentSelection,
                    environments: Sequence[str]) -> Iterator[Tuple[DeploymentSelection, Optional[str]]]:
        requested = [sel.environment] if sel.environment else list(environments)
        if spec.environment_in_shortcut and not spec.is_packaged \
                and self.staging.is_neutral_build(spec, sel.build):
            neutral = DeploymentSelection(sel.app, sel.build)
            if not requested:
                yield neutral, None
            for env in requested:
                yield neutral, env
            return
        for env in requested:
            yield sel.with_environment(env), env

    def plan(self, hosts: Sequence[str], selections: Sequence[DeploymentSelection],
             environments: Sequence[str]) -> List[CopyJob]:
        hosts = [h.strip() for h in hosts or [] if h and h.strip()]
        if not hosts:
            raise SelectionError("Please select at least one server.")
        if not selections:
            raise SelectionError("Please select at least one build.")

        units = self.resolve_units(selections, environments or [])
        if not units:
            raise SelectionError(
                "No valid build sources found for the chosen selections.",
                context={"errors": [f"{s}: no source in staging" for s in selections]}
            )
        return [CopyJob(host=h, selection=u, shortcut_environments=tuple(envs))
                for h in hosts for u, envs in units.items()]

    # ── execution ──────────────────────────────────────────────────────

    def run_copy(self, hosts: Sequence[str], selections: Sequence[DeploymentSelection],
                 environments: Sequence[str], sink: ProgressSink,
                 connection_id: str = "") -> CopyResult:
        jobs = self.plan(hosts, selections, environments)
        self.log.info(f"Starting {len(jobs)} copy job(s) for {len(set(j.host for j in jobs))} host(s)")

        try:
            with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="copy") as pool:
                futures = [pool.submit(self.run_job, job, sink, connection_id) for job in jobs]
                outcomes = [f.result() for f in futures]
        except Exception as e:
            self.log.error(f"Copy batch failed: {e}")
            try:
                sink.error(connection_id, f"Copy batch failed: {e}")
            except Exception as sink_exc:
                self.log.error(f"Could not report batch failure: {sink_exc}")
            raise DeployError(f"Copy batch failed: {e}", context={"errors": [str(e)]}) from e

        return CopyResult(total_jobs=len(jobs), outcomes=outcomes)

    def run_job(self, job: CopyJob, sink: ProgressSink, connection_id: str = "") -> JobOutcome:
        outcome = JobOutcome(job=job)
        log = self.log.child(job.host)
        sel = job.selection
        spec = self.catalog.get(sel.app)

        try:
            source = self.staging.resolve_source(spec, sel)
            if source is None:
                outcome.error = f"Source not found for {sel}"
                sink.error(connection_id, outcome.error)
                return outcome

            dest = self.target.destination(job.host, spec, sel)

            if os.path.isfile(source):
                return self._copy_package(job, source, dest, outcome, sink, connection_id)

            try:
                os.makedirs(dest, exist_ok=True)
            except OSError as e:
                outcome.error = f"Cannot create destination {dest}: {e}"
                log.error(outcome.error)
                sink.error(connection_id, outcome.error)
                return outcome

            files = list_files(source)
            outcome.total = len(files)
            log.info(f"{sel}: {outcome.total} file(s) -> {dest}")

            for src, rel in files:
                outcome.record(self._sync_one(src, os.path.join(dest, rel), rel, sink, connection_id))
                sink.progress(connection_id, percent(outcome.processed, outcome.total))
            if outcome.total == 0:
                sink.progress(connection_id, 100)

            sink.message(connection_id, f"{job.label}: ok:{outcome.ok} failed:{outcome.failed}")

            if outcome.failed == 0:
                self._publish_shortcuts(job, outcome, sink, connection_id)
            else:
                sink.message(connection_id, f"{job.label}: shortcut skipped due to copy errors")
        except Exception as e:
            outcome.error = f"Error for {job.host}: {e}"
            log.error(outcome.error)
            sink.error(connection_id, outcome.error)

        return outcome

    def _publish_shortcuts(self, job: CopyJob, outcome: JobOutcome, sink: ProgressSink,
                           connection_id: str):
        sel = job.selection
        for env in job.shortcut_environments or (sel.environment,):
            path = self.publisher.publish(job.host, sel.app, sel.build, env,
                                          path_environment=sel.environment)
            if path:
                outcome.shortcuts.append(path)
                sink.message(connection_id, f"Shortcut created: {os.path.basename(path)}")
            else:
                target = sel.with_environment(env) if env else sel
                sink.message(connection_id, f"Shortcut not created for {job.host}:{target}")

    def _copy_package(self, job, source, dest, outcome, sink, connection_id) -> JobOutcome:
        name = os.path.basename(source)
        outcome.total = 1
        try:
            os.makedirs(dest, exist_ok=True)
            shutil.copy2(source, os.path.join(dest, name))
        except OSError as e:
            outcome.failed = 1
            outcome.error = f"Package copy failed for {job.label}: {e}"
            sink.error(connection_id, outcome.error)
            return outcome
        outcome.copied = 1
        sink.progress(connection_id, 100)
        sink.message(connection_id, f"Package {name} copied to {job.host}")
        return outcome

    def _sync_one(self, src, dst, rel, sink, connection_id) -> FileOutcome:
        try:
            os.makedirs(os.path.dirname(dst), exist_ok=True)
        except OSError as e:
            sink.error(connection_id, f"Cannot create folder for {rel}: {e}")
            return FileOutcome.FAILED
        try:
            return sync_file(src, dst, self.tolerance)
        except OSError as e:
            sink.error(connection_id, f"Failed to copy {rel}: {e}")
            return FileOutcome.FAILED

#!/usr/bin/env python3
import uuid
from typing import List, Optional

from colorama import Fore

from core.config import Config
from core.exceptions import SelectionError
from core.models import DeploymentSelection
from core.progress import ConsoleProgressSink
from commands.common import build_orchestrator


def deploy_main(project_root: str, hosts: List[str], selectors: List[str],
                environments: Optional[List[str]] = None, all_hosts: bool = False,
                quiet: bool = False):
    """
    Copy the selected builds to every chosen host and publish shortcuts.

    selectors use the APP|BUILD or APP|BUILD|ENV form printed by `inventory`.
    """
    cfg = Config.load(project_root)

    if all_hosts:
        hosts = cfg.host_names
    for h in hosts or []:
        if cfg.find_host(h) is None:
            print(Fore.YELLOW + f"[deploy] WARNING: host '{h}' is not in config.yaml")

    selections = []
    for raw in selectors or []:
        sel = DeploymentSelection.parse(raw)
        if sel is None:
            raise SelectionError(f"Invalid selection '{raw}' (expected APP|BUILD or APP|BUILD|ENV)")
        selections.append(sel)

    envs = environments if environments else cfg.environments
    connection_id = f"copy-{uuid.uuid4().hex[:8]}"

    orchestrator = build_orchestrator(cfg)
    result = orchestrator.run_copy(
        hosts         = hosts,
        selections    = selections,
        environments  = envs,
        sink          = ConsoleProgressSink(show_progress=not quiet),
        connection_id = connection_id,
    )

    print()
    print(f"[deploy] {result.total_jobs} job(s) finished")
    for o in result.outcomes:
        if o.error:
            print(Fore.RED + f"  ✗ {o.job.label}: {o.error}")
        elif o.failed:
            print(Fore.YELLOW + f"  ⚠ {o.job.label}: ok:{o.ok} failed:{o.failed}")
        else:
            note = "" if o.shortcuts else " (no shortcut)"
            print(Fore.GREEN + f"  ✓ {o.job.label}: copied:{o.copied} skipped:{o.skipped}{note}")
    return 0 if result.success else 1

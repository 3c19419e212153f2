#!/usr/bin/env python3
from typing import List

from colorama import Fore

from core.config import Config
from core.exceptions import SelectionError
from commands.common import build_remover


def parse_targets(selectors: List[str]):
    """``APP`` removes the whole app, ``APP|BUILD`` a single build."""
    targets = []
    for raw in selectors:
        parts = [p.strip() for p in raw.split("|", 1)]
        if not parts[0]:
            raise SelectionError(f"Invalid removal target '{raw}'")
        build = parts[1] if len(parts) == 2 and parts[1] else None
        targets.append((parts[0], build))
    return targets


def remove_main(project_root: str, host: str, selectors: List[str]):
    """
    Remove deployed builds or apps from one host, with their shortcuts.
    """
    if not host:
        raise SelectionError("A host is required")
    if not selectors:
        raise SelectionError("No applications or builds selected for removal")

    cfg = Config.load(project_root)
    results = build_remover(cfg).remove(host, parse_targets(selectors))

    ok = sum(1 for r in results if r.success)
    failed = len(results) - ok
    for r in results:
        label = f"{r.app}|{r.build}" if r.build else r.app
        if r.success:
            print(Fore.GREEN + f"  ✓ {label}: {r.message} ({r.shortcuts_removed} shortcut(s))")
        else:
            print(Fore.RED + f"  ✗ {label}: {r.message}")
    print(f"[remove] Removal completed: {ok} successful, {failed} failed")
    return 0 if failed == 0 else 1

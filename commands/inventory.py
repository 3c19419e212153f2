#!/usr/bin/env python3
import json
from datetime import datetime
from typing import Optional

from colorama import Fore

from core.config import Config
from commands.common import build_inventory


def inventory_main(project_root: str, app: Optional[str] = None, as_json: bool = False):
    """
    List deployable (build, environment) variants per app, newest first.
    """
    cfg = Config.load(project_root)
    specs = list(cfg.catalog)
    if app:
        spec = cfg.catalog.get(app)
        if spec is None:
            print(Fore.RED + f"[inventory] Unknown app '{app}'")
            return 1
        specs = [spec]

    groups = build_inventory(cfg).build(specs)

    if as_json:
        print(json.dumps([
            {
                "app": g.app_name,
                "variants": [{"build": v.build, "environment": v.environment} for v in g.variants],
            }
            for g in groups
        ], indent=2))
        return 0

    for g in groups:
        print(Fore.CYAN + f"{g.app_name}")
        if not g.variants:
            print("  (no deployable builds)")
            continue
        for v in g.variants:
            when = datetime.fromtimestamp(v.created).strftime("%Y-%m-%d %H:%M")
            env = v.environment or "-"
            print(f"  {v.build:<30} {env:<12} {when}   {g.app_name}|{v.build}" +
                  (f"|{v.environment}" if v.environment else ""))
    return 0

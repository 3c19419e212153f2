#!/usr/bin/env python3
import json
import time
from typing import List, Optional

from colorama import Fore, Style

from core.config import Config
from commands.common import build_scanner


def print_statuses(snapshot):
    for s in snapshot.statuses:
        if not s.accessible:
            mark = Fore.RED + "✗"
        elif s.root_exists is False or s.message:
            mark = Fore.YELLOW + "⚠"
        else:
            mark = Fore.GREEN + "✓"
        latency = f"{s.latency_ms}ms" if s.latency_ms is not None else "-"
        root = {True: "yes", False: "no", None: "-"}[s.root_exists]
        print(f"  {mark}{Style.RESET_ALL} {s.host:<24} {latency:>7}  root:{root:<4} {s.message or ''}")


def scan_main(project_root: str, hosts: Optional[List[str]] = None,
              watch: bool = False, as_json: bool = False, poll_seconds: float = 0.5):
    """
    Probe host availability.

    Without --watch one scan runs to completion and the table is printed.
    With --watch the scanner keeps running (periodic rescans use
    scan.interval_seconds from config.yaml) until interrupted.
    """
    cfg = Config.load(project_root)
    scanner = build_scanner(cfg, hosts=hosts)
    if not scanner.hosts:
        print(Fore.YELLOW + "[scan] No hosts to scan")
        return 1

    future = scanner.start()
    try:
        if watch:
            last = None
            while True:
                snap = scanner.snapshot()
                state = (snap.scan_in_progress, snap.completed)
                if state != last:
                    if snap.scan_in_progress:
                        print(f"[scan] {snap.completed}/{snap.total} ...")
                    else:
                        print(f"[scan] idle, {len(snap.statuses)} host(s) known")
                        print_statuses(snap)
                    last = state
                time.sleep(poll_seconds)
        else:
            while not future.done():
                snap = scanner.snapshot()
                print(f"\r[scan] {snap.completed}/{snap.total}", end="", flush=True)
                time.sleep(poll_seconds)
            print()
            future.result()
    except KeyboardInterrupt:
        print("\n[scan] Interrupted by user.")
    finally:
        scanner.stop()

    snap = scanner.snapshot()
    if as_json:
        print(json.dumps(snap.as_dict(), indent=2))
    else:
        print_statuses(snap)
    reachable = sum(1 for s in snap.statuses if s.accessible)
    print(f"[scan] {reachable}/{len(snap.statuses)} host(s) reachable")
    return 0

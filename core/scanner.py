# core/scanner.py
"""
Background host availability scanner.

One scan probes every configured host, at most ``concurrency`` at a time.
A probe pings the host; only a reachable host gets its admin share and app
root checked, and those checks never flip ``accessible`` back to False.
Results land in a HostStatusMap owned by the scanner; the latest probe of a
host always replaces the previous one.
"""

import math
import os
import stat
import subprocess
import sys
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .exceptions import HostError
from .layout import TargetLayout
from .logger import ComponentLogger
from .models import HostStatus, ScanSnapshot

DEFAULT_CONCURRENCY = 6
DEFAULT_PING_TIMEOUT_MS = 800


def system_ping(host: str, timeout_ms: int) -> Tuple[bool, str]:
    """One ICMP echo through the system ``ping``. Returns ``(ok, reason)``."""
    if sys.platform == "win32":
        cmd = ["ping", "-n", "1", "-w", str(timeout_ms), host]
    else:
        cmd = ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout_ms / 1000))), host]
    try:
        res = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout_ms / 1000)
    except subprocess.TimeoutExpired:
        return False, "timeout"
    except FileNotFoundError:
        return False, "ping command not available"
    if res.returncode != 0:
        return False, "unreachable"
    return True, "ok"


class HostStatusMap:
    """Thread-safe host -> HostStatus map; keys are case-insensitive."""

    def __init__(self):
        self._lock = threading.Lock()
        self._statuses: Dict[str, HostStatus] = {}

    def put(self, status: HostStatus):
        with self._lock:
            self._statuses[status.host.lower()] = status

    def get(self, host: str) -> Optional[HostStatus]:
        with self._lock:
            return self._statuses.get(host.lower())

    def values(self) -> List[HostStatus]:
        with self._lock:
            return sorted(self._statuses.values(), key=lambda s: s.host.lower())

    def __len__(self):
        with self._lock:
            return len(self._statuses)


class HostProber:
    def __init__(self, layout: TargetLayout,
                 ping: Callable[[str, int], Tuple[bool, str]] = system_ping,
                 timeout_ms: int = DEFAULT_PING_TIMEOUT_MS):
        self.layout = layout
        self.ping = ping
        self.timeout_ms = timeout_ms

    def probe(self, host: str) -> HostStatus:
        status = HostStatus(host=host, last_checked_utc=datetime.now(timezone.utc))

        started = time.perf_counter()
        ok, reason = self.ping(host, self.timeout_ms)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        if not ok:
            status.accessible = False
            status.message = f"probe failed: {reason}"
            return status

        status.accessible = True
        status.latency_ms = elapsed_ms

        if not self.layout.app_root_for(host):
            return status

        share = self.layout.share_path(host)
        try:
            share_ok = _is_dir(share)
        except OSError as e:
            status.message = f"share error: {e}"
            return status
        if not share_ok:
            status.message = "share not accessible"
            return status

        root = self.layout.host_root(host)
        try:
            status.root_exists = _is_dir(root)
        except OSError as e:
            status.message = f"root error: {e}"
            return status
        if not status.root_exists:
            status.message = "root missing"
        return status


def _is_dir(path: str) -> bool:
    """Like os.path.isdir, but errors other than 'not found' propagate."""
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except FileNotFoundError:
        return False


class HostAvailabilityScanner:
    """
    Idle -> Scanning -> Idle.

    ``trigger_scan`` while a scan is running is a no-op and returns None.
    ``start`` launches the first scan and, if an interval is set, a
    periodic rescan thread; ``stop`` cancels outstanding probes and joins
    the workers.
    """

    def __init__(self, hosts: Iterable[str], prober: HostProber,
                 statuses: HostStatusMap = None,
                 concurrency: int = DEFAULT_CONCURRENCY,
                 interval_seconds: int = 0,
                 logger: ComponentLogger = None):
        seen = []
        for h in hosts:
            h = (h or "").strip()
            if h and h.lower() not in [s.lower() for s in seen]:
                seen.append(h)
        self.hosts = tuple(seen)
        self.prober = prober
        self.statuses = statuses if statuses is not None else HostStatusMap()
        self.concurrency = max(1, concurrency)
        self.interval_seconds = interval_seconds
        self.log = logger or ComponentLogger("scan")

        self._lock = threading.Lock()
        self._count_lock = threading.Lock()
        self._scan_in_progress = False
        self._completed = 0
        self._total = 0
        self._cancel = threading.Event()
        self._stopped = threading.Event()
        self._closed = False

        self._supervisor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scan")
        self._probes = ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="probe")
        self._ticker: Optional[threading.Thread] = None
        self.last_scan: Optional[Future] = None

    # ── query surface ──────────────────────────────────────────────────

    @property
    def scan_in_progress(self) -> bool:
        return self._scan_in_progress

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def total(self) -> int:
        return self._total

    def snapshot(self) -> ScanSnapshot:
        with self._lock:
            in_progress, total = self._scan_in_progress, self._total
        with self._count_lock:
            completed = self._completed
        return ScanSnapshot(
            scan_in_progress=in_progress,
            completed=completed,
            total=total,
            statuses=self.statuses.values(),
        )

    def trigger_scan(self) -> Optional[Future]:
        with self._lock:
            if self._closed:
                raise HostError("Host scanner has been stopped")
            if self._scan_in_progress:
                return None
            self._scan_in_progress = True
            with self._count_lock:
                self._completed = 0
            self._total = len(self.hosts)
            self._cancel = threading.Event()
            try:
                future = self._supervisor.submit(self._run_scan, self._cancel)
            except Exception:
                self._scan_in_progress = False
                raise
            self.last_scan = future
            return future

    # ── lifecycle ──────────────────────────────────────────────────────

    def start(self) -> Future:
        self.log.info(f"Starting initial scan of {len(self.hosts)} host(s)")
        future = self.trigger_scan() or self.last_scan
        future.add_done_callback(self._report_fault)
        if self.interval_seconds > 0 and self._ticker is None:
            self._ticker = threading.Thread(target=self._tick, name="scan-ticker", daemon=True)
            self._ticker.start()
        return future

    def stop(self, wait_for_workers: bool = True):
        with self._lock:
            self._closed = True
            self._cancel.set()
        self._stopped.set()
        if self._ticker is not None:
            self._ticker.join(timeout=5)
        self._supervisor.shutdown(wait=wait_for_workers)
        self._probes.shutdown(wait=wait_for_workers)

    def _tick(self):
        while not self._stopped.wait(self.interval_seconds):
            try:
                future = self.trigger_scan()
            except HostError:
                return
            if future is not None:
                future.add_done_callback(self._report_fault)

    def _report_fault(self, future: Future):
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self.log.error(f"Host availability scan failed: {exc}")

    # ── scan ───────────────────────────────────────────────────────────

    def _run_scan(self, cancel: threading.Event):
        try:
            if not self.hosts:
                self.log.warning("No hosts configured for availability scan.")
                return
            gate = threading.Semaphore(self.concurrency)
            pending = []
            for host in self.hosts:
                gate.acquire()
                if cancel.is_set():
                    gate.release()
                    self.log.info("Host availability scan canceled.")
                    break
                pending.append(self._probes.submit(self._probe_one, host, gate))
            wait(pending)
            self.log.info(f"Scan finished: {self.completed}/{self.total} host(s) probed")
        finally:
            with self._lock:
                self._scan_in_progress = False

    def _probe_one(self, host: str, gate: threading.Semaphore):
        try:
            try:
                status = self.prober.probe(host)
            except Exception as e:
                status = HostStatus(
                    host=host,
                    accessible=False,
                    message=str(e),
                    last_checked_utc=datetime.now(timezone.utc),
                )
            self.statuses.put(status)
            with self._count_lock:
                self._completed += 1
        finally:
            gate.release()

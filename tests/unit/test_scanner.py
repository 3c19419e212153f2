"""
Unit tests for the host availability scanner.

Pings are injected; shares are directories under tmp_path.
"""

import threading
import time

import pytest

from core.exceptions import HostError
from core.layout import TargetLayout
from core.models import HostStatus
from core.scanner import HostAvailabilityScanner, HostProber, HostStatusMap


def ping_ok(host, timeout_ms):
    return True, "ok"


def ping_table(results):
    """Ping double answering from a host -> (ok, reason) table."""
    def ping(host, timeout_ms):
        return results.get(host, (True, "ok"))
    return ping


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def layout(hosts_root):
    return TargetLayout(share_template=str(hosts_root / "{host}"), app_root="CSTApps")


@pytest.fixture
def make_scanner(layout):
    created = []

    def factory(hosts, ping=ping_ok, **kwargs):
        scanner = HostAvailabilityScanner(hosts, HostProber(layout, ping=ping), **kwargs)
        created.append(scanner)
        return scanner

    yield factory
    for scanner in created:
        scanner.stop()


class TestHostProber:
    """Single-host probe semantics."""

    def test_ping_failure(self, layout):
        """Unreachable hosts never get their share checked."""
        prober = HostProber(layout, ping=lambda h, t: (False, "timeout"))

        status = prober.probe("X")

        assert status.accessible is False
        assert status.message == "probe failed: timeout"
        assert status.root_exists is None
        assert status.latency_ms is None
        assert status.last_checked_utc is not None

    def test_share_unreachable(self, layout):
        """Reachable host without a share stays accessible."""
        status = HostProber(layout, ping=ping_ok).probe("Y")

        assert status.accessible is True
        assert status.root_exists is None
        assert status.message == "share not accessible"
        assert status.latency_ms is not None

    def test_root_present(self, layout):
        status = HostProber(layout, ping=ping_ok).probe("host1")

        assert status.accessible is True
        assert status.root_exists is True
        assert status.message is None

    def test_root_missing(self, layout, hosts_root):
        (hosts_root / "bare").mkdir()

        status = HostProber(layout, ping=ping_ok).probe("bare")

        assert status.accessible is True
        assert status.root_exists is False
        assert status.message == "root missing"

    def test_no_app_root_configured(self, hosts_root):
        """Without an app root only reachability is reported."""
        layout = TargetLayout(share_template=str(hosts_root / "{host}"), app_root="")

        status = HostProber(layout, ping=ping_ok).probe("nowhere")

        assert status.accessible is True
        assert status.root_exists is None
        assert status.message is None

    def test_timeout_passed_to_ping(self, layout):
        seen = []

        def ping(host, timeout_ms):
            seen.append(timeout_ms)
            return True, "ok"

        HostProber(layout, ping=ping, timeout_ms=250).probe("host1")

        assert seen == [250]


class TestHostStatusMap:

    def test_case_insensitive_last_write_wins(self):
        statuses = HostStatusMap()
        statuses.put(HostStatus(host="Host1", accessible=False))
        statuses.put(HostStatus(host="HOST1", accessible=True))

        assert len(statuses) == 1
        assert statuses.get("host1").accessible is True

    def test_values_sorted(self):
        statuses = HostStatusMap()
        for h in ("c", "A", "b"):
            statuses.put(HostStatus(host=h))
        assert [s.host for s in statuses.values()] == ["A", "b", "c"]


class TestScan:
    """Full scans."""

    def test_scan_all_hosts(self, make_scanner, hosts_root):
        (hosts_root / "bare").mkdir()
        ping = ping_table({"down": (False, "unreachable")})
        scanner = make_scanner(["host1", "bare", "down"], ping=ping)

        scanner.trigger_scan().result(timeout=5)

        snap = scanner.snapshot()
        assert snap.scan_in_progress is False
        assert (snap.completed, snap.total) == (3, 3)
        by_host = {s.host: s for s in snap.statuses}
        assert by_host["host1"].root_exists is True
        assert by_host["bare"].message == "root missing"
        assert by_host["down"].message == "probe failed: unreachable"

    def test_duplicate_hosts_probed_once(self, make_scanner):
        calls = []

        def ping(host, timeout_ms):
            calls.append(host)
            return True, "ok"

        scanner = make_scanner(["host1", "HOST1", " host1 ", "", "host2"], ping=ping)
        scanner.trigger_scan().result(timeout=5)

        assert sorted(calls) == ["host1", "host2"]
        assert scanner.total == 2

    def test_no_hosts(self, make_scanner):
        scanner = make_scanner([])

        scanner.trigger_scan().result(timeout=5)

        assert scanner.snapshot().statuses == []
        assert scanner.scan_in_progress is False

    def test_probe_exception_becomes_status(self, make_scanner):
        """A crashing probe is recorded and does not stop the scan."""
        def ping(host, timeout_ms):
            if host == "bad":
                raise RuntimeError("socket exploded")
            return True, "ok"

        scanner = make_scanner(["bad", "host1"], ping=ping)
        scanner.trigger_scan().result(timeout=5)

        bad = scanner.statuses.get("bad")
        assert bad.accessible is False
        assert bad.message == "socket exploded"
        assert scanner.statuses.get("host1").accessible is True
        assert scanner.completed == 2

    def test_rescan_replaces_status(self, make_scanner):
        state = {"up": False}

        def ping(host, timeout_ms):
            return (True, "ok") if state["up"] else (False, "timeout")

        scanner = make_scanner(["host1"], ping=ping)
        scanner.trigger_scan().result(timeout=5)
        assert scanner.statuses.get("host1").accessible is False

        state["up"] = True
        scanner.trigger_scan().result(timeout=5)

        assert scanner.statuses.get("host1").accessible is True
        assert len(scanner.statuses) == 1

    def test_injected_status_map(self, layout):
        statuses = HostStatusMap()
        scanner = HostAvailabilityScanner(["host1"], HostProber(layout, ping=ping_ok),
                                          statuses=statuses)
        try:
            scanner.trigger_scan().result(timeout=5)
        finally:
            scanner.stop()

        assert statuses.get("host1").root_exists is True


class TestConcurrency:
    """Coalescing and the concurrency cap."""

    def test_trigger_while_running_is_coalesced(self, make_scanner):
        """A second trigger leaves counters and recorded statuses untouched."""
        release = threading.Event()

        def ping(host, timeout_ms):
            if host == "slow":
                release.wait(5)
            return True, "ok"

        scanner = make_scanner(["host1", "slow"], ping=ping)
        first = scanner.trigger_scan()
        assert wait_until(lambda: scanner.completed == 1)

        before = scanner.snapshot().as_dict()
        assert before["scan_in_progress"] is True
        assert (before["completed"], before["total"]) == (1, 2)
        assert [s["host"] for s in before["statuses"]] == ["host1"]

        assert scanner.trigger_scan() is None
        assert scanner.last_scan is first
        assert scanner.snapshot().as_dict() == before

        release.set()
        first.result(timeout=5)
        assert scanner.scan_in_progress is False
        assert scanner.trigger_scan() is not None

    def test_probe_cap(self, make_scanner):
        """No more than `concurrency` probes run at once."""
        lock = threading.Lock()
        active = {"now": 0, "peak": 0}

        def ping(host, timeout_ms):
            with lock:
                active["now"] += 1
                active["peak"] = max(active["peak"], active["now"])
            time.sleep(0.05)
            with lock:
                active["now"] -= 1
            return True, "ok"

        scanner = make_scanner([f"h{i}" for i in range(20)], ping=ping, concurrency=6)
        scanner.trigger_scan().result(timeout=10)

        assert 1 < active["peak"] <= 6
        assert scanner.completed == 20

    def test_progress_visible_mid_scan(self, make_scanner):
        release = threading.Event()

        def ping(host, timeout_ms):
            if host == "slow":
                release.wait(5)
            return True, "ok"

        scanner = make_scanner(["fast", "slow"], ping=ping)
        future = scanner.trigger_scan()

        assert wait_until(lambda: scanner.completed == 1)
        snap = scanner.snapshot()
        assert snap.scan_in_progress is True
        assert (snap.completed, snap.total) == (1, 2)

        release.set()
        future.result(timeout=5)


class TestLifecycle:
    """start/stop."""

    def test_start_runs_initial_scan(self, make_scanner):
        scanner = make_scanner(["host1"])

        future = scanner.start()
        future.result(timeout=5)

        assert scanner.statuses.get("host1") is not None
        assert scanner.last_scan is future

    def test_trigger_after_stop(self, make_scanner):
        scanner = make_scanner(["host1"])
        scanner.stop()

        with pytest.raises(HostError):
            scanner.trigger_scan()

    def test_stop_cancels_pending_probes(self, make_scanner):
        """Hosts not yet started when stop() is called are not probed."""
        release = threading.Event()
        calls = []

        def ping(host, timeout_ms):
            calls.append(host)
            release.wait(5)
            return True, "ok"

        scanner = make_scanner([f"h{i}" for i in range(5)], ping=ping, concurrency=1)
        future = scanner.trigger_scan()
        assert wait_until(lambda: len(calls) == 1)

        stopper = threading.Thread(target=scanner.stop)
        stopper.start()
        assert wait_until(lambda: scanner._cancel.is_set())
        release.set()
        stopper.join(5)

        future.result(timeout=5)
        assert len(calls) < 5

    def test_periodic_rescan(self, make_scanner):
        calls = []

        def ping(host, timeout_ms):
            calls.append(host)
            return True, "ok"

        scanner = make_scanner(["host1"], ping=ping, interval_seconds=0.05)
        scanner.start()

        assert wait_until(lambda: len(calls) >= 3)
        scanner.stop()
        settled = len(calls)
        time.sleep(0.2)
        assert len(calls) == settled

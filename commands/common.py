from colorama import Fore

from core.config import Config
from core.inventory import InventoryBuilder
from core.orchestrator import CopyOrchestrator
from core.removal import DeploymentRemover
from core.scanner import HostAvailabilityScanner, HostProber, system_ping
from core.shortcuts import ShortcutPublisher, default_writer


def build_orchestrator(cfg: Config, writer=None) -> CopyOrchestrator:
    target = cfg.target_layout()
    publisher = ShortcutPublisher(
        layout             = target,
        catalog            = cfg.catalog,
        writer             = writer or default_writer(),
        arguments_template = cfg.shortcut_arguments,
    )
    return CopyOrchestrator(
        staging   = cfg.staging_layout(),
        target    = target,
        catalog   = cfg.catalog,
        publisher = publisher,
    )


def build_inventory(cfg: Config) -> InventoryBuilder:
    return InventoryBuilder(cfg.staging_layout())


def build_remover(cfg: Config, writer=None) -> DeploymentRemover:
    writer = writer or default_writer()
    return DeploymentRemover(cfg.target_layout(), cfg.catalog, writer.extension)


def build_scanner(cfg: Config, hosts=None, ping=None) -> HostAvailabilityScanner:
    prober = HostProber(
        cfg.target_layout(),
        ping       = ping or system_ping,
        timeout_ms = cfg.scan.ping_timeout_ms,
    )
    return HostAvailabilityScanner(
        hosts            = hosts or cfg.host_names,
        prober           = prober,
        concurrency      = cfg.scan.concurrency,
        interval_seconds = cfg.scan.interval_seconds,
    )


def print_error_context(tag: str, e):
    """Print an AppdropError and any collected error list."""
    print(Fore.RED + f"[{tag}] ✗ {e}")
    errors = e.context.get("errors") if getattr(e, "context", None) else None
    if errors:
        for i, error in enumerate(errors, 1):
            print(Fore.RED + f"  {i}. {error}")

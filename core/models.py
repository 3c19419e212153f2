# core/models.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class AppExecutableSpec:
    name: str
    executable: str                    # file name, or a glob for packaged artifacts
    sub_folder: str = ""
    product_group: str = ""
    product_requires_environment: bool = False
    environment_in_shortcut: bool = False

    @classmethod
    def from_config(cls, c):
        return cls(
            name                         = c.name,
            executable                   = c.executable,
            sub_folder                   = c.sub_folder or "",
            product_group                = c.product_group or c.name,
            product_requires_environment = c.product_requires_environment,
            environment_in_shortcut      = c.environment_in_shortcut,
        )

    @property
    def is_packaged(self) -> bool:
        """Packaged products ship one file per build instead of a folder."""
        return self.product_requires_environment


class AppCatalog:
    """Read-only, case-insensitive lookup of app specs by name."""

    def __init__(self, specs: Iterable[AppExecutableSpec]):
        self._specs: Dict[str, AppExecutableSpec] = {}
        for spec in specs:
            self._specs[spec.name.lower()] = spec

    def get(self, name: str) -> Optional[AppExecutableSpec]:
        if not name:
            return None
        return self._specs.get(name.lower())

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self):
        return len(self._specs)


@dataclass
class BuildVariant:
    build: str
    environment: Optional[str] = None
    created: float = 0.0

    @property
    def is_environment_specific(self) -> bool:
        return self.environment is not None


@dataclass
class AppBuildGroup:
    app_name: str
    variants: List[BuildVariant] = field(default_factory=list)


@dataclass(frozen=True)
class DeploymentSelection:
    app: str
    build: str
    environment: Optional[str] = None

    @classmethod
    def parse(cls, selector: str) -> Optional["DeploymentSelection"]:
        """Parse ``APP|BUILD`` or ``APP|BUILD|ENV``; anything else is None."""
        parts = [p.strip() for p in (selector or "").split("|")]
        if len(parts) == 2 and all(parts):
            return cls(app=parts[0], build=parts[1])
        if len(parts) == 3 and parts[0] and parts[1]:
            return cls(app=parts[0], build=parts[1], environment=parts[2] or None)
        return None

    def with_environment(self, environment: str) -> "DeploymentSelection":
        return DeploymentSelection(self.app, self.build, environment)

    def __str__(self):
        if self.environment:
            return f"{self.app}|{self.build}|{self.environment}"
        return f"{self.app}|{self.build}"


@dataclass(frozen=True)
class CopyJob:
    host: str
    selection: DeploymentSelection
    # environments the published shortcuts launch; empty means the selection's own
    shortcut_environments: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.host}:{self.selection}"


class FileOutcome(str, Enum):
    """Result of synchronizing one file."""
    COPIED = "copied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class JobOutcome:
    job: CopyJob
    total: int = 0
    copied: int = 0
    skipped: int = 0
    failed: int = 0
    error: Optional[str] = None
    shortcuts: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.copied + self.skipped + self.failed

    @property
    def ok(self) -> int:
        """Files that are in place on the target, copied or already current."""
        return self.copied + self.skipped

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.failed == 0

    def record(self, outcome: FileOutcome):
        if outcome is FileOutcome.COPIED:
            self.copied += 1
        elif outcome is FileOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


@dataclass
class CopyResult:
    total_jobs: int
    outcomes: List[JobOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(o.succeeded for o in self.outcomes)


@dataclass
class HostStatus:
    host: str
    accessible: bool = False
    root_exists: Optional[bool] = None
    latency_ms: Optional[int] = None
    last_checked_utc: Optional[datetime] = None
    message: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "host": self.host,
            "accessible": self.accessible,
            "root_exists": self.root_exists,
            "latency_ms": self.latency_ms,
            "last_checked_utc": self.last_checked_utc.isoformat() if self.last_checked_utc else None,
            "message": self.message,
        }


@dataclass
class ScanSnapshot:
    scan_in_progress: bool
    completed: int
    total: int
    statuses: List[HostStatus] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "scan_in_progress": self.scan_in_progress,
            "completed": self.completed,
            "total": self.total,
            "statuses": [s.as_dict() for s in self.statuses],
        }


@dataclass
class ShortcutSpec:
    target_path: str
    working_directory: str
    arguments: str = ""
    icon_location: str = ""
    description: str = ""


@dataclass
class RemovalResult:
    app: str
    build: Optional[str]
    success: bool
    message: str
    shortcuts_removed: int = 0

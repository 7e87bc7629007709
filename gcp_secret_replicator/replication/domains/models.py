"""Domain models for secret replication."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


class ReplicationKind(str, Enum):
    """Replication policy variants supported by Secret Manager."""
    AUTOMATIC = "automatic"
    USER_MANAGED = "user_managed"


class VersionState(str, Enum):
    """Lifecycle state of a secret version. Only ENABLED versions are copied."""
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"
    DESTROYED = "DESTROYED"


class ReplicationMode(str, Enum):
    """Which source versions get copied for each secret."""
    LATEST_ONLY = "latest_only"
    ALL_VERSIONS = "all_versions"


class CopyStatus(str, Enum):
    """Per-secret replication status."""
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    SKIPPED = "skipped"
    HARD_FAILURE = "hard_failure"


class SkipReason(str, Enum):
    """Why a secret was skipped before any version was copied."""
    PROVISIONING_FAILED = "provisioning_failed"
    NO_ENABLED_VERSIONS = "no_enabled_versions"


@dataclass(frozen=True)
class SecretRef:
    """A secret container identified by name within a project."""
    name: str
    project: str


@dataclass(frozen=True)
class ReplicationPolicy:
    """
    Replication configuration of a secret.

    A USER_MANAGED policy with no locations is representable on purpose: it is
    how an unreadable source configuration is carried until translation
    rejects it.
    """
    kind: ReplicationKind
    locations: FrozenSet[str] = frozenset()

    @classmethod
    def automatic(cls) -> "ReplicationPolicy":
        return cls(kind=ReplicationKind.AUTOMATIC)

    @classmethod
    def user_managed(cls, locations: Iterable[str]) -> "ReplicationPolicy":
        return cls(kind=ReplicationKind.USER_MANAGED, locations=frozenset(locations))


@dataclass(frozen=True)
class SecretDescriptor:
    """Source secret metadata needed to provision the destination container."""
    ref: SecretRef
    replication: ReplicationPolicy
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VersionRef:
    """A secret version as listed from the catalog."""
    secret: SecretRef
    version_id: str  # positive integer string or "latest"
    state: VersionState
    create_time: Optional[datetime] = None


@dataclass(frozen=True)
class CopyOutcome:
    """Result of replicating one secret."""
    secret_name: str
    status: CopyStatus
    versions_attempted: int = 0
    versions_succeeded: int = 0
    versions_failed: int = 0
    versions_unchanged: int = 0  # succeeded without a write; destination already current
    skip_reason: Optional[SkipReason] = None
    created: bool = False  # destination container created during this run
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        """Whether this secret counts towards the run's success total."""
        if self.status is CopyStatus.SUCCESS:
            return True
        return (
            self.status is CopyStatus.SKIPPED
            and self.skip_reason is SkipReason.NO_ENABLED_VERSIONS
        )


@dataclass(frozen=True)
class RunSummary:
    """Aggregate of all per-secret outcomes for one replication run."""
    outcomes: Tuple[CopyOutcome, ...] = ()

    def add(self, outcome: CopyOutcome) -> "RunSummary":
        """Return a new summary with the outcome folded in."""
        return replace(self, outcomes=self.outcomes + (outcome,))

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed_count(self) -> int:
        return self.total - self.success_count

    @property
    def has_failures(self) -> bool:
        return self.failed_count > 0

    @property
    def created_secrets(self) -> List[str]:
        return [outcome.secret_name for outcome in self.outcomes if outcome.created]

    @property
    def failed_secrets(self) -> List[str]:
        return [outcome.secret_name for outcome in self.outcomes if not outcome.succeeded]

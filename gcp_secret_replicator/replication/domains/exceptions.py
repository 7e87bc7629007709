"""Error taxonomy for secret replication.

Only PreconditionError is fatal to a run. Everything else is raised by the
domain layer and converted into a per-secret outcome by the replication
workflow.
"""
from typing import Optional


class ReplicatorError(Exception):
    """Base class for replication errors."""

    phase = "replicate"

    def __init__(self, message: str, secret_name: Optional[str] = None, version_id: Optional[str] = None):
        super().__init__(message)
        self.secret_name = secret_name
        self.version_id = version_id


class PreconditionError(ReplicatorError):
    """A required capability or project is unavailable; nothing was processed."""

    phase = "precondition"


class SecretListError(ReplicatorError):
    """Secrets in a project could not be enumerated."""

    phase = "list-secrets"


class ProvisioningError(ReplicatorError):
    """The destination secret container could not be ensured."""

    phase = "provision"


class DescribeError(ProvisioningError):
    """Secret metadata could not be read."""

    phase = "describe"


class TranslationError(ProvisioningError):
    """The source replication policy cannot be mapped to a creation request."""

    phase = "translate"


class CreateError(ProvisioningError):
    """The destination rejected the create call."""

    phase = "create"


class VersionListError(ReplicatorError):
    """Versions of a secret could not be enumerated."""

    phase = "list-versions"


class CopyError(ReplicatorError):
    """A single version could not be transferred."""

    phase = "copy"

"""Translate source secret metadata into a destination creation request."""
from dataclasses import dataclass, field
from typing import Any, Dict

from .exceptions import TranslationError
from .models import ReplicationKind, ReplicationPolicy, SecretDescriptor


@dataclass(frozen=True)
class CreationRequest:
    """Replication policy and labels to create a destination secret with."""
    replication: ReplicationPolicy
    labels: Dict[str, str] = field(default_factory=dict)

    def to_secret(self) -> Dict[str, Any]:
        """Render as a Secret Manager ``Secret`` mapping."""
        if self.replication.kind is ReplicationKind.AUTOMATIC:
            replication = {"automatic": {}}
        else:
            replication = {
                "user_managed": {
                    "replicas": [{"location": location} for location in sorted(self.replication.locations)]
                }
            }

        secret = {"replication": replication}
        # Empty labels are left out rather than sent as an empty map
        if self.labels:
            secret["labels"] = dict(self.labels)
        return secret


def translate(descriptor: SecretDescriptor) -> CreationRequest:
    """
    Map a source secret's replication policy and labels to a creation request.

    Args:
        descriptor: Source secret metadata

    Returns:
        CreationRequest for the destination project

    Raises:
        TranslationError: If a user-managed policy has no locations
    """
    policy = descriptor.replication

    if policy.kind is ReplicationKind.AUTOMATIC:
        replication = ReplicationPolicy.automatic()
    elif policy.kind is ReplicationKind.USER_MANAGED and policy.locations:
        replication = ReplicationPolicy.user_managed(policy.locations)
    else:
        raise TranslationError(
            f"Secret '{descriptor.ref.name}' has unknown replication config",
            secret_name=descriptor.ref.name,
        )

    return CreationRequest(replication=replication, labels=dict(descriptor.labels))

"""Read-side view of a project's secrets and versions."""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from google.cloud import secretmanager

from .exceptions import DescribeError, SecretListError, VersionListError
from .gcp_client import CLIENT_ERRORS, GCPSecretClient
from .models import ReplicationPolicy, SecretDescriptor, SecretRef, VersionRef, VersionState

logger = logging.getLogger(__name__)

_paths = secretmanager.SecretManagerServiceClient
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class VersionOrder(str, Enum):
    """Creation-time ordering for version listings."""
    ASCENDING = "ascending"
    DESCENDING = "descending"


def _version_sort_key(version: VersionRef):
    number = int(version.version_id) if version.version_id.isdigit() else 0
    return (version.create_time or _EPOCH, number)


def _policy_from_secret(secret: secretmanager.Secret) -> ReplicationPolicy:
    replication = secret.replication
    if "automatic" in replication:
        return ReplicationPolicy.automatic()
    # Anything else is treated as user-managed; an empty location set is
    # rejected later by the translator.
    return ReplicationPolicy.user_managed(
        replica.location for replica in replication.user_managed.replicas if replica.location
    )


class SecretCatalog:
    """Enumerates secrets and their versions in a project."""

    def __init__(self, client: GCPSecretClient):
        self._client = client

    def list_secrets(self, project_id: str) -> List[SecretRef]:
        """
        List all secrets in a project.

        Raises:
            SecretListError: If the listing call fails
        """
        try:
            secrets = list(self._client.list_secrets(project_id))
        except CLIENT_ERRORS as e:
            raise SecretListError(f"Failed to list secrets in project '{project_id}': {e}") from e

        refs = []
        for secret in secrets:
            parsed = _paths.parse_secret_path(secret.name)
            name = parsed.get("secret") or secret.name
            refs.append(SecretRef(name=name, project=project_id))
        logger.debug(f"Listed {len(refs)} secrets in project {project_id}")
        return refs

    def describe_secret(self, ref: SecretRef) -> SecretDescriptor:
        """
        Read replication policy and labels of a secret.

        Raises:
            DescribeError: If the secret metadata cannot be read
        """
        try:
            secret = self._client.get_secret(ref.project, ref.name)
        except CLIENT_ERRORS as e:
            raise DescribeError(
                f"Failed to describe secret '{ref.name}' in project '{ref.project}': {e}",
                secret_name=ref.name,
            ) from e

        return SecretDescriptor(
            ref=ref,
            replication=_policy_from_secret(secret),
            labels=dict(secret.labels),
        )

    def list_enabled_versions(
        self, project_id: str, secret_name: str, order: VersionOrder = VersionOrder.ASCENDING
    ) -> List[VersionRef]:
        """
        List ENABLED versions of a secret ordered by creation time.

        Raises:
            VersionListError: If the versions cannot be enumerated. An empty
                result is returned as an empty list, never as this error.
        """
        ref = SecretRef(name=secret_name, project=project_id)
        try:
            raw_versions = list(self._client.list_secret_versions(project_id, secret_name, state="ENABLED"))
        except CLIENT_ERRORS as e:
            raise VersionListError(
                f"Failed to list versions of secret '{secret_name}': {e}",
                secret_name=secret_name,
            ) from e

        versions = []
        for raw in raw_versions:
            if raw.state != secretmanager.SecretVersion.State.ENABLED:
                continue
            version_id = _paths.parse_secret_version_path(raw.name).get("secret_version")
            if not version_id:
                logger.debug(f"Ignoring version with unexpected name: {raw.name}")
                continue
            versions.append(
                VersionRef(
                    secret=ref,
                    version_id=version_id,
                    state=VersionState.ENABLED,
                    create_time=raw.create_time,
                )
            )

        versions.sort(key=_version_sort_key, reverse=order is VersionOrder.DESCENDING)
        return versions

    def latest_enabled_version(self, project_id: str, secret_name: str) -> Optional[VersionRef]:
        """Return the most recently created ENABLED version, or None if there is none."""
        versions = self.list_enabled_versions(project_id, secret_name, VersionOrder.DESCENDING)
        return versions[0] if versions else None

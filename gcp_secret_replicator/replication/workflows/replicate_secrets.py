"""Workflow for replicating all secrets from one project to another."""
import logging
from typing import List, Optional

from google.auth import exceptions as auth_exceptions

from ..domains.catalog import SecretCatalog, VersionOrder
from ..domains.exceptions import (
    CopyError,
    PreconditionError,
    ProvisioningError,
    SecretListError,
    VersionListError,
)
from ..domains.gcp_client import GCPSecretClient
from ..domains.models import (
    CopyOutcome,
    CopyStatus,
    ReplicationMode,
    RunSummary,
    SecretRef,
    SkipReason,
    VersionRef,
)
from ..domains.provisioner import DestinationProvisioner, ProvisionResult
from ..domains.streamer import CopyResult, VersionStreamer

logger = logging.getLogger(__name__)


def _copy_status(succeeded: int, failed: int) -> CopyStatus:
    if failed == 0:
        return CopyStatus.SUCCESS
    if succeeded > 0:
        return CopyStatus.PARTIAL_FAILURE
    return CopyStatus.HARD_FAILURE


class SecretReplicator:
    """Drives replication of every secret in the source project, one at a time."""

    def __init__(
        self,
        source_project: str,
        destination_project: str,
        mode: ReplicationMode = ReplicationMode.LATEST_ONLY,
        client: Optional[GCPSecretClient] = None,
    ):
        self.source_project = source_project
        self.destination_project = destination_project
        self.mode = mode
        self.client = client or GCPSecretClient()
        self.catalog = SecretCatalog(self.client)
        self.provisioner = DestinationProvisioner(self.client, self.catalog, source_project, destination_project)
        self.streamer = VersionStreamer(self.client, source_project, destination_project)

    def check_preconditions(self) -> None:
        """
        Verify credentials and access to both projects.

        Raises:
            PreconditionError: If either project cannot be reached
        """
        for role, project_id in (("source", self.source_project), ("destination", self.destination_project)):
            try:
                accessible = self.client.project_accessible(project_id)
            except auth_exceptions.DefaultCredentialsError as e:
                raise PreconditionError(f"No Google Cloud credentials available: {e}") from e
            if not accessible:
                raise PreconditionError(f"Cannot access {role} project: {project_id}")

    def run(self) -> RunSummary:
        """
        Replicate every secret from the source to the destination project.

        Returns:
            RunSummary with one outcome per source secret. An empty summary
            means the source had no secrets.

        Raises:
            PreconditionError: If the run cannot start
        """
        self.check_preconditions()

        logger.info(f"Source: {self.source_project}  ->  Destination: {self.destination_project}")
        logger.info(f"Copy all enabled versions: {self.mode is ReplicationMode.ALL_VERSIONS}")

        try:
            secrets = self.catalog.list_secrets(self.source_project)
        except SecretListError as e:
            raise PreconditionError(str(e)) from e

        summary = RunSummary()
        if not secrets:
            logger.info(f"No secrets found in source project '{self.source_project}'. Nothing to do.")
            return summary

        logger.info(f"Found {len(secrets)} secrets in source.")
        for ref in secrets:
            summary = summary.add(self.replicate_secret(ref))

        logger.info(
            f"Done. Secrets processed: {summary.total}  "
            f"succeeded: {summary.success_count}  failed: {summary.failed_count}"
        )
        return summary

    def _select_versions(self, secret_name: str) -> List[VersionRef]:
        if self.mode is ReplicationMode.ALL_VERSIONS:
            return self.catalog.list_enabled_versions(self.source_project, secret_name, VersionOrder.ASCENDING)
        latest = self.catalog.latest_enabled_version(self.source_project, secret_name)
        return [latest] if latest else []

    def replicate_secret(self, ref: SecretRef) -> CopyOutcome:
        """
        Provision the destination secret and copy the selected versions.

        Never raises for per-secret problems; they are reported in the outcome.
        """
        name = ref.name
        logger.info(f"Processing secret: {name}")

        try:
            provisioned = self.provisioner.ensure_exists(name)
        except ProvisioningError as e:
            logger.error(f"SECRET {name} : {e.phase} error; skipped: {e}")
            return CopyOutcome(
                secret_name=name,
                status=CopyStatus.SKIPPED,
                skip_reason=SkipReason.PROVISIONING_FAILED,
                detail=str(e),
            )
        created = provisioned is ProvisionResult.CREATED

        try:
            versions = self._select_versions(name)
        except VersionListError as e:
            logger.error(f"SECRET {name} : {e.phase} error: {e}")
            return CopyOutcome(secret_name=name, status=CopyStatus.HARD_FAILURE, created=created, detail=str(e))

        if not versions:
            logger.info(f"SECRET {name} : no enabled versions")
            return CopyOutcome(
                secret_name=name,
                status=CopyStatus.SKIPPED,
                skip_reason=SkipReason.NO_ENABLED_VERSIONS,
                created=created,
            )

        # Only a pre-existing destination can already hold the latest payload
        skip_if_current = self.mode is ReplicationMode.LATEST_ONLY and not created
        succeeded = failed = unchanged = 0
        for version in versions:
            try:
                result = self.streamer.copy_version(name, version.version_id, skip_if_current=skip_if_current)
            except CopyError as e:
                logger.error(f"SECRET {name} : version {version.version_id} failed: {e}")
                failed += 1
                continue

            if result is CopyResult.UNCHANGED:
                logger.info(f"SECRET {name} : version {version.version_id} already current in destination")
                unchanged += 1
            else:
                logger.info(f"SECRET {name} : version {version.version_id} copied")
            succeeded += 1

        status = _copy_status(succeeded, failed)
        if status is CopyStatus.SUCCESS:
            logger.info(f"SECRET {name} : SUCCESS ({succeeded} versions)")
        elif status is CopyStatus.PARTIAL_FAILURE:
            logger.error(f"SECRET {name} : PARTIAL ({succeeded} ok, {failed} failed)")
        else:
            logger.error(f"SECRET {name} : FAILED ({failed} failed)")

        return CopyOutcome(
            secret_name=name,
            status=status,
            versions_attempted=len(versions),
            versions_succeeded=succeeded,
            versions_failed=failed,
            versions_unchanged=unchanged,
            created=created,
        )


def replicate_project(
    source_project: str,
    destination_project: str,
    mode: ReplicationMode = ReplicationMode.LATEST_ONLY,
    client: Optional[GCPSecretClient] = None,
) -> RunSummary:
    """
    Replicate all secrets from one GCP project to another.

    Args:
        source_project: Project to read secrets from
        destination_project: Project to create secrets and versions in
        mode: LATEST_ONLY copies the newest enabled version of each secret,
            ALL_VERSIONS copies every enabled version oldest first
        client: Optional pre-built client (defaults to application credentials)

    Returns:
        RunSummary for the run

    Raises:
        PreconditionError: If credentials or project access are missing
    """
    return SecretReplicator(source_project, destination_project, mode=mode, client=client).run()

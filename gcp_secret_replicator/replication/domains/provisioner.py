"""Ensure destination secret containers exist with the source's policy and labels."""
import logging
from enum import Enum

from google.api_core import exceptions as gcp_exceptions

from .catalog import SecretCatalog
from .exceptions import CreateError, DescribeError
from .gcp_client import CLIENT_ERRORS, GCPSecretClient
from .models import SecretRef
from .policy import translate

logger = logging.getLogger(__name__)


class ProvisionResult(str, Enum):
    """What ensure_exists found or did in the destination."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


class DestinationProvisioner:
    """Creates missing destination secrets, mirroring the source container."""

    def __init__(
        self,
        client: GCPSecretClient,
        catalog: SecretCatalog,
        source_project: str,
        destination_project: str,
    ):
        self._client = client
        self._catalog = catalog
        self.source_project = source_project
        self.destination_project = destination_project

    def ensure_exists(self, secret_name: str) -> ProvisionResult:
        """
        Make sure the destination secret exists.

        Existing destination secrets are left untouched, so re-running is safe.
        When the secret is missing, the source is described, its policy is
        translated and the destination secret is created. Nothing is created
        if either of the first two steps fails.

        Args:
            secret_name: Secret ID (same in source and destination)

        Returns:
            ProvisionResult.CREATED or ProvisionResult.ALREADY_EXISTS

        Raises:
            DescribeError: Destination existence check or source describe failed
            TranslationError: Source replication policy cannot be mapped
            CreateError: Destination rejected the create call
        """
        try:
            exists = self._client.secret_exists(self.destination_project, secret_name)
        except CLIENT_ERRORS as e:
            raise DescribeError(
                f"Failed to check destination secret '{secret_name}' in project '{self.destination_project}': {e}",
                secret_name=secret_name,
            ) from e

        if exists:
            logger.info(f"Destination secret '{secret_name}' already exists")
            return ProvisionResult.ALREADY_EXISTS

        descriptor = self._catalog.describe_secret(SecretRef(name=secret_name, project=self.source_project))
        request = translate(descriptor)

        try:
            self._client.create_secret(self.destination_project, secret_name, request.to_secret())
        except gcp_exceptions.AlreadyExists:
            logger.info(f"Destination secret '{secret_name}' was created concurrently; using it")
            return ProvisionResult.ALREADY_EXISTS
        except CLIENT_ERRORS as e:
            raise CreateError(
                f"Failed to create destination secret '{secret_name}': {e}",
                secret_name=secret_name,
            ) from e

        logger.info(f"Created destination secret '{secret_name}' (replication + labels preserved)")
        return ProvisionResult.CREATED

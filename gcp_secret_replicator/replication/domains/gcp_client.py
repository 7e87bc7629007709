"""GCP Secret Manager client wrapper."""
import logging
from typing import Any, Dict, Iterator, Optional

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import secretmanager

logger = logging.getLogger(__name__)

# Anything a single client call can fail with: API errors, including retry
# deadlines, and credential refresh or transport errors.
CLIENT_ERRORS = (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)

# Path helpers are static methods; they work without an instantiated client.
_paths = secretmanager.SecretManagerServiceClient


class GCPSecretClient:
    """Wrapper around GCP Secret Manager client."""

    def __init__(self, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def project_accessible(self, project_id: str) -> bool:
        """
        Check that Secret Manager in the project can be reached with current credentials.

        Args:
            project_id: GCP project ID

        Returns:
            True if a secret listing call succeeds, False if it fails

        Raises:
            DefaultCredentialsError: If no credentials are configured at all
        """
        try:
            pager = self.client.list_secrets(
                request={"parent": _paths.common_project_path(project_id), "page_size": 1}
            )
            next(iter(pager), None)
        except auth_exceptions.DefaultCredentialsError:
            raise
        except CLIENT_ERRORS as e:
            logger.debug(f"Project {project_id} is not accessible: {e}")
            return False
        return True

    def list_secrets(self, project_id: str) -> Iterator[secretmanager.Secret]:
        """Iterate over all secrets in a project."""
        return iter(self.client.list_secrets(request={"parent": _paths.common_project_path(project_id)}))

    def get_secret(self, project_id: str, secret_name: str) -> secretmanager.Secret:
        """Fetch secret metadata (replication, labels). Raises NotFound if absent."""
        return self.client.get_secret(request={"name": _paths.secret_path(project_id, secret_name)})

    def secret_exists(self, project_id: str, secret_name: str) -> bool:
        """Return True if the secret container exists in the project."""
        try:
            self.get_secret(project_id, secret_name)
        except gcp_exceptions.NotFound:
            return False
        return True

    def create_secret(self, project_id: str, secret_name: str, secret: Dict[str, Any]) -> secretmanager.Secret:
        """
        Create a secret container.

        Args:
            project_id: Destination project ID
            secret_name: Secret ID to create
            secret: Secret resource mapping (replication and optional labels)
        """
        return self.client.create_secret(
            request={
                "parent": _paths.common_project_path(project_id),
                "secret_id": secret_name,
                "secret": secret,
            }
        )

    def list_secret_versions(
        self, project_id: str, secret_name: str, state: Optional[str] = "ENABLED"
    ) -> Iterator[secretmanager.SecretVersion]:
        """Iterate over versions of a secret, optionally filtered by state server-side."""
        request = {"parent": _paths.secret_path(project_id, secret_name)}
        if state:
            request["filter"] = f"state:{state}"
        return iter(self.client.list_secret_versions(request=request))

    def access_secret_version(self, project_id: str, secret_name: str, version_id: str) -> secretmanager.SecretPayload:
        """Read a version's payload. The payload stays in memory only."""
        response = self.client.access_secret_version(
            request={"name": _paths.secret_version_path(project_id, secret_name, version_id)}
        )
        return response.payload

    def add_secret_version(
        self, project_id: str, secret_name: str, payload: secretmanager.SecretPayload
    ) -> secretmanager.SecretVersion:
        """
        Add a new version to a secret from a payload read elsewhere.

        The payload checksum is forwarded when present so the service verifies
        the bytes it receives.
        """
        new_payload = {"data": payload.data}
        if "data_crc32c" in payload:
            new_payload["data_crc32c"] = payload.data_crc32c
        return self.client.add_secret_version(
            request={"parent": _paths.secret_path(project_id, secret_name), "payload": new_payload}
        )

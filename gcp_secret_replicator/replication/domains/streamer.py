"""Copy version payloads between projects without writing them anywhere."""
import hmac
import logging
from enum import Enum
from typing import Optional

from google.api_core import exceptions as gcp_exceptions

from .exceptions import CopyError
from .gcp_client import CLIENT_ERRORS, GCPSecretClient

logger = logging.getLogger(__name__)


class CopyResult(str, Enum):
    COPIED = "copied"
    UNCHANGED = "unchanged"


class VersionStreamer:
    """
    Transfers one version at a time from the source to the destination project.

    The payload returned by the source read is handed straight to the
    destination write. It is held in memory only for the duration of the call
    and is never logged or written to local storage.
    """

    def __init__(self, client: GCPSecretClient, source_project: str, destination_project: str):
        self._client = client
        self.source_project = source_project
        self.destination_project = destination_project

    def _current_destination_data(self, secret_name: str) -> Optional[bytes]:
        try:
            payload = self._client.access_secret_version(self.destination_project, secret_name, "latest")
        except (gcp_exceptions.NotFound, gcp_exceptions.FailedPrecondition):
            # No versions yet, or the newest one is disabled/destroyed
            return None
        return payload.data

    def copy_version(self, secret_name: str, version_id: str, skip_if_current: bool = False) -> CopyResult:
        """
        Copy a single version's payload into a new destination version.

        Args:
            secret_name: Secret ID (same in source and destination)
            version_id: Source version number or "latest"
            skip_if_current: Do not add a version if the destination's latest
                version already holds identical bytes

        Returns:
            CopyResult.COPIED or CopyResult.UNCHANGED

        Raises:
            CopyError: If reading or writing the payload fails
        """
        try:
            payload = self._client.access_secret_version(self.source_project, secret_name, version_id)

            if skip_if_current:
                current = self._current_destination_data(secret_name)
                if current is not None and hmac.compare_digest(current, payload.data):
                    return CopyResult.UNCHANGED

            self._client.add_secret_version(self.destination_project, secret_name, payload)
        except CLIENT_ERRORS as e:
            raise CopyError(
                f"Failed to copy version {version_id} of secret '{secret_name}': {e}",
                secret_name=secret_name,
                version_id=version_id,
            ) from e

        return CopyResult.COPIED

"""Shared fixtures: an in-memory stand-in for the Secret Manager API."""
from datetime import datetime, timedelta, timezone

import pytest
from google.api_core import exceptions as gcp_exceptions
from google.cloud import secretmanager

from gcp_secret_replicator.replication.domains.catalog import SecretCatalog
from gcp_secret_replicator.replication.domains.gcp_client import GCPSecretClient

SOURCE = "source-project"
DEST = "dest-project"

_State = secretmanager.SecretVersion.State


class FakeSecretManagerService:
    """
    Emulates the subset of SecretManagerServiceClient used by the replicator.

    Requests and responses use the real proto-plus message types. Every call
    is recorded in ``calls`` as ``(method, resource)``; ``fail_on`` makes a
    given call raise.
    """

    def __init__(self):
        self.secrets = {}
        self.versions = {}
        self.calls = []
        self.inaccessible_projects = set()
        self._failures = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # -- test helpers -------------------------------------------------------

    def fail_on(self, method, resource, exc):
        self._failures[(method, resource)] = exc

    def seed_secret(self, project, name, replication="automatic", labels=None, versions=()):
        """
        Add a secret directly.

        Args:
            replication: "automatic", a list of locations for user-managed
                (an empty list gives a user-managed policy with no replicas),
                or None for no replication config at all
            versions: iterable of (payload bytes, state name)
        """
        resource = f"projects/{project}/secrets/{name}"
        if replication == "automatic":
            replication_pb = secretmanager.Replication(automatic=secretmanager.Replication.Automatic())
        elif replication is None:
            replication_pb = secretmanager.Replication()
        else:
            replication_pb = secretmanager.Replication(
                user_managed=secretmanager.Replication.UserManaged(
                    replicas=[
                        secretmanager.Replication.UserManaged.Replica(location=location)
                        for location in replication
                    ]
                )
            )
        self.secrets[resource] = secretmanager.Secret(
            name=resource, replication=replication_pb, labels=labels or {}
        )
        self.versions[resource] = []
        for data, state in versions:
            self._append_version(resource, data, _State[state])
        return resource

    def payloads(self, project, name, state="ENABLED"):
        """Payload bytes of a secret's versions in creation order."""
        return [
            data
            for version, data in self.versions[f"projects/{project}/secrets/{name}"]
            if state is None or version.state.name == state
        ]

    def method_calls(self, method):
        return [resource for called, resource in self.calls if called == method]

    # -- internals ----------------------------------------------------------

    def _record(self, method, resource):
        self.calls.append((method, resource))
        exc = self._failures.get((method, resource))
        if exc is not None:
            raise exc
        project = resource.split("/")[1]
        if project in self.inaccessible_projects:
            raise gcp_exceptions.PermissionDenied(f"Permission denied on project {project}")

    def _append_version(self, secret_resource, data, state=_State.ENABLED):
        self._clock += timedelta(minutes=1)
        number = len(self.versions[secret_resource]) + 1
        version = secretmanager.SecretVersion(
            name=f"{secret_resource}/versions/{number}",
            state=state,
            create_time=self._clock,
        )
        self.versions[secret_resource].append((version, data))
        return version

    def _find_version(self, name):
        secret_resource, _, version_id = name.rpartition("/versions/")
        if secret_resource not in self.versions or not self.versions[secret_resource]:
            raise gcp_exceptions.NotFound(f"Secret version {name} not found")
        entries = self.versions[secret_resource]
        if version_id == "latest":
            return entries[-1]
        for version, data in entries:
            if version.name == name:
                return version, data
        raise gcp_exceptions.NotFound(f"Secret version {name} not found")

    # -- SecretManagerServiceClient surface ---------------------------------

    def list_secrets(self, request):
        parent = request["parent"]
        self._record("list_secrets", parent)
        return [secret for resource, secret in self.secrets.items() if resource.startswith(f"{parent}/secrets/")]

    def get_secret(self, request):
        name = request["name"]
        self._record("get_secret", name)
        if name not in self.secrets:
            raise gcp_exceptions.NotFound(f"Secret {name} not found")
        return self.secrets[name]

    def create_secret(self, request):
        name = f"{request['parent']}/secrets/{request['secret_id']}"
        self._record("create_secret", name)
        if name in self.secrets:
            raise gcp_exceptions.AlreadyExists(f"Secret {name} already exists")
        secret = secretmanager.Secret(request["secret"])
        secret.name = name
        self.secrets[name] = secret
        self.versions[name] = []
        return secret

    def list_secret_versions(self, request):
        parent = request["parent"]
        self._record("list_secret_versions", parent)
        if parent not in self.secrets:
            raise gcp_exceptions.NotFound(f"Secret {parent} not found")
        versions = [version for version, _ in self.versions[parent]]
        if request.get("filter") == "state:ENABLED":
            versions = [version for version in versions if version.state == _State.ENABLED]
        # The service lists newest first
        return list(reversed(versions))

    def access_secret_version(self, request):
        name = request["name"]
        self._record("access_secret_version", name)
        version, data = self._find_version(name)
        if version.state != _State.ENABLED:
            raise gcp_exceptions.FailedPrecondition(f"Secret version {version.name} is in {version.state.name} state")
        return secretmanager.AccessSecretVersionResponse(
            name=version.name, payload=secretmanager.SecretPayload(data=data)
        )

    def add_secret_version(self, request):
        parent = request["parent"]
        self._record("add_secret_version", parent)
        if parent not in self.secrets:
            raise gcp_exceptions.NotFound(f"Secret {parent} not found")
        return self._append_version(parent, request["payload"]["data"])


@pytest.fixture
def fake_service():
    """In-memory Secret Manager."""
    return FakeSecretManagerService()


@pytest.fixture
def client(fake_service):
    """GCPSecretClient backed by the fake service."""
    return GCPSecretClient(client=fake_service)


@pytest.fixture
def catalog(client):
    return SecretCatalog(client)

"""Tests for the secret catalog reader and the client wrapper it uses."""
import pytest
from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions

from gcp_secret_replicator.replication.domains.catalog import VersionOrder
from gcp_secret_replicator.replication.domains.exceptions import (
    DescribeError,
    SecretListError,
    VersionListError,
)
from gcp_secret_replicator.replication.domains.models import ReplicationKind, SecretRef, VersionState

from conftest import SOURCE


class TestListSecrets:
    """Test suite for SecretCatalog.list_secrets."""

    def test_lists_secret_refs(self, fake_service, catalog):
        fake_service.seed_secret(SOURCE, "db-pass")
        fake_service.seed_secret(SOURCE, "api-key", replication=["us-east1"])
        fake_service.seed_secret("other-project", "unrelated")

        refs = catalog.list_secrets(SOURCE)

        assert refs == [SecretRef("db-pass", SOURCE), SecretRef("api-key", SOURCE)]

    def test_empty_project_returns_empty_list(self, catalog):
        """Zero secrets is a valid result, not an error."""
        assert catalog.list_secrets(SOURCE) == []

    def test_listing_failure_raises(self, fake_service, catalog):
        fake_service.inaccessible_projects.add(SOURCE)

        with pytest.raises(SecretListError) as exc_info:
            catalog.list_secrets(SOURCE)

        assert SOURCE in str(exc_info.value)

    def test_listing_timeout_raises(self, fake_service, catalog):
        fake_service.fail_on(
            "list_secrets", f"projects/{SOURCE}", gcp_exceptions.RetryError("Timeout of 60.0s exceeded", None)
        )

        with pytest.raises(SecretListError):
            catalog.list_secrets(SOURCE)


class TestDescribeSecret:
    """Test suite for SecretCatalog.describe_secret."""

    def test_automatic_policy_and_labels(self, fake_service, catalog):
        fake_service.seed_secret(SOURCE, "db-pass", labels={"env": "prod"})

        descriptor = catalog.describe_secret(SecretRef("db-pass", SOURCE))

        assert descriptor.replication.kind is ReplicationKind.AUTOMATIC
        assert descriptor.labels == {"env": "prod"}

    def test_user_managed_locations(self, fake_service, catalog):
        fake_service.seed_secret(SOURCE, "api-key", replication=["us-east1", "europe-west1"])

        descriptor = catalog.describe_secret(SecretRef("api-key", SOURCE))

        assert descriptor.replication.kind is ReplicationKind.USER_MANAGED
        assert descriptor.replication.locations == {"us-east1", "europe-west1"}
        assert descriptor.labels == {}

    def test_missing_replication_config_reads_as_empty_user_managed(self, fake_service, catalog):
        fake_service.seed_secret(SOURCE, "orphan", replication=None)

        descriptor = catalog.describe_secret(SecretRef("orphan", SOURCE))

        assert descriptor.replication.kind is ReplicationKind.USER_MANAGED
        assert not descriptor.replication.locations

    def test_describe_failure_raises_with_secret_name(self, catalog):
        with pytest.raises(DescribeError) as exc_info:
            catalog.describe_secret(SecretRef("missing", SOURCE))

        assert exc_info.value.secret_name == "missing"


class TestListVersions:
    """Test suite for version listing."""

    @pytest.fixture
    def seeded(self, fake_service):
        fake_service.seed_secret(
            SOURCE,
            "db-pass",
            versions=[(b"v1", "ENABLED"), (b"v2", "DISABLED"), (b"v3", "ENABLED"), (b"v4", "DESTROYED")],
        )
        return fake_service

    def test_only_enabled_versions_ascending(self, seeded, catalog):
        versions = catalog.list_enabled_versions(SOURCE, "db-pass")

        assert [v.version_id for v in versions] == ["1", "3"]
        assert all(v.state is VersionState.ENABLED for v in versions)
        assert versions[0].create_time < versions[1].create_time
        assert versions[0].secret == SecretRef("db-pass", SOURCE)

    def test_descending_order(self, seeded, catalog):
        versions = catalog.list_enabled_versions(SOURCE, "db-pass", VersionOrder.DESCENDING)

        assert [v.version_id for v in versions] == ["3", "1"]

    def test_latest_enabled_version(self, seeded, catalog):
        latest = catalog.latest_enabled_version(SOURCE, "db-pass")

        assert latest.version_id == "3"
        assert latest.secret == SecretRef(name="db-pass", project=SOURCE)

    def test_latest_enabled_version_none_when_no_versions(self, fake_service, catalog):
        fake_service.seed_secret(SOURCE, "empty")

        assert catalog.latest_enabled_version(SOURCE, "empty") is None

    def test_listing_failure_is_not_empty_result(self, fake_service, catalog):
        """A failed listing raises instead of looking like 'no versions'."""
        fake_service.seed_secret(SOURCE, "db-pass", versions=[(b"v1", "ENABLED")])
        fake_service.fail_on(
            "list_secret_versions",
            f"projects/{SOURCE}/secrets/db-pass",
            gcp_exceptions.ServiceUnavailable("backend unavailable"),
        )

        with pytest.raises(VersionListError) as exc_info:
            catalog.list_enabled_versions(SOURCE, "db-pass")

        assert exc_info.value.secret_name == "db-pass"


class TestGCPSecretClient:
    """Test suite for the client wrapper."""

    def test_project_accessible(self, fake_service, client):
        fake_service.inaccessible_projects.add("locked-project")

        assert client.project_accessible(SOURCE) is True
        assert client.project_accessible("locked-project") is False

    @pytest.mark.parametrize(
        "error",
        [
            gcp_exceptions.RetryError("Timeout of 60.0s exceeded", None),
            auth_exceptions.RefreshError("token expired"),
            auth_exceptions.TransportError("connection reset"),
        ],
    )
    def test_project_not_accessible_on_timeout_or_auth_failure(self, fake_service, client, error):
        fake_service.fail_on("list_secrets", f"projects/{SOURCE}", error)

        assert client.project_accessible(SOURCE) is False

    def test_project_accessible_reraises_missing_credentials(self, fake_service, client):
        fake_service.fail_on("list_secrets", f"projects/{SOURCE}", auth_exceptions.DefaultCredentialsError("no ADC"))

        with pytest.raises(auth_exceptions.DefaultCredentialsError):
            client.project_accessible(SOURCE)

    def test_secret_exists(self, fake_service, client):
        fake_service.seed_secret(SOURCE, "db-pass")

        assert client.secret_exists(SOURCE, "db-pass") is True
        assert client.secret_exists(SOURCE, "nope") is False

    def test_secret_exists_propagates_other_errors(self, fake_service, client):
        fake_service.inaccessible_projects.add(SOURCE)

        with pytest.raises(gcp_exceptions.PermissionDenied):
            client.secret_exists(SOURCE, "db-pass")

    def test_client_is_lazily_created(self, monkeypatch):
        from gcp_secret_replicator.replication.domains import gcp_client

        created = []
        monkeypatch.setattr(
            gcp_client.secretmanager, "SecretManagerServiceClient", lambda: created.append(1) or object()
        )
        wrapper = gcp_client.GCPSecretClient()
        assert created == []

        wrapper.client
        wrapper.client
        assert created == [1]

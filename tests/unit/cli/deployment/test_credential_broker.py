"""Tests for the credential broker."""

import pytest

from src.cli.deployment.helm_deployer.config_resolver import DeploymentConfig
from src.cli.deployment.helm_deployer.credential_broker import CredentialBroker
from src.cli.deployment.helm_deployer.errors import BrokerError, BrokerErrorKind
from tests.fakes import FakeSecretStore


class TestCredentialBroker:
    def test_literal_skips_store(
        self, literal_config: DeploymentConfig, secret_store: FakeSecretStore
    ) -> None:
        handle = CredentialBroker(secret_store).resolve_secret(literal_config)

        assert handle.reveal() == "pw123"
        assert handle.provenance == "literal"
        assert secret_store.gets == []

    def test_store_lookup_happens_exactly_once(
        self, config: DeploymentConfig, secret_store: FakeSecretStore
    ) -> None:
        handle = CredentialBroker(secret_store).resolve_secret(config)

        assert handle.reveal() == "s3cr3t-from-store"
        assert handle.provenance == "store:flyte-db-password"
        assert secret_store.gets == ["flyte-db-password"]

    def test_handle_does_not_leak_value(
        self, config: DeploymentConfig, secret_store: FakeSecretStore
    ) -> None:
        handle = CredentialBroker(secret_store).resolve_secret(config)

        assert "s3cr3t-from-store" not in repr(handle)
        assert "s3cr3t-from-store" not in str(handle)

    def test_missing_secret_is_not_found(self, config: DeploymentConfig) -> None:
        with pytest.raises(BrokerError) as excinfo:
            CredentialBroker(FakeSecretStore()).resolve_secret(config)

        assert excinfo.value.kind is BrokerErrorKind.NOT_FOUND
        assert excinfo.value.secret_name == "flyte-db-password"

    def test_empty_secret_is_not_found(self, config: DeploymentConfig) -> None:
        store = FakeSecretStore(values={"flyte-db-password": ""})

        with pytest.raises(BrokerError) as excinfo:
            CredentialBroker(store).resolve_secret(config)

        assert excinfo.value.kind is BrokerErrorKind.NOT_FOUND

    def test_unreachable_store_is_unavailable(self, config: DeploymentConfig) -> None:
        store = FakeSecretStore(unavailable=True)

        with pytest.raises(BrokerError) as excinfo:
            CredentialBroker(store).resolve_secret(config)

        assert excinfo.value.kind is BrokerErrorKind.UNAVAILABLE
        assert "endpoint timeout" in (excinfo.value.details or "")
        assert store.gets == ["flyte-db-password"]

    def test_no_store_is_unavailable(self, config: DeploymentConfig) -> None:
        with pytest.raises(BrokerError) as excinfo:
            CredentialBroker(None).resolve_secret(config)

        assert excinfo.value.kind is BrokerErrorKind.UNAVAILABLE

    def test_nothing_cached_between_calls(
        self, config: DeploymentConfig, secret_store: FakeSecretStore
    ) -> None:
        broker = CredentialBroker(secret_store)

        broker.resolve_secret(config)
        secret_store.values["flyte-db-password"] = "rotated"
        handle = broker.resolve_secret(config)

        assert handle.reveal() == "rotated"
        assert len(secret_store.gets) == 2

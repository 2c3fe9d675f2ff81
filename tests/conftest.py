import pytest
from loguru import logger

from src.cli.deployment.helm_deployer.config_resolver import (
    ConfigSources,
    DeploymentConfig,
    resolve,
)
from tests.fakes import (
    FULL_ENV,
    FakeController,
    FakeIdentityAdmin,
    FakeObjectStorage,
    FakeReleaseManager,
    FakeSecretStore,
)


@pytest.fixture(autouse=True)
def _quiet_logs():
    """Keep loguru output out of test runs."""
    logger.remove()
    yield


@pytest.fixture
def full_env() -> dict[str, str]:
    return dict(FULL_ENV)


@pytest.fixture
def config(full_env: dict[str, str]) -> DeploymentConfig:
    """Install-ready configuration referencing a Secrets Manager entry."""
    return resolve(ConfigSources.load(environ=full_env))


@pytest.fixture
def literal_config(full_env: dict[str, str]) -> DeploymentConfig:
    """Install-ready configuration with a literal password."""
    env = dict(full_env)
    env.pop("DB_PASSWORD_SECRET")
    env["DB_PASSWORD"] = "pw123"
    return resolve(ConfigSources.load(environ=env))


@pytest.fixture
def controller() -> FakeController:
    return FakeController()


@pytest.fixture
def release_manager() -> FakeReleaseManager:
    return FakeReleaseManager()


@pytest.fixture
def secret_store() -> FakeSecretStore:
    return FakeSecretStore(values={"flyte-db-password": "s3cr3t-from-store"})


@pytest.fixture
def object_storage() -> FakeObjectStorage:
    return FakeObjectStorage(buckets={"flyte-metadata": 3, "flyte-userdata": 5})


@pytest.fixture
def iam() -> FakeIdentityAdmin:
    return FakeIdentityAdmin(roles={"flyte-backend", "flyte-user"})

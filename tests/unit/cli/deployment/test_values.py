"""Tests for Helm values rendering."""

import yaml

from src.cli.deployment.helm_deployer.config_resolver import (
    ConfigSources,
    DeploymentConfig,
    resolve,
)
from src.cli.deployment.helm_deployer.values import build_values


class TestBuildValues:
    def test_database_section_references_mounted_secret(
        self, config: DeploymentConfig
    ) -> None:
        values = build_values(config)

        database = values["configuration"]["database"]
        assert database["passwordPath"] == "/etc/flyte/db-pass/postgres-password"
        assert database["host"] == config.db_host
        assert database["port"] == 5432
        assert database["dbname"] == "flyteadmin"
        assert database["options"] == "sslmode=require"

        volumes = values["deployment"]["extraVolumes"]
        mounts = values["deployment"]["extraVolumeMounts"]
        assert volumes[0]["secret"] == {"secretName": "flyte-db-pass"}
        assert mounts[0]["name"] == volumes[0]["name"]
        assert mounts[0]["mountPath"] == "/etc/flyte/db-pass"

    def test_literal_password_never_rendered(
        self, literal_config: DeploymentConfig
    ) -> None:
        rendered = yaml.safe_dump(build_values(literal_config))

        assert "pw123" not in rendered
        assert "password:" not in rendered

    def test_storage_and_resources(self, config: DeploymentConfig) -> None:
        values = build_values(config)

        storage = values["configuration"]["storage"]
        assert storage["metadataContainer"] == "flyte-metadata"
        assert storage["userDataContainer"] == "flyte-userdata"
        assert storage["providerConfig"]["s3"]["region"] == "us-east-1"
        assert values["deployment"]["resources"] == {
            "requests": {"cpu": "500m", "memory": "1Gi"},
            "limits": {"cpu": "2", "memory": "4Gi"},
        }

    def test_role_annotations(self, config: DeploymentConfig) -> None:
        values = build_values(config)

        assert values["serviceAccount"]["annotations"] == {
            "eks.amazonaws.com/role-arn": "arn:aws:iam::123456789012:role/flyte-backend"
        }
        annotations = values["configuration"]["inline"]["plugins"]["k8s"][
            "default-annotations"
        ]
        assert annotations == [
            {"eks.amazonaws.com/role-arn": "arn:aws:iam::123456789012:role/flyte/flyte-user"}
        ]

    def test_no_roles_no_annotations(self, full_env: dict[str, str]) -> None:
        del full_env["FLYTE_BACKEND_ROLE_ARN"]
        del full_env["FLYTE_USER_ROLE_ARN"]
        config = resolve(ConfigSources.load(environ=full_env))

        values = build_values(config)

        assert "annotations" not in values["serviceAccount"]
        assert "inline" not in values["configuration"]

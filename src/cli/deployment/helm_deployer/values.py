"""Build the flyte-binary Helm values document in memory.

The database password is not part of the document. The chart reads it from
the ``flyte-db-pass`` Kubernetes Secret, mounted into the backend pod and
referenced through ``passwordPath``.
"""

from __future__ import annotations

from typing import Any

from src.infra.constants import DEFAULT_CONSTANTS, DeploymentConstants

from .config_resolver import DeploymentConfig

_SECRET_VOLUME = "db-pass"


def build_values(
    config: DeploymentConfig,
    constants: DeploymentConstants = DEFAULT_CONSTANTS,
) -> dict[str, Any]:
    """Render chart values for a deployment.

    Args:
        config: Resolved deployment configuration
        constants: Deployment constants (secret name, key, mount path)

    Returns:
        A values mapping suitable for ``yaml.safe_dump``
    """
    password_path = f"{constants.DB_SECRET_MOUNT_DIR}/{constants.DB_SECRET_KEY}"

    values: dict[str, Any] = {
        "configuration": {
            "database": {
                "username": config.db_username,
                "passwordPath": password_path,
                "host": config.db_host,
                "port": config.db_port,
                "dbname": config.db_name,
                "options": constants.DB_SSL_OPTIONS,
            },
            "storage": {
                "metadataContainer": config.metadata_bucket,
                "userDataContainer": config.userdata_bucket,
                "provider": "s3",
                "providerConfig": {
                    "s3": {
                        "region": config.region,
                        "authType": "iam",
                        "disableSSL": False,
                        "v2Signing": False,
                    }
                },
            },
        },
        "deployment": {
            "extraVolumes": [
                {
                    "name": _SECRET_VOLUME,
                    "secret": {"secretName": constants.DB_SECRET_NAME},
                }
            ],
            "extraVolumeMounts": [
                {
                    "name": _SECRET_VOLUME,
                    "mountPath": constants.DB_SECRET_MOUNT_DIR,
                    "readOnly": True,
                }
            ],
            "resources": {
                "requests": {
                    "cpu": config.backend_cpu_request,
                    "memory": config.backend_memory_request,
                },
                "limits": {
                    "cpu": config.backend_cpu_limit,
                    "memory": config.backend_memory_limit,
                },
            },
        },
        "serviceAccount": {"create": True},
    }

    if config.backend_role_arn:
        values["serviceAccount"]["annotations"] = {
            constants.ROLE_ARN_ANNOTATION: config.backend_role_arn
        }

    # Task pods run under the user role
    if config.user_role_arn:
        values["configuration"]["inline"] = {
            "plugins": {
                "k8s": {
                    "default-annotations": [
                        {constants.ROLE_ARN_ANNOTATION: config.user_role_arn}
                    ]
                }
            }
        }

    return values


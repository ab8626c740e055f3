"""
Operator-wide settings for the MySQL Operator

Ports, paths and probe timings shared by every MysqlCluster live in a single
immutable table. Default images and the resync interval can be overridden
through environment variables.
"""

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field


class ProbeTiming(BaseModel):
    """Timing parameters of a container probe"""

    model_config = ConfigDict(frozen=True)

    initial_delay_seconds: int = Field(..., ge=0)
    period_seconds: int = Field(..., ge=1)
    failure_threshold: int = Field(..., ge=1)


class OperatorSettings(BaseModel):
    """Immutable configuration table consumed by the StatefulSet builders"""

    model_config = ConfigDict(frozen=True)

    # Default images, used when the cluster does not set its own
    mysql_image_repository: str = "percona"
    helper_image: str = "quay.io/presslabs/mysql-helper:latest"
    metrics_exporter_image: str = "prom/mysqld-exporter:latest"

    # Used when a cluster does not name its own orchestrator topology secret
    orc_topology_secret: str = ""

    mysql_port_name: str = "mysql"
    mysql_port: int = 3306

    helper_xtrabackup_port_name: str = "xtrabackup"
    helper_xtrabackup_port: int = 3307
    helper_probe_path: str = "/health"
    helper_probe_port: int = 8001

    exporter_port_name: str = "prometheus"
    exporter_port: int = 9104
    exporter_path: str = "/metrics"

    conf_mount_path: str = "/etc/mysql"
    conf_map_mount_path: str = "/mnt/conf"
    data_mount_path: str = "/var/lib/mysql"
    orc_topology_dir: str = "/var/run/orc-topology"
    client_defaults_file: str = "/etc/mysql/client.cnf"

    config_file_mode: int = 0o644

    mysql_liveness: ProbeTiming = ProbeTiming(
        initial_delay_seconds=30, period_seconds=10, failure_threshold=5
    )
    mysql_readiness: ProbeTiming = ProbeTiming(
        initial_delay_seconds=5, period_seconds=10, failure_threshold=5
    )
    helper_readiness: ProbeTiming = ProbeTiming(
        initial_delay_seconds=5, period_seconds=10, failure_threshold=5
    )
    exporter_liveness: ProbeTiming = ProbeTiming(
        initial_delay_seconds=30, period_seconds=120, failure_threshold=30
    )

    resync_interval_seconds: float = Field(default=60.0, gt=0)


def load_settings() -> OperatorSettings:
    """Build settings from the environment, falling back to defaults"""
    overrides: dict[str, str | float] = {}

    env_map = {
        "MYSQL_OPERATOR_MYSQL_IMAGE": "mysql_image_repository",
        "MYSQL_OPERATOR_HELPER_IMAGE": "helper_image",
        "MYSQL_OPERATOR_METRICS_EXPORTER_IMAGE": "metrics_exporter_image",
        "MYSQL_OPERATOR_ORC_TOPOLOGY_SECRET": "orc_topology_secret",
    }
    for env_name, field_name in env_map.items():
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = value

    resync_interval = os.getenv("MYSQL_OPERATOR_RESYNC_INTERVAL")
    if resync_interval:
        overrides["resync_interval_seconds"] = float(resync_interval)

    return OperatorSettings.model_validate(overrides)


@lru_cache(maxsize=1)
def get_settings() -> OperatorSettings:
    """Settings for the running process, loaded once"""
    return load_settings()

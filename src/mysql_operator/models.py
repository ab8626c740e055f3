"""
Data models for the MySQL Operator
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mysql_operator.exceptions import InvalidClusterSpecError
from mysql_operator.settings import OperatorSettings


class ContainerRole(str, Enum):
    """Positional identity of a container in the MySQL pod"""

    INIT_CONFIG = "init-config"
    INIT_CLONE = "init-clone"
    MAIN = "main"
    HELPER = "helper"
    METRICS_EXPORTER = "metrics-exporter"


# Order is significant: index i of the pod's container list belongs to role i
INIT_CONTAINER_ROLES: tuple[ContainerRole, ...] = (
    ContainerRole.INIT_CONFIG,
    ContainerRole.INIT_CLONE,
)
RUN_CONTAINER_ROLES: tuple[ContainerRole, ...] = (
    ContainerRole.MAIN,
    ContainerRole.HELPER,
    ContainerRole.METRICS_EXPORTER,
)


class VolumeRole(str, Enum):
    """Identity of a pod volume"""

    CONFIG_SCRATCH = "config-scratch"
    CONFIG_SOURCE = "config-source"
    DATA = "data"
    TOPOLOGY_CREDENTIAL = "topology-credential"


class ConvergenceAction(str, Enum):
    """What a single reconciliation cycle did to the StatefulSet"""

    UNCHANGED = "unchanged"
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


class PodSpec(BaseModel):
    """Pod-level scheduling hints and metadata supplied by the user"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    labels: dict[str, str] = Field(default_factory=dict, description="Extra pod labels")
    annotations: dict[str, str] = Field(default_factory=dict, description="Extra pod annotations")
    affinity: dict[str, Any] | None = Field(default=None, description="Pod affinity")
    node_selector: dict[str, str] = Field(
        default_factory=dict, alias="nodeSelector", description="Node selector"
    )
    image_pull_secrets: list[dict[str, str]] = Field(
        default_factory=list, alias="imagePullSecrets", description="Image pull secret references"
    )
    image_pull_policy: str = Field(
        default="IfNotPresent", alias="imagePullPolicy", description="Pull policy for all containers"
    )
    resources: dict[str, Any] = Field(
        default_factory=dict, description="Resource requirements of the mysql container"
    )


def _default_volume_spec() -> dict[str, Any]:
    return {
        "accessModes": ["ReadWriteOnce"],
        "resources": {"requests": {"storage": "1Gi"}},
    }


class ClusterSpec(BaseModel):
    """Desired state of a MysqlCluster, as declared in the custom resource"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    replicas: int = Field(default=1, ge=0, description="Number of MySQL nodes")
    mysql_version: str = Field(default="5.7", alias="mysqlVersion", description="MySQL version")
    image: str | None = Field(default=None, description="Explicit MySQL image, wins over version")
    helper_image: str | None = Field(default=None, alias="helperImage")
    metrics_exporter_image: str | None = Field(default=None, alias="metricsExporterImage")

    secret_name: str = Field(..., alias="secretName", description="Cluster credentials secret")
    init_bucket_secret_name: str = Field(
        default="", alias="initBucketSecretName", description="Credentials for the seed bucket"
    )
    orc_topology_secret_name: str = Field(
        default="", alias="orcTopologySecretName", description="Orchestrator topology credentials"
    )

    mysql_conf: dict[str, str | int | float | bool] = Field(
        default_factory=dict, alias="mysqlConf", description="Extra my.cnf entries"
    )
    pod_spec: PodSpec = Field(default_factory=PodSpec, alias="podSpec")
    volume_spec: dict[str, Any] = Field(
        default_factory=_default_volume_spec,
        alias="volumeSpec",
        description="PersistentVolumeClaim spec for the data volume",
    )

    def get_mysql_image(self, settings: OperatorSettings) -> str:
        """Runtime image: explicit image, else the default repository at mysqlVersion"""
        if self.image:
            return self.image
        return f"{settings.mysql_image_repository}:{self.mysql_version}"

    def get_helper_image(self, settings: OperatorSettings) -> str:
        return self.helper_image or settings.helper_image

    def get_metrics_exporter_image(self, settings: OperatorSettings) -> str:
        return self.metrics_exporter_image or settings.metrics_exporter_image

    def get_orc_topology_secret(self, settings: OperatorSettings) -> str:
        """Topology secret name, or an empty string when orchestrator is not configured"""
        return self.orc_topology_secret_name or settings.orc_topology_secret


class MysqlCluster(BaseModel):
    """A MysqlCluster custom resource, reduced to what the reconciler needs"""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    uid: str = ""
    spec: ClusterSpec

    def get_name_for_statefulset(self) -> str:
        return f"{self.name}-mysql"

    def get_name_for_headless_service(self) -> str:
        return f"{self.name}-mysql-nodes"

    def get_name_for_config_map(self) -> str:
        return f"{self.name}-mysql-config"

    def get_name_for_env_secret(self) -> str:
        return f"{self.name}-mysql-operator-env"


def parse_cluster(name: str, namespace: str, uid: str, spec: dict[str, Any]) -> MysqlCluster:
    """
    Build a MysqlCluster from a custom resource body.

    Raises:
        InvalidClusterSpecError: If the spec does not match the ClusterSpec schema
    """
    try:
        cluster_spec = ClusterSpec.model_validate(spec)
    except ValidationError as e:
        raise InvalidClusterSpecError(
            f"Invalid spec for MysqlCluster {namespace}/{name}: {e}",
            resource=f"{namespace}/{name}",
        ) from e

    return MysqlCluster(name=name, namespace=namespace, uid=uid, spec=cluster_spec)

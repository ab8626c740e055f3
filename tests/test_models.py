"""Tests for the MysqlCluster models."""

from collections.abc import Callable
from typing import Any

import pytest

from mysql_operator.exceptions import InvalidClusterSpecError
from mysql_operator.models import ClusterSpec, MysqlCluster, PodSpec, parse_cluster
from mysql_operator.settings import OperatorSettings


class TestClusterSpec:
    """Test parsing of the custom resource spec."""

    def test_camel_case_fields(self, cluster_spec: dict[str, Any]) -> None:
        """Test CR field names map onto the model."""
        spec = ClusterSpec.model_validate(cluster_spec)

        assert spec.replicas == 3
        assert spec.secret_name == "my-cluster-secret"
        assert spec.mysql_conf == {"max_connections": 200}
        assert spec.pod_spec.node_selector == {"disktype": "ssd"}
        assert spec.pod_spec.image_pull_secrets == [{"name": "registry-creds"}]
        assert spec.volume_spec["resources"]["requests"]["storage"] == "10Gi"

    def test_defaults(self) -> None:
        spec = ClusterSpec.model_validate({"secretName": "creds"})

        assert spec.replicas == 1
        assert spec.mysql_version == "5.7"
        assert spec.init_bucket_secret_name == ""
        assert spec.orc_topology_secret_name == ""
        assert spec.pod_spec == PodSpec()
        assert spec.pod_spec.image_pull_policy == "IfNotPresent"
        assert spec.volume_spec == {
            "accessModes": ["ReadWriteOnce"],
            "resources": {"requests": {"storage": "1Gi"}},
        }

    def test_spec_is_immutable(self, cluster_spec: dict[str, Any]) -> None:
        spec = ClusterSpec.model_validate(cluster_spec)

        with pytest.raises(ValueError):
            spec.replicas = 10  # type: ignore[misc]


class TestImageResolution:
    """Test which images a cluster runs."""

    def test_version_selects_default_repository_tag(self, settings: OperatorSettings) -> None:
        spec = ClusterSpec.model_validate({"secretName": "creds", "mysqlVersion": "8.0"})

        assert spec.get_mysql_image(settings) == "percona:8.0"

    def test_explicit_image_wins_over_version(self, settings: OperatorSettings) -> None:
        spec = ClusterSpec.model_validate(
            {"secretName": "creds", "mysqlVersion": "8.0", "image": "registry.local/mysql:custom"}
        )

        assert spec.get_mysql_image(settings) == "registry.local/mysql:custom"

    def test_sidecar_images(self, settings: OperatorSettings) -> None:
        """Test sidecar images fall back to the operator defaults."""
        default = ClusterSpec.model_validate({"secretName": "creds"})
        custom = ClusterSpec.model_validate(
            {
                "secretName": "creds",
                "helperImage": "helper:1.0",
                "metricsExporterImage": "exporter:2.0",
            }
        )

        assert default.get_helper_image(settings) == settings.helper_image
        assert default.get_metrics_exporter_image(settings) == settings.metrics_exporter_image
        assert custom.get_helper_image(settings) == "helper:1.0"
        assert custom.get_metrics_exporter_image(settings) == "exporter:2.0"

    def test_topology_secret_falls_back_to_operator_default(self) -> None:
        settings = OperatorSettings(orc_topology_secret="orc-default")
        default = ClusterSpec.model_validate({"secretName": "creds"})
        custom = ClusterSpec.model_validate(
            {"secretName": "creds", "orcTopologySecretName": "orc-own"}
        )

        assert default.get_orc_topology_secret(settings) == "orc-default"
        assert custom.get_orc_topology_secret(settings) == "orc-own"
        assert default.get_orc_topology_secret(OperatorSettings()) == ""


class TestMysqlCluster:
    """Test derived resource names."""

    def test_resource_names(self, cluster: MysqlCluster) -> None:
        assert cluster.get_name_for_statefulset() == "my-cluster-mysql"
        assert cluster.get_name_for_headless_service() == "my-cluster-mysql-nodes"
        assert cluster.get_name_for_config_map() == "my-cluster-mysql-config"
        assert cluster.get_name_for_env_secret() == "my-cluster-mysql-operator-env"

    def test_parse_cluster_identity(self, make_cluster: Callable[..., MysqlCluster]) -> None:
        cluster = make_cluster(replicas=5)

        assert cluster.name == "my-cluster"
        assert cluster.namespace == "databases"
        assert cluster.uid == "0b5e9c1a-uid"
        assert cluster.spec.replicas == 5

    @pytest.mark.parametrize(
        "spec",
        [
            {"replicas": 3},
            {"secretName": "creds", "replicas": -1},
            {"secretName": "creds", "replicas": "many"},
        ],
    )
    def test_parse_cluster_rejects_invalid_spec(self, spec: dict[str, Any]) -> None:
        """Test schema violations surface as InvalidClusterSpecError."""
        with pytest.raises(InvalidClusterSpecError) as exc_info:
            parse_cluster("broken", "databases", "uid", spec)

        assert exc_info.value.resource == "databases/broken"
        assert "Invalid spec for MysqlCluster databases/broken" in exc_info.value.message

"""Test configuration and fixtures."""

from collections.abc import Callable
from typing import Any

import pytest
from kubernetes.client.models import V1ObjectMeta, V1StatefulSet

from mysql_operator.models import MysqlCluster, parse_cluster
from mysql_operator.settings import OperatorSettings


@pytest.fixture
def settings() -> OperatorSettings:
    """Default operator settings table."""
    return OperatorSettings()


@pytest.fixture
def cluster_spec() -> dict[str, Any]:
    """A MysqlCluster spec as it appears in the custom resource."""
    return {
        "replicas": 3,
        "secretName": "my-cluster-secret",
        "mysqlConf": {"max_connections": 200},
        "podSpec": {
            "labels": {"team": "db"},
            "annotations": {"example.com/owner": "dba"},
            "nodeSelector": {"disktype": "ssd"},
            "imagePullSecrets": [{"name": "registry-creds"}],
            "resources": {"limits": {"cpu": "1", "memory": "1Gi"}},
        },
        "volumeSpec": {
            "accessModes": ["ReadWriteOnce"],
            "resources": {"requests": {"storage": "10Gi"}},
        },
    }


@pytest.fixture
def make_cluster(cluster_spec: dict[str, Any]) -> Callable[..., MysqlCluster]:
    """Build a MysqlCluster, overriding spec fields by their CR (camelCase) names."""

    def _make(**overrides: Any) -> MysqlCluster:
        spec = {**cluster_spec, **overrides}
        return parse_cluster("my-cluster", "databases", "0b5e9c1a-uid", spec)

    return _make


@pytest.fixture
def cluster(make_cluster: Callable[..., MysqlCluster]) -> MysqlCluster:
    return make_cluster()


@pytest.fixture
def blank_statefulset() -> V1StatefulSet:
    """A zero-valued StatefulSet, as used when none exists yet."""
    return V1StatefulSet(
        api_version="apps/v1",
        kind="StatefulSet",
        metadata=V1ObjectMeta(name="my-cluster-mysql", namespace="databases"),
    )

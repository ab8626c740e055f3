"""
Labels and owner references for objects owned by a MysqlCluster
"""

from kubernetes.client.models import V1ObjectMeta, V1OwnerReference

from mysql_operator.models import MysqlCluster

CLUSTER_API_GROUP = "mysql.presslabs.org"
CLUSTER_API_VERSION = "v1alpha1"
CLUSTER_KIND = "MysqlCluster"
CLUSTER_PLURAL = "mysqlclusters"

MANAGED_BY = "mysql-operator"


def get_labels(cluster: MysqlCluster, extra: dict[str, str] | None = None) -> dict[str, str]:
    """Canonical label set of a cluster plus extra labels; canonical keys win"""
    labels = dict(extra or {})
    labels.update(
        {
            "app.kubernetes.io/name": "mysql",
            "app.kubernetes.io/instance": cluster.name,
            "app.kubernetes.io/managed-by": MANAGED_BY,
        }
    )
    return labels


def get_owner_references(cluster: MysqlCluster) -> list[V1OwnerReference]:
    return [
        V1OwnerReference(
            api_version=f"{CLUSTER_API_GROUP}/{CLUSTER_API_VERSION}",
            kind=CLUSTER_KIND,
            name=cluster.name,
            uid=cluster.uid,
            controller=True,
            block_owner_deletion=True,
        )
    ]


def get_statefulset_meta(cluster: MysqlCluster) -> V1ObjectMeta:
    """Identity of the StatefulSet that runs the cluster's MySQL nodes"""
    return V1ObjectMeta(
        name=cluster.get_name_for_statefulset(),
        namespace=cluster.namespace,
        labels=get_labels(cluster),
        owner_references=get_owner_references(cluster),
    )

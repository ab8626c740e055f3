"""
Pod template builder for the MySQL StatefulSet
"""

import copy
import hashlib

import yaml
from kubernetes.client.models import (
    V1Affinity,
    V1Container,
    V1LocalObjectReference,
    V1ObjectMeta,
    V1PodSpec,
    V1PodTemplateSpec,
)

from mysql_operator.containers import build_container
from mysql_operator.k8s_utils import from_dict
from mysql_operator.labels import get_labels
from mysql_operator.models import (
    INIT_CONTAINER_ROLES,
    RUN_CONTAINER_ROLES,
    ContainerRole,
    MysqlCluster,
)
from mysql_operator.settings import OperatorSettings
from mysql_operator.volumes import plan_volumes

CONFIG_HASH_ANNOTATION = "config_hash"
PROMETHEUS_SCRAPE_ANNOTATION = "prometheus.io/scrape"
PROMETHEUS_PORT_ANNOTATION = "prometheus.io/port"


def compute_config_hash(cluster: MysqlCluster) -> str:
    """Deterministic digest of the effective MySQL configuration"""
    rendered = yaml.safe_dump(dict(cluster.spec.mysql_conf), sort_keys=True)
    return hashlib.sha256(rendered.encode("utf-8")).hexdigest()


def _ensure_containers(
    existing: list[V1Container] | None,
    roles: tuple[ContainerRole, ...],
    cluster: MysqlCluster,
    settings: OperatorSettings,
) -> list[V1Container]:
    priors: list[V1Container | None] = [None] * len(roles)
    # A list of the wrong length has no usable positional identity
    if existing and len(existing) == len(roles):
        priors = list(existing)

    return [
        build_container(role, prior, cluster, settings)
        for role, prior in zip(roles, priors, strict=True)
    ]


def ensure_template(
    existing: V1PodTemplateSpec | None, cluster: MysqlCluster, settings: OperatorSettings
) -> V1PodTemplateSpec:
    """
    Return the pod template for the cluster, built on top of the existing one.

    Labels, scheduling fields and volumes are fully operator-owned and are
    replaced. Annotations set by others are kept; the config hash and the
    Prometheus scrape annotations are always overwritten. Containers are
    rendered positionally onto the prior containers so that unmanaged fields
    survive.

    Args:
        existing: Current pod template, or None for a new StatefulSet
        cluster: The MysqlCluster being reconciled
        settings: Operator-wide settings table

    Returns:
        A new pod template; ``existing`` is not modified
    """
    template = copy.deepcopy(existing) if existing is not None else V1PodTemplateSpec()
    pod_spec = cluster.spec.pod_spec

    if template.metadata is None:
        template.metadata = V1ObjectMeta()
    template.metadata.labels = get_labels(cluster, pod_spec.labels)

    annotations = dict(template.metadata.annotations or {})
    annotations.update(pod_spec.annotations)
    annotations[CONFIG_HASH_ANNOTATION] = compute_config_hash(cluster)
    annotations[PROMETHEUS_SCRAPE_ANNOTATION] = "true"
    annotations[PROMETHEUS_PORT_ANNOTATION] = str(settings.exporter_port)
    template.metadata.annotations = annotations

    if template.spec is None:
        template.spec = V1PodSpec(containers=[])
    spec = template.spec

    spec.init_containers = _ensure_containers(
        spec.init_containers, INIT_CONTAINER_ROLES, cluster, settings
    )
    spec.containers = _ensure_containers(spec.containers, RUN_CONTAINER_ROLES, cluster, settings)

    spec.volumes = plan_volumes(cluster, settings)

    spec.affinity = from_dict(pod_spec.affinity, V1Affinity) if pod_spec.affinity else None
    spec.node_selector = dict(pod_spec.node_selector) or None
    spec.image_pull_secrets = [
        V1LocalObjectReference(name=ref["name"])
        for ref in pod_spec.image_pull_secrets
        if ref.get("name")
    ] or None

    return template

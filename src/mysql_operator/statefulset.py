"""
StatefulSet spec synthesis for a MysqlCluster
"""

import copy

from kubernetes.client.models import (
    V1LabelSelector,
    V1PodTemplateSpec,
    V1StatefulSet,
    V1StatefulSetSpec,
)

from mysql_operator.labels import get_labels
from mysql_operator.models import MysqlCluster
from mysql_operator.settings import OperatorSettings
from mysql_operator.template import ensure_template
from mysql_operator.volumes import ensure_volume_claim_templates


def synthesize(
    existing: V1StatefulSet, cluster: MysqlCluster, settings: OperatorSettings
) -> V1StatefulSet:
    """
    Compute the desired StatefulSet from the live one.

    Operator-owned spec fields are replaced; metadata, status and unmanaged
    fields of the live object are carried over. Running it again on its own
    output with the same cluster produces an identical object.

    Args:
        existing: The live StatefulSet, or a zero-valued one when absent
        cluster: The MysqlCluster being reconciled
        settings: Operator-wide settings table

    Returns:
        A new StatefulSet; ``existing`` is not modified
    """
    statefulset = copy.deepcopy(existing)

    if statefulset.spec is None:
        statefulset.spec = V1StatefulSetSpec(
            selector=V1LabelSelector(), template=V1PodTemplateSpec(), service_name=""
        )
    spec = statefulset.spec

    spec.replicas = cluster.spec.replicas
    spec.selector = V1LabelSelector(match_labels=get_labels(cluster))
    spec.service_name = cluster.get_name_for_headless_service()
    spec.template = ensure_template(spec.template, cluster, settings)
    spec.volume_claim_templates = ensure_volume_claim_templates(
        spec.volume_claim_templates, cluster
    )

    return statefulset

"""
Volume planning for the MySQL pod template

Volumes are identified by VolumeRole. The ordered set of roles is a pure
function of the cluster configuration; each role renders to one V1Volume.
"""

import copy
from collections.abc import Callable

from kubernetes.client.models import (
    V1ConfigMapVolumeSource,
    V1EmptyDirVolumeSource,
    V1ObjectMeta,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimSpec,
    V1PersistentVolumeClaimVolumeSource,
    V1SecretVolumeSource,
    V1Volume,
)

from mysql_operator.k8s_utils import from_dict
from mysql_operator.models import MysqlCluster, VolumeRole
from mysql_operator.settings import OperatorSettings

VOLUME_NAMES: dict[VolumeRole, str] = {
    VolumeRole.CONFIG_SCRATCH: "conf",
    VolumeRole.CONFIG_SOURCE: "config-map",
    VolumeRole.DATA: "data",
    VolumeRole.TOPOLOGY_CREDENTIAL: "orc-topology-secret",
}

DATA_VOLUME_CLAIM_NAME = VOLUME_NAMES[VolumeRole.DATA]

_FIXED_VOLUME_ROLES: tuple[VolumeRole, ...] = (
    VolumeRole.CONFIG_SCRATCH,
    VolumeRole.CONFIG_SOURCE,
    VolumeRole.DATA,
)

# PVC fields populated by the API server or the volume binder
_CLAIM_RUNTIME_FIELDS: tuple[str, ...] = ("volume_name", "volume_mode")


def has_topology_volume(cluster: MysqlCluster, settings: OperatorSettings) -> bool:
    return bool(cluster.spec.get_orc_topology_secret(settings))


def volume_roles(cluster: MysqlCluster, settings: OperatorSettings) -> list[VolumeRole]:
    """Ordered volume roles of the pod: the fixed three, then the topology secret if configured"""
    roles = list(_FIXED_VOLUME_ROLES)
    if has_topology_volume(cluster, settings):
        roles.append(VolumeRole.TOPOLOGY_CREDENTIAL)
    return roles


def _config_scratch_volume(cluster: MysqlCluster, settings: OperatorSettings) -> V1Volume:
    return V1Volume(
        name=VOLUME_NAMES[VolumeRole.CONFIG_SCRATCH],
        empty_dir=V1EmptyDirVolumeSource(),
    )


def _config_source_volume(cluster: MysqlCluster, settings: OperatorSettings) -> V1Volume:
    return V1Volume(
        name=VOLUME_NAMES[VolumeRole.CONFIG_SOURCE],
        config_map=V1ConfigMapVolumeSource(
            name=cluster.get_name_for_config_map(),
            default_mode=settings.config_file_mode,
        ),
    )


def _data_volume(cluster: MysqlCluster, settings: OperatorSettings) -> V1Volume:
    return V1Volume(
        name=VOLUME_NAMES[VolumeRole.DATA],
        persistent_volume_claim=V1PersistentVolumeClaimVolumeSource(
            claim_name=DATA_VOLUME_CLAIM_NAME,
        ),
    )


def _topology_credential_volume(cluster: MysqlCluster, settings: OperatorSettings) -> V1Volume:
    return V1Volume(
        name=VOLUME_NAMES[VolumeRole.TOPOLOGY_CREDENTIAL],
        secret=V1SecretVolumeSource(
            secret_name=cluster.spec.get_orc_topology_secret(settings),
            default_mode=settings.config_file_mode,
        ),
    )


_VOLUME_BUILDERS: dict[VolumeRole, Callable[[MysqlCluster, OperatorSettings], V1Volume]] = {
    VolumeRole.CONFIG_SCRATCH: _config_scratch_volume,
    VolumeRole.CONFIG_SOURCE: _config_source_volume,
    VolumeRole.DATA: _data_volume,
    VolumeRole.TOPOLOGY_CREDENTIAL: _topology_credential_volume,
}


def build_volume(role: VolumeRole, cluster: MysqlCluster, settings: OperatorSettings) -> V1Volume:
    return _VOLUME_BUILDERS[role](cluster, settings)


def plan_volumes(cluster: MysqlCluster, settings: OperatorSettings) -> list[V1Volume]:
    """
    Volumes of the MySQL pod, in order.

    Volumes are entirely operator-owned, so the list is rebuilt on every
    cycle. Its length is 3, or 4 when a topology secret is configured.
    """
    return [build_volume(role, cluster, settings) for role in volume_roles(cluster, settings)]


def ensure_volume_claim_templates(
    existing: list[V1PersistentVolumeClaim] | None, cluster: MysqlCluster
) -> list[V1PersistentVolumeClaim]:
    """
    Return the single data volume-claim template.

    The first existing template is used as the base so metadata set by the
    API server survives; its spec is taken verbatim from the cluster, except
    for runtime fields the cluster leaves unset.
    """
    if existing:
        data = copy.deepcopy(existing[0])
    else:
        data = V1PersistentVolumeClaim()

    if data.metadata is None:
        data.metadata = V1ObjectMeta()
    data.metadata.name = DATA_VOLUME_CLAIM_NAME

    desired_spec = from_dict(cluster.spec.volume_spec, V1PersistentVolumeClaimSpec)
    if data.spec is not None:
        for field_name in _CLAIM_RUNTIME_FIELDS:
            if getattr(desired_spec, field_name) is None:
                setattr(desired_spec, field_name, getattr(data.spec, field_name))
    data.spec = desired_spec

    return [data]

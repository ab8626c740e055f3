"""
Container policy table for the MySQL pod

Each ContainerRole maps to a ContainerPolicy record describing everything the
operator manages on that container. Rendering a policy on top of a prior
container only overwrites the managed fields; anything else on the prior
container (defaults filled in by the API server, fields set by other
controllers) is carried over.
"""

import copy
from collections.abc import Callable
from dataclasses import dataclass, replace

from kubernetes.client.models import (
    V1Container,
    V1ContainerPort,
    V1EnvFromSource,
    V1ExecAction,
    V1HTTPGetAction,
    V1Probe,
    V1ResourceRequirements,
    V1SecretEnvSource,
    V1VolumeMount,
)

from mysql_operator.models import ContainerRole, MysqlCluster, VolumeRole
from mysql_operator.settings import OperatorSettings, ProbeTiming
from mysql_operator.volumes import VOLUME_NAMES, has_topology_volume

CONTAINER_NAMES: dict[ContainerRole, str] = {
    ContainerRole.INIT_CONFIG: "init-mysql",
    ContainerRole.INIT_CLONE: "clone-mysql",
    ContainerRole.MAIN: "mysql",
    ContainerRole.HELPER: "helper",
    ContainerRole.METRICS_EXPORTER: "metrics-exporter",
}

MYSQL_ENV_PREFIX = "MYSQL_"


@dataclass(frozen=True)
class ProbePolicy:
    """A probe handler together with its timing"""

    timing: ProbeTiming
    exec_command: list[str] | None = None
    http_get: V1HTTPGetAction | None = None


@dataclass(frozen=True)
class ContainerPolicy:
    """Operator-managed fields of one container.

    ``ports``, ``resources`` and the probes are only written when set; the
    remaining fields are always written.
    """

    name: str
    image: str
    args: list[str] | None
    env_from: list[V1EnvFromSource]
    volume_mounts: list[V1VolumeMount] | None
    ports: list[V1ContainerPort] | None = None
    resources: V1ResourceRequirements | None = None
    liveness_probe: ProbePolicy | None = None
    readiness_probe: ProbePolicy | None = None
    image_pull_policy: str | None = None


def env_from_secret(name: str, prefix: str | None = None) -> V1EnvFromSource:
    return V1EnvFromSource(prefix=prefix, secret_ref=V1SecretEnvSource(name=name))


def get_env_sources_for(
    role: ContainerRole, cluster: MysqlCluster
) -> list[V1EnvFromSource]:
    """Env sources of a container: the operator env secret, then role-specific extras"""
    sources = [env_from_secret(cluster.get_name_for_env_secret())]

    if role is ContainerRole.INIT_CLONE and cluster.spec.init_bucket_secret_name:
        sources.append(env_from_secret(cluster.spec.init_bucket_secret_name))
    elif role is ContainerRole.MAIN:
        sources.append(env_from_secret(cluster.spec.secret_name, prefix=MYSQL_ENV_PREFIX))

    return sources


def _mount(role: VolumeRole, mount_path: str) -> V1VolumeMount:
    return V1VolumeMount(name=VOLUME_NAMES[role], mount_path=mount_path)


def get_volume_mounts_for(
    role: ContainerRole, cluster: MysqlCluster, settings: OperatorSettings
) -> list[V1VolumeMount] | None:
    common = [
        _mount(VolumeRole.CONFIG_SCRATCH, settings.conf_mount_path),
        _mount(VolumeRole.DATA, settings.data_mount_path),
    ]

    if role is ContainerRole.INIT_CONFIG:
        return [
            _mount(VolumeRole.CONFIG_SCRATCH, settings.conf_mount_path),
            _mount(VolumeRole.CONFIG_SOURCE, settings.conf_map_mount_path),
        ]
    if role in (ContainerRole.INIT_CLONE, ContainerRole.MAIN):
        return common
    if role is ContainerRole.HELPER:
        if has_topology_volume(cluster, settings):
            common.append(_mount(VolumeRole.TOPOLOGY_CREDENTIAL, settings.orc_topology_dir))
        return common
    return None


def _init_config_policy(cluster: MysqlCluster, settings: OperatorSettings) -> ContainerPolicy:
    role = ContainerRole.INIT_CONFIG
    return ContainerPolicy(
        name=CONTAINER_NAMES[role],
        image=cluster.spec.get_helper_image(settings),
        args=["files-config"],
        env_from=get_env_sources_for(role, cluster),
        volume_mounts=get_volume_mounts_for(role, cluster, settings),
    )


def _init_clone_policy(cluster: MysqlCluster, settings: OperatorSettings) -> ContainerPolicy:
    role = ContainerRole.INIT_CLONE
    return ContainerPolicy(
        name=CONTAINER_NAMES[role],
        image=cluster.spec.get_helper_image(settings),
        args=["clone"],
        env_from=get_env_sources_for(role, cluster),
        volume_mounts=get_volume_mounts_for(role, cluster, settings),
    )


def _main_policy(cluster: MysqlCluster, settings: OperatorSettings) -> ContainerPolicy:
    role = ContainerRole.MAIN
    defaults_file = f"--defaults-file={settings.client_defaults_file}"
    resources = cluster.spec.pod_spec.resources
    return ContainerPolicy(
        name=CONTAINER_NAMES[role],
        image=cluster.spec.get_mysql_image(settings),
        args=None,
        env_from=get_env_sources_for(role, cluster),
        volume_mounts=get_volume_mounts_for(role, cluster, settings),
        ports=[V1ContainerPort(name=settings.mysql_port_name, container_port=settings.mysql_port)],
        resources=V1ResourceRequirements(
            limits=resources.get("limits") or None,
            requests=resources.get("requests") or None,
        ),
        liveness_probe=ProbePolicy(
            timing=settings.mysql_liveness,
            exec_command=["mysqladmin", defaults_file, "ping"],
        ),
        readiness_probe=ProbePolicy(
            timing=settings.mysql_readiness,
            exec_command=["mysql", defaults_file, "-e", "SELECT 1"],
        ),
    )


def _helper_policy(cluster: MysqlCluster, settings: OperatorSettings) -> ContainerPolicy:
    role = ContainerRole.HELPER
    return ContainerPolicy(
        name=CONTAINER_NAMES[role],
        image=cluster.spec.get_helper_image(settings),
        args=["config-and-serve"],
        env_from=get_env_sources_for(role, cluster),
        volume_mounts=get_volume_mounts_for(role, cluster, settings),
        ports=[
            V1ContainerPort(
                name=settings.helper_xtrabackup_port_name,
                container_port=settings.helper_xtrabackup_port,
            )
        ],
        readiness_probe=ProbePolicy(
            timing=settings.helper_readiness,
            http_get=V1HTTPGetAction(
                path=settings.helper_probe_path,
                port=settings.helper_probe_port,
                scheme="HTTP",
            ),
        ),
    )


def _metrics_exporter_policy(cluster: MysqlCluster, settings: OperatorSettings) -> ContainerPolicy:
    role = ContainerRole.METRICS_EXPORTER
    return ContainerPolicy(
        name=CONTAINER_NAMES[role],
        image=cluster.spec.get_metrics_exporter_image(settings),
        args=[
            f"--web.listen-address=0.0.0.0:{settings.exporter_port}",
            f"--web.telemetry-path={settings.exporter_path}",
        ],
        env_from=get_env_sources_for(role, cluster),
        volume_mounts=get_volume_mounts_for(role, cluster, settings),
        ports=[
            V1ContainerPort(
                name=settings.exporter_port_name,
                container_port=settings.exporter_port,
            )
        ],
        liveness_probe=ProbePolicy(
            timing=settings.exporter_liveness,
            http_get=V1HTTPGetAction(
                path=settings.exporter_path,
                port=settings.exporter_port_name,
                scheme="HTTP",
            ),
        ),
    )


_POLICY_TABLE: dict[ContainerRole, Callable[[MysqlCluster, OperatorSettings], ContainerPolicy]] = {
    ContainerRole.INIT_CONFIG: _init_config_policy,
    ContainerRole.INIT_CLONE: _init_clone_policy,
    ContainerRole.MAIN: _main_policy,
    ContainerRole.HELPER: _helper_policy,
    ContainerRole.METRICS_EXPORTER: _metrics_exporter_policy,
}


def get_container_policy(
    role: ContainerRole, cluster: MysqlCluster, settings: OperatorSettings
) -> ContainerPolicy:
    """Look up the policy of a container role for the given cluster"""
    policy = _POLICY_TABLE[role](cluster, settings)
    return replace(policy, image_pull_policy=cluster.spec.pod_spec.image_pull_policy)


def ensure_probe(existing: V1Probe | None, policy: ProbePolicy) -> V1Probe:
    """Write handler and timing onto a probe, keeping its other fields"""
    probe = copy.deepcopy(existing) if existing is not None else V1Probe()

    probe.initial_delay_seconds = policy.timing.initial_delay_seconds
    probe.period_seconds = policy.timing.period_seconds
    probe.failure_threshold = policy.timing.failure_threshold

    # A probe carries exactly one handler
    probe._exec = V1ExecAction(command=list(policy.exec_command)) if policy.exec_command else None
    probe.http_get = copy.deepcopy(policy.http_get)
    probe.tcp_socket = None
    probe.grpc = None

    return probe


def ensure_container_ports(
    existing: list[V1ContainerPort] | None, desired: list[V1ContainerPort]
) -> list[V1ContainerPort]:
    """Positionally merge desired ports onto existing ones, keeping defaults such as protocol"""
    existing = existing or []
    ports = []
    for index, wanted in enumerate(desired):
        if index < len(existing):
            port = copy.deepcopy(existing[index])
        else:
            port = V1ContainerPort(container_port=wanted.container_port)
        port.name = wanted.name
        port.container_port = wanted.container_port
        ports.append(port)
    return ports


def ensure_container(existing: V1Container | None, policy: ContainerPolicy) -> V1Container:
    """
    Render a container policy on top of the prior container at the same position.

    Args:
        existing: Container currently at this index, or None
        policy: Operator-managed fields for the container

    Returns:
        A new container; ``existing`` is not modified
    """
    container = copy.deepcopy(existing) if existing is not None else V1Container(name=policy.name)

    container.name = policy.name
    container.image = policy.image
    container.image_pull_policy = policy.image_pull_policy
    container.args = list(policy.args) if policy.args else None
    container.env_from = copy.deepcopy(policy.env_from)
    container.volume_mounts = copy.deepcopy(policy.volume_mounts)

    if policy.ports is not None:
        container.ports = ensure_container_ports(container.ports, policy.ports)
    if policy.resources is not None:
        container.resources = copy.deepcopy(policy.resources)
    if policy.liveness_probe is not None:
        container.liveness_probe = ensure_probe(container.liveness_probe, policy.liveness_probe)
    if policy.readiness_probe is not None:
        container.readiness_probe = ensure_probe(container.readiness_probe, policy.readiness_probe)

    return container


def build_container(
    role: ContainerRole,
    existing: V1Container | None,
    cluster: MysqlCluster,
    settings: OperatorSettings,
) -> V1Container:
    return ensure_container(existing, get_container_policy(role, cluster, settings))

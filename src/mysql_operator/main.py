#!/usr/bin/env python3
"""
MySQL Operator for Kubernetes

Watches MysqlCluster resources and keeps their StatefulSets converged. Every
create, update and resume event, plus a periodic timer, triggers a complete
and independent reconciliation pass.
"""

import asyncio
import logging
import sys
from typing import Any

import kopf
from kubernetes import client, config

from mysql_operator.exceptions import InvalidClusterSpecError
from mysql_operator.labels import CLUSTER_API_GROUP, CLUSTER_API_VERSION, CLUSTER_PLURAL
from mysql_operator.models import MysqlCluster, parse_cluster
from mysql_operator.reconciler import StatefulSetReconciler, SyncResult
from mysql_operator.settings import get_settings
from mysql_operator.status import update_status_condition

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialized in main(); tests replace it directly
reconciler: StatefulSetReconciler | None = None

RETRY_DELAY_SECONDS = 30


def _initialize_kubernetes_clients() -> StatefulSetReconciler:
    """Load Kubernetes config and build the reconciler."""
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded local Kubernetes config")

    return StatefulSetReconciler(client.AppsV1Api(), get_settings())


def _get_reconciler() -> StatefulSetReconciler:
    if reconciler is None:
        raise RuntimeError("Kubernetes clients not initialized")
    return reconciler


def _load_cluster(
    spec: Any, name: str, namespace: str, meta: Any, handler_logger: logging.Logger
) -> MysqlCluster:
    try:
        return parse_cluster(name, namespace, meta.get("uid", ""), dict(spec))
    except InvalidClusterSpecError as e:
        handler_logger.error(e.message)
        raise kopf.PermanentError(e.message) from e


def _write_status(result: SyncResult, status: Any, patch: Any) -> None:
    """Copy the readiness derived during the sync onto the MysqlCluster status."""
    if result.status is None:
        return

    patch.status["conditions"] = update_status_condition(
        list(status.get("conditions") or []), result.status.condition
    )
    patch.status["readyNodes"] = result.status.ready_nodes


async def _sync(
    spec: Any,
    name: str,
    namespace: str,
    meta: Any,
    status: Any,
    patch: Any,
    handler_logger: logging.Logger,
) -> dict[str, str]:
    cluster = _load_cluster(spec, name, namespace, meta, handler_logger)

    result = await asyncio.to_thread(_get_reconciler().sync, cluster)

    # Readiness is reported even when the apply failed; kopf applies the patch either way
    _write_status(result, status, patch)
    if result.failed:
        handler_logger.error(f"Failed to sync StatefulSet for MysqlCluster {name}: {result.error}")
        raise kopf.TemporaryError(
            f"StatefulSet sync failed: {result.error}", delay=RETRY_DELAY_SECONDS
        ) from result.error

    handler_logger.info(f"MysqlCluster {name} StatefulSet {result.action.value}")
    return {"statefulSet": result.action.value}


@kopf.on.resume(CLUSTER_API_GROUP, CLUSTER_API_VERSION, CLUSTER_PLURAL)
@kopf.on.create(CLUSTER_API_GROUP, CLUSTER_API_VERSION, CLUSTER_PLURAL)
@kopf.on.update(CLUSTER_API_GROUP, CLUSTER_API_VERSION, CLUSTER_PLURAL, field="spec")
async def reconcile_mysqlcluster(  # type: ignore
    spec, name, namespace, meta, status, patch, logger, **_kwargs
):
    """Handle MysqlCluster creation, spec changes and operator restarts"""
    logger.info(f"Reconciling MysqlCluster: {name} in namespace: {namespace}")
    return await _sync(spec, name, namespace, meta, status, patch, logger)


@kopf.timer(
    CLUSTER_API_GROUP,
    CLUSTER_API_VERSION,
    CLUSTER_PLURAL,
    interval=get_settings().resync_interval_seconds,
    initial_delay=get_settings().resync_interval_seconds,
)
async def resync_mysqlcluster(  # type: ignore
    spec, name, namespace, meta, status, patch, logger, **_kwargs
):
    """Periodic level-triggered resync, repairing drift made by others"""
    await _sync(spec, name, namespace, meta, status, patch, logger)


def main() -> None:
    """Main entry point for the operator."""
    global reconciler

    logger.info("Starting MySQL Operator...")

    try:
        reconciler = _initialize_kubernetes_clients()
    except Exception as e:
        logger.error("Failed to start operator: %s", e)
        sys.exit(1)

    kopf.run(
        clusterwide=True,
        # Enable built-in health endpoints
        liveness_endpoint="http://0.0.0.0:8080/healthz",
    )


if __name__ == "__main__":
    main()

"""
Create-or-patch for StatefulSets

Fetches the StatefulSet (or starts from a zero-valued one), runs a mutation
function over it, and writes back only what changed. Updates are sent as
RFC 6902 JSON patches guarded by a resourceVersion test, so a concurrent
writer makes the patch fail instead of being overwritten.
"""

import copy
import logging
from collections.abc import Callable
from typing import Any

import jsonpatch
from kubernetes import client
from kubernetes.client.models import V1ObjectMeta, V1StatefulSet
from kubernetes.client.rest import ApiException

from mysql_operator.exceptions import log_api_exception
from mysql_operator.k8s_utils import to_dict
from mysql_operator.models import ConvergenceAction

logger = logging.getLogger(__name__)

MutateFn = Callable[[V1StatefulSet], V1StatefulSet]


def _comparable(statefulset: V1StatefulSet) -> dict[str, Any]:
    """Wire form of a StatefulSet without the API-server-owned status"""
    data: dict[str, Any] = to_dict(statefulset)
    data.pop("status", None)
    return data


def compute_patch(current: V1StatefulSet, desired: V1StatefulSet) -> list[dict[str, Any]]:
    """JSON patch operations turning ``current`` into ``desired``, ignoring status"""
    patch = jsonpatch.make_patch(_comparable(current), _comparable(desired))
    operations: list[dict[str, Any]] = list(patch.patch)
    return operations


def create_or_patch_stateful_set(
    apps_api: client.AppsV1Api, meta: V1ObjectMeta, mutate: MutateFn
) -> tuple[V1StatefulSet, ConvergenceAction]:
    """
    Converge a StatefulSet by applying ``mutate`` to its current state.

    Args:
        apps_api: Apps API client
        meta: Identity used when the StatefulSet has to be created
        mutate: Function returning the desired object from the current one

    Returns:
        Tuple of (resulting object, action taken); action is never FAILED

    Raises:
        ApiException: Any API error other than the initial not-found,
            propagated unmodified
    """
    resource = f"statefulset {meta.namespace}/{meta.name}"

    try:
        current = apps_api.read_namespaced_stateful_set(name=meta.name, namespace=meta.namespace)
    except ApiException as e:
        if e.status != 404:
            log_api_exception(e, "reading", resource)
            raise
        current = None

    if current is None:
        blank = V1StatefulSet(api_version="apps/v1", kind="StatefulSet", metadata=copy.deepcopy(meta))
        desired = mutate(blank)
        logger.info("Creating %s", resource)
        try:
            created = apps_api.create_namespaced_stateful_set(
                namespace=meta.namespace, body=desired
            )
        except ApiException as e:
            log_api_exception(e, "creating", resource)
            raise
        return created, ConvergenceAction.CREATED

    desired = mutate(copy.deepcopy(current))
    operations = compute_patch(current, desired)
    if not operations:
        logger.debug("No changes for %s", resource)
        return current, ConvergenceAction.UNCHANGED

    resource_version = current.metadata.resource_version if current.metadata else None
    if resource_version:
        operations.insert(
            0, {"op": "test", "path": "/metadata/resourceVersion", "value": resource_version}
        )

    logger.info("Patching %s with %d operations", resource, len(operations))
    try:
        patched = apps_api.patch_namespaced_stateful_set(
            name=meta.name, namespace=meta.namespace, body=operations
        )
    except ApiException as e:
        log_api_exception(e, "patching", resource)
        raise
    return patched, ConvergenceAction.UPDATED

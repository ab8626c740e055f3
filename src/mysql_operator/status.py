"""
Readiness evaluation for the MySQL StatefulSet
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from kubernetes.client.models import V1StatefulSet

CONDITION_READY = "Ready"


@dataclass(frozen=True)
class ReadinessCondition:
    """A status condition of the MysqlCluster"""

    type: str
    status: str
    reason: str
    message: str


@dataclass(frozen=True)
class StatusEvaluation:
    """What the live StatefulSet says about cluster readiness"""

    condition: ReadinessCondition
    ready_nodes: int


def evaluate_status(statefulset: V1StatefulSet) -> StatusEvaluation:
    """
    Derive the Ready condition from the StatefulSet's reported replica counters.

    Must be called on the object as fetched, before its spec is rewritten.
    Missing counters count as zero.
    """
    status = statefulset.status
    replicas = (status.replicas if status else None) or 0
    ready_replicas = (status.ready_replicas if status else None) or 0

    if ready_replicas == replicas:
        condition = ReadinessCondition(
            type=CONDITION_READY,
            status="True",
            reason="StatefulSetReady",
            message="Cluster is ready.",
        )
    else:
        condition = ReadinessCondition(
            type=CONDITION_READY,
            status="False",
            reason="StatefulSetNotReady",
            message="Cluster is not ready.",
        )

    return StatusEvaluation(condition=condition, ready_nodes=ready_replicas)


def update_status_condition(
    conditions: list[dict[str, Any]] | None,
    condition: ReadinessCondition,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """
    Merge a condition into a custom resource's condition list.

    ``lastTransitionTime`` only moves when the condition's status changes.
    Other condition types are left as they are.
    """
    now = now or datetime.now(UTC)
    result = [dict(c) for c in conditions or []]

    for entry in result:
        if entry.get("type") != condition.type:
            continue
        if entry.get("status") != condition.status:
            entry["lastTransitionTime"] = now.isoformat()
        entry["status"] = condition.status
        entry["reason"] = condition.reason
        entry["message"] = condition.message
        return result

    result.append(
        {
            "type": condition.type,
            "status": condition.status,
            "lastTransitionTime": now.isoformat(),
            "reason": condition.reason,
            "message": condition.message,
        }
    )
    return result

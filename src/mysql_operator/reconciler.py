"""
StatefulSet reconciler for MysqlClusters
"""

import logging
from dataclasses import dataclass

from kubernetes import client
from kubernetes.client.models import V1StatefulSet
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from mysql_operator.apply import create_or_patch_stateful_set
from mysql_operator.labels import get_statefulset_meta
from mysql_operator.models import ConvergenceAction, MysqlCluster
from mysql_operator.settings import OperatorSettings
from mysql_operator.statefulset import synthesize
from mysql_operator.status import StatusEvaluation, evaluate_status

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of one reconciliation cycle"""

    action: ConvergenceAction
    status: StatusEvaluation | None = None
    statefulset: V1StatefulSet | None = None
    error: ApiException | HTTPError | None = None

    @property
    def failed(self) -> bool:
        return self.action is ConvergenceAction.FAILED


class StatefulSetReconciler:
    """Keeps a MysqlCluster's StatefulSet converged to its spec"""

    def __init__(self, apps_api: client.AppsV1Api, settings: OperatorSettings) -> None:
        self.apps_api = apps_api
        self.settings = settings

    def sync(self, cluster: MysqlCluster) -> SyncResult:
        """
        Run one complete convergence attempt for the cluster's StatefulSet.

        The readiness of the live object is evaluated before its spec is
        rewritten. API and transport errors are not retried here: the result carries
        FAILED and the original exception, and the next resync tries again.
        """
        meta = get_statefulset_meta(cluster)
        evaluations: list[StatusEvaluation] = []

        def mutate(statefulset: V1StatefulSet) -> V1StatefulSet:
            evaluations.append(evaluate_status(statefulset))
            return synthesize(statefulset, cluster, self.settings)

        try:
            statefulset, action = create_or_patch_stateful_set(self.apps_api, meta, mutate)
        except (ApiException, HTTPError) as e:
            # HTTPError covers transport failures such as refused connections
            logger.error("StatefulSet %s/%s sync failed: %s", meta.namespace, meta.name, e)
            return SyncResult(
                action=ConvergenceAction.FAILED,
                status=evaluations[-1] if evaluations else None,
                error=e,
            )

        if action is ConvergenceAction.UNCHANGED:
            logger.debug("StatefulSet %s/%s synced: %s", meta.namespace, meta.name, action.value)
        else:
            logger.info("StatefulSet %s/%s synced: %s", meta.namespace, meta.name, action.value)

        return SyncResult(
            action=action,
            status=evaluations[-1],
            statefulset=statefulset,
        )

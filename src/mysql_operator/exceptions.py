"""
Error handling utilities and custom exceptions for the MySQL Operator
"""

import logging

from kubernetes.client.rest import ApiException

logger = logging.getLogger(__name__)


class OperatorError(Exception):
    """Base exception for operator errors"""

    def __init__(self, message: str, resource: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.resource = resource


class InvalidClusterSpecError(OperatorError):
    """The MysqlCluster spec cannot be turned into a StatefulSet"""


def log_api_exception(error: ApiException, operation: str, resource: str) -> None:
    """
    Log a Kubernetes API error with a level chosen by its status code.

    The exception itself is left for the caller to propagate.

    Args:
        error: The API exception raised by the client
        operation: Description of the operation (e.g., "patching")
        resource: Resource identifier (e.g., "statefulset:ns/name")
    """
    error_msg = f"Kubernetes API error while {operation} {resource}"

    if error.status == 404:
        logger.info("%s: Resource not found (404)", error_msg)
    elif error.status in (400, 401, 403, 409, 422):
        logger.warning("%s: Client error (%s): %s", error_msg, error.status, error.reason)
    else:
        logger.error("%s: Server error (%s): %s", error_msg, error.status, error.reason)
        if error.body:
            logger.error("Error details: %s", error.body)

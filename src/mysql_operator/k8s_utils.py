"""
Kubernetes model conversion helpers shared across builders
"""

import json
from typing import Any, TypeVar

from kubernetes import client

T = TypeVar("T")

_api_client = client.ApiClient()


class _JsonPayload:
    """Minimal stand-in for a REST response, as expected by ApiClient.deserialize"""

    def __init__(self, data: Any) -> None:
        self.data = json.dumps(data)


def to_dict(obj: Any) -> Any:
    """Serialize a Kubernetes model into its wire (camelCase) representation"""
    return _api_client.sanitize_for_serialization(obj)


def from_dict(data: dict[str, Any], klass: type[T]) -> T:
    """Deserialize a wire (camelCase) dict into the given Kubernetes model class"""
    result: T = _api_client.deserialize(_JsonPayload(data), klass.__name__)
    return result

"""
MySQL Operator for Kubernetes

Reconciles MysqlCluster resources into StatefulSets.
"""

from mysql_operator._version import __version__

__all__ = ["__version__"]

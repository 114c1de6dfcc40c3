#!/usr/bin/env python3
"""
KRONJOB CLUSTER ACCESS
----------------------
ClusterClient is the abstract capability the reconciler consumes:
list / get / create / update / delete, per kind and namespace.
KubernetesCluster implements it on top of the official kubernetes
client's BatchV1Api. Transport, auth and retries belong to that client.

Every failure is surfaced as ClusterOperationFailed, except a 404 on
get, which becomes NotFound.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from kronjob.core.errors import ClusterConfigError, ClusterOperationFailed, NotFound
from kronjob.core.kinds import kind_info
from kronjob.core.models import WorkloadObject
from kronjob.manifests.exporter import ManifestExporter
from kronjob.manifests.loader import decode_object

logger = logging.getLogger("kronjob.cluster")

FOREGROUND = "Foreground"


class ClusterClient(ABC):
    """The cluster operations the reconciler depends on."""

    @abstractmethod
    def list(self, kind: str, namespace: str) -> List[WorkloadObject]:
        """Lists every object of a kind in a namespace."""

    @abstractmethod
    def get(self, kind: str, namespace: str, name: str) -> WorkloadObject:
        """Reads one object. Raises NotFound when it does not exist."""

    @abstractmethod
    def create(self, obj: WorkloadObject) -> None:
        ...

    @abstractmethod
    def update(self, obj: WorkloadObject, resource_version: Optional[str] = None) -> None:
        """Replaces the whole object in place."""

    @abstractmethod
    def delete(self, kind: str, namespace: str, name: str,
               propagation_policy: str = FOREGROUND) -> None:
        ...


class KubernetesCluster(ClusterClient):
    """
    ClusterClient backed by kubernetes.client.BatchV1Api.
    """

    # kind -> operation -> BatchV1Api method name
    _METHODS: Dict[str, Dict[str, str]] = {
        "Job": {
            "list": "list_namespaced_job",
            "get": "read_namespaced_job",
            "create": "create_namespaced_job",
            "update": "replace_namespaced_job",
            "delete": "delete_namespaced_job",
        },
        "CronJob": {
            "list": "list_namespaced_cron_job",
            "get": "read_namespaced_cron_job",
            "create": "create_namespaced_cron_job",
            "update": "replace_namespaced_cron_job",
            "delete": "delete_namespaced_cron_job",
        },
    }

    def __init__(self, kubeconfig: Optional[str] = None, context: Optional[str] = None,
                 api: Any = None, exporter: Optional[ManifestExporter] = None):
        if api is None:
            logger.debug(f"Loading kubeconfig from {kubeconfig or 'default location'}")
            try:
                config.load_kube_config(config_file=kubeconfig, context=context)
            except (ConfigException, OSError) as e:
                raise ClusterConfigError(kubeconfig, str(e)) from e
            api = client.BatchV1Api()
        self.api = api
        self.exporter = exporter or ManifestExporter()

    def _call(self, operation: str, kind: str, namespace: str,
              name: Optional[str] = None, **kwargs) -> Any:
        method = getattr(self.api, self._METHODS[kind_info(kind).kind][operation])
        if name is not None:
            kwargs["name"] = name
        try:
            return method(namespace=namespace, **kwargs)
        except ApiException as e:
            if e.status == 404 and operation == "get":
                raise NotFound(kind, namespace, name) from e
            raise ClusterOperationFailed(
                operation, kind, namespace, name, reason=f"{e.status} {e.reason}"
            ) from e
        except Exception as e:
            raise ClusterOperationFailed(operation, kind, namespace, name, reason=str(e)) from e

    def _to_object(self, kind: str, item: Any) -> WorkloadObject:
        doc = self.api.api_client.sanitize_for_serialization(item)
        # List items come back without their type identity
        info = kind_info(kind)
        doc["apiVersion"] = doc.get("apiVersion") or info.api_version
        doc["kind"] = doc.get("kind") or info.kind
        return decode_object(doc)

    def list(self, kind: str, namespace: str) -> List[WorkloadObject]:
        result = self._call("list", kind, namespace)
        objects = [self._to_object(kind, item) for item in result.items]
        logger.debug(f"Listed {len(objects)} {kind} object(s) in namespace '{namespace}'")
        return objects

    def get(self, kind: str, namespace: str, name: str) -> WorkloadObject:
        return self._to_object(kind, self._call("get", kind, namespace, name))

    def create(self, obj: WorkloadObject) -> None:
        meta = obj.metadata
        self._call("create", obj.kind, meta.namespace, body=self.exporter.request_body(obj))
        logger.debug(f'Created {obj.kind} "{meta.name}" in namespace "{meta.namespace}"')

    def update(self, obj: WorkloadObject, resource_version: Optional[str] = None) -> None:
        meta = obj.metadata
        body = self.exporter.request_body(obj, resource_version=resource_version)
        self._call("update", obj.kind, meta.namespace, meta.name, body=body)
        logger.debug(f'Replaced {obj.kind} "{meta.name}" in namespace "{meta.namespace}"')

    def delete(self, kind: str, namespace: str, name: str,
               propagation_policy: str = FOREGROUND) -> None:
        self._call("delete", kind, namespace, name, propagation_policy=propagation_policy)
        logger.debug(f'Deleted {kind} "{name}" in namespace "{namespace}" ({propagation_policy})')

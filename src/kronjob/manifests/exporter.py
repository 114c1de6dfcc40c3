#!/usr/bin/env python3
"""
KRONJOB EXPORTER - Request Bodies & Readable YAML
-------------------------------------------------
Renders workload objects back into plain mappings for the cluster API,
and into canonically ordered YAML for the preview diff.

Author: Kronjob Team
Date: 2026-10-17
"""

import copy
import io
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from kronjob.core.models import WorkloadObject

# Metadata the API server owns; it must not travel in create/replace bodies.
SERVER_METADATA = (
    "uid", "resourceVersion", "generation", "creationTimestamp",
    "deletionTimestamp", "deletionGracePeriodSeconds", "managedFields", "selfLink",
)


class ManifestExporter:
    """
    The Reconstructor: converts workload objects into API bodies and YAML text.
    """

    def __init__(self):
        self.yaml = YAML(typ="rt")
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["apiVersion", "kind", "metadata", "spec", "status"]

    def request_body(self, obj: WorkloadObject,
                     resource_version: Optional[str] = None) -> Dict[str, Any]:
        """
        Builds the whole-object body for a create or replace call.
        Replace calls pass the observed resourceVersion to guard against
        concurrent writers.
        """
        body = copy.deepcopy(obj.manifest)
        body["apiVersion"] = obj.api_version
        body["kind"] = obj.kind
        body.pop("status", None)

        metadata = body.setdefault("metadata", {})
        for key in SERVER_METADATA:
            metadata.pop(key, None)
        metadata["name"] = obj.metadata.name
        metadata["namespace"] = obj.metadata.namespace
        if resource_version:
            metadata["resourceVersion"] = resource_version
        return body

    def _get_sorted_map(self, data: Any) -> Any:
        """Recursively orders keys: well-known keys first, the rest in original order."""
        if isinstance(data, list):
            return [self._get_sorted_map(item) for item in data]
        if not isinstance(data, dict):
            return data

        keys = list(data.keys())

        def sort_logic(key):
            if key in self.preferred_order:
                return self.preferred_order.index(key)
            return len(self.preferred_order) + keys.index(key)

        sorted_map = CommentedMap()
        for key in sorted(keys, key=sort_logic):
            sorted_map[key] = self._get_sorted_map(data[key])
        return sorted_map

    def to_yaml(self, obj: WorkloadObject) -> str:
        stream = io.StringIO()
        self.yaml.dump(self._get_sorted_map(self.request_body(obj)), stream)
        return stream.getvalue()

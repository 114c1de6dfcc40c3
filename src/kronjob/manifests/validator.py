#!/usr/bin/env python3
"""
KRONJOB VALIDATOR - The Gatekeeper
----------------------------------
The validator runs over every decoded document before any typed object
is built or any cluster call is made. One unsupported document rejects
the whole input: planning against a partial desired state would prune
the objects we failed to read.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
from typing import Any, Dict, Iterable, List, Tuple

from kronjob.core.errors import ManifestError, UnsupportedKind
from kronjob.core.kinds import KindInfo, lookup_kind

logger = logging.getLogger("kronjob.manifests")


class ManifestValidator:
    """
    Enforces structural integrity and the accepted-kind allow-list
    on raw manifest mappings.
    """

    def __init__(self):
        # Core fields that must exist in every Kubernetes resource
        self.required_fields = ["apiVersion", "kind", "metadata"]

    def validate(self, doc: Any, source: str = "<manifest>") -> KindInfo:
        """
        Validates one document and returns the KindInfo it resolves to.
        """
        if not isinstance(doc, dict):
            raise ManifestError(source, "document is not a mapping")

        # --- TEST 1: Identity & Metadata Presence ---
        for field in self.required_fields:
            if field not in doc:
                raise ManifestError(source, f"missing required top-level field '{field}'")

        metadata = doc["metadata"]
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise ManifestError(source, "metadata.name is required")

        # --- TEST 2: Accepted kinds ---
        try:
            return lookup_kind(str(doc["apiVersion"]), str(doc["kind"]))
        except UnsupportedKind as e:
            raise UnsupportedKind(e.kind, e.api_version, source=source) from None

    def validate_all(self, docs: Iterable[Tuple[str, Dict[str, Any]]]) -> List[KindInfo]:
        """Validates (source, document) pairs; the first failure aborts."""
        infos = []
        for source, doc in docs:
            infos.append(self.validate(doc, source))
        logger.debug(f"Validated {len(infos)} manifest document(s)")
        return infos

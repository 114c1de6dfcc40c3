#!/usr/bin/env python3
"""
KRONJOB ERRORS - The Failure Taxonomy
-------------------------------------
Every failure a reconciliation run can hit is a distinct exception type,
so callers and tests can assert on *which* gate stopped the run rather
than only observing that it stopped.

All of them are fatal: the engine never retries or rolls back. The one
exception is NotFound, which the deletion poller consumes as its
success signal.

Author: Kronjob Team
Date: 2026-10-17
"""

from typing import Optional


class KronjobError(Exception):
    """Base class for all kronjob failures."""


class ManifestError(KronjobError):
    """A manifest source could not be read or decoded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class UnsupportedKind(KronjobError):
    """An object is outside the accepted Job/CronJob kinds."""

    def __init__(self, kind: str, api_version: Optional[str] = None, source: Optional[str] = None):
        self.kind = kind
        self.api_version = api_version
        self.source = source
        identity = f"{api_version}/{kind}" if api_version else str(kind)
        message = f"Not an accepted resource: {identity}"
        if source:
            message += f" (in {source})"
        super().__init__(message)


class AmbiguousPairing(KronjobError):
    """More than one object shares a pairing identity (namespace + label value)."""

    def __init__(self, namespace: str, label: str, value: str, names: list):
        self.namespace = namespace
        self.label = label
        self.value = value
        self.names = list(names)
        super().__init__(
            f"Ambiguous pairing for {label}={value} in namespace '{namespace}': "
            f"matched {', '.join(self.names)}"
        )


class NotFound(KronjobError):
    """The cluster has no object with the requested kind/namespace/name."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f'{kind} "{name}" not found in namespace "{namespace}"')


class ClusterOperationFailed(KronjobError):
    """A list/get/create/update/delete call against the cluster returned an error."""

    def __init__(self, operation: str, kind: str, namespace: str,
                 name: Optional[str] = None, reason: str = ""):
        self.operation = operation
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.reason = reason
        target = f'{kind} "{name}"' if name else f"{kind} objects"
        message = f"Cluster {operation} failed for {target} in namespace '{namespace}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DeletionTimeout(KronjobError):
    """A deleted object was still present when the confirmation poll gave up."""

    def __init__(self, kind: str, namespace: str, name: str, timeout: float):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.timeout = timeout
        super().__init__(
            f'Timed out after {timeout:g}s waiting for {kind} "{name}" '
            f"in namespace '{namespace}' to be deleted"
        )


class ClusterConfigError(KronjobError):
    """Cluster credentials could not be loaded."""

    def __init__(self, kubeconfig: Optional[str], reason: str):
        self.kubeconfig = kubeconfig
        self.reason = reason
        super().__init__(f"Unable to load kubeconfig {kubeconfig or '(default)'}: {reason}")

#!/usr/bin/env python3
"""
KRONJOB CORE MODELS
-------------------
Defines the fundamental data structures used across the kronjob engine.
Workload objects are immutable snapshots: desired objects are decoded
once from manifests, observed objects are listed once from the cluster,
and nothing mutates them for the rest of the run.

Author: Kronjob Team
Date: 2026-10-17
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Tuple

from kronjob.core.errors import UnsupportedKind


@dataclass(frozen=True)
class Container:
    """
    A single container of a pod template.
    Names are unique within one template; the comparator matches on them.
    """
    name: str
    image: str = ""
    working_dir: str = ""
    command: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()
    env: Tuple[Dict[str, Any], ...] = ()   # order matters for equality


@dataclass(frozen=True)
class PodTemplate:
    restart_policy: str = ""
    termination_grace_period_seconds: Optional[int] = None
    active_deadline_seconds: Optional[int] = None
    node_selector: Dict[str, str] = field(default_factory=dict)
    containers: Tuple[Container, ...] = ()


@dataclass(frozen=True)
class JobSpec:
    template: PodTemplate = field(default_factory=PodTemplate)
    active_deadline_seconds: Optional[int] = None


@dataclass(frozen=True)
class CronJobSpec:
    schedule: str = ""
    job_template: JobSpec = field(default_factory=JobSpec)
    concurrency_policy: str = ""
    suspend: Optional[bool] = None
    successful_jobs_history_limit: Optional[int] = None
    failed_jobs_history_limit: Optional[int] = None


@dataclass(frozen=True)
class ObjectMeta:
    name: str
    namespace: str = "default"
    labels: Dict[str, str] = field(default_factory=dict)
    resource_version: Optional[str] = None      # only set on observed objects
    owner_kinds: Tuple[str, ...] = ()           # kinds listed in ownerReferences


class WorkloadObject:
    """
    Closed union over the two managed kinds. Only Job and CronJob
    subclass it; the metadata accessor rejects anything else.
    """
    kind: ClassVar[str] = ""
    api_version: ClassVar[str] = "batch/v1"


@dataclass(frozen=True)
class Job(WorkloadObject):
    kind: ClassVar[str] = "Job"

    metadata: ObjectMeta
    spec: JobSpec = field(default_factory=JobSpec)
    # The mapping this object was decoded from; used to render request bodies.
    manifest: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class CronJob(WorkloadObject):
    kind: ClassVar[str] = "CronJob"

    metadata: ObjectMeta
    spec: CronJobSpec = field(default_factory=CronJobSpec)
    manifest: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def object_metadata(obj: Any) -> Tuple[str, str, Dict[str, str]]:
    """
    Returns (namespace, name, labels) for any supported workload object.
    Raises UnsupportedKind for anything outside the Job/CronJob union.
    """
    if not isinstance(obj, (Job, CronJob)):
        raise UnsupportedKind(getattr(obj, "kind", None) or type(obj).__name__)
    meta = obj.metadata
    return meta.namespace, meta.name, meta.labels


def describe(obj: WorkloadObject) -> str:
    """Short human-readable identity, e.g. 'Job "backup"'."""
    _, name, _ = object_metadata(obj)
    return f'{obj.kind} "{name}"'


@dataclass
class ObjectPair:
    """
    Ownership pairing of a desired object and its observed counterpart.
    Either side may be missing, never both.
    """
    desired: Optional[WorkloadObject] = None
    observed: Optional[WorkloadObject] = None

    def __post_init__(self):
        if self.desired is None and self.observed is None:
            raise ValueError("ObjectPair requires at least one of desired/observed")


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class Step:
    """A pair plus the action that converges it. 'No action' is never materialized."""
    pair: ObjectPair
    action: Action
    fields: FrozenSet[str] = frozenset()   # differing fields, informational only


@dataclass(frozen=True)
class PollSettings:
    """Deletion confirmation timing (seconds)."""
    interval: float = 1.0
    timeout: float = 60.0


@dataclass
class PlanConfig:
    """
    Per-run execution settings. Never persisted.

    execute: False = preview mode, nothing is sent to the cluster.
    prune:   whether observed objects without a desired counterpart are deleted.
    """
    cluster: Any = None          # a kronjob.cluster.client.ClusterClient
    execute: bool = False
    prune: bool = True
    poll: PollSettings = field(default_factory=PollSettings)

#!/usr/bin/env python3
"""
KRONJOB COMPARATOR - The Inspector
----------------------------------
Structural comparison of two workload objects. compare() returns the set
of differing field names; an empty set means converged.

Semantics worth knowing before touching this module:

* Kind mismatch short-circuits to {"kind"}, which always forces a replace.
* Optional scalars: unset/unset is equal, unset/set or differing values
  is a difference.
* Node selectors are src-authoritative: keys only present on the dst
  side are not reported.
* Containers are compared coarsely: any mismatch reports "containers"
  for the whole list, without saying which container or field.

Author: Kronjob Team
Date: 2026-10-17
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Set

from kronjob.core.models import (
    Container, CronJob, CronJobSpec, Job, JobSpec, PodTemplate, WorkloadObject,
)

KIND_MISMATCH = frozenset({"kind"})


def _optional_differs(src: Optional[Any], dst: Optional[Any]) -> bool:
    if src is None:
        return dst is not None
    return dst is None or src != dst


def compare(src: Optional[WorkloadObject], dst: Optional[WorkloadObject]) -> Set[str]:
    """Returns the differing field names of src (desired) against dst (observed)."""
    if src is None or dst is None or type(src) is not type(dst) \
            or src.api_version != dst.api_version:
        return set(KIND_MISMATCH)

    if isinstance(src, CronJob):
        return compare_cronjob_spec(src.spec, dst.spec)
    if isinstance(src, Job):
        return compare_job_spec(src.spec, dst.spec)
    return set(KIND_MISMATCH)


def compare_cronjob_spec(src: CronJobSpec, dst: CronJobSpec) -> Set[str]:
    fields = set()

    if src.schedule != dst.schedule:
        fields.add("schedule")
    if src.concurrency_policy != dst.concurrency_policy:
        fields.add("concurrencyPolicy")
    if _optional_differs(src.suspend, dst.suspend):
        fields.add("suspend")
    if _optional_differs(src.successful_jobs_history_limit, dst.successful_jobs_history_limit):
        fields.add("successfulJobsHistoryLimit")
    if _optional_differs(src.failed_jobs_history_limit, dst.failed_jobs_history_limit):
        fields.add("failedJobsHistoryLimit")

    fields |= compare_job_spec(src.job_template, dst.job_template)
    return fields


def compare_job_spec(src: JobSpec, dst: JobSpec) -> Set[str]:
    fields = set()
    if _optional_differs(src.active_deadline_seconds, dst.active_deadline_seconds):
        fields.add("activeDeadlineSeconds")
    fields |= compare_pod_template(src.template, dst.template)
    return fields


def compare_pod_template(src: PodTemplate, dst: PodTemplate) -> Set[str]:
    fields = set()

    if src.restart_policy != dst.restart_policy:
        fields.add("restartPolicy")
    if _optional_differs(src.termination_grace_period_seconds,
                         dst.termination_grace_period_seconds):
        fields.add("terminationGracePeriodSeconds")
    if _optional_differs(src.active_deadline_seconds, dst.active_deadline_seconds):
        fields.add("activeDeadlineSeconds")
    if compare_node_selector(src.node_selector, dst.node_selector):
        fields.add("nodeSelector")
    if containers_differ(src.containers, dst.containers):
        fields.add("containers")

    return fields


def compare_node_selector(src: Dict[str, str], dst: Dict[str, str]) -> List[str]:
    """
    Keys of src whose value is missing or different in dst.
    Keys present only in dst are deliberately not reported.
    """
    return [key for key, value in src.items() if key not in dst or dst[key] != value]


def _env_fingerprint(container: Container) -> str:
    return json.dumps(list(container.env), sort_keys=True)


def _container_differs(src: Container, dst: Container) -> bool:
    return (
        src.image != dst.image
        or src.working_dir != dst.working_dir
        or " ".join(src.command) != " ".join(dst.command)
        or " ".join(src.args) != " ".join(dst.args)
        or _env_fingerprint(src) != _env_fingerprint(dst)
    )


def containers_differ(src: Sequence[Container], dst: Sequence[Container]) -> bool:
    if len(src) != len(dst):
        return True

    by_name = {c.name: c for c in dst}
    for container in src:
        match = by_name.get(container.name)
        if match is None or _container_differs(container, match):
            return True
    return False

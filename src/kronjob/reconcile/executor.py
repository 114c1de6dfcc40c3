#!/usr/bin/env python3
"""
KRONJOB PLAN EXECUTOR
---------------------
Applies a plan one step at a time, strictly in order:

* create  -> one create call for the desired object.
* delete  -> foreground delete of the observed object, then block until it is gone.
* update  -> CronJob over a same-named CronJob is replaced in place.
             Everything else (Job over Job, or a kind change) is
             delete -> wait -> create, because a Job's pod template
             cannot be changed after creation.

In preview mode each step is described and logged but nothing reaches
the cluster. The first failing call aborts the run; steps already
applied stay applied.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from kronjob.cluster.client import FOREGROUND
from kronjob.core.kinds import kind_info
from kronjob.core.models import Action, PlanConfig, Step, WorkloadObject, describe
from kronjob.reconcile.poller import DeletionPoller

logger = logging.getLogger("kronjob.executor")

NOTHING_TO_DO = "Nothing to do"
FINISHED = "Finished"


@dataclass
class ExecutionReport:
    executed: bool                                   # False in preview mode
    descriptions: List[str] = field(default_factory=list)
    applied: int = 0
    outcome: str = NOTHING_TO_DO


def updates_in_place(desired: WorkloadObject, observed: WorkloadObject) -> bool:
    """True when the observed object can simply be replaced with the desired one."""
    return (
        desired.kind == observed.kind
        and kind_info(desired.kind).updatable
        and desired.metadata.name == observed.metadata.name
    )


def describe_step(step: Step) -> str:
    desired, observed = step.pair.desired, step.pair.observed

    if step.action == Action.CREATE:
        return f'Creating {describe(desired)} in namespace "{desired.metadata.namespace}"'
    if step.action == Action.DELETE:
        return f'Deleting {describe(observed)} in namespace "{observed.metadata.namespace}"'
    if updates_in_place(desired, observed):
        return f'Updating {describe(desired)} in namespace "{desired.metadata.namespace}"'
    return (f'Replacing {describe(observed)} with {describe(desired)} '
            f'in namespace "{desired.metadata.namespace}"')


class PlanExecutor:
    """
    Executes plan steps against the cluster held by a PlanConfig.
    """

    def __init__(self, config: PlanConfig, poller: Optional[DeletionPoller] = None):
        self.config = config
        self.cluster = config.cluster
        self.poller = poller or DeletionPoller(config.cluster, config.poll)

    def execute(self, plan: Sequence[Step]) -> ExecutionReport:
        report = ExecutionReport(executed=self.config.execute)

        for step in plan:
            description = describe_step(step)
            report.descriptions.append(description)
            logger.info(description if self.config.execute else f"[preview] {description}")

            if not self.config.execute:
                continue

            if step.action == Action.CREATE:
                self._create(step.pair.desired)
            elif step.action == Action.DELETE:
                self._delete(step.pair.observed)
            else:
                self._update(step.pair.desired, step.pair.observed)
            report.applied += 1

        report.outcome = FINISHED if plan else NOTHING_TO_DO
        logger.info(report.outcome)
        return report

    def _create(self, desired: WorkloadObject) -> None:
        self.cluster.create(desired)

    def _delete(self, observed: WorkloadObject) -> None:
        meta = observed.metadata
        self.cluster.delete(observed.kind, meta.namespace, meta.name, propagation_policy=FOREGROUND)
        self.poller.wait(observed)

    def _update(self, desired: WorkloadObject, observed: WorkloadObject) -> None:
        if updates_in_place(desired, observed):
            self.cluster.update(desired, resource_version=observed.metadata.resource_version)
            return
        self._delete(observed)
        self._create(desired)

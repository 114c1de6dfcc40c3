#!/usr/bin/env python3
"""
KRONJOB ENGINE - The Orchestrator
---------------------------------
ReconcileEngine drives one reconciliation run end to end:

1. Load & validate desired objects from manifests.
2. Scope them to the pairing label.
3. List observed objects in the namespaces the desired set touches.
4. Pair -> plan -> execute.

Runs are one-shot and independent; the engine holds no state between them.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TextIO

from kronjob.core.kinds import ACCEPTED_KINDS
from kronjob.core.models import PlanConfig, Step, WorkloadObject
from kronjob.manifests.loader import ManifestLoader
from kronjob.reconcile.executor import ExecutionReport, PlanExecutor
from kronjob.reconcile.pairing import (
    exclude_cronjob_children, filter_by_label, object_namespaces, pair_objects,
)
from kronjob.reconcile.plan import generate_plan

logger = logging.getLogger("kronjob.engine")


@dataclass
class RunResult:
    plan: List[Step] = field(default_factory=list)
    report: Optional[ExecutionReport] = None
    desired_count: int = 0
    observed_count: int = 0


class ReconcileEngine:
    """
    Principal orchestrator for one label-scoped reconciliation run.
    """

    def __init__(self, config: PlanConfig, label: str,
                 loader: Optional[ManifestLoader] = None,
                 executor: Optional[PlanExecutor] = None):
        if not label:
            raise ValueError("a pairing label key is required")
        self.config = config
        self.label = label
        self.loader = loader or ManifestLoader()
        self.executor = executor or PlanExecutor(config)

    def scope_desired(self, objects: Sequence[WorkloadObject]) -> List[WorkloadObject]:
        scoped = filter_by_label(objects, self.label)
        skipped = len(objects) - len(scoped)
        if skipped:
            logger.warning(f"Ignoring {skipped} desired object(s) without label '{self.label}'")
        return scoped

    def observe(self, namespaces: Sequence[str]) -> List[WorkloadObject]:
        """Lists every accepted kind in each namespace, scoped to the pairing label."""
        kinds = []
        for info in ACCEPTED_KINDS.values():
            if info.kind not in kinds:
                kinds.append(info.kind)

        observed = []
        for namespace in namespaces:
            for kind in kinds:
                observed.extend(self.config.cluster.list(kind, namespace))

        return exclude_cronjob_children(filter_by_label(observed, self.label))

    def plan(self, desired: Sequence[WorkloadObject]) -> RunResult:
        scoped = self.scope_desired(desired)
        observed = self.observe(object_namespaces(scoped))
        pairs = pair_objects(scoped, observed, self.label, prune=self.config.prune)
        plan = generate_plan(pairs)
        logger.info(f"Planned {len(plan)} step(s) for {len(scoped)} desired "
                    f"and {len(observed)} observed object(s)")
        return RunResult(plan=plan, desired_count=len(scoped), observed_count=len(observed))

    def run(self, paths: Sequence[str], stdin: Optional[TextIO] = None) -> RunResult:
        result = self.plan(self.loader.load(paths, stdin))
        result.report = self.executor.execute(result.plan)
        return result

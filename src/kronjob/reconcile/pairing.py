#!/usr/bin/env python3
"""
KRONJOB PAIRING ENGINE
----------------------
Associates desired objects with observed ones. Two objects belong
together when they live in the same namespace and carry the same value
for the pairing label; names and kinds play no part, which is what lets
a Job be replaced by a CronJob (or renamed) in one step.

Pairing is symmetric: every desired object yields a pair, and every
observed object nobody claimed yields an observed-only pair (a deletion
candidate) unless pruning is switched off.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
from typing import Dict, List, Sequence, Tuple

from kronjob.core.errors import AmbiguousPairing
from kronjob.core.models import ObjectPair, WorkloadObject, object_metadata

logger = logging.getLogger("kronjob.pairing")


def filter_by_label(objects: Sequence[WorkloadObject], label: str) -> List[WorkloadObject]:
    """Keeps the objects that carry the pairing label key (any value)."""
    return [o for o in objects if label in object_metadata(o)[2]]


def exclude_cronjob_children(objects: Sequence[WorkloadObject]) -> List[WorkloadObject]:
    """
    Drops Jobs spawned by a CronJob. They inherit the CronJob's template
    labels but are run artefacts, not managed objects.
    """
    kept = []
    for o in objects:
        if o.kind == "Job" and "CronJob" in o.metadata.owner_kinds:
            logger.debug(f'Ignoring Job "{o.metadata.name}" owned by a CronJob')
            continue
        kept.append(o)
    return kept


def object_namespaces(objects: Sequence[WorkloadObject]) -> List[str]:
    """Distinct namespaces touched by the objects, sorted."""
    return sorted({object_metadata(o)[0] for o in objects})


def _identity(obj: WorkloadObject, label: str) -> Tuple[str, str]:
    namespace, _, labels = object_metadata(obj)
    return namespace, labels.get(label)


def pair_objects(desired: Sequence[WorkloadObject], observed: Sequence[WorkloadObject],
                 label: str, prune: bool = True) -> List[ObjectPair]:
    """
    Pairs desired with observed objects by (namespace, labels[label]).

    Order: desired iteration order, then unclaimed observed objects in
    their own order. Raises AmbiguousPairing when an identity is shared
    by several observed objects, or by several desired objects.
    """
    if not label:
        raise ValueError("a pairing label key is required")

    seen: Dict[Tuple[str, str], str] = {}
    for d in desired:
        key = _identity(d, label)
        if key in seen:
            raise AmbiguousPairing(key[0], label, key[1], [seen[key], d.metadata.name])
        seen[key] = d.metadata.name

    pairs = []
    claimed = set()

    for d in desired:
        key = _identity(d, label)
        matches = [i for i, o in enumerate(observed) if _identity(o, label) == key]

        if len(matches) > 1:
            raise AmbiguousPairing(key[0], label, key[1],
                                   [observed[i].metadata.name for i in matches])

        pair = ObjectPair(desired=d)
        if matches:
            pair.observed = observed[matches[0]]
            claimed.add(matches[0])
        pairs.append(pair)

    orphans = [o for i, o in enumerate(observed) if i not in claimed]
    if prune:
        pairs.extend(ObjectPair(observed=o) for o in orphans)
    elif orphans:
        logger.info(f"Pruning disabled: leaving {len(orphans)} unmatched object(s) in place")

    return pairs

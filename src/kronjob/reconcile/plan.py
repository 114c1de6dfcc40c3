"""Plan generation: one Step per pair that needs a cluster mutation."""

from typing import List, Sequence

from kronjob.core.models import Action, ObjectPair, Step
from kronjob.reconcile.compare import compare


def plan_step(pair: ObjectPair):
    """Returns the Step converging a pair, or None when it is already converged."""
    if pair.observed is None:
        return Step(pair=pair, action=Action.CREATE)
    if pair.desired is None:
        return Step(pair=pair, action=Action.DELETE)

    fields = compare(pair.desired, pair.observed)
    if fields:
        return Step(pair=pair, action=Action.UPDATE, fields=frozenset(fields))
    return None


def generate_plan(pairs: Sequence[ObjectPair]) -> List[Step]:
    plan = []
    for pair in pairs:
        step = plan_step(pair)
        if step is not None:
            plan.append(step)
    return plan

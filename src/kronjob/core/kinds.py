#!/usr/bin/env python3
"""
KRONJOB KIND TABLE
------------------
The closed allow-list of resource kinds kronjob manages. Built once at
import time and consulted by the validator, the decoder and the cluster
adapter; nothing else in the code base switches on kind strings.

Author: Kronjob Team
Date: 2026-10-17
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from kronjob.core.errors import UnsupportedKind


@dataclass(frozen=True)
class KindInfo:
    """Capabilities of one accepted kind."""
    kind: str                 # e.g. 'Job'
    api_version: str          # group/version served by the cluster API
    updatable: bool           # False when the pod template is immutable after creation


JOB = KindInfo(kind="Job", api_version="batch/v1", updatable=False)
CRONJOB = KindInfo(kind="CronJob", api_version="batch/v1", updatable=True)

ACCEPTED_KINDS: Dict[Tuple[str, str], KindInfo] = {
    (JOB.api_version, JOB.kind): JOB,
    (CRONJOB.api_version, CRONJOB.kind): CRONJOB,
}

_BY_KIND: Dict[str, KindInfo] = {info.kind: info for info in ACCEPTED_KINDS.values()}


def lookup_kind(api_version: str, kind: str) -> KindInfo:
    """Resolves an (apiVersion, kind) pair, raising UnsupportedKind when not accepted."""
    info = ACCEPTED_KINDS.get((api_version, kind))
    if info is None:
        raise UnsupportedKind(kind, api_version)
    return info


def kind_info(kind: str) -> KindInfo:
    """Resolves a bare kind name ('Job' / 'CronJob')."""
    info = _BY_KIND.get(kind)
    if info is None:
        raise UnsupportedKind(kind)
    return info

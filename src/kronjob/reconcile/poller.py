#!/usr/bin/env python3
"""
KRONJOB DELETION POLLER
-----------------------
Blocks until a deleted object disappears from the cluster. The first
check runs immediately; after that the cluster is polled at a fixed
interval until the overall timeout. Not found is success; any other
error or running out of time aborts the run.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
import time
from typing import Callable, Optional

from kronjob.core.errors import DeletionTimeout, NotFound
from kronjob.core.models import PollSettings, WorkloadObject, object_metadata

logger = logging.getLogger("kronjob.poller")


class DeletionPoller:

    def __init__(self, cluster, settings: Optional[PollSettings] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.cluster = cluster
        self.settings = settings or PollSettings()
        self.sleep = sleep
        self.clock = clock

    def wait(self, obj: WorkloadObject) -> None:
        """Returns once obj is gone; raises DeletionTimeout or ClusterOperationFailed."""
        namespace, name, _ = object_metadata(obj)
        deadline = self.clock() + self.settings.timeout
        attempts = 0

        while True:
            attempts += 1
            try:
                self.cluster.get(obj.kind, namespace, name)
            except NotFound:
                logger.debug(f'{obj.kind} "{name}" gone after {attempts} check(s)')
                return

            if self.clock() >= deadline:
                raise DeletionTimeout(obj.kind, namespace, name, self.settings.timeout)
            self.sleep(self.settings.interval)

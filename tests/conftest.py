import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# Ensure the 'src' directory is in the python path so we can import kronjob
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from kronjob.cluster.client import FOREGROUND, ClusterClient
from kronjob.core.errors import ClusterOperationFailed, NotFound
from kronjob.manifests.loader import decode_object

LABEL = "kronjob/job"


def container(name="main", image="busybox", **extra) -> Dict[str, Any]:
    data = {"name": name, "image": image}
    data.update(extra)
    return data


def pod_template(containers=None, **spec) -> Dict[str, Any]:
    spec.setdefault("restartPolicy", "Never")
    spec["containers"] = containers if containers is not None else [container()]
    return {"spec": spec}


def job_manifest(name, namespace="default", labels=None, image="busybox",
                 template=None, **spec) -> Dict[str, Any]:
    spec["template"] = template or pod_template([container(image=image)])
    return {
        "apiVersion": "batch/v1",
        "kind": "Job",
        "metadata": {"name": name, "namespace": namespace,
                     "labels": labels if labels is not None else {LABEL: name}},
        "spec": spec,
    }


def cronjob_manifest(name, namespace="default", labels=None, schedule="*/5 * * * *",
                     image="busybox", template=None, **spec) -> Dict[str, Any]:
    spec["schedule"] = schedule
    spec["jobTemplate"] = {"spec": {"template": template or pod_template([container(image=image)])}}
    return {
        "apiVersion": "batch/v1",
        "kind": "CronJob",
        "metadata": {"name": name, "namespace": namespace,
                     "labels": labels if labels is not None else {LABEL: name}},
        "spec": spec,
    }


def make_job(name, **kwargs):
    return decode_object(job_manifest(name, **kwargs))


def make_cronjob(name, **kwargs):
    return decode_object(cronjob_manifest(name, **kwargs))


class FakeCluster(ClusterClient):
    """
    In-memory cluster. Records every call as a tuple in `calls`.

    get_polls_until_gone: how many get() calls a deleted object survives
    before it reads as not found (simulates foreground deletion lag).
    """

    def __init__(self, objects=None, get_polls_until_gone: int = 0):
        self.objects: Dict[tuple, Any] = {}
        self.calls: List[tuple] = []
        self.get_polls_until_gone = get_polls_until_gone
        self._deleting: Dict[tuple, int] = {}
        self.fail_on: Optional[str] = None
        for obj in objects or []:
            self.objects[self._key(obj.kind, obj.metadata.namespace, obj.metadata.name)] = obj

    @staticmethod
    def _key(kind, namespace, name):
        return (kind, namespace, name)

    def _maybe_fail(self, operation, kind, namespace, name=None):
        if self.fail_on == operation:
            raise ClusterOperationFailed(operation, kind, namespace, name, reason="500 boom")

    def list(self, kind, namespace):
        self.calls.append(("list", kind, namespace))
        self._maybe_fail("list", kind, namespace)
        return [o for (k, ns, _), o in self.objects.items() if k == kind and ns == namespace]

    def get(self, kind, namespace, name):
        self.calls.append(("get", kind, namespace, name))
        self._maybe_fail("get", kind, namespace, name)
        key = self._key(kind, namespace, name)
        if key in self._deleting:
            if self._deleting[key] <= 0:
                del self._deleting[key]
                self.objects.pop(key, None)
            else:
                self._deleting[key] -= 1
        if key not in self.objects:
            raise NotFound(kind, namespace, name)
        return self.objects[key]

    def create(self, obj):
        self.calls.append(("create", obj.kind, obj.metadata.namespace, obj.metadata.name))
        self._maybe_fail("create", obj.kind, obj.metadata.namespace, obj.metadata.name)
        self.objects[self._key(obj.kind, obj.metadata.namespace, obj.metadata.name)] = obj

    def update(self, obj, resource_version=None):
        self.calls.append(("update", obj.kind, obj.metadata.namespace, obj.metadata.name))
        self._maybe_fail("update", obj.kind, obj.metadata.namespace, obj.metadata.name)
        self.objects[self._key(obj.kind, obj.metadata.namespace, obj.metadata.name)] = obj

    def delete(self, kind, namespace, name, propagation_policy=FOREGROUND):
        self.calls.append(("delete", kind, namespace, name, propagation_policy))
        self._maybe_fail("delete", kind, namespace, name)
        key = self._key(kind, namespace, name)
        if self.get_polls_until_gone:
            self._deleting[key] = self.get_polls_until_gone
        else:
            self.objects.pop(key, None)

    def mutations(self):
        return [c for c in self.calls if c[0] in ("create", "update", "delete")]


@pytest.fixture
def cluster():
    return FakeCluster()

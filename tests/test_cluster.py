from unittest.mock import MagicMock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

from conftest import LABEL, make_cronjob, make_job
from kronjob.cluster.client import KubernetesCluster
from kronjob.core.errors import ClusterOperationFailed, NotFound, UnsupportedKind
from kronjob.core.models import Job
from kronjob.manifests.loader import ManifestLoader
from kronjob.reconcile.compare import compare


def v1_job(name, owner_kind=None):
    owners = [client.V1OwnerReference(api_version="batch/v1", kind=owner_kind, name="p", uid="u")] \
        if owner_kind else None
    return client.V1Job(
        metadata=client.V1ObjectMeta(name=name, namespace="default", labels={LABEL: name},
                                     resource_version="5", owner_references=owners),
        spec=client.V1JobSpec(template=client.V1PodTemplateSpec(
            spec=client.V1PodSpec(restart_policy="Never",
                                  termination_grace_period_seconds=30,
                                  containers=[client.V1Container(name="main", image="busybox")]))),
    )


@pytest.fixture
def api():
    mock = MagicMock()
    mock.api_client = client.ApiClient()
    return mock


def test_list_decodes_items_without_type_identity(api):
    api.list_namespaced_job.return_value = client.V1JobList(items=[v1_job("a"), v1_job("b", "CronJob")])

    objects = KubernetesCluster(api=api).list("Job", "default")

    api.list_namespaced_job.assert_called_once_with(namespace="default")
    assert [type(o) for o in objects] == [Job, Job]
    assert objects[0].metadata.labels == {LABEL: "a"}
    assert objects[0].metadata.resource_version == "5"
    assert objects[0].spec.template.termination_grace_period_seconds == 30
    assert objects[1].metadata.owner_kinds == ("CronJob",)


def test_get_404_is_not_found(api):
    api.read_namespaced_cron_job.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFound) as exc:
        KubernetesCluster(api=api).get("CronJob", "ops", "nightly")

    assert (exc.value.kind, exc.value.namespace, exc.value.name) == ("CronJob", "ops", "nightly")


@pytest.mark.parametrize("error", [ApiException(status=500, reason="Internal"), ConnectionError("refused")])
def test_other_errors_are_operation_failures(api, error):
    api.delete_namespaced_job.side_effect = error

    with pytest.raises(ClusterOperationFailed) as exc:
        KubernetesCluster(api=api).delete("Job", "default", "a")

    assert exc.value.operation == "delete"


def test_create_update_delete_calls(api):
    cluster = KubernetesCluster(api=api)

    cluster.create(make_job("a", namespace="ops"))
    cluster.update(make_cronjob("n"), resource_version="12")
    cluster.delete("CronJob", "default", "n")

    body = api.create_namespaced_job.call_args.kwargs["body"]
    assert api.create_namespaced_job.call_args.kwargs["namespace"] == "ops"
    assert body["kind"] == "Job" and body["metadata"]["name"] == "a"

    kwargs = api.replace_namespaced_cron_job.call_args.kwargs
    assert kwargs["name"] == "n"
    assert kwargs["body"]["metadata"]["resourceVersion"] == "12"

    api.delete_namespaced_cron_job.assert_called_once_with(
        namespace="default", name="n", propagation_policy="Foreground")


def test_unknown_kind_is_rejected(api):
    with pytest.raises(UnsupportedKind):
        KubernetesCluster(api=api).list("Deployment", "default")


ENV_MANIFEST = """\
apiVersion: batch/v1
kind: Job
metadata:
  name: release
  labels:
    kronjob/job: release
spec:
  template:
    spec:
      restartPolicy: Never
      containers:
      - name: main
        image: busybox
        env:
        - name: RELEASE
          value: ""
        - name: DATE
          value: 2024-01-01
        - name: POD
          valueFrom:
            fieldRef:
              fieldPath: metadata.name
"""


def server_job(date_value="2024-01-01"):
    """The Job as the API server hands it back: empty values dropped, defaults filled."""
    env = [
        client.V1EnvVar(name="RELEASE"),
        client.V1EnvVar(name="DATE", value=date_value),
        client.V1EnvVar(name="POD", value_from=client.V1EnvVarSource(
            field_ref=client.V1ObjectFieldSelector(api_version="v1", field_path="metadata.name"))),
    ]
    return client.V1Job(
        metadata=client.V1ObjectMeta(name="release", namespace="default", labels={LABEL: "release"}),
        spec=client.V1JobSpec(template=client.V1PodTemplateSpec(
            spec=client.V1PodSpec(restart_policy="Never", containers=[
                client.V1Container(name="main", image="busybox", env=env)]))),
    )


def test_env_from_manifest_matches_server_normalized_env(api):
    """IDEMPOTENCE TEST: YAML-typed env values converge with what the cluster returns."""
    desired = ManifestLoader().load_texts([("release.yaml", ENV_MANIFEST)])[0]
    api.read_namespaced_job.return_value = server_job()

    observed = KubernetesCluster(api=api).get("Job", "default", "release")

    assert desired.spec.template.containers[0].env[1] == {"name": "DATE", "value": "2024-01-01"}
    assert compare(desired, observed) == set()


def test_env_value_change_still_detected(api):
    desired = ManifestLoader().load_texts([("release.yaml", ENV_MANIFEST)])[0]
    api.read_namespaced_job.return_value = server_job(date_value="2025-06-30")

    observed = KubernetesCluster(api=api).get("Job", "default", "release")

    assert compare(desired, observed) == {"containers"}

import os

import pytest
from rich.console import Console

from conftest import FakeCluster, job_manifest, make_job
from kronjob.cli import main as cli_main
from kronjob.cli.formatter import PlanFormatter
from kronjob.cli.main import KronjobCLI, default_kubeconfig


@pytest.fixture
def recorded(monkeypatch):
    out = Console(record=True, width=200)
    monkeypatch.setattr(cli_main, "console", out)
    return out


def make_cli(cluster, out):
    seen = {}

    def factory(kubeconfig=None, context=None):
        seen["kubeconfig"] = kubeconfig
        return cluster

    cli = KronjobCLI(cluster_factory=factory, formatter=PlanFormatter(out=out))
    return cli, seen


def write_manifest(tmp_path, **kwargs):
    from ruamel.yaml import YAML
    path = tmp_path / "jobs.yaml"
    with open(path, "w") as f:
        YAML(typ="safe", pure=True).dump(job_manifest("A", **kwargs), f)
    return str(path)


def test_no_files_prints_usage_and_succeeds(recorded, capsys):
    cli, _ = make_cli(FakeCluster(), recorded)
    assert cli.run([]) == 0
    assert "usage: kronjob" in capsys.readouterr().out


def test_missing_label_is_a_usage_error(recorded, tmp_path):
    cli, _ = make_cli(FakeCluster(), recorded)
    with pytest.raises(SystemExit) as exc:
        cli.run([write_manifest(tmp_path)])
    assert exc.value.code == 2


def test_preview_is_default(recorded, tmp_path):
    cluster = FakeCluster([make_job("A", image="y")])
    cli, seen = make_cli(cluster, recorded)

    code = cli.run(["-l", "kronjob/job", "--kubeconfig", "/tmp/kc", "--diff",
                    write_manifest(tmp_path, image="x")])

    assert code == 0
    assert seen["kubeconfig"] == "/tmp/kc"
    assert cluster.mutations() == []
    text = recorded.export_text()
    assert "PREVIEW" in text
    assert 'Replacing Job "A" with Job "A"' in text
    assert "MANIFEST: A" in text


def test_execute_applies(recorded, tmp_path):
    cluster = FakeCluster()
    cli, _ = make_cli(cluster, recorded)

    assert cli.run(["-l", "kronjob/job", "-x", write_manifest(tmp_path)]) == 0
    assert cluster.mutations() == [("create", "Job", "default", "A")]
    assert "Finished" in recorded.export_text()


def test_errors_exit_nonzero(recorded, tmp_path):
    cluster = FakeCluster()
    cluster.fail_on = "list"
    cli, _ = make_cli(cluster, recorded)

    assert cli.run(["-l", "kronjob/job", write_manifest(tmp_path)]) == 1
    assert "Error:" in recorded.export_text()


def test_kubeconfig_default_honours_env(monkeypatch):
    monkeypatch.setenv("KUBECONFIG", "/etc/kube/config")
    assert default_kubeconfig() == "/etc/kube/config"
    monkeypatch.delenv("KUBECONFIG")
    assert default_kubeconfig().endswith(".kube/config")


def test_stdin_mixed_with_files_is_a_usage_error(recorded, tmp_path):
    cluster = FakeCluster()
    cli, _ = make_cli(cluster, recorded)
    with pytest.raises(SystemExit) as exc:
        cli.run(["-l", "kronjob/job", "-", write_manifest(tmp_path)])
    assert exc.value.code == 2
    assert cluster.calls == []


def test_kubeconfig_default_uses_first_listed_file(monkeypatch):
    monkeypatch.setenv("KUBECONFIG", os.pathsep.join(["", "/etc/kube/a", "/etc/kube/b"]))
    assert default_kubeconfig() == "/etc/kube/a"

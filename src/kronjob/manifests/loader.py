#!/usr/bin/env python3
"""
KRONJOB MANIFEST LOADER
-----------------------
Turns manifest files (or standard input) into typed workload objects:

1. Read every source as text (BOM-aware).
2. Split each text into YAML documents with ruamel.yaml.
3. Validate all documents before decoding any of them.
4. Decode each mapping into a Job or CronJob value.

decode_object() is also used by the cluster adapter on listed objects,
so desired and observed state always share one representation.

Author: Kronjob Team
Date: 2026-10-17
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO, Tuple

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kronjob.core.errors import ManifestError
from kronjob.core.kinds import lookup_kind
from kronjob.core.models import (
    Container, CronJob, CronJobSpec, Job, JobSpec, ObjectMeta, PodTemplate,
    WorkloadObject,
)
from kronjob.manifests.validator import ManifestValidator

logger = logging.getLogger("kronjob.manifests")

STDIN_MARKER = "-"


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _optional_bool(value: Any) -> Optional[bool]:
    return None if value is None else bool(value)


def _strings(values: Any) -> Tuple[str, ...]:
    return tuple(str(v) for v in (values or []))


def _plain(value: Any) -> Any:
    """Nested env sources as JSON-safe values; non-string scalars become strings."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, (str, bool, int, float)) or value is None:
        return value
    return str(value)


def _decode_env(entries: Any) -> Tuple[Dict[str, Any], ...]:
    """
    Normalizes env entries to the shape the API server returns:
    values are strings, an empty value is dropped, and fieldRef
    carries its defaulted apiVersion.
    """
    env = []
    for entry in entries or []:
        var = {"name": str(entry.get("name", ""))}
        value = entry.get("value")
        if value is not None and str(value) != "":
            var["value"] = str(value)
        value_from = entry.get("valueFrom")
        if value_from:
            value_from = _plain(value_from)
            field_ref = value_from.get("fieldRef")
            if isinstance(field_ref, dict):
                field_ref.setdefault("apiVersion", "v1")
            var["valueFrom"] = value_from
        env.append(var)
    return tuple(env)


def _decode_container(data: Dict[str, Any]) -> Container:
    return Container(
        name=str(data.get("name", "")),
        image=str(data.get("image") or ""),
        working_dir=str(data.get("workingDir") or ""),
        command=_strings(data.get("command")),
        args=_strings(data.get("args")),
        env=_decode_env(data.get("env")),
    )


def _decode_pod_template(data: Dict[str, Any]) -> PodTemplate:
    spec = (data or {}).get("spec") or {}
    return PodTemplate(
        restart_policy=str(spec.get("restartPolicy") or ""),
        termination_grace_period_seconds=_optional_int(spec.get("terminationGracePeriodSeconds")),
        active_deadline_seconds=_optional_int(spec.get("activeDeadlineSeconds")),
        node_selector={str(k): str(v) for k, v in (spec.get("nodeSelector") or {}).items()},
        containers=tuple(_decode_container(c) for c in (spec.get("containers") or [])),
    )


def _decode_job_spec(data: Dict[str, Any]) -> JobSpec:
    data = data or {}
    return JobSpec(
        template=_decode_pod_template(data.get("template") or {}),
        active_deadline_seconds=_optional_int(data.get("activeDeadlineSeconds")),
    )


def _decode_cronjob_spec(data: Dict[str, Any]) -> CronJobSpec:
    data = data or {}
    job_template = data.get("jobTemplate") or {}
    return CronJobSpec(
        schedule=str(data.get("schedule") or ""),
        job_template=_decode_job_spec(job_template.get("spec") or {}),
        concurrency_policy=str(data.get("concurrencyPolicy") or ""),
        suspend=_optional_bool(data.get("suspend")),
        successful_jobs_history_limit=_optional_int(data.get("successfulJobsHistoryLimit")),
        failed_jobs_history_limit=_optional_int(data.get("failedJobsHistoryLimit")),
    )


def _decode_metadata(data: Dict[str, Any]) -> ObjectMeta:
    owners = data.get("ownerReferences") or []
    return ObjectMeta(
        name=str(data["name"]),
        # Namespaced kinds without an explicit namespace land in 'default'
        namespace=str(data.get("namespace") or "default"),
        labels={str(k): str(v) for k, v in (data.get("labels") or {}).items()},
        resource_version=data.get("resourceVersion"),
        owner_kinds=tuple(str(o.get("kind", "")) for o in owners),
    )


def decode_object(doc: Dict[str, Any]) -> WorkloadObject:
    """
    Builds a typed Job/CronJob from a plain mapping.
    Raises UnsupportedKind for anything else.
    """
    info = lookup_kind(str(doc.get("apiVersion")), str(doc.get("kind")))
    metadata = _decode_metadata(doc.get("metadata") or {})
    if info.kind == "Job":
        return Job(metadata=metadata, spec=_decode_job_spec(doc.get("spec")), manifest=doc)
    return CronJob(metadata=metadata, spec=_decode_cronjob_spec(doc.get("spec")), manifest=doc)


class ManifestLoader:
    """
    Reads manifest sources and produces the ordered desired-object list.
    """

    def __init__(self, validator: Optional[ManifestValidator] = None):
        self.yaml = YAML(typ="safe", pure=True)
        self.validator = validator or ManifestValidator()

    def read_sources(self, paths: Sequence[str],
                     stdin: Optional[TextIO] = None) -> List[Tuple[str, str]]:
        """
        Returns (source-name, text) for every input. A lone '-' reads stdin.
        """
        if STDIN_MARKER in paths:
            if len(paths) > 1:
                raise ManifestError(STDIN_MARKER, "standard input cannot be combined with manifest files")
            stream = stdin or sys.stdin
            return [("<stdin>", stream.read())]

        sources = []
        for p in paths:
            path = Path(p)
            try:
                sources.append((str(path), path.read_text(encoding="utf-8-sig")))
            except (OSError, UnicodeDecodeError) as e:
                raise ManifestError(str(path), f"unable to read file: {e}") from e
        return sources

    def load_documents(self, text: str, source: str) -> List[Dict[str, Any]]:
        """Splits one text into its non-empty YAML documents."""
        try:
            docs = [d for d in self.yaml.load_all(text) if d is not None]
        except YAMLError as e:
            raise ManifestError(source, f"invalid YAML: {e}") from e
        logger.debug(f"{source}: {len(docs)} document(s)")
        return docs

    def load_texts(self, sources: Sequence[Tuple[str, str]]) -> List[WorkloadObject]:
        documents = []
        for source, text in sources:
            for i, doc in enumerate(self.load_documents(text, source)):
                documents.append((f"{source}#{i}", doc))

        # Reject the whole input before decoding anything
        self.validator.validate_all(documents)
        return [decode_object(doc) for _, doc in documents]

    def load(self, paths: Sequence[str], stdin: Optional[TextIO] = None) -> List[WorkloadObject]:
        objects = self.load_texts(self.read_sources(paths, stdin))
        logger.info(f"Loaded {len(objects)} desired object(s) from {len(paths)} source(s)")
        return objects

#!/usr/bin/env python3
"""
KRONJOB CLI
-----------
Translates command-line flags into a reconciliation run:

    kronjob -l kronjob/job jobs.yaml            # preview
    kronjob -l kronjob/job --execute jobs.yaml  # apply
    cat jobs.yaml | kronjob -l kronjob/job -

Author: Kronjob Team
Date: 2026-10-17
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler
from rich.panel import Panel

from kronjob.cli.formatter import PlanFormatter, console
from kronjob.cluster.client import KubernetesCluster
from kronjob.core.engine import ReconcileEngine
from kronjob.core.errors import KronjobError
from kronjob.core.models import PlanConfig, PollSettings

VERSION = "kronjob v0.1.0"


def default_kubeconfig() -> str:
    # KUBECONFIG may list several files; the first one is used
    for entry in os.environ.get("KUBECONFIG", "").split(os.pathsep):
        if entry:
            return entry
    return str(Path.home() / ".kube" / "config")


class KronjobCLI:
    """
    CLI wrapper that turns user flags into engine runs and renders the results.
    """

    def __init__(self, cluster_factory=KubernetesCluster, formatter: Optional[PlanFormatter] = None):
        self.cluster_factory = cluster_factory
        self.formatter = formatter or PlanFormatter()
        self.parser = argparse.ArgumentParser(
            prog="kronjob",
            description="Kronjob - converge Jobs and CronJobs in a cluster to local manifests",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("--version", action="version", version=VERSION)
        self.parser.add_argument("files", nargs="*", metavar="FILE",
                                 help="Manifest files, or '-' to read standard input")
        self.parser.add_argument("-l", "--label",
                                 help="Label key pairing manifests with cluster objects (required)")
        self.parser.add_argument("-x", "--execute", action="store_true",
                                 help="Apply the plan (default: preview only)")
        self.parser.add_argument("--kubeconfig", default=default_kubeconfig(),
                                 help="Path to the kubeconfig file (default: %(default)s)")
        self.parser.add_argument("--context", help="Kubeconfig context to use")
        self.parser.add_argument("--no-prune", dest="prune", action="store_false",
                                 help="Never delete cluster objects missing from the manifests")
        self.parser.add_argument("--poll-interval", type=float, default=PollSettings.interval,
                                 help="Seconds between deletion checks (default: %(default)s)")
        self.parser.add_argument("--poll-timeout", type=float, default=PollSettings.timeout,
                                 help="Seconds to wait for a deletion (default: %(default)s)")
        self.parser.add_argument("-d", "--diff", action="store_true",
                                 help="Show cluster vs manifest YAML for updated objects")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _configure_logging(self, verbose: bool):
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )

    def build_engine(self, args: argparse.Namespace) -> ReconcileEngine:
        cluster = self.cluster_factory(kubeconfig=args.kubeconfig, context=args.context)
        config = PlanConfig(
            cluster=cluster,
            execute=args.execute,
            prune=args.prune,
            poll=PollSettings(interval=args.poll_interval, timeout=args.poll_timeout),
        )
        return ReconcileEngine(config, args.label)

    def run(self, argv: Optional[List[str]] = None) -> int:
        args = self.parser.parse_args(argv)

        if not args.files:
            self.parser.print_usage()
            return 0
        if not args.label:
            self.parser.error("the -l/--label flag is required")
        if "-" in args.files and len(args.files) > 1:
            self.parser.error("'-' (standard input) cannot be combined with manifest files")

        self._configure_logging(args.verbose)
        self.print_header("Apply" if args.execute else "Preview")

        try:
            engine = self.build_engine(args)
            desired = engine.loader.load(args.files)
            result = engine.plan(desired)

            self.formatter.print_plan(result.plan)
            if args.diff:
                for step in result.plan:
                    self.formatter.show_side_by_side(step)

            report = engine.executor.execute(result.plan)
        except KronjobError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            return 1

        self.formatter.print_summary(report, result.desired_count, result.observed_count)
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KronjobCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Command-line interface for kubecomposer.

Provides commands to render a project's Kubernetes YAML, inspect its
resource graph, preview single nodes and write autosave snapshots.
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from kubecomposer.config import Config
from kubecomposer.generator import (
    render_cluster_roles_yaml,
    render_configmaps_yaml,
    render_cronjobs_yaml,
    render_docker_hub_secrets_yaml,
    render_jobs_yaml,
    render_namespaces_yaml,
    render_project_yaml,
    render_role_bindings_yaml,
    render_roles_yaml,
    render_secrets_yaml,
    render_service_accounts_yaml,
    render_workload_yaml,
)
from kubecomposer.graph import FILTER_TYPES, FlowNode, build_resource_graph, graph_bounds
from kubecomposer.models import Project
from kubecomposer.output import OutputManager, Verbosity, get_output, set_output
from kubecomposer.preview import yaml_for_node
from kubecomposer.storage import load_project, save_snapshot
from kubecomposer.visualize import generate_visualization

DEFAULT_OUTPUT_FILE = "kubernetes.yaml"


def _render_workloads(workloads: List, project: Project) -> str:
    named = [w for w in workloads if w.app_name]
    if not named:
        return "# No workloads configured"
    return "\n---\n".join(render_workload_yaml(w, project.project_settings) for w in named)


KIND_RENDERERS: Dict[str, Callable[[Project], str]] = {
    "deployments": lambda p: _render_workloads(p.deployments, p),
    "daemonsets": lambda p: _render_workloads(p.daemon_sets, p),
    "namespaces": lambda p: render_namespaces_yaml(p.namespaces, p.project_settings),
    "configmaps": lambda p: render_configmaps_yaml(p.config_maps, p.project_settings),
    "secrets": lambda p: render_secrets_yaml(p.secrets, p.project_settings),
    "dockerhubsecrets": lambda p: render_docker_hub_secrets_yaml(p.docker_hub_secrets, p.project_settings),
    "serviceaccounts": lambda p: render_service_accounts_yaml(p.service_accounts, p.project_settings),
    "roles": lambda p: render_roles_yaml(p.roles, p.project_settings),
    "clusterroles": lambda p: render_cluster_roles_yaml(p.cluster_roles, p.project_settings),
    "rolebindings": lambda p: render_role_bindings_yaml(p.role_bindings),
    "jobs": lambda p: render_jobs_yaml(p.jobs, p.project_settings),
    "cronjobs": lambda p: render_cronjobs_yaml(p.cron_jobs, p.project_settings),
}


def _project_path(args: argparse.Namespace) -> Path:
    project_file = getattr(args, "project", None)
    return Path(project_file).resolve() if project_file else Config.project_file()


def _load(args: argparse.Namespace) -> Project:
    output = get_output()
    project_path = _project_path(args)
    output.verbose(f"Loading project from {project_path}")
    return load_project(project_path)


def _write_or_emit(content: str, output_file: Optional[str], default_dir: Optional[Path] = None) -> None:
    """Write content to the requested file, the configured output directory, or stdout."""
    output = get_output()
    output_path: Optional[Path] = None
    if output_file:
        output_path = Path(output_file).resolve()
    elif default_dir is not None:
        output_path = default_dir / DEFAULT_OUTPUT_FILE

    if output_path is None:
        output.emit(content)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(content if content.endswith("\n") else content + "\n")
    output.success(f"Written to {output_path}")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def cmd_render(args: argparse.Namespace) -> None:
    """Handle the render subcommand."""
    output = get_output()
    try:
        project = _load(args)

        kind = getattr(args, "kind", None)
        if kind:
            output.verbose(f"Rendering {kind} only")
            content = KIND_RENDERERS[kind](project)
        else:
            content = render_project_yaml(project)

        _write_or_emit(content, getattr(args, "output", None), Config.output_dir())
    except FileNotFoundError as e:
        output.error(f"Error: {e}", suggestion="Pass --project or set KUBECOMPOSER_PROJECT_FILE")
        sys.exit(1)
    except (ValueError, RuntimeError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)


def _node_rows(nodes: List[FlowNode]) -> List[List[str]]:
    return [
        [
            node.id,
            node.type.value,
            node.namespace,
            node.status.value,
            node.sync_status.value,
            f"{node.position.x},{node.position.y}",
        ]
        for node in nodes
    ]


def cmd_graph(args: argparse.Namespace) -> None:
    """Handle the graph subcommand."""
    output = get_output()
    try:
        project = _load(args)
        filter_type = getattr(args, "filter", None) or "all"
        namespace = getattr(args, "namespace", None)
        output.verbose(f"Building graph with filter={filter_type} namespace={namespace or '*'}")
        nodes = build_resource_graph(project, filter_type, namespace, synced_at=_now())

        output_format = getattr(args, "format", None) or "table"
        output_file = getattr(args, "output", None)
        if output_format == "json":
            content = json.dumps([node.to_json_dict() for node in nodes], indent=2)
            _write_or_emit(content, output_file)
        elif output_format == "dot":
            _write_or_emit(generate_visualization(nodes), output_file)
            if output_file:
                output.info("To render the diagram, run:")
                output.emit(f"  neato -n -Tsvg {output_file} -o {Path(output_file).stem}.svg")
        else:
            if not nodes:
                output.warning(f"No resources match filter {filter_type!r}")
            width, height = graph_bounds(nodes)
            output.table(
                f"Resource graph ({len(nodes)} nodes, {width}x{height})",
                ["ID", "Type", "Namespace", "Status", "Sync", "Position"],
                _node_rows(nodes),
            )
    except FileNotFoundError as e:
        output.error(f"Error: {e}", suggestion="Pass --project or set KUBECOMPOSER_PROJECT_FILE")
        sys.exit(1)
    except (ValueError, RuntimeError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)


def cmd_preview(args: argparse.Namespace) -> None:
    """Handle the preview subcommand."""
    output = get_output()
    try:
        project = _load(args)
        filter_type = getattr(args, "filter", None) or "all"
        nodes = build_resource_graph(project, filter_type)

        node = next((n for n in nodes if n.id == args.node_id), None)
        if node is None:
            raise ValueError(f"No node with id {args.node_id!r} in the {filter_type} graph")

        output.emit(yaml_for_node(project, node))
    except FileNotFoundError as e:
        output.error(f"Error: {e}", suggestion="Pass --project or set KUBECOMPOSER_PROJECT_FILE")
        sys.exit(1)
    except (ValueError, RuntimeError) as e:
        output.error(f"Error: {e}", suggestion="Run 'kubecomposer graph' to list node ids")
        sys.exit(1)


def cmd_snapshot(args: argparse.Namespace) -> None:
    """Handle the snapshot subcommand."""
    output = get_output()
    try:
        project = _load(args)
        snapshot_path = getattr(args, "path", None)
        path = Path(snapshot_path).resolve() if snapshot_path else Config.snapshot_path()
        written = save_snapshot(project, path, _now())
        output.success(f"Snapshot saved to {written}")
    except FileNotFoundError as e:
        output.error(f"Error: {e}", suggestion="Pass --project or set KUBECOMPOSER_PROJECT_FILE")
        sys.exit(1)
    except (ValueError, RuntimeError, OSError) as e:
        output.error(f"Error: {e}")
        sys.exit(1)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project",
        help="Path to the project file (defaults to ./project.json or KUBECOMPOSER_PROJECT_FILE env var)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only show errors and final results",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed output including file paths and debug logs",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every subcommand."""
    parser = argparse.ArgumentParser(
        description="Kube Composer - Generate Kubernetes YAML and resource graphs from a project file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  kubecomposer render --project project.json
  kubecomposer render --kind secrets --output secrets.yaml
  kubecomposer graph --filter deployments --namespace production
  kubecomposer graph --format dot --output graph.dot
  kubecomposer preview deployment-web
  kubecomposer snapshot --path backup.json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    # Render subcommand
    render_parser = subparsers.add_parser(
        "render",
        help="Render the project (or one kind) as Kubernetes YAML",
    )
    _add_common_arguments(render_parser)
    render_parser.add_argument(
        "--output",
        help="Output file (defaults to stdout, or KUBECOMPOSER_OUTPUT_DIR/kubernetes.yaml)",
    )
    render_parser.add_argument(
        "--kind",
        choices=sorted(KIND_RENDERERS),
        help="Render only one kind of resource",
    )
    render_parser.set_defaults(func=cmd_render)

    # Graph subcommand
    graph_parser = subparsers.add_parser(
        "graph",
        help="Lay out the project's resource graph",
    )
    _add_common_arguments(graph_parser)
    graph_parser.add_argument(
        "--filter",
        choices=FILTER_TYPES,
        default="all",
        help="Restrict the graph to one kind of resource",
    )
    graph_parser.add_argument(
        "--namespace",
        help="Restrict namespaced resources to one namespace",
    )
    graph_parser.add_argument(
        "--format",
        choices=["table", "json", "dot"],
        default="table",
        help="Output format (defaults to table)",
    )
    graph_parser.add_argument(
        "--output",
        help="Output file for json or dot formats (defaults to stdout)",
    )
    graph_parser.set_defaults(func=cmd_graph)

    # Preview subcommand
    preview_parser = subparsers.add_parser(
        "preview",
        help="Show the YAML behind one graph node",
    )
    preview_parser.add_argument("node_id", help="Node id as shown by 'kubecomposer graph'")
    _add_common_arguments(preview_parser)
    preview_parser.add_argument(
        "--filter",
        choices=FILTER_TYPES,
        default="all",
        help="Graph filter the node id comes from",
    )
    preview_parser.set_defaults(func=cmd_preview)

    # Snapshot subcommand
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Write a versioned autosave snapshot of the project",
    )
    _add_common_arguments(snapshot_parser)
    snapshot_parser.add_argument(
        "--path",
        help="Snapshot file (defaults to ./.kube-composer-autosave.json or KUBECOMPOSER_SNAPSHOT_PATH)",
    )
    snapshot_parser.set_defaults(func=cmd_snapshot)

    return parser


def main() -> None:
    """Main entry point for kubecomposer CLI."""
    args = build_parser().parse_args()

    # Set up verbosity
    if getattr(args, "quiet", False):
        verbosity = Verbosity.QUIET
    elif getattr(args, "verbose", False) or Config.verbose():
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL

    logging.basicConfig(
        level=logging.DEBUG if verbosity == Verbosity.VERBOSE else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    output_manager = OutputManager(verbosity=verbosity)
    set_output(output_manager)

    # Call the appropriate command handler
    args.func(args)


if __name__ == "__main__":
    main()

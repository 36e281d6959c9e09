"""
Kube Composer - Generate Kubernetes YAML and resource graphs from typed project records.
"""

from kubecomposer.models import Project, duplicate_workload
from kubecomposer.emitter import render, render_documents
from kubecomposer.manifests import ManifestBuilder
from kubecomposer.generator import render_project_yaml, render_workload_yaml
from kubecomposer.graph import FlowNode, build_resource_graph, iter_edges, graph_bounds
from kubecomposer.preview import yaml_for_node
from kubecomposer.storage import load_project, load_snapshot, save_snapshot
from kubecomposer.config import Config, config

__all__ = [
    "Project",
    "duplicate_workload",
    "render",
    "render_documents",
    "ManifestBuilder",
    "render_project_yaml",
    "render_workload_yaml",
    "FlowNode",
    "build_resource_graph",
    "iter_edges",
    "graph_bounds",
    "yaml_for_node",
    "load_project",
    "load_snapshot",
    "save_snapshot",
    "Config",
    "config",
]

__version__ = "0.1.0"

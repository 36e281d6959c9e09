"""
Per-node YAML lookup for the graph detail view.

A node only carries ids and display names, so the source record is looked
up again in the project and rendered on its own.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from kubecomposer.emitter import render
from kubecomposer.generator import (
    render_cluster_roles_yaml,
    render_configmaps_yaml,
    render_cronjobs_yaml,
    render_jobs_yaml,
    render_namespaces_yaml,
    render_role_bindings_yaml,
    render_roles_yaml,
    render_secrets_yaml,
    render_service_accounts_yaml,
    render_workload_yaml,
)
from kubecomposer.graph import CLUSTER_WIDE, FlowNode, NodeType
from kubecomposer.manifests import ManifestBuilder
from kubecomposer.models import Namespace, Project, Workload

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "# YAML not available for this resource."

IMAGE_PULL_SUFFIX = " (Image Pull)"

# Node types that stand for one document of a workload's stream
WORKLOAD_DOCUMENT_KINDS = {
    NodeType.DEPLOYMENT: "Deployment",
    NodeType.DAEMONSET: "DaemonSet",
    NodeType.SERVICE: "Service",
    NodeType.INGRESS: "Ingress",
}


def _strip_prefix(node: FlowNode) -> str:
    prefix = f"{node.type.value}-"
    return node.id[len(prefix):] if node.id.startswith(prefix) else node.name


def _owner(node: FlowNode) -> Tuple[Optional[NodeType], str]:
    """The kind and name of the workload a workload-derived node belongs to."""
    owner = node.metadata.get("workload") or node.id
    for kind in (NodeType.DEPLOYMENT, NodeType.DAEMONSET):
        prefix = f"{kind.value}-"
        if owner.startswith(prefix):
            return kind, owner[len(prefix):]
    # Service, Pod and Ingress nodes built without an owner
    return None, _strip_prefix(node)


def _find_workload(project: Project, node: FlowNode) -> Optional[Workload]:
    kind, name = _owner(node)
    candidates: List[Workload] = []
    if kind != NodeType.DAEMONSET:
        candidates.extend(project.deployments)
    if kind != NodeType.DEPLOYMENT:
        candidates.extend(project.daemon_sets)
    for workload in candidates:
        if workload.app_name == name and workload.namespace == node.namespace:
            return workload
    for workload in candidates:
        if workload.app_name == name:
            return workload
    return None


def _match(items: Sequence[Any], name: str, namespace: Optional[str]) -> Optional[Any]:
    for item in items:
        if item.name == name and (namespace is None or item.namespace == namespace):
            return item
    return None


def _workload_yaml(project: Project, node: FlowNode) -> Optional[str]:
    workload = _find_workload(project, node)
    if workload is None:
        return None
    settings = project.project_settings
    if node.type == NodeType.POD:
        return render_workload_yaml(workload, settings)

    kind = WORKLOAD_DOCUMENT_KINDS[node.type]
    for manifest in ManifestBuilder(settings).workload_manifests(workload):
        if manifest["kind"] == kind:
            return render(manifest)
    return None


def _role_yaml(project: Project, node: FlowNode) -> Optional[str]:
    settings = project.project_settings
    if node.namespace == CLUSTER_WIDE:
        matches = [r for r in project.cluster_roles if r.metadata.name == node.name]
        return render_cluster_roles_yaml(matches[:1], settings) if matches else None
    matches = [
        r
        for r in project.roles
        if r.metadata.name == node.name and (r.metadata.namespace or "") == node.namespace
    ]
    return render_roles_yaml(matches[:1], settings) if matches else None


def _role_binding_yaml(project: Project, node: FlowNode) -> Optional[str]:
    cluster = node.namespace == CLUSTER_WIDE
    for binding in project.role_bindings:
        if binding.name != node.name or binding.is_cluster_role_binding != cluster:
            continue
        if cluster or (binding.namespace or "") == node.namespace:
            return render_role_bindings_yaml([binding])
    return None


def _secret_yaml(project: Project, node: FlowNode) -> Optional[str]:
    name = node.name
    if name.endswith(IMAGE_PULL_SUFFIX):
        name = name[: -len(IMAGE_PULL_SUFFIX)]
    secret = _match(project.secrets, name, node.namespace) or _match(project.secrets, name, None)
    return render_secrets_yaml([secret], project.project_settings) if secret else None


def _namespace_yaml(project: Project, node: FlowNode) -> Optional[str]:
    namespace = next((ns for ns in project.namespaces if ns.name == node.name), None)
    # Implicit namespaces have no record of their own
    if namespace is None:
        namespace = Namespace(name=node.name)
    return render_namespaces_yaml([namespace], project.project_settings)


def _listed(
    collection: Callable[[Project], Sequence[Any]],
    renderer: Callable[..., str],
) -> Callable[[Project, FlowNode], Optional[str]]:
    def lookup(project: Project, node: FlowNode) -> Optional[str]:
        record = _match(collection(project), node.name, node.namespace)
        return renderer([record], project.project_settings) if record else None

    return lookup


PREVIEWERS: Dict[NodeType, Callable[[Project, FlowNode], Optional[str]]] = {
    NodeType.DEPLOYMENT: _workload_yaml,
    NodeType.DAEMONSET: _workload_yaml,
    NodeType.SERVICE: _workload_yaml,
    NodeType.INGRESS: _workload_yaml,
    NodeType.POD: _workload_yaml,
    NodeType.CONFIGMAP: _listed(lambda p: p.config_maps, render_configmaps_yaml),
    NodeType.SECRET: _secret_yaml,
    NodeType.NAMESPACE: _namespace_yaml,
    NodeType.SERVICEACCOUNT: _listed(lambda p: p.service_accounts, render_service_accounts_yaml),
    NodeType.ROLE: _role_yaml,
    NodeType.ROLEBINDING: _role_binding_yaml,
    NodeType.JOB: _listed(lambda p: p.jobs, render_jobs_yaml),
    NodeType.CRONJOB: _listed(lambda p: p.cron_jobs, render_cronjobs_yaml),
}


def yaml_for_node(project: Project, node: FlowNode) -> str:
    """
    Render the YAML of the single resource behind a graph node.

    Deployment, DaemonSet, Service and Ingress nodes render just their own
    document, Pod nodes render the whole workload stream, and every other
    kind goes through its list renderer with a one-element list.

    Args:
        project: The project the graph was built from
        node: A node returned by ``build_resource_graph``

    Returns:
        YAML text, or a comment when the node has no backing resource
    """
    previewer = PREVIEWERS.get(node.type)
    text = previewer(project, node) if previewer else None
    if text is None:
        logger.debug(f"No resource found for node {node.id}")
        return NOT_AVAILABLE
    return text

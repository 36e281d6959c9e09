"""
Utility functions and constants for Kubernetes resource classification and labels.
"""

from typing import Dict, Optional

from kubecomposer.models import ProjectSettings

# Namespaces every cluster ships with; they are never rendered as resources
SYSTEM_NAMESPACES = [
    "default",
    "kube-system",
    "kube-public",
    "kube-node-lease",
]

# Cluster-scoped resource kinds that don't belong to a namespace
CLUSTER_SCOPED_KINDS = [
    "ClusterRole",
    "ClusterRoleBinding",
    "Namespace",
]

APP_NAME_LABEL = "app.kubernetes.io/name"
PROJECT_LABEL = "project"


def is_cluster_scoped(kind: str) -> bool:
    """
    Check if a Kubernetes resource kind is cluster-scoped.

    Args:
        kind: The Kubernetes resource kind (e.g., "Deployment", "Namespace")

    Returns:
        True if the resource is cluster-scoped, False otherwise
    """
    return kind in CLUSTER_SCOPED_KINDS


def is_system_namespace(name: str) -> bool:
    """Check if a namespace name is one of the reserved system namespaces."""
    return name in SYSTEM_NAMESPACES


def merge_labels(
    labels: Optional[Dict[str, str]],
    settings: Optional[ProjectSettings] = None,
    app_name: Optional[str] = None,
) -> Dict[str, str]:
    """
    Compute the effective labels of a resource.

    Sources are applied in order, later ones winning on key collision:
    the project's global labels, the resource's own labels, then the
    ``project`` label when project settings are given. For workloads the
    ``app.kubernetes.io/name`` label leads the mapping and is always set to
    the workload name.

    Args:
        labels: The resource's own labels
        settings: Optional project settings
        app_name: Workload name, for Deployments and DaemonSets

    Returns:
        A new, ordered label mapping
    """
    merged: Dict[str, str] = {}
    if app_name is not None:
        merged[APP_NAME_LABEL] = app_name
    if settings is not None:
        merged.update(settings.global_labels)
    merged.update(labels or {})
    if settings is not None:
        merged[PROJECT_LABEL] = settings.name
    if app_name is not None:
        merged[APP_NAME_LABEL] = app_name
    return merged


def selector_labels(app_name: str, settings: Optional[ProjectSettings] = None) -> Dict[str, str]:
    """
    Labels used to select a workload's pods.

    Only the stable subset is used so selectors stay valid when display
    labels change.
    """
    selector = {APP_NAME_LABEL: app_name}
    if settings is not None:
        selector[PROJECT_LABEL] = settings.name
    return selector

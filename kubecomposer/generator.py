"""
YAML text generation for single resources, resource lists and whole projects.

These are the entry points used by the CLI and the node preview. Each list
renderer prefixes its documents with a short comment header, and every
function returns a human-readable comment instead of raising when there is
nothing meaningful to render.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from kubecomposer.emitter import render, render_documents
from kubecomposer.manifests import ManifestBuilder
from kubecomposer.models import (
    ClusterRole,
    ConfigMap,
    CronJobConfig,
    DaemonSetConfig,
    DockerHubSecret,
    JobConfig,
    Namespace,
    Project,
    ProjectSettings,
    Role,
    RoleBinding,
    Secret,
    ServiceAccount,
    Workload,
)
from kubecomposer.resource_utils import is_system_namespace

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERATED_BY = "# Generated by Kube Composer"

WELCOME_TEMPLATE = """# Welcome to Kube Composer!
#
# This is a Kubernetes YAML generator that helps you create
# production-ready deployment configurations without writing YAML manually.
#
# To get started:
# 1. Configure your project name and global labels in the project settings
# 2. Add a Deployment to the project file
# 3. Configure your application settings
# 4. Render the project to see the generated YAML
#
# Supported resources:
# - Deployments and DaemonSets with Services and Ingress
# - Namespaces, ConfigMaps, Secrets and Docker Hub Secrets
# - ServiceAccounts, Roles, ClusterRoles and RoleBindings
# - Jobs and CronJobs

apiVersion: v1
kind: ConfigMap
metadata:
  name: getting-started
  namespace: default
  labels:
    app.kubernetes.io/name: getting-started
    project: {project}
    created-by: kube-composer
data:
  welcome: |
    Welcome to Kube Composer!
    Create your first deployment to see generated YAML here.
  docs: "Visit https://kubernetes.io/docs/ for Kubernetes documentation"
"""

CONFIGURATION_NEEDED_TEMPLATE = """# Deployment Configuration Needed
#
# You have {count} workload{plural} but none have been properly configured yet.
#
# To generate YAML:
# 1. Give each deployment or daemonset an application name
# 2. Add at least one container with an image
# 3. Render the project again"""


def _render_list(
    items: Sequence[T],
    build: Callable[[T], dict],
    title: str,
    noun: str,
    settings: Optional[ProjectSettings],
) -> str:
    """Render a list of resources under a comment header, separated by ``---`` lines."""
    if not items:
        return f"# No {noun} configured"

    lines = [f"# {title}", GENERATED_BY]
    if settings is not None:
        lines.append(f"# Project: {settings.name}")
    lines.append(f"# Total {noun}: {len(items)}")
    lines.append("")

    for index, item in enumerate(items):
        if index > 0:
            lines.append("---")
        lines.append(render(build(item)))
    return "\n".join(lines)


def render_workload_yaml(config: Workload, settings: Optional[ProjectSettings] = None) -> str:
    """
    Render a Deployment or DaemonSet with the Service, Ingress and inline
    ConfigMaps/Secrets it expands to.

    Args:
        config: The workload to render
        settings: Optional project settings contributing labels

    Returns:
        A multi-document YAML stream, or a placeholder comment when the
        workload has no name yet
    """
    if not config.app_name:
        kind = "daemonset" if isinstance(config, DaemonSetConfig) else "deployment"
        return f"# Please configure your {kind} first"
    return render_documents(ManifestBuilder(settings).workload_manifests(config))


def render_namespaces_yaml(
    namespaces: Sequence[Namespace], settings: Optional[ProjectSettings] = None
) -> str:
    """
    Render custom namespaces.

    System namespaces are never rendered. When only system namespaces are
    configured, a comment listing them and an example namespace is returned.
    """
    if not namespaces:
        return "# No namespaces configured"

    custom = [ns for ns in namespaces if not is_system_namespace(ns.name)]
    if not custom:
        lines = [
            "# Only system namespaces available",
            "# Create custom namespaces to see their YAML configuration here",
            "",
            "# Available system namespaces:",
        ]
        lines.extend(f"# - {ns.name}" for ns in namespaces)
        lines.extend(
            [
                "",
                "# Example custom namespace:",
                "# apiVersion: v1",
                "# kind: Namespace",
                "# metadata:",
                "#   name: my-custom-namespace",
                "#   labels:",
                "#     environment: development",
            ]
        )
        if settings is not None:
            lines.append(f"#     project: {settings.name}")
        return "\n".join(lines)

    builder = ManifestBuilder(settings)
    return _render_list(custom, builder.namespace, "Custom Kubernetes Namespaces", "namespaces", settings)


def render_configmaps_yaml(
    config_maps: Sequence[ConfigMap], settings: Optional[ProjectSettings] = None
) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(config_maps, builder.configmap, "Kubernetes ConfigMaps", "ConfigMaps", settings)


def render_secrets_yaml(secrets: Sequence[Secret], settings: Optional[ProjectSettings] = None) -> str:
    """Render Secrets with every ``data`` value base64-encoded."""
    builder = ManifestBuilder(settings)
    return _render_list(secrets, builder.secret, "Kubernetes Secrets", "Secrets", settings)


def render_docker_hub_secrets_yaml(
    secrets: Sequence[DockerHubSecret], settings: Optional[ProjectSettings] = None
) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(
        secrets,
        builder.docker_hub_secret,
        "Kubernetes Docker Hub Secrets",
        "Docker Hub Secrets",
        settings,
    )


def render_service_accounts_yaml(
    accounts: Sequence[ServiceAccount], settings: Optional[ProjectSettings] = None
) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(
        accounts, builder.service_account, "Kubernetes Service Accounts", "Service Accounts", settings
    )


def render_roles_yaml(roles: Sequence[Role], settings: Optional[ProjectSettings] = None) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(roles, builder.role, "Kubernetes RBAC Roles", "Roles", settings)


def render_cluster_roles_yaml(
    cluster_roles: Sequence[ClusterRole], settings: Optional[ProjectSettings] = None
) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(
        cluster_roles, builder.cluster_role, "Kubernetes RBAC ClusterRoles", "ClusterRoles", settings
    )


def render_role_binding_yaml(binding: RoleBinding) -> str:
    """Render a single RoleBinding or ClusterRoleBinding document."""
    return render(ManifestBuilder.role_binding(binding))


def render_role_bindings_yaml(bindings: Sequence[RoleBinding]) -> str:
    return _render_list(
        bindings, ManifestBuilder.role_binding, "Kubernetes RBAC RoleBindings", "RoleBindings", None
    )


def render_jobs_yaml(jobs: Sequence[JobConfig], settings: Optional[ProjectSettings] = None) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(jobs, builder.job, "Kubernetes Jobs", "Jobs", settings)


def render_cronjobs_yaml(
    cronjobs: Sequence[CronJobConfig], settings: Optional[ProjectSettings] = None
) -> str:
    builder = ManifestBuilder(settings)
    return _render_list(cronjobs, builder.cronjob, "Kubernetes CronJobs", "CronJobs", settings)


def _is_empty_project(project: Project) -> bool:
    return (
        not project.deployments
        and len(project.namespaces) <= 1
        and not project.daemon_sets
        and not project.config_maps
        and not project.secrets
        and not project.docker_hub_secrets
        and not project.service_accounts
        and not project.roles
        and not project.cluster_roles
        and not project.role_bindings
        and not project.jobs
        and not project.cron_jobs
    )


def _summary_header(project: Project, custom_namespaces: List[Namespace]) -> List[str]:
    settings = project.project_settings
    lines = ["# Kubernetes Configuration", GENERATED_BY]

    if settings is not None:
        lines.append(f"# Project: {settings.name}")
        if settings.description:
            lines.append(f"# Description: {settings.description}")
        if settings.global_labels:
            lines.append(f"# Global Labels: {len(settings.global_labels)} defined")

    counts = [
        ("Custom Namespaces", len(custom_namespaces)),
        ("ConfigMaps", len(project.config_maps)),
        ("Secrets", len(project.secrets)),
        ("Docker Hub Secrets", len(project.docker_hub_secrets)),
        ("Service Accounts", len(project.service_accounts)),
        ("Roles", len(project.roles)),
        ("ClusterRoles", len(project.cluster_roles)),
        ("RoleBindings", len(project.role_bindings)),
    ]
    lines.extend(f"# {label}: {count}" for label, count in counts if count)

    if project.deployments:
        named = [d for d in project.deployments if d.app_name]
        lines.append(f"# Deployments: {len(named)}")
        total = sum(len(d.containers) or 1 for d in project.deployments)
        lines.append(f"# Total Containers: {total}")
        ingress_count = sum(1 for d in project.deployments if d.ingress.enabled)
        if ingress_count:
            lines.append(f"# Ingress Resources: {ingress_count}")
    if project.daemon_sets:
        named_ds = [d for d in project.daemon_sets if d.app_name]
        lines.append(f"# DaemonSets: {len(named_ds)}")
        total = sum(len(d.containers) or 1 for d in project.daemon_sets)
        lines.append(f"# Total DaemonSet Containers: {total}")
    if project.jobs:
        lines.append(f"# Jobs: {len(project.jobs)}")
    if project.cron_jobs:
        lines.append(f"# CronJobs: {len(project.cron_jobs)}")

    lines.append("")
    return lines


def render_project_yaml(project: Project) -> str:
    """
    Render the whole project as one multi-document YAML stream.

    Sections appear in a fixed order, each introduced by a
    ``# === KIND ===`` comment: namespaces, configmaps, secrets, docker hub
    secrets, service accounts, roles, cluster roles, role bindings,
    daemonsets, deployments, then jobs followed by cronjobs. Unnamed
    workloads are skipped.

    Args:
        project: The project to render

    Returns:
        YAML text, the welcome comment for an empty project, or a
        configuration-needed comment when only unnamed workloads exist
    """
    settings = project.project_settings
    if _is_empty_project(project):
        return WELCOME_TEMPLATE.format(project=settings.name if settings else "my-project")

    builder = ManifestBuilder(settings)
    custom_namespaces = [ns for ns in project.namespaces if not is_system_namespace(ns.name)]
    named_daemonsets = [d for d in project.daemon_sets if d.app_name]
    named_deployments = [d for d in project.deployments if d.app_name]

    skipped = len(project.daemon_sets) - len(named_daemonsets)
    skipped += len(project.deployments) - len(named_deployments)
    if skipped:
        logger.debug(f"Skipping {skipped} unnamed workload(s)")

    deployment_docs = []
    for deployment in named_deployments:
        doc = render_workload_yaml(deployment, settings)
        if len(named_deployments) > 1:
            intro = [
                f"# === {deployment.app_name.upper()} DEPLOYMENT ===",
                f"# Containers: {len(deployment.containers) or 1}",
            ]
            if deployment.ingress.enabled:
                intro.append("# Ingress: Enabled")
            doc = "\n".join(intro) + "\n" + doc
        deployment_docs.append(doc)

    sections: List[Tuple[str, List[str]]] = [
        ("NAMESPACES", [render(builder.namespace(ns)) for ns in custom_namespaces]),
        ("CONFIGMAPS", [render(builder.configmap(cm)) for cm in project.config_maps]),
        ("SECRETS", [render(builder.secret(s)) for s in project.secrets]),
        ("DOCKER HUB SECRETS", [render(builder.docker_hub_secret(s)) for s in project.docker_hub_secrets]),
        ("SERVICE ACCOUNTS", [render(builder.service_account(sa)) for sa in project.service_accounts]),
        ("RBAC ROLES", [render(builder.role(r)) for r in project.roles]),
        ("RBAC CLUSTER ROLES", [render(builder.cluster_role(r)) for r in project.cluster_roles]),
        ("RBAC ROLEBINDINGS", [render_role_binding_yaml(b) for b in project.role_bindings]),
        ("DAEMONSETS", [render_workload_yaml(d, settings) for d in named_daemonsets]),
        ("DEPLOYMENTS", deployment_docs),
        (
            "JOBS",
            [render(builder.job(j)) for j in project.jobs]
            + [render(builder.cronjob(c)) for c in project.cron_jobs],
        ),
    ]
    sections = [(title, docs) for title, docs in sections if docs]

    if not sections:
        count = len(project.deployments) + len(project.daemon_sets)
        if count:
            return CONFIGURATION_NEEDED_TEMPLATE.format(count=count, plural="" if count == 1 else "s")
        return "\n".join(_summary_header(project, custom_namespaces))

    lines = _summary_header(project, custom_namespaces)
    for index, (title, docs) in enumerate(sections):
        if index > 0:
            lines.extend(["---", ""])
        lines.append(f"# === {title} ===")
        for doc_index, doc in enumerate(docs):
            if doc_index > 0:
                lines.append("---")
            lines.append(doc)
    return "\n".join(lines)

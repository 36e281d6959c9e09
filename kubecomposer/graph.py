"""
Resource graph layout for the visual preview.

``build_resource_graph`` projects a project's resources onto typed nodes with
2D positions, dependency/child links and heuristic health and sync statuses.
Resources are grouped by namespace and laid out top to bottom, each group
advancing a shared vertical cursor so groups never overlap. Cluster-scoped
resources follow in their own trailing grids, and a single-kind filter lays
that kind out directly without grouping.

Layout and status are pure functions of the input: the same project and
filter always produce the same ids, positions and statuses. Name references
that do not resolve produce no node.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from pydantic import Field

from kubecomposer.models import (
    ComposerModel,
    ConfigMap,
    CronJobConfig,
    DaemonSetConfig,
    DeploymentConfig,
    JobConfig,
    Namespace,
    Project,
    Role,
    RoleBinding,
    Secret,
    ServiceAccount,
    Workload,
)

logger = logging.getLogger(__name__)


class NodeType(str, Enum):
    DEPLOYMENT = "deployment"
    DAEMONSET = "daemonset"
    SERVICE = "service"
    POD = "pod"
    CONFIGMAP = "configmap"
    SECRET = "secret"
    INGRESS = "ingress"
    NAMESPACE = "namespace"
    EXTERNAL = "external"
    SERVICEACCOUNT = "serviceaccount"
    ROLE = "role"
    JOB = "job"
    CRONJOB = "cronjob"
    ROLEBINDING = "rolebinding"


class NodeStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"
    PENDING = "pending"
    SYNCING = "syncing"


class SyncStatus(str, Enum):
    SYNCED = "synced"
    OUTOFSYNC = "outofsync"
    UNKNOWN = "unknown"


class Position(ComposerModel):
    x: int = 0
    y: int = 0


class FlowNode(ComposerModel):
    """One box of the resource graph."""

    id: str
    name: str
    type: NodeType
    namespace: str = ""
    status: NodeStatus = NodeStatus.HEALTHY
    sync_status: SyncStatus = SyncStatus.SYNCED
    position: Position = Field(default_factory=Position)
    dependencies: List[str] = Field(default_factory=list)
    children: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    color_class: Optional[str] = None


class FlowEdge(NamedTuple):
    """A connector drawn from ``source`` to ``target``."""

    source: str
    target: str
    dashed: bool


FILTER_TYPES = (
    "all",
    "deployments",
    "daemonsets",
    "namespaces",
    "configmaps",
    "secrets",
    "serviceaccounts",
    "roles",
    "clusterroles",
    "rolebindings",
    "jobs",
    "cronjobs",
)

CLUSTER_WIDE = "cluster-wide"

COLOR_PALETTE = ["blue", "green", "yellow", "purple", "pink", "indigo", "teal", "orange"]

# Layout constants, in canvas pixels
NODE_SPACING_X = 200
ROW_HEIGHT = 260
REFERENCE_SPACING_Y = 60
GROUP_GAP = ROW_HEIGHT // 5
NAMESPACE_ROW_HEIGHT = 100
CLUSTER_SECTION_GAP = 60
CANVAS_PADDING = 40
NODE_WIDTH = 192
NODE_HALF_HEIGHT = 60

# Statuses

Status = Tuple[NodeStatus, SyncStatus]

HEALTHY: Status = (NodeStatus.HEALTHY, SyncStatus.SYNCED)
WARNING: Status = (NodeStatus.WARNING, SyncStatus.OUTOFSYNC)
ERROR: Status = (NodeStatus.ERROR, SyncStatus.OUTOFSYNC)


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def workload_status(workload: Workload) -> Status:
    if workload.containers_complete() and workload.ports_valid():
        return HEALTHY
    if workload.containers and workload.ports_valid():
        return WARNING
    return ERROR


def service_status(workload: Workload) -> Status:
    return HEALTHY if workload.containers_complete() else WARNING


def pod_status(workload: Workload) -> Status:
    return HEALTHY if workload.containers_complete() else ERROR


def service_account_status(account: ServiceAccount) -> Status:
    has_name = _has_text(account.name)
    has_namespace = _has_text(account.namespace)
    if has_name and has_namespace:
        return HEALTHY
    if has_name or has_namespace:
        return WARNING
    return ERROR


def role_status(role: Role) -> Status:
    has_name = _has_text(role.metadata.name)
    if has_name and role.rules and all(rule.is_complete() for rule in role.rules):
        return HEALTHY
    if has_name and role.rules:
        return WARNING
    return ERROR


def job_status(job: Any) -> Status:
    containers = job.job_template.containers if isinstance(job, CronJobConfig) else job.containers
    if _has_text(job.name) and _has_text(job.namespace):
        return HEALTHY if containers else WARNING
    return ERROR


def always_healthy(_record: Any) -> Status:
    return HEALTHY


STATUS_RULES: Dict[NodeType, Callable[[Any], Status]] = {
    NodeType.DEPLOYMENT: workload_status,
    NodeType.DAEMONSET: workload_status,
    NodeType.SERVICE: service_status,
    NodeType.POD: pod_status,
    NodeType.SERVICEACCOUNT: service_account_status,
    NodeType.ROLE: role_status,
    NodeType.JOB: job_status,
    NodeType.CRONJOB: job_status,
}


def infer_status(node_type: NodeType, record: Any) -> Status:
    """
    Compute the (status, sync status) pair of a node from its source record.

    Kinds without a structural check (bindings, namespaces, configmaps,
    secrets, ingress and external traffic) are always healthy.
    """
    return STATUS_RULES.get(node_type, always_healthy)(record)


@dataclass
class NamespaceGroup:
    """The filtered resources that live in one namespace."""

    namespace: Namespace
    deployments: List[DeploymentConfig] = field(default_factory=list)
    daemon_sets: List[DaemonSetConfig] = field(default_factory=list)
    config_maps: List[ConfigMap] = field(default_factory=list)
    secrets: List[Secret] = field(default_factory=list)
    service_accounts: List[ServiceAccount] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)
    role_bindings: List[RoleBinding] = field(default_factory=list)
    jobs: List[JobConfig] = field(default_factory=list)
    cron_jobs: List[CronJobConfig] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.deployments
            or self.daemon_sets
            or self.config_maps
            or self.secrets
            or self.service_accounts
            or self.roles
            or self.role_bindings
            or self.jobs
            or self.cron_jobs
        )


def _find_named(items: Sequence[Any], name: str, namespace: str) -> Optional[Any]:
    """Resolve a name reference, preferring a match in the same namespace."""
    for item in items:
        if item.name == name and item.namespace == namespace:
            return item
    for item in items:
        if item.name == name:
            return item
    return None


def _rule_samples(role: Role) -> Dict[str, Any]:
    """Rule count plus up to three distinct api groups, resources and verbs."""
    api_groups = list(dict.fromkeys(g for rule in role.rules for g in rule.api_groups))
    resources = list(dict.fromkeys(r for rule in role.rules for r in rule.resources))
    verbs = list(dict.fromkeys(v for rule in role.rules for v in rule.verbs))
    return {
        "rules": len(role.rules),
        "apiGroups": list(dict.fromkeys(g or "core" for g in api_groups))[:3],
        "resources": resources[:3],
        "verbs": verbs[:3],
    }


class ResourceGraphBuilder:
    """
    Lays out the resources of a project as FlowNodes.

    Args:
        project: The project whose resources are drawn
        filter_type: One of FILTER_TYPES
        namespace_filter: Optional namespace to restrict namespaced resources to
        synced_at: Optional display timestamp copied into node metadata

    Raises:
        ValueError: If filter_type is not a known filter
    """

    def __init__(
        self,
        project: Project,
        filter_type: str = "all",
        namespace_filter: Optional[str] = None,
        synced_at: Optional[str] = None,
    ):
        if filter_type not in FILTER_TYPES:
            raise ValueError(
                f"Unknown filter type: {filter_type!r}. Expected one of: {', '.join(FILTER_TYPES)}"
            )
        self.project = project
        self.filter_type = filter_type
        self.namespace_filter = namespace_filter
        self.synced_at = synced_at
        self.nodes: List[FlowNode] = []
        self.current_y = 0

    # Filtering and grouping

    def _wants(self, kind: str) -> bool:
        return self.filter_type in ("all", kind)

    def _in_scope(self, namespace: Optional[str]) -> bool:
        return not self.namespace_filter or namespace == self.namespace_filter

    def _filtered(self) -> Dict[str, list]:
        project = self.project
        scoped: Dict[str, list] = {
            "deployments": [
                d for d in project.deployments if self._wants("deployments") and self._in_scope(d.namespace)
            ],
            "daemon_sets": [
                d for d in project.daemon_sets if self._wants("daemonsets") and self._in_scope(d.namespace)
            ],
            "namespaces": [
                ns for ns in project.namespaces if self._wants("namespaces") and self._in_scope(ns.name)
            ],
            "config_maps": [
                cm for cm in project.config_maps if self._wants("configmaps") and self._in_scope(cm.namespace)
            ],
            "secrets": [
                s for s in project.secrets if self._wants("secrets") and self._in_scope(s.namespace)
            ],
            "service_accounts": [
                sa
                for sa in project.service_accounts
                if self._wants("serviceaccounts") and self._in_scope(sa.namespace)
            ],
            "roles": [
                r for r in project.roles if self._wants("roles") and self._in_scope(r.metadata.namespace)
            ],
            # Cluster roles have no namespace to filter on
            "cluster_roles": [r for r in project.cluster_roles if self._wants("clusterroles")],
            "jobs": [j for j in project.jobs if self._wants("jobs") and self._in_scope(j.namespace)],
            "cron_jobs": [
                c for c in project.cron_jobs if self._wants("cronjobs") and self._in_scope(c.namespace)
            ],
            "role_bindings": [
                rb
                for rb in project.role_bindings
                if self._wants("rolebindings")
                and (
                    not self.namespace_filter
                    or (not rb.is_cluster_role_binding and rb.namespace == self.namespace_filter)
                )
            ],
        }
        return scoped

    @staticmethod
    def _namespace_groups(scoped: Dict[str, list], keep_empty: bool) -> List[NamespaceGroup]:
        """
        Partition namespaced resources by namespace.

        Namespaces referenced by a resource but not configured explicitly are
        synthesized so every resource has a group.
        """
        namespaces: List[Namespace] = list(scoped["namespaces"])
        known = {ns.name for ns in namespaces}

        referenced: List[Optional[str]] = []
        referenced.extend(d.namespace for d in scoped["deployments"])
        referenced.extend(d.namespace for d in scoped["daemon_sets"])
        referenced.extend(cm.namespace for cm in scoped["config_maps"])
        referenced.extend(s.namespace for s in scoped["secrets"])
        referenced.extend(sa.namespace for sa in scoped["service_accounts"])
        referenced.extend(r.metadata.namespace for r in scoped["roles"])
        referenced.extend(j.namespace for j in scoped["jobs"])
        referenced.extend(c.namespace for c in scoped["cron_jobs"])
        referenced.extend(
            rb.namespace for rb in scoped["role_bindings"] if not rb.is_cluster_role_binding
        )
        for name in referenced:
            if name and name not in known:
                known.add(name)
                namespaces.append(Namespace(name=name))

        groups = []
        for ns in namespaces:
            name = ns.name
            group = NamespaceGroup(
                namespace=ns,
                deployments=[d for d in scoped["deployments"] if d.namespace == name and d.app_name],
                daemon_sets=[d for d in scoped["daemon_sets"] if d.namespace == name and d.app_name],
                config_maps=[cm for cm in scoped["config_maps"] if cm.namespace == name],
                secrets=[s for s in scoped["secrets"] if s.namespace == name],
                service_accounts=[sa for sa in scoped["service_accounts"] if sa.namespace == name],
                roles=[r for r in scoped["roles"] if r.metadata.namespace == name],
                role_bindings=[
                    rb
                    for rb in scoped["role_bindings"]
                    if not rb.is_cluster_role_binding and rb.namespace == name
                ],
                jobs=[j for j in scoped["jobs"] if j.namespace == name],
                cron_jobs=[c for c in scoped["cron_jobs"] if c.namespace == name],
            )
            if keep_empty or not group.is_empty():
                groups.append(group)
        return groups

    # Node helpers

    def _add(
        self,
        node_id: str,
        name: str,
        node_type: NodeType,
        namespace: str,
        x: int,
        y: int,
        status: Status = HEALTHY,
        dependencies: Optional[List[str]] = None,
        children: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        color_class: Optional[str] = None,
        synced: bool = False,
    ) -> FlowNode:
        meta = dict(metadata or {})
        if synced and self.synced_at:
            meta["lastSync"] = self.synced_at
        node = FlowNode(
            id=node_id,
            name=name,
            type=node_type,
            namespace=namespace or "",
            status=status[0],
            sync_status=status[1],
            position=Position(x=x, y=y),
            dependencies=dependencies or [],
            children=children or [],
            metadata=meta,
            color_class=color_class,
        )
        self.nodes.append(node)
        return node

    @staticmethod
    def _grid_rows(count: int, per_row: int) -> int:
        return math.ceil(count / per_row)

    # Workloads

    def _workload_row(self, workload: Workload, color_index: int) -> None:
        """
        Lay out one workload row.

        The workload sits at x=0 with its Service to the right and its Pod to
        the left and slightly below. Deployments with ingress enabled continue
        right with the Ingress and External Traffic nodes. Referenced
        ConfigMaps and Secrets stack in the leftmost column.
        """
        base_y = self.current_y
        color = COLOR_PALETTE[color_index % len(COLOR_PALETTE)]
        name = workload.app_name
        is_deployment = isinstance(workload, DeploymentConfig)
        node_type = NodeType.DEPLOYMENT if is_deployment else NodeType.DAEMONSET
        workload_id = f"{node_type.value}-{name}"
        service_id = f"service-{name}"
        ingress_id = f"ingress-{name}"
        external_id = f"external-{name}"
        has_service = is_deployment or workload.service_enabled
        has_ingress = is_deployment and workload.ingress.enabled
        containers = len(workload.containers)

        metadata: Dict[str, Any] = {"containers": containers}
        if is_deployment:
            ready = workload.replicas if workload.containers_complete() else 0
            metadata = {"replicas": workload.replicas, "readyReplicas": ready, "containers": containers}

        self._add(
            workload_id,
            name,
            node_type,
            workload.namespace,
            0,
            base_y,
            status=infer_status(node_type, workload),
            children=[service_id] if has_service else [],
            metadata=metadata,
            color_class=color,
            synced=True,
        )

        if has_service:
            self._add(
                service_id,
                f"{name}-service",
                NodeType.SERVICE,
                workload.namespace,
                NODE_SPACING_X,
                base_y,
                status=infer_status(NodeType.SERVICE, workload),
                dependencies=[workload_id],
                children=[ingress_id] if has_ingress else [],
                metadata={"ports": [workload.port], "workload": workload_id},
                color_class=color,
            )

        pod_metadata: Dict[str, Any] = {"containers": containers, "workload": workload_id}
        if is_deployment:
            pod_metadata["replicas"] = workload.replicas
            if workload.replicas > 1:
                pod_metadata["badge"] = f"×{workload.replicas}"
        self._add(
            f"pod-{name}",
            f"{name}-pod",
            NodeType.POD,
            workload.namespace,
            -NODE_SPACING_X,
            base_y + REFERENCE_SPACING_Y,
            status=infer_status(NodeType.POD, workload),
            dependencies=[workload_id],
            metadata=pod_metadata,
            color_class=color,
        )

        if has_ingress:
            self._add(
                ingress_id,
                f"{name}-ingress",
                NodeType.INGRESS,
                workload.namespace,
                NODE_SPACING_X * 2,
                base_y,
                dependencies=[service_id],
                children=[external_id],
                metadata={"workload": workload_id},
                color_class=color,
            )
            self._add(
                external_id,
                "External Traffic",
                NodeType.EXTERNAL,
                workload.namespace,
                NODE_SPACING_X * 3,
                base_y,
                dependencies=[ingress_id],
                color_class=color,
            )

        references: List[Tuple[NodeType, Sequence[Any], List[str], int]] = [
            (NodeType.CONFIGMAP, self.project.config_maps, workload.selected_config_maps, 0),
            (NodeType.SECRET, self.project.secrets, workload.selected_secrets, REFERENCE_SPACING_Y),
        ]
        for ref_type, candidates, names, offset in references:
            for index, ref_name in enumerate(names):
                record = _find_named(candidates, ref_name, workload.namespace)
                if record is None:
                    logger.debug(f"{workload_id}: {ref_type.value} {ref_name!r} not found, skipping")
                    continue
                self._add(
                    f"{ref_type.value}-{ref_name}-{workload_id}",
                    ref_name,
                    ref_type,
                    record.namespace,
                    -NODE_SPACING_X * 2,
                    base_y + offset + index * REFERENCE_SPACING_Y,
                    dependencies=[workload_id],
                    metadata={"dataKeys": len(record.data)},
                    color_class=color,
                )

        self.current_y += ROW_HEIGHT

    # Grids

    def _service_account_grid(self, accounts: Sequence[ServiceAccount], id_infix: str) -> None:
        """Two service accounts per row, each with its secret references stacked below."""
        per_row, spacing, row_height = 2, 300, 180
        base_y = self.current_y
        color = COLOR_PALETTE[0]

        for index, account in enumerate(accounts):
            row, col = divmod(index, per_row)
            row_y = base_y + row * row_height
            account_id = f"serviceaccount-{account.name}"
            self._add(
                account_id,
                account.name,
                NodeType.SERVICEACCOUNT,
                account.namespace,
                col * spacing,
                row_y,
                status=infer_status(NodeType.SERVICEACCOUNT, account),
                metadata={
                    "secrets": len(account.secrets),
                    "imagePullSecrets": len(account.image_pull_secrets),
                },
                color_class=color,
                synced=True,
            )

            refs = [
                ("secret", "{}", 20, account.secrets),
                ("imagepullsecret", "{} (Image Pull)", 220, account.image_pull_secrets),
            ]
            for prefix, label, x_offset, secret_refs in refs:
                for ref_index, ref in enumerate(secret_refs):
                    secret = _find_named(self.project.secrets, ref.name, account.namespace)
                    if secret is None:
                        logger.debug(f"{account_id}: secret {ref.name!r} not found, skipping")
                        continue
                    self._add(
                        f"{prefix}-{ref.name}-{id_infix}-{index}",
                        label.format(ref.name),
                        NodeType.SECRET,
                        secret.namespace,
                        col * spacing + x_offset,
                        row_y + 80 + ref_index * REFERENCE_SPACING_Y,
                        dependencies=[account_id],
                        metadata={"dataKeys": len(secret.data)},
                        color_class=color,
                    )

        rows = self._grid_rows(len(accounts), per_row)
        max_refs = max((len(a.secrets) + len(a.image_pull_secrets) for a in accounts), default=0)
        extra = max_refs * REFERENCE_SPACING_Y + REFERENCE_SPACING_Y if max_refs else 0
        self.current_y += rows * row_height + extra + 60

    def _role_grid(
        self,
        roles: Sequence[Role],
        spacing: int,
        row_height: int,
        cluster_scoped: bool = False,
    ) -> None:
        per_row = 2
        for index, role in enumerate(roles):
            row, col = divmod(index, per_row)
            name = role.metadata.name
            self._add(
                f"clusterrole-{name}" if cluster_scoped else f"role-{name}",
                name,
                NodeType.ROLE,
                CLUSTER_WIDE if cluster_scoped else (role.metadata.namespace or ""),
                col * spacing,
                self.current_y + row * row_height,
                status=infer_status(NodeType.ROLE, role),
                metadata=_rule_samples(role),
                color_class=COLOR_PALETTE[6] if cluster_scoped else COLOR_PALETTE[5],
                synced=True,
            )
        self.current_y += self._grid_rows(len(roles), per_row) * row_height + 40

    def _binding_grid(
        self,
        bindings: Sequence[RoleBinding],
        spacing: int,
        row_height: int,
        trailing_gap: int,
        node_id: Callable[[RoleBinding], str],
    ) -> None:
        per_row = 2
        for index, binding in enumerate(bindings):
            row, col = divmod(index, per_row)
            cluster = binding.is_cluster_role_binding
            self._add(
                node_id(binding),
                binding.name,
                NodeType.ROLEBINDING,
                CLUSTER_WIDE if cluster else (binding.namespace or ""),
                col * spacing,
                self.current_y + row * row_height,
                color_class=COLOR_PALETTE[0] if cluster else COLOR_PALETTE[3],
                synced=True,
            )
        self.current_y += self._grid_rows(len(bindings), per_row) * row_height + trailing_gap

    def _job_grid(
        self,
        jobs: Sequence[Any],
        per_row: int,
        row_height: int,
    ) -> None:
        spacing = 250
        for index, job in enumerate(jobs):
            row, col = divmod(index, per_row)
            if isinstance(job, CronJobConfig):
                node_type = NodeType.CRONJOB
                template = job.job_template
                metadata = {
                    "containers": len(template.containers),
                    "schedule": job.schedule,
                    "completions": template.completions,
                    "parallelism": template.parallelism,
                }
                color = COLOR_PALETTE[2]
            else:
                node_type = NodeType.JOB
                metadata = {
                    "containers": len(job.containers),
                    "completions": job.completions,
                    "parallelism": job.parallelism,
                }
                color = COLOR_PALETTE[3]
            self._add(
                f"{node_type.value}-{job.name}",
                job.name,
                node_type,
                job.namespace,
                col * spacing,
                self.current_y + row * row_height,
                status=infer_status(node_type, job),
                metadata={key: value for key, value in metadata.items() if value is not None},
                color_class=color,
                synced=True,
            )
        self.current_y += self._grid_rows(len(jobs), per_row) * row_height + 40

    def _plain_grid(self, records: Sequence[Any], node_type: NodeType, color: str) -> None:
        """Three ConfigMaps or Secrets per row."""
        per_row, spacing, row_height = 3, 250, 120
        for index, record in enumerate(records):
            row, col = divmod(index, per_row)
            self._add(
                f"{node_type.value}-{record.name}",
                record.name,
                node_type,
                record.namespace,
                col * spacing,
                self.current_y + row * row_height,
                metadata={"dataKeys": len(record.data)},
                color_class=color,
            )
        self.current_y += self._grid_rows(len(records), per_row) * row_height + 40

    # Passes

    def _emit_group(self, group: NamespaceGroup) -> None:
        for index, deployment in enumerate(group.deployments):
            self._workload_row(deployment, index)
        for index, daemon_set in enumerate(group.daemon_sets):
            self._workload_row(daemon_set, len(group.deployments) + index)

        if group.service_accounts:
            self._service_account_grid(group.service_accounts, "sa")
        if group.roles:
            self._role_grid(group.roles, spacing=280, row_height=180)
        if group.role_bindings:
            self._binding_grid(
                group.role_bindings,
                spacing=260,
                row_height=120,
                trailing_gap=20,
                node_id=lambda rb: f"rolebinding-{rb.name}-{rb.namespace}",
            )
        jobs = list(group.jobs) + list(group.cron_jobs)
        if jobs:
            self._job_grid(jobs, per_row=2, row_height=100)

        name = group.namespace.name
        self._add(
            f"namespace-{name}",
            name,
            NodeType.NAMESPACE,
            name,
            0,
            self.current_y,
            color_class=COLOR_PALETTE[1],
            synced=True,
        )
        self.current_y += NAMESPACE_ROW_HEIGHT
        self.current_y += GROUP_GAP

    def _emit_cluster_scoped(self, scoped: Dict[str, list]) -> None:
        cluster_roles = scoped["cluster_roles"]
        if cluster_roles:
            self.current_y += CLUSTER_SECTION_GAP
            self._role_grid(cluster_roles, spacing=300, row_height=200, cluster_scoped=True)

        cluster_bindings = [rb for rb in scoped["role_bindings"] if rb.is_cluster_role_binding]
        if cluster_bindings and self.filter_type == "all":
            self.current_y += CLUSTER_SECTION_GAP
            self._binding_grid(
                cluster_bindings,
                spacing=260,
                row_height=120,
                trailing_gap=20,
                node_id=lambda rb: f"clusterrolebinding-{rb.name}",
            )

    def _emit_standalone(self, scoped: Dict[str, list]) -> None:
        kind = self.filter_type
        if kind == "deployments":
            named = [d for d in scoped["deployments"] if d.app_name]
            for index, deployment in enumerate(named):
                self._workload_row(deployment, index)
        elif kind == "daemonsets":
            named = [d for d in scoped["daemon_sets"] if d.app_name]
            for index, daemon_set in enumerate(named):
                self._workload_row(daemon_set, index)
        elif kind == "configmaps":
            self._plain_grid(scoped["config_maps"], NodeType.CONFIGMAP, COLOR_PALETTE[0])
        elif kind == "secrets":
            self._plain_grid(scoped["secrets"], NodeType.SECRET, COLOR_PALETTE[1])
        elif kind == "serviceaccounts":
            self._service_account_grid(scoped["service_accounts"], "standalone-sa")
        elif kind == "roles":
            self._role_grid(scoped["roles"], spacing=300, row_height=200)
        elif kind == "rolebindings":
            self._binding_grid(
                scoped["role_bindings"],
                spacing=300,
                row_height=200,
                trailing_gap=40,
                node_id=lambda rb: f"rolebinding-{rb.name}-{rb.namespace or 'cluster'}",
            )
        elif kind == "jobs":
            self._job_grid(scoped["jobs"], per_row=3, row_height=120)
        elif kind == "cronjobs":
            self._job_grid(scoped["cron_jobs"], per_row=3, row_height=120)

    def build(self) -> List[FlowNode]:
        """
        Lay out the filtered resources and return normalized nodes.

        ``all`` and ``namespaces`` run the namespace-grouped pass, ``all`` and
        ``clusterroles`` run the cluster-scoped pass, and every other filter
        lays its single kind out directly.
        """
        self.nodes = []
        self.current_y = 0
        scoped = self._filtered()

        if self.filter_type in ("all", "namespaces"):
            keep_empty = self.filter_type == "namespaces"
            for group in self._namespace_groups(scoped, keep_empty):
                self._emit_group(group)

        if self.filter_type in ("all", "clusterroles"):
            self._emit_cluster_scoped(scoped)
        elif self.filter_type != "namespaces":
            self._emit_standalone(scoped)

        return normalize_positions(self.nodes)


def normalize_positions(nodes: List[FlowNode]) -> List[FlowNode]:
    """
    Translate nodes so the layout starts at a fixed inset from the origin.

    The leftmost node centre lands at padding plus half a node width and the
    topmost at padding plus half a node height.
    """
    if not nodes:
        return []
    min_x = min(node.position.x for node in nodes)
    min_y = min(node.position.y for node in nodes)
    shift_x = -min_x + CANVAS_PADDING + NODE_WIDTH // 2
    shift_y = -min_y + CANVAS_PADDING + NODE_HALF_HEIGHT
    return [
        node.model_copy(
            update={"position": Position(x=node.position.x + shift_x, y=node.position.y + shift_y)}
        )
        for node in nodes
    ]


def graph_bounds(nodes: Iterable[FlowNode]) -> Tuple[int, int]:
    """
    Size of the canvas needed to draw the nodes.

    Returns:
        (width, height) including padding and one node's footprint
    """
    nodes = list(nodes)
    if not nodes:
        return 2 * CANVAS_PADDING + 200, 2 * CANVAS_PADDING + 100
    xs = [node.position.x for node in nodes]
    ys = [node.position.y for node in nodes]
    width = max(xs) - min(xs) + 2 * CANVAS_PADDING + 200
    height = max(ys) - min(ys) + 2 * CANVAS_PADDING + 100
    return width, height


def iter_edges(nodes: Iterable[FlowNode]) -> Iterator[FlowEdge]:
    """
    Yield one edge per (dependency, node) pair.

    Edges ending at an external traffic node are dashed. Dependencies that
    name a node outside ``nodes`` are skipped.
    """
    nodes = list(nodes)
    known = {node.id for node in nodes}
    for node in nodes:
        for dependency in node.dependencies:
            if dependency in known:
                yield FlowEdge(dependency, node.id, node.type == NodeType.EXTERNAL)


def build_resource_graph(
    project: Project,
    filter_type: str = "all",
    namespace_filter: Optional[str] = None,
    synced_at: Optional[str] = None,
) -> List[FlowNode]:
    """
    Build the laid-out resource graph of a project.

    Args:
        project: The project whose resources are drawn
        filter_type: "all" or a single kind such as "deployments"
        namespace_filter: Optional namespace to restrict the view to
        synced_at: Optional timestamp shown as the nodes' last sync

    Returns:
        FlowNodes with normalized positions

    Raises:
        ValueError: If filter_type is not a known filter
    """
    return ResourceGraphBuilder(project, filter_type, namespace_filter, synced_at).build()

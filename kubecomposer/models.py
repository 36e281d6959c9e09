"""
Configuration records for everything a kubecomposer project can hold.

Attributes are snake_case in Python and camelCase in the stored project
JSON (``appName``, ``selectedConfigMaps``, ``isClusterRoleBinding``...), so a
project blob saved by the editor validates directly into a ``Project``.
References between records are plain names and are allowed to dangle.
"""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ComposerModel(BaseModel):
    """Base model mapping snake_case attributes onto camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> dict:
        """Dump the record the way the project blob stores it."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class EnvVarSource(ComposerModel):
    """Reference to one key of a ConfigMap or Secret."""

    type: Literal["configMap", "secret"] = "configMap"
    name: str = ""
    key: str = ""


class EnvVar(ComposerModel):
    name: str = ""
    value: Optional[str] = None
    value_from: Optional[EnvVarSource] = None


class ResourceQuantities(ComposerModel):
    cpu: str = ""
    memory: str = ""


class ResourceRequirements(ComposerModel):
    requests: ResourceQuantities = Field(default_factory=ResourceQuantities)
    limits: ResourceQuantities = Field(default_factory=ResourceQuantities)


class VolumeMount(ComposerModel):
    name: str = ""
    mount_path: str = ""


class Container(ComposerModel):
    """A single container of a workload or job."""

    name: str = ""
    image: str = ""
    port: Optional[int] = None
    env: List[EnvVar] = Field(default_factory=list)
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    volume_mounts: List[VolumeMount] = Field(default_factory=list)
    command: Optional[str] = None
    args: Optional[str] = None

    def is_complete(self) -> bool:
        """A container counts as valid once it has both a name and an image."""
        return bool(self.name) and bool(self.image)


class Volume(ComposerModel):
    name: str = ""
    mount_path: str = ""
    type: Literal["emptyDir", "configMap", "secret"] = "emptyDir"
    config_map_name: Optional[str] = None
    secret_name: Optional[str] = None


class InlineData(ComposerModel):
    """Legacy inline ConfigMap/Secret carried directly on a workload."""

    name: str = ""
    data: Dict[str, str] = Field(default_factory=dict)


class IngressRule(ComposerModel):
    host: str = ""
    path: str = "/"
    path_type: Literal["Prefix", "Exact", "ImplementationSpecific"] = "Prefix"
    service_name: str = ""
    service_port: int = 80


class IngressTLS(ComposerModel):
    secret_name: str = ""
    hosts: List[str] = Field(default_factory=list)


class IngressConfig(ComposerModel):
    enabled: bool = False
    class_name: Optional[str] = None
    annotations: Dict[str, str] = Field(default_factory=dict)
    tls: List[IngressTLS] = Field(default_factory=list)
    rules: List[IngressRule] = Field(default_factory=list)


class WorkloadConfig(ComposerModel):
    """Fields shared by Deployments and DaemonSets."""

    app_name: str = ""
    containers: List[Container] = Field(default_factory=list)
    port: int = 80
    target_port: int = 80
    service_type: Literal["ClusterIP", "NodePort", "LoadBalancer"] = "ClusterIP"
    namespace: str = "default"
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    volumes: List[Volume] = Field(default_factory=list)
    config_maps: List[InlineData] = Field(default_factory=list)
    secrets: List[InlineData] = Field(default_factory=list)
    selected_config_maps: List[str] = Field(default_factory=list)
    selected_secrets: List[str] = Field(default_factory=list)
    service_account: Optional[str] = None
    # Pre-container fields, only used when ``containers`` is empty
    image: Optional[str] = None
    env: Optional[List[EnvVar]] = None
    resources: Optional[ResourceRequirements] = None

    def containers_complete(self) -> bool:
        """True when at least one container exists and all of them are complete."""
        return bool(self.containers) and all(c.is_complete() for c in self.containers)

    def ports_valid(self) -> bool:
        return self.port > 0 and self.target_port > 0


class DeploymentConfig(WorkloadConfig):
    replicas: int = 1
    ingress: IngressConfig = Field(default_factory=IngressConfig)


class DaemonSetConfig(WorkloadConfig):
    service_enabled: bool = False
    node_selector: Dict[str, str] = Field(default_factory=dict)


Workload = Union[DeploymentConfig, DaemonSetConfig]


class Namespace(ComposerModel):
    name: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None


class ConfigMap(ComposerModel):
    name: str = ""
    namespace: str = "default"
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    data: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None


class Secret(ComposerModel):
    """A Secret whose ``data`` holds plaintext values; they are encoded on output."""

    name: str = ""
    namespace: str = "default"
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    type: Literal["Opaque", "kubernetes.io/tls", "kubernetes.io/dockerconfigjson"] = "Opaque"
    data: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None


class DockerHubSecret(ComposerModel):
    """Registry credentials rendered as a ``kubernetes.io/dockerconfigjson`` Secret."""

    name: str = ""
    namespace: str = "default"
    docker_server: str = "https://index.docker.io/v1/"
    username: str = ""
    password: str = ""
    email: str = ""
    description: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None


class ObjectReference(ComposerModel):
    name: str = ""


class ServiceAccount(ComposerModel):
    name: str = ""
    namespace: str = "default"
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    secrets: List[ObjectReference] = Field(default_factory=list)
    image_pull_secrets: List[ObjectReference] = Field(default_factory=list)
    automount_service_account_token: Optional[bool] = None
    created_at: Optional[str] = None


class PolicyRule(ComposerModel):
    api_groups: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    verbs: List[str] = Field(default_factory=list)
    resource_names: List[str] = Field(default_factory=list)

    def is_complete(self) -> bool:
        return bool(self.resources) and bool(self.verbs)


class RoleMetadata(ComposerModel):
    name: str = ""
    namespace: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)


class Role(ComposerModel):
    api_version: str = "rbac.authorization.k8s.io/v1"
    kind: str = "Role"
    metadata: RoleMetadata = Field(default_factory=RoleMetadata)
    rules: List[PolicyRule] = Field(default_factory=list)


class ClusterRole(Role):
    kind: str = "ClusterRole"


class Subject(ComposerModel):
    kind: Literal["User", "Group", "ServiceAccount"] = "ServiceAccount"
    name: str = ""
    namespace: Optional[str] = None
    api_group: Optional[str] = None


class RoleRef(ComposerModel):
    api_group: str = "rbac.authorization.k8s.io"
    kind: Literal["Role", "ClusterRole"] = "Role"
    name: str = ""


class RoleBinding(ComposerModel):
    name: str = ""
    namespace: Optional[str] = None
    is_cluster_role_binding: bool = False
    role_ref: RoleRef = Field(default_factory=RoleRef)
    subjects: List[Subject] = Field(default_factory=list)


class JobConfig(ComposerModel):
    name: str = ""
    namespace: str = "default"
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    containers: List[Container] = Field(default_factory=list)
    restart_policy: Literal["Never", "OnFailure"] = "Never"
    completions: Optional[int] = None
    parallelism: Optional[int] = None
    backoff_limit: Optional[int] = None
    active_deadline_seconds: Optional[int] = None
    created_at: Optional[str] = None


class CronJobConfig(ComposerModel):
    name: str = ""
    namespace: str = "default"
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    schedule: str = ""
    concurrency_policy: Optional[Literal["Allow", "Forbid", "Replace"]] = None
    starting_deadline_seconds: Optional[int] = None
    successful_jobs_history_limit: Optional[int] = None
    failed_jobs_history_limit: Optional[int] = None
    job_template: JobConfig = Field(default_factory=JobConfig)
    created_at: Optional[str] = None


class ProjectSettings(ComposerModel):
    name: str = ""
    description: Optional[str] = None
    global_labels: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Project(ComposerModel):
    """Every resource collection of one project plus its settings."""

    deployments: List[DeploymentConfig] = Field(default_factory=list)
    daemon_sets: List[DaemonSetConfig] = Field(default_factory=list)
    namespaces: List[Namespace] = Field(default_factory=list)
    config_maps: List[ConfigMap] = Field(default_factory=list)
    secrets: List[Secret] = Field(default_factory=list)
    docker_hub_secrets: List[DockerHubSecret] = Field(default_factory=list)
    service_accounts: List[ServiceAccount] = Field(default_factory=list)
    roles: List[Role] = Field(default_factory=list)
    cluster_roles: List[ClusterRole] = Field(default_factory=list)
    role_bindings: List[RoleBinding] = Field(default_factory=list)
    jobs: List[JobConfig] = Field(default_factory=list)
    cron_jobs: List[CronJobConfig] = Field(default_factory=list)
    project_settings: Optional[ProjectSettings] = None


def duplicate_workload(workload: Workload, new_name: Optional[str] = None) -> Workload:
    """
    Deep-clone a Deployment or DaemonSet under a new name.

    Container names get a ``-copy`` suffix and ingress rules are pointed at
    the clone's Service so the copy does not route to the original.

    Args:
        workload: The workload to copy
        new_name: Name of the copy. Defaults to ``<app_name>-copy``.

    Returns:
        A new, independent workload record
    """
    name = new_name or f"{workload.app_name}-copy"
    clone = workload.model_copy(deep=True)
    clone.app_name = name
    for container in clone.containers:
        container.name = f"{container.name}-copy" if container.name else ""
    if isinstance(clone, DeploymentConfig):
        for rule in clone.ingress.rules:
            rule.service_name = f"{name}-service"
    return clone

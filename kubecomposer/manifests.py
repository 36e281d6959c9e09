"""
Builders that turn configuration records into Kubernetes manifest dicts.

Every manifest is a plain dict built in Kubernetes-conventional key order
(apiVersion, kind, metadata, then the body). Optional fields are passed
through ``when_set`` and come out as None, which the emitter skips.
"""

import base64
import json
import logging
from typing import Any, Dict, List, Optional

from kubecomposer.emitter import when_set
from kubecomposer.models import (
    ClusterRole,
    ConfigMap,
    Container,
    CronJobConfig,
    DaemonSetConfig,
    DeploymentConfig,
    DockerHubSecret,
    EnvVar,
    JobConfig,
    Namespace,
    PolicyRule,
    ProjectSettings,
    Role,
    RoleBinding,
    Secret,
    ServiceAccount,
    Workload,
    WorkloadConfig,
)
from kubecomposer.resource_utils import is_cluster_scoped, merge_labels, selector_labels

logger = logging.getLogger(__name__)

RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"
DEFAULT_CPU_REQUEST = "100m"
DEFAULT_MEMORY_REQUEST = "128Mi"
DEFAULT_IMAGE = "nginx:latest"


def b64encode(value: str) -> str:
    """Base64-encode a text value the way Secret data expects it."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def docker_config_json(secret: DockerHubSecret) -> str:
    """
    Build the ``.dockerconfigjson`` payload for registry credentials.

    The auth config is serialized to compact JSON and then base64-encoded,
    and its ``auth`` field is itself ``base64(username:password)``.
    """
    auth_config = {
        "auths": {
            secret.docker_server: {
                "username": secret.username,
                "password": secret.password,
                "email": secret.email,
                "auth": b64encode(f"{secret.username}:{secret.password}"),
            }
        }
    }
    return b64encode(json.dumps(auth_config, separators=(",", ":")))


class ManifestBuilder:
    """
    Builds manifest dicts for every resource kind of a project.

    Project settings, when given, contribute the global labels and the
    ``project`` label to everything except role bindings.
    """

    def __init__(self, settings: Optional[ProjectSettings] = None):
        self.settings = settings

    def _metadata(
        self,
        kind: str,
        name: str,
        namespace: Optional[str],
        labels: Optional[Dict[str, str]],
        annotations: Optional[Dict[str, str]],
    ) -> Dict[str, Any]:
        return {
            "name": name,
            "namespace": None if is_cluster_scoped(kind) else namespace,
            "labels": when_set(merge_labels(labels, self.settings)),
            "annotations": when_set(annotations),
        }

    # Containers

    @staticmethod
    def env_var(env: EnvVar) -> Dict[str, Any]:
        """Render one environment entry as a literal value or a key reference."""
        if env.value_from:
            ref_kind = "configMapKeyRef" if env.value_from.type == "configMap" else "secretKeyRef"
            return {
                "name": env.name,
                "valueFrom": {ref_kind: {"name": env.value_from.name, "key": env.value_from.key}},
            }
        return {"name": env.name, "value": env.value}

    def container(self, container: Container) -> Dict[str, Any]:
        """
        Build a container spec.

        Requests always carry cpu and memory, defaulting to 100m/128Mi.
        Limits appear only when at least one of them is set.
        """
        requests = container.resources.requests
        limits = container.resources.limits
        limit_values = {
            key: value for key, value in (("cpu", limits.cpu), ("memory", limits.memory)) if value
        }
        return {
            "name": container.name or "app",
            "image": container.image,
            "ports": [{"containerPort": container.port}] if container.port else None,
            "env": when_set([self.env_var(e) for e in container.env]),
            "volumeMounts": when_set(
                [{"name": m.name, "mountPath": m.mount_path} for m in container.volume_mounts]
            ),
            "command": [container.command] if container.command else None,
            "args": [container.args] if container.args else None,
            "resources": {
                "requests": {
                    "cpu": requests.cpu or DEFAULT_CPU_REQUEST,
                    "memory": requests.memory or DEFAULT_MEMORY_REQUEST,
                },
                "limits": when_set(limit_values),
            },
        }

    def containers(self, config: WorkloadConfig) -> List[Dict[str, Any]]:
        """
        Build the container list of a workload.

        Workloads saved before multi-container support have no ``containers``
        and get a single ``app`` container from their top-level fields.
        """
        if config.containers:
            return [self.container(c) for c in config.containers]

        logger.debug(f"Workload {config.app_name!r} has no containers, using legacy fields")
        legacy_requests = config.resources.requests if config.resources else None
        return [
            {
                "name": "app",
                "image": config.image or DEFAULT_IMAGE,
                "ports": [{"containerPort": config.target_port}],
                "env": [self.env_var(e) for e in config.env or []],
                "resources": {
                    "requests": {
                        "cpu": (legacy_requests.cpu if legacy_requests else "")
                        or DEFAULT_CPU_REQUEST,
                        "memory": (legacy_requests.memory if legacy_requests else "")
                        or DEFAULT_MEMORY_REQUEST,
                    }
                },
            }
        ]

    @staticmethod
    def volumes(config: WorkloadConfig) -> List[Dict[str, Any]]:
        volumes = []
        for volume in config.volumes:
            entry: Dict[str, Any] = {"name": volume.name}
            if volume.type == "emptyDir":
                entry["emptyDir"] = {}
            elif volume.type == "configMap":
                entry["configMap"] = {"name": volume.config_map_name or volume.name}
            elif volume.type == "secret":
                entry["secret"] = {"secretName": volume.secret_name or volume.name}
            volumes.append(entry)
        return volumes

    @staticmethod
    def service_ports(config: WorkloadConfig) -> List[Dict[str, Any]]:
        """
        Derive the Service ports of a workload.

        The first port is always the workload's port/targetPort pair named
        ``http``. Each container listening on a port other than targetPort
        adds one more entry mapping that port to itself.
        """
        ports = [
            {
                "port": config.port,
                "targetPort": config.target_port,
                "protocol": "TCP",
                "name": "http",
            }
        ]
        for index, container in enumerate(config.containers):
            if container.port and container.port != config.target_port:
                ports.append(
                    {
                        "port": container.port,
                        "targetPort": container.port,
                        "protocol": "TCP",
                        "name": f"{container.name or f'container-{index}'}-port",
                    }
                )
        return ports

    # Workloads

    def _workload_labels(self, config: WorkloadConfig) -> Dict[str, str]:
        return merge_labels(config.labels, self.settings, app_name=config.app_name)

    def _pod_template(self, config: WorkloadConfig) -> Dict[str, Any]:
        pod_spec: Dict[str, Any] = {
            "serviceAccountName": when_set(config.service_account),
            "containers": self.containers(config),
            "volumes": when_set(self.volumes(config)),
        }
        if isinstance(config, DaemonSetConfig):
            pod_spec["nodeSelector"] = when_set(config.node_selector)
        return {
            "metadata": {"labels": self._workload_labels(config)},
            "spec": pod_spec,
        }

    def deployment(self, config: DeploymentConfig) -> Dict[str, Any]:
        return {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {
                "name": config.app_name,
                "namespace": config.namespace,
                "labels": self._workload_labels(config),
                "annotations": when_set(config.annotations),
            },
            "spec": {
                "replicas": config.replicas,
                "selector": {"matchLabels": selector_labels(config.app_name, self.settings)},
                "template": self._pod_template(config),
            },
        }

    def daemonset(self, config: DaemonSetConfig) -> Dict[str, Any]:
        return {
            "apiVersion": "apps/v1",
            "kind": "DaemonSet",
            "metadata": {
                "name": config.app_name,
                "namespace": config.namespace,
                "labels": self._workload_labels(config),
                "annotations": when_set(config.annotations),
            },
            "spec": {
                "selector": {"matchLabels": selector_labels(config.app_name, self.settings)},
                "template": self._pod_template(config),
            },
        }

    def service(self, config: WorkloadConfig) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": {
                "name": f"{config.app_name}-service",
                "namespace": config.namespace,
                "labels": self._workload_labels(config),
            },
            "spec": {
                "selector": selector_labels(config.app_name, self.settings),
                "ports": self.service_ports(config),
                "type": config.service_type,
            },
        }

    def ingress(self, config: DeploymentConfig) -> Dict[str, Any]:
        ingress = config.ingress
        tls = []
        for entry in ingress.tls:
            hosts = [host for host in entry.hosts if host.strip()]
            if hosts:
                tls.append({"secretName": entry.secret_name, "hosts": hosts})

        rules = []
        for rule in ingress.rules:
            backend = {
                "service": {
                    "name": rule.service_name,
                    "port": {"number": rule.service_port},
                }
            }
            rules.append(
                {
                    "host": when_set(rule.host),
                    "http": {
                        "paths": [
                            {"path": rule.path, "pathType": rule.path_type, "backend": backend}
                        ]
                    },
                }
            )

        return {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "Ingress",
            "metadata": {
                "name": f"{config.app_name}-ingress",
                "namespace": config.namespace,
                "labels": self._workload_labels(config),
                "annotations": when_set(ingress.annotations),
            },
            "spec": {
                "ingressClassName": when_set(ingress.class_name),
                "tls": when_set(tls),
                "rules": rules,
            },
        }

    def _inline_resources(self, config: WorkloadConfig) -> List[Dict[str, Any]]:
        """ConfigMaps and Opaque Secrets stored inline on older workloads."""
        labels = self._workload_labels(config)
        manifests = []
        for inline in config.config_maps:
            manifests.append(
                {
                    "apiVersion": "v1",
                    "kind": "ConfigMap",
                    "metadata": {"name": inline.name, "namespace": config.namespace, "labels": labels},
                    "data": inline.data,
                }
            )
        for inline in config.secrets:
            manifests.append(
                {
                    "apiVersion": "v1",
                    "kind": "Secret",
                    "metadata": {"name": inline.name, "namespace": config.namespace, "labels": labels},
                    "type": "Opaque",
                    "data": {key: b64encode(value) for key, value in inline.data.items()},
                }
            )
        return manifests

    def workload_manifests(self, config: Workload) -> List[Dict[str, Any]]:
        """
        Build every manifest a workload expands to.

        Deployments always get a Service and get an Ingress when ingress is
        enabled with at least one rule. DaemonSets get a Service only when
        ``service_enabled`` is set. Inline ConfigMaps and Secrets follow.
        """
        manifests: List[Dict[str, Any]] = []
        if isinstance(config, DaemonSetConfig):
            manifests.append(self.daemonset(config))
            if config.service_enabled:
                manifests.append(self.service(config))
        else:
            manifests.append(self.deployment(config))
            manifests.append(self.service(config))
            if config.ingress.enabled and config.ingress.rules:
                manifests.append(self.ingress(config))
        manifests.extend(self._inline_resources(config))
        return manifests

    # Cluster and configuration resources

    def namespace(self, namespace: Namespace) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Namespace",
            "metadata": self._metadata(
                "Namespace", namespace.name, namespace.name, namespace.labels, namespace.annotations
            ),
        }

    def configmap(self, config_map: ConfigMap) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": self._metadata(
                "ConfigMap", config_map.name, config_map.namespace, config_map.labels, config_map.annotations
            ),
            "data": config_map.data,
        }

    def secret(self, secret: Secret) -> Dict[str, Any]:
        """Build a Secret, base64-encoding every plaintext value of ``data``."""
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": self._metadata(
                "Secret", secret.name, secret.namespace, secret.labels, secret.annotations
            ),
            "type": secret.type,
            "data": {key: b64encode(value) for key, value in secret.data.items()},
        }

    def docker_hub_secret(self, secret: DockerHubSecret) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": self._metadata(
                "Secret", secret.name, secret.namespace, secret.labels, secret.annotations
            ),
            "type": "kubernetes.io/dockerconfigjson",
            "data": {".dockerconfigjson": docker_config_json(secret)},
        }

    def service_account(self, account: ServiceAccount) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": self._metadata(
                "ServiceAccount", account.name, account.namespace, account.labels, account.annotations
            ),
            "secrets": when_set([{"name": ref.name} for ref in account.secrets]),
            "imagePullSecrets": when_set([{"name": ref.name} for ref in account.image_pull_secrets]),
            "automountServiceAccountToken": account.automount_service_account_token,
        }

    @staticmethod
    def policy_rule(rule: PolicyRule) -> Dict[str, Any]:
        return {
            "apiGroups": rule.api_groups,
            "resources": rule.resources,
            "verbs": rule.verbs,
            "resourceNames": when_set(rule.resource_names),
        }

    def role(self, role: Role) -> Dict[str, Any]:
        meta = role.metadata
        return {
            "apiVersion": role.api_version or RBAC_API_VERSION,
            "kind": "Role",
            "metadata": self._metadata("Role", meta.name, meta.namespace, meta.labels, meta.annotations),
            "rules": [self.policy_rule(rule) for rule in role.rules],
        }

    def cluster_role(self, role: ClusterRole) -> Dict[str, Any]:
        """Build a ClusterRole. Its metadata never carries a namespace key."""
        meta = role.metadata
        return {
            "apiVersion": role.api_version or RBAC_API_VERSION,
            "kind": "ClusterRole",
            "metadata": self._metadata(
                "ClusterRole", meta.name, meta.namespace, meta.labels, meta.annotations
            ),
            "rules": [self.policy_rule(rule) for rule in role.rules],
        }

    @staticmethod
    def role_binding(binding: RoleBinding) -> Dict[str, Any]:
        """
        Build a RoleBinding or ClusterRoleBinding.

        Bindings carry no labels. The namespace is only emitted for
        namespaced bindings that have one.
        """
        kind = "ClusterRoleBinding" if binding.is_cluster_role_binding else "RoleBinding"
        return {
            "apiVersion": RBAC_API_VERSION,
            "kind": kind,
            "metadata": {
                "name": binding.name,
                "namespace": None if is_cluster_scoped(kind) else when_set(binding.namespace),
            },
            "subjects": [
                {
                    "kind": subject.kind,
                    "name": subject.name,
                    "apiGroup": when_set(subject.api_group),
                    "namespace": when_set(subject.namespace),
                }
                for subject in binding.subjects
            ],
            "roleRef": {
                "kind": binding.role_ref.kind,
                "name": binding.role_ref.name,
                "apiGroup": binding.role_ref.api_group,
            },
        }

    # Batch

    def job_spec(self, job: JobConfig) -> Dict[str, Any]:
        """
        Build a Job spec.

        completions, parallelism, backoffLimit and activeDeadlineSeconds are
        only emitted when truthy, so an explicit 0 is dropped as well.
        """
        return {
            "completions": when_set(job.completions),
            "parallelism": when_set(job.parallelism),
            "backoffLimit": when_set(job.backoff_limit),
            "activeDeadlineSeconds": when_set(job.active_deadline_seconds),
            "template": {
                "spec": {
                    "restartPolicy": job.restart_policy,
                    "containers": [self.container(c) for c in job.containers],
                }
            },
        }

    def job(self, job: JobConfig) -> Dict[str, Any]:
        return {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": self._metadata("Job", job.name, job.namespace, job.labels, job.annotations),
            "spec": self.job_spec(job),
        }

    def cronjob(self, cronjob: CronJobConfig) -> Dict[str, Any]:
        return {
            "apiVersion": "batch/v1",
            "kind": "CronJob",
            "metadata": self._metadata(
                "CronJob", cronjob.name, cronjob.namespace, cronjob.labels, cronjob.annotations
            ),
            "spec": {
                "schedule": cronjob.schedule,
                "concurrencyPolicy": when_set(cronjob.concurrency_policy),
                "startingDeadlineSeconds": when_set(cronjob.starting_deadline_seconds),
                "successfulJobsHistoryLimit": when_set(cronjob.successful_jobs_history_limit),
                "failedJobsHistoryLimit": when_set(cronjob.failed_jobs_history_limit),
                "jobTemplate": {"spec": self.job_spec(cronjob.job_template)},
            },
        }

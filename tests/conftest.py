"""Pytest configuration and shared fixtures."""
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kubecomposer.models import (  # noqa: E402
    ClusterRole,
    ConfigMap,
    Container,
    CronJobConfig,
    DaemonSetConfig,
    DeploymentConfig,
    IngressConfig,
    IngressRule,
    JobConfig,
    Namespace,
    ObjectReference,
    PolicyRule,
    Project,
    ProjectSettings,
    Role,
    RoleBinding,
    RoleMetadata,
    RoleRef,
    Secret,
    ServiceAccount,
    Subject,
)
from kubecomposer.output import OutputManager, Verbosity, set_output  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_output():
    """Give every test its own output manager."""
    manager = OutputManager(verbosity=Verbosity.NORMAL)
    set_output(manager)
    yield manager
    set_output(OutputManager())


@pytest.fixture
def web_deployment():
    """The basic web Deployment: one nginx container, two replicas, no ingress."""
    return DeploymentConfig(
        app_name="web",
        namespace="default",
        containers=[Container(name="app", image="nginx:latest")],
        port=80,
        target_port=80,
        replicas=2,
    )


@pytest.fixture
def full_project():
    """A project touching every resource kind."""
    api = DeploymentConfig(
        app_name="api",
        namespace="production",
        containers=[Container(name="api", image="example/api:1.2", port=8080)],
        port=80,
        target_port=8080,
        replicas=3,
        selected_config_maps=["api-config", "missing-config"],
        selected_secrets=["api-secret"],
        ingress=IngressConfig(
            enabled=True,
            rules=[IngressRule(host="api.example.com", service_name="api-service", service_port=80)],
        ),
    )
    agent = DaemonSetConfig(
        app_name="agent",
        namespace="production",
        containers=[Container(name="agent", image="example/agent")],
        service_enabled=True,
    )
    return Project(
        deployments=[api],
        daemon_sets=[agent],
        namespaces=[Namespace(name="production", labels={"env": "prod"})],
        config_maps=[ConfigMap(name="api-config", namespace="production", data={"LOG_LEVEL": "info"})],
        secrets=[
            Secret(name="api-secret", namespace="production", data={"token": "s3cret"}),
            Secret(name="registry", namespace="production", data={"auth": "x"}),
        ],
        service_accounts=[
            ServiceAccount(
                name="api-sa",
                namespace="production",
                secrets=[ObjectReference(name="api-secret")],
                image_pull_secrets=[ObjectReference(name="registry")],
            )
        ],
        roles=[
            Role(
                metadata=RoleMetadata(name="pod-reader", namespace="production"),
                rules=[PolicyRule(api_groups=[""], resources=["pods"], verbs=["get", "list"])],
            )
        ],
        cluster_roles=[
            ClusterRole(
                metadata=RoleMetadata(name="viewer"),
                rules=[PolicyRule(api_groups=["apps"], resources=["deployments"], verbs=["get"])],
            )
        ],
        role_bindings=[
            RoleBinding(
                name="read-pods",
                namespace="production",
                role_ref=RoleRef(kind="Role", name="pod-reader"),
                subjects=[Subject(kind="ServiceAccount", name="api-sa", namespace="production")],
            ),
            RoleBinding(
                name="view-all",
                is_cluster_role_binding=True,
                role_ref=RoleRef(kind="ClusterRole", name="viewer"),
                subjects=[Subject(kind="Group", name="devs", api_group="rbac.authorization.k8s.io")],
            ),
        ],
        jobs=[
            JobConfig(
                name="migrate",
                namespace="production",
                containers=[Container(name="migrate", image="example/api:1.2")],
                completions=1,
            )
        ],
        cron_jobs=[
            CronJobConfig(
                name="cleanup",
                namespace="production",
                schedule="*/5 * * * *",
                job_template=JobConfig(containers=[Container(name="cleanup", image="busybox")]),
            )
        ],
        project_settings=ProjectSettings(name="shop", global_labels={"team": "platform"}),
    )

"""Unit tests for configuration records and resource helpers."""

from kubecomposer.models import (
    Container,
    DaemonSetConfig,
    DeploymentConfig,
    IngressConfig,
    IngressRule,
    ProjectSettings,
    duplicate_workload,
)
from kubecomposer.resource_utils import (
    is_cluster_scoped,
    is_system_namespace,
    merge_labels,
    selector_labels,
)


class TestModels:
    """Test cases for record validation and dumping."""

    def test_camel_case_aliases(self):
        """Test records accept camelCase and snake_case keys."""
        by_alias = DeploymentConfig.model_validate({"appName": "web", "targetPort": 8080})
        by_name = DeploymentConfig(app_name="web", target_port=8080)
        assert by_alias == by_name

    def test_to_json_dict(self):
        """Test dumping uses camelCase and drops None values."""
        data = DaemonSetConfig(app_name="agent").to_json_dict()
        assert data["appName"] == "agent"
        assert data["serviceEnabled"] is False
        assert "serviceAccount" not in data

    def test_unknown_keys_ignored(self):
        """Test extra keys from newer editors are ignored."""
        assert DeploymentConfig.model_validate({"appName": "web", "futureField": 1}).app_name == "web"

    def test_container_complete(self):
        """Test a container needs both a name and an image."""
        assert Container(name="a", image="b").is_complete()
        assert not Container(name="a").is_complete()

    def test_ports_valid(self):
        """Test ports must both be positive."""
        assert DeploymentConfig(port=80, target_port=8080).ports_valid()
        assert not DeploymentConfig(port=0).ports_valid()


class TestDuplicateWorkload:
    """Test cases for duplicate_workload."""

    def test_default_name(self):
        """Test the copy defaults to a -copy suffix and renames containers."""
        original = DeploymentConfig(app_name="web", containers=[Container(name="app", image="nginx")])
        copy = duplicate_workload(original)
        assert copy.app_name == "web-copy"
        assert copy.containers[0].name == "app-copy"
        assert original.containers[0].name == "app"

    def test_ingress_rules_follow_copy(self):
        """Test ingress rules point at the copy's Service."""
        original = DeploymentConfig(
            app_name="web",
            ingress=IngressConfig(enabled=True, rules=[IngressRule(service_name="web-service")]),
        )
        copy = duplicate_workload(original, "web2")
        assert copy.ingress.rules[0].service_name == "web2-service"
        assert original.ingress.rules[0].service_name == "web-service"

    def test_daemonset(self):
        """Test DaemonSets are copied as DaemonSets."""
        copy = duplicate_workload(DaemonSetConfig(app_name="agent", node_selector={"a": "b"}))
        assert isinstance(copy, DaemonSetConfig)
        assert copy.node_selector == {"a": "b"}


class TestResourceUtils:
    """Test cases for resource helpers."""

    def test_is_cluster_scoped(self):
        """Test cluster-scoped kinds."""
        assert is_cluster_scoped("ClusterRole")
        assert is_cluster_scoped("Namespace")
        assert not is_cluster_scoped("Role")

    def test_is_system_namespace(self):
        """Test the reserved namespaces."""
        assert is_system_namespace("kube-node-lease")
        assert not is_system_namespace("production")

    def test_merge_labels_precedence(self):
        """Test own labels win over global labels and the app label always wins."""
        settings = ProjectSettings(name="shop", global_labels={"team": "a", "tier": "x"})
        labels = merge_labels({"tier": "web", "app.kubernetes.io/name": "other"}, settings, app_name="web")
        assert labels == {"app.kubernetes.io/name": "web", "team": "a", "tier": "web", "project": "shop"}
        assert list(labels)[0] == "app.kubernetes.io/name"

    def test_merge_labels_without_settings(self):
        """Test merging with no settings returns a copy of own labels."""
        own = {"a": "b"}
        merged = merge_labels(own)
        assert merged == own
        assert merged is not own

    def test_selector_labels(self):
        """Test selectors use the stable subset."""
        assert selector_labels("web") == {"app.kubernetes.io/name": "web"}
        assert selector_labels("web", ProjectSettings(name="shop"))["project"] == "shop"

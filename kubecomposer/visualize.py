"""
Graphviz DOT export of a laid-out resource graph.

Node positions from the graph builder are pinned (``pos="x,y!"``) so
``neato -n`` reproduces the same layout as the editor canvas. Graphviz's y
axis points up, so y coordinates are negated.
"""

from collections import defaultdict
from typing import Dict, List, Sequence

from kubecomposer.graph import FlowNode, NodeStatus, NodeType, iter_edges


class DOTGenerator:
    """Generates Graphviz DOT format from FlowNodes."""

    # Color scheme for different node types
    KIND_COLORS: Dict[NodeType, str] = {
        NodeType.NAMESPACE: "#E8F4F8",
        NodeType.DEPLOYMENT: "#FFE5B4",
        NodeType.DAEMONSET: "#FFE5B4",
        NodeType.JOB: "#FFE5B4",
        NodeType.CRONJOB: "#FFE5B4",
        NodeType.POD: "#FFF0D0",
        NodeType.SERVICE: "#B4E5FF",
        NodeType.CONFIGMAP: "#E5FFE5",
        NodeType.SECRET: "#FFE5E5",
        NodeType.SERVICEACCOUNT: "#FFF5E5",
        NodeType.ROLE: "#F0E5FF",
        NodeType.ROLEBINDING: "#F5E5FF",
        NodeType.INGRESS: "#E5FFF5",
        NodeType.EXTERNAL: "#FFFFFF",
    }

    # Shape for different node types
    KIND_SHAPES: Dict[NodeType, str] = {
        NodeType.NAMESPACE: "ellipse",
        NodeType.DEPLOYMENT: "box",
        NodeType.DAEMONSET: "box",
        NodeType.JOB: "box",
        NodeType.CRONJOB: "box",
        NodeType.POD: "box3d",
        NodeType.SERVICE: "diamond",
        NodeType.CONFIGMAP: "note",
        NodeType.SECRET: "note",
        NodeType.SERVICEACCOUNT: "ellipse",
        NodeType.ROLE: "hexagon",
        NodeType.ROLEBINDING: "parallelogram",
        NodeType.INGRESS: "trapezium",
        NodeType.EXTERNAL: "cloud",
    }

    # Border color by health status
    STATUS_COLORS: Dict[NodeStatus, str] = {
        NodeStatus.HEALTHY: "#2E7D32",
        NodeStatus.WARNING: "#F9A825",
        NodeStatus.ERROR: "#C62828",
        NodeStatus.PENDING: "#757575",
        NodeStatus.SYNCING: "#1565C0",
    }

    # Namespace cluster colors
    NAMESPACE_COLORS = [
        "#E8F4F8",
        "#FFF5E5",
        "#E5FFE5",
        "#FFE5E5",
        "#E5E5FF",
        "#F0E5FF",
        "#E5FFF5",
        "#FFE5B4",
        "#B4E5FF",
    ]

    def __init__(self, nodes: Sequence[FlowNode]):
        self.nodes = list(nodes)

    @staticmethod
    def dot_id(node: FlowNode) -> str:
        return node.id.replace("-", "_").replace(".", "_").replace(" ", "_")

    @staticmethod
    def display_name(node: FlowNode) -> str:
        kind = node.type.value.capitalize()
        return f"{kind}\n{node.name}"

    def _node_line(self, node: FlowNode) -> str:
        label = self.display_name(node).replace('"', '\\"').replace("\n", "\\n")
        fill = self.KIND_COLORS.get(node.type, "#FFFFFF")
        shape = self.KIND_SHAPES.get(node.type, "box")
        border = self.STATUS_COLORS.get(node.status, "#000000")
        return (
            f'        {self.dot_id(node)} [label="{label}", style="filled", '
            f'fillcolor="{fill}", color="{border}", shape="{shape}", '
            f'pos="{node.position.x},{-node.position.y}!"];'
        )

    def generate(self) -> str:
        """Generate Graphviz DOT format string."""
        lines = ["digraph G {", '    rankdir="TB";', '    node [fontname="Arial"];', ""]

        namespace_to_nodes: Dict[str, List[FlowNode]] = defaultdict(list)
        for node in self.nodes:
            namespace_to_nodes[node.namespace].append(node)

        for i, namespace_name in enumerate(sorted(namespace_to_nodes)):
            color = self.NAMESPACE_COLORS[i % len(self.NAMESPACE_COLORS)]
            cluster_id = f"cluster_{namespace_name.replace('-', '_').replace('.', '_') or 'none'}"

            lines.append(f"    subgraph {cluster_id} {{")
            lines.append(f'        label="Namespace: {namespace_name or "(none)"}";')
            lines.append('        style="filled";')
            lines.append(f'        color="{color}";')
            lines.append('        fontcolor="black";')
            lines.append("")
            for node in namespace_to_nodes[namespace_name]:
                lines.append(self._node_line(node))
            lines.append("    }")
            lines.append("")

        by_id = {node.id: node for node in self.nodes}
        for edge in iter_edges(self.nodes):
            source_id = self.dot_id(by_id[edge.source])
            target_id = self.dot_id(by_id[edge.target])
            style = ' [style="dashed"]' if edge.dashed else ""
            lines.append(f"    {source_id} -> {target_id}{style};")

        lines.append("}")
        return "\n".join(lines)


def generate_visualization(nodes: Sequence[FlowNode]) -> str:
    """
    Generate a Graphviz DOT visualization from a laid-out graph.

    Args:
        nodes: FlowNodes returned by ``build_resource_graph``

    Returns:
        Graphviz DOT format string
    """
    return DOTGenerator(nodes).generate()

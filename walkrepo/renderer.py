from typing import List
from walkrepo.models import FileNode, NodeType


class Renderer:
    """
    Renderer takes a list of FileNode objects and produces text views of a walk:
      - render_tree(): shows the directory/file hierarchy in ASCII form
      - render_list(): one relative path per line, directories ending in "/"
    """
    def __init__(self, nodes: List[FileNode]):
        self.nodes = nodes

    def render_tree(self) -> str:
        """Return an ASCII tree of the FileNode hierarchy."""
        lines = []
        for root in self.nodes:
            lines.append(self._format_label(root))
            if root.children:
                lines.extend(self._format_children(root.children, prefix=""))
        return "\n".join(lines)

    def render_list(self) -> str:
        """Return the relative path of every node below the roots, in walk order."""
        lines = []
        for root in self.nodes:
            lines.extend(self._list_children(root.children or [], parent=""))
        return "\n".join(lines)

    def _format_label(self, node: FileNode) -> str:
        suffix = "/" if node.node_type == NodeType.DIRECTORY and node.name != "." else ""
        error_indicator = " [Error]" if node.metadata.get("error") else ""
        return f"{node.name}{suffix}{error_indicator}"

    def _format_children(self, nodes: List[FileNode], prefix: str) -> List[str]:
        """Recursively format child nodes with ASCII connectors."""
        formatted = []
        count = len(nodes)
        for index, node in enumerate(nodes):
            is_last = (index == count - 1)
            connector = "└── " if is_last else "├── "
            formatted.append(f"{prefix}{connector}{self._format_label(node)}")

            if node.children:
                next_prefix = prefix + ("    " if is_last else "│   ")
                formatted.extend(self._format_children(node.children, next_prefix))
        return formatted

    def _list_children(self, nodes: List[FileNode], parent: str) -> List[str]:
        paths = []
        for node in nodes:
            rel = f"{parent}{node.name}"
            if node.node_type == NodeType.DIRECTORY:
                paths.append(rel + "/")
                paths.extend(self._list_children(node.children or [], parent=rel + "/"))
            else:
                paths.append(rel)
        return paths

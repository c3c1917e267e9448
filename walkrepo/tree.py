# tree.py
from __future__ import annotations
import os
from typing import Dict, List, Optional

from walkrepo.models import EntryInfo, FileNode, NodeType, WalkOptions
from walkrepo.walker import WalkAction, walk_repo


class TreeCollector:
    """
    Visitor that assembles the entries of a walk into a FileNode hierarchy.
    Use `max_depth` to stop descending below a given number of levels.
    """

    def __init__(self, root_path: str, max_depth: Optional[int] = None):
        self.root = FileNode(name=".", path=root_path, node_type=NodeType.DIRECTORY, children=[])
        self.max_depth = max_depth
        self.entries: List[EntryInfo] = []
        self._nodes: Dict[str, FileNode] = {"": self.root}

    def __call__(self, path: str, info: EntryInfo) -> WalkAction:
        self.entries.append(info)
        parent_rel, _, _ = info.rel_path.rpartition("/")
        node = FileNode(
            name=info.name,
            path=path,
            node_type=info.node_type,
            children=[] if info.is_dir else None,
            metadata={"size": info.size, "error": info.error} if info.error else {"size": info.size},
        )
        self._nodes[parent_rel].children.append(node)
        if info.is_dir:
            self._nodes[info.rel_path] = node
            depth = info.rel_path.count("/") + 1
            if self.max_depth is not None and depth >= self.max_depth:
                return WalkAction.SKIP_SUBTREE
        return WalkAction.CONTINUE


def build_file_tree(root_path: str, options: Optional[WalkOptions] = None, max_depth: Optional[int] = None) -> FileNode:
    """Walk `root_path` and return the non-ignored entries as a FileNode tree."""
    collector = TreeCollector(os.path.abspath(root_path), max_depth=max_depth)
    walk_repo(root_path, collector, options)
    return collector.root

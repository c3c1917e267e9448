"""
where we store the
pydantic Data Structure classes
shared by the walker, the tree builder and the CLI

"""

from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum

from walkrepo.gitignore import RULE_FILE_NAME


class NodeType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class EntryInfo(BaseModel):
    """Metadata handed to a visitor for every entry that is not excluded."""
    model_config = ConfigDict(use_enum_values=True, frozen=True)

    name: str
    path: str
    rel_path: str
    node_type: NodeType
    is_symlink: bool = False
    size: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.node_type == NodeType.DIRECTORY


class WalkOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Names of per-directory rule files; several in one directory are read in name order.
    rule_files: Tuple[str, ...] = (RULE_FILE_NAME,)
    # Extra patterns applied at the walk root, before any rule file.
    exclude: Tuple[str, ...] = ()
    follow_symlinks: bool = False


class IgnoreStatus(BaseModel):
    path: str
    excluded: bool
    pattern: Optional[str] = None
    source: Optional[str] = None
    pruned_by: Optional[str] = None


class FileNode(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    path: str
    node_type: NodeType
    children: Optional[List['FileNode']] = None
    metadata: Dict[str, Any] = {}

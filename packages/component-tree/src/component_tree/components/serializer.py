import json
from typing import Any, Iterable

from .record import ComponentRecord, TreeNode

ROOT_NAME = "root"


def render_document(records: Iterable[ComponentRecord], prune_leaves: bool = False) -> dict[str, Any]:
    """Wrap the top-level trees in a single ``root`` node.

    The visualizer needs one root to hang the hierarchy from. With
    *prune_leaves* top-level components that use no other component are left
    out.
    """
    top_level = [
        TreeNode(name=record.name, children=record.tree)
        for record in records
        if record.tree or not prune_leaves
    ]
    return TreeNode(name=ROOT_NAME, children=top_level).model_dump(exclude_none=True)


def to_json(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2)

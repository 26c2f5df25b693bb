"""
Phase 3: turn the annotated registry into nested trees.

Every record gets its full descendant tree. Subtrees are memoized on the
record the first time they are built, so a component used by many parents is
only materialized once. Siblings at every level are ordered by child count,
then by name.
"""

import logging
from typing import Iterable, List, Optional, TypeVar, Union

from .errors import CycleDetectedError
from .record import RECURSIVE_MARKER, ComponentRecord, TreeNode
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T", ComponentRecord, TreeNode)


def _child_count(item: Union[ComponentRecord, TreeNode]) -> int:
    if isinstance(item, TreeNode):
        return item.child_count
    return len(item.children)


def sort_by_fewest_children(items: Iterable[T]) -> List[T]:
    """Fewest children first; ties broken alphabetically by name."""
    return sorted(items, key=lambda item: (_child_count(item), item.name))


class TreeAssembler:
    """Materializes the tree of every record held by a registry.

    The registry must no longer change while the assembler runs.
    """

    def __init__(self, registry: ComponentRegistry) -> None:
        self._registry = registry
        self._in_progress: List[str] = []
        # shallowest path index a dropped edge pointed back to, while unwinding
        self._cut_depth: Optional[int] = None
        self.cycles: List[CycleDetectedError] = []

    def assemble(self) -> List[ComponentRecord]:
        """Build every tree and return the records in output order.

        An edge that would close a cycle between distinct components is
        logged, kept in ``cycles`` and left out of the tree; every other edge
        is kept.
        """
        ordered = sort_by_fewest_children(self._registry)
        for record in ordered:
            record.tree = self.materialize(record)
        return ordered

    def materialize(self, record: ComponentRecord) -> List[TreeNode]:
        """Return the descendant tree of *record*, building it on first use.

        Raises:
            CycleDetectedError: if *record* is already being materialized
                further up the current path.
        """
        if record.tree:
            return record.tree

        if record.name in self._in_progress:
            start = self._in_progress.index(record.name)
            raise CycleDetectedError(self._in_progress[start:] + [record.name])

        depth = len(self._in_progress)
        outer_cut, self._cut_depth = self._cut_depth, None
        self._in_progress.append(record.name)
        try:
            nodes = [node for node in (self._child_node(record, name) for name in record.children) if node is not None]
        finally:
            self._in_progress.pop()
            cut = self._cut_depth
            self._cut_depth = outer_cut

        nodes = sort_by_fewest_children(nodes)
        if cut is not None and cut < depth:
            # cut short by a cycle through an ancestor; only valid on this path
            self._note_cut(cut)
            return nodes

        record.tree = nodes
        return record.tree

    def _note_cut(self, depth: int) -> None:
        if self._cut_depth is None or depth < self._cut_depth:
            self._cut_depth = depth

    def _child_node(self, parent: ComponentRecord, child_name: str) -> Optional[TreeNode]:
        # self-reference must be settled before anything else or we never return
        if parent.recursive and child_name == parent.name:
            return TreeNode(name=f"{child_name}{RECURSIVE_MARKER}")

        child = self._registry.find_by_name(child_name)
        if child is None:
            logger.warning("%s references unknown component %s", parent.name, child_name)
            return None

        if child.tree:
            return TreeNode(name=child.name, children=sort_by_fewest_children(child.tree))

        if not child.children:
            return TreeNode(name=child.name)

        try:
            return TreeNode(name=child.name, children=self.materialize(child))
        except CycleDetectedError as exc:
            logger.error("Dropping %s -> %s: %s", parent.name, child.name, exc)
            self.cycles.append(exc)
            self._note_cut(self._in_progress.index(child.name))
            return None


def assemble_trees(registry: ComponentRegistry) -> List[ComponentRecord]:
    return TreeAssembler(registry).assemble()

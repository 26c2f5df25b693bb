from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

RECURSIVE_MARKER = " (recursive)"


class TreeNode(BaseModel):
    name: str
    children: Optional[List[TreeNode]] = None

    @field_validator("children")
    @classmethod
    def empty_children_are_absent(cls, v: Optional[List[TreeNode]]) -> Optional[List[TreeNode]]:
        """A node without children carries no ``children`` key at all."""
        return v or None

    @property
    def child_count(self) -> int:
        return len(self.children) if self.children else 0


class ComponentRecord(BaseModel):
    """Identity and relationship data for one discovered component.

    ``name`` and ``template_path`` stay ``None`` while a declaration file is
    being read; the registry only accepts a record once both are known.
    """

    name: Optional[str] = None
    selector: Optional[str] = None
    template_path: Optional[str] = None
    controller_path: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    recursive: bool = False
    tree: List[TreeNode] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        # selector is not required
        return bool(self.name and self.template_path)

    def partial(self) -> dict:
        return self.model_dump(include={"name", "selector", "template_path", "controller_path"})


class ScanFailure(BaseModel):
    path: str
    error: str


class PhaseReport(BaseModel):
    """Outcome of one scan phase; a failed file never stops its siblings."""

    phase: str
    scanned: int = 0
    failures: List[ScanFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def add_failure(self, path: str, error: BaseException) -> None:
        self.failures.append(ScanFailure(path=path, error=str(error)))

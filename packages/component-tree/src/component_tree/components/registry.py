import logging
import re
from typing import Iterator, Optional

from .errors import IncompleteRecordError, TemplatePathConflictError
from .record import ComponentRecord

logger = logging.getLogger(__name__)


class ComponentRegistry:
    """Every component record discovered during one build.

    Created empty per run and handed by reference to the scanners and the
    assembler. Records are keyed by name; a second record with the same name
    replaces the first.

    Example::

        registry = ComponentRegistry()
        registry.add(ComponentRecord(name="JobsListComponent",
                                     selector="app-jobs-list",
                                     template_path="src/app/jobs/jobs-list.component.html"))
        registry.find_by_selector("app-jobs-list").name
    """

    def __init__(self) -> None:
        self._by_name: dict[str, ComponentRecord] = {}
        self._by_selector: dict[str, ComponentRecord] = {}
        self._selector_pattern: Optional[re.Pattern] = None
        self._pattern_stale = True

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def add(self, record: ComponentRecord) -> None:
        """Register a finalized record.

        Raises:
            IncompleteRecordError: if ``name`` or ``template_path`` is missing.
            TemplatePathConflictError: if the template path overlaps the
                template of a differently named component.
        """
        if not record.is_complete:
            raise IncompleteRecordError(
                f"Record from {record.controller_path} needs a name and a template path"
            )

        for existing in self._by_name.values():
            if existing.name == record.name:
                continue
            if record.template_path in existing.template_path or existing.template_path in record.template_path:
                raise TemplatePathConflictError(record.template_path, existing.name, record.name)

        replaced = self._by_name.pop(record.name, None)
        if replaced is not None:
            logger.warning(
                "Component %s declared twice (%s, %s); keeping the last one",
                record.name,
                replaced.controller_path,
                record.controller_path,
            )
        self._by_name[record.name] = record
        self._reindex_selectors()
        self._pattern_stale = True

    def _reindex_selectors(self) -> None:
        self._by_selector = {}
        for record in self._by_name.values():
            if record.selector:
                self._by_selector.setdefault(record.selector, record)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_name(self, name: str) -> Optional[ComponentRecord]:
        return self._by_name.get(name)

    def find_by_selector(self, selector: str) -> Optional[ComponentRecord]:
        return self._by_selector.get(selector)

    def find_by_template_path(self, path: str) -> Optional[ComponentRecord]:
        """Return the record whose template path occurs inside *path*."""
        path = path.replace("\\", "/")
        for record in self._by_name.values():
            if record.template_path in path:
                return record
        return None

    def selector_pattern(self) -> Optional[re.Pattern]:
        """Compiled pattern matching an opening tag of any known selector.

        Looks like ``<(app\\-jobs\\-list|app\\-root)(?=[\\s>]|$)``; the
        lookahead stops ``app-quick-launch`` from matching the start of
        ``app-quick-launch-content``. ``None`` when no record has a selector.
        """
        if self._pattern_stale:
            selectors = sorted(self._by_selector, key=lambda s: (-len(s), s))
            if selectors:
                alternation = "|".join(re.escape(s) for s in selectors)
                self._selector_pattern = re.compile(rf"<({alternation})(?=[\s>]|$)")
            else:
                self._selector_pattern = None
            self._pattern_stale = False
        return self._selector_pattern

    # ------------------------------------------------------------------
    # Collection protocol
    # ------------------------------------------------------------------

    def names(self) -> list[str]:
        return list(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[ComponentRecord]:
        return iter(list(self._by_name.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

"""
Phase 2: read markup files and record which components each one uses.

Must only run after the metadata phase has finished, because the selector
pattern is built from whatever the registry holds at that point.
"""

import asyncio
import logging
import re
from typing import Iterable, List, Optional, Tuple

from .errors import UsageScanError
from .record import ComponentRecord, PhaseReport
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)


def _read_selector_matches(path: str, pattern: re.Pattern) -> List[str]:
    """Every selector opened in *path*, in document order, repeats included."""
    matched: List[str] = []
    with open(path, encoding="utf-8", errors="replace") as fh:
        for line in fh:
            matched.extend(m.group(1) for m in pattern.finditer(line))
    return matched


def _apply_matches(owner: ComponentRecord, matched: Iterable[str], registry: ComponentRegistry) -> None:
    children: List[str] = []

    for selector in matched:
        child = registry.find_by_selector(selector)
        if child is None:
            # not a component tag
            continue
        if child.name == owner.name:
            owner.recursive = True
        children.append(child.name)

    if children:
        owner.children = list(dict.fromkeys(children))


def _read_usage(
    path: str, registry: ComponentRegistry, pattern: Optional[re.Pattern]
) -> Optional[Tuple[ComponentRecord, List[str]]]:
    """The owner of the markup at *path* and the selectors it opens.

    Returns ``None`` when no registered component points at this template.
    """
    owner = registry.find_by_template_path(path)
    if owner is None:
        logger.warning("No component owns template %s; skipping", path)
        return None
    if pattern is None:
        return owner, []
    try:
        return owner, _read_selector_matches(path, pattern)
    except OSError as exc:
        raise UsageScanError(path, exc) from exc


def scan_markup(path: str, registry: ComponentRegistry) -> Optional[str]:
    """Record the children used by the markup file at *path*.

    Returns the owning component's name, or ``None`` when no registered
    component points at this template.
    """
    found = _read_usage(path, registry, registry.selector_pattern())
    if found is None:
        return None
    owner, matched = found
    _apply_matches(owner, matched, registry)
    return owner.name


async def scan_markups(paths: Iterable[str], registry: ComponentRegistry) -> PhaseReport:
    """Scan every markup file concurrently and annotate *registry* in place.

    File reads happen in worker threads; each record is updated on the event
    loop thread once its file has been read in full.
    """
    paths = list(paths)
    report = PhaseReport(phase="usage", scanned=len(paths))

    # the registry is complete by now, so one pattern serves every file
    pattern = registry.selector_pattern()

    async def _scan(path: str) -> None:
        found = await asyncio.to_thread(_read_usage, path, registry, pattern)
        if found is not None:
            owner, matched = found
            _apply_matches(owner, matched, registry)

    results = await asyncio.gather(*(_scan(p) for p in paths), return_exceptions=True)

    for path, result in zip(paths, results):
        if isinstance(result, BaseException):
            logger.error("%s", result)
            report.add_failure(path, result)

    logger.info("Usage phase: scanned %d markup files (%d failed)", len(paths), len(report.failures))
    return report

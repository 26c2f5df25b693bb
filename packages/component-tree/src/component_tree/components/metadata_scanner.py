"""
Phase 1: read declaration files and register one component per file.

Each file is read line by line in a worker thread. Nothing before the
``@Component(`` marker is looked at, so helper classes declared above the
component cannot leak their names in. Reading stops as soon as both the class
name and the template path are known.
"""

import asyncio
import logging
from typing import Iterable, Optional

from .errors import ComponentTreeError, MetadataExtractionError, RegistryError
from .patterns import DeclarationExtractor
from .record import ComponentRecord, PhaseReport
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)


def scan_declaration(path: str, extractor: Optional[DeclarationExtractor] = None) -> ComponentRecord:
    """Extract the component record declared in *path*.

    Raises:
        MetadataExtractionError: if the file ends before both a class name and
            a template path were captured.
        OSError: if the file cannot be read.
    """
    extractor = extractor or DeclarationExtractor()
    record = ComponentRecord(controller_path=path)
    in_declaration = False

    with open(path, encoding="utf-8", errors="replace") as fh:
        for line in fh:
            if not in_declaration:
                if not extractor.opens_declaration(line):
                    continue
                in_declaration = True

            if record.selector is None:
                record.selector = extractor.selector(line)
            if record.template_path is None:
                record.template_path = extractor.template_path(line, path)
            if record.name is None:
                record.name = extractor.name(line)

            if record.is_complete:
                return record

    raise MetadataExtractionError(path, record.partial())


async def scan_declarations(
    paths: Iterable[str],
    registry: ComponentRegistry,
    extractor: Optional[DeclarationExtractor] = None,
) -> PhaseReport:
    """Scan every declaration file concurrently and fill *registry*.

    Returns once every file has been handled, which is the barrier the usage
    phase waits on. Failed files are logged and listed in the report; records
    from the other files are registered regardless.

    Records are registered in the order of *paths*, not in the order reads
    complete, so duplicate names and shared selectors resolve the same way on
    every run.
    """
    extractor = extractor or DeclarationExtractor()
    paths = list(paths)
    report = PhaseReport(phase="metadata", scanned=len(paths))

    async def _scan(path: str) -> ComponentRecord:
        return await asyncio.to_thread(scan_declaration, path, extractor)

    results = await asyncio.gather(*(_scan(p) for p in paths), return_exceptions=True)

    for path, result in zip(paths, results):
        if isinstance(result, BaseException):
            if isinstance(result, ComponentTreeError):
                logger.error("%s", result)
            else:
                logger.error("Failed to read component metadata from %s: %s", path, result)
            report.add_failure(path, result)
            continue
        try:
            registry.add(result)
        except RegistryError as exc:
            logger.error("%s", exc)
            report.add_failure(path, exc)

    logger.info(
        "Metadata phase: %d components registered from %d files (%d failed)",
        len(registry),
        len(paths),
        len(report.failures),
    )
    return report

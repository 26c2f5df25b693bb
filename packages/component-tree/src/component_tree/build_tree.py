"""
ComponentTree - scans a UI source tree and produces a component-dependency tree.

Three phases run in order, each finishing before the next starts:

1. metadata: every ``*.component.ts`` file is read for its selector, template
   path and class name;
2. usage: every ``*.component.html`` file is searched for the selectors of
   known components;
3. assembly: the registry is turned into nested trees.

The result is one JSON document shaped for a d3 hierarchy::

    {
      "name": "root",
      "children": [
        {"name": "JobsListComponent", "children": [{"name": "JobCardComponent"}]},
        ...
      ]
    }

Usage (CLI):
    component-tree build portal [wire ...] [--source <dir>] [--output <file.json>]

Usage (library):
    from component_tree.build_tree import build_tree
    result = build_tree("/path/to/portal/src/app")
    result.document
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from component_tree.components import (
    ComponentRegistry,
    DeclarationExtractor,
    PhaseReport,
    TreeAssembler,
    find_files,
    render_document,
    scan_declarations,
    scan_markups,
    to_json,
)
from component_tree.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class BuildResult(BaseModel):
    source_root: str
    components: int = 0
    metadata: PhaseReport
    usage: PhaseReport
    cycles: List[str] = Field(default_factory=list)
    document: dict[str, Any] = Field(default_factory=dict)
    output_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.metadata.ok and self.usage.ok and not self.cycles

    def summary(self) -> dict[str, Any]:
        return {
            "source_root": self.source_root,
            "components": self.components,
            "metadata_failures": len(self.metadata.failures),
            "usage_failures": len(self.usage.failures),
            "cycles": self.cycles,
            "output_path": self.output_path,
            "ok": self.ok,
        }


async def collect_components(
    root: str, settings: Optional[Settings] = None
) -> tuple[ComponentRegistry, PhaseReport, PhaseReport]:
    """Run the metadata and usage phases over *root*.

    Raises:
        ValueError: If root doesn't exist or isn't a directory.
    """
    settings = settings or default_settings
    registry = ComponentRegistry()
    extractor = DeclarationExtractor(anchor=settings.template_anchor)

    logger.info("Getting component data from %s", root)
    declarations = find_files(root, settings.declaration_suffix)
    metadata = await scan_declarations(declarations, registry, extractor)

    # usage scanning needs every selector, so it only starts here
    logger.info("Finding child components")
    markups = find_files(root, settings.markup_suffix)
    usage = await scan_markups(markups, registry)

    return registry, metadata, usage


async def build_tree_async(root: str, settings: Optional[Settings] = None) -> BuildResult:
    """Scan *root* and return the assembled document with the phase reports."""
    settings = settings or default_settings
    registry, metadata, usage = await collect_components(root, settings)

    logger.info("Building trees for %d components", len(registry))
    assembler = TreeAssembler(registry)
    ordered = assembler.assemble()

    return BuildResult(
        source_root=root,
        components=len(registry),
        metadata=metadata,
        usage=usage,
        cycles=[str(exc) for exc in assembler.cycles],
        document=render_document(ordered, prune_leaves=settings.prune_leaves),
    )


def build_tree(root: str, settings: Optional[Settings] = None) -> BuildResult:
    """Scan *root* and return the assembled document with the phase reports."""
    return asyncio.run(build_tree_async(root, settings))


def write_document(result: BuildResult, path: str) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_json(result.document))
    result.output_path = path
    logger.info("All done! File written to %s", path)
    return path


async def build_app_async(
    app: str,
    settings: Optional[Settings] = None,
    source: Optional[str] = None,
    output: Optional[str] = None,
) -> BuildResult:
    """Build and write the document of one logical application."""
    settings = settings or default_settings
    result = await build_tree_async(source or settings.source_root(app), settings)
    write_document(result, output or settings.output_path(app))
    return result


def build_app(
    app: str,
    settings: Optional[Settings] = None,
    source: Optional[str] = None,
    output: Optional[str] = None,
) -> BuildResult:
    return asyncio.run(build_app_async(app, settings, source, output))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Extract a component-dependency tree from a UI source tree."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build the tree document of one or more apps")
    build.add_argument("apps", nargs="+", metavar="APP", help="Logical application name")
    build.add_argument(
        "--source",
        "-s",
        metavar="DIR",
        help="Directory to scan instead of the configured source template",
    )
    build.add_argument(
        "--output",
        "-o",
        metavar="FILE",
        help="Write JSON output to FILE instead of the configured output directory",
    )
    build.add_argument(
        "--stdout",
        action="store_true",
        help="Print the JSON document instead of writing it",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=default_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if len(args.apps) > 1 and (args.source or args.output):
        parser.error("--source and --output only apply to a single app")
    if args.stdout and args.output:
        parser.error("--stdout and --output cannot be combined")

    status = 0
    for app in args.apps:
        try:
            if args.stdout:
                result = build_tree(args.source or default_settings.source_root(app))
                print(to_json(result.document))
            else:
                result = build_app(app, source=args.source, output=args.output)
                print(f"Tree for {app} written to {result.output_path} ({result.components} components)")
        except ValueError as exc:
            logger.error("%s", exc)
            return 2

        if not result.ok:
            logger.warning("Build of %s finished with errors: %s", app, json.dumps(result.summary()))
            status = 1

    return status


if __name__ == "__main__":
    sys.exit(main())

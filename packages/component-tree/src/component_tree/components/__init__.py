from .assembler import TreeAssembler, assemble_trees, sort_by_fewest_children
from .errors import (
    ComponentTreeError,
    CycleDetectedError,
    IncompleteRecordError,
    MetadataExtractionError,
    RegistryError,
    TemplatePathConflictError,
    UsageScanError,
)
from .files import find_files
from .metadata_scanner import scan_declaration, scan_declarations
from .patterns import DeclarationExtractor, normalize_template_path
from .record import ComponentRecord, PhaseReport, ScanFailure, TreeNode
from .registry import ComponentRegistry
from .serializer import render_document, to_json
from .usage_scanner import scan_markup, scan_markups

__all__ = [
    "ComponentRecord",
    "ComponentRegistry",
    "ComponentTreeError",
    "CycleDetectedError",
    "DeclarationExtractor",
    "IncompleteRecordError",
    "MetadataExtractionError",
    "PhaseReport",
    "RegistryError",
    "ScanFailure",
    "TemplatePathConflictError",
    "TreeAssembler",
    "TreeNode",
    "UsageScanError",
    "assemble_trees",
    "find_files",
    "normalize_template_path",
    "render_document",
    "scan_declaration",
    "scan_declarations",
    "scan_markup",
    "scan_markups",
    "sort_by_fewest_children",
    "to_json",
]

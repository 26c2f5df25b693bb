from typing import Any


class ComponentTreeError(Exception):
    """Base class for every error raised while building a component tree."""


class MetadataExtractionError(ComponentTreeError):
    """A declaration file ended before both a name and a template path were found."""

    def __init__(self, path: str, partial: dict[str, Any]) -> None:
        self.path = path
        self.partial = partial
        super().__init__(
            f"Failed {path}: captured {partial}. "
            "Make sure the component metadata follows the standard layout."
        )


class UsageScanError(ComponentTreeError):
    """A markup file could not be read."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to scan markup {path}: {cause}")


class RegistryError(ComponentTreeError):
    """The registry refused a record."""


class IncompleteRecordError(RegistryError):
    pass


class TemplatePathConflictError(RegistryError):
    """Two components resolve to overlapping template paths."""

    def __init__(self, template_path: str, existing: str, incoming: str) -> None:
        self.template_path = template_path
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Template path {template_path!r} of {incoming} overlaps "
            f"the template of {existing}"
        )


class CycleDetectedError(ComponentTreeError):
    """Two or more distinct components reference each other in a loop."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("Component cycle detected: " + " -> ".join(cycle))

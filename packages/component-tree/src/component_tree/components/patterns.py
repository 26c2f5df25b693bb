"""
Line patterns for component declaration files.

Declaration files are matched line by line, not parsed. Everything that knows
what a declaration looks like lives in this module, behind
:class:`DeclarationExtractor`, so a grammar-aware parser can take its place
without touching the registry or the assembler.

A typical declaration::

    @Component({
      selector: 'app-jobs-list',
      templateUrl: './jobs-list.component.html',
    })
    export class JobsListComponent implements OnInit {
"""

import posixpath
import re
from typing import Optional

DEFAULT_ANCHOR = "src/app"

COMPONENT_MARKER_RE = re.compile(r"@Component\(")
SELECTOR_RE = re.compile(r"""selector:\s*['"](.+?)['"]""")
# captures "./jobs-list.component.html" from "templateUrl: './jobs-list.component.html',"
TEMPLATE_URL_RE = re.compile(r"""templateUrl:\s*['"](\.{1,2}/[^'"]+)['"]""")
# captures "MyComponent" from "export class MyComponent implements/extends/{"
CLASS_NAME_RE = re.compile(r"export\s+class\s+([A-Za-z_$][\w$]*)\s*(?:implements\b|extends\b|<|\{)")


def is_component_marker(line: str) -> bool:
    return COMPONENT_MARKER_RE.search(line) is not None


def _first_group(pattern: re.Pattern, line: str) -> Optional[str]:
    match = pattern.search(line)
    return match.group(1) if match else None


def extract_selector(line: str) -> Optional[str]:
    return _first_group(SELECTOR_RE, line)


def extract_template_reference(line: str) -> Optional[str]:
    return _first_group(TEMPLATE_URL_RE, line)


def extract_class_name(line: str) -> Optional[str]:
    return _first_group(CLASS_NAME_RE, line)


def normalize_template_path(controller_path: str, reference: str, anchor: str = DEFAULT_ANCHOR) -> str:
    """Resolve *reference* against the declaration file and root it at *anchor*.

    ``/home/me/portal/src/app/jobs/jobs.component.ts`` with ``./jobs.component.html``
    becomes ``src/app/jobs/jobs.component.html``. When *anchor* is not part of
    the path the joined, normalized path is returned as is.
    """
    controller_dir = posixpath.dirname(controller_path.replace("\\", "/"))
    joined = posixpath.normpath(posixpath.join(controller_dir, reference))

    anchor = anchor.strip("/")
    if not anchor:
        return joined
    idx = joined.rfind(f"/{anchor}/")
    if idx >= 0:
        return joined[idx + 1:]
    return joined


class DeclarationExtractor:
    """Pulls component fields out of declaration-file lines.

    Stateless; one instance can be shared across every scan task.
    """

    def __init__(self, anchor: str = DEFAULT_ANCHOR) -> None:
        self.anchor = anchor

    def opens_declaration(self, line: str) -> bool:
        return is_component_marker(line)

    def selector(self, line: str) -> Optional[str]:
        return extract_selector(line)

    def template_path(self, line: str, controller_path: str) -> Optional[str]:
        reference = extract_template_reference(line)
        if reference is None:
            return None
        return normalize_template_path(controller_path, reference, self.anchor)

    def name(self, line: str) -> Optional[str]:
        return extract_class_name(line)

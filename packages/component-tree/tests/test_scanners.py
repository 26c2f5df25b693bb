"""Tests for the metadata and usage scan phases.

The portal fixture (``fixtures/case2_portal``) mirrors a small Angular app:

case2_portal/src/app/
├── app.component.ts / .html                 AppComponent -> app-jobs-list
├── broken/broken.component.ts               inline template, no templateUrl
├── jobs-list/jobs-list.component.ts / .html JobsListComponent
│   └── job-card/job-card.component.ts / .html
├── quick-launch/quick-launch(-content).component.ts / .html
├── shared/status-badge/status-badge.component.ts / .html
└── tree-view/tree-view.component.ts / .html  uses its own selector
"""

import asyncio
import os
import time
from unittest.mock import patch

import pytest

from component_tree.components import (
    ComponentRecord,
    ComponentRegistry,
    MetadataExtractionError,
    UsageScanError,
    find_files,
    scan_declaration,
    scan_declarations,
    scan_markup,
    scan_markups,
)

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")
PORTAL = os.path.join(FIXTURES, "case2_portal")
PORTAL_APP = os.path.join(PORTAL, "src", "app")


def portal_registry() -> tuple[ComponentRegistry, object]:
    registry = ComponentRegistry()
    report = asyncio.run(scan_declarations(find_files(PORTAL, ".component.ts"), registry))
    return registry, report


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

class TestFindFiles:
    def test_skips_node_modules(self):
        files = find_files(PORTAL, ".component.ts")
        assert not any("node_modules" in f for f in files)
        assert len(files) == 8

    def test_sorted_absolute_paths(self):
        files = find_files(PORTAL, ".component.html")
        assert files == sorted(files)
        assert all(os.path.isabs(f) for f in files)

    def test_accepts_suffix_tuple(self):
        files = find_files(PORTAL_APP, (".component.ts", ".component.html"))
        assert len(files) == 15

    def test_missing_root(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            find_files(tmp_path / "nope", ".component.ts")

    def test_root_is_file(self, tmp_path):
        target = tmp_path / "a.txt"
        target.write_text("x")
        with pytest.raises(ValueError, match="not a directory"):
            find_files(target, ".component.ts")


# ---------------------------------------------------------------------------
# Metadata scanner
# ---------------------------------------------------------------------------

class TestScanDeclaration:
    def test_extracts_fields(self):
        path = os.path.join(PORTAL_APP, "jobs-list", "jobs-list.component.ts")
        record = scan_declaration(path)
        assert record.name == "JobsListComponent"
        assert record.selector == "app-jobs-list"
        assert record.template_path == "src/app/jobs-list/jobs-list.component.html"
        assert record.controller_path == path
        assert record.children == []
        assert record.recursive is False

    def test_ignores_classes_before_marker(self):
        record = scan_declaration(os.path.join(PORTAL_APP, "jobs-list", "jobs-list.component.ts"))
        assert record.name != "JobsListHelper"

    def test_double_quoted_fields(self):
        record = scan_declaration(
            os.path.join(PORTAL_APP, "jobs-list", "job-card", "job-card.component.ts")
        )
        assert record.selector == "app-job-card"
        assert record.template_path == "src/app/jobs-list/job-card/job-card.component.html"

    def test_missing_template_fails_with_partial_data(self):
        path = os.path.join(PORTAL_APP, "broken", "broken.component.ts")
        with pytest.raises(MetadataExtractionError) as excinfo:
            scan_declaration(path)
        assert excinfo.value.path == path
        assert excinfo.value.partial["name"] == "BrokenComponent"
        assert excinfo.value.partial["selector"] == "app-broken"
        assert excinfo.value.partial["template_path"] is None

    def test_no_marker_fails(self, tmp_path):
        target = tmp_path / "service.component.ts"
        target.write_text("export class NotAComponent {\n  templateUrl: './x.html'\n}\n")
        with pytest.raises(MetadataExtractionError):
            scan_declaration(str(target))

    def test_stops_after_first_declaration(self, tmp_path):
        target = tmp_path / "src" / "app" / "two.component.ts"
        target.parent.mkdir(parents=True)
        target.write_text(
            "@Component({\n"
            "  selector: 'app-one',\n"
            "  templateUrl: './one.component.html',\n"
            "})\n"
            "export class OneComponent {}\n"
            "@Component({\n"
            "  selector: 'app-two',\n"
            "  templateUrl: './two.component.html',\n"
            "})\n"
            "export class TwoComponent {}\n"
        )
        record = scan_declaration(str(target))
        assert record.name == "OneComponent"
        assert record.template_path == "src/app/one.component.html"


class TestScanDeclarations:
    def setup_method(self):
        self.registry, self.report = portal_registry()

    def test_registers_every_valid_component(self):
        assert sorted(self.registry.names()) == [
            "AppComponent",
            "JobCardComponent",
            "JobsListComponent",
            "QuickLaunchComponent",
            "QuickLaunchContentComponent",
            "StatusBadgeComponent",
            "TreeViewComponent",
        ]

    def test_failure_is_reported_not_raised(self):
        assert self.report.phase == "metadata"
        assert self.report.scanned == 8
        assert not self.report.ok
        assert len(self.report.failures) == 1
        assert self.report.failures[0].path.endswith("broken.component.ts")

    def test_unreadable_file_is_reported(self, tmp_path):
        registry = ComponentRegistry()
        missing = str(tmp_path / "gone.component.ts")
        report = asyncio.run(scan_declarations([missing], registry))
        assert len(report.failures) == 1
        assert len(registry) == 0

    def test_template_conflict_is_reported(self, tmp_path):
        app = tmp_path / "src" / "app"
        app.mkdir(parents=True)
        for name in ("first", "second"):
            (app / f"{name}.component.ts").write_text(
                "@Component({\n"
                f"  selector: 'app-{name}',\n"
                "  templateUrl: './shared.component.html',\n"
                "})\n"
                f"export class {name.title()}Component {{}}\n"
            )
        registry = ComponentRegistry()
        report = asyncio.run(scan_declarations(find_files(tmp_path, ".component.ts"), registry))
        assert len(registry) == 1
        assert len(report.failures) == 1
        assert "overlaps" in report.failures[0].error


class TestRegistrationOrder:
    """Registration follows input order, whichever read finishes first."""

    def write_header(
        self, root, folder: str, class_name: str = "HeaderComponent", template: str = "./header.component.html"
    ) -> str:
        target = root / "src" / "app" / folder / "header.component.ts"
        target.parent.mkdir(parents=True)
        target.write_text(
            "@Component({\n"
            f"  selector: 'app-header-{folder}',\n"
            f"  templateUrl: '{template}',\n"
            "})\n"
            f"export class {class_name} {{}}\n"
        )
        return str(target)

    def scan_with_slow_read(self, paths: list[str], slow: str) -> tuple[ComponentRegistry, object]:
        def delayed(path, extractor=None):
            if path == slow:
                time.sleep(0.2)
            return scan_declaration(path, extractor)

        registry = ComponentRegistry()
        with patch("component_tree.components.metadata_scanner.scan_declaration", side_effect=delayed):
            report = asyncio.run(scan_declarations(paths, registry))
        return registry, report

    @pytest.mark.parametrize("slow", [0, 1])
    def test_duplicate_name_resolved_by_path_order(self, tmp_path, slow):
        paths = [self.write_header(tmp_path, "a"), self.write_header(tmp_path, "b")]
        registry, report = self.scan_with_slow_read(paths, paths[slow])
        assert report.ok
        assert len(registry) == 1
        assert registry.find_by_name("HeaderComponent").selector == "app-header-b"

    @pytest.mark.parametrize("slow", [0, 1])
    def test_template_conflict_rejects_later_path(self, tmp_path, slow):
        paths = [
            self.write_header(tmp_path, "a", "HeaderComponent", "../shared.component.html"),
            self.write_header(tmp_path, "b", "OtherHeaderComponent", "../shared.component.html"),
        ]
        registry, report = self.scan_with_slow_read(paths, paths[slow])
        assert registry.names() == ["HeaderComponent"]
        assert [f.path for f in report.failures] == [paths[1]]
        assert "overlaps" in report.failures[0].error


# ---------------------------------------------------------------------------
# Usage scanner
# ---------------------------------------------------------------------------

class TestScanMarkups:
    def setup_method(self):
        self.registry, _ = portal_registry()
        self.report = asyncio.run(
            scan_markups(find_files(PORTAL, ".component.html"), self.registry)
        )

    def children(self, name: str) -> list[str]:
        return self.registry.find_by_name(name).children

    def test_report(self):
        assert self.report.phase == "usage"
        assert self.report.scanned == 7
        assert self.report.ok

    def test_direct_child(self):
        assert self.children("AppComponent") == ["JobsListComponent"]

    def test_non_component_tags_ignored(self):
        # <router-outlet> is not a registered selector
        assert "router-outlet" not in self.children("AppComponent")

    def test_children_deduplicated(self):
        assert self.children("JobCardComponent") == ["StatusBadgeComponent"]

    def test_multiline_tag_and_prefix_selectors(self):
        assert sorted(self.children("JobsListComponent")) == [
            "JobCardComponent",
            "QuickLaunchContentComponent",
        ]

    def test_leaf_has_no_children(self):
        assert self.children("StatusBadgeComponent") == []
        assert self.children("QuickLaunchComponent") == []

    def test_self_reference_marks_recursive(self):
        tree_view = self.registry.find_by_name("TreeViewComponent")
        assert tree_view.recursive is True
        assert sorted(tree_view.children) == ["StatusBadgeComponent", "TreeViewComponent"]

    def test_other_components_not_recursive(self):
        assert not self.registry.find_by_name("JobsListComponent").recursive


class TestScanMarkup:
    def test_unowned_template_skipped(self, tmp_path):
        registry, _ = portal_registry()
        stray = tmp_path / "stray.component.html"
        stray.write_text("<app-jobs-list></app-jobs-list>")
        assert scan_markup(str(stray), registry) is None

    def test_sync_scan_matches_phase_result(self):
        registry, _ = portal_registry()
        path = os.path.join(PORTAL_APP, "tree-view", "tree-view.component.html")
        assert scan_markup(path, registry) == "TreeViewComponent"
        assert registry.find_by_name("TreeViewComponent").recursive

    def test_no_selectors_in_registry(self, tmp_path):
        registry = ComponentRegistry()
        registry.add(
            ComponentRecord(name="AppComponent", template_path="src/app/app.component.html")
        )
        markup = tmp_path / "src" / "app" / "app.component.html"
        markup.parent.mkdir(parents=True)
        markup.write_text("<app-root></app-root>")
        assert scan_markup(str(markup), registry) == "AppComponent"
        assert registry.find_by_name("AppComponent").children == []

    def test_unreadable_owned_template_raises(self, tmp_path):
        registry = ComponentRegistry()
        registry.add(
            ComponentRecord(
                name="AppComponent",
                selector="app-root",
                template_path="src/app/app.component.html",
            )
        )
        missing = tmp_path / "src" / "app" / "app.component.html"
        with pytest.raises(UsageScanError):
            scan_markup(str(missing), registry)

    def test_unreadable_template_reported_by_phase(self, tmp_path):
        registry = ComponentRegistry()
        registry.add(
            ComponentRecord(
                name="AppComponent",
                selector="app-root",
                template_path="src/app/app.component.html",
            )
        )
        missing = str(tmp_path / "src" / "app" / "app.component.html")
        report = asyncio.run(scan_markups([missing], registry))
        assert [f.path for f in report.failures] == [missing]

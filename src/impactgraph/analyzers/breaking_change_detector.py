"""Breaking Change Detector - Finds removed or altered exports that have importers."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..parsers.declaration_extractor import (
    DeclarationExtractor, ExportKind, ExportReference, ImportKind
)
from .dependency_graph_builder import DependencyGraph, DependencyGraphBuilder

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kinds of breaking changes."""
    REMOVED = "removed"
    SIGNATURE_CHANGED = "signature-changed"


@dataclass
class BreakingChange:
    """A removed or incompatibly altered export with at least one importer."""
    file: str
    symbol: str
    change_type: ChangeKind
    affected_files: List[str] = field(default_factory=list)
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "symbol": self.symbol,
            "change_type": self.change_type.value,
            "affected_files": list(self.affected_files),
            "suggestion": self.suggestion,
        }


def parameter_count(declaration_line: str) -> int:
    """Coarse parameter count: separators on the raw declaration line, plus one.

    Multi-line parameter lists and commas inside generics, defaults or
    destructuring patterns skew the count; it is only a change signal.
    """
    return declaration_line.count(",") + 1


def _first_by_name(exports: List[ExportReference]) -> Dict[str, ExportReference]:
    by_name = {}
    for export in exports:
        by_name.setdefault(export.symbol_name, export)
    return by_name


def _line_at(lines: List[str], line_number: int) -> str:
    if 0 < line_number <= len(lines):
        return lines[line_number - 1]
    return ""


class BreakingChangeDetector:
    """Diffs the exports of two versions of a file against the dependents index."""

    def __init__(self, graph_builder: DependencyGraphBuilder,
                 extractor: Optional[DeclarationExtractor] = None):
        self.graph_builder = graph_builder
        self.extractor = extractor or graph_builder.extractor

    def detect_breaking_changes(self, file: str, old_content: str,
                                new_content: str) -> List[BreakingChange]:
        """Breaking changes between ``old_content`` and ``new_content`` of ``file``.

        Changes to exports nobody imports are not reported.
        """
        old_exports = _first_by_name(self.extractor.extract_exports(old_content))
        new_exports = _first_by_name(self.extractor.extract_exports(new_content))
        if not old_exports:
            return []

        graph = self.graph_builder.build()
        source = self.graph_builder.resolve_target(file)
        breaking_changes = []

        for name in old_exports:
            if name in new_exports:
                continue

            affected = self.find_files_importing(source, name, graph)
            if affected:
                breaking_changes.append(BreakingChange(
                    file=source,
                    symbol=name,
                    change_type=ChangeKind.REMOVED,
                    affected_files=affected,
                    suggestion=(f"Export '{name}' was removed. Consider deprecating "
                                f"instead or updating all imports."),
                ))

        old_lines = old_content.splitlines()
        new_lines = new_content.splitlines()

        for name, new_export in new_exports.items():
            old_export = old_exports.get(name)
            if old_export is None or old_export.export_kind != ExportKind.FUNCTION:
                continue

            old_count = parameter_count(_line_at(old_lines, old_export.source_line))
            new_count = parameter_count(_line_at(new_lines, new_export.source_line))
            if old_count == new_count:
                continue

            affected = self.find_files_importing(source, name, graph)
            if affected:
                breaking_changes.append(BreakingChange(
                    file=source,
                    symbol=name,
                    change_type=ChangeKind.SIGNATURE_CHANGED,
                    affected_files=affected,
                    suggestion=(f"Function signature changed. Review all "
                                f"{len(affected)} importing file(s)."),
                ))

        logger.debug("%d breaking changes in %s", len(breaking_changes), source)
        return breaking_changes

    def find_files_importing(self, source: str, symbol: str,
                             graph: Optional[DependencyGraph] = None) -> List[str]:
        """Dependents of ``source`` that import ``symbol`` by name or as a namespace."""
        if graph is None:
            graph = self.graph_builder.build()
        importers = []

        for dependent in sorted(graph.dependents_of(source)):
            node = graph.nodes.get(dependent)
            if node is None:
                continue

            for imp in node.imports_of(source):
                if imp.import_kind == ImportKind.NAMESPACE or symbol in imp.imported_symbols:
                    importers.append(dependent)
                    break

        return importers

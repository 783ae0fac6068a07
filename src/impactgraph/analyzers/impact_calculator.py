"""Impact Calculator - Finds the files transitively affected by changing target files."""

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..config import ImpactConfiguration, ImpactThresholds
from .breaking_change_detector import BreakingChange
from .dependency_graph_builder import DependencyGraph, DependencyGraphBuilder

logger = logging.getLogger(__name__)


class ImpactLevel(Enum):
    """Aggregate impact of a change, from affected-file count."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DetailSeverity(Enum):
    WARNING = "warning"


@dataclass
class ImpactAnalysisOptions:
    """Options for a single impact query."""
    max_depth: Optional[int] = None  # falls back to the configured default
    exclude_patterns: List[str] = field(default_factory=list)
    include_tests: bool = False


@dataclass
class ImpactDetail:
    """Why one file is affected."""
    file: str
    reason: str
    imported_symbols: List[str]
    usage_count: int
    severity: DetailSeverity = DetailSeverity.WARNING
    depth: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "reason": self.reason,
            "imported_symbols": list(self.imported_symbols),
            "usage_count": self.usage_count,
            "severity": self.severity.value,
            "depth": self.depth,
        }


@dataclass
class ChangeImpactResult:
    """Result of an impact query."""
    target_files: List[str]
    affected_files: List[str]
    impact_level: ImpactLevel
    details: List[ImpactDetail]
    suggestions: List[str]
    breaking_changes: List[BreakingChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_files": list(self.target_files),
            "affected_files": list(self.affected_files),
            "impact_level": self.impact_level.value,
            "details": [detail.to_dict() for detail in self.details],
            "suggestions": list(self.suggestions),
            "breaking_changes": [change.to_dict() for change in self.breaking_changes],
        }


def classify_impact(affected_count: int,
                    thresholds: ImpactThresholds = ImpactThresholds()) -> ImpactLevel:
    """Map an affected-file count onto an impact level."""
    if affected_count <= thresholds.low_max:
        return ImpactLevel.LOW
    if affected_count <= thresholds.medium_max:
        return ImpactLevel.MEDIUM
    if affected_count <= thresholds.high_max:
        return ImpactLevel.HIGH
    return ImpactLevel.CRITICAL


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _compile_exclude(pattern: str) -> "re.Pattern":
    # Glob-like and unanchored: "*" spans separators, "?" is one character
    escaped = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(escaped)


class ImpactCalculator:
    """Bounded breadth-first traversal over the reverse dependency index."""

    def __init__(self, graph_builder: DependencyGraphBuilder,
                 config: Optional[ImpactConfiguration] = None):
        self.graph_builder = graph_builder
        self.config = config or graph_builder.config

    def analyze_impact(self, target_files: Sequence[str],
                       options: Optional[ImpactAnalysisOptions] = None) -> ChangeImpactResult:
        """Compute the affected files, details, level and suggestions for ``target_files``."""
        options = options or ImpactAnalysisOptions()
        graph = self.graph_builder.build()

        targets = []
        for file in target_files:
            if not file:
                continue
            key = self.graph_builder.resolve_target(file)
            if key not in targets:
                targets.append(key)

        if not targets:
            return self._result([], [], [])

        max_depth = options.max_depth if options.max_depth is not None else self.config.default_max_depth
        excludes = [_compile_exclude(p) for p in options.exclude_patterns]

        affected, details = self._traverse(graph, targets, max_depth, excludes, options.include_tests)
        logger.debug("Impact of %s: %d affected files (max depth %d)",
                     targets, len(affected), max_depth)

        return self._result(targets, sorted(affected), details)

    def _traverse(self, graph: DependencyGraph, targets: List[str], max_depth: int,
                  excludes: list, include_tests: bool):
        # Breadth-first so every file is reached at its shortest hop distance,
        # which keeps the affected set monotone in max_depth.
        visited = set(targets)
        frontier = deque((target, 0) for target in targets)
        affected = set()
        details = []

        while frontier:
            current, depth = frontier.popleft()
            if depth >= max_depth:
                continue

            for dependent in sorted(graph.dependents_of(current)):
                if dependent == current or dependent in affected:
                    continue
                if self._is_excluded(dependent, excludes):
                    continue
                if not include_tests and self.config.is_test_file(dependent):
                    continue

                affected.add(dependent)
                details.append(self._detail_for(graph, dependent, current, depth + 1))

                if dependent not in visited:
                    visited.add(dependent)
                    frontier.append((dependent, depth + 1))

        return affected, details

    @staticmethod
    def _is_excluded(file: str, excludes: list) -> bool:
        return any(pattern.search(file) for pattern in excludes)

    @staticmethod
    def _detail_for(graph: DependencyGraph, dependent: str, source: str,
                    depth: int) -> ImpactDetail:
        node = graph.nodes.get(dependent)
        references = node.imports_of(source) if node else []

        symbols = []
        for imp in references:
            for symbol in imp.imported_symbols:
                if symbol not in symbols:
                    symbols.append(symbol)
            if not imp.imported_symbols and imp.local_name:
                symbols.append(f"* as {imp.local_name}")

        return ImpactDetail(
            file=dependent,
            reason=f"Imports from {source}",
            imported_symbols=symbols,
            usage_count=len(references),
            severity=DetailSeverity.WARNING,
            depth=depth,
        )

    def _result(self, targets: List[str], affected: List[str],
                details: List[ImpactDetail]) -> ChangeImpactResult:
        return ChangeImpactResult(
            target_files=targets,
            affected_files=affected,
            impact_level=self.calculate_impact_level(len(affected)),
            details=details,
            suggestions=self.generate_suggestions(targets, affected),
        )

    def calculate_impact_level(self, affected_count: int) -> ImpactLevel:
        return classify_impact(affected_count, self.config.thresholds)

    def generate_suggestions(self, target_files: Sequence[str],
                             affected_files: Sequence[str]) -> List[str]:
        """Deterministic review suggestions for an affected-file set."""
        if not affected_files:
            return ["No files depend on the target files. Safe to modify."]

        suggestions = [f"Review {_plural(len(affected_files), 'affected file')} after making changes."]

        test_files = [f for f in affected_files if self.config.is_test_file(f)]
        if test_files:
            suggestions.append(f"Update {_plural(len(test_files), 'test file')} to match changes.")

        if len(affected_files) > self.config.large_impact_threshold:
            suggestions.append(
                "Consider making changes backward-compatible to minimize breaking changes."
            )
            suggestions.append(
                "Consider adding deprecation warnings before removing functionality."
            )

        return suggestions

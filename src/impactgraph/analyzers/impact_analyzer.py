"""Impact Analyzer - Entry point for graph building, impact queries and breaking changes."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..config import ImpactConfiguration
from ..core.git_source import read_revision_text
from .breaking_change_detector import BreakingChange, BreakingChangeDetector
from .dependency_graph_builder import DependencyGraph, DependencyGraphBuilder
from .impact_calculator import (
    ChangeImpactResult, ImpactAnalysisOptions, ImpactCalculator, ImpactLevel
)

logger = logging.getLogger(__name__)


@dataclass
class ImpactPreview:
    """Lightweight summary of what changing some files would touch."""
    target_files: List[str]
    impact_level: ImpactLevel
    production_files: List[str]
    test_files: List[str]

    @property
    def total_affected(self) -> int:
        return len(self.production_files) + len(self.test_files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_files": list(self.target_files),
            "impact_level": self.impact_level.value,
            "production_files": list(self.production_files),
            "test_files": list(self.test_files),
            "total_affected": self.total_affected,
        }


class ImpactAnalyzer:
    """Main orchestrator for change-impact analysis of one project root."""

    def __init__(self, project_root: str, config: Optional[ImpactConfiguration] = None):
        self.project_root = os.path.abspath(project_root)
        self.config = config or ImpactConfiguration()

        self.graph_builder = DependencyGraphBuilder(self.project_root, self.config)
        self.calculator = ImpactCalculator(self.graph_builder)
        self.breaking_change_detector = BreakingChangeDetector(self.graph_builder)

    def build_graph(self, force_rebuild: bool = False) -> DependencyGraph:
        return self.graph_builder.build(force_rebuild)

    def invalidate(self):
        self.graph_builder.invalidate()

    def analyze_impact(self, target_files: Sequence[str],
                       options: Optional[ImpactAnalysisOptions] = None) -> ChangeImpactResult:
        return self.calculator.analyze_impact(target_files, options)

    def detect_breaking_changes(self, file: str, old_content: str,
                                new_content: str) -> List[BreakingChange]:
        return self.breaking_change_detector.detect_breaking_changes(file, old_content, new_content)

    def detect_breaking_changes_since(self, file: str,
                                      revision: str = "HEAD") -> List[BreakingChange]:
        """Compare ``file`` on disk against its content at a git revision."""
        self.graph_builder.build()
        key = self.graph_builder.resolve_target(file)
        old_content = read_revision_text(self.project_root, key, revision) or ""

        full_path = os.path.join(self.project_root, *key.split("/"))
        try:
            with open(full_path, "r", encoding="utf-8") as f:
                new_content = f.read()
        except FileNotFoundError:
            # Deleted since the revision: every export is gone
            new_content = ""

        return self.detect_breaking_changes(key, old_content, new_content)

    def preview_impact(self, target_files: Sequence[str]) -> ImpactPreview:
        """Shallow impact query including tests, split into production and test files."""
        result = self.analyze_impact(target_files, ImpactAnalysisOptions(
            max_depth=self.config.preview_max_depth,
            include_tests=True,
        ))

        test_files = [f for f in result.affected_files if self.config.is_test_file(f)]
        production_files = [f for f in result.affected_files if not self.config.is_test_file(f)]

        return ImpactPreview(
            target_files=result.target_files,
            impact_level=result.impact_level,
            production_files=production_files,
            test_files=test_files,
        )

    def validate_changes(self, modified_files: Sequence[str],
                         options: Optional[ImpactAnalysisOptions] = None) -> ChangeImpactResult:
        """Rebuild the graph from disk, then re-run the impact query for modified files."""
        self.build_graph(force_rebuild=True)
        return self.analyze_impact(modified_files, options)

    def get_graph_stats(self) -> Dict[str, Any]:
        return self.graph_builder.get_graph_stats()

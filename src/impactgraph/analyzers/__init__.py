"""Dependency graph construction and change-impact analysis."""

from .dependency_graph_builder import (
    DependencyGraphBuilder, DependencyGraph, DependencyNode, GraphBuildError
)
from .breaking_change_detector import (
    BreakingChangeDetector, BreakingChange, ChangeKind, parameter_count
)
from .impact_calculator import (
    ImpactCalculator, ImpactAnalysisOptions, ChangeImpactResult, ImpactDetail,
    ImpactLevel, DetailSeverity, classify_impact
)
from .impact_analyzer import ImpactAnalyzer, ImpactPreview

__all__ = [
    "DependencyGraphBuilder", "DependencyGraph", "DependencyNode", "GraphBuildError",
    "BreakingChangeDetector", "BreakingChange", "ChangeKind", "parameter_count",
    "ImpactCalculator", "ImpactAnalysisOptions", "ChangeImpactResult", "ImpactDetail",
    "ImpactLevel", "DetailSeverity", "classify_impact",
    "ImpactAnalyzer", "ImpactPreview",
]

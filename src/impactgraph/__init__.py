"""impactgraph - Change-impact analysis over module dependency graphs."""

from .config import ImpactConfiguration, ImpactThresholds
from .analyzers import (
    ImpactAnalyzer, ImpactAnalysisOptions, ChangeImpactResult, ImpactDetail,
    ImpactLevel, ImpactPreview, BreakingChange, ChangeKind,
    DependencyGraph, DependencyNode, GraphBuildError
)

__version__ = "0.1.0"

__all__ = [
    "ImpactConfiguration", "ImpactThresholds",
    "ImpactAnalyzer", "ImpactAnalysisOptions", "ChangeImpactResult", "ImpactDetail",
    "ImpactLevel", "ImpactPreview", "BreakingChange", "ChangeKind",
    "DependencyGraph", "DependencyNode", "GraphBuildError",
]

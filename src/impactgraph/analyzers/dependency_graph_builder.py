"""Dependency Graph Builder - Builds the import dependency graph of a source tree."""

import logging
import os
import posixpath
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Collection, Dict, FrozenSet, List, Optional, Tuple

import networkx as nx

from ..config import ImpactConfiguration
from ..core.source_scanner import SourceScanner
from ..parsers.declaration_extractor import (
    DeclarationExtractor, ExportReference, ImportReference, PatternDeclarationExtractor
)

logger = logging.getLogger(__name__)


class GraphBuildError(RuntimeError):
    """Raised when the project root cannot be enumerated."""


@dataclass(frozen=True)
class DependencyNode:
    """Extracted import/export facts of one source file."""
    file: str
    imports: Tuple[ImportReference, ...] = ()
    exports: Tuple[ExportReference, ...] = ()

    def imports_of(self, target: str) -> List[ImportReference]:
        """Import references of this file that resolve to ``target``."""
        return [imp for imp in self.imports if imp.resolved_target == target]


@dataclass(frozen=True)
class DependencyGraph:
    """One immutable generation of the project's dependency graph."""
    nodes: Dict[str, DependencyNode]
    dependents: Dict[str, FrozenSet[str]]
    built_at: datetime
    file_count: int
    root_directory: str = ""
    unresolved_imports: int = field(default=0, compare=False)

    def dependents_of(self, file: str) -> FrozenSet[str]:
        return self.dependents.get(file, frozenset())

    def to_networkx(self) -> nx.DiGraph:
        """Directed graph with an edge importer -> imported file per resolved import."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.nodes)
        for target, importers in self.dependents.items():
            for importer in importers:
                graph.add_edge(importer, target)
        return graph


class DependencyGraphBuilder:
    """Builds and caches the dependency graph for one project root.

    The graph is rebuilt wholesale once it is older than the configured TTL or
    when a rebuild is forced; a finished graph is swapped in under a lock, so
    readers always see a complete generation.
    """

    def __init__(self, project_root: str, config: Optional[ImpactConfiguration] = None,
                 extractor: Optional[DeclarationExtractor] = None,
                 scanner: Optional[SourceScanner] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.project_root = os.path.abspath(project_root)
        self.config = config or ImpactConfiguration()
        self.extractor = extractor or PatternDeclarationExtractor()
        self.scanner = scanner or SourceScanner(self.config.extensions, self.config.exclude_dirs)
        self._clock = clock

        self._graph: Optional[DependencyGraph] = None
        self._built_clock = 0.0
        self._lock = threading.Lock()

    @property
    def graph(self) -> Optional[DependencyGraph]:
        """The current graph generation, or None before the first build."""
        return self._graph

    def is_stale(self) -> bool:
        if self._graph is None:
            return True
        return self._clock() - self._built_clock >= self.config.cache_ttl_seconds

    def invalidate(self):
        """Drop the cached graph so the next build starts from scratch."""
        with self._lock:
            self._graph = None

    def build(self, force_rebuild: bool = False) -> DependencyGraph:
        """Return the cached graph, rebuilding it when stale or forced."""
        with self._lock:
            if not force_rebuild and not self.is_stale():
                logger.debug("Dependency graph cache hit for %s", self.project_root)
                return self._graph

            start = self._clock()
            graph = self._build_graph()
            self._graph = graph
            self._built_clock = self._clock()

        logger.info("Built dependency graph for %s: %d files, %d unresolved imports in %.2fs",
                    self.project_root, graph.file_count, graph.unresolved_imports,
                    self._built_clock - start)
        return graph

    def _build_graph(self) -> DependencyGraph:
        if not os.path.isdir(self.project_root):
            raise GraphBuildError(f"Project root is not a directory: {self.project_root}")

        try:
            files = list(self.scanner.walk(self.project_root))
        except OSError as e:
            raise GraphBuildError(f"Cannot enumerate project root {self.project_root}: {e}") from e

        parsed = {}
        for file in files:
            node = self.parse_file(file)
            if node is not None:
                parsed[file] = node

        known_files = frozenset(parsed)
        nodes = {}
        dependents: Dict[str, set] = {}
        unresolved = 0

        for file, node in parsed.items():
            resolved_imports = []
            for imp in node.imports:
                target = self.resolve_import_path(file, imp.source_specifier, known_files)
                if target is None:
                    if imp.is_relative:
                        unresolved += 1
                        logger.debug("Unresolved import %r in %s:%d",
                                     imp.source_specifier, file, imp.source_line)
                else:
                    dependents.setdefault(target, set()).add(file)
                resolved_imports.append(replace(imp, resolved_target=target))

            nodes[file] = replace(node, imports=tuple(resolved_imports))

        return DependencyGraph(
            nodes=nodes,
            dependents={target: frozenset(importers) for target, importers in dependents.items()},
            built_at=datetime.now(),
            file_count=len(nodes),
            root_directory=self.project_root,
            unresolved_imports=unresolved,
        )

    def parse_file(self, file: str) -> Optional[DependencyNode]:
        """Read and extract one root-relative file; None if it cannot be read."""
        full_path = os.path.join(self.project_root, *file.split("/"))

        try:
            with open(full_path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable file %s: %s", file, e)
            return None

        return DependencyNode(
            file=file,
            imports=tuple(self.extractor.extract_imports(content)),
            exports=tuple(self.extractor.extract_exports(content)),
        )

    def resolve_import_path(self, importer_file: str, specifier: str,
                            known_files: Optional[Collection[str]] = None) -> Optional[str]:
        """Map a specifier written in ``importer_file`` to a node key.

        Non-relative specifiers are external and resolve to None, as does any
        specifier that points back at the importing file itself.
        """
        if not specifier.startswith("."):
            return None

        if known_files is None:
            known_files = self._graph.nodes if self._graph else ()

        importer_dir = posixpath.dirname(importer_file)
        base = posixpath.normpath(posixpath.join(importer_dir, specifier))
        if base == ".." or base.startswith("../"):
            return None

        target = self._probe(base, known_files)
        if target == importer_file:
            return None
        return target

    def _probe(self, base: str, known_files: Collection[str]) -> Optional[str]:
        if base in known_files:
            return base

        stem, ext = posixpath.splitext(base)
        for alias in self.config.esm_extension_aliases.get(ext, ()):
            if stem + alias in known_files:
                return stem + alias

        extensions = self.config.resolution_extensions
        for ext in extensions:
            if base + ext in known_files:
                return base + ext

        for ext in extensions:
            index_file = posixpath.join(base, "index" + ext) if base != "." else "index" + ext
            if index_file in known_files:
                return index_file

        return None

    def normalize_path(self, file: str) -> str:
        """Convert a caller-supplied path to a root-relative POSIX key."""
        if os.path.isabs(file):
            file = os.path.relpath(file, self.project_root)
        file = file.replace(os.sep, "/")
        return posixpath.normpath(file)

    def resolve_target(self, file: str) -> str:
        """Normalize a target path and probe it like a specifier if it is not a node."""
        key = self.normalize_path(file)
        if self._graph is None or key in self._graph.nodes:
            return key
        return self._probe(key, self._graph.nodes) or key

    def get_graph_stats(self) -> Dict[str, object]:
        """File, import and export totals of the current graph."""
        graph = self._graph
        if graph is None:
            return {
                "file_count": 0,
                "total_imports": 0,
                "total_exports": 0,
                "last_built": None,
            }

        return {
            "file_count": graph.file_count,
            "total_imports": sum(len(node.imports) for node in graph.nodes.values()),
            "total_exports": sum(len(node.exports) for node in graph.nodes.values()),
            "last_built": graph.built_at,
        }

    def find_cycles(self) -> List[List[str]]:
        """Import cycles of the current graph, each rotated to start at its smallest file."""
        if self._graph is None:
            return []

        cycles = []
        for cycle in nx.simple_cycles(self._graph.to_networkx()):
            start = cycle.index(min(cycle))
            cycles.append(cycle[start:] + cycle[:start])
        return sorted(cycles)

    def get_hotspots(self, limit: int = 10) -> List[Tuple[str, int]]:
        """Files with the most direct dependents."""
        if self._graph is None:
            return []

        counts = [(file, len(importers)) for file, importers in self._graph.dependents.items()]
        counts.sort(key=lambda item: (-item[1], item[0]))
        return counts[:limit]

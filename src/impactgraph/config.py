"""Configuration for dependency graph building and impact analysis."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")

EXCLUDE_DIRS: FrozenSet[str] = frozenset({
    "node_modules", "dist", "build", ".git", "coverage", ".next",
})

TEST_MARKERS: Tuple[str, ...] = (".test.", ".spec.")

# Compiled output extension -> source extensions it may have been written in
ESM_EXTENSION_ALIASES: Dict[str, Tuple[str, ...]] = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

CACHE_TTL_ENV = "IMPACTGRAPH_CACHE_TTL"
MAX_DEPTH_ENV = "IMPACTGRAPH_MAX_DEPTH"


@dataclass(frozen=True)
class ImpactThresholds:
    """Upper bounds (inclusive) on affected-file counts for each impact level.

    Anything above ``high_max`` is critical.
    """
    low_max: int = 3
    medium_max: int = 10
    high_max: int = 25


@dataclass
class ImpactConfiguration:
    """Configuration for graph building and impact analysis."""
    extensions: Tuple[str, ...] = SOURCE_EXTENSIONS
    exclude_dirs: FrozenSet[str] = EXCLUDE_DIRS
    cache_ttl_seconds: float = 300.0
    default_max_depth: int = 10
    preview_max_depth: int = 5
    test_markers: Tuple[str, ...] = TEST_MARKERS
    thresholds: ImpactThresholds = field(default_factory=ImpactThresholds)
    large_impact_threshold: int = 10
    esm_extension_aliases: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(ESM_EXTENSION_ALIASES)
    )

    @property
    def resolution_extensions(self) -> Tuple[str, ...]:
        """Extensions probed for extension-less specifiers, in order."""
        preferred = [ext for ext in (".ts", ".tsx", ".js", ".jsx") if ext in self.extensions]
        rest = [ext for ext in self.extensions if ext not in preferred]
        return tuple(preferred + rest)

    def is_test_file(self, file_path: str) -> bool:
        return any(marker in file_path for marker in self.test_markers)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ImpactConfiguration":
        """Build a configuration, overriding TTL and depth from the environment."""
        environ = os.environ if environ is None else environ
        config = cls()

        ttl = _read_number(environ, CACHE_TTL_ENV, float)
        if ttl is not None:
            config.cache_ttl_seconds = ttl

        depth = _read_number(environ, MAX_DEPTH_ENV, int)
        if depth is not None:
            config.default_max_depth = depth

        return config


def _read_number(environ, name, kind):
    raw = environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = kind(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a valid %s", name, raw, kind.__name__)
        return None
    if value < 0:
        logger.warning("Ignoring %s=%r: must not be negative", name, raw)
        return None
    return value

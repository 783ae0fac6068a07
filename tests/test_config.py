"""Tests for ImpactConfiguration."""

import logging

from impactgraph.config import ImpactConfiguration


def test_defaults():
    config = ImpactConfiguration()

    assert config.cache_ttl_seconds == 300.0
    assert config.default_max_depth == 10
    assert config.thresholds.low_max == 3
    assert "node_modules" in config.exclude_dirs


def test_resolution_extensions_prefer_typescript():
    config = ImpactConfiguration(extensions=(".mjs", ".js", ".ts"))

    assert config.resolution_extensions == (".ts", ".js", ".mjs")


def test_is_test_file():
    config = ImpactConfiguration()

    assert config.is_test_file("src/a.test.ts")
    assert config.is_test_file("src/a.spec.js")
    assert not config.is_test_file("src/testing/a.ts")


def test_from_env_overrides():
    config = ImpactConfiguration.from_env({
        "IMPACTGRAPH_CACHE_TTL": "30",
        "IMPACTGRAPH_MAX_DEPTH": "4",
    })

    assert config.cache_ttl_seconds == 30.0
    assert config.default_max_depth == 4


def test_from_env_ignores_invalid_values(caplog):
    with caplog.at_level(logging.WARNING, logger="impactgraph.config"):
        config = ImpactConfiguration.from_env({
            "IMPACTGRAPH_CACHE_TTL": "soon",
            "IMPACTGRAPH_MAX_DEPTH": "-1",
        })

    assert config.cache_ttl_seconds == 300.0
    assert config.default_max_depth == 10
    assert "IMPACTGRAPH_CACHE_TTL" in caplog.text
    assert "must not be negative" in caplog.text


def test_from_env_empty_environment():
    assert ImpactConfiguration.from_env({}) == ImpactConfiguration()

"""Tests for impact traversal, classification and suggestions."""

import pytest

from impactgraph.analyzers import (
    DependencyGraphBuilder, DetailSeverity, ImpactAnalysisOptions, ImpactCalculator, ImpactLevel,
    classify_impact
)
from impactgraph.config import ImpactThresholds


def _calculator(root) -> ImpactCalculator:
    return ImpactCalculator(DependencyGraphBuilder(str(root)))


@pytest.fixture
def fan_in_project(write_project):
    """30 files importing from target.ts."""
    files = {"target.ts": "export function shared(a, b) {}\n"}
    for i in range(30):
        files[f"consumers/file{i:02d}.ts"] = "import { shared } from '../target';\n"
    return write_project(files)


class TestTraversal:

    def test_direct_dependent_is_affected(self, write_project):
        root = write_project({
            "moduleA.ts": "export function helper() {}\n",
            "moduleB.ts": "import { helper } from './moduleA';\n",
        })

        result = _calculator(root).analyze_impact(["moduleA"])

        assert result.target_files == ["moduleA.ts"]
        assert result.affected_files == ["moduleB.ts"]
        assert result.impact_level == ImpactLevel.LOW

    def test_max_depth_bounds_hops(self, chain_project):
        calculator = _calculator(chain_project)

        one = calculator.analyze_impact(["moduleA"], ImpactAnalysisOptions(max_depth=1))
        two = calculator.analyze_impact(["moduleA"], ImpactAnalysisOptions(max_depth=2))

        assert one.affected_files == ["moduleB.ts"]
        assert two.affected_files == ["moduleB.ts", "moduleC.ts"]

    def test_zero_depth_affects_nothing(self, chain_project):
        result = _calculator(chain_project).analyze_impact(
            ["moduleA.ts"], ImpactAnalysisOptions(max_depth=0)
        )

        assert result.affected_files == []

    def test_affected_set_grows_monotonically_with_depth(self, sample_project):
        calculator = _calculator(sample_project)
        previous = set()

        for depth in range(5):
            result = calculator.analyze_impact(
                ["src/utils/format.ts"], ImpactAnalysisOptions(max_depth=depth, include_tests=True)
            )
            current = set(result.affected_files)
            assert previous <= current
            previous = current

    def test_transitive_dependents_and_details(self, sample_project):
        result = _calculator(sample_project).analyze_impact(["src/utils/format.ts"])

        assert result.affected_files == [
            "src/api/routes.ts", "src/index.ts", "src/services/user.ts",
        ]
        by_file = {detail.file: detail for detail in result.details}
        assert by_file["src/services/user.ts"].reason == "Imports from src/utils/format.ts"
        assert by_file["src/services/user.ts"].imported_symbols == ["formatName"]
        assert by_file["src/services/user.ts"].depth == 1
        assert by_file["src/api/routes.ts"].imported_symbols == ["UserService"]
        assert by_file["src/api/routes.ts"].depth == 2
        assert by_file["src/index.ts"].imported_symbols == ["default"]
        assert by_file["src/index.ts"].depth == 3

    def test_tests_excluded_by_default(self, sample_project):
        calculator = _calculator(sample_project)

        without = calculator.analyze_impact(["src/utils/format.ts"])
        with_tests = calculator.analyze_impact(
            ["src/utils/format.ts"], ImpactAnalysisOptions(include_tests=True)
        )

        assert "src/services/user.test.ts" not in without.affected_files
        assert "src/services/user.test.ts" in with_tests.affected_files
        assert len(with_tests.affected_files) == 4

    def test_exclude_patterns_stop_traversal(self, sample_project):
        result = _calculator(sample_project).analyze_impact(
            ["src/utils/format.ts"], ImpactAnalysisOptions(exclude_patterns=["*routes*"])
        )

        assert result.affected_files == ["src/services/user.ts"]

    def test_exclude_pattern_is_literal_apart_from_wildcards(self, write_project):
        root = write_project({
            "a.ts": "export const a = 1;\n",
            "a_b.ts": "import { a } from './a';\n",
            "aXb.ts": "import { a } from './a';\n",
        })

        result = _calculator(root).analyze_impact(
            ["a.ts"], ImpactAnalysisOptions(exclude_patterns=["a_b.ts"])
        )

        assert result.affected_files == ["aXb.ts"]

    def test_namespace_import_detail(self, write_project):
        root = write_project({
            "a.ts": "export const a = 1;\n",
            "b.ts": "import * as utils from './a';\n",
        })

        result = _calculator(root).analyze_impact(["a.ts"])

        assert result.details[0].imported_symbols == ["* as utils"]
        assert result.details[0].usage_count == 1
        assert result.details[0].severity == DetailSeverity.WARNING

    def test_cycle_terminates_and_reaches_target(self, write_project):
        root = write_project({
            "a.ts": "import { b } from './b';\nexport const a = 1;\n",
            "b.ts": "import { a } from './a';\nexport const b = 2;\n",
        })

        result = _calculator(root).analyze_impact(["a.ts"])

        assert result.affected_files == ["a.ts", "b.ts"]
        assert len(result.details) == 2

    def test_duplicate_and_empty_targets_collapse(self, chain_project):
        result = _calculator(chain_project).analyze_impact(["moduleA", "", "./moduleA.ts"])

        assert result.target_files == ["moduleA.ts"]

    def test_no_targets_is_safe(self, chain_project):
        result = _calculator(chain_project).analyze_impact([])

        assert result.affected_files == []
        assert result.impact_level == ImpactLevel.LOW
        assert result.suggestions == ["No files depend on the target files. Safe to modify."]

    def test_unknown_target_has_no_dependents(self, chain_project):
        result = _calculator(chain_project).analyze_impact(["missing.ts"])

        assert result.target_files == ["missing.ts"]
        assert result.affected_files == []

    def test_large_fan_in_is_critical(self, fan_in_project):
        result = _calculator(fan_in_project).analyze_impact(["target.ts"])

        assert len(result.affected_files) == 30
        assert result.impact_level == ImpactLevel.CRITICAL
        assert ("Consider making changes backward-compatible to minimize breaking changes."
                in result.suggestions)

    def test_result_to_dict(self, chain_project):
        data = _calculator(chain_project).analyze_impact(["moduleA"]).to_dict()

        assert data["impact_level"] == "low"
        assert data["affected_files"] == ["moduleB.ts", "moduleC.ts"]
        assert data["details"][0]["severity"] == "warning"
        assert data["breaking_changes"] == []


class TestClassification:

    @pytest.mark.parametrize("count,level", [
        (0, ImpactLevel.LOW),
        (3, ImpactLevel.LOW),
        (4, ImpactLevel.MEDIUM),
        (10, ImpactLevel.MEDIUM),
        (11, ImpactLevel.HIGH),
        (25, ImpactLevel.HIGH),
        (26, ImpactLevel.CRITICAL),
    ])
    def test_default_thresholds(self, count, level):
        assert classify_impact(count) == level

    def test_custom_thresholds(self):
        thresholds = ImpactThresholds(low_max=0, medium_max=1, high_max=2)

        assert classify_impact(1, thresholds) == ImpactLevel.MEDIUM
        assert classify_impact(3, thresholds) == ImpactLevel.CRITICAL


class TestSuggestions:

    def test_review_and_test_hints(self, chain_project):
        calculator = _calculator(chain_project)

        suggestions = calculator.generate_suggestions(
            ["a.ts"], ["b.ts", "b.test.ts"]
        )

        assert suggestions == [
            "Review 2 affected files after making changes.",
            "Update 1 test file to match changes.",
        ]

    def test_compatibility_hints_above_ten_files(self, chain_project):
        calculator = _calculator(chain_project)

        ten = calculator.generate_suggestions(["a.ts"], [f"f{i}.ts" for i in range(10)])
        eleven = calculator.generate_suggestions(["a.ts"], [f"f{i}.ts" for i in range(11)])

        assert len(ten) == 1
        assert eleven[1:] == [
            "Consider making changes backward-compatible to minimize breaking changes.",
            "Consider adding deprecation warnings before removing functionality.",
        ]

    def test_suggestions_are_deterministic(self, sample_project):
        calculator = _calculator(sample_project)
        options = ImpactAnalysisOptions(include_tests=True)

        first = calculator.analyze_impact(["src/utils/format.ts"], options)
        second = calculator.analyze_impact(["src/utils/format.ts"], options)

        assert first.suggestions == second.suggestions
        assert first.suggestions == [
            "Review 4 affected files after making changes.",
            "Update 1 test file to match changes.",
        ]

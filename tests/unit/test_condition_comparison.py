"""Tests for treatment vs. control condition comparison."""

import pytest

from agent_judge.experiment.condition_comparison import compare_conditions, format_comparison_table

TREATMENT = {
    "fluency": [7.0, 8.0, 8.0, 9.0, 8.0],
    "suitability": [6.0, 7.0],
    "persona_adherence": [8.0],
    "novelty": [5.0, 6.0],
}
CONTROL = {
    "fluency": [5.0, 6.0, 5.0, 6.0, 5.0],
    "suitability": [6.0, 7.0],
    "persona_adherence": [7.0, 8.0],
}


def test_compares_shared_dimensions_with_enough_scores():
    comparisons = compare_conditions(TREATMENT, CONTROL)
    assert [c.dimension for c in comparisons] == ["fluency", "suitability"]


def test_comparison_values():
    fluency = compare_conditions(TREATMENT, CONTROL)[0]
    assert fluency.n_treatment == 5
    assert fluency.n_control == 5
    assert fluency.delta == pytest.approx(2.6)
    assert fluency.t_test.significant is True
    assert fluency.effect_size > 0


def test_identical_conditions_not_significant():
    suitability = compare_conditions(TREATMENT, CONTROL)[1]
    assert suitability.delta == 0.0
    assert suitability.t_test.p_value == 1.0
    assert suitability.effect_size == 0.0


def test_alpha_is_forwarded():
    fluency = compare_conditions(TREATMENT, CONTROL, alpha=1e-12)[0]
    assert fluency.t_test.significant is False


def test_empty_inputs():
    assert compare_conditions({}, {}) == []


def test_format_table():
    table = format_comparison_table(compare_conditions(TREATMENT, CONTROL))
    lines = table.splitlines()
    assert lines[0].startswith("Metric")
    assert set(lines[1]) == {"-"}
    assert lines[2].startswith("fluency")
    assert "+2.60" in lines[2]
    assert "*" in lines[2]
    assert "8.00(" in lines[2]
    assert lines[3].startswith("suitability")
    assert "1.000" in lines[3]

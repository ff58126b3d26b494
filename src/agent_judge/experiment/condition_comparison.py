"""Per-dimension treatment vs. control comparison for intervention experiments."""

from __future__ import annotations

from agent_judge.experiment.statistical_testing import DEFAULT_ALPHA, cohens_d, welch_t_test
from agent_judge.models.domain import ConditionComparison
from agent_judge.observability.logger import get_logger

logger = get_logger("condition_comparison")


def compare_conditions(
    treatment_scores: dict[str, list[float]],
    control_scores: dict[str, list[float]],
    alpha: float = DEFAULT_ALPHA,
) -> list[ConditionComparison]:
    """Welch's t-test and Cohen's d for every dimension scored in both conditions.

    Dimensions missing from either side, or with fewer than two scores in a
    condition, are skipped.
    """
    comparisons = []
    for dimension, treatment in treatment_scores.items():
        control = control_scores.get(dimension)
        if control is None or len(treatment) < 2 or len(control) < 2:
            logger.warning(
                "comparison_skipped",
                dimension=dimension,
                n_treatment=len(treatment),
                n_control=len(control) if control is not None else 0,
            )
            continue

        comparison = ConditionComparison(
            dimension=dimension,
            t_test=welch_t_test(treatment, control, alpha),
            effect_size=cohens_d(treatment, control),
            n_treatment=len(treatment),
            n_control=len(control),
        )
        comparisons.append(comparison)
        logger.info(
            "condition_compared",
            dimension=dimension,
            delta=round(comparison.delta, 4),
            p_value=comparison.t_test.p_value,
            significant=comparison.t_test.significant,
            effect_size=round(comparison.effect_size, 4),
        )
    return comparisons


def format_comparison_table(comparisons: list[ConditionComparison]) -> str:
    header = " | ".join(
        [
            "Metric".ljust(20),
            "T mean(sd)".ljust(16),
            "C mean(sd)".ljust(16),
            "Delta".ljust(10),
            "p-value".ljust(12),
            "Sig".ljust(5),
            "Cohen's d".ljust(10),
        ]
    )
    lines = [header, "-" * len(header)]
    for c in comparisons:
        t = c.t_test
        p_value = "<.001" if t.p_value < 0.001 else f"{t.p_value:.3f}"
        lines.append(
            " | ".join(
                [
                    c.dimension.ljust(20),
                    f"{t.mean_a:.2f}({t.sd_a:.2f})".ljust(16),
                    f"{t.mean_b:.2f}({t.sd_b:.2f})".ljust(16),
                    f"{c.delta:+.2f}".ljust(10),
                    p_value.ljust(12),
                    ("*" if t.significant else "").ljust(5),
                    f"{c.effect_size:.2f}".ljust(10),
                ]
            )
        )
    return "\n".join(lines)

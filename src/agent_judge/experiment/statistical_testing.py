"""Welch's t-test and Cohen's d for treatment/control score comparisons.

The t-distribution CDF is computed from the regularized incomplete beta
function (Lentz continued fraction) over a Lanczos log-gamma, so the module
has no dependency beyond numpy for the sample moments.
"""

from __future__ import annotations

import math

import numpy as np

from agent_judge.config.constants import (
    BETA_CF_EPSILON,
    BETA_CF_MAX_ITERATIONS,
    BETA_CF_TINY,
)
from agent_judge.models.domain import TTestResult
from agent_judge.observability.logger import get_logger

logger = get_logger("statistical_testing")

DEFAULT_ALPHA = 0.05

_LANCZOS_G = 7
_LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)


def mean(values: list[float]) -> float:
    if len(values) == 0:
        raise ValueError("mean requires at least one value")
    return float(np.mean(values))


def variance(values: list[float]) -> float:
    """Sample variance with Bessel's correction (n - 1)."""
    if len(values) < 2:
        raise ValueError("variance requires at least two values")
    return float(np.var(values, ddof=1))


def standard_deviation(values: list[float]) -> float:
    return math.sqrt(variance(values))


def ln_gamma(x: float) -> float:
    """Lanczos approximation of ln(Gamma(x)), with reflection below 0.5."""
    if x < 0.5:
        return math.log(math.pi / math.sin(math.pi * x)) - ln_gamma(1 - x)

    x -= 1
    a = _LANCZOS_COEFFICIENTS[0]
    t = x + _LANCZOS_G + 0.5
    for i in range(1, _LANCZOS_G + 2):
        a += _LANCZOS_COEFFICIENTS[i] / (x + i)
    return 0.5 * math.log(2 * math.pi) + (x + 0.5) * math.log(t) - t + math.log(a)


def _floor_tiny(value: float) -> float:
    return BETA_CF_TINY if abs(value) < BETA_CF_TINY else value


def incomplete_beta(x: float, a: float, b: float) -> float:
    """Regularized incomplete beta I_x(a, b) via Lentz's modified continued fraction."""
    if x <= 0:
        return 0.0
    if x >= 1:
        return 1.0

    # The fraction converges quickly only below the mean of the distribution
    if x > (a + 1) / (a + b + 2):
        return 1.0 - incomplete_beta(1 - x, b, a)

    ln_beta = ln_gamma(a) + ln_gamma(b) - ln_gamma(a + b)
    front = math.exp(math.log(x) * a + math.log(1 - x) * b - ln_beta)

    c = 1.0
    d = 1.0 / _floor_tiny(1 - (a + b) * x / (a + 1))
    f = d

    for m in range(1, BETA_CF_MAX_ITERATIONS + 1):
        numerator = m * (b - m) * x / ((a + 2 * m - 1) * (a + 2 * m))
        d = 1.0 / _floor_tiny(1 + numerator * d)
        c = _floor_tiny(1 + numerator / c)
        f *= c * d

        numerator = -(a + m) * (a + b + m) * x / ((a + 2 * m) * (a + 2 * m + 1))
        d = 1.0 / _floor_tiny(1 + numerator * d)
        c = _floor_tiny(1 + numerator / c)
        delta = c * d
        f *= delta

        if abs(delta - 1) < BETA_CF_EPSILON:
            break

    return (front / a) * f


def t_distribution_cdf(t: float, df: float) -> float:
    """P(T <= t) for Student's t with ``df`` degrees of freedom."""
    if t == 0:
        return 0.5
    x = df / (df + t * t)
    p = 1 - 0.5 * incomplete_beta(x, df / 2, 0.5)
    return 1 - p if t < 0 else p


def _welch_satterthwaite(var_a: float, n_a: int, var_b: float, n_b: int) -> float:
    num = (var_a / n_a + var_b / n_b) ** 2
    den = (var_a / n_a) ** 2 / (n_a - 1) + (var_b / n_b) ** 2 / (n_b - 1)
    return num / den


def welch_t_test(
    group_a: list[float], group_b: list[float], alpha: float = DEFAULT_ALPHA
) -> TTestResult:
    """Two-tailed Welch's t-test; each group needs at least two values."""
    mean_a, mean_b = mean(group_a), mean(group_b)
    var_a, var_b = variance(group_a), variance(group_b)
    n_a, n_b = len(group_a), len(group_b)

    denom = math.sqrt(var_a / n_a + var_b / n_b)
    if denom == 0:
        t_stat = 0.0
        df = float(n_a + n_b - 2)
    else:
        t_stat = (mean_a - mean_b) / denom
        df = _welch_satterthwaite(var_a, n_a, var_b, n_b)

    p_value = 1.0 if t_stat == 0 else 2 * (1 - t_distribution_cdf(abs(t_stat), df))

    result = TTestResult(
        t_statistic=t_stat,
        degrees_of_freedom=df,
        p_value=p_value,
        significant=p_value <= alpha,
        mean_a=mean_a,
        mean_b=mean_b,
        sd_a=math.sqrt(var_a),
        sd_b=math.sqrt(var_b),
    )
    logger.debug(
        "welch_t_test",
        t_statistic=round(t_stat, 4),
        df=round(df, 2),
        p_value=p_value,
        significant=result.significant,
    )
    return result


def cohens_d(group_a: list[float], group_b: list[float]) -> float:
    """Standardized mean difference over the pooled SD; 0.0 when the pooled SD is zero."""
    pooled_sd = math.sqrt((variance(group_a) + variance(group_b)) / 2)
    if pooled_sd == 0:
        return 0.0
    return (mean(group_a) - mean(group_b)) / pooled_sd

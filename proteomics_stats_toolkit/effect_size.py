"""
Effect Size Module for Proteomics Statistics Toolkit

Functions for deciding biological relevance from the confidence interval of a
difference rather than from its point estimate. The minimum-magnitude
plausible effect is the interval bound closest to zero, or zero itself when
the interval touches or crosses zero.
"""

import pandas as pd
import numpy as np

from .statistical_analysis import StatisticalConfig

REGULATION_INCREASED = "Increased"
REGULATION_DECREASED = "Decreased"
REGULATION_UNCHANGED = "Unchanged"


def minimum_magnitude_effect(ci_low: float, ci_high: float) -> float:
    """
    Smallest effect consistent with a confidence interval.

    Returns 0 when the bounds differ in sign or either bound is exactly zero;
    otherwise the bound with the smaller absolute value, sign retained.
    Missing bounds give NaN.
    """
    if pd.isna(ci_low) or pd.isna(ci_high):
        return np.nan

    if ci_low == 0 or ci_high == 0 or np.sign(ci_low) != np.sign(ci_high):
        return 0.0

    return ci_low if abs(ci_low) < abs(ci_high) else ci_high


def apply_effect_size_filter(
    results_df: pd.DataFrame, config: StatisticalConfig
) -> pd.DataFrame:
    """
    Annotate results with the minimum plausible effect and relevance call.

    Adds min_effect and relevant (|min_effect| > log2(relevance_fold_threshold)).
    Rows whose interval is missing are never relevant.
    """

    filtered = results_df.copy()

    ci_low = filtered["ci_low"].to_numpy(dtype=float)
    ci_high = filtered["ci_high"].to_numpy(dtype=float)

    touches_zero = (ci_low == 0) | (ci_high == 0) | (np.sign(ci_low) != np.sign(ci_high))
    closest_bound = np.where(np.abs(ci_low) < np.abs(ci_high), ci_low, ci_high)
    min_effect = np.where(touches_zero, 0.0, closest_bound)
    min_effect = np.where(np.isnan(ci_low) | np.isnan(ci_high), np.nan, min_effect)

    threshold = config.relevance_log_threshold
    filtered["min_effect"] = min_effect
    # NaN comparisons are False, so missing intervals are not relevant
    filtered["relevant"] = np.abs(min_effect) > threshold

    print(
        f"Effect size filter: {int(filtered['relevant'].sum())} proteins with "
        f"|min effect| > {threshold:.4f} (log2 of {config.relevance_fold_threshold})"
    )

    return filtered


def classify_regulation(decisions: pd.DataFrame) -> pd.Series:
    """
    Label each protein Increased, Decreased or Unchanged.

    Only proteins that are both significant and relevant receive a direction,
    taken from the sign of the difference.
    """
    called = decisions["significant"].astype(bool) & decisions["relevant"].astype(bool)

    regulation = pd.Series(REGULATION_UNCHANGED, index=decisions.index, name="regulation")
    regulation[called & (decisions["difference"] > 0)] = REGULATION_INCREASED
    regulation[called & (decisions["difference"] < 0)] = REGULATION_DECREASED

    return regulation

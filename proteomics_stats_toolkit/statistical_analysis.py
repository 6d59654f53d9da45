"""
Statistical Analysis Module for Proteomics Data

This module provides a configuration-driven two-group differential abundance
analysis: a per-protein Student's t-test with a confidence interval for the
difference in means, followed by Benjamini-Hochberg false discovery rate
control.
"""

import pandas as pd
import numpy as np
from scipy.stats import ttest_ind
from scipy.stats import t as student_t
from statsmodels.stats.multitest import multipletests
from typing import Any, Dict, List

from .data_import import PROTEIN_ID
from .validation import MalformedInputError, validate_sample_groups

SUPPORTED_CORRECTION_METHODS = ["fdr_bh", "fdr_by", "bonferroni", "holm", "none"]

TEST_RESULT_COLUMNS = [
    PROTEIN_ID,
    "p_value",
    "difference",
    "ci_low",
    "ci_high",
    "t",
    "mean_a",
    "mean_b",
    "n_a",
    "n_b",
    "test_method",
]


class StatisticalConfig:
    """Configuration class for differential abundance decision parameters

    Thresholds:
    - fdr_threshold: proteins with fdr strictly below this are significant
    - relevance_fold_threshold: linear fold change the minimum plausible
      effect must exceed to be called biologically relevant

    Experimental design:
    - sample_groups maps each sample column to one of the two group_labels.
      The reported difference is mean(group_labels[1]) - mean(group_labels[0]).
    """

    def __init__(self):
        # Significance and relevance thresholds
        self.fdr_threshold = 0.01
        self.relevance_fold_threshold = 1.25
        self.confidence_level = 0.95

        # Multiple testing correction
        self.correction_method = "fdr_bh"

        # Log transformation applied before testing
        self.log_base = "log2"

        # Experimental design
        self.group_labels = ["A", "B"]
        self.sample_groups = {}

        # Aggregation behaviour
        self.drop_incomplete = True

        # Simulation / demo data only
        self.random_seed = 42

    @property
    def relevance_log_threshold(self) -> float:
        """Relevance threshold on the log2 scale."""
        return float(np.log2(self.relevance_fold_threshold))

    def assign_groups_by_position(self, sample_columns, n_group_a=None):
        """Assign the first n_group_a columns to group A and the rest to group B.

        Defaults to splitting the columns in half.
        """
        sample_columns = list(sample_columns)
        if n_group_a is None:
            n_group_a = len(sample_columns) // 2

        label_a, label_b = self.group_labels
        self.sample_groups = {
            col: (label_a if i < n_group_a else label_b)
            for i, col in enumerate(sample_columns)
        }
        return self

    def assign_groups_from_mapping(self, sample_groups):
        """Use an explicit column -> label mapping; labels are taken in order of appearance."""
        labels = list(dict.fromkeys(sample_groups.values()))
        if len(labels) != 2:
            raise MalformedInputError(
                f"Sample groups must contain exactly two labels, got: {labels}"
            )
        self.group_labels = labels
        self.sample_groups = dict(sample_groups)
        return self

    def group_columns(self, label, sample_columns=None) -> List[str]:
        """Sample columns assigned to a group label, in column order."""
        columns = sample_columns if sample_columns is not None else self.sample_groups.keys()
        return [col for col in columns if self.sample_groups.get(col) == label]

    def validate(self, sample_columns=None):
        """Validate threshold ranges and, if sample columns are given, the group design"""
        if not 0 < self.fdr_threshold <= 1:
            raise ValueError(f"fdr_threshold must be in (0, 1], got {self.fdr_threshold}")

        if self.relevance_fold_threshold < 1:
            raise ValueError(
                f"relevance_fold_threshold must be >= 1, got {self.relevance_fold_threshold}"
            )

        if not 0 < self.confidence_level < 1:
            raise ValueError(
                f"confidence_level must be in (0, 1), got {self.confidence_level}"
            )

        if self.correction_method not in SUPPORTED_CORRECTION_METHODS:
            raise ValueError(
                f"Unknown correction method: {self.correction_method}. "
                f"Choose one of {SUPPORTED_CORRECTION_METHODS}"
            )

        if sample_columns is not None:
            validate_sample_groups(self.sample_groups, list(sample_columns), self.group_labels)

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fdr_threshold": self.fdr_threshold,
            "relevance_fold_threshold": self.relevance_fold_threshold,
            "confidence_level": self.confidence_level,
            "correction_method": self.correction_method,
            "log_base": self.log_base,
            "group_labels": list(self.group_labels),
            "sample_groups": dict(self.sample_groups),
            "drop_incomplete": self.drop_incomplete,
            "random_seed": self.random_seed,
        }


def run_student_t_test(group_a, group_b, confidence_level: float = 0.95) -> Dict[str, Any]:
    """
    Two-sided, equal-variance Student's t-test of group B against group A.

    Parameters:
    -----------
    group_a, group_b : array-like
        Log-scale values for each group (at least 2 each)
    confidence_level : float
        Confidence level for the interval on mean(B) - mean(A)

    Returns:
    --------
    dict
        t, p_value, difference, ci_low, ci_high, mean_a, mean_b, n_a, n_b,
        test_method

    Notes:
    ------
    When both groups have zero variance the t statistic is undefined. Equal
    means give difference 0, p_value 1 and a zero-width interval at 0;
    different means give p_value 0 and a zero-width interval at the
    difference.
    """
    a = np.asarray(group_a, dtype=float)
    b = np.asarray(group_b, dtype=float)
    n_a, n_b = len(a), len(b)

    if n_a < 2 or n_b < 2:
        raise MalformedInputError(
            f"Each group needs at least 2 values, got {n_a} and {n_b}"
        )

    mean_a = a.mean()
    mean_b = b.mean()
    difference = mean_b - mean_a
    dof = n_a + n_b - 2

    pooled_var = ((n_a - 1) * a.var(ddof=1) + (n_b - 1) * b.var(ddof=1)) / dof

    result = {
        "mean_a": mean_a,
        "mean_b": mean_b,
        "n_a": n_a,
        "n_b": n_b,
        "test_method": "Student t-test",
    }

    if pooled_var == 0:
        if difference == 0:
            result.update(
                {
                    "t": 0.0,
                    "p_value": 1.0,
                    "difference": 0.0,
                    "ci_low": 0.0,
                    "ci_high": 0.0,
                    "test_method": "Degenerate: zero variance, equal means",
                }
            )
        else:
            result.update(
                {
                    "t": np.copysign(np.inf, difference),
                    "p_value": 0.0,
                    "difference": difference,
                    "ci_low": difference,
                    "ci_high": difference,
                    "test_method": "Degenerate: zero variance",
                }
            )
        return result

    t_stat, p_value = ttest_ind(b, a, equal_var=True)

    standard_error = np.sqrt(pooled_var * (1.0 / n_a + 1.0 / n_b))
    t_crit = student_t.ppf(0.5 + confidence_level / 2.0, dof)

    result.update(
        {
            "t": float(t_stat),
            "p_value": float(p_value),
            "difference": difference,
            "ci_low": difference - t_crit * standard_error,
            "ci_high": difference + t_crit * standard_error,
        }
    )
    return result


def run_differential_tests(log_data: pd.DataFrame, config: StatisticalConfig) -> pd.DataFrame:
    """
    Run the two-group t-test independently for every protein.

    Parameters:
    -----------
    log_data : pd.DataFrame
        Log-transformed protein x sample table indexed by protein_id
    config : StatisticalConfig
        Configuration with sample_groups and group_labels

    Returns:
    --------
    pd.DataFrame
        One TestResult row per protein
    """

    print("Running Student t-test analysis...")

    label_a, label_b = config.group_labels
    columns_a = config.group_columns(label_a, log_data.columns)
    columns_b = config.group_columns(label_b, log_data.columns)

    print(f"  Group A ({label_a}): {columns_a}")
    print(f"  Group B ({label_b}): {columns_b}")

    results = []
    n_proteins = len(log_data)

    values_a = log_data[columns_a].to_numpy(dtype=float)
    values_b = log_data[columns_b].to_numpy(dtype=float)

    for i, protein_id in enumerate(log_data.index):
        if (i + 1) % 200 == 0:
            print(f"  Processed {i + 1}/{n_proteins} proteins...")

        result = run_student_t_test(
            values_a[i], values_b[i], confidence_level=config.confidence_level
        )
        result[PROTEIN_ID] = protein_id
        results.append(result)

    print(f"✓ Student t-test completed for {len(results)} proteins")
    return pd.DataFrame(results, columns=TEST_RESULT_COLUMNS)


def apply_multiple_testing_correction(
    results_df: pd.DataFrame, config: StatisticalConfig
) -> pd.DataFrame:
    """
    Apply multiple testing correction over the complete set of tests.

    Adds fdr (adjusted p-value, at most 1) and significant
    (fdr < config.fdr_threshold). Missing p-values are treated as 1.
    """

    corrected = results_df.copy()

    if len(corrected) == 0:
        corrected["fdr"] = pd.Series(dtype=float)
        corrected["significant"] = pd.Series(dtype=bool)
        return corrected

    all_pvalues = corrected["p_value"].fillna(1.0).to_numpy(dtype=float)

    if config.correction_method == "none":
        adj_pvalues = all_pvalues
    else:
        _, adj_pvalues, _, _ = multipletests(all_pvalues, method=config.correction_method)

    corrected["fdr"] = np.minimum(adj_pvalues, 1.0)
    corrected["significant"] = corrected["fdr"] < config.fdr_threshold

    print("Multiple testing correction applied:")
    print(f"  Method: {config.correction_method}")
    print(
        f"  Significant proteins (FDR < {config.fdr_threshold}): {int(corrected['significant'].sum())}"
    )

    return corrected


def display_analysis_summary(
    decisions: pd.DataFrame, config: StatisticalConfig, label_top_n: int = 10
) -> Dict[str, Any]:
    """
    Display a summary of decision results

    Parameters:
    -----------
    decisions : pd.DataFrame
        Output of the decision pipeline
    config : StatisticalConfig
        Configuration used for the analysis
    label_top_n : int
        Number of top significant proteins to display

    Returns:
    --------
    dict
        Summary statistics for downstream use
    """

    if decisions is None or len(decisions) == 0:
        print("⚠️ No decision results available")
        return {}

    print("=" * 60)
    print("STATISTICAL ANALYSIS SUMMARY")
    print("=" * 60)

    called = decisions["significant"] & decisions["relevant"]
    summary = {
        "total_proteins": len(decisions),
        "significant": int(decisions["significant"].sum()),
        "relevant": int(decisions["relevant"].sum()),
        "significant_and_relevant": int(called.sum()),
        "increased": int((called & (decisions["difference"] > 0)).sum()),
        "decreased": int((called & (decisions["difference"] < 0)).sum()),
        "fdr_threshold": config.fdr_threshold,
        "relevance_fold_threshold": config.relevance_fold_threshold,
    }

    print("Analysis Overview:")
    print(f"  Proteins tested: {summary['total_proteins']:,}")
    print(f"  Significant (FDR < {config.fdr_threshold}): {summary['significant']:,}")
    print(
        f"  Relevant (|min effect| > log2({config.relevance_fold_threshold})): {summary['relevant']:,}"
    )
    print(f"  Significant and relevant: {summary['significant_and_relevant']:,}")
    print(f"    Increased: {summary['increased']:,}")
    print(f"    Decreased: {summary['decreased']:,}")

    if summary["significant_and_relevant"] > 0:
        print(f"\n=== TOP {label_top_n} CHANGED PROTEINS ===")
        display_cols = [PROTEIN_ID, "difference", "ci_low", "ci_high", "p_value", "fdr"]
        top_results = decisions[called].nsmallest(label_top_n, "p_value")[display_cols]
        print(top_results.to_string(index=False))

    print("\n✓ Analysis summary complete!")

    return summary

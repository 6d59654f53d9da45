"""
Decision Pipeline Module for Proteomics Statistics Toolkit

Runs the complete peptide-to-decision workflow: aggregation, total-sum
normalization, log2 transformation, per-protein t-tests, false discovery rate
control and confidence-interval based relevance filtering. Each step returns a
new table; nothing is modified in place.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from .aggregation import AggregationResult, aggregate_peptides_to_proteins
from .data_import import identify_sample_columns
from .effect_size import apply_effect_size_filter, classify_regulation
from .normalization import calculate_normalization_stats, log_transform, total_sum_normalize
from .statistical_analysis import (
    StatisticalConfig,
    apply_multiple_testing_correction,
    run_differential_tests,
)
from .validation import MalformedInputError


@dataclass
class PipelineResult:
    """Intermediate and final tables of one pipeline run."""

    aggregation: AggregationResult
    normalized_data: pd.DataFrame
    log_data: pd.DataFrame
    decisions: pd.DataFrame
    normalization_stats: Dict[str, Any] = field(default_factory=dict)
    config: Optional[StatisticalConfig] = None

    @property
    def n_incomplete_dropped(self) -> int:
        return self.aggregation.n_incomplete_dropped


def run_decision_pipeline(
    peptides: pd.DataFrame,
    config: StatisticalConfig,
    sample_columns: Optional[List[str]] = None,
) -> PipelineResult:
    """
    Turn peptide measurements into per-protein significance and relevance calls.

    Parameters:
    -----------
    peptides : pd.DataFrame
        Peptide table (Sequence, Modifications, master_protein, sample columns)
    config : StatisticalConfig
        Thresholds and the sample-to-group design. If no groups are assigned,
        the sample columns are split in half by position on a copy; the
        caller's config is not modified.
    sample_columns : List[str], optional
        Quantification columns. If None, all non-identifier columns.

    Returns:
    --------
    PipelineResult
    """

    print("=" * 60)
    print("PROTEIN ABUNDANCE DECISION PIPELINE")
    print("=" * 60)

    if sample_columns is None:
        sample_columns = identify_sample_columns(peptides)

    if not config.sample_groups:
        print("  No sample groups configured - assigning groups by column position")
        config = copy.deepcopy(config).assign_groups_by_position(sample_columns)

    try:
        config.validate(sample_columns)
    except ValueError as e:
        raise MalformedInputError(f"Configuration error: {e}") from e

    print("\nStep 1: Aggregating peptides to proteins...")
    aggregation = aggregate_peptides_to_proteins(
        peptides, sample_columns, drop_incomplete=config.drop_incomplete
    )

    if aggregation.n_proteins == 0:
        raise MalformedInputError("No complete proteins remain after aggregation")

    print("\nStep 2: Normalizing sample columns...")
    normalized_data = total_sum_normalize(aggregation.protein_data, sample_columns)
    normalization_stats = calculate_normalization_stats(
        aggregation.protein_data, normalized_data, sample_columns
    )

    print(f"\nStep 3: Applying {config.log_base} transformation...")
    log_data = log_transform(normalized_data, sample_columns, base=config.log_base)

    print("\nStep 4: Testing for differential abundance...")
    test_results = run_differential_tests(log_data, config)

    print("\nStep 5: Controlling the false discovery rate...")
    corrected = apply_multiple_testing_correction(test_results, config)

    print("\nStep 6: Filtering by minimum plausible effect size...")
    decisions = apply_effect_size_filter(corrected, config)
    decisions["regulation"] = classify_regulation(decisions)

    print("\n✓ Decision pipeline completed")
    print(f"  Proteins tested: {len(decisions):,}")
    print(f"  Proteins dropped as incomplete: {aggregation.n_incomplete_dropped:,}")

    return PipelineResult(
        aggregation=aggregation,
        normalized_data=normalized_data,
        log_data=log_data,
        decisions=decisions.reset_index(drop=True),
        normalization_stats=normalization_stats,
        config=config,
    )

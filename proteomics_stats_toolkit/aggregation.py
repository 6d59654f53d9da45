"""
Peptide Aggregation Module for Proteomics Statistics Toolkit

Functions for collapsing peptide measurements into one quantification row per
protein: modified forms of a sequence are summed, sequences are summarized by
their per-sample median, and proteins with missing values are excluded.
"""

import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pandas as pd

from .data_import import SEQUENCE_COLUMN, PROTEIN_COLUMN, PROTEIN_ID, identify_sample_columns
from .validation import IncompleteRowError, validate_peptide_table


@dataclass
class AggregationResult:
    """Protein-level table plus the bookkeeping needed to report exclusions.

    Attributes
    ----------
    protein_data : pd.DataFrame
        Complete protein x sample table indexed by protein_id
    n_peptides : int
        Peptide rows that entered aggregation
    n_sequences : int
        (sequence, protein) groups after summing modified forms
    n_proteins_before_filter : int
        Proteins after the median step, before dropping incomplete rows
    dropped_proteins : List[str]
        Proteins excluded because at least one sample value was absent
    n_unassigned_peptides : int
        Peptide rows without a sequence or protein identifier
    """

    protein_data: pd.DataFrame
    n_peptides: int = 0
    n_sequences: int = 0
    n_proteins_before_filter: int = 0
    dropped_proteins: List[str] = field(default_factory=list)
    n_unassigned_peptides: int = 0

    @property
    def n_incomplete_dropped(self) -> int:
        return len(self.dropped_proteins)

    @property
    def n_proteins(self) -> int:
        return len(self.protein_data)


def _sum_propagating_missing(values: pd.Series) -> float:
    return values.sum(skipna=False)


def _median_propagating_missing(values: pd.Series) -> float:
    return values.median(skipna=False)


def sum_modified_peptides(
    peptides: pd.DataFrame, sample_columns: List[str]
) -> pd.DataFrame:
    """
    Sum the modified forms of each peptide sequence.

    Rows sharing (Sequence, master_protein) are summed column-wise. A missing
    value in any contributing row makes the group's sum missing for that
    sample; missing values are never treated as zero.

    Returns:
    --------
    pd.DataFrame
        Columns: Sequence, master_protein, then the sample columns
    """
    keys = [SEQUENCE_COLUMN, PROTEIN_COLUMN]

    sequence_sums = (
        peptides.groupby(keys, sort=True)[sample_columns]
        .agg(_sum_propagating_missing)
        .reset_index()
    )

    return sequence_sums


def median_peptides_to_proteins(
    sequence_sums: pd.DataFrame, sample_columns: List[str]
) -> pd.DataFrame:
    """
    Summarize sequence-level sums into protein-level values.

    Each sample column takes the median across all sequences assigned to the
    protein. A single-sequence protein keeps that sequence's values. A missing
    value in any contributing sequence makes the median missing.

    Returns:
    --------
    pd.DataFrame
        Protein x sample table indexed by protein_id
    """
    protein_data = sequence_sums.groupby(PROTEIN_COLUMN, sort=True)[sample_columns].agg(
        _median_propagating_missing
    )
    protein_data.index.name = PROTEIN_ID

    return protein_data.astype(float)


def drop_incomplete_rows(
    protein_data: pd.DataFrame,
    sample_columns: Optional[List[str]] = None,
    drop_incomplete: bool = True,
) -> Tuple[pd.DataFrame, List[str]]:
    """
    Remove proteins that have any missing sample value.

    Parameters:
    -----------
    protein_data : pd.DataFrame
        Protein x sample table indexed by protein_id
    sample_columns : List[str], optional
        Columns to check; defaults to all columns
    drop_incomplete : bool
        If False, raise instead of dropping

    Returns:
    --------
    tuple : (complete_data, dropped_ids)

    Raises:
    -------
    IncompleteRowError: If drop_incomplete is False and any row is incomplete
    """
    if sample_columns is None:
        sample_columns = list(protein_data.columns)

    incomplete_mask = protein_data[sample_columns].isna().any(axis=1)
    dropped_ids = [str(protein_id) for protein_id in protein_data.index[incomplete_mask]]

    if dropped_ids and not drop_incomplete:
        raise IncompleteRowError(
            f"{len(dropped_ids)} protein(s) have missing values after aggregation: "
            f"{dropped_ids[:5]}{'...' if len(dropped_ids) > 5 else ''}",
            row_ids=dropped_ids,
        )

    complete_data = protein_data.loc[~incomplete_mask].copy()

    return complete_data, dropped_ids


def aggregate_peptides_to_proteins(
    peptides: pd.DataFrame,
    sample_columns: Optional[List[str]] = None,
    drop_incomplete: bool = True,
) -> AggregationResult:
    """
    Collapse a peptide table into one complete quantification row per protein.

    Parameters:
    -----------
    peptides : pd.DataFrame
        Peptide table with Sequence, Modifications, master_protein and sample
        columns (missing values as NaN)
    sample_columns : List[str], optional
        Quantification columns. If None, all non-identifier columns are used.
    drop_incomplete : bool
        Drop proteins with missing values (default). If False, raise
        IncompleteRowError instead.

    Returns:
    --------
    AggregationResult
    """

    print("Aggregating peptides to proteins...")

    if sample_columns is None:
        sample_columns = identify_sample_columns(peptides)

    validate_peptide_table(peptides, sample_columns)

    unassigned_mask = peptides[[SEQUENCE_COLUMN, PROTEIN_COLUMN]].isna().any(axis=1)
    n_unassigned = int(unassigned_mask.sum())
    if n_unassigned:
        print(f"  Ignoring {n_unassigned} peptide rows without sequence or protein")
    assigned_peptides = peptides.loc[~unassigned_mask]

    sequence_sums = sum_modified_peptides(assigned_peptides, sample_columns)
    print(
        f"  Summed {len(assigned_peptides):,} peptide rows into {len(sequence_sums):,} sequences"
    )

    protein_data = median_peptides_to_proteins(sequence_sums, sample_columns)
    print(f"  Median-summarized sequences into {len(protein_data):,} proteins")

    complete_data, dropped_ids = drop_incomplete_rows(
        protein_data, sample_columns, drop_incomplete=drop_incomplete
    )

    if dropped_ids:
        message = (
            f"Dropped {len(dropped_ids)} protein(s) with missing values after aggregation"
        )
        print(f"  {message}")
        warnings.warn(message)

    print(f"✓ Aggregation completed: {len(complete_data):,} complete proteins")

    return AggregationResult(
        protein_data=complete_data,
        n_peptides=len(peptides),
        n_sequences=len(sequence_sums),
        n_proteins_before_filter=len(protein_data),
        dropped_proteins=dropped_ids,
        n_unassigned_peptides=n_unassigned,
    )

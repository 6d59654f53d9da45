"""
Input Validation Module for Proteomics Statistics Toolkit

Functions for validating peptide tables and experimental group designs, and
the exception types raised when input cannot be analyzed.
"""

import pandas as pd
import numpy as np
from typing import Dict, List, Optional


class MalformedInputError(Exception):
    """Custom exception for structurally invalid input data."""
    def __init__(self, message):
        super().__init__(message)


class IncompleteRowError(Exception):
    """Custom exception for rows that keep missing values after aggregation."""
    def __init__(self, message, row_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.row_ids = list(row_ids) if row_ids is not None else []


def validate_peptide_table(
    data: pd.DataFrame,
    sample_columns: List[str],
    required_columns: Optional[List[str]] = None,
) -> bool:
    """
    Validate that a peptide table has the identifier columns and numeric
    quantification columns needed for aggregation.

    Parameters:
    -----------
    data : pd.DataFrame
        Peptide-level table
    sample_columns : List[str]
        Quantification columns that must hold numeric values
    required_columns : List[str], optional
        Identifier columns that must be present

    Returns:
    --------
    bool
        True if the table is valid

    Raises:
    -------
    MalformedInputError: If columns are missing or values are non-numeric
    """
    if required_columns is None:
        from .data_import import PEPTIDE_ID_COLUMNS

        required_columns = PEPTIDE_ID_COLUMNS

    missing_cols = [col for col in required_columns if col not in data.columns]
    if missing_cols:
        raise MalformedInputError(f"Missing required columns: {missing_cols}")

    if not sample_columns:
        raise MalformedInputError("No quantification columns found in peptide table")

    missing_samples = [col for col in sample_columns if col not in data.columns]
    if missing_samples:
        raise MalformedInputError(f"Missing quantification columns: {missing_samples}")

    non_numeric = [
        col for col in sample_columns if not pd.api.types.is_numeric_dtype(data[col])
    ]
    if non_numeric:
        raise MalformedInputError(
            f"Non-numeric values in quantification columns: {non_numeric}"
        )

    return True


def validate_sample_groups(
    sample_groups: Dict[str, str],
    sample_columns: List[str],
    group_labels: List[str],
    min_replicates: int = 2,
) -> bool:
    """
    Validate the column-to-group assignment used for two-sample testing.

    Every sample column must be assigned to one of exactly two group labels,
    and each group needs enough replicates to estimate a variance.
    """
    if len(group_labels) != 2 or group_labels[0] == group_labels[1]:
        raise MalformedInputError(
            f"Exactly two distinct group labels are required, got: {group_labels}"
        )

    unassigned = [col for col in sample_columns if col not in sample_groups]
    if unassigned:
        raise MalformedInputError(f"Sample columns without a group: {unassigned}")

    unknown = {
        col: label
        for col, label in sample_groups.items()
        if col in sample_columns and label not in group_labels
    }
    if unknown:
        raise MalformedInputError(
            f"Sample columns assigned to unknown groups: {unknown}. "
            f"Expected one of {group_labels}"
        )

    for label in group_labels:
        n_replicates = sum(
            1 for col in sample_columns if sample_groups.get(col) == label
        )
        if n_replicates < min_replicates:
            raise MalformedInputError(
                f"Group '{label}' has {n_replicates} replicate(s); "
                f"at least {min_replicates} are required"
            )

    return True


def generate_input_diagnostic_report(
    data: pd.DataFrame, sample_columns: List[str], verbose: bool = True
) -> Dict:
    """
    Summarize a peptide table before aggregation.

    Returns a dict with row, sequence and protein counts and the number of
    missing values per sample column.
    """
    from .data_import import SEQUENCE_COLUMN, PROTEIN_COLUMN

    missing_per_column = {
        col: int(data[col].isna().sum()) for col in sample_columns
    }
    report = {
        "n_rows": len(data),
        "n_sequences": int(data[SEQUENCE_COLUMN].nunique()) if SEQUENCE_COLUMN in data else 0,
        "n_proteins": int(data[PROTEIN_COLUMN].nunique()) if PROTEIN_COLUMN in data else 0,
        "missing_per_column": missing_per_column,
        "rows_with_missing": int(data[sample_columns].isna().any(axis=1).sum()),
        "total_missing": int(np.sum(list(missing_per_column.values()))),
    }

    if verbose:
        print("INPUT DIAGNOSTIC REPORT")
        print("=" * 50)
        print(f"  Peptide rows: {report['n_rows']:,}")
        print(f"  Unique sequences: {report['n_sequences']:,}")
        print(f"  Unique proteins: {report['n_proteins']:,}")
        print(f"  Rows with missing values: {report['rows_with_missing']:,}")
        for col, n_missing in missing_per_column.items():
            print(f"    {col}: {n_missing} missing")

    return report

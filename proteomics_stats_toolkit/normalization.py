"""
Data Normalization Module for Proteomics Statistics Toolkit

Functions for rescaling protein quantification columns so that total abundance
is comparable across samples, and for log-transforming the result.
"""

import warnings
import pandas as pd
import numpy as np
from typing import Dict, Optional, Any, List

from .validation import MalformedInputError


def _resolve_sample_columns(
    data: pd.DataFrame, sample_columns: Optional[List[str]] = None
) -> List[str]:
    """Use the given sample columns, or every numeric column."""
    if sample_columns is None:
        return data.select_dtypes(include=[np.number]).columns.tolist()

    missing = [col for col in sample_columns if col not in data.columns]
    if missing:
        raise MalformedInputError(f"Sample columns not found in data: {missing}")
    return list(sample_columns)


def calculate_correction_factors(
    protein_data: pd.DataFrame, sample_columns: Optional[List[str]] = None
) -> pd.Series:
    """
    Calculate per-sample correction factors for total-sum normalization.

    correction_factor[j] = column_sum[j] / mean(column_sums)

    Parameters:
    -----------
    protein_data : pd.DataFrame
        Protein x sample table
    sample_columns : list, optional
        Sample columns. If None, uses all numeric columns

    Returns:
    --------
    pd.Series : Correction factor per sample column

    Raises:
    -------
    MalformedInputError: If any sample column sums to zero
    """
    sample_columns = _resolve_sample_columns(protein_data, sample_columns)

    column_sums = protein_data[sample_columns].sum(axis=0)

    zero_columns = column_sums.index[column_sums == 0].tolist()
    if zero_columns:
        raise MalformedInputError(
            f"Cannot normalize: column sum is zero for {zero_columns}"
        )

    return column_sums / column_sums.mean()


def total_sum_normalize(
    protein_data: pd.DataFrame, sample_columns: Optional[list] = None
) -> pd.DataFrame:
    """
    Total-sum normalization - divide each sample by its share of the mean
    column sum. This keeps data on the original scale.

    After normalization every sample column sums to the mean of the input
    column sums, and the ordering of proteins within each column is
    unchanged.

    Parameters:
    -----------
    protein_data : pd.DataFrame
        Protein x sample table (may contain non-sample columns)
    sample_columns : Optional[list]
        List of sample column names. If None, auto-detects numeric columns

    Returns:
    --------
    pd.DataFrame : Normalized data with the same index and columns as input
    """

    print("Applying total-sum normalization...")

    sample_columns = _resolve_sample_columns(protein_data, sample_columns)

    if not sample_columns:
        warnings.warn("No numeric sample columns found for normalization")
        return protein_data.copy()

    correction_factors = calculate_correction_factors(protein_data, sample_columns)

    normalized_data = protein_data.copy()
    normalized_data[sample_columns] = (
        protein_data[sample_columns].div(correction_factors, axis=1)
    )

    print(
        f"  Correction factors: {correction_factors.min():.3f} to {correction_factors.max():.3f}"
    )
    print(f"Total-sum normalization completed for {len(sample_columns)} samples")

    return normalized_data


def log_transform(
    data: pd.DataFrame, sample_columns: Optional[list] = None, base: str = "log2"
) -> pd.DataFrame:
    """
    Log transform sample columns.

    Parameters:
    -----------
    data : pd.DataFrame
        Input data on the linear scale
    sample_columns : Optional[list]
        Columns to transform. If None, all numeric columns
    base : str
        'log2', 'log10', or 'ln'

    Returns:
    --------
    pd.DataFrame : Log-transformed copy of the data

    Raises:
    -------
    MalformedInputError: If any value to be transformed is zero or negative
    """
    log_functions = {"log2": np.log2, "log10": np.log10, "ln": np.log}
    if base not in log_functions:
        raise ValueError("base must be 'log2', 'log10', or 'ln'")

    sample_columns = _resolve_sample_columns(data, sample_columns)

    non_positive = (data[sample_columns] <= 0).any()
    if non_positive.any():
        raise MalformedInputError(
            f"Cannot apply {base}: non-positive values in {non_positive[non_positive].index.tolist()}"
        )

    transformed_data = data.copy()
    transformed_data[sample_columns] = log_functions[base](data[sample_columns])

    return transformed_data


def calculate_normalization_stats(
    data: pd.DataFrame,
    normalized_data: pd.DataFrame,
    sample_columns: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Calculate statistics to assess normalization effectiveness.

    Parameters:
    -----------
    data : pd.DataFrame
        Original data
    normalized_data : pd.DataFrame
        Normalized data
    sample_columns : list, optional
        Sample columns to compare

    Returns:
    --------
    Dict[str, Any] : Column sums before/after, correction factors and the
    relative spread of column sums
    """
    sample_columns = _resolve_sample_columns(data, sample_columns)

    original_sums = data[sample_columns].sum(axis=0)
    normalized_sums = normalized_data[sample_columns].sum(axis=0)

    stats = {
        "original_column_sums": original_sums.to_dict(),
        "normalized_column_sums": normalized_sums.to_dict(),
        "target_column_sum": float(original_sums.mean()),
        "correction_factors": (original_sums / original_sums.mean()).to_dict(),
        "original_sum_cv": float(original_sums.std() / original_sums.mean()),
        "normalized_sum_cv": float(normalized_sums.std() / normalized_sums.mean()),
    }

    return stats

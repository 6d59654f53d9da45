"""
Data Import Module for Proteomics Statistics Toolkit

Functions for loading tab-separated peptide quantitation files and protein
annotation tables.
"""

import pandas as pd
import re
import os
from typing import Dict, List, Optional

from .validation import MalformedInputError, validate_peptide_table

SEQUENCE_COLUMN = "Sequence"
MODIFICATION_COLUMN = "Modifications"
PROTEIN_COLUMN = "master_protein"
PEPTIDE_ID_COLUMNS = [SEQUENCE_COLUMN, MODIFICATION_COLUMN, PROTEIN_COLUMN]

PROTEIN_ID = "protein_id"

NA_MARKERS = ["NA", "NaN", "nan", ""]

# Header variants seen in UniProt-style annotation exports
ANNOTATION_COLUMN_ALIASES = {
    "protein_id": PROTEIN_ID,
    "Protein": PROTEIN_ID,
    "Entry": PROTEIN_ID,
    "name": "name",
    "Entry name": "name",
    "Entry Name": "name",
    "description": "description",
    "Protein names": "description",
    "Description": "description",
}


def load_peptide_data(
    peptide_file: str, sample_columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Load a tab-separated peptide quantitation file.

    Parameters:
    -----------
    peptide_file : str
        Path to the peptide TSV file with Sequence, Modifications,
        master_protein and one column per sample
    sample_columns : List[str], optional
        Quantification columns. If None, every column after the identifier
        columns is used.

    Returns:
    --------
    pd.DataFrame
        Peptide table with missing abundances as NaN

    Raises:
    -------
    MalformedInputError: If the file is missing or structurally invalid
    """

    print("=== LOADING PEPTIDE DATA ===\n")

    if not os.path.exists(peptide_file):
        raise MalformedInputError(f"Peptide file not found: {peptide_file}")

    try:
        peptide_data = pd.read_csv(
            peptide_file,
            sep="\t",
            na_values=NA_MARKERS,
            keep_default_na=False,
        )
    except (ValueError, pd.errors.ParserError) as e:
        raise MalformedInputError(f"Error loading peptide file: {e}") from e

    print(f"✓ Loaded peptide data: {peptide_data.shape}")

    if sample_columns is None:
        sample_columns = identify_sample_columns(peptide_data)

    # Empty modification fields are unmodified peptides, not missing data
    if MODIFICATION_COLUMN in peptide_data.columns:
        peptide_data[MODIFICATION_COLUMN] = peptide_data[MODIFICATION_COLUMN].fillna("")

    validate_peptide_table(peptide_data, sample_columns)

    # Numeric-looking identifiers stay identifiers
    for col in [SEQUENCE_COLUMN, PROTEIN_COLUMN]:
        peptide_data[col] = peptide_data[col].map(
            lambda value: value if pd.isna(value) else str(value)
        )

    print(f"  Sample columns ({len(sample_columns)}): {sample_columns}")
    print(f"  Unique proteins: {peptide_data[PROTEIN_COLUMN].nunique():,}")

    return peptide_data[PEPTIDE_ID_COLUMNS + list(sample_columns)].copy()


def identify_sample_columns(data: pd.DataFrame) -> List[str]:
    """
    Identify quantification columns in a peptide table.

    Every column that is not an identifier column is treated as a sample,
    in file order.
    """
    return [col for col in data.columns if col not in PEPTIDE_ID_COLUMNS]


def _condition_prefix(column_name: str) -> str:
    """Strip a trailing replicate suffix such as '_1', '.2' or 'rep3'."""
    match = re.match(r"^(.*?)[_.\-\s]*(?:rep)?\d+$", column_name, flags=re.IGNORECASE)
    if match and match.group(1):
        return match.group(1)
    return column_name


def infer_sample_groups(sample_columns: List[str]) -> Dict[str, str]:
    """
    Derive the sample-to-condition mapping from column names.

    Columns are named by condition and replicate (e.g. ``ctrl_1``,
    ``treat_3``). The condition prefix becomes the group label. The first
    prefix encountered is treated as group A.

    Returns:
    --------
    Dict[str, str]
        Mapping of sample column to condition label, in column order

    Raises:
    -------
    MalformedInputError: If the columns do not describe exactly two conditions
    """
    sample_groups = {col: _condition_prefix(col) for col in sample_columns}
    labels = list(dict.fromkeys(sample_groups.values()))

    if len(labels) != 2:
        raise MalformedInputError(
            f"Expected sample columns from exactly two conditions, found {len(labels)}: {labels}"
        )

    return sample_groups


def load_protein_annotations(annotation_file: str) -> pd.DataFrame:
    """
    Load a tab-separated protein annotation table.

    Parameters:
    -----------
    annotation_file : str
        Path to a TSV with a protein identifier column plus name and
        description columns

    Returns:
    --------
    pd.DataFrame
        Columns: protein_id, name, description (one row per protein_id)
    """
    if not os.path.exists(annotation_file):
        raise MalformedInputError(f"Annotation file not found: {annotation_file}")

    try:
        annotations = pd.read_csv(annotation_file, sep="\t", dtype=str)
    except (ValueError, pd.errors.ParserError) as e:
        raise MalformedInputError(f"Error loading annotation file: {e}") from e

    rename_map = {
        col: ANNOTATION_COLUMN_ALIASES[col]
        for col in annotations.columns
        if col in ANNOTATION_COLUMN_ALIASES
    }
    annotations = annotations.rename(columns=rename_map)

    if PROTEIN_ID not in annotations.columns:
        raise MalformedInputError(
            f"Annotation file has no protein identifier column. Got: {list(annotations.columns)}"
        )

    for col in ["name", "description"]:
        if col not in annotations.columns:
            annotations[col] = None

    annotations = annotations[[PROTEIN_ID, "name", "description"]]
    annotations = annotations.drop_duplicates(subset=[PROTEIN_ID], keep="first")

    print(f"✓ Loaded annotations for {len(annotations):,} proteins")

    return annotations.reset_index(drop=True)

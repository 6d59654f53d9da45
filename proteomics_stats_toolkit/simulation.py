"""
Simulation Module for Proteomics Statistics Toolkit

Generates synthetic peptide tables with a known set of changed proteins, for
demonstrating and checking the decision pipeline. Not used by the pipeline
itself.
"""

import pandas as pd
import numpy as np
from typing import Tuple

from .data_import import SEQUENCE_COLUMN, MODIFICATION_COLUMN, PROTEIN_COLUMN, PROTEIN_ID

AMINO_ACIDS = list("ACDEFGHIKLMNPQRSTVWY")
MODIFICATIONS = ["Oxidation (M)", "Deamidated (NQ)", "Phospho (STY)"]


def _random_sequence(rng: np.random.Generator, min_length: int = 7, max_length: int = 20) -> str:
    length = rng.integers(min_length, max_length + 1)
    # Tryptic peptides end in K or R
    return "".join(rng.choice(AMINO_ACIDS, size=length - 1)) + rng.choice(["K", "R"])


def simulate_peptide_data(
    n_proteins: int = 200,
    n_changed: int = 20,
    fold_change: float = 2.0,
    peptides_per_protein: Tuple[int, int] = (1, 6),
    replicates: int = 3,
    condition_labels: Tuple[str, str] = ("ctrl", "treat"),
    abundance_sd: float = 2.0,
    noise_sd: float = 0.2,
    modification_rate: float = 0.2,
    missing_rate: float = 0.02,
    random_seed: int = 42,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Simulate a peptide quantitation table for two conditions.

    Parameters:
    -----------
    n_proteins : int
        Number of proteins
    n_changed : int
        Number of proteins with a true change; half increase, half decrease
    fold_change : float
        Linear fold change applied to changed proteins in the second condition
    peptides_per_protein : tuple
        Inclusive range of distinct sequences per protein
    replicates : int
        Replicates per condition
    condition_labels : tuple
        Condition prefixes used to name sample columns (e.g. ctrl_1)
    abundance_sd : float
        Standard deviation of protein abundance levels on the log2 scale
    noise_sd : float
        Standard deviation of replicate noise on the log2 scale
    modification_rate : float
        Fraction of sequences that also appear as a modified form
    missing_rate : float
        Fraction of abundance values set to missing
    random_seed : int
        Seed for reproducible output

    Returns:
    --------
    tuple : (peptide_data, truth)
        - peptide_data: Sequence, Modifications, master_protein and sample columns
        - truth: protein_id and true_log2_fc for every protein
    """
    if n_changed > n_proteins:
        raise ValueError("n_changed cannot exceed n_proteins")

    rng = np.random.default_rng(random_seed)

    sample_columns = [
        f"{label}_{rep}" for label in condition_labels for rep in range(1, replicates + 1)
    ]
    in_second_condition = np.array([False] * replicates + [True] * replicates)

    protein_ids = [f"P{i:05d}" for i in range(n_proteins)]
    true_log2_fc = np.zeros(n_proteins)
    n_up = n_changed // 2
    true_log2_fc[:n_up] = np.log2(fold_change)
    true_log2_fc[n_up:n_changed] = -np.log2(fold_change)

    rows = []
    for protein_id, log2_fc in zip(protein_ids, true_log2_fc):
        protein_level = rng.normal(20, abundance_sd)
        n_peptides = rng.integers(peptides_per_protein[0], peptides_per_protein[1] + 1)

        for _ in range(n_peptides):
            sequence = _random_sequence(rng)
            log2_values = (
                protein_level
                + rng.normal(0, 1)
                + np.where(in_second_condition, log2_fc, 0.0)
                + rng.normal(0, noise_sd, size=len(sample_columns))
            )
            abundances = np.power(2.0, log2_values)

            if rng.random() < modification_rate:
                modified_fraction = rng.uniform(0.05, 0.5)
                rows.append((sequence, "", protein_id, *(abundances * (1 - modified_fraction))))
                rows.append(
                    (sequence, rng.choice(MODIFICATIONS), protein_id, *(abundances * modified_fraction))
                )
            else:
                rows.append((sequence, "", protein_id, *abundances))

    peptide_data = pd.DataFrame(
        rows, columns=[SEQUENCE_COLUMN, MODIFICATION_COLUMN, PROTEIN_COLUMN] + sample_columns
    )

    if missing_rate > 0:
        missing_mask = rng.random((len(peptide_data), len(sample_columns))) < missing_rate
        values = peptide_data[sample_columns].to_numpy(copy=True)
        values[missing_mask] = np.nan
        peptide_data[sample_columns] = values

    truth = pd.DataFrame({PROTEIN_ID: protein_ids, "true_log2_fc": true_log2_fc})

    print(
        f"Simulated {len(peptide_data):,} peptide rows for {n_proteins} proteins "
        f"({n_changed} changed, seed {random_seed})"
    )

    return peptide_data, truth

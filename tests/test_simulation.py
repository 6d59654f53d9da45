"""
Tests for proteomics_stats_toolkit.simulation module
"""

import numpy as np
import pandas as pd
import pytest

from proteomics_stats_toolkit.simulation import simulate_peptide_data
from proteomics_stats_toolkit.data_import import identify_sample_columns, infer_sample_groups


class TestSimulatePeptideData:
    """Test demo data generation"""

    def test_structure(self):
        """Test identifier and sample columns of the simulated table"""
        peptides, truth = simulate_peptide_data(n_proteins=30, n_changed=6, random_seed=1)

        assert list(peptides.columns[:3]) == ["Sequence", "Modifications", "master_protein"]
        assert identify_sample_columns(peptides) == [
            "ctrl_1", "ctrl_2", "ctrl_3", "treat_1", "treat_2", "treat_3",
        ]
        assert len(truth) == 30
        assert peptides["master_protein"].nunique() == 30

    def test_reproducible_with_seed(self):
        """Test that the same seed gives the same table"""
        first, _ = simulate_peptide_data(n_proteins=20, random_seed=7)
        second, _ = simulate_peptide_data(n_proteins=20, random_seed=7)
        third, _ = simulate_peptide_data(n_proteins=20, random_seed=8)

        pd.testing.assert_frame_equal(first, second)
        assert not first.equals(third)

    def test_truth(self):
        """Test that half the changed proteins increase and half decrease"""
        _, truth = simulate_peptide_data(n_proteins=40, n_changed=10, fold_change=2.0)

        assert (truth["true_log2_fc"] == 1.0).sum() == 5
        assert (truth["true_log2_fc"] == -1.0).sum() == 5
        assert (truth["true_log2_fc"] == 0.0).sum() == 30

    def test_missing_rate(self):
        """Test that missing values are introduced only when requested"""
        complete, _ = simulate_peptide_data(n_proteins=50, missing_rate=0.0)
        sparse, _ = simulate_peptide_data(n_proteins=50, missing_rate=0.2)

        sample_columns = identify_sample_columns(complete)
        assert not complete[sample_columns].isna().any().any()
        assert sparse[sample_columns].isna().any().any()

    def test_modified_forms(self):
        """Test that some sequences appear with a modification"""
        peptides, _ = simulate_peptide_data(n_proteins=50, modification_rate=0.5)

        assert (peptides["Modifications"] != "").any()
        assert (peptides["Modifications"] == "").any()

    def test_groups_inferred_from_columns(self):
        """Test that simulated column names describe two conditions"""
        peptides, _ = simulate_peptide_data(n_proteins=5, condition_labels=("wt", "ko"))

        groups = infer_sample_groups(identify_sample_columns(peptides))
        assert set(groups.values()) == {"wt", "ko"}

    def test_positive_abundances(self):
        """Test that all present abundances are positive"""
        peptides, _ = simulate_peptide_data(n_proteins=20)
        values = peptides[identify_sample_columns(peptides)].to_numpy()

        assert (values[~np.isnan(values)] > 0).all()

    def test_too_many_changed(self):
        """Test that n_changed cannot exceed n_proteins"""
        with pytest.raises(ValueError):
            simulate_peptide_data(n_proteins=5, n_changed=10)

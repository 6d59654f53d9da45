"""
Pytest configuration and fixtures for proteomics_stats_toolkit tests
"""

import pytest
import pandas as pd
import numpy as np
import tempfile
import os
from proteomics_stats_toolkit.statistical_analysis import StatisticalConfig


SAMPLE_NAMES = ["ctrl_1", "ctrl_2", "ctrl_3", "treat_1", "treat_2", "treat_3"]


@pytest.fixture
def sample_columns():
    """Sample column names for testing"""
    return list(SAMPLE_NAMES)


@pytest.fixture
def peptide_data():
    """Create a small peptide table with known aggregation results

    PROT1: two sequences, one with a modified form
    PROT2: a single sequence
    PROT3: a single sequence with a missing value
    PROT4: two sequences, one with a missing value
    """
    rows = [
        ("PEPTIDEAK", "", "PROT1", 100.0, 110.0, 90.0, 200.0, 210.0, 190.0),
        ("PEPTIDEAK", "Oxidation (M)", "PROT1", 10.0, 10.0, 10.0, 20.0, 20.0, 20.0),
        ("SECONDPEPK", "", "PROT1", 50.0, 60.0, 40.0, 100.0, 120.0, 80.0),
        ("THIRDK", "", "PROT2", 30.0, 30.0, 30.0, 30.0, 30.0, 30.0),
        ("FOURTHR", "", "PROT3", 40.0, np.nan, 40.0, 40.0, 40.0, 40.0),
        ("FIFTHK", "", "PROT4", 20.0, 20.0, 20.0, 20.0, 20.0, 20.0),
        ("SIXTHR", "", "PROT4", np.nan, 25.0, 25.0, 25.0, 25.0, 25.0),
    ]
    return pd.DataFrame(
        rows, columns=["Sequence", "Modifications", "master_protein"] + SAMPLE_NAMES
    )


@pytest.fixture
def statistical_config():
    """Create a configuration with ctrl/treat groups assigned"""
    config = StatisticalConfig()
    config.assign_groups_from_mapping(
        {name: name.split("_")[0] for name in SAMPLE_NAMES}
    )
    return config


@pytest.fixture
def identical_peptide_data():
    """Six proteins with the same abundance in every sample"""
    rows = [
        (f"SEQ{i}K", "", f"PROT{i}", *([10.0] * len(SAMPLE_NAMES)))
        for i in range(1, 7)
    ]
    return pd.DataFrame(
        rows, columns=["Sequence", "Modifications", "master_protein"] + SAMPLE_NAMES
    )


@pytest.fixture
def decision_results():
    """Create a decision table as produced by the pipeline"""
    return pd.DataFrame(
        {
            "protein_id": ["PROT1", "PROT2", "PROT3", "PROT4", "PROT5"],
            "p_value": [0.0001, 0.0002, 0.3, 0.0005, 0.8],
            "difference": [1.5, -2.0, 0.1, 0.2, -0.05],
            "ci_low": [1.0, -2.6, -0.2, 0.1, -0.4],
            "ci_high": [2.0, -1.4, 0.4, 0.3, 0.3],
            "fdr": [0.0005, 0.0005, 0.375, 0.00083, 0.8],
            "significant": [True, True, False, True, False],
            "min_effect": [1.0, -1.4, 0.0, 0.1, 0.0],
            "relevant": [True, True, False, False, False],
        }
    )


@pytest.fixture
def temp_tsv_files():
    """Create temporary peptide and annotation TSV files"""
    temp_dir = tempfile.mkdtemp()

    peptide_file = os.path.join(temp_dir, "peptides.tsv")
    with open(peptide_file, "w", encoding="utf-8") as f:
        f.write("Sequence\tModifications\tmaster_protein\t" + "\t".join(SAMPLE_NAMES) + "\n")
        f.write("PEPTIDEAK\t\tP00001\t100\t110\t90\t200\t210\t190\n")
        f.write("PEPTIDEAK\tOxidation (M)\tP00001\t10\t10\t10\t20\t20\tNA\n")
        f.write("SECONDPEPK\t\tP00002\t50\t60\t40\t100\t120\t80\n")

    annotation_file = os.path.join(temp_dir, "annotations.tsv")
    with open(annotation_file, "w", encoding="utf-8") as f:
        f.write("Entry\tEntry name\tProtein names\n")
        f.write("P00001\tPROT1_HUMAN\tFirst protein\n")

    yield peptide_file, annotation_file

    # Cleanup
    import shutil

    shutil.rmtree(temp_dir)

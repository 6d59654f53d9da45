"""
Tests for export module
"""

import pandas as pd
import os
import tempfile

from proteomics_stats_toolkit.export import (
    annotate_decisions,
    export_decision_table,
    export_protein_lists,
    export_timestamped_config,
    export_complete_analysis,
)
from proteomics_stats_toolkit.pipeline import run_decision_pipeline
from proteomics_stats_toolkit.statistical_analysis import StatisticalConfig


class TestAnnotateDecisions:
    """Test joining names and descriptions onto decisions"""

    def test_left_join_keeps_every_decision(self, decision_results):
        """Test that proteins without annotations keep null fields"""
        annotations = pd.DataFrame(
            {
                "protein_id": ["PROT1", "PROT3", "OTHER"],
                "name": ["ONE_HUMAN", "THREE_HUMAN", "OTHER_HUMAN"],
                "description": ["Protein one", "Protein three", "Unrelated"],
            }
        )

        annotated = annotate_decisions(decision_results, annotations)

        assert len(annotated) == len(decision_results)
        assert list(annotated["protein_id"]) == list(decision_results["protein_id"])
        assert list(annotated.columns[:3]) == ["protein_id", "name", "description"]
        assert annotated.loc[0, "name"] == "ONE_HUMAN"
        assert annotated.loc[2, "description"] == "Protein three"
        assert pd.isna(annotated.loc[1, "name"])
        assert pd.isna(annotated.loc[1, "description"])
        assert "OTHER" not in annotated["protein_id"].values

    def test_without_annotations(self, decision_results):
        """Test that missing annotation table gives null columns"""
        annotated = annotate_decisions(decision_results)

        assert annotated["name"].isna().all()
        assert annotated["description"].isna().all()


class TestExportDecisionTable:
    """Test the tab-separated decision table"""

    def test_export_columns(self, decision_results):
        """Test the exported column order and row count"""
        with tempfile.TemporaryDirectory() as temp_dir:
            output_file = os.path.join(temp_dir, "decisions.tsv")

            export_decision_table(decision_results, output_file)

            exported = pd.read_csv(output_file, sep="\t")

        assert list(exported.columns) == [
            "protein_id", "name", "description", "p_value", "difference",
            "ci_low", "ci_high", "fdr", "significant", "relevant",
        ]
        assert len(exported) == 5
        assert exported["significant"].tolist() == [True, True, False, True, False]

    def test_missing_annotation_written_as_na(self, decision_results):
        """Test that unmatched proteins are written with NA markers"""
        annotations = pd.DataFrame(
            {"protein_id": ["PROT1"], "name": ["ONE_HUMAN"], "description": ["Protein one"]}
        )

        with tempfile.TemporaryDirectory() as temp_dir:
            output_file = os.path.join(temp_dir, "decisions.tsv")

            export_decision_table(decision_results, output_file, annotations=annotations)

            with open(output_file, encoding="utf-8") as f:
                lines = f.read().splitlines()

        assert lines[1].split("\t")[:3] == ["PROT1", "ONE_HUMAN", "Protein one"]
        assert lines[2].split("\t")[:3] == ["PROT2", "NA", "NA"]


class TestExportProteinLists:
    """Test identifier list export"""

    def test_lists(self, decision_results):
        """Test increased, decreased and background lists"""
        with tempfile.TemporaryDirectory() as temp_dir:
            output_prefix = os.path.join(temp_dir, "run")

            exported_files = export_protein_lists(decision_results, output_prefix)

            contents = {}
            for list_name, path in exported_files.items():
                with open(path, encoding="utf-8") as f:
                    contents[list_name] = f.read().splitlines()

        assert contents["increased"] == ["PROT1"]
        assert contents["decreased"] == ["PROT2"]
        assert contents["background"] == ["PROT1", "PROT2", "PROT3", "PROT4", "PROT5"]

    def test_empty_lists_written(self, decision_results):
        """Test that lists are written even when nothing changed"""
        unchanged = decision_results.assign(significant=False)

        with tempfile.TemporaryDirectory() as temp_dir:
            exported_files = export_protein_lists(unchanged, os.path.join(temp_dir, "run"))

            assert os.path.exists(exported_files["increased"])
            assert os.path.getsize(exported_files["increased"]) == 0
            assert os.path.getsize(exported_files["background"]) > 0


class TestExportConfig:
    """Test timestamped configuration export"""

    def test_config_file_is_python(self, statistical_config):
        """Test that the exported configuration can be executed back into variables"""
        with tempfile.TemporaryDirectory() as temp_dir:
            output_prefix = os.path.join(temp_dir, "run")

            config_file = export_timestamped_config(
                statistical_config, output_prefix, computed_values={"Proteins tested": 2}
            )

            with open(config_file, encoding="utf-8") as f:
                source = f.read()

        namespace = {}
        exec(source, namespace)

        assert os.path.basename(config_file).startswith("run_config_")
        assert namespace["fdr_threshold"] == 0.01
        assert namespace["relevance_fold_threshold"] == 1.25
        assert namespace["group_labels"] == ["ctrl", "treat"]
        assert "# Proteins tested: 2" in source


class TestExportCompleteAnalysis:
    """Test exporting a whole pipeline run"""

    def test_complete_export(self, identical_peptide_data, statistical_config):
        """Test that every output file is written"""
        result = run_decision_pipeline(identical_peptide_data, statistical_config)

        with tempfile.TemporaryDirectory() as temp_dir:
            output_prefix = os.path.join(temp_dir, "results", "run1")

            exported_files = export_complete_analysis(result, statistical_config, output_prefix)

            for key in ["decisions", "normalized_data", "increased", "decreased", "background", "configuration"]:
                assert key in exported_files
                assert os.path.exists(exported_files[key])

            decisions = pd.read_csv(exported_files["decisions"], sep="\t")

        assert len(decisions) == 6
        assert not decisions["significant"].any()

    def test_positional_groups_recorded(self, identical_peptide_data, sample_columns):
        """Test that groups assigned by position are written to the configuration file"""
        config = StatisticalConfig()
        result = run_decision_pipeline(identical_peptide_data, config)

        with tempfile.TemporaryDirectory() as temp_dir:
            exported_files = export_complete_analysis(result, config, os.path.join(temp_dir, "run"))

            with open(exported_files["configuration"], encoding="utf-8") as f:
                namespace = {}
                exec(f.read(), namespace)

        assert namespace["sample_groups"] == {
            col: ("A" if i < 3 else "B") for i, col in enumerate(sample_columns)
        }
        assert config.sample_groups == {}

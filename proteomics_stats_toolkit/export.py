"""
Export Module for Proteomics Statistics Toolkit

This module handles exporting the decision table, the identifier lists used for
downstream over-representation analysis, and a timestamped record of the
analysis configuration.
"""

import os
import pandas as pd
from datetime import datetime
from typing import Dict, Any, Optional, List

from .data_import import PROTEIN_ID
from .effect_size import REGULATION_DECREASED, REGULATION_INCREASED, classify_regulation
from .statistical_analysis import StatisticalConfig

DECISION_TABLE_COLUMNS = [
    PROTEIN_ID,
    "name",
    "description",
    "p_value",
    "difference",
    "ci_low",
    "ci_high",
    "fdr",
    "significant",
    "relevant",
]


def annotate_decisions(
    decisions: pd.DataFrame, annotations: Optional[pd.DataFrame] = None
) -> pd.DataFrame:
    """
    Add protein names and descriptions to the decision table.

    A left join on protein_id: every decision row is kept, and proteins
    without an annotation get null name and description.

    Parameters:
    -----------
    decisions : pd.DataFrame
        Decision table with a protein_id column
    annotations : pd.DataFrame, optional
        Table with protein_id, name and description columns

    Returns:
    --------
    pd.DataFrame
        Decision rows with name and description placed after protein_id
    """

    if annotations is None:
        annotated = decisions.copy()
        annotated["name"] = None
        annotated["description"] = None
    else:
        annotation_cols = [
            col for col in [PROTEIN_ID, "name", "description"] if col in annotations.columns
        ]
        protein_annotations = annotations[annotation_cols].drop_duplicates(subset=[PROTEIN_ID])

        annotated = decisions.drop(
            columns=[col for col in ["name", "description"] if col in decisions.columns]
        ).merge(protein_annotations, on=PROTEIN_ID, how="left")

        for col in ["name", "description"]:
            if col not in annotated.columns:
                annotated[col] = None

        n_matched = annotated["name"].notna().sum()
        print(f"Annotated {n_matched}/{len(annotated)} proteins")

    # Put annotations directly after the identifier
    leading_cols = [PROTEIN_ID, "name", "description"]
    other_cols = [col for col in annotated.columns if col not in leading_cols]
    return annotated[leading_cols + other_cols]


def export_decision_table(
    decisions: pd.DataFrame,
    output_file: str,
    annotations: Optional[pd.DataFrame] = None,
) -> str:
    """
    Export the decision table as tab-separated values.

    Columns: protein_id, name, description, p_value, difference, ci_low,
    ci_high, fdr, significant, relevant.

    Returns:
    --------
    str
        Path to the exported file
    """
    if annotations is not None or "name" not in decisions.columns:
        decisions = annotate_decisions(decisions, annotations)

    export_df = decisions[DECISION_TABLE_COLUMNS]
    export_df.to_csv(output_file, sep="\t", index=False, na_rep="NA")

    print(f"Decision table ({len(export_df)} proteins) exported to: {output_file}")
    return output_file


def _write_id_list(ids: List[str], output_file: str) -> str:
    with open(output_file, "w", encoding="utf-8") as f:
        for protein_id in ids:
            f.write(f"{protein_id}\n")
    return output_file


def export_protein_lists(
    decisions: pd.DataFrame, output_prefix: str = "proteomics_analysis"
) -> Dict[str, str]:
    """
    Export newline-delimited protein identifier lists.

    Writes proteins with a significant and relevant increase, those with a
    significant and relevant decrease, and the background of all tested
    proteins.

    Returns:
    --------
    dict
        Paths keyed by 'increased', 'decreased' and 'background'
    """

    regulation = classify_regulation(decisions)
    protein_ids = decisions[PROTEIN_ID].astype(str)

    lists = {
        "increased": protein_ids[regulation == REGULATION_INCREASED].tolist(),
        "decreased": protein_ids[regulation == REGULATION_DECREASED].tolist(),
        "background": protein_ids.tolist(),
    }

    exported_files = {}
    for list_name, ids in lists.items():
        list_file = f"{output_prefix}_{list_name}.txt"
        exported_files[list_name] = _write_id_list(ids, list_file)
        print(f"  • {list_file}: {len(ids)} proteins")

    return exported_files


def export_timestamped_config(
    config: StatisticalConfig,
    output_prefix: str = "proteomics_analysis",
    analysis_description: str = "Protein abundance decision analysis",
    computed_values: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Export analysis configuration as a timestamped Python file.

    Parameters:
    -----------
    config : StatisticalConfig
        Configuration used for the analysis
    output_prefix : str
        Prefix for the configuration filename
    analysis_description : str
        Description of the analysis
    computed_values : dict, optional
        Additional computed values to include as comments

    Returns:
    --------
    str
        Path to the exported configuration file
    """

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    config_file = f"{output_prefix}_config_{timestamp}.py"
    config_dict = config.to_dict()

    print(f"Exporting analysis configuration to: {config_file}")

    with open(config_file, "w", encoding="utf-8") as f:
        f.write(
            "# =============================================================================\n"
        )
        f.write("# PROTEOMICS DECISION ANALYSIS CONFIGURATION\n")
        f.write(f"# Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        f.write(f"# Analysis: {analysis_description}\n")
        f.write(
            "# =============================================================================\n\n"
        )

        section_configs = [
            (1, "EXPERIMENTAL DESIGN", ["group_labels", "sample_groups"]),
            (2, "AGGREGATION", ["drop_incomplete"]),
            (3, "STATISTICAL TESTING", ["log_base", "confidence_level", "correction_method"]),
            (4, "DECISION THRESHOLDS", ["fdr_threshold", "relevance_fold_threshold"]),
            (5, "SIMULATION", ["random_seed"]),
        ]

        for section_num, section_name, param_names in section_configs:
            _write_config_section(f, section_name, config_dict, param_names, section_num)

        if computed_values:
            f.write(
                "# =============================================================================\n"
            )
            f.write("# COMPUTED VALUES (for reference)\n")
            f.write(
                "# =============================================================================\n"
            )
            for key, value in computed_values.items():
                f.write(f"# {key}: {value}\n")

    return config_file


def _write_config_section(
    file_handle,
    section_name: str,
    config_dict: Dict[str, Any],
    param_names: List[str],
    section_number: int = 1,
) -> None:
    """Write a configuration section to file."""

    file_handle.write(
        "# =============================================================================\n"
    )
    file_handle.write(f"# {section_number}. {section_name}\n")
    file_handle.write(
        "# =============================================================================\n"
    )

    for param in param_names:
        if param in config_dict:
            file_handle.write(f"{param} = {repr(config_dict[param])}\n")

    file_handle.write("\n")


def export_complete_analysis(
    result,
    config: StatisticalConfig,
    output_prefix: str = "proteomics_analysis",
    annotations: Optional[pd.DataFrame] = None,
    analysis_description: str = "Protein abundance decision analysis",
) -> Dict[str, str]:
    """
    Export the decision table, identifier lists, normalized data and
    timestamped configuration of a pipeline run.

    Parameters:
    -----------
    result : PipelineResult
        Output of run_decision_pipeline
    config : StatisticalConfig
        Configuration passed to the run; the run's effective configuration
        is recorded when the result carries one
    output_prefix : str
        Prefix for output filenames (may include a directory)
    annotations : pd.DataFrame, optional
        protein_id -> name/description table

    Returns:
    --------
    dict
        Dictionary of all exported files
    """

    print("Exporting analysis results...")

    output_dir = os.path.dirname(output_prefix)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    exported_files = {}

    decisions_file = f"{output_prefix}_decisions.tsv"
    exported_files["decisions"] = export_decision_table(
        result.decisions, decisions_file, annotations=annotations
    )

    normalized_file = f"{output_prefix}_normalized_data.tsv"
    result.normalized_data.to_csv(normalized_file, sep="\t")
    exported_files["normalized_data"] = normalized_file
    print(f"Normalized data exported to: {normalized_file}")

    print("Protein lists:")
    exported_files.update(export_protein_lists(result.decisions, output_prefix))

    # Record the groups actually used, including ones assigned by position
    if result.config is not None:
        config = result.config

    computed_values = {
        "Peptide rows": result.aggregation.n_peptides,
        "Proteins tested": len(result.decisions),
        "Proteins dropped as incomplete": result.aggregation.n_incomplete_dropped,
    }
    exported_files["configuration"] = export_timestamped_config(
        config,
        output_prefix=output_prefix,
        analysis_description=analysis_description,
        computed_values=computed_values,
    )

    _print_export_summary(exported_files)

    return exported_files


def _print_export_summary(exported_files: Dict[str, str]) -> None:
    """Print a summary of exported files."""

    descriptions = {
        "decisions": "Decision table (tab-separated)",
        "normalized_data": "Normalized protein data",
        "increased": "Significantly increased proteins",
        "decreased": "Significantly decreased proteins",
        "background": "Background list of tested proteins",
        "configuration": "Python configuration (timestamped)",
    }

    print("\n" + "=" * 60)
    print("✓ All analysis results and configuration exported successfully!")
    print("Files created:")
    for key, path in exported_files.items():
        print(f"  • {path} - {descriptions.get(key, key)}")
    print("=" * 60)

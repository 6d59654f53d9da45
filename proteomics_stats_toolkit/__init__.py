"""
Proteomics Statistics Toolkit
=============================

A Python library for deciding which proteins changed between two conditions in
a label-free proteomics experiment. Peptide measurements are aggregated to
proteins, normalized, tested per protein, corrected for multiple testing and
filtered on the smallest effect their confidence interval allows.

QUICK START EXAMPLE:
-------------------
    import proteomics_stats_toolkit as pst

    # 1. Load data
    peptides = pst.load_peptide_data('peptides.tsv')
    sample_columns = pst.identify_sample_columns(peptides)

    # 2. Configure the design and thresholds
    config = pst.StatisticalConfig()
    config.assign_groups_from_mapping(pst.infer_sample_groups(sample_columns))
    config.fdr_threshold = 0.01
    config.relevance_fold_threshold = 1.25

    # 3. Run the pipeline
    result = pst.run_decision_pipeline(peptides, config)
    pst.display_analysis_summary(result.decisions, config)

    # 4. Export
    annotations = pst.load_protein_annotations('proteins.tsv')
    pst.export_complete_analysis(result, config, 'results/run1', annotations)

MODULE OVERVIEW:
===============

data_import
    Purpose: Load peptide TSV files and protein annotations
    Key functions: load_peptide_data(), infer_sample_groups(), load_protein_annotations()

aggregation
    Purpose: Collapse modified peptides and sequences into protein rows
    Key functions: aggregate_peptides_to_proteins()

normalization
    Purpose: Total-sum normalization and log transformation
    Key functions: total_sum_normalize(), log_transform()

statistical_analysis
    Purpose: Per-protein Student t-tests and false discovery rate control
    Key functions: run_differential_tests(), apply_multiple_testing_correction(), StatisticalConfig()

effect_size
    Purpose: Biological relevance from confidence intervals
    Key functions: minimum_magnitude_effect(), apply_effect_size_filter()

pipeline
    Purpose: Run every step in order
    Key functions: run_decision_pipeline()

validation
    Purpose: Input checks and error types
    Key functions: validate_peptide_table(), validate_sample_groups()

export
    Purpose: Decision table, identifier lists and configuration records
    Key functions: export_complete_analysis(), export_decision_table(), export_protein_lists()

simulation
    Purpose: Synthetic demo data with known changes
    Key functions: simulate_peptide_data()

ERROR HANDLING:
==============
- MalformedInputError: Missing columns, non-numeric values, zero column sums
- IncompleteRowError: Raised only when incomplete proteins are not allowed to be dropped
"""

# =============================================================================
# MODULE IMPORTS - Core functionality organized by analysis stage
# =============================================================================

from . import data_import          # Data loading and parsing
from . import validation           # Input validation and error types
from . import aggregation          # Peptide to protein aggregation
from . import normalization        # Normalization and log transformation
from . import statistical_analysis # Statistical testing and FDR control
from . import effect_size          # Confidence-interval based relevance
from . import pipeline             # End-to-end decision pipeline
from . import export               # Results export
from . import simulation           # Demo data

__version__ = "1.0.0"
__author__ = "Michael MacCoss Lab, University of Washington"

# =============================================================================
# CONVENIENCE IMPORTS - Most commonly used functions available at top level
# =============================================================================

from .data_import import (
    load_peptide_data,
    identify_sample_columns,
    infer_sample_groups,
    load_protein_annotations,
)

from .validation import (
    MalformedInputError,
    IncompleteRowError,
    validate_peptide_table,
    validate_sample_groups,
    generate_input_diagnostic_report,
)

from .aggregation import (
    AggregationResult,
    aggregate_peptides_to_proteins,
)

from .normalization import (
    total_sum_normalize,
    calculate_correction_factors,
    log_transform,
)

from .statistical_analysis import (
    StatisticalConfig,
    run_student_t_test,
    run_differential_tests,
    apply_multiple_testing_correction,
    display_analysis_summary,
)

from .effect_size import (
    minimum_magnitude_effect,
    apply_effect_size_filter,
    classify_regulation,
)

from .pipeline import (
    PipelineResult,
    run_decision_pipeline,
)

from .export import (
    annotate_decisions,
    export_decision_table,
    export_protein_lists,
    export_timestamped_config,
    export_complete_analysis,
)

from .simulation import simulate_peptide_data

# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    # MODULES
    "data_import",
    "validation",
    "aggregation",
    "normalization",
    "statistical_analysis",
    "effect_size",
    "pipeline",
    "export",
    "simulation",

    # DATA LOADING
    "load_peptide_data",
    "identify_sample_columns",
    "infer_sample_groups",
    "load_protein_annotations",

    # VALIDATION
    "MalformedInputError",
    "IncompleteRowError",
    "validate_peptide_table",
    "validate_sample_groups",
    "generate_input_diagnostic_report",

    # PIPELINE STAGES
    "AggregationResult",
    "aggregate_peptides_to_proteins",
    "total_sum_normalize",
    "calculate_correction_factors",
    "log_transform",
    "StatisticalConfig",
    "run_student_t_test",
    "run_differential_tests",
    "apply_multiple_testing_correction",
    "display_analysis_summary",
    "minimum_magnitude_effect",
    "apply_effect_size_filter",
    "classify_regulation",

    # PIPELINE
    "PipelineResult",
    "run_decision_pipeline",

    # EXPORT
    "annotate_decisions",
    "export_decision_table",
    "export_protein_lists",
    "export_timestamped_config",
    "export_complete_analysis",

    # DEMO DATA
    "simulate_peptide_data",
]

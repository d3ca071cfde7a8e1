"""
Integration module for the visual essays.

Connects the engines to what an essay displays:
- Essays: parameter validation, regeneration policy and frame driving
- Snapshots: JSON-ready state for each essay
- Rendering: canvas coordinates and matplotlib plots
- BatchEvaluation: headless run of all essays with saved results
"""

from .essays import (
    ESSAYS,
    Essay,
    KMeansEssay,
    DBSCANEssay,
    DecisionTreeEssay,
    RandomForestEssay,
    LinearRegressionEssay,
    LogisticRegressionEssay,
    SOMEssay,
    PerceptronEssay,
    SVMEssay,
    create_essay,
    advance_essay,
    validate_params,
)

from .rendering import CanvasMapper, plot_snapshot

from .batch_evaluation import (
    BatchEvaluation,
    ResultsDocumenter,
    run_full_evaluation,
)

__all__ = [
    # Essays
    'ESSAYS',
    'Essay',
    'KMeansEssay',
    'DBSCANEssay',
    'DecisionTreeEssay',
    'RandomForestEssay',
    'LinearRegressionEssay',
    'LogisticRegressionEssay',
    'SOMEssay',
    'PerceptronEssay',
    'SVMEssay',
    'create_essay',
    'advance_essay',
    'validate_params',

    # Rendering
    'CanvasMapper',
    'plot_snapshot',

    # Batch evaluation
    'BatchEvaluation',
    'ResultsDocumenter',
    'run_full_evaluation',
]

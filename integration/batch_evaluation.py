"""
Batch evaluation for the visual essays.

Runs every essay headlessly with a fixed seed:
- Brings each essay to its final frame
- Collects the displayed statistics (inertia, accuracy, MSE, ...)
- Saves snapshots as JSON, a markdown summary table and optional plots

All results are written to the results/ directory.
"""

import json
import logging
import os
import numpy as np
from datetime import datetime
from typing import Any, Dict, List, Optional

from config import RESULTS_DIR, FRAMES_PER_RUN, IRIS_SPECIES, RunConfig
from evaluation import (
    confusion_matrix, accuracy_score, error_rate, mean_squared_error,
    inertia, cluster_size_table, print_confusion_matrix,
)
from ml_engines import NOISE
from .essays import ESSAYS, Essay, create_essay, advance_essay

logger = logging.getLogger(__name__)


class ResultsDocumenter:
    """
    Document and export essay results.

    Provides utilities for:
    - Saving markdown tables
    - Saving JSON snapshots
    - Compiling the final report
    """

    def __init__(self, results_dir: str = RESULTS_DIR):
        self.results_dir = results_dir
        self.timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self.results: Dict[str, Dict] = {}
        os.makedirs(os.path.join(self.results_dir, "plots"), exist_ok=True)

    def add_result(self, essay: str, name: str, data: Any):
        """Add a result to the collection."""
        self.results.setdefault(essay, {})[name] = data

    def save_table_md(self, data: List[List], headers: List[str],
                      filepath: str, title: str = None):
        """Save data as markdown table."""
        with open(filepath, 'w', encoding='utf-8') as f:
            if title:
                f.write(f"# {title}\n\n")
                f.write(f"Generated: {self.timestamp}\n\n")
            f.write("| " + " | ".join(headers) + " |\n")
            f.write("| " + " | ".join(["---"] * len(headers)) + " |\n")
            for row in data:
                f.write("| " + " | ".join(str(x) for x in row) + " |\n")
        logger.info("Saved: %s", filepath)

    def save_json(self, data: Dict, filepath: str):
        """Save data as JSON."""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.info("Saved: %s", filepath)

    def compile_final_report(self, filepath: str):
        """Compile all collected statistics into a single markdown file."""
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write("# Visual ML Essays - Results\n\n")
            f.write(f"Generated: {self.timestamp}\n\n")
            f.write("---\n\n")

            for essay, essay_results in self.results.items():
                f.write(f"## {essay}\n\n")
                for name, data in essay_results.items():
                    if isinstance(data, str):
                        f.write(f"### {name}\n\n```\n{data}\n```\n\n")
                    else:
                        f.write(f"- **{name}**: {data}\n")
                f.write("\n---\n\n")
        logger.info("Compiled: %s", filepath)


class BatchEvaluation:
    """
    Headless run of every essay.

    Evaluates:
    1. Clustering (K-Means, DBSCAN)
    2. Trees (decision tree, random forest on Iris)
    3. Regression (linear, logistic)
    4. Neural (SOM, perceptron)
    5. Margin (SVM)
    """

    def __init__(self, run_config: Optional[RunConfig] = None):
        self.config = run_config or RunConfig()
        self.documenter = ResultsDocumenter(results_dir=self.config.results_dir)
        self.essays: Dict[str, Essay] = {}
        self.snapshots: Dict[str, Dict] = {}
        self.summary: Dict[str, Dict[str, Any]] = {}

    def run_all(self, names: Optional[List[str]] = None, plots: bool = False) -> Dict[str, Dict]:
        """
        Run the selected essays (all by default) and save their results.

        Returns:
            Mapping essay name -> summary statistics
        """
        names = names or list(ESSAYS)
        rng = np.random.default_rng(self.config.seed)

        for name in names:
            logger.info("Running essay: %s", name)
            essay = create_essay(name, self.config.overrides.get(name), rng=rng)
            advance_essay(essay, self.config.frame)
            self.essays[name] = essay
            self.snapshots[name] = essay.snapshot()
            self.summary[name] = getattr(self, f"_evaluate_{name}")(essay)
            for key, value in self.summary[name].items():
                self.documenter.add_result(name, key, value)

        self._save(plots)
        return self.summary

    # =========================================================================
    # Per-essay statistics
    # =========================================================================

    def _evaluate_kmeans(self, essay) -> Dict[str, Any]:
        engine = essay.engine
        return {
            'steps': engine.steps_completed,
            'inertia': round(inertia(engine.points, engine.labels_, engine.centroids_), 3),
            'cluster_sizes': cluster_size_table(engine.labels_),
        }

    def _evaluate_dbscan(self, essay) -> Dict[str, Any]:
        engine = essay.engine
        return {
            'clusters': engine.n_clusters_,
            'noise_points': engine.noise_count(),
            'cluster_sizes': cluster_size_table(engine.labels_[engine.labels_ != NOISE]),
        }

    def _tree_stats(self, essay) -> Dict[str, Any]:
        y_pred = essay.model.predict(essay.X)
        cm = confusion_matrix(essay.y, y_pred, n_classes=len(IRIS_SPECIES))
        return {
            'accuracy': round(accuracy_score(essay.y, y_pred), 4),
            'confusion_matrix': print_confusion_matrix(cm, IRIS_SPECIES),
        }

    def _evaluate_decision_tree(self, essay) -> Dict[str, Any]:
        stats = self._tree_stats(essay)
        stats['depth'] = essay.model.get_depth()
        stats['leaves'] = essay.model.get_n_leaves()
        return stats

    def _evaluate_random_forest(self, essay) -> Dict[str, Any]:
        stats = self._tree_stats(essay)
        stats['trees'] = len(essay.model.trees)
        return stats

    def _evaluate_linear_regression(self, essay) -> Dict[str, Any]:
        engine = essay.engine
        return {
            'steps': engine.steps_completed,
            'weight': round(engine.weight, 4),
            'bias': round(engine.bias, 4),
            'mse': round(mean_squared_error(engine.y, engine.predict(engine.x)), 6),
        }

    def _evaluate_logistic_regression(self, essay) -> Dict[str, Any]:
        engine = essay.engine
        return {
            'steps': engine.steps_completed,
            'weight': round(engine.weight, 4),
            'bias': round(engine.bias, 4),
            'error_rate': round(error_rate(engine.y, engine.predict_classes(engine.x)), 4),
        }

    def _evaluate_som(self, essay) -> Dict[str, Any]:
        engine = essay.engine
        return {
            'steps': engine.steps_completed,
            'quantization_error': round(engine.quantization_error(), 6),
        }

    def _evaluate_perceptron(self, essay) -> Dict[str, Any]:
        network = essay.network
        return {
            'steps': network.steps_completed,
            'layer_sizes': network.layer_sizes,
            'output': [round(float(v), 6) for v in network.predict(essay.input)],
            'loss': round(network.loss(essay.input, essay.target), 6),
        }

    def _evaluate_svm(self, essay) -> Dict[str, Any]:
        model = essay.model
        return {
            'kernel': model.kernel,
            'errors': model.error_count(),
            'support_vectors': model.n_support_,
            'highlighted': int(np.sum(model.highlight_mask())),
        }

    # =========================================================================
    # Output
    # =========================================================================

    def _save(self, plots: bool):
        base = self.documenter.results_dir
        self.documenter.save_json(self.snapshots, os.path.join(base, "snapshots.json"))

        rows = []
        for name, stats in self.summary.items():
            shown = {k: v for k, v in stats.items() if not isinstance(v, str)}
            rows.append([name, ", ".join(f"{k}={v}" for k, v in shown.items())])
        self.documenter.save_table_md(rows, ["Essay", "Statistics"],
                                      os.path.join(base, "summary.md"), "Essay Summary")
        self.documenter.compile_final_report(os.path.join(base, "REPORT.md"))

        if plots:
            from .rendering import plot_snapshot
            for name, snap in self.snapshots.items():
                plot_snapshot(snap, os.path.join(base, "plots", f"{name}.png"))


def run_full_evaluation(results_dir: str = RESULTS_DIR, seed: int = 42,
                        frame: int = FRAMES_PER_RUN, plots: bool = False) -> BatchEvaluation:
    """
    Convenience function to run every essay and save the results.

    Args:
        results_dir: Directory for output results
        seed: Seed for all essay randomness
        frame: Animation frame to evaluate at
        plots: If True, also save one PNG per essay

    Returns:
        BatchEvaluation instance with results
    """
    evaluation = BatchEvaluation(RunConfig(seed=seed, frame=frame, results_dir=results_dir))
    evaluation.run_all(plots=plots)
    return evaluation

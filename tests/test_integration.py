"""
Integration Tests.

Tests for:
- Essay parameter validation and regeneration rules
- Frame-driven rendering (regression, SOM)
- Snapshots and matplotlib rendering
- Batch evaluation pipeline and results documentation
- Command line entry point
"""

import json
import numpy as np
import os
import sys
import tempfile
import shutil

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import RunConfig
from integration import (
    ESSAYS, create_essay, advance_essay, validate_params,
    KMeansEssay, DBSCANEssay, RandomForestEssay, LinearRegressionEssay,
    LogisticRegressionEssay, SOMEssay, PerceptronEssay, SVMEssay,
    CanvasMapper, plot_snapshot, BatchEvaluation, ResultsDocumenter,
)
from ml_engines import InvalidParameter
import main as cli


def _rng(seed=0):
    return np.random.default_rng(seed)


# =============================================================================
# PARAMETERS
# =============================================================================

def test_validate_params():
    print("=" * 60)
    print("TEST: Parameter validation")
    print("=" * 60)

    assert validate_params('kmeans', {'points': 50, 'clusters': 2}) == {'points': 50, 'clusters': 2}

    with pytest.raises(InvalidParameter) as exc:
        validate_params('kmeans', {'clusters': 7})
    assert exc.value.name == 'clusters'
    assert exc.value.value == 7

    with pytest.raises(InvalidParameter):
        validate_params('kmeans', {'radius': 1})
    with pytest.raises(InvalidParameter):
        validate_params('decision_tree', {'criterion': 'variance'})
    with pytest.raises(InvalidParameter):
        validate_params('dbscan', {'min_points': True})
    with pytest.raises(InvalidParameter):
        validate_params('svm', {'c': '1.0'})
    print("  rejected: out of range, unknown, bad choice, bool, str")


@pytest.mark.parametrize("essay, name", [
    ('kmeans', 'clusters'),
    ('dbscan', 'min_points'),
    ('decision_tree', 'max_depth'),
    ('random_forest', 'number_of_trees'),
    ('som', 'grid_size'),
])
def test_count_controls_must_be_whole_numbers(essay, name):
    with pytest.raises(InvalidParameter) as exc:
        validate_params(essay, {name: 5.5})
    assert exc.value.name == name
    assert "integer" in exc.value.reason

    # 5.0 is still a whole number, e.g. from a parsed --set value
    assert validate_params(essay, {name: 5.0}) == {name: 5.0}
    # fractional values stay allowed for real-valued controls
    validate_params('random_forest', {'subsample_ratio': 0.75})


def test_kmeans_starts_with_one_cluster():
    essay = create_essay('kmeans', rng=_rng())
    assert essay.params['clusters'] == 1
    assert essay.engine.k == 1
    assert len(essay.engine.centroids_) == 1


def test_create_essay_rejects_bad_input():
    with pytest.raises(InvalidParameter):
        create_essay('pca')
    with pytest.raises(InvalidParameter):
        create_essay('som', {'grid_size': 3}, rng=_rng())

    essay = create_essay('kmeans', rng=_rng())
    with pytest.raises(InvalidParameter):
        essay.set_params(points=5)
    # failed update leaves parameters untouched
    assert essay.params['points'] == 100


# =============================================================================
# REGENERATION RULES
# =============================================================================

def test_kmeans_essay_resumes_and_regenerates():
    essay = KMeansEssay({'iterations': 4}, rng=_rng(1))
    essay.run()
    essay.run()
    assert essay.engine.steps_completed == 8

    engine = essay.engine
    assert essay.set_params(iterations=6) == ['iterations']
    assert essay.engine is engine
    assert essay.set_params(iterations=6) == []

    essay.set_params(points=50)
    assert essay.engine is not engine
    assert essay.engine.points.shape == (50, 2)
    assert essay.engine.steps_completed == 0

    essay.set_params(clusters=5)
    assert len(essay.engine.centroids_) == 5


def test_dbscan_essay_redraws_noise_only():
    essay = DBSCANEssay(rng=_rng(2))
    blobs = essay.cluster_points.copy()
    n_blob = len(blobs)
    first = essay.points.copy()

    essay.run()
    assert np.array_equal(essay.points[:n_blob], blobs)
    assert not np.array_equal(essay.points[n_blob:], first[n_blob:])
    assert len(essay.points) == 200

    essay.set_params(epsilon=0.1)
    assert np.array_equal(essay.cluster_points, blobs)

    essay.set_params(num_clusters=4)
    assert not np.array_equal(essay.cluster_points, blobs)


def test_forest_essay_sample_votes():
    essay = RandomForestEssay({'number_of_trees': 5}, rng=_rng(3))
    vote = essay.predict_sample(120)
    assert len(vote.votes) == 5
    assert essay.selected_index == 120

    snap = essay.snapshot()
    assert len(snap['votes']) == 5
    assert snap['sample']['species'] == essay.samples[120].species

    with pytest.raises(InvalidParameter):
        essay.predict_sample(150)
    with pytest.raises(InvalidParameter):
        essay.predict_sample(-1)

    essay.set_params(number_of_trees=2)
    assert len(essay.model.trees) == 2


def test_linear_regression_render_frames():
    print("\n" + "=" * 60)
    print("TEST: Regression frames")
    print("=" * 60)

    kept = LinearRegressionEssay(rng=_rng(4), regenerate_each_render=False)
    x = kept.engine.x.copy()
    assert kept.render(100).steps_completed == 100
    assert kept.render(20).steps_completed == 21
    assert kept.render(0).steps_completed == 1
    assert np.array_equal(kept.engine.x, x)

    fresh = LinearRegressionEssay(rng=_rng(4))
    fresh.render(100)
    before = fresh.engine.x.copy()
    fresh.render(100)
    assert not np.array_equal(fresh.engine.x, before)
    assert fresh.engine.steps_completed == 100
    print(f"  mse after 100 steps: {fresh.engine.mse():.4f}")


def test_logistic_boundary_change_keeps_engine():
    essay = LogisticRegressionEssay(rng=_rng(5), regenerate_each_render=False)
    essay.render(50)
    engine = essay.engine

    essay.set_params(decision_boundary=0.7)
    assert essay.engine is engine
    assert engine.decision_boundary == 0.7
    assert engine.steps_completed == 51

    x = engine.x.copy()
    essay.set_params(learning_rate=0.3)
    assert essay.engine is not engine
    assert np.array_equal(essay.engine.x, x)

    essay.set_params(noise=0.4)
    assert not np.array_equal(essay.engine.x, x)


def test_som_render_rewinds():
    essay = SOMEssay({'iterations': 60}, rng=_rng(6))
    data = essay.data.copy()

    essay.render(40)
    at_40 = essay.engine.weights.copy()
    assert essay.render(55).steps_completed == 55
    assert essay.render(40).steps_completed == 40
    assert np.array_equal(essay.engine.weights, at_40)
    assert essay.render(500).steps_completed == 60

    essay.set_params(grid_size=6)
    assert essay.engine.weights.shape == (36, 2)
    assert essay.engine.steps_completed == 0
    assert np.array_equal(essay.data, data)


def test_perceptron_keeps_weights_between_runs():
    essay = PerceptronEssay({'iterations': 5}, rng=_rng(7))
    steps = list(essay.steps())
    assert [s.iteration for s in steps] == [1, 2, 3, 4, 5]
    assert essay.last_step is steps[-1]

    weights = [layer.weights.copy() for layer in essay.network.layers]
    essay.set_params(learning_rate=0.5, activation='relu')
    for layer, w in zip(essay.network.layers, weights):
        assert np.array_equal(layer.weights, w)
    assert essay.network.activation.name == 'relu'

    essay.set_params(output_nodes=3)
    assert essay.network.layer_sizes == [2, 3, 3, 3]
    assert essay.target.tolist() == [1.0, 1.0, 1.0]

    essay.set_params(hidden_layers=1)
    assert essay.network.layer_sizes == [2, 3, 3]


def test_svm_essay_regenerates_on_noise_or_kernel():
    essay = SVMEssay(rng=_rng(8))
    X = essay.X

    essay.set_params(c=2.0)
    assert essay.X is X
    assert essay.model.C == 2.0

    essay.set_params(kernel='linear')
    assert essay.X is not X
    assert essay.model.kernel == 'linear'


# =============================================================================
# SNAPSHOTS AND RENDERING
# =============================================================================

@pytest.mark.parametrize("name", sorted(ESSAYS))
def test_snapshot_is_json_ready(name):
    essay = advance_essay(create_essay(name, rng=_rng(9)))
    snap = essay.snapshot()
    assert snap['essay'] == name
    restored = json.loads(json.dumps(snap))
    assert restored == snap


def test_canvas_mapper():
    mapper = CanvasMapper()
    assert mapper.to_canvas(-1.0, -1.0) == (40.0, 560.0)
    assert mapper.to_canvas(1.0, 1.0) == (760.0, 40.0)

    xs = np.array([-0.3, 0.0, 0.9])
    ys = np.array([0.5, -0.8, 0.1])
    px, py = mapper.to_canvas(xs, ys)
    back_x, back_y = mapper.to_data(px, py)
    np.testing.assert_allclose(back_x, xs)
    np.testing.assert_allclose(back_y, ys)


@pytest.mark.parametrize("name", ['kmeans', 'decision_tree', 'som', 'perceptron', 'svm'])
def test_plot_snapshot_writes_png(name, tmp_path):
    essay = advance_essay(create_essay(name, rng=_rng(10)))
    path = tmp_path / f"{name}.png"
    plot_snapshot(essay.snapshot(), str(path))
    assert path.exists()
    assert path.stat().st_size > 0


# =============================================================================
# BATCH EVALUATION
# =============================================================================

def test_results_documenter():
    print("\n" + "=" * 60)
    print("TEST: ResultsDocumenter")
    print("=" * 60)

    temp_dir = tempfile.mkdtemp(prefix="visual_ml_test_")
    try:
        doc = ResultsDocumenter(results_dir=temp_dir)
        assert os.path.isdir(os.path.join(temp_dir, "plots"))

        doc.add_result('kmeans', 'inertia', 12.5)
        doc.add_result('kmeans', 'matrix', "a b\nc d")

        table = os.path.join(temp_dir, "table.md")
        doc.save_table_md([["kmeans", 12.5]], ["Essay", "Inertia"], table, "Table")
        with open(table) as f:
            text = f.read()
        assert "| Essay | Inertia |" in text
        assert "| kmeans | 12.5 |" in text

        report = os.path.join(temp_dir, "REPORT.md")
        doc.compile_final_report(report)
        with open(report) as f:
            text = f.read()
        assert "## kmeans" in text
        assert "- **inertia**: 12.5" in text
        assert "### matrix" in text
        print("  table + report: OK")
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def test_batch_evaluation(tmp_path):
    print("\n" + "=" * 60)
    print("TEST: Batch evaluation")
    print("=" * 60)

    config = RunConfig(seed=1, results_dir=str(tmp_path),
                       overrides={'kmeans': {'clusters': 4}})
    evaluation = BatchEvaluation(config)
    summary = evaluation.run_all(['kmeans', 'decision_tree', 'svm'], plots=True)

    assert set(summary) == {'kmeans', 'decision_tree', 'svm'}
    assert sum(summary['kmeans']['cluster_sizes'].values()) == 100
    assert len(evaluation.snapshots['kmeans']['centroids']) == 4
    assert 0.0 <= summary['decision_tree']['accuracy'] <= 1.0
    assert "Accuracy:" in summary['decision_tree']['confusion_matrix']

    for name in ("snapshots.json", "summary.md", "REPORT.md",
                 os.path.join("plots", "kmeans.png")):
        assert (tmp_path / name).exists(), name

    with open(tmp_path / "snapshots.json") as f:
        saved = json.load(f)
    assert set(saved) == set(summary)
    print(f"  summary: {summary['kmeans']['inertia']} inertia")


def test_batch_statistics_come_from_metrics(tmp_path):
    evaluation = BatchEvaluation(RunConfig(seed=2, results_dir=str(tmp_path)))
    summary = evaluation.run_all(['kmeans', 'dbscan'])

    kmeans = evaluation.essays['kmeans'].engine
    assert summary['kmeans']['inertia'] == round(kmeans.inertia(), 3)

    engine = evaluation.essays['dbscan'].engine
    sizes = summary['dbscan']['cluster_sizes']
    assert sorted(sizes) == list(range(1, engine.n_clusters_ + 1))
    assert sum(sizes.values()) + summary['dbscan']['noise_points'] == len(engine.labels_)


def test_batch_evaluation_is_reproducible(tmp_path):
    first = BatchEvaluation(RunConfig(seed=5, results_dir=str(tmp_path / "a")))
    second = BatchEvaluation(RunConfig(seed=5, results_dir=str(tmp_path / "b")))
    names = ['dbscan', 'random_forest', 'perceptron']
    assert first.run_all(names) == second.run_all(names)


# =============================================================================
# COMMAND LINE
# =============================================================================

def test_parse_overrides():
    assert cli.parse_overrides(['points=50', 'epsilon=0.1', 'kernel=rbf']) == {
        'points': 50, 'epsilon': 0.1, 'kernel': 'rbf'}
    assert cli.parse_overrides(None) == {}


def test_main_runs_single_essay(tmp_path, capsys):
    plot = tmp_path / "som.png"
    assert cli.main(['--essay', 'som', '--frame', '30', '--plot', str(plot)]) == 0
    assert plot.exists()
    out = capsys.readouterr().out
    assert "--- som ---" in out
    assert "step: 30" in out


def test_main_reports_invalid_parameters(capsys):
    assert cli.main(['--essay', 'dbscan', '--set', 'epsilon=5']) == 2
    assert cli.main(['--essay', 'dbscan', '--set', 'epsilon']) == 2
    assert "Invalid parameter" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        cli.main(['--set', 'epsilon=0.1'])


def test_main_report(tmp_path):
    out_dir = tmp_path / "results"
    assert cli.main(['--essay', 'linear_regression', '--report', str(out_dir)]) == 0
    assert (out_dir / "summary.md").exists()
    assert (out_dir / "plots" / "linear_regression.png").exists()


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))

#!/usr/bin/env python3
"""
Essay Walkthrough - Visual ML Essays
====================================
Steps through each essay the way its animation would, printing the state
shown on screen at every frame.

Usage:
  python scripts/demo_essays.py [section]

Sections:
  1 - Clustering (K-Means steps, DBSCAN epsilon sweep)
  2 - Trees (Iris decision tree, forest votes)
  3 - Regression (frames of gradient descent)
  4 - Neural (SOM scrubbing, perceptron steps)
  5 - SVM (linear vs RBF)
  all - Run all sections
"""

import logging
import os
import sys
import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from config import LOG_FORMAT, LOG_LEVEL, IRIS_SPECIES


def section_header(num, title):
    """Print section header."""
    print("\n")
    print("#" * 70)
    print(f"# SECTION {num}: {title}")
    print("#" * 70)
    print()


# =============================================================================
# SECTION 1: CLUSTERING
# =============================================================================
def demo_clustering(seed=42):
    section_header(1, "CLUSTERING")
    from integration import KMeansEssay, DBSCANEssay

    essay = KMeansEssay({'points': 120, 'clusters': 4, 'iterations': 1},
                        rng=np.random.default_rng(seed))
    print("K-Means, one step per frame:")
    for frame in range(1, 6):
        engine = essay.run()
        print(f"  step {engine.steps_completed}: inertia={engine.inertia():10.1f}  "
              f"sizes={engine.cluster_sizes().tolist()}")

    print("\nDBSCAN, same blobs, growing epsilon:")
    dbscan = DBSCANEssay({'num_clusters': 3}, rng=np.random.default_rng(seed))
    for epsilon in (0.05, 0.1, 0.2, 0.3):
        dbscan.set_params(epsilon=epsilon)
        engine = dbscan.run()
        print(f"  epsilon={epsilon:.2f}: clusters={engine.n_clusters_:2d}  noise={engine.noise_count()}")


# =============================================================================
# SECTION 2: TREES
# =============================================================================
def demo_trees(seed=42):
    section_header(2, "TREES ON IRIS")
    from integration import DecisionTreeEssay, RandomForestEssay
    from ml_engines.decision_tree import iter_nodes
    from evaluation import confusion_matrix, print_confusion_matrix

    essay = DecisionTreeEssay({'max_depth': 2})
    for depth, node in iter_nodes(essay.model.root):
        indent = "  " * (depth + 1)
        if node.is_leaf:
            print(f"{indent}-> {IRIS_SPECIES[node.value]} (impurity {node.impurity:.3f}, n={node.n_samples})")
        else:
            print(f"{indent}feature {node.feature} <= {node.threshold:.2f} (impurity {node.impurity:.3f})")

    cm = confusion_matrix(essay.y, essay.model.predict(essay.X), n_classes=len(IRIS_SPECIES))
    print()
    print(print_confusion_matrix(cm, IRIS_SPECIES, title="Decision tree (training set)"))

    forest = RandomForestEssay({'number_of_trees': 5}, rng=np.random.default_rng(seed))
    print("\nForest votes:")
    for index in (0, 60, 120):
        vote = forest.predict_sample(index)
        names = [IRIS_SPECIES[v] for v in vote.votes]
        print(f"  sample {index:3d} ({forest.samples[index].species}): {names} -> {IRIS_SPECIES[vote.final]}")


# =============================================================================
# SECTION 3: REGRESSION
# =============================================================================
def demo_regression(seed=42):
    section_header(3, "REGRESSION")
    from integration import LinearRegressionEssay, LogisticRegressionEssay

    linear = LinearRegressionEssay(rng=np.random.default_rng(seed), regenerate_each_render=False)
    print("Linear regression (true line y = 2x + 1):")
    for frame in (0, 10, 50, 100):
        engine = linear.render(frame)
        print(f"  frame {frame:3d}: step {engine.steps_completed:3d}  "
              f"w={engine.weight:.3f}  b={engine.bias:.3f}  MSE={engine.mse():.4f}")

    logistic = LogisticRegressionEssay({'learning_rate': 0.5}, rng=np.random.default_rng(seed),
                                       regenerate_each_render=False)
    print("\nLogistic regression:")
    for frame in (0, 50, 100):
        engine = logistic.render(frame)
        print(f"  frame {frame:3d}: w={engine.weight:.3f}  b={engine.bias:.3f}  "
              f"error rate={engine.error_rate():.2f}")


# =============================================================================
# SECTION 4: NEURAL
# =============================================================================
def demo_neural(seed=42):
    section_header(4, "NEURAL")
    from integration import SOMEssay, PerceptronEssay

    som = SOMEssay(rng=np.random.default_rng(seed))
    print("SOM, scrubbing back and forth:")
    for frame in (10, 50, 100, 10):
        engine = som.render(frame)
        print(f"  frame {frame:3d}: quantization error={engine.quantization_error():.4f}")

    perceptron = PerceptronEssay(rng=np.random.default_rng(seed))
    print(f"\nPerceptron {perceptron.network.layer_sizes} "
          f"({perceptron.network.activation.formula}):")
    for step in perceptron.steps():
        print(f"  step {step.iteration:2d}: output={step.activations[-1].round(4).tolist()}  "
              f"loss={step.loss:.6f}")


# =============================================================================
# SECTION 5: SVM
# =============================================================================
def demo_svm(seed=42):
    section_header(5, "SVM")
    from integration import SVMEssay

    for kernel in ('linear', 'rbf'):
        essay = SVMEssay({'kernel': kernel}, rng=np.random.default_rng(seed))
        model = essay.model
        print(f"  {kernel:6s}: errors={model.error_count():2d}  "
              f"support={model.n_support_:2d}  highlighted={int(model.highlight_mask().sum())}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Essay walkthrough - Visual ML Essays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("section", nargs="?", default="all",
                        help="Section to run (1-5 or 'all')")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--verbose", action="store_true", help="Log engine steps")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else LOG_LEVEL, format=LOG_FORMAT)

    sections = {
        '1': demo_clustering,
        '2': demo_trees,
        '3': demo_regression,
        '4': demo_neural,
        '5': demo_svm,
    }

    print("\n" + "=" * 70)
    print("VISUAL ML ESSAYS - WALKTHROUGH")
    print("=" * 70)

    if args.section.lower() == 'all':
        for num in sorted(sections):
            sections[num](args.seed)
    elif args.section in sections:
        sections[args.section](args.seed)
    else:
        print(f"Unknown section: {args.section}")
        print("Use 1-5 or 'all'")
        return

    print("\n" + "=" * 70)
    print("WALKTHROUGH COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()

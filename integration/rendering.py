"""
Rendering helpers for essay snapshots.

CanvasMapper converts data coordinates to canvas pixels the way the
essays lay out their plots (fixed margin, y axis pointing up).
plot_snapshot draws a snapshot into a PNG with matplotlib.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from config import CANVAS_MARGIN, KMEANS_CANVAS_SIZE

logger = logging.getLogger(__name__)


@dataclass
class CanvasMapper:
    """Linear map from a data rectangle to a canvas with a margin."""
    width: int = 800
    height: int = 600
    x_domain: Tuple[float, float] = (-1.0, 1.0)
    y_domain: Tuple[float, float] = (-1.0, 1.0)
    margin: int = CANVAS_MARGIN

    def to_canvas(self, x, y):
        """Data (x, y) -> pixel (px, py); larger y is drawn higher."""
        x0, x1 = self.x_domain
        y0, y1 = self.y_domain
        px = self.margin + (np.asarray(x) - x0) / (x1 - x0) * (self.width - 2 * self.margin)
        py = self.height - self.margin - (np.asarray(y) - y0) / (y1 - y0) * (self.height - 2 * self.margin)
        return px, py

    def to_data(self, px, py):
        """Inverse of ``to_canvas``."""
        x0, x1 = self.x_domain
        y0, y1 = self.y_domain
        x = x0 + (np.asarray(px) - self.margin) / (self.width - 2 * self.margin) * (x1 - x0)
        y = y0 + (self.height - self.margin - np.asarray(py)) / (self.height - 2 * self.margin) * (y1 - y0)
        return x, y


# =============================================================================
# MATPLOTLIB
# =============================================================================

def _scatter_points(ax, points, key: str, cmap: str = 'tab10'):
    if not points:
        return
    xs = [p['x'] for p in points]
    ys = [p['y'] for p in points]
    colors = [p[key] for p in points]
    ax.scatter(xs, ys, c=colors, cmap=cmap, s=18, edgecolors='none')


def _draw_tree(ax, node: Dict, x: float, y: float, dx: float, dy: float = 1.0):
    if node['type'] == 'leaf':
        label = f"{node['class']}\n{node['impurity']:.3f}"
    else:
        label = f"{node['feature_name']} <= {node['threshold']:.2f}\n{node['impurity']:.3f}"
        for child, sign in ((node['left'], -1), (node['right'], 1)):
            cx = x + sign * dx
            ax.plot([x, cx], [y, y - dy], color='gray', linewidth=1)
            _draw_tree(ax, child, cx, y - dy, dx / 2, dy)
    ax.text(x, y, label, ha='center', va='center', fontsize=7,
            bbox=dict(boxstyle='round', facecolor='white', edgecolor='black'))


def _plot_kmeans(ax, snap):
    _scatter_points(ax, snap['points'], 'cluster')
    cx = [c['x'] for c in snap['centroids']]
    cy = [c['y'] for c in snap['centroids']]
    ax.scatter(cx, cy, marker='x', s=120, color='black')
    ax.set_xlim(0, KMEANS_CANVAS_SIZE[0])
    ax.set_ylim(0, KMEANS_CANVAS_SIZE[1])
    ax.invert_yaxis()
    ax.set_title(f"K-Means (step {snap['step']}, inertia {snap['inertia']:.1f})")


def _plot_dbscan(ax, snap):
    _scatter_points(ax, snap['points'], 'cluster')
    ax.set_title(f"DBSCAN ({snap['n_clusters']} clusters, {snap['noise']} noise)")


def _plot_tree(ax, snap):
    _draw_tree(ax, snap['tree'], 0.0, 0.0, 2.0 ** max(snap['depth'] - 1, 0))
    ax.axis('off')
    ax.set_title(f"Decision tree (accuracy {snap['training_accuracy']:.2f})")


def _plot_forest(ax, snap):
    n = len(snap['trees'])
    for t, tree in enumerate(snap['trees']):
        _draw_tree(ax, tree, t * 10.0, 0.0, 2.0)
    ax.axis('off')
    ax.set_title(f"Random forest ({n} trees): {snap['sample']['species']} -> {snap['prediction']}")


def _plot_regression(ax, snap):
    pts = np.array(snap['points'])
    curve = np.array(snap['curve'])
    ax.scatter(pts[:, 0], pts[:, 1], s=12)
    ax.plot(curve[:, 0], curve[:, 1], color='red')
    if snap['essay'] == 'logistic_regression':
        ax.axhline(snap['decision_boundary'], color='gray', linestyle='--')
        stat = f"error {snap['error_rate']:.2f}"
    else:
        stat = f"MSE {snap['mse']:.4f}"
    ax.set_title(f"w={snap['weight']:.3f} b={snap['bias']:.3f} {stat}")


def _plot_som(ax, snap):
    data = np.array(snap['data'])
    g = snap['grid_size']
    grid = np.array([[n['x'], n['y']] for n in snap['neurons']]).reshape(g, g, 2)
    ax.scatter(data[:, 0], data[:, 1], s=6, color='lightgray')
    for i in range(g):
        ax.plot(grid[i, :, 0], grid[i, :, 1], color='steelblue', linewidth=0.8)
        ax.plot(grid[:, i, 0], grid[:, i, 1], color='steelblue', linewidth=0.8)
    if snap['bmu'] is not None:
        b = grid[snap['bmu']['i'], snap['bmu']['j']]
        ax.scatter([b[0]], [b[1]], color='red', s=40)
    ax.set_title(f"SOM (step {snap['step']})")


def _plot_perceptron(ax, snap):
    sizes = snap['layer_sizes']
    positions = []
    for l, size in enumerate(sizes):
        ys = np.linspace(-1, 1, size) if size > 1 else np.zeros(1)
        positions.append([(float(l), float(y)) for y in ys])
    for l, weights in enumerate(snap['weights']):
        for o, row in enumerate(weights):
            for i, w in enumerate(row):
                (x0, y0), (x1, y1) = positions[l][i], positions[l + 1][o]
                ax.plot([x0, x1], [y0, y1], color='red' if w < 0 else 'blue',
                        linewidth=0.5 + 2 * min(abs(w), 1.0))
    for layer, values in zip(positions, snap['activations']):
        for (x, y), v in zip(layer, values):
            ax.scatter([x], [y], s=300, c=[v], cmap='viridis', vmin=0, vmax=1,
                       edgecolors='black', zorder=3)
    ax.axis('off')
    ax.set_title(f"{snap['formula']} (step {snap['step']}, loss {snap['loss']:.4f})")


def _plot_svm(ax, snap):
    surface = snap['surface']
    values = np.array(surface['values'])
    # No support vectors means f == 0 everywhere; nothing to shade
    if values.max() > values.min():
        ax.contourf(surface['xs'], surface['ys'], values.T, levels=20, cmap='coolwarm', alpha=0.4)
        ax.contour(surface['xs'], surface['ys'], values.T, levels=[-1, 0, 1],
                   colors='black', linestyles=['--', '-', '--'])
    _scatter_points(ax, snap['points'], 'label', cmap='coolwarm')
    for p in snap['points']:
        if p['support']:
            ax.scatter([p['x']], [p['y']], s=120, facecolors='none', edgecolors='black')
    ax.set_title(f"SVM ({snap['kernel']}, {snap['errors']} errors)")


PLOTTERS = {
    'kmeans': _plot_kmeans,
    'dbscan': _plot_dbscan,
    'decision_tree': _plot_tree,
    'random_forest': _plot_forest,
    'linear_regression': _plot_regression,
    'logistic_regression': _plot_regression,
    'som': _plot_som,
    'perceptron': _plot_perceptron,
    'svm': _plot_svm,
}


def plot_snapshot(snapshot: Dict, save_path: Optional[str] = None,
                  figsize: Tuple[int, int] = (8, 6)):
    """
    Draw an essay snapshot.

    Parameters
    ----------
    snapshot : dict
        Output of an essay's ``snapshot()``.
    save_path : str, optional
        Write a PNG here and close the figure.

    Returns
    -------
    matplotlib.figure.Figure
    """
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=figsize)
    PLOTTERS[snapshot['essay']](ax, snapshot)

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        logger.info("Saved plot: %s", save_path)
    return fig

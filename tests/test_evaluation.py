import os

import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from evaluation import (
    confusion_counts,
    score_binary,
    roc_points,
    format_metrics,
    plot_confusion_matrix,
    plot_roc_comparison,
    compare_models,
)


def test_confusion_counts_known_cells():
    cm, cells = confusion_counts([0, 0, 1, 1], [0, 1, 1, 1])
    assert cm.tolist() == [[1, 1], [0, 2]]
    assert cells == {"TN": 1, "FP": 1, "FN": 0, "TP": 2}


def test_confusion_counts_single_class_is_still_2x2():
    cm, cells = confusion_counts([0, 0, 0], [0, 0, 0])
    assert cm.shape == (2, 2)
    assert cells["TN"] == 3
    assert cells["TP"] == 0


def test_score_binary_sensitivity_specificity():
    m = score_binary([0, 0, 1, 1], [0, 1, 1, 1])
    assert m["accuracy"] == pytest.approx(0.75)
    assert m["sensitivity"] == pytest.approx(1.0)
    assert m["specificity"] == pytest.approx(0.5)
    assert "roc_auc" not in m


def test_score_binary_with_probabilities():
    y_true = np.array([0, 0, 1, 1, 0, 1])
    y_proba = np.array([0.1, 0.3, 0.8, 0.9, 0.2, 0.7])
    m = score_binary(y_true, (y_proba >= 0.5).astype(int), y_proba)
    assert m["roc_auc"] == pytest.approx(1.0)
    assert m["kappa"] == pytest.approx(1.0)
    assert m["pr_auc"] == pytest.approx(1.0)


def test_roc_points_matches_sklearn():
    rng = np.random.default_rng(0)
    y_true = rng.integers(0, 2, 200)
    y_proba = np.clip(y_true * 0.3 + rng.random(200) * 0.7, 0, 1)
    roc = roc_points(y_true, y_proba)
    assert roc["auc"] == pytest.approx(roc_auc_score(y_true, y_proba))
    assert roc["fpr"][0] == 0.0 and roc["tpr"][-1] == 1.0
    assert np.all(np.diff(roc["fpr"]) >= 0)


def test_format_metrics_order():
    text = format_metrics({"roc_auc": 0.9, "accuracy": 0.8})
    assert text == "accuracy=0.8000, roc_auc=0.9000"


def test_plot_confusion_matrix_saves(output_dir):
    path = plot_confusion_matrix([[5, 1], [2, 3]], "CM", "cm.png", output_dir=output_dir, show=False)
    assert os.path.exists(path)


def test_plot_roc_comparison(output_dir):
    y_true = np.array([0, 0, 1, 1, 0, 1, 0, 1])
    curves = {
        "good": np.array([0.1, 0.2, 0.9, 0.8, 0.3, 0.7, 0.2, 0.95]),
        "weak": np.array([0.5, 0.6, 0.4, 0.7, 0.3, 0.5, 0.8, 0.6]),
    }
    path, aucs = plot_roc_comparison(curves, y_true, output_dir=output_dir, show=False)
    assert os.path.basename(path) == "roc_comparison.png"
    assert os.path.exists(path)
    assert aucs["good"] == pytest.approx(1.0)
    assert aucs["weak"] < aucs["good"]


def test_compare_models_sorted_by_auc():
    table = compare_models({
        "a": {"test_metrics": {"accuracy": 0.8, "roc_auc": 0.7}},
        "b": {"test_metrics": {"accuracy": 0.7, "roc_auc": 0.9}},
    })
    assert table.index.tolist() == ["b", "a"]
    assert list(table.columns) == ["accuracy", "roc_auc"]

"""
Evaluation utilities for the Census Income classifiers.
Metrics: accuracy, F1, sensitivity/specificity, kappa; ROC-AUC and PR-AUC from probabilities.
Confusion-matrix and ROC comparison plots.
"""

import os

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import (
    accuracy_score,
    f1_score,
    precision_score,
    recall_score,
    cohen_kappa_score,
    average_precision_score,
    roc_auc_score,
    roc_curve,
    confusion_matrix,
)

from config import CLASS_LABELS, OUTPUT_DIR


def confusion_counts(y_true, y_pred):
    """2x2 confusion matrix (rows actual, cols predicted; 0=<=50K, 1=>50K) plus named cells."""
    cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
    tn, fp, fn, tp = (int(v) for v in cm.ravel())
    return cm, {"TN": tn, "FP": fp, "FN": fn, "TP": tp}


def score_binary(y_true, y_pred, y_proba=None):
    """Return dict with accuracy, f1, precision, sensitivity, specificity, kappa (+ roc_auc, pr_auc if y_proba)."""
    _, cells = confusion_counts(y_true, y_pred)
    negatives = cells["TN"] + cells["FP"]
    out = {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "f1": float(f1_score(y_true, y_pred, zero_division=0)),
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "sensitivity": float(recall_score(y_true, y_pred, zero_division=0)),
        "specificity": float(cells["TN"] / negatives) if negatives else 0.0,
        "kappa": float(cohen_kappa_score(y_true, y_pred)),
    }
    if y_proba is not None:
        out["roc_auc"] = float(roc_auc_score(y_true, y_proba))
        out["pr_auc"] = float(average_precision_score(y_true, y_proba))
    return out


def roc_points(y_true, y_proba):
    """ROC curve for the positive class (>50K). Returns dict fpr, tpr, thresholds, auc."""
    fpr, tpr, thresholds = roc_curve(y_true, y_proba)
    return {
        "fpr": fpr,
        "tpr": tpr,
        "thresholds": thresholds,
        "auc": float(roc_auc_score(y_true, y_proba)),
    }


def format_metrics(metrics):
    """One-line metric summary for console and results files."""
    order = ["accuracy", "f1", "precision", "sensitivity", "specificity", "kappa", "roc_auc", "pr_auc"]
    return ", ".join(f"{k}={metrics[k]:.4f}" for k in order if k in metrics)


def plot_confusion_matrix(cm, title, filename, output_dir=None, show=True):
    """Annotated heatmap of a 2x2 confusion matrix. Saves to output_dir/filename."""
    output_dir = output_dir or OUTPUT_DIR
    cm = np.asarray(cm)
    fig, ax = plt.subplots(figsize=(5, 4))
    sns.heatmap(cm, annot=True, fmt="d", cmap="Blues", cbar_kws={"label": "Count"},
                xticklabels=CLASS_LABELS, yticklabels=CLASS_LABELS, ax=ax)
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")
    ax.set_title(title)
    plt.tight_layout()
    out_path = os.path.join(output_dir, filename)
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)
    print("Saved:", out_path)
    return out_path


def plot_roc_comparison(curves, y_true, output_dir=None, filename="roc_comparison.png", title=None, show=True):
    """
    Overlay ROC curves of several models on the same test set.

    Args:
        curves: {model name: predicted probability of >50K}
        y_true: encoded test labels
    Returns:
        (path of saved figure, {model name: AUC})
    """
    output_dir = output_dir or OUTPUT_DIR
    aucs = {}
    fig, ax = plt.subplots(figsize=(6, 6))
    for name, y_proba in curves.items():
        roc = roc_points(y_true, y_proba)
        aucs[name] = roc["auc"]
        ax.plot(roc["fpr"], roc["tpr"], lw=2, label=f"{name} (AUC = {roc['auc']:.4f})")
    ax.plot([0, 1], [0, 1], "k--", lw=1, label="Chance")
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1.02)
    ax.set_xlabel("False Positive Rate (1 - specificity)")
    ax.set_ylabel("True Positive Rate (sensitivity)")
    ax.set_title(title or "ROC comparison (test set)")
    ax.legend(loc="lower right")
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    out_path = os.path.join(output_dir, filename)
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)
    print("Saved:", out_path)
    return out_path, aucs


def compare_models(results_by_model):
    """Table of test metrics, one row per model, sorted by ROC AUC."""
    rows = {name: res["test_metrics"] for name, res in results_by_model.items()}
    table = pd.DataFrame.from_dict(rows, orient="index")
    if "roc_auc" in table.columns:
        table = table.sort_values("roc_auc", ascending=False)
    print("\nModel comparison (test set):")
    print(table.round(4).to_string())
    return table

"""
Decision Tree (CART) for Census Income.
Split criterion: Gini. Pruning/regularization: ccp_alpha, max_depth, min_samples_leaf,
tuned by stratified K-fold grid search on ROC AUC.
Model-complexity curve over ccp_alpha, runtime, confusion matrix, top-level rules.
"""

import os
import time

import numpy as np
import matplotlib.pyplot as plt
from joblib import Parallel, delayed
from sklearn.base import clone
from sklearn.tree import DecisionTreeClassifier, export_text
from sklearn.model_selection import GridSearchCV, StratifiedKFold, cross_val_score
from sklearn.metrics import roc_auc_score

from config import RANDOM_SEED, OUTPUT_DIR, CV_FOLDS, TUNING_METRIC, N_JOBS
from evaluation import score_binary, confusion_counts, roc_points, format_metrics, plot_confusion_matrix
from utils import get_hardware_note


CRITERION = "gini"
DT_RESULTS_FILE = "DT_results.txt"

# Hyperparameter grid for tuning (ccp_alpha plays the role of rpart's cp)
CCP_ALPHAS = [0.0, 1e-4, 3e-4, 1e-3, 3e-3, 1e-2]
MAX_DEPTHS = [4, 8, 12, None]
MIN_SAMPLES_LEAF = [1, 10, 50]
# Model-complexity sweep: include 0 to visualize the unpruned tree
CCP_ALPHAS_MC = np.unique(np.concatenate([[0.0], np.logspace(-5, -1, 13)]))
RULES_MAX_DEPTH = 3


def default_param_grid():
    return {
        "ccp_alpha": list(CCP_ALPHAS),
        "max_depth": list(MAX_DEPTHS),
        "min_samples_leaf": list(MIN_SAMPLES_LEAF),
    }


def _train_and_eval(clf, X_tr, y_tr, X_te, y_te):
    t0 = time.perf_counter()
    clf.fit(X_tr, y_tr)
    fit_time = time.perf_counter() - t0
    t0 = time.perf_counter()
    y_pred = clf.predict(X_te)
    y_proba = clf.predict_proba(X_te)[:, 1]
    predict_time = time.perf_counter() - t0
    metrics = score_binary(y_te, y_pred, y_proba)
    return metrics, y_pred, y_proba, fit_time, predict_time


def _complexity_point(alpha, X_train, y_train, cv_splitter):
    """CV and train AUC for one ccp_alpha. Picklable for joblib."""
    clf = DecisionTreeClassifier(criterion=CRITERION, ccp_alpha=float(alpha), random_state=RANDOM_SEED)
    cv_auc = cross_val_score(clf, X_train, y_train, cv=cv_splitter, scoring=TUNING_METRIC).mean()
    clf.fit(X_train, y_train)
    train_auc = roc_auc_score(y_train, clf.predict_proba(X_train)[:, 1])
    return float(train_auc), float(cv_auc), int(clf.get_n_leaves())


def run_dt(X_train, y_train, X_test, y_test, cv=CV_FOLDS, param_grid=None, ccp_alphas_mc=None,
           feature_names=None, output_dir=None, n_jobs=N_JOBS, show=True):
    """
    Tune DT (ccp_alpha, max_depth, min_samples_leaf) via CV on training only,
    sweep ccp_alpha for the model-complexity curve, refit best tree, evaluate on test.
    Returns dict with all results and writes DT_results.txt to output_dir.
    """
    output_dir = output_dir or OUTPUT_DIR
    param_grid = param_grid or default_param_grid()
    alphas_mc = CCP_ALPHAS_MC if ccp_alphas_mc is None else np.asarray(ccp_alphas_mc, dtype=float)
    results = {"model": "Decision Tree (CART)", "cv_folds": cv}
    cv_splitter = StratifiedKFold(n_splits=cv, shuffle=True, random_state=RANDOM_SEED)

    # 1) Grid search on training only
    base_clf = DecisionTreeClassifier(criterion=CRITERION, random_state=RANDOM_SEED)
    gs = GridSearchCV(base_clf, param_grid, cv=cv_splitter, scoring=TUNING_METRIC, n_jobs=n_jobs)
    gs.fit(X_train, y_train)
    results["grid_search_best_cv_auc"] = float(gs.best_score_)
    results["grid_search_best_params"] = dict(gs.best_params_)
    print(f"DT grid search: best CV {TUNING_METRIC}={gs.best_score_:.4f}, params={gs.best_params_}")

    # 2) Model-complexity curve: AUC vs ccp_alpha (max_depth=None, min_samples_leaf=1)
    points = Parallel(n_jobs=n_jobs)(
        delayed(_complexity_point)(alpha, X_train, y_train, cv_splitter)
        for alpha in alphas_mc
    )
    train_auc, cv_auc, n_leaves = (list(v) for v in zip(*points))
    best_idx = int(np.argmax(cv_auc))
    results["model_complexity"] = {
        "ccp_alpha": alphas_mc.tolist(),
        "train_auc": train_auc,
        "cross_val_auc": cv_auc,
        "n_leaves": n_leaves,
        "best_ccp_alpha_from_curve": float(alphas_mc[best_idx]),
        "best_cv_auc_from_curve": float(cv_auc[best_idx]),
    }

    # 3) Final model on full train with best params
    clf_final = clone(base_clf).set_params(**gs.best_params_)
    metrics, y_pred, y_proba, fit_time, predict_time = _train_and_eval(
        clf_final, X_train, y_train, X_test, y_test
    )
    cm, cells = confusion_counts(y_test, y_pred)

    results["best_model"] = clf_final
    results["best_params"] = {
        "criterion": CRITERION,
        "ccp_alpha": float(clf_final.ccp_alpha),
        "max_depth": clf_final.max_depth,
        "min_samples_leaf": clf_final.min_samples_leaf,
    }
    results["depth"] = int(clf_final.get_depth())
    results["n_leaves"] = int(clf_final.get_n_leaves())
    results["test_metrics"] = metrics
    results["y_pred"] = y_pred
    results["y_proba"] = y_proba
    results["roc"] = roc_points(y_test, y_proba)
    results["confusion_matrix"] = cm.tolist()
    results["confusion_cells"] = cells
    results["runtime"] = {"fit_sec": fit_time, "predict_sec": predict_time}
    results["rules"] = export_text(
        clf_final,
        feature_names=list(feature_names) if feature_names is not None else None,
        max_depth=RULES_MAX_DEPTH,
    )

    save_results(results, y_train, output_dir)
    _plot_and_print(results, output_dir, show)
    return results


def _plot_and_print(results, output_dir, show=True):
    """Plot the ccp_alpha model-complexity curve and confusion matrix; print summary."""
    mc = results["model_complexity"]
    fig, ax = plt.subplots(figsize=(7, 5))
    alphas = np.array(mc["ccp_alpha"])
    ax.plot(alphas, mc["train_auc"], "o-", label="Train AUC")
    ax.plot(alphas, mc["cross_val_auc"], "s-", label="Cross-Val AUC")
    ax.axvline(mc["best_ccp_alpha_from_curve"], color="gray", ls="--", label="best")
    ax.set_xlabel("ccp_alpha")
    ax.set_ylabel("ROC AUC")
    ax.set_title("DT Model-Complexity (ccp_alpha)")
    ax.set_xscale("symlog", linthresh=1e-5)
    ax.set_xlim(left=0)
    ax.legend()
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    fig.savefig(os.path.join(output_dir, "dt_model_complexity.png"), dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)

    print("--- Best from model-complexity curve (max_depth=None, min_samples_leaf=1) ---")
    print(f"  best ccp_alpha={mc['best_ccp_alpha_from_curve']:.6f}, CV AUC={mc['best_cv_auc_from_curve']:.4f}")
    print("--- Grid-search best (joint tuning) ---")
    print(f"  CV AUC={results['grid_search_best_cv_auc']:.4f}, params={results['grid_search_best_params']}")
    print()
    print("Best params (used for final model):", results["best_params"])
    print("Test metrics:", format_metrics(results["test_metrics"]))
    print("Depth:", results["depth"], "| Leaves:", results["n_leaves"])
    print("Runtime - fit:", round(results["runtime"]["fit_sec"], 4), "s | predict:", round(results["runtime"]["predict_sec"], 4), "s")
    print("\nConfusion matrix (0=<=50K, 1=>50K):")
    for row in results["confusion_matrix"]:
        print(row)
    print(f"\nTop of the tree (depth <= {RULES_MAX_DEPTH}):")
    print(results["rules"])
    plot_confusion_matrix(
        results["confusion_matrix"],
        "DT Confusion Matrix (threshold 0.5)",
        "dt_confusion_matrix.png",
        output_dir=output_dir,
        show=show,
    )
    print("\nResults saved to:", os.path.join(output_dir, DT_RESULTS_FILE))


def save_results(results, y_train, output_dir=None):
    """Write DT results to DT_results.txt."""
    output_dir = output_dir or OUTPUT_DIR
    m = results["test_metrics"]
    c = results["confusion_cells"]
    rt = results["runtime"]
    bp = results["best_params"]
    mc = results["model_complexity"]

    n_pos = int(np.sum(np.asarray(y_train) == 1))
    n_neg = int(np.sum(np.asarray(y_train) == 0))
    imbalance_ratio = n_neg / max(n_pos, 1)

    lines = [
        "=" * 60,
        "DECISION TREE (CART) — RESULTS (Census Income)",
        "=" * 60,
        "",
        "--- DATA & METHODOLOGY ---",
        "Target: income (<=50K vs >50K); task: binary classification.",
        f"Class distribution (train): {n_neg} <=50K, {n_pos} >50K (~{imbalance_ratio:.2f}:1).",
        "Rows with missing values removed; fnlwgt and education dropped.",
        f"Single stratified held-out test split; tuning via {results['cv_folds']}-fold stratified CV on training only ({TUNING_METRIC}).",
        "",
        f"--- Criterion: {CRITERION} ---",
        "",
        "--- Best hyperparameters (CV on training) ---",
        f"ccp_alpha: {bp['ccp_alpha']:.6f}",
        f"max_depth: {bp['max_depth']}",
        f"min_samples_leaf: {bp['min_samples_leaf']}",
        f"Grid-search CV AUC: {results['grid_search_best_cv_auc']:.4f}",
        f"Final depth: {results['depth']}",
        f"Number of leaves: {results['n_leaves']}",
        "",
        "--- Model-complexity curve (max_depth=None, min_samples_leaf=1) ---",
        f"best ccp_alpha={mc['best_ccp_alpha_from_curve']:.6f}, CV AUC={mc['best_cv_auc_from_curve']:.4f}",
        "",
        "--- Test metrics ---",
        f"Accuracy:    {m['accuracy']:.4f}",
        f"F1:          {m['f1']:.4f}",
        f"Sensitivity: {m['sensitivity']:.4f}",
        f"Specificity: {m['specificity']:.4f}",
        f"Kappa:       {m['kappa']:.4f}",
        f"ROC-AUC:     {m['roc_auc']:.4f}",
        f"PR-AUC:      {m['pr_auc']:.4f}",
        "",
        "--- Confusion matrix (0=<=50K, 1=>50K, threshold 0.5) ---",
        f"TN={c['TN']}  FP={c['FP']}",
        f"FN={c['FN']}  TP={c['TP']}",
        "",
        "--- Runtime ---",
        f"Fit (sec):     {rt['fit_sec']:.4f}",
        f"Predict (sec): {rt['predict_sec']:.4f}",
        f"Hardware: {get_hardware_note()}",
        "",
        f"--- Rules (depth <= {RULES_MAX_DEPTH}) ---",
        results["rules"],
        "=" * 60,
    ]
    path = os.path.join(output_dir, DT_RESULTS_FILE)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    return path

"""
Random Forest for Census Income.
Tuning: n_estimators, max_features (mtry), min_samples_leaf via stratified K-fold grid search on ROC AUC.
Out-of-bag error vs number of trees, impurity feature importances, runtime, confusion matrix.
"""

import os
import time

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from tqdm import tqdm
from sklearn.base import clone
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV, StratifiedKFold

from config import RANDOM_SEED, OUTPUT_DIR, CV_FOLDS, TUNING_METRIC, N_JOBS
from evaluation import score_binary, confusion_counts, roc_points, format_metrics, plot_confusion_matrix
from utils import get_hardware_note


RF_RESULTS_FILE = "RF_results.txt"

# Hyperparameter grid for tuning
N_ESTIMATORS = [100, 300]
MAX_FEATURES = ["sqrt", "log2", 0.3]
MIN_SAMPLES_LEAF = [1, 5]
# Tree counts for the OOB error curve (forest grown incrementally with warm_start)
OOB_TREE_COUNTS = [25, 50, 100, 150, 200, 300, 400, 500]
TOP_N_FEATURES = 15


def default_param_grid():
    return {
        "n_estimators": list(N_ESTIMATORS),
        "max_features": list(MAX_FEATURES),
        "min_samples_leaf": list(MIN_SAMPLES_LEAF),
    }


def _make_rf(n_jobs=N_JOBS, **params):
    return RandomForestClassifier(random_state=RANDOM_SEED, n_jobs=n_jobs, **params)


def oob_error_curve(X_train, y_train, tree_counts=None, n_jobs=N_JOBS, **params):
    """
    Grow one forest tree-by-batch (warm_start) and record out-of-bag error after each batch.
    params: forest hyperparameters other than n_estimators (e.g. tuned max_features).
    """
    tree_counts = sorted(tree_counts or OOB_TREE_COUNTS)
    params.pop("n_estimators", None)
    rf = _make_rf(n_jobs=n_jobs, warm_start=True, oob_score=True, bootstrap=True, **params)
    oob_error = []
    for n in tqdm(tree_counts, desc="RF OOB (n_estimators)"):
        rf.set_params(n_estimators=n)
        rf.fit(X_train, y_train)
        oob_error.append(float(1.0 - rf.oob_score_))
    best_idx = int(np.argmin(oob_error))
    return {
        "n_estimators": list(tree_counts),
        "oob_error": oob_error,
        "best_n_estimators_from_curve": tree_counts[best_idx],
        "best_oob_error_from_curve": oob_error[best_idx],
    }


def feature_importances(clf, feature_names=None, top_n=TOP_N_FEATURES):
    """Mean decrease in impurity, sorted descending, as a Series of the top_n features."""
    names = list(feature_names) if feature_names is not None else [f"x{i}" for i in range(clf.n_features_in_)]
    imp = pd.Series(clf.feature_importances_, index=names).sort_values(ascending=False)
    return imp.head(top_n)


def run_rf(X_train, y_train, X_test, y_test, cv=CV_FOLDS, param_grid=None, oob_tree_counts=None,
           feature_names=None, output_dir=None, n_jobs=N_JOBS, show=True):
    """
    Tune RF (n_estimators, max_features, min_samples_leaf) via CV on training only,
    trace OOB error vs number of trees, refit best forest, evaluate on test.
    Returns dict with all results and writes RF_results.txt to output_dir.
    """
    output_dir = output_dir or OUTPUT_DIR
    param_grid = param_grid or default_param_grid()
    results = {"model": "Random Forest", "cv_folds": cv}
    cv_splitter = StratifiedKFold(n_splits=cv, shuffle=True, random_state=RANDOM_SEED)

    # 1) Grid search on training only; folds run in parallel, trees inside each fold serially
    base_clf = _make_rf(n_jobs=1)
    gs = GridSearchCV(base_clf, param_grid, cv=cv_splitter, scoring=TUNING_METRIC, n_jobs=n_jobs)
    gs.fit(X_train, y_train)
    results["grid_search_best_cv_auc"] = float(gs.best_score_)
    results["grid_search_best_params"] = dict(gs.best_params_)
    print(f"RF grid search: best CV {TUNING_METRIC}={gs.best_score_:.4f}, params={gs.best_params_}")

    # 2) OOB error curve with the tuned max_features / min_samples_leaf
    results["oob_curve"] = oob_error_curve(
        X_train, y_train, tree_counts=oob_tree_counts, n_jobs=n_jobs,
        **gs.best_params_,
    )

    # 3) Final forest on full train with best params
    clf_final = clone(base_clf).set_params(n_jobs=n_jobs, oob_score=True, **gs.best_params_)
    t0 = time.perf_counter()
    clf_final.fit(X_train, y_train)
    fit_time = time.perf_counter() - t0
    t0 = time.perf_counter()
    y_pred = clf_final.predict(X_test)
    y_proba = clf_final.predict_proba(X_test)[:, 1]
    predict_time = time.perf_counter() - t0
    cm, cells = confusion_counts(y_test, y_pred)

    results["best_model"] = clf_final
    results["best_params"] = {
        "n_estimators": clf_final.n_estimators,
        "max_features": clf_final.max_features,
        "min_samples_leaf": clf_final.min_samples_leaf,
    }
    results["oob_score"] = float(clf_final.oob_score_)
    results["test_metrics"] = score_binary(y_test, y_pred, y_proba)
    results["y_pred"] = y_pred
    results["y_proba"] = y_proba
    results["roc"] = roc_points(y_test, y_proba)
    results["confusion_matrix"] = cm.tolist()
    results["confusion_cells"] = cells
    results["feature_importances"] = feature_importances(clf_final, feature_names)
    results["runtime"] = {"fit_sec": fit_time, "predict_sec": predict_time}

    save_results(results, y_train, output_dir)
    _plot_and_print(results, output_dir, show)
    return results


def _plot_and_print(results, output_dir, show=True):
    """OOB error curve + feature importances side by side, then confusion matrix."""
    fig, axes = plt.subplots(1, 2, figsize=(13, 5))

    ax = axes[0]
    oob = results["oob_curve"]
    ax.plot(oob["n_estimators"], oob["oob_error"], "o-", label="OOB error")
    ax.axvline(oob["best_n_estimators_from_curve"], color="gray", ls="--", label="best")
    ax.set_xlabel("n_estimators")
    ax.set_ylabel("OOB error rate")
    ax.set_title("RF OOB error vs trees")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    imp = results["feature_importances"]
    sns.barplot(x=imp.values, y=imp.index, ax=ax, color="steelblue", edgecolor="black")
    ax.set_xlabel("Mean decrease in impurity")
    ax.set_ylabel("")
    ax.set_title(f"RF top {len(imp)} feature importances")

    plt.tight_layout()
    fig.savefig(os.path.join(output_dir, "rf_oob_importance.png"), dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)

    print("--- OOB error curve ---")
    print(f"  best n_estimators={oob['best_n_estimators_from_curve']}, OOB error={oob['best_oob_error_from_curve']:.4f}")
    print("--- Grid-search best (joint tuning) ---")
    print(f"  CV AUC={results['grid_search_best_cv_auc']:.4f}, params={results['grid_search_best_params']}")
    print()
    print("Best params (used for final model):", results["best_params"])
    print("Test metrics:", format_metrics(results["test_metrics"]))
    print(f"OOB score (final forest): {results['oob_score']:.4f}")
    print("Runtime - fit:", round(results["runtime"]["fit_sec"], 4), "s | predict:", round(results["runtime"]["predict_sec"], 4), "s")
    print("\nTop feature importances:")
    print(results["feature_importances"].round(4).to_string())
    print("\nConfusion matrix (0=<=50K, 1=>50K):")
    for row in results["confusion_matrix"]:
        print(row)
    plot_confusion_matrix(
        results["confusion_matrix"],
        "RF Confusion Matrix (threshold 0.5)",
        "rf_confusion_matrix.png",
        output_dir=output_dir,
        show=show,
    )
    print("\nResults saved to:", os.path.join(output_dir, RF_RESULTS_FILE))


def save_results(results, y_train, output_dir=None):
    """Write RF results to RF_results.txt."""
    output_dir = output_dir or OUTPUT_DIR
    m = results["test_metrics"]
    c = results["confusion_cells"]
    rt = results["runtime"]
    bp = results["best_params"]
    oob = results["oob_curve"]

    n_pos = int(np.sum(np.asarray(y_train) == 1))
    n_neg = int(np.sum(np.asarray(y_train) == 0))

    lines = [
        "=" * 60,
        "RANDOM FOREST — RESULTS (Census Income)",
        "=" * 60,
        "",
        f"Class distribution (train): {n_neg} <=50K, {n_pos} >50K.",
        f"Tuning: {results['cv_folds']}-fold stratified CV on training only ({TUNING_METRIC}).",
        "",
        "--- Best hyperparameters (CV on training) ---",
        f"n_estimators: {bp['n_estimators']}",
        f"max_features: {bp['max_features']}",
        f"min_samples_leaf: {bp['min_samples_leaf']}",
        f"Grid-search CV AUC: {results['grid_search_best_cv_auc']:.4f}",
        f"OOB score (final forest): {results['oob_score']:.4f}",
        "",
        "--- OOB error vs n_estimators ---",
    ]
    lines += [f"  {n:5d} trees: {err:.4f}" for n, err in zip(oob["n_estimators"], oob["oob_error"])]
    lines += [
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
        f"--- Top {len(results['feature_importances'])} feature importances (MDI) ---",
    ]
    lines += [f"  {name:40s} {val:.4f}" for name, val in results["feature_importances"].items()]
    lines += [
        "",
        "--- Runtime ---",
        f"Fit (sec):     {rt['fit_sec']:.4f}",
        f"Predict (sec): {rt['predict_sec']:.4f}",
        f"Hardware: {get_hardware_note()}",
        "",
        "=" * 60,
    ]
    path = os.path.join(output_dir, RF_RESULTS_FILE)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    return path

"""
Baseline models for Census Income (binary classification).
Untuned references: DummyClassifier (stratified), default DecisionTree, default RandomForest.
Writes hyperparameters and metrics to baseline_results.txt.
"""

import os

from sklearn.dummy import DummyClassifier
from sklearn.tree import DecisionTreeClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import cross_validate, StratifiedKFold

from config import RANDOM_SEED, OUTPUT_DIR, CV_FOLDS, N_JOBS
from evaluation import score_binary
from utils import set_seed

SCORING = {"accuracy": "accuracy", "f1": "f1", "roc_auc": "roc_auc"}


def baseline_models():
    """(name, hyperparameter note, estimator) for each baseline."""
    return [
        ("DummyClassifier",
         "strategy='stratified', random_state=%s" % RANDOM_SEED,
         DummyClassifier(strategy="stratified", random_state=RANDOM_SEED)),
        ("DecisionTree",
         "criterion='gini', defaults (unpruned), random_state=%s" % RANDOM_SEED,
         DecisionTreeClassifier(random_state=RANDOM_SEED)),
        ("RandomForest",
         "n_estimators=100, defaults, random_state=%s" % RANDOM_SEED,
         RandomForestClassifier(n_estimators=100, random_state=RANDOM_SEED, n_jobs=N_JOBS)),
    ]


def run_baselines(X_train=None, y_train=None, X_test=None, y_test=None, cv=CV_FOLDS, output_dir=None):
    """
    Stratified K-fold CV on train plus held-out test scores for each baseline.
    Loads the default dataset when no arrays are passed.
    Returns {name: {"cv": {...}, "test_metrics": {...}}}.
    """
    set_seed()
    if X_train is None:
        from preprocessing import get_dataset
        X_train, y_train, X_test, y_test, _ = get_dataset()
    output_dir = output_dir or OUTPUT_DIR
    output_path = os.path.join(output_dir, "baseline_results.txt")

    results = {}
    lines = []
    cv_splitter = StratifiedKFold(n_splits=cv, shuffle=True, random_state=RANDOM_SEED)
    lines.append("=" * 60)
    lines.append("BASELINE MODELS — Census Income (binary classification)")
    lines.append("CV = %d-fold stratified on train; Test = held-out test set." % cv)
    lines.append("=" * 60)

    for name, hyper, m in baseline_models():
        res = cross_validate(m, X_train, y_train, cv=cv_splitter, scoring=SCORING, n_jobs=1)
        m.fit(X_train, y_train)
        test = score_binary(y_test, m.predict(X_test), m.predict_proba(X_test)[:, 1])
        cv_means = {k: float(res["test_" + k].mean()) for k in SCORING}
        results[name] = {"cv": cv_means, "test_metrics": test}

        lines.append("\n--- %s ---" % name)
        lines.append("Hyperparameters: " + hyper)
        lines.append("CV (train): Accuracy=%.4f, F1=%.4f, ROC-AUC=%.4f" % (cv_means["accuracy"], cv_means["f1"], cv_means["roc_auc"]))
        lines.append("Test:       Accuracy=%.4f, F1=%.4f, ROC-AUC=%.4f" % (test["accuracy"], test["f1"], test["roc_auc"]))
        print(lines[-4] + "\n" + lines[-3] + "\n" + lines[-2] + "\n" + lines[-1])

    lines.append("\n" + "=" * 60)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
    print("\nResults written to:", output_path)
    return results


if __name__ == "__main__":
    run_baselines()

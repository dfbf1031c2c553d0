"""
Census Income: end-to-end analysis.
load -> clean -> split -> train(CART) -> train(RF) -> predict -> evaluate -> plot.
Run top to bottom with `python main.py`; console output is also written to analysis_log.txt.
"""

import os

from config import (
    RANDOM_SEED,
    OUTPUT_DIR,
    CV_FOLDS,
    N_JOBS,
    DATA_PATH,
    NAMES_PATH,
    TEST_DATA_PATH,
    TARGET_COLUMN,
)
from data_loading import parse_names_file, load_census, load_census_test, clean_census, get_target_and_features
from preprocessing import stratified_split, prepare_X_y, get_feature_names, class_proportions
from evaluation import score_binary, format_metrics, plot_roc_comparison, compare_models
from models_dt import run_dt
from models_rf import run_rf
from baseline import run_baselines
from eda import run_eda
from utils import set_seed, TeeOutput


def _banner(title):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def evaluate_external(models, X_ext, y_ext):
    """Score already-fitted models on an extra labelled set (official adult.test)."""
    scores = {}
    for name, clf in models.items():
        scores[name] = score_binary(y_ext, clf.predict(X_ext), clf.predict_proba(X_ext)[:, 1])
        print(f"  {name}: {format_metrics(scores[name])}")
    return scores


def run_analysis(data_path=None, names_path=None, test_data_path=None, output_dir=None,
                 cv=CV_FOLDS, dt_param_grid=None, rf_param_grid=None, dt_ccp_alphas=None,
                 rf_oob_tree_counts=None, with_eda=True, with_baselines=True,
                 n_jobs=N_JOBS, show=True):
    """
    Run every stage in order and return a dict of stage results.
    Grid/sweep arguments default to the module-level grids in models_dt / models_rf.
    """
    output_dir = output_dir or OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)
    log_path = os.path.join(output_dir, "analysis_log.txt")
    with TeeOutput(log_path):
        results = _run(
            data_path or DATA_PATH, names_path or NAMES_PATH, test_data_path or TEST_DATA_PATH,
            output_dir, cv, dt_param_grid, rf_param_grid, dt_ccp_alphas, rf_oob_tree_counts,
            with_eda, with_baselines, n_jobs, show,
        )
    print("\nAnalysis log saved to:", log_path)
    return results


def _run(data_path, names_path, test_data_path, output_dir, cv, dt_param_grid, rf_param_grid,
         dt_ccp_alphas, rf_oob_tree_counts, with_eda, with_baselines, n_jobs, show):
    results = {"seed": set_seed(RANDOM_SEED)}

    _banner("1. LOAD")
    schema = parse_names_file(names_path)
    print(f"Schema: {len(schema['continuous'])} continuous, {len(schema['categorical'])} categorical attributes; classes={schema['classes']}")
    raw = load_census(data_path, schema=schema)
    results["schema"] = schema

    if with_eda:
        _banner("EDA")
        results["eda"] = run_eda(raw, output_dir=output_dir, show=show)

    _banner("2. CLEAN")
    df = clean_census(raw)
    results["n_rows"] = {"raw": len(raw), "clean": len(df)}

    _banner("3. SPLIT (stratified)")
    X, y = get_target_and_features(df)
    X_train_raw, X_test_raw, y_train_raw, y_test_raw = stratified_split(X, y)
    train_df = X_train_raw.assign(**{TARGET_COLUMN: y_train_raw})
    test_df = X_test_raw.assign(**{TARGET_COLUMN: y_test_raw})
    X_train, y_train, (ohe, columns) = prepare_X_y(train_df, fit=True)
    X_test, y_test, _ = prepare_X_y(test_df, ohe=ohe, columns=columns, fit=False)
    feature_names = get_feature_names(columns[0], ohe)
    print(f"Train: {X_train.shape}, Test: {X_test.shape}, features: {len(feature_names)}")
    print("Share of >50K - train: %.4f | test: %.4f" % (class_proportions(y_train).get(1, 0.0), class_proportions(y_test).get(1, 0.0)))

    if with_baselines:
        _banner("BASELINES")
        results["baselines"] = run_baselines(X_train, y_train, X_test, y_test, cv=cv, output_dir=output_dir)

    _banner("4. TRAIN CART (decision tree)")
    dt = run_dt(X_train, y_train, X_test, y_test, cv=cv, param_grid=dt_param_grid, ccp_alphas_mc=dt_ccp_alphas,
                feature_names=feature_names, output_dir=output_dir, n_jobs=n_jobs, show=show)

    _banner("5. TRAIN RANDOM FOREST")
    rf = run_rf(X_train, y_train, X_test, y_test, cv=cv, param_grid=rf_param_grid, oob_tree_counts=rf_oob_tree_counts,
                feature_names=feature_names, output_dir=output_dir, n_jobs=n_jobs, show=show)
    results["models"] = {"Decision Tree": dt, "Random Forest": rf}

    _banner("6. EVALUATE")
    results["comparison"] = compare_models(results["models"])
    roc_path, aucs = plot_roc_comparison(
        {name: res["y_proba"] for name, res in results["models"].items()}, y_test,
        output_dir=output_dir, show=show,
    )
    results["roc_plot"] = roc_path
    results["auc"] = aucs

    if os.path.exists(test_data_path):
        _banner("7. OFFICIAL TEST FILE (adult.test)")
        ext = clean_census(load_census_test(test_data_path, schema=schema))
        X_ext, y_ext, _ = prepare_X_y(ext, ohe=ohe, columns=columns, fit=False)
        results["external"] = evaluate_external(
            {name: res["best_model"] for name, res in results["models"].items()}, X_ext, y_ext
        )

    return results


if __name__ == "__main__":
    run_analysis()

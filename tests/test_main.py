import os

import pytest

from main import run_analysis
from conftest import N_TRAIN_ROWS, expected_incomplete_rows

SMALL = dict(
    cv=3,
    dt_param_grid={"ccp_alpha": [0.0, 0.005], "max_depth": [4, None]},
    rf_param_grid={"n_estimators": [20], "max_features": ["sqrt"]},
    dt_ccp_alphas=[0.0, 0.005],
    rf_oob_tree_counts=[10, 20],
    n_jobs=1,
    show=False,
)


def test_run_analysis_end_to_end(census_dir, output_dir):
    res = run_analysis(
        data_path=census_dir["data"], names_path=census_dir["names"],
        test_data_path=census_dir["test"], output_dir=output_dir, **SMALL,
    )
    assert res["n_rows"] == {
        "raw": N_TRAIN_ROWS,
        "clean": N_TRAIN_ROWS - expected_incomplete_rows(N_TRAIN_ROWS),
    }
    assert set(res["models"]) == {"Decision Tree", "Random Forest"}
    assert set(res["auc"]) == {"Decision Tree", "Random Forest"}
    assert res["comparison"].shape[0] == 2
    assert set(res["external"]) == {"Decision Tree", "Random Forest"}
    assert 0.0 <= res["external"]["Random Forest"]["roc_auc"] <= 1.0
    assert res["eda"]["incomplete_rows"] == expected_incomplete_rows(N_TRAIN_ROWS)

    for name in ("roc_comparison.png", "analysis_log.txt", "EDA_RESULTS.txt",
                 "baseline_results.txt", "DT_results.txt", "RF_results.txt"):
        assert os.path.exists(os.path.join(output_dir, name)), name
    log = open(os.path.join(output_dir, "analysis_log.txt"), encoding="utf-8").read()
    assert "TRAIN CART" in log
    assert "TRAIN RANDOM FOREST" in log
    assert "Class distribution" in log


def test_run_analysis_without_official_test_file(census_dir, output_dir):
    res = run_analysis(
        data_path=census_dir["data"], names_path=census_dir["names"],
        test_data_path=os.path.join(output_dir, "missing.test"), output_dir=output_dir,
        with_eda=False, with_baselines=False, **SMALL,
    )
    assert "external" not in res
    assert "eda" not in res
    assert "baselines" not in res
    assert res["roc_plot"].endswith("roc_comparison.png")


def test_run_analysis_missing_names_file(census_dir, output_dir):
    with pytest.raises(FileNotFoundError):
        run_analysis(
            data_path=census_dir["data"], names_path=os.path.join(output_dir, "none.names"),
            output_dir=output_dir, **SMALL,
        )

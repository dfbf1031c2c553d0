import numpy as np
import pandas as pd
import pytest

from config import TARGET_COLUMN
from data_loading import load_census, clean_census, get_target_and_features
from preprocessing import (
    DROP_COLUMNS,
    encode_target,
    stratified_split,
    prepare_X_y,
    get_feature_names,
    class_proportions,
    get_dataset,
)


@pytest.fixture()
def clean_df(census_dir):
    return clean_census(load_census(census_dir["data"], names_path=census_dir["names"]))


def test_encode_target():
    y = pd.Series([">50K", "<=50K", " >50K.", "<=50K."])
    encoded = encode_target(y)
    assert encoded.tolist() == [1, 0, 1, 0]
    assert encoded.dtype == np.int32


def test_stratified_split_preserves_class_proportions(clean_df):
    X, y = get_target_and_features(clean_df)
    X_train, X_test, y_train, y_test = stratified_split(X, y, test_size=0.2, random_state=0)
    assert len(X_train) + len(X_test) == len(clean_df)
    share_all = (y == ">50K").mean()
    assert abs((y_train == ">50K").mean() - share_all) < 0.03
    assert abs((y_test == ">50K").mean() - share_all) < 0.03


def test_stratified_split_is_reproducible(clean_df):
    X, y = get_target_and_features(clean_df)
    first = stratified_split(X, y)[1].index.tolist()
    second = stratified_split(X, y)[1].index.tolist()
    assert first == second


def test_prepare_X_y_train_and_test_share_columns(clean_df):
    train_df, test_df = clean_df.iloc[:200], clean_df.iloc[200:]
    X_train, y_train, (ohe, columns) = prepare_X_y(train_df, fit=True)
    X_test, y_test, _ = prepare_X_y(test_df, ohe=ohe, columns=columns, fit=False)
    names = get_feature_names(columns[0], ohe)

    assert X_train.shape[1] == X_test.shape[1] == len(names)
    assert X_train.dtype == np.float32
    assert not np.isnan(X_train).any()
    assert set(np.unique(y_train)) == {0, 1}
    assert "age" in names
    for dropped in DROP_COLUMNS:
        assert dropped not in columns[0] + columns[1]


def test_prepare_X_y_unseen_category_is_all_zero(clean_df):
    X_train, _, (ohe, columns) = prepare_X_y(clean_df, fit=True)
    names = get_feature_names(columns[0], ohe)
    odd = clean_df.iloc[[0]].copy()
    odd["workclass"] = "Never-worked"
    X_odd, _, _ = prepare_X_y(odd, ohe=ohe, columns=columns, fit=False)
    workclass_idx = [i for i, n in enumerate(names) if n.startswith("workclass_")]
    assert workclass_idx
    assert X_odd[0, workclass_idx].sum() == 0


def test_prepare_X_y_requires_train_artifacts(clean_df):
    with pytest.raises(ValueError):
        prepare_X_y(clean_df, fit=False)


def test_class_proportions():
    props = class_proportions(np.array([0, 0, 0, 1]))
    assert props[0] == pytest.approx(0.75)
    assert props[1] == pytest.approx(0.25)


def test_get_dataset(census_dir):
    X_train, y_train, X_test, y_test, feature_names = get_dataset(
        path=census_dir["data"], names_path=census_dir["names"]
    )
    assert len(X_train) == len(y_train)
    assert len(X_test) == len(y_test)
    assert X_train.shape[1] == len(feature_names)
    assert abs(len(X_test) / (len(X_train) + len(X_test)) - 0.2) < 0.01


def test_get_dataset_reuses_frame(clean_df):
    X_train, _, X_test, _, _ = get_dataset(df=clean_df)
    assert len(X_train) + len(X_test) == len(clean_df)
    assert TARGET_COLUMN in clean_df.columns

"""
Preprocessing for Census Income dataset.
Target encoding, stratified train/test split, one-hot features for tree models.
Trees are scale-invariant, so numeric columns are passed through unscaled.
"""

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import OneHotEncoder

from config import TARGET_COLUMN, POSITIVE_LABEL, TEST_SIZE, RANDOM_SEED

# fnlwgt is a survey sampling weight; education duplicates education-num
DROP_COLUMNS = ["education", "fnlwgt"]


def encode_target(y):
    """Encode target: <=50K -> 0, >50K -> 1. Returns int32."""
    return (y.astype(str).str.strip().str.rstrip(".") == POSITIVE_LABEL).astype(np.int32)


def split_columns(X_df):
    """Return (numeric, categorical) feature column names."""
    numeric = X_df.select_dtypes(include=[np.number]).columns.tolist()
    categorical = [c for c in X_df.columns if c not in numeric]
    return numeric, categorical


def stratified_split(X, y, test_size=None, random_state=None):
    """Train/test partition preserving class proportions. Returns X_train, X_test, y_train, y_test."""
    test_size = test_size if test_size is not None else TEST_SIZE
    random_state = random_state if random_state is not None else RANDOM_SEED
    return train_test_split(
        X, y, test_size=test_size, random_state=random_state, stratify=y
    )


def get_feature_names(numeric_cols, ohe):
    """Feature names in the column order produced by prepare_X_y."""
    return list(numeric_cols) + ohe.get_feature_names_out().tolist()


def prepare_X_y(df, ohe=None, columns=None, fit=True):
    """
    Prepare feature matrix X and target y from DataFrame.
    - Drops DROP_COLUMNS, encodes target to 0/1.
    - If fit=True: fits OneHotEncoder on the categorical columns (train).
    - If fit=False: uses provided ohe and (numeric, categorical) columns (test).
    Returns X (float32), y (int32), and (ohe, columns) for reuse.
    """
    df = df.drop(columns=DROP_COLUMNS, errors="ignore")
    y = encode_target(df[TARGET_COLUMN])
    X_df = df.drop(columns=[TARGET_COLUMN])

    if fit:
        columns = split_columns(X_df)
        ohe = OneHotEncoder(sparse_output=False, handle_unknown="ignore")
        ohe.fit(X_df[columns[1]].astype(str))
    else:
        if ohe is None or columns is None:
            raise ValueError("For test set pass ohe and columns from train.")

    numeric_cols, categorical_cols = columns
    X_num = X_df[numeric_cols].to_numpy(dtype=np.float32)
    X_ohe = ohe.transform(X_df[categorical_cols].astype(str))
    X = np.hstack([X_num, X_ohe]).astype(np.float32)

    return X, y, (ohe, columns)


def get_preprocessed_train_test(X_train_raw, y_train_raw, X_test_raw, y_test_raw):
    """
    Apply preprocessing to train and test. Fit on train only; transform both.
    Returns (X_train, y_train, X_test, y_test, feature_names).
    """
    train_df = X_train_raw.copy()
    train_df[TARGET_COLUMN] = y_train_raw
    test_df = X_test_raw.copy()
    test_df[TARGET_COLUMN] = y_test_raw

    X_train, y_train, (ohe, columns) = prepare_X_y(train_df, fit=True)
    X_test, y_test, _ = prepare_X_y(test_df, ohe=ohe, columns=columns, fit=False)
    return X_train, y_train, X_test, y_test, get_feature_names(columns[0], ohe)


def class_proportions(y):
    """Share of each encoded class, as a Series indexed by 0/1."""
    return pd.Series(np.asarray(y)).value_counts(normalize=True).sort_index()


def get_dataset(path=None, names_path=None, test_size=None, random_state=None, df=None):
    """
    Single entry point: load + clean data, stratified train/test split, preprocess.
    Use this everywhere (main, baselines, model scripts) for consistent data.
    Pass df to reuse an already cleaned frame.

    Returns:
        X_train, y_train, X_test, y_test, feature_names (ready for fit/predict).
    """
    from data_loading import load_census, clean_census, get_target_and_features

    if df is None:
        df = clean_census(load_census(path=path, names_path=names_path))
    X, y = get_target_and_features(df)
    X_train, X_test, y_train, y_test = stratified_split(
        X, y, test_size=test_size, random_state=random_state
    )
    return get_preprocessed_train_test(X_train, y_train, X_test, y_test)

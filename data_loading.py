"""
Load Census Income (Adult) dataset.
Schema from adult.names, rows from adult.data / adult.test, missing-row filtering.
"""

import os
import re

import pandas as pd

from config import (
    DATA_PATH,
    NAMES_PATH,
    TEST_DATA_PATH,
    TARGET_COLUMN,
    MISSING_MARKER,
)

# "age: continuous." / "workclass: Private, Self-emp-not-inc, ... ."
_ATTRIBUTE_LINE = re.compile(r"^([A-Za-z][\w-]*)\s*:\s*(.*?)\.?\s*$")


def parse_names_file(path=None):
    """
    Parse the companion adult.names file.

    Lines starting with '|' are comments. The first non-comment line without a
    colon lists the class labels; every "name: values." line is an attribute.

    Returns:
        dict with keys columns (attributes + TARGET_COLUMN), continuous,
        categorical, classes.
    """
    path = path or NAMES_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Names file not found: {path}")

    continuous, categorical, attributes, classes = [], [], [], []
    with open(path, encoding="utf-8") as f:
        for raw in f:
            line = raw.split("|", 1)[0].strip()
            if not line:
                continue
            match = _ATTRIBUTE_LINE.match(line)
            if match:
                name, values = match.group(1), match.group(2).strip()
                attributes.append(name)
                if values == "continuous":
                    continuous.append(name)
                else:
                    categorical.append(name)
            elif not classes and "," in line:
                classes = [c.strip().rstrip(".") for c in line.split(",") if c.strip()]

    if not attributes:
        raise ValueError(f"No attribute definitions found in names file: {path}")
    if not classes:
        raise ValueError(f"No class line (e.g. '>50K, <=50K.') found in names file: {path}")

    return {
        "columns": attributes + [TARGET_COLUMN],
        "continuous": continuous,
        "categorical": categorical,
        "classes": classes,
    }


def normalize_labels(y):
    """Strip whitespace and the trailing '.' used by adult.test ('>50K.' -> '>50K')."""
    return y.astype("string").str.strip().str.rstrip(".").astype(object)


def load_census(path=None, names_path=None, schema=None, skiprows=0):
    """
    Load a comma-separated census file using the names-file schema.

    Args:
        path: Data file (defaults to config.DATA_PATH)
        names_path: Names file (defaults to config.NAMES_PATH); ignored if schema given
        schema: Pre-parsed result of parse_names_file
        skiprows: Leading lines to skip (1 for adult.test)

    Returns:
        DataFrame with '?' read as NaN and normalized target labels.
    """
    path = path or DATA_PATH
    schema = schema or parse_names_file(names_path)
    columns = schema["columns"]

    df = pd.read_csv(
        path,
        header=None,
        sep=",",
        skipinitialspace=True,
        na_values=MISSING_MARKER,
        skiprows=skiprows,
    )
    if df.shape[1] != len(columns):
        raise ValueError(
            f"{path}: expected {len(columns)} columns from names file, found {df.shape[1]}."
        )
    df.columns = columns

    for col in schema["continuous"]:
        df[col] = pd.to_numeric(df[col])

    df[TARGET_COLUMN] = normalize_labels(df[TARGET_COLUMN])
    unknown = set(df[TARGET_COLUMN].dropna().unique()) - set(schema["classes"])
    if unknown:
        raise ValueError(f"{path}: labels not declared in names file: {sorted(unknown)}")

    print(f"Loaded {os.path.basename(path)}: {df.shape[0]} rows, {df.shape[1]} columns.")
    return df


def load_census_test(path=None, names_path=None, schema=None):
    """Load the official adult.test file (one header line, labels end with '.')."""
    return load_census(path or TEST_DATA_PATH, names_path=names_path, schema=schema, skiprows=1)


def clean_census(df, remove_duplicates=False):
    """
    Drop rows with any missing value; optionally drop exact duplicate rows.
    Returns a new DataFrame with a fresh index.
    """
    initial_rows = len(df)
    df = df.dropna()
    n_missing = initial_rows - len(df)
    print(f"Removed {n_missing} row(s) with missing values. Dataset: {initial_rows} -> {len(df)} rows.")

    if remove_duplicates:
        before = len(df)
        df = df.drop_duplicates(keep='first')
        n_removed = before - len(df)
        if n_removed > 0:
            print(f"Removed {n_removed} duplicate row(s). Dataset: {before} -> {len(df)} rows.")

    return df.reset_index(drop=True)


def get_target_and_features(df):
    """Split into features and target. Target: income (<=50K vs >50K)."""
    y = df[TARGET_COLUMN].copy()
    X = df.drop(columns=[TARGET_COLUMN])
    return X, y


# For reference: columns in adult.data
# age, workclass, fnlwgt, education, education-num, marital-status, occupation,
# relationship, race, sex, capital-gain, capital-loss, hours-per-week,
# native-country, income

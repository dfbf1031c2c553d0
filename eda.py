"""
Exploratory Data Analysis for Census Income.
Class distribution, missing values, summaries, and EDA plots on the raw (uncleaned) frame.
"""

import os

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from config import TARGET_COLUMN, POSITIVE_LABEL, OUTPUT_DIR
from utils import TeeOutput


def _get_numeric_and_categorical(df):
    """Return lists of numeric and categorical column names (excluding target)."""
    numeric = [c for c in df.select_dtypes(include=[np.number]).columns if c != TARGET_COLUMN]
    categorical = [c for c in df.columns if c not in numeric and c != TARGET_COLUMN]
    return numeric, categorical


def class_distribution(df):
    """Compute and print class distribution and imbalance ratio."""
    counts = df[TARGET_COLUMN].value_counts()
    pct = df[TARGET_COLUMN].value_counts(normalize=True) * 100
    minor = counts.min()
    major = counts.max()
    ratio = major / minor if minor > 0 else float("inf")
    print("Class distribution (target: income <=50K vs >50K)")
    print(counts.to_string())
    print(f"\nPercentages:\n{pct.round(2).to_string()}")
    print(f"\nImbalance ratio (majority/minority): {ratio:.2f} (expect ~3:1)")
    return {"counts": counts, "ratio": ratio, "pct": pct}


def missing_and_dtypes(df):
    """Report missing values per column (read from '?') and rows that cleaning will drop."""
    missing = df.isna().sum()
    missing = missing[missing > 0]
    n_incomplete = int(df.isna().any(axis=1).sum())
    print("Missing values per column:")
    if missing.empty:
        print("  None.")
    else:
        print(missing.to_string())
    print(f"\nRows with at least one missing value: {n_incomplete} of {len(df)}")
    print("\nDtypes:")
    print(df.dtypes.to_string())
    return {"per_column": missing, "incomplete_rows": n_incomplete}


def numeric_summary(df, numeric_cols=None):
    """Describe numeric features."""
    if numeric_cols is None:
        numeric_cols, _ = _get_numeric_and_categorical(df)
    if not numeric_cols:
        print("No numeric columns.")
        return None
    desc = df[numeric_cols].describe()
    print("Numeric features — describe:")
    print(desc.to_string())
    return desc


def categorical_summary(df, categorical_cols=None, top=10):
    """Value counts for categoricals (top values per column; all if top is None)."""
    if categorical_cols is None:
        _, categorical_cols = _get_numeric_and_categorical(df)
    out = {}
    for col in categorical_cols:
        vc = df[col].value_counts()
        shown = vc if top is None else vc.head(top)
        print(f"\n{col} ({len(vc)} levels):\n{shown.to_string()}")
        out[col] = vc
    return out


def categorical_percentage_by_class(df, categorical_cols=None):
    """Print percentage of >50K for each category, sorted from highest to lowest."""
    if categorical_cols is None:
        _, categorical_cols = _get_numeric_and_categorical(df)
    results = {}
    for col in categorical_cols:
        ct = pd.crosstab(df[col], df[TARGET_COLUMN])
        total_counts = ct.sum(axis=1)
        high = ct[POSITIVE_LABEL] if POSITIVE_LABEL in ct.columns else pd.Series(0, index=ct.index)
        percentages = (high / total_counts * 100).fillna(0).sort_values(ascending=False)

        print(f"\n{col} - Percentage of >50K (sorted from highest to lowest):")
        print("-" * 60)
        for idx, pct in percentages.items():
            print(f"  {str(idx):30s}: {pct:6.2f}% (n={int(total_counts[idx])}, >50K={int(high[idx])})")
        results[col] = percentages
    return results


def plot_class_balance(df, output_dir=None, show=True):
    """Bar plot of target class counts."""
    output_dir = output_dir or OUTPUT_DIR
    counts = df[TARGET_COLUMN].value_counts()
    fig, ax = plt.subplots(figsize=(6, 4))
    counts.plot(kind="bar", ax=ax, color=["#2ecc71", "#e74c3c"], edgecolor="black")
    ax.set_title("Target distribution (income)")
    ax.set_xlabel(TARGET_COLUMN)
    ax.set_ylabel("Count")
    ax.set_xticklabels(ax.get_xticklabels(), rotation=0)
    plt.tight_layout()
    fig.savefig(os.path.join(output_dir, "eda_class_balance.png"), dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)


def plot_numeric_by_class(df, numeric_cols=None, max_cols=6, output_dir=None, show=True):
    """Distributions of numeric features by target class."""
    output_dir = output_dir or OUTPUT_DIR
    if numeric_cols is None:
        numeric_cols, _ = _get_numeric_and_categorical(df)
    if not numeric_cols:
        return
    cols = numeric_cols[:max_cols]
    ncols = 2
    nrows = (len(cols) + ncols - 1) // ncols
    fig, axes = plt.subplots(nrows, ncols, figsize=(5 * ncols, 4 * nrows))
    axes = np.atleast_2d(axes)
    for idx, col in enumerate(cols):
        ax = axes[idx // ncols, idx % ncols]
        sns.histplot(data=df, x=col, hue=TARGET_COLUMN, bins=30, ax=ax, element="step")
        ax.set_title(col)
    for idx in range(len(cols), axes.size):
        axes[idx // ncols, idx % ncols].set_visible(False)
    plt.tight_layout()
    fig.savefig(os.path.join(output_dir, "eda_numeric_by_class.png"), dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)


def plot_numeric_correlation_matrix(df, numeric_cols=None, output_dir=None, show=True):
    """Heatmap of correlations between numeric features."""
    output_dir = output_dir or OUTPUT_DIR
    if numeric_cols is None:
        numeric_cols, _ = _get_numeric_and_categorical(df)
    if not numeric_cols:
        return None
    corr = df[numeric_cols].corr()
    print("\nCorrelation matrix (numeric features):")
    print("-" * 60)
    print(corr.round(3).to_string())

    fig, ax = plt.subplots(figsize=(8, 6))
    sns.heatmap(corr, annot=True, fmt=".2f", cmap="RdBu_r", center=0, ax=ax, square=True)
    ax.set_title("Correlation matrix (numeric features)")
    plt.tight_layout()
    fig.savefig(os.path.join(output_dir, "eda_correlation_matrix.png"), dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)
    return corr


def run_eda(df, output_dir=None, save_results_to_file=True, show=True):
    """
    Run EDA: class distribution, missing/dtypes, numeric and categorical
    summaries, and plots. Printed output also goes to EDA_RESULTS.txt.
    """
    output_dir = output_dir or OUTPUT_DIR
    results_file = os.path.join(output_dir, "EDA_RESULTS.txt")

    if save_results_to_file:
        with TeeOutput(results_file):
            summary = _run_eda_internal(df, output_dir, show)
        print(f"\nEDA results saved to: {results_file}")
    else:
        summary = _run_eda_internal(df, output_dir, show)
    return summary


def _run_eda_internal(df, output_dir, show):
    print("=" * 60)
    print("EXPLORATORY DATA ANALYSIS — Census Income")
    print("=" * 60)
    print(f"\nShape: {df.shape[0]} rows, {df.shape[1]} columns")

    numeric_cols, categorical_cols = _get_numeric_and_categorical(df)
    print(f"\nNumeric columns ({len(numeric_cols)}): {numeric_cols}")
    print(f"Categorical columns ({len(categorical_cols)}): {categorical_cols}")

    print("\n" + "-" * 40)
    classes = class_distribution(df)
    print("\n" + "-" * 40)
    missing = missing_and_dtypes(df)
    print("\n" + "-" * 40)
    numeric_summary(df, numeric_cols)
    print("\n" + "-" * 40)
    categorical_summary(df, categorical_cols)
    print("\n" + "-" * 40)
    categorical_percentage_by_class(df, categorical_cols)

    print("\n" + "-" * 40)
    print(f"Plots (saving to {output_dir}):")
    plot_class_balance(df, output_dir=output_dir, show=show)
    plot_numeric_by_class(df, numeric_cols=numeric_cols, output_dir=output_dir, show=show)
    plot_numeric_correlation_matrix(df, numeric_cols=numeric_cols, output_dir=output_dir, show=show)

    print("\nEDA complete.")
    return {
        "numeric_cols": numeric_cols,
        "categorical_cols": categorical_cols,
        "imbalance_ratio": classes["ratio"],
        "incomplete_rows": missing["incomplete_rows"],
    }

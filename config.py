"""
Census Income (Adult): configuration.
Reproducibility: random seeds, paths, labels, split and tuning constants.
"""

import os

# ----- Reproducibility -----
RANDOM_SEED = 42

# ----- Paths -----
PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.environ.get("CENSUS_DATA_DIR", os.path.join(PROJECT_DIR, "data"))
DATA_PATH = os.path.join(DATA_DIR, "adult.data")
NAMES_PATH = os.path.join(DATA_DIR, "adult.names")
TEST_DATA_PATH = os.path.join(DATA_DIR, "adult.test")  # optional official test file

# ----- Task -----
TARGET_COLUMN = "income"
NEGATIVE_LABEL = "<=50K"
POSITIVE_LABEL = ">50K"
CLASS_LABELS = [NEGATIVE_LABEL, POSITIVE_LABEL]  # index == encoded value
MISSING_MARKER = "?"

# ----- Evaluation -----
TUNING_METRIC = "roc_auc"  # GridSearchCV scoring for both models

# ----- Train/test split and CV -----
TEST_SIZE = 0.2  # Single held-out test split; tuning via CV on training only
CV_FOLDS = 5
N_JOBS = -1

# ----- Where to save figures/tables -----
OUTPUT_DIR = os.environ.get("CENSUS_OUTPUT_DIR", os.path.join(PROJECT_DIR, "outputs"))
os.makedirs(OUTPUT_DIR, exist_ok=True)

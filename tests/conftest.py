import os
import tempfile

# Headless plotting and a throwaway output dir before config is imported
os.environ.setdefault("MPLBACKEND", "Agg")
os.environ.setdefault("CENSUS_OUTPUT_DIR", tempfile.mkdtemp(prefix="census_outputs_"))

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


NAMES_TEXT = """\
| This data was extracted from the census bureau database found at
| http://www.census.gov/ftp/pub/DES/www/welcome.html
|
| Prediction task is to determine whether a person makes over 50K
| a year.
|

>50K, <=50K.

age: continuous.
workclass: Private, Self-emp-not-inc, Federal-gov.
fnlwgt: continuous.
education: Bachelors, HS-grad, Masters.
education-num: continuous.
marital-status: Married-civ-spouse, Never-married, Divorced.
occupation: Tech-support, Sales, Exec-managerial, Craft-repair.
relationship: Husband, Not-in-family, Own-child.
race: White, Black, Asian-Pac-Islander.
sex: Female, Male.
capital-gain: continuous.
capital-loss: continuous.
hours-per-week: continuous.
native-country: United-States, Mexico, India.
"""

N_TRAIN_ROWS = 300
N_TEST_ROWS = 120
EDUCATION_NUM = {"Bachelors": 13, "HS-grad": 9, "Masters": 14}


def missing_workclass(i):
    return i % 25 == 0


def missing_occupation(i):
    return i % 31 == 0


def make_rows(n, seed, label_suffix=""):
    """Census-shaped rows where income depends on education, hours, marriage and gains."""
    rng = np.random.default_rng(seed)
    records, scores = [], []
    for i in range(n):
        education = str(rng.choice(list(EDUCATION_NUM)))
        married = bool(rng.random() < 0.5)
        hours = int(rng.integers(20, 61))
        gain = int(rng.choice([0, 0, 0, 5000, 15000]))
        scores.append(
            (EDUCATION_NUM[education] - 9) * 0.5 + (hours - 40) / 10 + (1.5 if married else -1.0)
            + gain / 5000 + rng.normal(0, 0.7)
        )
        records.append([
            int(rng.integers(18, 70)),
            "?" if missing_workclass(i) else str(rng.choice(["Private", "Self-emp-not-inc", "Federal-gov"])),
            int(rng.integers(20000, 400000)),
            education,
            EDUCATION_NUM[education],
            "Married-civ-spouse" if married else str(rng.choice(["Never-married", "Divorced"])),
            "?" if missing_occupation(i) else str(rng.choice(["Tech-support", "Sales", "Exec-managerial", "Craft-repair"])),
            "Husband" if married else str(rng.choice(["Not-in-family", "Own-child"])),
            str(rng.choice(["White", "Black", "Asian-Pac-Islander"])),
            str(rng.choice(["Female", "Male"])),
            gain,
            int(rng.choice([0, 0, 0, 1500])),
            hours,
            str(rng.choice(["United-States", "Mexico", "India"])),
        ])
    cut = np.quantile(scores, 0.7)
    lines = []
    for rec, score in zip(records, scores):
        label = ">50K" if score > cut else "<=50K"
        lines.append(", ".join(str(v) for v in rec + [label + label_suffix]))
    return "\n".join(lines) + "\n"


def expected_incomplete_rows(n):
    return sum(1 for i in range(n) if missing_workclass(i) or missing_occupation(i))


@pytest.fixture()
def census_dir(tmp_path):
    """adult.names / adult.data / adult.test written to a temp dir."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "adult.names").write_text(NAMES_TEXT, encoding="utf-8")
    (data_dir / "adult.data").write_text(make_rows(N_TRAIN_ROWS, seed=0), encoding="utf-8")
    (data_dir / "adult.test").write_text(
        "|1x3 Cross validator\n" + make_rows(N_TEST_ROWS, seed=1, label_suffix="."), encoding="utf-8"
    )
    return {
        "dir": data_dir,
        "names": str(data_dir / "adult.names"),
        "data": str(data_dir / "adult.data"),
        "test": str(data_dir / "adult.test"),
    }


@pytest.fixture()
def output_dir(tmp_path):
    out = tmp_path / "outputs"
    out.mkdir()
    return str(out)


@pytest.fixture()
def dataset(census_dir):
    from preprocessing import get_dataset

    return get_dataset(path=census_dir["data"], names_path=census_dir["names"])

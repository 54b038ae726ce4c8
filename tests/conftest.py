"""Shared fixtures: a seeded synthetic passenger manifest."""

import matplotlib

matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from titanic_data import RAW_COLUMNS, TitanicData

MISSING_EMBARKED_ROWS = [5, 17]


def make_passengers(n=400, seed=0, missing_ages=None):
    """Build a raw passenger table with the Kaggle header.

    Survival depends on sex, class and age so the models have signal.
    Rows 5 and 17 have no port of embarkation and most cabins are missing.
    About a fifth of ages are missing, or exactly missing_ages when given.
    """
    rng = np.random.default_rng(seed)

    pclass = rng.choice([1, 2, 3], size=n, p=[0.25, 0.2, 0.55])
    sex = rng.choice(["male", "female"], size=n, p=[0.65, 0.35])
    age = rng.uniform(1, 70, size=n).round(1)
    if missing_ages is None:
        age[rng.uniform(size=n) < 0.2] = np.nan
    else:
        age[rng.choice(n, size=missing_ages, replace=False)] = np.nan
    sibsp = rng.choice([0, 1, 2, 3], size=n, p=[0.65, 0.25, 0.07, 0.03])
    parch = rng.choice([0, 1, 2], size=n, p=[0.75, 0.15, 0.1])
    fare = (rng.gamma(2.0, 10.0, size=n) + (3 - pclass) * 30).round(2)

    embarked = rng.choice(["S", "C", "Q"], size=n, p=[0.65, 0.2, 0.15]).astype(object)
    embarked[MISSING_EMBARKED_ROWS] = np.nan

    has_cabin = rng.uniform(size=n) < np.where(pclass == 1, 0.7, 0.05)
    decks = rng.choice(list("ABCDE"), size=n)
    cabin = np.array([f"{d}{rng.integers(1, 120)}" if c else np.nan
                      for d, c in zip(decks, has_cabin)], dtype=object)

    logit = (-0.8 + 2.4 * (sex == "female") - 0.9 * (pclass - 2)
             - 0.02 * (np.nan_to_num(age, nan=30.0) - 30))
    survived = (rng.uniform(size=n) < 1 / (1 + np.exp(-logit))).astype(int)

    return pd.DataFrame({
        "PassengerId": np.arange(1, n + 1),
        "Survived": survived,
        "Pclass": pclass,
        "Name": [f"Passenger{i}, Mr. Test" for i in range(n)],
        "Sex": sex,
        "Age": age,
        "SibSp": sibsp,
        "Parch": parch,
        "Ticket": [str(100000 + i) for i in range(n)],
        "Fare": fare,
        "Cabin": cabin,
        "Embarked": embarked,
    }, columns=RAW_COLUMNS)


@pytest.fixture
def passengers():
    return make_passengers()


@pytest.fixture
def train_csv(tmp_path, passengers):
    path = tmp_path / "train.csv"
    passengers.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def data(train_csv):
    return TitanicData(train_csv)


@pytest.fixture
def raw(data):
    return data.load_data()


@pytest.fixture
def transformed(data, raw):
    return data.transform(raw)


@pytest.fixture
def split(data, transformed):
    """(evaluation, training) with the default seed and size."""
    return data.split(transformed, eval_size=100, random_state=1234)


@pytest.fixture
def manifest_csv(tmp_path):
    """Full-size manifest: 891 passengers, 177 missing ages, 2 missing ports."""
    path = tmp_path / "manifest.csv"
    make_passengers(n=891, seed=1912, missing_ages=177).to_csv(path, index=False)
    return str(path)

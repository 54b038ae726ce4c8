"""Titanic survival report CLI.

Compares a logistic regression and a random forest on a seeded
evaluation sample of the Kaggle Titanic training data.
"""

import sys

from cli import create_cli
from titanic_data import TitanicData


def main(argv=None):
    return create_cli(
        data_class=TitanicData,
        default_data_path='./train.csv',
        description='Titanic Survival Report - Logistic Regression vs Random Forest',
        argv=argv
    )


if __name__ == "__main__":
    sys.exit(main())

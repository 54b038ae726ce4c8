"""Random Forest classifier implementation."""

import pandas as pd
from sklearn.ensemble import RandomForestClassifier

from base_classifier import BinaryClassifier
from errors import FitError, SchemaError


PREDICTORS = ["Pclass", "Sex", "Age", "SibSp", "Parch", "Fare", "Embarked"]

# The forest is deliberately given only the numeric predictors
DEFAULT_EXCLUDED = ["Sex", "Pclass", "Embarked"]

SURVIVAL_LABELS = {0: "No", 1: "Yes"}


def relabel_survival(table, target_column='Survived'):
    """Return a copy of table with the 0/1 target relabeled "No"/"Yes".

    Args:
        table: Transformed DataFrame
        target_column: Name of the label column

    Returns:
        New DataFrame whose target is a categorical with levels ["No", "Yes"]
    """
    if target_column not in table.columns:
        raise SchemaError(f"Target column '{target_column}' missing", stage='fit')

    table = table.copy()
    codes = table[target_column].astype(int)
    table[target_column] = pd.Categorical(codes.map(SURVIVAL_LABELS),
                                          categories=["No", "Yes"])
    return table


class RandomForestBinaryClassifier(BinaryClassifier):
    """Random Forest implementation of binary classifier."""

    name = 'Random forest'

    def __init__(self, n_estimators=10, excluded_features=None, oob_score=False,
                 random_state=None, target_column='Survived', **kwargs):
        """Initialize Random Forest classifier.

        Args:
            n_estimators: Number of trees in the forest (default: 10)
            excluded_features: Predictors left out of the forest
                               (default: Sex, Pclass, Embarked)
            oob_score: Whether to use out-of-bag samples to estimate accuracy (default: False;
                       with few trees some rows are never out of bag)
            random_state: Random seed (None for random)
            target_column: Name of the label column
            **kwargs: Additional parameters for RandomForestClassifier
        """
        excluded_features = list(excluded_features) if excluded_features is not None else list(DEFAULT_EXCLUDED)
        super().__init__(target_column=target_column, random_state=random_state,
                         n_estimators=n_estimators, oob_score=oob_score, **kwargs)
        self.excluded_features = excluded_features

    @classmethod
    def get_cli_arguments(cls):
        """Return Random Forest specific CLI arguments.

        Returns:
            List of argument definition dicts for RF parameters
        """
        return [
            {
                'name': '--n-estimators',
                'type': int,
                'default': 10,
                'help': 'Number of trees in random forest (default: 10)'
            }
        ]

    def get_feature_columns(self):
        """Return the predictors the forest is trained on."""
        return [c for c in PREDICTORS if c not in self.excluded_features]

    def _features(self, records):
        columns = self.get_feature_columns()
        missing = [c for c in columns if c not in records.columns]
        if missing:
            raise SchemaError(f"Feature columns {missing} missing", stage='fit')
        return records[columns]

    def create_model(self, n_estimators=None):
        """Create a new RandomForestClassifier instance.

        Returns:
            RandomForestClassifier with configured parameters
        """
        params = dict(self.model_params)
        if n_estimators is not None:
            params['n_estimators'] = n_estimators
        return RandomForestClassifier(
            bootstrap=True,
            random_state=self.random_state,
            **params
        )

    def fit(self, training_set, tree_count=None):
        """Fit the forest on the numeric predictors of the training set.

        Args:
            training_set: Transformed DataFrame (0/1 target is relabeled here)
            tree_count: Number of trees (default: n_estimators)

        Returns:
            Fitted RandomForestClassifier

        Raises:
            SchemaError: a feature column is missing
            FitError: empty training set or scikit-learn rejects the data
        """
        if len(training_set) == 0:
            raise FitError("Cannot fit a random forest on an empty training set")

        X = self._features(training_set)
        y = relabel_survival(training_set, self.target_column)[self.target_column]

        model = self.create_model(n_estimators=tree_count)
        try:
            model.fit(X, y.astype(str))
        except ValueError as e:
            raise FitError(f"Random forest fit failed: {e}")

        self.model = model
        return model

    def predict(self, records):
        """Return "Yes"/"No" predictions for each row."""
        self._check_fitted()
        return self.model.predict(self._features(records))

    def predict_classes(self, records):
        """Same as predict(); the forest already outputs class labels."""
        return self.predict(records)

    def true_labels(self, records):
        """Return the target relabeled "No"/"Yes"."""
        labels = relabel_survival(records, self.target_column)[self.target_column]
        return labels.astype(str).to_numpy()

    def feature_importances(self):
        """Mean decrease in impurity per feature.

        Returns:
            Series sorted descending
        """
        self._check_fitted()
        return pd.Series(self.model.feature_importances_,
                         index=self.get_feature_columns()).sort_values(ascending=False)

    def display_post_train_stats(self):
        """Display OOB accuracy and feature importances."""
        self._check_fitted()
        print(f"Trees: {self.model.n_estimators}")
        print(f"Features: {', '.join(self.get_feature_columns())}")
        if hasattr(self.model, 'oob_score_'):
            print(f"OOB accuracy: {self.model.oob_score_:.4f}")
        for feature, importance in self.feature_importances().items():
            print(f"  {feature:10s}: {importance:.4f}")

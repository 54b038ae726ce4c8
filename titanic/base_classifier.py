"""Base classes for binary classification models."""

from abc import ABC, abstractmethod
import numpy as np


def count_matches(predicted, truth):
    """Count positions where the prediction equals the true label.

    Args:
        predicted: Sequence of predicted labels
        truth: Sequence of true labels, aligned by row with predicted

    Returns:
        Integer in [0, len(truth)]
    """
    predicted = np.asarray(predicted, dtype=object)
    truth = np.asarray(truth, dtype=object)
    if predicted.shape != truth.shape:
        raise ValueError(f"Got {len(predicted)} predictions for {len(truth)} labels")
    return int((predicted == truth).sum())


def accuracy(predicted, truth):
    """Fraction of exact matches (matches / number of labels)."""
    if len(truth) == 0:
        raise ValueError("Cannot compute accuracy of an empty evaluation set")
    return count_matches(predicted, truth) / len(truth)


class BinaryClassifier(ABC):
    """Base class for binary classifiers.

    Subclasses fit a specific model family on a training table and map
    its output to class labels comparable with the evaluation set.
    """

    name = 'classifier'

    def __init__(self, target_column='Survived', random_state=None, **model_params):
        """Initialize classifier with parameters.

        Args:
            target_column: Name of the label column
            random_state: Random seed for reproducibility (None for random)
            **model_params: Additional parameters to pass to the model
        """
        self.target_column = target_column
        self.random_state = random_state
        self.model_params = model_params
        self.model = None

    @classmethod
    def get_cli_arguments(cls):
        """Return list of argparse argument definitions for this classifier.

        Each argument should be a dict with keys: 'name', 'type', 'default', 'help'
        Subclasses should override to define their specific parameters.

        Returns:
            List of argument definition dicts
        """
        return []

    @abstractmethod
    def fit(self, training_set):
        """Fit the model on a training table.

        Returns:
            The fitted model
        """
        pass

    @abstractmethod
    def predict(self, records):
        """Return the model's raw prediction for each row of records."""
        pass

    @abstractmethod
    def predict_classes(self, records):
        """Return a class label for each row, comparable with true_labels()."""
        pass

    @abstractmethod
    def true_labels(self, records):
        """Return the true labels of records in the form predict_classes() uses."""
        pass

    def _check_fitted(self):
        if self.model is None:
            raise ValueError(f"{type(self).__name__} has not been fitted")

    def evaluate(self, evaluation_set):
        """Count correct predictions on the evaluation set.

        Args:
            evaluation_set: Transformed DataFrame including the target column

        Returns:
            Dict with 'matches', 'size' and 'accuracy'
        """
        predicted = self.predict_classes(evaluation_set)
        truth = self.true_labels(evaluation_set)
        matches = count_matches(predicted, truth)
        size = len(truth)

        print(f"{self.name}: {matches}/{size} correct")
        return {
            'matches': matches,
            'size': size,
            'accuracy': matches / size if size else float('nan'),
        }

    def display_post_train_stats(self):
        """Display classifier-specific statistics after fitting.

        Subclasses can override this to display model-specific metrics
        (e.g., OOB score for Random Forest).
        """
        pass

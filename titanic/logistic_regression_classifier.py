"""Logistic Regression classifier implementation (binomial GLM)."""

import warnings
import numpy as np
import pandas as pd
import patsy
import statsmodels.api as sm
import statsmodels.formula.api as smf
from scipy import stats
from statsmodels.tools.sm_exceptions import ConvergenceWarning, PerfectSeparationError

from base_classifier import BinaryClassifier
from errors import FitError, SchemaError


FULL_FORMULA = "Survived ~ Pclass + Sex + Age + SibSp + Parch + Fare + Embarked"

# Parch and Embarked dropped after the likelihood-ratio test against FULL_FORMULA
REFINED_FORMULA = "Survived ~ Pclass + Sex + Age + SibSp + Fare"


class LogisticRegressionBinaryClassifier(BinaryClassifier):
    """Binomial GLM with logit link, fitted by statsmodels.

    Predictions are on the log-odds scale. A row is classed as a survivor
    when its log-odds exceed ``threshold`` (default 1.0). The cutoff is
    applied to log-odds, not to a probability, so the default is stricter
    than p > 0.5.
    """

    name = 'Logistic regression'

    def __init__(self, formula=FULL_FORMULA, threshold=1.0, max_iter=100,
                 target_column='Survived', **kwargs):
        """Initialize Logistic Regression classifier.

        Args:
            formula: Patsy formula for the model (default: all predictors)
            threshold: Log-odds cutoff for the positive class (default: 1.0)
            max_iter: Maximum number of IRLS iterations (default: 100)
            target_column: Name of the label column
            **kwargs: Passed to BinaryClassifier
        """
        super().__init__(target_column=target_column, formula=formula,
                         threshold=threshold, max_iter=max_iter, **kwargs)
        self.formula = formula
        self.threshold = threshold
        self.max_iter = max_iter

    @classmethod
    def get_cli_arguments(cls):
        """Return Logistic Regression specific CLI arguments.

        Returns:
            List of argument definition dicts for LR parameters
        """
        return [
            {
                'name': '--threshold',
                'type': float,
                'default': 1.0,
                'help': 'Log-odds cutoff for predicting survival (default: 1.0)'
            },
            {
                'name': '--max-iter',
                'type': int,
                'default': 100,
                'help': 'Maximum number of IRLS iterations (default: 100)'
            }
        ]

    def _model_frame(self, records):
        """Copy of records with the target replaced by its 0/1 code."""
        if self.target_column not in records.columns:
            raise SchemaError(f"Target column '{self.target_column}' missing", stage='fit')

        frame = records.copy()
        target = frame[self.target_column]
        if isinstance(target.dtype, pd.CategoricalDtype):
            frame[self.target_column] = target.cat.codes.astype(int)
        else:
            frame[self.target_column] = target.astype(int)
        return frame

    def fit(self, training_set, formula=None):
        """Fit the GLM on the training set.

        Args:
            training_set: Transformed DataFrame
            formula: Patsy formula (default: self.formula)

        Returns:
            Fitted statsmodels GLMResults

        Raises:
            SchemaError: formula names a column not in training_set
            FitError: design matrix is rank deficient or IRLS does not converge
        """
        if formula is not None:
            self.formula = formula
            self.model_params['formula'] = formula

        data = self._model_frame(training_set)

        try:
            _, design = patsy.dmatrices(self.formula, data, return_type='dataframe')
        except patsy.PatsyError as e:
            raise SchemaError(f"Cannot build design matrix for '{self.formula}': {e}", stage='fit')

        rank = np.linalg.matrix_rank(design.to_numpy())
        if rank < design.shape[1]:
            raise FitError(
                f"Design matrix for '{self.formula}' is rank deficient "
                f"(rank {rank} < {design.shape[1]} columns)"
            )

        model = smf.glm(self.formula, data=data, family=sm.families.Binomial())
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            try:
                results = model.fit(maxiter=self.max_iter)
            except (PerfectSeparationError, np.linalg.LinAlgError, ValueError) as e:
                raise FitError(f"GLM fit failed for '{self.formula}': {e}")

        if not getattr(results, 'converged', True):
            raise FitError(f"GLM for '{self.formula}' did not converge in {self.max_iter} iterations")

        self.model = results
        return results

    def predict(self, records):
        """Return the linear predictor (log-odds) for each row.

        Args:
            records: Transformed DataFrame

        Returns:
            Series of log-odds aligned with records
        """
        self._check_fitted()
        return self.model.predict(records, which="linear")

    def predict_classes(self, records):
        """Return 1 where log-odds exceed the threshold, else 0."""
        log_odds = np.asarray(self.predict(records), dtype=float)
        return (log_odds > self.threshold).astype(int)

    def true_labels(self, records):
        """Return the target as 0/1 integers."""
        return self._model_frame(records)[self.target_column].to_numpy()

    def coefficient_table(self):
        """Coefficient estimates with standard errors and p-values.

        Returns:
            DataFrame indexed by term
        """
        self._check_fitted()
        return pd.DataFrame({
            'Estimate': self.model.params,
            'Std. Error': self.model.bse,
            'z value': self.model.tvalues,
            'Pr(>|z|)': self.model.pvalues,
        })

    def display_post_train_stats(self):
        """Print coefficients, deviance and AIC of the fitted GLM."""
        self._check_fitted()
        print(f"Formula: {self.formula}")
        print(self.coefficient_table().round(4).to_string())
        print(f"\nResidual deviance: {self.model.deviance:.2f} on {int(self.model.df_resid)} degrees of freedom")
        print(f"AIC: {self.model.aic:.2f}")


def _glm_results(model):
    if isinstance(model, LogisticRegressionBinaryClassifier):
        model._check_fitted()
        return model.model
    return model


def deviance_table(model_a, model_b):
    """Analysis-of-deviance table for two nested GLMs.

    Args:
        model_a: Fitted LogisticRegressionBinaryClassifier or GLMResults
        model_b: Fitted LogisticRegressionBinaryClassifier or GLMResults

    Returns:
        DataFrame with one row per model, smaller model first
    """
    restricted, full = sorted((_glm_results(model_a), _glm_results(model_b)),
                              key=lambda r: len(r.params))
    df_diff = len(full.params) - len(restricted.params)
    if df_diff == 0:
        raise ValueError("Models have the same number of parameters; they are not nested")

    statistic = restricted.deviance - full.deviance
    p_value = float(stats.chi2.sf(statistic, df_diff))

    return pd.DataFrame({
        'Resid. Df': [restricted.df_resid, full.df_resid],
        'Resid. Dev': [restricted.deviance, full.deviance],
        'Df': [np.nan, df_diff],
        'Deviance': [np.nan, statistic],
        'Pr(>Chi)': [np.nan, p_value],
    }, index=[getattr(r.model, 'formula', f'model {i + 1}') for i, r in enumerate((restricted, full))])


def likelihood_ratio_test(model_a, model_b):
    """Likelihood-ratio test of two nested GLMs.

    The deviance difference is compared against a chi-squared distribution
    with degrees of freedom equal to the difference in estimated parameters.
    Argument order does not matter.

    Returns:
        p-value as a float
    """
    table = deviance_table(model_a, model_b)
    return float(table['Pr(>Chi)'].iloc[1])

"""Run the full analysis and render it as an HTML report."""

import html
import os
import shutil
import tempfile
import pandas as pd

from logistic_regression_classifier import (
    FULL_FORMULA, REFINED_FORMULA, LogisticRegressionBinaryClassifier,
    deviance_table, likelihood_ratio_test,
)
from errors import ReportError
from random_forest_classifier import RandomForestBinaryClassifier


def run_analysis(data, eval_size=100, random_state=1234, n_estimators=10,
                 threshold=1.0, max_iter=100):
    """Run load, profile, transform, split, fit and evaluate in order.

    Args:
        data: BinaryClassificationData instance (e.g. TitanicData)
        eval_size: Rows in the evaluation sample (default: 100)
        random_state: Seed for the split and the forest (default: 1234)
        n_estimators: Trees in the random forest (default: 10)
        threshold: Log-odds cutoff for the logistic model (default: 1.0)
        max_iter: IRLS iteration limit for the logistic model (default: 100)

    Returns:
        Dict of every intermediate table, the fitted models, the
        likelihood-ratio p-value and the comparison table
    """
    print(f"\n=== Loading {data.filepath} ===")
    raw = data.load_data()
    print(f"Loaded {len(raw)} rows")

    profile = data.inspect_data(raw)
    cabin_fares = data.cabin_fare_summary(raw)

    print(f"\n=== Transforming ===")
    transformed = data.transform(raw)
    print(f"{len(transformed)} rows after cleaning ({len(raw) - len(transformed)} dropped)")

    evaluation, training = data.split(transformed, eval_size=eval_size, random_state=random_state)
    print(f"Evaluation set: {len(evaluation)} rows, training set: {len(training)} rows "
          f"(seed {random_state})")

    print(f"\n=== Logistic Regression ===")
    full_lr = LogisticRegressionBinaryClassifier(formula=FULL_FORMULA, threshold=threshold,
                                                 max_iter=max_iter)
    full_lr.fit(training)
    full_lr.display_post_train_stats()

    refined_lr = LogisticRegressionBinaryClassifier(formula=REFINED_FORMULA, threshold=threshold,
                                                    max_iter=max_iter)
    refined_lr.fit(training)
    refined_lr.display_post_train_stats()

    lr_table = deviance_table(full_lr, refined_lr)
    p_value = likelihood_ratio_test(full_lr, refined_lr)
    print(f"\nLikelihood-ratio test (refined vs full): p = {p_value:.4f}")

    print(f"\n=== Random Forest ===")
    forest = RandomForestBinaryClassifier(n_estimators=n_estimators, random_state=random_state)
    forest.fit(training)
    forest.display_post_train_stats()

    print(f"\n=== Evaluation ===")
    lr_scores = refined_lr.evaluate(evaluation)
    rf_scores = forest.evaluate(evaluation)

    comparison = pd.DataFrame({
        'Model': [refined_lr.name, forest.name],
        'Matches': [lr_scores['matches'], rf_scores['matches']],
        'Accuracy': [lr_scores['accuracy'], rf_scores['accuracy']],
    })
    print(f"\n{comparison.to_string(index=False)}")

    return {
        'raw': raw,
        'profile': profile,
        'cabin_fares': cabin_fares,
        'transformed': transformed,
        'evaluation': evaluation,
        'training': training,
        'models': {'full_lr': full_lr, 'refined_lr': refined_lr, 'forest': forest},
        'deviance_table': lr_table,
        'p_value': p_value,
        'comparison': comparison,
        'settings': {
            'eval_size': eval_size,
            'random_state': random_state,
            'n_estimators': n_estimators,
            'threshold': threshold,
        },
    }


def save_plots(data, result, plot_dir):
    """Write the diagnostic figures for a finished analysis.

    Returns:
        Dict of figure name -> file path
    """
    os.makedirs(plot_dir, exist_ok=True)
    raw = result['raw']
    log_columns = ["SibSp", "Parch", "Fare"]
    return {
        'raw_distributions': data.plot_distributions(
            raw, ["Age"] + log_columns,
            output_file=os.path.join(plot_dir, 'raw_distributions.png'),
            title='Raw distributions'),
        'log_distributions': data.plot_distributions(
            result['transformed'], ["Age"] + log_columns,
            output_file=os.path.join(plot_dir, 'transformed_distributions.png'),
            title='After mean imputation and log(x + 1)'),
        'fare_by_deck': data.plot_fare_by_deck(
            raw, output_file=os.path.join(plot_dir, 'fare_by_deck.png')),
    }


def _section(title, body):
    return f"<h2>{html.escape(title)}</h2>\n{body}\n"


def _table(df, **kwargs):
    return df.to_html(float_format=lambda x: f"{x:.4f}", border=0, classes='table', **kwargs)


def render_html(result, figures):
    """Build the report document.

    Args:
        result: Dict returned by run_analysis()
        figures: Dict returned by save_plots(), paths relative to the report

    Returns:
        HTML string
    """
    settings = result['settings']
    models = result['models']
    parts = [
        "<!DOCTYPE html>",
        "<html><head><meta charset='utf-8'><title>Titanic Survival Analysis</title>",
        "<style>body{font-family:sans-serif;max-width:960px;margin:auto}"
        ".table{border-collapse:collapse}.table td,.table th{padding:2px 8px}</style>",
        "</head><body>",
        "<h1>Titanic Survival Analysis</h1>",
    ]

    parts.append(_section(
        "Data",
        f"<p>{result['profile']['shape'][0]} passengers, {result['profile']['shape'][1]} columns.</p>"
        + _table(result['profile']['numeric_summary'])
        + _table(result['profile']['levels'])
    ))

    parts.append(_section(
        "Cabin",
        "<p>Fares overlap heavily across deck letters and most cabins are missing, "
        "so the deck letter is not used as a feature.</p>"
        + _table(result['cabin_fares'])
        + f"<img src='{html.escape(figures['fare_by_deck'])}' width='100%'>"
    ))

    parts.append(_section(
        "Cleaning",
        f"<p>{len(result['transformed'])} rows remain after dropping identifiers, imputing age "
        f"with its mean, applying log(x + 1) to SibSp, Parch and Fare, and dropping rows "
        f"with missing values.</p>"
        + f"<img src='{html.escape(figures['raw_distributions'])}' width='100%'>"
        + f"<img src='{html.escape(figures['log_distributions'])}' width='100%'>"
    ))

    parts.append(_section(
        "Logistic regression",
        f"<p>Evaluation sample of {settings['eval_size']} rows drawn with seed "
        f"{settings['random_state']}; {len(result['training'])} training rows.</p>"
        + f"<h3>{html.escape(models['full_lr'].formula)}</h3>"
        + _table(models['full_lr'].coefficient_table())
        + f"<h3>{html.escape(models['refined_lr'].formula)}</h3>"
        + _table(models['refined_lr'].coefficient_table())
        + "<h3>Likelihood-ratio test</h3>"
        + _table(result['deviance_table'])
        + f"<p>Survival is predicted where the log-odds exceed {settings['threshold']}.</p>"
    ))

    parts.append(_section(
        "Random forest",
        f"<p>{settings['n_estimators']} trees on "
        f"{html.escape(', '.join(models['forest'].get_feature_columns()))}.</p>"
        + _table(models['forest'].feature_importances().to_frame('Importance'))
    ))

    parts.append(_section("Comparison", _table(result['comparison'], index=False)))
    parts.append("</body></html>")
    return "\n".join(parts)


def write_report(data, output_file='report.html', **analysis_kwargs):
    """Run the analysis and write the HTML report with its figures.

    The report and its ``<name>_files`` figure directory are staged in a
    temporary directory beside output_file and moved into place together,
    so nothing is left behind if any stage or any write fails.

    Args:
        data: BinaryClassificationData instance
        output_file: Path of the HTML file (default: report.html)
        **analysis_kwargs: Passed to run_analysis()

    Returns:
        Dict returned by run_analysis()

    Raises:
        ReportError: the report or its figures could not be written
    """
    result = run_analysis(data, **analysis_kwargs)

    output_path = os.path.abspath(output_file)
    report_dir = os.path.dirname(output_path)
    plot_dir = os.path.splitext(output_path)[0] + '_files'
    if os.path.isdir(output_path):
        raise ReportError(f"Report path {output_file} is a directory")

    print(f"\n=== Writing Report ===")
    try:
        with tempfile.TemporaryDirectory(dir=report_dir, prefix='.report-') as staging:
            staged_plots = os.path.join(staging, os.path.basename(plot_dir))
            figures = save_plots(data, result, staged_plots)
            relative = {name: os.path.relpath(path, staging) for name, path in figures.items()}

            staged_html = os.path.join(staging, os.path.basename(output_path))
            with open(staged_html, 'w', encoding='utf-8') as f:
                f.write(render_html(result, relative))

            os.replace(staged_html, output_path)
            try:
                if os.path.isdir(plot_dir):
                    shutil.rmtree(plot_dir)
                os.replace(staged_plots, plot_dir)
            except OSError:
                os.remove(output_path)
                raise
    except OSError as e:
        raise ReportError(f"Could not write report {output_file}: {e}")

    print(f"Report saved to: {output_file}")
    return result

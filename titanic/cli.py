"""Command-line interface for the survival report pipeline."""

import argparse
import os
import sys

import report
from errors import PipelineError
from logistic_regression_classifier import (
    FULL_FORMULA, REFINED_FORMULA, LogisticRegressionBinaryClassifier, deviance_table,
)
from random_forest_classifier import RandomForestBinaryClassifier


CLASSIFIER_CLASSES = [LogisticRegressionBinaryClassifier, RandomForestBinaryClassifier]


def create_cli(data_class, default_data_path='./train.csv',
               description='Titanic Survival Report', argv=None):
    """Create and run the CLI.

    Args:
        data_class: Class to instantiate for data handling (must inherit from BinaryClassificationData)
        default_data_path: Default path to data file
        description: Description for the CLI
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Exit status: 0 on success, 1 if the pipeline failed
    """
    # Parent parser for common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument('--data', type=str, default=default_data_path,
                               help=f'Path to training data (default: {default_data_path})')
    parent_parser.add_argument('--random-state', type=int, default=1234,
                               help='Seed for the evaluation sample and the forest (default: 1234)')
    parent_parser.add_argument('--eval-size', type=int, default=100,
                               help='Rows held out for evaluation (default: 100)')

    # Classifier-specific arguments
    classifier_args = []
    for classifier_class in CLASSIFIER_CLASSES:
        for arg_def in classifier_class.get_cli_arguments():
            parent_parser.add_argument(
                arg_def['name'],
                type=arg_def['type'],
                default=arg_def['default'],
                help=arg_def['help']
            )
            classifier_args.append(arg_def)

    # Main parser
    parser = argparse.ArgumentParser(description=description)
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    subparsers.add_parser('inspect', parents=[parent_parser],
                          help='Print summary statistics and missing values')

    plots_parser = subparsers.add_parser('plots', parents=[parent_parser],
                                         help='Save diagnostic histograms and the fare-by-deck box plot')
    plots_parser.add_argument('--output-dir', type=str, default='.',
                              help='Directory for the figures (default: current directory)')

    subparsers.add_parser('lrtest', parents=[parent_parser],
                          help='Compare the full and refined logistic models')

    subparsers.add_parser('compare', parents=[parent_parser],
                          help='Fit both models and print correct-prediction counts')

    report_parser = subparsers.add_parser('report', parents=[parent_parser],
                                          help='Run the full analysis and write the HTML report')
    report_parser.add_argument('--output', type=str, default='report.html',
                               help='Path to save the report (default: report.html)')

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    data = data_class(args.data)

    # Convert '--arg-name' to 'arg_name' for attribute access
    model_kwargs = {}
    for arg_def in classifier_args:
        arg_name = arg_def['name'].lstrip('-').replace('-', '_')
        model_kwargs[arg_name] = getattr(args, arg_name)

    try:
        if args.command == 'inspect':
            raw = data.load_data()
            data.inspect_data(raw)
            print(f"\n=== Fare by Deck ===\n")
            print(data.cabin_fare_summary(raw).round(2).to_string())
        elif args.command == 'plots':
            run_plots(data, args.output_dir)
        elif args.command == 'lrtest':
            run_lrtest(data, args, model_kwargs)
        elif args.command == 'compare':
            report.run_analysis(data, eval_size=args.eval_size, random_state=args.random_state,
                                **model_kwargs)
        elif args.command == 'report':
            report.write_report(data, output_file=args.output, eval_size=args.eval_size,
                                random_state=args.random_state, **model_kwargs)
    except PipelineError as e:
        print(f"Pipeline failed at stage '{e.stage}': {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    return 0


def run_plots(data, output_dir):
    """Save the diagnostic figures to output_dir."""
    os.makedirs(output_dir, exist_ok=True)
    data.prepare()
    columns = ["Age", "SibSp", "Parch", "Fare"]
    data.plot_distributions(data.raw_data, columns,
                            output_file=os.path.join(output_dir, 'raw_distributions.png'),
                            title='Raw distributions')
    data.plot_distributions(data.processed_data, columns,
                            output_file=os.path.join(output_dir, 'transformed_distributions.png'),
                            title='After mean imputation and log(x + 1)')
    data.plot_fare_by_deck(data.raw_data, output_file=os.path.join(output_dir, 'fare_by_deck.png'))


def run_lrtest(data, args, model_kwargs):
    """Fit both logistic models on the training split and print the deviance table."""
    print(f"\n=== Likelihood-Ratio Test ===")
    transformed = data.prepare()
    _, training = data.split(transformed, eval_size=args.eval_size, random_state=args.random_state)

    models = []
    for formula in (FULL_FORMULA, REFINED_FORMULA):
        model = LogisticRegressionBinaryClassifier(formula=formula,
                                                   threshold=model_kwargs['threshold'],
                                                   max_iter=model_kwargs['max_iter'])
        model.fit(training)
        model.display_post_train_stats()
        print()
        models.append(model)

    table = deviance_table(*models)
    print(table.to_string())
    return table

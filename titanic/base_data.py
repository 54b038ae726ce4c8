"""Base classes for binary classification data handling."""

from abc import ABC, abstractmethod
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from errors import DataLoadError, InsufficientDataError, SchemaError


class BinaryClassificationData(ABC):
    """Base class for binary classification datasets.

    Handles data loading, profiling, and splitting. Subclasses declare the
    raw schema and implement the dataset-specific transform.

    Every stage returns a new DataFrame; inputs are never modified.
    """

    def __init__(self, filepath):
        """Initialize with path to data file.

        Args:
            filepath: Path to CSV file containing the data
        """
        self.filepath = filepath
        self.raw_data = None
        self.processed_data = None

    @abstractmethod
    def get_raw_columns(self):
        """Return the expected header of the input file, in order.

        Returns:
            List of column names
        """
        pass

    @abstractmethod
    def get_numeric_raw_columns(self):
        """Return raw columns that must load as numeric dtype.

        Returns:
            List of column names
        """
        pass

    @abstractmethod
    def transform(self, raw):
        """Derive the modeling table from the raw table.

        Args:
            raw: DataFrame as returned by load_data()

        Returns:
            New DataFrame with no missing values
        """
        pass

    def load_data(self):
        """Load the raw CSV and validate it against the raw schema.

        String columns keep the dtype pandas infers; nothing is cast to
        categorical at load time.

        Returns:
            Raw DataFrame, one row per input record

        Raises:
            DataLoadError: file missing, unreadable, or header/dtypes do not match
        """
        try:
            raw = pd.read_csv(self.filepath)
        except FileNotFoundError:
            raise DataLoadError(f"Data file not found: {self.filepath}")
        except pd.errors.EmptyDataError:
            raise DataLoadError(f"Data file is empty: {self.filepath}")
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
            raise DataLoadError(f"Could not read {self.filepath}: {e}")

        expected = self.get_raw_columns()
        found = list(raw.columns)
        if found != expected:
            missing = [c for c in expected if c not in found]
            unexpected = [c for c in found if c not in expected]
            raise DataLoadError(
                f"Unexpected columns in {self.filepath}: expected {len(expected)} columns "
                f"{expected}, found {len(found)}; missing={missing}, unexpected={unexpected}"
            )

        for col in self.get_numeric_raw_columns():
            if not pd.api.types.is_numeric_dtype(raw[col]):
                raise DataLoadError(f"Column '{col}' in {self.filepath} is not numeric")

        self.raw_data = raw
        return raw

    def prepare(self):
        """Load and transform, caching both tables.

        Returns:
            Transformed DataFrame
        """
        raw = self.load_data()
        self.processed_data = self.transform(raw)
        return self.processed_data

    @staticmethod
    def summarize_numeric(table):
        """Summary statistics for every numeric column.

        Args:
            table: DataFrame to summarize

        Returns:
            DataFrame indexed by column with Min, quartiles, Mean, Max and NA count
        """
        numeric = table.select_dtypes(include='number')
        summary = pd.DataFrame({
            'Min': numeric.min(),
            '1st Qu.': numeric.quantile(0.25),
            'Median': numeric.median(),
            'Mean': numeric.mean(),
            '3rd Qu.': numeric.quantile(0.75),
            'Max': numeric.max(),
            "NA's": numeric.isna().sum(),
        })
        return summary

    @staticmethod
    def count_levels(table, columns):
        """Distinct and missing value counts for selected columns.

        Args:
            table: DataFrame to inspect
            columns: Column names to count

        Returns:
            DataFrame indexed by column with 'distinct' and 'missing' counts
        """
        absent = [c for c in columns if c not in table.columns]
        if absent:
            raise SchemaError(f"Columns not in table: {absent}", stage='profile')

        return pd.DataFrame({
            'distinct': [table[c].nunique(dropna=True) for c in columns],
            'missing': [int(table[c].isna().sum()) for c in columns],
        }, index=list(columns))

    def get_profile_columns(self):
        """Columns whose levels and missing values are profiled.

        Returns:
            List of column names (default: none)
        """
        return []

    def inspect_data(self, raw=None):
        """Print summary statistics and level counts for the raw table.

        Args:
            raw: Raw DataFrame (default: loads from filepath)

        Returns:
            Dict with 'shape', 'numeric_summary' and 'levels'
        """
        if raw is None:
            raw = self.raw_data if self.raw_data is not None else self.load_data()

        print("="*80)
        print("DATA INSPECTION")
        print("="*80)

        print(f"\nRows: {len(raw)}")
        print(f"Columns: {len(raw.columns)}")

        numeric_summary = self.summarize_numeric(raw)
        print(f"\n{'='*80}")
        print("NUMERIC SUMMARY")
        print("="*80)
        print(numeric_summary.round(3).to_string())

        levels = self.count_levels(raw, self.get_profile_columns())
        if len(levels) > 0:
            print(f"\n{'='*80}")
            print("DISTINCT AND MISSING VALUES")
            print("="*80)
            for col, row in levels.iterrows():
                print(f"  {col:20s}: {row['distinct']:4d} distinct, {row['missing']:4d} missing")

        return {
            'shape': raw.shape,
            'numeric_summary': numeric_summary,
            'levels': levels,
        }

    @staticmethod
    def split(table, eval_size=100, random_state=1234):
        """Partition a table into an evaluation sample and a training set.

        The evaluation set is a uniform sample without replacement; the
        training set is every other row, in original order.

        Args:
            table: DataFrame to split
            eval_size: Number of rows in the evaluation set (default: 100)
            random_state: Seed for the sample (default: 1234)

        Returns:
            Tuple of (evaluation_set, training_set)

        Raises:
            ValueError: eval_size is negative
            InsufficientDataError: eval_size exceeds the row count
        """
        if eval_size < 0:
            raise ValueError(f"eval_size must be non-negative, got {eval_size}")
        if eval_size > len(table):
            raise InsufficientDataError(
                f"Cannot draw an evaluation set of {eval_size} rows from {len(table)} rows"
            )

        evaluation = table.sample(n=eval_size, replace=False, random_state=random_state)
        training = table.drop(index=evaluation.index)
        return evaluation, training

    @staticmethod
    def plot_distributions(table, columns, output_file='distributions.png', title=None):
        """Save a grid of histograms, one per column.

        Args:
            table: DataFrame holding the columns
            columns: Numeric columns to plot
            output_file: Path to save the plot
            title: Optional figure title

        Returns:
            Path of the saved figure
        """
        fig, axes = plt.subplots(1, len(columns), figsize=(4 * len(columns), 4), squeeze=False)
        for ax, col in zip(axes[0], columns):
            sns.histplot(table[col].dropna(), bins=30, kde=False, color='steelblue', ax=ax)
            ax.set_title(col)

        if title:
            fig.suptitle(title)
        fig.tight_layout()
        fig.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)
        print(f"Histograms saved to: {output_file}")
        return output_file

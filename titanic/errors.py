"""Error kinds raised by the report pipeline."""


class PipelineError(Exception):
    """Base class for errors that abort the pipeline.

    Each error records the pipeline stage it was raised in so the CLI can
    report where the run stopped.
    """

    default_stage = 'pipeline'

    def __init__(self, message, stage=None):
        super().__init__(message)
        self.stage = stage if stage is not None else self.default_stage


class DataLoadError(PipelineError):
    """Input file is missing, unreadable, or does not match the raw schema."""

    default_stage = 'load'


class SchemaError(PipelineError):
    """A column is absent or holds values outside its declared type."""

    default_stage = 'transform'


class InsufficientDataError(PipelineError):
    """Requested evaluation sample is larger than the table."""

    default_stage = 'split'


class FitError(PipelineError):
    """Model could not be fitted (degenerate design or no convergence)."""

    default_stage = 'fit'


class ReportError(PipelineError):
    """Report or its figures could not be written."""

    default_stage = 'report'

"""
Errors raised by the lift pipeline when the data breaks a structural assumption
"""


class PipelineError(Exception):
    """Base class for pipeline failures"""


class ConventionMismatchError(PipelineError, ValueError):
    """Column names do not follow the expected sensor naming convention"""


class MissingValueLeakageError(PipelineError, ValueError):
    """A retained feature column still holds missing values"""

    def __init__(self, population, missing_counts):
        self.population = population
        self.missing_counts = dict(missing_counts)
        super().__init__(
            f"{len(self.missing_counts)} column(s) still contain missing values "
            f"in the {population} population: {self.missing_counts}"
        )


class SchemaDriftError(PipelineError, ValueError):
    """Labeled and unlabeled feature sets disagree on names or order"""

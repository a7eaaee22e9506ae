"""Labelled errors for the stages of the clustering workflow."""


class WineClusteringError(Exception):
    """Base class; `stage` names the part of the run that failed."""

    stage = "pipeline"

    def __str__(self):
        return f"[{self.stage}] {super().__str__()}"


class InputValidationError(WineClusteringError, ValueError):
    """Malformed or missing input file, non-numeric columns, missing values."""

    stage = "input"


class NumericalError(WineClusteringError, ArithmeticError):
    """Singular covariance, too few rows, degenerate (empty) clusters."""

    stage = "numerical"


class ConfigurationError(WineClusteringError, ValueError):
    """Impossible cluster counts, unknown algorithms, unsupported predictions."""

    stage = "configuration"

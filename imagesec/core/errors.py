class ImagesecError(RuntimeError):
    """Base class for errors the CLI reports as a failed command."""


class AggregationError(ImagesecError):
    """No SARIF inputs were found, or the unified document is not valid JSON."""


class PrerequisiteError(ImagesecError):
    """A required external binary (docker, ...) is not available."""


class NoSarifInputsError(AggregationError):
    """Aggregation found nothing to merge; callers may treat this as a warning."""

class SimEvoError(Exception):
    """Base for all SimEvo exceptions."""

    pass


# High-level families
class ValidationError(SimEvoError):
    """Data validation failures."""

    pass


class EvolutionError(SimEvoError):
    """Evolution process failures."""

    pass


# Validation subtypes
class ConfigurationError(ValidationError, ValueError):
    """Invalid evaluator configuration, reported before a run starts."""

    pass


# Evolution subtypes
class CandidateError(EvolutionError):
    """A population member failed to build, evaluate or mutate."""

    def __init__(self, message: str, generation: int | None = None):
        super().__init__(message)
        self.generation = generation

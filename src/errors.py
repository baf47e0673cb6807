"""Domain exceptions raised by the planning and session modules."""


class LiftlogError(Exception):
    """Base class for all errors raised by this service."""


class PreconditionViolation(LiftlogError):
    """An operation was called in a state or with arguments it does not accept.

    Examples: editing a set on a finished workout, or a set index that is
    out of range for the exercise.
    """


class PlanGenerationError(LiftlogError):
    """Plan generation produced no templates at all."""


class CatalogUnavailableError(LiftlogError):
    """The exercise catalog could not be reached."""

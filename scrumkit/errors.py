"""Error kinds raised by the store, services and routers.

Each kind carries the HTTP status it is rendered with by the application
exception handler in ``scrumkit.main``.
"""


class ScrumkitError(Exception):
    """Base class for all client-visible failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ScrumkitError):
    """A referenced session, item, vote, action item or report does not exist."""

    status_code = 404


class InvalidArgument(ScrumkitError):
    """Missing or malformed input; the caller has to correct it."""

    status_code = 400


class BudgetExceeded(ScrumkitError):
    """The participant has already cast every vote the session allows."""

    status_code = 400

    def __init__(self, budget: int):
        super().__init__(f"You have reached the maximum of {budget} votes")
        self.budget = budget


class GenerationFailed(ScrumkitError):
    """The external text-generation call failed, timed out or returned nothing."""

    status_code = 500


class StreamDeliveryFailure(ScrumkitError):
    """An event could not be handed to one open change stream.

    Only ever handled locally by tearing that one connection down.
    """

"""Fulfillment error taxonomy.

Every error carries a ``messages`` dict shaped like Protean's ValidationError
(``{"field": ["message", ...]}``) plus the HTTP status the API layer reports.
None of them is fatal to the process.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain


class FulfillmentError(Exception):
    status_code = 400

    def __init__(self, messages: dict[str, list[str]]) -> None:
        super().__init__(messages)
        self.messages = messages

    def __str__(self) -> str:
        return str(self.messages)


class NotFoundError(FulfillmentError):
    """A referenced delivery, driver, route, zone or order does not exist."""

    status_code = 404


class ConflictError(FulfillmentError):
    """A precondition on mutable state does not hold (driver busy, delivery not pending)."""

    status_code = 409


class InvalidTransitionError(FulfillmentError):
    """The requested status change is not an edge of the delivery state machine."""

    status_code = 422


class CapacityExceededError(FulfillmentError):
    """A route already carries its maximum number of active deliveries for the day."""

    status_code = 409


def load(aggregate_cls, identifier):
    """Fetch an aggregate by id, raising NotFoundError when it is missing."""
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise NotFoundError(
            {"_entity": [f"{aggregate_cls.__name__} `{identifier}` does not exist"]}
        ) from None

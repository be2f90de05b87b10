"""Fulfillment bounded context — meal delivery dispatch and cutover reconciliation.

Owns orders, their scheduled deliveries, drivers and the route network. The
delivery state machine, driver assignment and the slot cutover scheduler all
live here so that every status change flows through a single set of rules.
"""

from protean.domain import Domain

from fulfillment.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

fulfillment = Domain(name="fulfillment")

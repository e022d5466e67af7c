"""Giving bounded context — Donation Ledger and Nonprofit Payouts.

Collects the donations generated at checkout (seller contributions, buyer
add-ons and the platform's revenue share), reports what is owed to each
nonprofit, and settles pending donations into nonprofit payouts without
double-paying, losing or misattributing any of them.
"""

import structlog
from protean.domain import Domain

giving = Domain(name="giving")

logger = structlog.get_logger(__name__)

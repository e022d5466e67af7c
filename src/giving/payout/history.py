"""Payout history: paginated, filterable read of recorded payouts."""

import math
from dataclasses import dataclass, field
from datetime import datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from giving.nonprofit import get_directory
from giving.nonprofit.port import NonprofitProfile
from giving.payout.payout import NonprofitPayout, PayoutStatus

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PayoutRecord:
    payout_id: str
    nonprofit_id: str
    amount: int
    donation_count: int
    status: str
    method: str
    period_start: datetime
    period_end: datetime
    created_at: datetime
    paid_at: datetime | None = None
    notes: str | None = None
    nonprofit: NonprofitProfile | None = None


@dataclass(frozen=True)
class PayoutPage:
    page: int
    page_size: int
    total_count: int
    payouts: list[PayoutRecord] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.total_count else 0


def to_record(payout: NonprofitPayout, nonprofit: NonprofitProfile | None = None) -> PayoutRecord:
    return PayoutRecord(
        payout_id=str(payout.id),
        nonprofit_id=str(payout.nonprofit_id),
        amount=payout.amount,
        donation_count=payout.donation_count,
        status=payout.status,
        method=payout.method,
        period_start=payout.period_start,
        period_end=payout.period_end,
        created_at=payout.created_at,
        paid_at=payout.paid_at,
        notes=payout.notes,
        nonprofit=nonprofit,
    )


def _normalise_status(status: str | None) -> str | None:
    if status is None:
        return None
    for member in PayoutStatus:
        if status.lower() == member.value.lower():
            return member.value
    raise ValidationError({"status": [f"Unknown payout status: {status}"]})


def list_payouts(
    nonprofit_id: str | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> PayoutPage:
    """Payouts newest first, optionally for one nonprofit and/or one status."""
    if page < 1:
        raise ValidationError({"page": ["Page must be 1 or greater"]})
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError({"page_size": [f"Page size must be between 1 and {MAX_PAGE_SIZE}"]})

    criteria = {}
    if nonprofit_id:
        criteria["nonprofit_id"] = nonprofit_id
    if status:
        criteria["status"] = _normalise_status(status)

    payouts, total = current_domain.repository_for(NonprofitPayout).newest_first(
        offset=(page - 1) * page_size,
        limit=page_size,
        **criteria,
    )
    profiles = get_directory().profiles({str(p.nonprofit_id) for p in payouts})

    return PayoutPage(
        page=page,
        page_size=page_size,
        total_count=total,
        payouts=[to_record(p, profiles.get(str(p.nonprofit_id))) for p in payouts],
    )

"""Reconciliation audit: re-checks the ledger's invariants against storage.

Read-only. For every payout in scope the amount and donation count must
equal the sum and count of the donations attributed to it, and every
donation's status must agree with its payout attribution. Findings are
reported, never repaired: a payout is permanent, so a discrepancy is an
incident for a human to investigate.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from giving.donation.donation import Donation, DonationStatus
from giving.payout.payout import NonprofitPayout

logger = structlog.get_logger(__name__)


class DiscrepancyKind(Enum):
    PAID_WITHOUT_PAYOUT = "Paid_Without_Payout"
    PENDING_WITH_PAYOUT = "Pending_With_Payout"
    UNKNOWN_PAYOUT = "Unknown_Payout"
    NONPROFIT_MISMATCH = "Nonprofit_Mismatch"
    AMOUNT_MISMATCH = "Amount_Mismatch"
    COUNT_MISMATCH = "Count_Mismatch"


@dataclass(frozen=True)
class Discrepancy:
    kind: str
    reference_id: str
    expected: object = None
    actual: object = None


@dataclass(frozen=True)
class ReconciliationReport:
    checked_payouts: int
    checked_donations: int
    discrepancies: list[Discrepancy] = field(default_factory=list)

    @property
    def is_balanced(self) -> bool:
        return not self.discrepancies


def audit_ledger(nonprofit_id: str | None = None) -> ReconciliationReport:
    """Audit every payout and donation, or only those of one nonprofit."""
    criteria = {"nonprofit_id": nonprofit_id} if nonprofit_id else {}
    payout_repo = current_domain.repository_for(NonprofitPayout)
    donation_repo = current_domain.repository_for(Donation)

    payouts = {str(p.id): p for p in payout_repo.scan(**criteria)}
    attributed: dict[str, list[int]] = {payout_id: [0, 0] for payout_id in payouts}
    findings: list[Discrepancy] = []
    checked_donations = 0

    for donation in donation_repo.scan(**criteria):
        checked_donations += 1
        donation_id = str(donation.id)
        payout_id = str(donation.payout_id) if donation.payout_id else None
        paid = donation.status == DonationStatus.PAID.value

        if paid and payout_id is None:
            findings.append(Discrepancy(DiscrepancyKind.PAID_WITHOUT_PAYOUT.value, donation_id))
        elif not paid and payout_id is not None:
            findings.append(Discrepancy(DiscrepancyKind.PENDING_WITH_PAYOUT.value, donation_id, actual=payout_id))

        if payout_id is None:
            continue

        payout = payouts.get(payout_id)
        if payout is None:
            # Outside the audited scope, or gone altogether
            try:
                payout = payout_repo.get(payout_id)
            except ObjectNotFoundError:
                findings.append(Discrepancy(DiscrepancyKind.UNKNOWN_PAYOUT.value, donation_id, actual=payout_id))
                continue

        if str(payout.nonprofit_id) != str(donation.nonprofit_id):
            findings.append(
                Discrepancy(
                    DiscrepancyKind.NONPROFIT_MISMATCH.value,
                    donation_id,
                    expected=str(donation.nonprofit_id),
                    actual=str(payout.nonprofit_id),
                )
            )

        if payout_id in attributed:
            attributed[payout_id][0] += donation.amount
            attributed[payout_id][1] += 1

    for payout_id, payout in payouts.items():
        amount, count = attributed[payout_id]
        if amount != payout.amount:
            findings.append(Discrepancy(DiscrepancyKind.AMOUNT_MISMATCH.value, payout_id, payout.amount, amount))
        if count != payout.donation_count:
            findings.append(Discrepancy(DiscrepancyKind.COUNT_MISMATCH.value, payout_id, payout.donation_count, count))

    for finding in findings:
        logger.warning(
            "Ledger discrepancy",
            kind=finding.kind,
            reference_id=finding.reference_id,
            expected=finding.expected,
            actual=finding.actual,
        )

    return ReconciliationReport(
        checked_payouts=len(payouts),
        checked_donations=checked_donations,
        discrepancies=findings,
    )

"""FastAPI routes for the Giving domain: donations and nonprofit payouts.

Authorization is enforced upstream: only callers allowed to manage payouts
reach these routers.
"""

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from giving.api.schemas import (
    CreatePayoutRequest,
    CreatePayoutResponse,
    DiscrepancySchema,
    DonationIdResponse,
    NonprofitSchema,
    PayoutPageResponse,
    PayoutResponse,
    PendingNonprofitSummaryResponse,
    RecordDonationRequest,
    ReconciliationResponse,
)
from giving.donation.pending import PendingNonprofitSummary, list_pending_by_nonprofit
from giving.donation.recording import RecordDonation
from giving.errors import ConflictError, StorageError
from giving.nonprofit import get_directory
from giving.nonprofit.port import NonprofitProfile
from giving.payout.creation import create_payout, payout_message
from giving.payout.history import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PayoutRecord, list_payouts, to_record
from giving.payout.reconciliation import audit_ledger


def _nonprofit(profile: NonprofitProfile | None) -> NonprofitSchema | None:
    if profile is None:
        return None
    return NonprofitSchema(nonprofit_id=profile.nonprofit_id, name=profile.name, ein=profile.ein, logo=profile.logo)


def _summary_response(summary: PendingNonprofitSummary) -> PendingNonprofitSummaryResponse:
    return PendingNonprofitSummaryResponse(
        nonprofit_id=summary.nonprofit_id,
        nonprofit=_nonprofit(summary.nonprofit),
        total_amount=summary.total_amount,
        donation_count=summary.donation_count,
        seller_contribution_amount=summary.seller_contribution_amount,
        seller_contribution_count=summary.seller_contribution_count,
        buyer_direct_amount=summary.buyer_direct_amount,
        buyer_direct_count=summary.buyer_direct_count,
        platform_revenue_amount=summary.platform_revenue_amount,
        platform_revenue_count=summary.platform_revenue_count,
        oldest_donation_at=summary.oldest_donation_at,
        newest_donation_at=summary.newest_donation_at,
        donations=[vars(d) for d in summary.donations],
    )


def _payout_response(record: PayoutRecord) -> PayoutResponse:
    return PayoutResponse(
        payout_id=record.payout_id,
        nonprofit_id=record.nonprofit_id,
        nonprofit=_nonprofit(record.nonprofit),
        amount=record.amount,
        donation_count=record.donation_count,
        status=record.status,
        method=record.method,
        notes=record.notes,
        period_start=record.period_start,
        period_end=record.period_end,
        created_at=record.created_at,
        paid_at=record.paid_at,
    )


# ---------------------------------------------------------------------------
# Donation Router
# ---------------------------------------------------------------------------
donation_router = APIRouter(prefix="/donations", tags=["donations"])


@donation_router.post("", status_code=201, response_model=DonationIdResponse)
async def record_donation(body: RecordDonationRequest) -> DonationIdResponse:
    """Record a pending donation generated by an order."""
    command = RecordDonation(
        nonprofit_id=body.nonprofit_id,
        order_id=body.order_id,
        shop_id=body.shop_id,
        buyer_id=body.buyer_id,
        amount=body.amount,
        donor_type=body.donor_type,
    )
    result = current_domain.process(command, asynchronous=False)
    return DonationIdResponse(donation_id=result)


@donation_router.get("/pending", response_model=list[PendingNonprofitSummaryResponse])
async def pending_donations(nonprofit_id: str | None = None) -> list[PendingNonprofitSummaryResponse]:
    """What is currently owed, grouped by nonprofit."""
    return [_summary_response(summary) for summary in list_pending_by_nonprofit(nonprofit_id=nonprofit_id)]


# ---------------------------------------------------------------------------
# Payout Router
# ---------------------------------------------------------------------------
payout_router = APIRouter(prefix="/payouts", tags=["payouts"])


@payout_router.post("", status_code=201, response_model=CreatePayoutResponse)
def create_nonprofit_payout(body: CreatePayoutRequest) -> CreatePayoutResponse:
    """Settle an explicit set of pending donations into a payout.

    Plain ``def`` so FastAPI runs it in its threadpool: waiting on the
    settlement lock must not block the event loop.
    """
    try:
        payout = create_payout(
            nonprofit_id=body.nonprofit_id,
            donation_ids=body.donation_ids,
            period_start=body.period_start,
            period_end=body.period_end,
            method=body.method,
            notes=body.notes,
        )
    except ConflictError:
        raise HTTPException(
            status_code=409,
            detail="Some donations were already processed, please refresh",
        ) from None
    except StorageError:
        raise HTTPException(
            status_code=503,
            detail="The payout could not be recorded right now, please retry",
        ) from None

    profiles = get_directory().profiles([str(payout.nonprofit_id)])
    record = to_record(payout, profiles.get(str(payout.nonprofit_id)))
    return CreatePayoutResponse(payout=_payout_response(record), message=payout_message(payout))


@payout_router.get("", response_model=PayoutPageResponse)
async def payout_history(
    nonprofit_id: str | None = None,
    status: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> PayoutPageResponse:
    """Recorded payouts, newest first."""
    result = list_payouts(nonprofit_id=nonprofit_id, status=status, page=page, page_size=page_size)
    return PayoutPageResponse(
        payouts=[_payout_response(record) for record in result.payouts],
        page=result.page,
        page_size=result.page_size,
        total_count=result.total_count,
        total_pages=result.total_pages,
    )


@payout_router.get("/reconciliation", response_model=ReconciliationResponse)
async def reconciliation(nonprofit_id: str | None = None) -> ReconciliationResponse:
    """Re-check payout totals and donation attribution against storage."""
    report = audit_ledger(nonprofit_id=nonprofit_id)
    return ReconciliationResponse(
        is_balanced=report.is_balanced,
        checked_payouts=report.checked_payouts,
        checked_donations=report.checked_donations,
        discrepancies=[DiscrepancySchema(**vars(d)) for d in report.discrepancies],
    )

"""Pydantic request/response schemas for the Giving API.

These are external contracts (anti-corruption layer), kept separate from
internal Protean commands. Amounts are integer cents throughout.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class NonprofitSchema(BaseModel):
    nonprofit_id: str
    name: str
    ein: str | None = None
    logo: str | None = None


class PendingDonationSchema(BaseModel):
    donation_id: str
    amount: int
    donor_type: str
    created_at: datetime
    order_id: str
    shop_id: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class RecordDonationRequest(BaseModel):
    nonprofit_id: str
    order_id: str
    shop_id: str | None = None
    buyer_id: str | None = None
    amount: int = Field(ge=0)
    donor_type: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "nonprofit_id": "np-001",
                    "order_id": "ord-001",
                    "shop_id": "shop-001",
                    "amount": 1000,
                    "donor_type": "Seller_Contribution",
                }
            ]
        }
    }


class CreatePayoutRequest(BaseModel):
    nonprofit_id: str
    donation_ids: list[str]
    period_start: datetime | None = None
    period_end: datetime | None = None
    method: str = "manual"
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class DonationIdResponse(BaseModel):
    donation_id: str


class PendingNonprofitSummaryResponse(BaseModel):
    nonprofit_id: str
    nonprofit: NonprofitSchema | None = None
    total_amount: int
    donation_count: int
    seller_contribution_amount: int
    seller_contribution_count: int
    buyer_direct_amount: int
    buyer_direct_count: int
    platform_revenue_amount: int
    platform_revenue_count: int
    oldest_donation_at: datetime
    newest_donation_at: datetime
    donations: list[PendingDonationSchema]


class PayoutResponse(BaseModel):
    payout_id: str
    nonprofit_id: str
    nonprofit: NonprofitSchema | None = None
    amount: int
    donation_count: int
    status: str
    method: str
    notes: str | None = None
    period_start: datetime
    period_end: datetime
    created_at: datetime
    paid_at: datetime | None = None


class CreatePayoutResponse(BaseModel):
    payout: PayoutResponse
    message: str


class PayoutPageResponse(BaseModel):
    payouts: list[PayoutResponse]
    page: int
    page_size: int
    total_count: int
    total_pages: int


class DiscrepancySchema(BaseModel):
    kind: str
    reference_id: str
    expected: int | str | None = None
    actual: int | str | None = None


class ReconciliationResponse(BaseModel):
    is_balanced: bool
    checked_payouts: int
    checked_donations: int
    discrepancies: list[DiscrepancySchema]

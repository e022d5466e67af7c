"""Giving domain API package."""

from giving.api.routes import donation_router, payout_router

__all__ = ["donation_router", "payout_router"]

"""Payout creation: command, handler and the settlement entry point.

This is the only code path that moves donations from Pending to Paid.

The handler runs inside a unit of work: it re-reads the requested donations
that still belong to the nonprofit and are still Pending, refuses to go on
unless every requested id matched, then writes the payout and settles each
donation. Either all of that commits or none of it does.

``create_payout`` wraps the handler. It rejects malformed input before
touching storage, serialises settlements for the same nonprofit within
this process, and translates failures into the ledger's error taxonomy.

Across processes the guards are the aggregates' version check and, on
PostgreSQL, SERIALIZABLE isolation. A payout that loses either race is
reported as a conflict, exactly like one whose donations were already
paid when it re-read them.
"""

import json
import threading

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from giving.domain import giving
from giving.donation.donation import Donation
from giving.errors import ConflictError, LedgerError, StorageError
from giving.payout.payout import DEFAULT_METHOD, NonprofitPayout
from giving.shared.money import format_cents

logger = structlog.get_logger(__name__)

SETTLEMENT_LOCK_TIMEOUT = 30  # seconds

# SQLSTATE raised by PostgreSQL when a SERIALIZABLE transaction loses a race
SERIALIZATION_FAILURE = "40001"

_settlement_locks: dict[str, threading.Lock] = {}
_settlement_locks_guard = threading.Lock()


def settlement_lock(nonprofit_id: str) -> threading.Lock:
    """The lock serialising payouts for one nonprofit in this process."""
    with _settlement_locks_guard:
        return _settlement_locks.setdefault(str(nonprofit_id), threading.Lock())


def _is_write_conflict(exc: BaseException) -> bool:
    """Whether ``exc``, or anything it wraps, is a lost concurrent write."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, ExpectedVersionError):
            return True
        driver_error = getattr(exc, "orig", None) or exc
        code = getattr(driver_error, "pgcode", None) or getattr(driver_error, "sqlstate", None)
        if code == SERIALIZATION_FAILURE:
            return True
        exc = exc.__cause__ or exc.__context__
    return False


@giving.command(part_of="NonprofitPayout")
class CreatePayout:
    """Settle an explicit set of pending donations into a payout."""

    nonprofit_id = Identifier(required=True)
    donation_ids = Text(required=True)  # JSON list of donation ids
    period_start = DateTime()
    period_end = DateTime()
    method = String(max_length=50, default=DEFAULT_METHOD)
    notes = Text()


@giving.command_handler(part_of=NonprofitPayout)
class CreatePayoutHandler:
    @handle(CreatePayout)
    def create_payout(self, command):
        donation_ids = json.loads(command.donation_ids) if isinstance(command.donation_ids, str) else command.donation_ids
        nonprofit_id = str(command.nonprofit_id)

        donation_repo = current_domain.repository_for(Donation)
        donations = donation_repo.settleable(nonprofit_id, donation_ids)
        if len(donations) != len(donation_ids):
            raise ConflictError(
                "Some donations are invalid or already paid",
                requested=len(donation_ids),
                matched=len(donations),
            )

        payout = NonprofitPayout.settle(
            nonprofit_id=nonprofit_id,
            donations=donations,
            method=command.method,
            notes=command.notes,
        )
        current_domain.repository_for(NonprofitPayout).add(payout)

        for donation in donations:
            donation.settle(str(payout.id))
            donation_repo.add(donation)

        return str(payout.id)


def _validated_donation_ids(donation_ids) -> list[str]:
    if isinstance(donation_ids, str) or not isinstance(donation_ids, list | tuple):
        raise ValidationError({"donation_ids": ["Donation ids must be a list"]})

    ids = [str(d).strip() if d is not None else "" for d in donation_ids]
    if not ids:
        raise ValidationError({"donation_ids": ["At least one donation is required"]})
    if any(not d for d in ids):
        raise ValidationError({"donation_ids": ["Donation ids cannot be blank"]})
    if len(set(ids)) != len(ids):
        raise ValidationError({"donation_ids": ["Donation ids must not repeat"]})
    return ids


def create_payout(
    nonprofit_id: str,
    donation_ids: list[str],
    period_start=None,
    period_end=None,
    method: str = DEFAULT_METHOD,
    notes: str | None = None,
) -> NonprofitPayout:
    """Settle ``donation_ids`` into a new payout for ``nonprofit_id``.

    ``period_start``/``period_end`` are accepted for the dashboard's benefit
    but the stored period, like the amount, is derived from the donations.

    Raises:
        ValidationError: malformed input, nothing was read or written.
        ConflictError: some ids are unknown, belong to another nonprofit
            or were already paid, or another payout settled them
            first. Nothing was written.
        StorageError: the store failed or the settlement timed out.
            Nothing was written.
    """
    ids = _validated_donation_ids(donation_ids)
    command = CreatePayout(
        nonprofit_id=nonprofit_id,
        donation_ids=json.dumps(ids),
        period_start=period_start,
        period_end=period_end,
        method=method or DEFAULT_METHOD,
        notes=notes,
    )

    lock = settlement_lock(nonprofit_id)
    if not lock.acquire(timeout=SETTLEMENT_LOCK_TIMEOUT):
        logger.error("Timed out waiting to settle payout", nonprofit_id=str(nonprofit_id))
        raise StorageError("Timed out waiting for another payout to finish")
    try:
        payout_id = current_domain.process(command, asynchronous=False)
    except ConflictError as exc:
        logger.warning(
            "Payout rejected, donations changed since they were listed",
            nonprofit_id=str(nonprofit_id),
            requested=exc.requested,
            matched=exc.matched,
        )
        raise
    except (ValidationError, LedgerError):
        raise
    except Exception as exc:
        if _is_write_conflict(exc):
            logger.warning(
                "Payout rejected, a concurrent write touched the same donations",
                nonprofit_id=str(nonprofit_id),
                error=str(exc),
            )
            raise ConflictError(
                "Some donations are invalid or already paid",
                requested=len(ids),
                matched=0,
            ) from exc
        logger.exception("Payout transaction aborted", nonprofit_id=str(nonprofit_id))
        raise StorageError("The payout could not be recorded, please retry") from exc
    finally:
        lock.release()

    payout = current_domain.repository_for(NonprofitPayout).get(payout_id)
    if not _window_covers(period_start, period_end, payout):
        logger.warning(
            "Requested period does not cover the settled donations",
            payout_id=payout_id,
            requested_start=str(period_start),
            requested_end=str(period_end),
            period_start=str(payout.period_start),
            period_end=str(payout.period_end),
        )
    logger.info(
        "Payout created",
        payout_id=payout_id,
        nonprofit_id=str(nonprofit_id),
        amount=payout.amount,
        donation_count=payout.donation_count,
        method=payout.method,
    )
    return payout


def _window_covers(period_start, period_end, payout: NonprofitPayout) -> bool:
    """Whether a caller-supplied window contains the payout's derived period."""
    try:
        if period_start is not None and period_start > payout.period_start:
            return False
        if period_end is not None and period_end < payout.period_end:
            return False
    except TypeError:
        # naive and aware datetimes cannot be compared
        return False
    return True


def payout_message(payout: NonprofitPayout) -> str:
    """Confirmation shown to the operator after a payout."""
    noun = "donation" if payout.donation_count == 1 else "donations"
    return f"Payout of {format_cents(payout.amount)} created for {payout.donation_count} {noun}"

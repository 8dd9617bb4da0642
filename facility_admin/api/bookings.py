"""Booking endpoints."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from facility_admin.api.common import ensure_valid, get_or_404, merged, store_errors
from facility_admin.schemas.booking import BookingForm, BookingStatusUpdate
from facility_admin.schemas.order import PaymentStatusUpdate
from facility_admin.services.filtering import SEARCH_FIELDS, filter_items
from facility_admin.services.validation import validate_booking
from facility_admin.stores.booking_store import booking_store, fits_court_slot
from facility_admin.stores.court_store import court_store

router = APIRouter(prefix="/projects/{project_id}/bookings", tags=["bookings"])

SLOT_FIELDS = {"type", "courtId", "date", "startTime", "endTime"}


async def _check_court_slot(project_id: str, booking: Dict[str, Any]) -> None:
    """Reject court bookings that do not match one of the court's slots."""
    if (booking.get("type") or "court") != "court":
        return
    await court_store.ensure_fetched(project_id)
    court = get_or_404(court_store, booking["courtId"])
    if not fits_court_slot(court, booking):
        ensure_valid({"startTime": "Selected time is not an available slot for this court"})


@router.get("")
async def list_bookings(
    project_id: str,
    status: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    court_id: Optional[str] = Query(None, alias="courtId"),
    academy_id: Optional[str] = Query(None, alias="academyId"),
    on: Optional[str] = Query(None, alias="date", description="Exact ISO date"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    search: Optional[str] = Query(None),
):
    """
    List bookings ordered by date and start time.

    Equality filters go to the document query; ``from``/``to`` bound the
    ISO date inclusively and the search term is matched locally.
    """
    await booking_store.fetch(
        project_id,
        {"status": status, "userId": user_id, "courtId": court_id, "academyId": academy_id, "date": on},
    )
    if booking_store.error:
        raise HTTPException(status_code=500, detail=f"Failed to fetch bookings: {booking_store.error}")

    items = booking_store.items
    if date_from or date_to:
        items = booking_store.bookings_in_range(date_from or "", date_to or "9999-12-31")
    return filter_items(items, search, SEARCH_FIELDS["bookings"])


@router.get("/stats")
async def booking_stats(project_id: str):
    await booking_store.fetch(project_id)
    if booking_store.error:
        raise HTTPException(status_code=500, detail=f"Failed to fetch bookings: {booking_store.error}")
    return booking_store.stats()


@router.get("/{booking_id}")
async def get_booking(project_id: str, booking_id: str):
    with store_errors("fetch booking"):
        await booking_store.ensure_fetched(project_id)
    return get_or_404(booking_store, booking_id)


@router.post("", status_code=201)
async def create_booking(project_id: str, form: BookingForm):
    data = form.to_document()
    ensure_valid(validate_booking(data))

    with store_errors("create booking"):
        await _check_court_slot(project_id, data)
        await booking_store.ensure_fetched(project_id)
        return await booking_store.add(project_id, data)


@router.put("/{booking_id}")
async def update_booking(project_id: str, booking_id: str, form: BookingForm):
    with store_errors("update booking"):
        await booking_store.ensure_fetched(project_id)
        current = get_or_404(booking_store, booking_id)
        changes = form.to_document()
        booking = merged(current, changes)
        ensure_valid(validate_booking(booking))
        if SLOT_FIELDS & set(changes):
            await _check_court_slot(project_id, booking)
        return await booking_store.update(project_id, booking_id, changes)


@router.delete("/{booking_id}", status_code=204)
async def delete_booking(project_id: str, booking_id: str):
    with store_errors("delete booking"):
        await booking_store.ensure_fetched(project_id)
        await booking_store.delete(project_id, booking_id)


@router.put("/{booking_id}/status")
async def set_booking_status(project_id: str, booking_id: str, body: BookingStatusUpdate):
    with store_errors("update booking status"):
        await booking_store.ensure_fetched(project_id)
        get_or_404(booking_store, booking_id)
        return await booking_store.update_booking_status(project_id, booking_id, body.status)


@router.put("/{booking_id}/payment-status")
async def set_payment_status(project_id: str, booking_id: str, body: PaymentStatusUpdate):
    with store_errors("update payment status"):
        await booking_store.ensure_fetched(project_id)
        get_or_404(booking_store, booking_id)
        return await booking_store.update_payment_status(project_id, booking_id, body.payment_status)

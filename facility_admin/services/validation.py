"""
Form validation.

Each validator takes the submitted form and returns a mapping of field name
to message. An empty mapping means the form may be submitted.
"""
from typing import Any, Dict, Mapping

ValidationErrors = Dict[str, str]


def is_blank(value: Any) -> bool:
    """True for None, empty collections and strings that are empty after trimming."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


def _positive_number(value: Any) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def _require(form: Mapping[str, Any], errors: ValidationErrors, field: str, message: str) -> None:
    if is_blank(form.get(field)):
        errors[field] = message


def validate_academy(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Academy name is required")
    _require(form, errors, "email", "Email is required")
    _require(form, errors, "location", "Location is required")
    return errors


def validate_program(form: Mapping[str, Any]) -> ValidationErrors:
    """
    Validate a program form.

    Every selected day must have at least one time slot; a program with no
    days is rejected outright.
    """
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Program name is required")

    days = form.get("days") or []
    slots_by_day = form.get("timeSlotsByDay") or {}
    if not days:
        errors["days"] = "Please select at least one day"
    elif any(not slots_by_day.get(day) for day in days):
        errors["timeSlots"] = "Please add at least one time slot for each selected day"
    return errors


def validate_court(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Court name is required")
    _require(form, errors, "sport", "Sport is required")
    _require(form, errors, "location", "Location is required")
    if not is_blank(form.get("hourlyRate")) and not _positive_number(form.get("hourlyRate")):
        errors["hourlyRate"] = "Hourly rate must be a positive number"

    interval = form.get("bookingIntervalMinutes")
    if interval is not None and not _positive_number(interval):
        errors["bookingIntervalMinutes"] = "Booking interval must be a positive number of minutes"
    return errors


def validate_sport(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Sport name is required")
    _require(form, errors, "category", "Category is required")
    return errors


def validate_store(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Store name is required")
    _require(form, errors, "location", "Location is required")
    _require(form, errors, "averageDeliveryTime", "Average delivery time is required")
    return errors


def validate_product(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Product name is required")
    if not _positive_number(form.get("price")):
        errors["price"] = "Valid price is required"
    _require(form, errors, "category", "Category is required")
    return errors


def validate_order_item(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "productId", "Product is required")
    _require(form, errors, "storeId", "Store is required")
    if not _positive_number(form.get("quantity")):
        errors["quantity"] = "Quantity must be at least 1"
    if not _positive_number(form.get("unitPrice")):
        errors["unitPrice"] = "Valid unit price is required"
    return errors


def validate_gate_pass(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "visitorName", "Visitor name is required")
    _require(form, errors, "purpose", "Purpose is required")
    _require(form, errors, "validFrom", "Valid from date is required")
    _require(form, errors, "validUntil", "Valid until date is required")
    if not errors.get("validFrom") and not errors.get("validUntil"):
        if str(form["validUntil"]) <= str(form["validFrom"]):
            errors["validUntil"] = "Valid until must be after valid from"
    return errors


def validate_notification(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "title", "Title is required")
    _require(form, errors, "message", "Message is required")
    if form.get("targetAudience") == "specific" and is_blank(form.get("specificUsers")):
        errors["specificUsers"] = "Select at least one user"
    return errors


def validate_ad(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    order = form.get("order")
    if order is not None:
        try:
            if int(order) < 0:
                errors["order"] = "Order must be zero or greater"
        except (TypeError, ValueError):
            errors["order"] = "Order must be a number"
    return errors


def validate_project_user(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "firstName", "First name is required")
    _require(form, errors, "lastName", "Last name is required")
    _require(form, errors, "email", "Email is required")
    if not errors.get("email") and "@" not in str(form["email"]):
        errors["email"] = "Invalid email format"
    return errors


def validate_shop(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Shop name is required")
    _require(form, errors, "location", "Location is required")
    return errors


def validate_booking(form: Mapping[str, Any]) -> ValidationErrors:
    """
    Validate a booking form.

    Court bookings need a court, academy bookings an academy. Times are
    ``HH:MM`` strings compared as written.
    """
    errors: ValidationErrors = {}
    _require(form, errors, "userId", "User is required")
    _require(form, errors, "date", "Date is required")
    _require(form, errors, "startTime", "Start time is required")
    _require(form, errors, "endTime", "End time is required")
    if not errors.get("startTime") and not errors.get("endTime"):
        if str(form["endTime"]) <= str(form["startTime"]):
            errors["endTime"] = "End time must be after start time"

    booking_type = form.get("type") or "court"
    if booking_type == "court":
        _require(form, errors, "courtId", "Court is required")
    elif booking_type == "academy":
        _require(form, errors, "academyId", "Academy is required")
    return errors


def validate_event(form: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}
    _require(form, errors, "name", "Event name is required")
    _require(form, errors, "date", "Date is required")
    start, end = form.get("startTime"), form.get("endTime")
    if not is_blank(start) and not is_blank(end) and str(end) <= str(start):
        errors["endTime"] = "End time must be after start time"
    return errors

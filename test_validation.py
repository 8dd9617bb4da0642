"""Tests for form validation and list filtering."""
from facility_admin.services.filtering import (
    SEARCH_FIELDS,
    active_split,
    count_by,
    filter_items,
    stock_level,
)
from facility_admin.services.validation import (
    is_blank,
    validate_academy,
    validate_ad,
    validate_booking,
    validate_court,
    validate_event,
    validate_gate_pass,
    validate_notification,
    validate_product,
    validate_program,
    validate_project_user,
    validate_store,
)


def test_is_blank():
    assert is_blank(None)
    assert is_blank("   ")
    assert is_blank([])
    assert not is_blank(0)
    assert not is_blank("x")


def test_academy_requires_email():
    assert validate_academy({"name": "Elite FC", "email": "a@b.com", "location": "Field 1"}) == {}
    assert validate_academy({"name": "Elite FC", "location": "Field 1"}) == {"email": "Email is required"}


def test_program_requires_days():
    errors = validate_program({"name": "Juniors", "days": []})
    assert errors == {"days": "Please select at least one day"}


def test_program_requires_slots_for_every_selected_day():
    form = {
        "name": "Juniors",
        "days": ["monday", "wednesday"],
        "timeSlotsByDay": {"monday": ["17:00-18:00"], "wednesday": []},
    }
    assert validate_program(form) == {
        "timeSlots": "Please add at least one time slot for each selected day"
    }

    form["timeSlotsByDay"]["wednesday"] = ["17:00-18:00"]
    assert validate_program(form) == {}


def test_program_name_is_trimmed():
    errors = validate_program({"name": "  ", "days": ["monday"], "timeSlotsByDay": {"monday": ["9"]}})
    assert errors == {"name": "Program name is required"}


def test_store_rules():
    errors = validate_store({"name": "Pro Shop"})
    assert errors == {
        "location": "Location is required",
        "averageDeliveryTime": "Average delivery time is required",
    }


def test_product_price_must_be_positive():
    base = {"name": "Balls", "category": "Gear"}
    assert validate_product({**base, "price": 0}) == {"price": "Valid price is required"}
    assert validate_product({**base, "price": "abc"}) == {"price": "Valid price is required"}
    assert validate_product({**base, "price": "4.50"}) == {}


def test_court_rules():
    errors = validate_court({"name": "Court 1", "sport": "padel", "location": "North", "hourlyRate": -5})
    assert errors == {"hourlyRate": "Hourly rate must be a positive number"}


def test_gate_pass_window_must_be_ordered():
    form = {
        "visitorName": "Sam",
        "purpose": "Delivery",
        "validFrom": "2024-01-02T08:00:00Z",
        "validUntil": "2024-01-01T08:00:00Z",
    }
    assert validate_gate_pass(form) == {"validUntil": "Valid until must be after valid from"}


def test_notification_specific_audience_needs_users():
    form = {"title": "Hi", "message": "Hello", "targetAudience": "specific"}
    assert validate_notification(form) == {"specificUsers": "Select at least one user"}


def test_ad_order():
    assert validate_ad({"order": -1}) == {"order": "Order must be zero or greater"}
    assert validate_ad({"order": "first"}) == {"order": "Order must be a number"}
    assert validate_ad({}) == {}


def test_project_user_email_format():
    errors = validate_project_user({"firstName": "Ana", "lastName": "Diaz", "email": "ana"})
    assert errors == {"email": "Invalid email format"}


ACADEMIES = [
    {"id": "1", "name": "Elite FC", "type": "football", "location": "Field 1", "active": True},
    {"id": "2", "name": "Ace Tennis", "type": "tennis", "location": "Court Row", "active": False},
    {"id": "3", "name": "Elite Swim", "type": "swimming", "location": "Pool", "active": True},
]


def test_search_is_case_insensitive():
    found = filter_items(ACADEMIES, "elite", SEARCH_FIELDS["academies"])
    assert [a["id"] for a in found] == ["1", "3"]


def test_all_and_empty_filters_are_ignored():
    assert len(filter_items(ACADEMIES, filters={"type": "all"})) == 3
    assert len(filter_items(ACADEMIES, filters={"type": ""})) == 3
    assert [a["id"] for a in filter_items(ACADEMIES, filters={"type": "tennis"})] == ["2"]


def test_boolean_filters_accept_strings():
    assert [a["id"] for a in filter_items(ACADEMIES, filters={"active": "false"})] == ["2"]
    assert [a["id"] for a in filter_items(ACADEMIES, filters={"active": True})] == ["1", "3"]


def test_counts():
    assert count_by(ACADEMIES, "type") == {"football": 1, "tennis": 1, "swimming": 1}
    assert active_split(ACADEMIES) == {"total": 3, "active": 2, "inactive": 1}


def test_stock_level():
    assert stock_level({"stockQuantity": 0, "minStockLevel": 5}) == "out_of_stock"
    assert stock_level({"stockQuantity": 5, "minStockLevel": 5}) == "low_stock"
    assert stock_level({"stockQuantity": 6, "minStockLevel": 5}) == "in_stock"


def test_booking_times_and_target():
    booking = {"userId": "u1", "courtId": "c1", "date": "2024-01-02", "startTime": "09:00", "endTime": "10:00"}
    assert validate_booking(booking) == {}

    assert validate_booking({**booking, "endTime": "09:00"}) == {"endTime": "End time must be after start time"}
    assert validate_booking({**booking, "courtId": ""}) == {"courtId": "Court is required"}
    assert validate_booking({**booking, "type": "event"}) == {}


def test_event_requires_name_and_date():
    assert validate_event({"name": "Spring Cup", "date": "2024-03-01"}) == {}
    assert validate_event({"startTime": "10:00", "endTime": "09:00"}) == {
        "name": "Event name is required",
        "date": "Date is required",
        "endTime": "End time must be after start time",
    }

"""HTTP tests for the entity routers."""
from facility_admin.stores.academy_store import academy_store

ACADEMY = {"name": "Elite FC", "email": "a@b.com", "location": "Field 1"}


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "scheduler_running": False}


async def test_create_academy_defaults(client):
    response = await client.post("/projects/p1/academies", json=ACADEMY)

    assert response.status_code == 201
    academy = response.json()
    assert academy["rating"] == 0
    assert academy["facilities"] == []
    assert academy["programs"] == []


async def test_invalid_academy_is_rejected_before_any_write(client, documents):
    response = await client.post(
        "/projects/p1/academies", json={"name": "Elite FC", "location": "Field 1"}
    )

    assert response.status_code == 422
    assert response.json() == {"errors": {"email": "Email is required"}}
    assert academy_store.project_id is None
    assert await documents.query("projects/p1/academies") == []


async def test_list_academies_with_search_and_type(client):
    await client.post("/projects/p1/academies", json={**ACADEMY, "type": "football"})
    await client.post(
        "/projects/p1/academies",
        json={"name": "Ace Tennis", "email": "t@b.com", "location": "Court Row", "type": "tennis"},
    )

    response = await client.get("/projects/p1/academies", params={"search": "ACE"})
    assert [a["name"] for a in response.json()] == ["Ace Tennis"]

    response = await client.get("/projects/p1/academies", params={"type": "all"})
    assert len(response.json()) == 2

    response = await client.get("/projects/p1/academies", params={"type": "football"})
    assert [a["name"] for a in response.json()] == ["Elite FC"]


async def test_projects_are_isolated(client):
    await client.post("/projects/p1/academies", json=ACADEMY)

    response = await client.get("/projects/p2/academies")
    assert response.json() == []


async def test_update_is_validated_against_the_merged_academy(client):
    academy = (await client.post("/projects/p1/academies", json=ACADEMY)).json()

    response = await client.put(f"/projects/p1/academies/{academy['id']}", json={"phone": "555"})
    assert response.status_code == 200
    assert response.json()["phone"] == "555"
    assert response.json()["email"] == "a@b.com"

    response = await client.put(f"/projects/p1/academies/{academy['id']}", json={"email": " "})
    assert response.status_code == 422
    assert response.json() == {"errors": {"email": "Email is required"}}


async def test_program_endpoints(client):
    academy = (await client.post("/projects/p1/academies", json=ACADEMY)).json()
    url = f"/projects/p1/academies/{academy['id']}/programs"

    response = await client.post(url, json={"name": "Juniors", "days": ["monday", "friday"],
                                            "timeSlotsByDay": {"monday": [{"startTime": "17:00", "endTime": "18:00"}]}})
    assert response.status_code == 422
    assert response.json()["errors"] == {
        "timeSlots": "Please add at least one time slot for each selected day"
    }

    response = await client.post(url, json={"name": "Juniors", "days": ["monday"],
                                            "timeSlotsByDay": {"monday": [{"startTime": "17:00", "endTime": "18:00"}]}})
    assert response.status_code == 201
    program = response.json()

    response = await client.get(url)
    assert [p["id"] for p in response.json()] == [program["id"]]


async def test_missing_academy_is_404(client):
    response = await client.get("/projects/p1/academies/missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "Academy not found"}


async def test_delete_then_list(client):
    academy = (await client.post("/projects/p1/academies", json=ACADEMY)).json()

    response = await client.delete(f"/projects/p1/academies/{academy['id']}")
    assert response.status_code == 204

    response = await client.get("/projects/p1/academies")
    assert response.json() == []


async def test_court_slots(client):
    court = (
        await client.post(
            "/projects/p1/courts",
            json={
                "name": "Court 1",
                "sport": "padel",
                "location": "North",
                "bookingIntervalMinutes": 60,
                "availability": {
                    "monday": {"enabled": False},
                    "tuesday": {"enabled": True, "startTime": "09:00", "endTime": "11:00"},
                },
            },
        )
    ).json()

    response = await client.get(f"/projects/p1/courts/{court['id']}/slots", params={"on": "2024-01-01"})
    assert response.json() == []

    response = await client.get(f"/projects/p1/courts/{court['id']}/slots", params={"on": "2024-01-02"})
    assert response.json() == [
        {"startTime": "09:00", "endTime": "10:00"},
        {"startTime": "10:00", "endTime": "11:00"},
    ]


async def test_invalid_court_status_is_400(client):
    court = (
        await client.post("/projects/p1/courts", json={"name": "Court 1", "sport": "padel", "location": "North"})
    ).json()

    response = await client.put(f"/projects/p1/courts/{court['id']}/status", json={"status": "closed"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid court status: closed"}


async def test_order_item_updates_totals(client):
    order = (
        await client.post(
            "/projects/p1/orders",
            json={"userId": "u1", "items": [{"productId": "x", "storeId": "s1", "quantity": 2, "unitPrice": 10}]},
        )
    ).json()
    assert order["total"] == 20

    response = await client.post(
        f"/projects/p1/orders/{order['id']}/items",
        json={"productId": "y", "storeId": "s1", "quantity": 1, "unitPrice": 5},
    )
    assert response.status_code == 201
    assert response.json()["subtotal"] == 25

    response = await client.post(
        "/projects/p1/orders/missing/items",
        json={"productId": "y", "storeId": "s1", "quantity": 1, "unitPrice": 5},
    )
    assert response.status_code == 404
    assert response.json() == {"detail": "Order missing not found"}


async def test_gate_pass_check_in_is_idempotent(client):
    gate_pass = (
        await client.post(
            "/projects/p1/gate-passes",
            json={
                "visitorName": "Sam",
                "purpose": "Delivery",
                "validFrom": "2024-01-01T08:00:00Z",
                "validUntil": "2024-01-01T18:00:00Z",
            },
        )
    ).json()
    url = f"/projects/p1/gate-passes/{gate_pass['id']}/check-in"

    first = (await client.post(url)).json()
    assert first["status"] == "used"

    second = (await client.post(url)).json()
    assert second["entryTime"] == first["entryTime"]


async def test_store_products_and_inventory(client):
    store = (
        await client.post(
            "/projects/p1/stores",
            json={"name": "Pro Shop", "location": "Lobby", "averageDeliveryTime": "30 min"},
        )
    ).json()

    response = await client.post(
        f"/projects/p1/stores/{store['id']}/products",
        json={"name": "Balls", "category": "Gear", "price": 0},
    )
    assert response.status_code == 422
    assert response.json()["errors"] == {"price": "Valid price is required"}

    response = await client.post(
        f"/projects/p1/stores/{store['id']}/products",
        json={"name": "Balls", "category": "Gear", "price": 5, "stockQuantity": 2},
    )
    assert response.status_code == 201

    response = await client.get("/projects/p1/stores/stats")
    assert response.json()["lowStockProducts"] == 1


async def test_ad_upload(client, blobs, png_image):
    response = await client.post(
        "/projects/p1/ads",
        data={"linkUrl": "https://example.com", "order": "1"},
        files={"image": ("banner.png", png_image.content, "image/png")},
    )

    assert response.status_code == 201
    ad = response.json()
    assert ad["linkUrl"] == "https://example.com"
    assert ad["order"] == 1
    assert ad["imageUrl"].endswith(ad["imagePath"])
    assert await blobs.read(ad["imagePath"]) == png_image.content


async def test_ad_upload_rejects_non_images(client):
    response = await client.post(
        "/projects/p1/ads",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Please select a valid image file"}


async def test_platform_user_registration_and_suspension(client):
    response = await client.post(
        "/platform-users",
        json={
            "uid": "uid-1",
            "email": "temp@example.com",
            "isTemporary": True,
            "validityEndDate": "2030-01-01T00:00:00Z",
        },
    )
    assert response.status_code == 201
    assert response.json()["isExpired"] is False

    response = await client.post("/platform-users/uid-1/suspend", json={"reason": "Unpaid fees"})
    assert response.json()["suspensionReason"] == "Unpaid fees"

    response = await client.get("/platform-users", params={"temporary": "true"})
    assert [u["id"] for u in response.json()] == ["uid-1"]

    response = await client.post("/platform-users/missing/reinstate")
    assert response.status_code == 404


async def test_filtered_gate_pass_list_does_not_hide_other_passes(client):
    gate_pass = (
        await client.post(
            "/projects/p1/gate-passes",
            json={
                "visitorName": "Sam",
                "purpose": "Delivery",
                "validFrom": "2024-01-01T08:00:00Z",
                "validUntil": "2024-01-01T18:00:00Z",
            },
        )
    ).json()

    response = await client.get("/projects/p1/gate-passes", params={"status": "used"})
    assert response.json() == []

    response = await client.get(f"/projects/p1/gate-passes/{gate_pass['id']}")
    assert response.status_code == 200

    response = await client.post(f"/projects/p1/gate-passes/{gate_pass['id']}/check-in")
    assert response.status_code == 200
    assert response.json()["status"] == "used"


async def test_filtered_order_list_does_not_hide_other_orders(client):
    order = (
        await client.post(
            "/projects/p1/orders",
            json={"userId": "u1", "items": [{"productId": "x", "storeId": "s1", "quantity": 1, "unitPrice": 10}]},
        )
    ).json()

    response = await client.get("/projects/p1/orders", params={"status": "delivered"})
    assert response.json() == []

    response = await client.post(
        f"/projects/p1/orders/{order['id']}/items",
        json={"productId": "y", "storeId": "s1", "quantity": 1, "unitPrice": 5},
    )
    assert response.status_code == 201
    assert response.json()["subtotal"] == 15

    response = await client.get(f"/projects/p1/orders/{order['id']}")
    assert response.status_code == 200


async def test_negative_stock_is_rejected(client):
    store = (
        await client.post(
            "/projects/p1/stores",
            json={"name": "Pro Shop", "location": "Lobby", "averageDeliveryTime": "30 min"},
        )
    ).json()

    response = await client.post(
        f"/projects/p1/stores/{store['id']}/products",
        json={"name": "Balls", "category": "Gear", "price": 5, "stockQuantity": -1},
    )

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "stockQuantity"


async def test_academy_rating_is_bounded(client):
    response = await client.post("/projects/p1/academies", json={**ACADEMY, "rating": 6})

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "rating"


async def create_padel_court(client):
    return (
        await client.post(
            "/projects/p1/courts",
            json={
                "name": "Court 1",
                "sport": "padel",
                "location": "North",
                "bookingIntervalMinutes": 60,
                "availability": {
                    "monday": {"enabled": False},
                    "tuesday": {"enabled": True, "startTime": "09:00", "endTime": "11:00"},
                },
            },
        )
    ).json()


async def test_court_booking_must_match_a_slot(client):
    court = await create_padel_court(client)
    booking = {"userId": "u1", "userName": "Sam", "type": "court", "courtId": court["id"]}

    response = await client.post(
        "/projects/p1/bookings",
        json={**booking, "date": "2024-01-01", "startTime": "09:00", "endTime": "10:00"},
    )
    assert response.status_code == 422
    assert response.json() == {
        "errors": {"startTime": "Selected time is not an available slot for this court"}
    }

    response = await client.post(
        "/projects/p1/bookings",
        json={**booking, "date": "2024-01-02", "startTime": "10:00", "endTime": "11:00"},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "pending"
    assert created["paymentStatus"] == "pending"


async def test_booking_for_unknown_court_is_404(client):
    response = await client.post(
        "/projects/p1/bookings",
        json={"userId": "u1", "courtId": "missing", "date": "2024-01-02", "startTime": "09:00", "endTime": "10:00"},
    )

    assert response.status_code == 404
    assert response.json() == {"detail": "Court not found"}


async def test_booking_status_and_listing(client):
    court = await create_padel_court(client)
    base = {"userId": "u1", "courtId": court["id"], "date": "2024-01-02"}
    late = (await client.post("/projects/p1/bookings", json={**base, "startTime": "10:00", "endTime": "11:00"})).json()
    early = (await client.post("/projects/p1/bookings", json={**base, "startTime": "09:00", "endTime": "10:00"})).json()

    response = await client.get("/projects/p1/bookings")
    assert [b["id"] for b in response.json()] == [early["id"], late["id"]]

    response = await client.put(f"/projects/p1/bookings/{late['id']}/status", json={"status": "confirmed"})
    assert response.json()["status"] == "confirmed"

    response = await client.get("/projects/p1/bookings", params={"status": "confirmed"})
    assert [b["id"] for b in response.json()] == [late["id"]]

    response = await client.put(
        f"/projects/p1/bookings/{early['id']}/payment-status", json={"paymentStatus": "bogus"}
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid payment status: bogus"}

    response = await client.get("/projects/p1/bookings", params={"from": "2024-01-03"})
    assert response.json() == []

    response = await client.get("/projects/p1/bookings/stats")
    assert response.json() == {"total": 2, "pending": 1, "confirmed": 1, "cancelled": 0, "completed": 0}


async def test_academy_booking_needs_an_academy(client):
    response = await client.post(
        "/projects/p1/bookings",
        json={"userId": "u1", "type": "academy", "date": "2024-01-02", "startTime": "09:00", "endTime": "10:00"},
    )

    assert response.status_code == 422
    assert response.json() == {"errors": {"academyId": "Academy is required"}}


async def test_event_endpoints(client):
    response = await client.post("/projects/p1/events", json={"date": "2024-03-01"})
    assert response.status_code == 422
    assert response.json() == {"errors": {"name": "Event name is required"}}

    cup = (
        await client.post(
            "/projects/p1/events",
            json={"name": "Spring Cup", "type": "tournament", "date": "2024-03-01", "location": "Court 1"},
        )
    ).json()
    assert cup["status"] == "upcoming"
    assert cup["currentParticipants"] == 0

    league = (
        await client.post(
            "/projects/p1/events",
            json={"name": "Winter League", "type": "league", "date": "2024-01-10", "status": "completed"},
        )
    ).json()

    response = await client.get("/projects/p1/events/upcoming")
    assert [e["id"] for e in response.json()] == [cup["id"]]

    response = await client.get("/projects/p1/events", params={"type": "league"})
    assert [e["id"] for e in response.json()] == [league["id"]]

    response = await client.get("/projects/p1/events", params={"search": "spring"})
    assert [e["name"] for e in response.json()] == ["Spring Cup"]

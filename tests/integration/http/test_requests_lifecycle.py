from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from agrimandi.domain.value_objects.role import Role


def ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def create_request(client, buyer, crop="Wheat", quantity="25"):
    response = await client.post(
        "/api/v1/requests",
        json={"crop": crop, "quantity": quantity, "price": "2200", "contact": "+91 90000 11111"},
        headers=buyer.headers,
    )
    assert response.status_code == 201
    return response.json()["id"]


async def patch(client, account, request_id, action):
    return await client.patch(
        f"/api/v1/requests/{request_id}", json={"action": action}, headers=account.headers
    )


async def test_full_lifecycle_with_notifications(client, make_account, sender):
    buyer = await make_account(Role.BUYER, name="Asha", contact="+91 90000 11111")
    farmer = await make_account(Role.FARMER, name="Ravi", contact="+91 98220 00000")
    request_id = await create_request(client, buyer)

    response = await patch(client, farmer, request_id, "accept")
    assert response.status_code == 200
    accepted = response.json()
    assert accepted["status"] == "accepted"
    assert accepted["farmer"] == {"id": str(farmer.id), "name": "Ravi", "contact": "+91 98220 00000"}
    assert accepted["allowed_actions"] == ["complete", "cancel"]

    response = await patch(client, farmer, request_id, "complete")
    assert response.json()["status"] == "completed_pending_confirmation"

    response = await client.post(f"/api/v1/requests/{request_id}/confirm", headers=buyer.headers)
    assert response.status_code == 200
    done = response.json()
    assert done["status"] == "completed"
    assert done["allowed_actions"] == []
    assert Decimal(done["quantity"]) == Decimal("25")
    assert (
        ts(done["created_at"])
        < ts(done["accepted_at"])
        < ts(done["completed_at"])
        < ts(done["buyer_confirmed_at"])
    )
    assert sender.kinds_for(buyer.id) == ["request_accepted", "request_completed"]
    assert sender.kinds_for(farmer.id) == ["request_confirmed"]


async def test_second_farmer_cannot_take_accepted_request(client, make_account, sender):
    buyer = await make_account(Role.BUYER)
    first = await make_account(Role.FARMER, name="First")
    second = await make_account(Role.FARMER, name="Second")
    request_id = await create_request(client, buyer)

    assert (await patch(client, first, request_id, "accept")).status_code == 200
    response = await patch(client, second, request_id, "accept")
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"

    detail = await client.get(f"/api/v1/requests/{request_id}", headers=buyer.headers)
    assert detail.json()["farmer_id"] == str(first.id)
    assert detail.json()["version"] == 2
    assert sender.kinds_for(buyer.id) == ["request_accepted"]


async def test_only_assigned_farmer_completes(client, make_account):
    buyer = await make_account(Role.BUYER)
    farmer = await make_account(Role.FARMER)
    stranger = await make_account(Role.FARMER)
    request_id = await create_request(client, buyer)
    await patch(client, farmer, request_id, "accept")

    response = await patch(client, stranger, request_id, "complete")
    assert response.status_code == 403
    assert response.json()["details"] == {"operation": "complete", "reason": "not_assigned"}


async def test_buyers_only_see_their_own_requests(client, make_account):
    owner = await make_account(Role.BUYER)
    other = await make_account(Role.BUYER)
    request_id = await create_request(client, owner)

    response = await client.get(f"/api/v1/requests/{request_id}", headers=other.headers)
    assert response.status_code == 403
    assert response.json()["details"]["reason"] == "not_owner"

    response = await client.get("/api/v1/requests/mine", headers=other.headers)
    assert response.json() == []
    response = await client.get("/api/v1/requests/mine", headers=owner.headers)
    assert [r["id"] for r in response.json()] == [request_id]

    response = await client.get("/api/v1/requests", headers=owner.headers)
    assert response.status_code == 403


async def test_farmers_browse_open_requests(client, make_account):
    buyer = await make_account(Role.BUYER, name="Asha")
    farmer = await make_account(Role.FARMER)
    wheat = await create_request(client, buyer, crop="Wheat")
    await create_request(client, buyer, crop="Onion")
    await patch(client, farmer, wheat, "accept")

    response = await client.get("/api/v1/requests", params={"status": "pending"}, headers=farmer.headers)
    assert response.status_code == 200
    rows = response.json()
    assert [r["crop"] for r in rows] == ["Onion"]
    assert rows[0]["buyer"]["name"] == "Asha"
    assert rows[0]["allowed_actions"] == ["accept"]

    response = await client.get("/api/v1/requests", params={"crop": "wheat"}, headers=farmer.headers)
    assert [r["id"] for r in response.json()] == [wheat]

    response = await client.get("/api/v1/requests", params={"status": "lost"}, headers=farmer.headers)
    assert response.status_code == 422


async def test_deny_then_confirm(client, make_account, sender):
    buyer = await make_account(Role.BUYER)
    farmer = await make_account(Role.FARMER)
    request_id = await create_request(client, buyer)
    await patch(client, farmer, request_id, "accept")
    await patch(client, farmer, request_id, "complete")

    response = await client.post(
        f"/api/v1/requests/{request_id}/deny",
        json={"reason": "Only 20 quintals arrived"},
        headers=buyer.headers,
    )
    assert response.status_code == 200
    disputed = response.json()
    assert disputed["status"] == "disputed"
    assert disputed["dispute_reason"] == "Only 20 quintals arrived"
    assert sender.last_context("request_disputed")["reason"] == "Only 20 quintals arrived"

    # The farmer cannot complete again while the buyer disputes.
    assert (await patch(client, farmer, request_id, "complete")).status_code == 409

    response = await client.post(f"/api/v1/requests/{request_id}/confirm", headers=buyer.headers)
    assert response.json()["status"] == "completed"


async def test_cancel_and_reactivate(client, make_account):
    buyer = await make_account(Role.BUYER)
    request_id = await create_request(client, buyer)

    response = await patch(client, buyer, request_id, "cancel")
    assert response.status_code == 200
    assert response.json()["cancelled_by"] == "buyer"
    assert response.json()["allowed_actions"] == ["reactivate"]

    response = await client.post(f"/api/v1/requests/{request_id}/reactivate", headers=buyer.headers)
    assert response.status_code == 200
    reopened = response.json()
    assert reopened["status"] == "pending"
    assert reopened["cancelled_at"] is None
    assert reopened["cancelled_by"] is None


async def test_farmer_cancel_notifies_buyer(client, make_account, sender):
    buyer = await make_account(Role.BUYER)
    farmer = await make_account(Role.FARMER)
    request_id = await create_request(client, buyer)
    await patch(client, farmer, request_id, "accept")

    response = await patch(client, farmer, request_id, "cancel")
    assert response.json()["cancelled_by"] == "farmer"
    assert sender.kinds_for(buyer.id)[-1] == "request_cancelled"
    assert sender.kinds_for(farmer.id) == []


async def test_buyer_cannot_cancel_after_acceptance(client, make_account):
    buyer = await make_account(Role.BUYER)
    farmer = await make_account(Role.FARMER)
    request_id = await create_request(client, buyer)
    await patch(client, farmer, request_id, "accept")

    response = await patch(client, buyer, request_id, "cancel")
    assert response.status_code == 409
    assert response.json()["details"] == {"status": "accepted", "action": "cancel"}


async def test_admin_overrides(client, make_account, sender):
    buyer = await make_account(Role.BUYER)
    farmer = await make_account(Role.FARMER)
    replacement = await make_account(Role.FARMER, name="Kiran")
    admin = await make_account(Role.ADMIN)
    request_id = await create_request(client, buyer)
    await patch(client, farmer, request_id, "accept")

    # Re-accepting as admin keeps the current farmer.
    response = await patch(client, admin, request_id, "accept")
    assert response.status_code == 200
    assert response.json()["farmer_id"] == str(farmer.id)

    response = await client.post(
        f"/api/v1/requests/{request_id}/reassign",
        json={"farmer_id": str(replacement.id)},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert response.json()["farmer"]["name"] == "Kiran"
    assert sender.kinds_for(replacement.id) == ["request_assigned"]

    response = await client.post(
        f"/api/v1/requests/{request_id}/reassign",
        json={"farmer_id": str(buyer.id)},
        headers=admin.headers,
    )
    assert response.status_code == 422

    response = await client.post(
        f"/api/v1/requests/{request_id}/reassign",
        json={"farmer_id": str(replacement.id)},
        headers=farmer.headers,
    )
    assert response.status_code == 403


async def test_unknown_request_is_not_found(client, make_account):
    farmer = await make_account(Role.FARMER)
    response = await patch(client, farmer, "6f1c1d5e-8f0e-4f8b-9b1a-2f3c4d5e6f70", "accept")
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


async def test_farmers_cannot_create_requests(client, make_account):
    farmer = await make_account(Role.FARMER)
    response = await client.post(
        "/api/v1/requests", json={"crop": "Rice", "quantity": "5"}, headers=farmer.headers
    )
    assert response.status_code == 403
    assert response.json()["details"]["reason"] == "wrong_role"


async def test_patch_rejects_actions_with_dedicated_routes(client, make_account):
    buyer = await make_account(Role.BUYER)
    request_id = await create_request(client, buyer)
    response = await patch(client, buyer, request_id, "confirm")
    assert response.status_code == 422

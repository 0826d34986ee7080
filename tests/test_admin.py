"""Tests for the admin panel: balances and withdrawal review."""
from decimal import Decimal

import pytest

from bitrewards.models.transaction import Transaction


async def _request_withdrawal(user_client, amount):
    r = await user_client.post(
        "/withdraw/confirm", data={"amount": amount, "method": "Bank Transfer", "details": "IBAN"}
    )
    assert r.status_code == 303
    return int(r.headers["location"].rsplit("/", 1)[1])


def _status(db, tx_id):
    db.expire_all()
    return db.get(Transaction, tx_id).Status


@pytest.mark.asyncio
async def test_admin_panel_lists_users_and_transactions(admin_client, user_client, set_balance):
    await set_balance("alice", "25")
    await _request_withdrawal(user_client, "12.50")

    r = await admin_client.get("/admin")
    assert r.status_code == 200
    assert "alice" in r.text
    assert "€12.50" in r.text
    assert "Pending" in r.text
    # Administrators are not listed among users
    assert 'name="userId" value="1"' not in r.text


@pytest.mark.asyncio
async def test_admin_sets_balance(admin_client, user_client, fetch_user):
    user = fetch_user("alice")
    r = await admin_client.post(
        "/admin/balance", data={"userId": str(user.UserID), "newBalance": "123.45"}
    )
    assert r.status_code == 303
    assert r.headers["location"] == "/admin"
    assert fetch_user("alice").Balance == Decimal("123.45")


@pytest.mark.asyncio
async def test_admin_balance_ignores_bad_input(admin_client, user_client, set_balance, fetch_user):
    await set_balance("alice", "10")
    user = fetch_user("alice")

    r = await admin_client.post(
        "/admin/balance", data={"userId": str(user.UserID), "newBalance": "lots"}
    )
    assert r.status_code == 303
    r = await admin_client.post("/admin/balance", data={"userId": "9999", "newBalance": "5"})
    assert r.status_code == 303
    assert fetch_user("alice").Balance == Decimal("10.00")


@pytest.mark.asyncio
async def test_approve_debits_balance(admin_client, user_client, set_balance, fetch_user, db):
    await set_balance("alice", "100.00")
    tx_id = await _request_withdrawal(user_client, "40.00")

    r = await admin_client.post("/admin/approve", data={"txId": str(tx_id), "action": "approve"})
    assert r.status_code == 303
    assert r.headers["location"] == "/admin"

    assert _status(db, tx_id) == "Approved"
    assert fetch_user("alice").Balance == Decimal("60.00")

    r = await user_client.get("/dashboard")
    assert "€60.00" in r.text
    assert "Approved" in r.text

    # Second request larger than the balance is refused up front
    r = await user_client.post("/withdraw/confirm", data={"amount": "1000.00"})
    assert r.status_code == 200
    assert "Insufficient funds. Balance: €60.00" in r.text
    db.expire_all()
    assert db.query(Transaction).count() == 1


@pytest.mark.asyncio
async def test_approve_rechecks_current_balance(admin_client, user_client, set_balance, fetch_user, db):
    await set_balance("alice", "100.00")
    tx_id = await _request_withdrawal(user_client, "80.00")
    await set_balance("alice", "50.00")

    await admin_client.post("/admin/approve", data={"txId": str(tx_id), "action": "approve"})

    assert _status(db, tx_id) == "Failed (Insufficient Funds)"
    assert fetch_user("alice").Balance == Decimal("50.00")


@pytest.mark.asyncio
async def test_reject_leaves_balance(admin_client, user_client, set_balance, fetch_user, db):
    await set_balance("alice", "100.00")
    tx_id = await _request_withdrawal(user_client, "40.00")

    await admin_client.post("/admin/approve", data={"txId": str(tx_id), "action": "reject"})

    assert _status(db, tx_id) == "Rejected"
    assert fetch_user("alice").Balance == Decimal("100.00")


@pytest.mark.asyncio
async def test_status_changes_only_once(admin_client, user_client, set_balance, fetch_user, db):
    await set_balance("alice", "100.00")
    tx_id = await _request_withdrawal(user_client, "40.00")

    for _ in range(2):
        await admin_client.post("/admin/approve", data={"txId": str(tx_id), "action": "approve"})
    await admin_client.post("/admin/approve", data={"txId": str(tx_id), "action": "reject"})

    assert _status(db, tx_id) == "Approved"
    assert fetch_user("alice").Balance == Decimal("60.00")


@pytest.mark.asyncio
async def test_review_ignores_unknown_input(admin_client, user_client, set_balance, db):
    await set_balance("alice", "100.00")
    tx_id = await _request_withdrawal(user_client, "40.00")

    for data in (
        {"txId": "9999", "action": "approve"},
        {"txId": "abc", "action": "approve"},
        {"txId": str(tx_id), "action": "delete"},
    ):
        r = await admin_client.post("/admin/approve", data=data)
        assert r.status_code == 303
        assert r.headers["location"] == "/admin"

    assert _status(db, tx_id) == "Pending"


@pytest.mark.asyncio
async def test_successive_approvals_spend_exact_balance(admin_client, user_client, set_balance, fetch_user, db):
    await set_balance("alice", "0.30")

    first = await _request_withdrawal(user_client, "0.10")
    await admin_client.post("/admin/approve", data={"txId": str(first), "action": "approve"})
    assert _status(db, first) == "Approved"
    assert fetch_user("alice").Balance == Decimal("0.20")

    second = await _request_withdrawal(user_client, "0.20")
    await admin_client.post("/admin/approve", data={"txId": str(second), "action": "approve"})
    assert _status(db, second) == "Approved"
    assert fetch_user("alice").Balance == Decimal("0.00")


@pytest.mark.asyncio
async def test_review_ignores_out_of_range_ids(admin_client, user_client, set_balance, db):
    await set_balance("alice", "100.00")
    tx_id = await _request_withdrawal(user_client, "40.00")

    for tx in ("9" * 30, str(2**63), "0", "-1", "²"):
        r = await admin_client.post("/admin/approve", data={"txId": tx, "action": "approve"})
        assert r.status_code == 303
        assert r.headers["location"] == "/admin"

    assert _status(db, tx_id) == "Pending"


@pytest.mark.asyncio
async def test_balance_update_ignores_out_of_range_ids(admin_client, user_client, set_balance, fetch_user):
    await set_balance("alice", "10")

    for user_id in ("9" * 30, str(2**63), "0", "²"):
        r = await admin_client.post("/admin/balance", data={"userId": user_id, "newBalance": "5"})
        assert r.status_code == 303
        assert r.headers["location"] == "/admin"

    r = await admin_client.post(
        "/admin/balance",
        data={"userId": str(fetch_user("alice").UserID), "newBalance": "1e30"},
    )
    assert r.status_code == 303
    assert fetch_user("alice").Balance == Decimal("10.00")

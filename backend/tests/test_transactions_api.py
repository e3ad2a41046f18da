from datetime import timedelta

from liquor_pos.models import Customer
from liquor_pos.time_utils import utcnow

from conftest import add_transaction


def test_list_newest_first_with_names(client, cashier_headers, cashier_user, seed, db_session):
    now = utcnow()
    older = add_transaction(db_session, cashier_user.id, 12, date=now - timedelta(days=2))
    newer = add_transaction(db_session, cashier_user.id, 30, date=now - timedelta(hours=1),
                            customer_id=seed["customer"])

    resp = client.get("/api/transactions", headers=cashier_headers)
    assert resp.status_code == 200
    rows = resp.json["transactions"]
    assert [t["id"] for t in rows] == [newer, older]
    assert rows[0]["cashier_username"] == "cashier"
    assert rows[0]["customer_name"] == "Dana Whitfield"
    assert rows[1]["customer_name"] is None
    assert rows[0]["amount"] == 30.0


def test_deleted_customer_is_unnamed(client, cashier_headers, cashier_user, seed, db_session):
    txn_id = add_transaction(db_session, cashier_user.id, 5, customer_id=seed["customer"])
    db_session.delete(db_session.get(Customer, seed["customer"]))
    db_session.commit()

    resp = client.get(f"/api/transactions/{txn_id}", headers=cashier_headers)
    assert resp.status_code == 200
    assert resp.json["customer_name"] is None


def test_filters(client, cashier_headers, cashier_user, db_session):
    now = utcnow()
    add_transaction(db_session, cashier_user.id, 10, date=now - timedelta(days=10))
    recent = add_transaction(db_session, cashier_user.id, 20, date=now - timedelta(days=1))
    cancelled = add_transaction(db_session, cashier_user.id, 30, date=now - timedelta(days=1), status="cancelled")
    refund = add_transaction(db_session, cashier_user.id, 5, date=now - timedelta(days=1), type="refund")

    since = (now - timedelta(days=3)).strftime("%Y-%m-%dT%H:%M:%SZ")
    resp = client.get(f"/api/transactions?from={since}", headers=cashier_headers)
    assert {t["id"] for t in resp.json["transactions"]} == {recent, cancelled, refund}

    resp = client.get("/api/transactions?status=cancelled", headers=cashier_headers)
    assert [t["id"] for t in resp.json["transactions"]] == [cancelled]

    resp = client.get("/api/transactions?type=refund", headers=cashier_headers)
    assert [t["id"] for t in resp.json["transactions"]] == [refund]


def test_invalid_filters_rejected(client, cashier_headers):
    assert client.get("/api/transactions?type=void", headers=cashier_headers).status_code == 400
    assert client.get("/api/transactions?status=open", headers=cashier_headers).status_code == 400
    assert client.get("/api/transactions?from=yesterday", headers=cashier_headers).status_code == 400


def test_get_missing_transaction(client, cashier_headers):
    assert client.get("/api/transactions/9999", headers=cashier_headers).status_code == 404

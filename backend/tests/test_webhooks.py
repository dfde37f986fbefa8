from __future__ import annotations

import pytest

from careernest.config import get_settings
from careernest.gateway.base import GatewayError
from careernest.models import AIService, MentorshipSession, PaymentRequest, Transaction, UserService
from careernest.services.catalog_service import CatalogService, ensure_default_catalog


@pytest.fixture()
def session_payment(service, mentor, make_session):
    session = make_session()
    created = service.request_session_payment(mentor.id, session.id)
    assert created.success
    return session, created.transaction_id


def _callback(client, ref, status, **extra):
    return client.post("/api/momo/callback", json={"referenceId": ref, "status": status, **extra})


def test_successful_callback_reconciles(client, db, gateway, session_payment):
    session, ref = session_payment
    gateway.settle(ref, "SUCCESSFUL")

    r = _callback(client, ref, "SUCCESSFUL")

    assert r.status_code == 200, r.text
    assert r.json() == {"received": True, "applied": True, "status": "completed"}
    db.expire_all()
    assert db.get(MentorshipSession, session.id).payment_status == "paid"
    assert db.query(PaymentRequest).one().status == "paid"


def test_redelivered_callback_is_a_noop(client, gateway, session_payment):
    _, ref = session_payment
    gateway.settle(ref, "SUCCESSFUL")

    first = _callback(client, ref, "SUCCESSFUL")
    second = _callback(client, ref, "SUCCESSFUL")

    assert first.json()["applied"] is True
    assert second.status_code == 200
    assert second.json() == {"received": True, "applied": False, "status": "completed"}


def test_callback_reference_from_header(client, db, gateway, session_payment):
    _, ref = session_payment
    gateway.settle(ref, "FAILED")

    r = client.put(
        "/api/momo/callback",
        json={"status": "FAILED", "reason": {"code": "PAYER_LIMIT_REACHED"}},
        headers={"X-Reference-Id": ref},
    )

    assert r.json()["status"] == "failed"
    db.expire_all()
    txn = db.query(Transaction).one()
    assert txn.status == "failed"
    # Gateway gave no reason, so the callback's is kept
    assert txn.reason == "PAYER_LIMIT_REACHED"


def test_callback_reference_from_external_id(client, db, gateway, session_payment):
    _, ref = session_payment
    gateway.settle(ref, "FAILED", reason="APPROVAL_REJECTED")
    external_id = db.query(Transaction).one().external_id

    r = client.post("/api/momo/callback", json={"externalId": external_id, "status": "REJECTED"})

    assert r.status_code == 200
    assert r.json()["status"] == "failed"
    db.expire_all()
    assert db.query(Transaction).one().reason == "APPROVAL_REJECTED"


def test_pending_callback_changes_nothing(client, db, session_payment):
    _, ref = session_payment

    r = _callback(client, ref, "PENDING")

    assert r.json() == {"received": True, "applied": False, "status": "pending"}
    db.expire_all()
    assert db.query(Transaction).one().status == "pending"


def test_unknown_reference_is_404(client):
    r = _callback(client, "missing", "SUCCESSFUL")
    assert r.status_code == 404

    r = client.post("/api/momo/callback", json={"status": "SUCCESSFUL"})
    assert r.status_code == 404


# ---------------------------
# Outcomes come from the gateway
# ---------------------------

def test_success_claim_is_ignored_while_gateway_reports_pending(client, db, session_payment):
    session, ref = session_payment

    r = _callback(client, ref, "SUCCESSFUL")

    assert r.status_code == 200
    assert r.json() == {"received": True, "applied": False, "status": "pending"}
    db.expire_all()
    assert db.query(Transaction).one().status == "pending"
    assert db.query(PaymentRequest).one().status == "sent"
    assert db.get(MentorshipSession, session.id).payment_status == "pending"


def test_unpaid_ai_service_cannot_be_unlocked_by_callback(client, db, gateway, mentee):
    ensure_default_catalog(db)
    cv_review = db.query(AIService).filter(AIService.name == "CV Review").one()
    purchase = CatalogService(db, gateway).purchase(mentee.id, cv_review.id, "27821234567")
    assert purchase.success

    r = _callback(client, purchase.transaction_id, "SUCCESSFUL")

    assert r.json()["applied"] is False
    db.expire_all()
    assert db.query(UserService).one().status == "pending"
    assert db.query(Transaction).one().status == "pending"


def test_gateway_outcome_wins_over_callback_claim(client, db, gateway, session_payment):
    _, ref = session_payment
    gateway.settle(ref, "FAILED", reason="NOT_ENOUGH_FUNDS")

    r = _callback(client, ref, "SUCCESSFUL")

    assert r.json() == {"received": True, "applied": True, "status": "failed"}
    db.expire_all()
    assert db.query(Transaction).one().reason == "NOT_ENOUGH_FUNDS"


def test_unreachable_gateway_asks_provider_to_retry(client, db, gateway, session_payment, monkeypatch):
    _, ref = session_payment

    def unreachable(reference_id):
        raise GatewayError("Payment provider unreachable", retryable=True)

    monkeypatch.setattr(gateway, "get_transaction_status", unreachable)

    r = _callback(client, ref, "SUCCESSFUL")

    assert r.status_code == 503
    db.expire_all()
    assert db.query(Transaction).one().status == "pending"


# ---------------------------
# Callback token
# ---------------------------

def test_callback_token_is_enforced_when_configured(client, gateway, session_payment, monkeypatch):
    _, ref = session_payment
    gateway.settle(ref, "SUCCESSFUL")
    monkeypatch.setattr(get_settings(), "MOMO_CALLBACK_TOKEN", "s3cret")
    payload = {"referenceId": ref, "status": "SUCCESSFUL"}

    denied = client.post("/api/momo/callback", json=payload, headers={"X-Callback-Token": "wrong"})
    missing = client.post("/api/momo/callback", json=payload)
    allowed = client.post("/api/momo/callback", json=payload, headers={"X-Callback-Token": "s3cret"})

    assert denied.status_code == 401
    assert missing.status_code == 401
    assert allowed.status_code == 200
    assert allowed.json()["applied"] is True


def test_callback_token_accepted_as_query_parameter(client, session_payment, monkeypatch):
    _, ref = session_payment
    monkeypatch.setattr(get_settings(), "MOMO_CALLBACK_TOKEN", "s3cret")

    r = client.post(
        "/api/momo/callback?token=s3cret", json={"referenceId": ref, "status": "PENDING"}
    )

    assert r.status_code == 200


@pytest.mark.parametrize("mode", ["sandbox", "live"])
def test_callbacks_rejected_outside_mock_mode_without_token(
    client, db, gateway, session_payment, monkeypatch, mode
):
    _, ref = session_payment
    gateway.settle(ref, "SUCCESSFUL")
    monkeypatch.setattr(get_settings(), "MOMO_MODE", mode)
    monkeypatch.setattr(get_settings(), "MOMO_CALLBACK_TOKEN", "")

    r = _callback(client, ref, "SUCCESSFUL")

    assert r.status_code == 401
    db.expire_all()
    assert db.query(Transaction).one().status == "pending"

from __future__ import annotations

import pytest

from persistence.errors import TokenExpired, TokenInvalid, UserNotFound
from persistence.passwords import verify_password
from persistence.reset_tokens import ResetTokenLedger


def _stored_user(store, user_id):
    return next(u for u in store.load()["users"] if u["id"] == user_id)


@pytest.fixture
def user(repo):
    return repo.register_user(name="Ana", email="ana@example.com", password="old-pass")


@pytest.fixture
def ledger(store, clock):
    return ResetTokenLedger(store, clock=clock)


def test_issue_records_token_with_absolute_expiry(ledger, store, clock, user):
    rec = ledger.issue(user["id"], ttl=600)

    assert rec.token
    assert rec.expires == int(clock.now * 1000) + 600_000
    assert store.load()["resetTokens"] == [{"token": rec.token, "userId": user["id"], "expires": rec.expires}]


def test_consume_twice_second_call_is_invalid(ledger, store, user):
    token = ledger.issue(user["id"], ttl=600).token

    ledger.consume(token, "new-pass")
    assert verify_password("new-pass", _stored_user(store, user["id"])["password"])
    assert store.load()["resetTokens"] == []

    with pytest.raises(TokenInvalid):
        ledger.consume(token, "another-pass")
    assert verify_password("new-pass", _stored_user(store, user["id"])["password"])


def test_consume_after_expiry_fails_and_keeps_record(ledger, store, clock, user):
    token = ledger.issue(user["id"], ttl=60).token
    clock.advance(60)

    with pytest.raises(TokenExpired):
        ledger.consume(token, "new-pass")

    assert [t["token"] for t in store.load()["resetTokens"]] == [token]
    assert verify_password("old-pass", _stored_user(store, user["id"])["password"])


def test_consume_unknown_token_is_invalid(ledger, user):
    with pytest.raises(TokenInvalid):
        ledger.consume("not-a-token", "x")


def test_consume_for_deleted_user_reports_user_not_found(ledger, store, user):
    token = ledger.issue(user["id"], ttl=600).token
    doc = store.load()
    doc["users"] = []
    store.save(doc)

    with pytest.raises(UserNotFound):
        ledger.consume(token, "new-pass")
    # the failed attempt wrote nothing
    assert [t["token"] for t in store.load()["resetTokens"]] == [token]


def test_new_token_does_not_revoke_older_ones(ledger, store, user):
    first = ledger.issue(user["id"], ttl=600).token
    second = ledger.issue(user["id"], ttl=600).token
    assert first != second

    ledger.consume(first, "via-first")

    assert [t["token"] for t in store.load()["resetTokens"]] == [second]


def test_drop_expired_removes_only_expired(ledger, store, clock, user):
    short = ledger.issue(user["id"], ttl=10).token
    long = ledger.issue(user["id"], ttl=1000).token
    clock.advance(30)

    assert ledger.drop_expired() == 1
    assert [t["token"] for t in store.load()["resetTokens"]] == [long]
    assert short != long

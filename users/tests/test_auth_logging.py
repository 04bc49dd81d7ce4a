import logging

from django.test import RequestFactory
from users.logging import log_auth_event
from users.tests.factories import UserFactory


def test_auth_event_is_a_structured_dict(caplog, db):
    user = UserFactory.build(id=12, role="contractor")
    request = RequestFactory().post("/api/v1/auth/signin/", HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1")

    with caplog.at_level(logging.INFO, logger="auth"):
        log_auth_event("signin", request, user=user)

    payload = caplog.records[-1].msg
    assert payload == {
        "event": "auth.signin",
        "action": "signin",
        "ip": "203.0.113.9",
        "status": "success",
        "user_id": 12,
        "role": "contractor",
    }


def test_auth_event_falls_back_to_remote_addr(caplog):
    request = RequestFactory().post("/api/v1/auth/signin/")

    with caplog.at_level(logging.INFO, logger="auth"):
        log_auth_event("signin", request, status="invalid", extra={"email": "ghost@example.com"})

    payload = caplog.records[-1].msg
    assert payload["ip"] == "127.0.0.1"
    assert payload["status"] == "invalid"
    assert payload["email"] == "ghost@example.com"
    assert "user_id" not in payload

import logging

logger = logging.getLogger("auth")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit a structured ``auth.<action>`` event.

    The record is a dict message so the JSON formatter flattens it; it carries
    the client ip, outcome and, when known, who the event is about.
    """
    payload = {
        "event": f"auth.{action}",
        "action": action,
        "ip": request.META.get("HTTP_X_FORWARDED_FOR", "").split(",")[0].strip() or request.META.get("REMOTE_ADDR"),
        "status": status,
    }
    if user is not None:
        payload.update(user_id=getattr(user, "id", None), role=getattr(user, "role", None))
    if extra:
        payload.update(extra)
    logger.info(payload)

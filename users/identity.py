"""Signed-in identity as seen by checkout.

An ``Identity`` couples the user record with the bearer credential that
authorizes order submission. It is read from the authenticated request, or
from the visitor's storage where sign-in wrote it.
"""

import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from common.storage import KeyValueStorage

USER_STORAGE_KEY = "buildmart_user"
TOKEN_STORAGE_KEY = "buildmart_token"

logger = logging.getLogger("auth")


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "customer"
    vendor_ref: str = ""
    token: str = ""

    @classmethod
    def from_user(cls, user, token: str = "") -> "Identity":
        return cls(
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=getattr(user, "role", "customer"),
            vendor_ref=getattr(user, "vendor_ref", ""),
            token=token,
        )

    def record(self) -> dict:
        """Serializable user record, without the credential."""
        data = asdict(self)
        data.pop("token")
        return data


def identity_from_request(request) -> Optional[Identity]:
    """Return the identity carried by a JWT-authenticated request, if any."""
    user = getattr(request, "user", None)
    auth = getattr(request, "auth", None)
    if not user or not user.is_authenticated or auth is None:
        return None
    return Identity.from_user(user, token=str(auth))


class IdentityStore:
    """Persists the identity record and bearer credential as a pair."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def login(self, identity: Identity) -> None:
        self.storage.set(USER_STORAGE_KEY, json.dumps(identity.record()))
        self.storage.set(TOKEN_STORAGE_KEY, identity.token)

    def logout(self) -> None:
        self.storage.remove(USER_STORAGE_KEY)
        self.storage.remove(TOKEN_STORAGE_KEY)

    def current(self) -> Optional[Identity]:
        raw_user = self.storage.get(USER_STORAGE_KEY)
        token = self.storage.get(TOKEN_STORAGE_KEY)
        if not raw_user or not token:
            return None
        try:
            record = json.loads(raw_user)
            return Identity(token=token, **record)
        except (TypeError, ValueError):
            logger.warning("auth.identity_corrupt", extra={"event": "auth.identity_corrupt"})
            self.logout()
            return None

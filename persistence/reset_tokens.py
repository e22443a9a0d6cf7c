from __future__ import annotations

import logging
import secrets
import time
from typing import Callable

from pydantic import ValidationError

from .collection_accessor import CollectionAccessor
from .errors import NotFound, TokenExpired, TokenInvalid, UserNotFound
from .interfaces import DocumentStore
from .passwords import hash_password
from .records import RESET_TOKENS, USERS, ResetTokenRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _mask(token: str) -> str:
    return f"{token[:6]}..." if len(token) > 6 else "***"


class ResetTokenLedger:
    """
    Single-use password reset tokens stored in the resetTokens collection.

    A token is valid while now < expires (epoch ms). Issuing a token does not
    revoke earlier ones for the same user. Expired tokens stay in the ledger
    until drop_expired() runs.
    """

    def __init__(self, store: DocumentStore, *, clock: Clock = time.time):
        self._store = store
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def issue(self, user_id: str, ttl: float) -> ResetTokenRecord:
        record = ResetTokenRecord(
            token=secrets.token_urlsafe(32),
            userId=user_id,
            expires=self._now_ms() + int(ttl * 1000),
        )
        with self._store.transaction() as doc:
            tokens = CollectionAccessor(doc, RESET_TOKENS, label="Reset token")
            # keyed by "token", so no generated id
            tokens.append(record.to_disk_doc())
        logger.info("RESET TOKEN: issued %s for user %s", _mask(record.token), user_id)
        return record

    def consume(self, token: str, new_password: str) -> None:
        with self._store.transaction() as doc:
            tokens = CollectionAccessor(doc, RESET_TOKENS, label="Reset token")
            matches = tokens.list(lambda r: r.get("token") == token)
            if not token or not matches:
                raise TokenInvalid()
            try:
                rec = ResetTokenRecord.model_validate(matches[0])
            except ValidationError as e:
                raise TokenInvalid() from e
            if self._now_ms() >= rec.expires:
                raise TokenExpired()

            users = CollectionAccessor(doc, USERS, label="User")
            try:
                users.update_by_id(rec.userId, {"password": hash_password(new_password)})
            except NotFound as e:
                raise UserNotFound() from e
            tokens.replace_where(lambda r: r.get("token") == token, [])
        logger.info("RESET TOKEN: consumed %s for user %s", _mask(token), rec.userId)

    def drop_expired(self) -> int:
        now = self._now_ms()

        def _expired(r: dict) -> bool:
            exp = r.get("expires")
            return not isinstance(exp, int) or now >= exp

        with self._store.transaction() as doc:
            tokens = CollectionAccessor(doc, RESET_TOKENS, label="Reset token")
            dropped = len(tokens.list(_expired))
            if dropped:
                tokens.replace_where(_expired, [])
        if dropped:
            logger.info("RESET TOKEN: dropped %d expired token(s)", dropped)
        return dropped

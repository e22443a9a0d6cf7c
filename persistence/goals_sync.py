from __future__ import annotations

import logging
from typing import Any

from .collection_accessor import CollectionAccessor, owned_by
from .errors import InvalidRequest
from .interfaces import DocumentStore
from .records import GOALS

logger = logging.getLogger(__name__)


def _present(user_id: Any) -> bool:
    if isinstance(user_id, str):
        return bool(user_id.strip())
    return bool(user_id) and not isinstance(user_id, (dict, list))


class GoalsSync:
    """
    The only write path for goals: a user's goals are always replaced as a
    full set, in a single rewrite of the document.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def replace_for_owner(self, user_id: Any, goals: Any) -> list[dict[str, Any]]:
        if not _present(user_id):
            raise InvalidRequest("userId and goals are required")
        if not isinstance(goals, list) or not all(isinstance(g, dict) for g in goals):
            raise InvalidRequest("userId and goals are required")

        # same ownership rule as listing, so whatever GET shows for a user is replaced
        with self._store.transaction() as doc:
            CollectionAccessor(doc, GOALS, label="Goal").replace_where(owned_by(user_id), goals)
        logger.info("GOALS SYNC: replaced goals for user %s with %d record(s)", user_id, len(goals))
        return [dict(g) for g in goals]

from __future__ import annotations

import logging
from typing import Any, Dict, List

LOG = logging.getLogger(__name__)

RESOURCE_KINDS = ("users", "groups")

# kind -> (paginated operation, result key)
_OPERATIONS = {
    "users": ("list_users", "Users"),
    "groups": ("list_groups", "Groups"),
}


class CognitoDirectory:
    """Reads complete user and group listings from a Cognito user pool."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def list(self, kind: str, user_pool_id: str) -> Dict[str, Any]:
        try:
            operation, result_key = _OPERATIONS[kind]
        except KeyError:
            raise ValueError(f"Unsupported resource kind '{kind}'") from None

        paginator = self._client.get_paginator(operation)
        items: List[Dict[str, Any]] = []
        for page in paginator.paginate(UserPoolId=user_pool_id):
            items.extend(page.get(result_key, []))
        LOG.debug("Listed %d %s from user pool %s", len(items), kind, user_pool_id)
        return {result_key: items}

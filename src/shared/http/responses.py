# /src/shared/http/responses.py
"""
HTTP response envelopes.

- ResponseBuilder.success(data, message)
- ResponseBuilder.paginated(items, total, limit, offset, message)

Every envelope carries ``success``, ``message`` and an ISO-8601 ``timestamp``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Sequence

from fastapi.encoders import jsonable_encoder


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ResponseBuilder:
    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        return {
            "success": True,
            "message": message,
            "data": jsonable_encoder(data),
            "timestamp": _timestamp(),
        }

    @staticmethod
    def paginated(
        items: Sequence[Any],
        total: int,
        limit: int,
        offset: int,
        message: str = "Success",
    ) -> Dict[str, Any]:
        return {
            "success": True,
            "message": message,
            "data": jsonable_encoder(list(items)),
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "hasMore": offset + len(items) < total,
            },
            "timestamp": _timestamp(),
        }

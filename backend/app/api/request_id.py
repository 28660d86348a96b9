"""Request id lookup for endpoints and error handlers.

The request id middleware stores the id on request.state; the observability
middleware also binds it into the logging context, which is consulted when no
request object is at hand.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from app.obs import logging as obs_logging

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
    """Return the current request id if bound, else a default."""
    if request is not None:
        rid = getattr(request.state, REQUEST_ID_ATTR, None)
        if rid:
            return str(rid)
    return obs_logging.current_request_id() or default

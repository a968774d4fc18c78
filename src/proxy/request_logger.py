"""Access logging for the proxy's HTTP application.

One line per request: elapsed seconds, status code and request target. The
elapsed time covers writing the whole body. The status is the first one
actually sent to the client; a handler that prepared a 404 and then failed
still logs 404.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from aiohttp import web

logger = logging.getLogger(__name__)

SENT_STATUS_KEY = web.RequestKey("sent_status", int)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


async def _record_sent_status(request: web.Request, response: web.StreamResponse) -> None:
    """on_response_prepare hook; keeps only the first status sent."""
    if SENT_STATUS_KEY not in request:
        request[SENT_STATUS_KEY] = response.status


@web.middleware
async def request_logger(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Log latency, status and target for every request."""
    start = time.monotonic()
    status = 200
    try:
        response = await handler(request)
        status = response.status
        # Send the body here so the timing includes it.
        await response.prepare(request)
        await response.write_eof()
        return response
    except web.HTTPException as exc:
        status = exc.status
        raise
    except Exception:
        status = 500
        raise
    finally:
        status = request.get(SENT_STATUS_KEY, status)
        logger.info("%.3fs %d %s", time.monotonic() - start, status, request.rel_url)


def setup_request_logging(app: web.Application) -> None:
    """Install the access logger on an application that is not yet frozen."""
    app.middlewares.append(request_logger)
    app.on_response_prepare.append(_record_sent_status)

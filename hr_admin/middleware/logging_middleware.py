import logging
import time

from fastapi import Request

logger = logging.getLogger("hr_admin.requests")


# Loggt jede Anfrage mit Status und Dauer
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.exception(f"{request.method} {request.url.path} - unhandled error after {duration_ms:.1f}ms")
        raise
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration_ms:.1f}ms)")
    return response

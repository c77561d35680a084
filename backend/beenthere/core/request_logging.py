import logging
import time

logger = logging.getLogger("beenthere.requests")


class RequestLoggingMiddleware:
    """
    Log method, path, status and duration of every HTTP request.

    Written as plain ASGI so long-lived streaming responses pass through
    untouched; the line is logged once the response headers go out.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()

        async def send_with_logging(message):
            if message["type"] == "http.response.start":
                status = message["status"]
                elapsed_ms = (time.perf_counter() - started) * 1000
                line = f"{scope['method']} {scope['path']} -> {status} ({elapsed_ms:.1f} ms)"
                if status >= 500:
                    logger.error(line)
                else:
                    logger.info(line)
            await send(message)

        await self.app(scope, receive, send_with_logging)

"""
Prometheus Metrics Middleware for GateWatch
Request count and latency for the admin API
"""

import logging
import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..services.prometheus_metrics import get_metrics_instance

logger = logging.getLogger(__name__)

_UUID_SEGMENT = re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Records request count and latency per method, route and status.

    Exceptions that escape the app are counted as 500 and re-raised.
    """

    def __init__(self, app):
        super().__init__(app)
        self.metrics = get_metrics_instance()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        method = request.method
        endpoint = self._normalize_endpoint(request.url.path)

        try:
            response = await call_next(request)
        except Exception:
            self.metrics.record_http_request(method, endpoint, 500, time.time() - start_time)
            raise

        self.metrics.record_http_request(method, endpoint, response.status_code, time.time() - start_time)
        return response

    @staticmethod
    def _normalize_endpoint(path: str) -> str:
        """Collapse incident ids so label cardinality stays bounded"""
        return _UUID_SEGMENT.sub("/{id}", path)

"""
In-memory sliding window rate limiting
"""
import logging
import time
from collections import deque
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse

from projectpilot.config import settings

logger = logging.getLogger(__name__)

ClientKey = Tuple[str, str]


class RateLimiter:
    """Per client and endpoint class request counter with a sliding window"""

    def __init__(self, clock: Callable[[], float] = time.time, trust_proxy_headers: Optional[bool] = None):
        self.clock = clock
        self.trust_proxy_headers = settings.trust_proxy_headers if trust_proxy_headers is None else trust_proxy_headers
        self.requests: Dict[ClientKey, deque] = {}
        self.limits = {
            'ai': {'requests': settings.rate_limit_ai, 'window': settings.rate_limit_ai_window},
            'general': {'requests': settings.rate_limit_general, 'window': settings.rate_limit_general_window},
        }
        self.last_sweep = clock()

    def _get_client_key(self, request: Request, endpoint_type: str) -> ClientKey:
        client_ip = ''
        if self.trust_proxy_headers:
            client_ip = request.headers.get('X-Forwarded-For', '').split(',')[0].strip()
        if not client_ip:
            client_ip = request.client.host if request.client else 'unknown'

        return client_ip, endpoint_type

    def _get_endpoint_type(self, path: str) -> str:
        if path.startswith('/api/v1/ai/'):
            return 'ai'
        return 'general'

    def _cleanup_old_requests(self, client_key: ClientKey, window: int, current_time: float):
        """Remove requests outside the time window; forget the client once none remain"""
        requests = self.requests.get(client_key)
        if requests is None:
            return

        while requests and current_time - requests[0] > window:
            requests.popleft()
        if not requests:
            del self.requests[client_key]

    def prune(self):
        """Expire old requests for every client"""
        now = self.clock()
        for client_key in list(self.requests):
            self._cleanup_old_requests(client_key, self.limits[client_key[1]]['window'], now)
        self.last_sweep = now

    def check_rate_limit(self, request: Request) -> Tuple[bool, Dict]:
        """
        Check if request should be rate limited

        Returns:
            (allowed: bool, info: dict)
        """
        endpoint_type = self._get_endpoint_type(request.url.path)
        client_key = self._get_client_key(request, endpoint_type)

        limit_config = self.limits[endpoint_type]
        max_requests = limit_config['requests']
        window = limit_config['window']

        now = self.clock()
        # Idle clients are only seen by a full sweep
        if now - self.last_sweep >= min(limit['window'] for limit in self.limits.values()):
            self.prune()
        else:
            self._cleanup_old_requests(client_key, window, now)
        requests = self.requests.setdefault(client_key, deque())
        current_requests = len(requests)

        if current_requests >= max_requests:
            retry_after = max(1, int(window - (now - requests[0])))
            logger.warning(f"Rate limit exceeded for {client_key[0]} on {endpoint_type} endpoints")
            return False, {
                'endpoint_type': endpoint_type,
                'limit': max_requests,
                'window': window,
                'retry_after': retry_after,
            }

        requests.append(now)

        return True, {
            'limit': max_requests,
            'requests_remaining': max_requests - current_requests - 1,
            'reset_time': int(now + window),
        }

    def reset(self):
        self.requests.clear()
        self.last_sweep = self.clock()


# Global rate limiter instance
rate_limiter = RateLimiter()


async def rate_limit_middleware(request: Request, call_next):
    """Rate limiting middleware"""

    # Skip rate limiting for health checks and docs
    skip_paths = ['/api/v1/healthz', '/api/v1/readyz', '/docs', '/redoc', '/openapi.json']
    if any(skip_path in request.url.path for skip_path in skip_paths):
        return await call_next(request)

    allowed, info = rate_limiter.check_rate_limit(request)

    if not allowed:
        message = (
            "Too many AI requests. Please try again later."
            if info['endpoint_type'] == 'ai'
            else "Too many requests. Please try again later."
        )
        return JSONResponse(
            status_code=429,
            content={
                "success": False,
                "error": {
                    "code": "SYS_003",
                    "message": message,
                    "details": {"limit": info['limit'], "window": info['window']},
                },
                "timestamp": time.time(),
            },
            headers={'Retry-After': str(info['retry_after'])},
        )

    response = await call_next(request)

    response.headers['X-RateLimit-Limit'] = str(info['limit'])
    response.headers['X-RateLimit-Remaining'] = str(info['requests_remaining'])
    response.headers['X-RateLimit-Reset'] = str(info['reset_time'])

    return response

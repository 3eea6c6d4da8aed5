"""
Rate Limiter Utility
Token bucket shared by every client of the same upstream service
"""
import asyncio
import time
from typing import Dict


class RateLimiter:
    """Token bucket; a rate of 0 or less never waits"""

    _instances: Dict[str, "RateLimiter"] = {}

    def __init__(self, service_name: str, rate: int):
        self.service_name = service_name
        self.rate = rate  # requests per second
        self.tokens = float(max(rate, 0))
        self.last_update = time.monotonic()
        self.lock = asyncio.Lock()

    @classmethod
    def for_service(cls, service_name: str, rate: int) -> "RateLimiter":
        """Get or create the shared limiter for a service"""
        limiter = cls._instances.get(service_name)
        if limiter is None or limiter.rate != rate:
            limiter = cls(service_name, rate)
            cls._instances[service_name] = limiter
        return limiter

    @property
    def unlimited(self) -> bool:
        return self.rate <= 0

    async def acquire(self):
        """Take one token, sleeping until one is available"""
        if self.unlimited:
            return

        async with self.lock:
            now = time.monotonic()
            self.tokens = min(self.rate, self.tokens + (now - self.last_update) * self.rate)
            self.last_update = now

            if self.tokens < 1:
                await asyncio.sleep((1 - self.tokens) / self.rate)
                self.tokens = 1.0
                self.last_update = time.monotonic()
            self.tokens -= 1

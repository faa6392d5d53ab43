#!/usr/bin/env python3

import asyncio
import logging
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class ValidationScheduler:
    """Debounces validation requests, one pending timer per document URI.

    Scheduling a URI which already has a pending validation replaces it, so
    only the last request within ``delay`` seconds runs.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callable[[str], object]):
        self.loop = loop
        self.delay = delay
        self.callback = callback
        self._pending: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, uri: str):
        self.cancel(uri)
        self._pending[uri] = self.loop.call_later(self.delay, self._run, uri)

    def cancel(self, uri: str) -> bool:
        """Cancel the pending validation of ``uri``, return whether there was one."""
        handle = self._pending.pop(uri, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def pending(self, uri: str) -> bool:
        return uri in self._pending

    def cancel_all(self):
        for uri in list(self._pending):
            self.cancel(uri)

    def _run(self, uri: str):
        self._pending.pop(uri, None)
        try:
            self.callback(uri)
        except Exception as e:
            logger.error(f"Validation of {uri} failed: {e}", exc_info=True)

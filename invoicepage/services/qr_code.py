from __future__ import annotations

import base64
import logging
import threading
from collections import OrderedDict
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional

from reportlab.graphics import renderSVG
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing

logger = logging.getLogger(__name__)

_WAIT_TIMEOUT_SECONDS = 10.0
_CACHE_SIZE = 8

Renderer = Callable[[str], str]


def render_qr_svg(payload: str, *, size: int = 120, border: int = 1, level: str = "M") -> str:
    widget = QrCodeWidget(payload, barLevel=level, barBorder=border)
    x0, y0, x1, y1 = widget.getBounds()
    width = x1 - x0
    height = y1 - y0
    drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
    drawing.add(widget)
    return renderSVG.drawToString(drawing)


def to_data_url(svg: str) -> str:
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def encode_payload(payload: str, *, size: int = 120, border: int = 1, level: str = "M") -> str:
    return to_data_url(render_qr_svg(payload, size=size, border=border, level=level))


class QrCodeEncoder:
    """Encodes payloads off the caller's thread, keeping only the newest result.

    Every ``submit`` starts a new generation. A pending job of an older
    generation is cancelled; one that already runs may finish, but its result
    is dropped so an outdated code never becomes visible.
    """

    def __init__(
        self,
        *,
        size: int = 120,
        border: int = 1,
        level: str = "M",
        renderer: Optional[Renderer] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        cache_size: int = _CACHE_SIZE,
    ) -> None:
        self._renderer = renderer or (
            lambda payload: encode_payload(payload, size=size, border=border, level=level)
        )
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="qr")
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[Future] = None
        self._payload: Optional[str] = None
        self._data_url: Optional[str] = None
        self._cache: OrderedDict[str, str] = OrderedDict()
        self._cache_size = max(cache_size, 0)

    @property
    def payload(self) -> Optional[str]:
        with self._lock:
            return self._payload

    @property
    def cached_payloads(self) -> list[str]:
        """Cached payloads, least recently used first."""
        with self._lock:
            return list(self._cache)

    @property
    def data_url(self) -> Optional[str]:
        with self._lock:
            return self._data_url

    def submit(self, payload: Optional[str]) -> Optional[Future]:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._payload = payload
            self._data_url = None
            if payload is None:
                return None
            cached = self._cache.get(payload)
            if cached is not None:
                self._cache.move_to_end(payload)
                self._data_url = cached
                return None
            future = self._executor.submit(self._run, payload, generation)
            self._pending = future
        return future

    def _remember(self, payload: str, data_url: str) -> None:
        # caller holds the lock
        self._cache[payload] = data_url
        self._cache.move_to_end(payload)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)

    def _run(self, payload: str, generation: int) -> Optional[str]:
        # Runs on the worker; the result is stored before the future resolves.
        try:
            data_url = self._renderer(payload)
        except Exception as exc:
            logger.error("qr_code.encode_failed", exc_info=exc, extra={"generation": generation})
            with self._lock:
                if generation == self._generation:
                    self._pending = None
            return None

        with self._lock:
            self._remember(payload, data_url)
            if generation != self._generation:
                logger.debug(
                    "qr_code.encode_superseded",
                    extra={"generation": generation, "latest": self._generation},
                )
                return None
            self._data_url = data_url
            self._pending = None
        return data_url

    def wait(self, timeout: float = _WAIT_TIMEOUT_SECONDS) -> Optional[str]:
        """Block until the latest submitted payload is encoded."""
        with self._lock:
            pending = self._pending
        if pending is not None:
            try:
                pending.result(timeout=timeout)
            except CancelledError:
                logger.debug("qr_code.wait_cancelled")
            except FutureTimeoutError:
                logger.warning("qr_code.wait_timeout", extra={"timeout": timeout})
        return self.data_url

    def close(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        if self._owns_executor:
            self._executor.shutdown(wait=True)

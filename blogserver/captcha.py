"""Digit captcha images and an in-memory store of their answers."""

import base64
import io
import random
import string
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional, Tuple

from PIL import Image, ImageDraw

ID_LENGTH = 20
DEFAULT_LIMIT = 10240
DEFAULT_EXPIRATION = timedelta(minutes=10)

_ID_ALPHABET = string.ascii_letters + string.digits

_GLYPHS = {
    "0": ("01110", "10001", "10011", "10101", "11001", "10001", "01110"),
    "1": ("00100", "01100", "00100", "00100", "00100", "00100", "01110"),
    "2": ("01110", "10001", "00001", "00010", "00100", "01000", "11111"),
    "3": ("11110", "00001", "00001", "01110", "00001", "00001", "11110"),
    "4": ("00010", "00110", "01010", "10010", "11111", "00010", "00010"),
    "5": ("11111", "10000", "11110", "00001", "00001", "10001", "01110"),
    "6": ("00110", "01000", "10000", "11110", "10001", "10001", "01110"),
    "7": ("11111", "00001", "00010", "00100", "01000", "01000", "01000"),
    "8": ("01110", "10001", "10001", "01110", "10001", "10001", "01110"),
    "9": ("01110", "10001", "10001", "01111", "00001", "00010", "01100"),
}
_GLYPH_WIDTH = 5
_GLYPH_HEIGHT = 7


class MemoryStore:
    """Thread-safe store of captcha answers that expire and are capped in number."""

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        expiration: timedelta = DEFAULT_EXPIRATION,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._limit = limit
        self._ttl = expiration.total_seconds()
        self._clock = clock
        self._items: "OrderedDict[str, Tuple[float, str]]" = OrderedDict()
        self._lock = threading.Lock()

    def set(self, captcha_id: str, answer: str) -> None:
        """Remember the answer of a captcha."""
        with self._lock:
            now = self._clock()
            self._items[captcha_id] = (now, answer)
            self._items.move_to_end(captcha_id)
            self._collect(now)

    def _collect(self, now: float) -> None:
        while self._items:
            created, _ = next(iter(self._items.values()))
            if now - created < self._ttl:
                break
            self._items.popitem(last=False)
        while len(self._items) > self._limit:
            self._items.popitem(last=False)

    def get(self, captcha_id: str, clear: bool = False) -> Optional[str]:
        """Answer of a captcha, or None if unknown or expired; ``clear`` forgets it."""
        with self._lock:
            entry = self._items.get(captcha_id)
            if entry is None:
                return None
            created, answer = entry
            if self._clock() - created >= self._ttl:
                del self._items[captcha_id]
                return None
            if clear:
                del self._items[captcha_id]
            return answer

    def verify(self, captcha_id: str, answer: str, clear: bool = False) -> bool:
        """Whether ``answer`` is the stored answer of the captcha."""
        stored = self.get(captcha_id, clear)
        return stored is not None and stored == answer


@dataclass
class DigitCaptcha:
    """Generator of PNG captchas showing random decimal digits."""

    height: int
    width: int
    length: int
    max_skew: float
    dot_count: int
    store: MemoryStore = field(default_factory=MemoryStore)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("captcha width and height must be positive")
        if self.length < 0 or self.dot_count < 0:
            raise ValueError("captcha length and dot count must not be negative")

    def generate(self) -> Tuple[str, str]:
        """Create a captcha, store its answer and return its id and PNG data URI."""
        rng = random.SystemRandom()
        captcha_id = "".join(rng.choice(_ID_ALPHABET) for _ in range(ID_LENGTH))
        answer = "".join(rng.choice(string.digits) for _ in range(self.length))
        image = self._render(answer, rng)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        self.store.set(captcha_id, answer)
        return captcha_id, "data:image/png;base64," + encoded

    def _render(self, answer: str, rng: random.Random) -> Image.Image:
        image = Image.new("RGBA", (self.width, self.height), (255, 255, 255, 0))
        draw = ImageDraw.Draw(image)

        max_radius = max(1, min(self.width, self.height) // 20 + 1)
        for _ in range(self.dot_count):
            radius = rng.randint(1, max_radius)
            x = rng.randrange(self.width)
            y = rng.randrange(self.height)
            colour = tuple(rng.randint(120, 230) for _ in range(3)) + (255,)
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=colour)

        scale = max(
            1,
            min(
                self.width // ((len(answer) + 1) * (_GLYPH_WIDTH + 1)),
                self.height // (_GLYPH_HEIGHT + 2),
            ),
        )
        step = (_GLYPH_WIDTH + 1) * scale
        left = max(0, (self.width - len(answer) * step) // 2)
        ink = tuple(rng.randint(0, 100) for _ in range(3)) + (255,)
        free = max(0, self.height - _GLYPH_HEIGHT * scale)

        for position, digit in enumerate(answer):
            x0 = left + position * step
            y0 = rng.randint(0, free)
            skew = rng.uniform(-self.max_skew, self.max_skew) if self.max_skew else 0.0
            for row, bits in enumerate(_GLYPHS[digit]):
                shift = round(skew * (_GLYPH_HEIGHT / 2 - row) * scale)
                y = y0 + row * scale
                for column, bit in enumerate(bits):
                    if bit == "1":
                        x = x0 + column * scale + shift
                        draw.rectangle((x, y, x + scale - 1, y + scale - 1), fill=ink)
        return image
import base64
import io
from datetime import timedelta

import pytest
from PIL import Image

from blogserver.captcha import ID_LENGTH, DigitCaptcha, MemoryStore


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_store_set_and_get():
    store = MemoryStore()
    store.set("id", "123456")
    assert store.get("id") == "123456"
    assert store.get("id", clear=True) == "123456"
    assert store.get("id") is None


def test_store_verify():
    store = MemoryStore()
    store.set("id", "123456")
    assert store.verify("id", "000000") is False
    assert store.verify("id", "123456") is True
    assert store.verify("id", "123456", clear=True) is True
    assert store.verify("id", "123456") is False


def test_verify_with_clear_forgets_on_failure():
    store = MemoryStore()
    store.set("id", "123456")
    assert store.verify("id", "999999", clear=True) is False
    assert store.get("id") is None


def test_unknown_id_never_verifies():
    assert MemoryStore().verify("missing", "") is False


def test_store_expiration():
    clock = FakeClock()
    store = MemoryStore(expiration=timedelta(minutes=10), clock=clock)
    store.set("id", "42")
    clock.now = 599
    assert store.get("id") == "42"
    clock.now = 600
    assert store.get("id") is None


def test_store_limit_drops_oldest():
    store = MemoryStore(limit=2)
    store.set("a", "1")
    store.set("b", "2")
    store.set("c", "3")
    assert store.get("a") is None
    assert store.get("b") == "2"
    assert store.get("c") == "3"


def test_generate_stores_digit_answer():
    store = MemoryStore()
    captcha = DigitCaptcha(height=80, width=240, length=6, max_skew=0.7, dot_count=80, store=store)
    captcha_id, data_uri = captcha.generate()
    assert len(captcha_id) == ID_LENGTH
    assert captcha_id.isalnum()
    answer = store.get(captcha_id)
    assert len(answer) == 6
    assert answer.isdigit()
    assert store.verify(captcha_id, answer, clear=True)


def test_generate_produces_png_of_configured_size():
    captcha = DigitCaptcha(height=80, width=240, length=6, max_skew=0.7, dot_count=80)
    _, data_uri = captcha.generate()
    prefix = "data:image/png;base64,"
    assert data_uri.startswith(prefix)
    image = Image.open(io.BytesIO(base64.b64decode(data_uri[len(prefix):])))
    assert image.format == "PNG"
    assert image.size == (240, 80)


def test_generated_ids_differ():
    captcha = DigitCaptcha(height=40, width=120, length=4, max_skew=0.0, dot_count=0)
    ids = {captcha.generate()[0] for _ in range(5)}
    assert len(ids) == 5


@pytest.mark.parametrize(
    "height, width, length, dots",
    [(0, 240, 6, 10), (80, 0, 6, 10), (80, 240, -1, 10), (80, 240, 6, -1)],
)
def test_invalid_dimensions(height, width, length, dots):
    with pytest.raises(ValueError):
        DigitCaptcha(height=height, width=width, length=length, max_skew=0.7, dot_count=dots)
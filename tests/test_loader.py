import queue
import threading

from api.api_client import ApiError
from ui.components.loader import BackgroundLoader


class FakeWidget:
    """Runs after() callbacks immediately and lets the test wait for them."""

    def __init__(self):
        self.delivered = queue.Queue()

    def after(self, _ms, callback):
        callback()
        self.delivered.put(True)

    def winfo_exists(self):
        return True

    def wait(self, count=1):
        for _ in range(count):
            self.delivered.get(timeout=2)


def test_result_reaches_on_done():
    widget = FakeWidget()
    done = []
    BackgroundLoader(widget).run(lambda: 42, done.append)
    widget.wait()
    assert done == [42]


def test_api_error_message_reaches_on_error():
    widget = FakeWidget()
    done, errors = [], []

    def fetch():
        raise ApiError("Wallet not found", "ERROR", 404)

    BackgroundLoader(widget).run(fetch, done.append, errors.append)
    widget.wait()
    assert errors == ["Wallet not found"]
    assert done == []


def test_unexpected_exception_still_reaches_on_error():
    widget = FakeWidget()
    done, errors = [], []

    def fetch():
        return float({"balance": "n/a"}["balance"])

    BackgroundLoader(widget).run(fetch, done.append, errors.append)
    widget.wait()
    assert len(errors) == 1
    assert "went wrong" in errors[0]
    assert done == []


def test_superseded_result_is_dropped():
    widget = FakeWidget()
    loader = BackgroundLoader(widget)
    release = threading.Event()
    done = []

    def slow():
        release.wait(2)
        return "old"

    loader.run(slow, done.append)
    loader.run(lambda: "new", done.append)
    widget.wait()
    release.set()
    widget.wait()
    assert done == ["new"]

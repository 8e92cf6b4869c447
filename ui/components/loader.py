import logging
import threading

from api.api_client import ApiError

logger = logging.getLogger(__name__)

_UNEXPECTED_ERROR = "Something went wrong while loading. Please try again."


class BackgroundLoader:
    """Runs fetch() on a daemon thread and hands the result back on the Tk thread.

    Each run() bumps a generation counter; results of superseded runs are
    dropped. Session-expired errors are not delivered since the window is
    about to be replaced by the login screen.
    """

    def __init__(self, widget):
        self._widget = widget
        self._gen = 0

    def run(self, fetch, on_done, on_error=None):
        self._gen += 1
        gen = self._gen

        def work():
            try:
                result = fetch()
            except ApiError as e:
                if e.is_session_expired:
                    return
                logger.warning("Background load failed: %s", e.message)
                self._fail(gen, on_error, e.message)
                return
            except Exception:
                logger.exception("Background load crashed")
                self._fail(gen, on_error, _UNEXPECTED_ERROR)
                return
            self._widget.after(0, lambda: self._deliver(gen, on_done, result))

        threading.Thread(target=work, daemon=True).start()

    def _fail(self, gen: int, on_error, message: str):
        if on_error:
            self._widget.after(0, lambda: self._deliver(gen, on_error, message))

    def _deliver(self, gen: int, callback, value):
        if gen != self._gen:
            return  # superseded by a newer load
        if not self._widget.winfo_exists():
            return
        callback(value)

import signal
import logging

log = logging.getLogger(__name__)


class CtrlCHandler:
    """
    Handle Ctrl+C so the demo loop can tear the pipeline down cleanly
    instead of leaving a frame callback writing into a discarded state.
    """
    def __init__(self):
        self.should_stop = False
        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, sig, frame):
        """Callback executed when Ctrl+C is detected"""
        log.info("Interrupt signal detected, closing cleanly...")
        self.should_stop = True

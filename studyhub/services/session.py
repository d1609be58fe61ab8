import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks the signed-in identity of one client and drives the loads.

    A non-null identity loads the document catalog and opens the live
    question watch; signing out closes the watch.
    """

    def __init__(self, channel, catalog, board, on_identity=None):
        self._channel = channel
        self._catalog = catalog
        self._board = board
        self._on_identity = on_identity
        self.identity = None

    @property
    def is_authenticated(self):
        return self.identity is not None

    @contextmanager
    def listening(self):
        """Hold the single session-change listener for the block's duration."""
        unsubscribe = self._channel.on_session_change(self._handle_change)
        try:
            yield self
        finally:
            unsubscribe()
            self._board.unsubscribe()

    @property
    def session_cookie(self):
        return self._channel.session_cookie

    def sign_out(self):
        """End the session. The listener fires with None and the watch closes."""
        self._channel.sign_out()

    def _handle_change(self, identity):
        self.identity = identity
        if self._on_identity:
            self._on_identity(identity)
        if identity is None:
            logger.debug('Signed out; closing question watch')
            self._board.unsubscribe()
            return
        logger.info('Session active for %s', identity.uid)
        self._catalog.load()
        self._board.subscribe()

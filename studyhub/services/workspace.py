import logging
from contextlib import ExitStack

from studyhub.services.catalog import DocumentCatalog
from studyhub.services.questions import QuestionBoard
from studyhub.services.session import SessionManager

logger = logging.getLogger(__name__)


class Workspace:
    """State of one connected browser: identity, documents and questions.

    `emit(event, payload)` pushes updates to that browser. It may be called
    from the Firestore watch thread.
    """

    def __init__(self, store, session_cookie, emit):
        self._emit = emit
        self.catalog = DocumentCatalog(store, on_change=self._documents_changed)
        self.board = QuestionBoard(store, on_change=self._questions_changed)
        self.session = SessionManager(
            store.open_session(session_cookie),
            self.catalog,
            self.board,
            on_identity=self._identity_changed,
        )
        self._stack = None

    @property
    def identity(self):
        return self.session.identity

    def open(self):
        self._stack = ExitStack()
        self._stack.enter_context(self.session.listening())
        return self

    def close(self):
        if self._stack is not None:
            self._stack.close()
            self._stack = None

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc):
        self.close()

    def search(self, term):
        return [d.to_payload() for d in self.catalog.search(term)]

    def _identity_changed(self, identity):
        self._emit('session', {'user': identity.to_payload() if identity else None})

    def _documents_changed(self, documents):
        self._emit('documents', {'documents': [d.to_payload() for d in documents]})

    def _questions_changed(self, questions):
        self._emit('questions', {'questions': [q.to_payload() for q in questions]})

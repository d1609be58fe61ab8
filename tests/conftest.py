# tests/conftest.py
"""
Pytest configuration and fixtures for the StudyHub test suite.

Provides:
- An in-memory RemoteStore stand-in (collections, blobs, live watches, sessions)
- Flask app / test client wired to that store
- Signed-in identities

Tests never reach Firebase; the fake mirrors the RemoteStore operations the
controllers use, including server timestamps and array-union appends.
"""

import copy
import io
import itertools
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import pytest
from werkzeug.datastructures import FileStorage

from config import Config
from studyhub import create_app
from studyhub.decorators import SESSION_KEY
from studyhub.firestore_models import Identity
from studyhub.remote_store import DESCENDING, RemoteStore, SessionChannel


class FakeRemoteStore:
    """In-memory RemoteStore with synchronous snapshot delivery."""

    SERVER_TIMESTAMP = RemoteStore.SERVER_TIMESTAMP

    def __init__(self):
        self.collections = defaultdict(dict)
        self.blobs = {}
        self.calls = []
        self._watchers = defaultdict(list)
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)
        self._tokens = {}
        self._cookies = {}
        self.fail_insert = False

    # -- identity ----------------------------------------------------------

    def register_user(self, uid, name, picture=None):
        """Register a user with the fake provider. Returns an ID token."""
        token = f'id-token-{uid}'
        self._tokens[token] = {'uid': uid, 'name': name, 'picture': picture}
        return token

    def cookie_for(self, identity):
        token = self.register_user(identity.uid, identity.display_name, identity.photo_url)
        return self.exchange_id_token(token)[1]

    def open_session(self, session_cookie=None):
        return SessionChannel(self, session_cookie)

    def exchange_id_token(self, id_token):
        claims = self._tokens.get(id_token)
        if claims is None:
            raise ValueError('invalid ID token')
        cookie = f'session-{claims["uid"]}'
        self._cookies[cookie] = claims
        return Identity.from_claims(claims), cookie

    def verify_session(self, session_cookie):
        claims = self._cookies.get(session_cookie)
        return Identity.from_claims(claims) if claims else None

    # -- database ----------------------------------------------------------

    def _server_time(self):
        return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._ticks))

    def _rows(self, collection, order_by, direction):
        rows = [dict(copy.deepcopy(fields), id=doc_id)
                for doc_id, fields in self.collections[collection].items()]
        rows.sort(key=lambda r: r[order_by], reverse=(direction == DESCENDING))
        return rows

    def _notify(self, collection):
        for order_by, direction, callback in list(self._watchers[collection]):
            callback(self._rows(collection, order_by, direction))

    def query_all(self, collection, order_by, direction=DESCENDING):
        self.calls.append(('query_all', collection))
        return self._rows(collection, order_by, direction)

    def subscribe(self, collection, order_by, direction, callback):
        self.calls.append(('subscribe', collection))
        watcher = (order_by, direction, callback)
        self._watchers[collection].append(watcher)
        callback(self._rows(collection, order_by, direction))

        def unsubscribe():
            self.calls.append(('unsubscribe', collection))
            self._watchers[collection].remove(watcher)
        return unsubscribe

    def watcher_count(self, collection):
        return len(self._watchers[collection])

    def insert(self, collection, fields):
        self.calls.append(('insert', collection))
        if self.fail_insert:
            raise RuntimeError('permission denied')
        fields = {k: self._server_time() if v is self.SERVER_TIMESTAMP else v
                  for k, v in fields.items()}
        doc_id = f'{collection}-{next(self._ids)}'
        self.collections[collection][doc_id] = fields
        self._notify(collection)
        return doc_id

    def append_to_field(self, collection, doc_id, field, value):
        self.calls.append(('append_to_field', collection))
        values = self.collections[collection][doc_id].setdefault(field, [])
        if value not in values:
            values.append(copy.deepcopy(value))
        self._notify(collection)

    # -- blobs -------------------------------------------------------------

    def store(self, path, data, content_type=None):
        self.calls.append(('store', path))
        self.blobs[path] = data if isinstance(data, bytes) else data.read()
        return path

    def resolve_url(self, reference):
        return f'https://files.example.test/{reference}'

    def count(self, op):
        return sum(1 for call in self.calls if call[0] == op)


class StudyHubTestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'WARNING'
    SOCKETIO_ASYNC_MODE = 'threading'


def _make_file(filename='notes.pdf', data=b'%PDF-1.4 test', content_type='application/pdf'):
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=content_type)


# ============== Store / identity fixtures ==============

@pytest.fixture
def make_file():
    return _make_file


@pytest.fixture
def store():
    return FakeRemoteStore()


@pytest.fixture
def alice():
    return Identity(uid='uid-alice', display_name='Alice Nguyen', photo_url='https://img.test/a.png')


@pytest.fixture
def bob():
    return Identity(uid='uid-bob', display_name='Bob Tran')


# ============== Flask fixtures ==============

@pytest.fixture
def app(store):
    return create_app(StudyHubTestConfig, store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client, store):
    """Put a valid session cookie for `identity` into the test client."""
    def _login(identity):
        with client.session_transaction() as sess:
            sess[SESSION_KEY] = store.cookie_for(identity)
        return client
    return _login

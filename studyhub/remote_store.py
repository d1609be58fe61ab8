"""
Remote store adapter.

Wraps Firestore, Firebase Storage and Firebase Authentication behind the
handful of operations the controllers use. One RemoteStore is built at
startup by `firebase_init.init_firebase()` and handed by reference to every
controller; nothing else talks to the Firebase clients directly.
"""

import logging
from datetime import timedelta

from firebase_admin import exceptions as firebase_exceptions
from google.cloud import firestore

from studyhub.firestore_models import Identity
from studyhub.services import storage

logger = logging.getLogger(__name__)

ASCENDING = firestore.Query.ASCENDING
DESCENDING = firestore.Query.DESCENDING


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _doc_to_dict(doc_snapshot):
    """Convert a Firestore DocumentSnapshot to a dict with 'id' field."""
    if not doc_snapshot.exists:
        return None
    d = doc_snapshot.to_dict()
    d['id'] = doc_snapshot.id
    return d


class RemoteStore:
    SERVER_TIMESTAMP = firestore.SERVER_TIMESTAMP

    def __init__(self, db, bucket, auth, session_ttl=timedelta(days=5)):
        self._db = db
        self._bucket = bucket
        self._auth = auth
        self.session_ttl = session_ttl

    # ========================================================================
    # Identity
    # ========================================================================

    def open_session(self, session_cookie=None):
        """Identity channel for one client, seeded from its session cookie."""
        return SessionChannel(self, session_cookie)

    def exchange_id_token(self, id_token):
        """Verify an ID token from the popup sign-in and mint a session cookie.

        Returns (Identity, session_cookie). Provider errors propagate.
        """
        claims = self._auth.verify_id_token(id_token)
        session_cookie = self._auth.create_session_cookie(id_token, expires_in=self.session_ttl)
        return Identity.from_claims(claims), session_cookie

    def verify_session(self, session_cookie):
        """Return the Identity behind a session cookie, or None."""
        if not session_cookie:
            return None
        try:
            claims = self._auth.verify_session_cookie(session_cookie, check_revoked=True)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.info('Rejected session cookie: %s', e)
            return None
        return Identity.from_claims(claims)

    # ========================================================================
    # Database
    # ========================================================================

    def _ordered(self, collection, order_by, direction):
        return self._db.collection(collection).order_by(order_by, direction=direction)

    def query_all(self, collection, order_by, direction=DESCENDING):
        """One-shot fetch of a whole collection. Returns a list of dicts."""
        query = self._ordered(collection, order_by, direction)
        return [_doc_to_dict(doc) for doc in query.stream()]

    def subscribe(self, collection, order_by, direction, callback):
        """Watch a whole collection.

        `callback` receives the full ordered result set (list of dicts) on
        every change. Returns a function that cancels the watch.
        """
        query = self._ordered(collection, order_by, direction)

        def on_snapshot(docs, changes, read_time):
            try:
                callback([_doc_to_dict(doc) for doc in docs])
            except Exception:
                logger.exception('Snapshot handler for %s failed', collection)

        watch = query.on_snapshot(on_snapshot)
        logger.debug('Watching %s ordered by %s', collection, order_by)
        return watch.unsubscribe

    def insert(self, collection, fields):
        """Add a document with a generated ID. Returns the ID."""
        _, doc_ref = self._db.collection(collection).add(fields)
        return doc_ref.id

    def append_to_field(self, collection, doc_id, field, value):
        """Atomically append `value` to an array field."""
        self._db.collection(collection).document(doc_id).update({
            field: firestore.ArrayUnion([value]),
        })

    # ========================================================================
    # Blob storage
    # ========================================================================

    def store(self, path, data, content_type=None):
        """Upload bytes or a file-like object. Returns the blob reference."""
        return storage.upload_file(self._bucket, data, path, content_type)

    def resolve_url(self, reference):
        url = storage.get_download_url(self._bucket, reference)
        if url is None:
            raise FileNotFoundError(f'No stored blob at {reference}')
        return url


class SessionChannel:
    """Identity state of one connected client.

    Listeners fire immediately with the current identity (None when signed
    out) and again on every sign-in or sign-out.
    """

    def __init__(self, store, session_cookie=None):
        self._store = store
        self._listeners = []
        self.identity = store.verify_session(session_cookie)
        self.session_cookie = session_cookie if self.identity else None

    def on_session_change(self, callback):
        self._listeners.append(callback)
        callback(self.identity)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def sign_in_interactive(self, id_token):
        identity, session_cookie = self._store.exchange_id_token(id_token)
        self._set(identity, session_cookie)
        return session_cookie

    def sign_out(self):
        self._set(None, None)

    def _set(self, identity, session_cookie):
        self.identity = identity
        self.session_cookie = session_cookie
        for listener in list(self._listeners):
            listener(identity)

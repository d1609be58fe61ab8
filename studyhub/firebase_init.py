import os
import logging
from datetime import timedelta

import firebase_admin
from firebase_admin import credentials, firestore, storage, auth

from studyhub.remote_store import RemoteStore

logger = logging.getLogger(__name__)

_app = None
_store = None


def init_firebase(app_config=None):
    """Initialize the Firebase app once and build the process-wide RemoteStore."""
    global _app, _store

    if _store is not None:
        return _store

    cred_path = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json')

    if os.path.exists(cred_path):
        cred = credentials.Certificate(cred_path)
    else:
        cred = credentials.ApplicationDefault()

    bucket_name = ''
    if app_config:
        bucket_name = app_config.get('FIREBASE_STORAGE_BUCKET', '')
    if not bucket_name:
        bucket_name = os.environ.get('FIREBASE_STORAGE_BUCKET', '')

    options = {}
    if bucket_name:
        options['storageBucket'] = bucket_name

    _app = firebase_admin.initialize_app(cred, options=options if options else None)
    db = firestore.client()

    bucket = None
    if bucket_name:
        bucket = storage.bucket()
    else:
        logger.warning('FIREBASE_STORAGE_BUCKET is not set; uploads will fail')

    cookie_days = 5
    if app_config:
        cookie_days = app_config.get('SESSION_COOKIE_DAYS', cookie_days)

    _store = RemoteStore(db, bucket, auth, session_ttl=timedelta(days=cookie_days))
    return _store

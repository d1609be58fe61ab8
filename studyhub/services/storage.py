import time
import uuid
from urllib.parse import quote

DOWNLOAD_TOKENS_KEY = 'firebaseStorageDownloadTokens'
DOWNLOAD_URL_TEMPLATE = 'https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{path}?alt=media&token={token}'


def upload_file(bucket, file_data, destination_path, content_type=None):
    """Upload file bytes to Firebase Storage.

    The blob is tagged with a Firebase download token so a permanent
    download URL can be built for it later.

    Args:
        bucket: the storage bucket handle
        file_data: bytes or file-like object
        destination_path: path in the bucket (e.g. 'docs/1700000000000_notes.pdf')
        content_type: MIME type

    Returns:
        The storage path (same as destination_path)
    """
    blob = bucket.blob(destination_path)
    blob.metadata = {DOWNLOAD_TOKENS_KEY: str(uuid.uuid4())}
    if isinstance(file_data, bytes):
        blob.upload_from_string(file_data, content_type=content_type)
    else:
        blob.upload_from_file(file_data, content_type=content_type)
    return destination_path


def get_download_url(bucket, storage_path):
    """Get the tokenized download URL for a stored blob.

    Blobs uploaded without a token (e.g. through the console) get one
    assigned on first resolve.

    Returns:
        URL string, or None if the blob does not exist
    """
    blob = bucket.get_blob(storage_path)
    if blob is None:
        return None
    metadata = dict(blob.metadata or {})
    token = metadata.get(DOWNLOAD_TOKENS_KEY)
    if not token:
        token = str(uuid.uuid4())
        metadata[DOWNLOAD_TOKENS_KEY] = token
        blob.metadata = metadata
        blob.patch()
    return DOWNLOAD_URL_TEMPLATE.format(
        bucket=bucket.name,
        path=quote(storage_path, safe=''),
        token=token.split(',')[0],
    )


def _timed_path(prefix, filename):
    # Same-millisecond uploads of the same file name share a path.
    return f'{prefix}/{int(time.time() * 1000)}_{filename}'


def document_blob_path(filename):
    """Storage path for an uploaded study document."""
    return _timed_path('docs', filename)


def question_image_path(filename):
    """Storage path for an image attached to a question."""
    return _timed_path('qa', filename)

import logging

from studyhub.errors import SignInRequired, ValidationError
from studyhub.firestore_models import StudyDocument
from studyhub.remote_store import DESCENDING
from studyhub.services.storage import document_blob_path

logger = logging.getLogger(__name__)

COLLECTION = 'documents'


class DocumentCatalog:
    """In-memory projection of the `documents` collection, newest first.

    Refreshed only by explicit `load()` calls; there is no live watch on
    documents.
    """

    def __init__(self, store, on_change=None):
        self._store = store
        self._on_change = on_change
        self.documents = []

    def load(self):
        """Replace the held list with a fresh full fetch."""
        rows = self._store.query_all(COLLECTION, 'timestamp', DESCENDING)
        self.documents = [StudyDocument.from_dict(row, row['id']) for row in rows]
        logger.debug('Loaded %d documents', len(self.documents))
        if self._on_change:
            self._on_change(self.documents)
        return self.documents

    def upload(self, title, subject, file, uploader):
        """Store the file, then insert its catalog record.

        The two remote writes are not transactional. If the insert fails the
        stored blob is left behind and the error propagates.

        Returns:
            The new document ID
        """
        title = (title or '').strip()
        subject = (subject or '').strip()
        if not title or not subject or not file or not getattr(file, 'filename', ''):
            raise ValidationError()
        if uploader is None:
            raise SignInRequired()

        path = document_blob_path(file.filename)
        reference = self._store.store(path, file.read(), getattr(file, 'content_type', None))
        url = self._store.resolve_url(reference)

        record = StudyDocument(
            title=title,
            subject=subject,
            url=url,
            file_name=file.filename,
            uploaded_by=uploader.display_name,
            user_id=uploader.uid,
        )
        try:
            doc_id = self._store.insert(COLLECTION, record.to_dict())
        except Exception:
            logger.error('Insert failed after storing %s; blob left orphaned', reference)
            raise

        logger.info('User %s uploaded document %s (%s)', uploader.uid, doc_id, reference)
        self.load()
        return doc_id

    def search(self, term):
        """Filter the held list by title or subject. Never touches the store."""
        term = (term or '').strip()
        if not term:
            return list(self.documents)
        return [d for d in self.documents if d.matches(term)]

    def get(self, doc_id):
        for document in self.documents:
            if document.id == doc_id:
                return document
        return None

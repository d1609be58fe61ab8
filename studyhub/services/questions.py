import logging

from studyhub.errors import SignInRequired, ValidationError
from studyhub.firestore_models import Answer, Question, _now
from studyhub.remote_store import DESCENDING
from studyhub.services.storage import question_image_path

logger = logging.getLogger(__name__)

COLLECTION = 'questions'


class QuestionBoard:
    """In-memory projection of the `questions` collection, newest first.

    While subscribed, every server snapshot replaces `questions` wholesale.
    Writes never touch the held list; the next snapshot carries them.
    """

    def __init__(self, store, on_change=None):
        self._store = store
        self._on_change = on_change
        self._unsubscribe = None
        self.questions = []

    @property
    def subscribed(self):
        return self._unsubscribe is not None

    def _replace(self, rows):
        self.questions = [Question.from_dict(row, row['id']) for row in rows]
        if self._on_change:
            self._on_change(self.questions)

    def load(self):
        """One-shot fetch, for rendering before a live channel exists."""
        self._replace(self._store.query_all(COLLECTION, 'timestamp', DESCENDING))
        return self.questions

    def subscribe(self):
        """Open the live watch. Re-subscribing replaces the old watch."""
        self.unsubscribe()
        self._unsubscribe = self._store.subscribe(COLLECTION, 'timestamp', DESCENDING, self._replace)

    def unsubscribe(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    close = unsubscribe

    def ask(self, text, image, asker):
        """Post a question, uploading the optional image first.

        Returns:
            The new question ID
        """
        if not text or not text.strip():
            raise ValidationError('Vui lòng nhập câu hỏi!')
        if asker is None:
            raise SignInRequired()

        reference = None
        image_url = ''
        if image and getattr(image, 'filename', ''):
            reference = self._store.store(
                question_image_path(image.filename),
                image.read(),
                getattr(image, 'content_type', None),
            )
            image_url = self._store.resolve_url(reference)

        record = Question(
            question=text,
            image_url=image_url,
            asked_by=asker.display_name,
            user_id=asker.uid,
        )
        try:
            question_id = self._store.insert(COLLECTION, record.to_dict())
        except Exception:
            if reference is not None:
                logger.error('Insert failed after storing %s; blob left orphaned', reference)
            raise
        logger.info('User %s asked question %s', asker.uid, question_id)
        return question_id

    def answer(self, question_id, text, responder):
        """Append an answer with an array-union update.

        The answer is stamped with the local clock; Firestore rejects
        server-timestamp sentinels inside array elements.
        """
        if not text or not text.strip():
            raise ValidationError('Vui lòng nhập câu trả lời!')
        if responder is None:
            raise SignInRequired()

        entry = Answer(text=text, answered_by=responder.display_name, timestamp=_now())
        self._store.append_to_field(COLLECTION, question_id, 'answers', entry.to_dict())
        logger.info('User %s answered question %s', responder.uid, question_id)

    def get(self, question_id):
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

"""
Firestore document models using Python dataclasses.

Each stored model includes:
  - An `id` field for the Firestore document ID
  - A `to_dict()` instance method producing the Firestore write form
  - A `from_dict(data, doc_id)` classmethod for deserialization
  - A `to_payload()` method producing a JSON-safe dict for Socket.IO

Field names in the write form match the existing `documents` and
`questions` collections (camelCase), attribute names are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.cloud.firestore import SERVER_TIMESTAMP


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _parse_datetime(value) -> Optional[datetime]:
    """Convert a value to datetime. Accepts datetime objects, ISO-format
    strings, and Firestore DatetimeWithNanoseconds objects."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        value = value.replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            return None
    return None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ===========================================================================
# 1. Identity  (not stored, built from verified token claims)
# ===========================================================================

@dataclass(frozen=True)
class Identity:
    uid: str
    display_name: str = ""
    photo_url: Optional[str] = None

    @property
    def first_name(self) -> str:
        parts = self.display_name.split()
        return parts[0] if parts else ""

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> Identity:
        return cls(
            uid=claims["uid"],
            display_name=claims.get("name") or claims.get("email") or "",
            photo_url=claims.get("picture"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "display_name": self.display_name,
            "first_name": self.first_name,
            "photo_url": self.photo_url,
        }


# ===========================================================================
# 2. StudyDocument  (collection: documents)
# ===========================================================================

@dataclass
class StudyDocument:
    id: Optional[str] = None
    title: str = ""
    subject: str = ""
    url: str = ""
    file_name: str = ""
    uploaded_by: str = ""        # denormalized display name
    user_id: Optional[str] = None
    timestamp: Optional[datetime] = None  # server-assigned

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "subject": self.subject,
            "url": self.url,
            "fileName": self.file_name,
            "uploadedBy": self.uploaded_by,
            "userId": self.user_id,
            "timestamp": self.timestamp or SERVER_TIMESTAMP,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> StudyDocument:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            subject=data.get("subject", ""),
            url=data.get("url", ""),
            file_name=data.get("fileName", ""),
            uploaded_by=data.get("uploadedBy", ""),
            user_id=data.get("userId"),
            timestamp=_parse_datetime(data.get("timestamp")),
        )

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on title or subject."""
        needle = term.lower()
        return needle in self.title.lower() or needle in self.subject.lower()

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subject": self.subject,
            "url": self.url,
            "file_name": self.file_name,
            "uploaded_by": self.uploaded_by,
            "user_id": self.user_id,
            "timestamp": _isoformat(self.timestamp),
        }


# ===========================================================================
# 3. Answer  (embedded in questions.answers, append-only)
# ===========================================================================

@dataclass
class Answer:
    text: str = ""
    answered_by: str = ""
    timestamp: Optional[datetime] = None  # responder's local clock

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "answeredBy": self.answered_by,
            "timestamp": self.timestamp or _now(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Answer:
        return cls(
            text=data.get("text", ""),
            answered_by=data.get("answeredBy", ""),
            timestamp=_parse_datetime(data.get("timestamp")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "answered_by": self.answered_by,
            "timestamp": _isoformat(self.timestamp),
        }


# ===========================================================================
# 4. Question  (collection: questions)
# ===========================================================================

@dataclass
class Question:
    id: Optional[str] = None
    question: str = ""
    image_url: str = ""
    asked_by: str = ""           # denormalized display name
    user_id: Optional[str] = None
    answers: List[Answer] = field(default_factory=list)
    timestamp: Optional[datetime] = None  # server-assigned

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "imageUrl": self.image_url,
            "askedBy": self.asked_by,
            "userId": self.user_id,
            "answers": [a.to_dict() for a in self.answers],
            "timestamp": self.timestamp or SERVER_TIMESTAMP,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Question:
        return cls(
            id=doc_id,
            question=data.get("question", ""),
            image_url=data.get("imageUrl") or "",
            asked_by=data.get("askedBy", ""),
            user_id=data.get("userId"),
            answers=[Answer.from_dict(a) for a in data.get("answers") or []],
            timestamp=_parse_datetime(data.get("timestamp")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "image_url": self.image_url,
            "asked_by": self.asked_by,
            "user_id": self.user_id,
            "answers": [a.to_payload() for a in self.answers],
            "timestamp": _isoformat(self.timestamp),
        }

"""
Document models for the flat JSON collections.

Each model includes:
  - An `id` field (stored as ``_id`` for catalog collections, ``id`` otherwise)
  - A `to_dict()` instance method producing the camelCase on-disk shape
  - A `from_dict(data)` classmethod for deserialization

Timestamps are ISO-8601 UTC strings so rows round-trip through JSON
unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def now_iso() -> str:
    """Current UTC time as an ISO string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_datetime(value) -> Optional[datetime]:
    """Convert an ISO string (with or without trailing Z) to datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    return None


# ===========================================================================
# Catalog: Subject -> Grade -> Book -> Lesson
# ===========================================================================

@dataclass
class Subject:
    id: Optional[str] = None
    name: str = ""
    slug: str = ""
    icon: str = "📚"
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "slug": self.slug,
            "icon": self.icon,
            "description": self.description,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "createdAt": self.created_at or now_iso(),
            "updatedAt": self.updated_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Subject:
        return cls(
            id=data.get("_id"),
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            icon=data.get("icon", "📚"),
            description=data.get("description"),
            sort_order=data.get("sortOrder", 0),
            is_active=data.get("isActive", True),
            created_by=data.get("createdBy"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Grade:
    id: Optional[str] = None
    subject_id: str = ""
    name: str = ""
    slug: str = ""
    level: int = 1
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "subjectId": self.subject_id,
            "name": self.name,
            "slug": self.slug,
            "level": self.level,
            "description": self.description,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "createdAt": self.created_at or now_iso(),
            "updatedAt": self.updated_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Grade:
        return cls(
            id=data.get("_id"),
            subject_id=data.get("subjectId", ""),
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            level=data.get("level", 1),
            description=data.get("description"),
            sort_order=data.get("sortOrder", 0),
            is_active=data.get("isActive", True),
            created_by=data.get("createdBy"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Book:
    id: Optional[str] = None
    grade_id: str = ""
    subject_id: str = ""
    name: str = ""
    publisher: str = "Unknown"
    slug: str = ""
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    publication_year: Optional[int] = None
    sort_order: int = 0
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "gradeId": self.grade_id,
            "subjectId": self.subject_id,
            "name": self.name,
            "publisher": self.publisher,
            "slug": self.slug,
            "description": self.description,
            "coverImageUrl": self.cover_image_url,
            "publicationYear": self.publication_year,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "createdAt": self.created_at or now_iso(),
            "updatedAt": self.updated_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Book:
        return cls(
            id=data.get("_id"),
            grade_id=data.get("gradeId", ""),
            subject_id=data.get("subjectId", ""),
            name=data.get("name", ""),
            publisher=data.get("publisher", "Unknown"),
            slug=data.get("slug", ""),
            description=data.get("description"),
            cover_image_url=data.get("coverImageUrl"),
            publication_year=data.get("publicationYear"),
            sort_order=data.get("sortOrder", 0),
            is_active=data.get("isActive", True),
            created_by=data.get("createdBy"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Lesson:
    id: Optional[str] = None
    book_id: str = ""
    grade_id: str = ""
    subject_id: str = ""
    name: str = ""
    slug: str = ""
    content: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "bookId": self.book_id,
            "gradeId": self.grade_id,
            "subjectId": self.subject_id,
            "name": self.name,
            "slug": self.slug,
            "content": self.content,
            "description": self.description,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "createdAt": self.created_at or now_iso(),
            "updatedAt": self.updated_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Lesson:
        return cls(
            id=data.get("_id"),
            book_id=data.get("bookId", ""),
            grade_id=data.get("gradeId", ""),
            subject_id=data.get("subjectId", ""),
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            content=data.get("content"),
            description=data.get("description"),
            sort_order=data.get("sortOrder", 0),
            is_active=data.get("isActive", True),
            created_by=data.get("createdBy"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


# ===========================================================================
# Q&A
# ===========================================================================

@dataclass
class Question:
    id: Optional[str] = None
    lesson_id: str = ""
    title: str = ""
    content: str = ""
    slug: str = ""
    created_by: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lessonId": self.lesson_id,
            "title": self.title,
            "content": self.content,
            "slug": self.slug,
            "createdBy": self.created_by,
            "createdAt": self.created_at or now_iso(),
            "updatedAt": self.updated_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Question:
        return cls(
            id=data.get("id"),
            lesson_id=data.get("lessonId", ""),
            title=data.get("title", ""),
            content=data.get("content", ""),
            slug=data.get("slug", ""),
            created_by=data.get("createdBy", ""),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass
class Answer:
    id: Optional[str] = None
    question_id: str = ""
    answer: str = ""
    explain: str = ""
    video_url: Optional[str] = None
    video_type: Optional[str] = None
    video_thumbnail: Optional[str] = None
    created_by: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "questionId": self.question_id,
            "answer": self.answer,
            "explain": self.explain,
            "videoUrl": self.video_url,
            "videoType": self.video_type,
            "videoThumbnail": self.video_thumbnail,
            "createdBy": self.created_by,
            "createdAt": self.created_at or now_iso(),
            "updatedAt": self.updated_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Answer:
        return cls(
            id=data.get("id"),
            question_id=data.get("questionId", ""),
            answer=data.get("answer", ""),
            explain=data.get("explain", ""),
            video_url=data.get("videoUrl"),
            video_type=data.get("videoType"),
            video_thumbnail=data.get("videoThumbnail"),
            created_by=data.get("createdBy", ""),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


# ===========================================================================
# Users and per-user state
# ===========================================================================

@dataclass
class User:
    id: Optional[str] = None
    username: str = ""
    password_hash: str = ""
    full_name: str = ""
    role: str = "student"
    avatar: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "passwordHash": self.password_hash,
            "fullName": self.full_name,
            "role": self.role,
            "avatar": self.avatar,
            "createdAt": self.created_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> User:
        return cls(
            id=data.get("id"),
            username=data.get("username", ""),
            password_hash=data.get("passwordHash", ""),
            full_name=data.get("fullName", ""),
            role=data.get("role", "student"),
            avatar=data.get("avatar"),
            created_at=data.get("createdAt"),
        )


@dataclass
class Bookmark:
    id: Optional[str] = None
    user_id: str = ""
    book_id: str = ""
    bookmarked_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "bookId": self.book_id,
            "bookmarkedAt": self.bookmarked_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Bookmark:
        return cls(
            id=data.get("id"),
            user_id=data.get("userId", ""),
            book_id=data.get("bookId", ""),
            bookmarked_at=data.get("bookmarkedAt"),
        )


@dataclass
class Progress:
    id: Optional[str] = None
    user_id: str = ""
    lesson_id: str = ""
    status: str = "completed"
    completed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "lessonId": self.lesson_id,
            "status": self.status,
            "completedAt": self.completed_at or now_iso(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Progress:
        return cls(
            id=data.get("id"),
            user_id=data.get("userId", ""),
            lesson_id=data.get("lessonId", ""),
            status=data.get("status", "completed"),
            completed_at=data.get("completedAt"),
        )

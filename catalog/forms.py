# catalog/forms.py
"""
Form state for the admin screens: upload content, edit content, announce
upcoming content.

The checks in validate() only save a round-trip; the server runs the same
rules again.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .client import ApiClient
from .schemas import parse_release_date

logging.basicConfig(level=logging.INFO)


class FormError(ValueError):
    """Input rejected before submission."""


def _add_unique(items: List[str], value: str) -> bool:
    value = value.strip()
    if not value or value in items:
        return False
    items.append(value)
    return True

def _remove(items: List[str], value: str) -> None:
    if value in items:
        items.remove(value)

def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None

def _check_genres_and_episodes(title: str, type_: str, genres: List[str], episodes: Optional[int]) -> None:
    if not title.strip():
        raise FormError("Please enter a title")
    if not genres:
        raise FormError("Please add at least one genre")
    if type_ == "tv_show" and (not episodes or episodes <= 0):
        raise FormError("Please enter the number of episodes for TV shows")


@dataclass
class ContentUploadForm:
    title: str = ""
    type: str = "movie"
    genres: List[str] = field(default_factory=list)
    duration: str = ""
    rating: str = ""
    status: str = "draft"
    description: str = ""
    thumbnail_url: str = ""
    video_url: str = ""
    trailer_url: str = ""
    release_year: Optional[int] = field(default_factory=lambda: datetime.now().year)
    director: str = ""
    writer: str = ""
    cast: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    episodes: Optional[int] = None

    def add_genre(self, genre: str) -> bool:
        return _add_unique(self.genres, genre)

    def remove_genre(self, genre: str) -> None:
        _remove(self.genres, genre)

    def add_cast_member(self, member: str) -> bool:
        return _add_unique(self.cast, member)

    def remove_cast_member(self, member: str) -> None:
        _remove(self.cast, member)

    def add_tag(self, tag: str) -> bool:
        return _add_unique(self.tags, tag)

    def remove_tag(self, tag: str) -> None:
        _remove(self.tags, tag)

    def validate(self) -> None:
        _check_genres_and_episodes(self.title, self.type, self.genres, self.episodes)
        if not self.rating:
            raise FormError("Please select a rating")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title.strip(),
            "type": self.type,
            "genres": list(self.genres),
            "duration": _blank_to_none(self.duration),
            "rating": self.rating,
            "status": self.status,
            "description": _blank_to_none(self.description),
            "thumbnailUrl": _blank_to_none(self.thumbnail_url),
            "videoUrl": _blank_to_none(self.video_url),
            "trailerUrl": _blank_to_none(self.trailer_url),
            "releaseYear": self.release_year,
            "director": _blank_to_none(self.director),
            "writer": _blank_to_none(self.writer),
            "cast": list(self.cast) or None,
            "tags": list(self.tags) or None,
            "episodes": self.episodes if self.type == "tv_show" else None,
        }

    def reset(self) -> None:
        self.__init__()

    def submit(self, client: ApiClient) -> Dict[str, Any]:
        """Validates, posts the new content and clears the form on success."""
        self.validate()
        created = client.create_content(self.to_payload())
        logging.info(f"Content created: {created.get('id')} '{created.get('title')}'")
        self.reset()
        return created


# Fields the edit screen exposes, keyed by wire name
EDITABLE_CONTENT_FIELDS = (
    "title", "type", "genres", "duration", "rating", "status", "description",
    "thumbnailUrl", "videoUrl", "trailerUrl", "releaseYear", "episodes",
)

class ContentEditForm:
    """Loads one content record, tracks edits, and submits only what changed."""

    def __init__(self, content_id: int):
        self.content_id = content_id
        self.original: Dict[str, Any] = {}
        self.values: Dict[str, Any] = {}

    @property
    def loaded(self) -> bool:
        return bool(self.original)

    def load(self, client: ApiClient) -> Dict[str, Any]:
        record = client.get_content(self.content_id)
        self.original = {name: record.get(name) for name in EDITABLE_CONTENT_FIELDS}
        self.values = dict(self.original)
        return record

    def set(self, name: str, value: Any) -> None:
        if name not in EDITABLE_CONTENT_FIELDS:
            raise FormError(f"Unknown field: {name}")
        self.values[name] = value

    def changes(self) -> Dict[str, Any]:
        return {name: value for name, value in self.values.items() if self.original.get(name) != value}

    def validate(self) -> None:
        if not self.loaded:
            raise FormError("Content has not been loaded")
        _check_genres_and_episodes(
            self.values.get("title") or "",
            self.values.get("type"),
            self.values.get("genres") or [],
            self.values.get("episodes"),
        )

    def submit(self, client: ApiClient) -> Dict[str, Any]:
        self.validate()
        patch = self.changes()
        # An empty patch still goes out so the server refreshes updatedAt
        updated = client.update_content(self.content_id, patch)
        self.original = {name: updated.get(name) for name in EDITABLE_CONTENT_FIELDS}
        self.values = dict(self.original)
        return updated


@dataclass
class UpcomingUploadForm:
    title: str = ""
    type: str = ""
    genres: List[str] = field(default_factory=list)
    episodes: Optional[int] = None
    release_date: str = ""
    description: str = ""
    thumbnail_url: str = ""
    trailer_url: str = ""
    section_order: int = 0

    def add_genre(self, genre: str) -> bool:
        return _add_unique(self.genres, genre)

    def remove_genre(self, genre: str) -> None:
        _remove(self.genres, genre)

    def _parsed_release_date(self) -> datetime:
        try:
            return parse_release_date(self.release_date)
        except ValueError:
            raise FormError("Please enter a valid release date")

    def validate(self) -> None:
        _check_genres_and_episodes(self.title, self.type, self.genres, self.episodes)
        if self.type not in ("movie", "tv_show"):
            raise FormError("Please select a content type")
        self._parsed_release_date()
        if not self.description.strip():
            raise FormError("Please enter a description")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title.strip(),
            "type": self.type,
            "genres": list(self.genres),
            "episodes": self.episodes if self.type == "tv_show" else None,
            "releaseDate": self._parsed_release_date().isoformat(),
            "description": self.description,
            "thumbnailUrl": _blank_to_none(self.thumbnail_url),
            "trailerUrl": _blank_to_none(self.trailer_url),
            "sectionOrder": self.section_order,
        }

    def reset(self) -> None:
        self.__init__()

    def submit(self, client: ApiClient) -> Dict[str, Any]:
        self.validate()
        created = client.create_upcoming_content(self.to_payload())
        logging.info(f"Upcoming content created: {created.get('id')} '{created.get('title')}'")
        self.reset()
        return created

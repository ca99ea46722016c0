# catalog/crud.py
import functools
import logging
from typing import Any, Dict, List, Optional

from passlib.context import CryptContext
from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .models import utcnow

logging.basicConfig(level=logging.INFO)

POPULAR_CONTENT_LIMIT = 10
RECENT_VIEWS_LIMIT = 50

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class StorageError(Exception):
    """Raised when the database fails for a reason other than 'no such row'."""


class InvalidRecordError(ValueError):
    """Raised when a patch would leave the stored row breaking a cross-field rule."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def storage_operation(func_):
    """Rolls back the session and re-raises any SQLAlchemy failure as StorageError."""
    @functools.wraps(func_)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func_(db, *args, **kwargs)
        except SQLAlchemyError as e:
            db.rollback()
            logging.error(f"Storage failure in {func_.__name__}: {e}")
            raise StorageError(func_.__name__) from e
    return wrapper


# --- Password helpers ---
def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(password, hashed_password)
    except ValueError:
        # Not a hash this context recognises
        return False


def _episode_changes(db_row, changes: Dict[str, Any]) -> Dict[str, Any]:
    # The episode rule is checked on the row as it will look after the patch
    merged_type = changes.get("type", db_row.type)
    merged_episodes = changes.get("episodes", db_row.episodes)
    if merged_type == schemas.ContentType.MOVIE.value:
        changes["episodes"] = None
    elif merged_type == schemas.ContentType.TV_SHOW.value and merged_episodes is None:
        raise InvalidRecordError("episodes", "episodes is required when type is tv_show")
    return changes


# --- User CRUD ---
@storage_operation
def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()

@storage_operation
def get_user_by_username(db: Session, username: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.username == username).first()

@storage_operation
def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    db_user = models.User(username=user.username, password=hash_password(user.password))
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


# --- Content CRUD ---
@storage_operation
def get_all_content(db: Session) -> List[models.Content]:
    return db.query(models.Content)\
             .order_by(desc(models.Content.created_at), desc(models.Content.id))\
             .all()

@storage_operation
def get_content(db: Session, content_id: int) -> Optional[models.Content]:
    return db.query(models.Content).filter(models.Content.id == content_id).first()

@storage_operation
def get_content_by_title(db: Session, title: str) -> Optional[models.Content]:
    return db.query(models.Content).filter(models.Content.title == title).first()

@storage_operation
def get_published_content(db: Session) -> List[models.Content]:
    return db.query(models.Content)\
             .filter(models.Content.status == schemas.ContentStatus.PUBLISHED.value)\
             .order_by(desc(models.Content.created_at), desc(models.Content.id))\
             .all()

@storage_operation
def create_content(db: Session, content: schemas.ContentCreate) -> models.Content:
    db_content = models.Content(**content.model_dump(), views=0)
    db.add(db_content)
    db.commit()
    db.refresh(db_content)
    return db_content

@storage_operation
def update_content(db: Session, content_id: int, content: schemas.ContentUpdate) -> Optional[models.Content]:
    """Applies only the fields present in the patch; updated_at is always refreshed."""
    db_content = db.query(models.Content).filter(models.Content.id == content_id).first()
    if db_content is None:
        return None
    changes = _episode_changes(db_content, content.model_dump(exclude_unset=True))
    for field, value in changes.items():
        setattr(db_content, field, value)
    db_content.updated_at = utcnow()
    db.commit()
    db.refresh(db_content)
    return db_content

@storage_operation
def delete_content(db: Session, content_id: int) -> bool:
    deleted = db.query(models.Content).filter(models.Content.id == content_id).delete()
    db.commit()
    return deleted > 0


# --- Upcoming Content CRUD ---
@storage_operation
def get_all_upcoming_content(db: Session) -> List[models.UpcomingContent]:
    return db.query(models.UpcomingContent)\
             .order_by(models.UpcomingContent.section_order, models.UpcomingContent.id)\
             .all()

@storage_operation
def get_upcoming_content(db: Session, upcoming_id: int) -> Optional[models.UpcomingContent]:
    return db.query(models.UpcomingContent).filter(models.UpcomingContent.id == upcoming_id).first()

@storage_operation
def create_upcoming_content(db: Session, upcoming: schemas.UpcomingContentCreate) -> models.UpcomingContent:
    db_upcoming = models.UpcomingContent(**upcoming.model_dump())
    db.add(db_upcoming)
    db.commit()
    db.refresh(db_upcoming)
    return db_upcoming

@storage_operation
def update_upcoming_content(db: Session, upcoming_id: int, upcoming: schemas.UpcomingContentUpdate) -> Optional[models.UpcomingContent]:
    db_upcoming = db.query(models.UpcomingContent).filter(models.UpcomingContent.id == upcoming_id).first()
    if db_upcoming is None:
        return None
    changes = _episode_changes(db_upcoming, upcoming.model_dump(exclude_unset=True))
    for field, value in changes.items():
        setattr(db_upcoming, field, value)
    db.commit()
    db.refresh(db_upcoming)
    return db_upcoming

@storage_operation
def delete_upcoming_content(db: Session, upcoming_id: int) -> bool:
    deleted = db.query(models.UpcomingContent).filter(models.UpcomingContent.id == upcoming_id).delete()
    db.commit()
    return deleted > 0


# --- Analytics ---
@storage_operation
def create_analytics_event(db: Session, event: schemas.AnalyticsEventCreate) -> models.AnalyticsEvent:
    db_event = models.AnalyticsEvent(**event.model_dump())
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    return db_event

@storage_operation
def get_analytics(db: Session) -> Dict[str, Any]:
    """Aggregate read: view count, content count, most viewed content and latest views."""
    is_view = models.AnalyticsEvent.event_type == schemas.EventType.VIEW.value

    total_views = db.query(func.count(models.AnalyticsEvent.id)).filter(is_view).scalar()
    total_content = db.query(func.count(models.Content.id)).scalar()

    popular_content = db.query(models.Content)\
                        .order_by(desc(models.Content.views), desc(models.Content.id))\
                        .limit(POPULAR_CONTENT_LIMIT)\
                        .all()

    recent_views = db.query(models.AnalyticsEvent)\
                     .filter(is_view)\
                     .order_by(desc(models.AnalyticsEvent.timestamp), desc(models.AnalyticsEvent.id))\
                     .limit(RECENT_VIEWS_LIMIT)\
                     .all()

    return {
        "total_views": total_views or 0,
        "total_content": total_content or 0,
        "popular_content": popular_content,
        "recent_views": recent_views,
    }

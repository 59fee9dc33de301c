# users_api/repository.py
import logging
import math
import threading
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .db import make_engine, make_session_factory
from .exceptions import NotFound
from .models import UserEntity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    items: List[UserEntity]
    total_count: int
    current_page: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self, "total_pages", math.ceil(self.total_count / self.page_size)
        )

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


class UserRepository:
    """
    Insertion-ordered user store.

    Every method holds the same lock for its whole session, so writers are
    serialized and readers never see a half-applied write. Returned entities
    are detached copies.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self._engine = engine if engine is not None else make_engine()
        self._session_factory = make_session_factory(self._engine)
        self._lock = threading.RLock()

    def _session(self) -> Session:
        return self._session_factory()

    @staticmethod
    def _by_id(db: Session, user_id: uuid.UUID) -> Optional[UserEntity]:
        return db.execute(
            select(UserEntity).where(UserEntity.id == user_id)
        ).scalar_one_or_none()

    def find_by_id(self, user_id: uuid.UUID) -> Optional[UserEntity]:
        with self._lock, self._session() as db:
            user = self._by_id(db, user_id)
            return user.copy() if user else None

    def insert(self, user: UserEntity) -> UserEntity:
        with self._lock, self._session() as db:
            stored = self._add(db, user, uuid.uuid4())
            db.commit()
        logger.info("Inserted user %s", stored.id)
        return stored.copy()

    def update(self, user: UserEntity) -> None:
        with self._lock, self._session() as db:
            current = self._by_id(db, user.id)
            if current is None:
                raise NotFound(f"user {user.id} does not exist")
            self._overwrite(current, user)
            db.commit()
        logger.info("Updated user %s", user.id)

    def update_or_insert(self, user: UserEntity) -> Tuple[UserEntity, bool]:
        with self._lock, self._session() as db:
            current = self._by_id(db, user.id)
            if current is None:
                stored = self._add(db, user, user.id)
                inserted = True
            else:
                stored = self._overwrite(current, user)
                inserted = False
            db.commit()
        logger.info("%s user %s", "Inserted" if inserted else "Updated", user.id)
        return stored.copy(), inserted

    def delete(self, user_id: uuid.UUID) -> None:
        with self._lock, self._session() as db:
            user = self._by_id(db, user_id)
            if user is None:
                return
            db.delete(user)
            db.commit()
        logger.info("Deleted user %s", user_id)

    def get_page(self, page_number: int, page_size: int) -> Page:
        if page_number < 1 or page_size < 1:
            raise ValueError("page_number and page_size must be positive")
        with self._lock, self._session() as db:
            total = db.execute(select(func.count()).select_from(UserEntity)).scalar_one()
            offset = (page_number - 1) * page_size
            if offset >= total:
                # Past the end; the offset may not fit an SQLite INTEGER.
                return Page(items=[], total_count=total, current_page=page_number, page_size=page_size)
            rows = db.execute(
                select(UserEntity)
                .order_by(UserEntity.seq)
                .offset(offset)
                .limit(page_size)
            ).scalars().all()
            items = [row.copy() for row in rows]
        return Page(items=items, total_count=total, current_page=page_number, page_size=page_size)

    # ── Helpers ────────────────────────────────────────────────────────────
    @staticmethod
    def _add(db: Session, user: UserEntity, user_id: uuid.UUID) -> UserEntity:
        stored = UserEntity(
            id=user_id,
            login=user.login or "",
            first_name=user.first_name,
            last_name=user.last_name,
            games_played=user.games_played or 0,
            current_game_id=user.current_game_id,
        )
        db.add(stored)
        return stored

    @staticmethod
    def _overwrite(current: UserEntity, user: UserEntity) -> UserEntity:
        for name in UserEntity.MUTABLE_FIELDS:
            setattr(current, name, getattr(user, name))
        if current.games_played is None:
            current.games_played = 0
        return current

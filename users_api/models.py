# users_api/models.py
from sqlalchemy import Column, Integer, String, Uuid

from .db import Base


class UserEntity(Base):
    __tablename__ = "users"
    seq             = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    id              = Column(Uuid, unique=True, index=True, nullable=False)
    login           = Column(String, nullable=False, default="")
    first_name      = Column(String, nullable=False)
    last_name       = Column(String, nullable=False)
    games_played    = Column(Integer, nullable=False, default=0)
    current_game_id = Column(Uuid, nullable=True)

    # Fields a replace or patch is allowed to overwrite.
    MUTABLE_FIELDS = ("first_name", "last_name", "games_played", "current_game_id")

    def copy(self) -> "UserEntity":
        return UserEntity(
            id=self.id,
            login=self.login,
            first_name=self.first_name,
            last_name=self.last_name,
            games_played=self.games_played,
            current_game_id=self.current_game_id,
        )

    def __repr__(self) -> str:
        return f"UserEntity(id={self.id!s}, login={self.login!r})"

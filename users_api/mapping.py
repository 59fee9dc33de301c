# users_api/mapping.py
from uuid import UUID

from .models import UserEntity
from .schemas import PostUserDto, UpdateUserDto, UserDto


def full_name(user: UserEntity) -> str:
    return f"{user.last_name} {user.first_name}"


def entity_to_dto(user: UserEntity) -> UserDto:
    return UserDto(
        id=user.id,
        login=user.login,
        full_name=full_name(user),
        games_played=user.games_played,
        current_game_id=user.current_game_id,
    )


def post_dto_to_entity(dto: PostUserDto) -> UserEntity:
    return UserEntity(
        login=dto.login,
        first_name=dto.first_name,
        last_name=dto.last_name,
        games_played=dto.games_played,
        current_game_id=dto.current_game_id,
    )


def update_dto_to_entity(dto: UpdateUserDto, user_id: UUID) -> UserEntity:
    # Login is not editable; the repository keeps the stored one.
    return UserEntity(
        id=user_id,
        first_name=dto.first_name,
        last_name=dto.last_name,
        games_played=dto.games_played,
        current_game_id=dto.current_game_id,
    )

"""Lazily create platform entities with unique handles."""

from typing import Any

from loguru import logger

from src.accounts.core.errors import ConflictError
from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.core.services.database.db_utils import translate_store_errors
from src.accounts.entities.core.platform_entity import PlatformEntity, PlatformEntityRepository
from src.accounts.entities.core.user import User


class EntityResolver:
    """Get-or-create for platform entities keyed by (platform, platform_id).

    When the suggested handle is taken the entity falls back to its
    ``platform_id`` as handle. At most two inserts are attempted.
    """

    def __init__(self, db: DbSessionService, internal_platform: str = "internal"):
        self._db = db
        self._internal_platform = internal_platform

    def get_entity(self, entity_id: str) -> PlatformEntity | None:
        with translate_store_errors("get_entity"), self._db.session_scope() as session:
            return PlatformEntityRepository(session).get(entity_id)

    def get_entity_by(self, platform: str, platform_id: str) -> PlatformEntity | None:
        with translate_store_errors("get_entity_by"), self._db.session_scope() as session:
            return PlatformEntityRepository(session).get_by_platform_id(platform, platform_id)

    def _handle_taken(self, handle: str) -> bool:
        with translate_store_errors("handle_taken"), self._db.session_scope() as session:
            return PlatformEntityRepository(session).handle_taken(handle)

    def get_or_create(
        self,
        platform: str,
        platform_id: str,
        suggested_handle: str | None,
        meta: dict[str, Any] | None = None,
        name: str | None = None,
        avatar_url: str | None = None,
        user_id: str | None = None,
    ) -> PlatformEntity:
        """Return the entity for (platform, platform_id), creating it if needed.

        An existing entity is returned unchanged.

        Raises:
            ConflictError: Both handle candidates are taken, or the insert
                violated a rule other than handle uniqueness
        """
        if not platform_id:
            raise ValueError("platform_id must not be empty")

        existing = self.get_entity_by(platform, platform_id)
        if existing is not None:
            return existing

        candidates = [h for h in dict.fromkeys([suggested_handle, platform_id]) if h]
        for handle in candidates:
            entity = PlatformEntity(
                platform=platform,
                platform_id=platform_id,
                handle=handle,
                user_id=user_id,
                name=name,
                avatar_url=avatar_url,
                platform_meta=meta or {},
            )
            try:
                with translate_store_errors("create_entity"), self._db.session_scope() as session:
                    PlatformEntityRepository(session).create(entity)
            except ConflictError:
                # Someone else created the same entity first
                existing = self.get_entity_by(platform, platform_id)
                if existing is not None:
                    return existing
                if handle == candidates[-1] or not self._handle_taken(handle):
                    raise
                logger.info(
                    "Handle '{}' is taken; retrying {} entity {} with its platform id",
                    handle,
                    platform,
                    platform_id,
                )
                continue

            logger.info("Created {} entity {} with handle '{}'", platform, platform_id, handle)
            return entity

        raise ConflictError(f"No free handle for {platform} entity {platform_id}")

    def get_or_create_for_user(self, user: User) -> PlatformEntity:
        """Entity representing a local user on the internal platform."""
        return self.get_or_create(
            self._internal_platform,
            str(user.id),
            user.handle,
            name=user.name,
            avatar_url=user.avatar_url,
            user_id=user.id,
        )

"""PlatformEntity repository for data access operations."""

from sqlmodel import Session, select

from .entity import PlatformEntity
from .table import PlatformEntityTable


class PlatformEntityRepository:
    """Data-access layer for platform entities."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, entity_id: str) -> PlatformEntity | None:
        row = self._session.get(PlatformEntityTable, entity_id)
        if row is None:
            return None
        return PlatformEntity.model_validate(row, from_attributes=True)

    def get_by_platform_id(self, platform: str, platform_id: str) -> PlatformEntity | None:
        statement = select(PlatformEntityTable).where(
            PlatformEntityTable.platform == platform,
            PlatformEntityTable.platform_id == platform_id,
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return PlatformEntity.model_validate(row, from_attributes=True)

    def handle_taken(self, handle: str) -> bool:
        statement = select(PlatformEntityTable.id).where(PlatformEntityTable.handle == handle)
        return self._session.exec(statement).first() is not None

    def create(self, entity: PlatformEntity) -> PlatformEntity:
        """Insert the entity; the flush raises IntegrityError on a unique violation."""
        self._session.add(PlatformEntityTable(**entity.model_dump()))
        self._session.flush()
        return entity

from loguru import logger

from src.accounts.core.errors import NotFoundError
from src.accounts.core.security import generate_hashed_secret, secrets_match
from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.core.services.database.db_utils import translate_store_errors
from src.accounts.entities.core.user import User, UserRepository

MIN_KEY_BYTES = 32


class StreamKeyService:
    """Issues and checks per-user stream keys."""

    def __init__(self, db: DbSessionService, key_bytes: int = MIN_KEY_BYTES):
        if key_bytes < MIN_KEY_BYTES:
            raise ValueError(f"Stream keys need at least {MIN_KEY_BYTES} random bytes")
        self._db = db
        self._key_bytes = key_bytes

    def generate_stream_key(self, user_id: str) -> User:
        """Replace the user's stream key with a new random one.

        Only the SHA-256 digest of fresh random bytes is stored and returned;
        concurrent calls for one user are last-write-wins.

        Raises:
            NotFoundError: The user does not exist
        """
        with translate_store_errors("generate_stream_key"), self._db.session_scope() as session:
            users = UserRepository(session)
            user = users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            user.stream_key = generate_hashed_secret(self._key_bytes)
            updated = users.update(user)

        logger.info("Issued a new stream key for user {}", user_id)
        return updated

    def verify_stream_key(self, user_id: str, presented: str) -> bool:
        with translate_store_errors("verify_stream_key"), self._db.session_scope() as session:
            user = UserRepository(session).get(user_id)
        return user is not None and secrets_match(presented, user.stream_key)

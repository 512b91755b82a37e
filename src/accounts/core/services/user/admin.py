from collections.abc import Iterable

from src.accounts.entities.core.user import User


def is_admin(user: User | None, admin_emails: Iterable[str]) -> bool:
    """Whether the user's email is on the admin allow-list, ignoring case."""
    if user is None or not user.email:
        return False
    return user.email.lower() in {email.strip().lower() for email in admin_emails}

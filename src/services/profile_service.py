"""Profile service: username and productivity preferences."""

import logging

from src.core import db_client
from src.core.logging import log_with_user_context, span
from src.domain.user import MAX_USERNAME_LENGTH, ProductivitySettings, Profile


logger = logging.getLogger(__name__)

COLLECTION = "users"


async def get_profile(*, user_id: str) -> Profile:
    """Fetch the user's profile.

    Raises:
        RecordNotFoundError: If the user does not exist
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=user_id)
    return Profile(**record)


async def update_username(*, user_id: str, username: str) -> Profile:
    """Change the user's display name.

    Raises:
        ValueError: If the username is blank or too long
    """
    cleaned = username.strip()
    if not cleaned:
        msg = "Username must not be empty"
        raise ValueError(msg)
    if len(cleaned) > MAX_USERNAME_LENGTH:
        msg = f"Username must be at most {MAX_USERNAME_LENGTH} characters"
        raise ValueError(msg)

    with span("profile_service.update_username"):
        record = await db_client.update_record(collection=COLLECTION, record_id=user_id, data={"username": cleaned})
        log_with_user_context(logger, "info", "Username updated", user_id=user_id)
        return Profile(**record)


async def get_productivity_settings(*, user_id: str) -> ProductivitySettings:
    """Return the user's saved productivity settings, or the defaults when none are saved."""
    profile = await get_profile(user_id=user_id)
    return profile.productivity_settings or ProductivitySettings()


async def update_productivity_settings(*, user_id: str, productivity: ProductivitySettings) -> ProductivitySettings:
    """Replace the user's productivity settings."""
    with span("profile_service.update_productivity_settings"):
        record = await db_client.update_record(
            collection=COLLECTION,
            record_id=user_id,
            data={"productivity_settings": productivity.model_dump()},
        )
        log_with_user_context(logger, "info", "Productivity settings updated", user_id=user_id)
        return Profile(**record).productivity_settings or ProductivitySettings()

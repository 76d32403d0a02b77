"""Request dependencies shared by the API routers."""

import re
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.core.config import constants


_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header(alias=constants.USER_ID_HEADER)] = None,
) -> str:
    """Return the authenticated user's ID.

    Authentication happens upstream; the gateway forwards the verified user ID in the
    ``X-User-Id`` header.
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user identity")
    if not _USER_ID_PATTERN.match(x_user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed user identity")
    return x_user_id


CurrentUserId = Annotated[str, Depends(get_current_user_id)]

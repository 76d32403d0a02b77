#!/usr/bin/env python3
"""Create or update the task store collections (categories, tasks, activity log, workspaces)."""

import asyncio

from src.core.config import settings
from src.core.logging import configure_logfire
from src.core.schema import sync_schema


async def main() -> None:
    configure_logfire()
    await sync_schema(
        pocketbase_url=settings.pocketbase_url,
        admin_email=settings.require_credential("pocketbase_admin_email", "PocketBase admin email"),
        admin_password=settings.require_credential("pocketbase_admin_password", "PocketBase admin password"),
    )


if __name__ == "__main__":
    asyncio.run(main())

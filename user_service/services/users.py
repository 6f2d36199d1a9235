"""
User creation service.

Each user insert is preceded by an audit log insert in the same
transaction, so both rows commit or neither does.
"""

import asyncio
import logging
from typing import Optional

from user_service.database import Database, Transaction
from user_service.errors import StorageError
from user_service.models import User
from user_service.services.audit import write_log_entry

logger = logging.getLogger(__name__)

CREATE_USER_LOG_MESSAGE = "Creating new user"


async def create_user(name: str, tx: Transaction) -> User:
    """
    Write the audit entry, then the user row, inside ``tx``.

    If the log insert raises, the user insert is never issued.
    """
    await write_log_entry(CREATE_USER_LOG_MESSAGE, tx)

    row = await tx.fetchrow(
        "INSERT INTO users (name) VALUES ($1) RETURNING id, name",
        name
    )

    return User(id=row['id'], name=row['name'])


async def register_user(name: str, db: Database, timeout: Optional[float] = None) -> User:
    """
    Create a user in its own transaction and commit it.

    The deadline bounds the two inserts only. COMMIT is never cancelled,
    so a request either fails with nothing written or returns the
    committed user.

    Raises:
        StorageError: If the inserts outlast ``timeout``; the
            transaction is rolled back
    """
    async with db.transaction() as tx:
        try:
            user = await asyncio.wait_for(create_user(name, tx), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise StorageError(f"User creation exceeded {timeout}s deadline") from e

    logger.info(f"User created: id={user.id}")

    return user

"""
Audit log writer.

Appends rows to the ``logs`` table using the caller's transaction.
"""

import logging

from user_service.database import Transaction
from user_service.models import LogEntry

logger = logging.getLogger(__name__)


async def write_log_entry(content: str, tx: Transaction) -> LogEntry:
    """
    Insert one audit log row.
    
    Args:
        content: Free-text log message, must not be empty
        tx: The transaction the row is written in
        
    Returns:
        The stored entry with its store-generated id
        
    Raises:
        ValueError: If content is empty
        StorageError: If the insert fails; the caller's transaction
            is expected to roll back
    """
    if not content:
        raise ValueError("Log entry content must not be empty")
    
    row = await tx.fetchrow(
        "INSERT INTO logs (content) VALUES ($1) RETURNING id, content",
        content
    )
    
    entry = LogEntry(id=row['id'], content=row['content'])
    logger.debug(f"Log entry written: id={entry.id}")
    
    return entry

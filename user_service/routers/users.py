"""
User creation endpoint - POST /users
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from prometheus_client import Counter, Histogram

from user_service.database import Database, get_db
from user_service.models import CreateUser, User
from user_service.services.users import register_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

# Prometheus metrics
users_created = Counter(
    'users_created_total',
    'Total users created'
)
user_create_failures = Counter(
    'user_create_failures_total',
    'Total failed user creations',
    ['reason']
)
user_write_duration = Histogram(
    'user_write_seconds',
    'Duration of the user + audit log transaction'
)


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUser,
    request: Request,
    db: Database = Depends(get_db)
):
    """
    Create a user.
    
    An audit log row ("Creating new user") and the user row are written
    in one transaction. On any storage failure, or if the writes outlast
    the request deadline, both are rolled back and the caller gets a
    generic 500. Every failure is counted by exception type.
    
    **Request Body:**
    - `name`: Name of the user
    
    **Returns:**
    - `id`: Store-generated user ID
    - `name`: The stored name
    """
    timeout = request.app.state.settings.request_timeout
    
    try:
        with user_write_duration.time():
            user = await register_user(payload.name, db, timeout=timeout)
    except Exception as e:
        user_create_failures.labels(reason=type(e).__name__).inc()
        raise
    
    users_created.inc()
    
    return user

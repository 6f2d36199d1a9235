"""
Pydantic models for request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ============================================================================
# User Models
# ============================================================================

class CreateUser(BaseModel):
    """Request body for creating a user."""
    
    name: str = Field(
        ...,
        description="Display name of the new user",
        examples=["Alice"]
    )


class User(BaseModel):
    """A stored user row."""
    
    id: int = Field(..., description="Store-generated identifier")
    name: str


# ============================================================================
# Audit Log Models
# ============================================================================

class LogEntry(BaseModel):
    """A stored audit log row."""
    
    id: int
    content: str


# ============================================================================
# Health Check Models
# ============================================================================

class HealthStatus(BaseModel):
    """Health check response."""
    
    status: str = Field(..., examples=["healthy", "unhealthy"])
    version: str
    database: str = Field(..., examples=["connected", "disconnected"])
    uptime_seconds: float
    timestamp: datetime

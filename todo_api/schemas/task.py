"""
Todo API — Pydantic Request/Response Schemas
==============================================

What:  The JSON contract of the /todos endpoints.
How:   FastAPI validates request bodies against the *Create/*Update models
       and serializes responses through TaskResponse.

Request models ignore unknown keys, so a client-supplied `id` or `done` on
create is dropped rather than persisted.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class TaskCreate(BaseModel):
    """Body of POST /todos/add."""
    title: str = Field(default="", description="Free-form task title")
    description: str = Field(default="", description="Free-form task description")


class TaskUpdate(BaseModel):
    """
    Body of PUT /todos/update/{id}.

    Only keys present in the body are written; an omitted field keeps its
    stored value. `done` is not part of this contract.
    """
    title: Optional[str] = Field(default=None, description="New title")
    description: Optional[str] = Field(default=None, description="New description")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TaskResponse(BaseModel):
    id: int = Field(description="Identifier assigned by the database")
    title: str
    description: str
    done: bool

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Returned by DELETE /todos/delete/{id}."""
    message: str = Field(examples=["Deleted"])


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")

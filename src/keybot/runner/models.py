# runner/models.py
from __future__ import annotations

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Reply to POST /jobs and POST /jobs/{label}/stop."""
    message: str


class LogPathResponse(BaseModel):
    """Reply to GET /jobs/{label}/log-path."""
    path: str

"""
Module: response.py
Description: API response models for the simulator's HTTP surface.

Key Components:
- SessionStatusResponse: Snapshot of a running or finished session

Dependencies: pydantic, typing
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from roastsim.models.delivery import DeliveryOutcome


class SessionStatusResponse(BaseModel):
    """
    Response model for session endpoints.

    Attributes:
        session: Session parameters with the API key masked
        running: Whether the roast is still running
        progress: Simulated seconds elapsed
        target_seconds: Roast target time
        temperature: Current temperature, one decimal
        event_count: Number of logged events
        message: Latest learner-facing status text
        finished: Whether the result was handled
        outcome: Delivery outcome once finished
    """

    session: Dict[str, Optional[str]]
    running: bool
    progress: int = Field(..., ge=0)
    target_seconds: int = Field(..., ge=1)
    temperature: float
    event_count: int = Field(..., ge=0)
    message: str
    finished: bool
    outcome: Optional[DeliveryOutcome] = None

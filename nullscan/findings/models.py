# Pydantic data models for rule findings: Finding, Location, and the sink callback type.

from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, Field


class Location(BaseModel):
    """Where in the source a finding was reported (file, line, column)."""

    path: Optional[Path] = None
    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=1, description="1-based column number")
    snippet: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True, "frozen": True}


class Finding(BaseModel):
    """A single missing-annotation report (e.g. unannotated field at line 9)."""

    rule_id: str
    message: str
    location: Location
    severity: str = Field(default="warning", description="e.g. error, warning, info")

    model_config = {"arbitrary_types_allowed": True, "frozen": True}


# Receives findings one at a time, in the order a rule produces them.
FindingSink = Callable[[Finding], None]

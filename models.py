"""
Pydantic models for cycle detection and the grid walk harness.

Parameter models validate harness configuration; result models describe what
a detection run or a strategy comparison observed.
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator, computed_field, ConfigDict
from enum import Enum


class Strategy(str, Enum):
    """Cycle detection strategy"""
    FLOYD = "floyd"
    BRENT = "brent"


class CycleState(str, Enum):
    """Detector state; FOUND and EXHAUSTED are terminal"""
    SCANNING = "scanning"
    FOUND = "found"
    EXHAUSTED = "exhausted"


class DetectionParams(BaseModel):
    """Options for a detection run."""
    strategy: Strategy = Field(
        Strategy.FLOYD,
        description="Detection strategy; floyd needs a Multipass sequence"
    )


class GridWalkParams(BaseModel):
    """Board size, seed and optional start for a random grid walk."""
    size: int = Field(
        8,
        description="Width and height of the square board",
        ge=2,
        le=512
    )
    seed: Optional[int] = Field(
        None,
        description="Seed for board and start generation; None draws a fresh one"
    )
    start: Optional[Tuple[int, int]] = Field(
        None,
        description="Starting cell (x, y); random interior cell when omitted"
    )

    @model_validator(mode='after')
    def validate_start_on_board(self):
        """Start must lie on the board."""
        if self.start is not None:
            x, y = self.start
            if not (0 <= x < self.size and 0 <= y < self.size):
                raise ValueError(
                    f"start {self.start} lies outside a {self.size}x{self.size} board"
                )
        return self


class BoardRows(BaseModel):
    """Rigged board layout, one string per row."""
    rows: List[str] = Field(..., description="Rows of N/E/S/W letters or arrow glyphs")

    @field_validator('rows')
    @classmethod
    def validate_square(cls, v):
        """Rows must form a non-empty square."""
        if not v:
            raise ValueError("Board needs at least one row")
        widths = {len(row) for row in v}
        if widths != {len(v)}:
            raise ValueError(f"Board must be square, got {len(v)} rows of widths {sorted(widths)}")
        return v


class DetectionReport(BaseModel):
    """Outcome of a single detection run."""
    strategy: Strategy = Field(..., description="Strategy used")
    state: CycleState = Field(..., description="Terminal detector state")
    advances: int = Field(..., description="Cursor advances performed", ge=0)
    comparisons: int = Field(..., description="Equality checks performed", ge=0)
    elapsed_ms: float = Field(0.0, description="Wall time in milliseconds", ge=0)

    @computed_field
    @property
    def found(self) -> bool:
        return self.state == CycleState.FOUND

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "strategy": "floyd",
                "state": "found",
                "advances": 4,
                "comparisons": 2,
                "elapsed_ms": 0.01
            }
        }
    )


class CycleInfo(BaseModel):
    """Where the cycle starts and how long it is."""
    start: int = Field(..., description="Index of the first value on the cycle", ge=0)
    length: int = Field(..., description="Number of values in the cycle", ge=1)


class AgreementSummary(BaseModel):
    """Floyd vs Brent over a corpus of random boards."""
    boards: int = Field(0, description="Boards walked", ge=0)
    halting: int = Field(0, description="Walks that left the board", ge=0)
    cycling: int = Field(0, description="Walks that entered a cycle", ge=0)
    disagreements: List[int] = Field(
        default_factory=list,
        description="Seeds where the strategies disagreed"
    )

    @property
    def agree(self) -> bool:
        return not self.disagreements

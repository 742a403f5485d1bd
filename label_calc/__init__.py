"""Label and pallet calculation utilities."""

from .calculator import (
    InvalidArgument,
    PackingInput,
    PackingResult,
    calculate_packing,
    compute,
)
from .trace import TraceStep, headline, render_trace, visible_lines

__all__ = [
    "InvalidArgument",
    "PackingInput",
    "PackingResult",
    "TraceStep",
    "calculate_packing",
    "compute",
    "headline",
    "render_trace",
    "visible_lines",
]

"""Step-loop harness, configuration, logging and rendering around the cave engine."""

from .config import CaveConfig, RenderConfig, load_config
from .execution import RngPool, StepLoop
from .logging import RunLogger
from .models import RunSummary, TickResult
from .visualization import FrameResult, FrameWriter, render_grid

__all__ = [
    "CaveConfig",
    "RenderConfig",
    "load_config",
    "RngPool",
    "StepLoop",
    "RunLogger",
    "RunSummary",
    "TickResult",
    "FrameResult",
    "FrameWriter",
    "render_grid",
]

"""ilotplan: floor-plan zone classification and îlot layout engine."""

from .errors import DrawingReadError, IlotPlanError, RecordNotFoundError
from .layout import LayoutConfiguration, LayoutEngine, LayoutResult, run_layout

__version__ = "0.1.0"

__all__ = [
    "IlotPlanError",
    "RecordNotFoundError",
    "DrawingReadError",
    "LayoutConfiguration",
    "LayoutEngine",
    "LayoutResult",
    "run_layout",
]

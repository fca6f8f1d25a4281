from panel_planner.schemas.bom import BomCalculationResult, BomApplyResult
from panel_planner.schemas.board import BoardAvailability

__all__ = [
    "BomCalculationResult",
    "BomApplyResult",
    "BoardAvailability",
]

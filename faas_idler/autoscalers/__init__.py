from .classifier import SCALE_LABEL, Activity, ScaleDecision, classify, is_eligible, qualified_name
from .idler import FunctionOutcome, FunctionState, IdleScaler

__all__ = [
    "SCALE_LABEL", "Activity", "ScaleDecision", "classify", "is_eligible", "qualified_name",
    "FunctionOutcome", "FunctionState", "IdleScaler",
]

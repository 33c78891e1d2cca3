from signal_audit.validation.selector import (
    CUTOFFS,
    evaluate_cutoff,
    pick_best,
    pick_recommendation,
)
from signal_audit.validation.loo import LeaveOneOutValidator, summarize_validation

__all__ = [
    "CUTOFFS",
    "evaluate_cutoff",
    "pick_best",
    "pick_recommendation",
    "LeaveOneOutValidator",
    "summarize_validation",
]

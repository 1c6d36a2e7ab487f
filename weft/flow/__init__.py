"""Multi-step flows over one or more agents."""

from .base import BaseFlow
from .factory import FlowFactory, FlowType
from .planning import DEFAULT_PLAN_STEPS, PlanningFlow, StepInfo

__all__ = ["BaseFlow", "PlanningFlow", "StepInfo", "FlowFactory", "FlowType", "DEFAULT_PLAN_STEPS"]

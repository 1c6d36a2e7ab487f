"""Flow construction by type name."""

from __future__ import annotations

from enum import Enum
from typing import Any

from ..errors import FlowError
from .base import AgentsArg, BaseFlow
from .planning import PlanningFlow


class FlowType(str, Enum):
    PLANNING = "planning"


_FLOWS: dict[FlowType, type[BaseFlow]] = {
    FlowType.PLANNING: PlanningFlow,
}


class FlowFactory:
    @staticmethod
    def create_flow(flow_type: FlowType | str, agents: AgentsArg, **kwargs: Any) -> BaseFlow:
        try:
            flow_cls = _FLOWS[FlowType(flow_type)]
        except (ValueError, KeyError):
            raise FlowError(f"Unknown flow type: {flow_type}") from None
        return flow_cls(agents, **kwargs)

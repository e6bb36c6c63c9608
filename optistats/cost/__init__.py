from optistats.cost.hash_join import (
    HashJoinCostConstants,
    HashJoinCostModel,
    JoinCostContext,
    JoinCostEstimate,
    JoinExecMode,
)
from optistats.cost.runtime import RuntimeContext, get_runtime_context, use_runtime_context

__all__ = [
    "HashJoinCostConstants",
    "HashJoinCostModel",
    "JoinCostContext",
    "JoinCostEstimate",
    "JoinExecMode",
    "RuntimeContext",
    "get_runtime_context",
    "use_runtime_context",
]

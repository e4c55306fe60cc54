from .infer import infer_node
from .suggest import suggest_node
from .plan import plan_node
from .share import share_node

__all__ = [
    "infer_node",
    "suggest_node",
    "plan_node",
    "share_node",
]

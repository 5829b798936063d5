"""State subpackage: everything that outlives a single traversal pass.

- TreeState: shared collapse override and single edit slot
- NodeState / NodeStateCache: per-path view state in a bounded LRU store
- CollapseTransition / CollapsePhase: animated collapse state machine
- LoopScheduler / ManualScheduler: timer sources
"""

from json_tree_editor.state.collapse import CollapsePhase, CollapseTransition
from json_tree_editor.state.node_state import NodeState, NodeStateCache
from json_tree_editor.state.scheduler import LoopScheduler, ManualScheduler
from json_tree_editor.state.tree_state import CollapseOverride, TreeState

__all__ = [
    "CollapseOverride",
    "CollapsePhase",
    "CollapseTransition",
    "LoopScheduler",
    "ManualScheduler",
    "NodeState",
    "NodeStateCache",
    "TreeState",
]

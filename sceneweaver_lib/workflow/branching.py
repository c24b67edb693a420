"""Branch Resolver: picks the next moment from a moment's branching hooks."""

from typing import Optional, Sequence

from sceneweaver_lib.core.models import BranchingHook


def resolve_next_moment(hooks: Sequence[BranchingHook]) -> Optional[str]:
    """
    Return the target of the highest-weighted hook.

    Weights are compared as given, without normalization. On a tie the
    earliest hook in authored order wins.

    Args:
        hooks: Branching hooks of a moment

    Returns:
        Target moment id, or None when there are no hooks
    """
    if not hooks:
        return None

    best = hooks[0]
    for hook in hooks[1:]:
        if hook.weight > best.weight:
            best = hook
    return best.target_moment_id

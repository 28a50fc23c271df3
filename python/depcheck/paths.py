"""Compresses upward dependency paths into direct -> mid -> top summaries."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import Package, PathSummary


@dataclass(frozen=True)
class PathState:
    """
    Per-path state carried by the upward walk from a duplicated package.

    direct: the first package above the duplicate (None at the duplicate itself)
    previous: the package visited just before the current one
    done: a top-level package was already summarized on this path
    """

    direct: Optional[Package] = None
    previous: Optional[Package] = None
    done: bool = False

    def climb(self, current: Package, dependent: Package) -> 'PathState':
        """State on arrival at `dependent` from `current`; the first hop fills the direct slot."""
        direct = self.direct if self.direct is not None else dependent
        return PathState(direct=direct, previous=current, done=self.done)


def summarize(state: PathState, current: Package, top_level: bool) -> Tuple[PathState, Optional[PathSummary]]:
    """
    Advance the path state at `current` and emit a summary when a top-level package is reached.

    Returns the state to carry upward and the summary, if any. Only the first
    top-level package on a path is summarized.
    """
    if not top_level or state.done:
        return state, None

    done = PathState(direct=state.direct, previous=state.previous, done=True)

    # The duplicate itself is top-level, or its direct dependent is
    if state.direct is None or state.direct == current:
        return done, PathSummary(direct=current, mid=None, top=current)

    # Two hops: duplicate <- direct <- current
    if state.direct == state.previous:
        return done, PathSummary(direct=state.direct, mid=None, top=current)

    # Three or more hops: keep only the package just below the top
    return done, PathSummary(direct=state.direct, mid=state.previous, top=current)

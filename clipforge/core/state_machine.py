"""Generic state machine.

Used for the reconciliation loop lifecycle and to describe the forward order
of pipeline stages, where only adjacency is checked and nothing transitions.

Example:
    LOOP_TRANSITIONS: TransitionMap[LoopState] = {
        LoopState.IDLE: [LoopState.POLLING],
        LoopState.POLLING: [LoopState.PAUSED, LoopState.IDLE],
        LoopState.PAUSED: [LoopState.POLLING, LoopState.IDLE],
    }

    sm = StateMachine(LoopState.IDLE, LOOP_TRANSITIONS)
    sm.transition(LoopState.POLLING)
"""

from collections.abc import Sequence
from enum import Enum
from typing import Generic, TypeVar

from clipforge.core.exceptions import ClipForgeError

T = TypeVar("T", bound=str | Enum)

TransitionMap = dict[T, list[T]]


class InvalidTransitionError(ClipForgeError):
    """Raised when a transition is not in the transition map."""

    def __init__(self, current: T, target: T, allowed: list[T] | None = None):
        self.current = current
        self.target = target
        self.allowed = allowed or []
        allowed_str = ", ".join(str(s) for s in self.allowed) or "none"
        super().__init__(
            message=f"Invalid transition from '{current}' to '{target}' (allowed: {allowed_str})",
            context={
                "current": str(current),
                "target": str(target),
                "allowed": [str(s) for s in self.allowed],
            },
        )


class StateMachine(Generic[T]):
    """Holds one current state and rejects transitions outside the map.

    States missing from the map are terminal.
    """

    def __init__(self, initial: T, transitions: TransitionMap[T]):
        self._current = initial
        self._transitions = transitions

    @property
    def current(self) -> T:
        return self._current

    @property
    def allowed_transitions(self) -> list[T]:
        """States reachable from the current one."""
        return self._transitions.get(self._current, [])

    def can_transition(self, target: T) -> bool:
        return target in self.allowed_transitions

    def transition(self, target: T) -> None:
        """Move to target.

        Raises:
            InvalidTransitionError: If the map does not allow it
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                current=self._current,
                target=target,
                allowed=self.allowed_transitions,
            )
        self._current = target

    def __repr__(self) -> str:
        return f"StateMachine(current={self._current!r}, allowed={self.allowed_transitions!r})"


def linear_transitions(states: Sequence[T]) -> TransitionMap[T]:
    """Build a map where each state may only advance to the next one.

    Args:
        states: States in their forward order

    Returns:
        Transition map with the last state terminal
    """
    transitions: TransitionMap[T] = {}
    for index, state in enumerate(states):
        transitions[state] = [states[index + 1]] if index + 1 < len(states) else []
    return transitions


__all__ = [
    "InvalidTransitionError",
    "StateMachine",
    "TransitionMap",
    "linear_transitions",
]

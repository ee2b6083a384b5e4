"""
Canonical workflow types (``housing_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for lifecycle state machines.  The application
lifecycle and the officer registration lifecycle are both declared with
these types, so Guard, Transition and Workflow are defined once.

Architecture position
---------------------
**Kernel domain layer.**  Declarations only; nothing here touches a
store.  No imports from ``db/``, ``records/``, ``services/`` or ``selectors/``.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """Named precondition of a transition.  Checked by the owning service."""
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """One allowed move between two states.

    ``actor_role`` names the role allowed to fire it.  ``moves_inventory``
    marks the transitions that reserve or release a unit, which must be
    committed together with the status change.
    """
    from_state: str
    to_state: str
    action: str
    actor_role: str
    guard: Guard | None = None
    moves_inventory: bool = False


@dataclass(frozen=True)
class Workflow:
    """States and allowed moves of one lifecycle, checked on construction."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow {self.name}: initial state {self.initial_state} "
                f"is not a declared state"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action} references "
                    f"an undeclared state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name}: terminal state {t.from_state} "
                    f"has outgoing transition {t.action}"
                )

    def transitions_for(self, action: str) -> tuple[Transition, ...]:
        """All transitions that fire on ``action``."""
        return tuple(t for t in self.transitions if t.action == action)

    def find(self, from_state: str, action: str) -> Transition | None:
        """The transition for ``action`` out of ``from_state``, if any."""
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        return None

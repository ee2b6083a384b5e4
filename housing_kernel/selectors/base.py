"""
Module: housing_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/ and domain/.
    MUST NOT import from services/.

Invariants enforced:
    - Read-only access: selectors never call ``put``, ``delete`` or
      ``apply`` on a store.
    - Return convention: frozen dataclasses or domain entities, never store
      internals.
"""

from abc import ABC

from housing_kernel.db.repositories import Repositories


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept the repository set and perform read-only queries.
    """

    def __init__(self, repos: Repositories):
        self.repos = repos

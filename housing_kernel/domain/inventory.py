"""
Flat inventory (``housing_kernel.domain.inventory``).

The only two functions allowed to change ``UnitOffer.remaining``.  Both
return a new ``Project``; neither touches storage.  The booking and
withdrawal services stage the returned project in the same unit of work
as the application status change.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from housing_kernel.domain.entities import Project, UnitOffer
from housing_kernel.domain.values import UnitType
from housing_kernel.exceptions import InventoryExhaustedError, UnitTypeNotOfferedError


def _replace_offer(project: Project, updated: UnitOffer) -> Project:
    offers = tuple(
        updated if o.unit_type == updated.unit_type else o
        for o in project.offers
    )
    return replace(project, offers=offers)


def _require_offer(project: Project, unit_type: UnitType) -> UnitOffer:
    offer = project.offer_for(unit_type)
    if offer is None:
        raise UnitTypeNotOfferedError(project.project_id, unit_type.value)
    return offer


def reserve(project: Project, unit_type: UnitType) -> Project:
    """Take one unit of ``unit_type`` out of the pool."""
    offer = _require_offer(project, unit_type)
    if offer.remaining == 0:
        raise InventoryExhaustedError(project.project_id, unit_type.value)
    return _replace_offer(project, replace(offer, remaining=offer.remaining - 1))


def release(project: Project, unit_type: UnitType) -> Project:
    """Return one unit of ``unit_type`` to the pool, capped at ``total``."""
    offer = _require_offer(project, unit_type)
    remaining = min(offer.remaining + 1, offer.total)
    return _replace_offer(project, replace(offer, remaining=remaining))


def available(project: Project, unit_type: UnitType) -> int:
    offer = project.offer_for(unit_type)
    return offer.remaining if offer is not None else 0


def with_total(
    project: Project,
    unit_type: UnitType,
    total: int,
    price: Decimal | None = None,
    held: int = 0,
) -> Project:
    """
    Set the total for one unit type, as a manager edit.

    Remaining units are kept and clamped to the new total less the ``held``
    (booked) units.  A total of zero removes the offer; a type not yet
    offered is added fully available.
    """
    if total < 0:
        raise ValueError(f"{unit_type.value}: total must be non-negative")
    existing = project.offer_for(unit_type)
    if total == 0:
        return replace(
            project,
            offers=tuple(o for o in project.offers if o.unit_type != unit_type),
        )
    if existing is None:
        added = UnitOffer(
            unit_type=unit_type,
            total=total,
            remaining=total,
            price=price if price is not None else Decimal("0"),
        )
        offers = tuple(sorted(project.offers + (added,), key=lambda o: o.unit_type.rank))
        return replace(project, offers=offers)
    updated = replace(
        existing,
        total=total,
        remaining=max(0, min(existing.remaining, total - held)),
        price=price if price is not None else existing.price,
    )
    return _replace_offer(project, updated)

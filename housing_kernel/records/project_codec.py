"""
Project table codec.

    ProjectId|Name|Visible|Neighbourhood|OpenDate|CloseDate|ManagerId|OfficerSlots|OfficerIds|UnitOffers

``OfficerIds`` is comma-joined; ``UnitOffers`` is ``;``-joined
``type,total,remaining,price`` tuples.  A ``NULL`` manager or officer list
means none assigned.
"""

from __future__ import annotations

from housing_kernel.domain.entities import Project, UnitOffer
from housing_kernel.domain.values import DateWindow, UnitType
from housing_kernel.records.codec import (
    RecordCodec,
    decode_bool,
    decode_decimal,
    decode_optional,
    encode_bool,
    encode_date,
    encode_decimal,
    encode_optional,
    escape,
    pack,
    pack_ids,
    require_date,
    unescape,
    unpack,
    unpack_ids,
)


def _decode_offer(row: list[str]) -> UnitOffer:
    if len(row) != 4:
        raise ValueError(f"unit offer must have 4 fields, found {len(row)}")
    return UnitOffer(
        unit_type=UnitType(unescape(row[0]).strip().upper()),
        total=int(unescape(row[1])),
        remaining=int(unescape(row[2])),
        price=decode_decimal(row[3]),
    )


class ProjectCodec(RecordCodec[Project]):
    table = "ProjectList"
    columns = (
        "ProjectId",
        "Name",
        "Visible",
        "Neighbourhood",
        "OpenDate",
        "CloseDate",
        "ManagerId",
        "OfficerSlots",
        "OfficerIds",
        "UnitOffers",
    )

    def key(self, entity: Project) -> str:
        return entity.project_id

    def encode_fields(self, entity: Project) -> list[str]:
        return [
            escape(entity.project_id),
            escape(entity.name),
            encode_bool(entity.visible),
            escape(entity.neighbourhood),
            encode_date(entity.window.open),
            encode_date(entity.window.close),
            encode_optional(entity.manager_id),
            str(entity.officer_slots),
            pack_ids(entity.officer_ids),
            pack([
                [o.unit_type.value, str(o.total), str(o.remaining), encode_decimal(o.price)]
                for o in entity.offers
            ]),
        ]

    def decode_fields(self, fields: list[str]) -> Project:
        manager_id = decode_optional(fields[6])
        return Project(
            project_id=unescape(fields[0]),
            name=unescape(fields[1]),
            visible=decode_bool(fields[2]),
            neighbourhood=unescape(fields[3]),
            window=DateWindow(require_date(fields[4]), require_date(fields[5])),
            manager_id=manager_id.strip().upper() if manager_id else None,
            officer_slots=int(unescape(fields[7])),
            officer_ids=tuple(i.upper() for i in unpack_ids(fields[8])),
            offers=tuple(_decode_offer(row) for row in unpack(fields[9])),
        )

"""
Application and receipt table codecs.

    ApplicationList  ID|Status|ApplicantID|ProjectID|UnitType|PriorStatus
    ReceiptList      ID|ApplicationID|ProjectID|ApplicantID|UnitType|Price|IssuedDate
"""

from __future__ import annotations

from housing_kernel.domain.entities import Application, Receipt
from housing_kernel.domain.values import ApplicationStatus, UnitType
from housing_kernel.records.codec import (
    NULL,
    RecordCodec,
    decode_decimal,
    decode_optional,
    encode_date,
    encode_decimal,
    escape,
    require_date,
    unescape,
)


class ApplicationCodec(RecordCodec[Application]):
    table = "ApplicationList"
    columns = ("ID", "Status", "ApplicantID", "ProjectID", "UnitType", "PriorStatus")

    def key(self, entity: Application) -> str:
        return entity.application_id

    def encode_fields(self, entity: Application) -> list[str]:
        return [
            escape(entity.application_id),
            entity.status.value,
            escape(entity.applicant_id),
            escape(entity.project_id),
            entity.unit_type.value,
            entity.prior_status.value if entity.prior_status else NULL,
        ]

    def decode_fields(self, fields: list[str]) -> Application:
        prior = decode_optional(fields[5])
        return Application(
            application_id=unescape(fields[0]),
            status=ApplicationStatus(unescape(fields[1])),
            applicant_id=unescape(fields[2]).upper(),
            project_id=unescape(fields[3]),
            unit_type=UnitType(unescape(fields[4])),
            prior_status=ApplicationStatus(prior) if prior else None,
        )


class ReceiptCodec(RecordCodec[Receipt]):
    table = "ReceiptList"
    columns = (
        "ID",
        "ApplicationID",
        "ProjectID",
        "ApplicantID",
        "UnitType",
        "Price",
        "IssuedDate",
    )

    def key(self, entity: Receipt) -> str:
        return entity.receipt_id

    def encode_fields(self, entity: Receipt) -> list[str]:
        return [
            escape(entity.receipt_id),
            escape(entity.application_id),
            escape(entity.project_id),
            escape(entity.applicant_id),
            entity.unit_type.value,
            encode_decimal(entity.price),
            encode_date(entity.issued_on),
        ]

    def decode_fields(self, fields: list[str]) -> Receipt:
        return Receipt(
            receipt_id=unescape(fields[0]),
            application_id=unescape(fields[1]),
            project_id=unescape(fields[2]),
            applicant_id=unescape(fields[3]),
            unit_type=UnitType(unescape(fields[4])),
            price=decode_decimal(fields[5]),
            issued_on=require_date(fields[6]),
        )

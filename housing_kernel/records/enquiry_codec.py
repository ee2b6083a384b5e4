"""Enquiry table codec: ``ID|ApplicantID|ProjectID|Message|Reply``."""

from __future__ import annotations

from housing_kernel.domain.entities import Enquiry
from housing_kernel.records.codec import (
    RecordCodec,
    decode_optional,
    encode_optional,
    escape,
    unescape,
)


class EnquiryCodec(RecordCodec[Enquiry]):
    table = "EnquiryList"
    columns = ("ID", "ApplicantID", "ProjectID", "Message", "Reply")

    def key(self, entity: Enquiry) -> str:
        return entity.enquiry_id

    def encode_fields(self, entity: Enquiry) -> list[str]:
        return [
            escape(entity.enquiry_id),
            escape(entity.applicant_id),
            escape(entity.project_id),
            escape(entity.message),
            encode_optional(entity.reply),
        ]

    def decode_fields(self, fields: list[str]) -> Enquiry:
        return Enquiry(
            enquiry_id=unescape(fields[0]),
            applicant_id=unescape(fields[1]).upper(),
            project_id=unescape(fields[2]),
            message=unescape(fields[3]),
            reply=decode_optional(fields[4]),
        )

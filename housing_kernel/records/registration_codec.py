"""Officer registration table codec: ``ID|OfficerID|ProjectID|Status``."""

from __future__ import annotations

from housing_kernel.domain.entities import OfficerRegistration
from housing_kernel.domain.values import RegistrationStatus
from housing_kernel.records.codec import RecordCodec, escape, unescape


class RegistrationCodec(RecordCodec[OfficerRegistration]):
    table = "RegistrationList"
    columns = ("ID", "OfficerID", "ProjectID", "Status")

    def key(self, entity: OfficerRegistration) -> str:
        return entity.registration_id

    def encode_fields(self, entity: OfficerRegistration) -> list[str]:
        return [
            escape(entity.registration_id),
            escape(entity.officer_id),
            escape(entity.project_id),
            entity.status.value,
        ]

    def decode_fields(self, fields: list[str]) -> OfficerRegistration:
        return OfficerRegistration(
            registration_id=unescape(fields[0]),
            officer_id=unescape(fields[1]).upper(),
            project_id=unescape(fields[2]),
            status=RegistrationStatus(unescape(fields[3])),
        )

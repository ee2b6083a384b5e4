"""
Person table codecs.

One codec class serves the three person tables.  The role decides both
the table name and which trailing columns are present:

    ApplicantList  ID|Name|DOB|MaritalStatus|Role|Password|Application|Enquiries
    OfficerList    ... |Application|Enquiries|Status|AssignedProjects
    ManagerList    ID|Name|DOB|MaritalStatus|Role|Password

The Application and Enquiries columns hold packed snapshots.  The
application and enquiry tables are authoritative; the snapshots are
refreshed in the same unit of work whenever those tables change.
"""

from __future__ import annotations

from housing_kernel.domain.entities import (
    ApplicantProfile,
    Application,
    Enquiry,
    Identity,
    OfficerProfile,
    Person,
)
from housing_kernel.domain.values import (
    ApplicationStatus,
    MaritalStatus,
    OfficerStatus,
    Role,
    UnitType,
    normalize_person_id,
)
from housing_kernel.records.codec import (
    NULL,
    RecordCodec,
    decode_date,
    decode_optional,
    encode_date,
    encode_optional,
    escape,
    pack,
    pack_ids,
    unescape,
    unpack,
    unpack_ids,
)

BASE_COLUMNS = ("ID", "Name", "DOB", "MaritalStatus", "Role", "Password")
APPLICANT_COLUMNS = ("Application", "Enquiries")
OFFICER_COLUMNS = ("Status", "AssignedProjects")

PERSON_TABLES: dict[Role, str] = {
    Role.APPLICANT: "ApplicantList",
    Role.OFFICER: "OfficerList",
    Role.MANAGER: "ManagerList",
}


# -------------------------------------------------------------------------
# Packed snapshots
# -------------------------------------------------------------------------


def pack_application(application: Application | None) -> str:
    if application is None:
        return NULL
    return pack([[
        escape(application.application_id),
        application.status.value,
        escape(application.applicant_id),
        escape(application.project_id),
        application.unit_type.value,
    ]])


def unpack_application(field: str) -> Application | None:
    rows = unpack(field)
    if not rows:
        return None
    if len(rows) != 1 or len(rows[0]) != 5:
        raise ValueError(f"packed application must have 5 fields: {field!r}")
    app_id, status, applicant_id, project_id, unit_type = (unescape(t) for t in rows[0])
    return Application(
        application_id=app_id,
        status=ApplicationStatus(status),
        applicant_id=applicant_id,
        project_id=project_id,
        unit_type=UnitType(unit_type),
    )


def pack_enquiries(enquiries: tuple[Enquiry, ...]) -> str:
    return pack([
        [
            escape(e.enquiry_id),
            escape(e.applicant_id),
            escape(e.project_id),
            escape(e.message),
            encode_optional(e.reply),
        ]
        for e in enquiries
    ])


def unpack_enquiries(field: str) -> tuple[Enquiry, ...]:
    enquiries = []
    for row in unpack(field):
        if len(row) != 5:
            raise ValueError(f"packed enquiry must have 5 fields, found {len(row)}")
        enquiries.append(Enquiry(
            enquiry_id=unescape(row[0]),
            applicant_id=unescape(row[1]),
            project_id=unescape(row[2]),
            message=unescape(row[3]),
            reply=decode_optional(row[4]),
        ))
    return tuple(enquiries)


# -------------------------------------------------------------------------
# Table codec
# -------------------------------------------------------------------------


class PersonCodec(RecordCodec[Person]):
    """Codec for the person table of one role."""

    def __init__(self, role: Role):
        self.role = role
        self.table = PERSON_TABLES[role]
        columns = BASE_COLUMNS
        if role in (Role.APPLICANT, Role.OFFICER):
            columns += APPLICANT_COLUMNS
        if role == Role.OFFICER:
            columns += OFFICER_COLUMNS
        self.columns = columns

    def key(self, entity: Person) -> str:
        return entity.person_id

    def encode_fields(self, entity: Person) -> list[str]:
        if entity.role != self.role:
            raise ValueError(
                f"{self.table} cannot store {entity.role.value} {entity.person_id}"
            )
        identity = entity.identity
        fields = [
            escape(identity.person_id),
            escape(identity.name),
            encode_date(identity.date_of_birth),
            identity.marital_status.value if identity.marital_status else NULL,
            entity.role.value,
            escape(identity.password),
        ]
        if entity.applicant is not None:
            fields.append(pack_application(entity.applicant.application))
            fields.append(pack_enquiries(entity.applicant.enquiries))
        if entity.officer is not None:
            fields.append(entity.officer.status.value)
            fields.append(pack_ids(entity.officer.assigned_project_ids))
        return fields

    def decode_fields(self, fields: list[str]) -> Person:
        role = Role(unescape(fields[4]).strip().upper())
        if role != self.role:
            raise ValueError(f"role {role.value} does not belong in {self.table}")
        marital = decode_optional(fields[3])
        identity = Identity(
            person_id=normalize_person_id(unescape(fields[0])),
            name=unescape(fields[1]),
            date_of_birth=decode_date(fields[2]),
            marital_status=MaritalStatus(marital.strip().upper()) if marital else None,
            password=unescape(fields[5]),
        )
        if role == Role.MANAGER:
            return Person.manager_of(identity)

        profile = ApplicantProfile(
            application=unpack_application(fields[6]),
            enquiries=unpack_enquiries(fields[7]),
        )
        if role == Role.APPLICANT:
            return Person.applicant_of(identity, profile)

        assigned = unpack_ids(fields[9])
        status_token = decode_optional(fields[8])
        status = OfficerStatus(status_token) if status_token else (
            OfficerStatus.ASSIGNED if assigned else OfficerStatus.AVAILABLE
        )
        return Person.officer_of(
            identity,
            profile,
            OfficerProfile(status=status, assigned_project_ids=assigned),
        )

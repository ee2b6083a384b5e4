"""
Repositories.open() reference resolution.

The application and enquiry tables are authoritative.  Person snapshots
that disagree are repaired in memory; snapshots naming rows missing from
the tables are recovered into them.  Nothing is written at load.
"""

from housing_kernel.db.backing import InMemoryBacking
from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.values import ApplicationStatus

MANAGERS = ["T7890123G|Michael|01 01 1977|MARRIED|MANAGER|password"]
OFFICERS = ["T5678901E|Daniel|07 07 1987|MARRIED|OFFICER|password|NULL||ASSIGNED|P-1"]
PROJECTS = [
    "P-1|Acacia|true|Yishun|01 05 2025|31 07 2025|T7890123G|3|T5678901E,T0000000X|"
    "TWO_ROOM,2,2,350000",
]


def _open(**tables):
    backing = InMemoryBacking({
        "ManagerList": MANAGERS,
        "OfficerList": OFFICERS,
        "ProjectList": PROJECTS,
        **tables,
    })
    return backing, Repositories.open(backing)


class TestResolveReferences:

    def test_dangling_officer_dropped_in_memory_only(self, captured_logs):
        backing, repos = _open()

        assert repos.project("P-1").officer_ids == ("T5678901E",)
        assert "T0000000X" in backing.read("ProjectList")[0]
        dangling = [r for r in captured_logs() if r["message"] == "dangling_officer_reference"]
        assert dangling[0]["officer_id"] == "T0000000X"

    def test_dangling_manager_is_reported(self, captured_logs):
        _open(ManagerList=[])
        assert any(r["message"] == "dangling_manager_reference" for r in captured_logs())

    def test_stale_snapshot_follows_application_table(self):
        _, repos = _open(
            ApplicantList=[
                "S1234567A|John|15 03 1990|MARRIED|APPLICANT|password|"
                "A-1,PENDING,S1234567A,P-1,TWO_ROOM|",
            ],
            ApplicationList=["A-1|SUCCESS|S1234567A|P-1|TWO_ROOM|NULL"],
        )
        snapshot = repos.applicants.get("S1234567A").applicant.application
        assert snapshot.status == ApplicationStatus.SUCCESS

    def test_application_recovered_from_snapshot(self, captured_logs):
        _, repos = _open(
            ApplicantList=[
                "S1234567A|John|15 03 1990|MARRIED|APPLICANT|password|"
                "A-1,BOOKED,S1234567A,P-1,TWO_ROOM|E-1,S1234567A,P-1,Parking?,NULL",
            ],
        )
        assert repos.applications.get("A-1").status == ApplicationStatus.BOOKED
        assert repos.enquiries.get("E-1").message == "Parking?"
        assert any(
            r["message"] == "application_recovered_from_snapshot" for r in captured_logs()
        )

    def test_missing_snapshot_filled_from_table(self):
        _, repos = _open(
            ApplicantList=["S1234567A|John|15 03 1990|MARRIED|APPLICANT|password|NULL|"],
            ApplicationList=[
                "A-1|REJECTED|S1234567A|P-1|TWO_ROOM|NULL",
                "A-2|PENDING|S1234567A|P-1|TWO_ROOM|NULL",
            ],
            EnquiryList=["E-1|S1234567A|P-1|Parking?|Yes"],
        )
        profile = repos.applicants.get("S1234567A").applicant
        assert profile.application.application_id == "A-2"
        assert profile.enquiries[0].reply == "Yes"

    def test_resolve_can_be_skipped(self):
        backing = InMemoryBacking({"OfficerList": [], "ProjectList": PROJECTS})
        repos = Repositories.open(backing, resolve=False)
        assert repos.project("P-1").officer_ids == ("T5678901E", "T0000000X")

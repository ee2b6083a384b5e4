"""
Enquiries through the HousingSystem facade.

The enquiry table is authoritative; the author's packed snapshot must
follow every submit, edit, delete and reply.
"""

import pytest

from housing_kernel.domain.results import OutcomeStatus

PROJECT = "P-ACACIA"


@pytest.fixture
def enquiry(system, people, project):
    result = system.submit_enquiry(people.married, PROJECT, "Is there parking?")
    assert result.is_success, result.message
    return result.value


def _snapshot(repos, person):
    return repos.find_person(person.person_id).applicant.enquiries


class TestSubmit:

    def test_submit_updates_table_and_snapshot(self, repos, people, enquiry):
        assert enquiry.reply is None
        assert repos.enquiries.get(enquiry.enquiry_id) == enquiry
        assert _snapshot(repos, people.married) == (enquiry,)

    def test_officer_may_ask_as_applicant(self, system, repos, people, project):
        result = system.submit_enquiry(people.officer, PROJECT, "Pets allowed?")
        assert result.is_success
        assert _snapshot(repos, people.officer) == (result.value,)

    def test_manager_cannot_ask(self, system, people, project):
        result = system.submit_enquiry(people.manager, PROJECT, "Hello")
        assert result.error_code == "ROLE_NOT_PERMITTED"

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_message_refused(self, system, people, project, text):
        result = system.submit_enquiry(people.married, PROJECT, text)
        assert result.status == OutcomeStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_ENQUIRY"

    def test_unknown_project(self, system, people):
        assert system.submit_enquiry(people.married, "P-NOPE", "Hi").status \
            == OutcomeStatus.NOT_FOUND

    def test_delimiters_in_message_survive(self, system, repos, people, project):
        text = "Unit a|b; cost, roughly NULL?"
        result = system.submit_enquiry(people.married, PROJECT, text)
        assert repos.enquiries.get(result.value.enquiry_id).message == text


class TestEditAndDelete:

    def test_author_edits(self, system, repos, people, enquiry):
        result = system.edit_enquiry(people.married, enquiry.enquiry_id, "Is there a gym?")
        assert result.value.message == "Is there a gym?"
        assert _snapshot(repos, people.married)[0].message == "Is there a gym?"

    def test_other_applicant_cannot_edit(self, system, people, enquiry):
        result = system.edit_enquiry(people.single, enquiry.enquiry_id, "Mine")
        assert result.status == OutcomeStatus.AUTHORIZATION_DENIED
        assert result.error_code == "NOT_ENQUIRY_AUTHOR"

    def test_author_deletes(self, system, repos, people, enquiry):
        assert system.delete_enquiry(people.married, enquiry.enquiry_id).is_success
        assert enquiry.enquiry_id not in repos.enquiries
        assert _snapshot(repos, people.married) == ()

    def test_delete_unknown(self, system, people, project):
        assert system.delete_enquiry(people.married, "E-NOPE").error_code \
            == "ENQUIRY_NOT_FOUND"

    def test_replied_enquiry_is_frozen(self, system, people, enquiry):
        system.reply_enquiry(people.manager, enquiry.enquiry_id, "Yes, basement.")
        edit = system.edit_enquiry(people.married, enquiry.enquiry_id, "Changed")
        delete = system.delete_enquiry(people.married, enquiry.enquiry_id)
        assert edit.error_code == "ENQUIRY_ALREADY_REPLIED"
        assert delete.error_code == "ENQUIRY_ALREADY_REPLIED"


class TestReply:

    def test_manager_replies(self, system, repos, people, enquiry):
        result = system.reply_enquiry(people.manager, enquiry.enquiry_id, "Yes, basement.")
        assert result.value.reply == "Yes, basement."
        assert result.value.is_replied
        assert _snapshot(repos, people.married)[0].reply == "Yes, basement."

    def test_assigned_officer_replies(self, system, people, assigned_officer, enquiry):
        result = system.reply_enquiry(assigned_officer, enquiry.enquiry_id, "Yes.")
        assert result.is_success, result.message

    def test_unassigned_officer_refused(self, system, people, enquiry):
        result = system.reply_enquiry(people.officer, enquiry.enquiry_id, "Yes.")
        assert result.status == OutcomeStatus.AUTHORIZATION_DENIED
        assert result.error_code == "OFFICER_NOT_ASSIGNED"

    def test_applicant_cannot_reply(self, system, people, enquiry):
        result = system.reply_enquiry(people.single, enquiry.enquiry_id, "Yes.")
        assert result.error_code == "ROLE_NOT_PERMITTED"

    def test_reply_once(self, system, people, enquiry):
        system.reply_enquiry(people.manager, enquiry.enquiry_id, "Yes.")
        again = system.reply_enquiry(people.manager2, enquiry.enquiry_id, "No.")
        assert again.status == OutcomeStatus.STATE_CONFLICT
        assert again.error_code == "ENQUIRY_ALREADY_REPLIED"

    def test_empty_reply_refused(self, system, repos, people, enquiry):
        result = system.reply_enquiry(people.manager, enquiry.enquiry_id, " ")
        assert result.error_code == "INVALID_ENQUIRY"
        assert repos.enquiries.get(enquiry.enquiry_id).reply is None

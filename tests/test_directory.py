"""
tests/test_directory.py - group resolution, membership and method translation
"""

import pytest

from core.classifier import fncBuildReportRow
from core.errors import AmbiguousGroupError, EmptyResultError, NotFoundError, QueryFailure
from core.models import AuthMethodRecord, MethodType
from handlers.graph.directory import (
    fncFindCandidateGroups,
    fncGetAuthMethodRecords,
    fncListUserMembers,
    fncMethodsToRecords,
    fncResolveGroup,
)
from conftest import AUTHENTICATOR, FIDO2, MOBILE, OFFICE, PASSWORD, SOFTWARE_OATH, FakeGraphClient, graph_user


class TestResolveGroup:
    def test_exact_match_among_fuzzy_candidates(self, sales_directory):
        client = FakeGraphClient(sales_directory)

        group = fncResolveGroup(client, "Sales")

        assert group["id"] == "g-sales"

    def test_search_uses_escaped_startswith_filter(self):
        client = FakeGraphClient({"groups": []})

        fncFindCandidateGroups(client, "O'Brien Team")

        endpoint, params, _ = client.calls[0]
        assert endpoint == "groups"
        assert params["$filter"] == "startswith(displayName,'O''Brien Team')"

    def test_not_found(self):
        client = FakeGraphClient({"groups": [{"id": "g1", "displayName": "Finance"}]})

        with pytest.raises(NotFoundError):
            fncResolveGroup(client, "Finance-MFA")

    def test_match_is_case_sensitive(self):
        client = FakeGraphClient({"groups": [{"id": "g1", "displayName": "sales"}]})

        with pytest.raises(NotFoundError):
            fncResolveGroup(client, "Sales")

    def test_multiple_exact_matches_are_ambiguous(self):
        client = FakeGraphClient({"groups": [
            {"id": "g1", "displayName": "Sales"},
            {"id": "g2", "displayName": "Sales"},
        ]})

        with pytest.raises(AmbiguousGroupError) as exc:
            fncResolveGroup(client, "Sales")

        assert exc.value.group_ids == ["g1", "g2"]

    def test_blank_name_rejected_before_query(self):
        client = FakeGraphClient()

        with pytest.raises(ValueError):
            fncResolveGroup(client, "  ")
        assert client.calls == []

    def test_query_failure_propagates(self):
        client = FakeGraphClient(failures={"groups": QueryFailure("boom", status=500)})

        with pytest.raises(QueryFailure):
            fncResolveGroup(client, "Sales")


class TestListUserMembers:
    def test_keeps_only_users(self, sales_directory):
        client = FakeGraphClient(sales_directory)

        members = fncListUserMembers(client, "g-sales")

        assert [m.object_id for m in members] == ["u-zoe", "u-adam", "u-Bob"]
        assert members[0].email_address == "zoe@contoso.com"

    def test_refetches_without_select_when_type_missing(self):
        client = FakeGraphClient()
        plain = [{"id": "u1"}]
        typed = [graph_user("u1", "u1@x.com")]

        def get_all(endpoint, params=None, api_version="v1.0"):
            client.calls.append((endpoint, params, api_version))
            return plain if params else typed

        client.get_all = get_all

        members = fncListUserMembers(client, "g1")

        assert [m.object_id for m in members] == ["u1"]
        assert len(client.calls) == 2

    @pytest.mark.parametrize("result", [None, []])
    def test_null_or_empty_membership(self, result):
        client = FakeGraphClient({"groups/g1/members": result})

        with pytest.raises(EmptyResultError):
            fncListUserMembers(client, "g1")

    def test_no_user_members(self):
        client = FakeGraphClient({"groups/g1/members": [
            {"@odata.type": "#microsoft.graph.servicePrincipal", "id": "sp1"},
        ]})

        with pytest.raises(EmptyResultError):
            fncListUserMembers(client, "g1")


class TestMethodsToRecords:
    def test_password_only_gives_no_records(self):
        assert fncMethodsToRecords([PASSWORD]) == []

    def test_mobile_phone_gives_sms_and_voice(self):
        records = fncMethodsToRecords([MOBILE], preferred="voiceMobile")

        assert records == [
            AuthMethodRecord(MethodType.ONE_WAY_SMS, False),
            AuthMethodRecord(MethodType.TWO_WAY_VOICE_MOBILE, True),
        ]

    def test_app_methods(self):
        records = fncMethodsToRecords([AUTHENTICATOR, SOFTWARE_OATH], preferred="push")

        assert records == [
            AuthMethodRecord(MethodType.PHONE_APP_NOTIFICATION, True),
            AuthMethodRecord(MethodType.PHONE_APP_OTP, False),
            AuthMethodRecord(MethodType.PHONE_APP_OTP, False),
        ]

    def test_authenticator_provides_app_code_and_notification(self):
        records = fncMethodsToRecords([AUTHENTICATOR], preferred="oath")

        assert records == [
            AuthMethodRecord(MethodType.PHONE_APP_NOTIFICATION, False),
            AuthMethodRecord(MethodType.PHONE_APP_OTP, True),
        ]

    def test_authenticator_only_user_with_oath_default(self):
        row = fncBuildReportRow("a@x.com", "a", fncMethodsToRecords([AUTHENTICATOR], preferred="oath"))

        assert row.mfa_enabled is True
        assert row.has_app_code is True
        assert row.has_app_notification is True
        assert row.to_csv_row()["Default Method"] == "Authenticator App Code"

    def test_other_types_are_kept_unrecognised(self):
        records = fncMethodsToRecords([OFFICE, FIDO2])

        assert [r.type_name for r in records] == ["TwoWayVoiceOffice", "fido2AuthenticationMethod"]
        assert not any(r.is_recognised for r in records)

    def test_unknown_preference_marks_nothing(self):
        records = fncMethodsToRecords([MOBILE], preferred="unknownFutureValue")

        assert not any(r.is_default for r in records)


class TestGetAuthMethodRecords:
    def test_reads_preferences_from_beta(self, sales_directory):
        client = FakeGraphClient(sales_directory)

        records = fncGetAuthMethodRecords(client, "u-zoe")

        assert AuthMethodRecord(MethodType.PHONE_APP_OTP, True) in records
        pref_call = [c for c in client.calls if c[0].endswith("signInPreferences")][0]
        assert pref_call[2] == "beta"

    def test_no_methods_skips_preference_lookup(self):
        client = FakeGraphClient({"users/u1/authentication/methods": []})

        assert fncGetAuthMethodRecords(client, "u1") == []
        assert len(client.calls) == 1

"""
tests/conftest.py - shared fixtures

Graph access is replaced by FakeGraphClient, an in-memory stand-in keyed by
endpoint. No test touches the network.
"""

from typing import Any, Dict, List, Optional

import pytest

from core import config as config_mod
from core.errors import QueryFailure
from core.utils import fncSetDebug


class FakeGraphClient:
    """Answers get/get_all from canned responses; records every call."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, failures: Optional[Dict[str, Exception]] = None):
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.calls: List[tuple] = []

    def _lookup(self, endpoint, params, api_version):
        self.calls.append((endpoint, params, api_version))
        if endpoint in self.failures:
            raise self.failures[endpoint]
        if endpoint not in self.responses:
            raise QueryFailure(f"Graph API request failed with status 404: {endpoint}", status=404)
        return self.responses[endpoint]

    def get(self, endpoint, params=None, api_version="v1.0"):
        return self._lookup(endpoint, params, api_version)

    def get_all(self, endpoint, params=None, api_version="v1.0"):
        return self._lookup(endpoint, params, api_version)


def graph_user(uid: str, upn: str, name: str = "", mail: str = "") -> Dict[str, Any]:
    return {
        "@odata.type": "#microsoft.graph.user",
        "id": uid,
        "userPrincipalName": upn,
        "displayName": name or upn.split("@")[0],
        "mail": mail or upn,
    }


def add_user(responses: Dict[str, Any], uid: str, upn: str, methods: List[Dict[str, Any]], preferred: Optional[str] = None):
    """Register the per-user endpoints for one user on a responses dict."""
    responses[f"users/{uid}"] = {k: v for k, v in graph_user(uid, upn).items() if k != "@odata.type"}
    responses[f"users/{uid}/authentication/methods"] = methods
    responses[f"users/{uid}/authentication/signInPreferences"] = {
        "userPreferredMethodForSecondaryAuthentication": preferred,
    }


PASSWORD = {"@odata.type": "#microsoft.graph.passwordAuthenticationMethod", "id": "pw"}
MOBILE = {"@odata.type": "#microsoft.graph.phoneAuthenticationMethod", "id": "m1", "phoneType": "mobile"}
OFFICE = {"@odata.type": "#microsoft.graph.phoneAuthenticationMethod", "id": "o1", "phoneType": "office"}
AUTHENTICATOR = {"@odata.type": "#microsoft.graph.microsoftAuthenticatorAuthenticationMethod", "id": "a1"}
SOFTWARE_OATH = {"@odata.type": "#microsoft.graph.softwareOathAuthenticationMethod", "id": "s1"}
FIDO2 = {"@odata.type": "#microsoft.graph.fido2AuthenticationMethod", "id": "f1"}


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config out of the real home folder and env credentials out of tests."""
    monkeypatch.setattr(config_mod, "DEFAULT_HOME", tmp_path / ".groupmfareport")
    for var in (
        "ENTRA_TENANT_ID", "ENTRA_CLIENT_ID", "ENTRA_CLIENT_SECRET", "ENTRA_AUTHORITY",
        "GROUPMFAREPORT_TENANT_ID", "GROUPMFAREPORT_CLIENT_ID", "GROUPMFAREPORT_CLIENT_SECRET",
    ):
        monkeypatch.delenv(var, raising=False)
    fncSetDebug(False)
    yield


@pytest.fixture
def fake_client_factory():
    return FakeGraphClient


@pytest.fixture
def sales_directory():
    """Directory with group 'Sales' (3 users + a nested group) and a near-miss 'Sales EMEA'."""
    responses: Dict[str, Any] = {
        "groups": [
            {"id": "g-sales", "displayName": "Sales"},
            {"id": "g-emea", "displayName": "Sales EMEA"},
        ],
        "groups/g-sales/members": [
            graph_user("u-zoe", "zoe@contoso.com"),
            {"@odata.type": "#microsoft.graph.group", "id": "g-nested", "displayName": "Nested"},
            graph_user("u-adam", "adam@contoso.com"),
            graph_user("u-Bob", "Bob@contoso.com"),
        ],
    }
    add_user(responses, "u-zoe", "zoe@contoso.com", [PASSWORD, SOFTWARE_OATH, MOBILE], preferred="oath")
    add_user(responses, "u-adam", "adam@contoso.com", [PASSWORD])
    add_user(responses, "u-Bob", "Bob@contoso.com", [PASSWORD, AUTHENTICATOR], preferred="push")
    return responses

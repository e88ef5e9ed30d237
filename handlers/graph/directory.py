# ================================================================
# File     : directory.py
# Purpose  : Entra directory lookups used by the MFA report
#            - group search + exact display-name resolution
#            - user-type membership listing
#            - per-user profile and strong authentication methods
# Notes    : Every Graph failure propagates (QueryFailure); the run
#            is fail-fast
# ================================================================

from typing import Any, Dict, List, Optional

from core.errors import AmbiguousGroupError, EmptyResultError, NotFoundError
from core.models import AuthMethodRecord, GroupMember, MethodType
from core.utils import fncPrintMessage

USER_ODATA_TYPE = "#microsoft.graph.user"

# Graph authenticationMethod types that are not second factors
NON_STRONG_METHODS = {
    "passwordAuthenticationMethod",
    "emailAuthenticationMethod",
}

# phoneAuthenticationMethod.phoneType -> method types it provides
PHONE_TYPE_MAP = {
    "mobile": [MethodType.ONE_WAY_SMS, MethodType.TWO_WAY_VOICE_MOBILE],
    "alternateMobile": ["TwoWayVoiceAlternateMobile"],
    "office": ["TwoWayVoiceOffice"],
}

# app method types -> method types they provide
APP_METHOD_MAP = {
    "microsoftAuthenticatorAuthenticationMethod": [MethodType.PHONE_APP_NOTIFICATION, MethodType.PHONE_APP_OTP],
    "softwareOathAuthenticationMethod": [MethodType.PHONE_APP_OTP],
}

# signInPreferences.userPreferredMethodForSecondaryAuthentication -> method type
PREFERRED_METHOD_MAP = {
    "sms": MethodType.ONE_WAY_SMS,
    "voiceMobile": MethodType.TWO_WAY_VOICE_MOBILE,
    "oath": MethodType.PHONE_APP_OTP,
    "push": MethodType.PHONE_APP_NOTIFICATION,
    "voiceAlternateMobile": "TwoWayVoiceAlternateMobile",
    "voiceOffice": "TwoWayVoiceOffice",
}


def _odata_escape(value: str) -> str:
    return value.replace("'", "''")


def _short_type(odata_type: Optional[str]) -> str:
    return (odata_type or "").rsplit(".", 1)[-1]


# --------------------- Group resolver ---------------------

def fncFindCandidateGroups(client, name: str) -> List[Dict[str, Any]]:
    """Fuzzy search: every group whose display name starts with `name`."""
    params = {
        "$filter": f"startswith(displayName,'{_odata_escape(name)}')",
        "$select": "id,displayName",
    }
    rows = client.get_all("groups", params=params) or []
    fncPrintMessage(f"{len(rows)} candidate group(s) for '{name}'", "debug")
    return rows


def fncFilterExactGroups(candidates: List[Dict[str, Any]], name: str) -> List[Dict[str, Any]]:
    return [g for g in candidates if g.get("displayName") == name]


def fncResolveGroup(client, name: str) -> Dict[str, Any]:
    """Return the single group whose display name equals `name` exactly."""
    if not name or not name.strip():
        raise ValueError("Group name must be a non-empty string")

    matches = fncFilterExactGroups(fncFindCandidateGroups(client, name), name)
    if not matches:
        raise NotFoundError(f"Group '{name}' not found")
    if len(matches) > 1:
        raise AmbiguousGroupError(name, [g.get("id", "?") for g in matches])

    group = matches[0]
    fncPrintMessage(f"Resolved group '{name}' → {group.get('id')}", "info")
    return group


# --------------------- Membership lister ---------------------

def fncListUserMembers(client, group_id: str) -> List[GroupMember]:
    """All user-type members of a group (nested groups, devices and SPs excluded)."""
    endpoint = f"groups/{group_id}/members"
    rows = client.get_all(endpoint, params={"$select": "id,mail,userPrincipalName,displayName"})
    if rows and any("@odata.type" not in r for r in rows):
        rows = client.get_all(endpoint)

    if not rows:
        raise EmptyResultError(f"Group {group_id} returned no members")

    members = [
        GroupMember(
            object_id=r.get("id", ""),
            email_address=r.get("mail") or "",
            user_principal_name=r.get("userPrincipalName") or "",
            display_name=r.get("displayName") or "",
        )
        for r in rows
        if r.get("@odata.type") == USER_ODATA_TYPE
    ]
    skipped = len(rows) - len(members)
    if skipped:
        fncPrintMessage(f"Skipped {skipped} non-user member(s) of group {group_id}", "debug")

    if not members:
        raise EmptyResultError(f"Group {group_id} returned no user members")
    return members


# --------------------- Per-user lookups ---------------------

def fncGetUser(client, object_id: str) -> Dict[str, Any]:
    return client.get(f"users/{object_id}", params={"$select": "id,userPrincipalName,displayName,mail"})


def fncGetPreferredMethod(client, object_id: str) -> Optional[str]:
    """The user's default second-factor method name, if any (beta endpoint)."""
    prefs = client.get(f"users/{object_id}/authentication/signInPreferences", api_version="beta")
    return (prefs or {}).get("userPreferredMethodForSecondaryAuthentication")


def fncMethodsToRecords(methods: List[Dict[str, Any]], preferred: Optional[str] = None) -> List[AuthMethodRecord]:
    """Translate Graph authentication methods into AuthMethodRecords."""
    default_type = PREFERRED_METHOD_MAP.get(preferred or "")
    types = []
    for m in methods or []:
        short = _short_type(m.get("@odata.type"))
        if short in NON_STRONG_METHODS:
            continue
        if short == "phoneAuthenticationMethod":
            types.extend(PHONE_TYPE_MAP.get(m.get("phoneType"), [f"phone:{m.get('phoneType')}"]))
        elif short in APP_METHOD_MAP:
            types.extend(APP_METHOD_MAP[short])
        else:
            types.append(short or "unknown")

    return [AuthMethodRecord(method_type=t, is_default=(default_type is not None and t == default_type)) for t in types]


def fncGetAuthMethodRecords(client, object_id: str) -> List[AuthMethodRecord]:
    methods = client.get_all(f"users/{object_id}/authentication/methods")
    preferred = fncGetPreferredMethod(client, object_id) if methods else None
    records = fncMethodsToRecords(methods, preferred)
    fncPrintMessage(
        f"{object_id}: {len(records)} strong method(s), preferred={preferred or 'none'}",
        "debug",
    )
    return records

# ================================================================
# File     : classifier.py
# Purpose  : Map a user's strong authentication methods to report fields
# Notes    : Unrecognised method types are logged and skipped so new
#            directory method types never break a run
# ================================================================

from typing import Dict, Iterable, List, Tuple

from core.models import AuthMethodRecord, DefaultMethod, MethodType, UserReportRow
from core.utils import fncPrintMessage

# MethodType -> (UserReportRow flag, default label)
METHOD_MAP: Dict[MethodType, Tuple[str, DefaultMethod]] = {
    MethodType.ONE_WAY_SMS: ("has_text_message", DefaultMethod.TEXT_MESSAGE),
    MethodType.TWO_WAY_VOICE_MOBILE: ("has_voice_call", DefaultMethod.VOICE_CALL),
    MethodType.PHONE_APP_OTP: ("has_app_code", DefaultMethod.AUTHENTICATOR_APP_CODE),
    MethodType.PHONE_APP_NOTIFICATION: ("has_app_notification", DefaultMethod.AUTHENTICATOR_APP_NOTIFICATION),
}

FLAG_FIELDS = [flag for flag, _ in METHOD_MAP.values()]


# ================================================================
# Function: fncClassifyMethods
# Purpose : Classify a set of method records
# Notes   : Returns (mfa_enabled, default_method, flags). Flags only
#           reflect which types are present; if several records are
#           marked default the last one wins.
# ================================================================
def fncClassifyMethods(methods: Iterable[AuthMethodRecord], user: str = "") -> Tuple[bool, DefaultMethod, Dict[str, bool]]:
    records: List[AuthMethodRecord] = list(methods or [])
    flags = {flag: False for flag in FLAG_FIELDS}
    default_method = DefaultMethod.NONE

    if not records:
        return False, default_method, flags

    for rec in records:
        mapped = METHOD_MAP.get(rec.method_type) if rec.is_recognised else None
        if mapped is None:
            fncPrintMessage(f"Unrecognised method type '{rec.type_name}' for {user or 'user'}; ignoring.", "warn")
            continue
        flag, label = mapped
        flags[flag] = True
        if rec.is_default:
            default_method = label

    return True, default_method, flags


# ================================================================
# Function: fncBuildReportRow
# Purpose : Build the immutable report row for one user
# ================================================================
def fncBuildReportRow(user_principal_name: str, display_name: str, records: Iterable[AuthMethodRecord]) -> UserReportRow:
    mfa_enabled, default_method, flags = fncClassifyMethods(records, user=user_principal_name)
    return UserReportRow(
        user_principal_name=user_principal_name or "",
        display_name=display_name or "",
        mfa_enabled=mfa_enabled,
        default_method=default_method,
        **flags,
    )

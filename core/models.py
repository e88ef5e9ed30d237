# ================================================================
# File     : models.py
# Purpose  : Data models for group members, MFA methods and report rows
# ================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class MethodType(Enum):
    """Strong authentication method types the report knows about"""
    ONE_WAY_SMS = "OneWaySMS"
    TWO_WAY_VOICE_MOBILE = "TwoWayVoiceMobile"
    PHONE_APP_OTP = "PhoneAppOTP"
    PHONE_APP_NOTIFICATION = "PhoneAppNotification"


class DefaultMethod(Enum):
    """Report labels for a user's default method"""
    NONE = "None"
    TEXT_MESSAGE = "Text Message"
    VOICE_CALL = "Voice Call"
    AUTHENTICATOR_APP_CODE = "Authenticator App Code"
    AUTHENTICATOR_APP_NOTIFICATION = "Authenticator App Notification"


REPORT_COLUMNS = [
    "UserPrincipalName",
    "Name",
    "MFAEnabled",
    "Default Method",
    "Authenticator App Notification",
    "Authenticator App Code",
    "Voice Call",
    "Text Message",
]


def fncYesNo(value: bool) -> str:
    return "Yes" if value else "No"


@dataclass
class GroupMember:
    """User-type member of a group, as returned by the membership listing"""
    object_id: str
    email_address: str = ""
    user_principal_name: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class AuthMethodRecord:
    """One registered strong authentication method.

    method_type is a MethodType for known methods, otherwise the raw type
    name reported by the directory.
    """
    method_type: Union[MethodType, str]
    is_default: bool = False

    @property
    def is_recognised(self) -> bool:
        return isinstance(self.method_type, MethodType)

    @property
    def type_name(self) -> str:
        if isinstance(self.method_type, MethodType):
            return self.method_type.value
        return str(self.method_type)


@dataclass(frozen=True)
class UserReportRow:
    """MFA enrolment summary for one user"""
    user_principal_name: str
    display_name: str
    mfa_enabled: bool = False
    default_method: DefaultMethod = DefaultMethod.NONE
    has_app_notification: bool = False
    has_app_code: bool = False
    has_voice_call: bool = False
    has_text_message: bool = False

    def to_csv_row(self) -> Dict[str, str]:
        return {
            "UserPrincipalName": self.user_principal_name,
            "Name": self.display_name,
            "MFAEnabled": fncYesNo(self.mfa_enabled),
            "Default Method": self.default_method.value,
            "Authenticator App Notification": fncYesNo(self.has_app_notification),
            "Authenticator App Code": fncYesNo(self.has_app_code),
            "Voice Call": fncYesNo(self.has_voice_call),
            "Text Message": fncYesNo(self.has_text_message),
        }

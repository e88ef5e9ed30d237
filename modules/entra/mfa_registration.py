# ================================================================
# File     : modules/entra/mfa_registration.py
# Purpose  : MFA registration report for the members of one group
#            group → user members → auth methods → classified rows → CSV
# Notes    : Follows the run(client, args) signature. Fail-fast: any
#            error propagates and no report is written.
# ================================================================

from typing import Any, Dict, List

from core.classifier import fncBuildReportRow
from core.errors import QueryFailure
from core.exports import fncWriteReport
from core.models import UserReportRow
from core.utils import fncPrintMessage, fncToTable, fncNewRunId
from handlers.graph.directory import (
    fncResolveGroup,
    fncListUserMembers,
    fncGetUser,
    fncGetAuthMethodRecords,
)

REQUIRED_PERMS = [
    "GroupMember.Read.All",
    "User.Read.All",
    "UserAuthenticationMethod.Read.All",
]


def _collect_rows(client, members) -> List[UserReportRow]:
    rows: List[UserReportRow] = []
    total = len(members)
    for i, m in enumerate(members, 1):
        user = fncGetUser(client, m.object_id)
        upn = user.get("userPrincipalName") or m.user_principal_name
        name = user.get("displayName") or m.display_name
        fncPrintMessage(f"[{i}/{total}] {upn}", "debug")
        records = fncGetAuthMethodRecords(client, m.object_id)
        rows.append(fncBuildReportRow(upn, name, records))
    return rows


def _summarise(rows: List[UserReportRow]) -> Dict[str, Any]:
    enabled = sum(1 for r in rows if r.mfa_enabled)
    return {
        "users": len(rows),
        "mfaEnabled": enabled,
        "mfaDisabled": len(rows) - enabled,
        "appNotification": sum(1 for r in rows if r.has_app_notification),
        "appCode": sum(1 for r in rows if r.has_app_code),
        "voiceCall": sum(1 for r in rows if r.has_voice_call),
        "textMessage": sum(1 for r in rows if r.has_text_message),
    }


def _with_permission_hint(ex: QueryFailure) -> QueryFailure:
    if ex.status not in (401, 403):
        return ex
    return QueryFailure(
        f"{ex} (application permissions required: {', '.join(REQUIRED_PERMS)})",
        status=ex.status,
        code=ex.code,
    )


# ================================================================
# Function: run
# Purpose : Entry point for module execution
# Notes   : client is an initialised GraphClient; args carries
#           combined_registration_group, report_file_prefix, report_path
# ================================================================
def run(client, args):
    run_id = fncNewRunId("mfa")
    group_name = args.combined_registration_group
    fncPrintMessage(f"Running MFA registration report for '{group_name}' (run={run_id})", "info")

    try:
        group = fncResolveGroup(client, group_name)
        members = fncListUserMembers(client, group["id"])
        fncPrintMessage(f"Found {len(members)} user member(s); reading authentication methods...", "info")
        rows = _collect_rows(client, members)
    except QueryFailure as ex:
        hinted = _with_permission_hint(ex)
        if hinted is ex:
            raise
        raise hinted from ex

    path = fncWriteReport(rows, args.report_file_prefix, getattr(args, "report_path", None))

    summary = _summarise(rows)
    print(fncToTable([summary]))
    fncPrintMessage(f"mfa_registration complete — {summary['users']} user(s)", "success")
    return {"summary": summary, "path": str(path)}

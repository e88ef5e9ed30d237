# ================================================================
# File     : errors.py
# Purpose  : Exception taxonomy for GroupMfaReport
# Notes    : Every error here is terminal for the run; main() prints
#            the message and exits non-zero
# ================================================================


class GroupMfaReportError(Exception):
    """Base class for all fatal report errors."""


class ClientUnavailable(GroupMfaReportError):
    """Directory client library or credentials are missing."""


class ConnectionFailure(GroupMfaReportError):
    """An authenticated Graph session could not be established."""


class NotFoundError(GroupMfaReportError):
    """No group matched the requested display name exactly."""


class AmbiguousGroupError(GroupMfaReportError):
    """More than one group matched the requested display name exactly."""

    def __init__(self, name: str, group_ids):
        self.name = name
        self.group_ids = list(group_ids)
        super().__init__(
            f"{len(self.group_ids)} groups are named '{name}' "
            f"({', '.join(self.group_ids)}); refusing to guess"
        )


class QueryFailure(GroupMfaReportError):
    """A Graph API call failed."""

    def __init__(self, message: str, status: int = None, code: str = None):
        self.status = status
        self.code = code
        super().__init__(message)


class EmptyResultError(GroupMfaReportError):
    """A membership query came back null or with no user members."""


class ReportWriteError(GroupMfaReportError):
    """The report directory or file could not be written."""


class ConfigError(GroupMfaReportError):
    """The configuration folder or file could not be created or read."""

#!/usr/bin/env python3
# ================================================================
# Tool     : GroupMfaReport
# Purpose  : Report MFA registration status for the members of an
#            Entra ID group, written to a timestamped CSV
# ================================================================

import sys
import argparse

from core.config import fncInitConfig, fncApplyCliOverrides, fncIsDebug
from core.errors import GroupMfaReportError
from core.utils import fncPrintMessage, fncSetDebug, fncDisplayBanner
from handlers.graph.session import fncConnectGraph
from modules.entra import mfa_registration

VERSION = "v1.0"


# ================================================================
# Function: fncParseArguments
# Purpose : Define and parse command-line arguments
# ================================================================
def fncParseArguments(argv=None):
    parser = argparse.ArgumentParser(
        prog="GroupMfaReport",
        description="Report MFA registration status for the members of an Entra ID group"
    )

    parser.add_argument(
        "-g", "--combined-registration-group",
        required=True,
        help="Display name of the group whose members are reported (exact match)"
    )
    parser.add_argument(
        "-p", "--report-file-prefix",
        required=True,
        help="Report filename prefix, e.g. Sales -> Sales-2024-01-15-0930.csv"
    )
    parser.add_argument(
        "-o", "--report-path",
        default=None,
        help="Folder to write the report to (created if missing; default: current folder)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config JSON (default: ~/.groupmfareport/config.json)"
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt for missing credentials"
    )
    parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not print the startup banner"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug output"
    )

    args = parser.parse_args(argv)
    if not args.combined_registration_group.strip():
        parser.error("--combined-registration-group must not be empty")
    if not args.report_file_prefix.strip():
        parser.error("--report-file-prefix must not be empty")
    return args


# ================================================================
# Function: main
# Purpose : Main entry point
# Notes   : 0 on completion, 1 on any fatal error, 130 on Ctrl+C
# ================================================================
def main(argv=None) -> int:
    args = fncParseArguments(argv)
    fncSetDebug(args.debug)

    if not args.no_banner:
        fncDisplayBanner(VERSION)

    try:
        cfg = fncInitConfig(args.config)
        cfg = fncApplyCliOverrides(cfg, args)
        fncSetDebug(fncIsDebug(cfg))
        fncPrintMessage("Debug output enabled.", "debug")

        client = fncConnectGraph(cfg, interactive=False if args.non_interactive else None)
        mfa_registration.run(client, args)
    except GroupMfaReportError as ex:
        fncPrintMessage(f"{type(ex).__name__}: {ex}", "error")
        fncPrintMessage("Run halted; no report written.", "error")
        return 1
    except KeyboardInterrupt:
        fncPrintMessage("Interrupted.", "warn")
        return 130

    fncPrintMessage("Report complete.", "success")
    return 0


if __name__ == "__main__":
    sys.exit(main())

# ================================================================
# File     : exports.py
# Purpose  : Write the MFA registration report to CSV
# Notes    : Called by the pipeline once every user has been classified
# ================================================================

import csv
import pathlib
from datetime import datetime
from typing import Iterable, List, Optional

from core.errors import ReportWriteError
from core.models import REPORT_COLUMNS, UserReportRow
from core.utils import fncPrintMessage, fncEnsureFolder


# ================================================================
# Function: fncReportFileName
# Purpose  : Build "{prefix}-{yyyy-MM-dd-HHmm}.csv"
# Notes    : Local time; deterministic for a given prefix/timestamp
# ================================================================
def fncReportFileName(prefix: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"{prefix}-{now.strftime('%Y-%m-%d-%H%M')}.csv"


# ================================================================
# Function: fncSortRows
# Purpose  : Sort rows ascending by user principal name
# Notes    : Plain str ordering (ordinal, case-sensitive)
# ================================================================
def fncSortRows(rows: Iterable[UserReportRow]) -> List[UserReportRow]:
    return sorted(rows, key=lambda r: r.user_principal_name)


# ================================================================
# Function: fncResolveReportDir
# Purpose  : Resolve the output folder, creating it if supplied
# Notes    : Defaults to CWD; creation failure is fatal
# ================================================================
def fncResolveReportDir(report_path: Optional[str] = None) -> pathlib.Path:
    if not report_path:
        return pathlib.Path.cwd()
    try:
        return fncEnsureFolder(report_path)
    except OSError as ex:
        raise ReportWriteError(f"Could not create report folder '{report_path}': {ex}") from ex


# ================================================================
# Function: fncWriteReport
# Purpose  : Sort and serialise report rows to CSV
# Notes    : UTF-8, header always written; returns the file path.
#            A failed write removes the partial file
# ================================================================
def fncWriteReport(
    rows: Iterable[UserReportRow],
    prefix: str,
    report_path: Optional[str] = None,
    now: Optional[datetime] = None,
) -> pathlib.Path:
    out_dir = fncResolveReportDir(report_path)
    path = out_dir / fncReportFileName(prefix, now)
    ordered = fncSortRows(rows)

    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=REPORT_COLUMNS)
            w.writeheader()
            for r in ordered:
                w.writerow(r.to_csv_row())
    except OSError as ex:
        path.unlink(missing_ok=True)
        raise ReportWriteError(f"Could not write report '{path}': {ex}") from ex

    fncPrintMessage(f"Saved CSV → {path} ({len(ordered)} row(s))", "success")
    return path

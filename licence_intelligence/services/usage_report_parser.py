"""Parser for the Microsoft 365 app user-detail usage report (CSV)."""

import csv
import logging

from licence_intelligence.core.constants import CORE_APPS
from licence_intelligence.schemas.licence import AppUsageRecord

logger = logging.getLogger(__name__)

TRUTHY = {"yes", "true", "1"}
PLATFORMS = (("windows", "Windows"), ("web", "Web"), ("mobile", "Mobile"))


class _Row:
    """Header-driven accessor for one CSV row."""

    def __init__(self, headers: list[str], values: list[str]):
        self.headers = [h.lower() for h in headers]
        self.values = values

    def get(self, *column_names: str) -> str:
        """First non-empty value among columns whose header contains the name."""
        for name in column_names:
            needle = name.lower()
            for idx, header in enumerate(self.headers):
                if needle in header:
                    value = self.values[idx].strip()
                    if value:
                        return value
                    break
        return ""

    def flag(self, *column_names: str) -> bool:
        return any(self.get(name).lower() in TRUTHY for name in column_names)


def parse_app_usage_csv(body: str | None) -> list[AppUsageRecord]:
    """Parse the report body into AppUsageRecord rows.

    Rows shorter than the header are skipped. An empty or header-only
    body yields an empty list.
    """
    if not body:
        return []

    lines = [line for line in body.lstrip("\ufeff").splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    records = []
    reader = csv.reader(lines, skipinitialspace=True)
    try:
        headers = [h.strip() for h in next(reader)]
        for values in reader:
            if len(values) < len(headers):
                continue
            records.append(_to_record(_Row(headers, values)))
    except csv.Error as e:
        logger.warning(f"Stopped parsing app usage report at malformed row: {e}")

    logger.info(f"Parsed {len(records)} app usage rows")
    return records


def _to_record(row: _Row) -> AppUsageRecord:
    fields = {
        "user_principal_name": row.get("User Principal Name", "UPN"),
        "display_name": row.get("Display Name"),
        "report_refresh_date": row.get("Report Refresh Date"),
    }
    for app in CORE_APPS:
        key = app.lower()
        for suffix, label in PLATFORMS:
            fields[f"has_{key}_{suffix}"] = row.flag(
                f"{app} ({label})", f"Has {app} {label}"
            )
        fields[f"{key}_last_activity_date"] = row.get(f"{app} Last Activity Date") or None
    return AppUsageRecord(**fields)

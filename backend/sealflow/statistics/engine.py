"""Application statistics as pure functions.

Every function takes a snapshot (a list of ApplicationRow read once per
request) and returns plain dicts/lists ready for the API envelope. Nothing
here touches the database or keeps state between calls.
"""

import calendar
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

# Duration buckets, checked in order; upper bounds are inclusive, in hours
DURATION_BUCKETS = (
    ("within1Hour", 1),
    ("within1Day", 24),
    ("within3Days", 72),
    ("within7Days", 168),
)
OVERFLOW_BUCKET = "moreThan7Days"

NO_DATA_TEXT = "暂无数据"
UNDER_A_MINUTE_TEXT = "不足1分钟"
QUERY_FAILED_TEXT = "数据查询失败"


@dataclass(frozen=True)
class ApplicationRow:
    """The columns statistics need from one application."""
    application_no: str
    status: str
    department: Optional[str]
    seal_name: Optional[str]
    apply_time: datetime
    approve_time: Optional[datetime] = None
    expected_time: Optional[datetime] = None

    @property
    def decided(self) -> bool:
        return self.approve_time is not None and self.apply_time is not None

    @property
    def processing_hours(self) -> float:
        return (self.approve_time - self.apply_time).total_seconds() / 3600

    @property
    def processing_minutes(self) -> int:
        return int((self.approve_time - self.apply_time).total_seconds() // 60)


def _decided(rows: Iterable[ApplicationRow]) -> List[ApplicationRow]:
    return [row for row in rows if row.decided]


def count_by_status(rows: Sequence[ApplicationRow]) -> Dict[str, int]:
    return dict(Counter(row.status for row in rows))


def count_by_department(rows: Sequence[ApplicationRow]) -> List[Dict[str, Any]]:
    counts = Counter(row.department for row in rows)
    return [{"department": name, "count": count} for name, count in counts.most_common()]


def count_by_seal_name(rows: Sequence[ApplicationRow]) -> List[Dict[str, Any]]:
    counts = Counter(row.seal_name for row in rows)
    return [{"sealName": name, "usageCount": count} for name, count in counts.most_common()]


def average_processing_time(rows: Sequence[ApplicationRow]) -> float:
    """Mean hours from submission to decision; 0.0 when nothing is decided."""
    decided = _decided(rows)
    if not decided:
        return 0.0
    return round(sum(row.processing_hours for row in decided) / len(decided), 2)


def summary(rows: Sequence[ApplicationRow]) -> Dict[str, Any]:
    return {
        "totalApplications": len(rows),
        "byStatus": count_by_status(rows),
        "averageProcessingTime": average_processing_time(rows),
    }


def subtract_months(moment: datetime, months: int) -> datetime:
    """Same wall-clock time ``months`` calendar months earlier.

    The day is clamped to the length of the target month (31 March minus one
    month is 28/29 February).
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def monthly_trend(
    rows: Sequence[ApplicationRow],
    months: int,
    now: datetime
) -> List[Dict[str, Any]]:
    """Submissions per ``YYYY-MM`` since ``now`` minus ``months`` months, oldest first."""
    cutoff = subtract_months(now, months)
    counts = Counter(
        row.apply_time.strftime("%Y-%m") for row in rows if row.apply_time >= cutoff
    )
    return [{"month": month, "count": counts[month]} for month in sorted(counts)]


def format_duration(minutes: int) -> str:
    """Short human text for a whole number of minutes.

    Examples:
        45 -> "45分钟", 90 -> "1小时30分钟", 120 -> "2小时", 1500 -> "1天1小时"
    """
    if minutes < 60:
        return f"{minutes}分钟"
    if minutes < 1440:
        hours, rest = divmod(minutes, 60)
        return f"{hours}小时" + (f"{rest}分钟" if rest else "")
    days, rest = divmod(minutes, 1440)
    hours = rest // 60
    return f"{days}天" + (f"{hours}小时" if hours else "")


def format_average_hours(hours: float) -> str:
    """Render an average in hours as days/hours/minutes."""
    if hours <= 0:
        return NO_DATA_TEXT
    days = int(hours // 24)
    whole_hours = int(hours % 24)
    minutes = int((hours % 1) * 60)

    text = ""
    if days:
        text += f"{days}天"
    if whole_hours:
        text += f"{whole_hours}小时"
    if minutes:
        text += f"{minutes}分钟"
    return text or UNDER_A_MINUTE_TEXT


def duration_ranges(rows: Sequence[ApplicationRow]) -> Dict[str, int]:
    ranges = {name: 0 for name, _ in DURATION_BUCKETS}
    ranges[OVERFLOW_BUCKET] = 0
    for row in _decided(rows):
        hours = row.processing_hours
        for name, upper in DURATION_BUCKETS:
            if hours <= upper:
                ranges[name] += 1
                break
        else:
            ranges[OVERFLOW_BUCKET] += 1
    return ranges


def _approval_entry(row: ApplicationRow) -> Dict[str, Any]:
    minutes = row.processing_minutes
    return {
        "applicationNo": row.application_no,
        "minutes": minutes,
        "text": format_duration(minutes),
    }


def approval_duration_statistics(rows: Sequence[ApplicationRow]) -> Dict[str, Any]:
    """Average, bucketed distribution and extremes of decision times.

    fastestApproval/slowestApproval only consider APPROVED rows and are
    omitted when there are none.
    """
    average = average_processing_time(rows)
    result: Dict[str, Any] = {
        "averageHours": average,
        "averageDurationText": format_average_hours(average),
        "durationRanges": duration_ranges(rows),
    }

    approved = [row for row in _decided(rows) if row.status == "APPROVED"]
    if approved:
        ordered = sorted(approved, key=lambda row: row.approve_time - row.apply_time)
        result["fastestApproval"] = _approval_entry(ordered[0])
        result["slowestApproval"] = _approval_entry(ordered[-1])
    return result


def degraded_duration_statistics() -> Dict[str, Any]:
    """Placeholder report returned when the snapshot could not be read."""
    return {
        "averageHours": 0.0,
        "averageDurationText": QUERY_FAILED_TEXT,
        "durationRanges": {},
    }

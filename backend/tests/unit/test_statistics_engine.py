"""Unit tests for the pure statistics functions"""

from datetime import datetime, timedelta

import pytest

from sealflow.statistics.engine import (
    ApplicationRow,
    approval_duration_statistics,
    average_processing_time,
    count_by_department,
    count_by_seal_name,
    count_by_status,
    degraded_duration_statistics,
    duration_ranges,
    format_average_hours,
    format_duration,
    monthly_trend,
    subtract_months,
    summary,
)

BASE = datetime(2024, 3, 1, 9, 0, 0)


def row(no="YY1", status="APPROVED", department="财务部", seal="公司公章",
        apply_time=BASE, hours=None):
    approve_time = apply_time + timedelta(hours=hours) if hours is not None else None
    return ApplicationRow(
        application_no=no,
        status=status,
        department=department,
        seal_name=seal,
        apply_time=apply_time,
        approve_time=approve_time,
    )


class TestFormatDuration:

    @pytest.mark.parametrize("minutes,expected", [
        (0, "0分钟"),
        (45, "45分钟"),
        (60, "1小时"),
        (90, "1小时30分钟"),
        (1440, "1天"),
        (1500, "1天1小时"),
        (1530, "1天1小时"),
    ])
    def test_format_duration(self, minutes, expected):
        assert format_duration(minutes) == expected


class TestFormatAverageHours:

    def test_no_data(self):
        assert format_average_hours(0.0) == "暂无数据"

    def test_under_a_minute(self):
        assert format_average_hours(0.005) == "不足1分钟"

    def test_days_hours_minutes(self):
        assert format_average_hours(25.5) == "1天1小时30分钟"

    def test_whole_hours(self):
        assert format_average_hours(3.0) == "3小时"


class TestAverageProcessingTime:

    def test_zero_when_nothing_decided(self):
        assert average_processing_time([row(status="PENDING")]) == 0.0
        assert average_processing_time([]) == 0.0

    def test_mean_of_decided_only(self):
        rows = [row(hours=2), row(hours=3), row(status="PENDING")]
        assert average_processing_time(rows) == 2.5

    def test_rounded_to_two_places(self):
        assert average_processing_time([row(hours=1 / 3)]) == 0.33


class TestCounts:

    def test_count_by_status(self):
        rows = [row(status="PENDING"), row(status="PENDING"), row(status="APPROVED", hours=1)]
        assert count_by_status(rows) == {"PENDING": 2, "APPROVED": 1}

    def test_count_by_department_most_common_first(self):
        rows = [row(department="人事部"), row(department="财务部"), row(department="财务部")]
        assert count_by_department(rows) == [
            {"department": "财务部", "count": 2},
            {"department": "人事部", "count": 1},
        ]

    def test_count_by_seal_name(self):
        rows = [row(seal="合同章"), row(seal="合同章"), row(seal="公司公章")]
        assert count_by_seal_name(rows)[0] == {"sealName": "合同章", "usageCount": 2}

    def test_summary(self):
        rows = [row(status="PENDING"), row(hours=4)]
        assert summary(rows) == {
            "totalApplications": 2,
            "byStatus": {"PENDING": 1, "APPROVED": 1},
            "averageProcessingTime": 4.0,
        }


class TestMonthlyTrend:

    def test_subtract_months_clamps_day(self):
        assert subtract_months(datetime(2024, 3, 31, 12, 0), 1) == datetime(2024, 2, 29, 12, 0)
        assert subtract_months(datetime(2023, 3, 31), 1) == datetime(2023, 2, 28)

    def test_subtract_months_crosses_year(self):
        assert subtract_months(datetime(2024, 1, 15), 1) == datetime(2023, 12, 15)
        assert subtract_months(datetime(2024, 3, 15), 12) == datetime(2023, 3, 15)

    def test_counts_since_cutoff_oldest_first(self):
        now = datetime(2024, 3, 15, 10, 0)
        rows = [
            row(apply_time=datetime(2024, 1, 10)),
            row(apply_time=datetime(2024, 3, 1)),
            row(apply_time=datetime(2024, 1, 20)),
            row(apply_time=datetime(2024, 2, 1)),
            row(apply_time=datetime(2024, 2, 5)),
        ]
        assert monthly_trend(rows, 2, now) == [
            {"month": "2024-01", "count": 1},
            {"month": "2024-02", "count": 2},
            {"month": "2024-03", "count": 1},
        ]

    def test_empty(self):
        assert monthly_trend([], 6, datetime(2024, 3, 15)) == []


class TestApprovalDuration:

    def test_bucket_bounds_are_inclusive(self):
        rows = [
            row(hours=0.5),
            row(hours=1),
            row(hours=1.5),
            row(hours=24),
            row(hours=48),
            row(hours=168),
            row(hours=200),
            row(status="PENDING"),
        ]
        assert duration_ranges(rows) == {
            "within1Hour": 2,
            "within1Day": 2,
            "within3Days": 1,
            "within7Days": 1,
            "moreThan7Days": 1,
        }

    def test_fastest_and_slowest(self):
        rows = [row(no="YY-A", hours=5), row(no="YY-B", hours=0.5), row(no="YY-C", hours=30)]
        report = approval_duration_statistics(rows)

        assert report["fastestApproval"] == {"applicationNo": "YY-B", "minutes": 30, "text": "30分钟"}
        assert report["slowestApproval"] == {"applicationNo": "YY-C", "minutes": 1800, "text": "1天6小时"}
        assert report["averageHours"] == 11.83

    def test_extremes_skip_rejected(self):
        rows = [
            row(no="YY-R1", status="REJECTED", hours=0.1),
            row(no="YY-A", hours=3),
            row(no="YY-R2", status="REJECTED", hours=300),
        ]
        report = approval_duration_statistics(rows)

        assert report["fastestApproval"]["applicationNo"] == "YY-A"
        assert report["slowestApproval"]["applicationNo"] == "YY-A"
        assert report["durationRanges"]["moreThan7Days"] == 1

    def test_only_rejections_have_no_extremes(self):
        report = approval_duration_statistics([row(status="REJECTED", hours=2)])
        assert report["averageHours"] == 2.0
        assert "fastestApproval" not in report

    def test_no_decisions(self):
        report = approval_duration_statistics([row(status="PENDING")])
        assert report["averageHours"] == 0.0
        assert report["averageDurationText"] == "暂无数据"
        assert "fastestApproval" not in report
        assert "slowestApproval" not in report
        assert sum(report["durationRanges"].values()) == 0

    def test_degraded_report(self):
        assert degraded_duration_statistics() == {
            "averageHours": 0.0,
            "averageDurationText": "数据查询失败",
            "durationRanges": {},
        }

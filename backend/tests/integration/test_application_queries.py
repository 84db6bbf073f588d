"""Integration tests for application search and the derived list views"""

from datetime import datetime

import pytest

from sealflow.queries.search import ApplicationQueryService
from sealflow.seals.service import SealService
from sealflow.workflow.errors import ValidationError
from sealflow.workflow.kinds import CREATION, USAGE


@pytest.fixture
def usage_queries(db_session):
    return ApplicationQueryService(db_session, USAGE)


@pytest.fixture
def seeded(usage_workflow, usage_payload, clock):
    """Five usage applications, one hour apart.

    a: PENDING    zhangsan / 财务部
    b: APPROVED   zhangsan / 财务部
    c: PENDING    lisi     / 人事部   "Annual Audit"
    d: COMPLETED  lisi     / 人事部   seal 合同章
    e: REJECTED   wangwu   / 财务部
    """
    a = usage_workflow.create(usage_payload())
    clock.advance(hours=1)
    b = usage_workflow.create(usage_payload())
    clock.advance(hours=1)
    c = usage_workflow.create(usage_payload(applicant="lisi", department="人事部", purpose="Annual Audit"))
    clock.advance(hours=1)
    d = usage_workflow.create(usage_payload(applicant="lisi", department="人事部", seal_name="合同章",
                                            seal_type="CONTRACT"))
    clock.advance(hours=1)
    e = usage_workflow.create(usage_payload(applicant="wangwu"))
    clock.advance(hours=1)

    usage_workflow.approve(b.id, "APPROVED", "boss")
    usage_workflow.approve(d.id, "APPROVED", "boss")
    usage_workflow.complete(d.id)
    usage_workflow.approve(e.id, "REJECTED", "boss")
    return {"a": a, "b": b, "c": c, "d": d, "e": e}


def _ids(page):
    return [item.id for item in page.items]


class TestSearch:

    def test_status_filter_and_paging(self, usage_queries, seeded):
        page = usage_queries.search(status="PENDING", page=0, size=1)

        assert page.total == 2
        assert page.total_pages == 2
        assert len(page.items) == 1
        # newest first by default
        assert _ids(page) == [seeded["c"].id]

    def test_second_page(self, usage_queries, seeded):
        page = usage_queries.search(status="PENDING", page=1, size=1)
        assert _ids(page) == [seeded["a"].id]

    def test_keyword_is_case_sensitive(self, usage_queries, seeded):
        assert usage_queries.search(keyword="Annual").total == 1
        assert usage_queries.search(keyword="annual").total == 0

    def test_keyword_matches_number_and_applicant(self, usage_queries, seeded):
        assert usage_queries.search(keyword="YY20240315").total == 5
        assert usage_queries.search(keyword="lis").total == 2

    def test_filters_combine(self, usage_queries, seeded):
        page = usage_queries.search(applicant="lisi", department="人事部", status="COMPLETED")
        assert _ids(page) == [seeded["d"].id]

    def test_time_range_is_inclusive(self, usage_queries, seeded):
        page = usage_queries.search(
            start_time=seeded["b"].apply_time,
            end_time=seeded["d"].apply_time,
            sort_by="applyTime",
            sort_dir="asc",
        )
        assert _ids(page) == [seeded["b"].id, seeded["c"].id, seeded["d"].id]

    def test_sort_by_allowlisted_field(self, usage_queries, seeded):
        page = usage_queries.search(sort_by="applicant", sort_dir="ASC", size=10)
        assert [item.applicant for item in page.items][:1] == ["lisi"]

    def test_unknown_sort_field(self, usage_queries, seeded):
        with pytest.raises(ValidationError) as exc_info:
            usage_queries.search(sort_by="password")
        assert exc_info.value.message == "不支持的排序字段: password"

    def test_unknown_sort_direction(self, usage_queries):
        with pytest.raises(ValidationError) as exc_info:
            usage_queries.search(sort_dir="sideways")
        assert exc_info.value.message == "不支持的排序方向: sideways"

    def test_unknown_status(self, usage_queries):
        with pytest.raises(ValidationError) as exc_info:
            usage_queries.search(status="ARCHIVED")
        assert exc_info.value.message == "无效的申请状态: ARCHIVED"

    def test_bad_paging(self, usage_queries):
        with pytest.raises(ValidationError):
            usage_queries.search(page=-1)
        with pytest.raises(ValidationError):
            usage_queries.search(size=0)

    def test_empty_result(self, usage_queries):
        page = usage_queries.search()
        assert page.items == []
        assert page.total == 0
        assert page.total_pages == 0


class TestDerivedViews:

    def test_pending_oldest_first(self, usage_queries, seeded):
        assert _ids(usage_queries.pending()) == [seeded["a"].id, seeded["c"].id]

    def test_completed(self, usage_queries, seeded):
        assert _ids(usage_queries.completed()) == [seeded["d"].id]

    def test_mine_newest_first(self, usage_queries, seeded):
        assert _ids(usage_queries.mine("zhangsan")) == [seeded["b"].id, seeded["a"].id]
        assert usage_queries.mine("nobody").total == 0

    def test_keeper_inbox(self, usage_queries, seeded, db_session, clock):
        SealService(db_session, clock).create_seal({
            "name": "公司公章",
            "type": "OFFICIAL",
            "keeper": "wangwu",
            "keeper_phone": "13800000000",
            "location": "行政部保险柜",
        })
        SealService(db_session, clock).create_seal({
            "name": "合同章",
            "type": "CONTRACT",
            "keeper": "zhaoliu",
            "keeper_phone": "13900000000",
            "location": "法务部",
        })

        page = usage_queries.keeper_pending("wangwu")
        assert _ids(page) == [seeded["a"].id, seeded["c"].id]
        assert usage_queries.keeper_pending("zhaoliu").total == 0
        assert usage_queries.keeper_pending("nobody").total == 0


class TestCreationSearch:

    def test_keyword_and_department(self, db_session, creation_workflow, creation_payload):
        creation_workflow.create(creation_payload(seal_name="上海分公司公章", applicant_department="上海分公司"))
        creation_workflow.create(creation_payload(seal_name="北京分公司公章"))

        queries = ApplicationQueryService(db_session, CREATION)
        assert queries.search(keyword="上海").total == 1
        assert queries.search(department="上海分公司").total == 1
        assert queries.search(department="行政部").total == 1

    def test_usage_only_sort_field_rejected(self, db_session):
        with pytest.raises(ValidationError):
            ApplicationQueryService(db_session, CREATION).search(sort_by="expectedTime")

    def test_time_bounds(self, db_session, creation_workflow, creation_payload):
        creation_workflow.create(creation_payload())
        queries = ApplicationQueryService(db_session, CREATION)
        assert queries.search(start_time=datetime(2024, 3, 16)).total == 0
        assert queries.search(end_time=datetime(2024, 3, 16)).total == 1

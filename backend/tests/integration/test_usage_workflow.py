"""Integration tests for the seal usage application workflow

Covers submission, numbering, editing, approval, completion and the state
guards, against a real (in-memory) database.
"""

import re
from datetime import datetime

import pytest

from sealflow.models import SealUsageApplication
from sealflow.seals.service import SealService
from sealflow.workflow.errors import InternalError, InvalidStateError, NotFoundError, ValidationError


class TestSubmit:

    def test_create_starts_pending_with_daily_number(self, usage_workflow, usage_payload, clock):
        application = usage_workflow.create(usage_payload())

        assert re.fullmatch(r"YY\d{12}", application.application_no)
        assert application.application_no == "YY202403150001"
        assert application.status == "PENDING"
        assert application.apply_time == clock.now()
        assert application.update_time == clock.now()
        assert application.approver is None
        assert application.approve_time is None

    def test_numbers_increase_within_the_day(self, usage_workflow, usage_payload):
        first = usage_workflow.create(usage_payload())
        second = usage_workflow.create(usage_payload(applicant="lisi"))
        assert first.application_no == "YY202403150001"
        assert second.application_no == "YY202403150002"

    def test_copies_seal_attributes_from_registry(self, usage_workflow, usage_payload, official_seal):
        application = usage_workflow.create(usage_payload())

        assert application.seal_shape == "ROUND"
        assert application.seal_owner_department == "总经办"
        assert application.seal_keeper_department == "行政部"

    def test_given_seal_attributes_are_kept(self, usage_workflow, usage_payload, official_seal):
        application = usage_workflow.create(usage_payload(seal_keeper_department="法务部"))
        assert application.seal_keeper_department == "法务部"
        assert application.seal_shape == "ROUND"

    def test_later_seal_edits_do_not_rewrite_application(
        self, usage_workflow, usage_payload, official_seal, db_session
    ):
        application = usage_workflow.create(usage_payload())
        official_seal.keeper_department = "财务部"
        db_session.commit()

        db_session.refresh(application)
        assert application.seal_keeper_department == "行政部"

    def test_number_taken_at_commit_is_regenerated(
        self, usage_workflow, usage_payload, db_session, monkeypatch
    ):
        first = usage_workflow.create(usage_payload())
        taken = first.application_no
        generator = usage_workflow.kind.number_generator
        real_next_number = generator.next_number
        calls = []

        def racing_next_number(db, model, now):
            calls.append(now)
            if len(calls) == 1:
                return taken
            return real_next_number(db, model, now)

        monkeypatch.setattr(generator, "next_number", racing_next_number)

        second = usage_workflow.create(usage_payload())
        assert len(calls) == 2
        assert second.application_no != taken
        assert db_session.query(SealUsageApplication).count() == 2

    def test_number_collisions_give_up_eventually(
        self, usage_workflow, usage_payload, db_session, monkeypatch
    ):
        taken = usage_workflow.create(usage_payload()).application_no
        monkeypatch.setattr(
            usage_workflow.kind.number_generator, "next_number", lambda db, model, now: taken
        )

        with pytest.raises(InternalError) as exc_info:
            usage_workflow.create(usage_payload())
        assert exc_info.value.message == "申请编号生成失败"
        assert db_session.query(SealUsageApplication).count() == 1

    def test_unknown_seal_leaves_attributes_empty(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload(seal_name="不存在的章"))
        assert application.seal_shape is None

    def test_first_missing_field_is_reported(self, usage_workflow, usage_payload):
        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.create(usage_payload(seal_name=None, purpose=None))
        assert exc_info.value.message == "印章名称不能为空"

    def test_blank_string_counts_as_missing(self, usage_workflow, usage_payload):
        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.create(usage_payload(applicant="   "))
        assert exc_info.value.message == "申请人不能为空"

    def test_expected_time_required(self, usage_workflow, usage_payload):
        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.create(usage_payload(expected_time=None))
        assert exc_info.value.message == "期望用印时间不能为空"

    def test_unknown_seal_type_rejected(self, usage_workflow, usage_payload, db_session):
        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.create(usage_payload(seal_type="GOLDEN"))
        assert exc_info.value.message == "无效的印章类型: GOLDEN"
        assert db_session.query(SealUsageApplication).count() == 0

    def test_workflow_fields_in_payload_are_ignored(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload(status="APPROVED", approver="boss"))
        assert application.status == "PENDING"
        assert application.approver is None


class TestDecide:

    def test_approve_then_complete(self, usage_workflow, usage_payload, clock):
        application = usage_workflow.create(usage_payload())
        decided_at = clock.advance(hours=2)

        approved = usage_workflow.approve(application.id, "APPROVED", "boss", "同意")
        assert approved.status == "APPROVED"
        assert approved.approver == "boss"
        assert approved.approve_remark == "同意"
        assert approved.approve_time == decided_at
        assert approved.update_time == decided_at

        clock.advance(days=1)
        completed = usage_workflow.complete(application.id)
        assert completed.status == "COMPLETED"
        assert completed.update_time == clock.now()
        assert completed.approve_time == decided_at

    def test_reject_is_terminal(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        usage_workflow.approve(application.id, "REJECTED", "boss", "材料不全")

        with pytest.raises(InvalidStateError):
            usage_workflow.complete(application.id)
        assert usage_workflow.get(application.id).status == "REJECTED"

    def test_cannot_decide_twice(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        usage_workflow.approve(application.id, "APPROVED", "boss")

        with pytest.raises(InvalidStateError) as exc_info:
            usage_workflow.approve(application.id, "REJECTED", "other")
        assert exc_info.value.message == "申请已处理，无法重复审批"

        application = usage_workflow.get(application.id)
        assert application.status == "APPROVED"
        assert application.approver == "boss"

    def test_complete_requires_approved(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())

        with pytest.raises(InvalidStateError) as exc_info:
            usage_workflow.complete(application.id)
        assert exc_info.value.message == "只有已批准的申请才能完成"
        assert usage_workflow.get(application.id).status == "PENDING"

    @pytest.mark.parametrize("status,message", [
        (None, "审批状态不能为空"),
        ("", "审批状态不能为空"),
        ("PENDING", "无效的审批状态: PENDING"),
        ("COMPLETED", "无效的审批状态: COMPLETED"),
        ("maybe", "无效的审批状态: maybe"),
    ])
    def test_decision_must_be_approved_or_rejected(self, usage_workflow, usage_payload, status, message):
        application = usage_workflow.create(usage_payload())

        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.approve(application.id, status, "boss")
        assert exc_info.value.message == message
        assert usage_workflow.get(application.id).status == "PENDING"

    def test_approver_required(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())

        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.approve(application.id, "APPROVED", " ")
        assert exc_info.value.message == "审批人不能为空"

    def test_unknown_application(self, usage_workflow):
        with pytest.raises(NotFoundError) as exc_info:
            usage_workflow.approve(999, "APPROVED", "boss")
        assert exc_info.value.message == "申请不存在: 999"

        with pytest.raises(NotFoundError):
            usage_workflow.complete(999)


class TestEditAndDelete:

    def test_update_pending(self, usage_workflow, usage_payload, clock):
        application = usage_workflow.create(usage_payload())
        clock.advance(minutes=5)

        updated = usage_workflow.update(application.id, {"purpose": "年度审计", "copies": 3})
        assert updated.purpose == "年度审计"
        assert updated.copies == 3
        assert updated.update_time == clock.now()
        assert updated.seal_name == "公司公章"

    def test_update_ignores_non_editable_fields(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        updated = usage_workflow.update(application.id, {"applicant": "mallory", "status": "APPROVED"})
        assert updated.applicant == "zhangsan"
        assert updated.status == "PENDING"

    def test_renaming_seal_copies_new_seal_attributes(
        self, usage_workflow, usage_payload, official_seal, db_session, clock
    ):
        SealService(db_session, clock).create_seal({
            "name": "财务专用章",
            "type": "FINANCE",
            "shape": "SQUARE",
            "owner_department": "财务部",
            "keeper_department": "财务部",
            "keeper": "zhaoliu",
            "keeper_phone": "13900000000",
            "location": "财务部保险柜",
        })
        application = usage_workflow.create(usage_payload())

        updated = usage_workflow.update(
            application.id, {"seal_name": "财务专用章", "seal_type": "FINANCE"}
        )
        assert updated.seal_name == "财务专用章"
        assert updated.seal_shape == "SQUARE"
        assert updated.seal_owner_department == "财务部"
        assert updated.seal_keeper_department == "财务部"

    def test_renaming_to_unregistered_seal_clears_attributes(
        self, usage_workflow, usage_payload, official_seal
    ):
        application = usage_workflow.create(usage_payload())

        updated = usage_workflow.update(application.id, {"seal_name": "临时章"})
        assert updated.seal_shape is None
        assert updated.seal_owner_department is None
        assert updated.seal_keeper_department is None

    def test_same_seal_name_keeps_copied_attributes(
        self, usage_workflow, usage_payload, official_seal
    ):
        application = usage_workflow.create(usage_payload(seal_keeper_department="法务部"))

        updated = usage_workflow.update(application.id, {"seal_name": "公司公章", "purpose": "改"})
        assert updated.seal_keeper_department == "法务部"
        assert updated.seal_shape == "ROUND"

    def test_update_cannot_clear_required_field(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        with pytest.raises(ValidationError) as exc_info:
            usage_workflow.update(application.id, {"purpose": ""})
        assert exc_info.value.message == "用印目的不能为空"

    def test_update_after_decision_rejected(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        usage_workflow.approve(application.id, "APPROVED", "boss")

        with pytest.raises(InvalidStateError) as exc_info:
            usage_workflow.update(application.id, {"purpose": "改"})
        assert exc_info.value.message == "申请已处理，无法修改"
        assert usage_workflow.get(application.id).purpose == "合同盖章"

    def test_delete_pending(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        usage_workflow.delete(application.id)
        assert usage_workflow.get(application.id) is None

    def test_delete_decided_rejected(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        usage_workflow.approve(application.id, "REJECTED", "boss")

        with pytest.raises(InvalidStateError) as exc_info:
            usage_workflow.delete(application.id)
        assert exc_info.value.message == "申请已处理，无法删除"
        assert usage_workflow.get(application.id) is not None

    def test_can_edit_and_can_approve(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())

        assert usage_workflow.can_edit(application.id, "zhangsan") is True
        assert usage_workflow.can_edit(application.id, "lisi") is False
        assert usage_workflow.can_approve(application.id) is True
        assert usage_workflow.can_approve(999) is False

        usage_workflow.approve(application.id, "APPROVED", "boss")
        assert usage_workflow.can_edit(application.id, "zhangsan") is False
        assert usage_workflow.can_approve(application.id) is False

    def test_get_by_no(self, usage_workflow, usage_payload):
        application = usage_workflow.create(usage_payload())
        assert usage_workflow.get_by_no(application.application_no).id == application.id
        assert usage_workflow.get_by_no("YY000000000000") is None


def test_expected_time_is_stored(usage_workflow, usage_payload):
    application = usage_workflow.create(usage_payload(expected_time=datetime(2024, 4, 1, 14, 30)))
    assert application.expected_time == datetime(2024, 4, 1, 14, 30)

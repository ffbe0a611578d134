import json

from wardflow.schemas.encounter import ClinicalStatus, WorkflowStatus
from wardflow.services.cache import MemoryCache
from wardflow.services.encounter_store import EncounterStore


def _store_over(raw_cache, clock) -> EncounterStore:
    return EncounterStore(cache=MemoryCache(json.dumps(raw_cache)), clock=clock)


def test_first_read_hydrates_default_census(ward_store):
    snapshot = ward_store.get_snapshot()

    assert sorted(snapshot) == ["ipd-1", "ipd-2", "ipd-3", "ipd-4"]
    assert snapshot["ipd-1"].workflow_status == WorkflowStatus.in_care
    assert snapshot["ipd-3"].clinical_status == ClinicalStatus.critical
    assert snapshot["ipd-3"].admission_id == "adm-ipd-3"

    # all three sign-offs done, but orders and medications still outstanding
    sneha = snapshot["ipd-2"]
    assert sneha.billing_cleared and sneha.pharmacy_cleared and sneha.follow_up_ready
    assert sneha.discharge_ready is False
    assert sneha.workflow_status == WorkflowStatus.admitted


def test_snapshot_is_stable_between_reads(ward_store):
    assert ward_store.get_snapshot() is ward_store.get_snapshot()


def test_committed_state_survives_a_restart(cache, clock):
    first = EncounterStore(cache=cache, clock=clock)
    first.sync_clinical("ipd-4", pending_orders=0, pending_diagnostics=0, pending_medications=0)
    first.register_admission({"patientId": "ipd-9", "mrn": "MRN-1", "patientName": "Zoe Das"})

    second = EncounterStore(cache=cache, clock=clock)

    neha = second.get_by_patient_id("ipd-4")
    assert (neha.pending_orders, neha.pending_diagnostics, neha.pending_medications) == (0, 0, 0)
    assert neha.workflow_status == WorkflowStatus.in_care
    assert second.get_by_mrn("MRN-1").patient_name == "Zoe Das"
    assert second.get_by_patient_id("ipd-9").updated_at == first.get_by_patient_id("ipd-9").updated_at


def test_cache_is_written_in_camel_case_json(ward_store, cache):
    ward_store.sync_clinical("ipd-1", pending_orders=0)

    stored = json.loads(cache.raw)
    rahul = stored["ipd-1"]
    assert rahul["patientId"] == "ipd-1"
    assert rahul["pendingOrders"] == 0
    assert rahul["workflowStatus"] == "in-care"
    assert rahul["dischargeReady"] is False
    assert isinstance(rahul["updatedAt"], str)


def test_cached_fields_merge_over_defaults_and_are_rederived(clock):
    store = _store_over(
        {"ipd-2": {"patientId": "ipd-2", "pendingOrders": 0, "pendingMedications": 0, "bed": None}},
        clock,
    )

    sneha = store.get_by_patient_id("ipd-2")
    # untouched defaults stay
    assert sneha.bed == "A-04"
    assert sneha.patient_name == "Sneha Patil"
    assert sneha.discharge_ready is True
    assert sneha.workflow_status == WorkflowStatus.ready_for_discharge


def test_cached_derived_fields_are_not_trusted(clock):
    store = _store_over(
        {"ipd-1": {"patientId": "ipd-1", "dischargeReady": True, "workflowStatus": "ready-for-discharge"}},
        clock,
    )

    rahul = store.get_by_patient_id("ipd-1")
    assert rahul.discharge_ready is False
    assert rahul.workflow_status == WorkflowStatus.in_care


def test_unknown_cached_patients_are_adopted(clock):
    store = _store_over(
        {
            "ipd-9": {
                "patientId": "ipd-9",
                "mrn": "MRN-9",
                "patientName": "Zoe Das",
                "workflowStatus": "discharged",
            }
        },
        clock,
    )

    zoe = store.get_by_patient_id("ipd-9")
    assert zoe.encounter_id == "enc-ipd-9"
    assert zoe.workflow_status == WorkflowStatus.discharged
    assert store.get_all()[-1].patient_id == "ipd-9"


def test_malformed_cached_entries_are_skipped(clock):
    store = _store_over(
        {
            "no-id": {"mrn": "MRN-0"},
            "not-an-object": "hello",
            "bad-count": {"patientId": "ipd-8", "pendingOrders": "lots"},
            "ipd-9": {"patientId": "ipd-9", "mrn": "MRN-9", "patientName": "Zoe Das"},
        },
        clock,
    )

    snapshot = store.get_snapshot()
    assert "ipd-8" not in snapshot
    assert "ipd-9" in snapshot
    assert len(snapshot) == 5


def test_corrupt_cache_falls_back_to_defaults(clock):
    store = EncounterStore(cache=MemoryCache("{not json"), clock=clock)
    assert len(store.get_snapshot()) == 4


def test_cache_with_wrong_shape_falls_back_to_defaults(clock):
    store = EncounterStore(cache=MemoryCache("[1, 2, 3]"), clock=clock)
    assert len(store.get_snapshot()) == 4


def test_store_without_seed_or_cache_starts_empty(clock):
    store = EncounterStore(seed=None, clock=clock)
    assert store.get_snapshot() == {}
    assert store.get_all() == []

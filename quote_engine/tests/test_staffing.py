"""
Tests: Staffing allocation engine — manual edits and auto-staffing.

Run with:
    pytest quote_engine/tests/test_staffing.py -v
"""

import pytest

from quote_engine.engine.staffing import (
    add_profile,
    decrement_profile,
    domain_scores,
    edit_profile,
    reconcile_auto_staffing,
    remove_profile,
)
from quote_engine.models.enums import ProfileSource, Seniority, StaffingDomain
from quote_engine.models.schemas import ProjectSpecification, StaffingProfile


def _sustain_spec(**overrides) -> ProjectSpecification:
    data = {
        "serviceType": "Sustain",
        "techStack": ["databricks", "powerbi"],
        "sustainMetrics": {"pipelines": 4, "notebooks": 2, "dashboards": 3},
        "criticality": {"frequency": "daily"},
    }
    data.update(overrides)
    return ProjectSpecification.model_validate(data)


def _by_role(profiles):
    return {(p.role, p.seniority.value): p for p in profiles}


class TestManualPath:
    def test_add_creates_confirmed_profile_at_default_price(self):
        profiles = add_profile([], "data_engineer", "Sr")
        assert len(profiles) == 1
        profile = profiles[0]
        assert profile.role == "Data Engineer"
        assert profile.seniority == Seniority.SR
        assert profile.unit_price == pytest.approx(4954.44 * 1.3)
        assert profile.is_manual is True

    def test_identical_add_increments_count(self):
        profiles = add_profile([], "data_engineer", "Sr")
        profiles = add_profile(profiles, "Data Engineer", "senior")
        assert len(profiles) == 1
        assert profiles[0].count == 2

    def test_different_allocation_is_a_new_line(self):
        profiles = add_profile([], "data_engineer", "Sr", allocation=100)
        profiles = add_profile(profiles, "data_engineer", "Sr", allocation=50)
        assert [p.allocation_percentage for p in profiles] == [100, 50]

    def test_explicit_price_wins(self):
        profiles = add_profile([], "business_analyst", "Med", explicit_price=3900)
        assert profiles[0].unit_price == 3900

    def test_edit_confirms_suggested_profile(self):
        suggested = StaffingProfile(id="p1", role="Data Engineer", seniority="Med",
                                    unit_price=4954.44, allocation_percentage=30,
                                    source=ProfileSource.SUGGESTED)
        edited = edit_profile([suggested], "p1", allocation_percentage=60)[0]
        assert edited.allocation_percentage == 60
        assert edited.is_manual is True

    def test_seniority_edit_resnapshots_price(self):
        profile = StaffingProfile(id="p1", role="Data Engineer", seniority="Med", unit_price=4954.44)
        edited = edit_profile([profile], "p1", seniority="Expert")[0]
        assert edited.seniority == Seniority.EXPERT
        assert edited.unit_price == pytest.approx(4954.44 * 1.5)

    def test_edit_clamps_values(self):
        profile = StaffingProfile(id="p1", role="Data Engineer")
        edited = edit_profile([profile], "p1", allocation_percentage=180, count=-4)[0]
        assert edited.allocation_percentage == 100
        assert edited.count == 0

    def test_decrement_removes_at_zero(self):
        profiles = add_profile(add_profile([], "data_engineer", "Sr"), "data_engineer", "Sr")
        pid = profiles[0].id
        profiles = decrement_profile(profiles, pid)
        assert profiles[0].count == 1
        assert decrement_profile(profiles, pid) == []

    def test_remove(self):
        profiles = add_profile([], "data_engineer", "Sr")
        assert remove_profile(profiles, profiles[0].id) == []


class TestDomainScores:
    def test_scores_per_domain(self):
        scores = domain_scores(_sustain_spec(sustainMetrics={"pipelines": 4, "notebooks": 2, "dashboards": 3, "dsModels": 2}))
        assert scores[StaffingDomain.DATA] == 3
        assert scores[StaffingDomain.VIS] == 2
        assert scores[StaffingDomain.SCI] == 3

    def test_frequency_multipliers(self):
        assert domain_scores(_sustain_spec(criticality={"frequency": "realtime"}))[StaffingDomain.DATA] == 3.75
        assert domain_scores(_sustain_spec(criticality={"frequency": "monthly"}))[StaffingDomain.DATA] == 2.25


class TestReconcileAutoStaffing:
    def test_creates_suggested_profiles(self):
        profiles = _by_role(reconcile_auto_staffing(_sustain_spec()))
        de = profiles[("Data Engineer", "Sr")]
        bi = profiles[("BI Visualization Developer", "Med")]
        assert de.allocation_percentage == 30
        assert bi.allocation_percentage == 20
        assert not de.is_manual and not bi.is_manual
        assert de.rationale

    def test_allocation_rounds_up_and_caps(self):
        realtime = _by_role(reconcile_auto_staffing(_sustain_spec(criticality={"frequency": "realtime"})))
        assert realtime[("Data Engineer", "Sr")].allocation_percentage == 38
        monthly = _by_role(reconcile_auto_staffing(_sustain_spec(criticality={"frequency": "monthly"})))
        assert monthly[("Data Engineer", "Sr")].allocation_percentage == 23
        heavy = _by_role(reconcile_auto_staffing(_sustain_spec(sustainMetrics={"pipelines": 40, "notebooks": 40})))
        assert heavy[("Data Engineer", "Sr")].allocation_percentage == 100

    def test_updates_suggested_allocation_in_place(self):
        spec = _sustain_spec()
        first = reconcile_auto_staffing(spec)
        grown = spec.model_copy(update={
            "profiles": first,
            "sustain_metrics": spec.sustain_metrics.model_copy(update={"pipelines": 12}),
        })
        second = reconcile_auto_staffing(grown)
        assert len(second) == len(first)
        de = _by_role(second)[("Data Engineer", "Sr")]
        assert de.allocation_percentage == 50  # band(12)=4 + band(2)=1
        assert de.id == _by_role(first)[("Data Engineer", "Sr")].id

    def test_manual_profile_is_never_rebalanced(self):
        manual = StaffingProfile(id="m1", role="Data Engineer", seniority="Sr", count=2,
                                 unit_price=7000, allocation_percentage=70,
                                 source=ProfileSource.CONFIRMED)
        for metrics, frequency in [
            ({"pipelines": 0}, "none"),
            ({"pipelines": 30, "notebooks": 30}, "realtime"),
            ({"pipelines": 3}, "monthly"),
        ]:
            spec = _sustain_spec(
                profiles=[manual.model_dump()],
                sustainMetrics=metrics,
                criticality={"frequency": frequency},
            )
            result = reconcile_auto_staffing(spec)
            engineers = [p for p in result if p.role == "Data Engineer" and p.seniority == Seniority.SR]
            assert len(engineers) == 1
            locked = engineers[0]
            assert locked.id == "m1"
            assert locked.count == 2
            assert locked.allocation_percentage == 70

    def test_untagged_suggestions_are_no_ops(self):
        assert reconcile_auto_staffing(_sustain_spec(techStack=["power_apps"])) == []

    def test_unknown_technology_is_no_op(self):
        assert reconcile_auto_staffing(_sustain_spec(techStack=["cobol_mainframe"])) == []

    def test_suggestions_deduplicated_by_role_and_seniority(self):
        profiles = reconcile_auto_staffing(_sustain_spec(techStack=["azure", "snowflake"]))
        assert [(p.role, p.seniority.value) for p in profiles] == [("Data Engineer", "Med")]

    def test_zero_workload_creates_nothing(self):
        spec = _sustain_spec(sustainMetrics={})
        assert reconcile_auto_staffing(spec) == []

    def test_non_sustain_returns_profiles_unchanged(self):
        spec = _sustain_spec(serviceType="Project")
        assert reconcile_auto_staffing(spec) == []

    def test_input_is_not_mutated(self):
        spec = _sustain_spec()
        reconcile_auto_staffing(spec)
        assert spec.profiles == []

    def test_is_idempotent(self):
        spec = _sustain_spec()
        once = reconcile_auto_staffing(spec)
        twice = reconcile_auto_staffing(spec.model_copy(update={"profiles": once}))
        assert once == twice

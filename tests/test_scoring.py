"""Tests for the sub-score calculators."""
import math
from datetime import date, datetime

import pytest

from src.matching.availability import availability_score, parse_time_to_minutes, slots_overlap
from src.matching.exceptions import InvalidInputError
from src.matching.geo import distance_to_score, haversine_km, location_score
from src.matching.scoring import (
    candidate_years,
    experience_score,
    industry_part,
    preferences_score,
    remote_part,
    required_years,
    salary_part,
    skills_score,
    total_experience_years,
)
from src.matching.types import ExperienceEntry, GeoPoint, TimeSlot
from src.matching.utils import round_half_up


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_half_rounds_up(self):
        assert round_half_up(57.5) == 58
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_below_half_rounds_down(self):
        assert round_half_up(66.4) == 66

    def test_one_decimal(self):
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(7 / 12, 1) == 0.6

    def test_float_noise_lands_on_half(self):
        assert round_half_up(57.49999999999999) == 58


class TestSkillsScore:
    """Tests for skills_score."""

    def test_no_required_skills_scores_full(self):
        assert skills_score(["excel"], []) == 100
        assert skills_score([], []) == 100
        assert skills_score(None, None) == 100

    def test_candidate_without_skills_scores_zero(self):
        assert skills_score([], ["excel"]) == 0
        assert skills_score(None, ["excel", "sales"]) == 0

    def test_partial_coverage(self):
        assert skills_score(["excel"], ["excel", "sales"]) == 50
        assert skills_score(["excel"], ["excel", "sales", "crm"]) == 33
        assert skills_score(["excel", "crm"], ["excel", "sales", "crm"]) == 67

    def test_case_and_whitespace_insensitive(self):
        assert skills_score([" Excel ", "SALES"], ["excel", " sales"]) == 100

    def test_extra_candidate_skills_do_not_matter(self):
        assert skills_score(["excel", "sales", "python"], ["excel", "sales"]) == 100


class TestExperienceScore:
    """Tests for experience_score and required_years."""

    def test_level_thresholds(self):
        assert required_years("entry") == 0
        assert required_years("mid") == 2
        assert required_years("senior") == 5

    def test_level_is_case_insensitive(self):
        assert required_years("Senior") == 5
        assert required_years("MID") == 2

    def test_unknown_level_defaults_to_entry(self):
        assert required_years("principal") == 0
        assert required_years(None) == 0
        assert experience_score(0, "principal") == 100

    def test_entry_level_always_full(self):
        assert experience_score(0, "entry") == 100
        assert experience_score(12, "Entry") == 100

    def test_linear_ramp(self):
        assert experience_score(1, "mid") == 50
        assert experience_score(0.9, "mid") == 45
        assert experience_score(1, "senior") == 20
        assert experience_score(2.5, "senior") == 50

    def test_capped_at_100(self):
        assert experience_score(2, "mid") == 100
        assert experience_score(15, "senior") == 100


class TestTotalExperienceYears:
    """Tests for deriving years from a work history."""

    def test_empty_history(self):
        assert total_experience_years([]) == 0.0
        assert total_experience_years(None) == 0.0

    def test_whole_months_summed(self):
        entries = [
            ExperienceEntry(start_date="2020-01-15", end_date="2021-07-01"),  # 18 months
            ExperienceEntry(start_date=date(2022, 1, 1), end_date=date(2022, 7, 1)),  # 6 months
        ]
        assert total_experience_years(entries) == 2.0

    def test_one_decimal_precision(self):
        entries = [ExperienceEntry(start_date="2023-01-01", end_date="2023-08-01")]  # 7 months
        assert total_experience_years(entries) == 0.6

    def test_open_ended_runs_until_now(self):
        entries = [ExperienceEntry(start_date="2023-01-01", end_date=None)]
        assert total_experience_years(entries, now=datetime(2024, 1, 1)) == 1.0

    def test_unparseable_dates_contribute_zero(self):
        entries = [
            ExperienceEntry(start_date="not-a-date", end_date="2021-01-01"),
            ExperienceEntry(start_date=None, end_date="2021-01-01"),
            ExperienceEntry(start_date="2020-01-01", end_date="2021-01-01"),
        ]
        assert total_experience_years(entries) == 1.0

    def test_end_before_start_ignored(self):
        entries = [ExperienceEntry(start_date="2022-01-01", end_date="2021-01-01")]
        assert total_experience_years(entries) == 0.0

    def test_mixed_timezone_awareness(self):
        entries = [ExperienceEntry(start_date="2020-01-01T00:00:00+05:30", end_date=datetime(2021, 1, 1))]
        assert total_experience_years(entries) == 1.0

    def test_precomputed_total_wins(self, candidate_factory):
        candidate = candidate_factory(
            total_experience=4,
            experience=[ExperienceEntry(start_date="2020-01-01", end_date="2021-01-01")],
        )
        assert candidate_years(candidate) == 4.0

    def test_derived_when_not_precomputed(self, candidate_factory):
        candidate = candidate_factory(
            total_experience=0,
            experience=[ExperienceEntry(start_date="2020-01-01", end_date="2021-07-01")],
        )
        assert candidate_years(candidate) == 1.5


class TestGeoScore:
    """Tests for distance scoring."""

    def test_haversine_one_degree_latitude(self):
        distance = haversine_km(GeoPoint(77.0, 28.0), GeoPoint(77.0, 29.0))
        assert distance == pytest.approx(111.19, abs=0.01)

    def test_haversine_same_point(self):
        assert haversine_km(GeoPoint(77.0, 28.0), GeoPoint(77.0, 28.0)) == 0.0

    def test_decay_curve_points(self):
        assert distance_to_score(0) == 100
        assert distance_to_score(5) == 100
        assert distance_to_score(12.5) == pytest.approx(85)
        assert distance_to_score(35) == pytest.approx(55)
        assert distance_to_score(75) == pytest.approx(25)
        assert distance_to_score(100) == pytest.approx(10)
        assert distance_to_score(150) == 0
        assert distance_to_score(math.inf) == 0

    def test_continuous_at_breakpoints(self):
        for breakpoint, expected in [(5, 100), (20, 70), (50, 40)]:
            assert distance_to_score(breakpoint) == pytest.approx(expected)
            assert distance_to_score(breakpoint - 1e-9) == pytest.approx(expected, abs=1e-6)
            assert distance_to_score(breakpoint + 1e-9) == pytest.approx(expected, abs=1e-6)

    def test_remote_job_always_full(self):
        far = GeoPoint(72.8, 19.0)
        assert location_score(GeoPoint(77.0, 28.0), far, remote_option=True) == 100
        assert location_score(None, far, remote_option=True) == 100
        assert location_score(None, None, remote_option=True) == 100

    def test_missing_point_is_neutral(self):
        assert location_score(None, GeoPoint(77.0, 28.0)) == 50
        assert location_score(GeoPoint(77.0, 28.0), None) == 50

    def test_nearby_and_far(self):
        assert location_score(GeoPoint(77.0, 28.036), GeoPoint(77.0, 28.0)) == 100
        # Delhi to Mumbai is well over 100 km
        assert location_score(GeoPoint(77.2, 28.6), GeoPoint(72.8, 19.0)) == 0

    def test_result_is_integer(self):
        # About 30 km north: 70 - (10/30)*30 = ~60
        score = location_score(GeoPoint(77.0, 28.27), GeoPoint(77.0, 28.0))
        assert isinstance(score, int)
        assert 55 <= score <= 65


class TestAvailability:
    """Tests for availability overlap scoring."""

    def test_parse_time(self):
        assert parse_time_to_minutes("09:00") == 540
        assert parse_time_to_minutes("13:30") == 810
        assert parse_time_to_minutes("9") == 540

    def test_parse_time_invalid(self):
        for bad in ["", None, "ab:cd", "9:xx", "noon"]:
            with pytest.raises(InvalidInputError):
                parse_time_to_minutes(bad)

    def test_overlapping_ranges(self):
        job = TimeSlot("Monday", "09:00", "13:00")
        assert slots_overlap(TimeSlot("Monday", "12:00", "15:00"), job) is True

    def test_touching_endpoints_do_not_overlap(self):
        job = TimeSlot("Monday", "09:00", "13:00")
        assert slots_overlap(TimeSlot("Monday", "13:00", "15:00"), job) is False
        assert slots_overlap(TimeSlot("Monday", "07:00", "09:00"), job) is False

    def test_unparseable_times_never_overlap(self):
        job = TimeSlot("Monday", "09:00", "13:00")
        assert slots_overlap(TimeSlot("Monday", "xx:00", "15:00"), job) is False

    def test_no_job_slots_scores_full(self):
        assert availability_score([], []) == 100
        assert availability_score([TimeSlot("Monday", "09:00", "10:00")], None) == 100

    def test_no_candidate_slots_scores_zero(self):
        assert availability_score([], [TimeSlot("Monday", "09:00", "13:00")]) == 0

    def test_example_slots(self):
        job = [TimeSlot("Monday", "09:00", "13:00")]
        assert availability_score([TimeSlot("Monday", "12:00", "15:00")], job) == 100
        assert availability_score([TimeSlot("Monday", "13:00", "15:00")], job) == 0

    def test_day_must_match_case_insensitively(self):
        job = [TimeSlot("Monday", "09:00", "13:00")]
        assert availability_score([TimeSlot("monday", "10:00", "11:00")], job) == 100
        assert availability_score([TimeSlot("Tuesday", "10:00", "11:00")], job) == 0

    def test_share_of_job_slots_covered(self):
        job = [
            TimeSlot("Monday", "09:00", "13:00"),
            TimeSlot("Wednesday", "09:00", "13:00"),
            TimeSlot("Friday", "09:00", "13:00"),
        ]
        candidate = [TimeSlot("Monday", "08:00", "10:00")]
        assert availability_score(candidate, job) == 33


class TestPreferences:
    """Tests for the preference sub-score and its parts."""

    def test_salary_part(self):
        assert salary_part(None, None, None) == 50
        assert salary_part(15000, None, None) == 50
        assert salary_part(None, 10000, 20000) == 50
        assert salary_part(8000, 10000, 20000) == 100
        assert salary_part(15000, 10000, 20000) == 90
        assert salary_part(25000, 10000, 20000) == 0

    def test_salary_bounds_are_inclusive(self):
        assert salary_part(10000, 10000, 20000) == 90
        assert salary_part(20000, 10000, 20000) == 90

    def test_salary_single_bound_falls_back(self):
        assert salary_part(20000, None, 20000) == 90
        assert salary_part(19000, None, 20000) == 100
        assert salary_part(21000, 20000, None) == 0

    def test_industry_part(self):
        assert industry_part("Retail", "retail") == 100
        assert industry_part("Retail", "Finance") == 50
        assert industry_part(None, "Finance") == 50
        assert industry_part("Retail", None) == 50

    def test_remote_part(self):
        assert remote_part(True, True) == 100
        assert remote_part(False, True) == 0
        assert remote_part(None, True) == 70
        assert remote_part(True, False) == 50
        assert remote_part(False, False) == 50

    def test_all_neutral_averages_to_50(self, candidate_factory, posting_factory):
        assert preferences_score(candidate_factory(), posting_factory()) == 50

    def test_mean_is_rounded(self, candidate_factory, posting_factory):
        job = posting_factory(min_salary=10000, max_salary=20000)
        assert preferences_score(candidate_factory(preferred_salary=8000), job) == 67
        assert preferences_score(candidate_factory(preferred_salary=25000), job) == 33
        assert preferences_score(candidate_factory(preferred_salary=15000), job) == 63

    def test_best_case(self, candidate_factory, posting_factory):
        job = posting_factory(min_salary=10000, max_salary=20000, industry="Retail", remote_option=True)
        candidate = candidate_factory(preferred_salary=9000, preferred_industry="retail", accepts_remote=True)
        assert preferences_score(candidate, job) == 100

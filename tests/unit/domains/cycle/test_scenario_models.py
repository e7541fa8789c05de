"""Tests for scenario parsing, closed enumerations and range validation."""

from __future__ import annotations

import pytest

from biostate.domains.cycle.domain_logic.scenario_models import (
    SYMPTOM_NAMES,
    InvalidEnumerationError,
    Mood,
    Phase,
    ScenarioInput,
    ScenarioValidationError,
    SymptomFlags,
    require_valid_scenario,
    validate_scenario,
)


class TestEnumerations:
    def test_parse_label(self):
        assert Phase.parse("Follicular") is Phase.FOLLICULAR
        assert Mood.parse("Severe mood swings") is Mood.SEVERE_MOOD_SWINGS

    def test_parse_ignores_case_and_separators(self):
        assert Mood.parse("severe_mood_swings") is Mood.SEVERE_MOOD_SWINGS
        assert Phase.parse("  LUTEAL ") is Phase.LUTEAL

    def test_parse_member_passthrough(self):
        assert Mood.parse(Mood.CALM) is Mood.CALM

    @pytest.mark.parametrize("value", ["Premenstrual", "", None, 3])
    def test_unknown_phase(self, value):
        with pytest.raises(InvalidEnumerationError, match="Expected one of"):
            Phase.parse(value)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            Mood.parse("Happy")


class TestSymptomFlags:
    def test_from_mapping_known_and_extra(self):
        flags = SymptomFlags.from_mapping({"cramps": 1, "nausea": 0, "acne": 1})
        assert flags.cramps is True
        assert flags.nausea is False
        assert flags.extra == {"acne": True}

    @pytest.mark.parametrize("value, expected", [
        (1, True), (0, False), ("1", True), ("0", False), ("true", True), (True, True),
    ])
    def test_flag_values(self, value, expected):
        assert SymptomFlags.from_mapping({"headache": value}).headache is expected

    def test_checked_order(self):
        flags = SymptomFlags.from_mapping({"anxiety": 1, "acne": 1, "cramps": 1})
        assert flags.checked() == ["cramps", "anxiety", "acne"]

    def test_as_dict_includes_every_named_flag(self):
        out = SymptomFlags(fatigue=True).as_dict()
        assert set(SYMPTOM_NAMES) <= set(out)
        assert out["fatigue"] == 1
        assert out["cramps"] == 0

    def test_empty_mapping(self):
        assert SymptomFlags.from_mapping(None) == SymptomFlags()


class TestScenarioInput:
    def test_from_dict_camel_case_keys(self):
        scenario = ScenarioInput.from_dict({
            "phase": "Luteal",
            "mood": "Irritable",
            "energy": "4",
            "sleep": 5,
            "stress": 8,
            "symptoms": {"bloating": 1},
            "symptomSeverity": 2,
            "cycleDay": 22,
            "memoryText": "Bloating most evenings.",
        })
        assert scenario.phase is Phase.LUTEAL
        assert scenario.energy == 4.0
        assert scenario.symptom_severity == 2
        assert scenario.cycle_day == 22
        assert scenario.cycle_length == 28
        assert scenario.memory_text == "Bloating most evenings."
        assert scenario.symptoms.bloating

    @pytest.mark.parametrize("day", [0, "", None])
    def test_absent_cycle_day(self, day):
        scenario = ScenarioInput.from_dict({
            "phase": "Menstrual", "mood": "Calm", "energy": 5, "sleep": 5, "stress": 5,
            "cycleDay": day,
        })
        assert scenario.cycle_day is None

    def test_missing_fields(self):
        with pytest.raises(ScenarioValidationError, match="energy"):
            ScenarioInput.from_dict({"phase": "Menstrual", "mood": "Calm", "sleep": 5, "stress": 5})

    def test_non_numeric_value(self):
        with pytest.raises(ScenarioValidationError, match="stress must be numeric"):
            ScenarioInput.from_dict({
                "phase": "Menstrual", "mood": "Calm", "energy": 5, "sleep": 5, "stress": "high",
            })

    @pytest.mark.parametrize("field", ["energy", "cycleDay", "cycleLength"])
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_value(self, field, value):
        payload = {"phase": "Luteal", "mood": "Calm", "energy": 5, "sleep": 5, "stress": 5}
        payload[field] = value
        with pytest.raises(ScenarioValidationError, match="must be finite"):
            ScenarioInput.from_dict(payload)

    @pytest.mark.parametrize("field, value", [("cycleDay", 14.7), ("cycleLength", 27.5)])
    def test_fractional_cycle_fields(self, field, value):
        with pytest.raises(ScenarioValidationError, match="whole number"):
            ScenarioInput.from_dict({
                "phase": "Luteal", "mood": "Calm", "energy": 5, "sleep": 5, "stress": 5,
                field: value,
            })

    def test_integral_float_cycle_day(self):
        scenario = ScenarioInput.from_dict({
            "phase": "Luteal", "mood": "Calm", "energy": 5, "sleep": 5, "stress": 5,
            "cycleDay": 14.0,
        })
        assert scenario.cycle_day == 14
        assert isinstance(scenario.cycle_day, int)

    def test_symptoms_must_be_mapping(self):
        with pytest.raises(ScenarioValidationError):
            ScenarioInput.from_dict({
                "phase": "Menstrual", "mood": "Calm", "energy": 5, "sleep": 5, "stress": 5,
                "symptoms": ["cramps"],
            })

    def test_invalid_mood(self):
        with pytest.raises(InvalidEnumerationError):
            ScenarioInput.from_dict({
                "phase": "Menstrual", "mood": "Ecstatic", "energy": 5, "sleep": 5, "stress": 5,
            })

    def test_as_dict_is_plain(self, scenario_factory):
        out = scenario_factory(symptoms={"cramps": 1}).as_dict()
        assert out["phase"] == "Follicular"
        assert out["mood"] == "Calm"
        assert out["symptoms"]["cramps"] == 1


class TestValidation:
    def test_valid_scenario(self, scenario_factory):
        assert validate_scenario(scenario_factory()) == []

    @pytest.mark.parametrize("overrides, fragment", [
        ({"energy": 0}, "energy"),
        ({"sleep": 11}, "sleep"),
        ({"stress": 5.5}, "stress"),
        ({"symptomSeverity": 4}, "symptom_severity"),
        ({"cycleDay": 29}, "cycle_day"),
        ({"cycleLength": -1}, "cycle_length"),
    ])
    def test_out_of_range(self, scenario_factory, overrides, fragment):
        problems = validate_scenario(scenario_factory(**overrides))
        assert len(problems) == 1
        assert fragment in problems[0]

    def test_require_raises_with_all_problems(self, scenario_factory):
        with pytest.raises(ScenarioValidationError) as exc_info:
            require_valid_scenario(scenario_factory(energy=12, stress=0))
        assert "energy" in str(exc_info.value)
        assert "stress" in str(exc_info.value)

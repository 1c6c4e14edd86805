from menova.services.symptom_format import (
    GENERAL_TITLE,
    NO_SYMPTOMS_TEXT,
    create_enhanced_summary,
    create_symptom_title,
    format_detected_symptoms,
    intensity_to_description,
)


def test_format_detected_symptoms():
    assert format_detected_symptoms(["hot_flashes", "brain_fog"]) == "Hot Flashes, Brain Fog"
    assert format_detected_symptoms([]) == NO_SYMPTOMS_TEXT


def test_unknown_symptom_formats_as_id():
    assert format_detected_symptoms(["joint_pain"]) == "joint_pain"


def test_intensity_descriptions():
    assert intensity_to_description(1) == "very mild (1/5)"
    assert intensity_to_description(4) == "quite severe (4/5)"
    assert intensity_to_description(None) == "unknown"
    assert intensity_to_description(9) == "unknown"


def test_enhanced_summary_with_intensity():
    s = create_enhanced_summary("Hot flashes all night", ["hot_flashes"], 4)
    assert s == (
        "DETECTED SYMPTOMS: Hot Flashes\n"
        "INTENSITY: 4/5 (quite severe (4/5))\n"
        "\n"
        "Hot flashes all night"
    )


def test_enhanced_summary_without_intensity():
    s = create_enhanced_summary("Just checking in", [], None)
    assert s.startswith("DETECTED SYMPTOMS: None specifically identified\nINTENSITY: Not specified\n\n")
    assert s.endswith("Just checking in")


def test_symptom_title():
    assert create_symptom_title(["sleep", "mood"]) == "Conversation about sleep quality, mood"
    assert create_symptom_title([]) == GENERAL_TITLE

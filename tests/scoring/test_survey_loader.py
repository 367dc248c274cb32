import json
import logging

import pytest

from services.scoring_engine.errors import ConfigurationError
from services.scoring_engine.loader import (
    load_analysis_config,
    load_survey_definition,
    load_survey_definition_from_file,
)
from services.scoring_engine.models import SurveyDefinition


def test_load_fixture_file(survey_fixture_path):
    survey = load_survey_definition_from_file(survey_fixture_path)
    assert isinstance(survey, SurveyDefinition)
    assert survey.id == "7f1c3a52-2f4e-4c1a-9a51-0c2e9d6b8e11"
    assert survey.is_external is False
    assert [d.key for d in survey.analysis.dimensions] == ["EI", "JP"]
    assert survey.analysis.dimensions[0].scoring["5"] == 100
    assert survey.analysis.summary.text == "You are {EI} and {JP}."
    assert [q["id"] for q in survey.questions] == ["q1", "q2", "q3", "q4"]

def test_load_json_file(tmp_path, survey_data):
    path = tmp_path / "survey.json"
    path.write_text(json.dumps(survey_data), encoding="utf-8")
    survey = load_survey_definition_from_file(path)
    assert survey.analysis.result_types[1].dimension == "JP"

def test_accepts_analysis_key_and_snake_case(survey_data):
    data = {
        "id": 12,
        "is_external": False,
        "analysis": survey_data["analysisJson"],
    }
    survey = load_survey_definition(data)
    assert survey.id == "12"
    assert len(survey.analysis.result_types) == 2

def test_questions_json_wrapped_in_object(survey_data):
    survey_data["questionsJson"] = {"questions": survey_data["questionsJson"]}
    survey = load_survey_definition(survey_data)
    assert len(survey.questions) == 4

def test_missing_file_raises():
    with pytest.raises(ConfigurationError, match="File not found"):
        load_survey_definition_from_file("does/not/exist.yml")

def test_empty_file_raises(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="empty or invalid"):
        load_survey_definition_from_file(path)

def test_unparsable_yaml_raises(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("dimensions: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Error parsing"):
        load_survey_definition_from_file(path)

@pytest.mark.parametrize("missing", ["dimensions", "resultTypes"])
def test_missing_required_analysis_field_raises(survey_data, missing):
    del survey_data["analysisJson"][missing]
    with pytest.raises(ConfigurationError):
        load_survey_definition(survey_data)

def test_non_external_survey_without_analysis_raises(survey_data):
    del survey_data["analysisJson"]
    with pytest.raises(ConfigurationError, match="no analysis configuration"):
        load_survey_definition(survey_data)

def test_external_survey_without_analysis_is_valid():
    survey = load_survey_definition({"id": "ext", "isExternal": True, "externalUrl": "https://example.com/s"})
    assert survey.is_external is True
    assert survey.external_url == "https://example.com/s"
    assert survey.analysis is None

def test_duplicate_dimension_keys_raise(survey_data):
    dims = survey_data["analysisJson"]["dimensions"]
    dims.append(dict(dims[0]))
    with pytest.raises(ConfigurationError, match="Duplicate dimension key found: EI"):
        load_survey_definition(survey_data)

def test_category_with_min_above_max_raises(survey_data):
    survey_data["analysisJson"]["resultTypes"][0]["categories"][0]["min"] = 90
    with pytest.raises(ConfigurationError):
        load_survey_definition(survey_data)

def test_non_numeric_weight_raises(survey_data):
    survey_data["analysisJson"]["dimensions"][0]["scoring"][1] = "lots"
    with pytest.raises(ConfigurationError):
        load_survey_definition(survey_data)

def test_non_mapping_input_raises():
    with pytest.raises(ConfigurationError):
        load_survey_definition(["not", "a", "mapping"])
    with pytest.raises(ConfigurationError):
        load_analysis_config("dimensions: []")

def test_undeclared_result_type_dimension_is_tolerated(survey_data, caplog):
    survey_data["analysisJson"]["resultTypes"][1]["dimension"] = "SN"
    with caplog.at_level(logging.WARNING):
        survey = load_survey_definition(survey_data)
    assert survey.analysis.result_types[1].dimension == "SN"
    assert "undeclared dimension 'SN'" in caplog.text

def test_unknown_question_reference_is_tolerated(survey_data, caplog):
    survey_data["analysisJson"]["dimensions"][1]["questions"].append("q99")
    with caplog.at_level(logging.WARNING):
        load_survey_definition(survey_data)
    assert "q99" in caplog.text

def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)

def test_null_optional_values_load_as_empty(survey_data):
    survey_data["analysisJson"]["resultTypes"][1]["categories"][0].update(description=None, traits=None)
    survey_data["analysisJson"]["dimensions"][1]["scoring"][2] = None
    survey = load_survey_definition(survey_data)
    category = survey.analysis.result_types[1].categories[0]
    assert category.description == ""
    assert category.traits == []
    assert survey.analysis.dimensions[1].scoring["2"] == 0

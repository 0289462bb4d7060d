import json

from berlin_schools.enrich import construction_record
from berlin_schools.export import dump_json, to_feature_collection
from berlin_schools.filters import filter_records, summarize
from berlin_schools.schema import with_eligibility

from conftest import project, school


def _records():
    return [
        with_eligibility(school("01B01", school_type="Gymnasium", street="Parkweg"), True),
        school("02G03", school_type="Grundschule", district="Pankow"),
        school("03K01", school_type="Gymnasium", operator="privat", district="Pankow"),
        construction_record(project(9, "", district="Pankow"), (13.4, 52.5)),
    ]


def test_filter_by_query_matches_name_street_or_district():
    records = _records()

    assert [r.school_number for r in filter_records(records, query="parkWEG")] == ["01B01"]
    assert len(filter_records(records, query="pankow")) == 3


def test_filters_combine():
    records = _records()

    result = filter_records(
        records, school_types={"Gymnasium"}, operators={"privat"}, districts={"Pankow"}
    )

    assert [r.school_number for r in result] == ["03K01"]


def test_empty_filters_keep_everything():
    records = _records()

    assert filter_records(records, query="", school_types=set(), districts=set()) == records


def test_after_4th_grade_only():
    assert [r.school_number for r in filter_records(_records(), after_4th_grade_only=True)] == ["01B01"]


def test_summarize():
    assert summarize(_records()) == {
        "total": 4,
        "public": 3,
        "private": 1,
        "construction": 1,
        "after_4th_grade": 1,
    }


def test_feature_collection_round_trips_through_json():
    collection = to_feature_collection(_records())
    decoded = json.loads(dump_json(collection))

    assert decoded["numberReturned"] == 4
    first, *_, last = decoded["features"]
    assert first["id"] == "schulen.01B01"
    assert first["geometry"] == {"type": "Point", "coordinates": [13.4, 52.5]}
    assert first["properties"]["accepts_after_4th_grade"] is True
    assert "longitude" not in first["properties"]
    assert last["properties"]["is_construction_project"] is True
    assert last["properties"]["construction_project"]["id"] == 9
    assert last["bbox"] == [13.4, 52.5, 13.4, 52.5]

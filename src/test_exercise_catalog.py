"""Tests for the exercise catalog client, its cache and filtering."""

from datetime import UTC, datetime, timedelta
from unittest.mock import Mock, patch

import pytest
import requests

from exercise_catalog import CacheStore, ExerciseCatalog, filter_exercises
from typedefs import ExerciseFilter, ExerciseRecord

API_EXERCISES = [
    {
        "id": "0001",
        "name": "3/4 sit-up",
        "bodyPart": "waist",
        "target": "abs",
        "equipment": "body weight",
        "gifUrl": "https://example.com/0001.gif",
    },
    {
        "id": "0025",
        "name": "barbell bench press",
        "bodyPart": "chest",
        "target": "pectorals",
        "equipment": "barbell",
        "gifUrl": "https://example.com/0025.gif",
    },
    {
        "id": "0289",
        "name": "dumbbell incline bench press",
        "bodyPart": "chest",
        "target": "pectorals",
        "equipment": "dumbbell",
    },
]


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 12, 1, 8, 0, tzinfo=UTC)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def ok_response(data):
    response = Mock()
    response.json.return_value = data
    response.raise_for_status.return_value = None
    return response


def error_response(status_code=500):
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError(
        f"{status_code} Server Error"
    )
    return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def http():
    return requests.Session()


@pytest.fixture
def catalog(http, clock):
    return ExerciseCatalog(
        api_key="test-key",
        base_url="https://exercisedb.example.com",
        cache=CacheStore(clock=clock),
        http=http,
    )


@pytest.fixture
def records():
    return [ExerciseRecord.model_validate(data) for data in API_EXERCISES]


def test_fetch_all_parses_records(catalog, http):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)) as get:
        exercises = catalog.fetch_all()

    get.assert_called_once_with(
        "https://exercisedb.example.com/exercises", timeout=catalog.timeout
    )
    assert [ex.id for ex in exercises] == ["0001", "0025", "0289"]
    assert exercises[1].body_part == "chest"
    assert exercises[1].gif_url == "https://example.com/0025.gif"
    assert exercises[2].gif_url is None


def test_api_key_header(catalog, http):
    assert http.headers["X-RapidAPI-Key"] == "test-key"
    assert http.headers["X-RapidAPI-Host"] == "exercisedb.example.com"


def test_fetch_all_uses_cache_within_ttl(catalog, http, clock):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)) as get:
        catalog.fetch_all()
        clock.advance(hours=23)
        exercises = catalog.fetch_all()

    assert get.call_count == 1
    assert len(exercises) == 3


def test_fetch_all_refetches_after_ttl(catalog, http, clock):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)) as get:
        catalog.fetch_all()
        clock.advance(hours=24, seconds=1)
        catalog.fetch_all()

    assert get.call_count == 2


def test_fetch_all_returns_a_copy_of_the_cache(catalog, http):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)) as get:
        first = catalog.fetch_all()
        first.clear()
        second = catalog.fetch_all()
        second.pop()

    assert get.call_count == 1
    assert len(catalog.fetch_all()) == 3
    assert catalog.cache_status().exercise_count == 3


def test_fetch_failure_falls_back_to_expired_cache(catalog, http, clock):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)):
        catalog.fetch_all()

    clock.advance(days=3)
    assert not catalog.cache.is_valid()

    with patch.object(http, "get", side_effect=requests.ConnectionError("offline")):
        exercises = catalog.fetch_all()

    assert len(exercises) == 3


def test_fetch_failure_without_cache_returns_empty(catalog, http):
    with patch.object(http, "get", return_value=error_response(503)):
        assert catalog.fetch_all() == []

    with patch.object(http, "get", side_effect=requests.Timeout("slow")):
        assert catalog.fetch_all() == []


def test_malformed_payload_is_a_failure(catalog, http):
    with patch.object(http, "get", return_value=ok_response([{"id": "1"}])):
        assert catalog.fetch_all() == []
    assert catalog.cache.data is None


def test_fetch_by_body_part(catalog, http):
    chest = [data for data in API_EXERCISES if data["bodyPart"] == "chest"]
    with patch.object(http, "get", return_value=ok_response(chest)) as get:
        exercises = catalog.fetch_by_body_part("chest")

    get.assert_called_once_with(
        "https://exercisedb.example.com/exercises/bodyPart/chest",
        timeout=catalog.timeout,
    )
    assert len(exercises) == 2


def test_fetch_by_id(catalog, http):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES[1])):
        exercise = catalog.fetch_by_id("0025")
    assert exercise.name == "barbell bench press"

    with patch.object(http, "get", return_value=error_response(404)):
        assert catalog.fetch_by_id("9999") is None


def test_fetch_lists(catalog, http):
    with patch.object(http, "get", return_value=ok_response(["back", "chest"])):
        assert catalog.fetch_body_part_list() == ["back", "chest"]

    with patch.object(http, "get", side_effect=requests.ConnectionError("offline")):
        assert catalog.fetch_equipment_list() == []
        assert catalog.fetch_by_target("abs") == []
        assert catalog.fetch_by_equipment("barbell") == []


def test_update_api_key_clears_cache(catalog, http):
    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)):
        catalog.fetch_all()
    assert catalog.cache_status().has_cached_data

    catalog.update_api_key("new-key")

    assert http.headers["X-RapidAPI-Key"] == "new-key"
    assert not catalog.cache_status().has_cached_data


def test_cache_status(catalog, http, clock):
    status = catalog.cache_status()
    assert status.has_cached_data is False
    assert status.cache_age_seconds is None
    assert status.exercise_count == 0

    with patch.object(http, "get", return_value=ok_response(API_EXERCISES)):
        catalog.fetch_all()
    clock.advance(minutes=5)

    status = catalog.cache_status()
    assert status.has_cached_data is True
    assert status.cache_age_seconds == 300
    assert status.is_valid is True
    assert status.exercise_count == 3


def test_filter_by_body_part_case_insensitive(records):
    result = filter_exercises(records, ExerciseFilter(body_part="CHEST"))
    assert [ex.id for ex in result] == ["0025", "0289"]


def test_filter_by_single_equipment(records):
    result = filter_exercises(records, ExerciseFilter(equipment="Barbell"))
    assert [ex.id for ex in result] == ["0025"]


def test_filter_by_equipment_list(records):
    result = filter_exercises(
        records, ExerciseFilter(equipment=["dumbbell", "body weight"])
    )
    assert [ex.id for ex in result] == ["0001", "0289"]


def test_filter_by_empty_equipment_list_matches_nothing(records):
    assert filter_exercises(records, ExerciseFilter(equipment=[])) == []


def test_filter_by_target_and_search(records):
    result = filter_exercises(
        records, ExerciseFilter(target="Pectorals", search="INCLINE")
    )
    assert [ex.id for ex in result] == ["0289"]


def test_filter_without_criteria(records):
    assert filter_exercises(records, ExerciseFilter()) == records
    assert filter_exercises(records) == records
    assert filter_exercises([], ExerciseFilter(body_part="chest")) == []

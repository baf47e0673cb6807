"""Exercise catalog client with an in-process cache.

The catalog is the ExerciseDB API on RapidAPI. Fetch failures never reach
the caller: they fall back to the cache (even if expired) or to an empty
result.
"""

import os
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Protocol

import requests
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from typedefs import CacheStatus, ExerciseFilter, ExerciseRecord, utcnow

EXERCISEDB_BASE_URL = os.environ.get(
    "EXERCISEDB_BASE_URL", "https://exercisedb.p.rapidapi.com"
)
EXERCISEDB_TIMEOUT_SECONDS = float(os.environ.get("EXERCISEDB_TIMEOUT_SECONDS", "10"))
CACHE_TTL = timedelta(hours=24)

_records_adapter = TypeAdapter(List[ExerciseRecord])

# Anything that went wrong talking to the API or reading its payload
FETCH_ERRORS = (requests.RequestException, ValueError, ValidationError)


class ExerciseProvider(Protocol):
    def fetch_all(self) -> List[ExerciseRecord]: ...


class CacheStore:
    """Holds the last successful full catalog fetch and when it happened."""

    def __init__(
        self, ttl: timedelta = CACHE_TTL, clock: Callable[[], datetime] = utcnow
    ):
        self.ttl = ttl
        self.clock = clock
        self.data: Optional[List[ExerciseRecord]] = None
        self.timestamp: Optional[datetime] = None

    def is_valid(self) -> bool:
        if self.data is None or self.timestamp is None:
            return False
        return self.clock() - self.timestamp < self.ttl

    def put(self, data: List[ExerciseRecord]) -> None:
        self.data = data
        self.timestamp = self.clock()

    def clear(self) -> None:
        self.data = None
        self.timestamp = None
        logger.info("Exercise cache cleared")

    def status(self) -> CacheStatus:
        age = None
        if self.timestamp is not None:
            age = (self.clock() - self.timestamp).total_seconds()
        return CacheStatus(
            has_cached_data=self.data is not None,
            cache_age_seconds=age,
            is_valid=self.is_valid(),
            exercise_count=len(self.data) if self.data else 0,
        )


class ExerciseCatalog:
    """Client for the exercise catalog API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = EXERCISEDB_BASE_URL,
        cache: Optional[CacheStore] = None,
        http: Optional[requests.Session] = None,
        timeout: float = EXERCISEDB_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else CacheStore()
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()
        self.http.headers.update(
            {
                "X-RapidAPI-Key": api_key,
                "X-RapidAPI-Host": self.base_url.split("://", 1)[-1],
            }
        )

    def _get(self, path: str):
        response = self.http.get(f"{self.base_url}{path}", timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _get_records(self, path: str) -> List[ExerciseRecord]:
        return _records_adapter.validate_python(self._get(path))

    def fetch_all(self) -> List[ExerciseRecord]:
        """Return every exercise, served from the cache while it is fresh."""
        if self.cache.is_valid():
            logger.debug("Using cached exercises")
            return list(self.cache.data)

        try:
            logger.info("Fetching exercises from API")
            records = self._get_records("/exercises")
        except FETCH_ERRORS as e:
            logger.error(f"Error fetching exercises: {e}")
            if self.cache.data is not None:
                logger.warning("Using expired cache due to API error")
                return list(self.cache.data)
            return []

        self.cache.put(records)
        logger.info(f"Fetched {len(records)} exercises")
        return list(records)

    def _fetch_uncached(self, path: str, label: str) -> List[ExerciseRecord]:
        try:
            logger.info(f"Fetching exercises for {label}")
            return self._get_records(path)
        except FETCH_ERRORS as e:
            logger.error(f"Error fetching exercises for {label}: {e}")
            return []

    def fetch_by_body_part(self, body_part: str) -> List[ExerciseRecord]:
        return self._fetch_uncached(f"/exercises/bodyPart/{body_part}", body_part)

    def fetch_by_equipment(self, equipment: str) -> List[ExerciseRecord]:
        return self._fetch_uncached(f"/exercises/equipment/{equipment}", equipment)

    def fetch_by_target(self, target: str) -> List[ExerciseRecord]:
        return self._fetch_uncached(f"/exercises/target/{target}", target)

    def fetch_by_id(self, exercise_id: str) -> Optional[ExerciseRecord]:
        try:
            data = self._get(f"/exercises/exercise/{exercise_id}")
            return ExerciseRecord.model_validate(data)
        except FETCH_ERRORS as e:
            logger.error(f"Error fetching exercise {exercise_id}: {e}")
            return None

    def _fetch_names(self, path: str, label: str) -> List[str]:
        try:
            data = self._get(path)
            return TypeAdapter(List[str]).validate_python(data)
        except FETCH_ERRORS as e:
            logger.error(f"Error fetching {label}: {e}")
            return []

    def fetch_body_part_list(self) -> List[str]:
        return self._fetch_names("/exercises/bodyPartList", "body parts list")

    def fetch_equipment_list(self) -> List[str]:
        return self._fetch_names("/exercises/equipmentList", "equipment list")

    def update_api_key(self, api_key: str) -> None:
        """Swap the API key. Cached data from the old key is dropped."""
        self.http.headers["X-RapidAPI-Key"] = api_key
        self.cache.clear()
        logger.info("Exercise catalog API key updated")

    def cache_status(self) -> CacheStatus:
        return self.cache.status()


def _equals(a: str | None, b: str) -> bool:
    return a is not None and a.lower() == b.lower()


def filter_exercises(
    exercises: List[ExerciseRecord], criteria: Optional[ExerciseFilter] = None
) -> List[ExerciseRecord]:
    """Filter exercises client-side. All given criteria must match."""
    if not exercises:
        return []
    if criteria is None:
        return list(exercises)

    filtered = list(exercises)

    if criteria.body_part:
        filtered = [ex for ex in filtered if _equals(ex.body_part, criteria.body_part)]

    # An empty equipment list matches nothing; an empty string is no filter
    if criteria.equipment is not None:
        if isinstance(criteria.equipment, str):
            if criteria.equipment:
                filtered = [
                    ex for ex in filtered if _equals(ex.equipment, criteria.equipment)
                ]
        else:
            filtered = [
                ex
                for ex in filtered
                if any(_equals(ex.equipment, eq) for eq in criteria.equipment)
            ]

    if criteria.target:
        filtered = [ex for ex in filtered if _equals(ex.target, criteria.target)]

    if criteria.search:
        search = criteria.search.lower()
        filtered = [ex for ex in filtered if search in ex.name.lower()]

    return filtered

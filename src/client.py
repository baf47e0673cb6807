"""Exercise catalog client configuration for dependency injection."""

import os
from functools import lru_cache

from exercise_catalog import ExerciseCatalog


@lru_cache(maxsize=1)
def get_exercise_catalog() -> ExerciseCatalog:
    """Dependency function that returns the process-wide exercise catalog.

    Cached so every request shares one catalog, and therefore one cache of
    fetched exercises.
    """
    return ExerciseCatalog(api_key=os.environ.get("EXERCISEDB_API_KEY", ""))

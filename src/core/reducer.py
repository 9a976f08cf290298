from typing import List, Optional, TypeVar
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def merge_places(existing: Optional[List[T]], new: Optional[List[T]]) -> List[T]:
    """Append newly found places to the state, skipping exact repeats.

    The same place id may come back with different labels from different
    lookups; every distinct version is kept.
    """

    merged = list(existing or [])
    if not new:
        return merged

    added_count = 0
    for item in new:
        if item in merged:
            continue
        merged.append(item)
        added_count += 1

    logger.debug("Reducer: Added %s new places, total: %s", added_count, len(merged))
    return merged

"""Personal Records (PR) data models for strength exercises."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, TypeAdapter

from .base import CamelModel


class PRType(str, Enum):
    """Types of personal records that can be tracked."""
    MAX_WEIGHT = "maxWeight"   # Heaviest completed set
    MAX_VOLUME = "maxVolume"   # Most weight x reps in a single session


class MaxWeightRecord(CamelModel):
    """Best-ever single-set weight for an exercise."""

    value: float = Field(..., description="Weight value in the user's unit")
    reps: int = Field(..., description="Reps achieved at this weight")
    achieved_at: datetime
    session_id: str


class MaxVolumeRecord(CamelModel):
    """Best-ever single-session volume for an exercise."""

    value: float = Field(..., description="Total volume (weight x reps summed over sets)")
    achieved_at: datetime
    session_id: str
    sets: int = Field(..., description="Number of completed sets")
    avg_weight: float = Field(..., description="Average weight per rep")


class ExercisePR(CamelModel):
    """Stored records for one exercise. Each field only ever holds the best value."""

    max_weight: Optional[MaxWeightRecord] = None
    max_volume: Optional[MaxVolumeRecord] = None

    @property
    def record_count(self) -> int:
        return int(self.max_weight is not None) + int(self.max_volume is not None)


# Keys are exercise display names
UserPersonalRecords = Dict[str, ExercisePR]

personal_records_adapter: TypeAdapter[Dict[str, ExercisePR]] = TypeAdapter(Dict[str, ExercisePR])


def dump_personal_records(records: UserPersonalRecords) -> dict:
    """Serialize a user's records to camelCase JSON-compatible data."""
    return personal_records_adapter.dump_python(records, mode="json", by_alias=True, exclude_none=True)


def count_personal_records(records: UserPersonalRecords) -> int:
    """Count stored record fields across all exercises."""
    return sum(record.record_count for record in records.values())


class PRUpdate(CamelModel):
    """A record-breaking event detected in a session."""

    exercise_name: str
    type: PRType
    value: float
    reps: Optional[int] = None
    sets: Optional[int] = None
    avg_weight: Optional[float] = None
    session_id: str
    previous_best: Optional[float] = None


class PRComparison(CamelModel):
    """How a session's performance compares to stored records."""

    is_new_pr: bool
    type: PRType
    improvement: Optional[float] = None
    improvement_percent: Optional[float] = None
    previous_best: Optional[float] = None


class TopPR(CamelModel):
    """Flattened record entry for display."""

    exercise_name: str
    type: PRType
    value: float
    achieved_at: datetime
    reps: Optional[int] = None
    sets: Optional[int] = None


class PRProcessingResult(CamelModel):
    """Result of processing a session's personal records."""

    new_prs: List[PRUpdate] = Field(default_factory=list)
    updated_user_prs: Dict[str, ExercisePR] = Field(default_factory=dict)

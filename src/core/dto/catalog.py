from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from .media import MediaRecordDTO


@dataclass(frozen=True)
class CatalogStatsDTO:
    total_files: int = 0
    total_size_bytes: int = 0
    distinct_formats: FrozenSet[str] = frozenset()
    durations: Tuple[float, ...] = ()


@dataclass(frozen=True)
class CatalogSnapshotDTO:
    all: Tuple[MediaRecordDTO, ...] = ()
    filtered: Tuple[MediaRecordDTO, ...] = ()
    stats: CatalogStatsDTO = field(default_factory=CatalogStatsDTO)
    search_term: Optional[str] = None

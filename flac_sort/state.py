from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple


class AlbumState(str, Enum):
    DISCOVERED = "discovered"
    SKIPPED = "skipped"
    FLATTENING = "flattening"
    FLATTENED = "flattened"
    FLATTEN_FAILED = "flatten_failed"
    TAGGING = "tagging"
    TAGGED = "tagged"
    TAG_FAILED = "tag_failed"
    RELOCATING = "relocating"
    RELOCATED = "relocated"
    RELOCATE_FAILED = "relocate_failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


class Event(str, Enum):
    REJECTED = "rejected"
    DISCS_FOUND = "discs_found"
    READY = "ready"
    FLATTEN_OK = "flatten_ok"
    FLATTEN_ERROR = "flatten_error"
    TAG_OK = "tag_ok"
    TAG_ERROR = "tag_error"
    RELOCATE = "relocate"
    MOVED_HIRES = "moved_hires"
    MOVED_CD = "moved_cd"
    RELOCATE_ERROR = "relocate_error"


class Effect(str, Enum):
    COUNT_SKIPPED = "skipped"
    COUNT_FLATTENED = "flattened"
    COUNT_ERROR = "errors"
    COUNT_PROCESSED = "processed"
    COUNT_MOVED_HIRES = "moved_to_hires"
    COUNT_MOVED_CD = "moved_to_cd"


TERMINAL_STATES = frozenset(
    {
        AlbumState.SKIPPED,
        AlbumState.FLATTEN_FAILED,
        AlbumState.TAGGED,
        AlbumState.TAG_FAILED,
        AlbumState.RELOCATED,
        AlbumState.RELOCATE_FAILED,
    }
)

_TABLE: Dict[Tuple[AlbumState, Event], Tuple[AlbumState, Tuple[Effect, ...]]] = {
    (AlbumState.DISCOVERED, Event.REJECTED): (AlbumState.SKIPPED, (Effect.COUNT_SKIPPED,)),
    (AlbumState.DISCOVERED, Event.DISCS_FOUND): (AlbumState.FLATTENING, ()),
    (AlbumState.DISCOVERED, Event.READY): (AlbumState.TAGGING, ()),
    (AlbumState.FLATTENING, Event.FLATTEN_OK): (AlbumState.FLATTENED, (Effect.COUNT_FLATTENED,)),
    (AlbumState.FLATTENING, Event.FLATTEN_ERROR): (AlbumState.FLATTEN_FAILED, (Effect.COUNT_ERROR,)),
    (AlbumState.FLATTENED, Event.READY): (AlbumState.TAGGING, ()),
    (AlbumState.FLATTENED, Event.REJECTED): (AlbumState.SKIPPED, (Effect.COUNT_SKIPPED,)),
    (AlbumState.TAGGING, Event.TAG_OK): (AlbumState.TAGGED, (Effect.COUNT_PROCESSED,)),
    (AlbumState.TAGGING, Event.TAG_ERROR): (AlbumState.TAG_FAILED, (Effect.COUNT_ERROR,)),
    (AlbumState.TAGGED, Event.RELOCATE): (AlbumState.RELOCATING, ()),
    (AlbumState.RELOCATING, Event.MOVED_HIRES): (AlbumState.RELOCATED, (Effect.COUNT_MOVED_HIRES,)),
    (AlbumState.RELOCATING, Event.MOVED_CD): (AlbumState.RELOCATED, (Effect.COUNT_MOVED_CD,)),
    (AlbumState.RELOCATING, Event.RELOCATE_ERROR): (AlbumState.RELOCATE_FAILED, (Effect.COUNT_ERROR,)),
}


class InvalidTransition(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Transition:
    state: AlbumState
    effects: Tuple[Effect, ...]


def transition(state: AlbumState, event: Event) -> Transition:
    try:
        new_state, effects = _TABLE[(state, event)]
    except KeyError:
        raise InvalidTransition(f"{event.value} is not valid in state {state.value}") from None
    return Transition(new_state, effects)


@dataclass
class AlbumOutcome:
    name: str
    state: AlbumState
    path: Path
    message: Optional[str] = None


@dataclass
class RunStatistics:
    processed: int = 0
    flattened: int = 0
    errors: int = 0
    skipped: int = 0
    moved_to_hires: int = 0
    moved_to_cd: int = 0
    outcomes: List[AlbumOutcome] = field(default_factory=list)

    def apply(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            setattr(self, effect.value, getattr(self, effect.value) + 1)

    def summary_lines(self, cd_dir: Optional[str] = None, hires_dir: Optional[str] = None) -> List[str]:
        lines = [
            f"Total directories processed: {self.processed}",
            f"Directories flattened: {self.flattened}",
            f"Directories skipped: {self.skipped}",
            f"Directories with errors: {self.errors}",
        ]
        if cd_dir and hires_dir:
            lines.append(f"Moved to {hires_dir}: {self.moved_to_hires}")
            lines.append(f"Moved to {cd_dir}: {self.moved_to_cd}")
        return lines

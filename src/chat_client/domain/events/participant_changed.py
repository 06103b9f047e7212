from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ParticipantJoined:
    identity: str


@dataclass(frozen=True, slots=True)
class ParticipantLeft:
    identity: str

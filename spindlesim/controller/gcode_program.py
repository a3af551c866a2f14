"""The face-milling program run by the twin and the controller readout."""

from dataclasses import dataclass
from typing import List

from spindlesim.config.constants import (
    PHASE_CUTTING,
    PHASE_IDLE,
    PHASE_RAPID_DOWN,
    PHASE_RETRACT,
    PROGRAMMED_FEED,
)
from spindlesim.config.schema import ControllerCommand

FACE_MILLING_PROGRAM: List[str] = [
    "O1001 (FACE MILLING)",
    "N10 G21 G90 G40",
    "N20 G00 Z50.0 (SAFE Z)",
    "N30 M03 S3000 (SPINDLE ON)",
    "N40 G00 Z0.0 (APPROACH)",
    "N50 G01 Z-40.0 F500 (CUT)",
    "N60 G04 P500 (DWELL)",
    "N70 G00 Z50.0 (RETRACT)",
    "N80 M05 (SPINDLE OFF)",
    "N90 M30 (END)",
]

# Below this depth (m) a rapid move is still on the approach block
APPROACH_DEPTH = 0.2


def active_line(cycle_active: bool, phase: str, z_pos: float) -> int:
    """Index into FACE_MILLING_PROGRAM of the block being executed."""
    if not cycle_active:
        return 0
    if phase == PHASE_IDLE:
        return 1
    if phase == PHASE_RAPID_DOWN:
        return 3 if z_pos < APPROACH_DEPTH else 4
    if phase == PHASE_CUTTING:
        return 5
    if phase == PHASE_RETRACT:
        return 7
    raise ValueError(f"Unknown cycle phase {phase!r}")


def feed_word(command: ControllerCommand) -> str:
    return f"F{PROGRAMMED_FEED * command.feed_override:.0f}"


def spindle_word(command: ControllerCommand) -> str:
    return f"S{command.rpm:.0f}"


def coolant_word(command: ControllerCommand) -> str:
    return "M08" if command.coolant_active else "M09"


@dataclass(frozen=True)
class ControllerReadout:
    line_index: int
    line: str
    feed: str
    spindle: str
    coolant: str


def controller_readout(command: ControllerCommand, phase: str, z_pos: float) -> ControllerReadout:
    """Program position and modal words as shown on the controller panel."""
    index = active_line(command.cycle_active, phase, z_pos)
    return ControllerReadout(
        line_index=index,
        line=FACE_MILLING_PROGRAM[index],
        feed=feed_word(command),
        spindle=spindle_word(command),
        coolant=coolant_word(command),
    )

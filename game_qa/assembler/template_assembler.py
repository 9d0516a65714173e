"""
Template Assembler
==================
Splices a logic block into a structure template between two sentinel
markers, producing one candidate artifact.

CONTRACT:
  assemble(structure, logic) -> str
  - MARKER_A (start of logic region) and MARKER_B (start of trailer) must
    each appear exactly once, with MARKER_A strictly before MARKER_B.
  - Everything up to and including MARKER_A, and everything from MARKER_B
    onward, is reproduced byte-for-byte.
  - Any violation raises StructuralError. No partial output is returned
    and the repair loop is never entered for this failure class.

Pure function: no I/O, no logging side effects beyond debug output.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict

from game_qa.core.constants import MARKER_A, MARKER_B
from game_qa.core.errors import StructuralError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------
def _locate(structure: str, marker: str, label: str) -> int:
    """Return the index of a marker that must appear exactly once."""
    index = structure.find(marker)
    if index == -1:
        raise StructuralError(f"{label} marker not found in structure template: {marker!r}")
    if structure.find(marker, index + 1) != -1:
        raise StructuralError(f"{label} marker appears more than once: {marker!r}")
    return index


def assemble(
    structure: str,
    logic: str,
    *,
    start_marker: str = MARKER_A,
    end_marker: str = MARKER_B,
) -> str:
    """
    Replace the text strictly between the two markers with ``logic``.

    Parameters
    ----------
    structure : str
        Structure template containing both markers.
    logic : str
        Logic block to splice in (opaque text).
    start_marker, end_marker : str
        Sentinel substrings; must be distinct.

    Returns
    -------
    str
        The assembled artifact.

    Raises
    ------
    StructuralError
        If a marker is missing, duplicated, or the markers are out of order.
    """
    if not start_marker or not end_marker or start_marker == end_marker:
        raise StructuralError("start and end markers must be distinct, non-empty strings")

    start = _locate(structure, start_marker, "Start")
    end = _locate(structure, end_marker, "End")
    region_start = start + len(start_marker)
    if region_start > end:
        raise StructuralError("Start marker must occur strictly before end marker")

    head = structure[:region_start]
    tail = structure[end:]

    # Keep the markers on their own lines without touching the template text
    lead = "" if logic.startswith("\n") else "\n"
    trail = "" if logic.endswith("\n") else "\n"

    logger.debug(
        "Assembled artifact: %d head chars, %d logic chars, %d tail chars",
        len(head), len(logic), len(tail),
    )
    return f"{head}{lead}{logic}{trail}{tail}"


# ---------------------------------------------------------------------------
# Post-assembly sanity check
# ---------------------------------------------------------------------------
INTEGRATION_SIGNATURES: Dict[str, str] = {
    "has_session_sdk": "new SessionSDK",
    "has_game_state": "gameState",
    "has_init_game": "function initGame()",
    "has_process_sensor_data": "function processSensorData",
    "has_update": "function update()",
    "has_render": "function render()",
    "has_game_loop": "gameLoop()",
}


@dataclass
class IntegrationCheck:
    """Result of the lightweight post-assembly signature check."""
    passed: int
    total: int
    success: bool
    details: Dict[str, bool] = field(default_factory=dict)


def check_integration(artifact: str) -> IntegrationCheck:
    """Verify the assembled artifact carries the core structural signatures."""
    details = {name: signature in artifact for name, signature in INTEGRATION_SIGNATURES.items()}
    passed = sum(details.values())
    total = len(details)
    return IntegrationCheck(passed=passed, total=total, success=passed == total, details=details)

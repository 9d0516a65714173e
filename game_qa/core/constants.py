"""
Constants
Centralised storage for rubric weights, grade thresholds, sentinel markers
and check keys.
"""
from types import MappingProxyType

# Sentinel comment lines separating the structure template from the logic block.
MARKER_A = "// ==== GAME LOGIC START ===="
MARKER_B = "// ==== GAME LOGIC END ===="

MAX_SCORE = 100
PASS_THRESHOLD = 60
MAX_REPAIR_ATTEMPTS = 3

# Points removed from the defect-pattern check per unguarded pattern.
DEFECT_PENALTY = 7

# Check keys, in rubric order
SESSION_SDK = "session_sdk"
SENSOR_PROCESSING = "sensor_processing"
GAME_LOOP = "game_loop"
TIMER_SYSTEM = "timer_system"
BUG_PATTERNS = "bug_patterns"
STATE_MANAGEMENT = "state_management"
UI_UPDATE = "ui_update"

CHECK_WEIGHTS = MappingProxyType({
    SESSION_SDK: 20,
    SENSOR_PROCESSING: 15,
    GAME_LOOP: 15,
    TIMER_SYSTEM: 15,
    BUG_PATTERNS: 20,
    STATE_MANAGEMENT: 10,
    UI_UPDATE: 5,
})

# (minimum score, grade), highest first
GRADE_TABLE: tuple[tuple[int, str], ...] = (
    (90, "A+"),
    (85, "A"),
    (80, "B+"),
    (75, "B"),
    (70, "C+"),
    (65, "C"),
    (60, "D"),
)
FAILING_GRADE = "F"

# Ordered worst to best, used for grade comparisons
GRADE_ORDER: tuple[str, ...] = ("F", "D", "C", "C+", "B", "B+", "A", "A+")

RESIDUAL_DEFECTS_MESSAGE = "residual defects may remain"
DEADLINE_MESSAGE = "deadline exceeded before defects were resolved"

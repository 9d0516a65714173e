"""
Template Assembler Tests
========================
Covers:
    - Splicing between markers
    - Round-trip: text outside the delimited region is untouched
    - StructuralError on missing, duplicated or misordered markers
    - Custom markers
    - Post-assembly integration check
"""
import pytest

from game_qa.assembler.template_assembler import assemble, check_integration
from game_qa.core.constants import MARKER_A, MARKER_B
from game_qa.core.errors import GameQAError, StructuralError


def _structure(head: str = "<script>\n", middle: str = "old();\n", tail: str = "\n</script>\n") -> str:
    return f"{head}{MARKER_A}\n{middle}{MARKER_B}{tail}"


# ---------------------------------------------------------------------------
# 1. Splicing
# ---------------------------------------------------------------------------
class TestSplicing:

    def test_logic_replaces_region(self):
        result = assemble(_structure(), "newLogic();\n")
        assert "newLogic();" in result
        assert "old();" not in result

    def test_markers_are_kept(self):
        result = assemble(_structure(), "x = 1;")
        assert result.count(MARKER_A) == 1
        assert result.count(MARKER_B) == 1
        assert result.index(MARKER_A) < result.index("x = 1;") < result.index(MARKER_B)

    def test_logic_on_its_own_lines(self):
        result = assemble(_structure(), "x = 1;")
        assert f"{MARKER_A}\nx = 1;\n{MARKER_B}" in result

    def test_no_extra_newlines_when_logic_has_them(self):
        result = assemble(_structure(), "\nx = 1;\n")
        assert f"{MARKER_A}\nx = 1;\n{MARKER_B}" in result

    def test_empty_logic(self):
        result = assemble(_structure(), "")
        assert f"{MARKER_A}\n\n{MARKER_B}" in result

    def test_adjacent_markers(self):
        structure = f"a{MARKER_A}{MARKER_B}b"
        assert assemble(structure, "L") == f"a{MARKER_A}\nL\n{MARKER_B}b"

    def test_is_pure(self):
        structure = _structure()
        assert assemble(structure, "x();") == assemble(structure, "x();")


# ---------------------------------------------------------------------------
# 2. Round-trip
# ---------------------------------------------------------------------------
class TestRoundTrip:

    @pytest.mark.parametrize("head,tail", [
        ("", ""),
        ("<html><script>\n", "\n</script></html>\n"),
        ("  // unicode ✓ 게임\n", "\n  trailer();\n"),
    ])
    def test_outside_region_unchanged(self, head, tail):
        structure = _structure(head=head, tail=tail)
        result = assemble(structure, "logic();")

        prefix = structure[: structure.index(MARKER_A) + len(MARKER_A)]
        suffix = structure[structure.index(MARKER_B):]
        assert result.startswith(prefix)
        assert result.endswith(suffix)

    def test_sample_template(self, structure, good_logic):
        result = assemble(structure, good_logic)
        assert result.startswith(structure[: structure.index(MARKER_A)])
        assert result.endswith(structure[structure.index(MARKER_B):])
        assert good_logic in result


# ---------------------------------------------------------------------------
# 3. Structural errors
# ---------------------------------------------------------------------------
class TestStructuralErrors:

    def test_missing_start_marker(self):
        with pytest.raises(StructuralError, match="Start marker not found"):
            assemble(f"<script>{MARKER_B}</script>", "x();")

    def test_missing_end_marker(self):
        with pytest.raises(StructuralError, match="End marker not found"):
            assemble(f"<script>{MARKER_A}</script>", "x();")

    def test_both_missing(self):
        with pytest.raises(StructuralError):
            assemble("<script></script>", "x();")

    def test_markers_out_of_order(self):
        with pytest.raises(StructuralError, match="strictly before"):
            assemble(f"{MARKER_B}\nstuff\n{MARKER_A}", "x();")

    def test_duplicated_marker(self):
        with pytest.raises(StructuralError, match="more than once"):
            assemble(f"{MARKER_A}\n{MARKER_A}\n{MARKER_B}", "x();")

    def test_overlapping_duplicate_marker(self):
        # "abab" occurs at index 1 and again at index 3
        with pytest.raises(StructuralError, match="more than once"):
            assemble("xababab\n/*END*/", "x();", start_marker="abab", end_marker="/*END*/")

    def test_identical_markers_rejected(self):
        with pytest.raises(StructuralError):
            assemble("// M\n// M", "x();", start_marker="// M", end_marker="// M")

    def test_is_a_game_qa_error(self):
        assert issubclass(StructuralError, GameQAError)


# ---------------------------------------------------------------------------
# 4. Custom markers
# ---------------------------------------------------------------------------
def test_custom_markers():
    structure = "head\n/*BEGIN*/\nold\n/*END*/\ntail"
    result = assemble(structure, "new", start_marker="/*BEGIN*/", end_marker="/*END*/")
    assert result == "head\n/*BEGIN*/\nnew\n/*END*/\ntail"


# ---------------------------------------------------------------------------
# 5. Integration check
# ---------------------------------------------------------------------------
class TestIntegrationCheck:

    def test_good_game_has_core_signatures(self, good_game):
        result = check_integration(good_game)
        # Sample game has no initGame()
        assert result.details["has_init_game"] is False
        assert result.passed == result.total - 1
        assert result.success is False

    def test_all_signatures(self, good_game):
        result = check_integration(good_game + "\nfunction initGame() {}\n")
        assert result.success is True
        assert result.passed == result.total == 7

    def test_empty_artifact(self):
        result = check_integration("")
        assert result.passed == 0
        assert not result.success

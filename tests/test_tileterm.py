"""Tests for tileterm.tileterm.TileTerm -- tile tree, layout, rendering, input loop.

Uses the VirtualTerminal to capture output and feed keys.
"""

from __future__ import annotations

import threading

import pytest

from tileterm.csi import cup
from tileterm.drawing import DOUBLE_BOX, SINGLE_BOX
from tileterm.geometry import Point, Rect
from tileterm.keys import CTRL_Q, CTRL_T, CTRL_U, KEY_ESCAPE, Key
from tileterm.tile import (
    EDGE_BOTTOM,
    EDGE_LEFT,
    EDGE_RIGHT,
    EDGE_TOP,
    SCROLL_DOWN,
    SCROLL_DOWN_CLIP_RAW,
    SCROLL_UP,
)
from tileterm.tileterm import TileTerm

from .virtual_terminal import VirtualTerminal


def make_session(rows: int = 20, columns: int = 40, keys: str = "") -> tuple[TileTerm, VirtualTerminal]:
    vt = VirtualTerminal(rows=rows, columns=columns, keys=keys)
    return TileTerm(vt, tab_size=3, history_size=10), vt


# ---------------------------------------------------------------------------
# Tile tree
# ---------------------------------------------------------------------------


class TestAddTile:
    def test_first_tile_is_root_and_focus(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        assert tt.tiles == (root,)
        assert tt.focus is root
        assert root.parent_id is None

    def test_later_tiles_need_a_parent(self) -> None:
        tt, _vt = make_session()
        tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        with pytest.raises(ValueError, match="no parent tile"):
            tt.add_tile("orphan", "", None, 0.5, EDGE_TOP, None, SCROLL_DOWN)

    def test_parent_from_other_session_rejected(self) -> None:
        other, _ = make_session()
        foreign = other.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        tt, _vt = make_session()
        tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        with pytest.raises(ValueError):
            tt.add_tile("child", "", None, 0.5, EDGE_TOP, foreign, SCROLL_DOWN)

    @pytest.mark.parametrize("fraction", [0.0, -0.5, 1.5])
    def test_fraction_out_of_range(self, fraction: float) -> None:
        tt, _vt = make_session()
        with pytest.raises(ValueError):
            tt.add_tile("root", "", None, fraction, EDGE_TOP, None, SCROLL_DOWN)

    def test_tiles_keep_creation_order(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        a = tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        b = tt.add_tile("b", "", None, 0.5, EDGE_LEFT, a, SCROLL_DOWN)
        assert tt.tiles == (root, a, b)
        assert tt.tile_by_index(2) is b
        assert tt.tile_by_index(3) is None
        assert tt.tile_by_index(-1) is None
        assert tt.parent_of(b) is a
        assert tt.parent_of(root) is None

    def test_add_marks_session_dirty(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        tt.to_string()
        assert not tt.is_dirty()
        tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        assert tt.is_dirty()

    def test_tiles_inherit_session_config(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", ">", None, 1.0, EDGE_TOP, None, SCROLL_UP)
        assert root.tab_size == 3
        assert root.history.capacity == 10


class TestDeleteTile:
    def _tree(self):
        tt, vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        a = tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        a1 = tt.add_tile("a1", "", None, 0.5, EDGE_LEFT, a, SCROLL_DOWN)
        b = tt.add_tile("b", "", None, 0.5, EDGE_BOTTOM, root, SCROLL_DOWN)
        return tt, root, a, a1, b

    def test_descendants_removed(self) -> None:
        tt, root, a, _a1, b = self._tree()
        tt.delete_tile(a)
        assert tt.tiles == (root, b)

    def test_focus_falls_back_to_first_tile(self) -> None:
        tt, root, a, a1, _b = self._tree()
        tt.set_focus(a1)
        tt.delete_tile(a)
        assert tt.focus is root

    def test_focus_outside_subtree_kept(self) -> None:
        tt, _root, a, _a1, b = self._tree()
        tt.set_focus(b)
        tt.delete_tile(a)
        assert tt.focus is b

    def test_zoom_cleared_when_target_deleted(self) -> None:
        tt, _root, a, a1, _b = self._tree()
        tt.set_focus(a1)
        tt.toggle_zoom()
        assert tt.big is a1
        tt.delete_tile(a)
        assert tt.big is None

    def test_deleting_root_empties_session(self) -> None:
        tt, root, *_ = self._tree()
        tt.delete_tile(root)
        assert tt.tiles == ()
        assert tt.focus is None

    def test_unknown_tile_is_ignored(self) -> None:
        tt, root, a, _a1, _b = self._tree()
        tt.delete_tile(a)
        tt.delete_tile(a)
        assert tt.tiles[0] is root

    def test_delete_marks_session_dirty(self) -> None:
        tt, _root, _a, _a1, b = self._tree()
        tt.to_string()
        tt.delete_tile(b)
        assert tt.is_dirty()


class TestFocus:
    def test_next_tile_wraps(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        a = tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        assert tt.next_tile(root) is a
        assert tt.next_tile(a) is root

    def test_next_tile_of_unknown_rejected(self) -> None:
        tt, _vt = make_session()
        other, _ = make_session()
        foreign = other.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        with pytest.raises(ValueError):
            tt.next_tile(foreign)

    def test_set_focus_rejects_foreign_tile(self) -> None:
        tt, _vt = make_session()
        other, _ = make_session()
        foreign = other.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        with pytest.raises(ValueError):
            tt.set_focus(foreign)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestLayout:
    def test_root_covers_terminal(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        tt.to_string()
        assert root.bounds == Rect.of(1, 1, 40, 20)
        assert tt.size == (40, 20)

    def test_top_half(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        top = tt.add_tile("top", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        tt.to_string()
        assert top.bounds == Rect.of(1, 1, 40, 10)
        assert root.bounds == Rect.of(1, 11, 40, 20)

    def test_bottom_quarter(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        bottom = tt.add_tile("bottom", "", None, 0.25, EDGE_BOTTOM, root, SCROLL_DOWN)
        tt.to_string()
        assert bottom.bounds == Rect.of(1, 16, 40, 20)
        assert root.bounds == Rect.of(1, 1, 40, 15)

    def test_left_and_right(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        left = tt.add_tile("left", "", None, 0.25, EDGE_LEFT, root, SCROLL_DOWN)
        right = tt.add_tile("right", "", None, 0.5, EDGE_RIGHT, root, SCROLL_DOWN)
        tt.to_string()
        assert left.bounds == Rect.of(1, 1, 10, 20)
        # right takes half of what left leaves: columns 11..40
        assert right.bounds == Rect.of(26, 1, 40, 20)
        assert root.bounds == Rect.of(11, 1, 25, 20)

    def test_outlines_leave_room_for_borders(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", SINGLE_BOX, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        top = tt.add_tile("top", "", DOUBLE_BOX, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        tt.to_string()
        assert top.bounds == Rect.of(2, 2, 39, 9)
        assert root.bounds == Rect.of(2, 12, 39, 19)

    def test_nested_children(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        top = tt.add_tile("top", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        corner = tt.add_tile("corner", "", None, 0.5, EDGE_LEFT, top, SCROLL_DOWN)
        tt.to_string()
        assert corner.bounds == Rect.of(1, 1, 20, 10)
        assert top.bounds == Rect.of(21, 1, 40, 10)

    def test_zoom_enlarges_focus(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        a = tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        b = tt.add_tile("b", "", None, 0.5, EDGE_BOTTOM, root, SCROLL_DOWN)
        tt.set_focus(a)
        tt.toggle_zoom()
        tt.to_string()
        assert a.height == 18
        assert b.height == 1

        tt.toggle_zoom()
        tt.to_string()
        assert tt.big is None
        assert a.height == 10

    def test_zoom_applies_to_parent_of_target(self) -> None:
        tt, _vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        a = tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        a1 = tt.add_tile("a1", "", None, 0.5, EDGE_LEFT, a, SCROLL_DOWN)
        tt.set_focus(a1)
        tt.toggle_zoom()
        tt.to_string()
        assert a1.bounds == Rect.of(1, 1, 36, 18)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def _bordered(self):
        tt, vt = make_session()
        root = tt.add_tile("main", "", SINGLE_BOX, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        side = tt.add_tile("side", "", SINGLE_BOX, 0.5, EDGE_LEFT, root, SCROLL_DOWN)
        return tt, vt, root, side

    def test_first_render_draws_borders(self) -> None:
        tt, _vt, _root, _side = self._bordered()
        out = tt.to_string()
        assert "┏" in out
        assert not tt.is_dirty()

    def test_focused_title_highlighted(self) -> None:
        tt, _vt, _root, _side = self._bordered()
        out = tt.to_string()
        assert "\x1b[7;1mmain\x1b[0m" in out
        assert "side" in out
        assert "\x1b[7;1mside" not in out

    def test_idle_render_only_positions_cursor(self) -> None:
        tt, _vt, root, _side = self._bordered()
        tt.to_string()
        assert tt.to_string() == cup(root.cursor_pos.x, root.cursor_pos.y)
        assert root.cursor_pos.x == root.bounds.min.x

    def test_dirty_tile_repainted_without_borders(self) -> None:
        tt, _vt, _root, side = self._bordered()
        tt.to_string()
        side.write("hello")
        out = tt.to_string()
        assert "hello" in out
        assert "┏" not in out
        assert not side.is_dirty()

    def test_resize_triggers_full_redraw(self) -> None:
        tt, vt, root, _side = self._bordered()
        tt.to_string()
        vt.simulate_resize(rows=30, columns=60)
        out = tt.to_string()
        assert "┏" in out
        assert root.bounds.max == Point(59, 29)

    def test_render_is_one_write_from_home(self) -> None:
        tt, vt, _root, _side = self._bordered()
        tt.render()
        assert vt.write_count == 1
        assert vt.output.startswith(cup(1, 1))

    def test_empty_session_renders_nothing(self) -> None:
        tt, _vt = make_session()
        assert tt.to_string() == ""

    def test_concurrent_writers(self) -> None:
        tt, _vt, root, _side = self._bordered()

        def writer(n: int) -> None:
            for i in range(50):
                root.println(f"{n}:{i}")
                tt.render()

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(root.text().splitlines()) == 200


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class TestHandleKey:
    def _pair(self):
        tt, vt = make_session()
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        a = tt.add_tile("a", "", None, 0.5, EDGE_TOP, root, SCROLL_DOWN)
        return tt, vt, root, a

    def test_ctrl_t_cycles_focus(self) -> None:
        tt, vt, root, a = self._pair()
        assert tt.handle_key(CTRL_T) is False
        assert tt.focus is a
        tt.handle_key(CTRL_T)
        assert tt.focus is root
        assert vt.write_count == 2

    def test_ctrl_u_toggles_zoom(self) -> None:
        tt, _vt, root, _a = self._pair()
        tt.handle_key(CTRL_U)
        assert tt.big is root
        tt.handle_key(CTRL_U)
        assert tt.big is None

    def test_ctrl_q_ends_without_render(self) -> None:
        tt, vt, _root, _a = self._pair()
        assert tt.handle_key(CTRL_Q) is True
        assert vt.write_count == 0

    def test_other_keys_go_to_focus(self) -> None:
        tt, _vt, root, _a = self._pair()
        tt.handle_key(Key.down)
        assert root.start.y == 1

    def test_keys_without_focus_are_ignored(self) -> None:
        tt, vt = make_session()
        assert tt.handle_key("x") is False
        assert vt.write_count == 1


class TestRun:
    def test_line_entry_until_quit(self) -> None:
        tt, vt = make_session(keys="abc\r" + CTRL_Q)
        root = tt.add_tile("shell", "> ", None, 1.0, EDGE_TOP, None, SCROLL_UP)
        lines: list[str] = []
        root.set_line_callback(lambda line: lines.append(line) or False)
        tt.run()
        assert lines == ["abc"]
        assert root.line == ""
        assert "> abc" in vt.output

    def test_escape_sequences_reach_raw_tile(self) -> None:
        tt, _vt = make_session(keys="\x1b[Ax\x1b")
        root = tt.add_tile("raw", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN_CLIP_RAW)
        seen = []
        root.set_key_callback(lambda key: seen.append(key) or False)
        with pytest.raises(EOFError):
            tt.run()
        assert seen == [Key.up, "x", KEY_ESCAPE]

    def test_callback_ends_session(self) -> None:
        tt, _vt = make_session(keys="aqz")
        root = tt.add_tile("raw", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN_CLIP_RAW)
        seen = []
        root.set_key_callback(lambda key: seen.append(key) or key == "q")
        tt.run()
        assert seen == ["a", "q"]

    def test_end_of_input_propagates(self) -> None:
        tt, _vt = make_session(keys="ab")
        tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_DOWN)
        with pytest.raises(EOFError):
            tt.run()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TILETERM_TAB_SIZE", raising=False)
        monkeypatch.delenv("TILETERM_HISTORY_SIZE", raising=False)
        tt = TileTerm(VirtualTerminal())
        assert tt.tab_size == 3
        assert tt.history_size == 100

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TILETERM_TAB_SIZE", "8")
        monkeypatch.setenv("TILETERM_HISTORY_SIZE", "5")
        tt = TileTerm(VirtualTerminal())
        assert tt.tab_size == 8
        root = tt.add_tile("root", "", None, 1.0, EDGE_TOP, None, SCROLL_UP)
        assert root.history.capacity == 5

    @pytest.mark.parametrize("value", ["abc", "0", "-2"])
    def test_invalid_environment_falls_back(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("TILETERM_TAB_SIZE", value)
        assert TileTerm(VirtualTerminal()).tab_size == 3

    def test_arguments_override_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TILETERM_TAB_SIZE", "8")
        assert TileTerm(VirtualTerminal(), tab_size=2).tab_size == 2

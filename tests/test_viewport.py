from __future__ import annotations

import unittest

from dayslots.viewport import Viewport


class ViewportTest(unittest.TestCase):
    def _assert_consistent(self, view: Viewport, cursor: int) -> None:
        self.assertLessEqual(view.top, cursor)
        self.assertLessEqual(cursor, view.bottom)
        self.assertEqual(view.bottom - view.top + 1, view.height)
        self.assertGreaterEqual(view.top, 0)
        self.assertLessEqual(view.bottom, 47)

    def test_follow_keeps_cursor_visible_on_full_walk(self) -> None:
        view = Viewport.around(18)
        cursor = 18
        for step in [1] * 40 + [-1] * 47 + [1] * 20:
            cursor = max(0, min(47, cursor + step))
            view.follow(cursor)
            self._assert_consistent(view, cursor)

    def test_follow_scrolls_by_delta(self) -> None:
        view = Viewport(top=10, bottom=15, height=6)
        view.follow(16)
        self.assertEqual((view.top, view.bottom), (11, 16))
        view.follow(9)
        self.assertEqual((view.top, view.bottom), (9, 14))
        view.follow(12)
        self.assertEqual((view.top, view.bottom), (9, 14))

    def test_centre_places_slot_three_below_top(self) -> None:
        view = Viewport.around(20)
        self.assertEqual((view.top, view.bottom), (17, 22))

    def test_centre_clamps_at_edges(self) -> None:
        for slot in range(48):
            with self.subTest(slot=slot):
                view = Viewport.around(slot)
                self._assert_consistent(view, slot)
        self.assertEqual((Viewport.around(1).top, Viewport.around(1).bottom), (0, 5))
        self.assertEqual((Viewport.around(46).top, Viewport.around(46).bottom), (42, 47))

    def test_other_heights_keep_size(self) -> None:
        for height in (1, 3, 10, 48):
            view = Viewport.around(0, height)
            for cursor in list(range(48)) + list(reversed(range(48))):
                view.follow(cursor)
                self._assert_consistent(view, cursor)

    def test_rejects_invalid_height(self) -> None:
        with self.assertRaises(ValueError):
            Viewport.around(5, 0)
        with self.assertRaises(ValueError):
            Viewport.around(5, 49)


if __name__ == "__main__":
    unittest.main()

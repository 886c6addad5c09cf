"""
Unit tests for keyword classification.

- first matching rule wins (table order matters)
- no match -> "Other"
- canvas-like detection: color marker "11" or assignment keywords
"""

import unittest

from studycal.classify import CATEGORY_RULES, Classification, classify, is_canvas_like


class TestClassify(unittest.TestCase):
    def test_rule_order_is_respected(self) -> None:
        # contains both a class keyword and an assignment keyword
        self.assertEqual(classify("Math Homework").category, "Classes")

    def test_each_category(self) -> None:
        self.assertEqual(classify("AP Physics"), Classification("Classes", "#1e88e5"))
        self.assertEqual(classify("Cross Country Meet"), Classification("Sports/Activities", "#43a047"))
        self.assertEqual(classify("Chapel"), Classification("Meetings/Chapel/Advisory", "#fdd835"))
        self.assertEqual(classify("Biology Quiz"), Classification("Assignments/Tests", "#e53935"))

    def test_case_insensitive(self) -> None:
        self.assertEqual(classify("SPANISH III").category, "Classes")

    def test_default_is_other(self) -> None:
        self.assertEqual(classify("Dentist"), Classification("Other", "#9e9e9e"))
        self.assertEqual(classify("", "").category, "Other")
        self.assertEqual(classify(None, None).category, "Other")

    def test_only_title_is_matched(self) -> None:
        self.assertEqual(classify("Block C", "weekly advisor check-in").category, "Other")
        self.assertEqual(classify("Lunch with Sam", "bring your phone").category, "Other")
        self.assertEqual(classify("Advisor check-in", "bring your phone").category, "Meetings/Chapel/Advisory")

    def test_deterministic(self) -> None:
        self.assertEqual(classify("Team practice", "gym"), classify("Team practice", "gym"))

    def test_substring_match_is_literal(self) -> None:
        # "hon" also hits words like "phone"; that is the accepted behaviour
        self.assertEqual(classify("Phone call").category, "Classes")

    def test_rule_table_order(self) -> None:
        self.assertEqual(
            [r.category for r in CATEGORY_RULES],
            ["Classes", "Sports/Activities", "Meetings/Chapel/Advisory", "Assignments/Tests"],
        )


class TestCanvasLike(unittest.TestCase):
    def test_color_marker_wins(self) -> None:
        self.assertTrue(is_canvas_like("Dentist", "", color_marker="11"))

    def test_keywords_in_title_or_description(self) -> None:
        self.assertTrue(is_canvas_like("Unit 4 HW"))
        self.assertTrue(is_canvas_like("Reading", "Submit the paper online"))

    def test_other_marker_without_keywords(self) -> None:
        self.assertFalse(is_canvas_like("Lunch", "", color_marker="5"))
        self.assertFalse(is_canvas_like("Lunch"))


if __name__ == "__main__":
    unittest.main()

from django.test import SimpleTestCase, override_settings

from apps.scheduling.month import ActiveMonth


class TestActiveMonth(SimpleTestCase):
    def test_from_settings(self):
        month = ActiveMonth.from_settings()

        self.assertEqual((month.year, month.month), (2025, 1))
        self.assertEqual(month.name, "January")
        self.assertEqual(month.days_in_month, 31)

    def test_contains(self):
        month = ActiveMonth(2025, 1)
        self.assertTrue(month.contains(1))
        self.assertTrue(month.contains(31))
        self.assertFalse(month.contains(0))
        self.assertFalse(month.contains(32))

    def test_leap_february(self):
        self.assertEqual(ActiveMonth(2024, 2).days_in_month, 29)
        self.assertEqual(ActiveMonth(2025, 2).days_in_month, 28)

    def test_weekend_and_holiday_flags(self):
        month = ActiveMonth(2025, 1, holidays=(1, 20))
        days = {entry["day"]: entry for entry in month.days()}

        self.assertEqual(len(days), 31)
        # 2025-01-04 is a Saturday, 2025-01-06 a Monday
        self.assertTrue(days[4]["is_weekend"])
        self.assertFalse(days[6]["is_weekend"])
        self.assertEqual(days[6]["weekday"], "Mon")
        self.assertTrue(days[1]["is_holiday"])
        self.assertTrue(days[20]["is_holiday"])
        self.assertFalse(days[21]["is_holiday"])

    @override_settings(SHIFTBOARD={"YEAR": 2025, "MONTH": 4})
    def test_holidays_are_optional(self):
        month = ActiveMonth.from_settings()
        self.assertEqual(month.holidays, ())
        self.assertEqual(month.days_in_month, 30)

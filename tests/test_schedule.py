import unittest
from datetime import datetime, timedelta

from medalert.schemas.envelope import failure
from medalert.schemas.medicine import Medicine
from medalert.services.schedule import (
    ScheduleEngine,
    day_name,
    due_today,
    format_date,
    format_time,
    is_due,
    js_weekday,
    select_alert,
)
from tests.helpers import _run

# 2024-03-10 is a Sunday.
SUNDAY = datetime(2024, 3, 10, 8, 0, 42)


def med(**row) -> Medicine:
    return Medicine.model_validate(row)


class StubData:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def get_medicines_by_patient(self, patient_email):
        self.calls.append(patient_email)
        return self.result


class TestFormatting(unittest.TestCase):
    def test_date_and_time_are_zero_padded(self):
        now = datetime(2024, 3, 5, 7, 4, 59)
        self.assertEqual(format_date(now), "2024-03-05")
        self.assertEqual(format_time(now), "07:04")

    def test_weekday_numbering_starts_on_sunday(self):
        self.assertEqual([js_weekday(SUNDAY + timedelta(days=i)) for i in range(7)], [0, 1, 2, 3, 4, 5, 6])

    def test_day_name(self):
        self.assertEqual(day_name(0), "Sunday")
        self.assertEqual(day_name(6), "Saturday")
        with self.assertRaises(ValueError):
            day_name(7)


class TestIsDue(unittest.TestCase):
    def test_daily_is_due_every_day(self):
        medicine = med(ScheduleType="daily")
        for i in range(400):
            self.assertTrue(is_due(medicine, SUNDAY + timedelta(days=i)))

    def test_specific_days(self):
        medicine = med(ScheduleType="specific-days", SelectedDays=[1, 3, 5])
        for i in range(14):
            now = SUNDAY + timedelta(days=i)
            self.assertEqual(is_due(medicine, now), js_weekday(now) in {1, 3, 5})

    def test_specific_days_from_comma_separated_cell(self):
        medicine = med(ScheduleType="specific-days", SelectedDays="1, 3,5")
        self.assertTrue(is_due(medicine, SUNDAY + timedelta(days=3)))
        self.assertFalse(is_due(medicine, SUNDAY))

    def test_one_time_exact_string(self):
        medicine = med(ScheduleType="one-time", OneTimeDate="2024-03-10")
        self.assertTrue(is_due(medicine, SUNDAY))
        self.assertFalse(is_due(medicine, SUNDAY + timedelta(days=1)))

    def test_one_time_unpadded_date_never_matches(self):
        medicine = med(ScheduleType="one-time", OneTimeDate="2024-3-10")
        self.assertFalse(is_due(medicine, SUNDAY))

    def test_custom_dates(self):
        medicine = med(ScheduleType="custom-dates", CustomDates=["2024-03-01", "2024-03-10"])
        self.assertTrue(is_due(medicine, SUNDAY))
        self.assertFalse(is_due(medicine, SUNDAY + timedelta(days=1)))

    def test_inactive_schedule_columns_are_ignored(self):
        medicine = med(ScheduleType="one-time", OneTimeDate="2024-03-11", SelectedDays=[0], CustomDates=["2024-03-10"])
        self.assertFalse(is_due(medicine, SUNDAY))

    def test_unrecognized_type_is_due(self):
        medicine = med(ScheduleType="every-full-moon")
        self.assertTrue(is_due(medicine, SUNDAY))

    def test_missing_type_means_daily(self):
        self.assertTrue(is_due(med(Name="x"), SUNDAY))


class TestSelectAlert(unittest.TestCase):
    def test_no_medicines(self):
        self.assertIsNone(select_alert([], SUNDAY))

    def test_time_must_match_exact_minute(self):
        medicine = med(ID="a", Time="08:00")
        self.assertIs(select_alert([medicine], SUNDAY), medicine)
        self.assertIsNone(select_alert([medicine], SUNDAY + timedelta(minutes=1)))
        self.assertIsNone(select_alert([medicine], SUNDAY - timedelta(minutes=1)))

    def test_unpadded_time_does_not_match(self):
        self.assertIsNone(select_alert([med(ID="a", Time="8:00")], SUNDAY))

    def test_taken_today_suppresses_alert(self):
        medicine = med(ID="a", Time="08:00", TakenDates=["2024-03-10"])
        self.assertIsNone(select_alert([medicine], SUNDAY))

    def test_taken_yesterday_still_alerts(self):
        medicine = med(ID="a", Time="08:00", TakenDates=["2024-03-09"])
        self.assertIs(select_alert([medicine], SUNDAY), medicine)

    def test_first_match_in_backend_order_wins(self):
        first = med(ID="first", Time="08:00")
        second = med(ID="second", Time="08:00")
        self.assertEqual(select_alert([first, second], SUNDAY).id, "first")
        self.assertEqual(select_alert([second, first], SUNDAY).id, "second")

    def test_skips_taken_and_not_due_before_matching(self):
        taken = med(ID="taken", Time="08:00", TakenDates=["2024-03-10"])
        monday_only = med(ID="monday", Time="08:00", ScheduleType="specific-days", SelectedDays=[1])
        wanted = med(ID="wanted", Time="08:00", ScheduleType="custom-dates", CustomDates=["2024-03-10"])
        self.assertEqual(select_alert([taken, monday_only, wanted], SUNDAY).id, "wanted")

    def test_taken_dates_stored_as_json_text_suppress_alert(self):
        medicine = med(ID="a", Time="08:00", TakenDates='["2024-03-09", "2024-03-10"]')
        self.assertIsNone(select_alert([medicine], SUNDAY))

    def test_json_text_schedule_columns_are_due(self):
        monday_first = med(ScheduleType="specific-days", SelectedDays="[1,3,5]")
        self.assertTrue(is_due(monday_first, SUNDAY + timedelta(days=1)))
        custom = med(ScheduleType="custom-dates", CustomDates='["2024-03-10"]')
        self.assertTrue(is_due(custom, SUNDAY))

    def test_due_today_ignores_time(self):
        morning = med(ID="m", Time="08:00")
        evening = med(ID="e", Time="20:00")
        taken = med(ID="t", Time="12:00", TakenDates=["2024-03-10"])
        self.assertEqual([m.id for m in due_today([morning, evening, taken], SUNDAY)], ["m", "e"])


class TestScheduleEngine(unittest.TestCase):
    def test_returns_first_alert(self):
        data = StubData([med(ID="a", Time="07:00"), med(ID="b", Time="08:00"), med(ID="c", Time="08:00")])
        result = _run(ScheduleEngine(data).get_next_alert("p@example.com", SUNDAY))
        self.assertTrue(result["success"])
        self.assertEqual(result["alert"].id, "b")
        self.assertEqual(data.calls, ["p@example.com"])

    def test_zero_medicines_is_no_alert(self):
        result = _run(ScheduleEngine(StubData([])).get_next_alert("p@example.com", SUNDAY))
        self.assertEqual(result, {"success": True, "alert": None})

    def test_fetch_failure_is_propagated(self):
        err = failure("HTTP error! status: 500")
        result = _run(ScheduleEngine(StubData(err)).get_next_alert("p@example.com", SUNDAY))
        self.assertEqual(result, err)

    def test_refetches_on_every_call(self):
        data = StubData([])
        engine = ScheduleEngine(data)
        _run(engine.get_next_alert("p@example.com", SUNDAY))
        _run(engine.get_next_alert("p@example.com", SUNDAY))
        self.assertEqual(len(data.calls), 2)

    def test_defaults_to_local_clock(self):
        now = datetime.now()
        data = StubData([med(ID="a", Time=format_time(now)), med(ID="b", Time=format_time(now + timedelta(minutes=1)))])
        result = _run(ScheduleEngine(data).get_next_alert("p@example.com"))
        self.assertTrue(result["success"])
        # The clock may tick over to the next minute between the two reads.
        self.assertIn(result["alert"].id, {"a", "b"})

    def test_get_due_today(self):
        data = StubData([med(ID="a", Time="07:00"), med(ID="b", Time="09:00", ScheduleType="specific-days", SelectedDays=[2])])
        result = _run(ScheduleEngine(data).get_due_today("p@example.com", SUNDAY))
        self.assertEqual([m.id for m in result], ["a"])


if __name__ == "__main__":
    unittest.main()

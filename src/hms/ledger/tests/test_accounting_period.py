from datetime import date, datetime

from django.test import SimpleTestCase

from ledger.services.accounting_period import (
    as_day_range,
    get_fiscal_range,
    get_month_range,
    is_within,
    parse_iso_date,
)
from ledger.structures import DayRange, YearMonth


class AccountingPeriodTest(SimpleTestCase):
    """
    会計期間のユーティリティのテスト
    """

    def test_get_fiscal_range(self):
        self.assertEqual(get_fiscal_range(2024), DayRange(date(2024, 4, 1), date(2025, 3, 31)))
        self.assertEqual(
            get_fiscal_range(2024, start_month=1), DayRange(date(2024, 1, 1), date(2024, 12, 31))
        )

    def test_get_month_range(self):
        self.assertEqual(get_month_range(YearMonth(2024, 2)), DayRange(date(2024, 2, 1), date(2024, 2, 29)))
        with self.assertRaises(ValueError):
            get_month_range(YearMonth(2024, 13))

    def test_parse_iso_date(self):
        self.assertEqual(parse_iso_date(" 2024-06-01 "), date(2024, 6, 1))
        with self.assertRaises(ValueError):
            parse_iso_date("01/06/2024")

    def test_as_day_range(self):
        """
        単一日は1日だけの範囲、タプルは開始・終了の範囲になることを確認するテストケース
        """
        self.assertEqual(as_day_range("2024-06-01"), DayRange(date(2024, 6, 1), date(2024, 6, 1)))
        self.assertEqual(
            as_day_range((date(2024, 6, 1), None)), DayRange(date(2024, 6, 1), None)
        )
        self.assertIsNone(as_day_range(None))

    def test_is_within(self):
        day_range = DayRange(date(2024, 6, 1), date(2024, 6, 30))
        self.assertTrue(is_within(datetime(2024, 6, 30, 23, 59), day_range))
        self.assertFalse(is_within(datetime(2024, 7, 1), day_range))
        self.assertFalse(is_within(datetime(2024, 5, 31, 23, 59), day_range))
        # 日付のない明細は期間で除外しない
        self.assertTrue(is_within(None, day_range))
        self.assertTrue(is_within(datetime(1999, 1, 1), DayRange(None, date(2024, 1, 1))))

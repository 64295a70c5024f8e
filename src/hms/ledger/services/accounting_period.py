from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ledger.records import to_datetime
from ledger.structures import DayRange, YearMonth


def get_fiscal_range(year: int, start_month: int = 4, months: int = 12) -> DayRange:
    """
    指定された年の会計期間の開始日と終了日を取得します。
    例: 2024年 -> (2024-04-01, 2025-03-31)
    期首が4月1日、期末が翌年3月31日と仮定しています。

    Args:
        year (int): 会計年度の開始年
        start_month (int): 会計年度の開始月 (デフォルトは4月)
        months (int): 会計年度の月数 (デフォルトは12ヶ月)

    Returns:
        DayRange: 会計期間の開始日と終了日
    """
    start_date = date(year, start_month, 1)
    end_date = start_date + relativedelta(months=months) - relativedelta(days=1)
    return DayRange(start_date, end_date)


def get_month_range(year_month: YearMonth) -> DayRange:
    """
    指定された年月の開始日と終了日を取得します。

    Args:
        year_month (YearMonth): 対象年月

    Returns:
        DayRange: 月の開始日と終了日
    """
    start_date = date(year_month.year, year_month.month, 1)
    end_date = start_date + relativedelta(months=1) - relativedelta(days=1)
    return DayRange(start_date, end_date)


def parse_iso_date(value: str) -> date:
    """
    クエリパラメータの日付 (YYYY-MM-DD) を date に変換します。

    Raises:
        ValueError: 日付として解釈できない場合
    """
    try:
        return date_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError, AttributeError) as exc:
        raise ValueError(value) from exc


def as_day_range(value: Any) -> Optional[DayRange]:
    """
    単一日・(開始, 終了) のタプル・DayRange のいずれかを DayRange に揃えます。
    単一日は日計表（その日だけの範囲）として扱います。
    """
    if value is None or isinstance(value, DayRange):
        return value
    if isinstance(value, (tuple, list)):
        start, end = value
        return DayRange(_as_date(start), _as_date(end))
    single = _as_date(value)
    return DayRange(single, single)


def as_cutoff_date(value: Any) -> Optional[date]:
    return _as_date(value)


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    moment = to_datetime(value)
    return moment.date() if moment else None


def is_within(moment: Optional[datetime], day_range: Optional[DayRange]) -> bool:
    """
    日時が期間内かを判定します。日付のない明細は期間で除外できないため True を返します。
    """
    if day_range is None or moment is None:
        return True
    day = moment.date()
    if day_range.start is not None and day < day_range.start:
        return False
    if day_range.end is not None and day > day_range.end:
        return False
    return True

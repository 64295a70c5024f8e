from datetime import datetime

from django.http import HttpRequest

from enums.error_messages import ErrorMessages
from enums.ledger_types import AccountRole
from ledger.conf import CashBookConfig
from ledger.exceptions import InvalidReportParameter
from ledger.services.accounting_period import get_month_range
from ledger.services.fetchers import (
    fetch_accounts,
    fetch_receipts,
    fetch_voucher_entries,
)
from ledger.services.reconciler import compute_cash_book
from ledger.services.report import LEDGER_HEADER, ledger_rows
from ledger.structures import DayRange, YearMonth
from ledger.views.base import LedgerReportView


class CashBookView(LedgerReportView):
    """
    現金出納帳ビュー
    現金勘定（役割が Cash の科目）の伝票明細と患者からの入金を時系列に並べ、
    釣銭準備金（期首残高）からの残高を表示する。

    期間の指定:
      - /ledger/cash-book/<year>/<month>/ : その月
      - ?date=YYYY-MM-DD : その日だけ（日計表）
      - ?from=&to= : 任意の期間
      - 指定なし : 当月
    コンテキスト:
      - lines: [LedgerLine, ...]
      - summary, period, location_id, error_message (必要時)
    """

    template_name = "ledger/cash_book.html"

    def _parse_year_month(self) -> YearMonth:
        now = datetime.now()
        try:
            year = int(self.kwargs.get("year", now.year))
            month = int(self.kwargs.get("month", now.month))
        except (ValueError, TypeError):
            year, month = now.year, now.month
        return YearMonth(year, month)

    def get_period(self, request: HttpRequest) -> DayRange:
        """表示する期間を決定するユーティリティメソッド。"""
        if "year" not in self.kwargs:
            single_day = self._parse_date_param(request, "date")
            if single_day is not None:
                return DayRange(single_day, single_day)
            day_range = self._parse_range_params(request)
            if day_range is not None:
                return day_range

        year_month = self._parse_year_month()
        try:
            return get_month_range(year_month)
        except ValueError as exc:
            raise InvalidReportParameter(
                ErrorMessages.MESSAGE_0003.value.format(
                    value=f"{year_month.year}-{year_month.month}"
                )
            ) from exc

    def get_data(self, request: HttpRequest, **kwargs) -> dict:
        """現金出納帳のデータを取得・計算します。

        Args:
            request (HttpRequest): HTTPリクエストオブジェクト

        Returns:
            dict: データ辞書（result, period, location_id, cash_accounts を含む）
        """
        period = self.get_period(request)
        location_id = self._parse_location(request)

        cash_accounts = [
            account
            for account in fetch_accounts()
            if account.account_role is AccountRole.CASH
        ]
        cash_account_ids = tuple(account.id for account in cash_accounts)

        # 前月繰越のため、期首より前の明細も期末まで取得する
        history = DayRange(None, period.end)
        voucher_entries = fetch_voucher_entries(
            account_ids=cash_account_ids, location_id=location_id, day_range=history
        )
        receipts = fetch_receipts(location_id=location_id, day_range=history)

        config = CashBookConfig(
            period=period,
            location_id=location_id,
            cash_account_ids=cash_account_ids,
        )
        result = compute_cash_book(receipts, voucher_entries, config=config)
        return {
            "result": result,
            "period": period,
            "location_id": location_id,
            "cash_accounts": cash_accounts,
        }

    def build_context(self, data_dict: dict) -> dict:
        result = data_dict["result"]
        return {
            "lines": result.entries,
            "summary": result.summary,
            "period": data_dict["period"],
            "location_id": data_dict["location_id"],
            "cash_accounts": data_dict["cash_accounts"],
        }

    def get_export_header(self) -> list[str]:
        return LEDGER_HEADER

    def get_export_rows(self, data_dict: dict) -> list[list]:
        return ledger_rows(data_dict["result"], data_dict["period"])

    def get_filename_base(self, data_dict: dict) -> str:
        period = data_dict["period"]
        return f"cash_book_{period.start or 'all'}_{period.end or 'all'}"

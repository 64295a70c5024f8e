from datetime import date

from django.http import HttpRequest

from enums.error_messages import ErrorMessages
from ledger.conf import TrialBalanceConfig
from ledger.exceptions import InvalidReportParameter
from ledger.services.accounting_period import get_fiscal_range
from ledger.services.fetchers import (
    fetch_accounts,
    fetch_receipts,
    fetch_voucher_entries,
)
from ledger.services.reconciler import compute_trial_balance
from ledger.services.report import (
    TRIAL_BALANCE_HEADER,
    group_rows_by_type,
    trial_balance_rows,
)
from ledger.structures import TrialBalanceResult
from ledger.views.base import LedgerReportView


class TrialBalanceView(LedgerReportView):
    """
    試算表ビュー
    基準日時点の勘定科目ごとの残高を表示する。
    URL: /ledger/trial-balance/?cutoff=YYYY-MM-DD&location=<id>

    ?year= を指定した場合は、その会計年度（4月〜翌3月）の期末日を基準日にする。
    どちらも未指定なら当日が基準日。
    """

    template_name = "ledger/trial_balance.html"

    def get_cutoff_date(self, request: HttpRequest) -> date:
        """基準日を決定するユーティリティメソッド。

        Args:
            request (HttpRequest): HTTPリクエストオブジェクト

        Returns:
            date: 基準日
        """
        cutoff = self._parse_date_param(request, "cutoff")
        if cutoff is not None:
            return cutoff

        year = request.GET.get("year", "").strip()
        if year:
            if not year.isdigit():
                raise InvalidReportParameter(
                    ErrorMessages.MESSAGE_0003.value.format(value=year)
                )
            return get_fiscal_range(int(year)).end
        return date.today()

    def get_data(self, request: HttpRequest, **kwargs) -> dict:
        """試算表のデータを取得・計算します。

        Args:
            request (HttpRequest): HTTPリクエストオブジェクト

        Returns:
            dict: データ辞書（result を含む）
        """
        cutoff_date = self.get_cutoff_date(request)
        location_id = self._parse_location(request)

        accounts = fetch_accounts()
        entries = fetch_voucher_entries(location_id=location_id, until=cutoff_date)
        receipts = fetch_receipts(location_id=location_id, until=cutoff_date)

        config = TrialBalanceConfig(cutoff_date=cutoff_date, location_id=location_id)
        result: TrialBalanceResult = compute_trial_balance(
            accounts, entries, receipts, config=config
        )
        return {"result": result}

    def build_context(self, data_dict: dict) -> dict:
        """試算表用のコンテキスト構築。

        Args:
            data_dict (dict): get_dataから返されたデータ辞書

        Returns:
            dict: テンプレートに渡すコンテキストデータ
        """
        result: TrialBalanceResult = data_dict["result"]
        return {
            "cutoff_date": result.cutoff_date,
            "location_id": result.location_id,
            "grouped_rows": group_rows_by_type(result),
            "trial_balance_data": result.rows,
            "total_debits": result.totals.grand_total_debit,
            "total_credits": result.totals.grand_total_credit,
            "difference": abs(result.totals.difference),
            "is_balanced": result.is_balanced,
        }

    def get_export_header(self) -> list[str]:
        return TRIAL_BALANCE_HEADER

    def get_export_rows(self, data_dict: dict) -> list[list]:
        return trial_balance_rows(data_dict["result"])

    def get_filename_base(self, data_dict: dict) -> str:
        return f"trial_balance_{data_dict['result'].cutoff_date}"

from django.http import HttpRequest

from enums.ledger_types import AccountRole
from ledger.conf import AccountLedgerConfig
from ledger.services.fetchers import fetch_account, fetch_receipts, fetch_voucher_entries
from ledger.services.reconciler import compute_account_ledger
from ledger.services.report import LEDGER_HEADER, ledger_rows
from ledger.views.base import LedgerReportView


class AccountLedgerView(LedgerReportView):
    """
    特定の勘定科目の元帳を取得・表示するビュー。
    URL: /ledger/accounts/<account_id>/ledger/?from=&to=
    """

    template_name = "ledger/account_ledger.html"

    def get_data(self, request: HttpRequest, **kwargs) -> dict:
        """勘定元帳のデータを取得・計算します。

        入金は、対象科目の役割が Receivable の場合のみ取得します。
        開始日より前の明細は期首残高に繰り越します。

        Args:
            request (HttpRequest): HTTPリクエストオブジェクト

        Returns:
            dict: データ辞書（result, account, period を含む）
        """
        # 1. 勘定科目を取得（存在しない場合は LedgerAccountNotFound → 404）
        account = fetch_account(kwargs["account_id"])
        period = self._parse_range_params(request)

        # 前月繰越のため、期首より前の明細も期末まで取得する
        until = period.end if period else None
        entries = fetch_voucher_entries(account_ids=[account.id], until=until)
        receipts = []
        if account.account_role is AccountRole.RECEIVABLE:
            receipts = fetch_receipts(until=until)

        result = compute_account_ledger(
            entries, receipts, account, config=AccountLedgerConfig(period=period)
        )
        return {"result": result, "account": account, "period": period}

    def build_context(self, data_dict: dict) -> dict:
        result = data_dict["result"]
        return {
            "account": data_dict["account"],
            "lines": result.entries,
            "summary": result.summary,
            "period": data_dict["period"],
        }

    def get_export_header(self) -> list[str]:
        return LEDGER_HEADER

    def get_export_rows(self, data_dict: dict) -> list[list]:
        return ledger_rows(data_dict["result"], data_dict["period"])

    def get_filename_base(self, data_dict: dict) -> str:
        return f"ledger_{data_dict['account'].id}"

import json
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from unittest import mock

from django.test import RequestFactory, TestCase, override_settings
from openpyxl import load_workbook

from enums.ledger_types import AccountRole, VoucherType
from ledger.exceptions import LedgerDataUnavailable
from ledger.models import Location
from ledger.tests.utils import AccountData, create_accounts, create_receipt, create_voucher
from ledger.views import AccountLedgerView, CashBookView, TrialBalanceView


@override_settings(LEDGER_CASH_BOOK_OPENING_BALANCE="50000.00")
class CashBookViewTest(TestCase):
    """
    現金出納帳ビューのテスト
    """

    def setUp(self):
        self.factory = RequestFactory()
        self.location = Location.objects.create(name="Main Hospital")
        self.accounts = create_accounts(
            [
                AccountData(name="Cash", account_type="Asset", account_role=AccountRole.CASH),
                AccountData(name="Patient Receivable", account_type="Asset", account_role=AccountRole.RECEIVABLE),
                AccountData(name="Electricity", account_type="Expense"),
            ]
        )
        create_receipt(datetime(2024, 6, 3, 10, 0), Decimal("7000.00"), "R-1", "P-1", self.location)
        create_receipt(datetime(2024, 6, 5, 12, 0), Decimal("5000.00"), "R-2", "P-2", self.location)
        create_voucher(
            date(2024, 6, 4),
            "Electricity bill",
            [(self.accounts["Electricity"], Decimal("5000.00"))],
            [(self.accounts["Cash"], Decimal("5000.00"))],
            voucher_number="PV-1",
            voucher_type=VoucherType.PAYMENT,
            location=self.location,
        )
        # 対象月の外
        create_receipt(datetime(2024, 7, 1, 9, 0), Decimal("100.00"), "R-3", "P-3", self.location)

    def test_monthly_cash_book(self):
        """
        月次の現金出納帳で期末残高が 57000 になることを確認するテストケース
        """
        request = self.factory.get("/ledger/cash-book/2024/6/")
        response = CashBookView.as_view()(request, year=2024, month=6)

        self.assertEqual(response.status_code, 200)
        summary = response.context_data["summary"]
        self.assertEqual(summary.opening_balance, Decimal("50000.00"))
        self.assertEqual(summary.closing_balance, Decimal("57000.00"))
        self.assertEqual(
            [line.entry.voucher_number for line in response.context_data["lines"]],
            ["R-1", "PV-1", "R-2"],
        )
        self.assertEqual(
            [line.running_balance for line in response.context_data["lines"]],
            [Decimal("57000.00"), Decimal("52000.00"), Decimal("57000.00")],
        )

    def test_single_day_json(self):
        """
        単一日の出納帳で、前日までの入金が期首残高に繰り越されることを確認するテストケース
        """
        request = self.factory.get("/ledger/cash-book/", {"date": "2024-06-04", "format": "json"})
        response = CashBookView.as_view()(request)

        self.assertEqual(response.status_code, 200)
        payload = json.loads(response.content)
        self.assertTrue(payload["ok"])
        self.assertEqual(payload["data"]["summary"]["entry_count"], 1)
        self.assertEqual(payload["data"]["summary"]["opening_balance"], "57000.00")
        self.assertEqual(payload["data"]["summary"]["closing_balance"], "52000.00")
        self.assertEqual(payload["data"]["entries"][0]["voucher_type"], "Payment")

    def test_csv_export(self):
        request = self.factory.get("/ledger/cash-book/2024/6/", {"format": "csv"})
        response = CashBookView.as_view()(request, year=2024, month=6)

        self.assertEqual(response.status_code, 200)
        self.assertIn("cash_book_2024-06-01_2024-06-30.csv", response["Content-Disposition"])
        lines = response.content.decode("utf-8").splitlines()
        self.assertEqual(lines[0], '"Date","Voucher No.","Type","Particulars","Debit","Credit","Balance"')
        self.assertEqual(lines[1], '"2024-06-01","","","Opening Balance","","","50000.00"')
        self.assertEqual(lines[-1], '"2024-06-30","","","Closing Balance","","","57000.00"')

    def test_invalid_parameters(self):
        """
        不正な日付・出力形式・拠点が 400 になることを確認するテストケース
        """
        for params in ({"date": "2024-13-45", "format": "json"}, {"format": "pdf"}, {"location": "main", "format": "json"}):
            with self.subTest(params=params):
                request = self.factory.get("/ledger/cash-book/", params)
                response = CashBookView.as_view()(request)
                self.assertEqual(response.status_code, 400)
                payload = json.loads(response.content)
                self.assertFalse(payload["ok"])
                self.assertEqual(payload["error"]["code"], "invalid_parameter")

    def test_invalid_month(self):
        request = self.factory.get("/ledger/cash-book/2024/13/")
        response = CashBookView.as_view()(request, year=2024, month=13)
        self.assertEqual(response.status_code, 400)
        self.assertIn("error_message", response.context_data)

    def test_data_unavailable(self):
        """
        データ取得に失敗した場合に 503 とエラー形式の JSON を返すことを確認するテストケース
        """
        with mock.patch(
            "ledger.views.cashbook.fetch_accounts", side_effect=LedgerDataUnavailable()
        ):
            request = self.factory.get("/ledger/cash-book/", {"format": "json"})
            response = CashBookView.as_view()(request)

        self.assertEqual(response.status_code, 503)
        payload = json.loads(response.content)
        self.assertEqual(payload["error"]["code"], "data_unavailable")


class AccountLedgerViewTest(TestCase):
    """
    勘定元帳ビューのテスト
    """

    def setUp(self):
        self.factory = RequestFactory()
        self.accounts = create_accounts(
            [
                AccountData(name="Cash", account_type="Asset", account_role=AccountRole.CASH),
                AccountData(name="Patient Receivable", account_type="Asset", account_role=AccountRole.RECEIVABLE),
                AccountData(name="IPD Revenue", account_type="Income"),
            ]
        )
        create_voucher(
            date(2024, 1, 1),
            "IPD bill",
            [(self.accounts["Patient Receivable"], Decimal("1000.00"))],
            [(self.accounts["IPD Revenue"], Decimal("1000.00"))],
            voucher_number="JV-1",
        )
        create_receipt(datetime(2024, 1, 2, 11, 0), Decimal("400.00"), "R-1", "P-1")
        create_receipt(datetime(2024, 1, 3, 11, 0), Decimal("600.00"), "R-2", "P-1")

    def test_receivable_ledger(self):
        """
        Receivable の科目の元帳に入金が貸方として現れることを確認するテストケース
        """
        account = self.accounts["Patient Receivable"]
        request = self.factory.get(f"/ledger/accounts/{account.id}/ledger/")
        response = AccountLedgerView.as_view()(request, account_id=account.id)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context_data["account"].name, "Patient Receivable")
        self.assertEqual(
            [line.running_balance for line in response.context_data["lines"]],
            [Decimal("1000.00"), Decimal("600.00"), Decimal("0.00")],
        )
        self.assertEqual(response.context_data["summary"].opening_balance, Decimal("0.00"))

    def test_other_ledger_excludes_receipts(self):
        account = self.accounts["IPD Revenue"]
        request = self.factory.get(f"/ledger/accounts/{account.id}/ledger/", {"from": "2024-01-01", "to": "2024-01-31"})
        response = AccountLedgerView.as_view()(request, account_id=account.id)

        self.assertEqual(len(response.context_data["lines"]), 1)
        self.assertEqual(response.context_data["summary"].closing_balance, Decimal("-1000.00"))

    def test_unknown_account(self):
        request = self.factory.get("/ledger/accounts/99999/ledger/", {"format": "json"})
        response = AccountLedgerView.as_view()(request, account_id=99999)

        self.assertEqual(response.status_code, 404)
        payload = json.loads(response.content)
        self.assertEqual(payload["error"]["code"], "account_not_found")


@override_settings(
    LEDGER_CASH_BOOK_OPENING_BALANCE="50000.00",
    LEDGER_ACCOUNT_LEDGER_OPENING_BALANCE="0.00",
)
class BroughtForwardBalanceTest(TestCase):
    """
    前月繰越（期首より前の明細の差引）のテスト
    """

    def setUp(self):
        self.factory = RequestFactory()
        self.accounts = create_accounts(
            [
                AccountData(name="Cash", account_type="Asset", account_role=AccountRole.CASH),
                AccountData(name="OPD Revenue", account_type="Income"),
            ]
        )
        create_voucher(
            date(2024, 1, 10),
            "January collection",
            [(self.accounts["Cash"], Decimal("1000.00"))],
            [(self.accounts["OPD Revenue"], Decimal("1000.00"))],
            voucher_number="RV-1",
        )
        create_voucher(
            date(2024, 2, 10),
            "February collection",
            [(self.accounts["Cash"], Decimal("200.00"))],
            [(self.accounts["OPD Revenue"], Decimal("200.00"))],
            voucher_number="RV-2",
        )

    def test_account_ledger_opening_includes_prior_entries(self):
        """
        2月の勘定元帳の期首残高に1月の差引 1000 が繰り越されることを確認するテストケース
        """
        account = self.accounts["Cash"]
        request = self.factory.get(
            f"/ledger/accounts/{account.id}/ledger/", {"from": "2024-02-01", "to": "2024-02-29"}
        )
        response = AccountLedgerView.as_view()(request, account_id=account.id)

        summary = response.context_data["summary"]
        self.assertEqual(summary.opening_balance, Decimal("1000.00"))
        self.assertEqual(summary.closing_balance, Decimal("1200.00"))
        self.assertEqual(
            [line.entry.voucher_number for line in response.context_data["lines"]], ["RV-2"]
        )

    def test_cash_book_opening_includes_prior_entries(self):
        """
        2月の現金出納帳の期首残高が 釣銭準備金 50000 + 1月の差引 1000 になることを確認するテストケース
        """
        request = self.factory.get("/ledger/cash-book/2024/2/")
        response = CashBookView.as_view()(request, year=2024, month=2)

        summary = response.context_data["summary"]
        self.assertEqual(summary.opening_balance, Decimal("51000.00"))
        self.assertEqual(summary.closing_balance, Decimal("51200.00"))
        self.assertEqual(summary.entry_count, 1)

    def test_first_period_uses_default_opening(self):
        request = self.factory.get("/ledger/cash-book/2024/1/")
        response = CashBookView.as_view()(request, year=2024, month=1)

        self.assertEqual(response.context_data["summary"].opening_balance, Decimal("50000.00"))


class TrialBalanceViewTest(TestCase):
    """
    試算表ビューのテスト
    """

    def setUp(self):
        self.factory = RequestFactory()
        self.main = Location.objects.create(name="Main Hospital")
        self.branch = Location.objects.create(name="City Clinic")
        self.accounts = create_accounts(
            [
                AccountData(name="Cash", account_type="Asset", account_role=AccountRole.CASH),
                AccountData(name="Patient Receivable", account_type="Asset", account_role=AccountRole.RECEIVABLE),
                AccountData(name="OPD Revenue", account_type="Income"),
                AccountData(name="Salaries", account_type="Expense"),
            ]
        )
        create_voucher(
            date(2025, 5, 5),
            "OPD bill",
            [(self.accounts["Patient Receivable"], Decimal("2000.00"))],
            [(self.accounts["OPD Revenue"], Decimal("2000.00"))],
            location=self.main,
        )
        create_receipt(datetime(2025, 5, 6, 10, 0), Decimal("1500.00"), "R-1", "P-1", self.main)
        create_voucher(
            date(2025, 6, 1),
            "June salaries",
            [(self.accounts["Salaries"], Decimal("800.00"))],
            [(self.accounts["Cash"], Decimal("800.00"))],
            location=self.branch,
        )

    def test_trial_balance_totals(self):
        """
        試算表の各勘定科目の残高と合計が正しく計算されることを確認するテストケース
        """
        request = self.factory.get("/ledger/trial-balance/", {"cutoff": "2025-05-31"})
        response = TrialBalanceView.as_view()(request)

        self.assertEqual(response.status_code, 200)
        context = response.context_data
        balances = {
            row.account_name: (row.debit_balance, row.credit_balance)
            for row in context["trial_balance_data"]
        }
        self.assertEqual(
            balances,
            {
                "Cash": (Decimal("1500.00"), Decimal("0")),
                "OPD Revenue": (Decimal("0"), Decimal("2000.00")),
                "Patient Receivable": (Decimal("500.00"), Decimal("0")),
            },
        )
        self.assertEqual(context["total_debits"], Decimal("2000.00"))
        self.assertEqual(context["total_credits"], Decimal("2000.00"))
        self.assertTrue(context["is_balanced"])
        self.assertEqual(list(context["grouped_rows"]), ["Asset", "Income"])

    def test_location_scope(self):
        request = self.factory.get("/ledger/trial-balance/", {"cutoff": "2025-12-31", "location": str(self.branch.id)})
        response = TrialBalanceView.as_view()(request)

        names = [row.account_name for row in response.context_data["trial_balance_data"]]
        self.assertEqual(names, ["Cash", "Salaries"])
        self.assertTrue(response.context_data["is_balanced"])

    def test_fiscal_year_cutoff(self):
        request = self.factory.get("/ledger/trial-balance/", {"year": "2024"})
        response = TrialBalanceView.as_view()(request)

        self.assertEqual(response.context_data["cutoff_date"], date(2025, 3, 31))
        self.assertEqual(response.context_data["trial_balance_data"], [])
        self.assertTrue(response.context_data["is_balanced"])

    def test_xlsx_export(self):
        """
        試算表を Excel 形式でエクスポートできることを確認するテストケース
        """
        request = self.factory.get("/ledger/trial-balance/", {"cutoff": "2025-05-31", "format": "xlsx"})
        response = TrialBalanceView.as_view()(request)

        self.assertEqual(response.status_code, 200)
        self.assertIn("trial_balance_2025-05-31.xlsx", response["Content-Disposition"])
        ws = load_workbook(BytesIO(response.content)).active
        rows = list(ws.iter_rows(values_only=True))
        self.assertEqual(list(rows[0]), ["Account Type", "Account Name", "Debit", "Credit"])
        self.assertEqual(rows[-1][0], "TOTAL")
        self.assertEqual(rows[-1][2:], ("2000.00", "2000.00"))

    def test_unbalanced_html_shows_difference(self):
        create_voucher(
            date(2025, 5, 20),
            "One-sided entry",
            [(self.accounts["Salaries"], Decimal("0.25"))],
            [],
            location=self.main,
        )
        request = self.factory.get("/ledger/trial-balance/", {"cutoff": "2025-05-31"})
        response = TrialBalanceView.as_view()(request)
        response.render()

        self.assertFalse(response.context_data["is_balanced"])
        self.assertEqual(response.context_data["difference"], Decimal("0.25"))
        self.assertIn("Difference: 0.25", response.content.decode("utf-8"))

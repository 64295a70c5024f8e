"""
計算結果を表示層・エクスポート用の形に変換するサービス。

- to_serializable: ネストした dict / list（JSON 化は DjangoJSONEncoder に任せる）
- ledger_rows / trial_balance_rows: 表形式の行データ
- write_xlsx / write_csv: 行データをファイルに書き出す

丸め（小数点以下2桁）はこのモジュールの format_amount でのみ行う。
"""

import csv
import dataclasses
from collections.abc import Iterable
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional, TextIO, BinaryIO

from openpyxl import Workbook
from openpyxl.styles import Font

from ledger.structures import DayRange, LedgerResult, TrialBalanceResult

LEDGER_HEADER = ["Date", "Voucher No.", "Type", "Particulars", "Debit", "Credit", "Balance"]
TRIAL_BALANCE_HEADER = ["Account Type", "Account Name", "Debit", "Credit"]

TWO_PLACES = Decimal("0.01")


def format_amount(value: Optional[Decimal]) -> str:
    """表示用に小数点以下2桁へ丸めます（四捨五入）。"""
    if value is None:
        return ""
    return str(Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _format_date(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def to_serializable(obj: Any) -> Any:
    """
    データクラスをネストした dict に変換します。
    Enum は値に、LedgerLine は明細と残高を1階層に平坦化します。
    Decimal・日付はそのまま残すので、JSON 化には DjangoJSONEncoder を使ってください。
    """
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data = {}
        for field in dataclasses.fields(obj):
            value = getattr(obj, field.name)
            if field.name == "entry" and dataclasses.is_dataclass(value):
                data.update(to_serializable(value))
            else:
                data[field.name] = to_serializable(value)
        return data
    if isinstance(obj, (list, tuple)):
        return [to_serializable(item) for item in obj]
    if isinstance(obj, dict):
        return {key: to_serializable(value) for key, value in obj.items()}
    return obj


def ledger_rows(result: LedgerResult, period: Optional[DayRange] = None) -> list[list]:
    """
    元帳（現金出納帳・勘定元帳）をエクスポート用の行に変換します。
    先頭に期首残高、末尾に期末残高の行を付けます。

    Args:
        result (LedgerResult): 元帳の計算結果
        period (DayRange, optional): 対象期間（期首・期末行の日付に使う）

    Returns:
        list[list]: ヘッダーを除く行データ
    """
    start = period.start if period else None
    end = period.end if period else None
    summary = result.summary

    rows = [
        [_format_date(start), "", "", "Opening Balance", "", "", format_amount(summary.opening_balance)]
    ]
    for line in result.entries:
        entry = line.entry
        rows.append(
            [
                _format_date(entry.date),
                entry.voucher_number,
                entry.voucher_type.value,
                entry.narration,
                format_amount(entry.debit) if entry.debit else "",
                format_amount(entry.credit) if entry.credit else "",
                format_amount(line.running_balance),
            ]
        )
    rows.append(
        [_format_date(end), "", "", "Closing Balance", "", "", format_amount(summary.closing_balance)]
    )
    return rows


def group_rows_by_type(result: TrialBalanceResult) -> dict[str, list]:
    """試算表の行を勘定科目タイプごとにまとめます（タイプは初出順）。"""
    grouped: dict[str, list] = {}
    for row in result.rows:
        grouped.setdefault(row.account_type or "Other", []).append(row)
    return grouped


def trial_balance_rows(result: TrialBalanceResult) -> list[list]:
    """
    試算表をエクスポート用の行に変換します。

    勘定科目タイプの見出し行・科目行・空行を繰り返し、最後に TOTAL 行を付けます。
    不一致の場合のみ DIFFERENCE 行を追加し、少ない側に差額を表示します。

    Args:
        result (TrialBalanceResult): 試算表の計算結果

    Returns:
        list[list]: ヘッダーを除く行データ
    """
    rows = []
    for account_type, type_rows in group_rows_by_type(result).items():
        rows.append([account_type.upper(), "", "", ""])
        for row in type_rows:
            rows.append(
                [
                    "",
                    row.account_name,
                    format_amount(row.debit_balance) if row.debit_balance > 0 else "",
                    format_amount(row.credit_balance) if row.credit_balance > 0 else "",
                ]
            )
        rows.append(["", "", "", ""])

    totals = result.totals
    rows.append(
        [
            "TOTAL",
            "",
            format_amount(totals.grand_total_debit),
            format_amount(totals.grand_total_credit),
        ]
    )
    if not result.is_balanced:
        difference = format_amount(abs(totals.difference))
        rows.append(
            [
                "DIFFERENCE",
                "",
                "" if totals.difference > 0 else difference,
                "" if totals.difference < 0 else difference,
            ]
        )
    return rows


def write_xlsx(header: list[str], rows: Iterable[list], stream: BinaryIO) -> None:
    """
    行データを Excel 形式で書き出します。

    Args:
        header (list[str]): ヘッダー行
        rows (Iterable[list]): 行データ
        stream (BinaryIO): 書き出し先（HttpResponse も可）
    """
    wb = Workbook()
    ws = wb.active
    ws.append(header)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)
    wb.save(stream)


def write_csv(header: list[str], rows: Iterable[list], stream: TextIO) -> None:
    writer = csv.writer(stream, quoting=csv.QUOTE_ALL)
    writer.writerow(header)
    writer.writerows(rows)

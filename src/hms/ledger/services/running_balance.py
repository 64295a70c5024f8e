from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ledger.records import ZERO, TransactionEntry, to_decimal
from ledger.structures import LedgerLine, LedgerResult, LedgerSummary


def _chronological_key(entry: TransactionEntry) -> tuple[bool, datetime]:
    # 日付のない明細は最後に回す
    return (entry.date is None, entry.date or datetime.min)


def sort_chronologically(entries: Iterable[TransactionEntry]) -> list[TransactionEntry]:
    """
    明細を日付の昇順に並べます。

    安定ソートのため、同じ日付（または日付なし）の明細は入力時の順序を保ちます。
    伝票番号などの第2キーは使いません。
    """
    return sorted(entries, key=_chronological_key)


def carry_forward(
    entries: Iterable[TransactionEntry],
    opening_balance: Decimal,
    start: Optional[date] = None,
) -> tuple[Decimal, list[TransactionEntry]]:
    """
    期首日より前の明細の差引（借方 - 貸方）を期首残高に繰り越します（前月繰越）。

    日付のない明細は繰り越さず、期間内の明細として残します。

    Args:
        entries (Iterable[TransactionEntry]): 正規化済みの明細
        opening_balance (Decimal): 帳簿開始時の残高（設定の既定値）
        start (date, optional): 表示期間の開始日。None は繰越なし

    Returns:
        tuple[Decimal, list[TransactionEntry]]: (繰越後の期首残高, 開始日以降の明細)
    """
    balance = to_decimal(opening_balance)
    if start is None:
        return balance, list(entries)

    remaining = []
    for entry in entries:
        if entry.date is not None and entry.date.date() < start:
            balance += entry.debit - entry.credit
        else:
            remaining.append(entry)
    return balance, remaining


def compute_running_balance(
    entries: Iterable[TransactionEntry], opening_balance: Decimal
) -> tuple[list[LedgerLine], Decimal]:
    """
    時系列順に残高を積み上げ、各明細の取引後残高を付与します。

    残高 = 期首残高 + Σ(借方 - 貸方)。途中で丸めは行いません。

    Args:
        entries (Iterable[TransactionEntry]): 正規化済みの明細
        opening_balance (Decimal): 期首残高

    Returns:
        tuple[list[LedgerLine], Decimal]: (残高付きの明細リスト, 期末残高)
    """
    balance = to_decimal(opening_balance)
    lines = []
    for entry in sort_chronologically(entries):
        balance += entry.debit - entry.credit
        lines.append(LedgerLine(entry=entry, running_balance=balance))
    return lines, balance


def summarize(
    lines: list[LedgerLine], opening_balance: Decimal, closing_balance: Decimal
) -> LedgerSummary:
    total_debit = sum((line.entry.debit for line in lines), ZERO)
    total_credit = sum((line.entry.credit for line in lines), ZERO)
    return LedgerSummary(
        opening_balance=to_decimal(opening_balance),
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=closing_balance,
        entry_count=len(lines),
    )


def build_ledger(
    entries: Iterable[TransactionEntry], opening_balance: Decimal
) -> LedgerResult:
    """明細リストから残高付きの元帳と集計値を作ります。明細が空でもエラーにしません。"""
    lines, closing_balance = compute_running_balance(entries, opening_balance)
    return LedgerResult(
        entries=lines,
        summary=summarize(lines, opening_balance, closing_balance),
    )

"""
帳票ごとの設定値。

現金出納帳と勘定元帳の期首残高は意図的に異なるデフォルトを持つ。
- 現金出納帳: 固定の釣銭準備金（LEDGER_CASH_BOOK_OPENING_BALANCE, 既定 50000.00）
- 勘定元帳: 0（LEDGER_ACCOUNT_LEDGER_OPENING_BALANCE, 既定 0.00）
どちらも Django の settings で上書きできる。
これらは帳簿開始時の残高で、期間の開始日より前の明細の差引は
さらに期首残高へ繰り越される（前月繰越）。
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings

from ledger.records import to_decimal
from ledger.structures import DayRange

DEFAULT_CASH_BOOK_OPENING_BALANCE = Decimal("50000.00")
DEFAULT_ACCOUNT_LEDGER_OPENING_BALANCE = Decimal("0.00")


def get_cash_book_opening_balance() -> Decimal:
    value = getattr(
        settings, "LEDGER_CASH_BOOK_OPENING_BALANCE", DEFAULT_CASH_BOOK_OPENING_BALANCE
    )
    return to_decimal(value)


def get_account_ledger_opening_balance() -> Decimal:
    value = getattr(
        settings,
        "LEDGER_ACCOUNT_LEDGER_OPENING_BALANCE",
        DEFAULT_ACCOUNT_LEDGER_OPENING_BALANCE,
    )
    return to_decimal(value)


@dataclass(frozen=True)
class CashBookConfig:
    """
    現金出納帳の表示条件。

    Attributes:
        opening_balance (Decimal): 期首残高（釣銭準備金）
        period (DayRange, optional): 対象期間。None は全期間
        location_id (Any, optional): 拠点。None は全拠点
        cash_account_ids (tuple, optional): 現金勘定のID（先頭が入金の計上先）。None の場合、
            渡された伝票明細はすべて現金勘定のものとみなす
    """

    opening_balance: Decimal = field(default_factory=get_cash_book_opening_balance)
    period: Optional[DayRange] = None
    location_id: Any = None
    cash_account_ids: Optional[tuple] = None


@dataclass(frozen=True)
class AccountLedgerConfig:
    opening_balance: Decimal = field(
        default_factory=get_account_ledger_opening_balance
    )
    period: Optional[DayRange] = None


@dataclass(frozen=True)
class TrialBalanceConfig:
    """
    試算表の集計条件。

    入金伝票（片側のみの記録）は、借方を cash_account_id、貸方を
    receivable_account_id に展開して集計する。None の場合は勘定科目の
    役割（Cash / Receivable）から最初の科目を選ぶ。
    """

    cutoff_date: Optional[date] = None
    location_id: Any = None
    cash_account_id: Any = None
    receivable_account_id: Any = None

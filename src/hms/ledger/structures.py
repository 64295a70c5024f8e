from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from enums.ledger_types import AccountRole
from ledger.records import TransactionEntry


@dataclass(frozen=True)
class DayRange:
    """両端を含む日付範囲。None は上限・下限なしを表す。"""

    start: Optional[date] = None
    end: Optional[date] = None


@dataclass
class LedgerLine:
    entry: TransactionEntry
    running_balance: Decimal


@dataclass
class LedgerSummary:
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
    entry_count: int


@dataclass
class LedgerResult:
    """現金出納帳・勘定元帳の計算結果"""

    entries: list[LedgerLine]
    summary: LedgerSummary


@dataclass
class TrialBalanceRow:
    account_id: Any
    account_name: str
    account_type: str
    account_role: AccountRole
    total_debit: Decimal
    total_credit: Decimal
    net_balance: Decimal
    debit_balance: Decimal
    credit_balance: Decimal


@dataclass
class TrialBalanceTotals:
    grand_total_debit: Decimal
    grand_total_credit: Decimal
    difference: Decimal  # 借方合計 - 貸方合計


@dataclass
class TrialBalanceResult:
    """試算表の計算結果"""

    rows: list[TrialBalanceRow]
    totals: TrialBalanceTotals
    is_balanced: bool
    cutoff_date: Optional[date] = None
    location_id: Any = None


@dataclass(frozen=True)
class YearMonth:
    year: int
    month: int

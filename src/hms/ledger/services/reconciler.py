"""
帳票の計算を行う公開関数。

いずれも渡されたデータだけを使う純粋関数で、DBアクセスや状態の保持は行わない。
データの取得は ledger.services.fetchers が担当する。
"""

import logging
from collections.abc import Iterable
from typing import Any, Optional

from enums.ledger_types import AccountRole
from ledger.conf import AccountLedgerConfig, CashBookConfig, TrialBalanceConfig
from ledger.records import (
    AccountRecord,
    coerce_account,
    coerce_accounts,
    coerce_receipts,
    coerce_voucher_entries,
    to_decimal,
)
from ledger.services.accounting_period import as_cutoff_date, as_day_range, is_within
from ledger.services.normalizer import (
    normalize_for_account,
    normalize_for_cash_book,
    normalize_for_trial_balance,
)
from ledger.services.running_balance import build_ledger, carry_forward
from ledger.services.trial_balance import build_trial_balance
from ledger.structures import LedgerResult, TrialBalanceResult

logger = logging.getLogger(__name__)


def compute_cash_book(
    receipts: Iterable,
    voucher_entries: Iterable,
    opening_balance: Any = None,
    date: Any = None,
    config: Optional[CashBookConfig] = None,
) -> LedgerResult:
    """
    現金出納帳を計算します。

    Args:
        receipts (Iterable): 入金（dict または ReceiptRecord）
        voucher_entries (Iterable): 現金勘定の伝票明細（dict または VoucherEntryRecord）
        opening_balance (Any, optional): 期首残高。省略時は config の値
            （既定は LEDGER_CASH_BOOK_OPENING_BALANCE）。
            期間の開始日より前の明細の差引はこれに繰り越される
        date (Any, optional): 対象日（単一日）または期間。省略時は config の期間
        config (CashBookConfig, optional): 表示条件

    Returns:
        LedgerResult: 残高付きの明細と集計値
    """
    config = config or CashBookConfig()
    opening = (
        config.opening_balance if opening_balance is None else to_decimal(opening_balance)
    )
    period = as_day_range(date) if date is not None else config.period

    vouchers = coerce_voucher_entries(voucher_entries)
    receipt_records = coerce_receipts(receipts)
    if config.location_id is not None:
        vouchers = [v for v in vouchers if v.location_id == config.location_id]
        receipt_records = [
            r for r in receipt_records if r.location_id == config.location_id
        ]

    entries = normalize_for_cash_book(vouchers, receipt_records, config.cash_account_ids)
    opening, entries = carry_forward(entries, opening, period.start if period else None)
    entries = [entry for entry in entries if is_within(entry.date, period)]

    logger.debug("Cash book: %d entries, opening %s", len(entries), opening)
    return build_ledger(entries, opening)


def compute_account_ledger(
    entries: Iterable,
    receipts: Iterable,
    account: Any,
    date_range: Any = None,
    config: Optional[AccountLedgerConfig] = None,
) -> LedgerResult:
    """
    単一勘定科目の元帳を計算します。

    Args:
        entries (Iterable): 伝票明細（dict または VoucherEntryRecord）
        receipts (Iterable): 入金。対象科目の役割が Receivable の場合のみ使われる
        account (Any): 対象の勘定科目（dict または AccountRecord）
        date_range (Any, optional): 対象期間。省略時は config の期間
            開始日より前の明細の差引は期首残高に繰り越される
        config (AccountLedgerConfig, optional): 表示条件

    Returns:
        LedgerResult: 残高付きの明細と集計値
    """
    config = config or AccountLedgerConfig()
    target: AccountRecord = coerce_account(account)
    period = as_day_range(date_range) if date_range is not None else config.period

    normalized = normalize_for_account(
        coerce_voucher_entries(entries), coerce_receipts(receipts), target
    )
    opening, normalized = carry_forward(
        normalized, config.opening_balance, period.start if period else None
    )
    normalized = [entry for entry in normalized if is_within(entry.date, period)]

    logger.debug("Ledger for account %s: %d entries", target.id, len(normalized))
    return build_ledger(normalized, opening)


def compute_trial_balance(
    accounts: Iterable,
    entries: Iterable,
    receipts: Iterable,
    cutoff_date: Any = None,
    location_scope: Any = None,
    config: Optional[TrialBalanceConfig] = None,
) -> TrialBalanceResult:
    """
    基準日時点の試算表を計算します。

    Args:
        accounts (Iterable): 勘定科目表（dict または AccountRecord）
        entries (Iterable): 伝票明細（dict または VoucherEntryRecord）
        receipts (Iterable): 入金（dict または ReceiptRecord）
        cutoff_date (Any, optional): 基準日。省略時は config の値
        location_scope (Any, optional): 拠点。省略時は config の値
        config (TrialBalanceConfig, optional): 集計条件

    Returns:
        TrialBalanceResult: 試算表の行・合計・一致判定
    """
    config = config or TrialBalanceConfig()
    account_records = coerce_accounts(accounts)
    cutoff = as_cutoff_date(cutoff_date if cutoff_date is not None else config.cutoff_date)
    location_id = location_scope if location_scope is not None else config.location_id

    cash_account_id = config.cash_account_id
    if cash_account_id is None:
        cash_account_id = first_account_id_with_role(account_records, AccountRole.CASH)
    receivable_account_id = config.receivable_account_id
    if receivable_account_id is None:
        receivable_account_id = first_account_id_with_role(
            account_records, AccountRole.RECEIVABLE
        )

    normalized = normalize_for_trial_balance(
        coerce_voucher_entries(entries),
        coerce_receipts(receipts),
        cash_account_id,
        receivable_account_id,
    )
    return build_trial_balance(account_records, normalized, cutoff, location_id)


def first_account_id_with_role(
    accounts: Iterable[AccountRecord], role: AccountRole
) -> Any:
    for account in accounts:
        if account.account_role is role:
            return account.id
    return None

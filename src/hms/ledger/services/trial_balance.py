"""
試算表の集計サービス。

勘定科目ごとに借方・貸方を合計し、差引残高を借方残高または貸方残高のどちらか
一方として表示する。借方合計と貸方合計の一致は 1 銭（0.01）未満の差を許容して判定する。
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ledger.records import ZERO, AccountRecord, TransactionEntry
from ledger.structures import TrialBalanceResult, TrialBalanceRow, TrialBalanceTotals

logger = logging.getLogger(__name__)

# 集計誤差を吸収するための固定値。会計上の許容差ではないので広げないこと。
BALANCE_TOLERANCE = Decimal("0.01")


def filter_entries(
    entries: Iterable[TransactionEntry],
    cutoff_date: Optional[date] = None,
    location_id: Any = None,
) -> list[TransactionEntry]:
    """
    基準日以前・対象拠点の明細に絞り込みます。

    日付のない明細は基準日で除外できないため残します。
    拠点を指定した場合、拠点のない明細は除外します。

    Args:
        entries (Iterable[TransactionEntry]): 明細
        cutoff_date (date, optional): 基準日。None は全期間
        location_id (Any, optional): 拠点。None は全拠点

    Returns:
        list[TransactionEntry]: 絞り込み後の明細
    """
    filtered = []
    for entry in entries:
        if (
            cutoff_date is not None
            and entry.date is not None
            and entry.date.date() > cutoff_date
        ):
            continue
        if location_id is not None and entry.location_id != location_id:
            continue
        filtered.append(entry)
    return filtered


def aggregate_by_account(
    accounts: Iterable[AccountRecord], entries: Iterable[TransactionEntry]
) -> list[TrialBalanceRow]:
    """
    勘定科目ごとに借方・貸方を合計し、試算表の行を作ります。

    - 差引残高が 0 の科目は行に含めません
    - 勘定科目表にない科目の明細は集計から外します
    - 行は勘定科目名の昇順に並べます

    Args:
        accounts (Iterable[AccountRecord]): 勘定科目表
        entries (Iterable[TransactionEntry]): 明細

    Returns:
        list[TrialBalanceRow]: 試算表の行
    """
    accounts_by_id = {account.id: account for account in accounts}
    totals: dict[Any, list[Decimal]] = {}
    unknown_account_ids = set()

    for entry in entries:
        if entry.account_id not in accounts_by_id:
            unknown_account_ids.add(entry.account_id)
            continue
        account_totals = totals.setdefault(entry.account_id, [ZERO, ZERO])
        account_totals[0] += entry.debit
        account_totals[1] += entry.credit

    if unknown_account_ids:
        logger.warning(
            "Entries for accounts missing from the chart of accounts were skipped: %s",
            sorted(unknown_account_ids, key=str),
        )

    rows = []
    for account_id, (total_debit, total_credit) in totals.items():
        net_balance = total_debit - total_credit
        if net_balance == 0:
            continue
        account = accounts_by_id[account_id]
        rows.append(
            TrialBalanceRow(
                account_id=account_id,
                account_name=account.name,
                account_type=account.account_type,
                account_role=account.account_role,
                total_debit=total_debit,
                total_credit=total_credit,
                net_balance=net_balance,
                debit_balance=max(net_balance, ZERO),
                credit_balance=max(-net_balance, ZERO),
            )
        )

    rows.sort(key=lambda row: row.account_name)
    return rows


def compute_totals(rows: Iterable[TrialBalanceRow]) -> TrialBalanceTotals:
    rows = list(rows)
    grand_total_debit = sum((row.debit_balance for row in rows), ZERO)
    grand_total_credit = sum((row.credit_balance for row in rows), ZERO)
    return TrialBalanceTotals(
        grand_total_debit=grand_total_debit,
        grand_total_credit=grand_total_credit,
        difference=grand_total_debit - grand_total_credit,
    )


def is_within_tolerance(total_debit: Decimal, total_credit: Decimal) -> bool:
    return abs(total_debit - total_credit) < BALANCE_TOLERANCE


def build_trial_balance(
    accounts: Iterable[AccountRecord],
    entries: Iterable[TransactionEntry],
    cutoff_date: Optional[date] = None,
    location_id: Any = None,
) -> TrialBalanceResult:
    """
    試算表を作成します。

    明細や勘定科目が空の場合は、行なし・合計 0・一致（is_balanced=True）を返します。
    不一致はエラーではなく、is_balanced=False と差額で表します。
    """
    filtered = filter_entries(entries, cutoff_date, location_id)
    rows = aggregate_by_account(accounts, filtered)
    totals = compute_totals(rows)
    is_balanced = is_within_tolerance(
        totals.grand_total_debit, totals.grand_total_credit
    )
    if not is_balanced:
        logger.info(
            "Trial balance up to %s does not balance: difference %s",
            cutoff_date,
            totals.difference,
        )
    return TrialBalanceResult(
        rows=rows,
        totals=totals,
        is_balanced=is_balanced,
        cutoff_date=cutoff_date,
        location_id=location_id,
    )

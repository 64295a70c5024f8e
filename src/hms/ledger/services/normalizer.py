"""
伝票明細（複式）と入金（片側のみ）を共通の TransactionEntry に正規化するサービス。

入金の扱いは帳票によって異なる。
- 現金出納帳: すべての入金を現金の借方として無条件に含める
- 勘定元帳: 対象科目の役割が Receivable の場合のみ、入金を貸方として含める
- 試算表: 入金を借方（現金）・貸方（未収金）の2行に展開する
"""

import logging
from collections.abc import Iterable
from typing import Any, Optional

from enums.ledger_types import AccountRole, VoucherType
from ledger.records import (
    ZERO,
    SOURCE_RECEIPT,
    SOURCE_VOUCHER,
    AccountRecord,
    ReceiptRecord,
    TransactionEntry,
    VoucherEntryRecord,
)

logger = logging.getLogger(__name__)


def voucher_to_entry(voucher_entry: VoucherEntryRecord) -> TransactionEntry:
    return TransactionEntry(
        id=voucher_entry.id,
        account_id=voucher_entry.account_id,
        date=voucher_entry.date,
        debit=voucher_entry.debit,
        credit=voucher_entry.credit,
        narration=voucher_entry.narration,
        voucher_type=voucher_entry.voucher_type,
        voucher_number=voucher_entry.voucher_number,
        location_id=voucher_entry.location_id,
        source=SOURCE_VOUCHER,
    )


def receipt_to_entry(
    receipt: ReceiptRecord, account_id: Any, is_debit: bool
) -> TransactionEntry:
    """
    入金1件を片側の TransactionEntry に変換します。

    Args:
        receipt (ReceiptRecord): 入金レコード
        account_id (Any): 計上先の勘定科目ID
        is_debit (bool): True なら借方（現金の増加）、False なら貸方（未収金の減少）

    Returns:
        TransactionEntry: 正規化された明細
    """
    narration = f"Receipt {receipt.receipt_no} from Patient {receipt.patient_id}".strip()
    return TransactionEntry(
        id=receipt.id,
        account_id=account_id,
        date=receipt.date,
        debit=receipt.amount if is_debit else ZERO,
        credit=ZERO if is_debit else receipt.amount,
        narration=narration,
        voucher_type=VoucherType.RECEIPT,
        voucher_number=receipt.receipt_no,
        location_id=receipt.location_id,
        source=SOURCE_RECEIPT,
    )


def normalize_for_cash_book(
    voucher_entries: Iterable[VoucherEntryRecord],
    receipts: Iterable[ReceiptRecord],
    cash_account_ids: Optional[Iterable] = None,
) -> list[TransactionEntry]:
    """
    現金出納帳用に正規化します。入金はすべて現金の借方になります。

    Args:
        voucher_entries (Iterable[VoucherEntryRecord]): 伝票明細
        receipts (Iterable[ReceiptRecord]): 入金
        cash_account_ids (Iterable, optional): 現金勘定のID。None の場合は
            渡された伝票明細をすべて現金勘定のものとして扱う

    Returns:
        list[TransactionEntry]: 伝票明細、入金の順に並んだ明細リスト
    """
    cash_ids = None if cash_account_ids is None else list(cash_account_ids)
    # 入金は先頭の現金勘定に計上する
    receipt_account_id = cash_ids[0] if cash_ids else None

    entries = [
        voucher_to_entry(voucher_entry)
        for voucher_entry in voucher_entries
        if cash_ids is None or voucher_entry.account_id in cash_ids
    ]
    entries.extend(
        receipt_to_entry(receipt, receipt_account_id, is_debit=True)
        for receipt in receipts
    )
    return entries


def normalize_for_account(
    voucher_entries: Iterable[VoucherEntryRecord],
    receipts: Iterable[ReceiptRecord],
    account: AccountRecord,
) -> list[TransactionEntry]:
    """
    単一勘定科目の元帳用に正規化します。

    入金は、対象科目の役割が Receivable のときだけ貸方として含めます。
    それ以外の科目では入金は元帳に現れません。

    Args:
        voucher_entries (Iterable[VoucherEntryRecord]): 伝票明細
        receipts (Iterable[ReceiptRecord]): 入金
        account (AccountRecord): 対象の勘定科目

    Returns:
        list[TransactionEntry]: 対象科目の明細リスト
    """
    entries = [
        voucher_to_entry(voucher_entry)
        for voucher_entry in voucher_entries
        if voucher_entry.account_id == account.id
    ]
    if account.account_role is AccountRole.RECEIVABLE:
        entries.extend(
            receipt_to_entry(receipt, account.id, is_debit=False)
            for receipt in receipts
        )
    return entries


def normalize_for_trial_balance(
    voucher_entries: Iterable[VoucherEntryRecord],
    receipts: Iterable[ReceiptRecord],
    cash_account_id: Any,
    receivable_account_id: Any,
) -> list[TransactionEntry]:
    """
    試算表用に正規化します。入金は借方（現金）・貸方（未収金）の2行に展開します。
    計上先の科目が決まらない側は捨て、その差額は試算表の不一致として表に出ます。
    """
    entries = [voucher_to_entry(voucher_entry) for voucher_entry in voucher_entries]

    receipt_list = list(receipts)
    if receipt_list and cash_account_id is None:
        logger.warning(
            "No cash account to post %d receipt(s) against; debit side dropped",
            len(receipt_list),
        )
    if receipt_list and receivable_account_id is None:
        logger.warning(
            "No receivable account to post %d receipt(s) against; credit side dropped",
            len(receipt_list),
        )

    for receipt in receipt_list:
        if cash_account_id is not None:
            entries.append(receipt_to_entry(receipt, cash_account_id, is_debit=True))
        if receivable_account_id is not None:
            entries.append(
                receipt_to_entry(receipt, receivable_account_id, is_debit=False)
            )
    return entries

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from enums.ledger_types import AccountRole, VoucherType
from ledger.models import Account, Location, Receipt, VoucherEntry, VoucherLog
from ledger.records import AccountRecord, ReceiptRecord, TransactionEntry


@dataclass
class AccountData:
    name: str
    account_type: str
    account_role: AccountRole = AccountRole.OTHER


def create_accounts(list_account: list[AccountData]) -> dict[str, Account]:
    """
    テスト用の勘定科目を作成するヘルパー関数
    Args:
        list_account (list[AccountData]): 作成する勘定科目データのリスト

    Returns:
        dict {勘定科目名: Accountオブジェクト, ...}
    """
    accounts = {}
    for acc_data in list_account:
        account = Account.objects.create(
            name=acc_data.name,
            account_type=acc_data.account_type,
            account_role=acc_data.account_role.value,
        )
        accounts[acc_data.name] = account
    return accounts


def create_voucher(
    voucher_date: Optional[date],
    narration: str,
    debits_data: list[tuple[Account, Decimal]],
    credits_data: list[tuple[Account, Decimal]],
    voucher_number: str = "",
    voucher_type: VoucherType = VoucherType.JOURNAL,
    location: Location = None,
) -> VoucherLog:
    """
    伝票 (VoucherLog) とその明細 (VoucherEntry) を作成するヘルパー関数
    debits_data/credits_data は [(Accountオブジェクト, Decimal金額), ...] のリスト
    Args:
        voucher_date (date): 伝票日付
        narration (str): 摘要
        debits_data (list[tuple[Account, Decimal]]): 借方明細データ
        credits_data (list[tuple[Account, Decimal]]): 貸方明細データ
        voucher_number (str, optional): 伝票番号
        voucher_type (VoucherType, optional): 伝票種別
        location (Location, optional): 拠点。指定しない場合はNone。

    Returns:
        VoucherLog: 作成された伝票オブジェクト
    """
    voucher = VoucherLog.objects.create(
        voucher_number=voucher_number,
        type=voucher_type.value,
        voucher_date=voucher_date,
        narration=narration,
        location=location,
    )

    for account, amount in debits_data:
        VoucherEntry.objects.create(
            voucher=voucher,
            account=account,
            debit=amount,
            credit=Decimal("0.00"),
            narration=narration,
            voucher_date=voucher_date,
            location=location,
        )

    for account, amount in credits_data:
        VoucherEntry.objects.create(
            voucher=voucher,
            account=account,
            debit=Decimal("0.00"),
            credit=amount,
            narration=narration,
            voucher_date=voucher_date,
            location=location,
        )

    return voucher


def create_receipt(
    receipt_date: Optional[datetime],
    amount: Decimal,
    receipt_no: str = "",
    patient_id: str = "",
    location: Location = None,
) -> Receipt:
    """テスト用の入金を作成するヘルパー関数"""
    return Receipt.objects.create(
        receipt_no=receipt_no,
        patient_id=patient_id,
        amount=amount,
        receipt_date=receipt_date,
        payment_mode="Cash",
        location=location,
    )


def make_entry(
    entry_id,
    debit="0",
    credit="0",
    date=None,
    account_id=1,
    location_id=None,
) -> TransactionEntry:
    """計算ロジックのテスト用に正規化済みの明細を作るヘルパー関数"""
    return TransactionEntry(
        id=entry_id,
        account_id=account_id,
        date=datetime.fromisoformat(date) if date else None,
        debit=Decimal(debit),
        credit=Decimal(credit),
        location_id=location_id,
    )


def make_account(account_id, name, account_type="Asset", role=AccountRole.OTHER):
    return AccountRecord(
        id=account_id, name=name, account_type=account_type, account_role=role
    )


def make_receipt(receipt_id, amount, date=None, receipt_no="", location_id=None):
    return ReceiptRecord(
        id=receipt_id,
        amount=Decimal(amount),
        date=datetime.fromisoformat(date) if date else None,
        receipt_no=receipt_no,
        patient_id="P-001",
        location_id=location_id,
    )

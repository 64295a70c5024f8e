"""
外部データストアから受け取る行（dict）を型付きレコードへ変換する境界モジュール。

欠損・不正な値は例外にせず、明示的なデフォルト値に置き換えます。
- 金額: 欠損・数値でない値は Decimal("0")
- 日付: 欠損・解析不能な値は None（並び順では最後に回る）
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser

from enums.ledger_types import AccountRole, VoucherType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

SOURCE_VOUCHER = "voucher"
SOURCE_RECEIPT = "receipt"


@dataclass(frozen=True)
class AccountRecord:
    id: Any
    name: str = ""
    account_type: str = ""
    account_role: AccountRole = AccountRole.OTHER


@dataclass(frozen=True)
class VoucherEntryRecord:
    id: Any
    account_id: Any
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    date: Optional[datetime] = None
    narration: str = ""
    voucher_type: VoucherType = VoucherType.JOURNAL
    voucher_id: Any = None
    voucher_number: str = ""
    location_id: Any = None


@dataclass(frozen=True)
class ReceiptRecord:
    id: Any
    amount: Decimal = ZERO
    date: Optional[datetime] = None
    receipt_no: str = ""
    patient_id: str = ""
    location_id: Any = None


@dataclass(frozen=True)
class TransactionEntry:
    """集計対象の共通形式。伝票明細・入金のどちらもこの形に正規化される。"""

    id: Any
    account_id: Any
    date: Optional[datetime]
    debit: Decimal
    credit: Decimal
    narration: str = ""
    voucher_type: VoucherType = VoucherType.JOURNAL
    voucher_number: str = ""
    location_id: Any = None
    source: str = SOURCE_VOUCHER

    def __post_init__(self):
        # date と datetime が混在しても並べられるよう datetime に揃える
        object.__setattr__(self, "date", to_datetime(self.date))


def to_decimal(value: Any) -> Decimal:
    """
    金額を Decimal に変換します。変換できない値は 0 として扱います。

    float は一度 str にしてから変換するため、2進数の誤差は持ち込まれません。
    "1,00,000" のような桁区切りのカンマは取り除きます。

    Args:
        value (Any): 変換対象の値

    Returns:
        Decimal: 変換後の金額
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except (InvalidOperation, ValueError):
            logger.warning("Non-numeric amount %r treated as zero", value)
            return ZERO
    if not result.is_finite():
        logger.warning("Non-finite amount %r treated as zero", value)
        return ZERO
    return result


def to_datetime(value: Any) -> Optional[datetime]:
    """
    日付・日時を naive な datetime に変換します。

    date は当日 0 時の datetime に広げます。タイムゾーン情報は取り除き、
    壁時計の時刻をそのまま使います。解析できない場合は None を返します。

    Args:
        value (Any): date / datetime / ISO 形式の文字列

    Returns:
        Optional[datetime]: 変換後の日時。並べられない場合は None
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            logger.warning("Unparsable date %r treated as unorderable", value)
            return None
    else:
        logger.warning("Unsupported date value %r treated as unorderable", value)
        return None

    if result.tzinfo is not None:
        result = result.replace(tzinfo=None)
    return result


def to_identifier(value: Any) -> Any:
    """数字だけの文字列IDは int に揃える。それ以外はそのまま返す。"""
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        return text or None
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _pick(row: Mapping, *keys: str) -> Any:
    """最初に見つかった None でない値を返す（snake_case と camelCase の両方を許容）"""
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def parse_account(row: Mapping) -> AccountRecord:
    return AccountRecord(
        id=to_identifier(_pick(row, "id")),
        name=_text(_pick(row, "name", "account_name", "accountName")),
        account_type=_text(_pick(row, "account_type", "accountType")),
        account_role=AccountRole.parse(_pick(row, "account_role", "accountRole")),
    )


def parse_voucher_entry(row: Mapping) -> VoucherEntryRecord:
    return VoucherEntryRecord(
        id=to_identifier(_pick(row, "id")),
        account_id=to_identifier(_pick(row, "account_id", "accountId")),
        debit=to_decimal(_pick(row, "debit")),
        credit=to_decimal(_pick(row, "credit")),
        date=to_datetime(_pick(row, "date", "voucher_date", "voucherDate")),
        narration=_text(_pick(row, "narration")),
        voucher_type=VoucherType.parse(_pick(row, "voucher_type", "voucherType", "type")),
        voucher_id=to_identifier(_pick(row, "voucher_id", "voucherId")),
        voucher_number=_text(_pick(row, "voucher_number", "voucherNumber")),
        location_id=to_identifier(_pick(row, "location_id", "locationId")),
    )


def parse_receipt(row: Mapping) -> ReceiptRecord:
    return ReceiptRecord(
        id=to_identifier(_pick(row, "id")),
        amount=to_decimal(_pick(row, "amount")),
        date=to_datetime(_pick(row, "date", "receipt_date", "receiptDate")),
        receipt_no=_text(_pick(row, "receipt_no", "receiptNo")),
        patient_id=_text(_pick(row, "patient_id", "patientId")),
        location_id=to_identifier(_pick(row, "location_id", "locationId")),
    )


def coerce_accounts(items: Iterable) -> list[AccountRecord]:
    return [
        item if isinstance(item, AccountRecord) else parse_account(item)
        for item in items or []
    ]


def coerce_voucher_entries(items: Iterable) -> list[VoucherEntryRecord]:
    return [
        item if isinstance(item, VoucherEntryRecord) else parse_voucher_entry(item)
        for item in items or []
    ]


def coerce_receipts(items: Iterable) -> list[ReceiptRecord]:
    return [
        item if isinstance(item, ReceiptRecord) else parse_receipt(item)
        for item in items or []
    ]


def coerce_account(item: Any) -> AccountRecord:
    if isinstance(item, AccountRecord):
        return item
    return parse_account(item)

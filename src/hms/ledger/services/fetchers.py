"""
データストア（Django ORM）から帳票の元データを取得するサービス。

取得した行は records の parse_* で型付きレコードに変換して返す。
論理削除された行（is_deleted=True）は返さない。
DB エラーはリトライせず LedgerDataUnavailable として呼び出し元に伝える。
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime, time
from typing import Any, Optional

from django.db import DatabaseError
from django.db.models import F, Q

from ledger.exceptions import LedgerAccountNotFound, LedgerDataUnavailable
from ledger.models import Account, Receipt, VoucherEntry
from ledger.records import (
    AccountRecord,
    ReceiptRecord,
    VoucherEntryRecord,
    parse_account,
    parse_receipt,
    parse_voucher_entry,
)
from ledger.structures import DayRange

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = ("id", "name", "account_type", "account_role")


def fetch_accounts() -> list[AccountRecord]:
    """勘定科目表を名前順に取得します。"""
    try:
        rows = list(Account.objects.order_by("name").values(*ACCOUNT_FIELDS))
    except DatabaseError as exc:
        logger.exception("Failed to fetch accounts")
        raise LedgerDataUnavailable() from exc
    return [parse_account(row) for row in rows]


def fetch_account(account_id: Any) -> AccountRecord:
    """
    勘定科目を1件取得します。

    Raises:
        LedgerAccountNotFound: 該当する勘定科目がない場合
        LedgerDataUnavailable: DB エラーの場合
    """
    try:
        row = Account.objects.filter(pk=account_id).values(*ACCOUNT_FIELDS).first()
    except ValueError as exc:
        # 数値でないIDは該当なしとして扱う
        raise LedgerAccountNotFound(account_id) from exc
    except DatabaseError as exc:
        logger.exception("Failed to fetch account %s", account_id)
        raise LedgerDataUnavailable() from exc
    if row is None:
        raise LedgerAccountNotFound(account_id)
    return parse_account(row)


def fetch_voucher_entries(
    account_ids: Optional[Iterable] = None,
    location_id: Any = None,
    day_range: Optional[DayRange] = None,
    until: Optional[date] = None,
) -> list[VoucherEntryRecord]:
    """
    伝票明細を伝票ヘッダの情報（伝票番号・種別）と結合して取得します。

    明細の日付・拠点がない場合は伝票ヘッダの値を使います。日付のない明細は
    期間で除外できないため、期間・基準日を指定しても返します。

    Args:
        account_ids (Iterable, optional): 対象の勘定科目ID。None は全科目
        location_id (Any, optional): 拠点。None は全拠点
        day_range (DayRange, optional): 対象期間
        until (date, optional): 基準日（この日を含む）

    Returns:
        list[VoucherEntryRecord]: 伝票明細
    """
    queryset = VoucherEntry.objects.filter(is_deleted=False, voucher__is_deleted=False)
    if account_ids is not None:
        queryset = queryset.filter(account_id__in=list(account_ids))
    if location_id is not None:
        queryset = queryset.filter(
            Q(location_id=location_id)
            | Q(location__isnull=True, voucher__location_id=location_id)
        )
    queryset = _filter_by_date(queryset, "voucher_date", day_range, until)

    try:
        rows = list(
            queryset.order_by("voucher_date", "id").values(
                "id",
                "account_id",
                "debit",
                "credit",
                "narration",
                "voucher_id",
                "location_id",
                date=F("voucher_date"),
                voucher_number=F("voucher__voucher_number"),
                voucher_type=F("voucher__type"),
                header_date=F("voucher__voucher_date"),
                header_narration=F("voucher__narration"),
                header_location_id=F("voucher__location_id"),
            )
        )
    except DatabaseError as exc:
        logger.exception("Failed to fetch voucher entries")
        raise LedgerDataUnavailable() from exc

    records = []
    for row in rows:
        if row["date"] is None:
            row["date"] = row["header_date"]
        if not row["narration"]:
            row["narration"] = row["header_narration"]
        if row["location_id"] is None:
            row["location_id"] = row["header_location_id"]
        records.append(parse_voucher_entry(row))
    return records


def fetch_receipts(
    location_id: Any = None,
    day_range: Optional[DayRange] = None,
    until: Optional[date] = None,
) -> list[ReceiptRecord]:
    """
    入金を取得します。日付のない入金は期間・基準日を指定しても返します。

    Args:
        location_id (Any, optional): 拠点。None は全拠点
        day_range (DayRange, optional): 対象期間
        until (date, optional): 基準日（この日を含む）

    Returns:
        list[ReceiptRecord]: 入金
    """
    queryset = Receipt.objects.filter(is_deleted=False)
    if location_id is not None:
        queryset = queryset.filter(location_id=location_id)
    queryset = _filter_by_date(queryset, "receipt_date", day_range, until)

    try:
        rows = list(
            queryset.order_by("receipt_date", "id").values(
                "id",
                "amount",
                "receipt_no",
                "patient_id",
                "location_id",
                date=F("receipt_date"),
            )
        )
    except DatabaseError as exc:
        logger.exception("Failed to fetch receipts")
        raise LedgerDataUnavailable() from exc
    return [parse_receipt(row) for row in rows]


def _filter_by_date(queryset, field_name: str, day_range: Optional[DayRange], until):
    """日付の条件で絞り込む。日付が NULL の行は常に残す。"""
    condition = Q()
    start = day_range.start if day_range else None
    end = day_range.end if day_range else None
    if until is not None and (end is None or until < end):
        end = until

    if start is not None:
        condition &= Q(**{f"{field_name}__gte": _lower_bound(queryset, field_name, start)})
    if end is not None:
        condition &= Q(**{f"{field_name}__lt": _upper_bound(queryset, field_name, end)})
    if not condition:
        return queryset
    return queryset.filter(condition | Q(**{f"{field_name}__isnull": True}))


def _is_datetime_field(queryset, field_name: str) -> bool:
    return queryset.model._meta.get_field(field_name).get_internal_type() == "DateTimeField"


def _lower_bound(queryset, field_name: str, day: date):
    if _is_datetime_field(queryset, field_name):
        return datetime.combine(day, time.min)
    return day


def _upper_bound(queryset, field_name: str, day: date):
    # 終了日を含めるため、翌日の 0 時未満で絞り込む
    next_day = date.fromordinal(day.toordinal() + 1)
    if _is_datetime_field(queryset, field_name):
        return datetime.combine(next_day, time.min)
    return next_day

from django.db import models

from enums.ledger_types import (
    ACCOUNT_ROLE_CHOICES,
    VOUCHER_TYPE_CHOICES,
    AccountRole,
    VoucherType,
)


class Location(models.Model):
    """
    locations (拠点・病院)
    """

    name = models.CharField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Location"
        verbose_name_plural = "Locations"

    def __str__(self):
        return self.name


class Account(models.Model):
    """
    chart_of_accounts (勘定科目)

    account_role は作成時に設定する。集計時に勘定科目名から役割を推測しない。
    """

    name = models.CharField(max_length=200, unique=True)
    code = models.CharField(max_length=32, blank=True)
    account_type = models.CharField(max_length=64, blank=True)
    account_role = models.CharField(
        max_length=16,
        choices=ACCOUNT_ROLE_CHOICES,
        default=AccountRole.OTHER.value,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Account"
        verbose_name_plural = "Accounts"

    def __str__(self):
        return self.name


class VoucherLog(models.Model):
    """
    voucher_logs (伝票ヘッダ)
    """

    voucher_number = models.CharField(max_length=64, blank=True)
    type = models.CharField(
        max_length=16, choices=VOUCHER_TYPE_CHOICES, default=VoucherType.JOURNAL.value
    )
    voucher_date = models.DateField(null=True, blank=True)
    narration = models.TextField(blank=True)
    location = models.ForeignKey(
        Location,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="vouchers",
    )
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Voucher"
        verbose_name_plural = "Vouchers"
        ordering = ["-voucher_date", "-created_at"]

    def __str__(self):
        return f"{self.type} {self.voucher_number}"


class VoucherEntry(models.Model):
    """
    voucher_entries (伝票明細)

    借方・貸方のどちらか一方に金額が入る想定だが、両方を持つ行も拒否しない。
    """

    voucher = models.ForeignKey(
        VoucherLog, on_delete=models.CASCADE, related_name="entries"
    )
    account = models.ForeignKey(
        Account, on_delete=models.RESTRICT, related_name="voucher_entries"
    )
    debit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    credit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    narration = models.TextField(blank=True)
    voucher_date = models.DateField(null=True, blank=True)
    location = models.ForeignKey(
        Location,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="voucher_entries",
    )
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Voucher Entry"
        verbose_name_plural = "Voucher Entries"

    def __str__(self):
        return f"{self.account} Dr {self.debit or 0} Cr {self.credit or 0}"


class Receipt(models.Model):
    """
    receipts (患者からの入金)

    片側のみの記録。帳票ごとに借方（現金）・貸方（未収金）へ展開して使う。
    """

    receipt_no = models.CharField(max_length=64, blank=True)
    patient_id = models.CharField(max_length=64, blank=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    receipt_date = models.DateTimeField(null=True, blank=True)
    payment_mode = models.CharField(max_length=32, blank=True)
    location = models.ForeignKey(
        Location,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="receipts",
    )
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Receipt"
        verbose_name_plural = "Receipts"
        ordering = ["-receipt_date"]

    def __str__(self):
        return f"Receipt {self.receipt_no}"

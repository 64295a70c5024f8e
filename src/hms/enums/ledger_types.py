from enum import Enum


class VoucherType(Enum):
    """伝票種別（分類のみ。計算ロジックは種別で分岐しない）"""

    JOURNAL = "Journal"
    RECEIPT = "Receipt"
    PAYMENT = "Payment"
    CONTRA = "Contra"

    @classmethod
    def parse(cls, value) -> "VoucherType":
        """
        外部データの文字列を VoucherType に変換します。
        大文字小文字は区別せず、未知の値は Journal とみなします。
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.JOURNAL


class AccountRole(Enum):
    """勘定科目の役割。勘定科目の作成時に設定し、集計時に名前から推測しない。"""

    RECEIVABLE = "Receivable"
    CASH = "Cash"
    BANK = "Bank"
    OTHER = "Other"

    @classmethod
    def parse(cls, value) -> "AccountRole":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.OTHER


VOUCHER_TYPE_CHOICES = [(member.value, member.value) for member in VoucherType]
ACCOUNT_ROLE_CHOICES = [(member.value, member.value) for member in AccountRole]

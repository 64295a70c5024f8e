"""
既存の勘定科目に account_role を一度だけ設定する管理コマンド。

役割が Other のままの科目について、勘定科目名・勘定科目タイプから役割を推測して保存する。
帳票の集計時に名前から役割を推測することはなく、推測はこのコマンドだけで行う。
"""

import logging
import re

from django.core.management.base import BaseCommand
from django.db import transaction

from enums.ledger_types import AccountRole
from ledger.models import Account

logger = logging.getLogger(__name__)

# 上から順に評価する
ROLE_PATTERNS = [
    (AccountRole.RECEIVABLE, re.compile(r"receivable|patient|debtor", re.IGNORECASE)),
    (AccountRole.CASH, re.compile(r"cash", re.IGNORECASE)),
    (AccountRole.BANK, re.compile(r"bank", re.IGNORECASE)),
]


def guess_role(name: str, account_type: str = "") -> AccountRole:
    """
    勘定科目名（なければ勘定科目タイプ）から役割を推測します。

    Args:
        name (str): 勘定科目名
        account_type (str): 勘定科目タイプ

    Returns:
        AccountRole: 推測した役割。該当なしは Other
    """
    for text in (name or "", account_type or ""):
        for role, pattern in ROLE_PATTERNS:
            if pattern.search(text):
                return role
    return AccountRole.OTHER


class Command(BaseCommand):
    help = "Back-fill account_role for accounts still marked as Other"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show the roles that would be assigned without saving them",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        updated = 0

        with transaction.atomic():
            accounts = Account.objects.filter(account_role=AccountRole.OTHER.value)
            for account in accounts.order_by("name"):
                role = guess_role(account.name, account.account_type)
                if role is AccountRole.OTHER:
                    continue
                self.stdout.write(f"{account.name}: {AccountRole.OTHER.value} -> {role.value}")
                updated += 1
                if not dry_run:
                    account.account_role = role.value
                    account.save(update_fields=["account_role", "updated_at"])

        if dry_run:
            self.stdout.write(f"{updated} account(s) would be updated (dry run)")
        else:
            logger.info("Classified %d account(s)", updated)
            self.stdout.write(self.style.SUCCESS(f"{updated} account(s) updated"))

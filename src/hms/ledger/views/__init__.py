from ledger.views.account_ledger import AccountLedgerView
from ledger.views.cashbook import CashBookView
from ledger.views.financial_statement import TrialBalanceView

__all__ = ["AccountLedgerView", "CashBookView", "TrialBalanceView"]

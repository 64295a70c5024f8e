from django.urls import path

from ledger.views import (
    AccountLedgerView,
    CashBookView,
    TrialBalanceView,
)

urlpatterns = [
    path("cash-book/", CashBookView.as_view(), name="cash_book_current"),
    path("cash-book/<int:year>/<int:month>/", CashBookView.as_view(), name="cash_book"),
    path("accounts/<int:account_id>/ledger/", AccountLedgerView.as_view(), name="account_ledger"),
    path("trial-balance/", TrialBalanceView.as_view(), name="trial_balance"),
]

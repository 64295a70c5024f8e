"""
帳票まわりの例外。

不正なレコードや貸借の不一致は例外にしない（データとして結果に現れる）。
ここで定義するのは、帳票そのものを作れない場合の例外だけ。
"""

from enums.error_messages import ErrorMessages


class LedgerError(Exception):
    """帳票処理の基底例外"""

    code = "ledger_error"
    status = 500


class LedgerDataUnavailable(LedgerError):
    """データストアから帳票の元データを取得できなかった"""

    code = "data_unavailable"
    status = 503

    def __init__(self, message: str = ErrorMessages.MESSAGE_0001.value):
        super().__init__(message)


class LedgerAccountNotFound(LedgerError):
    code = "account_not_found"
    status = 404

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(ErrorMessages.MESSAGE_0002.value.format(account_id=account_id))


class InvalidReportParameter(LedgerError):
    """クエリパラメータ（日付・出力形式・拠点）が解釈できない"""

    code = "invalid_parameter"
    status = 400

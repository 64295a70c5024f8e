import io
import logging
from datetime import date
from typing import Any, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.template.response import TemplateResponse
from django.views import View

from enums.error_messages import ErrorMessages
from ledger.exceptions import InvalidReportParameter, LedgerError
from ledger.records import to_identifier
from ledger.services.accounting_period import parse_iso_date
from ledger.services.report import to_serializable, write_csv, write_xlsx
from ledger.structures import DayRange

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
OUTPUT_FORMATS = ("html", "json", "xlsx", "csv")


class LedgerReportView(View):
    """帳票ビューの共通処理を提供する抽象ビュー

    サブクラスは以下を実装する必要があります：
    - template_name: テンプレートファイル名
    - get_data: 帳票データの取得と計算
    - build_context: テンプレートに渡すコンテキストの構築
    - get_export_header / get_export_rows: xlsx・csv 用の行データ
    - get_filename_base: ダウンロード時のファイル名（拡張子なし）
    """

    template_name = None

    def get(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        """GETリクエストハンドラ。
        ?format= に応じて html / json / xlsx / csv のいずれかで返します。

        Args:
            request (HttpRequest): HTTPリクエストオブジェクト

        Returns:
            HttpResponse: HTTPレスポンスオブジェクト
        """
        output_format = request.GET.get("format", "html").lower()
        try:
            if output_format not in OUTPUT_FORMATS:
                raise InvalidReportParameter(
                    ErrorMessages.MESSAGE_0004.value.format(value=output_format)
                )
            data_dict = self.get_data(request, **kwargs)
        except LedgerError as exc:
            return self._error_response(request, exc, output_format)

        if output_format == "json":
            return self._export_as_json(data_dict)
        if output_format == "xlsx":
            return self._export_as_xlsx(data_dict)
        if output_format == "csv":
            return self._export_as_csv(data_dict)
        return TemplateResponse(
            request, self.template_name, self.build_context(data_dict)
        )

    def get_data(self, request: HttpRequest, **kwargs) -> dict:
        raise NotImplementedError

    def build_context(self, data_dict: dict) -> dict:
        raise NotImplementedError

    def get_export_header(self) -> list[str]:
        raise NotImplementedError

    def get_export_rows(self, data_dict: dict) -> list[list]:
        raise NotImplementedError

    def get_filename_base(self, data_dict: dict) -> str:
        raise NotImplementedError

    def _export_as_json(self, data_dict: dict) -> JsonResponse:
        """計算結果を JSON で返すユーティリティメソッド。Decimal は文字列になります。"""
        return JsonResponse(
            {"ok": True, "data": to_serializable(data_dict["result"])},
            encoder=DjangoJSONEncoder,
        )

    def _export_as_xlsx(self, data_dict: dict) -> HttpResponse:
        """Excel形式でエクスポートするユーティリティメソッド。

        Args:
            data_dict (dict): get_dataから返されたデータ辞書

        Returns:
            HttpResponse: ExcelファイルのHTTPレスポンス
        """
        response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
        filename = f"{self.get_filename_base(data_dict)}.xlsx"
        response["Content-Disposition"] = f"attachment; filename={filename}"
        write_xlsx(self.get_export_header(), self.get_export_rows(data_dict), response)
        return response

    def _export_as_csv(self, data_dict: dict) -> HttpResponse:
        buffer = io.StringIO()
        write_csv(self.get_export_header(), self.get_export_rows(data_dict), buffer)
        response = HttpResponse(buffer.getvalue(), content_type="text/csv; charset=utf-8")
        filename = f"{self.get_filename_base(data_dict)}.csv"
        response["Content-Disposition"] = f"attachment; filename={filename}"
        return response

    def _error_response(
        self, request: HttpRequest, exc: LedgerError, output_format: str
    ) -> HttpResponse:
        """例外をHTTPレスポンスに変換するユーティリティメソッド。

        html はテンプレートに error_message を渡して描画し、それ以外は
        {"ok": false, "error": {"code", "message"}} の JSON を返します。
        """
        logger.warning("Ledger report failed (%s): %s", exc.code, exc)
        if output_format == "html":
            context = {"error_message": str(exc)}
            return TemplateResponse(
                request, self.template_name, context, status=exc.status
            )
        return JsonResponse(
            {"ok": False, "error": {"code": exc.code, "message": str(exc)}},
            status=exc.status,
        )

    def _parse_date_param(self, request: HttpRequest, name: str) -> Optional[date]:
        """クエリパラメータの日付を取得します。未指定なら None。

        Raises:
            InvalidReportParameter: 日付として解釈できない場合
        """
        value = request.GET.get(name, "").strip()
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError as exc:
            raise InvalidReportParameter(
                ErrorMessages.MESSAGE_0003.value.format(value=value)
            ) from exc

    def _parse_range_params(self, request: HttpRequest) -> Optional[DayRange]:
        """?from= / ?to= を DayRange にします。どちらも未指定なら None。"""
        start = self._parse_date_param(request, "from")
        end = self._parse_date_param(request, "to")
        if start is None and end is None:
            return None
        return DayRange(start, end)

    def _parse_location(self, request: HttpRequest) -> Any:
        value = request.GET.get("location", "").strip()
        if not value:
            return None
        location_id = to_identifier(value)
        if not isinstance(location_id, int):
            raise InvalidReportParameter(
                ErrorMessages.MESSAGE_0005.value.format(value=value)
            )
        return location_id

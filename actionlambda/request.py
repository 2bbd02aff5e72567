"""
Request クラス

Lambda イベントからアクション用の読み取り専用 Request ビューを提供します。
"""

import logging
from typing import Dict, Any, Optional, TYPE_CHECKING

from .exceptions import BodyParseError
from .json_handler import JSONHandler

if TYPE_CHECKING:
    from .config import Environment

logger = logging.getLogger(__name__)


class RequestView:
    """Lambda イベントの読み取り専用ビュー

    1 回の呼び出しにつき 1 つ生成され、呼び出し間で共有されることはありません。
    """

    def __init__(
        self, event: Dict[str, Any], context: Any, env: Optional["Environment"] = None
    ) -> None:
        self._event = event
        self._context = context
        self._env = env
        self._body, self.body_error = self._parse_body(event.get("body"))
        # req.get 用に小文字化したヘッダーの索引
        self._lc_headers = {
            str(name).lower(): value for name, value in (event.get("headers") or {}).items()
        }

    @staticmethod
    def _parse_body(raw: Any) -> "tuple[Any, Optional[BodyParseError]]":
        """ボディをパース（失敗しても例外は送出せず、ボディは None になる）"""
        if raw is None or raw == "":
            return None, None
        try:
            return JSONHandler.loads(raw), None
        except (ValueError, TypeError, UnicodeDecodeError) as e:
            logger.debug("Request body is not valid JSON: %s", e)
            return None, BodyParseError()

    def param(self, key: str) -> Any:
        """パラメータを取得（パスパラメータ → ボディ → クエリパラメータの順）"""
        path_params = self._event.get("pathParameters")
        if path_params and path_params.get(key):
            return path_params[key]

        if isinstance(self._body, dict) and self._body.get(key):
            return self._body[key]

        query = self._event.get("queryStringParameters")
        if query and query.get(key):
            return query[key]

        return None

    def get(self, header: str, default: Any = None) -> Any:
        """ヘッダーを大文字小文字を区別せずに取得"""
        return self._lc_headers.get(header.lower()) or default

    @property
    def body(self) -> Any:
        """パース済みのボディ（パースできない場合は None）"""
        return self._body

    @property
    def query(self) -> Optional[Dict[str, Any]]:
        """クエリパラメータを取得"""
        return self._event.get("queryStringParameters")

    @property
    def method(self) -> Optional[str]:
        """HTTP メソッドを取得"""
        return self._event.get("httpMethod")

    @property
    def path(self) -> Optional[str]:
        """リクエストパスを取得"""
        return self._event.get("path")

    @property
    def headers(self) -> Dict[str, Any]:
        """リクエストヘッダーを取得（元の大文字小文字のまま）"""
        return self._event.get("headers") or {}

    @property
    def authorization_token(self) -> Optional[str]:
        """カスタムオーソライザー用のトークン"""
        return self._event.get("authorizationToken")

    @property
    def auth(self) -> Optional[Dict[str, Any]]:
        """オーソライザーが解決したクレーム"""
        request_context = self._event.get("requestContext") or {}
        return request_context.get("authorizer")

    @property
    def event(self) -> Dict[str, Any]:
        return self._event

    @property
    def context(self) -> Any:
        return self._context

    @property
    def env(self) -> Optional["Environment"]:
        return self._env

    # イベントのフィールド名に合わせたアクセス
    authorizationToken = authorization_token
    awsEvent = event
    awsContext = context

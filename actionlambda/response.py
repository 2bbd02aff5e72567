"""
Response ビルダー

アクションが組み立てるレスポンス（ステータス・ヘッダー・ボディ）を蓄積し、
終端操作で確定させます。
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional, Union, TYPE_CHECKING

from .exceptions import describe_failure
from .json_handler import JSONHandler

if TYPE_CHECKING:
    from .options import LifecycleHooks

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/html"


@dataclass
class Building:
    """組み立て中のレスポンス"""

    status_code: int = 200
    headers: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Sent:
    """送信済みのレスポンス（以降の変更は不可）"""

    status_code: int
    headers: Dict[str, Any]
    body: Any


ResponseState = Union[Building, Sent]


def reason_phrase(status_code: int) -> str:
    """ステータスコードの標準理由句を取得"""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return str(status_code)


class ResponseBuilder:
    """アクションに渡す res オブジェクト

    終端操作（json / send / send_status / server_error など）はちょうど一度だけ
    実行されます。2 回目以降の操作は警告ログを出して無視します。
    """

    def __init__(
        self,
        on_send: Callable[[Sent], None],
        no_envelope: bool = False,
        hooks: Optional["LifecycleHooks"] = None,
    ) -> None:
        self._on_send = on_send
        self._no_envelope = no_envelope
        self._hooks = hooks
        self._state: ResponseState = Building()
        self._hook_task: Optional["asyncio.Future[None]"] = None
        # オーソライザー向けのレスポンスコンテキスト
        self.context: Dict[str, Any] = {}

    @property
    def state(self) -> ResponseState:
        return self._state

    @property
    def sent(self) -> bool:
        return isinstance(self._state, Sent)

    def _building(self, operation: str) -> Optional[Building]:
        if isinstance(self._state, Sent):
            logger.warning("Response already sent; ignoring `%s`", operation)
            return None
        return self._state

    def set(self, header: str, value: Any) -> "ResponseBuilder":
        """ヘッダーを設定"""
        state = self._building("set")
        if state is not None:
            state.headers[header] = value
        return self

    def status(self, status_code: int) -> "ResponseBuilder":
        """ステータスコードを設定"""
        state = self._building("status")
        if state is not None:
            state.status_code = status_code
        return self

    def _finish(self, operation: str, body: Any, status_code: Optional[int] = None) -> None:
        state = self._building(operation)
        if state is None:
            return

        sent = Sent(
            status_code=status_code if status_code is not None else state.status_code,
            headers=state.headers,
            body=body,
        )
        self._state = sent
        self._on_send(sent)

    def _serialize(self, output: Any) -> Any:
        # エンベロープなしの場合はプラットフォーム側で整形されるため値をそのまま渡す
        if self._no_envelope:
            return output
        return JSONHandler.dumps(output)

    def json(self, output: Any = None) -> None:
        """JSON レスポンスを送信"""
        state = self._building("json")
        if state is None:
            return
        state.headers["Content-Type"] = JSON_CONTENT_TYPE
        self._finish("json", self._serialize(output))

    def send(self, output: Any = None) -> None:
        """レスポンスを送信

        数値・真偽値・None はそのまま、文字列は text/html、
        それ以外は JSON として送信します。
        """
        state = self._building("send")
        if state is None:
            return

        payload = output
        if payload is not None and not isinstance(payload, (bool, int, float)):
            if isinstance(payload, str):
                state.headers["Content-Type"] = TEXT_CONTENT_TYPE
            else:
                state.headers["Content-Type"] = JSON_CONTENT_TYPE
                payload = self._serialize(payload)
        self._finish("send", payload)

    def send_status(self, status_code: int) -> None:
        """標準理由句をボディにしてステータスを送信"""
        self._finish("send_status", reason_phrase(status_code), status_code)

    def server_error(self, output: Any = None) -> None:
        """500 エラーを送信

        server_error フックが設定されていればフックに委譲します。
        コルーチン関数のフックはタスクとして実行されます。
        フック自体が失敗した場合はデフォルトの動作に戻ります。
        """
        self.status(500)

        hook = self._hooks.server_error if self._hooks else None
        if hook is not None:
            try:
                result = hook(output, lambda value: self.status(500).json(value))
            except Exception:
                logger.exception("server_error hook failed; sending default 500 response")
            else:
                if inspect.isawaitable(result):
                    self._hook_task = asyncio.ensure_future(self._await_hook(result, output))
                return

        self._default_server_error(output)

    def _default_server_error(self, output: Any) -> None:
        self.status(500).json(describe_failure(output))

    async def _await_hook(self, pending: Any, output: Any) -> None:
        try:
            await pending
        except Exception:
            logger.exception("server_error hook failed; sending default 500 response")
            self._default_server_error(output)

    def bad_request(self, output: Any = None) -> None:
        self.send_status(400)

    def forbidden(self, output: Any = None) -> None:
        self.send_status(403)

    def not_found(self, output: Any = None) -> None:
        self.send_status(404)

    # camelCase 名でのアクセス
    sendStatus = send_status
    serverError = server_error
    badRequest = bad_request
    notFound = not_found

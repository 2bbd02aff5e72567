"""
レスポンスエンコーダー

確定したレスポンスを Lambda (API Gateway プロキシ) が期待する形式に変換します。
"""

from typing import Any, Dict, Optional, Union

from .cors import CORSConfig
from .json_handler import JSONHandler
from .response import Sent

# エンベロープ形式、またはエンベロープなしの生のボディ
EncodedResult = Union[Dict[str, Any], Any]


def _request_origin(event: Dict[str, Any]) -> Optional[str]:
    for name, value in (event.get("headers") or {}).items():
        if str(name).lower() == "origin":
            return value
    return None


def encode_response(
    sent: Sent,
    event: Dict[str, Any],
    cors: Optional[CORSConfig] = None,
    no_envelope: bool = False,
    context: Optional[Dict[str, Any]] = None,
) -> EncodedResult:
    """送信済みレスポンスを Lambda の戻り値に変換

    Args:
        sent: 確定したレスポンス
        event: 受信したイベント（Origin の判定に使用）
        cors: CORS 設定
        no_envelope: True の場合はボディのみを返す
        context: アクションが設定したレスポンスコンテキスト

    Returns:
        EncodedResult: エンベロープ、またはボディそのもの
    """
    body = sent.body
    headers = dict(sent.headers)

    # Content-Length が明示されていなければボディの長さから設定
    if not headers.get("Content-Length"):
        headers["Content-Length"] = str(len(JSONHandler.to_text(body)))

    if cors is not None and cors.allows(_request_origin(event)):
        headers.update(cors.get_cors_headers())

    if no_envelope:
        return body

    return {
        "statusCode": sent.status_code,
        "headers": headers,
        "body": body,
        "context": context if context is not None else {},
    }


def encode_failure(
    event: Dict[str, Any], error_text: str, no_envelope: bool = False
) -> EncodedResult:
    """ブートストラップ等の失敗を 500 相当の結果に変換"""
    payload = {"event": event, "error": error_text}

    if no_envelope:
        return payload

    return {
        "statusCode": 500,
        "headers": {},
        "body": JSONHandler.dumps(payload),
        "context": {},
    }

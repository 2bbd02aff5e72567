"""
JSON 処理統一ハンドラー

Lambda イベントのボディ解析とレスポンスのシリアライズを一箇所にまとめます。
orjson がインストールされていればそちらを使用します。
"""

import json
from typing import Any, Union

# オプション: orjson による高速化
try:
    import orjson

    HAS_ORJSON = True
except ImportError:
    HAS_ORJSON = False


class JSONHandler:
    """JSON 処理の統一インターフェース"""

    @staticmethod
    def loads(data: Union[str, bytes]) -> Any:
        """
        JSON をパース

        Args:
            data: JSON 文字列またはバイト列

        Returns:
            Any: パースされた値

        Raises:
            ValueError: 無効な JSON の場合
        """
        if HAS_ORJSON:
            return orjson.loads(data)
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    @staticmethod
    def dumps(data: Any, ensure_ascii: bool = False) -> str:
        """
        JSON シリアライズ（最小化）

        Args:
            data: シリアライズするオブジェクト
            ensure_ascii: ASCII エンコーディングを強制するか

        Returns:
            str: JSON 文字列
        """
        if HAS_ORJSON and not ensure_ascii:
            try:
                return orjson.dumps(data, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")
            except TypeError:
                # orjson が扱えない型は標準 json の default=str に任せる
                pass

        return json.dumps(data, ensure_ascii=ensure_ascii, separators=(",", ":"), default=str)

    @staticmethod
    def to_text(data: Any) -> str:
        """ボディを文字列表現に変換（Content-Length の計算用）"""
        if isinstance(data, str):
            return data
        return JSONHandler.dumps(data)


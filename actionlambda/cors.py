"""
CORS (Cross-Origin Resource Sharing) 機能

アクションのレスポンスに付与する CORS ヘッダーのポリシーを提供します。
"""

from typing import Any, Dict, List, Mapping, Optional, Union
from dataclasses import dataclass

from .exceptions import ConfigurationError


@dataclass
class CORSConfig:
    """CORS 設定クラス"""

    origin: str = "*"
    headers: Optional[Union[str, List[str]]] = None
    allow_credentials: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CORSConfig":
        """辞書（camelCase も可）から設定を作成

        origin は必須です（すべてのオリジンを許可する場合は ``"*"`` を明示）。

        Raises:
            ConfigurationError: origin が指定されていない場合
        """
        origin = data.get("origin")
        if not origin:
            raise ConfigurationError(
                "`cors.origin` is required; use \"*\" to allow any origin.",
                details={"option": "cors"},
            )

        allow_credentials = data.get("allow_credentials", data.get("allowCredentials", False))
        return cls(
            origin=origin,
            headers=data.get("headers"),
            allow_credentials=bool(allow_credentials),
        )

    def allows(self, request_origin: Optional[str]) -> bool:
        """リクエストの Origin に CORS ヘッダーを付与するか判定"""
        if self.origin == "*":
            return True
        return request_origin is not None and request_origin == self.origin

    def get_cors_headers(self) -> Dict[str, str]:
        """CORS ヘッダーを生成"""
        headers = {"Access-Control-Allow-Origin": self.origin}

        if self.headers:
            if isinstance(self.headers, str):
                headers["Access-Control-Allow-Headers"] = self.headers
            else:
                headers["Access-Control-Allow-Headers"] = ",".join(self.headers)

        headers["Access-Control-Allow-Credentials"] = "true" if self.allow_credentials else "false"

        return headers


def create_cors_config(
    origin: str = "*",
    headers: Optional[Union[str, List[str]]] = None,
    allow_credentials: bool = False,
) -> CORSConfig:
    """CORS 設定を作成するヘルパー関数"""
    return CORSConfig(origin=origin, headers=headers, allow_credentials=allow_credentials)

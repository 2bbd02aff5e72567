"""
環境設定

環境変数から入れ子の設定辞書を組み立て、ブートストラップ・ティアダウン・
アクションに明示的に渡す Environment を提供します。
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .json_handler import JSONHandler

DEFAULT_PREFIX = "actionlambda_"

_NUMBER_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")

# config["log"]["level"] で指定できるレベル
LOG_LEVELS = {
    "silly": logging.DEBUG,
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "silent": logging.CRITICAL + 1,
}


def parse_value(raw: str) -> Any:
    """環境変数の値を解釈

    JSON として解釈できればその値、できなければ真偽値・null・数値を試し、
    最後は文字列のまま返します。
    """
    try:
        return JSONHandler.loads(raw)
    except (ValueError, TypeError):
        pass

    text = raw.strip()
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None
    if _NUMBER_RE.match(text):
        number = float(text)
        return int(number) if number.is_integer() and "." not in text else number
    return raw


def set_path(target: Dict[str, Any], keypath: str, value: Any) -> None:
    """ドット区切りのキーパスに値を設定（途中の辞書は必要に応じて作成）"""
    keys = keypath.split(".")
    node = target
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[keys[-1]] = value


def load_env_config(
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = DEFAULT_PREFIX,
    base: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """プレフィックス付きの環境変数を入れ子の設定に畳み込む

    例: ``actionlambda_db__host=localhost`` → ``{"db": {"host": "localhost"}}``
    """
    if environ is None:
        environ = os.environ

    config: Dict[str, Any] = dict(base or {})
    for key in sorted(environ):
        if not key.startswith(prefix) or len(key) == len(prefix):
            continue
        keypath = key[len(prefix) :].replace("__", ".")
        set_path(config, keypath, parse_value(environ[key]))

    return config


def _log_level(config: Dict[str, Any]) -> int:
    log_config = config.get("log")
    level = log_config.get("level") if isinstance(log_config, dict) else None
    if isinstance(level, str):
        return LOG_LEVELS.get(level.lower(), logging.INFO)
    return logging.INFO


@dataclass
class Environment:
    """ユーザーコードに渡される実行環境（設定とロガー）"""

    config: Dict[str, Any] = field(default_factory=dict)
    log: logging.Logger = field(default_factory=lambda: logging.getLogger("actionlambda.app"))
    app_path: str = field(default_factory=os.getcwd)

    @classmethod
    def from_environ(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = DEFAULT_PREFIX,
        logger_name: str = "actionlambda.app",
    ) -> "Environment":
        """環境変数から Environment を作成"""
        config = load_env_config(environ, prefix=prefix)
        log = logging.getLogger(logger_name)
        log.setLevel(_log_level(config))
        return cls(config=config, log=log)

    def get(self, keypath: str, default: Any = None) -> Any:
        """ドット区切りのキーパスで設定値を取得"""
        node: Any = self.config
        for key in keypath.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

"""
アダプター本体

アクションを Lambda のハンドラー ``(event, context)`` に変換します。
イベント種別（HTTP / 汎用）の判定はアダプター構築時に一度だけ行います。
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Union

from .action import ActionDef, as_http_action
from .config import Environment
from .exceptions import ConfigurationError
from .lifecycle import Callback, Completion, GenericLifecycle, HttpLifecycle, Lifecycle
from .options import EVENT_TYPE_GENERIC, LifecycleOptions

logger = logging.getLogger(__name__)

GENERIC_INPUTS = ("event", "context")


def validate_generic_action(handler: Any) -> ActionDef:
    """汎用イベント用のアクションか検証

    ``event`` と ``context`` の 2 つの入力だけを持ち、どちらの example も
    空の辞書である必要があります。
    """
    if not isinstance(handler, ActionDef):
        raise ConfigurationError(
            "Actions triggered by generic events must be declared with `event` and `context` inputs.",
            details={"handler": repr(handler)},
        )

    missing = [name for name in GENERIC_INPUTS if name not in handler.inputs]
    if missing:
        raise ConfigurationError(
            "Actions triggered by generic events must have `event` and `context` inputs.",
            details={"missing": missing},
        )

    extra = sorted(set(handler.inputs) - set(GENERIC_INPUTS))
    if extra:
        raise ConfigurationError(
            "Actions triggered by generic events may only declare `event` and `context` inputs.",
            details={"extra": extra},
        )

    for name in GENERIC_INPUTS:
        example = handler.inputs[name].example
        if not isinstance(example, dict) or example:
            raise ConfigurationError(
                "The `event` and `context` inputs for a generic event action must have "
                "empty dictionary examples.",
                details={"input": name},
            )

    return handler


def select_adaptation(handler: Any, options: LifecycleOptions, env: Environment) -> Lifecycle:
    """イベント種別に応じたライフサイクルを選択"""
    if options.event_type == EVENT_TYPE_GENERIC:
        return GenericLifecycle(validate_generic_action(handler), options, env)
    return HttpLifecycle(as_http_action(handler), options, env)


class LambdaAdapter:
    """Lambda のハンドラーとして呼び出せるアダプター"""

    def __init__(self, lifecycle: Lifecycle, options: LifecycleOptions, env: Environment) -> None:
        self.lifecycle = lifecycle
        self.options = options
        self.env = env

    async def invoke(
        self, event: Dict[str, Any], context: Any, callback: Optional[Callback] = None
    ) -> Any:
        """呼び出しを実行（イベントループ内から使う場合）

        callback を渡した場合は ``callback(error, result)`` が一度だけ呼ばれ、
        例外は送出されません。渡さない場合は結果を返し、エラーは送出します。
        """
        completion = Completion(callback)
        await self.lifecycle.execute(event, context, completion)

        if callback is not None:
            return None
        if completion.error is not None:
            raise completion.error
        return completion.result

    def __call__(
        self, event: Dict[str, Any], context: Any = None, callback: Optional[Callback] = None
    ) -> Any:
        """Lambda ランタイムから呼ばれるエントリーポイント"""
        return asyncio.run(self.invoke(event, context, callback))

    def __repr__(self) -> str:
        return f"LambdaAdapter(event_type={self.options.event_type!r})"


def as_lambda(
    handler: Any,
    options: Union[LifecycleOptions, Mapping[str, Any], None] = None,
    env: Optional[Environment] = None,
    **kwargs: Any,
) -> LambdaAdapter:
    """アクションを Lambda ハンドラーに変換

    使用例:
        from actionlambda import as_lambda

        def hello(req, res):
            res.json({"message": "Hello"})

        lambda_handler = as_lambda(hello, cors={"origin": "*"})

    Args:
        handler: ActionDef、HttpAction、または ``(req, res)`` を受け取る関数
        options: LifecycleOptions または設定の辞書
        env: ユーザーコードに渡す Environment（省略時は環境変数から作成）
        **kwargs: LifecycleOptions のフィールド

    Raises:
        ConfigurationError: 設定やアクションの入力定義が不正な場合
    """
    if isinstance(options, LifecycleOptions):
        if kwargs:
            raise ConfigurationError(
                "Pass either a LifecycleOptions instance or keyword options, not both."
            )
        resolved = options
    else:
        resolved = LifecycleOptions.from_dict({**dict(options or {}), **kwargs})

    if env is None:
        env = Environment.from_environ()

    lifecycle = select_adaptation(handler, resolved, env)
    logger.debug("Adapted %r as %s action", handler, resolved.event_type)
    return LambdaAdapter(lifecycle, resolved, env)


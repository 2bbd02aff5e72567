"""
アクション定義

宣言的に入力を定義したアクションと、HTTP 用にラップ済みであることを示す
HttpAction を提供します。
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union, TYPE_CHECKING

from .exceptions import ConfigurationError
from .sequence import call_maybe_async

if TYPE_CHECKING:
    from .config import Environment
    from .request import RequestView
    from .response import ResponseBuilder

logger = logging.getLogger(__name__)

ActionFunc = Callable[[Dict[str, Any], Optional["Environment"]], Any]
HttpHandlerFunc = Callable[["RequestView", "ResponseBuilder"], Any]


@dataclass
class InputDef:
    """アクションの入力定義"""

    example: Any = None
    required: bool = False
    description: Optional[str] = None


class ActionExit(Exception):
    """success / error 以外の出口でアクションを終了する"""

    def __init__(self, exit_name: str, output: Any = None) -> None:
        super().__init__(exit_name)
        self.exit_name = exit_name
        self.output = output


@dataclass
class ActionDef:
    """宣言的なアクション定義

    Attributes:
        fn: ``fn(inputs, env)`` の形で呼ばれる実装（コルーチン関数も可）。
            戻り値が success の出力、例外が error の出力になります。
        inputs: 入力名 → InputDef（``{"example": ...}`` 形式の辞書も可）
        exits: 出口名 → HTTP ステータスコード
    """

    fn: ActionFunc
    inputs: Dict[str, InputDef] = field(default_factory=dict)
    exits: Dict[str, int] = field(default_factory=dict)
    friendly_name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """初期化後の処理"""
        normalized: Dict[str, InputDef] = {}
        for name, definition in self.inputs.items():
            if isinstance(definition, InputDef):
                normalized[name] = definition
            elif isinstance(definition, Mapping):
                normalized[name] = InputDef(**definition)
            else:
                raise ConfigurationError(
                    f"Input `{name}` must be an InputDef or a mapping.", details={"input": name}
                )
        self.inputs = normalized

        if self.friendly_name is None:
            self.friendly_name = getattr(self.fn, "__name__", "action")

    async def run(self, inputs: Dict[str, Any], env: Optional["Environment"] = None) -> Any:
        """アクションを実行"""
        return await call_maybe_async(self.fn, inputs, env)


def action(
    inputs: Optional[Dict[str, Union[InputDef, Mapping[str, Any]]]] = None,
    exits: Optional[Dict[str, int]] = None,
    description: Optional[str] = None,
) -> Callable[[ActionFunc], ActionDef]:
    """関数を ActionDef にするデコレータ"""

    def decorator(fn: ActionFunc) -> ActionDef:
        return ActionDef(
            fn=fn,
            inputs=dict(inputs or {}),  # type: ignore[arg-type]
            exits=dict(exits or {}),
            description=description,
        )

    return decorator


class HttpAction:
    """req / res を受け取る形にラップ済みのアクション

    isinstance で判定できる明示的なマーカーとして使います。
    """

    def __init__(self, handler: HttpHandlerFunc, name: Optional[str] = None) -> None:
        self.handler = handler
        self.name = name or getattr(handler, "__name__", "action")

    async def __call__(self, req: "RequestView", res: "ResponseBuilder") -> None:
        await call_maybe_async(self.handler, req, res)

    def __repr__(self) -> str:
        return f"HttpAction({self.name!r})"

    @classmethod
    def from_action(cls, definition: ActionDef) -> "HttpAction":
        """ActionDef を req / res 形式に変換"""

        async def handler(req: "RequestView", res: "ResponseBuilder") -> None:
            inputs = {}
            for name in definition.inputs:
                value = req.param(name)
                if value is not None:
                    inputs[name] = value

            try:
                output = await definition.run(inputs, req.env)
            except ActionExit as exit_signal:
                status_code = definition.exits.get(exit_signal.exit_name)
                if status_code is None:
                    logger.error(
                        "Action `%s` used undeclared exit `%s`",
                        definition.friendly_name,
                        exit_signal.exit_name,
                    )
                    res.server_error(exit_signal)
                elif exit_signal.output is None:
                    res.send_status(status_code)
                else:
                    res.status(status_code).json(exit_signal.output)
                return
            except Exception as e:
                res.server_error(e)
                return

            if output is None:
                res.send_status(200)
            else:
                res.json(output)

        return cls(handler, name=definition.friendly_name)


def as_http_action(handler: Any) -> HttpAction:
    """ハンドラーを HttpAction に揃える"""
    if isinstance(handler, HttpAction):
        return handler
    if isinstance(handler, ActionDef):
        return HttpAction.from_action(handler)
    if callable(handler):
        return HttpAction(handler)
    raise ConfigurationError(
        f"Cannot adapt {type(handler).__name__} as an HTTP action.",
        details={"handler": repr(handler)},
    )

"""
ライフサイクル管理

1 回の Lambda 呼び出しについて ブートストラップ → アクション実行 → ティアダウン を
順番に実行し、完了コールバックをちょうど一度だけ呼び出します。
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set, Tuple

from .action import ActionDef, HttpAction
from .config import Environment
from .encoding import EncodedResult, encode_failure, encode_response
from .exceptions import (
    BootstrapError,
    HandlerInternalError,
    TeardownError,
    compound_error,
    describe_failure,
)
from .options import LifecycleOptions
from .request import RequestView
from .response import ResponseBuilder, Sent
from .sequence import TaskSequence

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Any], Any]
Outcome = Tuple[Optional[BaseException], Any]


class LifecycleState(Enum):
    """呼び出しの状態"""

    INIT = "init"
    BOOTSTRAPPING = "bootstrapping"
    INVOKING = "invoking"
    TEARING_DOWN = "tearing_down"
    DONE = "done"


_TRANSITIONS = {
    LifecycleState.INIT: {LifecycleState.BOOTSTRAPPING},
    LifecycleState.BOOTSTRAPPING: {
        LifecycleState.INVOKING,
        LifecycleState.TEARING_DOWN,
        LifecycleState.DONE,
    },
    LifecycleState.INVOKING: {LifecycleState.TEARING_DOWN, LifecycleState.DONE},
    LifecycleState.TEARING_DOWN: {LifecycleState.DONE},
    LifecycleState.DONE: set(),
}


class Completion:
    """完了コールバックをちょうど一度だけ呼び出す"""

    def __init__(self, callback: Optional[Callback] = None) -> None:
        self._callback = callback
        self.fired = False
        self.error: Optional[BaseException] = None
        self.result: Any = None

    def fire(self, error: Optional[BaseException], result: Any = None) -> bool:
        if self.fired:
            logger.warning("Completion already fired; ignoring duplicate result")
            return False

        self.fired = True
        self.error = error
        self.result = result
        if self._callback is not None:
            self._callback(error, result)
        return True


class Invocation:
    """1 回の呼び出しの状態を追跡する"""

    def __init__(self, event: Dict[str, Any], context: Any) -> None:
        self.event = event
        self.context = context
        self.request_id = getattr(context, "aws_request_id", None) or "-"
        self.state = LifecycleState.INIT
        self.history = [LifecycleState.INIT]

    def advance(self, state: LifecycleState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid lifecycle transition {self.state.value} -> {state.value}")
        logger.debug("[%s] %s -> %s", self.request_id, self.state.value, state.value)
        self.state = state
        self.history.append(state)


class Lifecycle(ABC):
    """ライフサイクルの共通処理"""

    def __init__(self, options: LifecycleOptions, env: Environment) -> None:
        self.options = options
        self.env = env
        self.bootstrap = TaskSequence("bootstrap", options.bootstrap)
        self.teardown = TaskSequence("teardown", options.teardown)

    async def execute(
        self, event: Dict[str, Any], context: Any, completion: Completion
    ) -> Invocation:
        """呼び出しを最後まで実行し、完了コールバックを呼び出す"""
        invocation = Invocation(event, context)
        try:
            error, result = await self.run(invocation)
        except Exception as e:
            logger.exception("[%s] Unexpected lifecycle failure", invocation.request_id)
            error, result = self.unexpected_failure(invocation, e)

        completion.fire(error, result)
        return invocation

    async def run(self, invocation: Invocation) -> Outcome:
        error: Optional[BaseException] = None
        result: Any = None

        invocation.advance(LifecycleState.BOOTSTRAPPING)
        try:
            await self.bootstrap.run(self.env)
        except Exception as e:
            logger.error("[%s] Bootstrap failed: %s", invocation.request_id, e, exc_info=True)
            error = self.bootstrap_failed(e)
        else:
            invocation.advance(LifecycleState.INVOKING)
            error, result = await self.invoke(invocation)

        if self.teardown:
            invocation.advance(LifecycleState.TEARING_DOWN)
            try:
                await self.teardown.run(self.env)
            except Exception as e:
                logger.error("[%s] Teardown failed: %s", invocation.request_id, e, exc_info=True)
                error = compound_error(error, TeardownError(e))

        invocation.advance(LifecycleState.DONE)
        return self.finalize(invocation, error, result)

    @abstractmethod
    def bootstrap_failed(self, error: Exception) -> BaseException:
        """ブートストラップの失敗を呼び出しのエラーに変換"""

    @abstractmethod
    async def invoke(self, invocation: Invocation) -> Outcome:
        """アクションを実行"""

    @abstractmethod
    def finalize(
        self, invocation: Invocation, error: Optional[BaseException], result: Any
    ) -> Outcome:
        """完了コールバックに渡す結果を組み立てる"""

    @abstractmethod
    def unexpected_failure(self, invocation: Invocation, error: Exception) -> Outcome:
        """想定外の失敗を結果に変換"""


class HttpLifecycle(Lifecycle):
    """HTTP イベント用のライフサイクル

    イベントから req / res を組み立ててアクションを呼び出し、
    res の終端操作で確定したレスポンスをエンコードします。
    失敗は常に 500 相当のエンベロープ（またはボディ）として返します。
    """

    def __init__(self, action: HttpAction, options: LifecycleOptions, env: Environment) -> None:
        super().__init__(options, env)
        self.action = action

    def bootstrap_failed(self, error: Exception) -> BaseException:
        return BootstrapError(error)

    async def invoke(self, invocation: Invocation) -> Outcome:
        loop = asyncio.get_running_loop()
        sent_future: "asyncio.Future[Sent]" = loop.create_future()

        def on_send(sent: Sent) -> None:
            if not sent_future.done():
                sent_future.set_result(sent)

        try:
            req = RequestView(invocation.event, invocation.context, self.env)
            res = ResponseBuilder(
                on_send, no_envelope=self.options.no_envelope, hooks=self.options.hooks
            )
            # アクション開始前から存在するタスクは送信待ちの対象外
            existing = asyncio.all_tasks()
            try:
                await self.action(req, res)
            except Exception:
                if not sent_future.done():
                    raise
                logger.error(
                    "[%s] Action raised after its response was sent",
                    invocation.request_id,
                    exc_info=True,
                )

            sent = await self._wait_for_send(sent_future, existing)
            encoded = encode_response(
                sent,
                invocation.event,
                cors=self.options.cors,
                no_envelope=self.options.no_envelope,
                context=res.context,
            )
        except Exception as e:
            logger.error("[%s] Action invocation failed: %s", invocation.request_id, e, exc_info=True)
            return HandlerInternalError(e), None

        return None, encoded

    async def _wait_for_send(
        self, sent_future: "asyncio.Future[Sent]", existing: Set["asyncio.Task[Any]"]
    ) -> Sent:
        # アクションが戻った後も、アクションが起動したタスクが残っていれば送信を待つ
        current = asyncio.current_task()
        while not sent_future.done():
            pending = [
                task
                for task in asyncio.all_tasks()
                if task is not current and task not in existing
            ]
            if not pending:
                raise RuntimeError("Action finished without sending a response")
            await asyncio.wait([sent_future, *pending], return_when=asyncio.FIRST_COMPLETED)
        return sent_future.result()

    def finalize(
        self, invocation: Invocation, error: Optional[BaseException], result: EncodedResult
    ) -> Outcome:
        if error is None:
            return None, result
        return None, encode_failure(invocation.event, str(error), self.options.no_envelope)

    def unexpected_failure(self, invocation: Invocation, error: Exception) -> Outcome:
        return None, encode_failure(
            invocation.event, describe_failure(error), self.options.no_envelope
        )


class GenericLifecycle(Lifecycle):
    """汎用イベント用のライフサイクル

    イベントとコンテキストをそのまま入力としてアクションに渡し、
    アクションの結果（または例外）を呼び出しの結果にします。
    """

    def __init__(self, action: ActionDef, options: LifecycleOptions, env: Environment) -> None:
        super().__init__(options, env)
        self.action = action

    def bootstrap_failed(self, error: Exception) -> BaseException:
        return error

    async def invoke(self, invocation: Invocation) -> Outcome:
        try:
            result = await self.action.run(
                {"event": invocation.event, "context": invocation.context}, self.env
            )
        except Exception as e:
            logger.info("[%s] Action exited with error: %s", invocation.request_id, e)
            return e, None
        return None, result

    def finalize(
        self, invocation: Invocation, error: Optional[BaseException], result: Any
    ) -> Outcome:
        return error, result

    def unexpected_failure(self, invocation: Invocation, error: Exception) -> Outcome:
        return error, None

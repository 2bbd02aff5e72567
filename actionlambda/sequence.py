"""
順次タスク実行

ブートストラップ・ティアダウンの関数を 1 つずつ順番に実行します。
"""

import inspect
import logging
from typing import Any, Callable, List, Sequence

logger = logging.getLogger(__name__)


async def call_maybe_async(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """同期関数・コルーチン関数のどちらでも呼び出して結果を待つ"""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class TaskSequence:
    """順序付きのタスクリスト

    各ステップは前のステップの完了後に開始されます。
    最初に失敗したステップで中断し、その例外をそのまま送出します。
    """

    def __init__(self, name: str, steps: Sequence[Callable[..., Any]]) -> None:
        self.name = name
        self.steps: List[Callable[..., Any]] = list(steps)

    def __bool__(self) -> bool:
        return bool(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    async def run(self, *args: Any) -> List[Any]:
        """全ステップを順番に実行し、各ステップの戻り値を返す"""
        results = []
        for index, step in enumerate(self.steps):
            logger.debug("Running %s step %d/%d", self.name, index + 1, len(self.steps))
            results.append(await call_maybe_async(step, *args))
        return results

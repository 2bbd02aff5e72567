"""
構造化エラーハンドリング

アダプター構築時・呼び出し時のエラー分類と、複合エラーメッセージの生成を提供します。
"""

import traceback
from dataclasses import dataclass
from typing import Any, Dict, Optional


def describe_failure(error: Any) -> Any:
    """失敗内容の説明を取得（例外ならトレースバック、それ以外は値そのもの）"""
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return error


@dataclass(eq=False)
class LifecycleError(Exception):
    """ライフサイクルエラーの基底クラス"""

    message: str
    stage: str = "invoke"
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        """初期化後の処理"""
        if self.error_code is None:
            self.error_code = f"ERR_{self.stage.upper()}"

        if self.details is None:
            self.details = {}

        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式に変換"""
        result: Dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
            "stage": self.stage,
        }

        if self.details:
            result["details"] = self.details

        return result


class ConfigurationError(LifecycleError):
    """アダプター構築時の設定エラー"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message, stage="configure", error_code="CONFIGURATION_ERROR", details=details
        )


class BodyParseError(LifecycleError):
    """ボディのパースエラー（ローカルで回復するため外部には送出されない）"""

    def __init__(self, message: str = "Request body is not valid JSON"):
        super().__init__(message=message, stage="normalize", error_code="BODY_PARSE_ERROR")


class _WrappedStageError(LifecycleError):
    """元の例外を包むステージエラーの共通処理"""

    stage_name = "invoke"
    code = "ERR_INVOKE"

    def __init__(self, original: BaseException, message: Optional[str] = None):
        super().__init__(
            message=message if message is not None else describe_failure(original),
            stage=self.stage_name,
            error_code=self.code,
            details={"type": type(original).__name__, "reason": str(original)},
        )
        self.__cause__ = original
        self.original = original


class BootstrapError(_WrappedStageError):
    """ブートストラップ処理の失敗"""

    stage_name = "bootstrap"
    code = "BOOTSTRAP_ERROR"


class HandlerInternalError(_WrappedStageError):
    """ハンドラー呼び出し中にアダプター側で発生したエラー"""

    stage_name = "invoke"
    code = "HANDLER_INTERNAL_ERROR"


class TeardownError(_WrappedStageError):
    """ティアダウン処理の失敗"""

    stage_name = "teardown"
    code = "TEARDOWN_ERROR"


def compound_error(
    prior: Optional[BaseException], teardown_error: TeardownError
) -> LifecycleError:
    """ティアダウンのエラーを既存のエラーに追記する

    既存のエラーがなければティアダウンのエラーをそのまま返します。
    既存のエラーがある場合は「既存のメッセージ」「ティアダウンのメッセージ」の順で
    改行区切りに連結し、既存エラーの種類を保ったまま返します。
    """
    if prior is None:
        return teardown_error

    prior_message = str(prior) if isinstance(prior, LifecycleError) else describe_failure(prior)
    message = f"{prior_message}\n{teardown_error.message}"

    if isinstance(prior, _WrappedStageError):
        combined: LifecycleError = type(prior)(prior.original, message=message)
    else:
        combined = LifecycleError(message=message, stage="teardown", error_code="COMPOUND_ERROR")
        combined.__cause__ = prior

    combined.details = {**(combined.details or {}), "teardown": teardown_error.details}
    return combined

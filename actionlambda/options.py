"""
ライフサイクル設定

as_lambda に渡すオプションを正規化します。
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from .cors import CORSConfig
from .exceptions import ConfigurationError

EVENT_TYPE_HTTP = "http"
EVENT_TYPE_GENERIC = "generic"
EVENT_TYPES = (EVENT_TYPE_HTTP, EVENT_TYPE_GENERIC)

Step = Callable[..., Any]
StepsOption = Union[Step, Sequence[Step], None]
ServerErrorHook = Callable[[Any, Callable[[Any], None]], Any]


def normalize_steps(steps: StepsOption, name: str) -> List[Step]:
    """関数または関数のリストをリストに揃える"""
    if steps is None:
        return []
    if callable(steps):
        return [steps]
    if isinstance(steps, (list, tuple)):
        for step in steps:
            if not callable(step):
                raise ConfigurationError(
                    f"Every `{name}` step must be callable, got {type(step).__name__}.",
                    details={"option": name},
                )
        return list(steps)
    raise ConfigurationError(
        f"`{name}` must be a function or a list of functions.", details={"option": name}
    )


@dataclass
class LifecycleHooks:
    """ライフサイクルフック"""

    server_error: Optional[ServerErrorHook] = None

    @classmethod
    def from_value(cls, value: Any) -> Optional["LifecycleHooks"]:
        if value is None or isinstance(value, LifecycleHooks):
            return value
        if isinstance(value, Mapping):
            return cls(server_error=value.get("server_error", value.get("serverError")))
        raise ConfigurationError("`hooks` must be a mapping.", details={"option": "hooks"})


@dataclass
class LifecycleOptions:
    """アダプターの設定"""

    event_type: str = EVENT_TYPE_HTTP
    cors: Optional[CORSConfig] = None
    bootstrap: List[Step] = field(default_factory=list)
    teardown: List[Step] = field(default_factory=list)
    no_envelope: bool = False
    hooks: Optional[LifecycleHooks] = None

    def __post_init__(self) -> None:
        """初期化後の処理"""
        if self.event_type not in EVENT_TYPES:
            raise ConfigurationError(
                f"Unknown event type `{self.event_type}`; expected one of {', '.join(EVENT_TYPES)}.",
                details={"option": "event_type"},
            )

        if isinstance(self.cors, Mapping):
            self.cors = CORSConfig.from_dict(self.cors)
        elif self.cors is not None and not isinstance(self.cors, CORSConfig):
            raise ConfigurationError(
                "`cors` must be a CORSConfig or a mapping.", details={"option": "cors"}
            )

        self.bootstrap = normalize_steps(self.bootstrap, "bootstrap")
        self.teardown = normalize_steps(self.teardown, "teardown")
        self.hooks = LifecycleHooks.from_value(self.hooks)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]] = None) -> "LifecycleOptions":
        """辞書（camelCase も可）から設定を作成"""
        data = data or {}
        return cls(
            event_type=data.get("event_type", data.get("eventType", EVENT_TYPE_HTTP)),
            cors=data.get("cors"),
            bootstrap=data.get("bootstrap"),
            teardown=data.get("teardown"),
            no_envelope=bool(data.get("no_envelope", data.get("noEnvelope", False))),
            hooks=data.get("hooks"),
        )

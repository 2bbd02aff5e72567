"""
actionlambda

宣言的なアクションを AWS Lambda のハンドラーとして動かすアダプター

使用例:
    from actionlambda import as_lambda, action

    @action(inputs={"name": {"example": "world"}})
    def hello(inputs, env):
        return {"message": f"Hello {inputs.get('name', 'world')}!"}

    lambda_handler = as_lambda(hello, cors={"origin": "*"})
"""

from .core import LambdaAdapter, as_lambda, select_adaptation, validate_generic_action
from .action import ActionDef, ActionExit, HttpAction, InputDef, action, as_http_action
from .request import RequestView
from .response import ResponseBuilder, Building, Sent
from .encoding import encode_response, encode_failure
from .cors import CORSConfig, create_cors_config
from .options import LifecycleOptions, LifecycleHooks
from .config import Environment, load_env_config
from .lifecycle import Completion, LifecycleState
from .sequence import TaskSequence
from .exceptions import (
    LifecycleError,
    ConfigurationError,
    BodyParseError,
    BootstrapError,
    HandlerInternalError,
    TeardownError,
)

__version__ = "0.1.0"

__all__ = [
    "as_lambda",
    "LambdaAdapter",
    "select_adaptation",
    "validate_generic_action",
    "ActionDef",
    "ActionExit",
    "HttpAction",
    "InputDef",
    "action",
    "as_http_action",
    "RequestView",
    "ResponseBuilder",
    "Building",
    "Sent",
    "encode_response",
    "encode_failure",
    "CORSConfig",
    "create_cors_config",
    "LifecycleOptions",
    "LifecycleHooks",
    "Environment",
    "load_env_config",
    "Completion",
    "LifecycleState",
    "TaskSequence",
    "LifecycleError",
    "ConfigurationError",
    "BodyParseError",
    "BootstrapError",
    "HandlerInternalError",
    "TeardownError",
]

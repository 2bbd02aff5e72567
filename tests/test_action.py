"""
アクション定義のテスト
"""

import json

import pytest

from actionlambda import (
    ActionDef,
    ActionExit,
    ConfigurationError,
    Environment,
    HttpAction,
    InputDef,
    action,
    as_http_action,
    as_lambda,
)


def create_test_event(body=None, path_params=None, query_params=None):
    """テスト用のイベントを作成"""
    return {
        "httpMethod": "POST",
        "path": "/",
        "pathParameters": path_params,
        "queryStringParameters": query_params,
        "headers": {},
        "body": body,
    }


class TestActionDef:
    """ActionDef のテスト"""

    def test_inputs_are_normalized(self):
        """辞書形式の入力定義が InputDef になるテスト"""
        definition = ActionDef(fn=lambda inputs, env: None, inputs={"name": {"example": "x"}})

        assert isinstance(definition.inputs["name"], InputDef)
        assert definition.inputs["name"].example == "x"
        assert definition.friendly_name == "<lambda>"

    def test_invalid_input_definition(self):
        """不正な入力定義のテスト"""
        with pytest.raises(ConfigurationError):
            ActionDef(fn=lambda inputs, env: None, inputs={"name": "string"})

    def test_decorator(self):
        """action デコレータのテスト"""

        @action(inputs={"id": {"example": "1"}}, exits={"notFound": 404}, description="Find")
        def find_user(inputs, env):
            return {"id": inputs["id"]}

        assert isinstance(find_user, ActionDef)
        assert find_user.friendly_name == "find_user"
        assert find_user.exits == {"notFound": 404}
        assert find_user.description == "Find"


class TestAsHttpAction:
    """as_http_action のテスト"""

    def test_http_action_is_kept(self):
        """ラップ済みのアクションはそのまま使われるテスト"""
        wrapped = HttpAction(lambda req, res: res.send("ok"))

        assert as_http_action(wrapped) is wrapped

    def test_callable_is_wrapped(self):
        """関数が HttpAction になるテスト"""

        def handler(req, res):
            res.send("ok")

        wrapped = as_http_action(handler)

        assert isinstance(wrapped, HttpAction)
        assert wrapped.handler is handler
        assert wrapped.name == "handler"

    def test_invalid_handler(self):
        """呼び出せないハンドラーのテスト"""
        with pytest.raises(ConfigurationError):
            as_http_action({"not": "callable"})


class TestActionOverHttp:
    """ActionDef を HTTP イベントで実行するテスト"""

    def test_inputs_from_request(self):
        """入力がリクエストから集められるテスト"""

        @action(inputs={"id": {"example": "1"}, "name": {"example": "x"}, "sort": {"example": "a"}})
        def echo(inputs, env):
            return inputs

        handler = as_lambda(echo, env=Environment())
        event = create_test_event(
            body=json.dumps({"name": "Alice"}), path_params={"id": "7"}, query_params={"x": "1"}
        )

        result = handler(event, None)

        assert result["statusCode"] == 200
        assert json.loads(result["body"]) == {"id": "7", "name": "Alice"}

    def test_async_action(self):
        """コルーチン関数のアクションのテスト"""

        @action()
        async def ping(inputs, env):
            return {"pong": env.get("region")}

        handler = as_lambda(ping, env=Environment(config={"region": "us-east-1"}))

        result = handler(create_test_event(), None)

        assert result["body"] == '{"pong":"us-east-1"}'

    def test_no_output_sends_ok(self):
        """出力なしのアクションは 200 OK を返すテスト"""

        @action()
        def noop(inputs, env):
            return None

        result = as_lambda(noop, env=Environment())(create_test_event(), None)

        assert result["statusCode"] == 200
        assert result["body"] == "OK"

    def test_declared_exit(self):
        """宣言された出口のステータスコードのテスト"""

        @action(exits={"notFound": 404, "conflict": 409})
        def find(inputs, env):
            raise ActionExit("notFound")

        @action(exits={"conflict": 409})
        def create(inputs, env):
            raise ActionExit("conflict", {"reason": "exists"})

        result = as_lambda(find, env=Environment())(create_test_event(), None)
        assert result["statusCode"] == 404
        assert result["body"] == "Not Found"

        result = as_lambda(create, env=Environment())(create_test_event(), None)
        assert result["statusCode"] == 409
        assert result["body"] == '{"reason":"exists"}'

    def test_undeclared_exit_is_server_error(self):
        """宣言されていない出口は 500 になるテスト"""

        @action()
        def broken(inputs, env):
            raise ActionExit("mystery")

        result = as_lambda(broken, env=Environment())(create_test_event(), None)

        assert result["statusCode"] == 500

    def test_error_exit_uses_server_error_hook(self):
        """アクションの失敗が server_error フックに渡されるテスト"""
        seen = []

        def hook(output, proceed):
            seen.append(output)
            proceed({"error": str(output)})

        @action()
        def failing(inputs, env):
            raise ValueError("invalid input")

        handler = as_lambda(failing, env=Environment(), hooks={"serverError": hook})
        result = handler(create_test_event(), None)

        assert result["statusCode"] == 500
        assert json.loads(result["body"]) == {"error": "invalid input"}
        assert isinstance(seen[0], ValueError)

"""
01. クイックスタート - 最もシンプルな actionlambda の使い方

req / res を受け取る関数と、宣言的なアクションの両方を Lambda ハンドラーにします。
"""

from actionlambda import ActionExit, action, as_lambda


def hello(req, res):
    """シンプルな Hello World"""
    res.json({"message": f"Hello, {req.param('name') or 'actionlambda'}!"})


@action(
    inputs={"user_id": {"example": "1", "required": True}},
    exits={"notFound": 404},
    description="ユーザーを取得する",
)
def get_user(inputs, env):
    if inputs.get("user_id") != "1":
        raise ActionExit("notFound")
    return {"user_id": inputs["user_id"], "name": "User 1"}


# Lambda エントリーポイント
hello_handler = as_lambda(hello, cors={"origin": "*"})
get_user_handler = as_lambda(get_user)


if __name__ == "__main__":
    # ローカルテスト
    print("=== actionlambda クイックスタート テスト ===")

    event = {
        "httpMethod": "GET",
        "path": "/",
        "queryStringParameters": {"name": "World"},
        "headers": {"Origin": "https://example.com"},
        "body": None,
    }
    print(hello_handler(event, None))

    event = {"httpMethod": "GET", "path": "/users/2", "pathParameters": {"user_id": "2"}}
    print(get_user_handler(event, None))

"""
03. 汎用イベント（SQS など）とブートストラップ / ティアダウン

イベントとコンテキストをそのまま受け取るアクションを定義し、
呼び出しの前後で接続の準備と後片付けを行います。
"""

import logging

from actionlambda import action, as_lambda

logging.basicConfig(level=logging.INFO)

CONNECTIONS = {}


async def connect(env):
    CONNECTIONS["db"] = env.get("db.url", "memory://")
    env.log.info("connected to %s", CONNECTIONS["db"])


def disconnect(env):
    CONNECTIONS.pop("db", None)
    env.log.info("disconnected")


@action(inputs={"event": {"example": {}}, "context": {"example": {}}})
def process_records(inputs, env):
    records = inputs["event"].get("Records", [])
    env.log.info("processing %d records with %s", len(records), CONNECTIONS["db"])
    return {"processed": len(records)}


lambda_handler = as_lambda(
    process_records,
    event_type="generic",
    bootstrap=[connect],
    teardown=disconnect,
)


if __name__ == "__main__":
    print(lambda_handler({"Records": [{"body": "a"}, {"body": "b"}]}, None))

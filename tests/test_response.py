"""
ResponseBuilder のテスト
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from actionlambda import ResponseBuilder, LifecycleHooks, Building, Sent


class TestResponseBuilder:
    """ResponseBuilder のテスト"""

    def create_builder(self, no_envelope=False, hooks=None):
        """送信結果を記録するビルダーを作成"""
        sent = []
        res = ResponseBuilder(sent.append, no_envelope=no_envelope, hooks=hooks)
        return res, sent

    def test_set_and_status_are_chainable(self):
        """set / status のチェーンテスト"""
        res, sent = self.create_builder()

        assert res.set("X-Custom", "1").status(201) is res
        assert isinstance(res.state, Building)
        assert res.state.status_code == 201
        assert res.state.headers == {"X-Custom": "1"}
        assert sent == []

    def test_json(self):
        """json の送信テスト"""
        res, sent = self.create_builder()
        res.status(201).json({"ok": True})

        assert len(sent) == 1
        assert sent[0].status_code == 201
        assert sent[0].headers["Content-Type"] == "application/json"
        assert sent[0].body == '{"ok":true}'
        assert isinstance(res.state, Sent)
        assert res.sent is True

    def test_json_without_envelope_passes_raw_value(self):
        """エンベロープなしでは値がそのまま渡されるテスト"""
        res, sent = self.create_builder(no_envelope=True)
        policy = {"principalId": "user", "policyDocument": {"Version": "2012-10-17"}}
        res.json(policy)

        assert sent[0].body is policy

    def test_send_string(self):
        """文字列送信のテスト"""
        res, sent = self.create_builder()
        res.send("<p>hello</p>")

        assert sent[0].headers["Content-Type"] == "text/html"
        assert sent[0].body == "<p>hello</p>"

    def test_send_primitives_pass_through(self):
        """数値・真偽値・None はそのまま送信されるテスト"""
        for value in [42, 1.5, True, False, None]:
            res, sent = self.create_builder()
            res.send(value)

            assert sent[0].body is value or sent[0].body == value
            assert "Content-Type" not in sent[0].headers

    def test_send_object(self):
        """辞書・リスト送信のテスト"""
        res, sent = self.create_builder()
        res.send([1, 2, 3])

        assert sent[0].headers["Content-Type"] == "application/json"
        assert sent[0].body == "[1,2,3]"

    def test_send_status(self):
        """send_status のテスト"""
        res, sent = self.create_builder()
        res.send_status(404)

        assert sent[0].status_code == 404
        assert sent[0].body == "Not Found"

    def test_send_status_unknown_code(self):
        """未知のステータスコードのテスト"""
        res, sent = self.create_builder()
        res.sendStatus(599)

        assert sent[0].status_code == 599
        assert sent[0].body == "599"

    def test_convenience_wrappers(self):
        """bad_request / forbidden / not_found のテスト"""
        expected = {
            "bad_request": (400, "Bad Request"),
            "forbidden": (403, "Forbidden"),
            "not_found": (404, "Not Found"),
            "badRequest": (400, "Bad Request"),
            "notFound": (404, "Not Found"),
        }
        for name, (status_code, phrase) in expected.items():
            res, sent = self.create_builder()
            getattr(res, name)({"ignored": True})

            assert sent[0].status_code == status_code
            assert sent[0].body == phrase

    def test_server_error_default(self):
        """server_error のデフォルト動作テスト"""
        res, sent = self.create_builder()
        try:
            raise ValueError("boom")
        except ValueError as e:
            res.server_error(e)

        assert sent[0].status_code == 500
        assert sent[0].headers["Content-Type"] == "application/json"
        assert "Traceback" in sent[0].body
        assert "ValueError: boom" in sent[0].body

    def test_server_error_hook(self):
        """server_error フックへの委譲テスト"""
        calls = []

        def hook(output, proceed):
            calls.append(output)
            proceed({"message": "custom"})

        res, sent = self.create_builder(hooks=LifecycleHooks(server_error=hook))
        res.serverError("original")

        assert calls == ["original"]
        assert sent[0].status_code == 500
        assert sent[0].body == '{"message":"custom"}'

    def test_server_error_hook_failure_falls_back(self):
        """フック自体が失敗した場合のフォールバックテスト"""

        def hook(output, proceed):
            raise RuntimeError("hook broke")

        res, sent = self.create_builder(hooks=LifecycleHooks(server_error=hook))
        res.server_error("plain failure")

        assert len(sent) == 1
        assert sent[0].status_code == 500
        assert sent[0].body == '"plain failure"'

    def test_operations_after_send_are_ignored(self):
        """送信後の操作が無視されるテスト"""
        res, sent = self.create_builder()
        res.json({"first": True})

        res.set("X-Late", "1").status(418)
        res.json({"second": True})
        res.send("again")
        res.send_status(500)
        res.server_error("late")

        assert len(sent) == 1
        assert sent[0].status_code == 200
        assert sent[0].body == '{"first":true}'
        assert "X-Late" not in sent[0].headers

    def test_response_context(self):
        """レスポンスコンテキストのテスト"""
        res, _ = self.create_builder()
        res.context["stage"] = "prod"

        assert res.context == {"stage": "prod"}

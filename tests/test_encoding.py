"""
レスポンスエンコーダーのテスト
"""

import json

from actionlambda import Sent, CORSConfig, encode_response, encode_failure


class TestEncodeResponse:
    """encode_response のテスト"""

    def test_envelope(self):
        """エンベロープ形式のテスト"""
        sent = Sent(status_code=201, headers={"Content-Type": "application/json"}, body='{"a":1}')

        result = encode_response(sent, {"headers": {}}, context={"k": "v"})

        assert result == {
            "statusCode": 201,
            "headers": {"Content-Type": "application/json", "Content-Length": "7"},
            "body": '{"a":1}',
            "context": {"k": "v"},
        }

    def test_content_length_not_overridden(self):
        """明示された Content-Length が保持されるテスト"""
        sent = Sent(status_code=200, headers={"Content-Length": "999"}, body="abc")

        result = encode_response(sent, {})

        assert result["headers"]["Content-Length"] == "999"

    def test_content_length_matches_body(self):
        """Content-Length がボディの長さと一致するテスト"""
        for body in ["", "hello", "日本語テキスト", '{"nested":{"a":[1,2,3]}}']:
            sent = Sent(status_code=200, headers={}, body=body)
            result = encode_response(sent, {})
            assert result["headers"]["Content-Length"] == str(len(body))

    def test_content_length_for_non_string_bodies(self):
        """文字列以外のボディの Content-Length テスト"""
        cases = [(42, "2"), (True, "4"), (None, "4"), ({"a": 1}, "7")]
        for body, expected in cases:
            sent = Sent(status_code=200, headers={}, body=body)
            result = encode_response(sent, {})
            assert result["headers"]["Content-Length"] == expected

    def test_sent_headers_are_not_mutated(self):
        """Sent のヘッダーが変更されないテスト"""
        headers = {"X-A": "1"}
        sent = Sent(status_code=200, headers=headers, body="x")

        encode_response(sent, {"headers": {"Origin": "o"}}, cors=CORSConfig(origin="*"))

        assert headers == {"X-A": "1"}

    def test_no_envelope_returns_body(self):
        """エンベロープなしではボディのみが返るテスト"""
        body = {"principalId": "me", "policyDocument": {}}
        sent = Sent(status_code=403, headers={"X-Ignored": "1"}, body=body)

        result = encode_response(sent, {}, cors=CORSConfig(origin="*"), no_envelope=True)

        assert result is body

    def test_default_context(self):
        """コンテキスト未指定時は空の辞書になるテスト"""
        result = encode_response(Sent(status_code=200, headers={}, body=""), {})

        assert result["context"] == {}


class TestEncodeFailure:
    """encode_failure のテスト"""

    def test_envelope(self):
        """失敗時のエンベロープテスト"""
        event = {"path": "/x"}

        result = encode_failure(event, "Traceback ...\nRuntimeError: db down")

        assert result["statusCode"] == 500
        assert result["headers"] == {}
        body = json.loads(result["body"])
        assert body["event"] == event
        assert "db down" in body["error"]

    def test_no_envelope(self):
        """エンベロープなしの失敗テスト"""
        event = {"path": "/x"}

        result = encode_failure(event, "boom", no_envelope=True)

        assert result == {"event": event, "error": "boom"}

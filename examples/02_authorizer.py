"""
02. カスタムオーソライザー

noEnvelope を使ってポリシードキュメントをそのまま API Gateway に返します。
"""

from actionlambda import as_lambda


def authorize(req, res):
    token = req.authorization_token or ""
    effect = "Allow" if token == f"Bearer {req.env.get('auth.token', 'secret')}" else "Deny"

    res.json(
        {
            "principalId": "user",
            "policyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Action": "execute-api:Invoke",
                        "Effect": effect,
                        "Resource": req.event.get("methodArn", "*"),
                    }
                ],
            },
        }
    )


# actionlambda_auth__token=secret のように環境変数で設定できます
lambda_handler = as_lambda(authorize, no_envelope=True)


if __name__ == "__main__":
    event = {
        "type": "TOKEN",
        "authorizationToken": "Bearer secret",
        "methodArn": "arn:aws:execute-api:ap-northeast-1:123456789012:abc/prod/GET/",
    }
    print(lambda_handler(event, None))

from __future__ import annotations

import io
import json
from unittest.mock import MagicMock, patch

import pytest

from eduai.bedrock_client import (
    BedrockGateway,
    GatewayConfigurationError,
    create_bedrock_client,
    first_text,
)
from eduai.config import Settings


def make_settings(**overrides) -> Settings:
    base = {
        "aws_access_key_id": None,
        "aws_secret_access_key": None,
        "ecs_container_metadata_uri": None,
        "ecs_container_metadata_uri_v4": None,
        "node_env": "development",
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)


@patch("eduai.bedrock_client.boto3.client")
def test_ecs_uses_task_role(mock_client):
    settings = make_settings(ecs_container_metadata_uri_v4="http://169.254.170.2/v4/abc")
    create_bedrock_client(settings)

    mock_client.assert_called_once_with("bedrock-runtime", region_name="us-east-1")


@patch("eduai.bedrock_client.boto3.client")
def test_local_uses_static_keys(mock_client):
    settings = make_settings(aws_access_key_id="AKIA", aws_secret_access_key="secret")
    create_bedrock_client(settings)

    kwargs = mock_client.call_args.kwargs
    assert kwargs["aws_access_key_id"] == "AKIA"
    assert kwargs["aws_secret_access_key"] == "secret"


@patch("eduai.bedrock_client.boto3.client")
def test_missing_credentials_raise(mock_client):
    with pytest.raises(GatewayConfigurationError):
        create_bedrock_client(make_settings())
    mock_client.assert_not_called()


@patch("eduai.bedrock_client.boto3.client")
def test_build_phase_tolerates_missing_credentials(mock_client):
    create_bedrock_client(make_settings(node_env="build"))
    mock_client.assert_called_once_with("bedrock-runtime", region_name="us-east-1")


def test_gateway_caches_client_until_refresh():
    factory = MagicMock(side_effect=[MagicMock(name="first"), MagicMock(name="second")])
    gateway = BedrockGateway(make_settings(), client_factory=factory)

    first = gateway.initialize().client
    assert gateway.client is first
    assert factory.call_count == 1

    second = gateway.refresh()
    assert second is not first
    assert gateway.client is second
    assert factory.call_count == 2


def test_credential_mode():
    assert BedrockGateway(make_settings(ecs_container_metadata_uri="x")).credential_mode == "ambient"
    assert BedrockGateway(make_settings()).credential_mode == "static"


def test_invoke_text_sends_nova_request():
    client = MagicMock()
    body = {"output": {"message": {"content": [{"text": "quiz"}]}}}
    client.invoke_model.return_value = {"body": io.BytesIO(json.dumps(body).encode())}
    gateway = BedrockGateway(make_settings(), client_factory=lambda s: client)

    text = gateway.invoke_text("hello", max_tokens=300, temperature=0.7, top_p=0.9)

    assert text == "quiz"
    kwargs = client.invoke_model.call_args.kwargs
    assert kwargs["modelId"] == "amazon.nova-pro-v1:0"
    sent = json.loads(kwargs["body"])
    assert sent["messages"][0]["content"][0]["text"] == "hello"
    assert sent["inferenceConfig"] == {"maxTokens": 300, "temperature": 0.7, "topP": 0.9}


def test_invoke_with_max_new_tokens():
    client = MagicMock()
    client.invoke_model.return_value = {"body": io.BytesIO(b"{}")}
    gateway = BedrockGateway(make_settings(), client_factory=lambda s: client)

    gateway.invoke("p", max_tokens=4000, token_key="max_new_tokens")

    sent = json.loads(client.invoke_model.call_args.kwargs["body"])
    assert sent["inferenceConfig"]["max_new_tokens"] == 4000
    assert sent["inferenceConfig"]["top_p"] == 0.9


def test_invoke_with_system_and_history():
    client = MagicMock()
    client.invoke_model.return_value = {"body": io.BytesIO(b"{}")}
    gateway = BedrockGateway(make_settings(), client_factory=lambda s: client)

    gateway.invoke(
        "and mitosis?",
        system="You are a tutor.",
        history=[{"role": "user", "content": "what is meiosis?"}, {"role": "assistant", "content": "Cell division."}],
    )

    sent = json.loads(client.invoke_model.call_args.kwargs["body"])
    assert sent["system"] == [{"text": "You are a tutor."}]
    assert [m["role"] for m in sent["messages"]] == ["user", "assistant", "user"]
    assert sent["messages"][-1]["content"] == [{"text": "and mitosis?"}]


def test_invoke_without_system_omits_field():
    client = MagicMock()
    client.invoke_model.return_value = {"body": io.BytesIO(b"{}")}
    gateway = BedrockGateway(make_settings(), client_factory=lambda s: client)

    gateway.invoke("p")

    sent = json.loads(client.invoke_model.call_args.kwargs["body"])
    assert "system" not in sent
    assert len(sent["messages"]) == 1


def test_first_text_handles_missing_fields():
    assert first_text({}) is None
    assert first_text({"output": {"message": {"content": []}}}) is None
    assert first_text({"output": {"message": {"content": [{"text": "x"}]}}}) == "x"

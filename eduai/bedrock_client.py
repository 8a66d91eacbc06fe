from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import boto3
from fastapi import Request

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class GatewayConfigurationError(RuntimeError):
    """Raised when no usable credential source exists for Bedrock."""


def create_bedrock_client(settings: Settings):
    """
    Build a bedrock-runtime client.

    On ECS the task role supplies credentials through the default provider
    chain. Anywhere else the static key pair from the environment is used.
    """
    if settings.running_on_ecs:
        logger.info("ECS metadata endpoint detected; using task role credentials")
        return boto3.client("bedrock-runtime", region_name=settings.bedrock_region)

    if not (settings.aws_access_key_id and settings.aws_secret_access_key):
        if settings.is_build:
            logger.warning("AWS credentials not set; continuing because NODE_ENV=build")
            return boto3.client("bedrock-runtime", region_name=settings.bedrock_region)
        raise GatewayConfigurationError(
            "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set when not running on ECS"
        )

    logger.info("Using static AWS credentials from environment")
    return boto3.client(
        "bedrock-runtime",
        region_name=settings.bedrock_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


class BedrockGateway:
    """
    Process-wide handle to the inference service.

    Built once by the application lifespan and shared read-only between
    requests. `refresh()` is the only way to replace the cached client.
    """

    def __init__(self, settings: Settings | None = None, client_factory=create_bedrock_client):
        self.settings = settings or get_settings()
        self._client_factory = client_factory
        self._client = None

    def initialize(self) -> "BedrockGateway":
        if self._client is None:
            self._client = self._client_factory(self.settings)
        return self

    @property
    def client(self):
        if self._client is None:
            self.initialize()
        return self._client

    @property
    def initialized(self) -> bool:
        return self._client is not None

    @property
    def credential_mode(self) -> str:
        return "ambient" if self.settings.running_on_ecs else "static"

    def refresh(self):
        """Drop the cached client and build a new one (e.g. after key rotation)."""
        self._client = None
        return self.initialize().client

    def invoke(
        self,
        prompt: str,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        top_p: float = 0.9,
        token_key: str = "maxTokens",
        system: Optional[str] = None,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> Dict[str, Any]:
        """
        Send a Nova request and return the decoded response body.

        `token_key` selects the name of the length limit in inferenceConfig;
        the exam prompts were tuned with `max_new_tokens`. `history` holds
        earlier `{role, content}` turns placed before `prompt`.
        """
        messages = [
            {"role": turn["role"], "content": [{"text": turn["content"]}]}
            for turn in history or []
        ]
        messages.append({"role": "user", "content": [{"text": prompt}]})
        body: Dict[str, Any] = {
            "messages": messages,
            "inferenceConfig": {
                token_key: max_tokens,
                "temperature": temperature,
                "topP" if token_key == "maxTokens" else "top_p": top_p,
            },
        }
        if system:
            body["system"] = [{"text": system}]
        logger.info("Invoking %s (%s=%d)", self.settings.bedrock_model_id, token_key, max_tokens)
        response = self.client.invoke_model(
            modelId=self.settings.bedrock_model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(body),
        )
        return json.loads(response["body"].read())

    def invoke_text(self, prompt: str, **kwargs) -> Optional[str]:
        """Like `invoke`, but returns only the first text block of the reply (or None)."""
        return first_text(self.invoke(prompt, **kwargs))


def first_text(response_body: Dict[str, Any]) -> Optional[str]:
    """Pull output.message.content[0].text out of a Nova response body."""
    try:
        content = response_body["output"]["message"]["content"]
        return content[0].get("text")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def get_gateway(request: Request) -> BedrockGateway:
    """Dependency returning the gateway built by the application lifespan."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("Bedrock gateway has not been initialized")
    return gateway

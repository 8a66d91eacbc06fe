from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Union

from dotenv import load_dotenv
from fastapi import Depends, FastAPI

from .bedrock_client import BedrockGateway, get_gateway
from .config import get_settings
from .routes import analyze, auth, chat, exam, history, pdf, recommend, study

# Load environment variables (AWS credentials, COGNITO_CLIENT_ID, DATABASE_URL in .env)
load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("eduai")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Composition root: the gateway is built once here and shared by all requests
    settings = get_settings()
    app.state.gateway = BedrockGateway(settings).initialize()
    logger.info(
        "Bedrock gateway ready (credentials=%s, region=%s, model=%s)",
        app.state.gateway.credential_mode,
        settings.bedrock_region,
        settings.bedrock_model_id,
    )
    yield


app = FastAPI(title="EduAI Backend", version="0.1.0", lifespan=lifespan)
app.include_router(analyze.router)
app.include_router(auth.router)
app.include_router(pdf.router)
app.include_router(exam.router)
app.include_router(recommend.router)
app.include_router(study.router)
app.include_router(chat.router)
app.include_router(history.router)


@app.get("/health")
def health() -> Dict[str, str]:
    """
    Health check endpoint to verify service status.

    Returns:
        Dict[str, str]: {"status": "ok"} if running.
    """
    return {"status": "ok"}


@app.get("/config")
def config_preview(gateway: BedrockGateway = Depends(get_gateway)) -> Dict[str, Union[str, bool]]:
    """
    Endpoint to preview current configuration (safely).

    Returns:
        Dict[str, Union[str, bool]]: Credential mode, region and model, plus which integrations are configured.
    """
    settings = get_settings()
    return {
        "credential_mode": gateway.credential_mode,
        "gateway_initialized": gateway.initialized,
        "bedrock_region": settings.bedrock_region,
        "bedrock_model_id": settings.bedrock_model_id,
        "cognito_configured": bool(settings.cognito_client_id),
        "database_ssl": settings.db_ssl,
    }

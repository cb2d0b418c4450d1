"""Health endpoint — reports provider configuration presence."""

from fastapi import APIRouter, Depends

from sourcevalidator.api.deps import get_settings
from sourcevalidator.api.models import HealthResponse, ProviderStatus
from sourcevalidator.config import Config
from sourcevalidator.judging.registry import default_provider_name

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health_check(config: Config = Depends(get_settings)):
    # Models are the effective ones, defaults included, never null
    return HealthResponse(
        ok=True,
        provider=default_provider_name(config.llm_provider).value,
        openai=ProviderStatus(
            configured=config.has_openai_key, model=config.openai_model
        ),
        huggingface=ProviderStatus(
            configured=config.has_huggingface_key, model=config.huggingface_model
        ),
    )

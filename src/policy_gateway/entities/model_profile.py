"""Model profiles for the Azure AI deployments the gateway can target."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

AZURE_OPENAI_API_VERSION = "2025-01-01-preview"
AZURE_AI_INFERENCE_API_VERSION = "2024-05-01-preview"


class ModelProfile(str, Enum):
    """Supported model deployments."""

    GPT41_NANO = "gpt-4.1-nano"
    GPT41_MYAGENT = "gpt-4.1-myagent"
    GPT5_MINI2 = "gpt-5-mini-2"
    DEEPSEEK_R1 = "DeepSeek-R1"


@dataclass(frozen=True)
class ModelConfig:
    """Request settings for one model profile.

    Attributes:
        route: Path (with query) appended to the service endpoint
        params: Top-level body parameters merged into every request
        headers: Extra HTTP headers besides auth and content type
    """

    route: str
    params: Mapping[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)

    def url(self, endpoint: str) -> str:
        return endpoint.rstrip("/") + self.route


def _deployment_route(deployment: str) -> str:
    return (
        f"/openai/deployments/{deployment}/chat/completions"
        f"?api-version={AZURE_OPENAI_API_VERSION}"
    )


MODEL_CONFIGS: Mapping[ModelProfile, ModelConfig] = MappingProxyType(
    {
        ModelProfile.GPT41_NANO: ModelConfig(
            route=_deployment_route(ModelProfile.GPT41_NANO.value),
            params={
                "max_completion_tokens": 13107,
                "temperature": 1,
                "top_p": 1,
                "frequency_penalty": 0.0,
                "presence_penalty": 0.0,
                "model": ModelProfile.GPT41_NANO.value,
            },
        ),
        ModelProfile.GPT41_MYAGENT: ModelConfig(
            route=_deployment_route(ModelProfile.GPT41_MYAGENT.value),
            params={
                "max_completion_tokens": 13107,
                "temperature": 1,
                "top_p": 1,
                "frequency_penalty": 0.0,
                "presence_penalty": 0.0,
                "model": ModelProfile.GPT41_MYAGENT.value,
            },
        ),
        # gpt-5 deployments reject sampling parameters
        ModelProfile.GPT5_MINI2: ModelConfig(
            route=_deployment_route(ModelProfile.GPT5_MINI2.value),
            params={
                "max_completion_tokens": 16384,
                "model": ModelProfile.GPT5_MINI2.value,
            },
        ),
        ModelProfile.DEEPSEEK_R1: ModelConfig(
            route=f"/models/chat/completions?api-version={AZURE_AI_INFERENCE_API_VERSION}",
            params={
                "max_tokens": 2048,
                "model": ModelProfile.DEEPSEEK_R1.value,
            },
            headers={"azureml-model-deployment": "gpt-4"},
        ),
    }
)


def get_model_config(profile: ModelProfile | str) -> ModelConfig:
    """Look up the request settings for a profile.

    Raises:
        ValueError: If the profile name is unknown
    """
    return MODEL_CONFIGS[ModelProfile(profile)]

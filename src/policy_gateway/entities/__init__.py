"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntryEntity
from .model_profile import MODEL_CONFIGS, ModelConfig, ModelProfile, get_model_config
from .prompt_template import PromptTemplate
from .transform_result import NotFound, ParseError, Success, TransformResult, UpstreamError

__all__ = [
    "CacheEntryEntity",
    "MODEL_CONFIGS",
    "ModelConfig",
    "ModelProfile",
    "get_model_config",
    "PromptTemplate",
    "Success",
    "NotFound",
    "UpstreamError",
    "ParseError",
    "TransformResult",
]

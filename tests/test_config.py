"""
Tests for settings, model profiles and the prompt catalogue.
"""

import pytest

from policy_gateway.config import Settings
from policy_gateway.entities import ModelProfile
from policy_gateway.exceptions import ConfigurationError
from policy_gateway.prompts import (
    IBM_POLICY_DATA_TRANSFORMER_PROMPT,
    LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE,
    ibm_policy_template,
    life_policy_detail_template,
    optimized_ibm_policy_template,
    read_reference_text,
    unstructured_policy_template,
)


@pytest.mark.parametrize(
    "overrides",
    [
        {"model_profile": "gpt-3"},
        {"cache_ttl": 0},
        {"upstream_timeout": -1},
        {"cache_sweep_interval": 0},
        {"watcher_poll_interval": 0},
        {"cache_backend": "memcached"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ConfigurationError):
        Settings(**overrides)


def test_profile_resolution():
    settings = Settings(model_profile="gpt-5-mini-2")
    assert settings.profile is ModelProfile.GPT5_MINI2


def test_require_api_key():
    assert Settings(azure_openai_api_key="secret").require_api_key() == "secret"
    with pytest.raises(ConfigurationError):
        Settings(azure_openai_api_key="").require_api_key()


def test_unstructured_template_uses_profile_params():
    template = unstructured_policy_template(ModelProfile.GPT41_NANO)

    assert len(template.system_messages) == 1
    assert template.model_params["model"] == "gpt-4.1-nano"
    assert template.model_params["max_completion_tokens"] == 13107


def test_ibm_template_sends_three_system_messages_in_order():
    template = ibm_policy_template("01-02 recordType")

    assert template.system_messages == (
        "01-02 recordType",
        LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE,
        IBM_POLICY_DATA_TRANSFORMER_PROMPT,
    )


def test_alternative_ibm_templates():
    detail = life_policy_detail_template("DeepSeek-R1")
    optimized = optimized_ibm_policy_template()

    assert detail.model_params["max_tokens"] == 2048
    assert len(optimized.system_messages) == 1
    assert detail.fingerprint != optimized.fingerprint


def test_read_reference_text(tmp_path):
    schema = tmp_path / "schema.txt"
    schema.write_text("01-02 recordType\n", encoding="utf-8")
    (tmp_path / "empty.txt").write_text("", encoding="utf-8")

    assert read_reference_text(schema, "schema") == "01-02 recordType\n"
    with pytest.raises(ConfigurationError):
        read_reference_text(tmp_path / "missing.txt", "schema")
    with pytest.raises(ConfigurationError):
        read_reference_text(tmp_path / "empty.txt", "schema")

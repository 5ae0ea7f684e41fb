"""Provider 与模型配置。

记录每个 Provider 的基础 URL 与已知模型的默认参数，
Transport 在请求未显式给出 max_tokens 时使用这里的默认值。"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional


@dataclass
class ModelConfig:
    """单个模型的配置。"""

    name: str
    max_tokens: int
    default_temperature: float


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]

    def model(self, name: str) -> Optional[ModelConfig]:
        return self.models.get(name)


OPENAI_CONFIG = ProviderConfig(
    name="openai",
    base_url="https://api.openai.com/v1",
    models={
        "gpt-3.5-turbo": ModelConfig(name="gpt-3.5-turbo", max_tokens=4096, default_temperature=0.7),
        "gpt-4": ModelConfig(name="gpt-4", max_tokens=8192, default_temperature=0.7),
        "gpt-4o-mini": ModelConfig(name="gpt-4o-mini", max_tokens=16384, default_temperature=0.7),
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "openai": OPENAI_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")

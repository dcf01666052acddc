"""Coze 区域端点配置。

国内站与国际站使用不同域名，接口路径一致：

- cn:  https://api.coze.cn/v3
- com: https://api.coze.com/v3

上层只关心区域名，具体用哪个基础URL由这里集中配置，settings.coze_base_url 可整体覆盖。"""

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass
class RegionConfig:
    """单个区域的端点配置。"""

    name: str
    base_url: str


COZE_CN = RegionConfig(name="cn", base_url="https://api.coze.cn/v3")
COZE_COM = RegionConfig(name="com", base_url="https://api.coze.com/v3")


REGION_REGISTRY: Mapping[str, RegionConfig] = {
    "cn": COZE_CN,
    "com": COZE_COM,
}


def get_region_config(name: str) -> RegionConfig:
    """根据名称获取 RegionConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in REGION_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown Coze region: {name!r}")


def resolve_base_url(region: str, override: Optional[str] = None) -> str:
    if override:
        return override.rstrip("/")
    return get_region_config(region).base_url

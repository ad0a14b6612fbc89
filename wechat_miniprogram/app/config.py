"""
Configuration for the mini-program component.
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from shared.config import BaseConfig


class MiniProgramSettings(BaseConfig):
    """Mini-program API settings."""

    model_config = SettingsConfigDict(env_prefix="WECHAT_MINIPROGRAM_")

    api_base_url: str = Field(default="https://api.weixin.qq.com")
    http_timeout: float = Field(default=10.0, gt=0)

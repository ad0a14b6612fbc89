"""
Shared utilities for the WeChat toolkit.

This package aggregates common building blocks consumed by both components:

- config: Settings via pydantic-settings
- logging: Structured logging with call correlation
- errors: Canonical error types and responses

Any cross-component logic should live here to avoid import cycles. Do not
import from wechat_cache or wechat_miniprogram into shared/.
"""

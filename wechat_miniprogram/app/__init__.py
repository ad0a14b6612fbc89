"""
Mini-program component package for the WeChat toolkit.

Structure:
- app.config: API settings.
- app.context: Access-token provider and HTTP client settings shared by APIs.
- app.util: JSON-over-HTTP helpers and errcode handling.
- app.message: Dynamic message (activity) endpoints.
- app.miniprogram: Entry point handing out API clients.
"""

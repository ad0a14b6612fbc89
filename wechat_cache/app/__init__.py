"""
Cache component package for the WeChat toolkit.

Structure:
- app.config: Redis and SSH gateway settings.
- app.tunnel: SSH-tunneled dialer producing streams for arbitrary clients.
- app.cache: Redis-backed cache client and the tunneled Redis connection.
"""

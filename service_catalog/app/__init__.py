"""
Media catalog gateway service package.

The gateway fronts an unstable upstream catalog provider, adding:
- Read-through caching with per-resource TTLs (Redis or in-process)
- A stable response schema for trending, detail, stream and search data
- Bearer token checks outside development
- Circuit-breaking and retries for upstream calls
"""

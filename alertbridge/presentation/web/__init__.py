"""
Web presentation layer for alertbridge.

Architectural Intent:
- Exposes the REST ingestion endpoint and read-only record lookups
- Uses Python stdlib only (http.server + asyncio) -- no external dependencies
- Complements the CLI with a network-accessible entry point
"""

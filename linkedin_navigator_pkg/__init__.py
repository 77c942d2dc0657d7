"""LinkedIn and Sales Navigator access over two transports.

Small, well-defined modules: an authenticated client for LinkedIn's internal
API, a shared stealth browser for the Sales Navigator and messaging UI, and
a fallback orchestrator that picks between them per capability. The same
capability registry is served over MCP (stdio) and HTTP.
"""

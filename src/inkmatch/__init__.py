"""
InkMatch - tattoo design previews over MCP

Packages:
    config: Settings and logging
    generation: Replicate job submission and polling
    tools: Tool registry and the InkMatch tools
    mcp: Sessions, per-session transports and the HTTP router
"""

APP_NAME = "inkmatch"
__version__ = "1.0.0"

__all__ = ["APP_NAME", "__version__"]

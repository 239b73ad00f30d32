"""SAM.gov opportunity search exposed as MCP-style tools over HTTP."""

__version__ = "0.1.0"

from sam_mcp.api import create_app

# Configured from the Config Store on startup; run with: uvicorn main:app
app = create_app()

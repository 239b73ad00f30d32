import os

import click
import uvicorn
from loguru import logger

from sam_mcp.api import create_app
from sam_mcp.configuration import ServerSettings, load_settings, setup_config_store
from sam_mcp.utility import configure_logging


def check_settings(settings: ServerSettings) -> None:
    """Log the startup warnings and fail when TLS is not configured"""
    if not settings.token:
        logger.warning("MCP_TOKEN not set; endpoints will be open. Set MCP_TOKEN to secure.")
    if not settings.sam.api_key:
        logger.info("SAM_API_KEY not set; sam_search will use mock data until configured.")
    if not settings.tls.is_configured:
        logger.error("TLS_CERT_FILE and TLS_KEY_FILE are required. Provide TLS cert/key or run behind a TLS-terminating proxy.")
        raise click.ClickException("TLS certificate and key are required")
    for path in (settings.tls.cert_file, settings.tls.key_file):
        if not os.path.isfile(path):
            raise click.ClickException(f"TLS file not found: {path}")


@click.command()
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default="config/config.yml", show_default=True, help="Configuration file")
@click.option("--env-file", type=click.Path(dir_okay=False), default=".env", show_default=True, help="dotenv file with secrets")
@click.option("--host", type=str, default=None, help="Override the listen address")
@click.option("--port", type=int, default=None, help="Override the listen port")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(config_file: str, env_file: str, host: str | None, port: int | None, verbose: bool) -> None:
    """
    Start the SAM MCP HTTP server over TLS.

    \b
    Examples:
      sam-mcp-http --config config/config.yml
      PORT=8443 MCP_TOKEN=secret sam-mcp-http -v
    """
    setup_config_store(config_file, env_filename=env_file)
    if verbose:
        configure_logging({"level": "DEBUG"})

    settings: ServerSettings = load_settings()
    overrides: dict[str, str | int] = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    check_settings(settings)

    logger.info(f"Starting MCP HTTP server on {settings.host}:{settings.port}")
    logger.info("TLS enabled: using provided certificate and key")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        ssl_certfile=settings.tls.cert_file,
        ssl_keyfile=settings.tls.key_file,
        log_level="debug" if verbose else "info",
    )


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter

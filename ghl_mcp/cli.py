"""Command-line interface for the GoHighLevel MCP Server."""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from . import __version__ as PACKAGE_VERSION
from .app import build_registry, create_app
from .client import GHLApiClient, GHLApiError
from .config import Config, ConfigError
from .handlers import default_groups
from .mcp import DuplicateToolError, ToolRegistry

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

_SECRET_KEYS = {"access_token"}


class CLI:
    """Command-line interface for running and inspecting the MCP server."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the CLI.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = config_path
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = Config(self.config_path)
        return self._config

    def parse_args(self, args: List[str]) -> argparse.Namespace:
        """Parse command line arguments.

        Args:
            args: Command line arguments

        Returns:
            Parsed arguments
        """
        parser = self._build_parser()
        return parser.parse_args(args)

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="GoHighLevel MCP Server - remote Model Context Protocol bridge"
        )
        parser.add_argument(
            "--version", action="version", version=f"%(prog)s {PACKAGE_VERSION}"
        )
        subparsers = parser.add_subparsers(dest="command", help="Command to run")
        self._register_serve_command(subparsers)
        self._register_tools_command(subparsers)
        self._register_config_commands(subparsers)
        return parser

    def _register_serve_command(self, subparsers) -> None:
        serve = subparsers.add_parser("serve", help="Start the HTTP/SSE MCP server")
        serve.add_argument("--host", help="Bind host (defaults to server.host or HOST)")
        serve.add_argument(
            "--port", type=int, help="Bind port (defaults to server.port or PORT)"
        )
        serve.add_argument(
            "--log-level",
            default="INFO",
            help="Log level for the server (e.g., DEBUG, INFO)",
        )
        serve.add_argument(
            "--skip-connection-test",
            action="store_true",
            help="Start without checking the GoHighLevel credentials first",
        )

    def _register_tools_command(self, subparsers) -> None:
        tools = subparsers.add_parser("tools", help="List the registered tools")
        tools.add_argument("--json", action="store_true", help="Print the catalog as JSON")

    def _register_config_commands(self, subparsers) -> None:
        config_parser = subparsers.add_parser("config", help="Configuration")
        config_subparsers = config_parser.add_subparsers(dest="config_command")
        show = config_subparsers.add_parser("show", help="Show the effective configuration")
        show.add_argument("--json", action="store_true", help="Print as JSON")
        config_subparsers.add_parser("path", help="Print the configuration file path")

    def run(self, args: Optional[List[str]] = None) -> int:
        """Run the CLI with the given arguments.

        Args:
            args: Command line arguments, defaults to sys.argv[1:]

        Returns:
            Exit code
        """
        if args is None:
            args = sys.argv[1:]

        try:
            parsed_args = self.parse_args(args)
        except SystemExit:
            return 1

        if not parsed_args.command:
            print("Error: No command specified")
            return 1

        handler_map = {
            "serve": self._serve,
            "tools": self._tools,
            "config": self._handle_config_command,
        }

        handler = handler_map.get(parsed_args.command)
        if handler is None:
            print(f"Error: Unknown command {parsed_args.command}")
            return 1

        try:
            return handler(parsed_args)
        except ConfigError as exc:
            print(f"Error: {exc}")
            return 1

    def _serve(self, args: argparse.Namespace) -> int:
        try:
            log_level = self._resolve_log_level(getattr(args, "log_level", "INFO"))
        except ValueError as exc:
            print(f"Error: {exc}")
            return 1

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        for handler in root_logger.handlers:
            handler.setLevel(log_level)
        logging.getLogger("ghl_mcp").setLevel(log_level)

        config = self.config
        credentials = config.ghl_credentials()
        logger.info("Initializing GHL API client")
        logger.info("Base URL: %s", credentials["base_url"])
        logger.info("Version: %s", credentials["api_version"])
        logger.info("Location ID: %s", credentials["location_id"])
        client = GHLApiClient(**credentials)

        if not args.skip_connection_test:
            try:
                result = client.test_connection()
            except GHLApiError as exc:
                print(f"Error: Failed to connect to GHL API: {exc}")
                return 1
            logger.info("Connected to location: %s", result.get("locationId"))

        try:
            registry = build_registry(config, client)
        except DuplicateToolError as exc:
            print(f"Error: {exc}")
            return 1

        app = create_app(config, registry)
        host = args.host or str(config.get("server", "host", "0.0.0.0"))
        port = args.port or int(config.get("server", "port", 8000))
        debug = bool(config.get("server", "debug", False))

        print(f"Starting GHL MCP server {PACKAGE_VERSION} on {host}:{port}")
        print("MCP SSE endpoint: /sse")
        print("REST API available at: /api")
        print(f"Available tools: {len(registry)}")
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
        return 0

    def _tools(self, args: argparse.Namespace) -> int:
        registry = self._offline_registry()
        if args.json:
            print(
                json.dumps(
                    {
                        "tools": [d.to_dict() for d in registry.descriptors()],
                        "count": len(registry),
                        "categories": registry.categories(),
                    },
                    indent=2,
                )
            )
            return 0

        for descriptor in registry.descriptors():
            required = ", ".join(descriptor.required) or "-"
            print(f"{descriptor.name:<24} {descriptor.description} (required: {required})")
        print()
        for category, count in registry.categories().items():
            print(f"{category:<14} {count}")
        print(f"{'total':<14} {len(registry)}")
        return 0

    def _offline_registry(self) -> ToolRegistry:
        """Registry for inspection only; the client is never called."""

        ghl = self.config.get("ghl") or {}
        client = GHLApiClient(
            access_token=ghl.get("access_token") or "",
            location_id=ghl.get("location_id") or "",
            base_url=ghl.get("base_url") or Config.DEFAULT_CONFIG["ghl"]["base_url"],
        )
        return ToolRegistry.build(default_groups(client))

    def _handle_config_command(self, args: argparse.Namespace) -> int:
        handler_map = {"show": self._config_show, "path": self._config_path}
        handler = handler_map.get(args.config_command)
        if handler is None:
            print(f"Error: Unknown config command {args.config_command}")
            return 1
        return handler(args)

    def _config_show(self, args: argparse.Namespace) -> int:
        data = self._redacted(self.config.config)
        if getattr(args, "json", False):
            print(json.dumps(data, indent=2))
            return 0
        for section, values in data.items():
            print(f"[{section}]")
            if isinstance(values, dict):
                for key, value in values.items():
                    print(f"  {key}: {value}")
            else:
                print(f"  {values}")
        return 0

    def _config_path(self, _args: argparse.Namespace) -> int:
        print(self.config.config_path)
        return 0

    @staticmethod
    def _redacted(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: ("***" if key in _SECRET_KEYS and value else CLI._redacted(value))
                for key, value in data.items()
            }
        return data

    @staticmethod
    def _resolve_log_level(value: str) -> int:
        if not value:
            raise ValueError("Log level cannot be empty")

        normalized = value.upper()
        if normalized == "WARN":
            normalized = "WARNING"

        level = logging.getLevelName(normalized)
        if isinstance(level, str):  # logging returns level name when unknown
            raise ValueError(
                "Invalid log level. Choose from CRITICAL, ERROR, WARNING, INFO, DEBUG, or NOTSET."
            )

        return level


def main() -> int:
    """Entry point for the CLI."""
    cli = CLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())

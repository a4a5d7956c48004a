import argparse
import sys

import uvicorn

from src.api.auth import create_access_token
from src.api.main import create_app
from src.config import create_config_template, get_config


def main():
    """Main entry point for the ML platform backend"""
    parser = argparse.ArgumentParser(description="ML Platform Backend")
    parser.add_argument("--config", help="Path to configuration file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port to listen on")
    serve_parser.add_argument("--log-level", help="Logging level")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    token_parser = subparsers.add_parser("token", help="Issue a bearer token for a user id")
    token_parser.add_argument("--user-id", required=True, help="User id to put in the token subject")
    token_parser.add_argument("--expires-minutes", type=int, help="Token lifetime in minutes")

    template_parser = subparsers.add_parser("init-config", help="Write a configuration template")
    template_parser.add_argument("--output", default="config.json", help="Where to write the template")

    args = parser.parse_args()

    # Load configuration
    config = get_config(args.config)

    if args.command == "init-config":
        create_config_template(args.output)
        return

    if args.command == "token":
        print(create_access_token(args.user_id, config.auth, expires_minutes=args.expires_minutes))
        return

    if args.log_level:
        config.logging_level = args.log_level

    issues = config.validate_config()
    if issues and not config.debug_mode:
        for issue in issues:
            print(f"Warning: {issue}")

    if config.database.BACKEND not in ("mongo", "memory"):
        print(f"Error: Unknown storage backend {config.database.BACKEND}")
        sys.exit(1)

    host = args.host or config.server.HOST
    port = args.port or config.server.PORT

    if args.reload:
        # reload needs an import string; the child process reads config from the environment
        uvicorn.run("src.api.main:create_app", factory=True, host=host, port=port,
                    reload=True, log_level=config.logging_level.lower())
    else:
        uvicorn.run(create_app(config), host=host, port=port,
                    log_level=config.logging_level.lower())


if __name__ == "__main__":
    main()

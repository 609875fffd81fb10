#!/usr/bin/env python3
"""
Send a single command to a Redis-protocol key-value store (Materia KV, Redis, Valkey).

Usage:
    kv-client PING
    kv-client SET greeting "hello"
    kv-client GET greeting
    kv-client --plain KEYS '*'      # Materia KV plaintext port

The connection URL comes from REDIS_URL, or is asked for interactively.
"""

import argparse
import sys
from typing import Any, List

import redis

from addons.logging_config import setup_logging, get_logger
from addons.prompts import ask_secret, PromptCancelled, CANCELLED_MESSAGE
from addons.utils import get_optional_env, mask_url

logger = get_logger(__name__)

USAGE = "Usage: kv-client <COMMAND> [ARGUMENTS]"

# Materia KV serves TLS on 6379 and plaintext on 6378
TLS_PORT_SUFFIX = ":6379"
PLAINTEXT_PORT_SUFFIX = ":6378"


def resolve_redis_url() -> str:
    """Get the connection URL from REDIS_URL or ask for it."""
    redis_url = get_optional_env("REDIS_URL")
    if redis_url:
        return redis_url

    return ask_secret(
        "No REDIS_URL environment variable, provide it (e.g., redis://:password@host:6379/0):"
    )


def plaintext_url(redis_url: str) -> str:
    """Rewrite a Materia KV TLS URL to its plaintext port. Other URLs are unchanged."""
    if redis_url.startswith("rediss://") and redis_url.endswith(TLS_PORT_SUFFIX):
        redis_url = "redis://" + redis_url[len("rediss://"):]
        redis_url = redis_url[:-len(TLS_PORT_SUFFIX)] + PLAINTEXT_PORT_SUFFIX
    return redis_url


def get_client(redis_url: str) -> redis.Redis:
    """
    Create a client for the given URL. No connection is opened until the first command.

    Replies stay as bytes; format_reply decodes them so binary values still print.
    """
    return redis.Redis.from_url(redis_url)


def run_command(client: redis.Redis, command: str, args: List[str]) -> Any:
    """
    Send a raw command with its arguments.

    Args:
        client: Redis client
        command: Command name, any case
        args: Command arguments, passed through verbatim

    Returns:
        The raw reply from the server
    """
    name = command.upper()
    logger.debug("Sending %s with %d argument(s)", name, len(args))
    return client.execute_command(name, *args)


def format_reply(reply: Any, indent: int = 0) -> str:
    """Format a reply the way redis-cli prints it."""
    if reply is None:
        return "(nil)"
    if isinstance(reply, bool):
        return f"(integer) {int(reply)}"
    if isinstance(reply, int):
        return f"(integer) {reply}"
    if isinstance(reply, bytes):
        return reply.decode("utf-8", errors="replace")
    if isinstance(reply, str):
        return reply
    if isinstance(reply, dict):
        flat = []
        for key, value in reply.items():
            flat.extend([key, value])
        return format_reply(flat, indent)
    if isinstance(reply, (list, tuple, set)):
        items = list(reply)
        if not items:
            return "(empty list or set)"

        width = len(str(len(items)))
        pad = " " * indent
        lines = []
        for i, item in enumerate(items, start=1):
            prefix = f"{i:>{width}}) "
            body = format_reply(item, indent + len(prefix))
            lines.append(f"{pad if i > 1 else ''}{prefix}{body}")
        return "\n".join(lines)

    return str(reply)


def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(
        prog="kv-client",
        description="Send one command to a Redis-protocol key-value store",
    )
    parser.add_argument("command", nargs="?", help="Command name (GET, SET, KEYS...)")
    parser.add_argument("arguments", nargs=argparse.REMAINDER, help="Command arguments")
    parser.add_argument("--plain", action="store_true",
                        help="Use the Materia KV plaintext port (rediss://...:6379 -> redis://...:6378)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    if not args.command:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    try:
        redis_url = resolve_redis_url()
    except PromptCancelled:
        print(CANCELLED_MESSAGE)
        sys.exit(0)

    if args.plain:
        redis_url = plaintext_url(redis_url)

    logger.info("Connecting to %s", mask_url(redis_url))

    try:
        client = get_client(redis_url)
    except ValueError as e:
        print(f"Redis error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        result = run_command(client, args.command, args.arguments)
        print(format_reply(result))
    except redis.RedisError as e:
        print(f"Redis error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()

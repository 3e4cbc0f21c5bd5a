"""
Command-line interface for rpcbatcher.

Sends single JSON-RPC calls or batches from the shell and prints the outcome
of every request.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

import structlog

from rpcbatcher import __version__
from rpcbatcher.config import ClientConfig, set_config
from rpcbatcher.core.client import JsonRpcClient
from rpcbatcher.core.errors import RpcBatcherError, ValidationError
from rpcbatcher.core.request import RpcRequest


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="JSON-RPC endpoint URL")
    parser.add_argument("--user", help="HTTP basic auth user")
    parser.add_argument("--password", help="HTTP basic auth password")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rpcbatcher",
        description="JSON-RPC 2.0 client with batch support",
    )
    
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    
    # Call command
    call_parser = subparsers.add_parser("call", help="Send a single request")
    _add_common_arguments(call_parser)
    call_parser.add_argument("method", help="Remote method name")
    call_parser.add_argument(
        "--params",
        help="Parameters as a JSON array or object",
    )
    call_parser.add_argument(
        "--notify",
        action="store_true",
        help="Send as a notification (no response expected)",
    )
    
    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Send a batch of requests")
    _add_common_arguments(batch_parser)
    batch_parser.add_argument(
        "file",
        help='JSON file with an array of {"method", "params", "notification"} entries ("-" for stdin)',
    )
    
    return parser


def parse_params(raw: str) -> Any:
    """Decode a --params value."""
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError(f"--params is not valid JSON: {e}")


def load_batch_spec(source: str) -> List[dict]:
    """Read batch entries from a file or stdin."""
    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    try:
        entries = json.loads(text)
    except ValueError as e:
        raise ValidationError(f"Batch file is not valid JSON: {e}")
    
    if not isinstance(entries, list):
        raise ValidationError("Batch file must contain a JSON array")
    for entry in entries:
        if not isinstance(entry, dict) or "method" not in entry:
            raise ValidationError(f"Batch entry {entry!r} has no 'method'")
    return entries


def attach_printers(request: RpcRequest) -> RpcRequest:
    """Print the outcome of a request when it resolves."""
    label = f"{request.method} (id={request.id})"
    request.on_success(lambda result: print(f"{label} -> {json.dumps(result)}"))
    request.on_exception(lambda error: print(f"{label} !! {json.dumps(error, default=str)}"))
    return request


def build_client(args: argparse.Namespace) -> JsonRpcClient:
    """Create a client from command-line arguments."""
    config = ClientConfig(
        url=args.url,
        user=args.user,
        password=args.password,
        timeout_seconds=args.timeout,
        log_level=args.log_level,
        log_json=args.log_json,
    )
    set_config(config)
    return JsonRpcClient(config=config)


async def run_call(args: argparse.Namespace) -> None:
    """Send one request or notification."""
    params = parse_params(args.params) if args.params else None
    
    async with build_client(args) as client:
        if args.notify:
            await client.notification(args.method, params).execute()
            print(f"{args.method} notification sent")
        else:
            await attach_printers(client.request(args.method, params)).execute()


async def run_batch(args: argparse.Namespace) -> None:
    """Send a batch built from a JSON file."""
    entries = load_batch_spec(args.file)
    
    async with build_client(args) as client:
        batch = client.batch()
        for entry in entries:
            if entry.get("notification", False):
                batch.add_request(client.notification(entry["method"], entry.get("params")))
            else:
                batch.add_request(
                    attach_printers(client.request(entry["method"], entry.get("params")))
                )
        
        def gate(error: dict) -> bool:
            print(f"batch !! code={error['code']}")
            return True
        
        batch.on_exception(gate)
        await batch.execute()


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()
    
    if not args.command:
        parser.print_help()
        sys.exit(1)
    
    # Setup logging
    setup_logging(args.log_level, args.log_json)
    
    try:
        if args.command == "call":
            asyncio.run(run_call(args))
        elif args.command == "batch":
            asyncio.run(run_batch(args))
    except RpcBatcherError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()

"""Command-line entry point: scan one contract or serve the HTTP API.

    python -m contract_scanner.main scan 0x... [--json] [--explain]
    python -m contract_scanner.main serve [--port 8080]
"""

import argparse
import asyncio
import json
import signal
import sys

from loguru import logger

from config.settings import settings
from contract_scanner.models import Preferences
from contract_scanner.parsers.aggregator import SourceAggregator
from contract_scanner.parsers.exceptions import ClassificationError, ConfigurationError, ExplanationError
from contract_scanner.parsers.llm_analyzer.client import explain_if_configured
from contract_scanner.utils.formatters import format_report
from contract_scanner.utils.logger import setup_logger

EXIT_OK = 0
EXIT_INVALID_ADDRESS = 1
EXIT_NOT_CONFIGURED = 2
EXIT_EXPLANATION_FAILED = 3


async def scan(address: str, *, as_json: bool = False, explain: bool = False) -> int:
    aggregator = SourceAggregator(settings)
    try:
        analysis = await aggregator.analyze(address)
    except ClassificationError as e:
        logger.error(f"Cannot analyze {address!r}: {e}")
        return EXIT_INVALID_ADDRESS
    except ConfigurationError as e:
        logger.error(f"Scanner is not configured: {e}")
        return EXIT_NOT_CONFIGURED

    explanation = None
    if explain:
        if not settings.openai_api_key:
            logger.warning("--explain requested but OPENAI_API_KEY is not set")
        try:
            explanation = await explain_if_configured(
                analysis,
                Preferences(api_key=settings.openai_api_key),
                model=settings.llm_model,
                base_url=settings.llm_base_url,
            )
        except ExplanationError as e:
            logger.error(f"Explanation failed: {e}")
            return EXIT_EXPLANATION_FAILED

    if as_json:
        payload = analysis.model_dump(mode="json", by_alias=True)
        if explain:
            payload = {"analysis": payload, "explanation": explanation}
        print(json.dumps(payload, indent=2))
    else:
        print(format_report(analysis))
        if explanation:
            print()
            print(explanation)
    return EXIT_OK


async def serve(port: int | None = None) -> None:
    from contract_scanner.api.server import run_api_server

    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    server_task = asyncio.create_task(run_api_server(port=port))
    done, pending = await asyncio.wait(
        [server_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    logger.info("Shutdown complete")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contract-scanner", description="Token contract risk scanner")
    sub = parser.add_subparsers(dest="command", required=True)

    scan_cmd = sub.add_parser("scan", help="Analyze one contract address")
    scan_cmd.add_argument("address")
    scan_cmd.add_argument("--json", action="store_true", help="Print the analysis as JSON")
    scan_cmd.add_argument("--explain", action="store_true", help="Append an AI explanation")

    serve_cmd = sub.add_parser("serve", help="Run the HTTP API")
    serve_cmd.add_argument("--port", type=int, default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(json_logs=settings.log_json, level=settings.log_level, log_dir=settings.log_dir)

    if args.command == "scan":
        return asyncio.run(scan(args.address, as_json=args.json, explain=args.explain))

    asyncio.run(serve(args.port))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

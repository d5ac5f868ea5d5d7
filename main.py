"""
Main entry point for Genesis Comps.
Supports modes:
  --web: Start the job API server
  --location X: Run one scraping job inline and print its result
  --clear-session: Delete the stored browser session (alone or with a mode)
"""
import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from genesis_comps.browser.session_store import SessionStore
from genesis_comps.exceptions import ConfigurationError
from genesis_comps.services.automation import GenesisAutomation
from genesis_comps.services.job_registry import JobRegistry, run_job
from genesis_comps.settings import GenesisSettings
from genesis_comps.utils.logging_config import setup_default_logging

setup_default_logging()


def handle_web(settings: GenesisSettings, host: str, port: int):
    """Start the FastAPI job server."""
    import uvicorn

    from app.web.main import automation_factory_for, create_app

    logger.info(f"Starting job API on http://{host}:{port}")
    app = create_app(automation_factory=automation_factory_for(settings))
    uvicorn.run(app, host=host, port=port, reload=False)


async def handle_location(settings: GenesisSettings, location: str) -> int:
    """Run a single job for ``location``; exit status reflects overall success."""
    registry = JobRegistry()
    job = registry.acquire(location)
    result = await run_job(registry, job, lambda: GenesisAutomation(settings))
    print(json.dumps(result.to_json_dict(), indent=2))
    return 0 if result.overall_success else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Genesis Comps scraper")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--web", action="store_true", help="Start the job API server")
    group.add_argument("--location", type=str, default=None, help="Run one job for this location")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address for --web (default 0.0.0.0)")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")),
                        help="Port for --web (default 3000 or PORT env var)")
    headless = parser.add_mutually_exclusive_group()
    headless.add_argument("--headless", dest="headless", action="store_true", default=None,
                          help="Force headless Chromium")
    headless.add_argument("--headed", dest="headless", action="store_false",
                          help="Show the browser window")
    parser.add_argument("--clear-session", action="store_true",
                        help="Delete the stored session before running")

    args = parser.parse_args()
    if not (args.web or args.location or args.clear_session):
        parser.error("one of --web, --location or --clear-session is required")

    load_dotenv()

    if args.clear_session:
        SessionStore(Path(os.getenv("SESSION_PATH", "session.json"))).clear()
        if not (args.web or args.location):
            return 0

    try:
        settings = GenesisSettings.from_env(load_env_file=False)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    if args.headless is not None:
        settings.headless = args.headless

    if args.web:
        handle_web(settings, args.host, args.port)
        return 0
    return asyncio.run(handle_location(settings, args.location))


if __name__ == "__main__":
    sys.exit(main())

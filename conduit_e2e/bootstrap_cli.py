#!/usr/bin/env python3
"""
Bootstrap a reusable Conduit test user.

Mints a user, establishes and validates a session, and leaves
credentials.json, user.json and metadata.json in the auth directory so later
test runs start from a warm cache.

Usage:
    conduit-bootstrap             # no-op when a cached session exists
    conduit-bootstrap --force     # wipe the cache and mint a fresh user
    FORCE_BOOTSTRAP=true conduit-bootstrap
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from conduit_e2e.config.env_config import Config, Settings
from conduit_e2e.services.exceptions import ConduitE2EError
from conduit_e2e.services.session_bootstrap import SessionBootstrap
from conduit_e2e.services.session_store import SessionStore

logger = logging.getLogger("conduit_e2e.bootstrap")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bootstrap a reusable Conduit test user")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Recreate the user even if a cached session exists (or FORCE_BOOTSTRAP=true)",
    )
    parser.add_argument("--auth-dir", type=Path, help="Session cache directory (default: AUTH_DIR)")
    return parser.parse_args(argv)


def bootstrap_user(settings: Settings, browser) -> SessionBootstrap:
    """Run the bootstrap state machine and record metadata for a minted user."""
    bootstrap = SessionBootstrap.for_browser(browser, settings)
    bootstrap.ensure_storage_state()

    minted = bootstrap.credential_source.minted
    if minted is not None:
        bootstrap.store.write_metadata(minted.username, minted.email)
    return bootstrap


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
    except ConduitE2EError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.getLogger().setLevel(Config.LOG_LEVEL)

    if args.auth_dir:
        settings = dataclasses.replace(settings, auth_dir=args.auth_dir.resolve())

    force = args.force or settings.force_bootstrap
    store = SessionStore(settings.auth_dir)
    store.ensure_directory()

    if store.storage_state_exists() and store.load_credentials() and not force:
        logger.info("Existing authentication state detected. Use --force or FORCE_BOOTSTRAP=true to recreate.")
        return 0

    if force:
        # The bootstrap wipes the cache under its lock before minting
        settings = dataclasses.replace(settings, force_new_user=True)

    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=settings.headless, slow_mo=settings.slow_mo)
            try:
                bootstrap = bootstrap_user(settings, browser)
            finally:
                browser.close()
    except (ConduitE2EError, PlaywrightError) as e:
        logger.error(f"Failed to bootstrap test user: {e}")
        return 1

    logger.info(f"Bootstrapped reusable test user: {bootstrap.resolve_credentials().email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

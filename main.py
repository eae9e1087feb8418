#!/usr/bin/env python3
"""
Main entry point for the SalesDesk auth client.

Restores the session for a start path using the ambient refresh cookie and
reports the resulting state. ``--health-check`` only validates configuration.
"""

import asyncio
import logging
import os
import sys

from salesdesk_auth.application_context import AuthContext
from salesdesk_auth.config import load_settings
from salesdesk_auth.errors.handling import log_error
from salesdesk_auth.logging_config import LoggerConfigurator
from salesdesk_auth.routes import ROUTES, Navigator


async def main(start_path: str) -> int:
    """Restore the session at ``start_path`` and log the outcome."""
    settings = load_settings()
    async with await AuthContext.create(settings, navigator=Navigator(start_path)) as ctx:
        logging.info(f"🚀 Restoring session base_url={settings.base_url} path={start_path}")
        restored = await ctx.session.restore_session(start_path)
        snapshot = ctx.session.snapshot()
        user = snapshot.user.user_name if snapshot.user else None
        logging.info(
            f"📋 Session state={ctx.session.state.value} authenticated={snapshot.authenticated} user={user} view={ctx.navigator.current_path}"
        )
        return 0 if restored else 2


if __name__ == "__main__":
    LoggerConfigurator().configure()

    # Simple health check mode
    if len(sys.argv) > 1 and sys.argv[1] == "--health-check":
        logging.info("🏥 Health check mode")
        try:
            s = load_settings()
            logging.info(f"✅ Health check passed - base_url={s.base_url}")
            sys.exit(0)
        except ValueError as e:
            logging.error(f"❌ Health check failed: {e}")
            sys.exit(1)

    path = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("START_PATH", ROUTES.DASHBOARD)
    try:
        sys.exit(asyncio.run(main(path)))
    except KeyboardInterrupt:
        logging.info("Application terminated by user")
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        logging.critical(f"Critical error occurred: {e}", exc_info=True)
        sys.exit(1)

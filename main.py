#!/usr/bin/env python3
"""
Main entry point for the replay exchange.

This script loads the configured data files and starts both the REST API
and WebSocket servers around one exchange simulation.
"""

import asyncio
import signal
import sys
import threading
import time

from replay_exchange.api.rest_api import create_app
from replay_exchange.api.websocket_api import WebSocketServer
from replay_exchange.config.settings import get_settings
from replay_exchange.simulation import ExchangeSimulation
from replay_exchange.utils.logger import setup_logging, get_logger, create_audit_logger

logger = get_logger(__name__)


class ExchangeServer:
    """
    Main server class that manages both REST and WebSocket servers.
    """

    def __init__(self):
        """Initialize the server."""
        self.settings = get_settings()

        setup_logging(
            level=self.settings.log_level,
            log_file=self.settings.log_file
        )

        self.simulation = ExchangeSimulation.from_files(
            self.settings.data_files,
            trader_id=self.settings.trader_id,
            initial_balances=self.settings.initial_balances,
            products=self.settings.products,
            audit_logger=create_audit_logger(self.settings.audit_log_file),
        )
        self.rest_app = None
        self.websocket_server = None
        self.rest_thread = None

        logger.info(f"Exchange server initialized at {self.simulation.current_time}")

    def start(self) -> None:
        """Start both REST and WebSocket servers."""
        logger.info("Starting exchange server...")
        self._start_rest_server()
        self._start_websocket_server()

    def _start_rest_server(self) -> None:
        """Start REST API server in a separate thread."""
        self.rest_app = create_app(self.simulation)

        def run_rest_server():
            logger.info(f"Starting REST API server on {self.settings.rest_host}:{self.settings.rest_port}")
            self.rest_app.run(
                host=self.settings.rest_host,
                port=self.settings.rest_port,
                debug=self.settings.debug,
                use_reloader=False
            )

        self.rest_thread = threading.Thread(target=run_rest_server, daemon=True)
        self.rest_thread.start()

        # Give the server time to start
        time.sleep(1)

    def _start_websocket_server(self) -> None:
        """Start WebSocket server in the main thread."""
        self.websocket_server = WebSocketServer(
            self.simulation,
            host=self.settings.websocket_host,
            port=self.settings.websocket_port
        )

        logger.info(f"Starting WebSocket server on {self.settings.websocket_host}:{self.settings.websocket_port}")
        asyncio.run(self.websocket_server.start())


def signal_handler(signum, frame):
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main():
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        server = ExchangeServer()
        server.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
WebSocket API for real-time trade and clock feeds.

Clients subscribe to products to receive the trades produced by each
matching pass; every client receives clock tick notifications.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Set, Dict, Any, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection

from ..core.entry import Trade
from ..simulation import ExchangeSimulation
from .validators import validate_product

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WebSocketServer:
    """
    WebSocket server for real-time data streaming.

    Matching runs on the REST server's threads, so callbacks hand their
    broadcasts to the server's event loop thread-safely.
    """

    def __init__(self, simulation: ExchangeSimulation, host: str = 'localhost', port: int = 8765,
                 ping_interval: int = 20, ping_timeout: int = 10):
        """
        Initialize WebSocket server.

        Args:
            simulation: Simulation whose trades and ticks are streamed
            host: Host to bind to
            port: Port to bind to
            ping_interval: Seconds between keepalive pings
            ping_timeout: Seconds to wait for a pong
        """
        self.simulation = simulation
        self.host = host
        self.port = port
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.loop: Optional[asyncio.AbstractEventLoop] = None

        # Client management
        self.clients: Set[ServerConnection] = set()
        self.subscriptions: Dict[ServerConnection, Set[str]] = {}

        # Register callbacks
        self.simulation.matching_engine.add_trade_callback(self._on_trade)
        self.simulation.add_tick_callback(self._on_tick)

        logger.info(f"WebSocket server initialized on {host}:{port}")

    async def start(self) -> None:
        """Start the WebSocket server."""
        self.loop = asyncio.get_running_loop()
        logger.info(f"Starting WebSocket server on {self.host}:{self.port}")

        async with websockets.serve(
            self._handle_client,
            self.host,
            self.port,
            ping_interval=self.ping_interval,
            ping_timeout=self.ping_timeout,
            close_timeout=10
        ):
            await asyncio.Future()  # Run forever

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """
        Handle new client connection.

        Args:
            websocket: WebSocket connection
        """
        client_address = f"{websocket.remote_address[0]}:{websocket.remote_address[1]}"
        logger.info(f"Client connected: {client_address}")

        self.clients.add(websocket)
        self.subscriptions[websocket] = set()

        try:
            await self._send_message(websocket, {
                'type': 'connection',
                'status': 'connected',
                'current_time': self.simulation.current_time,
                'timestamp': _now(),
            })

            async for message in websocket:
                await self._handle_message(websocket, message)

        except websockets.exceptions.ConnectionClosed:
            logger.info(f"Client disconnected: {client_address}")
        finally:
            self.clients.discard(websocket)
            self.subscriptions.pop(websocket, None)

    async def _handle_message(self, websocket: ServerConnection, message: str) -> None:
        """
        Handle message from client.

        Args:
            websocket: WebSocket connection
            message: Message from client
        """
        try:
            data = json.loads(message)
        except json.JSONDecodeError:
            await self._send_error(websocket, "Invalid JSON format")
            return

        if not isinstance(data, dict):
            await self._send_error(websocket, "Message must be a JSON object")
            return

        message_type = str(data.get('type', '')).lower()

        if message_type == 'subscribe':
            await self._handle_subscribe(websocket, data)
        elif message_type == 'unsubscribe':
            await self._handle_unsubscribe(websocket, data)
        elif message_type == 'ping':
            await self._send_message(websocket, {'type': 'pong', 'timestamp': _now()})
        elif message_type == 'get_time':
            await self._send_message(websocket, {'type': 'time', 'current_time': self.simulation.current_time})
        elif message_type == 'get_market_stats':
            await self._send_message(websocket, {
                'type': 'market_stats',
                'current_time': self.simulation.current_time,
                'products': self.simulation.market_stats(),
            })
        else:
            await self._send_error(websocket, f"Unknown message type: {message_type}")

    async def _handle_subscribe(self, websocket: ServerConnection, data: Dict[str, Any]) -> None:
        """Handle subscription request."""
        product = str(data.get('product', '')).upper()

        is_valid, error = validate_product(product)
        if not is_valid:
            await self._send_error(websocket, error)
            return

        self.subscriptions[websocket].add(product)

        await self._send_message(websocket, {
            'type': 'subscription',
            'status': 'subscribed',
            'product': product,
            'timestamp': _now(),
        })
        logger.info(f"Client subscribed to {product}")

    async def _handle_unsubscribe(self, websocket: ServerConnection, data: Dict[str, Any]) -> None:
        """Handle unsubscription request."""
        product = str(data.get('product', '')).upper()

        if product:
            self.subscriptions[websocket].discard(product)
            status = 'unsubscribed'
        else:
            self.subscriptions[websocket].clear()
            status = 'unsubscribed_all'

        await self._send_message(websocket, {
            'type': 'subscription',
            'status': status,
            'product': product or None,
            'timestamp': _now(),
        })
        logger.info(f"Client unsubscribed from {product or 'all'}")

    async def _send_message(self, websocket: ServerConnection, message: Dict[str, Any]) -> None:
        """Send message to client."""
        try:
            await websocket.send(json.dumps(message))
        except websockets.exceptions.ConnectionClosed:
            logger.debug("Client connection closed while sending message")

    async def _send_error(self, websocket: ServerConnection, error_message: str) -> None:
        """Send error message to client."""
        await self._send_message(websocket, {
            'type': 'error',
            'message': error_message,
            'timestamp': _now(),
        })

    def _schedule(self, coroutine) -> None:
        if self.loop is None or self.loop.is_closed():
            coroutine.close()
            return
        asyncio.run_coroutine_threadsafe(coroutine, self.loop)

    def _on_trade(self, trade: Trade) -> None:
        """Handle trade execution callback."""
        self._schedule(self._broadcast_trade(trade))

    def _on_tick(self, previous: str, current: str, trades: List[Trade]) -> None:
        """Handle clock tick callback."""
        self._schedule(self._broadcast_tick(previous, current, len(trades)))

    async def _broadcast_trade(self, trade: Trade) -> None:
        """Broadcast trade to clients subscribed to its product."""
        message = {'type': 'trade', **trade.to_dict()}
        targets = [ws for ws in self.clients.copy() if trade.product in self.subscriptions.get(ws, set())]
        if targets:
            await asyncio.gather(*(self._send_message(ws, message) for ws in targets), return_exceptions=True)

    async def _broadcast_tick(self, previous: str, current: str, trade_count: int) -> None:
        """Broadcast a clock tick to every client."""
        message = {
            'type': 'tick',
            'previous_time': previous,
            'current_time': current,
            'trade_count': trade_count,
        }
        if self.clients:
            await asyncio.gather(*(self._send_message(ws, message) for ws in self.clients.copy()),
                                 return_exceptions=True)

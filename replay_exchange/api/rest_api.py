"""
REST API for the replay exchange.

This module provides HTTP endpoints for placing the simulated trader's
orders, advancing the clock, querying the order book and fetching
chart-ready price series.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from ..config.settings import get_settings
from ..core.errors import EmptyBookError, InsufficientFundsError
from ..simulation import ExchangeSimulation
from ..utils.performance import get_performance_monitor, measure_latency
from .validators import (
    validate_order_request,
    validate_product,
    validate_side,
    validate_timestamp,
    validate_limit,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(simulation: Optional[ExchangeSimulation] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        simulation: Simulation to serve; built from the configured data
            files when omitted

    Returns:
        Configured Flask application
    """
    settings = get_settings()
    if simulation is None:
        simulation = ExchangeSimulation.from_files(
            settings.data_files,
            trader_id=settings.trader_id,
            initial_balances=settings.initial_balances,
            products=settings.products,
        )

    app = Flask(__name__)
    if settings.enable_cors:
        CORS(app, origins=settings.cors_origins)

    app.config["SIMULATION"] = simulation
    get_performance_monitor().enabled = settings.enable_performance_monitoring
    register_routes(app, simulation, max_candles=settings.max_candles)

    logger.info("REST API initialized")
    return app


def register_routes(app: Flask, simulation: ExchangeSimulation, max_candles: int = 50) -> None:
    """Register all API routes."""

    # Serializes clock moves and order placement across request threads
    simulation_lock = threading.Lock()
    monitor = get_performance_monitor()

    def side_and_product(default_side: str = "ask"):
        """Read and validate the side/product query parameters."""
        product = request.args.get("product")
        is_valid, error = validate_product(product)
        if not is_valid:
            return error, None, None

        is_valid, error, side = validate_side(request.args.get("side", default_side))
        if not is_valid:
            return error, None, None

        return None, side, product

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'timestamp': _now(),
            'version': '1.0.0'
        })

    @app.route('/products', methods=['GET'])
    def get_products():
        """Get known and selected products."""
        products = sorted(simulation.order_book.known_products())
        return jsonify({
            'products': products,
            'selected': simulation.selected_products,
            'count': len(products),
        }), 200

    @app.route('/time', methods=['GET'])
    def get_time():
        """Get the simulation's current time."""
        return jsonify({'current_time': simulation.current_time}), 200

    @app.route('/time/next', methods=['POST'])
    def next_time():
        """Match every product at the current time and advance the clock."""
        with simulation_lock:
            previous = simulation.current_time
            trades = simulation.advance()
            current = simulation.current_time

        return jsonify({
            'previous_time': previous,
            'current_time': current,
            'trades': [trade.to_dict() for trade in trades],
            'wallet': simulation.wallet.to_dict(),
        }), 200

    @app.route('/orders', methods=['POST'])
    def place_order():
        """
        Place an order for the simulated trader at the current time.

        Request body:
        {
            "side": "bid",
            "product": "ETH/BTC",
            "price": 0.02,
            "amount": 0.5
        }
        """
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'Request body must be JSON'}), 400

        is_valid, error, validated_data = validate_order_request(data)
        if not is_valid:
            return jsonify({'error': error}), 400

        try:
            with simulation_lock:
                order = simulation.place_order(
                    validated_data['side'],
                    validated_data['product'],
                    validated_data['price'],
                    validated_data['amount'],
                )
        except InsufficientFundsError as e:
            return jsonify({'error': str(e)}), 409

        logger.info(f"Order placed: {order.side.value} {order.product} {order.amount}@{order.price}")
        return jsonify(order.to_dict()), 200

    @app.route('/orders', methods=['GET'])
    def get_orders():
        """
        Get orders with an exact side, product and timestamp.

        Query parameters:
        - product: Product (required)
        - side: bid, ask or unknown (default: ask)
        - timestamp: Exact timestamp (default: current time)
        """
        error, side, product = side_and_product()
        if error:
            return jsonify({'error': error}), 400

        timestamp = request.args.get('timestamp', simulation.current_time)
        is_valid, error = validate_timestamp(timestamp)
        if not is_valid:
            return jsonify({'error': error}), 400

        orders = simulation.order_book.orders_matching(side, product, timestamp)
        return jsonify({
            'product': product,
            'side': side.value,
            'timestamp': timestamp,
            'orders': [order.to_dict() for order in orders],
            'count': len(orders),
        }), 200

    @app.route('/market/stats', methods=['GET'])
    def get_market_stats():
        """Get ask statistics for each selected product at the current time."""
        return jsonify({
            'current_time': simulation.current_time,
            'products': simulation.market_stats(),
        }), 200

    @app.route('/candlesticks', methods=['GET'])
    def get_candlesticks():
        """
        Get OHLC candles for a product.

        Query parameters:
        - product: Product (required)
        - side: bid or ask (default: ask)
        - limit: Number of most recent candles (default: configured max)
        """
        error, side, product = side_and_product()
        if error:
            return jsonify({'error': error}), 400

        is_valid, error, limit = validate_limit(request.args.get('limit', max_candles))
        if not is_valid:
            return jsonify({'error': error}), 400

        with measure_latency(monitor, "candlesticks"):
            candles = simulation.aggregator.candlesticks(side, product)

        return jsonify({
            'product': product,
            'side': side.value,
            'candles': [candle.to_dict() for candle in candles[-limit:]],
        }), 200

    @app.route('/volume', methods=['GET'])
    def get_volume():
        """Get total order amount per timestamp for a product."""
        error, side, product = side_and_product()
        if error:
            return jsonify({'error': error}), 400

        with measure_latency(monitor, "volume_series"):
            series = simulation.aggregator.volume_series(side, product)

        return jsonify({
            'product': product,
            'side': side.value,
            'volume': [{'timestamp': ts, 'amount': amount} for ts, amount in series],
        }), 200

    @app.route('/mean-price', methods=['GET'])
    def get_mean_price():
        """Get the mean order price per minute for a product."""
        error, side, product = side_and_product()
        if error:
            return jsonify({'error': error}), 400

        with measure_latency(monitor, "mean_price_by_minute"):
            series = simulation.aggregator.mean_price_by_minute(side, product)

        return jsonify({
            'product': product,
            'side': side.value,
            'mean_price': [{'minute': minute, 'price': price} for minute, price in series],
        }), 200

    @app.route('/trades-per-product', methods=['GET'])
    def get_trades_per_product():
        """Get the number of stored orders per product."""
        return jsonify({'counts': simulation.aggregator.trade_counts_by_product()}), 200

    @app.route('/wallet', methods=['GET'])
    def get_wallet():
        """Get the simulated trader's balances."""
        return jsonify({
            'trader_id': simulation.trader_id,
            'balances': simulation.wallet.to_dict(),
        }), 200

    @app.route('/statistics', methods=['GET'])
    def get_statistics():
        """Get engine and performance statistics."""
        return jsonify({
            'engine': simulation.matching_engine.get_statistics(),
            'performance': monitor.get_summary() if monitor.enabled else None,
        }), 200

    @app.errorhandler(EmptyBookError)
    def empty_book(error):
        """Handle queries against an empty order book."""
        return jsonify({'error': str(error)}), 404

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500


def run_server(host: str = '0.0.0.0', port: int = 5000, debug: bool = False) -> None:
    """
    Run the REST API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        debug: Enable debug mode
    """
    app = create_app()
    logger.info(f"Starting REST API server on {host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_server(debug=True)

# ==============================================================================
# REQUEST PROFILING AND LOGGING
# ==============================================================================
# Times every route and every outbound API call without affecting the user.
# Records go through the standard logging module:
#   needibay.performance  -> one line per route
#   needibay.slow         -> routes / functions above the thresholds
#   needibay.api          -> outbound REST calls
#
# ON/OFF: app.config['ENABLE_PROFILING']
# ==============================================================================

import logging
import threading
import time
from collections import defaultdict
from functools import wraps

perf_logger = logging.getLogger('needibay.performance')
slow_logger = logging.getLogger('needibay.slow')
api_logger = logging.getLogger('needibay.api')

# Defaults, overwritten by init_profiling() from app.config
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

# Human readable names for the logs
ROUTE_NAMES = {
    # Auth
    'POST /': 'Log in',
    'GET /logout': 'Log out',
    'GET /dashboard': 'Open dashboard',

    # Admin
    'GET /admin': 'Admin dashboard',
    'POST /admin/distributors/new': 'Create distributor',
    'GET /admin/distributors': 'View distributors',
    'POST /admin/distributors/<distributor_id>/delete': 'Delete distributor',
    'POST /admin/salespersons/new': 'Create salesperson',
    'GET /admin/salespersons': 'View salespersons',
    'POST /admin/salespersons/<salesperson_id>/delete': 'Delete salesperson',
    'POST /admin/products/new': 'Create product',
    'POST /admin/categories': 'Create category',
    'GET /admin/products': 'View products',
    'POST /admin/products/<int:product_id>/edit': 'Edit product',
    'POST /admin/products/<int:product_id>/variants': 'Add variant',
    'POST /admin/products/<int:product_id>/delete': 'Delete product',
    'GET /admin/shops': 'View shops',
    'GET /admin/orders': 'View orders',
    'GET /admin/orders/export': 'Export orders XLSX',

    # Distributor
    'GET /distributor/orders': 'View distributor orders',
    'POST /distributor/orders/<int:order_id>': 'Update order',
    'POST /distributor/orders/<int:order_id>/quantities': 'Update quantities',
    'POST /distributor/orders/<int:order_id>/partial-payment': 'Update partial payment',

    # Salesperson
    'GET /salesperson': 'Salesperson dashboard',
    'POST /salesperson/shops/new': 'Create shop',
    'GET /salesperson/orders/new': 'Open order form',
    'POST /salesperson/orders/new': 'Submit order',
    'POST /salesperson/orders/new/items': 'Add order item',
    'POST /salesperson/orders/new/items/<int:index>/delete': 'Remove order item',
    'POST /salesperson/orders/new/clear': 'Clear order items',
    'GET /salesperson/orders': 'View salesperson orders',
}


# ═══════════════════════════════════════════════════════════════════════════
# IN-MEMORY FUNCTION STATS
# ═══════════════════════════════════════════════════════════════════════════

# {function_name: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def configure_logging(level='INFO'):
    """Attach a console handler to the package logger once."""
    root = logging.getLogger('needibay')
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        root.addHandler(handler)
    return root


def _get_route_name(method, path, rule=None):
    """
    Readable name for a route.
    Tries ROUTE_NAMES by path, then by Flask rule, otherwise the raw route.
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]

    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]

    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1. ROUTE PROFILING
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    """
    Log one route timing.

    Args:
        method: GET, POST, ...
        path: requested path (/admin/orders)
        rule: Flask rule (/distributor/orders/<int:order_id>)
        time_ms: elapsed milliseconds
        user: email of the logged-in user, if any
    """
    perf_logger.info(
        "%s | user=%s | %s %s | %.0f ms",
        _get_route_name(method, path, rule), user or 'anonymous', method, path, time_ms,
    )


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL
    log = slow_logger.warning if level == 'WARNING' else slow_logger.error
    log(
        "Slow route: %s | user=%s | %s %s | %.0f ms (threshold %d ms)",
        _get_route_name(method, path, rule), user or 'anonymous', method, path, time_ms, threshold,
    )


def init_profiling(app):
    """
    Register before_request / after_request hooks on a Flask app.

    Usage:
        from needibay.request_logger import init_profiling
        init_profiling(app)
    """
    global THRESHOLD_WARNING, THRESHOLD_CRITICAL

    if not app.config.get('ENABLE_PROFILING', True):
        return

    THRESHOLD_WARNING = app.config.get('SLOW_THRESHOLD_MS', THRESHOLD_WARNING)
    THRESHOLD_CRITICAL = app.config.get('CRITICAL_THRESHOLD_MS', THRESHOLD_CRITICAL)

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response

        if request.path.startswith('/static'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path
        user = (session.get('user') or {}).get('email')

        log_route_performance(method, path, rule, elapsed, user)

        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, user, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2. OUTBOUND API CALLS
# ═══════════════════════════════════════════════════════════════════════════

def log_api_call(method, url, status, time_ms):
    """Log one REST call. ``status`` is None when no response arrived."""
    if status is None:
        api_logger.warning("%s %s -> no response (%.0f ms)", method, url, time_ms)
    elif status >= 400:
        api_logger.warning("%s %s -> %s (%.0f ms)", method, url, status, time_ms)
    else:
        api_logger.info("%s %s -> %s (%.0f ms)", method, url, status, time_ms)


# ═══════════════════════════════════════════════════════════════════════════
# 3. DECORATOR FOR KEY FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Time a function and keep call statistics.

    Usage:
        @profile_function
        def my_function():
            ...

        @profile_function(name="Export orders")
        def export_orders():
            ...
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    slow_logger.warning("Slow function: %s | %.0f ms", func_name, elapsed_ms)

        return wrapper

    # Allow bare @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def get_function_stats():
    """Snapshot of the timing statistics, with the average per function."""
    with _stats_lock:
        return {
            fn: {
                'calls': s['calls'],
                'avg_ms': round(s['total_time'] / s['calls'], 2) if s['calls'] else 0.0,
                'max_ms': round(s['max_time'], 2),
            }
            for fn, s in _function_stats.items()
        }

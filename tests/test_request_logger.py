import logging

from flask import Flask

from needibay.request_logger import (
    _get_route_name,
    get_function_stats,
    init_profiling,
    log_api_call,
    profile_function,
)


def test_route_names_by_path_and_rule():
    assert _get_route_name('POST', '/') == 'Log in'
    assert _get_route_name('GET', '/admin/orders/export') == 'Export orders XLSX'
    assert _get_route_name('POST', '/distributor/orders/31', '/distributor/orders/<int:order_id>') == 'Update order'
    assert _get_route_name('GET', '/nowhere') == 'GET /nowhere'


def test_profile_function_counts_calls():
    @profile_function(name='test double')
    def double(x):
        return x * 2

    assert double(2) == 4
    assert double(3) == 6
    stats = get_function_stats()['test double']
    assert stats['calls'] == 2
    assert stats['max_ms'] >= 0


def test_route_timings_are_logged(caplog):
    app = Flask(__name__)
    app.config.update(ENABLE_PROFILING=True, SLOW_THRESHOLD_MS=300, CRITICAL_THRESHOLD_MS=700)
    init_profiling(app)

    @app.route('/ping')
    def ping():
        return 'pong'

    with caplog.at_level(logging.INFO, logger='needibay.performance'):
        assert app.test_client().get('/ping').data == b'pong'
    assert any('GET /ping' in r.getMessage() for r in caplog.records)


def test_failed_api_calls_are_warnings(caplog):
    with caplog.at_level(logging.INFO, logger='needibay.api'):
        log_api_call('GET', 'http://api.test/admin/get-orders', None, 12)
        log_api_call('GET', 'http://api.test/admin/get-orders', 200, 12)
    levels = [r.levelname for r in caplog.records if r.name == 'needibay.api']
    assert levels == ['WARNING', 'INFO']

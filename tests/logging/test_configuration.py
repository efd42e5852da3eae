import json
import logging

import pytest

from crkit._cogs.helpers.loggers import JsonFormatter, LogFormat, configure, make_formatter


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)


def _get_own_handlers():
    logger = logging.getLogger()
    return [handler for handler in logger.handlers
            if type(handler) is logging.StreamHandler and handler.formatter is not None]


@pytest.mark.parametrize('kwargs, level', [
    (dict(), logging.INFO),
    (dict(verbose=True), logging.DEBUG),
    (dict(debug=True), logging.DEBUG),
    (dict(quiet=True), logging.WARNING),
])
def test_levels(kwargs, level):
    configure(**kwargs)
    assert logging.getLogger().level == level
    assert len(_get_own_handlers()) == 1


@pytest.mark.parametrize('log_format', [LogFormat.PLAIN, LogFormat.FULL])
def test_text_formatters(log_format):
    configure(log_format=log_format)
    [handler] = _get_own_handlers()
    assert type(handler.formatter) is logging.Formatter


def test_json_formatter():
    configure(log_format=LogFormat.JSON)
    [handler] = _get_own_handlers()
    assert type(handler.formatter) is JsonFormatter


def test_unsupported_format():
    with pytest.raises(ValueError):
        make_formatter('%(message)s')


@pytest.mark.parametrize('debug, propagate', [(False, False), (True, True)])
def test_low_level_loggers(debug, propagate):
    configure(debug=debug)
    assert logging.getLogger('aiohttp').propagate is propagate
    assert logging.getLogger('asyncio').propagate is propagate


@pytest.mark.parametrize('levelno, severity', [
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
    (logging.CRITICAL, 'fatal'),
])
def test_json_severities(levelno, severity):
    record = logging.LogRecord('crkit.clients', levelno, __file__, 1, 'hello %s', ('world',), None)
    output = json.loads(JsonFormatter().format(record))
    assert output['message'] == 'hello world'
    assert output['severity'] == severity
    assert 'timestamp' in output

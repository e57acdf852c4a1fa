# tests/test_package.py
"""
Tests for the package entry point: exports, version information and logging.
"""

import logging

import gaussdist


def test_public_exports():
    for name in gaussdist.__all__:
        assert hasattr(gaussdist, name)


def test_version():
    assert gaussdist.get_version() == gaussdist.__version__
    info = gaussdist.get_version_info()
    assert info["version"] == gaussdist.__version__
    assert f"{info['major']}.{info['minor']}.{info['patch']}" == gaussdist.__version__


def test_package_logger_has_null_handler():
    logger = logging.getLogger("gaussdist")
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_set_log_level(restore_config):
    gaussdist.set_log_level("debug")
    assert logging.getLogger("gaussdist").level == logging.DEBUG
    gaussdist.set_log_level(logging.ERROR)
    assert logging.getLogger("gaussdist").level == logging.ERROR


def test_derivation_is_logged(caplog):
    gaussian = gaussdist.MultivariateGaussian(2, diagonal=False)
    with caplog.at_level(logging.DEBUG, logger="gaussdist"):
        gaussian.density([0.0, 0.0])
        gaussian.set_covariance_entry(0, 0, 2.0)
    messages = [record.getMessage() for record in caplog.records]
    assert any("Deriving full covariance state" in message for message in messages)
    assert any("Discarding derived state" in message for message in messages)

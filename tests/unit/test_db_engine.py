import ssl

import pytest

from src.safeops.core.db.engine import ssl_context_for

pytestmark = pytest.mark.unit


def test_disable_means_no_tls():
    assert ssl_context_for("disable") is None


@pytest.mark.parametrize(
    ("mode", "check_hostname", "verify_mode"),
    [
        ("prefer", False, ssl.CERT_NONE),
        ("require", False, ssl.CERT_NONE),
        ("verify-ca", False, ssl.CERT_REQUIRED),
        ("verify-full", True, ssl.CERT_REQUIRED),
    ],
)
def test_modes(mode, check_hostname, verify_mode):
    context = ssl_context_for(mode)

    assert context.check_hostname is check_hostname
    assert context.verify_mode == verify_mode


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError, match="database_ssl_mode"):
        ssl_context_for("allow-anything")

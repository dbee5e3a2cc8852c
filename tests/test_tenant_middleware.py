"""
Unit tests for subdomain extraction
"""

from menuhost.core.tenant_middleware import extract_subdomain


def test_header_takes_precedence():
    """The explicit header beats the host"""
    assert extract_subdomain("cafe-uno", "bistro.menuhost.app") == "cafe-uno"


def test_header_is_lowercased():
    assert extract_subdomain("Cafe-Uno", None) == "cafe-uno"


def test_subdomain_from_host():
    """First label of a three-label host"""
    assert extract_subdomain(None, "cafe-uno.menuhost.app") == "cafe-uno"


def test_port_is_ignored():
    assert extract_subdomain(None, "cafe-uno.menuhost.app:8443") == "cafe-uno"


def test_bare_domain_has_no_subdomain():
    """Two labels or fewer carry no tenant"""
    assert extract_subdomain(None, "menuhost.app") is None
    assert extract_subdomain(None, "localhost:8000") is None
    assert extract_subdomain(None, None) is None


def test_empty_header_falls_back_to_host():
    assert extract_subdomain("", "cafe-uno.menuhost.app") == "cafe-uno"

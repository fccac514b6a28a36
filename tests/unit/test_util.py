import pytest

from gliderecord import util


@pytest.mark.parametrize("name", ["incident", "sys_user", "u_table_2", "CMDB_CI"])
def test_valid_identifiers(name):
    assert util.is_valid_table(name)
    assert util.is_valid_column(name)


@pytest.mark.parametrize("name", ["", " ", "a b", "a-b", "a.b", "a^b", "ä", "abc\n", None, 5])
def test_invalid_identifiers(name):
    assert not util.is_valid_table(name)
    assert not util.is_valid_column(name)


def test_sys_id_format():
    assert util.is_valid_sys_id("0123456789abcdef0123456789abcdef")
    assert util.is_valid_sys_id("z" * 32)
    assert not util.is_valid_sys_id("0123456789ABCDEF0123456789ABCDEF")
    assert not util.is_valid_sys_id("a" * 31)
    assert not util.is_valid_sys_id(None)


def test_instance_host():
    assert util.instance_host("dev12345") == "dev12345.service-now.com"
    assert util.instance_host(" dev12345 ") == "dev12345.service-now.com"
    assert util.instance_host("snow.example.org") == "snow.example.org"
    assert util.instance_host("") == ""


def test_join_encoded_query():
    assert util.join_encoded_query(["active=true", "priority=1"]) == "active=true^priority=1"
    assert util.join_encoded_query([]) == ""

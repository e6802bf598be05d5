"""Tests for the platform client factory."""

import pytest

from exchange_clients.base_client import BasePerpsClient
from exchange_clients.factory import ExchangeFactory

MNEMONIC = "abandon " * 11 + "about"


def test_supported_exchanges():
    assert ExchangeFactory.get_supported_exchanges() == ["bullbear"]


def test_unknown_exchange_is_rejected():
    with pytest.raises(ValueError, match="Unsupported exchange"):
        ExchangeFactory.create_exchange("lighter")


def test_creates_bullbear_client(tmp_path):
    client = ExchangeFactory.create_exchange("BullBear", {"mnemonic": MNEMONIC, "cache_dir": str(tmp_path)})

    assert isinstance(client, BasePerpsClient)
    assert client.get_exchange_name() == "bullbear"


def test_register_exchange_stores_import_path():
    from exchange_clients.bullbear import BullBearClient

    original = dict(ExchangeFactory._registered_exchanges)
    try:
        ExchangeFactory.register_exchange("Other", BullBearClient)
        assert ExchangeFactory._registered_exchanges["other"] == "exchange_clients.bullbear.client.BullBearClient"
    finally:
        ExchangeFactory._registered_exchanges = original


def test_register_exchange_rejects_foreign_class():
    with pytest.raises(ValueError):
        ExchangeFactory.register_exchange("bad", dict)

# ==============================================
# Tests for MongoClient (pymongo mocked)
# ==============================================

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import ConnectionFailure

from docmigrate.config import MongoConfig
from docmigrate.errors import ConnectivityError, NotConnectedError
from docmigrate.storage.mongo_client import SYSTEM_COLLECTION_FILTER, MongoClient


@pytest.fixture
def pymongo_client():
    return MagicMock()


@pytest.fixture
def mongo(pymongo_client):
    with patch("docmigrate.storage.mongo_client.PyMongoClient", return_value=pymongo_client):
        client = MongoClient.from_config(MongoConfig(database="shop"))
        client.connect()
        yield client


def test_connect_pings_server(mongo, pymongo_client):
    pymongo_client.admin.command.assert_called_once_with("ping")
    assert mongo.is_connected


def test_connect_failure_raises_connectivity_error(pymongo_client):
    pymongo_client.admin.command.side_effect = ConnectionFailure("no server")
    with patch("docmigrate.storage.mongo_client.PyMongoClient", return_value=pymongo_client):
        client = MongoClient.from_config(MongoConfig())
        with pytest.raises(ConnectivityError):
            client.connect()
    assert not client.is_connected
    pymongo_client.close.assert_called_once()


def test_list_collection_names_skips_system(mongo, pymongo_client):
    database = pymongo_client.__getitem__.return_value
    database.list_collection_names.return_value = ["orders", "users"]

    assert mongo.list_collection_names() == ["orders", "users"]
    pymongo_client.__getitem__.assert_called_with("shop")
    database.list_collection_names.assert_called_once_with(filter=SYSTEM_COLLECTION_FILTER)


def test_find_all(mongo, pymongo_client):
    collection = pymongo_client.__getitem__.return_value.__getitem__.return_value
    collection.find.return_value = iter([{"a": 1}, {"a": 2}])
    assert mongo.find_all("orders") == [{"a": 1}, {"a": 2}]
    collection.find.assert_called_once_with({})


def test_insert_batch(mongo, pymongo_client):
    collection = pymongo_client.__getitem__.return_value.__getitem__.return_value
    collection.insert_many.return_value.inserted_ids = [1, 2]
    assert mongo.insert_batch("orders", [{"a": 1}, {"a": 2}]) == 2
    assert mongo.insert_batch("orders", []) == 0
    collection.insert_many.assert_called_once()


def test_not_connected():
    with pytest.raises(NotConnectedError):
        MongoClient.from_config(MongoConfig()).find_all("orders")

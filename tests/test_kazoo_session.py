from unittest.mock import MagicMock, patch

import pytest
from kazoo.exceptions import NodeExistsError, NoNodeError
from kazoo.handlers.threading import KazooTimeoutError
from kazoo.security import ACL, Id, Permissions

from config_tree.errors import CoordinationConnectionError
from config_tree.tree import KazooSession, connect

ACLS = [ACL(Permissions.ALL, Id("ip", "10.0.0.5"))]


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def kazoo(client):
    return KazooSession(client, "zk1:2181")


class TestConnect:
    @patch("config_tree.tree.kazoo_session.KazooClient")
    def test_starts_client(self, mock_client_cls):
        session = connect("zk1", 2182, timeout=3.0)

        mock_client_cls.assert_called_once()
        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["hosts"] == "zk1:2182"
        assert kwargs["timeout"] == 3.0
        mock_client_cls.return_value.start.assert_called_once_with(timeout=3.0)
        assert session.hosts == "zk1:2182"
        assert session.client is mock_client_cls.return_value

    @patch("config_tree.tree.kazoo_session.KazooClient")
    def test_timeout(self, mock_client_cls):
        mock_client_cls.return_value.start.side_effect = KazooTimeoutError("Connection time-out")

        with pytest.raises(CoordinationConnectionError) as exc_info:
            connect("zk1")

        assert exc_info.value.hosts == "zk1:2181"
        assert isinstance(exc_info.value, ConnectionError)
        mock_client_cls.return_value.stop.assert_called_once()

    @patch("config_tree.tree.kazoo_session.KazooClient")
    def test_start_failure_stops_client(self, mock_client_cls):
        mock_client_cls.return_value.start.side_effect = OSError("Connection refused")

        with pytest.raises(CoordinationConnectionError, match="Connection refused"):
            connect("zk1")

        mock_client_cls.return_value.stop.assert_called_once()

    @patch("config_tree.tree.kazoo_session.KazooClient")
    def test_bad_hosts(self, mock_client_cls):
        mock_client_cls.side_effect = ValueError("bad host")
        with pytest.raises(CoordinationConnectionError, match="bad host"):
            connect("::::")


class TestKazooSession:
    def test_exists(self, kazoo, client):
        client.exists.return_value = None
        assert kazoo.exists("/a") is False
        client.exists.return_value = MagicMock()
        assert kazoo.exists("/a") is True

    def test_get_empty_node(self, kazoo, client):
        client.get.return_value = (None, MagicMock())
        assert kazoo.get("/a") == b""

    def test_write_creates_missing_node(self, kazoo, client):
        client.exists.return_value = None
        kazoo.write("/a", b"1", ACLS)
        client.create.assert_called_once_with("/a", b"1", acl=ACLS)
        client.set.assert_not_called()

    def test_write_overwrites_existing_node(self, kazoo, client):
        client.exists.return_value = MagicMock()
        kazoo.write("/a", b"2", ACLS)
        client.create.assert_not_called()
        client.set.assert_called_once_with("/a", b"2")
        client.set_acls.assert_called_once_with("/a", ACLS)

    def test_empty_acl_is_passed_through(self, kazoo, client):
        client.exists.return_value = MagicMock()
        kazoo.write("/a", b"4", [])
        client.set_acls.assert_called_once_with("/a", [])

        client.exists.return_value = None
        kazoo.ensure("/b", [])
        client.create.assert_called_once_with("/b", b"", acl=[])

    def test_write_after_concurrent_create(self, kazoo, client):
        client.exists.return_value = None
        client.create.side_effect = NodeExistsError()
        kazoo.write("/a", b"3")
        client.set.assert_called_once_with("/a", b"3")
        client.set_acls.assert_not_called()

    def test_ensure(self, kazoo, client):
        client.exists.return_value = None
        assert kazoo.ensure("/a", ACLS) is True
        client.create.assert_called_once_with("/a", b"", acl=ACLS)

        client.create.side_effect = NodeExistsError()
        assert kazoo.ensure("/b") is False

    def test_errors_propagate(self, kazoo, client):
        client.get_children.side_effect = NoNodeError()
        with pytest.raises(NoNodeError):
            kazoo.list_children("/missing")

    def test_list_children_sorted(self, kazoo, client):
        client.get_children.return_value = ["b", "a"]
        assert kazoo.list_children("/") == ["a", "b"]

    def test_context_manager_closes(self, kazoo, client):
        with kazoo:
            pass
        client.stop.assert_called_once()
        client.close.assert_called_once()

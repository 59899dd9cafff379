import unittest
from unittest.mock import MagicMock, patch

from ldap_entry.adapters.result_set import ResultSet
from ldap_entry.exceptions import (
    LDAPBindError,
    LDAPConfigurationError,
    LDAPConnectionError,
    LDAPOperationError,
)
from ldap_entry.facade.ldap_connection import LDAPConnection
from ldap_entry.models.entry import Entry
from ldap_entry.models.filter import Filter
from ldap_entry.models.operation_result import OperationResult
from ldap_entry.models.search_results import SearchResults

BASE_DN = "dc=example,dc=com"


def make_transport():
    transport = MagicMock()
    for name in (
        "open", "bind", "add_entry", "delete_entry", "modify_add",
        "modify_replace", "modify_delete", "rename",
    ):
        getattr(transport, name).return_value = OperationResult()
    transport.search.return_value = OperationResult(result_set=ResultSet([]))
    return transport


class TestLDAPConnection(unittest.TestCase):
    """Test cases for the LDAPConnection facade."""

    def setUp(self):
        self.transport = make_transport()
        self.config = {"hostname": "ldap.example.com", "base_dn": BASE_DN}
        self.conn = LDAPConnection(self.config, transport=self.transport)

    # ----- Construction -----

    def test_initialization_binds_anonymously(self):
        self.transport.open.assert_called_once_with()
        self.transport.bind.assert_called_once_with()
        self.assertTrue(self.conn.is_connected)
        self.assertEqual(self.conn.port, 389)

    def test_ldaps_default_port(self):
        conn = LDAPConnection({"hostname": "ldaps://ldap.example.com", "base_dn": BASE_DN}, transport=make_transport())
        self.assertEqual(conn.port, 636)

    def test_explicit_port(self):
        conn = LDAPConnection(dict(self.config, port=10389), transport=make_transport())
        self.assertEqual(conn.port, 10389)

    def test_missing_hostname(self):
        transport = make_transport()
        with self.assertRaises(LDAPConfigurationError):
            LDAPConnection({"base_dn": BASE_DN}, transport=transport)
        transport.open.assert_not_called()

    def test_missing_base_dn(self):
        transport = make_transport()
        with self.assertRaises(LDAPConfigurationError):
            LDAPConnection({"hostname": "ldap.example.com", "base_dn": ""}, transport=transport)
        transport.open.assert_not_called()

    def test_unreachable_server(self):
        transport = make_transport()
        transport.open.return_value = OperationResult.failure("Could not connect")

        with self.assertRaises(LDAPConnectionError) as ctx:
            LDAPConnection(self.config, transport=transport)

        self.assertEqual(ctx.exception.code, -1)
        transport.bind.assert_not_called()

    def test_anonymous_bind_failure_is_connection_error(self):
        transport = make_transport()
        transport.bind.return_value = OperationResult(success=False, code=-1, message="down")

        with self.assertRaises(LDAPConnectionError):
            LDAPConnection(self.config, transport=transport)
        transport.close.assert_called_once_with()

    def test_configured_bind_with_password(self):
        transport = make_transport()
        config = dict(self.config, bind_dn="cn=admin,dc=example,dc=com", password="secret")

        LDAPConnection(config, transport=transport)

        self.assertEqual(transport.bind.call_args_list[-1][0], ("cn=admin,dc=example,dc=com", "secret"))

    def test_configured_bind_rejected_closes_transport(self):
        transport = make_transport()
        transport.bind.side_effect = [
            OperationResult(),
            OperationResult(success=False, code=49, message="Invalid credentials"),
        ]
        config = dict(self.config, bind_dn="cn=admin,dc=example,dc=com", password="wrong")

        with self.assertRaises(LDAPBindError) as ctx:
            LDAPConnection(config, transport=transport)

        self.assertEqual(ctx.exception.code, 49)
        transport.close.assert_called_once_with()

    def test_configured_bind_connection_lost_closes_transport(self):
        transport = make_transport()
        transport.bind.side_effect = [
            OperationResult(),
            OperationResult(success=False, code=-1, message="socket closed"),
        ]
        config = dict(self.config, bind_dn="cn=admin,dc=example,dc=com", password="secret")

        with self.assertRaises(LDAPConnectionError):
            LDAPConnection(config, transport=transport)

        transport.close.assert_called_once_with()

    @patch("ldap_entry.config.keyring.get_password")
    def test_configured_bind_with_keyring(self, mock_get_password):
        mock_get_password.return_value = "from-keyring"
        transport = make_transport()
        config = dict(self.config, bind_dn="cn=admin,dc=example,dc=com", keyring_service="ldap_test")

        LDAPConnection(config, transport=transport)

        mock_get_password.assert_called_once_with("ldap_test", "cn=admin,dc=example,dc=com")
        self.assertEqual(transport.bind.call_args_list[-1][0], ("cn=admin,dc=example,dc=com", "from-keyring"))

    # ----- Bind -----

    def test_bind_rejected(self):
        self.transport.bind.return_value = OperationResult(success=False, code=49, message="Invalid credentials")

        with self.assertRaises(LDAPBindError) as ctx:
            self.conn.bind("cn=admin,dc=example,dc=com", "wrong")

        self.assertEqual(ctx.exception.code, 49)
        self.assertIn("cn=admin,dc=example,dc=com", ctx.exception.message)

    def test_bind_connection_lost(self):
        self.transport.bind.return_value = OperationResult(success=False, code=-1, message="socket closed")
        with self.assertRaises(LDAPConnectionError):
            self.conn.bind("cn=admin,dc=example,dc=com", "secret")

    def test_bind_other_error(self):
        self.transport.bind.return_value = OperationResult(success=False, code=53, message="Unwilling to perform")
        with self.assertRaises(LDAPOperationError) as ctx:
            self.conn.bind("cn=admin,dc=example,dc=com", "secret")
        self.assertEqual(str(ctx.exception), "Error code 53: Unwilling to perform")

    # ----- Search / read -----

    def test_search_under_base(self):
        results = self.conn.search(Filter.create("objectClass=person"), ["cn"])

        self.transport.search.assert_called_once_with(BASE_DN, "(objectClass=person)", ["cn"])
        self.assertIsInstance(results, SearchResults)
        self.assertEqual(results.base_dn, BASE_DN)

    def test_search_under_relative_base(self):
        self.conn.search("(uid=jdoe)", search_rdn="ou=People")
        self.transport.search.assert_called_once_with(f"ou=People,{BASE_DN}", "(uid=jdoe)", [])

    def test_search_passes_binary_fields(self):
        conn = LDAPConnection(dict(self.config, binary_fields=["jpegPhoto"]), transport=self.transport)
        self.assertEqual(conn.search("(uid=*)").binary_fields, ["jpegPhoto"])

    def test_search_error(self):
        self.transport.search.return_value = OperationResult(success=False, code=87, message="Bad search filter")
        with self.assertRaises(LDAPOperationError) as ctx:
            self.conn.search("uid=(")
        self.assertEqual(ctx.exception.code, 87)

    def test_read(self):
        dn = f"uid=jdoe,ou=People,{BASE_DN}"
        self.transport.read_one.return_value = OperationResult(result_set=ResultSet([
            {"dn": dn, "attributes": {"uid": ["jdoe"], "cn": ["John Doe"]}},
        ]))

        entry = self.conn.read("uid=jdoe,ou=People", ["uid", "cn"])

        self.transport.read_one.assert_called_once_with(dn, "(objectclass=*)", ["uid", "cn"])
        self.assertIsInstance(entry, Entry)
        self.assertEqual(entry.rdn, "uid=jdoe,ou=People")
        self.assertEqual(entry.dn, dn)
        self.assertEqual(entry.data, {"uid": "jdoe", "cn": "John Doe"})

    def test_read_resolves_roles(self):
        dn = f"uid=jdoe,ou=People,{BASE_DN}"
        role_dn = f"cn=Admins,{BASE_DN}"
        self.transport.read_one.side_effect = [
            OperationResult(result_set=ResultSet([
                {"dn": dn, "attributes": {"uid": ["jdoe"], "nsRole": [role_dn]}},
            ])),
            OperationResult(result_set=ResultSet([
                {"dn": role_dn, "attributes": {"cn": ["Admins"]}},
            ])),
        ]

        entry = self.conn.read("uid=jdoe,ou=People", ["uid", "nsRole"])

        self.assertEqual(entry.data["roles"], ["Admins"])

    def test_read_missing_entry(self):
        self.transport.read_one.return_value = OperationResult(success=False, code=32, message="No such object")
        self.assertIsNone(self.conn.read("uid=nobody,ou=People"))

    def test_read_other_error(self):
        self.transport.read_one.return_value = OperationResult(success=False, code=50, message="Insufficient access")
        with self.assertRaises(LDAPOperationError):
            self.conn.read("uid=jdoe,ou=People")

    # ----- Writes -----

    def test_add(self):
        data = {"objectClass": ["top", "person"], "cn": "Jane", "sn": "Doe"}
        self.conn.add("cn=Jane,ou=People", data)
        self.transport.add_entry.assert_called_once_with(f"cn=Jane,ou=People,{BASE_DN}", data)

    def test_add_error(self):
        self.transport.add_entry.return_value = OperationResult(success=False, code=68, message="Already exists")
        with self.assertRaises(LDAPOperationError) as ctx:
            self.conn.add("cn=Jane,ou=People", {"cn": "Jane"})
        self.assertEqual(ctx.exception.code, 68)

    def test_delete(self):
        self.conn.delete("cn=Jane,ou=People")
        self.transport.delete_entry.assert_called_once_with(f"cn=Jane,ou=People,{BASE_DN}")

    def test_rename_in_place(self):
        self.conn.rename("cn=Jane,ou=People", "cn=Janet")
        self.transport.rename.assert_called_once_with(
            f"cn=Jane,ou=People,{BASE_DN}", "cn=Janet", f"ou=People,{BASE_DN}", False
        )

    def test_rename_to_new_parent(self):
        self.conn.rename("cn=Jane,ou=People", "cn=Jane", "ou=Alumni", True)
        self.transport.rename.assert_called_once_with(
            f"cn=Jane,ou=People,{BASE_DN}", "cn=Jane", f"ou=Alumni,{BASE_DN}", True
        )

    def test_move(self):
        self.conn.move("cn=Jane,ou=People", "cn=Janet,ou=People")
        self.transport.rename.assert_called_once_with(
            f"cn=Jane,ou=People,{BASE_DN}", "cn=Janet", f"ou=People,{BASE_DN}", False
        )

    def test_attribute_shortcuts(self):
        dn = f"cn=Jane,ou=People,{BASE_DN}"
        self.conn.add_attributes("cn=Jane,ou=People", {"mail": "jane@example.com"})
        self.conn.replace_attributes("cn=Jane,ou=People", {"sn": "Roe"})
        self.conn.delete_attributes("cn=Jane,ou=People", {"title": []})

        self.transport.modify_add.assert_called_once_with(dn, {"mail": "jane@example.com"})
        self.transport.modify_replace.assert_called_once_with(dn, {"sn": "Roe"})
        self.transport.modify_delete.assert_called_once_with(dn, {"title": []})

    def test_attribute_shortcut_error(self):
        self.transport.modify_replace.return_value = OperationResult(success=False, code=65, message="Object class violation")
        with self.assertRaises(LDAPOperationError):
            self.conn.replace_attributes("cn=Jane,ou=People", {"objectClass": "nothing"})

    # ----- Lifecycle -----

    def test_disconnect_is_idempotent(self):
        self.conn.disconnect()
        self.conn.disconnect()
        self.transport.close.assert_called_once_with()
        self.assertFalse(self.conn.is_connected)

    def test_context_manager(self):
        with LDAPConnection(self.config, transport=self.transport) as conn:
            self.assertTrue(conn.is_connected)
        self.assertFalse(conn.is_connected)
        self.transport.close.assert_called_once_with()

    @patch("ldap_entry.facade.ldap_connection.LDAP3Transport")
    def test_default_transport_is_ldap3(self, mock_transport_class):
        mock_transport_class.return_value = make_transport()
        conn = LDAPConnection(self.config)
        mock_transport_class.assert_called_once_with(self.config)
        self.assertIs(conn.transport, mock_transport_class.return_value)

    @patch("ldap_entry.facade.ldap_connection.LDAPConfig.get_config")
    @patch("ldap_entry.facade.ldap_connection.LDAP3Transport")
    def test_from_env(self, mock_transport_class, mock_get_config):
        mock_get_config.return_value = self.config
        mock_transport_class.return_value = make_transport()

        conn = LDAPConnection.from_env()

        self.assertEqual(conn.base_dn, BASE_DN)
        mock_transport_class.assert_called_once_with(self.config)


if __name__ == "__main__":
    unittest.main()

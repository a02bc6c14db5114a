import io
import unittest
from unittest.mock import patch, MagicMock

import requests

from aca_e2e.config import Config
from aca_e2e.errors import RepoApiError, WaitTimeoutError
from aca_e2e.repo_client import (
    AlreadyExists,
    Created,
    RepoClient,
    SITE_VISIBILITY,
    PUBLIC_API_PATH,
)

HOST = "http://repo:8080"
API = HOST + PUBLIC_API_PATH


def make_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    response.text = text
    return response


def list_payload(entries, total=None):
    return {"list": {
        "entries": [{"entry": e} for e in entries],
        "pagination": {"totalItems": len(entries) if total is None else total},
    }}


@patch('time.sleep', return_value=None)
@patch('requests.Session')
class TestRepoClient(unittest.TestCase):

    def make_client(self, mock_session_cls, username="alice"):
        self.session = MagicMock()
        mock_session_cls.return_value = self.session
        config = Config(api_host=HOST, api_wait_timeout=5, api_poll_interval=0)
        return RepoClient(username, config=config)

    def test_defaults_to_admin_credentials(self, mock_session_cls, mock_sleep):
        mock_session_cls.return_value = MagicMock()
        client = RepoClient(config=Config(api_host=HOST, admin_username="root", admin_password="secret"))
        self.assertEqual(client.username, "root")
        self.assertEqual(client.rest.session.auth, ("root", "secret"))

    def test_password_defaults_to_username(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.assertEqual(client.rest.session.auth, ("alice", "alice"))

    def test_create_user_created(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(201, {"entry": {"id": "bob"}})

        result = client.people.create_user("bob")

        self.assertIsInstance(result, Created)
        self.assertEqual(result.id, "bob")
        method, url = self.session.request.call_args[0]
        body = self.session.request.call_args[1]["json"]
        self.assertEqual((method, url), ("POST", f"{API}/people"))
        self.assertEqual(body["password"], "bob")
        self.assertEqual(body["email"], "bob@alfresco.com")

    def test_create_user_conflict_fetches_existing(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.side_effect = [
            make_response(409, {"error": {"briefSummary": "Duplicate"}}),
            make_response(200, {"entry": {"id": "bob", "firstName": "Bob"}}),
        ]

        result = client.people.create_user("bob")

        self.assertIsInstance(result, AlreadyExists)
        self.assertFalse(result.created)
        self.assertEqual(result.entry["firstName"], "Bob")
        method, url = self.session.request.call_args[0]
        self.assertEqual((method, url), ("GET", f"{API}/people/bob"))

    def test_other_errors_raise(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(500, {"error": {"briefSummary": "Server exploded"}})

        with self.assertRaises(RepoApiError) as cm:
            client.sites.create_site("site-1")

        self.assertEqual(cm.exception.status_code, 500)
        self.assertIn("Server exploded", str(cm.exception))

    def test_connection_errors_are_wrapped(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(RepoApiError) as cm:
            client.nodes.get_node_by_id("abc")
        self.assertIsNone(cm.exception.status_code)

    def test_create_site_body(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(201, {"entry": {"id": "site-1"}})

        client.sites.create_site("site-1", SITE_VISIBILITY.PRIVATE)

        body = self.session.request.call_args[1]["json"]
        self.assertEqual(body["id"], "site-1")
        self.assertEqual(body["visibility"], "PRIVATE")

    def test_get_doc_lib_id(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(200, {"entry": {"id": "doclib-1", "folderId": "documentLibrary"}})

        self.assertEqual(client.sites.get_doc_lib_id("site-1"), "doclib-1")
        self.assertEqual(self.session.request.call_args[0][1], f"{API}/sites/site-1/containers/documentLibrary")

    def test_create_file_conflict_fetches_by_path(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.side_effect = [
            make_response(409, {"error": {"briefSummary": "Duplicate child name"}}),
            make_response(200, {"entry": {"id": "node-9", "name": "a.txt"}}),
        ]

        result = client.nodes.create_file("a.txt", "parent-1")

        self.assertIsInstance(result, AlreadyExists)
        self.assertEqual(result.id, "node-9")
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", f"{API}/nodes/parent-1"))
        self.assertEqual(kwargs["params"], {"relativePath": "a.txt"})

    def test_create_folder_with_relative_path(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(201, {"entry": {"id": "f-1"}})

        client.nodes.create_folder("retry-1", relative_path="Builds/ACA/42/")

        body = self.session.request.call_args[1]["json"]
        self.assertEqual(body["nodeType"], "cm:folder")
        self.assertEqual(body["relativePath"], "Builds/ACA/42/")

    def test_delete_node_permanent_flag(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(204)

        client.nodes.delete_node_by_id("n-1", permanent=False)

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("DELETE", f"{API}/nodes/n-1"))
        self.assertEqual(kwargs["params"], {"permanent": "false"})

    def test_unshare_file_looks_up_link_by_name(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.side_effect = [
            make_response(200, list_payload([
                {"id": "link-1", "nodeId": "n-1", "name": "a.txt"},
                {"id": "link-2", "nodeId": "n-2", "name": "b.txt"},
            ])),
            make_response(204),
        ]

        client.shared.unshare_file("b.txt")

        self.assertEqual(self.session.request.call_args[0], ("DELETE", f"{API}/shared-links/link-2"))

    def test_unshare_unknown_file_raises(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(200, list_payload([]))

        with self.assertRaises(RepoApiError) as cm:
            client.shared.unshare_file("missing.txt")
        self.assertEqual(cm.exception.status_code, 404)

    def test_shared_wait_for_api_polls_until_count_matches(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.side_effect = [
            make_response(200, list_payload([], total=1)),
            make_response(200, list_payload([], total=2)),
            make_response(200, list_payload([], total=3)),
        ]

        self.assertEqual(client.shared.wait_for_api(3), 3)
        self.assertEqual(self.session.request.call_count, 3)
        self.assertEqual(mock_sleep.call_count, 2)

    @patch('aca_e2e.waits.time.monotonic', side_effect=[0, 1, 10])
    def test_favorites_wait_for_api_times_out(self, mock_monotonic, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(200, list_payload([], total=1))

        with self.assertRaises(WaitTimeoutError) as cm:
            client.favorites.wait_for_api(2)
        self.assertEqual(cm.exception.last_value, 1)

    def test_add_favorite_body(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(201, {"entry": {"targetGuid": "n-1"}})

        client.favorites.add_favorite_by_id("folder", "n-1")

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("POST", f"{API}/people/-me-/favorites"))
        self.assertEqual(kwargs["json"], {"target": {"folder": {"guid": "n-1"}}})

    def test_empty_trash_purges_every_node(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.side_effect = [
            make_response(200, list_payload([{"id": "d-1"}, {"id": "d-2"}])),
            make_response(204),
            make_response(204),
        ]

        self.assertEqual(client.trashcan.empty_trash(), 2)
        urls = [c[0][1] for c in self.session.request.call_args_list[1:]]
        self.assertEqual(urls, [f"{API}/deleted-nodes/d-1", f"{API}/deleted-nodes/d-2"])

    def test_upload_file_is_multipart(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(201, {"entry": {"id": "up-1"}})
        fileobj = io.BytesIO(b"data")

        entry = client.upload.upload_file(fileobj, "folder-1", "result.tar")

        self.assertEqual(entry["id"], "up-1")
        kwargs = self.session.request.call_args[1]
        self.assertEqual(kwargs["files"], {"filedata": ("result.tar", fileobj)})
        self.assertEqual(kwargs["data"]["autoRename"], "true")
        self.assertNotIn("json", kwargs)

    def test_login_stores_ticket(self, mock_session_cls, mock_sleep):
        client = self.make_client(mock_session_cls)
        self.session.request.return_value = make_response(201, {"entry": {"id": "TICKET_1"}})

        self.assertEqual(client.login(), "TICKET_1")
        self.assertIn("/authentication/versions/1/tickets", self.session.request.call_args[0][1])


if __name__ == '__main__':
    unittest.main()

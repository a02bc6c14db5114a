import logging

import requests
from requests.adapters import HTTPAdapter

from .config import load_config
from .errors import RepoApiError
from .waits import wait_for_count

logger = logging.getLogger("aca_e2e.repo_client")

PUBLIC_API_PATH = "/alfresco/api/-default-/public/alfresco/versions/1"
SEARCH_API_PATH = "/alfresco/api/-default-/public/search/versions/1/search"
AUTH_API_PATH = "/alfresco/api/-default-/public/authentication/versions/1/tickets"
SERVICE_API_PATH = "/alfresco/service/api"

MAX_ITEMS = 1000


class SITE_VISIBILITY:
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    MODERATED = "MODERATED"


class SITE_ROLES:
    SITE_CONSUMER = "SiteConsumer"
    SITE_CONTRIBUTOR = "SiteContributor"
    SITE_COLLABORATOR = "SiteCollaborator"
    SITE_MANAGER = "SiteManager"


# --- Create results ---
# A create call never raises on a name clash: it answers with one of these.

class CreateResult:
    created = None

    def __init__(self, entry):
        self.entry = entry or {}

    @property
    def id(self):
        return self.entry.get("id")

    @property
    def name(self):
        return self.entry.get("name")

    def __repr__(self):
        return f"{type(self).__name__}(id={self.id!r})"


class Created(CreateResult):
    created = True


class AlreadyExists(CreateResult):
    created = False


def create_or_fetch(create, fetch, description):
    """
    Runs create(); on a 409 conflict runs fetch() instead.

    Args:
        create (callable): Returns the entry of the new resource.
        fetch (callable): Returns the entry of the existing resource.
        description (str): Used in log lines.

    Returns:
        Created or AlreadyExists
    """
    try:
        return Created(create())
    except RepoApiError as e:
        if e.status_code != 409:
            raise
        logger.info(f"{description} already exists, fetching the existing one.")
        return AlreadyExists(fetch())


def entries(response):
    """Unwraps the entries of a list response."""
    return [item["entry"] for item in response["list"]["entries"]]


def total_items(response):
    pagination = response["list"].get("pagination", {})
    return pagination.get("totalItems", len(response["list"]["entries"]))


def _error_message(response):
    try:
        return response.json()["error"]["briefSummary"]
    except (ValueError, KeyError, TypeError):
        return response.text[:200]


class RestSession:
    """Thin wrapper over requests.Session that turns HTTP errors into RepoApiError."""

    def __init__(self, host, username, password, timeout=30):
        self.host = host.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=10)
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)
        self.session.auth = (username, password)
        self.session.headers.update({"Accept": "application/json"})

    def request(self, method, url, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise RepoApiError(None, url, str(e))

        if not response.ok:
            raise RepoApiError(response.status_code, url, _error_message(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def put(self, url, **kwargs):
        return self.request("PUT", url, **kwargs)

    def delete(self, url, **kwargs):
        return self.request("DELETE", url, **kwargs)


class _Api:
    def __init__(self, client):
        self.client = client

    @property
    def rest(self):
        return self.client.rest

    def url(self, *parts):
        return self.client.url(*parts)

    def _wait_for_total(self, url, expect, timeout, description, params=None):
        config = self.client.config
        query = {"maxItems": 1}
        query.update(params or {})
        return wait_for_count(
            lambda: total_items(self.rest.get(url, params=query)),
            expect,
            timeout=config.api_wait_timeout if timeout is None else timeout,
            interval=config.api_poll_interval,
            description=f"{description} for {self.client.username}",
        )


class PeopleApi(_Api):

    def create_user(self, username, password=None, first_name=None, last_name=None, email=None):
        """
        Creates a person; an existing person with the same id is fetched instead.

        Returns:
            Created or AlreadyExists
        """
        body = {
            "id": username,
            "firstName": first_name or username,
            "lastName": last_name or "lastName",
            "email": email or f"{username}@alfresco.com",
            "password": password or username,
        }
        return create_or_fetch(
            lambda: self.rest.post(self.url("people"), json=body)["entry"],
            lambda: self.get_user(username),
            f"User '{username}'",
        )

    def get_user(self, username):
        return self.rest.get(self.url("people", username))["entry"]

    def delete_user(self, username):
        # The public API has no person delete; the repository service API does.
        url = f"{self.rest.host}{SERVICE_API_PATH}/people/{username}"
        self.rest.delete(url)
        logger.info(f"Deleted user '{username}'.")


class SitesApi(_Api):

    def create_site(self, title, visibility=SITE_VISIBILITY.PUBLIC, site_id=None, description=""):
        site_id = site_id or title
        body = {
            "id": site_id,
            "title": title,
            "description": description,
            "visibility": visibility,
        }
        return create_or_fetch(
            lambda: self.rest.post(self.url("sites"), json=body)["entry"],
            lambda: self.get_site(site_id),
            f"Site '{site_id}'",
        )

    def get_site(self, site_id):
        return self.rest.get(self.url("sites", site_id))["entry"]

    def delete_site(self, site_id, permanent=True):
        self.rest.delete(self.url("sites", site_id), params={"permanent": str(permanent).lower()})
        logger.info(f"Deleted site '{site_id}' (permanent={permanent}).")

    def delete_sites(self, site_ids, permanent=True):
        for site_id in site_ids:
            self.delete_site(site_id, permanent=permanent)

    def add_site_member(self, site_id, username, role):
        body = {"id": username, "role": role}
        return create_or_fetch(
            lambda: self.rest.post(self.url("sites", site_id, "members"), json=body)["entry"],
            lambda: self.rest.get(self.url("sites", site_id, "members", username))["entry"],
            f"Membership of '{username}' in '{site_id}'",
        )

    def get_doc_lib_id(self, site_id):
        """Returns the node id of the site's documentLibrary container."""
        entry = self.rest.get(self.url("sites", site_id, "containers", "documentLibrary"))["entry"]
        return entry["id"]


class NodesApi(_Api):

    def _create_node(self, node_type, name, parent_id, title="", description="", relative_path=None):
        body = {
            "name": name,
            "nodeType": node_type,
            "properties": {"cm:title": title, "cm:description": description},
        }
        if relative_path:
            body["relativePath"] = relative_path
        existing_path = f"{relative_path.rstrip('/')}/{name}" if relative_path else name
        return create_or_fetch(
            lambda: self.rest.post(self.url("nodes", parent_id, "children"), json=body)["entry"],
            lambda: self.get_node_by_path(existing_path, parent_id),
            f"Node '{existing_path}' under '{parent_id}'",
        )

    def create_file(self, name, parent_id="-my-", title="", description=""):
        return self._create_node("cm:content", name, parent_id, title, description)

    def create_folder(self, name, parent_id="-my-", title="", description="", relative_path=None):
        return self._create_node("cm:folder", name, parent_id, title, description, relative_path)

    def get_node_by_id(self, node_id):
        return self.rest.get(self.url("nodes", node_id))["entry"]

    def get_node_by_path(self, relative_path, parent_id="-my-"):
        return self.rest.get(self.url("nodes", parent_id), params={"relativePath": relative_path})["entry"]

    def get_node_children_count(self, node_id):
        return total_items(self.rest.get(self.url("nodes", node_id, "children"), params={"maxItems": 1}))

    def delete_node_by_id(self, node_id, permanent=True):
        self.rest.delete(self.url("nodes", node_id), params={"permanent": str(permanent).lower()})
        logger.info(f"Deleted node {node_id} (permanent={permanent}).")

    def delete_nodes_by_id(self, node_ids, permanent=True):
        for node_id in node_ids:
            self.delete_node_by_id(node_id, permanent=permanent)


class SharedLinksApi(_Api):

    def share_file_by_id(self, node_id):
        return create_or_fetch(
            lambda: self.rest.post(self.url("shared-links"), json={"nodeId": node_id})["entry"],
            lambda: self._find_link(lambda link: link.get("nodeId") == node_id, node_id),
            f"Shared link for {node_id}",
        )

    def share_files_by_ids(self, node_ids):
        return [self.share_file_by_id(node_id) for node_id in node_ids]

    def get_shared_links(self):
        return entries(self.rest.get(self.url("shared-links"), params={"maxItems": MAX_ITEMS}))

    def _find_link(self, match, what):
        for link in self.get_shared_links():
            if match(link):
                return link
        raise RepoApiError(404, self.url("shared-links"), f"No shared link for {what}")

    def unshare_file(self, name):
        """Removes the shared link of the node called `name`."""
        link = self._find_link(lambda entry: entry.get("name") == name, name)
        self.rest.delete(self.url("shared-links", link["id"]))
        logger.info(f"Unshared '{name}'.")

    def wait_for_api(self, expect, timeout=None):
        """Blocks until the shared-links listing reports exactly `expect` items."""
        return self._wait_for_total(self.url("shared-links"), expect, timeout, "shared links")


class FavoritesApi(_Api):

    def add_favorite_by_id(self, target_type, target_id):
        """
        Args:
            target_type (str): 'file', 'folder' or 'site'.
            target_id (str): Node id, or site guid for sites.
        """
        body = {"target": {target_type: {"guid": target_id}}}
        return create_or_fetch(
            lambda: self.rest.post(self.url("people", "-me-", "favorites"), json=body)["entry"],
            lambda: self.get_favorite(target_id),
            f"Favorite {target_type} {target_id}",
        )

    def add_favorites_by_ids(self, target_type, target_ids):
        return [self.add_favorite_by_id(target_type, target_id) for target_id in target_ids]

    def get_favorite(self, target_id):
        return self.rest.get(self.url("people", "-me-", "favorites", target_id))["entry"]

    def get_favorites(self):
        return entries(self.rest.get(self.url("people", "-me-", "favorites"), params={"maxItems": MAX_ITEMS}))

    def remove_favorite_by_id(self, target_id):
        self.rest.delete(self.url("people", "-me-", "favorites", target_id))

    def wait_for_api(self, expect, timeout=None):
        return self._wait_for_total(self.url("people", "-me-", "favorites"), expect, timeout, "favorites")


class TrashcanApi(_Api):

    def get_deleted_nodes(self):
        return entries(self.rest.get(self.url("deleted-nodes"), params={"maxItems": MAX_ITEMS}))

    def purge_node(self, node_id):
        self.rest.delete(self.url("deleted-nodes", node_id))

    def restore(self, node_id):
        return self.rest.post(self.url("deleted-nodes", node_id, "restore"))["entry"]

    def empty_trash(self):
        deleted = self.get_deleted_nodes()
        for node in deleted:
            self.purge_node(node["id"])
        logger.info(f"Purged {len(deleted)} node(s) from the trash of {self.client.username}.")
        return len(deleted)

    def wait_for_api(self, expect, timeout=None):
        return self._wait_for_total(self.url("deleted-nodes"), expect, timeout, "deleted nodes")


class SearchApi(_Api):

    def _body(self, name):
        return {
            "query": {"query": f'cm:name:"{name}*"', "language": "afts"},
            "filterQueries": [{"query": "+TYPE:'cm:folder' OR +TYPE:'cm:content'"}],
            "paging": {"maxItems": MAX_ITEMS},
        }

    def query_by_name(self, name):
        url = f"{self.rest.host}{SEARCH_API_PATH}"
        return entries(self.rest.post(url, json=self._body(name)))

    def wait_for_nodes(self, name, expect, timeout=None):
        """Waits for the search index to return `expect` nodes matching `name`."""
        config = self.client.config
        return wait_for_count(
            lambda: len(self.query_by_name(name)),
            expect,
            timeout=config.api_wait_timeout if timeout is None else timeout,
            interval=config.api_poll_interval,
            description=f"search results for '{name}'",
        )


class UploadApi(_Api):

    def upload_file(self, fileobj, parent_id, name, node_type="cm:content", auto_rename=True, relative_path=""):
        """
        Uploads a file-like object as multipart content.

        Returns:
            dict: The entry of the created node.
        """
        data = {
            "name": name,
            "nodeType": node_type,
            "autoRename": str(auto_rename).lower(),
        }
        if relative_path:
            data["relativePath"] = relative_path
        response = self.rest.post(
            self.url("nodes", parent_id, "children"),
            files={"filedata": (name, fileobj)},
            data=data,
        )
        logger.info(f"Uploaded '{name}' into {parent_id}.")
        return response["entry"]


class RepoClient:
    """
    REST client for the content repository, scoped to one user.

    Without credentials the client acts as the configured admin.
    """

    def __init__(self, username=None, password=None, config=None, host=None):
        self.config = config or load_config()
        if username is None:
            username = self.config.admin_username
            password = self.config.admin_password
        self.username = username
        self.password = password if password is not None else username
        self.rest = RestSession(host or self.config.api_host, self.username, self.password)
        self.ticket = None

        self.people = PeopleApi(self)
        self.sites = SitesApi(self)
        self.nodes = NodesApi(self)
        self.shared = SharedLinksApi(self)
        self.favorites = FavoritesApi(self)
        self.trashcan = TrashcanApi(self)
        self.search = SearchApi(self)
        self.upload = UploadApi(self)

    def url(self, *parts):
        return self.rest.host + PUBLIC_API_PATH + "/" + "/".join(str(p) for p in parts)

    def login(self):
        """Checks the credentials by requesting an authentication ticket."""
        url = self.rest.host + AUTH_API_PATH
        body = {"userId": self.username, "password": self.password}
        self.ticket = self.rest.post(url, json=body)["entry"]["id"]
        logger.info(f"Logged in to {self.rest.host} as {self.username}.")
        return self.ticket

    def __repr__(self):
        return f"RepoClient(username={self.username!r}, host={self.rest.host!r})"

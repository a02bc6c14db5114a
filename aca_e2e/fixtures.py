"""
Declarative provisioning of repository state for a group of UI tests.

A FixtureSpec is an ordered list of steps (create, share, favorite, delete,
unshare, wait). The Provisioner replays it against the REST API and fills a
FixtureContext with the ids of everything it made, plus the cleanup steps
that undo it. Tests receive the context explicitly instead of reading
module-level ids.
"""
import logging

from tabulate import tabulate

from .errors import TeardownError
from .repo_client import SITE_VISIBILITY

logger = logging.getLogger("aca_e2e.fixtures")

ADMIN = "admin"
USER = "user"


class Step:
    def __init__(self, kind, owner=USER, **args):
        self.kind = kind
        self.owner = owner
        self.args = args

    def __repr__(self):
        return f"Step({self.kind!r}, owner={self.owner!r}, {self.args!r})"


class FixtureSpec:
    """
    Ordered description of the remote state a test group needs.

    Every builder method returns the spec so calls can be chained:

        spec = (FixtureSpec()
                .user(username)
                .folder("folder", folder_name)
                .file("file1", file1_name, parent="folder")
                .share("file1")
                .wait_shared(1))
    """

    def __init__(self):
        self.steps = []

    def _add(self, kind, owner=USER, **args):
        self.steps.append(Step(kind, owner, **args))
        return self

    def user(self, username, password=None, delete_after=False):
        return self._add("user", ADMIN, username=username, password=password, delete_after=delete_after)

    def site(self, logical, title, visibility=SITE_VISIBILITY.PUBLIC, owner=ADMIN):
        return self._add("site", owner, logical=logical, title=title, visibility=visibility)

    def site_member(self, site, username, role, owner=ADMIN):
        return self._add("site_member", owner, site=site, username=username, role=role)

    def folder(self, logical, name, parent=None, owner=USER):
        return self._add("node", owner, logical=logical, name=name, parent=parent, folder=True)

    def file(self, logical, name, parent=None, owner=USER):
        return self._add("node", owner, logical=logical, name=name, parent=parent, folder=False)

    def share(self, *logicals, owner=USER):
        return self._add("share", owner, logicals=logicals)

    def unshare(self, logical, owner=USER):
        return self._add("unshare", owner, logical=logical)

    def favorite(self, target_type, *logicals, owner=USER):
        return self._add("favorite", owner, target_type=target_type, logicals=logicals)

    def delete(self, logical, permanent=True, owner=USER):
        return self._add("delete", owner, logical=logical, permanent=permanent)

    def wait_shared(self, expect, owner=USER):
        return self._add("wait_shared", owner, expect=expect)

    def wait_favorites(self, expect, owner=USER):
        return self._add("wait_favorites", owner, expect=expect)

    def wait_trash(self, expect, owner=USER):
        return self._add("wait_trash", owner, expect=expect)

    def wait_search(self, logical, expect=1, owner=USER):
        return self._add("wait_search", owner, logical=logical, expect=expect)


class FixtureContext:
    """Identifiers and cleanup steps of one provisioned test group."""

    def __init__(self):
        self.ids = {}
        self.names = {}
        self.doc_libs = {}
        self.site_guids = {}
        self.parents = {}
        self.results = {}
        self.deleted = set()
        self.cleanups = []
        self.username = None
        self.password = None
        self.user_result = None

    def id(self, logical):
        try:
            return self.ids[logical]
        except KeyError:
            raise KeyError(f"No resource called '{logical}' was provisioned")

    def name(self, logical):
        try:
            return self.names[logical]
        except KeyError:
            raise KeyError(f"No resource called '{logical}' was provisioned")

    def doc_lib(self, logical):
        return self.doc_libs[logical]

    def record(self, logical, name, result, parent=None):
        self.ids[logical] = result.id
        self.names[logical] = name
        self.results[logical] = result
        self.parents[logical] = parent

    def descendants(self, logical):
        """Logical names of every recorded node that sits somewhere below logical."""
        found = []
        for candidate in self.parents:
            parent = self.parents[candidate]
            while parent is not None:
                if parent == logical:
                    found.append(candidate)
                    break
                parent = self.parents.get(parent)
        return found

    def register_cleanup(self, label, func, key=None):
        """
        Queues a cleanup call. Cleanups run in reverse registration order.

        Args:
            label (str): Shown in logs and in TeardownError.
            func (callable): Zero-argument cleanup.
            key (str, optional): Logical name, so the cleanup can be dropped later.
        """
        self.cleanups.append((label, func, key))

    def drop_cleanups(self, key):
        self.cleanups = [c for c in self.cleanups if c[2] != key]

    def summary_rows(self):
        rows = []
        if self.user_result is not None:
            status = "created" if self.user_result.created else "existing"
            rows.append(["(user)", self.username, self.user_result.id, status])
        for logical, result in self.results.items():
            status = "created" if result.created else "existing"
            if logical in self.deleted:
                status += ", deleted"
            rows.append([logical, self.names.get(logical), result.id, status])
        return rows


class Provisioner:
    """
    Replays a FixtureSpec through RepoClient instances.

    Args:
        apis (dict): RepoClient per owner, e.g. {"admin": ..., "user": ...}.
    """

    def __init__(self, apis):
        self.apis = apis

    def api(self, owner):
        try:
            return self.apis[owner]
        except KeyError:
            raise KeyError(f"No REST client configured for '{owner}'")

    def provision(self, spec, ctx=None):
        """
        Runs every step of the spec in order.

        Pass a pre-built ctx to keep the partial state when a step fails,
        so the caller can still tear down what was created.

        Returns:
            FixtureContext
        """
        ctx = FixtureContext() if ctx is None else ctx
        for step in spec.steps:
            logger.debug(f"Provisioning {step!r}")
            handler = getattr(self, f"_do_{step.kind}")
            handler(ctx, self.api(step.owner), **step.args)
        rows = ctx.summary_rows()
        if rows:
            table = tabulate(rows, headers=["resource", "name", "id", "status"])
            logger.info(f"Provisioned fixture:\n{table}")
        return ctx

    def teardown(self, ctx, tolerant=False):
        """
        Runs the queued cleanups, last created first.

        By default the first failure propagates and the remaining cleanups
        are skipped. With tolerant=True every cleanup is attempted and a
        TeardownError lists the failures at the end.
        """
        cleanups, ctx.cleanups = list(reversed(ctx.cleanups)), []
        failures = []
        for label, func, _ in cleanups:
            logger.info(f"Teardown: {label}")
            if not tolerant:
                func()
                continue
            try:
                func()
            except Exception as e:
                logger.error(f"Teardown step '{label}' failed: {e}")
                failures.append((label, e))
        if failures:
            raise TeardownError(failures)

    # --- Step handlers ---

    def _resolve_parent(self, ctx, parent):
        if parent is None:
            return "-my-"
        if parent in ctx.doc_libs:
            return ctx.doc_libs[parent]
        return ctx.id(parent)

    def _do_user(self, ctx, api, username, password, delete_after):
        result = api.people.create_user(username, password)
        ctx.username = username
        ctx.password = password or username
        ctx.user_result = result
        if result.created and delete_after:
            ctx.register_cleanup(f"delete user {username}", lambda: api.people.delete_user(username))

    def _do_site(self, ctx, api, logical, title, visibility):
        result = api.sites.create_site(title, visibility)
        site_id = result.id
        ctx.record(logical, site_id, result)
        ctx.site_guids[logical] = result.entry["guid"]
        ctx.doc_libs[logical] = api.sites.get_doc_lib_id(site_id)
        if result.created:
            ctx.register_cleanup(f"delete site {site_id}", lambda: api.sites.delete_site(site_id), logical)

    def _do_site_member(self, ctx, api, site, username, role):
        api.sites.add_site_member(ctx.name(site), username, role)

    def _do_node(self, ctx, api, logical, name, parent, folder):
        parent_id = self._resolve_parent(ctx, parent)
        if folder:
            result = api.nodes.create_folder(name, parent_id)
        else:
            result = api.nodes.create_file(name, parent_id)
        ctx.record(logical, name, result, parent)
        node_id = result.id
        if result.created:
            ctx.register_cleanup(f"delete node {name}", lambda: api.nodes.delete_node_by_id(node_id), logical)

    def _do_share(self, ctx, api, logicals):
        api.shared.share_files_by_ids([ctx.id(logical) for logical in logicals])

    def _do_unshare(self, ctx, api, logical):
        api.shared.unshare_file(ctx.name(logical))

    def _do_favorite(self, ctx, api, target_type, logicals):
        if target_type == "site":
            ids = [ctx.site_guids[logical] for logical in logicals]
        else:
            ids = [ctx.id(logical) for logical in logicals]
        api.favorites.add_favorites_by_ids(target_type, ids)

    def _do_delete(self, ctx, api, logical, permanent):
        node_id = ctx.id(logical)
        api.nodes.delete_node_by_id(node_id, permanent=permanent)
        # Contents leave with their container.
        for gone in [logical] + ctx.descendants(logical):
            ctx.deleted.add(gone)
            ctx.drop_cleanups(gone)
        if not permanent:
            name = ctx.name(logical)
            ctx.register_cleanup(f"purge {name} from trash", lambda: api.trashcan.purge_node(node_id), logical)

    def _do_wait_shared(self, ctx, api, expect):
        api.shared.wait_for_api(expect)

    def _do_wait_favorites(self, ctx, api, expect):
        api.favorites.wait_for_api(expect)

    def _do_wait_trash(self, ctx, api, expect):
        api.trashcan.wait_for_api(expect)

    def _do_wait_search(self, ctx, api, logical, expect):
        api.search.wait_for_nodes(ctx.name(logical), expect)

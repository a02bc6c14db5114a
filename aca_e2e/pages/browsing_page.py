from selenium.webdriver.common.by import By

from .breadcrumb import Breadcrumb
from .component import Component, logger
from .data_table import DataTable
from .search_input import SearchInput

PERSONAL_FILES = "Personal Files"
FILE_LIBRARIES = "File Libraries"
MY_LIBRARIES = "My Libraries"
SHARED_FILES = "Shared"
RECENT_FILES = "Recent Files"
FAVORITES = "Favorites"
TRASH = "Trash"

SIDEBAR_LINKS = {
    PERSONAL_FILES: (By.CSS_SELECTOR, "[id='app.navbar.personalFiles']"),
    FILE_LIBRARIES: (By.CSS_SELECTOR, "[id='app.navbar.libraries.menu']"),
    MY_LIBRARIES: (By.CSS_SELECTOR, "[id='app.navbar.libraries.files']"),
    SHARED_FILES: (By.CSS_SELECTOR, "[id='app.navbar.shared']"),
    RECENT_FILES: (By.CSS_SELECTOR, "[id='app.navbar.recentFiles']"),
    FAVORITES: (By.CSS_SELECTOR, "[id='app.navbar.favorites']"),
    TRASH: (By.CSS_SELECTOR, "[id='app.navbar.trashcan']"),
}


class Sidebar(Component):

    def navigate_to(self, view):
        locator = SIDEBAR_LINKS[view]
        self.click(locator, f"sidebar link '{view}'")
        logger.info(f"Navigated to {view}")


class Header(Component):

    def __init__(self, driver, config=None):
        super().__init__(driver, config)
        self.search_input = SearchInput(driver, config)


class BrowsingPage(Component):
    """Application shell: sidebar, header, breadcrumb and the current document list."""

    def __init__(self, driver, config=None):
        super().__init__(driver, config)
        self.sidebar = Sidebar(driver, config)
        self.header = Header(driver, config)
        self.breadcrumb = Breadcrumb(driver, config)
        self.data_table = DataTable(driver, config)

    def _click_and_wait(self, view):
        self.sidebar.navigate_to(view)
        self.data_table.wait_for_header()

    def click_personal_files_and_wait(self):
        self._click_and_wait(PERSONAL_FILES)

    def click_file_libraries_and_wait(self):
        self._click_and_wait(FILE_LIBRARIES)

    def click_shared_files_and_wait(self):
        self._click_and_wait(SHARED_FILES)

    def click_recent_files_and_wait(self):
        self._click_and_wait(RECENT_FILES)

    def click_favorites_and_wait(self):
        self._click_and_wait(FAVORITES)

    def click_trash_and_wait(self):
        self._click_and_wait(TRASH)

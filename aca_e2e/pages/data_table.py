from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC

from ..utils import xpath_literal
from .component import Component, logger

ROOT = "adf-datatable"
HEADER = (By.CSS_SELECTOR, f"{ROOT} .adf-datatable-header")
COLUMN_HEADER = (By.CSS_SELECTOR, f"{ROOT} .adf-datatable-cell-header .adf-datatable-cell-value")
SORTED_ASC = "adf-datatable__header--sorted-asc"
SORTED_DESC = "adf-datatable__header--sorted-desc"
SORTED_HEADER = (By.CSS_SELECTOR, f"{ROOT} .{SORTED_ASC}, {ROOT} .{SORTED_DESC}")
CELL_VALUE = (By.CSS_SELECTOR, ".adf-datatable-cell-value")
BODY = (By.CSS_SELECTOR, f"{ROOT} .adf-datatable-body")
ROW = (By.CSS_SELECTOR, f"{ROOT} .adf-datatable-body .adf-datatable-row[role='row']")
EMPTY = (By.CSS_SELECTOR, "div.adf-no-content-container, .adf-empty-content")
LOCATION_LINK = (By.CSS_SELECTOR, ".aca-location-link")
LOCATION_ANCHOR = (By.CSS_SELECTOR, ".aca-location-link a")
NAME_LINK = (By.CSS_SELECTOR, ".adf-datatable-link")
SEARCH_RESULT_NAME_LINK = (By.CSS_SELECTOR, ".link")


def row_by_name(name):
    # Match on the Name cell only; the Location cell can hold a folder name too.
    literal = xpath_literal(name)
    return (By.XPATH,
            "//adf-datatable//*[contains(@class, 'adf-datatable-body')]"
            "//*[contains(@class, 'adf-datatable-row') and @role='row']"
            "[.//*[contains(@class, 'adf-datatable-cell') and @title='Name']"
            f"//*[normalize-space(text())={literal}]]")


def search_result_by_name(name):
    literal = xpath_literal(name)
    return (By.XPATH, f"//aca-search-results-row[.//*[normalize-space(text())={literal}]]")


class DataTable(Component):
    """The document list shown by every browsing view and by search results."""

    def wait_for_header(self):
        self.wait_for_spinners()
        return self.present(HEADER, "data table header")

    def wait_for_body(self):
        """Waits until the table has rendered rows or its empty-list placeholder."""
        self.wait_for_spinners()
        return self.wait_for(EC.any_of(EC.presence_of_element_located(BODY),
                                       EC.presence_of_element_located(EMPTY)),
                             "data table body")

    # --- Header ---

    def get_column_headers_text(self):
        self.wait_for_header()
        texts = [el.text.strip() for el in self.find_all(COLUMN_HEADER)]
        return [text for text in texts if text]

    def get_sorted_column_header_text(self):
        self.wait_for_header()
        headers = self.find_all(SORTED_HEADER)
        if not headers:
            return None
        return headers[0].find_element(*CELL_VALUE).text.strip()

    def get_sorting_order(self):
        """Returns 'asc', 'desc', or None when no column is sorted."""
        self.wait_for_header()
        headers = self.find_all(SORTED_HEADER)
        if not headers:
            return None
        classes = (headers[0].get_attribute("class") or "").split()
        if SORTED_ASC in classes:
            return "asc"
        if SORTED_DESC in classes:
            return "desc"
        return None

    # --- Rows ---

    def get_rows(self):
        self.wait_for_body()
        return self.find_all(ROW)

    def get_row_count(self):
        return len(self.get_rows())

    def is_empty(self):
        self.wait_for_body()
        return self.is_present(EMPTY)

    def is_item_present(self, name):
        self.wait_for_body()
        return self.is_present(row_by_name(name))

    def get_row_by_name(self, name):
        self.wait_for_body()
        return self.present(row_by_name(name), f"row '{name}'")

    def get_item_location(self, name):
        row = self.get_row_by_name(name)
        return row.find_element(*LOCATION_LINK).text.strip()

    def get_item_location_tooltip(self, name):
        """Hovers the location link and returns its title (the full path)."""
        row = self.get_row_by_name(name)
        anchor = row.find_element(*LOCATION_ANCHOR)
        ActionChains(self.driver).move_to_element(anchor).perform()
        return self.wait_for(lambda d: anchor.get_attribute("title"), f"location tooltip of '{name}'")

    def click_item_location(self, name):
        row = self.get_row_by_name(name)
        row.find_element(*LOCATION_ANCHOR).click()
        logger.info(f"Clicked location of '{name}'")

    def has_file_hyperlink(self, name):
        """True when the row's name is rendered as a link. The row itself must exist."""
        row = self.get_row_by_name(name)
        return self.is_present(NAME_LINK, within=row)

    def click_name_link(self, name):
        row = self.get_row_by_name(name)
        self.wait_for(EC.element_to_be_clickable(row.find_element(*NAME_LINK)), f"name link of '{name}'").click()
        logger.info(f"Clicked name link of '{name}'")

    # --- Search results ---

    def get_search_result_row(self, name):
        self.wait_for_body()
        return self.present(search_result_by_name(name), f"search result '{name}'")

    def has_link_on_search_result_name(self, name):
        row = self.get_search_result_row(name)
        return self.is_present(SEARCH_RESULT_NAME_LINK, within=row)

    def click_search_result_name_link(self, name):
        row = self.get_search_result_row(name)
        row.find_element(*SEARCH_RESULT_NAME_LINK).click()
        logger.info(f"Clicked search result '{name}'")

from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys

from ..utils import xpath_literal
from .component import Component, logger

SEARCH_BUTTON = (By.CSS_SELECTOR, "app-header .app-search-button")
SEARCH_CONTROL = (By.CSS_SELECTOR, ".app-search-control")
SEARCH_INPUT = (By.CSS_SELECTOR, "input[id='app-control-input']")
CHECKED = "mat-checkbox-checked"


def search_option(label):
    return (By.XPATH, f"//*[@id='search-options']//mat-checkbox[.//*[normalize-space(text())={xpath_literal(label)}]]")


class SearchInput(Component):

    def click_search_button(self):
        self.click(SEARCH_BUTTON, "search button")
        self.visible(SEARCH_CONTROL, "search control")

    def is_option_checked(self, label):
        checkbox = self.present(search_option(label), f"search option '{label}'")
        return CHECKED in (checkbox.get_attribute("class") or "").split()

    def check_option(self, label):
        if not self.is_option_checked(label):
            checkbox = self.present(search_option(label), f"search option '{label}'")
            checkbox.find_element(By.TAG_NAME, "label").click()

    def check_files_and_folders(self):
        self.check_option("Files")
        self.check_option("Folders")

    def search_for(self, text):
        field = self.clickable(SEARCH_INPUT, "search input")
        field.clear()
        field.send_keys(text)
        field.send_keys(Keys.ENTER)
        logger.info(f"Searched for '{text}'")

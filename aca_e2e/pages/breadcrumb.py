from selenium.webdriver.common.by import By

from ..utils import xpath_literal
from .component import Component

ITEM = (By.CSS_SELECTOR, "adf-breadcrumb .adf-breadcrumb-item")
CURRENT_ITEM = (By.CSS_SELECTOR, "adf-breadcrumb .adf-breadcrumb-item-current")
SEPARATOR_ICON = "chevron_right"


def _clean(text):
    # Items render their separator icon ligature after a newline.
    text = text.split("\n")[0].strip()
    if text.endswith(SEPARATOR_ICON):
        text = text[:-len(SEPARATOR_ICON)].strip()
    return text


def item_by_name(name):
    literal = xpath_literal(name)
    return (By.XPATH, "//adf-breadcrumb//*[contains(@class, 'adf-breadcrumb-item')]"
                      f"[normalize-space(text())={literal} or .//*[normalize-space(text())={literal}]]")


class Breadcrumb(Component):

    def get_all_items(self):
        self.wait_for_spinners()
        self.visible(CURRENT_ITEM, "current breadcrumb item")
        return [_clean(item.text) for item in self.find_all(ITEM)]

    def get_current_item_text(self):
        self.wait_for_spinners()
        return _clean(self.visible(CURRENT_ITEM, "current breadcrumb item").text)

    def click_item(self, name):
        self.click(item_by_name(name), f"breadcrumb item '{name}'")

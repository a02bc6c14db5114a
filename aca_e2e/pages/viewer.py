from selenium.common.exceptions import TimeoutException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC

from ..utils import press_escape
from .component import Component

VIEWER = (By.CSS_SELECTOR, ".adf-viewer")
CLOSE_BUTTON = (By.CSS_SELECTOR, ".adf-viewer-close-button")


class Viewer(Component):
    """File preview overlay."""

    def wait_for_viewer_to_open(self):
        self.wait_for_spinners()
        return self.visible(VIEWER, "viewer")

    def is_viewer_opened(self, timeout=None):
        try:
            self.wait(timeout).until(EC.visibility_of_element_located(VIEWER))
        except TimeoutException:
            return False
        return True

    def close_viewer(self):
        buttons = self.find_all(CLOSE_BUTTON)
        if buttons:
            buttons[0].click()
        else:
            press_escape(self.driver)
        self.wait_for(EC.invisibility_of_element_located(VIEWER), "viewer to close")

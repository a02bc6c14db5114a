import logging

from selenium.common.exceptions import TimeoutException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from ..errors import ElementNotFoundError

logger = logging.getLogger("aca_e2e.pages")

DEFAULT_UI_TIMEOUT = 20

SPINNER = (By.CSS_SELECTOR, "mat-progress-spinner, .adf-loading-spinner")


class Component:
    """
    Base for page objects. Every lookup goes through an explicit WebDriverWait.

    A required element that does not render in time raises ElementNotFoundError.
    Optional lookups (find_all / is_present) return empty results instead, so
    "absent" can be asserted while real driver errors still propagate.
    """

    def __init__(self, driver, config=None):
        self.driver = driver
        self.config = config
        self.timeout = config.ui_timeout if config is not None else DEFAULT_UI_TIMEOUT

    def wait(self, timeout=None):
        return WebDriverWait(self.driver, self.timeout if timeout is None else timeout)

    def wait_for(self, condition, what, timeout=None):
        timeout = self.timeout if timeout is None else timeout
        try:
            return self.wait(timeout).until(condition)
        except TimeoutException:
            logger.error(f"{what} did not appear within {timeout}s (url: {self.driver.current_url})")
            raise ElementNotFoundError(what, timeout)

    def present(self, locator, what=None, timeout=None):
        return self.wait_for(EC.presence_of_element_located(locator), what or str(locator), timeout)

    def visible(self, locator, what=None, timeout=None):
        return self.wait_for(EC.visibility_of_element_located(locator), what or str(locator), timeout)

    def clickable(self, locator, what=None, timeout=None):
        return self.wait_for(EC.element_to_be_clickable(locator), what or str(locator), timeout)

    def click(self, locator, what=None):
        self.clickable(locator, what).click()

    def find_all(self, locator, within=None):
        return (within or self.driver).find_elements(*locator)

    def is_present(self, locator, within=None):
        return len(self.find_all(locator, within)) > 0

    def wait_for_spinners(self, timeout=None):
        self.wait_for(EC.invisibility_of_element_located(SPINNER), "loading spinner to disappear", timeout)

from selenium.webdriver.common.by import By

from .component import Component, logger

LOGIN_PATH = "/#/login"
USERNAME = (By.ID, "username")
PASSWORD = (By.ID, "password")
SUBMIT = (By.ID, "login-button")
APP_SHELL = (By.CSS_SELECTOR, "app-sidenav")


class LoginPage(Component):

    def load(self):
        base = self.config.aca_url if self.config is not None else ""
        self.driver.get(base.rstrip("/") + LOGIN_PATH)

    def clear_session(self):
        # The client keeps its ticket in web storage, not only in cookies.
        self.driver.execute_script("window.localStorage.clear(); window.sessionStorage.clear();")
        self.driver.delete_all_cookies()

    def login_with(self, username, password=None):
        """
        Signs in through the login form and waits for the app shell.

        The password defaults to the username, which is how test users are created.
        """
        self.load()
        self.clear_session()
        self.load()

        field = self.visible(USERNAME, "username field")
        field.clear()
        field.send_keys(username)
        field = self.visible(PASSWORD, "password field")
        field.clear()
        field.send_keys(password or username)
        self.click(SUBMIT, "login button")

        self.visible(APP_SHELL, "application shell after login")
        logger.info(f"Logged in as {username}")

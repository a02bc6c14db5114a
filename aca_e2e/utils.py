import logging
import os
import random
import string

from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.keys import Keys

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(output_dir=None, level=logging.INFO):
    """
    Configures root logging for a test run.

    Logs go to the console and, when output_dir is given, to e2e.log inside it.
    """
    handlers = [logging.StreamHandler()]
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(output_dir, "e2e.log")))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    return logging.getLogger("aca_e2e")


def random_suffix(length=5):
    """Short lowercase alphanumeric suffix used to keep resource names unique."""
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))


def unique_name(prefix, extension=""):
    """
    Builds a resource name such as 'file1-x8k2q.txt'.

    Args:
        prefix (str): Leading part of the name.
        extension (str): Optional extension, with or without the dot.
    """
    if extension and not extension.startswith("."):
        extension = "." + extension
    return f"{prefix}-{random_suffix()}{extension}"


def xpath_literal(value):
    """Quotes a string for use inside an XPath expression."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def press_escape(driver):
    """Sends ESC to whatever currently has focus (closes viewers and dialogs)."""
    ActionChains(driver).send_keys(Keys.ESCAPE).perform()

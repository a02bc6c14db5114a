"""
Uploads the e2e output directory (screenshots, logs) of a CI run to a
content repository, as Builds/ACA/<build>/retry-<n>/e2e-result-<suffix>-<n>.tar.

Usage:
    python -m aca_e2e.upload_output --retry-count 1 --suffix shared-files
"""
import argparse
import logging
import os
import subprocess
import time

from .config import load_config
from .errors import RepoApiError
from .repo_client import RepoClient
from .utils import setup_logging

logger = logging.getLogger("aca_e2e.upload_output")

BUILDS_PATH = "Builds/ACA"


def build_number(environ=None):
    """
    Returns the CI build number.

    When neither TRAVIS_BUILD_NUMBER nor BUILD_NUMBER is set, a millisecond
    timestamp is used and written back to TRAVIS_BUILD_NUMBER so later calls
    in the same process agree.
    """
    environ = os.environ if environ is None else environ
    number = environ.get("TRAVIS_BUILD_NUMBER") or environ.get("BUILD_NUMBER")
    if not number:
        number = str(int(time.time() * 1000))
        environ["TRAVIS_BUILD_NUMBER"] = number
    return number


def archive_name(suffix_file_name, retry_count):
    return f"e2e-result-{suffix_file_name}-{retry_count}.tar"


def get_retry_folder(api, build, retry_count):
    """Creates (or fetches) the retry-<n> folder for this build in the user's home."""
    relative_path = f"{BUILDS_PATH}/{build}/"
    name = f"retry-{retry_count}"
    try:
        return api.nodes.create_folder(name, "-my-", relative_path=relative_path).entry
    except RepoApiError as e:
        logger.warning(f"Could not create {relative_path}{name} ({e}). Fetching it instead.")
        return api.nodes.get_node_by_path(f"{relative_path}{name}")


def archive_output(output_dir, retry_count, suffix_file_name):
    """
    Renames output_dir to <output_dir>-<retry> and tars its contents next to it.

    Returns:
        str: Path of the archive.
    """
    output_dir = os.path.abspath(output_dir.rstrip("/\\"))
    renamed = f"{output_dir}-{retry_count}"
    os.rename(output_dir, renamed)
    logger.info(f"Renamed {output_dir} to {renamed}")

    name = archive_name(suffix_file_name, retry_count)
    subprocess.run(["tar", "-czvf", f"../{name}", "."], cwd=renamed, check=True)
    return os.path.join(os.path.dirname(renamed), name)


def upload_output(retry_count, suffix_file_name, output_dir=None, config=None):
    """
    Archives the output directory and uploads it. Any failure aborts.

    Returns:
        dict: Entry of the uploaded archive node.
    """
    config = config or load_config()
    output_dir = output_dir or config.output_dir
    logger.info(f"Start uploading report {retry_count}")

    api = RepoClient(config.screenshot_username, config.screenshot_password,
                     config=config, host=config.screenshot_url)
    api.login()

    folder = get_retry_folder(api, build_number(), retry_count)
    archive = archive_output(output_dir, retry_count, suffix_file_name)

    with open(archive, "rb") as f:
        entry = api.upload.upload_file(f, folder["id"], archive_name(suffix_file_name, retry_count),
                                       auto_rename=True)
    logger.info(f"Uploaded {archive} to folder {folder['id']}")
    return entry


def main(argv=None):
    parser = argparse.ArgumentParser(description="Archive the e2e output directory and upload it to the repository.")
    parser.add_argument("--retry-count", type=int, required=True, help="Retry number of this CI run")
    parser.add_argument("--suffix", required=True, help="Suffix for the archive name, usually the suite name")
    parser.add_argument("--output-dir", default=None, help="Directory to archive (defaults to config output_dir)")
    args = parser.parse_args(argv)

    setup_logging()
    upload_output(args.retry_count, args.suffix, output_dir=args.output_dir)


if __name__ == "__main__":
    main()

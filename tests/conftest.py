import pytest
from click.testing import CliRunner

from deflist_markdown.log import disable_logging


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _silence_package_logging():
    yield
    disable_logging()

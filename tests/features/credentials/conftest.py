"""BDD fixtures for credential resolution features.

Step implementations live in the steps_*.py modules next to this file and
are registered here by importing them.
"""

import pytest
from tests.features.credentials.steps_given import *  # noqa: F403
from tests.features.credentials.steps_helpers import CredentialScenarioContext
from tests.features.credentials.steps_then import *  # noqa: F403


@pytest.fixture
def ctx() -> CredentialScenarioContext:
    """Fresh scenario context for each test."""
    return CredentialScenarioContext()

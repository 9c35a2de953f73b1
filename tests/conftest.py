from __future__ import annotations

from collections.abc import Iterator

import pytest

from spark_component.core.config import ComponentSettings, set_settings


@pytest.fixture(autouse=True)
def default_settings() -> Iterator[ComponentSettings]:
    """Run every test against default settings, independent of the environment."""
    settings = set_settings(ComponentSettings())
    yield settings
    set_settings(ComponentSettings())

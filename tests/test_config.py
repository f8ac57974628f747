from pathlib import Path

import pytest

from agh2pihole.config import DEFAULT_OUTPUT_DIR, DEFAULT_TIMEOUT, Settings


def test_defaults():
    settings = Settings()
    assert settings.output_dir == Path(DEFAULT_OUTPUT_DIR)
    assert settings.timeout == DEFAULT_TIMEOUT


def test_output_dir_is_coerced_to_path():
    assert Settings(output_dir="out").output_dir == Path("out")


@pytest.mark.parametrize("field", ["timeout", "retries", "concurrency"])
@pytest.mark.parametrize("value", [0, -5])
def test_rejects_values_below_one(field, value):
    with pytest.raises(ValueError, match=field):
        Settings(**{field: value})

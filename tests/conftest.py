import pytest

pytest.register_assert_rewrite("restvalve.testing")

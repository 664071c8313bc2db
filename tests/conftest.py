from pathlib import Path

import pytest

DATA = Path(__file__).parent / "data"


@pytest.fixture
def valid_hml():
    return (DATA / "valid.hml").read_text(encoding="utf-8")


@pytest.fixture
def two_samples_hml(valid_hml):
    start = valid_hml.index("  <sample ")
    end = valid_hml.index("</sample>") + len("</sample>\n")
    second = valid_hml[start:end].replace('id="1234-5678-9" center-code="567"', 'id="9876-5432-1" center-code="568"')
    return valid_hml[:end] + second + valid_hml[end:]

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="autocrypt-test-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-0123456789")
os.environ.setdefault("API_TOKEN", "test-api-token")

KEYDATA = (
    "mDMEWFUX7RYJKwYBBAHaRw8BAQdACHq6FkRGsHqBMsNpD7d+Q2jtxVwTO+Y4NhBaQyHaMj+0"
    "HWFsaWNlQHRlc3RzdWl0ZS5hdXRvY3J5cHQub3JniJAEExYIADgWIQQmqmdR/XZoxC+kkkr8"
    "dE2p/nPD1AUCWFUX7QIbAwULCQgHAgYVCAkKCwIEFgIDAQIeAQIXgAAKCRD8dE2p/nPD1EqO"
    "AP0WUDKwko001X7XTSYbWGWmXfR9P1Aw6917EnkVQMsp3gEA86Ii8ArL3jd+E2qS5JSysx/q"
    "iVhuTSwWzmC5K6zKdg+4OARYVRfuEgorBgEEAZdVAQUBAQdAv1A88FoCfwz0zSh6NNnUuKuz"
    "1p3ctJ3kXMGotsVYjA0DAQgHiHgEGBYIACAWIQQmqmdR/XZoxC+kkkr8dE2p/nPD1AUCWFUX"
    "7gIbDAAKCRD8dE2p/nPD1FTOAP4nS14sX7a/nBXBKWAh/oX8iVtkhmZqjy9tG21BcNqb+wEA"
    "q73H4+1ncnkscR3Nu4GYzNRSD3NXq68tEESK28kYvw4="
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def build_email(
    sender="alice@testsuite.autocrypt.org",
    date="Sat, 17 Dec 2016 10:07:48 +0100",
    autocrypt=None,
    content_type="text/plain",
    extra_headers=None,
):
    """Build raw RFC 822 text with the given headers."""
    lines = [
        f"From: Alice <{sender}>",
        "To: Bob <bob@testsuite.autocrypt.org>",
        "Subject: an Autocrypt test",
    ]
    if date is not None:
        lines.append(f"Date: {date}")
    for value in autocrypt or []:
        lines.append(f"Autocrypt: {value}")
    for name, value in extra_headers or []:
        lines.append(f"{name}: {value}")
    lines.append("MIME-Version: 1.0")
    lines.append(f"Content-Type: {content_type}")
    lines.append("")
    lines.append("Hello Bob.")
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def keydata():
    return KEYDATA


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def days_ago():
    return lambda days: NOW - timedelta(days=days)


@pytest.fixture
def simple_header_value(keydata):
    return f"addr=alice@testsuite.autocrypt.org; keydata={keydata}"


@pytest.fixture
def mutual_header_value(keydata):
    return (
        f"addr=alice@testsuite.autocrypt.org; prefer-encrypt=mutual; "
        f"keydata={keydata}"
    )


@pytest.fixture
def email_with_autocrypt(simple_header_value):
    return build_email(autocrypt=[simple_header_value])


@pytest.fixture
def email_with_mutual(mutual_header_value):
    return build_email(autocrypt=[mutual_header_value])


@pytest.fixture
def email_without_autocrypt():
    return build_email(date="Sat, 17 Dec 2016 10:51:48 +0100")


@pytest.fixture
def delivery_report(simple_header_value):
    return build_email(
        autocrypt=[simple_header_value],
        content_type='multipart/report; report-type=delivery-status; boundary="b"',
    )


@pytest.fixture
def make_email():
    return build_email

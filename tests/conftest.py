import io
import json

import pytest

from pypdf import PdfWriter

from hid_usage_tables import configuration
from hid_usage_tables.cancellation import CancellationToken
from hid_usage_tables.context import GeneratorContext
from hid_usage_tables.output import MemorySink

ATTACHMENT_NAME = "HidUsageTables.json"

USAGE_TABLES = {
    "UsageTableVersion": 1,
    "UsageTableRevision": 5,
    "UsageTableSubRevisionInternal": 0,
    "LastGenerated": "2024-01-05T12:30:00.1234567Z",
    "UsagePages": [
        {
            "Kind": "Defined",
            "Id": 1,
            "Name": "Generic Desktop",
            "UsageIds": [
                {"Id": 1, "Name": "Pointer", "Kinds": ["CP"]},
                {"Id": 2, "Name": "Mouse", "Kinds": ["CA"]},
                {"Id": 48, "Name": "X", "Kinds": ["DV"]},
                {"Id": 71, "Name": "Feature Notification", "Kinds": ["DV", "DF"]},
                {"Id": 200, "Name": "Reserved Thing", "Kinds": []},
            ],
            "UsageIdGenerator": None,
        },
        {
            "Kind": "Generated",
            "Id": 9,
            "Name": "Button",
            "UsageIds": [],
            "UsageIdGenerator": {
                "NamePrefix": "Button",
                "StartUsageId": 1,
                "EndUsageId": 65535,
                "Kinds": ["Sel", "OOC", "MC", "OSC"],
            },
        },
        {
            "Kind": "Defined",
            "Id": 0x0B,
            "Name": "Telephony Device",
            "UsageIds": [
                {"Id": 1, "Name": "Phone", "Kinds": ["CA"]},
            ],
            "UsageIdGenerator": {
                "NamePrefix": "Phone Key",
                "StartUsageId": 0xB0,
                "EndUsageId": 0xB3,
                "Kinds": ["Sel"],
            },
        },
    ],
}


def build_pdf(attachments=None):
    """A one page PDF embedding ``attachments`` (file name -> bytes)."""
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    for name, data in (attachments or {}).items():
        writer.add_attachment(name, data)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def usage_tables_data():
    return json.dumps(USAGE_TABLES).encode("utf-8")


@pytest.fixture
def usage_tables_pdf(usage_tables_data):
    return build_pdf({"readme.txt": b"not this one", ATTACHMENT_NAME: usage_tables_data})


@pytest.fixture
def specification_file(tmp_path, usage_tables_pdf):
    path = tmp_path / "source" / "hut1_5.pdf"
    path.parent.mkdir()
    path.write_bytes(usage_tables_pdf)
    return path


@pytest.fixture
def make_context(tmp_path):
    def _make_context(cancellation=None, sink=None, **values):
        defaults = {
            configuration.KEY_ATTACHMENT: ATTACHMENT_NAME,
            configuration.KEY_CACHE_FOLDER: "cache",
            configuration.KEY_PROJECT_DIR: str(tmp_path),
        }
        defaults.update(values)
        return GeneratorContext(
            configuration.from_mapping(defaults),
            sink if sink is not None else MemorySink(),
            cancellation=cancellation if cancellation is not None else CancellationToken(),
        )

    return _make_context


@pytest.fixture
def make_pdf():
    return build_pdf

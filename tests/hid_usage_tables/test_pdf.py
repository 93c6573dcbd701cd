import io

from unittest import mock

import pytest
import requests

from pypdf import PdfReader
from pypdf.generic import ArrayObject
from pypdf.generic import DecodedStreamObject
from pypdf.generic import DictionaryObject
from pypdf.generic import NameObject
from pypdf.generic import NumberObject
from pypdf.generic import TextStringObject

from hid_usage_tables import pdf
from hid_usage_tables.exceptions import AttachmentNotFoundError
from hid_usage_tables.exceptions import UnsupportedSchemeError


def _stream(data):
    stream = DecodedStreamObject()
    stream.set_data(data)
    return stream


def _file_spec(name, content):
    return DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Filespec"),
            NameObject("/F"): TextStringObject(name),
            NameObject("/EF"): DictionaryObject({NameObject("/F"): content}),
        }
    )


def _reader(embedded_files):
    """Stand-in for a PdfReader whose catalog holds ``embedded_files``."""
    catalog = DictionaryObject(
        {NameObject("/Names"): DictionaryObject({NameObject("/EmbeddedFiles"): embedded_files})}
    )
    return mock.Mock(trailer=DictionaryObject({NameObject("/Root"): catalog}))


def test_fetch_file(tmp_path):
    path = tmp_path / "hut1_5.pdf"
    path.write_bytes(b"%PDF-1.7")

    assert pdf.fetch_document(path.as_uri()) == b"%PDF-1.7"


def test_fetch_missing_file(tmp_path):
    with pytest.raises(OSError):
        pdf.fetch_document((tmp_path / "missing.pdf").as_uri())


def test_fetch_http(mocker):
    response = mock.Mock(content=b"%PDF-1.7")
    get = mocker.patch("hid_usage_tables.pdf.requests.get", return_value=response)

    result = pdf.fetch_document("https://usb.org/hut1_5.pdf", timeout=5)

    assert result == b"%PDF-1.7"
    get.assert_called_once_with("https://usb.org/hut1_5.pdf", timeout=5)
    response.raise_for_status.assert_called_once_with()


def test_fetch_http_error(mocker):
    response = mock.Mock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
    mocker.patch("hid_usage_tables.pdf.requests.get", return_value=response)

    with pytest.raises(requests.HTTPError):
        pdf.fetch_document("http://usb.org/missing.pdf")


@pytest.mark.parametrize("location", ["ftp://usb.org/hut1_5.pdf", "", "mailto:someone@usb.org"])
def test_fetch_unsupported_scheme(location):
    with pytest.raises(UnsupportedSchemeError):
        pdf.fetch_document(location)


def test_find_attachment_by_name(make_pdf):
    document = make_pdf({"first.json": b"{}", "HidUsageTables.json": b'{"UsagePages": []}'})

    stream = pdf.find_attachment(document, "hidusagetables.JSON")

    assert pdf.decode_attachment(stream) == b'{"UsagePages": []}'


def test_find_attachment_falls_back_to_first(make_pdf):
    document = make_pdf({"first.json": b"[1]", "second.json": b"[2]"})

    stream = pdf.find_attachment(document, "HidUsageTables.json")

    assert pdf.decode_attachment(stream) == b"[1]"


def test_find_attachment_without_embedded_files(make_pdf):
    with pytest.raises(AttachmentNotFoundError):
        pdf.find_attachment(make_pdf(), "HidUsageTables.json")


def test_attachment_candidates(make_pdf):
    reader = PdfReader(io.BytesIO(make_pdf({"a.json": b"a", "b.json": b"b"})))

    names = {candidate.file_name for candidate in pdf.attachment_candidates(reader)}

    assert names == {"a.json", "b.json"}


def test_locate_attachment_not_a_stream():
    reader = _reader(
        DictionaryObject(
            {
                NameObject("/Names"): ArrayObject(
                    [TextStringObject("HidUsageTables.json"), _file_spec("HidUsageTables.json", NumberObject(3))]
                )
            }
        )
    )

    with pytest.raises(AttachmentNotFoundError):
        pdf.locate_attachment(reader, "HidUsageTables.json")


def test_locate_attachment_skips_blank_names():
    reader = _reader(
        DictionaryObject(
            {
                NameObject("/Names"): ArrayObject(
                    [
                        TextStringObject(" "),
                        _file_spec(" ", _stream(b"blank")),
                        TextStringObject("data.json"),
                        _file_spec("data.json", _stream(b"data")),
                    ]
                )
            }
        )
    )

    stream = pdf.locate_attachment(reader, "HidUsageTables.json")

    assert pdf.decode_attachment(stream) == b"data"


def test_locate_attachment_only_blank_names():
    reader = _reader(
        DictionaryObject(
            {NameObject("/Names"): ArrayObject([TextStringObject(""), _file_spec("", _stream(b"blank"))])}
        )
    )

    with pytest.raises(AttachmentNotFoundError):
        pdf.locate_attachment(reader, "HidUsageTables.json")


def test_locate_attachment_in_kids():
    kid = DictionaryObject(
        {
            NameObject("/Names"): ArrayObject(
                [TextStringObject("HidUsageTables.json"), _file_spec("HidUsageTables.json", _stream(b"{}"))]
            )
        }
    )
    reader = _reader(DictionaryObject({NameObject("/Kids"): ArrayObject([kid])}))

    stream = pdf.locate_attachment(reader, "HidUsageTables.json")

    assert pdf.decode_attachment(stream) == b"{}"


def test_select_candidate_prefers_exact_name():
    spec = DictionaryObject()
    candidates = [
        pdf.AttachmentCandidate("/F", "other.json", spec),
        pdf.AttachmentCandidate("/F", "HIDUSAGETABLES.JSON", spec),
    ]

    assert pdf.select_candidate(candidates, "HidUsageTables.json") is candidates[1]
    assert pdf.select_candidate(candidates, "missing.json") is candidates[0]
    assert pdf.select_candidate([], "missing.json") is None

"""Tests for reading package documents from files and URLs."""

import json

import httpx
import pytest

from pigschema import StatusCode
from pigraph.codec import WireFormat
from pigraph.loaders import infer_format, load_package, read_document
from pigraph.package import import_jsonld

from tests.conftest import sample_jsonld_package


def _client(routes: dict[str, str]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        text = routes.get(str(request.url))
        if text is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=text)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestInferFormat:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("package.jsonld", WireFormat.JSONLD),
            ("data/PACKAGE.JSON", WireFormat.JSONLD),
            ("export.xml", WireFormat.XML),
            ("specs/Crane.reqif", WireFormat.REQIF),
            ("https://example.org/pkg/requirements.jsonld?version=2", WireFormat.JSONLD),
            ("notes.txt", None),
            ("https://example.org/pkg", None),
        ],
    )
    def test_suffix(self, source, expected) -> None:
        assert infer_format(source) == expected


class TestReadDocument:
    async def test_local_file(self, tmp_path) -> None:
        path = tmp_path / "package.jsonld"
        path.write_text('{"@id": "d:p"}', encoding="utf-8")

        text, status = await read_document(path)

        assert status.ok
        assert text == '{"@id": "d:p"}'

    async def test_missing_file(self, tmp_path) -> None:
        text, status = await read_document(tmp_path / "missing.jsonld")

        assert text is None
        assert status.code == StatusCode.READ_FAILED

    async def test_url(self) -> None:
        async with _client({"https://example.org/p.jsonld": "{}"}) as client:
            text, status = await read_document("https://example.org/p.jsonld", client=client)

        assert status.ok
        assert text == "{}"

    async def test_url_not_found(self) -> None:
        async with _client({}) as client:
            text, status = await read_document("https://example.org/p.jsonld", client=client)

        assert text is None
        assert status.code == StatusCode.FETCH_FAILED


class TestLoadPackage:
    async def test_load_local_jsonld(self, tmp_path, validator) -> None:
        path = tmp_path / "requirements.jsonld"
        path.write_text(json.dumps(sample_jsonld_package()), encoding="utf-8")

        package, result = await load_package(path, validator)

        assert result.status.code == StatusCode.OK, result.status.message
        assert len(package.get_items()) == 5

    async def test_load_xml_from_url(self, validator) -> None:
        """A package served as XML is fetched, decoded and checked."""
        source, _ = import_jsonld(sample_jsonld_package(), validator)
        routes = {"https://example.org/requirements.xml": source.export(WireFormat.XML)}
        async with _client(routes) as client:
            package, result = await load_package("https://example.org/requirements.xml", validator, client=client)

        assert result.status.ok, result.status.message
        assert package.get()["id"] == "d:pkg-requirements"

    async def test_explicit_format_overrides_suffix(self, tmp_path, validator) -> None:
        path = tmp_path / "requirements.txt"
        path.write_text(json.dumps(sample_jsonld_package()), encoding="utf-8")

        _, result = await load_package(path, validator, fmt="jsonld")

        assert result.status.ok

    async def test_unknown_extension(self, tmp_path, validator) -> None:
        path = tmp_path / "requirements.txt"
        path.write_text("{}", encoding="utf-8")

        _, result = await load_package(path, validator)

        assert result.status.code == StatusCode.UNSUPPORTED_FORMAT

    async def test_unreadable_source(self, tmp_path, validator) -> None:
        package, result = await load_package(tmp_path / "missing.xml", validator)

        assert result.status.code == StatusCode.READ_FAILED
        assert package.get() is None

"""Tests for SRE.SPM.sources."""

import base64

import httpx
import pytest

from SRE.SPM.sources import (
    SourceFetchError, fetch_remote, load_source_bytes, parse_data_url, read_local,
)


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestDataUrl:
    def test_decodes_payload_after_first_comma(self):
        url = "data:audio/mpeg;base64," + base64.b64encode(b"ID3,abc").decode()
        assert parse_data_url(url) == ("audio/mpeg", b"ID3,abc")

    def test_missing_payload(self):
        with pytest.raises(SourceFetchError):
            parse_data_url("data:audio/wav;base64")

    def test_not_base64(self):
        with pytest.raises(SourceFetchError):
            parse_data_url("data:text/plain,hello")

    def test_load_source_bytes_routes_data_urls(self):
        url = "data:audio/wav;base64," + base64.b64encode(b"RIFF").decode()
        assert load_source_bytes(url) == b"RIFF"


class TestRemote:
    def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/old.mp3":
                return httpx.Response(302, headers={"Location": "https://cdn.example/new.mp3"})
            return httpx.Response(200, content=b"audio-bytes")

        with _client(handler) as client:
            assert fetch_remote("https://cdn.example/old.mp3", client=client) == b"audio-bytes"

    def test_http_error_status_is_failure(self):
        with _client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(SourceFetchError):
                load_source_bytes("https://cdn.example/missing.mp3", client=client)

    def test_transport_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with _client(handler) as client:
            with pytest.raises(SourceFetchError):
                fetch_remote("http://127.0.0.1:9/x.wav", client=client)


class TestLocal:
    def test_plain_path_and_file_url(self, tmp_path):
        path = tmp_path / "ding dong.wav"
        path.write_bytes(b"local")
        assert read_local(str(path)) == b"local"
        assert load_source_bytes(path.as_uri()) == b"local"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceFetchError):
            load_source_bytes(str(tmp_path / "gone.wav"))

    def test_nul_in_path(self):
        with pytest.raises(SourceFetchError):
            read_local("a\x00b.wav")

    def test_empty_url(self):
        with pytest.raises(SourceFetchError):
            load_source_bytes("")

import pytest
from starlette.requests import Request


def _request(headers=None, query: str = "") -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/upload",
        "query_string": query.encode(),
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    return Request(scope)


def test_header_credential_present_and_missing():
    from serv.auth import HeaderCredential

    src = HeaderCredential("Authorization")
    assert src(_request({"Authorization": "abc"})) == "abc"
    assert src(_request()) is None


def test_query_credential():
    from serv.auth import QueryCredential

    src = QueryCredential("key")
    assert src(_request(query="key=abc")) == "abc"
    assert src(_request(query="other=1")) is None


def test_extract_credential_uses_first_present_source():
    from serv.auth import HeaderCredential, QueryCredential, extract_credential
    from serv.errors import AuthMissing

    sources = (HeaderCredential("Authorization"), QueryCredential("key"))
    assert extract_credential(_request({"Authorization": "h"}, "key=q"), sources) == "h"
    assert extract_credential(_request(query="key=q"), sources) == "q"
    with pytest.raises(AuthMissing):
        extract_credential(_request(), sources)


def test_check_api_key():
    from serv.auth import check_api_key
    from serv.errors import AuthInvalid

    check_api_key("s3cret", "s3cret")
    with pytest.raises(AuthInvalid):
        check_api_key("s3cret ", "s3cret")
    with pytest.raises(AuthInvalid):
        check_api_key("sécret", "s3cret")


def test_query_param_credential_accepted_when_configured(tmp_path):
    from fastapi.testclient import TestClient

    from conftest import png_bytes
    from serv.config import ServerSettings
    from serv.main import create_app

    settings = ServerSettings(api_key="k", data_dir=tmp_path / "d", api_key_query_param="key")
    with TestClient(create_app(settings)) as c:
        assert c.post("/upload?key=k", content=png_bytes()).status_code == 200
        assert c.post("/upload?key=x", content=png_bytes()).status_code == 401


def test_query_param_ignored_by_default(client, upload_secret):
    from conftest import png_bytes

    r = client.post(f"/upload?key={upload_secret}", content=png_bytes())
    assert r.status_code == 400


@pytest.mark.parametrize(
    "key",
    ["../x.png", "..", "a/b.png", "a\\b.png", ".x.png", "abc.gif", "abc", "abc.png\x00", "", "abc.PNG"],
)
def test_safe_key_rejects(key):
    from serv.errors import InvalidKey
    from serv.storage import safe_key

    with pytest.raises(InvalidKey):
        safe_key(key)


def test_safe_key_accepts_generated_keys():
    from serv.filetype import FileType
    from serv.storage import generate_key, safe_key

    for t in FileType:
        key = generate_key(t)
        assert safe_key(key) == key


def test_header_credential_rejects_non_ascii_bytes():
    from serv.auth import HeaderCredential
    from serv.errors import AuthMalformed

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/upload",
        "query_string": b"",
        "headers": [(b"authorization", b"\xff\xfe")],
    }
    with pytest.raises(AuthMalformed):
        HeaderCredential("Authorization")(Request(scope))


def test_non_ascii_authorization_header_is_bad_request(client):
    from conftest import png_bytes

    r = client.post("/upload", content=png_bytes(), headers={"Authorization": b"\xff\xfe"})
    assert r.status_code == 400
    assert "not valid ASCII" in r.text

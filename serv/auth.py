import secrets
from typing import Iterable, Protocol

from fastapi import HTTPException, Request

from serv.errors import AuthInvalid, AuthMalformed, AuthMissing


def _is_visible_ascii(value: str) -> bool:
    return all(c == "\t" or " " <= c <= "~" for c in value)


class CredentialSource(Protocol):
    def __call__(self, request: Request) -> str | None: ...


class HeaderCredential:
    def __init__(self, name: str = "Authorization"):
        self.name = name

    def __call__(self, request: Request) -> str | None:
        value = request.headers.get(self.name)
        if value is not None and not _is_visible_ascii(value):
            raise AuthMalformed(self.name)
        return value

    def __repr__(self) -> str:
        return f"HeaderCredential({self.name!r})"


class QueryCredential:
    def __init__(self, name: str = "key"):
        self.name = name

    def __call__(self, request: Request) -> str | None:
        return request.query_params.get(self.name)

    def __repr__(self) -> str:
        return f"QueryCredential({self.name!r})"


def extract_credential(request: Request, sources: Iterable[CredentialSource]) -> str:
    """Return the first credential any of ``sources`` finds on the request."""
    for source in sources:
        value = source(request)
        if value is not None:
            return value
    raise AuthMissing()


def check_api_key(credential: str, secret: str) -> None:
    if not secrets.compare_digest(credential.encode(), secret.encode()):
        raise AuthInvalid()


def require_api_key(request: Request) -> None:
    """Dependency guarding upload routes with the configured shared secret."""
    sources = request.app.state.credential_sources
    try:
        credential = extract_credential(request, sources)
    except AuthMissing:
        raise HTTPException(status_code=400, detail="`Authorization` header is missing")
    except AuthMalformed:
        raise HTTPException(status_code=400, detail="`Authorization` header is not valid ASCII")
    try:
        check_api_key(credential, request.app.state.settings.api_key)
    except AuthInvalid:
        raise HTTPException(status_code=401, detail="Invalid API key")

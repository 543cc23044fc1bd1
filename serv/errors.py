"""Error types shared by the server and the watch client."""


class ServError(Exception):
    """Base class for serv errors."""


class AuthMissing(ServError):
    """No credential was supplied with the request."""


class AuthInvalid(ServError):
    """A credential was supplied but does not match the shared secret."""


class ValidationFailed(ServError):
    """Payload is not a supported image."""


class NotFound(ServError):
    """No stored file exists under the requested key."""


class InvalidKey(NotFound):
    """Key is not a well-formed storage key or points outside the store root."""


class StorageIOFailure(ServError):
    """Reading or writing the store failed."""


class TransportFailure(ServError):
    """Upload did not reach the server or the server rejected it."""


class ClipboardFailure(ServError):
    """Writing to the system clipboard failed."""


class AuthMalformed(ServError):
    """Credential header holds bytes outside visible ASCII."""

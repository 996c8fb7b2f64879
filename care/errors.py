# care/errors.py
import os

# Language of provider error details (EN by default).
LOCALE = os.getenv("ERROR_LOCALE", "en").lower()

def _(en: str, sw: str) -> str:
    return sw if LOCALE.startswith("sw") else en

class ProviderError(Exception):
    # Default to internal server error unless subclass overrides
    status_code = 500
    def __init__(self, detail: str | None = None):
        self.detail = detail or _("Upstream provider error.", "Hitilafu ya mtoa huduma wa AI.")
        super().__init__(self.detail)

class AuthError(ProviderError):
    # Invalid or missing API key
    status_code = 401
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Invalid API key.", "Ufunguo wa API si sahihi."))

class PermissionDenied(ProviderError):
    # Key has no access to this model
    status_code = 403
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Permission denied for this model.", "Huna ruhusa ya kutumia modeli hii."))

class BadRequestError(ProviderError):
    # Invalid payload, unsupported params or blocked prompt
    status_code = 400
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Invalid request to provider.", "Ombi kwa mtoa huduma si sahihi."))

class RateLimited(ProviderError):
    # Quota or request-per-minute cap exceeded
    status_code = 429
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Rate limit or quota exceeded.", "Kikomo cha maombi kimefikiwa."))

class UpstreamTimeout(ProviderError):
    status_code = 504
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Upstream timeout.", "Muda wa kusubiri umekwisha."))

class Unavailable(ProviderError):
    # Provider temporarily unavailable (maintenance, overload)
    status_code = 503
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Service unavailable.", "Huduma haipatikani kwa sasa."))

class UpstreamNetwork(ProviderError):
    status_code = 502
    def __init__(self, detail: str | None = None):
        super().__init__(detail or _("Network error to provider.", "Hitilafu ya mtandao kwa mtoa huduma."))


class CareError(Exception):
    """Base class for errors raised by the conversation engine itself."""


class EmptyMessage(CareError, ValueError):
    def __init__(self) -> None:
        super().__init__("message must not be empty")


class RetrievalError(CareError):
    pass


class StorageError(CareError):
    pass

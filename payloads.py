from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import quote, unquote, urlsplit

SUPPORTED_TYPES = ("url", "text", "wifi", "phone", "sms", "email")

# Characters a URL host may not contain once percent-decoded.
_FORBIDDEN_HOST_CHARS = frozenset("#%/:<>?@[\\]^|")

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class PayloadError(ValueError):
    """Base class for request problems reported back to the client."""


class MissingField(PayloadError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InvalidFormat(PayloadError):
    pass


class UnsupportedType(PayloadError):
    def __init__(self, qr_type: Any = None):
        super().__init__(f"Invalid QR type. Use: {', '.join(SUPPORTED_TYPES)}")
        self.qr_type = qr_type


def _number_text(value: Union[int, float]) -> str:
    # Zero and NaN count as absent; integral floats print without ".0".
    if not value or value != value:
        return ""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def _field(data: Mapping[str, Any], name: str) -> str:
    """
    Read a string field from a request object.
    Non-zero numbers are accepted and stringified; anything else counts as absent.
    """
    value = data.get(name)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _number_text(value)
    return ""


def _required(data: Mapping[str, Any], name: str, message: str) -> str:
    value = _field(data, name)
    if not value:
        raise MissingField(name, message)
    return value


def _with_scheme(url: str) -> str:
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return "https://" + url


def _is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
        # Raises ValueError for a non-numeric or out-of-range port.
        parts.port
    except ValueError:
        return False
    if not parts.scheme or not parts.hostname:
        return False
    if any(char.isspace() for char in parts.netloc):
        return False
    if parts.netloc.rpartition("@")[2].startswith("["):
        # Bracketed IPv6 literals are already checked by urlsplit.
        return True
    host = unquote(parts.hostname)
    return not any(
        char in _FORBIDDEN_HOST_CHARS or ord(char) < 0x20 or char == "\x7f"
        for char in host
    )


def _encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


@dataclass(frozen=True)
class UrlPayload:
    url: str

    def content(self) -> str:
        return self.url


@dataclass(frozen=True)
class TextPayload:
    text: str

    def content(self) -> str:
        return self.text


@dataclass(frozen=True)
class WifiPayload:
    ssid: str
    password: str = ""
    encryption: str = "WPA"

    def content(self) -> str:
        # ";", ":" and "," in SSID or password are not escaped.
        return f"WIFI:T:{self.encryption};S:{self.ssid};P:{self.password};;"


@dataclass(frozen=True)
class PhonePayload:
    phone: str

    def content(self) -> str:
        return f"tel:{self.phone}"


@dataclass(frozen=True)
class SmsPayload:
    phone: str
    message: str = ""

    def content(self) -> str:
        if self.message:
            return f"smsto:{self.phone}:{self.message}"
        return f"smsto:{self.phone}"


@dataclass(frozen=True)
class EmailPayload:
    email: str
    subject: str = ""
    body: str = ""

    def content(self) -> str:
        mailto = f"mailto:{self.email}"
        params = []
        if self.subject:
            params.append(f"subject={_encode_component(self.subject)}")
        if self.body:
            params.append(f"body={_encode_component(self.body)}")
        if params:
            mailto += "?" + "&".join(params)
        return mailto


@dataclass(frozen=True)
class LegacyUrlPayload:
    """Bare top-level ``url`` sent by older clients without a ``type``."""

    url: str

    def content(self) -> str:
        return _with_scheme(self.url)


Payload = Union[
    UrlPayload,
    TextPayload,
    WifiPayload,
    PhonePayload,
    SmsPayload,
    EmailPayload,
    LegacyUrlPayload,
]


def _parse_url(data: Mapping[str, Any]) -> UrlPayload:
    url = _with_scheme(_required(data, "url", "URL is required"))
    if not _is_valid_url(url):
        raise InvalidFormat("Invalid URL format")
    return UrlPayload(url=url)


def _parse_text(data: Mapping[str, Any]) -> TextPayload:
    return TextPayload(text=_required(data, "text", "Text is required"))


def _parse_wifi(data: Mapping[str, Any]) -> WifiPayload:
    return WifiPayload(
        ssid=_required(data, "ssid", "WiFi network name (SSID) is required"),
        password=_field(data, "password"),
        encryption=_field(data, "encryption") or "WPA",
    )


def _parse_phone(data: Mapping[str, Any]) -> PhonePayload:
    return PhonePayload(phone=_required(data, "phone", "Phone number is required"))


def _parse_sms(data: Mapping[str, Any]) -> SmsPayload:
    return SmsPayload(
        phone=_required(data, "phone", "Phone number is required"),
        message=_field(data, "message"),
    )


def _parse_email(data: Mapping[str, Any]) -> EmailPayload:
    return EmailPayload(
        email=_required(data, "email", "Email address is required"),
        subject=_field(data, "subject"),
        body=_field(data, "body"),
    )


_PARSERS: Dict[str, Callable[[Mapping[str, Any]], Payload]] = {
    "url": _parse_url,
    "text": _parse_text,
    "wifi": _parse_wifi,
    "phone": _parse_phone,
    "sms": _parse_sms,
    "email": _parse_email,
}


def parse_request(body: Optional[Mapping[str, Any]]) -> Payload:
    """
    Validate a generation request body and return its typed payload.

    ``body`` is the decoded JSON object: ``{"type": ..., "data": {...}}`` or the
    legacy ``{"url": ...}``. Raises a PayloadError subclass when the body cannot
    be turned into QR content.
    """
    body = body if isinstance(body, Mapping) else {}
    qr_type = body.get("type")
    parser = _PARSERS.get(qr_type) if isinstance(qr_type, str) else None

    if parser is not None:
        data = body.get("data")
        return parser(data if isinstance(data, Mapping) else {})

    legacy_url = _field(body, "url")
    if legacy_url:
        return LegacyUrlPayload(url=legacy_url)
    raise UnsupportedType(qr_type)


def format_request(body: Optional[Mapping[str, Any]]) -> str:
    return parse_request(body).content()

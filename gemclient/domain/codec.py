# /gemclient/domain/codec.py
from __future__ import annotations

import re
from enum import Enum

from gemclient.domain.errors import InvalidResponseError, InvalidURLError

_STATUS_TOKEN = re.compile(r"[+-]?[0-9]+")


class StatusCategory(str, Enum):
    """Coarse status class, decided by the tens digit of the code."""

    INPUT_EXPECTED = "Input expected"
    SUCCESS = "Success"
    REDIRECT = "Redirection"
    TEMPORARY_FAILURE = "Temporary failure"
    PERMANENT_FAILURE = "Permanent failure"
    CLIENT_CERTIFICATE_REQUIRED = "Client certificates"
    OTHER = "Other"


_BY_TENS: dict[int, StatusCategory] = {
    1: StatusCategory.INPUT_EXPECTED,
    2: StatusCategory.SUCCESS,
    3: StatusCategory.REDIRECT,
    4: StatusCategory.TEMPORARY_FAILURE,
    5: StatusCategory.PERMANENT_FAILURE,
    6: StatusCategory.CLIENT_CERTIFICATE_REQUIRED,
}


def classify(status: int) -> StatusCategory:
    if not 10 <= status <= 69:
        return StatusCategory.OTHER
    return _BY_TENS[status // 10]


def describe_status(status: int) -> str:
    return f"{classify(status).value}: {status}"


def build_request_line(url: str) -> bytes:
    """
    Encode the single request line sent on a fresh connection.
    Fragments are client-side only and never go on the wire.
    """
    absolute = url.partition("#")[0]
    try:
        return f"{absolute}\r\n".encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidURLError(f"cannot encode {url!r} as UTF-8") from e


def parse_header(line: bytes) -> tuple[int, str]:
    """
    Parse `<status> <meta>` (the LF is already stripped by the reader).
    Meta keeps its internal spacing and is trimmed at both ends.
    """
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidResponseError("response header is not valid UTF-8") from e

    text = text.rstrip()
    token, sep, rest = text.partition(" ")
    if not sep or not _STATUS_TOKEN.fullmatch(token):
        raise InvalidResponseError(f"malformed response header {text!r}")
    return int(token), rest.strip()

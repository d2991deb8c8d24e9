"""Uniform JSON response envelopes and request payloads."""

import dataclasses
import json
import re
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping

SUCCESS = 0
ERROR = 7

_EMAIL = re.compile(
    r"[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*"
)


def _plain(data: Any) -> Any:
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    return data


@dataclass
class Response:
    """Response envelope with the HTTP status it is sent with."""

    code: int
    data: Any
    msg: str
    status: int = HTTPStatus.OK

    def to_dict(self) -> dict:
        """JSON body of the response."""
        return {"code": self.code, "data": _plain(self.data), "msg": self.msg}


@dataclass
class CaptchaResponse:
    """Identifier and base64 image of a generated captcha."""

    captcha_id: str
    pic_path: str


@dataclass
class SendEmailVerificationCode:
    """Request for an e-mail verification code."""

    email: str
    captcha: str
    captcha_id: str

    @classmethod
    def from_json(cls, payload: Any) -> "SendEmailVerificationCode":
        """Parse and validate a JSON body or decoded mapping; raises ``ValueError``."""
        if isinstance(payload, (str, bytes, bytearray)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise ValueError(str(exc)) from exc
        if not isinstance(payload, Mapping):
            raise ValueError("request body must be a JSON object")

        values = {}
        for key in ("email", "captcha", "captcha_id"):
            value = payload.get(key)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(
                    f"json: cannot unmarshal {type(value).__name__} into field {key} of type string"
                )
            values[key] = value

        problems = []
        if not values["email"]:
            problems.append(_violation("Email", "required"))
        elif not _EMAIL.fullmatch(values["email"]):
            problems.append(_violation("Email", "email"))
        if not values["captcha"]:
            problems.append(_violation("Captcha", "required"))
        elif len(values["captcha"]) != 6:
            problems.append(_violation("Captcha", "len"))
        if not values["captcha_id"]:
            problems.append(_violation("CaptchaID", "required"))
        if problems:
            raise ValueError("\n".join(problems))
        return cls(**values)


def _violation(field: str, tag: str) -> str:
    return (
        f"Key: 'SendEmailVerificationCode.{field}' "
        f"Error:Field validation for '{field}' failed on the '{tag}' tag"
    )


def result(code: int, data: Any, msg: str) -> Response:
    """Envelope sent with HTTP 200."""
    return Response(code, data, msg)


def ok() -> Response:
    return result(SUCCESS, {}, "success")


def ok_with_message(message: str) -> Response:
    return result(SUCCESS, {}, message)


def ok_with_data(data: Any) -> Response:
    return result(SUCCESS, data, "success")


def ok_with_detailed(data: Any, message: str) -> Response:
    return result(SUCCESS, data, message)


def fail() -> Response:
    return result(ERROR, {}, "failure")


def fail_with_message(message: str) -> Response:
    return result(ERROR, {}, message)


def fail_with_detailed(data: Any, message: str) -> Response:
    return result(ERROR, data, message)


def no_auth(message: str) -> Response:
    """Failure telling the client to reload."""
    return result(ERROR, {"reload": True}, message)


def forbidden(message: str) -> Response:
    """Failure sent with HTTP 403 and no data."""
    return Response(ERROR, None, message, HTTPStatus.FORBIDDEN)
"""Submission dispatch: remote endpoint or in-process handler.

The remote path encodes file fields and sends a JSON document with httpx;
the handler path passes raw values (file references included) to a
caller-supplied function. Neither path retries.

Example:
    result = await send_to_endpoint(
        fields,
        {"email": "ada@example.com"},
        FormOptions(endpoint="https://hooks.example.com/signup"),
    )
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Union

import httpx

from forms.lib.env import expand_env_vars, expand_headers
from forms.lib.errors import SubmissionError
from forms.lib.files import encode_file_fields
from forms.models.field import FieldDescriptor
from forms.models.options import FormOptions

logger = logging.getLogger(__name__)

__all__ = [
    "SubmitHandler",
    "maybe_await",
    "build_request_headers",
    "send_to_endpoint",
    "call_handler",
]

SubmitHandler = Callable[[Dict[str, Any]], Union[None, Any, Awaitable[Any]]]

JSON_CONTENT_TYPE = "application/json"


async def maybe_await(result: Any) -> Any:
    """Await ``result`` if it is awaitable (async callbacks), else return it."""
    if inspect.isawaitable(result):
        return await result
    return result


def build_request_headers(options: FormOptions) -> Dict[str, str]:
    """JSON content type plus configured overrides (env vars expanded)."""
    headers = {"Content-Type": JSON_CONTENT_TYPE}
    headers.update(expand_headers(options.headers))
    return headers


def _create_client(options: FormOptions, transport: Optional[httpx.AsyncBaseTransport]) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=options.timeout, transport=transport)


async def send_to_endpoint(
    fields: Iterable[FieldDescriptor],
    values: Mapping[str, Any],
    options: FormOptions,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """Encode the payload and send it to the configured endpoint.

    Args:
        fields: Field descriptors (to find file fields)
        values: Current form values
        options: Form options with endpoint, method and headers
        transport: Optional httpx transport (used by tests)

    Returns:
        Parsed JSON response body, or the submitted payload when the body
        is not JSON

    Raises:
        SubmissionError: On a non-2xx response or transport failure
    """
    if not options.endpoint:
        raise SubmissionError("No endpoint configured", form=options.name)

    url = expand_env_vars(options.endpoint)
    payload = await encode_file_fields(fields, values)
    body = json.dumps(payload, default=str)

    logger.debug("Sending %s %s (%d bytes)", options.method, url, len(body))
    try:
        async with _create_client(options, transport) as client:
            response = await client.request(
                options.method,
                url,
                content=body,
                headers=build_request_headers(options),
            )
    except httpx.HTTPError as exc:
        raise SubmissionError(
            f"Form submission failed: {exc}",
            url=url,
            cause=exc,
        ) from exc

    if not response.is_success:
        raise SubmissionError(
            f"Form submission failed: {response.status_code}",
            status_code=response.status_code,
            url=url,
        )

    # Endpoints may reply with an empty or non-JSON body
    try:
        return response.json()
    except ValueError:
        return payload


async def call_handler(handler: SubmitHandler, payload: Any) -> Any:
    """Invoke an in-process submit handler.

    Mappings are passed as a copy so the handler cannot mutate form state.
    """
    if isinstance(payload, Mapping):
        payload = dict(payload)
    return await maybe_await(handler(payload))

"""Fetching live responses for the samples of a collection.

The validator never performs I/O itself. The prober replays each sample's
request against a running API and returns new samples carrying the live
status and body, ready to be checked like documented examples.
"""

import re
from typing import Iterable, Mapping, Optional
from urllib.parse import quote

import requests

from envelope_conformance.collection.loader import decode_body
from envelope_conformance.models.enums import RuleId, Severity
from envelope_conformance.models.finding import Finding
from envelope_conformance.models.sample import ResponseSample
from envelope_conformance.observability.logging import get_logger

logger = get_logger(__name__)

# {{var}}, {var} and :var path segments
PLACEHOLDER = re.compile(
    r"\{\{([^{}/]+)\}\}|\{([^{}/]+)\}|(?<=/):([A-Za-z_][\w-]*)"
)


def build_url(base_url: str, path: str) -> str:
    if not path:
        return base_url
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def fill_path(
    path: str, params: Optional[Mapping[str, str]] = None
) -> tuple[str, list[str]]:
    """Substitutes path parameters into a templated path.

    Args:
        path: Request path, possibly holding `{id}`, `:id` or `{{id}}`
            segments.
        params: Values by parameter name. Values are percent-encoded.

    Returns:
        The filled path and the placeholders left without a value.
    """
    params = params or {}
    unresolved: list[str] = []

    def _substitute(match: re.Match) -> str:
        name = next(group for group in match.groups() if group)
        if name in params:
            return quote(str(params[name]), safe="")
        unresolved.append(match.group(0))
        return match.group(0)

    return PLACEHOLDER.sub(_substitute, path), unresolved


def probe_sample(
    session: requests.Session,
    base_url: str,
    sample: ResponseSample,
    timeout: float = 10.0,
    headers: Optional[Mapping[str, str]] = None,
    path_params: Optional[Mapping[str, str]] = None,
) -> ResponseSample:
    """Replays one sample's request and captures the live response.

    Transport failures do not raise: the returned sample keeps the
    documented status and carries a request-failed finding instead.
    A request whose path still holds a placeholder after substitution is
    not sent; the documented example is kept with a request-failed warning.
    """
    path, unresolved = fill_path(sample.path, path_params)
    if unresolved:
        logger.warning(
            f"Skipping {sample.method.upper()} {sample.path}: "
            f"no value for {', '.join(unresolved)}",
            extra={"extra_fields": {"event": "probe_skipped", "path": sample.path}},
        )
        return sample.model_copy(
            update={
                "load_findings": sample.load_findings
                + (
                    Finding(
                        path="",
                        rule=RuleId.REQUEST_FAILED,
                        severity=Severity.WARNING,
                        message=(
                            f"Not probed: no value for {', '.join(unresolved)}; "
                            "documented example checked instead"
                        ),
                    ),
                )
            }
        )

    url = build_url(base_url, path)
    request_headers = {"Accept": "application/json"}
    request_headers.update(headers or {})

    try:
        response = session.request(
            sample.method.upper(), url, headers=request_headers, timeout=timeout
        )
    except requests.RequestException as e:
        logger.warning(
            f"Request to {url} failed: {e}",
            extra={"extra_fields": {"event": "probe_failed", "url": url}},
        )
        return sample.model_copy(
            update={
                "body": None,
                "load_findings": (
                    Finding(
                        path="",
                        rule=RuleId.REQUEST_FAILED,
                        severity=Severity.ERROR,
                        message=f"{sample.method.upper()} {url} failed: {e}",
                    ),
                ),
            }
        )

    body, load_findings = decode_body(response.content)
    logger.info(
        f"{sample.method.upper()} {url} -> {response.status_code}",
        extra={
            "extra_fields": {
                "event": "probe_response",
                "url": url,
                "status": response.status_code,
            }
        },
    )
    return sample.model_copy(
        update={
            "status": response.status_code,
            "body": body,
            "load_findings": tuple(load_findings),
        }
    )


def probe(
    base_url: str,
    samples: Iterable[ResponseSample],
    session: Optional[requests.Session] = None,
    timeout: float = 10.0,
    headers: Optional[Mapping[str, str]] = None,
    path_params: Optional[Mapping[str, str]] = None,
) -> list[ResponseSample]:
    """Fetches the live response of every sample.

    Args:
        base_url: Root URL of the API, e.g. 'https://api.example.com'.
        samples: Samples whose method and path describe the requests.
        session: Optional requests session; one is created and closed
            when omitted.
        timeout: Per-request timeout in seconds.
        headers: Extra headers sent with every request.
        path_params: Values for templated path segments such as `{id}`.

    Returns:
        Samples carrying the live status and body, in input order.
    """
    owns_session = session is None
    session = session or requests.Session()
    try:
        return [
            probe_sample(
                session,
                base_url,
                s,
                timeout=timeout,
                headers=headers,
                path_params=path_params,
            )
            for s in samples
        ]
    finally:
        if owns_session:
            session.close()

"""Batch checking of response samples.

Every sample is checked independently of the others, so a run can fan out
over a thread pool. Results always come back in input order.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from envelope_conformance.config import CheckerSettings
from envelope_conformance.models.enums import ShapeKind
from envelope_conformance.models.sample import ResponseSample, SampleResult
from envelope_conformance.observability.logging import get_logger
from envelope_conformance.rules.paths import check_path
from envelope_conformance.validation.validator import EnvelopeValidator

logger = get_logger(__name__)


def check_sample(
    sample: ResponseSample,
    validator: EnvelopeValidator,
    settings: Optional[CheckerSettings] = None,
) -> SampleResult:
    """Checks one sample.

    Findings raised while obtaining the sample come first. When one of them
    is an error (the body could not be fetched or decoded), the envelope is
    not validated. Path findings come last.

    Args:
        sample: The response to check.
        validator: The envelope validator to apply.
        settings: Run settings; defaults are used when omitted.

    Returns:
        The sample's result.
    """
    settings = settings or CheckerSettings()
    findings = list(sample.load_findings)

    if any(f.is_error for f in findings):
        shape = ShapeKind.INDETERMINATE
    else:
        shape, body_findings = validator.inspect(
            sample.status, sample.body, sample.data_schema
        )
        findings.extend(body_findings)

    if settings.check_paths:
        findings.extend(
            check_path(
                sample.path,
                version_prefix_required=settings.require_version_prefix,
            )
        )

    result = SampleResult(
        name=sample.name,
        method=sample.method.upper(),
        path=sample.path,
        status=sample.status,
        shape=shape,
        findings=tuple(findings),
    )
    logger.debug(
        f"Checked {sample.label}",
        extra={
            "extra_fields": {
                "event": "sample_checked",
                "sample": sample.name,
                "shape": shape.value,
                "errors": len(result.errors),
                "warnings": len(result.warnings),
            }
        },
    )
    return result


def check_samples(
    samples: Iterable[ResponseSample],
    validator: EnvelopeValidator,
    settings: Optional[CheckerSettings] = None,
    workers: Optional[int] = None,
) -> list[SampleResult]:
    """Checks many samples, optionally in parallel.

    Args:
        samples: The responses to check.
        validator: The envelope validator to apply.
        settings: Run settings; defaults are used when omitted.
        workers: Parallelism override. Defaults to `settings.workers`.

    Returns:
        One result per sample, in input order.
    """
    settings = settings or CheckerSettings()
    workers = workers or settings.workers
    samples = list(samples)

    if workers <= 1 or len(samples) <= 1:
        return [check_sample(s, validator, settings) for s in samples]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda s: check_sample(s, validator, settings), samples))

"""Checking a Postman collection that mixes envelope variants.

This example demonstrates how to:
1. Load the saved response examples of a Postman v2.1 collection.
2. Accept the bare {data, metadata} envelope as a documented variant.
3. Compare the verdicts with and without the bare variant.
"""

from pathlib import Path

from envelope_conformance.collection.loader import load_collection
from envelope_conformance.config import CheckerSettings
from envelope_conformance.execution.runner import check_samples
from envelope_conformance.report.emitter import ReportEmitter
from envelope_conformance.validation.validator import EnvelopeValidator

DATA_DIR = Path(__file__).parent / "data"


def run_example():
    samples = load_collection(DATA_DIR / "orders.postman_collection.json")

    for allow_bare in (False, True):
        settings = CheckerSettings(allow_bare_envelope=allow_bare)
        emitter = ReportEmitter()
        emitter.extend(
            check_samples(samples, EnvelopeValidator.from_settings(settings), settings)
        )
        print(f"--- allow_bare_envelope={allow_bare}")
        print(emitter.render_text())


if __name__ == "__main__":
    run_example()

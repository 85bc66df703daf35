"""Checking every documented example of a collection.

This example demonstrates how to:
1. Load settings and a native YAML collection.
2. Check all samples in parallel.
3. Print the Markdown report and the run's exit code.
"""

from pathlib import Path

from envelope_conformance.collection.loader import load_collection
from envelope_conformance.config import load_settings
from envelope_conformance.execution.runner import check_samples
from envelope_conformance.observability.logging import setup_logging
from envelope_conformance.report.emitter import ReportEmitter
from envelope_conformance.validation.validator import EnvelopeValidator

DATA_DIR = Path(__file__).parent / "data"


def run_example():
    setup_logging("INFO")
    settings = load_settings(DATA_DIR / "settings.yaml")
    samples = load_collection(DATA_DIR / "users_collection.yaml")

    validator = EnvelopeValidator.from_settings(settings)
    emitter = ReportEmitter()
    emitter.extend(check_samples(samples, validator, settings))

    print(emitter.render_markdown())
    print(f"Exit code: {emitter.exit_code()}")


if __name__ == "__main__":
    run_example()

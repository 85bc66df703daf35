import json
from pathlib import Path

from envelope_conformance.config import CheckerSettings
from envelope_conformance.models.finding import Finding
from envelope_conformance.models.report import ConformanceSummary
from envelope_conformance.models.sample import ResponseSample, SampleResult
from envelope_conformance.models.status_rule import StatusRule


OUTPUT_DIR = Path("docs/schemas")


MODELS = {
    "finding.schema.json": Finding,
    "status_rule.schema.json": StatusRule,
    "response_sample.schema.json": ResponseSample,
    "sample_result.schema.json": SampleResult,
    "summary.schema.json": ConformanceSummary,
    "settings.schema.json": CheckerSettings,
}


def main(output_dir: Path = OUTPUT_DIR) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    for filename, model in MODELS.items():
        schema = model.model_json_schema()
        (output_dir / filename).write_text(
            json.dumps(schema, indent=2),
            encoding="utf-8",
        )


if __name__ == "__main__":
    main()

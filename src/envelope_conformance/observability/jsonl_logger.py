import json
from pathlib import Path
from typing import Any, Iterable

from ..models.sample import SampleResult


class JsonlFindingLogger:
    """Appends one JSON line per finding, tagged with its sample."""

    def __init__(self, path: str = "./findings.jsonl") -> None:
        self.path = Path(path)

    def log_results(self, results: Iterable[SampleResult]) -> int:
        count = 0
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            for result in results:
                for finding in result.findings:
                    record: dict[str, Any] = {
                        "sample": result.name,
                        "method": result.method,
                        "path": result.path,
                        "status": result.status,
                        "shape": result.shape.value,
                        "finding": finding.model_dump(mode="json"),
                    }
                    f.write(json.dumps(record, ensure_ascii=False) + "\n")
                    count += 1
        return count

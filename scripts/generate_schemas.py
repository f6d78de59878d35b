"""Generate JSON schemas for the config and report models and save to schemas/."""

import json
from pathlib import Path

from schemaunion.contracts import CheckSummary, DecodeReport, UnionDescription
from schemaunion.kernel.config import GenerationConfig

MODELS = {
    "generation_config.schema.json": GenerationConfig,
    "union_description.schema.json": UnionDescription,
    "decode_report.schema.json": DecodeReport,
    "check_summary.schema.json": CheckSummary,
}


def generate_schemas():
    """Generate JSON schemas for all public models."""
    schemas_dir = Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(exist_ok=True)

    for filename, model in MODELS.items():
        schema_path = schemas_dir / filename
        with open(schema_path, 'w', encoding='utf-8') as f:
            json.dump(model.model_json_schema(), f, indent=2, ensure_ascii=False)
        print(f"Generated: {schema_path}")

    print("\nSchema generation complete!")


if __name__ == "__main__":
    generate_schemas()

"""Generate JSON schemas from Pydantic models and save to schemas/ directory."""

import json
from pathlib import Path

from mocktx.kernel.mock_tx import ReprMockTransaction
from mocktx.kernel.policy import CompletionPolicy


def generate_schemas():
    """Generate JSON schemas for all models."""
    schemas_dir = Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(exist_ok=True)

    # Generate resolved mock transaction schema
    mock_tx_schema = ReprMockTransaction.model_json_schema()
    mock_tx_schema_path = schemas_dir / "mock_tx.schema.json"
    with open(mock_tx_schema_path, 'w', encoding='utf-8') as f:
        json.dump(mock_tx_schema, f, indent=2, ensure_ascii=False)
    print(f"Generated: {mock_tx_schema_path}")

    # Generate completion policy schema
    policy_schema = CompletionPolicy.model_json_schema()
    policy_schema_path = schemas_dir / "completion_policy.schema.json"
    with open(policy_schema_path, 'w', encoding='utf-8') as f:
        json.dump(policy_schema, f, indent=2, ensure_ascii=False)
    print(f"Generated: {policy_schema_path}")

    print("\nSchema generation complete!")


if __name__ == "__main__":
    generate_schemas()

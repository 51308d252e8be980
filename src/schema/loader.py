"""Format loader: YAML serialization and deserialization for FormatSchema.

Lets custom export layouts be declared as human-readable YAML instead of
code, e.g.::

    name: agency_keywords
    platform: google_ads
    strategy: sentinel
    sentinel: Rows
    min_fields: 6
    entity_kind: keyword
    columns:
      date: 0
      campaign: 1
      sub_entity: 2
      spend: 3
      clicks: 4
      conversions: 5
"""

from pathlib import Path

import yaml

from .models import FormatSchema


def save_format(schema: FormatSchema, path: str | Path) -> None:
    """Serialize a FormatSchema to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = schema.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_format(path: str | Path) -> FormatSchema:
    """Deserialize a FormatSchema from a YAML file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the document is not a valid format contract.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Format file not found: {path}")
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Format file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Format file {path} must contain a mapping")
    if "columns" in data and not isinstance(data["columns"], dict):
        raise ValueError(f"Format file {path}: 'columns' must map roles to field indexes")
    try:
        return FormatSchema.from_dict(data)
    except KeyError as exc:
        raise ValueError(f"Format file {path} is missing required key {exc}") from exc
    except TypeError as exc:
        raise ValueError(f"Format file {path} has a malformed value: {exc}") from exc

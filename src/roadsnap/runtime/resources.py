# roadsnap/runtime/resources.py
import json
import os

from roadsnap.config.models import DatasetByPath, DatasetRef
from roadsnap.errors import DatasetError

# No caching here: a reload must see the file as it is now.


def load_dataset_from_path(file: str, fmt: str) -> list[dict]:
    try:
        with open(file, encoding="utf-8") as f:
            if fmt == "json":
                data = json.load(f)
            elif fmt == "jsonl":
                data = [json.loads(line) for line in f if line.strip()]
            else:
                raise ValueError(f"Unsupported dataset fmt {fmt!r}")
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        raise DatasetError(f"{file}: {e}") from e
    if not isinstance(data, list):
        raise DatasetError(f"{file}: expected a JSON array of segment records")
    return data


def resolve_dataset(ref: DatasetRef) -> list[dict]:
    if isinstance(ref, DatasetByPath):
        if not os.path.exists(ref.file):
            if ref.must_exist:
                raise FileNotFoundError(ref.file)
            return []
        return load_dataset_from_path(ref.file, ref.fmt)
    raise TypeError(ref)

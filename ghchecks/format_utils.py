"""
Output format utilities for ghchecks CLI commands.

Provides functions to format data as JSON Lines, JSON, YAML and CSV.
"""

import json
import csv
import io
import os
from typing import Dict, List, Any, Iterable, Iterator, Optional
import yaml

FORMATS = ('jsonl', 'json', 'yaml', 'csv')


def format_output(data: Iterable[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterable of dictionaries to format
        format: Output format (jsonl, json, yaml, csv)
        fields: Optional list of fields to include (for CSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "yaml":
        yield from format_yaml(data)
    elif format == "csv":
        yield from format_csv(data, fields)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    # Collect all data (needed for JSON array)
    all_data = list(data)
    yield json.dumps(all_data, ensure_ascii=False, indent=2)


def format_yaml(data: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    all_data = list(data)
    yield yaml.dump(all_data, default_flow_style=False, allow_unicode=True, sort_keys=False)


def format_csv(data: Iterable[Dict[str, Any]], fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data as CSV.

    Args:
        data: Iterable of dictionaries
        fields: Optional list of fields to include. If None, uses the
            fields of all items in first-seen order.
    """
    data_list = [flatten_dict(item) for item in data]
    if not data_list:
        return

    if fields is None:
        fields = []
        for item in data_list:
            for key in item:
                if key not in fields:
                    fields.append(key)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, extrasaction='ignore')
    writer.writeheader()
    for item in data_list:
        writer.writerow(item)

    yield output.getvalue().rstrip('\r\n')


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Example:
        {'a': {'b': 1, 'c': 2}} -> {'a.b': 1, 'a.c': 2}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k

        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            items.append((new_key, ', '.join(str(item) for item in v)))
        else:
            items.append((new_key, v))

    return dict(items)


def get_format_from_env(default: str = 'jsonl') -> str:
    """
    Get output format from the GHCHECKS_FORMAT environment variable.

    Args:
        default: Default format if not specified or not recognised
    """
    format = os.environ.get('GHCHECKS_FORMAT', default).lower()
    if format not in FORMATS:
        return default
    return format

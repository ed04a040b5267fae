"""Question catalog loaders.

Load the static question catalog from YAML or JSON files. The bundled
catalog ships as ``five_seconds/data/questions.yaml``.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..models.question import Question

_logger = logging.getLogger("five_seconds.loaders")

CATALOG_PATH_ENV = "FIVE_SECONDS_QUESTIONS"


def get_data_directory() -> str:
    """Get the path to the bundled data directory."""
    current_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(current_dir, "..", "data")


def get_default_catalog_path() -> str:
    return os.path.join(get_data_directory(), "questions.yaml")


def _load_json_file(filepath: str) -> Optional[Any]:
    """Load a JSON file safely."""
    if not os.path.isfile(filepath):
        return None
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError):
        return None


def _load_yaml_file(filepath: str) -> Optional[Any]:
    """Load a YAML file safely."""
    if not os.path.isfile(filepath):
        return None
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (yaml.YAMLError, OSError):
        return None


def _load_catalog_file(filepath: str) -> Optional[Any]:
    if filepath.endswith(".json"):
        return _load_json_file(filepath)
    return _load_yaml_file(filepath)


def parse_catalog(data: Any) -> Tuple[Question, ...]:
    """Build questions from a list (or ``{"questions": [...]}``) of dicts.

    Entries that fail validation and repeated ids are skipped with a warning.
    """
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        return ()

    questions: List[Question] = []
    seen_ids: set[int] = set()
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            _logger.warning(f"[CATALOG] Skipping entry #{idx}: not a mapping")
            continue
        try:
            question = Question.from_dict(item)
        except (TypeError, ValueError, ValidationError) as exc:
            _logger.warning(f"[CATALOG] Skipping entry #{idx}: {exc}")
            continue
        if question.id in seen_ids:
            _logger.warning(f"[CATALOG] Skipping entry #{idx}: duplicate id {question.id}")
            continue
        seen_ids.add(question.id)
        questions.append(question)
    return tuple(questions)


@lru_cache(maxsize=8)
def load_catalog(path: Optional[str] = None) -> Tuple[Question, ...]:
    """Load a question catalog.

    Args:
        path: YAML or JSON file; defaults to ``$FIVE_SECONDS_QUESTIONS`` or
            the bundled catalog

    Returns:
        Tuple of questions; empty when the file is missing or unreadable
    """
    filepath = path or os.environ.get(CATALOG_PATH_ENV) or get_default_catalog_path()
    data = _load_catalog_file(filepath)
    if data is None:
        _logger.warning(f"[CATALOG] Could not read question catalog at {filepath}")
        return ()

    catalog = parse_catalog(data)
    if not catalog:
        _logger.warning(f"[CATALOG] Question catalog at {filepath} has no usable entries")
    else:
        _logger.info(f"[CATALOG] Loaded {len(catalog)} questions from {filepath}")
    return catalog

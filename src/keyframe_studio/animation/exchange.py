"""
Library exchange format.

The exchanged form is a plain mapping
``{entity_id: {duration, loop, loopCount, tracks: {property: {keyframes}}}}``.
Loading always runs through normalization; exporting drops empty clips and,
when the set of existing entities is known, orphaned ones.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, cast

import orjson

from .diagnostics import DiagnosticKind, DiagnosticSink, report
from .models import AnimationLibrary, normalize_clip

logger = logging.getLogger(__name__)


def load_library(
    data: Optional[Mapping[str, Any]],
    existing_ids: Optional[Iterable[str]] = None,
    sink: Optional[DiagnosticSink] = None,
) -> AnimationLibrary:
    """Build a library from exchanged data.

    Args:
        data: Exchanged mapping, None for an empty library
        existing_ids: Ids of entities that currently exist; clips for other
            ids are skipped as orphans. None disables the check.
        sink: Optional receiver for diagnostics

    Returns:
        Library holding every valid clip
    """
    library = AnimationLibrary()
    if not data:
        return library
    if not isinstance(data, Mapping):
        report(sink, DiagnosticKind.INVALID_CLIP_DATA, "Animation data is not a mapping")
        return library

    valid_ids = set(existing_ids) if existing_ids is not None else None
    for entity_id, raw_clip in cast(Mapping[str, Any], data).items():
        entity_id = str(entity_id)
        if valid_ids is not None and entity_id not in valid_ids:
            logger.info(f"Skipping orphaned animation on load: {entity_id}")
            continue
        clip = normalize_clip(raw_clip, entity_id, sink)
        if clip is not None:
            library.set(entity_id, clip)

    logger.info(f"Loaded {len(library)} animations")
    return library


def export_library(
    library: AnimationLibrary,
    existing_ids: Optional[Iterable[str]] = None,
) -> Optional[Dict[str, Any]]:
    """Exchange form of ``library``, or None if nothing is left to save."""
    valid_ids = set(existing_ids) if existing_ids is not None else None
    result: Dict[str, Any] = {}
    for entity_id, clip in library.items():
        if valid_ids is not None and entity_id not in valid_ids:
            logger.info(f"Removing orphaned animation on export: {entity_id}")
            continue
        if clip.is_empty:
            continue
        result[entity_id] = clip.to_dict()
    return result or None


def dumps_library(
    library: AnimationLibrary,
    existing_ids: Optional[Iterable[str]] = None,
    indent: bool = False,
) -> bytes:
    """Serialize ``library`` to JSON bytes (``{}`` when empty)."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(export_library(library, existing_ids) or {}, option=option)


def loads_library(
    payload: bytes | str,
    existing_ids: Optional[Iterable[str]] = None,
    sink: Optional[DiagnosticSink] = None,
) -> AnimationLibrary:
    """Parse JSON bytes into a library.

    Raises:
        ValueError: If the payload is not valid JSON
    """
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise ValueError(f"Failed to parse animation data: {e}") from e
    return load_library(data, existing_ids, sink)

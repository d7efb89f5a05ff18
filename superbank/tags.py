"""
Tag reference resolution.

Transactions store tags either as bare ids or as inline tag objects copied at
tagging time. Both are reconciled against the current tag catalog. A tag id
with no catalog entry (the tag was deleted after being applied) becomes a
placeholder tag named after its id rather than an error.
"""

import logging

from superbank.config import DEFAULT_TAG_COLOR
from superbank.models import Tag

logger = logging.getLogger(__name__)


def _as_tag(value):
    if isinstance(value, Tag):
        return value
    return Tag.from_record(value)


def index_catalog(catalog):
    """Map tag id to Tag for a catalog of Tag objects or tag records."""
    index = {}
    for entry in catalog or ():
        tag = _as_tag(entry)
        if tag.id:
            index[tag.id] = tag
    return index


def _resolve_one(ref, index):
    if isinstance(ref, Tag):
        ref = ref.to_dict()

    if isinstance(ref, dict):
        tag_id = str(ref.get('id') or '').strip()
        name = ref.get('name')
        color = ref.get('color')
        if tag_id in index:
            # Catalog copy wins over whatever was stored on the transaction
            return index[tag_id]
        if not tag_id and not name:
            return None
        if name and color:
            return Tag(id=tag_id or str(name), name=str(name), color=str(color))
        return Tag(
            id=tag_id or str(name),
            name=str(name or tag_id),
            color=str(color or DEFAULT_TAG_COLOR),
        )

    if ref is None:
        return None
    tag_id = str(ref).strip()
    if not tag_id:
        return None
    if tag_id in index:
        return index[tag_id]
    logger.debug(f"Tag {tag_id} not in catalog, using placeholder")
    return Tag(id=tag_id, name=tag_id, color=DEFAULT_TAG_COLOR)


def resolve_tags(refs, catalog):
    """Resolve tag references against the tag catalog.

    Args:
        refs (list): Tag ids (str) and/or tag objects (Tag or dict)
        catalog (list): Tag objects or tag records

    Returns:
        list[Tag]: One tag per usable reference, in input order
    """
    index = catalog if isinstance(catalog, dict) else index_catalog(catalog)
    resolved = []
    for ref in refs or ():
        tag = _resolve_one(ref, index)
        if tag is not None:
            resolved.append(tag)
    return resolved


def find_tag_list(raw):
    """Return the first list-valued field whose name contains "tag".

    Returns None if the transaction has no such field.
    """
    for key, value in raw.items():
        if 'tag' in str(key).lower() and isinstance(value, list):
            return value
    return None


def tag_name(tag):
    if isinstance(tag, Tag):
        return tag.name
    if isinstance(tag, dict):
        return str(tag.get('name') or tag.get('id') or '')
    return str(tag)


def tag_id(tag):
    if isinstance(tag, Tag):
        return tag.id
    if isinstance(tag, dict):
        return str(tag.get('id') or tag.get('name') or '')
    return str(tag)


def tag_usage(rows, catalog=(), column='Tags'):
    """Count how many rows carry each tag name.

    Every catalog tag appears in the result, with zero when unused.

    Returns:
        dict: ``{tag name: count}`` ordered by count, highest first
    """
    counts = {}
    for row in rows:
        tags = row.get(column)
        if not isinstance(tags, list):
            continue
        for tag in tags:
            name = tag_name(tag)
            if name:
                counts[name] = counts.get(name, 0) + 1

    for tag in index_catalog(catalog).values():
        counts.setdefault(tag.name, 0)

    return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))

"""Form decoder: flat bracket-notation multipart fields into a DecodedDocument

Decoding runs in two passes. `_scan` walks the flat keys once and files every
recognised value into an index-keyed draft; `_materialize` turns the drafts
into ordered, typed records. Decoding never raises: anything it cannot place
is passed through untouched in `DecodedDocument.fields`.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from blogcore.core.decode.keys import parse_index, split_key
from blogcore.core.decode.normalize import normalize_block_data
from blogcore.core.models import ContentBlock, DecodedDocument, FaqEntry, SeoRecord
from blogcore.core.utils.coerce import parse_bool, parse_int


logger = logging.getLogger(__name__)

FormValue = str | list[str]

JSON_FIELDS = ('tags', 'blocks', 'seo')
BLOCK_MAPS = ('data', 'settings')
FAQ_FIELDS = ('question', 'answer', 'order', 'isActive')


@dataclass
class _BlockDraft:
    type: str = ''
    order: Any = None
    data: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class _Scan:
    """Intermediate, index-keyed view of the form produced by the first pass."""
    json_values: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    has_tags: bool = False
    blocks: dict[int, _BlockDraft] = field(default_factory=dict)
    faqs: dict[int, dict[str, Any]] = field(default_factory=dict)
    seo: dict[str, Any] = field(default_factory=dict)
    fields: dict[str, Any] = field(default_factory=dict)


def _last(value: Any) -> Any:
    """Scalar view of a possibly repeated field: the last submitted value wins."""
    if isinstance(value, (list, tuple)):
        return value[-1] if value else ''
    return value


def _assign(target: dict[str, Any], name: str, value: Any, is_array: bool) -> None:
    """Scalar keys overwrite; `[]` keys append, except a repeated field replaces the whole array."""
    if not is_array:
        target[name] = _last(value)
    elif isinstance(value, (list, tuple)):
        target[name] = list(value)
    else:
        existing = target.get(name)
        if isinstance(existing, list):
            existing.append(value)
        elif name in target:
            target[name] = [existing, value]
        else:
            target[name] = [value]


# --- pass 1: scan ---

def _scan_tags(scan: _Scan, path: list[str], value: Any) -> bool:
    if path != ['']:
        return False
    scan.has_tags = True
    scan.tags.extend(value if isinstance(value, (list, tuple)) else [value])
    return True


def _scan_block(scan: _Scan, path: list[str], value: Any) -> bool:
    index = parse_index(path[0]) if len(path) >= 2 else None
    if index is None:
        return False
    name, rest = path[1], path[2:]
    is_map_field = name in BLOCK_MAPS and bool(rest) and bool(rest[0]) and rest[1:] in ([], [''])
    if not (is_map_field or (name in ('type', 'order') and not rest)):
        return False

    draft = scan.blocks.setdefault(index, _BlockDraft())
    if name == 'type':
        draft.type = str(_last(value))
    elif name == 'order':
        draft.order = _last(value)
    else:
        _assign(getattr(draft, name), rest[0], value, is_array=rest[1:] == [''])
    return True


def _scan_faq(scan: _Scan, path: list[str], value: Any) -> bool:
    index = parse_index(path[0]) if len(path) == 2 else None
    if index is None or path[1] not in FAQ_FIELDS:
        return False
    scan.faqs.setdefault(index, {})[path[1]] = _last(value)
    return True


def _scan_seo(scan: _Scan, path: list[str], value: Any) -> bool:
    if not path[0] or path[1:] not in ([], ['']):
        return False
    _assign(scan.seo, path[0], value, is_array=path[1:] == [''])
    return True


_SCANNERS = {
    'tags': _scan_tags,
    'blocks': _scan_block,
    'faqs': _scan_faq,
    'seo': _scan_seo,
}


def _parse_json_field(value: Any) -> tuple[bool, Any]:
    """Opportunistically JSON-decode a top-level field; (False, value) when it is not JSON."""
    if not isinstance(value, str):
        return True, value
    try:
        return True, json.loads(value)
    except json.JSONDecodeError:
        return False, value


def _scan(flat: Mapping[str, FormValue]) -> _Scan:
    scan = _Scan()
    for key, value in flat.items():
        if key in JSON_FIELDS:
            ok, parsed = _parse_json_field(value)
            if ok:
                scan.json_values[key] = parsed
            elif key == 'tags':
                logger.debug("tags %r is not JSON; splitting on commas", value)
                _scan_tags(scan, [''], value.split(','))
            else:
                logger.warning("Could not parse form field %r as JSON; keeping raw string", key)
                scan.fields[key] = value
            continue

        parts = split_key(key)
        scanner = _SCANNERS.get(parts[0]) if parts and parts[1] else None
        if scanner is None or not scanner(scan, parts[1], value):
            scan.fields[key] = value
    return scan


# --- pass 2: materialize ---

def _tag_set(values: list[Any]) -> set[str]:
    scalars = (str(v).strip() for v in values if isinstance(v, (str, int, float)) and not isinstance(v, bool))
    return {s for s in scalars if s}


def keyword_set(value: Any) -> set[str]:
    """Coerce an seo keywords value to a set: JSON array, list, or comma-separated string."""
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return _tag_set(parsed)
        logger.debug("seo keywords %r is not a JSON array; splitting on commas", value)
        return _tag_set(value.split(','))
    if isinstance(value, (list, tuple, set)):
        return _tag_set(list(value))
    return _tag_set([value])


def _block(type_: Any, data: Any, order: Any, settings: Any, position: int) -> ContentBlock:
    parsed_order = parse_int(order)
    return ContentBlock(
        type='' if type_ is None else str(type_),
        data=normalize_block_data(data if isinstance(data, dict) else {}),
        order=position if parsed_order is None else parsed_order,
        settings=settings if isinstance(settings, dict) else {},
    )


def _blocks_from_json(items: list[Any]) -> list[ContentBlock]:
    blocks = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping non-object block at position %d", position)
            continue
        blocks.append(_block(item.get('type'), item.get('data'), item.get('order'), item.get('settings'), position))
    return blocks


def _faq(raw: dict[str, Any], index: int) -> FaqEntry:
    order = parse_int(raw.get('order'))
    active = parse_bool(raw.get('isActive'))
    return FaqEntry(
        question=str(raw.get('question', '')),
        answer=str(raw.get('answer', '')),
        order=index if order is None else order,
        is_active=True if active is None else active,
    )


def _seo(raw: dict[str, Any]) -> SeoRecord:
    record: dict[str, Any] = {}
    for name, value in raw.items():
        if name == 'keywords':
            record[name] = keyword_set(value)
        elif name in ('title', 'description'):
            record[name] = None if value is None else str(value)
        else:
            record[name] = value
    return SeoRecord(**record)


def _materialize(scan: _Scan) -> DecodedDocument:
    parts: dict[str, Any] = {}
    fields = scan.fields

    if 'tags' in scan.json_values or scan.has_tags:
        tags = scan.json_values.get('tags', [])
        tags = tags if isinstance(tags, list) else [tags]
        parts['tags'] = _tag_set(tags + scan.tags)

    if scan.blocks:
        # numeric index order: blocks[9] before blocks[10]
        parts['blocks'] = [
            _block(d.type, d.data, d.order, d.settings, i)
            for i, d in sorted(scan.blocks.items())
        ]
    elif 'blocks' in scan.json_values:
        items = scan.json_values['blocks']
        if isinstance(items, list):
            parts['blocks'] = _blocks_from_json(items)
        else:
            logger.warning("Form field 'blocks' is JSON but not an array; keeping raw value")
            fields['blocks'] = items

    if scan.faqs:
        parts['faqs'] = [_faq(raw, i) for i, raw in sorted(scan.faqs.items())]

    seo: dict[str, Any] = {}
    if 'seo' in scan.json_values:
        base = scan.json_values['seo']
        if isinstance(base, dict):
            seo.update(base)
        else:
            logger.warning("Form field 'seo' is JSON but not an object; keeping raw value")
            fields['seo'] = base
    seo.update(scan.seo)
    if seo:
        parts['seo'] = _seo(seo)

    return DecodedDocument(**parts, fields=fields)


def decode_form(flat: Mapping[str, FormValue]) -> DecodedDocument:
    """Decode flat multipart fields into tags, ordered blocks, ordered FAQs, and SEO."""
    return _materialize(_scan(flat))

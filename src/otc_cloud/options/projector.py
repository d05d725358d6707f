"""Turn raw record lists into selector option lists.

Every list starts with a single empty option (value ``None``) followed by
the records sorted by name, ignoring case and accents. ``fill_options``
is the one fetch-map-project routine shared by all selectors; it owns the
container fields while it runs and always leaves ``busy`` cleared.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping

import structlog

from ..errors import ErrorResult, ResponseParseError
from ..observability import get_logger
from ..protocols import OptionContainer
from ..schemas import NamedRecord, parse_model

EMPTY_LABEL = '-- EMPTY --'

RecordMapper = Callable[[Mapping[str, Any]], Mapping[str, Any]]

_logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Option:
    label: str
    value: Mapping[str, Any] | None


EMPTY_OPTION = Option(label=EMPTY_LABEL, value=None)


@dataclass(frozen=True, slots=True)
class Projection:
    options: list[Option]
    selected: Mapping[str, Any] | None = None


@dataclass(slots=True)
class SelectValue:
    """Plain ``OptionContainer`` for callers without their own widget state."""

    busy: bool = False
    enabled: bool = True
    selected: Any = None
    options: list[Option] = field(default_factory=list)


def _sort_key(record: Mapping[str, Any]) -> tuple[str, str]:
    """Case- and accent-insensitive collation key, ties broken by the raw name."""
    name = record['name']
    decomposed = unicodedata.normalize('NFKD', name)
    base = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def convert_to_options(records: Iterable[Mapping[str, Any]]) -> list[Option]:
    """Empty option first, then one option per record sorted by name."""
    ordered = sorted(records, key=_sort_key)
    return [EMPTY_OPTION, *(Option(label=r['name'], value=r) for r in ordered)]


def project_options(
    payload: Any,
    field_name: str,
    mapper: RecordMapper | None = None,
    initial: str | None = None,
) -> Projection | None:
    """Project ``payload[field_name]`` into options.

    Returns ``None`` when there is no data to show (error result or missing
    field). An empty list still projects to the lone empty option. Raises
    ``ResponseParseError`` when a record has no string ``name``.
    """
    if isinstance(payload, ErrorResult) or not isinstance(payload, Mapping):
        return None
    raw = payload.get(field_name)
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ResponseParseError(field_name, f'expected list, got {type(raw).__name__}')

    records: list[Mapping[str, Any]] = []
    for item in raw:
        try:
            record = mapper(item) if mapper else item
        except (KeyError, TypeError) as exc:
            raise ResponseParseError(field_name, f'record not mappable: {exc}') from exc
        parse_model(NamedRecord, record, what=field_name)
        records.append(record)

    options = convert_to_options(records)
    return Projection(options=options, selected=_initial_selection(options, initial))


def _initial_selection(
    options: list[Option],
    initial: str | None,
) -> Mapping[str, Any] | None:
    real = [option for option in options if option.value is not None]
    if initial:
        for option in real:
            if option.value['name'] == initial:
                return option.value
    if real:
        return real[0].value
    return None


async def fill_options(
    container: OptionContainer,
    fetch: Callable[[], Awaitable[Any]],
    field_name: str,
    mapper: RecordMapper | None = None,
    initial: str | None = None,
    *,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> Projection | None:
    """Fetch, map and project into ``container``.

    On any failure the container ends empty, unselected and disabled.
    """
    log = logger or _logger
    container.busy = True
    container.enabled = True
    container.selected = None

    projection: Projection | None = None
    try:
        payload = await fetch()
        if isinstance(payload, ErrorResult):
            log.warning('options_fetch_failed', field=field_name, error=payload.error, kind=payload.kind)
        projection = project_options(payload, field_name, mapper, initial)
    except ResponseParseError as exc:
        log.error('options_parse_failed', field=field_name, error=str(exc))
        projection = None
    except Exception:
        log.exception('options_fetch_crashed', field=field_name)
        projection = None
    finally:
        if projection is None:
            container.options = []
            container.selected = None
            container.enabled = False
        else:
            container.options = projection.options
            container.selected = projection.selected
        container.busy = False

    return projection

"""Selector option projection."""

from .projector import (
    EMPTY_LABEL,
    EMPTY_OPTION,
    Option,
    Projection,
    SelectValue,
    convert_to_options,
    fill_options,
    project_options,
)

__all__ = [
    'EMPTY_LABEL',
    'EMPTY_OPTION',
    'Option',
    'Projection',
    'SelectValue',
    'convert_to_options',
    'fill_options',
    'project_options',
]

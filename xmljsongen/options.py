"""
Option schemas and the option matrix generator.

Each generation direction declares a schema: the oracle's default value for
every option plus the alternate values worth probing. The matrix for a fixture
is the all-defaults baseline followed by one record per (option, alternate)
pair, in declaration order. Options are never combined.
"""

import dataclasses
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from xmljsongen.common import GenerationError, js_string, safe_identifier, snake

logger = logging.getLogger(__name__)


class OptionSchemaError(GenerationError):
    """Raised when a schema produces an inconsistent or colliding option record."""


class ParseOption(Enum):
    """Options understood by the XML to JSON parser."""
    CHARKEY = 'charkey'
    ATTRKEY = 'attrkey'
    EMPTY_TAG = 'emptyTag'
    EXPLICIT_ROOT = 'explicitRoot'
    EXPLICIT_CHARKEY = 'explicitCharkey'
    TRIM = 'trim'
    IGNORE_ATTRS = 'ignoreAttrs'
    MERGE_ATTRS = 'mergeAttrs'
    NORMALIZE = 'normalize'
    NORMALIZE_TAGS = 'normalizeTags'
    EXPLICIT_ARRAY = 'explicitArray'


class RenderOption(Enum):
    """Options understood by the JSON to XML builder."""
    PRETTY = 'pretty'
    INDENT = 'indent'
    NEWLINE = 'newline'
    VERSION = 'version'
    ENCODING = 'encoding'
    STANDALONE = 'standalone'
    ROOT_NAME = 'rootName'
    DOCTYPE = 'doctype'
    HEADLESS = 'headless'


@dataclass(frozen=True)
class ParseOptions:
    """Resolved XML to JSON parser configuration."""
    charkey: str = '_'
    attrkey: str = '$'
    empty_tag: str = ''
    explicit_root: bool = True
    explicit_charkey: bool = False
    trim: bool = False
    ignore_attrs: bool = False
    merge_attrs: bool = False
    normalize: bool = False
    normalize_tags: bool = False
    explicit_array: bool = True


@dataclass(frozen=True)
class RenderOptions:
    """Resolved JSON to XML builder configuration."""
    pretty: bool = True
    indent: str = '  '
    newline: str = '\n'
    version: str = '1.0'
    encoding: Optional[str] = 'UTF-8'
    standalone: Optional[bool] = True
    root_name: str = 'root'
    doctype: Optional[Union[str, Dict[str, str]]] = None
    headless: bool = False


OptionKey = Union[ParseOption, RenderOption]
Options = Union[ParseOptions, RenderOptions]


def option_field(key: OptionKey) -> str:
    """Name of the dataclass field holding the value of an option key."""
    return snake(key.value)


def option_value(options: Options, key: OptionKey) -> Any:
    """Read the value of one option from a resolved configuration."""
    return getattr(options, option_field(key))


@dataclass(frozen=True)
class OptionSchema:
    """
    Declared option space for one generation direction.

    Attributes:
        name: Direction label used in diagnostics
        keys: Enumeration of the option keys the direction understands
        defaults: The oracle's baseline configuration
        variations: Alternate values per key, in declaration order
        library_defaults: What the library under test does when an option is not set
    """
    name: str
    keys: Type[Enum]
    defaults: Options
    variations: Dict[Any, List[Any]] = field(compare=False)
    library_defaults: Options

    def override(self, key: OptionKey, value: Any) -> Options:
        """Copy the defaults with exactly one option replaced."""
        if not isinstance(key, self.keys):
            raise OptionSchemaError(f"Option {key!r} does not belong to the {self.name} schema")
        return dataclasses.replace(self.defaults, **{option_field(key): value})


@dataclass(frozen=True)
class OptionRecord:
    """A named, fully resolved configuration for one fixture."""
    name: str
    fixture: str
    options: Options
    override: Optional[OptionKey] = None

    @property
    def is_baseline(self) -> bool:
        """True for the all-defaults record."""
        return self.override is None


PARSE_SCHEMA = OptionSchema(
    name='parse',
    keys=ParseOption,
    defaults=ParseOptions(),
    variations={
        ParseOption.CHARKEY: ['c', 'charkey'],
        ParseOption.ATTRKEY: ['a', 'attrkey'],
        ParseOption.EMPTY_TAG: ['e', 'empty'],
        ParseOption.EXPLICIT_ROOT: [False],
        ParseOption.EXPLICIT_CHARKEY: [True],
        ParseOption.TRIM: [True],
        ParseOption.IGNORE_ATTRS: [True],
        ParseOption.MERGE_ATTRS: [True],
        ParseOption.NORMALIZE: [True],
        ParseOption.NORMALIZE_TAGS: [True],
        ParseOption.EXPLICIT_ARRAY: [False],
    },
    library_defaults=ParseOptions(),
)

RENDER_SCHEMA = OptionSchema(
    name='render',
    keys=RenderOption,
    defaults=RenderOptions(),
    variations={
        RenderOption.PRETTY: [False],
        RenderOption.INDENT: ['\t', ''],
        RenderOption.NEWLINE: [],
        RenderOption.VERSION: ['1.1'],
        RenderOption.ENCODING: [],
        RenderOption.STANDALONE: [False],
        RenderOption.ROOT_NAME: ['object'],
        RenderOption.DOCTYPE: [],
        RenderOption.HEADLESS: [],
    },
    # XmlConfig::new() writes no indentation and a bare version 1.0 declaration
    library_defaults=RenderOptions(pretty=False, encoding=None, standalone=None),
)


def fixture_name(file_name: str) -> str:
    """Base name of a fixture file, without directory or extension."""
    base = os.path.basename(file_name)
    for ext in ('.xml', '.json'):
        if base.endswith(ext):
            return base[:-len(ext)]
    return base


def value_slug(value: Any) -> str:
    """
    Name fragment for an alternate value.

    ``True`` yields an empty slug, which the caller leaves out of the name.
    Values that stringify to nothing are spelled ``empty``.
    """
    if value is True:
        return ''
    slug = js_string(value).replace(' ', 'space').replace('\t', 'tab').replace('.', '')
    if slug == '':
        return 'empty'
    # never leads the name, so a leading digit is fine
    return re.sub(r'[^a-zA-Z0-9_]', '_', slug)


def record_name(fixture: str, key: Optional[OptionKey] = None, value: Any = None) -> str:
    """Deterministic test name for a fixture and an optional override."""
    parts = ['build', safe_identifier(fixture)]
    if key is None:
        parts.append('default')
    else:
        parts.append(snake(key.value))
        slug = value_slug(value)
        if slug:
            parts.append(slug)
    return '_'.join(parts)


def get_option_variations(fixture: str, schema: OptionSchema) -> List[OptionRecord]:
    """
    Build the ordered option matrix for one fixture.

    Args:
        fixture: Fixture base name
        schema: The option schema of the generation direction

    Returns:
        The baseline record followed by one record per declared alternate value.
    """
    records = [OptionRecord(record_name(fixture), fixture, schema.defaults)]
    for key, alternates in schema.variations.items():
        for value in alternates:
            records.append(OptionRecord(
                name=record_name(fixture, key, value),
                fixture=fixture,
                options=schema.override(key, value),
                override=key))
    logger.debug("%d option records for fixture %s", len(records), fixture)
    return records

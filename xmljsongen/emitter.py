"""Turns admitted option records into Rust integration tests for xml2json_rs.

Parse records become ``JsonConfig`` tests comparing ``build_from_xml`` against
the oracle's JSON value; render records become ``XmlConfig`` tests comparing
``build_from_json`` against the oracle's XML text.
"""

# pylint: disable=line-too-long

import json
import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from xmljsongen.common import GenerationError, process_template, raw_fence, rust_string
from xmljsongen.options import (PARSE_SCHEMA, RENDER_SCHEMA, OptionKey, OptionRecord, OptionSchema,
                                ParseOption, RenderOption, RenderOptions, option_value)

logger = logging.getLogger(__name__)

DEFAULT_FIXTURE_PREFIX = 'tests/data'


class OptionMappingError(GenerationError):
    """Raised when an option has no configuration call in the library under test."""


@dataclass
class TestCase:
    """One generated test: name, fixture reference, record and expected output."""
    __test__ = False

    name: str
    fixture_path: str
    record: OptionRecord
    expected: Any
    steps: List[str] = field(default_factory=list)


def rust_bool(value: bool) -> str:
    """Rust literal for a boolean option."""
    if not isinstance(value, bool):
        raise OptionMappingError(f"Expected a boolean, got {value!r}")
    return 'true' if value else 'false'


def check_exhaustive(table: Dict[Any, Any], keys) -> None:
    """Fail unless every option key has an entry in the mapping table."""
    missing = [key.value for key in keys if key not in table]
    if missing:
        raise OptionMappingError(f"No configuration mapping for options: {', '.join(missing)}")


# JsonConfig builder calls, in the order they are emitted
PARSE_CALLS: Dict[ParseOption, tuple] = {
    ParseOption.ATTRKEY: ('attrkey', rust_string),
    ParseOption.CHARKEY: ('charkey', rust_string),
    ParseOption.EMPTY_TAG: ('empty_tag', rust_string),
    ParseOption.EXPLICIT_ROOT: ('explicit_root', rust_bool),
    ParseOption.EXPLICIT_CHARKEY: ('explicit_charkey', rust_bool),
    ParseOption.TRIM: ('trim', rust_bool),
    ParseOption.IGNORE_ATTRS: ('ignore_attrs', rust_bool),
    ParseOption.MERGE_ATTRS: ('merge_attrs', rust_bool),
    ParseOption.NORMALIZE: ('normalize_text', rust_bool),
    ParseOption.NORMALIZE_TAGS: ('lowercase_tags', rust_bool),
    ParseOption.EXPLICIT_ARRAY: ('explicit_array', rust_bool),
}

# XmlConfig builder calls; several options feed one call
RENDER_GROUPS: Dict[RenderOption, str] = {
    RenderOption.PRETTY: 'rendering',
    RenderOption.INDENT: 'rendering',
    RenderOption.NEWLINE: 'rendering',
    RenderOption.VERSION: 'decl',
    RenderOption.ENCODING: 'decl',
    RenderOption.STANDALONE: 'decl',
    RenderOption.ROOT_NAME: 'root_name',
    RenderOption.DOCTYPE: 'doctype',
    RenderOption.HEADLESS: 'headless',
}

VERSIONS = {
    '1.0': 'Version::XML10',
    '1.1': 'Version::XML11',
}

ENCODING_ALIASES = {
    'UTF-8': 'UTF8',
    'UTF8': 'UTF8',
    'ASCII': 'ASCII',
}

check_exhaustive(PARSE_CALLS, ParseOption)
check_exhaustive(RENDER_GROUPS, RenderOption)


def version_to_rust(version: str) -> str:
    """Map a declaration version string to the Version enum."""
    if version not in VERSIONS:
        raise OptionMappingError(f"Unsupported XML version {version!r}")
    return VERSIONS[version]


def encoding_to_rust(encoding: Optional[str]) -> str:
    """Map a declaration encoding to an Option<Encoding> expression."""
    if encoding is None:
        return 'None'
    return f"Some(Encoding::{ENCODING_ALIASES.get(encoding, encoding)})"


def standalone_to_rust(standalone: Optional[bool]) -> str:
    """Map the standalone flag to an Option<bool> expression."""
    if standalone is None:
        return 'None'
    return f"Some({rust_bool(standalone)})"


def indentation_to_rust(indent: str) -> str:
    """Map an indent string to an Indentation::new call."""
    if indent == '':
        return "Indentation::new(b' ', 0)"
    if len(set(indent)) != 1 or not indent[0].isascii():
        raise OptionMappingError(f"Indentation {indent!r} is not a repeated ASCII character")
    ch = '\\t' if indent[0] == '\t' else indent[0]
    if ch in ("'", '\\'):
        ch = '\\' + ch
    return f"Indentation::new(b'{ch}', {len(indent)})"


class RustTestEmitter:
    """Base class for the two test directions."""

    template = ''
    header_template = ''
    fixture_extension = ''

    def __init__(self, schema: OptionSchema, fixture_prefix: str = DEFAULT_FIXTURE_PREFIX) -> None:
        self.schema = schema
        self.fixture_prefix = fixture_prefix

    def differs(self, record: OptionRecord, key: OptionKey) -> bool:
        """True if the record's value is not what the library does by default."""
        return option_value(record.options, key) != option_value(self.schema.library_defaults, key)

    def configuration_steps(self, record: OptionRecord) -> List[str]:
        """Builder method calls reproducing the record's configuration."""
        raise NotImplementedError

    def fixture_path(self, record: OptionRecord) -> str:
        """Relative path the generated test loads its fixture from."""
        return posixpath.join(self.fixture_prefix, f"{record.fixture}.{self.fixture_extension}")

    def create_test_case(self, record: OptionRecord, result: Any) -> TestCase:
        """Describe the test for an admitted record and its oracle result."""
        return TestCase(
            name=record.name,
            fixture_path=self.fixture_path(record),
            record=record,
            expected=result,
            steps=self.configuration_steps(record))

    def template_context(self, test_case: TestCase) -> Dict[str, Any]:
        """Variables handed to the test template."""
        return {
            'name': test_case.name,
            'fixture_path': test_case.fixture_path,
            'steps': test_case.steps,
        }

    def render(self, test_case: TestCase) -> str:
        """Render a test case as Rust source."""
        return process_template(self.template, **self.template_context(test_case))

    def header(self) -> str:
        """Preamble of the generated test file."""
        return process_template(self.header_template)


class JsonConfigTestEmitter(RustTestEmitter):
    """Emits XML to JSON parsing tests."""

    template = 'rust/xml_to_json_test.rs.jinja'
    header_template = 'rust/xml_to_json_header.rs.jinja'
    fixture_extension = 'xml'

    def __init__(self, fixture_prefix: str = DEFAULT_FIXTURE_PREFIX) -> None:
        super().__init__(PARSE_SCHEMA, fixture_prefix)

    def configuration_steps(self, record: OptionRecord) -> List[str]:
        steps = []
        for key, (method, to_rust) in PARSE_CALLS.items():
            if self.differs(record, key):
                steps.append(f".{method}({to_rust(option_value(record.options, key))})")
        return steps

    def template_context(self, test_case: TestCase) -> Dict[str, Any]:
        context = super().template_context(test_case)
        expected = json.dumps(test_case.expected, ensure_ascii=False, separators=(',', ':'))
        context['expected'] = expected
        context['fence'] = raw_fence(expected)
        return context


class XmlConfigTestEmitter(RustTestEmitter):
    """Emits JSON to XML rendering tests."""

    template = 'rust/json_to_xml_test.rs.jinja'
    header_template = 'rust/json_to_xml_header.rs.jinja'
    fixture_extension = 'json'

    def __init__(self, fixture_prefix: str = DEFAULT_FIXTURE_PREFIX) -> None:
        super().__init__(RENDER_SCHEMA, fixture_prefix)
        self.group_writers: Dict[str, Callable[[RenderOptions, str], Optional[str]]] = {
            'rendering': self.rendering_step,
            'decl': self.decl_step,
            'root_name': self.root_name_step,
            'doctype': self.unsupported_step,
            'headless': self.unsupported_step,
        }

    def rendering_step(self, options: RenderOptions, record_name: str) -> Optional[str]:
        """Indentation call; emitted only for a coherent pretty/indent/newline triple."""
        if not options.pretty:
            return None
        if options.newline != '\n':
            logger.warning("Skipping rendering configuration of %s: newline %r is not supported", record_name, options.newline)
            return None
        return f".rendering({indentation_to_rust(options.indent)})"

    def decl_step(self, options: RenderOptions, record_name: str) -> Optional[str]:
        """XML declaration call."""
        return (f".decl(Declaration::new({version_to_rust(options.version)}, "
                f"{encoding_to_rust(options.encoding)}, {standalone_to_rust(options.standalone)}))")

    def root_name_step(self, options: RenderOptions, record_name: str) -> Optional[str]:
        """Root element name call."""
        return f".root_name({rust_string(options.root_name)})"

    def unsupported_step(self, options: RenderOptions, record_name: str) -> Optional[str]:
        raise OptionMappingError("Option has no XmlConfig equivalent", context=record_name)

    def configuration_steps(self, record: OptionRecord) -> List[str]:
        groups: Dict[str, bool] = {}
        for key, group in RENDER_GROUPS.items():
            groups[group] = groups.get(group, False) or self.differs(record, key)
        steps = []
        for group, changed in groups.items():
            if not changed:
                continue
            if group not in self.group_writers:
                raise OptionMappingError(f"No writer for configuration group {group!r}", context=record.name)
            step = self.group_writers[group](record.options, record.name)
            if step:
                steps.append(step)
        return steps

    def template_context(self, test_case: TestCase) -> Dict[str, Any]:
        context = super().template_context(test_case)
        expected: str = test_case.expected
        pretty = test_case.record.options.pretty
        context['pretty'] = pretty
        if pretty:
            context['expected'] = '  ' + expected.replace('\n', '\n  ')
        else:
            context['expected'] = rust_string(expected)
        context['fence'] = raw_fence(expected)
        return context


def create_emitter(mode: str, fixture_prefix: str = DEFAULT_FIXTURE_PREFIX) -> RustTestEmitter:
    """Emitter for a generation mode ('xml' or 'json')."""
    if mode == 'xml':
        return JsonConfigTestEmitter(fixture_prefix)
    if mode == 'json':
        return XmlConfigTestEmitter(fixture_prefix)
    raise ValueError(f"Unknown mode {mode!r}")

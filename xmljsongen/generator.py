"""
Drives test generation: fixture discovery and the per-fixture pipeline.

For every fixture, in file name order, the option matrix is built, every record
is run through the oracle, duplicates are dropped and the surviving records are
rendered and written out before the next record is looked at.
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Set, TextIO

from xmljsongen.dedup import unique_results
from xmljsongen.emitter import DEFAULT_FIXTURE_PREFIX, RustTestEmitter, create_emitter
from xmljsongen.options import (PARSE_SCHEMA, RENDER_SCHEMA, OptionSchema, OptionSchemaError, fixture_name,
                                get_option_variations)
from xmljsongen.oracle import run_oracle

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join('tests', 'data')


def load_text(file_path: str) -> str:
    """Read an XML fixture as text."""
    with open(file_path, 'r', encoding='utf-8') as f:
        return f.read()


def load_json(file_path: str) -> Any:
    """Read a JSON fixture, keeping object key order."""
    with open(file_path, 'r', encoding='utf-8') as f:
        return json.load(f)


@dataclass(frozen=True)
class Direction:
    """What a generation mode reads and which schema it varies."""
    mode: str
    extension: str
    schema: OptionSchema
    load: Callable[[str], Any]


DIRECTIONS = {
    'xml': Direction('xml', 'xml', PARSE_SCHEMA, load_text),
    'json': Direction('json', 'json', RENDER_SCHEMA, load_json),
}

MODES = list(DIRECTIONS)


def list_fixtures(data_dir: str, extension: str) -> List[str]:
    """Fixture files with the given extension, sorted by name."""
    return [os.path.join(data_dir, f) for f in sorted(os.listdir(data_dir))
            if f.split('.')[-1] == extension and os.path.isfile(os.path.join(data_dir, f))]


def generate_fixture_tests(file_path: str, direction: Direction, emitter: RustTestEmitter,
                           names: Set[str]) -> Iterator[str]:
    """
    Generate the tests of one fixture.

    Args:
        file_path: Path of the fixture file
        direction: The generation direction
        emitter: Renders admitted records as tests
        names: Test names used so far in the run, updated in place

    Yields:
        Rendered test source, baseline first.
    """
    fixture = fixture_name(file_path)
    payload = direction.load(file_path)
    records = get_option_variations(fixture, direction.schema)
    emitted = 0
    results = ((record, run_oracle(payload, record)) for record in records)
    for record, result in unique_results(results):
        if record.name in names:
            raise OptionSchemaError(f"Duplicate test name {record.name}", context=file_path)
        names.add(record.name)
        emitted += 1
        yield emitter.render(emitter.create_test_case(record, result))
    logger.info("%s: %d of %d variants emitted", fixture, emitted, len(records))


def generate(mode: str, data_dir: str = DEFAULT_DATA_DIR, out: TextIO = sys.stdout,
             fixture_prefix: str = DEFAULT_FIXTURE_PREFIX, header: bool = False) -> int:
    """
    Generate the test suite for one direction and write it to out.

    Args:
        mode: 'xml' for XML to JSON parsing tests, 'json' for JSON to XML rendering tests
        data_dir: Directory holding the fixtures
        out: Destination stream
        fixture_prefix: Directory the generated tests load fixtures from
        header: Write the test file preamble first

    Returns:
        The number of tests written.
    """
    direction = DIRECTIONS[mode]
    emitter = create_emitter(mode, fixture_prefix)
    if header:
        out.write(emitter.header())
        out.write('\n')
    names: Set[str] = set()
    count = 0
    for file_path in list_fixtures(data_dir, direction.extension):
        for test_source in generate_fixture_tests(file_path, direction, emitter, names):
            out.write(test_source)
            out.write('\n')
            count += 1
    logger.info("Generated %d tests", count)
    return count

"""
Oracle adapter: runs the reference converter for one option record.

The reference converter is ground truth. Any failure is fatal for the whole
generation run, a fixture that cannot be converted under a declared option is a
fixture or schema defect.
"""

import logging
import xml.sax
from typing import Any

from xmljsongen.common import GenerationError
from xmljsongen.jsontoxml import json_to_xml
from xmljsongen.options import OptionRecord, ParseOptions, RenderOptions
from xmljsongen.xmltojson import JsonNode, xml_to_json

logger = logging.getLogger(__name__)


class OracleError(GenerationError):
    """Raised when the reference converter fails to parse or render a fixture."""


def parse_xml(xml_text: str, options: ParseOptions) -> JsonNode:
    """Parse XML text with the reference parser."""
    try:
        return xml_to_json(xml_text, options)
    except (xml.sax.SAXException, ValueError, TypeError) as e:
        raise OracleError(f"Error parsing XML: {e}", cause=e) from e


def build_xml(data: Any, options: RenderOptions) -> str:
    """Render a JSON value with the reference builder."""
    try:
        return json_to_xml(data, options)
    except (ValueError, TypeError) as e:
        raise OracleError(f"Error building XML: {e}", cause=e) from e


def run_oracle(payload: Any, record: OptionRecord) -> Any:
    """
    Compute the expected output for one option record.

    Args:
        payload: XML text for parse records, a JSON value for render records
        record: The option record to apply

    Returns:
        The parsed JSON value or the rendered XML text.

    Raises:
        OracleError: The reference converter failed.
    """
    logger.debug("Running reference converter for %s", record.name)
    try:
        if isinstance(record.options, ParseOptions):
            return parse_xml(payload, record.options)
        if isinstance(record.options, RenderOptions):
            return build_xml(payload, record.options)
    except OracleError as e:
        raise OracleError(e.message, context=record.name, cause=e.cause) from e.cause
    raise OracleError(f"No reference converter for {type(record.options).__name__}", context=record.name)

"""Reference XML to JSON conversion with node xml2js parser semantics.

The result of this module is the ground truth the generated tests compare the
library under test against, so the shape rules follow xml2js exactly:

- all character data of an element (including CDATA) is accumulated into the
  text key, whitespace-only non-CDATA text is dropped;
- an element with nothing but text collapses to the bare string unless
  ``explicit_charkey`` is set;
- an element with no content at all becomes ``empty_tag`` (when set) or the
  whitespace that was dropped;
- children are appended as arrays when ``explicit_array`` is set, otherwise
  assigned directly and promoted to an array on repetition;
- key order is text, attributes, children.
"""

import io
import re
import xml.sax
from xml.sax.handler import ContentHandler, LexicalHandler, feature_external_ges, property_lexical_handler
from xml.sax.xmlreader import InputSource
from typing import Any, Dict, List

from xmljsongen.common import js_string
from xmljsongen.options import ParseOptions

JsonNode = Dict[str, 'JsonNode'] | List['JsonNode'] | str | None

_BLANK = re.compile(r'^\s*$')
_MULTI_SPACE = re.compile(r'\s{2,}')


def _js_text(value: Any) -> str:
    """Coerce a value to a string the way JavaScript string concatenation does."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ','.join(_js_text(item) for item in value)
    if isinstance(value, dict):
        return '[object Object]'
    return js_string(value)


class _Frame:
    """An element that is still open."""
    __slots__ = ('name', 'obj', 'cdata')

    def __init__(self, name: str, obj: Dict[str, Any]):
        self.name = name
        self.obj = obj
        self.cdata = False


class XmlToJsonHandler(ContentHandler, LexicalHandler):
    """SAX handler building the xml2js object tree."""

    def __init__(self, options: ParseOptions):
        ContentHandler.__init__(self)
        self.options = options
        self.stack: List[_Frame] = []
        self.result: JsonNode = None

    def assign_or_push(self, obj: Dict[str, Any], key: str, value: Any) -> None:
        """Add a value under key, turning repeated keys into arrays."""
        if key not in obj:
            obj[key] = [value] if self.options.explicit_array else value
        else:
            if not isinstance(obj[key], list):
                obj[key] = [obj[key]]
            obj[key].append(value)

    def startElement(self, name, attrs):
        options = self.options
        obj: Dict[str, Any] = {options.charkey: ''}
        if not options.ignore_attrs:
            for key, value in attrs.items():
                if options.merge_attrs:
                    self.assign_or_push(obj, key, value)
                else:
                    obj.setdefault(options.attrkey, {})[key] = value
        if options.normalize_tags:
            name = name.lower()
        self.stack.append(_Frame(name, obj))

    def characters(self, content):
        if self.stack:
            obj = self.stack[-1].obj
            charkey = self.options.charkey
            # a child or attribute named like the text key may have replaced the text
            obj[charkey] = _js_text(obj[charkey]) + content

    def startCDATA(self):
        if self.stack:
            self.stack[-1].cdata = True

    def endElement(self, name):
        options = self.options
        charkey = options.charkey
        frame = self.stack.pop()
        obj: Any = frame.obj
        empty_str = ''
        if _BLANK.match(obj[charkey]) and not frame.cdata:
            empty_str = obj.pop(charkey)
        else:
            if options.trim:
                obj[charkey] = obj[charkey].strip()
            if options.normalize:
                obj[charkey] = _MULTI_SPACE.sub(' ', obj[charkey]).strip()
            if len(obj) == 1 and charkey in obj and not options.explicit_charkey:
                obj = obj[charkey]

        if isinstance(obj, dict) and not obj:
            obj = options.empty_tag if options.empty_tag != '' else empty_str

        if self.stack:
            self.assign_or_push(self.stack[-1].obj, frame.name, obj)
        else:
            if options.explicit_root:
                obj = {frame.name: obj}
            self.result = obj


def xml_to_json(xml_text: str, options: ParseOptions) -> JsonNode:
    """
    Parse an XML document into the xml2js JSON shape.

    Args:
        xml_text: The XML document
        options: Parser configuration

    Returns:
        The parsed value, or None for a blank document.

    Raises:
        xml.sax.SAXParseException: The document is not well-formed.
    """
    xml_text = xml_text.lstrip('\ufeff')
    if not xml_text.strip():
        return None
    handler = XmlToJsonHandler(options)
    parser = xml.sax.make_parser()
    parser.setFeature(feature_external_ges, False)
    parser.setContentHandler(handler)
    parser.setProperty(property_lexical_handler, handler)
    source = InputSource()
    source.setCharacterStream(io.StringIO(xml_text))
    parser.parse(source)
    return handler.result

"""Reference JSON to XML conversion with node xml2js builder semantics.

The object walk mirrors xml2js ``Builder.buildObject`` and the text output
mirrors the xmlbuilder string writer it renders through:

- a top level value with exactly one key (an array or string with one
  element counts, its key being "0") supplies the root element name unless
  a custom root name is configured;
- only a doctype mapping with ``pubID`` or ``sysID`` writes a DOCTYPE;
- ``$`` holds attributes, ``_`` holds character data, arrays repeat elements
  and ``null`` renders an empty element;
- elements whose only content is empty text are written self-closing;
- in pretty mode text-only elements stay on one line, text inside mixed
  content gets its own indented line and the final newline is dropped.
"""

import re
from typing import Any, Dict, List, Union

from xmljsongen.common import js_string
from xmljsongen.options import RenderOptions

ATTRKEY = '$'
CHARKEY = '_'
DEFAULT_ROOT_NAME = 'root'

_NAME_START = (':A-Z_a-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF'
               '\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF\uFDF0-\uFFFD'
               '\U00010000-\U000EFFFF')
_NAME_CHAR = _NAME_START + '\\-.0-9\u00B7\u0300-\u036F\u203F-\u2040'
_LEGAL_NAME = re.compile(f'^[{_NAME_START}][{_NAME_CHAR}]*$')
_ILLEGAL_CHAR = re.compile('[\u0000-\u0008\u000B\u000C\u000E-\u001F\uFFFE\uFFFF]')


def _assert_legal_char(value: str) -> str:
    match = _ILLEGAL_CHAR.search(value)
    if match:
        raise ValueError(f"Invalid character in string: {value!r} at index {match.start()}")
    return value


def _name(value: str) -> str:
    if not _LEGAL_NAME.match(value):
        raise ValueError(f"Invalid character in name: {value!r}")
    return value


def _text_escape(value: str) -> str:
    return (_assert_legal_char(value).replace('&', '&amp;').replace('<', '&lt;')
            .replace('>', '&gt;').replace('\r', '&#xD;'))


def _attr_escape(value: str) -> str:
    return (_assert_legal_char(value).replace('&', '&amp;').replace('<', '&lt;')
            .replace('"', '&quot;').replace('\t', '&#x9;').replace('\n', '&#xA;')
            .replace('\r', '&#xD;'))


class XmlText:
    """A text node, stored escaped."""

    def __init__(self, value: Any):
        if value is None:
            raise ValueError("Missing element text.")
        if isinstance(value, (dict, list)):
            raise ValueError(f"Element text must be a scalar, got {type(value).__name__}")
        self.value = _text_escape(js_string(value))


class XmlElement:
    """An element with escaped attributes and ordered children."""

    def __init__(self, name: str):
        self.name = _name(name)
        self.attributes: Dict[str, str] = {}
        self.children: List[Union['XmlElement', XmlText]] = []

    def element(self, name: str, text: Any = None) -> 'XmlElement':
        """Append a child element, optionally with a text node, and return it."""
        child = XmlElement(name)
        if text is not None:
            child.text(text)
        self.children.append(child)
        return child

    def text(self, value: Any) -> 'XmlElement':
        """Append a text node."""
        self.children.append(XmlText(value))
        return self

    def attribute(self, name: str, value: Any) -> 'XmlElement':
        """Set an attribute; null values are left out."""
        if value is not None:
            self.attributes[_name(name)] = _attr_escape(js_string(value))
        return self


def _members(value: Any) -> List[tuple]:
    """Enumerate what a JavaScript for-in loop would visit."""
    if isinstance(value, dict):
        return list(value.items())
    if isinstance(value, (list, str)):
        return [(str(index), item) for index, item in enumerate(value)]
    return []


def render(element: XmlElement, obj: Any) -> XmlElement:
    """Render a JSON value into element."""
    if obj is None:
        return element
    if isinstance(obj, list):
        for child in obj:
            for key, entry in _members(child):
                render(element.element(key), entry)
    elif isinstance(obj, dict):
        for key, child in obj.items():
            if key == ATTRKEY:
                if not isinstance(child, str):
                    for attr, value in _members(child):
                        element.attribute(attr, value)
            elif key == CHARKEY:
                element.text(child)
            elif isinstance(child, list):
                for entry in child:
                    if isinstance(entry, str):
                        element.element(key, entry)
                    else:
                        render(element.element(key), entry)
            elif isinstance(child, dict) or child is None:
                render(element.element(key), child)
            else:
                element.element(key, js_string(child))
    else:
        element.text(obj)
    return element


class XmlStringWriter:
    """Serializes an element tree the way the xmlbuilder string writer does."""

    def __init__(self, options: RenderOptions):
        self.pretty = options.pretty
        self.indent_str = options.indent
        self.newline = options.newline
        self.suppress_pretty = 0

    def indent(self, level: int) -> str:
        if not self.pretty or self.suppress_pretty:
            return ''
        return self.indent_str * level

    def endline(self) -> str:
        if not self.pretty or self.suppress_pretty:
            return ''
        return self.newline

    def write(self, node: Union[XmlElement, XmlText], level: int) -> str:
        if isinstance(node, XmlText):
            return self.indent(level) + node.value + self.endline()
        return self.element(node, level)

    def element(self, node: XmlElement, level: int) -> str:
        r = self.indent(level) + '<' + node.name
        for name, value in node.attributes.items():
            r += f' {name}="{value}"'
        children = node.children
        if not children or all(isinstance(c, XmlText) and c.value == '' for c in children):
            r += '/>' + self.endline()
        elif self.pretty and len(children) == 1 and isinstance(children[0], XmlText):
            r += '>'
            self.suppress_pretty += 1
            r += self.write(children[0], level + 1)
            self.suppress_pretty -= 1
            r += '</' + node.name + '>' + self.endline()
        else:
            r += '>' + self.endline()
            for child in children:
                r += self.write(child, level + 1)
            r += self.indent(level) + '</' + node.name + '>' + self.endline()
        return r

    def declaration(self, options: RenderOptions) -> str:
        r = f'<?xml version="{options.version or "1.0"}"'
        if options.encoding:
            r += f' encoding="{options.encoding}"'
        if options.standalone is not None:
            r += f' standalone="{"yes" if options.standalone else "no"}"'
        return r + '?>' + self.endline()

    def doctype(self, root_name: str, doctype: Union[str, Dict[str, str]]) -> str:
        # only a mapping carries pubID/sysID, a bare string contributes neither
        if not isinstance(doctype, dict):
            return ''
        pub_id = doctype.get('pubID')
        sys_id = doctype.get('sysID')
        if pub_id is None and sys_id is None:
            return ''
        r = '<!DOCTYPE ' + root_name
        if pub_id and sys_id:
            r += f' PUBLIC "{pub_id}" "{sys_id}"'
        elif sys_id:
            r += f' SYSTEM "{sys_id}"'
        return r + '>' + self.endline()

    def document(self, root: XmlElement, options: RenderOptions) -> str:
        r = ''
        if not options.headless:
            r += self.declaration(options)
            if options.doctype is not None:
                r += self.doctype(root.name, options.doctype)
        r += self.element(root, 0)
        if self.pretty and self.newline and r.endswith(self.newline):
            r = r[:-len(self.newline)]
        return r


def json_to_xml(data: Any, options: RenderOptions) -> str:
    """
    Render a JSON value as an XML document.

    Args:
        data: The JSON value, with object key order preserved
        options: Builder configuration

    Returns:
        The XML document text.

    Raises:
        ValueError: A key is not a legal XML name or a value cannot be rendered.
    """
    members = _members(data)
    if len(members) == 1 and options.root_name == DEFAULT_ROOT_NAME:
        root_name, root_obj = members[0]
    else:
        root_name, root_obj = options.root_name, data
    root = render(XmlElement(root_name), root_obj)
    return XmlStringWriter(options).document(root, options)

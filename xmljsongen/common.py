"""
Common utility functions for xmljsongen.
"""

# pylint: disable=line-too-long

import os
import re
import json
import hashlib
from decimal import Decimal
from typing import Any, Optional
import jinja2


class GenerationError(Exception):
    """
    Base exception for all fatal test generation failures.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[BaseException] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


def safe_identifier(name: str) -> str:
    """Convert a name into something usable as a function name fragment."""
    val = re.sub(r'[^a-zA-Z0-9_]', '_', name)
    if re.match(r'^[0-9]', val):
        val = '_' + val
    return val


def snake(string):
    """
    Convert a string to snake_case from snake_case, camelCase, or PascalCase.
    Underscores at the beginning of the string are preserved in the output.

    Args:
        string (str): The string to convert.

    Returns:
        str: The string in snake_case.
    """
    if not string or len(string) == 0:
        return string
    words = []
    if '_' in string:
        # snake_case
        words = re.split(r'_', string)
    elif string[0].isupper():
        # PascalCase
        words = re.findall(r'[A-Z][a-z0-9]*', string)
    else:
        # camelCase
        words = re.findall(r'[a-z0-9]+|[A-Z][a-z0-9]*', string)
    result = '_'.join(word.lower() for word in words)
    return result


def js_string(value: Any) -> str:
    """
    Stringify a JSON scalar the way JavaScript's String() does.

    Booleans render as ``true``/``false``, ``None`` as the empty string and
    numbers without a trailing ``.0`` or Python-style exponents.
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        if abs(value) <= 2 ** 53:
            return str(value)
        # JavaScript numbers are doubles
        value = float(value)
    if isinstance(value, float):
        if value != value:
            return 'NaN'
        if value in (float('inf'), float('-inf')):
            return 'Infinity' if value > 0 else '-Infinity'
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        text = repr(value)
        if 'e' not in text:
            return text
        exponent = int(text.split('e')[1])
        if -7 < exponent < 21:
            return format(Decimal(text), 'f')
        mantissa = text.split('e')[0]
        return f"{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"
    return str(value)


def canonical_bytes(result: Any) -> bytes:
    """
    Serialize an oracle result to the stable byte form used for hashing.

    Rendered text is taken as-is. Structured values are dumped as compact
    JSON with sorted keys.
    """
    if isinstance(result, str):
        return result.encode('utf-8')
    return json.dumps(result, sort_keys=True, ensure_ascii=False, separators=(',', ':')).encode('utf-8')


def get_result_hash(result: Any) -> str:
    """
    Generate a hash from an oracle result (structured value or text).

    Args:
        result (Any): The parsed JSON value or the rendered XML text.

    Returns:
        str: The SHA-256 hex digest of the canonical serialization.
    """
    return hashlib.sha256(canonical_bytes(result)).hexdigest()


def rust_string(value: str) -> str:
    """Quote a string as a Rust string literal."""
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    escaped = escaped.replace('\n', '\\n').replace('\r', '\\r').replace('\t', '\\t')
    return f'"{escaped}"'


def raw_fence(value: str) -> str:
    """Return the shortest run of '#' that safely delimits value in a Rust raw string."""
    fence = '#'
    while f'"{fence}' in value:
        fence += '#'
    return fence


def process_template(file_path: str, **kvargs) -> str:
    """
    Process a file as a Jinja2 template with the given object as input.

    Args:
        file_path (str): The path to the template, relative to this package.

    Returns:
        str: The processed template as a string.
    """
    file_dir = os.path.dirname(__file__)
    template_loader = jinja2.FileSystemLoader(searchpath=file_dir)
    template_env = jinja2.Environment(loader=template_loader, keep_trailing_newline=True)
    template_env.filters['rust_string'] = rust_string
    template_env.filters['raw_fence'] = raw_fence
    template = template_env.get_template(file_path)
    return template.render(**kvargs)

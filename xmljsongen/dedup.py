"""
Suppresses option variants whose expected output was already produced for the
same fixture.
"""

import logging
from typing import Any, Iterable, Iterator, Set, Tuple

from xmljsongen.common import get_result_hash
from xmljsongen.options import OptionRecord

logger = logging.getLogger(__name__)


def admit(record: OptionRecord, result: Any, seen: Set[str]) -> bool:
    """
    Decide whether a result is new for the fixture and remember it.

    Args:
        record: The option record that produced the result
        result: The oracle result
        seen: Hashes already admitted for this fixture, updated in place

    Returns:
        True if the result has not been seen before.
    """
    result_hash = get_result_hash(result)
    if result_hash in seen:
        logger.info("Skipping %s", record.name)
        return False
    seen.add(result_hash)
    return True


def unique_results(pairs: Iterable[Tuple[OptionRecord, Any]]) -> Iterator[Tuple[OptionRecord, Any]]:
    """
    Yield the pairs of one fixture whose results are unique, first one wins.

    The hash set lives only as long as this iteration. Pairs are pulled one at
    a time so every variant is fully handled by the consumer before the next
    result is computed.
    """
    seen: Set[str] = set()
    for record, result in pairs:
        if admit(record, result, seen):
            yield record, result

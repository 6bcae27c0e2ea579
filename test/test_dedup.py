import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from xmljsongen.common import canonical_bytes, get_result_hash
from xmljsongen.dedup import admit, unique_results
from xmljsongen.options import PARSE_SCHEMA, RENDER_SCHEMA, get_option_variations
from xmljsongen.oracle import run_oracle


class TestResultHash(unittest.TestCase):

    def test_key_order_does_not_matter(self):
        self.assertEqual(get_result_hash({'a': 1, 'b': [1, 2]}), get_result_hash({'b': [1, 2], 'a': 1}))

    def test_text_hashed_verbatim(self):
        self.assertEqual(canonical_bytes('<a>é</a>'), '<a>é</a>'.encode('utf-8'))
        self.assertNotEqual(get_result_hash('<a/>'), get_result_hash('<a/>\n'))

    def test_structure_matters(self):
        self.assertNotEqual(get_result_hash({'a': ['1']}), get_result_hash({'a': '1'}))


class TestDedup(unittest.TestCase):
    """Suppression of variants that reproduce an earlier result."""

    def test_admit_first_only(self):
        records = get_option_variations('simple', PARSE_SCHEMA)
        seen = set()
        self.assertTrue(admit(records[0], {'root': {'x': ['1']}}, seen))
        with self.assertLogs('xmljsongen.dedup', level='INFO') as log:
            self.assertFalse(admit(records[1], {'root': {'x': ['1']}}, seen))
        self.assertIn('Skipping build_simple_charkey_c', log.output[0])
        self.assertEqual(len(seen), 1)

    def test_simple_parse_variants(self):
        records = get_option_variations('simple', PARSE_SCHEMA)
        pairs = ((record, run_oracle('<root><x>1</x></root>', record)) for record in records)
        names = [record.name for record, _ in unique_results(pairs)]
        self.assertEqual(names, [
            'build_simple_default',
            'build_simple_explicit_root_false',
            'build_simple_explicit_charkey',
            'build_simple_explicit_array_false',
        ])

    def test_simple_render_variants(self):
        records = get_option_variations('simple', RENDER_SCHEMA)
        pairs = ((record, run_oracle({'x': 1}, record)) for record in records)
        names = [record.name for record, _ in unique_results(pairs)]
        self.assertEqual(names, [
            'build_simple_default',
            'build_simple_pretty_false',
            'build_simple_version_11',
            'build_simple_standalone_false',
            'build_simple_root_name_object',
        ])

    def test_baseline_always_admitted(self):
        records = get_option_variations('simple', PARSE_SCHEMA)
        pairs = [(record, 'same') for record in records]
        admitted = list(unique_results(pairs))
        self.assertEqual(len(admitted), 1)
        self.assertTrue(admitted[0][0].is_baseline)

    def test_scope_is_per_iteration(self):
        """Each fixture starts with an empty set of seen results."""
        records = get_option_variations('a', PARSE_SCHEMA)[:1]
        self.assertEqual(len(list(unique_results([(records[0], 'x')]))), 1)
        self.assertEqual(len(list(unique_results([(records[0], 'x')]))), 1)

    def test_lazy(self):
        """Results are pulled one at a time."""
        records = get_option_variations('a', PARSE_SCHEMA)
        pulled = []

        def results():
            for record in records:
                pulled.append(record.name)
                yield record, record.name

        iterator = unique_results(results())
        next(iterator)
        self.assertEqual(pulled, ['build_a_default'])


if __name__ == '__main__':
    unittest.main()

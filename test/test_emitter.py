import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from xmljsongen.common import raw_fence, rust_string
from xmljsongen.emitter import (PARSE_CALLS, RENDER_GROUPS, JsonConfigTestEmitter, OptionMappingError,
                                XmlConfigTestEmitter, check_exhaustive, create_emitter, encoding_to_rust,
                                indentation_to_rust, version_to_rust)
from xmljsongen.options import (PARSE_SCHEMA, RENDER_SCHEMA, OptionRecord, ParseOption, RenderOption, RenderOptions,
                                get_option_variations)


def record_by_name(fixture, schema, name):
    return next(r for r in get_option_variations(fixture, schema) if r.name == name)


class TestRustLiterals(unittest.TestCase):

    def test_rust_string(self):
        self.assertEqual(rust_string('a"b\\c\n'), '"a\\"b\\\\c\\n"')

    def test_raw_fence(self):
        self.assertEqual(raw_fence('{"a":1}'), '#')
        self.assertEqual(raw_fence('{"a":"#"}'), '##')

    def test_indentation(self):
        self.assertEqual(indentation_to_rust('  '), "Indentation::new(b' ', 2)")
        self.assertEqual(indentation_to_rust('\t'), "Indentation::new(b'\\t', 1)")
        self.assertEqual(indentation_to_rust(''), "Indentation::new(b' ', 0)")
        with self.assertRaises(OptionMappingError):
            indentation_to_rust(' \t')

    def test_declaration_parts(self):
        self.assertEqual(version_to_rust('1.1'), 'Version::XML11')
        self.assertEqual(encoding_to_rust('UTF-8'), 'Some(Encoding::UTF8)')
        self.assertEqual(encoding_to_rust(None), 'None')
        self.assertEqual(encoding_to_rust('UTF8'), encoding_to_rust('UTF-8'))
        with self.assertRaises(OptionMappingError):
            version_to_rust('2.0')

    def test_exhaustive(self):
        self.assertEqual(set(PARSE_CALLS), set(ParseOption))
        self.assertEqual(set(RENDER_GROUPS), set(RenderOption))
        with self.assertRaises(OptionMappingError):
            check_exhaustive({ParseOption.TRIM: 'trim'}, ParseOption)


class TestJsonConfigTestEmitter(unittest.TestCase):
    """Parse tests built on JsonConfig."""

    def setUp(self):
        self.emitter = JsonConfigTestEmitter()

    def test_baseline_has_no_steps(self):
        record = get_option_variations('simple', PARSE_SCHEMA)[0]
        self.assertEqual(self.emitter.configuration_steps(record), [])

    def test_single_override_steps(self):
        expectations = {
            'build_simple_explicit_root_false': ['.explicit_root(false)'],
            'build_simple_charkey_c': ['.charkey("c")'],
            'build_simple_empty_tag_e': ['.empty_tag("e")'],
            'build_simple_normalize': ['.normalize_text(true)'],
            'build_simple_normalize_tags': ['.lowercase_tags(true)'],
            'build_simple_explicit_array_false': ['.explicit_array(false)'],
        }
        for name, steps in expectations.items():
            record = record_by_name('simple', PARSE_SCHEMA, name)
            self.assertEqual(self.emitter.configuration_steps(record), steps, name)

    def test_render(self):
        record = record_by_name('simple', PARSE_SCHEMA, 'build_simple_explicit_root_false')
        source = self.emitter.render(self.emitter.create_test_case(record, {'x': ['1']}))
        self.assertTrue(source.startswith('#[test]\nfn build_simple_explicit_root_false() {\n'))
        self.assertIn('let xml = load_xml("tests/data/simple.xml");', source)
        self.assertIn('serde_json::from_str(r#"{"x":["1"]}"#).unwrap();', source)
        self.assertIn('JsonConfig::new()\n    .explicit_root(false)\n    .finalize();', source)
        self.assertIn('assert_eq!(expected, actual);', source)

    def test_render_baseline(self):
        record = get_option_variations('simple', PARSE_SCHEMA)[0]
        source = self.emitter.render(self.emitter.create_test_case(record, {'root': {'x': ['1']}}))
        self.assertIn('JsonConfig::new()\n    .finalize();', source)

    def test_fixture_prefix(self):
        emitter = JsonConfigTestEmitter('fixtures')
        record = get_option_variations('cds', PARSE_SCHEMA)[0]
        self.assertEqual(emitter.fixture_path(record), 'fixtures/cds.xml')

    def test_header(self):
        header = self.emitter.header()
        self.assertIn('use xml2json_rs::JsonConfig;', header)
        self.assertIn('pub fn load_xml(', header)


class TestXmlConfigTestEmitter(unittest.TestCase):
    """Render tests built on XmlConfig."""

    DECL = '.decl(Declaration::new(Version::XML10, Some(Encoding::UTF8), Some(true)))'

    def setUp(self):
        self.emitter = XmlConfigTestEmitter()

    def test_baseline_steps(self):
        record = get_option_variations('simple', RENDER_SCHEMA)[0]
        self.assertEqual(self.emitter.configuration_steps(record),
                         [".rendering(Indentation::new(b' ', 2))", self.DECL])

    def test_override_steps(self):
        expectations = {
            'build_simple_pretty_false': [self.DECL],
            'build_simple_indent_tab': [".rendering(Indentation::new(b'\\t', 1))", self.DECL],
            'build_simple_indent_empty': [".rendering(Indentation::new(b' ', 0))", self.DECL],
            'build_simple_version_11': [".rendering(Indentation::new(b' ', 2))",
                                        '.decl(Declaration::new(Version::XML11, Some(Encoding::UTF8), Some(true)))'],
            'build_simple_standalone_false': [".rendering(Indentation::new(b' ', 2))",
                                              '.decl(Declaration::new(Version::XML10, Some(Encoding::UTF8), Some(false)))'],
            'build_simple_root_name_object': [".rendering(Indentation::new(b' ', 2))", self.DECL,
                                              '.root_name("object")'],
        }
        for name, steps in expectations.items():
            record = record_by_name('simple', RENDER_SCHEMA, name)
            self.assertEqual(self.emitter.configuration_steps(record), steps, name)

    def test_unmapped_option_fails(self):
        record = OptionRecord('build_simple_doctype', 'simple', RenderOptions(doctype='x.dtd'),
                              RenderOption.DOCTYPE)
        with self.assertRaises(OptionMappingError):
            self.emitter.configuration_steps(record)
        record = OptionRecord('build_simple_headless', 'simple', RenderOptions(headless=True),
                              RenderOption.HEADLESS)
        with self.assertRaises(OptionMappingError):
            self.emitter.configuration_steps(record)

    def test_unsupported_newline_is_skipped(self):
        record = OptionRecord('build_simple_newline_crlf', 'simple', RenderOptions(newline='\r\n'),
                              RenderOption.NEWLINE)
        with self.assertLogs('xmljsongen.emitter', level='WARNING') as log:
            steps = self.emitter.configuration_steps(record)
        self.assertEqual(steps, [self.DECL])
        self.assertIn('build_simple_newline_crlf', log.output[0])

    def test_render_pretty(self):
        record = get_option_variations('simple', RENDER_SCHEMA)[0]
        expected = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n<x>1</x>'
        source = self.emitter.render(self.emitter.create_test_case(record, expected))
        self.assertIn('let object = load_json("tests/data/simple.json");', source)
        self.assertIn('let expected = indoc!(r#"\n'
                      '  <?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
                      '  <x>1</x>"#);', source)
        self.assertIn("XmlConfig::new()\n    .rendering(Indentation::new(b' ', 2))\n    " + self.DECL, source)
        self.assertIn('xml_builder.build_from_json(&object);', source)

    def test_render_compact(self):
        record = record_by_name('simple', RENDER_SCHEMA, 'build_simple_pretty_false')
        expected = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?><x>1</x>'
        source = self.emitter.render(self.emitter.create_test_case(record, expected))
        self.assertIn('let expected = "<?xml version=\\"1.0\\" encoding=\\"UTF-8\\" standalone=\\"yes\\"?><x>1</x>";',
                      source)
        self.assertNotIn('indoc!', source.split('fn build_simple_pretty_false')[1])

    def test_header(self):
        header = self.emitter.header()
        self.assertIn('use xml2json_rs::{Declaration, Encoding, Indentation, Version, XmlConfig};', header)
        self.assertIn('pub fn load_json(', header)


class TestCreateEmitter(unittest.TestCase):

    def test_modes(self):
        self.assertIsInstance(create_emitter('xml'), JsonConfigTestEmitter)
        self.assertIsInstance(create_emitter('json'), XmlConfigTestEmitter)
        with self.assertRaises(ValueError):
            create_emitter('yaml')


if __name__ == '__main__':
    unittest.main()

"""
Unit tests for BSPConfig validation and persistence.
"""

import argparse
import json
import tempfile
import unittest
from pathlib import Path

from bsp_partition.config import BSPConfig, DEFAULT_INDENT_CHAR


class ConfigValidationTests(unittest.TestCase):
    """Tests for BSPConfig.validate"""

    def testDefaultsAreValid(self):
        config = BSPConfig()
        config.validate()
        self.assertEqual(config.no_separator_policy, 'error')
        self.assertEqual(config.indent_char, DEFAULT_INDENT_CHAR)
        self.assertTrue(config.validate_solids)
        self.assertFalse(config.shuffle_input)

    def testUnknownPolicyRejected(self):
        with self.assertRaises(ValueError):
            BSPConfig(no_separator_policy='skip').validate()

    def testIndentCharMustBeOneCharacter(self):
        for value in ('', '++', 1):
            with self.assertRaises(ValueError, msg=repr(value)):
                BSPConfig(indent_char=value).validate()

    def testNegativeSeedRejected(self):
        with self.assertRaises(ValueError):
            BSPConfig(random_seed=-1).validate()


class ConfigPersistenceTests(unittest.TestCase):
    """Tests for JSON save/load"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / 'nested' / 'config.json'

    def tearDown(self):
        self.temp_dir.cleanup()

    def testSaveAndLoad(self):
        config = BSPConfig(no_separator_policy='bucket', indent_char='.', random_seed=3)
        config.save(self.path)

        self.assertEqual(BSPConfig.load(self.path), config)

    def testSavedFileIsPlainJson(self):
        BSPConfig(shuffle_input=True).save(self.path)
        data = json.loads(self.path.read_text(encoding='utf-8'))
        self.assertTrue(data['shuffle_input'])
        self.assertEqual(data['no_separator_policy'], 'error')

    def testLoadValidates(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({'indent_char': 'ab'}), encoding='utf-8')
        with self.assertRaises(ValueError):
            BSPConfig.load(self.path)

    def testLoadUnknownFieldRejected(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({'leaf_size': 4}), encoding='utf-8')
        with self.assertRaises(TypeError):
            BSPConfig.load(self.path)


class ConfigFromArgsTests(unittest.TestCase):
    """Tests for BSPConfig.from_args"""

    def testEmptyNamespaceGivesDefaults(self):
        self.assertEqual(BSPConfig.from_args(argparse.Namespace()), BSPConfig())

    def testOverrides(self):
        args = argparse.Namespace(
            no_separator_policy='bucket',
            shuffle=True,
            random_seed=9,
            indent_char='-',
            no_validate=True,
        )
        config = BSPConfig.from_args(args)
        self.assertEqual(config.no_separator_policy, 'bucket')
        self.assertTrue(config.shuffle_input)
        self.assertEqual(config.random_seed, 9)
        self.assertEqual(config.indent_char, '-')
        self.assertFalse(config.validate_solids)

    def testArgsOverrideBase(self):
        """Test unset arguments keep values loaded from a config file"""
        base = BSPConfig(indent_char='.', random_seed=5)
        args = argparse.Namespace(random_seed=None, indent_char=None, shuffle=False)
        config = BSPConfig.from_args(args, base)
        self.assertEqual(config.indent_char, '.')
        self.assertEqual(config.random_seed, 5)

    def testInvalidOverrideRejected(self):
        with self.assertRaises(ValueError):
            BSPConfig.from_args(argparse.Namespace(indent_char='>>'))


if __name__ == '__main__':
    unittest.main()

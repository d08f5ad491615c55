import unittest
from unittest.mock import MagicMock
import sys
import os
import tempfile

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from credativ_sp_converter.name_map import load_name_map

class TestNameMap(unittest.TestCase):
    def setUp(self):
        self.mock_config = MagicMock()
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_map_file(self, content):
        map_file = os.path.join(self.temp_dir.name, 'column_map.txt')
        with open(map_file, 'w', encoding='utf-8') as file:
            file.write(content)
        return map_file

    def test_load_name_map(self):
        map_file = self.write_map_file(
            "SourceTable\tSourceName\tSchema\tNewTable\tNewName\n"
            "T_Jobs\tJob\tsw\tt_jobs\tjob\n"
            "T_Jobs\tState_ID\tsw\tt_jobs\tstate_id\n"
            "T_Analysis_Tool\tAJT_toolName\tpublic\tt_analysis_tool\tanalysis_tool\n")
        name_map = load_name_map(map_file, self.mock_config)

        self.assertFalse(name_map.is_empty())
        self.assertEqual(name_map.get_table('t_jobs'), ('sw', 't_jobs'))
        self.assertEqual(name_map.get_table('T_ANALYSIS_TOOL'), ('public', 't_analysis_tool'))
        self.assertIsNone(name_map.get_table('T_Unknown'))
        self.assertEqual(name_map.get_columns('t_jobs'), {
            'job': ('Job', 'job'),
            'state_id': ('State_ID', 'state_id'),
        })
        self.assertEqual(name_map.table_names(), ['t_analysis_tool', 't_jobs'])

    def test_missing_columns(self):
        map_file = self.write_map_file("SourceTable\tSourceName\nT_Jobs\tJob\n")
        with self.assertRaises(ValueError):
            load_name_map(map_file, self.mock_config)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_name_map(os.path.join(self.temp_dir.name, 'missing.txt'), self.mock_config)

if __name__ == '__main__':
    unittest.main()

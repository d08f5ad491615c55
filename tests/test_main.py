import unittest
import sys
import os
import tempfile

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from credativ_sp_converter.main import main

class TestMain(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.log_file = os.path.join(self.temp_dir.name, 'converter.log')

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_convert(self):
        input_file = os.path.join(self.temp_dir.name, 'procedures.sql')
        with open(input_file, 'w', encoding='utf-8') as file:
            file.write("CREATE PROCEDURE dbo.AddJob\nAS\n\tSet @job = 1\nGO\n")

        exit_code = main([input_file, '--snake-case', '--log-file', self.log_file])

        self.assertEqual(exit_code, 0)
        output_file = os.path.join(self.temp_dir.name, 'procedures_postgres.sql')
        with open(output_file, 'r', encoding='utf-8') as file:
            result = file.read()
        self.assertIn('CREATE OR REPLACE PROCEDURE public.add_job()', result)
        self.assertIn('    _job := 1;', result)

    def test_missing_input_file(self):
        exit_code = main([os.path.join(self.temp_dir.name, 'missing.sql'), '--log-file', self.log_file])
        self.assertEqual(exit_code, 1)

    def test_missing_map_file(self):
        input_file = os.path.join(self.temp_dir.name, 'procedures.sql')
        with open(input_file, 'w', encoding='utf-8') as file:
            file.write("CREATE PROCEDURE dbo.AddJob\nAS\n\tSet @job = 1\n")
        exit_code = main([input_file, '--map', os.path.join(self.temp_dir.name, 'missing.txt'),
                          '--log-file', self.log_file])
        self.assertEqual(exit_code, 1)
        self.assertFalse(os.path.exists(os.path.join(self.temp_dir.name, 'procedures_postgres.sql')))

    def test_version(self):
        self.assertEqual(main(['--version']), 0)

if __name__ == '__main__':
    unittest.main()

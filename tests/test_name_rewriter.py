import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from credativ_sp_converter.name_map import NameMap
from credativ_sp_converter.name_rewriter import NameRewriter

class TestNameRewriter(unittest.TestCase):
    def setUp(self):
        self.mock_config = MagicMock()
        self.mock_config.get_target_schema.return_value = 'public'
        self.mock_config.get_minimum_column_name_length.return_value = 4
        self.mock_config.is_verbose.return_value = False

        self.name_map = NameMap()
        self.name_map.add_entry('T_Jobs', 'Job', 'sw', 't_jobs', 'job')
        self.name_map.add_entry('T_Jobs', 'State', 'sw', 't_jobs', 'state')
        self.name_map.add_entry('T_Jobs', 'ID', 'sw', 't_jobs', 'id')
        self.name_map.add_entry('T_Job_Steps', 'Step_Number', 'sw', 't_job_steps', 'step')

    def test_block_rewrite(self):
        body = [
            '    SELECT State',
            '    FROM T_Jobs',
            '    WHERE Job = _jobID',
            '',
            '    _state := 1;',
        ]
        NameRewriter(self.mock_config, self.name_map).rewrite(body)
        self.assertEqual(body, [
            '    SELECT state',
            '    FROM sw.t_jobs',
            '    WHERE Job = _jobID',
            '',
            '    _state := 1;',
        ])

    def test_second_run_changes_nothing(self):
        body = [
            '    SELECT State, Step_Number',
            '    FROM dbo.T_Jobs J INNER JOIN [dbo].[T_Job_Steps] S ON J.Job = S.Job',
        ]
        rewriter = NameRewriter(self.mock_config, self.name_map)
        rewriter.rewrite(body)
        first_run = list(body)
        rewriter.rewrite(body)
        self.assertEqual(body, first_run)
        self.assertEqual(first_run, [
            '    SELECT state, step',
            '    FROM sw.t_jobs J INNER JOIN sw.t_job_steps S ON J.Job = S.Job',
        ])

    def test_schema_not_added_for_target_schema(self):
        self.mock_config.get_target_schema.return_value = 'sw'
        body = ['    DELETE FROM [dbo].[T_Jobs] WHERE State = 3']
        NameRewriter(self.mock_config, self.name_map).rewrite(body)
        self.assertEqual(body, ['    DELETE FROM t_jobs WHERE state = 3'])

    def test_columns_limited_to_block_tables(self):
        body = [
            '    -- Check T_Jobs State',
            '    SELECT State FROM T_Job_Steps',
            '    If State > 0 Then',
        ]
        NameRewriter(self.mock_config, self.name_map).rewrite(body)
        self.assertEqual(body, [
            '    -- Check sw.t_jobs state',
            '    SELECT State FROM sw.t_job_steps',
            '    If State > 0 Then',
        ])

    def test_longer_table_names_first(self):
        self.name_map.add_entry('T_Jobs_History', 'State', 'sw', 't_jobs_history', 'state')
        body = ['    FROM T_Jobs_History']
        NameRewriter(self.mock_config, self.name_map).rewrite(body)
        self.assertEqual(body, ['    FROM sw.t_jobs_history'])

    def test_verbose_logs_blocks(self):
        self.mock_config.is_verbose.return_value = True
        body = ['    FROM T_Jobs']
        NameRewriter(self.mock_config, self.name_map).rewrite(body)
        levels = [call.args[0] for call in self.mock_config.print_log_message.call_args_list]
        self.assertIn('DEBUG', levels)

    def test_without_name_map(self):
        body = ['    FROM T_Jobs']
        NameRewriter(self.mock_config, None).rewrite(body)
        NameRewriter(self.mock_config, NameMap()).rewrite(body)
        self.assertEqual(body, ['    FROM T_Jobs'])

if __name__ == '__main__':
    unittest.main()

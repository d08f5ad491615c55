import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from credativ_sp_converter.body_transpiler import BodyTranspiler, ControlBlockTypes
from credativ_sp_converter.constants import ConverterConstants
from credativ_sp_converter.line_source import LookaheadLineSource
from credativ_sp_converter.procedure_ddl import ProcedureDefinition
from credativ_sp_converter.rewrite_rules import RewriteRules

class TestBodyTranspiler(unittest.TestCase):
    def setUp(self):
        self.mock_config = MagicMock()
        self.mock_config.get_varchar_to_text_length.return_value = 10
        self.mock_config.get_function_name_rewrites.return_value = ConverterConstants.get_default_function_name_rewrites()
        self.mock_config.should_convert_to_snake_case.return_value = False

    def transpile(self, lines, snake_case=False):
        self.mock_config.should_convert_to_snake_case.return_value = snake_case
        self.transpiler = BodyTranspiler(self.mock_config, RewriteRules(self.mock_config))
        definition = ProcedureDefinition('public.Test', 'Test')
        source = LookaheadLineSource(lines)
        while True:
            data_line = source.read_line()
            if data_line is None:
                break
            self.transpiler.process_line(data_line, source, definition)
        return definition

    def get_logged_levels(self):
        return [call.args[0] for call in self.mock_config.print_log_message.call_args_list]

    def test_declare_with_initializer(self):
        definition = self.transpile(['    Declare @x int = 5'])
        self.assertEqual(definition.local_variables, ['_x int'])
        self.assertEqual(definition.body, ['    _x := 5;'])

    def test_declare_multiple_variables(self):
        definition = self.transpile(["\tDeclare @a int, @b varchar(64) = ''"])
        self.assertEqual(definition.local_variables, ['_a int', '_b text'])
        self.assertEqual(definition.body, ["    _b := '';"])

    def test_error_variable_is_dropped(self):
        definition = self.transpile(['    Declare @myError int', '    Declare @myRowCount int'])
        self.assertEqual(definition.local_variables, ['_myRowCount int'])
        self.assertEqual(definition.body, [])

    def test_table_variable_is_reported(self):
        definition = self.transpile(['    Declare @jobs table (Job int)'])
        self.assertEqual(definition.local_variables, [])
        self.assertEqual(definition.body, ['    Declare _jobs table (Job int)'])
        self.assertIn('WARNING', self.get_logged_levels())

    def test_set_and_print(self):
        definition = self.transpile([
            "\tSet @message = 'Job ' + Convert(varchar(12), @jobID)",
            '    Set @now = GetDate()',
            '    Print @message',
        ])
        self.assertEqual(definition.body, [
            "    _message := 'Job ' || _jobID::text;",
            '    _now := CURRENT_TIMESTAMP;',
            "    RAISE INFO '%', _message;",
        ])

    def test_row_count(self):
        definition = self.transpile(['    SELECT @myError = @@error, @myRowCount = @@rowcount'])
        self.assertEqual(definition.body, ['    GET DIAGNOSTICS _myRowCount = ROW_COUNT;'])

    def test_select_assignment(self):
        definition = self.transpile(['    SELECT @count = 0'])
        self.assertEqual(definition.body, ['    _count := 0;'])

    def test_select_into_same_line(self):
        definition = self.transpile(['    SELECT @a = Job, @b = State FROM T_Jobs WHERE Job = @jobID'])
        self.assertEqual(definition.body, ['    SELECT Job, State INTO _a, _b FROM T_Jobs WHERE Job = _jobID'])

    def test_select_top_into(self):
        definition = self.transpile([
            '    SELECT TOP 1 @x = Job FROM T_Jobs',
            '    SELECT DISTINCT TOP (5) @state = State',
            '    FROM T_Jobs',
        ])
        self.assertEqual(definition.body, [
            '    SELECT TOP 1 Job INTO _x FROM T_Jobs',
            '    SELECT DISTINCT TOP (5) State INTO _state',
            '    FROM T_Jobs',
        ])

    def test_error_variable_assignment_is_dropped(self):
        definition = self.transpile([
            '    SELECT @myError = @@error',
            '    SELECT @myError = @@error, @total = @total + 1',
        ])
        self.assertEqual(definition.body, ['    _total := _total + 1;'])

    def test_select_into_next_line(self):
        definition = self.transpile([
            '    SELECT @jobCount = Count(*)',
            '    FROM T_Jobs',
            '    WHERE State = 1',
        ])
        self.assertEqual(definition.body, [
            '    SELECT Count(*) INTO _jobCount',
            '    FROM T_Jobs',
            '    WHERE State = 1',
        ])

    def test_if_without_begin(self):
        definition = self.transpile([
            '    If @x > 0',
            '        Set @y = 1',
            '    Set @z = 2',
        ])
        self.assertEqual(definition.body, [
            '    If _x > 0 Then',
            '        _y := 1;',
            '    End If;',
            '    _z := 2;',
        ])
        self.assertEqual(self.transpiler.control_block_stack, [])

    def test_if_begin_end_else(self):
        definition = self.transpile([
            '    If @x > 0',
            '    Begin -- positive',
            '        Set @y = 1',
            '    End',
            '    Else',
            '        Set @y = 2',
            '    Set @z = 3',
        ])
        self.assertEqual(definition.body, [
            '    If _x > 0 Then',
            '    -- positive',
            '        _y := 1;',
            '    Else',
            '        _y := 2;',
            '    End If;',
            '    _z := 3;',
        ])
        self.assertEqual(self.transpiler.control_block_stack, [])

    def test_if_begin_end(self):
        definition = self.transpile([
            '    If @x > 0',
            '    Begin',
            '        Set @y = 1',
            '    End -- check x',
        ])
        self.assertEqual(definition.body, [
            '    If _x > 0 Then',
            '        _y := 1;',
            '    End If; -- check x',
        ])

    def test_else_begin_block(self):
        definition = self.transpile([
            '    If @x > 0',
            '        Set @y = 1',
            '    Else',
            '    Begin',
            '        Set @y = 2',
            '    End',
        ])
        self.assertEqual(definition.body, [
            '    If _x > 0 Then',
            '        _y := 1;',
            '    Else',
            '        _y := 2;',
            '    End If;',
        ])

    def test_while_loop(self):
        definition = self.transpile([
            '    While @i < 10',
            '    Begin',
            '        Set @i = @i + 1',
            '        If @i = 5',
            '            break',
            '    End',
        ])
        self.assertEqual(definition.body, [
            '    While _i < 10 Loop',
            '        _i := _i + 1;',
            '        If _i = 5 Then',
            '            Exit;',
            '        End If;',
            '    End Loop;',
        ])
        self.assertEqual(self.transpiler.control_block_stack, [])

    def test_unclosed_block_stays_on_stack(self):
        self.transpile([
            '    While @i < 3',
            '    Begin',
            '        Set @i = @i + 1',
        ])
        self.assertEqual(self.transpiler.control_block_stack, [ControlBlockTypes.WHILE])

    def test_else_if_is_reported(self):
        definition = self.transpile([
            '    If @a = 1',
            '        Set @b = 1',
            '    Else If @a = 2',
            '        Set @b = 2',
        ])
        self.assertEqual(definition.body, [
            '    If _a = 1 Then',
            '        _b := 1;',
            '    Else If _a = 2',
            '        _b := 2;',
            '    End If;',
        ])
        self.assertIn('WARNING', self.get_logged_levels())

    def test_goto_break_continue(self):
        definition = self.transpile(['    Goto Done', '    continue'])
        self.assertEqual(definition.body, ['    Return;', '    continue;'])

    def test_exec_with_snake_case(self):
        definition = self.transpile(['    exec @err = SomeProc @a = 1, @b = 2'], snake_case=True)
        self.assertEqual(definition.body, ['    Call some_proc (_a => 1, _b => 2);'])

    def test_exec_output_parameter(self):
        definition = self.transpile(
            ['    exec @myError = GetJobParams @jobID = @jobID, @message = @message output'], snake_case=True)
        self.assertEqual(definition.body, ['    Call get_job_params (_jobID => _jobID, _message => _message);'])

    def test_exec_keeps_sp_executesql(self):
        definition = self.transpile(['    exec sp_executesql @sql'], snake_case=True)
        self.assertEqual(definition.body, ['    Call sp_executesql (_sql);'])

    def test_exec_without_snake_case(self):
        definition = self.transpile(['    exec dbo.GetJob 5'])
        self.assertEqual(definition.body, ['    Call dbo.GetJob (5);'])

    def test_update_self_join_warning(self):
        definition = self.transpile([
            '    UPDATE T_Jobs',
            '    SET State = 5',
            '    FROM T_Jobs J INNER JOIN #Tmp ON J.Job = #Tmp.Job',
        ])
        self.assertEqual(definition.body[:3], [
            '    UPDATE T_Jobs',
            '    SET State = 5',
            '    FROM T_Jobs J INNER JOIN #Tmp ON J.Job = #Tmp.Job',
        ])
        self.assertIn('     * This UPDATE query includes the target table name in the FROM clause', definition.body)
        self.assertEqual(definition.body[-1], '    ToDo: fix this query')

    def test_delete_self_join_warning(self):
        definition = self.transpile([
            '    DELETE T_Jobs',
            '    FROM T_Jobs J INNER JOIN #Tmp ON J.Job = #Tmp.Job',
        ])
        self.assertTrue(any('USING' in line for line in definition.body))
        self.assertEqual(definition.body[-1], '    ToDo: fix this query')

    def test_self_join_state_resets_on_blank_line(self):
        definition = self.transpile([
            '    UPDATE T_Jobs',
            '    SET State = 5',
            '',
            '    SELECT * FROM T_Jobs',
        ])
        self.assertNotIn('    ToDo: fix this query', definition.body)

    def test_output_discipline(self):
        definition = self.transpile([
            '',
            '    Set @a = 1;',
            '',
            '',
            '\tSet @b = 2  ',
        ])
        self.assertEqual(definition.body, ['    _a := 1;', '', '    _b := 2;'])

if __name__ == '__main__':
    unittest.main()

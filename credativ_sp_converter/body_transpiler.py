# credativ-sp-converter
# Copyright (C) 2025 credativ GmbH
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import re
from enum import Enum
from credativ_sp_converter.constants import ConverterConstants
from credativ_sp_converter.rewrite_rules import (
    add_terminator, collapse_terminators, find_top_level_keyword, get_leading_whitespace,
    replace_tabs, split_inline_comment, split_top_level_commas, to_snake_case)

class ControlBlockTypes(Enum):
    IF = 'If'
    WHILE = 'While'

DECLARE_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)Declare\s+(?P<Declarations>@.*)$', re.IGNORECASE)

DECLARED_VARIABLE_MATCHER = re.compile(
    r'^\s*@(?P<VariableName>\w+)\s+(?:As\s+)?(?P<DataType>[^=]+?)\s*(?:=\s*(?P<Value>.+?))?\s*;?\s*$',
    re.IGNORECASE | re.DOTALL)

TABLE_VARIABLE_MATCHER = re.compile(r'^table\b', re.IGNORECASE)

SET_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)Set\s+@(?P<VariableName>\w+)\s*=\s*(?P<Value>.*)$', re.IGNORECASE)

PRINT_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)Print\b\s*(?P<Value>.*)$', re.IGNORECASE)

# SELECT @myError = @@error, @myRowCount = @@rowcount
ROW_COUNT_MATCHER = re.compile(
    r'^(?P<LeadingWhitespace>\s*)SELECT\b.*@(?P<VariableName>\w+)\s*=\s*@@rowcount\b',
    re.IGNORECASE)

SELECT_ASSIGNMENT_MATCHER = re.compile(
    r'^(?P<LeadingWhitespace>\s*)SELECT\s+'
    r'(?P<Modifiers>(?:DISTINCT\s+)?(?:TOP\s*(?:\([^)]*\)|\d+)(?:\s+PERCENT)?\s+)?)'
    r'(?P<SelectList>@\w+\s*=.*)$',
    re.IGNORECASE)

ASSIGNMENT_ITEM_MATCHER = re.compile(r'^\s*@(?P<VariableName>\w+)\s*=\s*(?P<Value>.+?)\s*$', re.DOTALL)

FROM_KEYWORD_MATCHER = re.compile(r'\bFROM\b', re.IGNORECASE)

IF_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)If(?=[\s(])', re.IGNORECASE)

ELSE_MATCHER = re.compile(r'^\s*Else\b', re.IGNORECASE)

ELSE_IF_MATCHER = re.compile(r'^\s*Else\s+If\b', re.IGNORECASE)

WHILE_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)While(?=[\s(])', re.IGNORECASE)

BEGIN_MATCHER = re.compile(r'^\s*Begin\b(?!\s+Tran)', re.IGNORECASE)

END_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)End\b(?P<ExtraInfo>.*)$', re.IGNORECASE)

GOTO_DONE_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)Goto\s+Done\s*;?\s*$', re.IGNORECASE)

BREAK_MATCHER = re.compile(r'^(?P<LeadingWhitespace>\s*)Break\s*;?\s*$', re.IGNORECASE)

CONTINUE_MATCHER = re.compile(r'^\s*Continue\s*;?\s*$', re.IGNORECASE)

# exec @myError = SomeProcedure @param1 = 1, @param2 = 2
EXEC_MATCHER = re.compile(
    r'^(?P<LeadingWhitespace>\s*)Exec(?:ute)?\s+(?:@\w+\s*=\s*)?(?P<Target>[^\s(@]+)\s*(?P<Parameters>.*)$',
    re.IGNORECASE)

NAMED_PARAMETER_MATCHER = re.compile(r'(@\w+)\s*=(?!>)\s*')

OUTPUT_PARAMETER_MATCHER = re.compile(r'\s+(?:output|out)\b', re.IGNORECASE)

UPDATE_MATCHER = re.compile(r'^\s*UPDATE\s+(?!STATISTICS\b)(?P<TableName>[^\s(]+)', re.IGNORECASE)

DELETE_MATCHER = re.compile(r'^\s*DELETE\s+(?:FROM\s+)?(?P<TableName>[^\s(]+)', re.IGNORECASE)

FROM_TABLE_MATCHER = re.compile(r'\bFROM\s+(?P<TableName>[^\s(,;]+)', re.IGNORECASE)

SELF_JOIN_WARNING_BORDER = '*' * 80

class BodyTranspiler:
    """
    Converts the body of a SQL Server procedure to PL/pgSQL, one line at a time.

    Some constructs need to see upcoming lines (If without Begin, End followed
    by Else, SELECT assignments whose FROM is on the next line); those read
    ahead using the line source and consume what they use.
    """

    def __init__(self, config_parser, rewrite_rules):
        self.config_parser = config_parser
        self.rewrite_rules = rewrite_rules
        self.convert_to_snake_case = self.config_parser.should_convert_to_snake_case()
        self.error_variable_name = ConverterConstants.get_error_variable_name()
        self.control_block_stack = []
        self.update_or_delete = None

    def reset(self):
        self.control_block_stack.clear()
        self.update_or_delete = None

    def append_line(self, body, data_line):
        data_line = collapse_terminators(replace_tabs(data_line))
        if not data_line.strip():
            if not body or not body[-1].strip():
                return
            data_line = ''
        body.append(data_line)

    def process_line(self, data_line, line_source, definition):
        body = definition.body

        if not data_line.strip():
            self.update_or_delete = None
            self.append_line(body, '')
            return

        data_line = self.rewrite_rules.apply_literal_rewrites(data_line)

        if self.store_declare(data_line, definition):
            return

        if self.process_control_flow(data_line, line_source, definition):
            return

        statement = self.translate_statement(data_line, line_source)
        if statement is not None:
            if statement:
                self.append_line(body, statement)
            return

        self.process_other(data_line, body)

    def store_declare(self, data_line, definition):
        declare_match = DECLARE_MATCHER.match(data_line)
        if not declare_match:
            return False

        leading_whitespace = declare_match.group('LeadingWhitespace')
        declarations, comment = split_inline_comment(declare_match.group('Declarations'))

        parsed = []
        for item in split_top_level_commas(declarations):
            if not item.strip():
                continue
            variable_match = DECLARED_VARIABLE_MATCHER.match(item)
            if not variable_match:
                return False
            if TABLE_VARIABLE_MATCHER.match(variable_match.group('DataType')):
                self.config_parser.print_log_message(
                    'WARNING', f"Table variable must be converted manually: {data_line.strip()}")
                return False
            parsed.append(variable_match)

        for variable_match in parsed:
            variable_name = variable_match.group('VariableName')
            if variable_name.lower() == self.error_variable_name.lower():
                continue

            data_type = self.rewrite_rules.normalize_data_type(variable_match.group('DataType').strip())
            definition.local_variables.append(f"_{variable_name} {data_type}")

            value = variable_match.group('Value')
            if value:
                assignment = f"{leading_whitespace}_{variable_name} := {self.rewrite_rules.rewrite_expression(value.strip())};"
                if comment:
                    assignment += ' ' + comment
                    comment = ''
                self.append_line(definition.body, assignment)

        return True

    def translate_statement(self, data_line, line_source):
        """
        Convert a single statement (assignment, print, exec ...), returning
        None if the line is not one of the recognized statements, or an empty
        string if the statement is dropped
        """
        set_match = SET_MATCHER.match(data_line)
        if set_match:
            value, comment = split_inline_comment(set_match.group('Value'))
            target = f"{set_match.group('LeadingWhitespace')}_{set_match.group('VariableName')} :="
            if not value.strip():
                # The value is on the next line
                return target
            statement = f"{target} {self.rewrite_rules.rewrite_expression(value.strip())};"
            return f"{statement} {comment}" if comment else statement

        print_match = PRINT_MATCHER.match(data_line)
        if print_match:
            value, comment = split_inline_comment(print_match.group('Value'))
            statement = f"{print_match.group('LeadingWhitespace')}RAISE INFO '%', {self.rewrite_rules.rewrite_expression(value.strip())};"
            return f"{statement} {comment}" if comment else statement

        row_count_match = ROW_COUNT_MATCHER.match(data_line)
        if row_count_match:
            return f"{row_count_match.group('LeadingWhitespace')}GET DIAGNOSTICS _{row_count_match.group('VariableName')} = ROW_COUNT;"

        select_statement = self.translate_select_assignment(data_line, line_source)
        if select_statement is not None:
            return select_statement

        goto_match = GOTO_DONE_MATCHER.match(data_line)
        if goto_match:
            return f"{goto_match.group('LeadingWhitespace')}Return;"

        break_match = BREAK_MATCHER.match(data_line)
        if break_match:
            return f"{break_match.group('LeadingWhitespace')}Exit;"

        if CONTINUE_MATCHER.match(data_line):
            return add_terminator(data_line)

        return self.translate_exec(data_line)

    def translate_select_assignment(self, data_line, line_source):
        select_match = SELECT_ASSIGNMENT_MATCHER.match(data_line)
        if not select_match:
            return None

        leading_whitespace = select_match.group('LeadingWhitespace')
        modifiers = select_match.group('Modifiers')
        code, comment = split_inline_comment(select_match.group('SelectList'))

        from_index = find_top_level_keyword(code, FROM_KEYWORD_MATCHER)
        from_match = from_index >= 0
        select_list = code[:from_index] if from_match else code
        from_clause = code[from_index:].strip() if from_match else ''

        targets = []
        values = []
        for item in split_top_level_commas(select_list):
            item_match = ASSIGNMENT_ITEM_MATCHER.match(item)
            if not item_match:
                return None
            if item_match.group('VariableName').lower() == self.error_variable_name.lower():
                # Its declaration is dropped too
                continue
            targets.append('_' + item_match.group('VariableName'))
            values.append(self.rewrite_rules.rewrite_expression(item_match.group('Value')))

        if not targets:
            return leading_whitespace + comment if comment else ''

        next_line = line_source.peek_line()
        from_on_next_line = (not from_match and next_line is not None
                             and next_line.strip().upper().startswith('FROM'))

        if from_match or from_on_next_line:
            statement = f"{leading_whitespace}SELECT {modifiers}{', '.join(values)} INTO {', '.join(targets)}"
            if from_clause:
                statement += ' ' + self.rewrite_rules.rewrite_expression(from_clause)
        elif len(targets) == 1 and not modifiers:
            statement = f"{leading_whitespace}{targets[0]} := {values[0]};"
        else:
            statement = f"{leading_whitespace}SELECT {modifiers}{', '.join(values)} INTO {', '.join(targets)};"

        return f"{statement} {comment}" if comment else statement

    def translate_exec(self, data_line):
        exec_match = EXEC_MATCHER.match(data_line)
        if not exec_match:
            return None

        target = exec_match.group('Target').replace('[', '').replace(']', '')
        if self.convert_to_snake_case and target.lower() != ConverterConstants.get_case_sensitive_exec_target():
            schema, separator, object_name = target.rpartition('.')
            target = f"{schema}{separator}{to_snake_case(object_name)}"

        parameters, comment = split_inline_comment(exec_match.group('Parameters'))
        parameters = parameters.strip().rstrip(';').strip()
        parameters = OUTPUT_PARAMETER_MATCHER.sub('', parameters)
        parameters = NAMED_PARAMETER_MATCHER.sub(r'\1 => ', parameters)
        parameters = self.rewrite_rules.rewrite_expression(parameters)

        statement = f"{exec_match.group('LeadingWhitespace')}Call {target} ({parameters});"
        return f"{statement} {comment}" if comment else statement

    def process_control_flow(self, data_line, line_source, definition):
        body = definition.body

        end_match = END_MATCHER.match(data_line)
        if end_match and self.control_block_stack:
            self.process_end(end_match, line_source, definition)
            return True

        if_match = IF_MATCHER.match(data_line)
        if if_match:
            code, comment = split_inline_comment(data_line)
            condition = self.rewrite_rules.rewrite_expression(code) + ' Then'
            self.append_line(body, f"{condition} {comment}" if comment else condition)
            self.process_guarded_statement(if_match.group('LeadingWhitespace'), line_source, definition, True)
            return True

        while_match = WHILE_MATCHER.match(data_line)
        if while_match:
            code, comment = split_inline_comment(data_line)
            condition = self.rewrite_rules.rewrite_expression(code) + ' Loop'
            self.append_line(body, f"{condition} {comment}" if comment else condition)
            self.control_block_stack.append(ControlBlockTypes.WHILE)

            next_line = line_source.peek_line()
            if next_line is not None and BEGIN_MATCHER.match(next_line):
                line_source.dequeue()
            return True

        if ELSE_IF_MATCHER.match(data_line):
            self.config_parser.print_log_message(
                'WARNING', f"Else If is not supported; convert manually to ElsIf: {data_line.strip()}")

        return False

    def process_end(self, end_match, line_source, definition):
        leading_whitespace = end_match.group('LeadingWhitespace')
        extra_info = end_match.group('ExtraInfo')
        block_type = self.control_block_stack.pop()

        if block_type == ControlBlockTypes.WHILE:
            self.append_line(definition.body, f"{leading_whitespace}End Loop;{extra_info}")
            return

        next_line = line_source.peek_line()
        if next_line is not None and ELSE_MATCHER.match(next_line):
            # The If block continues with Else; End If comes later
            self.append_else(line_source.dequeue(), definition.body)
            self.process_guarded_statement(leading_whitespace, line_source, definition, False)
            return

        self.append_line(definition.body, f"{leading_whitespace}End If;{extra_info}")

    def append_else(self, else_line, body):
        if ELSE_IF_MATCHER.match(else_line):
            self.config_parser.print_log_message(
                'WARNING', f"Else If is not supported; convert manually to ElsIf: {else_line.strip()}")
        self.append_line(body, self.rewrite_rules.rewrite_expression(self.rewrite_rules.apply_literal_rewrites(else_line)))

    def push_if_block_opens(self, line_source, body):
        """If the next line is Begin, open an If block and consume the Begin line"""
        next_line = line_source.peek_line()
        if next_line is None or not BEGIN_MATCHER.match(next_line):
            return False

        self.control_block_stack.append(ControlBlockTypes.IF)
        begin_line = line_source.dequeue()
        _, comment = split_inline_comment(begin_line)
        if comment:
            self.append_line(body, get_leading_whitespace(begin_line) + comment)
        return True

    def process_guarded_statement(self, leading_whitespace, line_source, definition, check_for_else):
        """
        Handle what follows If (or Else): either a Begin line, or a single
        statement, in which case End If is added after the statement (or after
        the Else statement)
        """
        body = definition.body

        if not line_source.peek(3):
            self.config_parser.print_log_message('WARNING', f"Missing statement at the end of an If block in {definition.name}")
            return

        if self.push_if_block_opens(line_source, body):
            return

        statement = self.rewrite_rules.apply_literal_rewrites(line_source.dequeue())
        translated = self.translate_statement(statement, line_source)
        if translated is None:
            translated = self.rewrite_rules.rewrite_expression(statement)
        if translated:
            self.append_line(body, add_terminator(translated))

        if check_for_else:
            next_line = line_source.peek_line()
            if next_line is not None and ELSE_MATCHER.match(next_line):
                self.append_else(line_source.dequeue(), body)
                self.process_guarded_statement(leading_whitespace, line_source, definition, False)
                return

        self.append_line(body, f"{leading_whitespace}End If;")

    def process_other(self, data_line, body):
        update_match = UPDATE_MATCHER.match(data_line)
        delete_match = DELETE_MATCHER.match(data_line)
        if update_match:
            self.update_or_delete = ('UPDATE', self.get_table_name(update_match.group('TableName')))
        elif delete_match:
            self.update_or_delete = ('DELETE', self.get_table_name(delete_match.group('TableName')))

        self.append_line(body, self.rewrite_rules.rewrite_expression(data_line))

        if update_match or delete_match or not self.update_or_delete:
            return

        from_match = FROM_TABLE_MATCHER.search(split_inline_comment(data_line)[0])
        if not from_match:
            return

        query_type, table_name = self.update_or_delete
        if self.get_table_name(from_match.group('TableName')).lower() != table_name.lower():
            return

        self.config_parser.print_log_message('WARNING', f"{query_type} query for {table_name} has the target table in the FROM clause")
        leading_whitespace = get_leading_whitespace(data_line)
        for line in self.get_self_join_warning(query_type, table_name):
            self.append_line(body, leading_whitespace + line)
        self.update_or_delete = None

    @staticmethod
    def get_table_name(table_name):
        table_name = table_name.replace('[', '').replace(']', '').rstrip(';')
        if table_name.lower().startswith('dbo.'):
            table_name = table_name[4:]
        return table_name

    @staticmethod
    def get_self_join_warning(query_type, table_name):
        lines = [
            '/' + SELF_JOIN_WARNING_BORDER,
            f' * This {query_type} query includes the target table name in the FROM clause',
            ' * The WHERE clause needs to have a self join to the target table, for example:',
            f' *   {query_type} {table_name}',
        ]
        if query_type == 'UPDATE':
            lines += [
                ' *   SET ...',
                ' *   FROM source',
                f' *   WHERE source.id = {table_name}.id;',
            ]
        else:
            lines += [
                ' *   FROM source',
                f' *   WHERE source.id = {table_name}.id;',
                ' *',
                ' * Delete queries must also use the USING keyword',
                ' * Alternatively, the more standard approach is to rearrange the query to be similar to',
                f' *   DELETE FROM {table_name} WHERE id IN (SELECT id FROM ...);',
            ]
        lines += [
            ' ' + SELF_JOIN_WARNING_BORDER + '/',
            'ToDo: fix this query',
        ]
        return lines

if __name__ == "__main__":
    print("This script is not meant to be run directly")

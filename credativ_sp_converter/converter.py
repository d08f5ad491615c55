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

import io
import os
import re
from credativ_sp_converter.body_transpiler import BodyTranspiler
from credativ_sp_converter.header_parser import HeaderParser
from credativ_sp_converter.line_source import LookaheadLineSource
from credativ_sp_converter.name_rewriter import NameRewriter
from credativ_sp_converter.procedure_ddl import ProcedureDefinition
from credativ_sp_converter.rewrite_rules import RewriteRules

CREATE_PROCEDURE_MATCHER = re.compile(
    r'^(?:CREATE|ALTER|CREATE\s+OR\s+ALTER)\s+(?P<ObjectType>PROCEDURE|PROC|FUNCTION)\b\s*(?P<Remainder>.*)$',
    re.IGNORECASE)

# [dbo].[ProcedureName]
BRACKETED_NAME_MATCHER = re.compile(r'\[[^\]]+\]\.\[(?P<ProcedureName>[^\]]+)\]')

GO_MATCHER = re.compile(r'^\s*GO\s*$', re.IGNORECASE)

SET_OPTION_MATCHER = re.compile(r'^\s*SET\s+(?:NOCOUNT|XACT_ABORT)(?:\s*,\s*(?:NOCOUNT|XACT_ABORT))*\s+ON\s*;?\s*$', re.IGNORECASE)

# These are followed by GO, which is skipped along with the blank line after it
SKIP_WITH_GO_MATCHERS = [
    re.compile(r'^\s*SET\s+ANSI_NULLS\s+(?:ON|OFF)\b', re.IGNORECASE),
    re.compile(r'^\s*SET\s+QUOTED_IDENTIFIER\s+(?:ON|OFF)\b', re.IGNORECASE),
    re.compile(r'^\s*GRANT\b', re.IGNORECASE),
]

SCHEMABINDING_MATCHER = re.compile(r'^\s*WITH\s+SCHEMABINDING\b', re.IGNORECASE)

OBJECT_HEADER_MARKER = '/****** Object:'

class StoredProcedureConverter:
    """
    Reads a SQL Server script with stored procedures and functions and writes
    the PostgreSQL equivalent of each one
    """

    def __init__(self, config_parser, name_map=None, today=None):
        self.config_parser = config_parser
        self.rewrite_rules = RewriteRules(config_parser)
        self.header_parser = HeaderParser(config_parser, self.rewrite_rules, today)
        self.body_transpiler = BodyTranspiler(config_parser, self.rewrite_rules)
        self.name_rewriter = NameRewriter(config_parser, name_map)
        self.definition = ProcedureDefinition()
        self.snake_case = self.config_parser.should_convert_to_snake_case()
        self.target_schema = self.config_parser.get_target_schema()
        self.indent = self.config_parser.get_indent()
        self.skip_next_line_if_go = False
        self.written_count = 0
        self.skipped_count = 0

    def convert_file(self, input_file=None, output_file=None):
        """Convert input_file, writing output_file; returns True if successful"""
        try:
            input_file = input_file or self.config_parser.get_input_file()
            output_file = output_file or self.config_parser.get_output_file()

            if not os.path.exists(input_file):
                self.config_parser.print_log_message('WARNING', f"Input file not found: {input_file}")
                return False

            output_directory = os.path.dirname(os.path.abspath(output_file))
            if not os.path.isdir(output_directory):
                self.config_parser.print_log_message('INFO', f"Creating missing directory: {output_directory}")
                try:
                    os.makedirs(output_directory)
                except OSError as e:
                    self.config_parser.print_log_message('ERROR', f"Unable to create directory {output_directory}: {e}", e)
                    return False

            self.config_parser.print_log_message('INFO', f"Reading {input_file}")
            self.config_parser.print_log_message('INFO', f"Creating {output_file}")

            with open(input_file, 'r', encoding=self.detect_encoding(input_file)) as reader, \
                    open(output_file, 'w', encoding='utf-8') as writer:
                self.convert(reader, writer)

            self.config_parser.print_log_message(
                'INFO', f"Converted {self.written_count} procedures/functions; skipped {self.skipped_count}")
            return True

        except Exception as e:
            self.config_parser.print_log_message('ERROR', f"Error in convert_file: {e}", e)
            return False

    @staticmethod
    def detect_encoding(input_file):
        # Scripts generated by SQL Server Management Studio are often UTF-16
        with open(input_file, 'rb') as file:
            start = file.read(2)
        if start in (b'\xff\xfe', b'\xfe\xff'):
            return 'utf-16'
        return 'utf-8-sig'

    def convert_text(self, text):
        """Convert SQL Server DDL given as a string; returns the PostgreSQL DDL"""
        writer = io.StringIO()
        self.convert(io.StringIO(text), writer)
        return writer.getvalue()

    def convert(self, reader, writer):
        line_source = LookaheadLineSource(reader)
        self.definition.reset()
        self.header_parser.reset()
        self.body_transpiler.reset()
        self.skip_next_line_if_go = False

        while True:
            data_line = line_source.read_line()
            if data_line is None:
                break

            if self.skip_next_line_if_go and GO_MATCHER.match(data_line):
                self.skip_next_line_if_go = False
                next_line = line_source.peek_line()
                if next_line is not None and not next_line.strip():
                    line_source.dequeue()
                continue

            if self.skip_line(data_line):
                continue

            create_match = CREATE_PROCEDURE_MATCHER.match(data_line)
            if create_match:
                self.start_definition(create_match, writer)
                continue

            if not self.definition.name:
                # Not inside a procedure yet
                continue

            if self.header_parser.process_line(data_line, line_source, self.definition):
                continue

            self.body_transpiler.process_line(data_line, line_source, self.definition)

        self.write_definition(writer)

    def skip_line(self, data_line):
        """Returns True for directives that are not needed in PostgreSQL"""
        self.skip_next_line_if_go = False
        trimmed_line = data_line.strip()

        if any(matcher.match(data_line) for matcher in SKIP_WITH_GO_MATCHERS):
            self.skip_next_line_if_go = True
            return True

        if GO_MATCHER.match(data_line) or SET_OPTION_MATCHER.match(data_line):
            return True

        if SCHEMABINDING_MATCHER.match(data_line) or trimmed_line.startswith(OBJECT_HEADER_MARKER):
            return True

        # AS between the header and the body
        return trimmed_line.upper() == 'AS' and not self.header_parser.in_body

    def start_definition(self, create_match, writer):
        self.write_definition(writer)

        remainder = create_match.group('Remainder').strip()
        name_match = BRACKETED_NAME_MATCHER.search(remainder)
        if name_match:
            qualified_name = name_match.group('ProcedureName')
        else:
            qualified_name = re.split(r'[\s(]', remainder, maxsplit=1)[0]

        object_name = qualified_name.rpartition('.')[2].strip('[]')
        is_function = create_match.group('ObjectType').upper() == 'FUNCTION'
        skip = self.config_parser.should_skip_procedure(object_name)

        self.definition.reset(f"{self.target_schema}.{object_name}", object_name, is_function, skip)
        self.header_parser.reset()
        self.body_transpiler.reset()

        self.config_parser.print_log_message(
            'DEBUG', f"Found {self.definition.get_object_type().lower()} {qualified_name}")

    def write_definition(self, writer):
        definition = self.definition
        if not definition.name:
            return

        if definition.skip:
            self.config_parser.print_log_message('INFO', f"Skipping {definition.original_name}")
            self.skipped_count += 1
            definition.reset()
            return

        if self.body_transpiler.control_block_stack:
            self.config_parser.print_log_message(
                'WARNING', f"Unbalanced If/While blocks in {definition.original_name}: {len(self.body_transpiler.control_block_stack)} not closed")

        self.name_rewriter.rewrite(definition.body)

        object_description = 'function' if definition.is_function else 'stored procedure'
        if definition.has_body():
            self.config_parser.print_log_message(
                'INFO', f"Writing {object_description} {definition.get_postgres_name(self.snake_case)}")

        if definition.to_writer_for_postgres(writer, self.snake_case, self.indent):
            self.written_count += 1
        else:
            self.config_parser.print_log_message('DEBUG', f"Nothing to write for {definition.original_name}")

        definition.reset()

if __name__ == "__main__":
    print("This script is not meant to be run directly")

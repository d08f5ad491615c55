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
from datetime import date
from credativ_sp_converter.rewrite_rules import replace_tabs, split_inline_comment

COMMENT_BLOCK_START_MARKER = '/*****'
COMMENT_BLOCK_END_MARKER = '*****/'

# Matches Desc, Auth, or Date keywords in a comment block, for example
#   **  Auth:	mem
# Label is "Auth" and Value is "mem"
COMMENT_BLOCK_LABEL_MATCHER = re.compile(
    r'^\*\*\s+(?P<Label>Desc|Auth|Date):\s*(?P<Value>.*)',
    re.IGNORECASE)

PARAMETERS_HEADER_MATCHER = re.compile(r'^\*\*\s+Parameters:\s*$', re.IGNORECASE)

BOILERPLATE_RETURN_VALUES = [
    'Return values: 0: success, otherwise, error code',
    'Return values: 0 if no error; otherwise error code',
]

ARGUMENT_NAME_MATCHER = re.compile(r'@(?P<VariableName>\w+)')

# Trailing "output" (or "out") marker, optionally followed by a comma
OUTPUT_MARKER_MATCHER = re.compile(r'\s+(?:output|out)\b\s*(?P<Comma>,?)\s*$', re.IGNORECASE)

RETURNS_MATCHER = re.compile(r'^\s*RETURNS\b\s*(?P<DataType>.*)$', re.IGNORECASE)

TRAILING_AS_MATCHER = re.compile(r'\s+AS\s*$', re.IGNORECASE)

# Value column used when reformatting labels, e.g. "**  Desc:   " is 12 characters
LABEL_WIDTH = 8

class HeaderParser:
    """
    Handles the part of a procedure before its body: the comment block,
    the argument list, and the RETURNS clause of functions
    """

    def __init__(self, config_parser, rewrite_rules, today=None):
        self.config_parser = config_parser
        self.rewrite_rules = rewrite_rules
        self.today = today or date.today()
        self.reset()

    def reset(self):
        self.found_comment_block_start = False
        self.found_comment_block_end = False
        self.found_argument_list_start = False
        self.found_argument_list_end = False
        self.implicit_argument_list = False
        self.in_date_block = False
        self.in_body = False

    def process_line(self, data_line, line_source, definition):
        """Returns True if the line was consumed as part of the header"""
        if self.in_body:
            return False

        trimmed_line = data_line.strip()

        if (not self.found_comment_block_start and not self.found_argument_list_start
                and data_line.startswith(COMMENT_BLOCK_START_MARKER)):
            self.found_comment_block_start = True
            definition.comment_block.append(replace_tabs(data_line))
            return True

        if self.found_comment_block_start and not self.found_comment_block_end:
            if data_line.rstrip().endswith(COMMENT_BLOCK_END_MARKER):
                self.found_comment_block_end = True
                self.close_date_block(definition)
                definition.comment_block.append(replace_tabs(data_line))
                return True

            self.store_comment_line(data_line, line_source, definition)
            return True

        if not self.found_argument_list_start:
            if trimmed_line.startswith('()'):
                self.found_argument_list_start = True
                self.found_argument_list_end = True
                return True

            if trimmed_line.startswith('('):
                self.found_argument_list_start = True
                self.store_argument(trimmed_line[1:], definition)
                return True

            if trimmed_line.startswith('@'):
                # Argument list without parentheses; it ends at the first line without an argument
                self.found_argument_list_start = True
                self.implicit_argument_list = True
                self.store_argument(data_line, definition)
                return True

        if self.found_argument_list_start and not self.found_argument_list_end:
            if self.implicit_argument_list and trimmed_line and not trimmed_line.startswith('@'):
                self.found_argument_list_end = True
            else:
                if trimmed_line.startswith(')'):
                    self.found_argument_list_end = True
                    remainder = trimmed_line[1:].strip()
                    if remainder and definition.is_function:
                        self.store_return_type(remainder, line_source, definition)
                    return True

                if self.store_return_type(data_line, line_source, definition):
                    self.found_argument_list_end = True
                    return True

                self.store_argument(data_line, definition)
                return True

        if self.store_return_type(data_line, line_source, definition):
            return True

        if not trimmed_line:
            # Blank lines between the header sections are not kept
            return True

        self.in_body = True
        return False

    def store_comment_line(self, data_line, line_source, definition):
        comment_block = definition.comment_block

        if any(text.lower() in data_line.lower() for text in BOILERPLATE_RETURN_VALUES):
            # Skip this boilerplate line, plus the "**" line after it
            next_line = line_source.peek_line()
            if next_line is not None and next_line.strip() == '**':
                line_source.dequeue()
            return

        if PARAMETERS_HEADER_MATCHER.match(data_line):
            next_line = line_source.peek_line()
            if next_line is not None and next_line.strip() == '**':
                return

        if data_line.strip() == '**':
            self.close_date_block(definition)
            comment_block.append('**')
            return

        label_match = COMMENT_BLOCK_LABEL_MATCHER.match(data_line)
        if not label_match:
            if data_line.startswith('**\t') and len(data_line) > 3:
                comment_block.append('**  ' + replace_tabs(data_line[3:]))
            else:
                comment_block.append(replace_tabs(data_line))
            return

        label = label_match.group('Label')
        value = label_match.group('Value').strip()
        if label.lower() == 'date':
            self.in_date_block = True

        label_text = f"{label}:".ljust(LABEL_WIDTH)
        comment_block.append(replace_tabs(f"**  {label_text}{value}"))

    def close_date_block(self, definition):
        if not self.in_date_block:
            return
        self.in_date_block = False
        padding = ' ' * (LABEL_WIDTH + 2)
        definition.comment_block.append(f"**{padding}{self.today:%m/%d/%Y} - Ported to PostgreSQL")

    def store_argument(self, data_line, definition):
        if not data_line.strip():
            return

        code, comment = split_inline_comment(data_line.strip())
        if not code:
            return

        name_match = ARGUMENT_NAME_MATCHER.search(code)
        if name_match:
            argument_name = '_' + name_match.group('VariableName')
        else:
            # This shouldn't normally happen
            self.config_parser.print_log_message('DEBUG', f"Argument without a recognizable name: {data_line.strip()}")
            argument_name = code

        updated_argument = self.rewrite_rules.normalize_data_type(self.rewrite_rules.apply_literal_rewrites(code))

        # PostgreSQL procedures do not support OUT-only arguments; use INOUT
        output_match = OUTPUT_MARKER_MATCHER.search(updated_argument)
        if output_match:
            updated_argument = 'INOUT ' + updated_argument[:output_match.start()].strip() + output_match.group('Comma')

        comment_text = comment[2:].strip()
        if comment_text:
            definition.argument_comments.append((argument_name, comment_text))

        definition.arguments.append(replace_tabs(updated_argument).strip())

    def store_return_type(self, data_line, line_source, definition):
        if not definition.is_function or definition.return_type:
            return False

        returns_match = RETURNS_MATCHER.match(data_line)
        if not returns_match:
            return False

        data_type, _ = split_inline_comment(returns_match.group('DataType').strip())
        if not data_type:
            # The data type is on the next line
            next_line = line_source.read_line()
            data_type, _ = split_inline_comment((next_line or '').strip())

        data_type = TRAILING_AS_MATCHER.sub('', data_type)
        definition.return_type = self.rewrite_rules.normalize_data_type(
            self.rewrite_rules.apply_literal_rewrites(data_type)).strip()
        return True

if __name__ == "__main__":
    print("This script is not meant to be run directly")

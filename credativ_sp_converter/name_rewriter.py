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
from credativ_sp_converter.rewrite_rules import is_comment_only

BLOCK_KEYWORD_MATCHER = re.compile(r'^\s*(?:Begin|End|If|Else)\b', re.IGNORECASE)

class NameRewriter:
    """
    Renames tables and columns in a converted procedure body, using the name map.

    Each line that references a known table is expanded to the surrounding
    block of lines (stopping at blank lines, Begin/End/If/Else lines, and at
    changes between comment lines and code lines). Column names are only
    renamed for the tables referenced in that block. Blocks never overlap.
    """

    def __init__(self, config_parser, name_map):
        self.config_parser = config_parser
        self.name_map = name_map
        self.target_schema = self.config_parser.get_target_schema()
        self.minimum_column_name_length = self.config_parser.get_minimum_column_name_length()
        self.table_matcher = self.build_table_matcher()
        self.column_matchers = {}

    def build_table_matcher(self):
        if self.name_map is None or self.name_map.is_empty():
            return None

        schema_names = {'dbo', self.target_schema.lower()}
        schema_names.update(schema.lower() for schema, _ in self.name_map.tables.values() if schema)
        schema_pattern = '|'.join(re.escape(name) for name in sorted(schema_names, key=len, reverse=True))
        table_pattern = '|'.join(re.escape(name) for name in self.name_map.table_names())

        return re.compile(
            r'(?<![\w.@#\]])(?:\[?(?:' + schema_pattern + r')\]?\.)?\[?(?P<TableName>' + table_pattern + r')\]?(?!\w)',
            re.IGNORECASE)

    def get_column_matchers(self, new_table):
        if new_table.lower() not in self.column_matchers:
            matchers = []
            for source_column, new_column in self.name_map.get_columns(new_table).values():
                if len(source_column) < self.minimum_column_name_length or source_column == new_column:
                    continue
                matchers.append((re.compile(r'(?<![\w@])' + re.escape(source_column) + r'(?!\w)', re.IGNORECASE), new_column))
            self.column_matchers[new_table.lower()] = matchers
        return self.column_matchers[new_table.lower()]

    def references_table(self, data_line):
        return self.table_matcher.search(data_line) is not None

    def is_block_boundary(self, data_line, in_comment_block):
        if not data_line.strip():
            return True
        if is_comment_only(data_line) != in_comment_block:
            return True
        return not in_comment_block and BLOCK_KEYWORD_MATCHER.match(data_line) is not None

    def rewrite(self, body):
        """Rename tables and columns in place; returns the list for convenience"""
        if self.table_matcher is None:
            return body

        high_water_mark = -1
        index = 0
        while index < len(body):
            if not self.references_table(body[index]):
                index += 1
                continue

            in_comment_block = is_comment_only(body[index])

            start_index = index
            while start_index - 1 > high_water_mark and not self.is_block_boundary(body[start_index - 1], in_comment_block):
                start_index -= 1

            end_index = index
            while end_index + 1 < len(body) and not self.is_block_boundary(body[end_index + 1], in_comment_block):
                end_index += 1

            self.rewrite_block(body, start_index, end_index)
            high_water_mark = end_index
            index = end_index + 1

        return body

    def rewrite_block(self, body, start_index, end_index):
        referenced_tables = []

        def table_replacer(match):
            schema, new_table = self.name_map.get_table(match.group('TableName'))
            if new_table not in referenced_tables:
                referenced_tables.append(new_table)
            if schema and schema.lower() != self.target_schema.lower():
                return f"{schema}.{new_table}"
            return new_table

        for index in range(start_index, end_index + 1):
            body[index] = self.table_matcher.sub(table_replacer, body[index])

        for new_table in referenced_tables:
            for matcher, new_column in self.get_column_matchers(new_table):
                for index in range(start_index, end_index + 1):
                    body[index] = matcher.sub(lambda match: new_column, body[index])

        if self.config_parser.is_verbose():
            self.config_parser.print_log_message('DEBUG', "Updated block:\n" + '\n'.join(body[start_index:end_index + 1]))

if __name__ == "__main__":
    print("This script is not meant to be run directly")

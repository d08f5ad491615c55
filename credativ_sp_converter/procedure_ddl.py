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
from credativ_sp_converter.constants import ConverterConstants
from credativ_sp_converter.rewrite_rules import to_snake_case

AUTHOR_LABEL_MATCHER = re.compile(r'^\*\*\s+Auth:', re.IGNORECASE)

UDF_PREFIX_MATCHER = re.compile(r'^udf(?=[A-Z_])')

COMMENT_BLOCK_START = '/****************************************************'
COMMENT_BLOCK_END = '*****************************************************/'

class ProcedureDefinition:
    """
    One stored procedure or function, accumulated line by line while reading
    the SQL Server source, then written out as PostgreSQL DDL
    """

    def __init__(self, name='', original_name='', is_function=False):
        self.arguments = []
        self.argument_comments = []
        self.local_variables = []
        self.comment_block = []
        self.body = []
        self.reset(name, original_name, is_function)

    def reset(self, name='', original_name='', is_function=False, skip=False):
        self.name = name
        self.original_name = original_name
        self.is_function = is_function
        self.return_type = ''
        self.skip = skip

        self.arguments.clear()
        self.argument_comments.clear()
        self.local_variables.clear()
        self.comment_block.clear()
        self.body.clear()

    def get_object_type(self):
        return 'FUNCTION' if self.is_function else 'PROCEDURE'

    def has_body(self):
        return any(line.strip() for line in self.body)

    def get_postgres_name(self, snake_case=False):
        if not snake_case:
            return self.name

        schema, separator, object_name = self.name.rpartition('.')
        object_name = UDF_PREFIX_MATCHER.sub('', object_name.strip('[]"')).lstrip('_')
        return f"{schema}{separator}{to_snake_case(object_name)}"

    def get_argument_comment_lines(self):
        width = max(len(name) for name, _ in self.argument_comments)
        lines = ['**  Arguments:']
        for name, comment in self.argument_comments:
            lines.append(f"**    {name.ljust(width)}  {comment}".rstrip())
        return lines

    def get_comment_block(self):
        comment_block = list(self.comment_block)
        if not self.argument_comments:
            return comment_block

        argument_lines = self.get_argument_comment_lines()

        # Preferred location: just after the Auth: line
        for index, line in enumerate(comment_block):
            if AUTHOR_LABEL_MATCHER.match(line):
                comment_block[index + 1:index + 1] = ['**'] + argument_lines + ['**']
                return comment_block

        # Next choice: at the end of the comment block, before the closing delimiter
        if comment_block and comment_block[-1].rstrip().endswith('*/'):
            closing_index = len(comment_block) - 1
            lines_to_add = argument_lines + ['**']
            if closing_index == 0 or comment_block[closing_index - 1].strip() != '**':
                lines_to_add = ['**'] + lines_to_add
            comment_block[closing_index:closing_index] = lines_to_add
            return comment_block

        # No comment block to use; add a new one
        comment_block.extend([COMMENT_BLOCK_START, '**'] + argument_lines + ['**', COMMENT_BLOCK_END])
        return comment_block

    def get_local_variable_declarations(self):
        row_count_variable = '_' + ConverterConstants.get_row_count_variable_name()
        declarations = []
        for item in self.local_variables:
            variable_name = item.split()[0] if item.split() else item
            if variable_name.lower() == row_count_variable.lower():
                # Always initialize the row count variable
                declarations.append(f"{variable_name} int := 0")
            else:
                declarations.append(item)
        return declarations

    def get_body_lines(self):
        start = 0
        end = len(self.body)
        while start < end and not self.body[start].strip():
            start += 1
        while end > start and not self.body[end - 1].strip():
            end -= 1
        return self.body[start:end]

    def to_postgres_lines(self, snake_case=False, indent=ConverterConstants.get_default_indent()):
        if not self.name or not self.has_body():
            return []

        object_type = self.get_object_type()
        postgres_name = self.get_postgres_name(snake_case)

        lines = []
        create_statement = f"CREATE OR REPLACE {object_type} {postgres_name}"
        if not self.arguments:
            lines.append(create_statement + "()")
        else:
            lines.append(create_statement)
            lines.append("(")
            lines.extend(indent + item for item in self.arguments)
            lines.append(")")

        if self.is_function:
            lines.append(f"RETURNS {self.return_type or 'void'}")

        lines.append("LANGUAGE plpgsql")
        lines.append("AS $$")
        lines.extend(self.get_comment_block())

        local_variables = self.get_local_variable_declarations()
        if local_variables:
            lines.append("DECLARE")
            lines.extend(f"{indent}{item};" for item in local_variables)

        lines.append("BEGIN")
        lines.extend(self.get_body_lines())
        lines.append("END")
        lines.append("$$;")
        lines.append("")

        original_name = self.original_name.replace("'", "''")
        lines.append(f"COMMENT ON {object_type} {postgres_name} IS '{original_name}';")
        return lines

    def to_writer_for_postgres(self, writer, snake_case=False, indent=ConverterConstants.get_default_indent()):
        """Write the DDL for this procedure; returns False if there was nothing to write"""
        lines = self.to_postgres_lines(snake_case, indent)
        if not lines:
            return False

        writer.write('\n'.join(lines))
        writer.write('\n\n')
        return True

if __name__ == "__main__":
    print("This script is not meant to be run directly")

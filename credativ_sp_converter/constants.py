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

class ConverterConstants:
    @staticmethod
    def get_version():
        return '0.3.0'

    @staticmethod
    def get_full_name():
        return 'SQL Server stored procedure converter credativ-sp-converter'

    @staticmethod
    def get_message_levels():
        return ['ERROR', 'WARNING', 'INFO', 'DEBUG']

    @staticmethod
    def get_default_name():
        return 'converter'

    @staticmethod
    def get_default_log():
        return f'./{ConverterConstants.get_default_name()}.log'

    @staticmethod
    def get_default_schema():
        return 'public'

    @staticmethod
    def get_default_output_suffix():
        return '_postgres.sql'

    @staticmethod
    def get_default_indent():
        return '    '

    @staticmethod
    def get_default_varchar_to_text_length():
        # varchar(10) and longer become text
        return 10

    @staticmethod
    def get_default_minimum_column_name_length():
        return 4

    @staticmethod
    def get_error_variable_name():
        # Holds @@error in SQL Server code; PL/pgSQL raises exceptions instead
        return 'myError'

    @staticmethod
    def get_row_count_variable_name():
        return 'myRowCount'

    @staticmethod
    def get_case_sensitive_exec_target():
        return 'sp_executesql'

    @staticmethod
    def get_default_function_name_rewrites():
        return [
            ['dbo.udfTimeStampTextImmutable(', 'public.timestamp_text_immutable('],
            ['dbo.udfTimeStampText(', 'public.timestamp_text('],
            ['dbo.udfCombinePaths(', 'public.combine_paths('],
            ['dbo.udfGetFilename(', 'public.get_filename('],
            ['dbo.udfParseDelimitedIntegerList(', 'public.parse_delimited_integer_list('],
            ['dbo.udfParseDelimitedList(', 'public.parse_delimited_list('],
            ['dbo.AppendToText(', 'public.append_to_text('],
        ]

if __name__ == "__main__":
    print("This script is not meant to be run directly")

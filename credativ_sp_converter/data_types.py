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
from sqlglot import exp
from sqlglot.errors import SqlglotError

# Matches varchar(10), nvarchar(256), varchar(max) ...
VARCHAR_MATCHER = re.compile(r'\bn?varchar\s*\(\s*(?P<length>\d+|max)\s*\)', re.IGNORECASE)

NARROW_INT_MATCHER = re.compile(r'\b(?:tinyint|smallint)\b', re.IGNORECASE)

def varchar_to_text(text, minimum_length):
    """Change varchar(n) with n >= minimum_length, and varchar(max), to text"""
    def replacer(match):
        length = match.group('length')
        if length.lower() == 'max' or int(length) >= minimum_length:
            return 'text'
        return match.group(0)
    return VARCHAR_MATCHER.sub(replacer, text)

def normalize_int_types(text):
    return NARROW_INT_MATCHER.sub('int', text)

def convert_data_type(data_type, minimum_length):
    """
    Map a SQL Server data type (as used in Convert(DataType, @Variable)) to the
    PostgreSQL spelling. Types sqlglot cannot parse are returned unchanged.
    """
    data_type = normalize_int_types(varchar_to_text(data_type.strip(), minimum_length))
    try:
        return exp.DataType.build(data_type, dialect='tsql').sql(dialect='postgres').lower()
    except (SqlglotError, ValueError):
        return data_type

if __name__ == "__main__":
    print("This script is not meant to be run directly")

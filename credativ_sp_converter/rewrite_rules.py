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
from credativ_sp_converter.data_types import varchar_to_text, normalize_int_types, convert_data_type, NARROW_INT_MATCHER

# Ordered literal rewrites applied to every body line.
# Order matters: later entries may see the output of earlier ones.
LITERAL_REWRITES = [
    ('isnull_to_coalesce', re.compile(r'\bIsNull\s*\(', re.IGNORECASE), 'Coalesce('),
    ('datetime_to_timestamp', re.compile(r'\b(?:small)?datetime\b', re.IGNORECASE), 'timestamp'),
    ('getdate_to_current_timestamp', re.compile(r'\bGetDate\s*\(\s*\)', re.IGNORECASE), 'CURRENT_TIMESTAMP'),
    ('narrow_int_to_int', NARROW_INT_MATCHER, 'int'),
    ('suser_sname_to_session_user', re.compile(r'\bSUSER_SNAME\s*\(\s*\)', re.IGNORECASE), 'SESSION_USER'),
]

LEADING_WHITESPACE_MATCHER = re.compile(r'^\s*')

# Quoted text followed by a plus sign (including '' +)
CONCATENATION_AFTER_TEXT_MATCHER = re.compile(r"('[^']*'\s*)\+")

# Plus sign followed by quoted text (including + '')
CONCATENATION_BEFORE_TEXT_MATCHER = re.compile(r"\+(?=\s*'[^']*')")

LEN_FUNCTION_MATCHER = re.compile(r'\bLen\s*\(', re.IGNORECASE)

CHARINDEX_FUNCTION_MATCHER = re.compile(
    r"\bCharIndex\s*\(\s*(?P<TextToFind>'(?:[^']|'')*'|[^,)]+?)\s*,\s*(?P<TextToSearch>'(?:[^']|'')*'|[^)]+?)\s*\)",
    re.IGNORECASE)

# Convert(DataType, _Variable), after the variable prefix has been updated
CONVERT_FUNCTION_MATCHER = re.compile(
    r'\bConvert\s*\(\s*(?P<DataType>[^,]+?)\s*,\s*[@_](?P<VariableName>\w+)\s*\)',
    re.IGNORECASE)

TRAILING_TERMINATORS_MATCHER = re.compile(r';(?:\s*;)+(?P<Trailing>\s*)$')

SNAKE_CASE_ACRONYM_MATCHER = re.compile(r'([A-Z]+)([A-Z][a-z])')
SNAKE_CASE_WORD_MATCHER = re.compile(r'([a-z\d])([A-Z])')

def get_leading_whitespace(data_line):
    return LEADING_WHITESPACE_MATCHER.match(data_line).group(0)

def replace_tabs(data_line):
    return data_line.replace('\t', '    ').rstrip()

def split_inline_comment(text):
    """Split text into (code, comment); the comment keeps its leading --"""
    in_quotes = False
    for index, char in enumerate(text):
        if char == "'":
            in_quotes = not in_quotes
        elif not in_quotes and text.startswith('--', index):
            return text[:index].rstrip(), text[index:]
    return text, ''

def split_top_level_commas(text):
    """Split on commas that are not inside parentheses or quoted text"""
    items = []
    depth = 0
    in_quotes = False
    current = ''
    for char in text:
        if char == "'":
            in_quotes = not in_quotes
        elif not in_quotes and char == '(':
            depth += 1
        elif not in_quotes and char == ')':
            depth -= 1
        elif not in_quotes and depth == 0 and char == ',':
            items.append(current)
            current = ''
            continue
        current += char
    items.append(current)
    return items

def find_top_level_keyword(text, matcher):
    """Position of the first match of matcher outside parentheses and quoted text, or -1"""
    depth = 0
    in_quotes = False
    for index, char in enumerate(text):
        if char == "'":
            in_quotes = not in_quotes
        elif in_quotes:
            continue
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
        elif depth == 0 and matcher.match(text, index):
            return index
    return -1

def is_comment_only(data_line):
    return data_line.strip().startswith('--')

def collapse_terminators(data_line):
    return TRAILING_TERMINATORS_MATCHER.sub(r';\g<Trailing>', data_line)

def add_terminator(data_line):
    """Append a semicolon (before any trailing comment) unless one is present"""
    code, comment = split_inline_comment(data_line)
    if not code.strip():
        return data_line
    if not code.endswith(';'):
        code += ';'
    return f"{code} {comment}" if comment else code

def to_snake_case(name):
    name = SNAKE_CASE_ACRONYM_MATCHER.sub(r'\1_\2', name)
    name = SNAKE_CASE_WORD_MATCHER.sub(r'\1_\2', name)
    return name.lower()

class RewriteRules:
    def __init__(self, config_parser):
        self.config_parser = config_parser
        self.varchar_to_text_length = self.config_parser.get_varchar_to_text_length()
        self.function_name_rewrites = [
            (source, re.compile(re.escape(source), re.IGNORECASE), target)
            for source, target in self.config_parser.get_function_name_rewrites()
        ]

    def apply_literal_rewrites(self, data_line):
        for _, pattern, replacement in LITERAL_REWRITES:
            data_line = pattern.sub(replacement, data_line)
        for _, pattern, replacement in self.function_name_rewrites:
            data_line = pattern.sub(lambda match: replacement, data_line)
        return data_line

    def update_variable_prefix(self, text):
        return text.replace('@', '_')

    def update_concatenation_operator(self, text):
        text = CONCATENATION_AFTER_TEXT_MATCHER.sub(r'\1||', text)
        return CONCATENATION_BEFORE_TEXT_MATCHER.sub('||', text)

    def update_function_names(self, text):
        text = LEN_FUNCTION_MATCHER.sub('char_length(', text)

        text = CHARINDEX_FUNCTION_MATCHER.sub(
            lambda match: f"position({match.group('TextToFind')} in {match.group('TextToSearch')})", text)

        def convert_replacer(match):
            data_type = convert_data_type(match.group('DataType'), self.varchar_to_text_length)
            return f"_{match.group('VariableName')}::{data_type}"
        text = CONVERT_FUNCTION_MATCHER.sub(convert_replacer, text)

        if re.search(r'\bConvert\s*\(', text, re.IGNORECASE):
            self.config_parser.print_log_message('DEBUG', f"Check this code (Convert not translated): {text.strip()}")

        return text

    def varchar_to_text(self, text):
        return varchar_to_text(text, self.varchar_to_text_length)

    def normalize_data_type(self, text):
        return normalize_int_types(self.varchar_to_text(self.update_variable_prefix(text)))

    def rewrite_expression(self, text):
        # Fixed order: variables, concatenation, function names, varchar
        text = self.update_variable_prefix(text)
        text = self.update_concatenation_operator(text)
        text = self.update_function_names(text)
        return self.varchar_to_text(text)

if __name__ == "__main__":
    print("This script is not meant to be run directly")

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

import os
import pandas as pd

NAME_MAP_COLUMNS = ['SourceTable', 'SourceName', 'Schema', 'NewTable', 'NewName']

class NameMap:
    """
    Table and column renames, as produced by sqlserver2pgsql.pl

    tables:  lower(source table) -> (schema, new table name)
    columns: lower(new table name) -> {lower(source column) -> (source column, new column)}
    """

    def __init__(self):
        self.tables = {}
        self.columns = {}

    def add_entry(self, source_table, source_column, schema, new_table, new_column):
        if not source_table or not new_table:
            return
        self.tables.setdefault(source_table.lower(), (schema, new_table))
        if source_column and new_column:
            self.columns.setdefault(new_table.lower(), {})[source_column.lower()] = (source_column, new_column)

    def is_empty(self):
        return not self.tables

    def get_table(self, source_table):
        return self.tables.get(source_table.lower(), None)

    def get_columns(self, new_table):
        return self.columns.get(new_table.lower(), {})

    def table_names(self):
        # Longest names first, so that T_Log is never matched inside T_Log_Entries
        return sorted(self.tables.keys(), key=len, reverse=True)

def load_name_map(map_file, config_parser):
    if not os.path.exists(map_file):
        raise FileNotFoundError(f"Name map file not found: {map_file}")

    config_parser.print_log_message('INFO', f"Loading name map from {map_file}")
    data = pd.read_csv(map_file, sep='\t', dtype=str, keep_default_na=False)

    missing_columns = [column for column in NAME_MAP_COLUMNS if column not in data.columns]
    if missing_columns:
        raise ValueError(f"Name map file {map_file} is missing columns: {', '.join(missing_columns)}")

    name_map = NameMap()
    for row in data[NAME_MAP_COLUMNS].itertuples(index=False):
        name_map.add_entry(row.SourceTable.strip(), row.SourceName.strip(), row.Schema.strip(),
                           row.NewTable.strip(), row.NewName.strip())

    config_parser.print_log_message('DEBUG', f"Name map: {len(name_map.tables)} tables, {sum(len(c) for c in name_map.columns.values())} columns")
    return name_map

if __name__ == "__main__":
    print("This script is not meant to be run directly")

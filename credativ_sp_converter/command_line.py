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

import argparse
from credativ_sp_converter.constants import ConverterConstants

class CommandLine:
    def __init__(self):
        self.parser = argparse.ArgumentParser(
            description=f"""{ConverterConstants.get_full_name()}, version: {ConverterConstants.get_version()}.
            Converts SQL Server stored procedures and functions to PostgreSQL PL/pgSQL.
            The converted procedures will typically need additional manual adjustments to become usable.""")
        self.args = None
        self.setup_arguments()

    def setup_arguments(self):
        self.parser.add_argument(
            'input_file',
            nargs='?',
            help='File with SQL Server stored procedures to convert')

        self.parser.add_argument(
            '-o', '--output',
            type=str,
            help=f'Output file path (default: input file name with suffix {ConverterConstants.get_default_output_suffix()})')

        self.parser.add_argument(
            '--schema',
            type=str,
            help=f'Schema to use for stored procedures (default: {ConverterConstants.get_default_schema()})')

        self.parser.add_argument(
            '-m', '--map',
            type=str,
            help='Column name map file (typically created by sqlserver2pgsql.pl); tab-delimited file with five columns: '
                 'SourceTable  SourceName  Schema  NewTable  NewName')

        self.parser.add_argument(
            '--snake-case',
            action='store_true',
            help='Convert procedure and function names to snake_case')

        self.parser.add_argument(
            '--skip-list',
            type=str,
            help='Comma separated list of stored procedure names to skip while converting the source file')

        self.parser.add_argument(
            '-v', '--verbose',
            action='store_true',
            help='Log the code blocks updated by the name map')

        self.parser.add_argument(
            '--config',
            type=str,
            help='Path/name of an optional YAML configuration file')

        self.parser.add_argument(
            '--log-file',
            type=str,
            default=None,
            help=f'Path/name of the log file (default: log_file from the config file, or {ConverterConstants.get_default_log()})')

        self.parser.add_argument(
            '--log-level',
            default=None,
            choices=['INFO', 'DEBUG'],
            help="Set the logging level")

        self.parser.add_argument(
            '--version',
            action='store_true',
            help='Show the version of the tool')

    def parse_arguments(self, argv=None):
        self.args = self.parser.parse_args(argv)
        return self.args

    def print_all(self, logger):
        logger.info("Command line parameters:")
        logger.info("input_file = {}".format(self.args.input_file))
        logger.info("output     = {}".format(self.args.output))
        logger.info("config     = {}".format(self.args.config))
        logger.info("log        = {}".format(self.args.log_file))

if __name__ == "__main__":
    print("This script is not meant to be run directly")

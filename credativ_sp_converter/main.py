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
import sys
from credativ_sp_converter.command_line import CommandLine
from credativ_sp_converter.config_parser import ConfigParser
from credativ_sp_converter.constants import ConverterConstants
from credativ_sp_converter.converter import StoredProcedureConverter
from credativ_sp_converter.converter_logging import ConverterLogger
from credativ_sp_converter.name_map import load_name_map

def main(argv=None):
    cmd = CommandLine()
    args = cmd.parse_arguments(argv)

    # Check if the version flag is set
    if args.version:
        print(f"Version: {ConverterConstants.get_version()}")
        return 0

    logger = ConverterLogger()
    exit_code = 1

    try:
        config_parser = ConfigParser(args, logger.logger)

        # Delete the log file if it exists
        log_file = config_parser.get_log_file()
        if os.path.exists(log_file):
            os.remove(log_file)
        logger.add_file_handler(log_file)

        logger.logger.info(ConverterConstants.get_full_name())

        cmd.print_all(logger.logger)
        config_parser.print_all()

        if config_parser.get_log_level() == 'DEBUG':
            logger.logger.debug(f"Parsed configuration: {config_parser.config}")

        name_map = None
        if config_parser.get_map_file():
            try:
                name_map = load_name_map(config_parser.get_map_file(), config_parser)
            except (FileNotFoundError, ValueError) as e:
                config_parser.print_log_message('ERROR', f"Unable to load the name map: {e}")
                return exit_code

        converter = StoredProcedureConverter(config_parser, name_map)
        if converter.convert_file():
            logger.logger.info("Processing complete")
            exit_code = 0
        else:
            logger.logger.warning("Processing error")

    except Exception as e:
        logger.logger.error(f"An error in the main: {e}")

    finally:
        logger.stop_logging()

    return exit_code

if __name__ == "__main__":
    sys.exit(main())

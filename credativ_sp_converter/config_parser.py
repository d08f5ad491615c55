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

import yaml
from credativ_sp_converter.constants import ConverterConstants
import os
import traceback

class ConfigParser:
    def __init__(self, args, logger):
        self.args = args
        self.logger = logger
        self.config = self.load_config(getattr(args, 'config', None))
        self.apply_command_line()
        self.validate_config()

    def load_config(self, config_file):
        """Load the optional YAML configuration file."""
        if not config_file:
            return {}
        self.print_log_message('INFO', f"Loading configuration from {config_file}")
        with open(config_file, 'r') as file:
            config = yaml.safe_load(file)
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(f"Configuration file {config_file} must contain a mapping of settings")
        return config

    def apply_command_line(self):
        ## Command line values win over the config file
        overrides = {
            'input_file': getattr(self.args, 'input_file', None),
            'output_file': getattr(self.args, 'output', None),
            'schema': getattr(self.args, 'schema', None),
            'map_file': getattr(self.args, 'map', None),
            'skip_list': getattr(self.args, 'skip_list', None),
            'log_level': getattr(self.args, 'log_level', None),
        }
        for key, value in overrides.items():
            if value:
                self.config[key] = value

        if getattr(self.args, 'snake_case', False):
            self.config['snake_case'] = True
        if getattr(self.args, 'verbose', False):
            self.config['verbose'] = True

    def validate_config(self):
        if not self.get_input_file():
            raise ValueError("Input file is required - use the positional argument or input_file in the config file")

        log_level = str(self.config.get('log_level', 'INFO')).upper()
        if log_level not in ConverterConstants.get_message_levels():
            raise ValueError(f"Invalid log_level: {log_level}. Must be one of {ConverterConstants.get_message_levels()}")

        for setting in ('varchar_to_text_length', 'minimum_column_name_length'):
            value = self.config.get(setting, None)
            if value is not None:
                try:
                    int(value)
                except (TypeError, ValueError):
                    raise ValueError(f"Invalid {setting} in the config file: {value}. Must be an integer.")

        function_name_rewrites = self.config.get('function_name_rewrites', None)
        if function_name_rewrites is not None:
            for entry in function_name_rewrites:
                if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                    raise ValueError("Each entry in function_name_rewrites must have 2 elements - [source_text, target_text].")

        return True

    ## Files
    def get_input_file(self):
        return self.config.get('input_file', None)

    def get_output_file(self):
        output_file = self.config.get('output_file', None)
        if output_file:
            return output_file
        return self.get_default_output_file(self.get_input_file())

    def get_default_output_file(self, input_file):
        directory, file_name = os.path.split(input_file)
        base_name = os.path.splitext(file_name)[0]
        new_file_name = base_name + ConverterConstants.get_default_output_suffix()
        return os.path.join(directory, new_file_name) if directory else new_file_name

    def get_map_file(self):
        return self.config.get('map_file', None)

    def get_log_file(self):
        return getattr(self.args, 'log_file', None) or self.config.get('log_file', ConverterConstants.get_default_log())

    def get_log_level(self):
        if self.is_verbose():
            return 'DEBUG'
        return str(self.config.get('log_level', 'INFO')).upper()

    ## Conversion settings
    def get_target_schema(self):
        return self.config.get('schema', None) or ConverterConstants.get_default_schema()

    def should_convert_to_snake_case(self):
        return bool(self.config.get('snake_case', False))

    def is_verbose(self):
        return bool(self.config.get('verbose', False))

    def get_skip_list(self):
        skip_list = self.config.get('skip_list', None)
        if not skip_list:
            return []
        if isinstance(skip_list, str):
            skip_list = skip_list.split(',')
        return [name.strip() for name in skip_list if str(name).strip()]

    def should_skip_procedure(self, procedure_name):
        names_to_skip = [name.lower() for name in self.get_skip_list()]
        return procedure_name.lower() in names_to_skip

    def get_varchar_to_text_length(self):
        value = self.config.get('varchar_to_text_length', None)
        if value is None:
            return ConverterConstants.get_default_varchar_to_text_length()
        return int(value)

    def get_minimum_column_name_length(self):
        value = self.config.get('minimum_column_name_length', None)
        if value is None:
            return ConverterConstants.get_default_minimum_column_name_length()
        return int(value)

    def get_function_name_rewrites(self):
        rewrites = self.config.get('function_name_rewrites', None)
        if rewrites is None:
            return ConverterConstants.get_default_function_name_rewrites()
        # Entries from the config file run before the built-in ones
        return [list(entry) for entry in rewrites] + ConverterConstants.get_default_function_name_rewrites()

    def get_indent(self):
        return self.config.get('indent', ConverterConstants.get_default_indent())

    ## Event sink
    def print_log_message(self, message_level, message, exception=None):
        message_level = message_level.upper()
        if message_level == 'ERROR':
            self.logger.error(message)
            if exception is not None:
                self.logger.error(''.join(traceback.format_exception(type(exception), exception, exception.__traceback__)))
            return
        if message_level not in ConverterConstants.get_message_levels():
            raise ValueError(f"Invalid message_level: {message_level}. Must be one of {ConverterConstants.get_message_levels()}")
        current_log_level = self.get_log_level() if hasattr(self, 'config') else 'INFO'
        if ConverterConstants.get_message_levels().index(message_level) <= ConverterConstants.get_message_levels().index(current_log_level):
            if message_level == 'DEBUG':
                self.logger.debug(message)
            elif message_level == 'WARNING':
                self.logger.warning(message)
            else:
                self.logger.info(message)

    def print_all(self):
        self.print_log_message('INFO', "Options:")
        self.print_log_message('INFO', f"  Input file with stored procedures: {self.get_input_file()}")
        self.print_log_message('INFO', f"  Output file path:                  {self.get_output_file()}")
        self.print_log_message('INFO', f"  Schema name:                       {self.get_target_schema()}")
        if self.get_map_file():
            self.print_log_message('INFO', f"  Name map file:                     {self.get_map_file()}")
        if self.should_convert_to_snake_case():
            self.print_log_message('INFO', "  Convert names to snake_case:      True")
        if self.get_skip_list():
            self.print_log_message('INFO', f"  Procedures to skip:                {', '.join(self.get_skip_list())}")

if __name__ == "__main__":
    print("This script is not meant to be run directly")

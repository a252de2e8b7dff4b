import configparser
import logging
import os

import file_utils
from default import DEFAULT

LOGGER = logging.getLogger(__name__)


class Config:
    def __init__(self, config_dir=None):
        self.config_dir = config_dir or str(file_utils.data_path("config.ini").parent)
        self.config = self.load_config()
        self.trades_directory = self.get_string('general', 'trades_directory', DEFAULT.trades_directory)
        self.trades_file_pattern = self.get_string('general', 'trades_file_pattern', DEFAULT.trades_file_pattern)
        self.merge_exports = self.get_bool('general', 'merge_exports', DEFAULT.merge_exports)
        self.log_level = self.get_string('general', 'log_level', DEFAULT.log_level).upper()
        self.combination_limit = self.get_int('analytics', 'combination_limit', DEFAULT.combination_limit)
        self.combination_separator = self.get_string('analytics', 'combination_separator', DEFAULT.combination_separator)
        self.unknown_label = self.get_string('analytics', 'unknown_label', DEFAULT.unknown_label)
        self.rules_profile_dir = self.get_string('rules', 'profile_dir', DEFAULT.rules_profile_dir)
        self.rules_default_profile = self.get_string('rules', 'default_profile', DEFAULT.rules_default_profile)

    def load_config(self, config_base_name="config"):
        config = configparser.ConfigParser(interpolation=None)

        default_config_path = os.path.join(self.config_dir, f"{config_base_name}.ini")
        config.read(default_config_path)

        env = os.environ.get("CONFIG_ENV")
        if env:
            env_config_path = os.path.join(self.config_dir, f"{config_base_name}.{env}.ini")
            if os.path.exists(env_config_path):
                config.read(env_config_path)
                LOGGER.info("Loaded configuration for environment: %s", env)
            else:
                LOGGER.warning("Environment '%s' specified, but config file '%s' not found. Using default.", env, env_config_path)
        else:
            LOGGER.debug("Using default configuration.")

        return config

    def get_bool(self, section, option, default=False):
        """Safely retrieves a boolean value from the configuration."""
        try:
            value_str = self.config.get(section, option)
            if value_str.lower() in ('true', 'yes', 'on', '1'):
                return True
            elif value_str.lower() in ('false', 'no', 'off', '0'):
                return False
            else:
                LOGGER.warning("Invalid boolean value '%s' for '%s.%s'. Using default: %s", value_str, section, option, default)
                return default
        except (configparser.NoSectionError, configparser.NoOptionError):
            LOGGER.warning("Option '%s' not found in section '%s'. Using default: %s", option, section, default)
            return default

    def get_int(self, section, option, default=0):
        try:
            return self.config.getint(section, option)
        except (configparser.NoSectionError, configparser.NoOptionError):
            LOGGER.warning("Option '%s' not found in section '%s'. Using default: %s", option, section, default)
            return default
        except ValueError:
            LOGGER.warning("Invalid integer for '%s.%s'. Using default: %s", section, option, default)
            return default

    def get_string(self, section, option, default=""):
        try:
            value = self.config.get(section, option)
        except (configparser.NoSectionError, configparser.NoOptionError):
            LOGGER.warning("Option '%s' not found in section '%s'. Using default: %s", option, section, default)
            return default
        # ini files strip surrounding whitespace, so quoted values keep it
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        return value

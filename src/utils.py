import os
import copy
import logging
import logging.handlers
import yaml
from pathlib import Path
from typing import Dict, Any, Union
from dotenv import load_dotenv

from system_tools.versioning import VersionLedger, create_version_ledger


DEFAULT_CONFIG_FILENAME = 'verledger.yaml'


def load_config(config_path: str = DEFAULT_CONFIG_FILENAME) -> Dict[str, Any]:
    """Load configuration from YAML file with environment variable overrides."""
    # Load environment variables
    load_dotenv()
    
    config = get_default_config()
    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f) or {}
            if isinstance(user_config, dict):
                config = merge_config(config, user_config)
            else:
                logging.warning(f"Ignoring config {config_path}: top level must be a mapping")
    except (OSError, yaml.YAMLError) as e:
        logging.warning(f"Could not load config from {config_path}: {e}")
        config = get_default_config()
    
    # Override with environment variables
    config = apply_env_overrides(config)
    
    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration values."""
    return {
        'versioning': {
            'manifest': 'package.json',
            'log_file': '.version-log.json',
            'reference_files': {
                'package.json': 'json_manifest',
                'README.md': 'free_text'
            }
        },
        'logging': {
            'level': 'INFO',
            'log_to_file': False,
            'log_filename': 'verledger.log',
            'rotate_logs': True,
            'logs_dir': 'logs'
        }
    }


def merge_config(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge user configuration over the defaults, one section at a time."""
    merged = copy.deepcopy(defaults)
    for section, values in overrides.items():
        if isinstance(merged.get(section), dict):
            if isinstance(values, dict):
                merged[section].update(values)
            else:
                logging.warning(f"Ignoring config section '{section}': expected a mapping")
        else:
            merged[section] = values
    return merged


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration."""
    env_mappings = {
        'VERSION_MANIFEST': ('versioning', 'manifest', str),
        'VERSION_LOG_FILE': ('versioning', 'log_file', str),
        'LOG_LEVEL': ('logging', 'level', str),
        'LOG_TO_FILE': ('logging', 'log_to_file', _parse_bool),
        'DEBUG_MODE': ('logging', 'level', lambda x: 'DEBUG' if _parse_bool(x) else config['logging']['level'])
    }
    
    for env_var, (section, key, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                converted_value = converter(value)
                config.setdefault(section, {})[key] = converted_value
            except (ValueError, TypeError) as e:
                logging.warning(f"Invalid value for {env_var}: {value} - {e}")
    
    return config


def setup_logging(logging_config: Dict[str, Any]) -> logging.Logger:
    """Setup logging configuration."""
    level = getattr(logging, str(logging_config.get('level', 'INFO')).upper(), logging.INFO)
    
    # Configure logging
    logger = logging.getLogger()
    logger.setLevel(level)
    
    # Clear existing handlers
    logger.handlers.clear()
    
    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    
    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    
    # File handler
    if logging_config.get('log_to_file', False):
        logs_dir = logging_config.get('logs_dir', 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        log_filename = os.path.join(logs_dir, logging_config.get('log_filename', 'verledger.log'))
        
        if logging_config.get('rotate_logs', True):
            # Rotating file handler
            file_handler = logging.handlers.RotatingFileHandler(
                log_filename,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
        else:
            # Regular file handler
            file_handler = logging.FileHandler(log_filename, encoding='utf-8')
            
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    return logger


def build_ledger(project_root: Union[str, Path], config: Dict[str, Any]) -> VersionLedger:
    """Create a VersionLedger for project_root from the versioning config section."""
    versioning = config.get('versioning', {})
    return create_version_ledger(
        project_root,
        manifest=versioning.get('manifest', 'package.json'),
        log_file=versioning.get('log_file', '.version-log.json'),
        reference_files=versioning.get('reference_files')
    )

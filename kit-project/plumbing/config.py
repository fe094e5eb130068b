# What it does: Manages all read/write operations for the `.kit/config` file
# What data structure it uses: Map / Hash Table / Dictionary (the INI file format is a map of sections to key-value pairs, managed by Python's `configparser`)

import configparser
import os
from .errors import NotFoundError
from .repository import find_repo_root

def get_config_path(repo_root):  # Returns the path to the config file within the repository
    return os.path.join(repo_root, '.kit', 'config')

def read_config(repo_root=None): # Reads and returns the configuration as a ConfigParser object
    repo_root = repo_root or find_repo_root()
    config = configparser.ConfigParser()
    if not repo_root:
        return config

    config_path = get_config_path(repo_root)
    if os.path.exists(config_path):
        config.read(config_path)
    return config

def write_config(key, value, repo_root=None): # Sets a configuration key to a value and writes it to the config file
    repo_root = repo_root or find_repo_root()
    if not repo_root:
        raise NotFoundError("not a kit repository")

    try:
        section, option = key.split('.', 1)
    except ValueError:
        raise ValueError("Invalid key format. Should be 'section.key'.")

    config = read_config(repo_root)
    if not config.has_section(section):
        config.add_section(section)

    config.set(section, option, value)

    with open(get_config_path(repo_root), 'w') as configfile:
        config.write(configfile)

def get_user_config(repo_root): # Retrieves user.name and user.email; KIT_AUTHOR_NAME / KIT_AUTHOR_EMAIL win over the config file
    config = read_config(repo_root)

    user_name = os.environ.get('KIT_AUTHOR_NAME') or config.get('user', 'name', fallback=None)
    user_email = os.environ.get('KIT_AUTHOR_EMAIL') or config.get('user', 'email', fallback=None)

    return user_name, user_email

def get_editor(repo_root): # Editor used for commit messages: KIT_EDITOR, core.editor, EDITOR, then vi
    config = read_config(repo_root)
    return (os.environ.get('KIT_EDITOR')
            or config.get('core', 'editor', fallback=None)
            or os.environ.get('EDITOR')
            or 'vi')

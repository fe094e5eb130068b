# The command: kit config <key> <value>
# What it does: A user-facing command to set a configuration key-value pair (e.g., user.name)
# How it does: It passes the key and value to `write_config` in `plumbing/config.py`, which handles the file I/O and parsing logic
# What data structure it uses: None directly, but it provides the interface to the underlying Map / Dictionary structure managed by `plumbing/config.py`

import sys
from plumbing import config as config_utils
from plumbing.errors import KitError

def run(args):
    try: # Set the configuration key-value pair
        config_utils.write_config(args.key, args.value)
        print(f"Set {args.key} to '{args.value}'")
    except (KitError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

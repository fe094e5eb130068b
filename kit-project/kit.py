import argparse
import logging
from commands import (
    init, add, commit, log, config,
    cat_file, hash_object, write_tree, ls_tree, show, rev_parse
)
from plumbing.objects import OBJECT_TYPES
# The main entry point for the Kit version control system
def main(argv=None):
    # The main parser
    parser = argparse.ArgumentParser(description="Kit: a content-addressed version control core.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log object store and index activity.")
    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    # Command: init
    init_parser = subparsers.add_parser("init", help="Initialize a new, empty repository.")
    init_parser.add_argument("path", nargs="?", help="Directory to initialize (defaults to the current one).")
    init_parser.set_defaults(func=init.run)

    # Command: add
    add_parser = subparsers.add_parser("add", help="Add file contents to the index.")
    add_parser.add_argument("files", nargs="*", help="Files or directories to add.")
    add_parser.set_defaults(func=add.run)

    # Command: commit
    commit_parser = subparsers.add_parser("commit", help="Record changes to the repository.")
    commit_parser.add_argument("-m", "--message", help="Commit message (opens the editor when omitted).")
    commit_parser.set_defaults(func=commit.run)

    # Command: log
    log_parser = subparsers.add_parser("log", help="Show commit logs.")
    log_parser.set_defaults(func=log.run)

    # Command: config
    config_parser = subparsers.add_parser("config", help="Set user name and email.")
    config_parser.add_argument("key", help="The configuration key (e.g., user.name).")
    config_parser.add_argument("value", help="The configuration value.")
    config_parser.set_defaults(func=config.run)

    # Command: cat-file
    cat_file_parser = subparsers.add_parser("cat-file", help="Print the content of an object.")
    cat_file_group = cat_file_parser.add_mutually_exclusive_group()
    cat_file_group.add_argument("-t", dest="type", action="store_true", help="Show the object type.")
    cat_file_group.add_argument("-s", dest="size", action="store_true", help="Show the object size.")
    cat_file_parser.add_argument("object", help="The object to show.")
    cat_file_parser.set_defaults(func=cat_file.run)

    # Command: hash-object
    hash_object_parser = subparsers.add_parser("hash-object", help="Compute an object name, optionally storing the object.")
    hash_object_parser.add_argument("-w", dest="write", action="store_true", help="Write the object into the object store.")
    hash_object_parser.add_argument("-t", dest="type", default="blob", choices=OBJECT_TYPES, help="Object type.")
    hash_object_parser.add_argument("file", nargs="?", help="File to hash (reads stdin when omitted).")
    hash_object_parser.set_defaults(func=hash_object.run)

    # Command: write-tree
    write_tree_parser = subparsers.add_parser("write-tree", help="Create tree objects from the index.")
    write_tree_parser.set_defaults(func=write_tree.run)

    # Command: ls-tree
    ls_tree_parser = subparsers.add_parser("ls-tree", help="List the contents of a tree object.")
    ls_tree_parser.add_argument("-r", dest="recursive", action="store_true", help="Recurse into subtrees.")
    ls_tree_parser.add_argument("tree", help="A tree or commit.")
    ls_tree_parser.set_defaults(func=ls_tree.run)

    # Command: show
    show_parser = subparsers.add_parser("show", help="Show a commit.")
    show_parser.add_argument("commit", nargs="?", default="HEAD", help="The commit to show.")
    show_parser.set_defaults(func=show.run)

    # Command: rev-parse
    rev_parse_parser = subparsers.add_parser("rev-parse", help="Resolve ref names to object names.")
    rev_parse_parser.add_argument("names", nargs="+", help="Ref names or object names.")
    rev_parse_parser.set_defaults(func=rev_parse.run)
    # Parse the arguments
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # If a command was specified, run its function
    if hasattr(args, 'func'):
        args.func(args)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for ptexamples.

One root command, one subcommand per example. The global options
(--config, --log-level, --dry-run, --seed) are inherited by every subcommand
through argparse's parent parser mechanism; the training subcommands add the
handful of numeric knobs the examples take.

Usage:
    ptexamples text --epochs 16 --data-dir ~/Downloads/AG_NEWS
    ptexamples mnist --dataset fashion-mnist --epochs 4 --timeout 3600
    ptexamples info
"""

import argparse
import sys

from ptexamples.cli.commands import handle_info, handle_mnist, handle_text
from ptexamples.cli.exit_codes import USER_ERROR


def _build_global_parser(suppress_defaults: bool = False) -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False keeps its -h from colliding with the subcommand parsers.
    The global options are accepted both before and after the subcommand.
    The subcommand copies are built with suppress_defaults=True so that an
    option left out after the subcommand does not overwrite the value given
    before it.
    """
    unset: object = argparse.SUPPRESS if suppress_defaults else None
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=unset,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=unset,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides config).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=argparse.SUPPRESS if suppress_defaults else False,
        dest="dry_run",
        help="Resolve configuration and stop before training.",
    )
    parent.add_argument(
        "--seed",
        type=int,
        default=unset,
        help="Override the random seed (takes precedence over config).",
    )
    return parent


def _add_training_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--epochs", type=int, default=None, help="Number of training epochs.")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        dest="batch_size",
        help="Training batch size.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Stop after the epoch during which this many seconds have elapsed.",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        dest="data_dir",
        help="Folder holding the downloaded dataset files.",
    )


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    text_parser = subparsers.add_parser(
        "text", parents=[parent], help="AG_NEWS embedding-bag text classification."
    )
    _add_training_options(text_parser)
    text_parser.add_argument(
        "--from-run",
        type=str,
        default=None,
        dest="from_run",
        help="Evaluate the model saved in this run directory instead of training.",
    )
    text_parser.set_defaults(func=handle_text)

    mnist_parser = subparsers.add_parser(
        "mnist", parents=[parent], help="Convolutional MNIST / Fashion-MNIST classification."
    )
    _add_training_options(mnist_parser)
    mnist_parser.add_argument(
        "--dataset",
        type=str,
        default=None,
        help="Dataset name, e.g. 'mnist' or 'fashion-mnist'.",
    )
    mnist_parser.set_defaults(func=handle_mnist)

    info_parser = subparsers.add_parser(
        "info", parents=[parent], help="Display environment and config info."
    )
    info_parser.set_defaults(func=handle_info)


def build_parser() -> argparse.ArgumentParser:
    root_parser = argparse.ArgumentParser(
        prog="ptexamples",
        description="ptexamples: runnable PyTorch training examples.",
        parents=[_build_global_parser()],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(suppress_defaults=True))
    return root_parser


def main() -> None:
    """
    Main CLI entrypoint; pyproject.toml's [project.scripts] points here.

    With no subcommand, help is shown and the exit code is USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

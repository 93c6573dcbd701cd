#!/usr/bin/env python3

## Copyright (C) 2024  HID Usage Tables Contributors
##
## This program is free software; you can redistribute it and/or modify
## it under the terms of the GNU General Public License as published by
## the Free Software Foundation; either version 2 of the License, or
## (at your option) any later version.
##
## This program is distributed in the hope that it will be useful,
## but WITHOUT ANY WARRANTY; without even the implied warranty of
## MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
## GNU General Public License for more details.
##
## You should have received a copy of the GNU General Public License along
## with this program; if not, write to the Free Software Foundation, Inc.,
## 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.

import argparse
import logging
import os.path
import signal
import sys

from pathlib import Path

from hid_usage_tables import NAME
from hid_usage_tables import __version__
from hid_usage_tables import configuration
from hid_usage_tables.cancellation import CancellationToken
from hid_usage_tables.context import GeneratorContext
from hid_usage_tables.generator import generate
from hid_usage_tables.output import DirectorySink

logger = logging.getLogger(__name__)


def create_parser():
    arg_parser = argparse.ArgumentParser(
        prog=NAME,
        description="Generate Python usage pages from the HID Usage Tables specification.",
        epilog="Options given on the command line override those of the configuration file.",
    )
    arg_parser.add_argument(
        "-d",
        "--debug",
        action="count",
        default=0,
        help="print logging messages, for debugging purposes (may be repeated for extra verbosity)",
    )
    arg_parser.add_argument(
        "-c",
        "--config",
        metavar="PATH",
        help="YAML file with the build properties, e.g. HIDUsageTablesPDF: https://usb.org/.../hut1_5.pdf",
    )
    arg_parser.add_argument("--source", metavar="URL", help="specification document, web address or local path")
    arg_parser.add_argument("--attachment", metavar="NAME", help="name of the JSON attachment in the document")
    arg_parser.add_argument("--cache-folder", metavar="DIR", help="where to cache the document and the attachment")
    arg_parser.add_argument("--project-dir", metavar="DIR", help="base of relative paths; the current directory if unset")
    arg_parser.add_argument("--root-namespace", metavar="PACKAGE", help="package the generated modules belong to")
    arg_parser.add_argument(
        "-f", "--force", action="store_true", default=None, help="ignore the caches and load from the source"
    )
    arg_parser.add_argument(
        "--max-generated", type=int, metavar="N", help="maximum number of generated usages per usage page range"
    )
    arg_parser.add_argument("--timeout", type=float, metavar="SECONDS", help="timeout for downloading the document")
    arg_parser.add_argument(
        "-o", "--output", default=".", metavar="DIR", help="directory that holds the root package (default: .)"
    )
    arg_parser.add_argument("-V", "--version", action="version", version="%(prog)s " + __version__)
    return arg_parser


def _setup_logging(debug):
    log_format = "%(asctime)s,%(msecs)03d %(levelname)8s %(name)s: %(message)s"
    log_level = logging.WARNING - 10 * debug
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(log_format))
    stream_handler.setLevel(log_level)
    logging.getLogger("").setLevel(min(log_level, logging.WARNING))
    logging.getLogger("").addHandler(stream_handler)


def _options(args):
    values = configuration.normalize(configuration.load(args.config)) if args.config else {}
    if args.config and not args.project_dir:
        # relative paths in a configuration file are relative to that file
        values.setdefault(configuration.KEY_PROJECT_DIR.lower(), os.path.dirname(os.path.abspath(args.config)))
    overrides = {
        configuration.KEY_SPECIFICATION: args.source,
        configuration.KEY_ATTACHMENT: args.attachment,
        configuration.KEY_CACHE_FOLDER: args.cache_folder,
        configuration.KEY_PROJECT_DIR: os.path.abspath(args.project_dir) if args.project_dir else None,
        configuration.KEY_ROOT_NAMESPACE: args.root_namespace,
        configuration.KEY_FORCE: args.force,
        configuration.KEY_MAX_GENERATED: args.max_generated,
        configuration.KEY_TIMEOUT: args.timeout,
    }
    values.update(configuration.normalize({key: value for key, value in overrides.items() if value is not None}))
    return configuration.from_mapping(values)


def main(argv=None):
    args = create_parser().parse_args(argv)
    _setup_logging(args.debug)

    options = _options(args)
    package_dir = Path(args.output).joinpath(*options.root_namespace.split("."))
    cancellation = CancellationToken()

    # on first SIGINT, cancel the run; on second, exit
    def _handlesig(signl, stack):
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        cancellation.cancel()

    signal.signal(signal.SIGINT, _handlesig)
    try:
        context = GeneratorContext(options, DirectorySink(package_dir), cancellation=cancellation)
        result = generate(context)
    finally:
        signal.signal(signal.SIGINT, signal.SIG_DFL)

    if not result.completed:
        return 1
    print(
        f"{NAME}: generated {result.usages} usages in {result.pages} usage pages "
        f"(HID Usage Tables v{result.tables.version}) in {package_dir}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

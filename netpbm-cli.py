#!/usr/bin/env python3
# Netpbm command line tool.
#
# Decodes any PBM/PGM/PPM file (plain or raw) to any image PIL can write, with
# the type determined by the output file extension. There is no encoding back
# to Netpbm.
#
# Copyright 2023 Philip Boulain.
# Licensed under the EUPL-1.2-or-later.

import argparse
import logging
import sys
import netpbm

arg_parser = argparse.ArgumentParser(
    description="Netpbm (PNM) image decoder.",
    epilog="Decodes P1-P6 Netpbm images to any image PIL can write (type "
           "determined by file extension).")
arg_parser.add_argument("infile", help="Netpbm file to read")
arg_parser.add_argument("outfile", nargs="?",
    help="File to write, will be overwritten")
arg_parser.add_argument("--info", action="store_true",
    help="Only print the format, size, and max value of the input")
arg_parser.add_argument("--max-pixels", type=int, default=None,
    help="Refuse images with more pixels than this, 0 for no limit "
         f"(default {netpbm.MAX_IMAGE_PIXELS})")
arg_parser.add_argument("--verbose", action="store_true",
    help="Log debugging information")
args = arg_parser.parse_args()

logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
if not args.info and not args.outfile:
    arg_parser.error("outfile is required unless --info is given")
if args.max_pixels is not None:
    netpbm.MAX_IMAGE_PIXELS = args.max_pixels or None

try:
    with open(args.infile, "rb") as pnmfile:
        if args.info:
            header = netpbm.read_info(pnmfile.read())
            print(f"{header.version.name} {header.width}x{header.height}"
                  f" max {header.max_value}")
        else:
            image = netpbm.decode_stream(pnmfile)
            image.save(args.outfile)
except (ValueError, OSError):
    # ValueError covers netpbm.NetpbmError, and PIL's unknown extensions.
    logging.exception(f"Could not decode {args.infile}")
    sys.exit(1)

import os
import argparse
import logging

from pydantic import ValidationError

from .config import ContourConfig
from .grid import GridField
from .io import read_tidy_csv, write_json
from .pipeline import compute_isolines

def is_valid_file(file):
    if not os.path.exists(file):
        raise argparse.ArgumentTypeError('The provided path {} does not lead to an existing survivor table, check input!'.format(file))
    else:
        return file

def positive_int(v):
    v = int(v)
    if v < 1:
        raise argparse.ArgumentTypeError('Positive integer expected.')
    return v

def build_parser():
    parser = argparse.ArgumentParser(description='isostitch: Trace labeled isolines of a survivor surface over (year, age) and write them to JSON.')
    parser.add_argument(dest='file', type=is_valid_file, help='valid path to a tidy csv file with year, age and survivors columns', metavar='FILE')
    parser.add_argument(dest='out', type=str, help='path of the JSON file to write the isolines to', metavar='OUT')
    parser.add_argument('-s', '--step', dest='step', required=False, type=float, default=1_000_000, help='step between the traced levels', metavar='FLOAT')
    parser.add_argument('--heavy-step', dest='heavy_step', required=False, type=float, default=5_000_000, help='levels that are a multiple of this step keep all their runs', metavar='FLOAT')
    parser.add_argument('-m', '--method', dest='method', required=False, type=str, default='rings', choices=['rings', 'columns'], help='tracing method')
    parser.add_argument('--turn-angle', dest='turn_angle', required=False, type=float, default=None, help='split runs at turns sharper than this angle in degrees', metavar='FLOAT')
    parser.add_argument('-w', '--workers', dest='workers', required=False, type=positive_int, default=1, help='number of threads used to process the levels', metavar='INT')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', dest='verbose', action='store_true', help='log every stage of every level')
    verbosity.add_argument('-q', '--quiet', dest='quiet', action='store_true', help='only log warnings and errors')
    return parser

def run(argv=None):
    """Run the command line on `argv` and return the ContourResult."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        config = ContourConfig(level_step=args.step, heavy_step=args.heavy_step, method=args.method,
                               turn_split_angle=args.turn_angle, workers=args.workers)
    except ValidationError as error:
        parser.error(str(error))

    field = GridField.from_rows(read_tidy_csv(args.file))
    result = compute_isolines(field, config=config)
    write_json(result, args.out)

    summary = result.diagnostics.summary()
    if summary:
        print(summary)
    for message in result.diagnostics.messages:
        print(message)
    print('Wrote {} isolines to {}'.format(len(result), args.out))
    return result

def parse():
    run()

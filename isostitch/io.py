"""
Module for reading tidy survivor tables and writing the computed isolines to JSON.
"""
import codecs
import csv
import json
import logging
import math

from .errors import IntegrityError
from .utils import number, read_file

logger = logging.getLogger(__name__)

HEADERS = ('year', 'age', 'survivors')


def read_tidy_csv(f_path, delimiter=','):
    """Read a tidy (year, age, survivors) table from a delimited text file.

    The header row is matched case insensitively and the columns may come in any order, additional columns are
    ignored. Quoted cells may hold the delimiter. Rows with a missing or non-numeric cell in one of the three columns
    are skipped.

    Args:
        `f_path` (str): path to the file, including the file name.
        `delimiter` (str, optional): column delimiter. Defaults to ','.

    Raises:
        ValueError: if the file does not exist or one of the headers is missing.

    Returns:
        list: (year, age, survivors) tuples, ready for `GridField.from_rows`.
    """
    lines = [line for line in read_file(f_path) if line.strip()]
    if not lines:
        raise ValueError('The file {} is empty!'.format(f_path))

    table = csv.reader(lines, delimiter=delimiter)
    header = [cell.strip().lower() for cell in next(table)]
    missing = [key for key in HEADERS if key not in header]
    if missing:
        raise ValueError('Missing column(s) {} in the header of {}'.format(', '.join(missing), f_path))
    i_cols = [header.index(key) for key in HEADERS]

    rows = []
    n_skipped = 0
    for cells in table:
        row = tuple(number(cells[i]) if i < len(cells) else math.nan for i in i_cols)
        if not all(math.isfinite(x) for x in row):
            n_skipped += 1
            continue
        rows.append(row)

    if n_skipped:
        logger.warning('Skipped %d row(s) with missing values in %s', n_skipped, f_path)
    logger.debug('Read %d row(s) from %s', len(rows), f_path)
    return rows

def validate_records(records):
    """Check that serializable isoline records only hold finite coordinates.

    Args:
        `records` (list): [{'level': float, 'points': [{'year': float, 'age': float}, ...]}, ...]

    Raises:
        IntegrityError: on the first non-finite level or coordinate.

    Returns:
        list: `records`, unchanged.
    """
    for index, record in enumerate(records):
        level = record['level']
        if not math.isfinite(level):
            raise IntegrityError(level, None, index)
        for point in record['points']:
            if not (math.isfinite(point['year']) and math.isfinite(point['age'])):
                raise IntegrityError(level, (point['year'], point['age']), index)
    return records

def write_json(result, f_path):
    """Write a ContourResult, or a list of records, to an indented JSON file.

    Raises:
        IntegrityError: if a coordinate is not finite, nothing is written in that case.
    """
    records = result.to_records() if hasattr(result, 'to_records') else list(result)
    validate_records(records)
    with codecs.open(f_path, 'w', encoding='utf-8') as f:
        json.dump(records, f, separators=(',', ':'), indent=4)
    logger.info('Wrote %d isoline(s) to %s', len(records), f_path)
    return f_path

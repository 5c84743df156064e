"""Read CSV/TSV exports into raw rows for the normalizer."""

import io
import logging
import os
from typing import Any, Dict, IO, List, Union

import pandas as pd

logger = logging.getLogger(__name__)

CANDIDATE_DELIMITERS = '\t,;|'
SNIFF_SAMPLE_SIZE = 64 * 1024


def detect_delimiter(sample: str) -> str:
    """Pick the candidate delimiter that splits the header line most often; comma if none."""
    header = next((line for line in sample.splitlines() if line.strip()), '')
    counts = {d: header.count(d) for d in CANDIDATE_DELIMITERS}
    best = max(counts, key=counts.get)
    return best if counts[best] else ','


def _read_text(source: Union[str, os.PathLike, IO]) -> str:
    if hasattr(source, 'read'):
        content = source.read()
        if isinstance(content, bytes):
            content = content.decode('utf-8-sig')
        return content.lstrip('\ufeff')

    if not os.path.exists(source):
        raise FileNotFoundError(f"Table file not found: {source}")
    with open(source, 'r', encoding='utf-8-sig', newline='') as f:
        return f.read()


def read_table(source: Union[str, os.PathLike, IO]) -> List[Dict[str, Any]]:
    """
    Read a delimited text table.

    Args:
        source: File path or file-like object

    Returns:
        List of header -> cell text mappings with cells trimmed. Blank lines
        are skipped; an empty file gives an empty list.
    """
    text = _read_text(source)
    if not text.strip():
        logger.warning("Table is empty")
        return []

    delimiter = detect_delimiter(text[:SNIFF_SAMPLE_SIZE])
    df = pd.read_csv(
        io.StringIO(text),
        sep=delimiter,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=False,
    )
    df = df.apply(lambda col: col.str.strip())
    logger.info(f"Read {len(df)} rows x {len(df.columns)} columns (delimiter={delimiter!r})")
    return df.to_dict('records')

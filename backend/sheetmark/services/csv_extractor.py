import codecs
import io
import logging

import chardet
import pandas as pd

from ..errors import CsvEncodingError, CsvParseError, EmptyInputError, HeaderNotFoundError
from .headers import header_map

logger = logging.getLogger(__name__)

# chardet reports plain Shift_JIS for files Excel writes as cp932
_ENCODING_ALIASES = {
    "shift_jis": "cp932",
    "sjis": "cp932",
    "ascii": "utf-8",
}


def _normalise_encoding(name: str) -> str:
    return _ENCODING_ALIASES.get(name.lower().replace("-", "_"), name)


def _decode_with(raw: bytes, encoding: str) -> str:
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise CsvEncodingError(f"Unknown CSV encoding {encoding!r}") from e

    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise CsvEncodingError(f"CSV file could not be decoded as {encoding}: {e}") from e


def decode_csv(raw: bytes | str, encoding: str | None = None, fallback_encoding: str = "cp932") -> str:
    '''
    Turn uploaded bytes into text.

    An explicit encoding is used as given. Otherwise UTF-8 is tried first,
    then chardet's guess, then fallback_encoding.
    '''
    if isinstance(raw, str):
        return raw.lstrip("\ufeff")

    if encoding:
        return _decode_with(raw, encoding).lstrip("\ufeff")

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    candidates = []
    detected = chardet.detect(raw[:64 * 1024]).get("encoding")
    if detected:
        logger.debug("chardet detected CSV encoding %s", detected)
        candidates.append(_normalise_encoding(detected))
    candidates.append(fallback_encoding)

    last_error = None
    for candidate in candidates:
        try:
            return _decode_with(raw, candidate).lstrip("\ufeff")
        except CsvEncodingError as e:
            last_error = e

    raise CsvEncodingError(
        f"CSV file could not be decoded (tried {', '.join(candidates)}). "
        "Please specify the file encoding."
    ) from last_error


def _read_rows(text: str) -> pd.DataFrame:
    # header=None: every row is sized by row 1, longer rows raise ParserError
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as e:
        raise EmptyInputError("CSV file is empty or could not be parsed.") from e
    except pd.errors.ParserError as e:
        raise CsvParseError(f"CSV parsing failed: {e}") from e

    # rows shorter than the header leave NaN in the missing cells
    return frame.fillna("")


def extract_identifiers(
    raw: bytes | str,
    header_label: str,
    encoding: str | None = None,
    fallback_encoding: str = "cp932",
) -> list[str]:
    """Return the trimmed, non-empty values of the ``header_label`` column in row order."""

    text = decode_csv(raw, encoding=encoding, fallback_encoding=fallback_encoding)
    rows = _read_rows(text)
    header, data = rows.iloc[0], rows.iloc[1:]

    if data.empty:
        raise EmptyInputError("CSV file is empty or could not be parsed.")

    index = header_map(header).get(header_label)
    if index is None:
        raise HeaderNotFoundError(
            f"CSV file does not contain a column named '{header_label}'. "
            "Please ensure the header is correct."
        )

    identifiers = [
        value.strip()
        for value in data.iloc[:, index]
        if isinstance(value, str) and value.strip()
    ]

    logger.info("Extracted %d identifiers from %d CSV rows", len(identifiers), len(data))
    return identifiers

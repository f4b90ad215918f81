"""Acronym reference table (CSV or Excel) read with pandas.

The sheet layout is not fixed: the header row is searched for among the
first rows by fuzzy column-name matching, and the category column is
optional.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any

import pandas as pd

from sop_assistant.domain.models import Acronym

logger = logging.getLogger(__name__)

HEADER_SEARCH_ROWS = 5
ABBREVIATION_HEADERS = ("abbreviation", "abbrev", "acronym", "short")
FULL_FORM_HEADERS = ("full form", "fullform", "full", "expansion", "meaning")
CATEGORY_HEADERS = ("category",)

EXCEL_SUFFIXES = (".xlsx", ".xls")
# title rows above the header make CSVs ragged; read into a fixed-width frame
MAX_CSV_COLUMNS = 64


def _cell(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def _find_column(headers: Sequence[str], candidates: Sequence[str]) -> int | None:
    for idx, header in enumerate(headers):
        if any(c in header for c in candidates):
            return idx
    return None


def locate_columns(
    rows: Sequence[Sequence[Any]], search_rows: int = HEADER_SEARCH_ROWS
) -> tuple[int, int, int, int | None] | None:
    """(header_row, abbreviation_col, full_form_col, category_col) or None."""
    for row_idx, row in enumerate(rows[:search_rows]):
        headers = [_cell(v).lower() for v in row]
        abbrev = _find_column(headers, ABBREVIATION_HEADERS)
        if abbrev is None:
            continue
        # the abbreviation column must not double as the full-form column
        full = _find_column(
            [h if i != abbrev else "" for i, h in enumerate(headers)], FULL_FORM_HEADERS
        )
        if full is None:
            continue
        return row_idx, abbrev, full, _find_column(headers, CATEGORY_HEADERS)
    return None


def parse_rows(rows: Sequence[Sequence[Any]]) -> list[Acronym]:
    located = locate_columns(rows)
    if located is None:
        logger.warning("Acronym table has no abbreviation/full form header")
        return []
    header_row, abbrev, full, category = located

    acronyms: list[Acronym] = []
    for row in rows[header_row + 1 :]:
        abbreviation = _cell(row[abbrev]) if abbrev < len(row) else ""
        full_form = _cell(row[full]) if full < len(row) else ""
        cat = _cell(row[category]) if category is not None and category < len(row) else ""
        if abbreviation and full_form:
            acronyms.append(Acronym(abbreviation=abbreviation, full_form=full_form, category=cat))
    return acronyms


class TabularAcronymSource:
    def __init__(self, path: str) -> None:
        self.path = path

    def _read(self) -> pd.DataFrame:
        if self.path.lower().endswith(EXCEL_SUFFIXES):
            frame = pd.read_excel(self.path, header=None, dtype=str)
        else:
            frame = pd.read_csv(
                self.path,
                header=None,
                names=list(range(MAX_CSV_COLUMNS)),
                dtype=str,
                skip_blank_lines=True,
            )
        return frame.dropna(axis=1, how="all")

    def load(self) -> list[Acronym]:
        if not self.path or not os.path.exists(self.path):
            logger.warning("Acronym file not found: %s", self.path)
            return []
        try:
            frame = self._read()
        except (OSError, ValueError) as ex:
            # pandas parser errors subclass ValueError
            logger.warning("Cannot read acronym file %s: %s", self.path, ex)
            return []
        acronyms = parse_rows(frame.values.tolist())
        logger.info("Read %d acronyms from %s", len(acronyms), self.path)
        return acronyms
